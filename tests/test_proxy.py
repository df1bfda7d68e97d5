# Tests for the same-origin proxy app.

import httpx
import pytest
from fastapi.testclient import TestClient

from inbo.proxy.app import create_proxy_app

from conftest import API, FakeBackend


@pytest.fixture
def upstream():
    return FakeBackend()


@pytest.fixture
def proxy(settings, upstream):
    app = create_proxy_app(settings, transport=httpx.MockTransport(upstream))
    with TestClient(app) as client:
        yield client


class TestAuthRoutes:
    def test_check_email(self, proxy, upstream):
        upstream.on("GET", "/api/auth/check-email/", 200, {"exists": True})

        resp = proxy.get("/api/auth/check-email/", params={"email": "a@b.c"})

        assert resp.status_code == 200
        assert resp.json() == {"exists": True}
        forwarded = upstream.requests[0]
        assert str(forwarded.url).startswith(f"{API}/api/auth/check-email/")
        assert forwarded.url.params["email"] == "a@b.c"

    def test_check_email_requires_param(self, proxy, upstream):
        resp = proxy.get("/api/auth/check-email/")
        assert resp.status_code == 400
        assert resp.json() == {"message": "Email parameter is required"}
        assert upstream.requests == []

    def test_send_otp_forwards_body(self, proxy, upstream):
        upstream.on("POST", "/api/auth/send-otp/", 200, {"success": True})

        resp = proxy.post("/api/auth/send-otp", json={"email": "a@b.c"})

        assert resp.json() == {"success": True}
        assert FakeBackend.body(upstream.requests[0]) == {"email": "a@b.c"}

    def test_verify_otp_mirrors_status(self, proxy, upstream):
        upstream.on("POST", "/api/auth/verify-otp/", 400, {"message": "Invalid OTP"})

        resp = proxy.post("/api/auth/verify-otp/", json={"email": "a@b.c", "otp": "1"})

        assert resp.status_code == 400
        assert resp.json() == {"message": "Invalid OTP"}

    def test_auth_routes_drop_authorization(self, proxy, upstream):
        upstream.on("POST", "/api/auth/send-otp/", 200, {})
        proxy.post(
            "/api/auth/send-otp/", json={"email": "a@b.c"}, headers={"Authorization": "Bearer A1"}
        )
        assert "Authorization" not in upstream.requests[0].headers


class TestCatchAll:
    def test_forwards_method_query_and_authorization(self, proxy, upstream):
        upstream.on("GET", "/api/email/inbox/", 200, {"data": []})

        resp = proxy.get(
            "/api/email/inbox/",
            params={"filter": "latest", "page": "2"},
            headers={"Authorization": "Bearer A1"},
        )

        assert resp.status_code == 200
        forwarded = upstream.requests[0]
        assert forwarded.url.params["filter"] == "latest"
        assert forwarded.url.params["page"] == "2"
        assert forwarded.headers["Authorization"] == "Bearer A1"

    @pytest.mark.parametrize("method", ["POST", "PUT", "PATCH"])
    def test_forwards_json_body(self, proxy, upstream, method):
        upstream.on(method, "/api/email/e1/favorite/", 200, {"ok": True})

        resp = proxy.request(method, "/api/email/e1/favorite/", json={"isFavorite": True})

        assert resp.json() == {"ok": True}
        forwarded = upstream.requests[0]
        assert forwarded.method == method
        assert FakeBackend.body(forwarded) == {"isFavorite": True}

    def test_delete(self, proxy, upstream):
        upstream.on("DELETE", "/api/email/e1/delete/", 200, {})
        resp = proxy.delete("/api/email/e1/delete/")
        assert resp.status_code == 200
        assert upstream.requests[0].content == b""

    def test_mirrors_error_status(self, proxy, upstream):
        upstream.on("GET", "/api/user/profile/", 401, {"detail": "expired"})
        resp = proxy.get("/api/user/profile/")
        assert resp.status_code == 401
        assert resp.json() == {"detail": "expired"}

    def test_malformed_upstream_body_becomes_empty_object(self, proxy, upstream):
        upstream.on("GET", "/api/broken/", 502, "<html>Bad gateway</html>")
        resp = proxy.get("/api/broken/")
        assert resp.status_code == 502
        assert resp.json() == {}

    def test_malformed_request_body_forwarded_as_null(self, proxy, upstream):
        upstream.on("POST", "/api/x/", 200, {})
        proxy.post("/api/x/", content=b"{oops", headers={"Content-Type": "application/json"})
        assert FakeBackend.body(upstream.requests[0]) is None


class TestUpstreamFailure:
    def test_transport_error_is_500(self, settings):
        def down(request):
            raise httpx.ConnectError("refused", request=request)

        app = create_proxy_app(settings, transport=httpx.MockTransport(down))
        with TestClient(app) as client:
            resp = client.get("/api/email/inbox/")

        assert resp.status_code == 500
        assert resp.json() == {"error": "Proxy error"}
