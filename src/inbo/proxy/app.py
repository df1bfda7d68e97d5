# Same-origin proxy — forwards browser calls to the backend API.
#
# Browsers refuse cross-origin credentialed calls, so the front-end talks to
# this app on its own origin and it relays to ``api_base_url``. It keeps no
# state: method, query string, JSON body and Authorization header go through
# and the backend status comes back. Response bodies that are not JSON are
# replaced by ``{}`` so a backend shape change cannot break the relay.

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from inbo.api.client import decode_json
from inbo.config import Settings, get_settings

logger = logging.getLogger(__name__)

FORWARDED_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


async def _read_json(request: Request) -> Any:
    """Incoming JSON body, or None when absent or unparseable."""
    try:
        return await request.json()
    except ValueError:
        return None


def _upstream(request: Request) -> httpx.AsyncClient:
    return request.app.state.upstream


async def _relay(
    request: Request,
    method: str,
    path: str,
    *,
    body: Any = None,
    params: Any = None,
    authorization: str | None = None,
) -> JSONResponse:
    settings: Settings = request.app.state.settings
    headers = {"Content-Type": "application/json"}
    if authorization is not None:
        headers["Authorization"] = authorization

    try:
        resp = await _upstream(request).request(
            method,
            f"{settings.api_base_url}/api/{path}",
            params=params,
            json=body,
            headers=headers,
        )
    except httpx.HTTPError as e:
        logger.error("Proxy error for %s /api/%s: %s", method, path, e)
        return JSONResponse({"error": "Proxy error"}, status_code=500)

    return JSONResponse(decode_json(resp), status_code=resp.status_code)


def create_proxy_app(
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the proxy application.

    Args:
        settings: Backend address and timeout. Defaults to ``get_settings()``.
        transport: Optional httpx transport for the upstream client.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        async with httpx.AsyncClient(
            timeout=settings.request_timeout, transport=transport
        ) as upstream:
            app.state.upstream = upstream
            yield

    app = FastAPI(
        title="Inbo proxy",
        description="Same-origin relay to the Inbo backend API.",
        docs_url=None,
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # --- Pre-login auth routes (no Authorization header forwarded) -------

    @app.get("/api/auth/check-email/")
    @app.get("/api/auth/check-email", include_in_schema=False)
    async def check_email(request: Request):
        email = request.query_params.get("email")
        if not email:
            return JSONResponse({"message": "Email parameter is required"}, status_code=400)
        return await _relay(request, "GET", "auth/check-email/", params={"email": email})

    @app.post("/api/auth/send-otp/")
    @app.post("/api/auth/send-otp", include_in_schema=False)
    async def send_otp(request: Request):
        body = await _read_json(request)
        return await _relay(request, "POST", "auth/send-otp/", body=body)

    @app.post("/api/auth/verify-otp/")
    @app.post("/api/auth/verify-otp", include_in_schema=False)
    async def verify_otp(request: Request):
        body = await _read_json(request)
        fields = body if isinstance(body, dict) else {}
        logger.info(
            "verify-otp for %s (otp length %d, device info: %s)",
            fields.get("email"),
            len(str(fields.get("otp") or "")),
            "yes" if fields.get("deviceInfo") else "no",
        )
        response = await _relay(request, "POST", "auth/verify-otp/", body=body)
        if response.status_code >= 400:
            logger.warning("verify-otp rejected with %d", response.status_code)
        return response

    # --- Catch-all relay ---------------------------------------------------

    @app.api_route("/api/{path:path}", methods=FORWARDED_METHODS)
    async def relay(path: str, request: Request):
        method = request.method
        body = None if method in ("GET", "DELETE") else await _read_json(request)
        return await _relay(
            request,
            method,
            path,
            body=body,
            params=request.query_params.multi_items(),
            authorization=request.headers.get("Authorization"),
        )

    return app
