# API Client — authenticated httpx client for the Inbo backend.
#
# Attaches the stored bearer token to each request. On a 401 it refreshes the
# access token once and replays the request; if the refresh itself fails the
# stored credentials are cleared and the caller is sent back to login.

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

import httpx

from inbo.api.routing import (
    REFRESH_PATH,
    RequestContext,
    build_headers,
    is_credential_endpoint,
    resolve_base_url,
)
from inbo.auth.credentials import CredentialStore, FileCredentialStore
from inbo.cache import ResponseCache
from inbo.config import Settings, get_config_dir, get_settings
from inbo.errors import ApiError, SessionExpiredError, UnauthorizedError

logger = logging.getLogger(__name__)


def decode_json(resp: httpx.Response) -> Any:
    """Response body as JSON, or ``{}`` when it is empty or malformed."""
    try:
        return resp.json()
    except ValueError:
        return {}


def error_from_response(ctx: RequestContext, resp: httpx.Response) -> ApiError:
    cls = UnauthorizedError if resp.status_code == 401 else ApiError
    return cls(
        resp.status_code,
        method=ctx.method,
        url=str(resp.request.url),
        data=decode_json(resp),
    )


def default_credential_store(settings: Settings) -> FileCredentialStore:
    return FileCredentialStore(
        get_config_dir(settings) / "credentials.json",
        access_ttl_days=settings.access_token_ttl_days,
        refresh_ttl_days=settings.refresh_token_ttl_days,
    )


def _consume_refresh_result(task: asyncio.Task[str]) -> None:
    # Every waiter may have been cancelled; the failure is already logged.
    if not task.cancelled():
        task.exception()


class ApiClient:
    """Async HTTP client for the Inbo backend.

    Args:
        settings: Addresses, timeout and refresh behaviour. Defaults to
            ``get_settings()``.
        store: Where tokens live. Defaults to the credentials file in the
            config directory.
        transport: Optional httpx transport (tests pass ``httpx.MockTransport``).
        on_login_required: Called with the login path once stored
            credentials have been cleared after a rejected refresh.
        cache: Response cache to drop when the session ends.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        store: CredentialStore | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        on_login_required: Callable[[str], Any] | None = None,
        cache: ResponseCache | None = None,
    ):
        self.settings = settings or get_settings()
        self.store = store if store is not None else default_credential_store(self.settings)
        self.cache = cache
        self._on_login_required = on_login_required
        self._http = httpx.AsyncClient(
            timeout=self.settings.request_timeout,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )
        self._refresh_task: asyncio.Task[str] | None = None

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # -- public surface --

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Send a request, recovering once from an expired access token.

        Returns the (2xx) response. Raises ``ApiError`` for any other status,
        ``SessionExpiredError`` when the refresh was rejected, and lets
        ``httpx.TransportError`` through unchanged.
        """
        ctx = RequestContext(
            method=method.upper(),
            path=path,
            params=params,
            json=json,
            headers=dict(headers or {}),
        )
        return await self._execute(ctx)

    async def get(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PUT", path, **kwargs)

    async def patch(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PATCH", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("DELETE", path, **kwargs)

    # -- request pipeline --

    async def _send(self, ctx: RequestContext, access_token: str | None = None) -> httpx.Response:
        base = resolve_base_url(ctx.path, self.settings.api_base_url, self.settings.app_url)
        token = access_token or self.store.get_access_token()
        headers = build_headers(ctx, token)
        logger.debug("%s %s (attempt %d)", ctx.method, ctx.path, ctx.attempt)
        return await self._http.request(
            ctx.method,
            f"{base}{ctx.path}",
            params=ctx.params,
            json=ctx.json,
            headers=headers,
        )

    async def _execute(self, ctx: RequestContext, access_token: str | None = None) -> httpx.Response:
        resp = await self._send(ctx, access_token)
        if resp.is_success:
            return resp

        if resp.status_code == 401:
            logger.warning("401 Unauthorized: %s %s", ctx.method, ctx.path)
            if not ctx.is_retry and not is_credential_endpoint(ctx.path):
                refresh_token = self.store.get_refresh_token()
                if refresh_token:
                    new_token = await self._refresh(refresh_token)
                    return await self._execute(ctx.retried(), new_token)
                logger.info("No refresh token held; not retrying %s", ctx.path)

        raise error_from_response(ctx, resp)

    # -- refresh coordination --

    async def _refresh(self, refresh_token: str) -> str:
        """Obtain a new access token.

        With ``share_refresh`` enabled, callers that hit a 401 while a refresh
        is already running wait for that one instead of starting their own.
        """
        if not self.settings.share_refresh:
            return await self._refresh_once(refresh_token)

        if self._refresh_task is None or self._refresh_task.done():
            self._refresh_task = asyncio.create_task(self._refresh_once(refresh_token))
            self._refresh_task.add_done_callback(_consume_refresh_result)
        return await asyncio.shield(self._refresh_task)

    async def _refresh_once(self, refresh_token: str) -> str:
        ctx = RequestContext(method="POST", path=REFRESH_PATH, json={"refreshToken": refresh_token})
        try:
            resp = await self._http.post(
                f"{self.settings.api_base_url}{REFRESH_PATH}",
                json=ctx.json,
            )
            if not resp.is_success:
                raise error_from_response(ctx, resp)
            data = decode_json(resp)
            access_token = data.get("accessToken") if isinstance(data, dict) else None
            if not access_token:
                raise ApiError(
                    resp.status_code,
                    method=ctx.method,
                    url=str(resp.request.url),
                    data={"message": "refresh response carried no accessToken"},
                )
        except (ApiError, httpx.TransportError) as e:
            logger.warning("Token refresh failed: %s", e)
            self._end_session()
            raise SessionExpiredError(e, self.settings.login_path) from e

        # The refresh token is not rotated; only the access token changes.
        self.store.set_access_token(access_token)
        logger.info("Access token refreshed")
        return access_token

    def _end_session(self) -> None:
        self.store.clear_tokens()
        if self.cache is not None:
            self.cache.invalidate_all()

        login_path = self.settings.login_path
        if self._on_login_required is not None:
            self._on_login_required(login_path)
        else:
            logger.warning("Session expired; sign in again at %s", login_path)
