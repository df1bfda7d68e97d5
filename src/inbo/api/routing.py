"""Request descriptors and the per-request routing/augmentation rules.

Everything here is synchronous and cannot fail: a missing access token just
means the request goes out without an ``Authorization`` header and the
backend decides whether that is acceptable.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

__all__ = [
    "PROXIED_ENDPOINTS",
    "CREDENTIAL_ENDPOINTS",
    "REFRESH_PATH",
    "RequestContext",
    "is_proxied",
    "is_credential_endpoint",
    "resolve_base_url",
    "build_headers",
]

# Called before any credential exists; sent to the same-origin proxy.
PROXIED_ENDPOINTS = (
    "/api/auth/check-email",
    "/api/auth/send-otp",
    "/api/auth/verify-otp",
)

# A 401 from these means bad credentials, not an expired access token.
CREDENTIAL_ENDPOINTS = PROXIED_ENDPOINTS + (
    "/api/auth/refresh",
    "/api/auth/google",
    "/api/auth/apple",
)

REFRESH_PATH = "/api/auth/refresh/"


@dataclass(frozen=True)
class RequestContext:
    """Immutable description of one outgoing request.

    ``attempt`` is 0 for the first send and 1 for the single replay after a
    token refresh. A replay gets a new descriptor from ``retried()``.
    """

    method: str
    path: str
    params: dict[str, Any] | None = None
    json: Any = None
    headers: dict[str, str] = field(default_factory=dict)
    attempt: int = 0

    @property
    def is_retry(self) -> bool:
        return self.attempt >= 1

    def retried(self) -> RequestContext:
        return replace(self, attempt=self.attempt + 1)


def _normalize(path: str) -> str:
    return "/" + path.split("?", 1)[0].strip("/")


def _matches(path: str, endpoints: tuple[str, ...]) -> bool:
    return _normalize(path) in endpoints


def is_proxied(path: str) -> bool:
    """True for the pre-login auth endpoints routed through the proxy."""
    return _matches(path, PROXIED_ENDPOINTS)


def is_credential_endpoint(path: str) -> bool:
    return _matches(path, CREDENTIAL_ENDPOINTS)


def resolve_base_url(path: str, api_base_url: str, app_url: str) -> str:
    """Pick the origin a request is sent to."""
    return app_url if is_proxied(path) else api_base_url


def build_headers(ctx: RequestContext, access_token: str | None) -> dict[str, str]:
    """Merge the caller's headers with the bearer credential.

    Public pre-login endpoints never carry the credential.
    """
    headers = dict(ctx.headers)
    if access_token and not is_proxied(ctx.path):
        headers["Authorization"] = f"Bearer {access_token}"
    return headers
