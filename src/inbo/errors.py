"""Exception hierarchy for the Inbo client.

Transport failures (timeouts, DNS, connection resets) are not wrapped: they
surface as the ``httpx.TransportError`` subclasses httpx raises.
"""

from __future__ import annotations

from typing import Any

__all__ = [
    "InboError",
    "ApiError",
    "UnauthorizedError",
    "SessionExpiredError",
]


class InboError(Exception):
    """Base class for errors raised by this package."""


class ApiError(InboError):
    """The backend answered with a non-2xx status."""

    def __init__(
        self,
        status_code: int,
        *,
        method: str = "",
        url: str = "",
        data: Any = None,
    ):
        self.status_code = status_code
        self.method = method
        self.url = url
        self.data = data if data is not None else {}
        super().__init__(f"{method} {url} -> {status_code}: {self.message}")

    @property
    def message(self) -> str:
        """Human-readable message from the body, if the backend sent one."""
        if isinstance(self.data, dict):
            for key in ("message", "detail", "error"):
                value = self.data.get(key)
                if isinstance(value, str) and value:
                    return value
        return "request failed"


class UnauthorizedError(ApiError):
    """HTTP 401 that was not (or could not be) recovered by a token refresh."""


class SessionExpiredError(InboError):
    """The refresh token was rejected; stored credentials have been cleared.

    ``refresh_error`` (also ``__cause__``) is the failure of the refresh call
    itself, not the 401 that triggered it.
    """

    def __init__(self, refresh_error: BaseException, login_path: str = "/auth/login"):
        self.refresh_error = refresh_error
        self.login_path = login_path
        super().__init__(f"Session expired, sign in again at {login_path}: {refresh_error}")
