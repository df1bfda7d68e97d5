# Auth schemas.

from __future__ import annotations

from typing import Any

from pydantic import Field

from inbo.schemas.common import InboModel


class AuthUser(InboModel):
    """User summary returned alongside fresh tokens."""

    id: str
    email: str
    name: str | None = None
    is_verified: bool = False
    is_inbox_created: bool = False


class SendOtpResponse(InboModel):
    success: bool
    message: str = ""


class VerifyOtpResponse(InboModel):
    """Tokens issued by OTP verification or a social sign-in."""

    access_token: str
    refresh_token: str
    expires_at: str | None = None
    user: AuthUser | None = None
    is_new_user: bool = False


class CheckEmailResponse(InboModel):
    exists: bool


class RefreshResponse(InboModel):
    access_token: str
    expires_at: str | None = None


class SessionStatus(InboModel):
    is_valid: bool
    user: dict[str, Any] | None = None
    message: str | None = None


class DeviceInfo(InboModel):
    device_name: str = "inbo-cli"
    user_agent: str = ""
    ip: str = ""


class GoogleAuthRequest(InboModel):
    id_token: str = Field(..., description="Google ID token from the sign-in flow")
    device_info: DeviceInfo | None = None


class AppleAuthRequest(InboModel):
    identity_token: str = Field(..., description="Apple identity token")
    authorization_code: str | None = None
    name: str | None = None
    device_info: DeviceInfo | None = None
