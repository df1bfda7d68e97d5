# Auth Service — OTP sign-in, social sign-in, session validation, logout.

from __future__ import annotations

import logging

from inbo.api.client import ApiClient
from inbo.auth.credentials import CredentialStore
from inbo.errors import InboError
from inbo.schemas.auth import (
    AppleAuthRequest,
    CheckEmailResponse,
    DeviceInfo,
    GoogleAuthRequest,
    RefreshResponse,
    SendOtpResponse,
    SessionStatus,
    VerifyOtpResponse,
)
from inbo.schemas.user import UserProfile

logger = logging.getLogger(__name__)

AUTH_ENDPOINTS = {
    "send_otp": "/api/auth/send-otp/",
    "verify_otp": "/api/auth/verify-otp/",
    "logout": "/api/auth/logout/",
    "refresh": "/api/auth/refresh/",
    "check_email": "/api/auth/check-email/",
    "validate_session": "/api/auth/validate-session/",
    "user_profile": "/api/user/complete-data/",
    "google": "/api/auth/google/",
    "apple": "/api/auth/apple/",
}


def _require_email(email: str) -> str:
    email = email.strip()
    if not email:
        raise ValueError("email is required")
    return email


class AuthService:
    """Sign-in flows. Successful sign-ins persist both tokens in the client's store."""

    def __init__(self, client: ApiClient):
        self.client = client

    @property
    def store(self) -> CredentialStore:
        return self.client.store

    async def send_otp(self, email: str) -> SendOtpResponse:
        resp = await self.client.post(
            AUTH_ENDPOINTS["send_otp"], json={"email": _require_email(email)}
        )
        return SendOtpResponse.model_validate(resp.json())

    async def verify_otp(
        self,
        email: str,
        otp: str,
        device_info: DeviceInfo | None = None,
    ) -> VerifyOtpResponse:
        if not otp.strip():
            raise ValueError("otp is required")
        resp = await self.client.post(
            AUTH_ENDPOINTS["verify_otp"],
            json={
                "email": _require_email(email),
                "otp": otp.strip(),
                "deviceInfo": (device_info or DeviceInfo()).to_payload(),
            },
        )
        return self._signed_in(resp.json())

    async def check_email(self, email: str) -> CheckEmailResponse:
        resp = await self.client.get(
            AUTH_ENDPOINTS["check_email"], params={"email": _require_email(email)}
        )
        return CheckEmailResponse.model_validate(resp.json())

    async def google_auth(self, payload: GoogleAuthRequest) -> VerifyOtpResponse:
        resp = await self.client.post(AUTH_ENDPOINTS["google"], json=payload.to_payload())
        return self._signed_in(resp.json())

    async def apple_auth(self, payload: AppleAuthRequest) -> VerifyOtpResponse:
        resp = await self.client.post(AUTH_ENDPOINTS["apple"], json=payload.to_payload())
        return self._signed_in(resp.json())

    def _signed_in(self, data: dict) -> VerifyOtpResponse:
        result = VerifyOtpResponse.model_validate(data)
        self.store.set_tokens(result.access_token, result.refresh_token)
        logger.info("Signed in%s", " (new user)" if result.is_new_user else "")
        return result

    async def refresh_token(self) -> RefreshResponse:
        """Explicitly mint a new access token from the stored refresh token."""
        refresh_token = self.store.get_refresh_token()
        if not refresh_token:
            raise InboError("No refresh token available")

        resp = await self.client.post(
            AUTH_ENDPOINTS["refresh"], json={"refreshToken": refresh_token}
        )
        result = RefreshResponse.model_validate(resp.json())
        self.store.set_access_token(result.access_token)
        return result

    async def logout(self, logout_from_all_devices: bool = False) -> None:
        """Revoke the session server-side; local tokens are cleared regardless."""
        try:
            refresh_token = self.store.get_refresh_token()
            if refresh_token:
                await self.client.post(
                    AUTH_ENDPOINTS["logout"],
                    json={
                        "refreshToken": refresh_token,
                        "logoutFromAllDevices": logout_from_all_devices,
                    },
                )
        finally:
            self.store.clear_tokens()
            if self.client.cache is not None:
                self.client.cache.invalidate_all()
            logger.info("Signed out")

    async def get_current_user(self) -> UserProfile:
        resp = await self.client.get(AUTH_ENDPOINTS["user_profile"])
        return UserProfile.model_validate(resp.json())

    async def validate_session(self) -> SessionStatus:
        access_token = self.store.get_access_token()
        refresh_token = self.store.get_refresh_token()
        if not access_token and not refresh_token:
            return SessionStatus(is_valid=False)

        resp = await self.client.post(
            AUTH_ENDPOINTS["validate_session"],
            json={"accessToken": access_token, "refreshToken": refresh_token},
        )
        return SessionStatus.model_validate(resp.json())

    def is_authenticated(self) -> bool:
        return self.store.get_access_token() is not None
