# User Service — inbox creation, onboarding and profile endpoints.

from __future__ import annotations

import logging

from inbo.api.client import ApiClient
from inbo.cache import CacheKeys, CacheTTL
from inbo.schemas.common import StatusResponse
from inbo.schemas.user import (
    Category,
    CreateInboxResponse,
    InboxAvailability,
    OnboardingRequest,
    OnboardingStatus,
    ProfileUpdate,
    SuggestedUsernames,
    UserProfile,
)

logger = logging.getLogger(__name__)

USER_ENDPOINTS = {
    "check_inbox_availability": "/api/user/check-inbox-availability/",
    "suggested_usernames": "/api/user/get-suggested-usernames/",
    "create_inbox": "/api/user/create-inbox/",
    "complete_data": "/api/user/complete-data/",
    "profile": "/api/user/profile/",
    "onboarding": "/api/user/onboarding/",
    "onboarding_status": "/api/user/onboarding/status/",
    "categories": "/api/directory/categories/",
}


class UserService:
    def __init__(self, client: ApiClient):
        self.client = client

    async def check_inbox_availability(self, username: str) -> InboxAvailability:
        resp = await self.client.get(
            USER_ENDPOINTS["check_inbox_availability"], params={"username": username}
        )
        return InboxAvailability.model_validate(resp.json())

    async def get_suggested_usernames(
        self, name: str | None = None, based_on: str | None = None
    ) -> SuggestedUsernames:
        params: dict[str, str] = {}
        if name:
            params["name"] = name
        if based_on:
            params["basedOn"] = based_on
        resp = await self.client.get(USER_ENDPOINTS["suggested_usernames"], params=params)
        return SuggestedUsernames.model_validate(resp.json())

    async def create_inbox(self, username: str) -> CreateInboxResponse:
        logger.info("Creating inbox for %s", username)
        resp = await self.client.post(USER_ENDPOINTS["create_inbox"], json={"username": username})
        self._drop_profile()
        return CreateInboxResponse.model_validate(resp.json())

    async def get_complete_data(self) -> UserProfile:
        resp = await self.client.get(USER_ENDPOINTS["complete_data"])
        return UserProfile.model_validate(resp.json())

    async def get_categories(self) -> list[Category]:
        resp = await self.client.get(USER_ENDPOINTS["categories"])
        data = resp.json()
        if isinstance(data, dict):
            data = data.get("categories", [])
        return [Category.model_validate(c) for c in data]

    async def complete_onboarding(self, request: OnboardingRequest) -> StatusResponse:
        resp = await self.client.post(USER_ENDPOINTS["onboarding"], json=request.to_payload())
        return StatusResponse.model_validate(resp.json())

    async def get_onboarding_status(self) -> OnboardingStatus:
        resp = await self.client.get(USER_ENDPOINTS["onboarding_status"])
        return OnboardingStatus.model_validate(resp.json())

    async def get_profile(self, force_refresh: bool = False) -> UserProfile:
        """Current user's profile, cached for ``CacheTTL.LONG`` when a cache is attached."""

        async def _fetch() -> UserProfile:
            resp = await self.client.get(USER_ENDPOINTS["profile"])
            return UserProfile.model_validate(resp.json())

        if self.client.cache is None:
            return await _fetch()
        return await self.client.cache.fetch(
            CacheKeys.USER_PROFILE, _fetch, ttl=CacheTTL.LONG, force_refresh=force_refresh
        )

    async def update_profile(self, update: ProfileUpdate) -> UserProfile:
        resp = await self.client.patch(USER_ENDPOINTS["profile"], json=update.to_payload())
        self._drop_profile()
        return UserProfile.model_validate(resp.json())

    def _drop_profile(self) -> None:
        if self.client.cache is not None:
            self.client.cache.invalidate(CacheKeys.USER_PROFILE)
