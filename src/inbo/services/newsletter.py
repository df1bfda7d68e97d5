# Newsletter Service — subscription preferences and the followed-posts feed.

from __future__ import annotations

import logging
from typing import Any

from inbo.api.client import ApiClient
from inbo.schemas.common import Page
from inbo.schemas.directory import NewsletterPost, NewsletterPreference

logger = logging.getLogger(__name__)

PREFERENCES = "/api/newsletter-profile/v1/preferences/"
POSTS = "/api/newsletter-profile/v1/posts/"


def _page_params(**params: Any) -> dict[str, Any]:
    return {k: v for k, v in params.items() if v is not None}


class NewsletterService:
    def __init__(self, client: ApiClient):
        self.client = client

    async def get_preferences(
        self,
        page: int | None = None,
        page_size: int | None = None,
        search: str | None = None,
    ) -> Page[NewsletterPreference]:
        resp = await self.client.get(
            PREFERENCES, params=_page_params(page=page, page_size=page_size, search=search)
        )
        return Page[NewsletterPreference].model_validate(resp.json())

    async def subscribe(self, newsletter_id: str) -> NewsletterPreference:
        # The profile is inferred from the bearer token.
        resp = await self.client.post(
            PREFERENCES, json={"newsletter_id": newsletter_id, "is_subscribed": True}
        )
        return NewsletterPreference.model_validate(resp.json())

    async def unsubscribe(self, preference_id: str) -> None:
        await self.client.delete(f"{PREFERENCES}{preference_id}/")

    async def update_preference(
        self,
        preference_id: str,
        is_subscribed: bool | None = None,
        is_favorite: bool | None = None,
    ) -> NewsletterPreference:
        body = _page_params(is_subscribed=is_subscribed, is_favorite=is_favorite)
        resp = await self.client.patch(f"{PREFERENCES}{preference_id}/", json=body)
        return NewsletterPreference.model_validate(resp.json())

    async def get_posts(
        self,
        page: int | None = None,
        page_size: int | None = None,
        search: str | None = None,
        ordering: str | None = None,
    ) -> Page[NewsletterPost]:
        resp = await self.client.get(
            POSTS,
            params=_page_params(page=page, page_size=page_size, search=search, ordering=ordering),
        )
        return Page[NewsletterPost].model_validate(resp.json())
