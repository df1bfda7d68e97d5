# Discover Service — newsletter directory browsing and recommendations.

from __future__ import annotations

import logging
from typing import Any

from inbo.api.client import ApiClient
from inbo.cache import CacheKeys, CacheTTL
from inbo.errors import ApiError
from inbo.schemas.common import StatusResponse
from inbo.schemas.directory import Newsletter, NewsletterSearchPage
from inbo.schemas.user import Category

logger = logging.getLogger(__name__)

DISCOVER_ENDPOINTS = {
    "categories": "/api/directory/categories/",
    "search": "/api/directory/search/",
    "details": "/api/directory/",
    "category_preview": "/api/directory/search-category-newsletters-preview/",
    "recommendations": "/api/directory/recommendations/",
    "trending": "/api/recommendation/recommendations/trending/",
    "subscribe": "/api/user/newsletter/subscribe/",
    "unsubscribe": "/api/user/newsletter/unsubscribe/",
}

TOP_CATEGORY_NAMES = (
    "Technology", "AI", "Business", "Finance", "Startups",
    "Marketing", "Design", "Productivity", "Health", "Crypto",
    "Culture", "Career", "Economics", "Current Affairs",
)


def _items(data: Any) -> list[dict[str, Any]]:
    if isinstance(data, dict):
        data = data.get("data", [])
    return data if isinstance(data, list) else []


def _from_recommendation(item: dict[str, Any]) -> Newsletter:
    """Recommendation rows use ``item_*`` keys and put the pitch in ``reason``."""
    return Newsletter(
        id=item.get("item_id") or item.get("id") or "",
        name=item.get("item_name") or item.get("name") or "",
        url=item.get("item_url") or item.get("url") or "",
        description=item.get("reason") or item.get("description"),
        domain=item.get("domain"),
        author=item.get("author"),
    )


class DiscoverService:
    def __init__(self, client: ApiClient):
        self.client = client

    async def get_categories(self) -> list[Category]:
        async def _fetch() -> list[Category]:
            resp = await self.client.get(DISCOVER_ENDPOINTS["categories"])
            data = resp.json()
            if isinstance(data, dict):
                data = data.get("categories", [])
            return [Category.model_validate(c) for c in data]

        if self.client.cache is None:
            return await _fetch()
        return await self.client.cache.fetch(CacheKeys.CATEGORIES, _fetch, ttl=CacheTTL.VERY_LONG)

    async def get_top_categories(self, limit: int = 20) -> list[Category]:
        """First category for each well-known top-level name, in directory order."""
        seen: dict[str, Category] = {}
        for cat in await self.get_categories():
            if cat.name in TOP_CATEGORY_NAMES and cat.name not in seen:
                seen[cat.name] = cat
        return list(seen.values())[:limit]

    async def search_newsletters(
        self,
        query: str | None = None,
        category: str | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> NewsletterSearchPage:
        params: dict[str, Any] = {"page": page or 1, "limit": limit or 20}
        if query:
            params["query"] = query
        if category:
            params["category"] = category
        resp = await self.client.get(DISCOVER_ENDPOINTS["search"], params=params)
        return NewsletterSearchPage.model_validate(resp.json())

    async def get_newsletters_by_category(self, category_name: str) -> list[Newsletter]:
        """Up to five newsletters previewing a category."""
        resp = await self.client.get(
            DISCOVER_ENDPOINTS["category_preview"], params={"categoryname": category_name}
        )
        return [Newsletter.model_validate(n) for n in _items(resp.json())]

    async def get_newsletter_details(self, newsletter_id: str) -> Newsletter:
        resp = await self.client.get(f"{DISCOVER_ENDPOINTS['details']}{newsletter_id}/")
        return Newsletter.model_validate(resp.json())

    async def get_recommendations(self, limit: int = 10) -> list[Newsletter]:
        try:
            resp = await self.client.get(
                DISCOVER_ENDPOINTS["recommendations"], params={"limit": limit}
            )
        except ApiError as e:
            logger.warning("Recommendations unavailable (%s); using popular newsletters", e)
            return await self.get_popular_newsletters(limit)
        return [Newsletter.model_validate(n) for n in _items(resp.json())]

    async def get_trending_newsletters(self, limit: int = 10) -> list[Newsletter]:
        try:
            resp = await self.client.get(DISCOVER_ENDPOINTS["trending"], params={"k": limit})
        except ApiError as e:
            logger.warning("Trending unavailable (%s); using popular newsletters", e)
            return await self.get_popular_newsletters(limit)
        return [_from_recommendation(item) for item in _items(resp.json())]

    async def get_popular_newsletters(self, limit: int = 10) -> list[Newsletter]:
        page = await self.search_newsletters(limit=limit)
        return page.data

    async def subscribe(self, newsletter_id: str) -> StatusResponse:
        await self.client.post(
            DISCOVER_ENDPOINTS["subscribe"], json={"newsletter_id": newsletter_id}
        )
        return StatusResponse(success=True, message="Subscribed successfully")

    async def unsubscribe(self, newsletter_id: str) -> StatusResponse:
        await self.client.post(
            DISCOVER_ENDPOINTS["unsubscribe"], json={"newsletter_id": newsletter_id}
        )
        return StatusResponse(success=True, message="Unsubscribed successfully")
