# Search Service — inbox search, directory search and the combined quick search.

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Literal

from inbo.api.client import ApiClient
from inbo.schemas.directory import Newsletter
from inbo.schemas.email import EmailSearchResult

logger = logging.getLogger(__name__)

SearchContext = Literal["inbox", "discover", "all"]

QUICK_SEARCH_LIMIT = 5


@dataclass
class SearchPage:
    data: list[Any] = field(default_factory=list)
    total: int = 0


@dataclass
class QuickSearchResults:
    emails: list[EmailSearchResult] = field(default_factory=list)
    newsletters: list[Newsletter] = field(default_factory=list)
    total_emails: int = 0
    total_newsletters: int = 0


def _as_dict(data: Any) -> dict[str, Any]:
    return data if isinstance(data, dict) else {}


def _normalize_email(raw: dict[str, Any]) -> EmailSearchResult:
    result = EmailSearchResult.model_validate(raw)
    result.newsletter_logo = result.newsletter_logo or result.logo_url
    return result


def _normalize_newsletter(raw: dict[str, Any]) -> Newsletter:
    result = Newsletter.model_validate(raw)
    result.logo = result.logo or raw.get("icon_url") or raw.get("logo_url") or None
    return result


class SearchService:
    def __init__(self, client: ApiClient):
        self.client = client

    async def search_emails(self, query: str, page: int = 1) -> SearchPage:
        """Search the user's mail. Response shape: ``{"emails": [...], "total": n}``."""
        if not query.strip():
            return SearchPage()

        resp = await self.client.get("/api/email/search/emails/", params={"q": query, "page": page})
        data = _as_dict(resp.json())
        emails = [_normalize_email(e) for e in data.get("emails") or []]
        return SearchPage(data=emails, total=data.get("total") or len(emails))

    async def search_newsletters(
        self,
        query: str,
        category: str | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> SearchPage:
        if not query.strip() and not category:
            return SearchPage()

        params: dict[str, Any] = {"page": page, "limit": limit}
        if query.strip():
            params["query"] = query
        if category:
            params["category"] = category

        resp = await self.client.get("/api/directory/search/", params=params)
        data = _as_dict(resp.json())
        newsletters = [_normalize_newsletter(n) for n in data.get("data") or []]
        return SearchPage(data=newsletters, total=data.get("total") or len(newsletters))

    async def search_newsletters_preview(self, query: str) -> list[Newsletter]:
        """At most five directory matches, for type-ahead."""
        if not query.strip():
            return []

        resp = await self.client.get(
            "/api/directory/search-newsletters-preview/", params={"search": query}
        )
        data = resp.json()
        if isinstance(data, dict):
            data = data.get("data") or data.get("newsletters") or []
        return [_normalize_newsletter(n) for n in data]

    async def quick_search(self, query: str, context: SearchContext = "all") -> QuickSearchResults:
        """Run the email and directory searches concurrently for a dropdown."""
        if not query.strip():
            return QuickSearchResults()

        async def _no_emails() -> SearchPage:
            return SearchPage()

        async def _no_newsletters() -> list[Newsletter]:
            return []

        emails_coro = (
            self.search_emails(query, 1) if context in ("inbox", "all") else _no_emails()
        )
        newsletters_coro = (
            self.search_newsletters_preview(query)
            if context in ("discover", "all")
            else _no_newsletters()
        )
        email_page, newsletters = await asyncio.gather(emails_coro, newsletters_coro)

        logger.debug(
            "Quick search %r: %d emails, %d newsletters",
            query,
            len(email_page.data),
            len(newsletters),
        )
        return QuickSearchResults(
            emails=email_page.data[:QUICK_SEARCH_LIMIT],
            newsletters=newsletters[:QUICK_SEARCH_LIMIT],
            total_emails=email_page.total,
            total_newsletters=len(newsletters),
        )
