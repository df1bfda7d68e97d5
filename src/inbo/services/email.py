# Email Service — inbox listings, reading state and highlights.
#
# List items are normalised for display: a readable newsletter name derived
# from the sender, the first article image in the preview HTML, and the
# publisher logo looked up once per sender in the directory.

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any, Literal

import httpx

from inbo.api.client import ApiClient, decode_json
from inbo.errors import ApiError
from inbo.schemas.email import EmailDetail, EmailListItem, EmptyInbox

logger = logging.getLogger(__name__)

SortFilter = Literal["latest", "oldest"]

EMAIL_ENDPOINTS = {
    "inbox": "/api/email/inbox/",
    "read_later": "/api/email/read-later/",
    "favorites": "/api/email/favorites/",
    "trash": "/api/email/trash/",
    "provider_search": "/api/search/providers/search/",
}

_SENDER_PREFIX = re.compile(r"^(newsletter|news|mail|noreply|no-reply)[-_.]?", re.IGNORECASE)
_IMG_TAG = re.compile(r"<img[^>]+src=[\"']([^\"']+)[\"'][^>]*>", re.IGNORECASE)
_BACKGROUND_IMAGE = re.compile(
    r"background-image:\s*url\([\"']?([^\"')]+)[\"']?\)", re.IGNORECASE
)

# Fragments marking chrome (logos, avatars, share buttons) rather than article images.
_SKIP_URL_PARTS = (
    "/icon", "/logo", "favicon", "/avatar", "/profile", "/badge",
    "header", "footer", "social", "button",
)
_SKIP_TAG_PARTS = (
    'class="logo', 'class="icon', 'class="avatar', 'class="profile',
    'class="header', 'class="footer', 'id="logo', 'id="header',
)


def extract_newsletter_name(sender: str) -> str:
    """Readable name from a sender address.

    ``"newsletter-morning_brew@example.com"`` -> ``"Morning Brew"``.
    """
    local = sender.split("@", 1)[0] if sender else ""
    name = _SENDER_PREFIX.sub("", local)
    name = re.sub(r"[-_.]", " ", name)
    name = " ".join(word.capitalize() for word in name.split())
    return name or "Newsletter"


def extract_first_image(html: str | None) -> str | None:
    """First image in *html* that looks like article content, else None."""
    if not html:
        return None

    for match in _IMG_TAG.finditer(html):
        url = match.group(1).strip()
        if not url or url.startswith("data:") or "1x1" in url or len(url) < 15:
            continue
        lower_url = url.lower()
        lower_tag = match.group(0).lower()
        if any(part in lower_url for part in _SKIP_URL_PARTS):
            continue
        if any(part in lower_tag for part in _SKIP_TAG_PARTS):
            continue
        return url

    bg = _BACKGROUND_IMAGE.search(html)
    if bg:
        url = bg.group(1).strip()
        if url and not url.startswith("data:"):
            return url
    return None


def _unwrap_list(data: Any) -> list[dict[str, Any]]:
    """Paginated responses wrap items as ``{"data": [...], "page": ...}``."""
    if isinstance(data, dict):
        data = data.get("data", [])
    return data if isinstance(data, list) else []


class EmailService:
    def __init__(self, client: ApiClient):
        self.client = client
        # sender (lowercased) -> (logo, provider name)
        self._providers: dict[str, tuple[str | None, str | None]] = {}

    # -- normalisation --

    def normalize_item(self, raw: dict[str, Any]) -> EmailListItem:
        item = EmailListItem.model_validate(raw)
        cached_logo, cached_name = self._providers.get(item.sender.lower(), (None, None))
        item.newsletter_name = (
            item.newsletter_name or cached_name or extract_newsletter_name(item.sender)
        )
        item.newsletter_logo = item.newsletter_logo or cached_logo
        item.first_image = item.first_image or extract_first_image(item.content_preview)
        return item

    async def lookup_provider(self, sender: str) -> tuple[str | None, str | None]:
        """Directory logo and name for a sender's domain, memoised per sender.

        Logos are decorative, so a failed lookup is remembered as "no logo"
        instead of being raised.
        """
        key = sender.lower()
        if key in self._providers:
            return self._providers[key]

        domain = sender.split("@", 1)[1] if "@" in sender else ""
        if not domain:
            return None, None

        result: tuple[str | None, str | None] = (None, None)
        try:
            resp = await self.client.get(
                EMAIL_ENDPOINTS["provider_search"],
                params={"q": domain.split(".")[0], "page_size": 5},
            )
            data = decode_json(resp)
            results = data.get("results") if isinstance(data, dict) else None
            provider = results[0] if isinstance(results, list) and results else None
            if isinstance(provider, dict):
                result = (provider.get("logo") or provider.get("image"), provider.get("name"))
        except (ApiError, httpx.TransportError) as e:
            logger.debug("Provider lookup for %s failed: %s", sender, e)

        self._providers[key] = result
        return result

    async def _attach_logos(self, emails: list[EmailListItem]) -> None:
        missing = [e for e in emails if not e.newsletter_logo and e.sender]
        logos = await asyncio.gather(*(self.lookup_provider(e.sender) for e in missing))
        for email, (logo, _name) in zip(missing, logos):
            if logo:
                email.newsletter_logo = logo

    # -- listings --

    async def _list(
        self, endpoint: str, sort: SortFilter, page: int, extra: dict[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        params: dict[str, Any] = {"filter": sort}
        params.update(extra or {})
        params["page"] = page
        resp = await self.client.get(endpoint, params=params)
        return _unwrap_list(resp.json())

    async def get_inbox(
        self,
        sort: SortFilter = "latest",
        is_read: bool | None = None,
        page: int = 1,
    ) -> list[EmailListItem] | list[EmptyInbox]:
        """Inbox page. Before any email arrives the backend returns a pending summary."""
        extra = {"isRead": str(is_read).lower()} if is_read is not None else None
        data = await self._list(EMAIL_ENDPOINTS["inbox"], sort, page, extra)

        if data and "pendingNewsletters" in data[0]:
            return [EmptyInbox.model_validate(d) for d in data]

        emails = [self.normalize_item(d) for d in data]
        await self._attach_logos(emails)
        return emails

    async def get_read_later(self, sort: SortFilter = "latest", page: int = 1) -> list[EmailListItem]:
        data = await self._list(EMAIL_ENDPOINTS["read_later"], sort, page)
        return [self.normalize_item(d) for d in data]

    async def get_favorites(self, sort: SortFilter = "latest", page: int = 1) -> list[EmailListItem]:
        data = await self._list(EMAIL_ENDPOINTS["favorites"], sort, page)
        return [self.normalize_item(d) for d in data]

    async def get_trash(self, sort: SortFilter = "latest", page: int = 1) -> list[EmailListItem]:
        data = await self._list(EMAIL_ENDPOINTS["trash"], sort, page)
        return [self.normalize_item(d) for d in data]

    # -- single email --

    async def get_detail(self, email_id: str) -> EmailDetail:
        resp = await self.client.get(f"/api/email/{email_id}/")
        return EmailDetail.model_validate(resp.json())

    async def mark_as_read(self, email_id: str) -> bool:
        """Mark read. Returns False when the backend rejected it.

        The progress endpoint is known to answer 5xx even when the state was
        recorded, so a rejection is logged and not raised.
        """
        try:
            await self.client.patch(f"/api/email/{email_id}/progress/", json={"is_read": True})
        except ApiError as e:
            logger.warning("Backend rejected mark-as-read for %s: %s", email_id, e)
            return False
        return True

    async def toggle_favorite(self, email_id: str, is_favorite: bool) -> None:
        await self.client.patch(
            f"/api/email/{email_id}/favorite/", json={"isFavorite": is_favorite}
        )

    async def toggle_read_later(self, email_id: str, is_read_later: bool) -> None:
        logger.debug("Read later for %s -> %s", email_id, is_read_later)
        await self.client.patch(
            f"/api/email/{email_id}/readlater/", json={"isReadLater": is_read_later}
        )

    async def move_to_trash(self, email_id: str) -> None:
        await self.client.patch(f"/api/email/{email_id}/trash/", json={})

    async def delete(self, email_id: str) -> None:
        """Permanently delete."""
        await self.client.delete(f"/api/email/{email_id}/delete/")

    async def add_highlight(
        self,
        email_id: str,
        text: str,
        selection_info: dict[str, Any],
        color: str = "yellow",
    ) -> dict[str, Any]:
        resp = await self.client.post(
            f"/api/email/{email_id}/highlight/",
            json={"text": text, "selectionInfo": selection_info, "color": color},
        )
        return resp.json()
