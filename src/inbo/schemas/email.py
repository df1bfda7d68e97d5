# Email schemas.

from __future__ import annotations

from typing import Any

from inbo.schemas.common import InboModel


class EmailListItem(InboModel):
    id: str = ""
    sender: str = ""
    subject: str = ""
    content_preview: str | None = None
    date_received: str | None = None
    words_count: int | None = None
    is_read: bool = False
    is_favorite: bool = False
    is_read_later: bool = False
    newsletter_name: str | None = None
    newsletter_logo: str | None = None
    first_image: str | None = None


class EmailDetail(InboModel):
    id: str = ""
    sender: str = ""
    subject: str = ""
    content_preview: str | None = None
    date_received: str | None = None
    words_count: int | None = None
    is_read: bool = False
    is_favorite: bool = False
    is_read_later: bool = False
    storage_path: str | None = None
    reading_progress: float | None = None
    body: str | None = None
    summary: str | None = None
    highlights: list[Any] | None = None


class EmptyInbox(InboModel):
    """Returned in place of emails while nothing has arrived yet."""

    pending_newsletters: int | None = None
    emails_count: int | None = None


class EmailSearchResult(InboModel):
    id: str = ""
    sender: str = ""
    subject: str = ""
    content_preview: str | None = None
    date_received: str | None = None
    is_read: bool = False
    newsletter_name: str | None = None
    newsletter_logo: str | None = None
    logo_url: str | None = None
