# Newsletter directory, subscription and feed schemas.

from __future__ import annotations

from inbo.schemas.common import InboModel


class Newsletter(InboModel):
    id: str
    name: str = ""
    url: str = ""
    domain: str | None = None
    author: str | None = None
    description: str | None = None
    target_audience: str | None = None
    value_proposition: str | None = None
    language: str | None = None
    content_frequency: str | None = None
    location: str | None = None
    logo: str | None = None
    categories: list[str] = []
    tags: list[str] = []
    cross_tags: list[str] = []
    tones: list[str] = []
    audience_levels: list[str] = []
    content_intents: list[str] = []
    content_formats: list[str] = []


class NewsletterSearchPage(InboModel):
    data: list[Newsletter] = []
    total: int = 0
    page: int = 1
    limit: int = 20


class NewsletterPreference(InboModel):
    id: str
    profile: str | None = None
    newsletter_id: str
    newsletter_name: str = ""
    newsletter_url: str = ""
    logo_url: str | None = None
    is_subscribed: bool = False
    is_favorite: bool = False
    subscribed_at: str | None = None


class NewsletterPost(InboModel):
    id: str
    newsletter_id: str
    newsletter_name: str = ""
    newsletter_icon_url: str | None = None
    title: str = ""
    summary: str = ""
    content: str = ""
    published_at: str | None = None
    url: str = ""
    is_read: bool = False
    is_bookmarked: bool = False
