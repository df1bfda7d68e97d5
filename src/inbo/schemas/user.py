# User, onboarding and category schemas.

from __future__ import annotations

from inbo.schemas.common import InboModel


class UserProfile(InboModel):
    id: str
    email: str
    username: str | None = None
    name: str | None = None
    birth_year: str | None = None
    gender: str | None = None
    is_verified: bool = False
    is_inbox_created: bool = False
    inbox_email: str | None = None
    created_at: str | None = None


class ProfileUpdate(InboModel):
    name: str | None = None
    birth_year: str | None = None
    gender: str | None = None


class InboxAvailability(InboModel):
    available: bool
    message: str = ""


class SuggestedUsernames(InboModel):
    suggestions: list[str] = []


class CreateInboxResponse(InboModel):
    success: bool
    inbox_email: str | None = None


class Category(InboModel):
    id: str | int
    name: str
    level: int | None = None
    slug: str | None = None
    icon: str | None = None
    description: str | None = None


class OnboardingRequest(InboModel):
    username: str | None = None
    categories: list[str] | None = None
    reminder: str | None = None
    reminder_time: str | None = None
    where_heard: str | None = None
    notification_token: str | None = None


class OnboardingStatus(InboModel):
    is_complete: bool = False
    has_username: bool = False
    has_categories: bool = False
    category_count: int = 0
