# Reading analytics schemas.

from __future__ import annotations

from typing import Literal

from inbo.schemas.common import InboModel


class ReadingInsights(InboModel):
    newsletter_read: int = 0
    favourite_mark: int = 0
    highlights_made: int = 0


class StreakCount(InboModel):
    streak_count: int = 0
    longest_streak: int = 0


class Achievement(InboModel):
    id: str
    title: str
    date: str | None = None
    status: Literal["earned", "locked"] = "locked"


class InboxSnapshot(InboModel):
    received_today: int = 0
    read: int = 0
    unread: int = 0
    read_later: int = 0
    favourite: int = 0
