# Analytics Service — reading insights, streaks, achievements, inbox snapshot.

from __future__ import annotations

from inbo.api.client import ApiClient
from inbo.cache import CacheKeys, CacheTTL
from inbo.schemas.analytics import Achievement, InboxSnapshot, ReadingInsights, StreakCount


class AnalyticsService:
    def __init__(self, client: ApiClient):
        self.client = client

    async def get_reading_insights(self) -> ReadingInsights:
        resp = await self.client.get("/api/user/analytics/reading-insights/")
        return ReadingInsights.model_validate(resp.json())

    async def get_streak_count(self) -> StreakCount:
        resp = await self.client.get("/api/user/streak-count/")
        return StreakCount.model_validate(resp.json())

    async def get_achievements(self) -> list[Achievement]:
        resp = await self.client.get("/api/user/analytics/achievements/")
        return [Achievement.model_validate(a) for a in resp.json()]

    async def get_inbox_snapshot(self) -> InboxSnapshot:
        async def _fetch() -> InboxSnapshot:
            resp = await self.client.get("/api/user/analytics/inbox-snapshot/")
            return InboxSnapshot.model_validate(resp.json())

        if self.client.cache is None:
            return await _fetch()
        return await self.client.cache.fetch(
            CacheKeys.ANALYTICS_SNAPSHOT, _fetch, ttl=CacheTTL.SHORT
        )
