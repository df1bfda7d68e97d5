# Tests for SearchService and DiscoverService.

import pytest

from inbo.errors import ApiError
from inbo.services.discover import DiscoverService
from inbo.services.search import SearchService

from conftest import FakeBackend

DIRECTORY_SEARCH = "/api/directory/search/"
EMAIL_SEARCH = "/api/email/search/emails/"
PREVIEW = "/api/directory/search-newsletters-preview/"


@pytest.fixture
def search(client):
    return SearchService(client)


@pytest.fixture
def discover(client):
    return DiscoverService(client)


def _newsletters(n, **extra):
    return [{"id": i, "name": f"Letter {i}", "url": f"https://l{i}.com", **extra} for i in range(n)]


class TestSearchEmails:
    async def test_blank_query_skips_backend(self, search, backend):
        page = await search.search_emails("   ")
        assert page.data == [] and page.total == 0
        assert backend.requests == []

    async def test_results(self, search, backend):
        backend.on(
            "GET",
            EMAIL_SEARCH,
            200,
            {"emails": [{"id": 1, "subject": "AI weekly", "logoUrl": "https://l/ai.png"}], "total": 12},
        )
        page = await search.search_emails("ai", page=2)

        assert page.total == 12
        assert page.data[0].newsletter_logo == "https://l/ai.png"
        params = backend.requests[0].url.params
        assert params["q"] == "ai" and params["page"] == "2"

    async def test_non_object_response_is_empty(self, search, backend):
        backend.on("GET", EMAIL_SEARCH, 200, [{"id": 1}])
        page = await search.search_emails("ai")
        assert page.data == [] and page.total == 0

    async def test_errors_propagate(self, search, backend):
        backend.on("GET", EMAIL_SEARCH, 500, {})
        with pytest.raises(ApiError):
            await search.search_emails("ai")


class TestSearchNewsletters:
    async def test_query_and_category(self, search, backend):
        backend.on("GET", DIRECTORY_SEARCH, 200, {"data": _newsletters(2, icon_url="https://i"), "total": 40})
        page = await search.search_newsletters("tech", category="AI")

        assert page.total == 40
        assert page.data[0].logo == "https://i"
        params = backend.requests[0].url.params
        assert params["query"] == "tech"
        assert params["category"] == "AI"

    async def test_category_only(self, search, backend):
        backend.on("GET", DIRECTORY_SEARCH, 200, {"data": [], "total": 0})
        await search.search_newsletters("", category="Finance")
        assert "query" not in backend.requests[0].url.params

    async def test_nothing_to_search(self, search, backend):
        page = await search.search_newsletters("")
        assert page.total == 0
        assert backend.requests == []

    async def test_non_object_directory_response_is_empty(self, search, backend):
        backend.on("GET", DIRECTORY_SEARCH, 200, ["unexpected"])
        page = await search.search_newsletters("tech")
        assert page.data == [] and page.total == 0

    async def test_preview(self, search, backend):
        backend.on("GET", PREVIEW, 200, {"data": _newsletters(3)})
        results = await search.search_newsletters_preview("let")
        assert [n.name for n in results] == ["Letter 0", "Letter 1", "Letter 2"]
        assert backend.requests[0].url.params["search"] == "let"


class TestQuickSearch:
    async def test_all_contexts(self, search, backend):
        backend.on(
            "GET", EMAIL_SEARCH, 200, {"emails": [{"id": i} for i in range(8)], "total": 8}
        )
        backend.on("GET", PREVIEW, 200, _newsletters(7))

        results = await search.quick_search("x")

        assert len(results.emails) == 5
        assert len(results.newsletters) == 5
        assert results.total_emails == 8
        assert results.total_newsletters == 7

    async def test_inbox_only(self, search, backend):
        backend.on("GET", EMAIL_SEARCH, 200, {"emails": [], "total": 0})
        results = await search.quick_search("x", context="inbox")
        assert results.newsletters == []
        assert backend.calls(PREVIEW) == []

    async def test_blank(self, search, backend):
        results = await search.quick_search("")
        assert results.emails == [] and results.newsletters == []
        assert backend.requests == []


class TestDiscover:
    async def test_categories_cached(self, discover, backend):
        backend.on(
            "GET",
            "/api/directory/categories/",
            200,
            {"categories": [{"id": 1, "name": "AI"}, {"id": 2, "name": "Knitting"}]},
        )
        first = await discover.get_categories()
        second = await discover.get_categories()

        assert [c.name for c in first] == ["AI", "Knitting"]
        assert second == first
        assert len(backend.requests) == 1

    async def test_top_categories(self, discover, backend):
        backend.on(
            "GET",
            "/api/directory/categories/",
            200,
            [
                {"id": 1, "name": "AI"},
                {"id": 2, "name": "Knitting"},
                {"id": 3, "name": "AI", "level": 2},
                {"id": 4, "name": "Finance"},
            ],
        )
        top = await discover.get_top_categories()
        assert [c.name for c in top] == ["AI", "Finance"]
        assert top[0].level is None

    async def test_search_defaults(self, discover, backend):
        backend.on("GET", DIRECTORY_SEARCH, 200, {"data": _newsletters(1), "total": 1, "page": 1, "limit": 20})
        page = await discover.search_newsletters()
        assert page.data[0].id == "0"
        params = backend.requests[0].url.params
        assert params["page"] == "1" and params["limit"] == "20"

    async def test_by_category(self, discover, backend):
        backend.on(
            "GET", "/api/directory/search-category-newsletters-preview/", 200, {"data": _newsletters(2)}
        )
        result = await discover.get_newsletters_by_category("Business")
        assert len(result) == 2
        assert backend.requests[0].url.params["categoryname"] == "Business"

    async def test_details(self, discover, backend):
        backend.on("GET", "/api/directory/n1/", 200, {"id": "n1", "name": "Brew", "tags": ["daily"]})
        detail = await discover.get_newsletter_details("n1")
        assert detail.tags == ["daily"]

    async def test_trending_maps_recommendation_rows(self, discover, backend):
        backend.on(
            "GET",
            "/api/recommendation/recommendations/trending/",
            200,
            [{"item_id": "n9", "item_name": "Hot", "item_url": "https://hot", "reason": "Popular"}],
        )
        result = await discover.get_trending_newsletters(limit=3)

        assert result[0].id == "n9"
        assert result[0].name == "Hot"
        assert result[0].description == "Popular"
        assert backend.requests[0].url.params["k"] == "3"

    async def test_trending_falls_back_to_popular(self, discover, backend):
        backend.on("GET", "/api/recommendation/recommendations/trending/", 503, {})
        backend.on("GET", DIRECTORY_SEARCH, 200, {"data": _newsletters(2), "total": 2})

        result = await discover.get_trending_newsletters()

        assert [n.name for n in result] == ["Letter 0", "Letter 1"]

    async def test_recommendations_fall_back_to_popular(self, discover, backend):
        backend.on("GET", "/api/directory/recommendations/", 404, {})
        backend.on("GET", DIRECTORY_SEARCH, 200, {"data": _newsletters(1), "total": 1})
        result = await discover.get_recommendations(limit=5)
        assert len(result) == 1
        assert backend.calls(DIRECTORY_SEARCH)[0].url.params["limit"] == "5"

    async def test_subscribe(self, discover, backend):
        backend.on("POST", "/api/user/newsletter/subscribe/", 200, {})
        status = await discover.subscribe("n1")
        assert status.success
        assert FakeBackend.body(backend.requests[0]) == {"newsletter_id": "n1"}

    async def test_unsubscribe_failure_raises(self, discover, backend):
        backend.on("POST", "/api/user/newsletter/unsubscribe/", 400, {"error": "not subscribed"})
        with pytest.raises(ApiError) as exc_info:
            await discover.unsubscribe("n1")
        assert exc_info.value.message == "not subscribed"
