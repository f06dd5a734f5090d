"""Tests for the offset search paginator."""

import copy
import json

import httpx
import pytest
import respx

from memory_journal.client import JournalClient
from memory_journal.notify import NotificationLog
from memory_journal.search import OffsetSearchPaginator, page_window

BASE_URL = "https://api.journal.test"
SEARCH_URL = f"{BASE_URL}/v1/memories/search"
PUBLIC_SEARCH_URL = f"{BASE_URL}/v1/memories/public/search"


def _page(response: dict, page: int, memory_ids: list[int]) -> dict:
    """Copy the fixture response as page ``page`` holding ``memory_ids``."""
    response = copy.deepcopy(response)
    template = response["data"]["memories"][0]
    response["data"]["memories"] = [
        dict(template, memoryId=memory_id, title=f"Result {memory_id}")
        for memory_id in memory_ids
    ]
    info = response["data"]["pageInfo"]
    info["currentPage"] = page
    info["hasPrevious"] = page > 0
    info["hasNext"] = page < info["totalPages"] - 1
    return response


class TestPageWindow:
    @pytest.mark.parametrize(
        "current,total,expected",
        [
            (0, 10, [0, 1, 2, 3, 4]),
            (1, 10, [0, 1, 2, 3, 4]),
            (5, 10, [3, 4, 5, 6, 7]),
            (8, 10, [5, 6, 7, 8, 9]),
            (9, 10, [5, 6, 7, 8, 9]),
            (1, 3, [0, 1, 2]),
            (0, 1, [0]),
            (0, 0, []),
        ],
    )
    def test_window(self, current, total, expected):
        assert page_window(current, total) == expected


class TestOffsetSearchPaginator:
    @pytest.mark.asyncio
    @respx.mock
    async def test_request_body(self, search_response):
        route = respx.post(SEARCH_URL).mock(
            return_value=httpx.Response(200, json=search_response)
        )

        async with JournalClient(BASE_URL, token="secret") as client:
            paginator = OffsetSearchPaginator(client, page_size=2)
            assert await paginator.search("  seoul ")

        body = json.loads(route.calls.last.request.content)
        assert body == {
            "type": "ALL",
            "highlight": True,
            "query": "seoul",
            "page": 0,
            "size": 2,
        }
        assert [r.memory_id for r in paginator.results] == [31, 30]
        assert paginator.page.metadata.search_time_ms == 12
        assert paginator.page.results[0].highlights == {
            "title": ["Night market in <em>Seoul</em>"]
        }

    @pytest.mark.asyncio
    @respx.mock
    async def test_new_page_replaces_results(self, search_response):
        respx.post(SEARCH_URL).side_effect = [
            httpx.Response(200, json=_page(search_response, 0, [31, 30])),
            httpx.Response(200, json=_page(search_response, 2, [27, 26])),
        ]

        async with JournalClient(BASE_URL, token="secret") as client:
            paginator = OffsetSearchPaginator(client, page_size=2)
            await paginator.search("seoul")
            assert await paginator.go_to(2)

        ids = [r.memory_id for r in paginator.results]
        assert ids == [27, 26]
        assert 31 not in ids and 30 not in ids
        assert paginator.page.page_info.current_page == 2
        assert paginator.page_numbers() == [0, 1, 2, 3]

    @pytest.mark.asyncio
    @respx.mock
    async def test_navigation_follows_server_flags(self, search_response):
        route = respx.post(SEARCH_URL)
        route.side_effect = [
            httpx.Response(200, json=_page(search_response, 0, [31, 30])),
            httpx.Response(200, json=_page(search_response, 1, [29, 28])),
            httpx.Response(200, json=_page(search_response, 0, [31, 30])),
        ]

        async with JournalClient(BASE_URL, token="secret") as client:
            paginator = OffsetSearchPaginator(client, page_size=2)
            await paginator.search("seoul")

            assert paginator.has_previous is False
            assert await paginator.previous_page() is False

            assert await paginator.next_page()
            assert paginator.page.page_info.current_page == 1
            assert await paginator.previous_page()

        sent_pages = [json.loads(c.request.content)["page"] for c in route.calls]
        assert sent_pages == [0, 1, 0]

    @pytest.mark.asyncio
    @respx.mock
    async def test_next_disabled_on_last_page(self, search_response):
        route = respx.post(SEARCH_URL).mock(
            return_value=httpx.Response(200, json=_page(search_response, 3, [25]))
        )

        async with JournalClient(BASE_URL, token="secret") as client:
            paginator = OffsetSearchPaginator(client, page_size=2)
            await paginator.fetch_page("seoul", 3)
            assert await paginator.next_page() is False
            assert await paginator.go_to(4) is False
            assert await paginator.go_to(-1) is False

        assert route.call_count == 1

    @pytest.mark.asyncio
    @respx.mock
    async def test_failure_clears_results_and_notifies(self, search_response):
        respx.post(SEARCH_URL).side_effect = [
            httpx.Response(200, json=search_response),
            httpx.Response(200, json={"statusCode": 500, "message": "index offline", "data": None}),
        ]
        notifications = NotificationLog()

        async with JournalClient(BASE_URL, token="secret") as client:
            paginator = OffsetSearchPaginator(client, notifier=notifications)
            await paginator.search("seoul")
            assert await paginator.search("busan") is False

        assert paginator.results == []
        assert paginator.error == "Search failed."
        assert paginator.loading is False
        assert len(notifications.errors) == 1
        assert "index offline" in notifications.errors[0].description

    @pytest.mark.asyncio
    @respx.mock(assert_all_called=False)
    async def test_blank_query_is_ignored(self):
        route = respx.post(SEARCH_URL)

        async with JournalClient(BASE_URL, token="secret") as client:
            paginator = OffsetSearchPaginator(client)
            assert await paginator.search("   ") is False

        assert route.call_count == 0

    @pytest.mark.asyncio
    @respx.mock
    async def test_unauthenticated_uses_public_endpoint(self, search_response):
        route = respx.post(PUBLIC_SEARCH_URL).mock(
            return_value=httpx.Response(200, json=search_response)
        )

        async with JournalClient(BASE_URL) as client:
            paginator = OffsetSearchPaginator(client)
            await paginator.search("seoul")

        assert route.call_count == 1
        assert "authorization" not in route.calls.last.request.headers

    @pytest.mark.asyncio
    @respx.mock(assert_all_called=False)
    async def test_closed_paginator_does_not_search(self):
        route = respx.post(SEARCH_URL)

        async with JournalClient(BASE_URL, token="secret") as client:
            paginator = OffsetSearchPaginator(client)
            paginator.close()
            assert await paginator.search("seoul") is False

        assert route.call_count == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "data",
        [{"results": []}, None, {"memories": [], "pageInfo": {"currentPage": 0}}],
        ids=["no-page-info", "null-data", "partial-page-info"],
    )
    @respx.mock
    async def test_unreadable_response_fails_closed(self, data, search_response):
        respx.post(SEARCH_URL).side_effect = [
            httpx.Response(200, json={"statusCode": 200, "message": "OK", "data": data}),
            httpx.Response(200, json=search_response),
        ]
        notifications = NotificationLog()

        async with JournalClient(BASE_URL, token="secret") as client:
            paginator = OffsetSearchPaginator(client, notifier=notifications)
            assert await paginator.search("seoul") is False

            assert paginator.loading is False
            assert paginator.results == []
            assert paginator.error == "Search failed."
            assert len(notifications.errors) == 1

            assert await paginator.search("seoul") is True

        assert paginator.error is None
        assert paginator.results
