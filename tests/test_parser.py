"""Tests for API payload parsing."""

from datetime import datetime

import pytest

from memory_journal.parser import (
    parse_comment,
    parse_comments_page,
    parse_feed_items,
    parse_feed_page,
    parse_search_page,
)


class TestParseFeedItems:
    def test_parses_memory(self, memory_page):
        items = parse_feed_items(memory_page(7, 1))

        assert len(items) == 1
        item = items[0]
        assert item.id == 7
        assert item.title == "Memory 7"
        assert item.location_name == "Seoul"
        assert item.memorable_date == "2025-02-10"
        assert item.comment_count == 0

    def test_skips_malformed(self, memory_page):
        raw = memory_page(7, 2)
        del raw[0]["id"]

        items = parse_feed_items(raw)

        assert [item.id for item in items] == [6]

    def test_page_counts_every_returned_entry(self, memory_page):
        raw = memory_page(7, 3)
        del raw[1]["id"]
        raw.append("not a memory")

        page = parse_feed_page(raw)

        assert [item.id for item in page.items] == [7, 5]
        assert page.returned == 4

    def test_page_must_be_a_list(self):
        with pytest.raises(TypeError, match="list of memories"):
            parse_feed_page({"memories": []})

    def test_member_profile_image(self):
        raw = {
            "id": 1,
            "member": {
                "id": 3,
                "name": "Kim",
                "nickname": "",
                "profile": {"fileUrl": "https://cdn.example.com/kim.png"},
            },
        }

        item = parse_feed_items([raw])[0]

        assert item.author.nickname == "Kim"
        assert item.author.profile_image_url == "https://cdn.example.com/kim.png"


class TestParseSearchPage:
    def test_parses_fixture(self, search_response):
        page = parse_search_page(search_response["data"])

        assert [r.memory_id for r in page.results] == [31, 30]
        assert page.results[1].memory_type == "RELATIONSHIP"
        assert page.results[0].member_nickname == "kimchi"
        info = page.page_info
        assert (info.current_page, info.total_pages, info.total_elements) == (0, 4, 8)
        assert info.has_next is True
        assert info.has_previous is False
        assert page.metadata.query == "seoul"

    def test_accepts_results_key(self, search_response):
        data = dict(search_response["data"])
        data["results"] = data.pop("memories")

        page = parse_search_page(data)

        assert len(page.results) == 2


class TestParseComments:
    def test_page_with_embedded_replies(self, comments_response):
        page = parse_comments_page(comments_response["data"])

        assert page.total_count == 4
        assert page.has_next is True
        parent = page.comments[0]
        assert parent.depth == 0
        assert parent.created_at == datetime(2025, 2, 10, 18, 30)
        assert parent.author.profile_image_url == "https://cdn.example.com/kim.png"
        reply = parent.children[0]
        assert reply.depth == 1
        assert reply.parent_id == 12
        assert reply.is_author is True
        assert reply.children == []

    def test_drops_nesting_below_replies(self):
        raw = {
            "id": 1,
            "depth": 0,
            "content": "top",
            "childrenCount": 1,
            "children": [
                {"id": 2, "depth": 1, "content": "reply"},
                {"id": 3, "depth": 2, "content": "too deep"},
            ],
        }

        comment = parse_comment(raw)

        assert [c.id for c in comment.children] == [2]

    def test_reply_children_are_ignored(self):
        raw = {
            "id": 2,
            "depth": 1,
            "content": "reply",
            "children": [{"id": 9, "depth": 2, "content": "nested"}],
        }

        comment = parse_comment(raw)

        assert comment.children == []
        assert comment.created_at is None

    def test_skips_malformed_comments_and_replies(self, comments_response):
        data = comments_response["data"]
        data["comments"][0]["children"].append({"depth": 1, "content": "no id"})
        data["comments"].insert(1, {"content": "no id either"})

        page = parse_comments_page(data)

        assert [c.id for c in page.comments] == [12, 11]
        assert [c.id for c in page.comments[0].children] == [13]
