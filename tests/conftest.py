"""Shared test fixtures."""

import json
from pathlib import Path

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv("MEMORY_JOURNAL_BASE_URL", raising=False)
    monkeypatch.delenv("MEMORY_JOURNAL_TOKEN", raising=False)


@pytest.fixture
def search_response() -> dict:
    """Load the sample search response (page 0 of 4)."""
    with open(FIXTURES_DIR / "search_response.json") as f:
        return json.load(f)


@pytest.fixture
def comments_response() -> dict:
    """Load the sample first page of a comment thread."""
    with open(FIXTURES_DIR / "comments_response.json") as f:
        return json.load(f)


@pytest.fixture
def envelope():
    """Wrap a payload the way the API does."""

    def _envelope(data, status_code: int = 200, message: str = "OK") -> dict:
        return {"statusCode": status_code, "message": message, "data": data}

    return _envelope


@pytest.fixture
def memory_page():
    """Build a page of raw memories with ids counting down from ``start``."""

    def _memory_page(start: int, count: int) -> list[dict]:
        return [
            {
                "id": memory_id,
                "title": f"Memory {memory_id}",
                "content": f"Something that happened on day {memory_id}",
                "locationName": "Seoul",
                "memorableDate": "2025-02-10",
                "memoryType": "PUBLIC",
                "hashtags": ["trip"],
                "files": [{"fileUrl": f"https://cdn.example.com/{memory_id}.jpg"}],
                "member": {"id": 7, "nickname": "kimchi", "name": "Kim"},
            }
            for memory_id in range(start, start - count, -1)
        ]

    return _memory_page


@pytest.fixture
def raw_comment():
    """Build a raw comment as returned by the create endpoint."""

    def _raw_comment(comment_id: int, content: str, parent_id: int | None = None) -> dict:
        return {
            "id": comment_id,
            "content": content,
            "depth": 0 if parent_id is None else 1,
            "memoryId": 42,
            "member": {"id": 7, "nickname": "kimchi", "name": "Kim"},
            "parentCommentId": parent_id,
            "children": [],
            "childrenCount": 0,
            "createDate": "2025-02-11T09:00:00",
            "updateDate": "2025-02-11T09:00:00",
            "isDeleted": False,
            "isAuthor": True,
        }

    return _raw_comment
