"""Tests for feed listing and internal ingestion endpoints."""

import uuid
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import asyncpg
import pytest

from conftest import SYSTEM_USER_ID, USER_ID
from feeds import repository
from feeds.service import UNKNOWN_SOURCE, source_from_url


def _feed_row(i: int, **overrides):
    row = {
        "feedId": str(uuid.UUID(int=i)),
        "userId": USER_ID,
        "source": "tmz.com",
        "title": f"Story {i}",
        "url": f"https://tmz.com/{i}",
        "content": "Summary",
        "imageFirebaseUrl": None,
        "timestamp": datetime(2025, 1, 26, 10, 30 - i, tzinfo=timezone.utc),
    }
    row.update(overrides)
    return row


@pytest.fixture
def repo():
    """Patch every feed repository coroutine."""
    names = ["count_feeds", "list_feeds", "insert_feed"]
    patchers = {name: patch(f"feeds.repository.{name}", new_callable=AsyncMock) for name in names}
    mocks = {name: p.start() for name, p in patchers.items()}
    mocks["count_feeds"].return_value = 0
    mocks["list_feeds"].return_value = []
    yield SimpleNamespace(**mocks)
    for p in patchers.values():
        p.stop()


class TestSourceFromUrl:
    @pytest.mark.parametrize(
        "url,expected",
        [
            ("https://www.tmz.com/x", "tmz.com"),
            ("https://tmz.com/article-url", "tmz.com"),
            ("http://WWW.CNN.com/a?b=c", "cnn.com"),
            ("https://news.www.example.org/", "news.www.example.org"),
            ("not a url", UNKNOWN_SOURCE),
            ("http://[::1", UNKNOWN_SOURCE),
        ],
    )
    def test_source(self, url, expected):
        assert source_from_url(url) == expected


class TestPublicFeeds:
    def test_scoped_to_system_user(self, client, repo):
        repo.count_feeds.return_value = 45
        repo.list_feeds.return_value = [_feed_row(1), _feed_row(2)]

        resp = client.get("/api/feeds/public", params={"page": 1, "limit": 20})

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert len(body["data"]) == 2
        assert body["pagination"] == {
            "page": 1,
            "totalPages": 3,
            "totalCount": 45,
            "hasNextPage": True,
            "hasPreviousPage": False,
            "limit": 20,
        }
        system_user = uuid.UUID(SYSTEM_USER_ID)
        repo.count_feeds.assert_awaited_once_with(user_id=system_user)
        repo.list_feeds.assert_awaited_once_with(
            user_id=system_user,
            limit=20,
            offset=0,
            columns=repository.PUBLIC_FEED_COLUMNS,
        )

    def test_limit_over_max_is_400(self, client, repo):
        resp = client.get("/api/feeds/public", params={"limit": 101})

        assert resp.status_code == 400
        body = resp.json()
        assert body["success"] is False
        assert "between 1 and 100" in body["message"]
        assert body["error"]["code"] == "INVALID_PAGINATION"
        repo.count_feeds.assert_not_called()

    def test_count_failure_is_500(self, client, repo):
        repo.count_feeds.side_effect = asyncpg.PostgresError("relation does not exist")

        resp = client.get("/api/feeds/public")

        assert resp.status_code == 500
        body = resp.json()
        assert body["error"]["code"] == "INTERNAL_ERROR"
        assert "relation" not in resp.text
        repo.list_feeds.assert_not_called()


class TestUserFeeds:
    def test_default_pagination(self, client, repo):
        repo.count_feeds.return_value = 2
        repo.list_feeds.return_value = [_feed_row(1), _feed_row(2)]

        resp = client.get(f"/api/feeds/{USER_ID}")

        assert resp.status_code == 200
        body = resp.json()
        assert body["userId"] == USER_ID
        assert [f["title"] for f in body["feeds"]] == ["Story 1", "Story 2"]
        assert body["pagination"]["limit"] == 20
        repo.count_feeds.assert_awaited_once_with(user_id=uuid.UUID(USER_ID))
        assert repo.list_feeds.call_args.kwargs["user_id"] == uuid.UUID(USER_ID)

    def test_page_two_offset(self, client, repo):
        repo.count_feeds.return_value = 47

        resp = client.get(f"/api/feeds/{USER_ID}", params={"page": 2, "limit": 10})

        assert resp.status_code == 200
        pagination = resp.json()["pagination"]
        assert pagination["page"] == 2
        assert pagination["totalPages"] == 5
        assert pagination["hasPreviousPage"] is True
        assert repo.list_feeds.call_args.kwargs["offset"] == 10
        assert repo.list_feeds.call_args.kwargs["limit"] == 10

    def test_user_with_no_feeds(self, client, repo):
        resp = client.get(f"/api/feeds/{USER_ID}")

        assert resp.status_code == 200
        body = resp.json()
        assert body["feeds"] == []
        assert body["pagination"]["totalCount"] == 0
        assert body["pagination"]["totalPages"] == 0
        assert body["pagination"]["hasNextPage"] is False
        assert body["pagination"]["hasPreviousPage"] is False

    def test_page_past_the_end_is_empty(self, client, repo):
        repo.count_feeds.return_value = 5

        resp = client.get(f"/api/feeds/{USER_ID}", params={"page": 9999, "limit": 10})

        assert resp.status_code == 200
        body = resp.json()
        assert body["feeds"] == []
        assert body["pagination"]["hasNextPage"] is False

    def test_non_numeric_pagination_uses_defaults(self, client, repo):
        resp = client.get(f"/api/feeds/{USER_ID}", params={"page": "abc", "limit": "xyz"})

        assert resp.status_code == 200
        pagination = resp.json()["pagination"]
        assert pagination["page"] == 1
        assert pagination["limit"] == 20

    @pytest.mark.parametrize("params", [{"page": 0}, {"page": -1}, {"limit": 0}])
    def test_out_of_range_pagination_is_400(self, client, repo, params):
        resp = client.get(f"/api/feeds/{USER_ID}", params=params)
        assert resp.status_code == 400

    def test_invalid_user_id_is_400(self, client, repo):
        resp = client.get("/api/feeds/invalid-uuid-format")

        assert resp.status_code == 400
        assert resp.json()["message"] == "userId must be a valid UUID format"
        repo.count_feeds.assert_not_called()

    def test_fetch_failure_is_500(self, client, repo):
        repo.count_feeds.return_value = 3
        repo.list_feeds.side_effect = OSError("connection refused")

        resp = client.get(f"/api/feeds/{USER_ID}")

        assert resp.status_code == 500
        assert resp.json()["message"] == "Unable to retrieve feeds"


class TestAllFeeds:
    def test_unfiltered(self, client, repo):
        repo.count_feeds.return_value = 125
        repo.list_feeds.return_value = [_feed_row(1)]

        resp = client.get("/api/feeds", params={"page": 1, "limit": 50})

        assert resp.status_code == 200
        body = resp.json()
        assert body["message"] == "All feeds retrieved successfully"
        assert body["pagination"]["totalPages"] == 3
        repo.count_feeds.assert_awaited_once_with(user_id=None)
        assert repo.list_feeds.call_args.kwargs["user_id"] is None

    def test_invalid_pagination(self, client, repo):
        resp = client.get("/api/feeds", params={"limit": 500})
        assert resp.status_code == 400


class TestIngestFeed:
    def _payload(self, **overrides):
        payload = {
            "title": "  Celebrity News Update  ",
            "summary": "AI-generated summary of the article...",
            "category": "Celebrities",
            "url": "https://www.tmz.com/x",
        }
        payload.update(overrides)
        return payload

    def test_creates_feed(self, client, auth_headers, repo):
        created_at = datetime(2025, 1, 26, 10, 30, tzinfo=timezone.utc)
        repo.insert_feed.return_value = {
            "feedId": "0b6c1d5e-8c7a-4b52-9a43-6b0f9f1c2d3e",
            "title": "Celebrity News Update",
            "source": "tmz.com",
            "timestamp": created_at,
        }

        resp = client.post("/api/internal/feeds", json=self._payload(), headers=auth_headers)

        assert resp.status_code == 201
        body = resp.json()
        assert body["message"] == "Feed created successfully"
        assert body["data"]["source"] == "tmz.com"
        assert body["data"]["feedId"] == "0b6c1d5e-8c7a-4b52-9a43-6b0f9f1c2d3e"
        kwargs = repo.insert_feed.call_args.kwargs
        assert kwargs["user_id"] == uuid.UUID(SYSTEM_USER_ID)
        assert kwargs["source"] == "tmz.com"
        assert kwargs["title"] == "Celebrity News Update"
        assert kwargs["content"] == "AI-generated summary of the article..."
        assert kwargs["timestamp"].tzinfo is not None

    def test_unparseable_url_uses_unknown_source(self, client, auth_headers, repo):
        repo.insert_feed.return_value = {
            "feedId": "0b6c1d5e-8c7a-4b52-9a43-6b0f9f1c2d3e",
            "title": "t",
            "source": UNKNOWN_SOURCE,
            "timestamp": datetime.now(timezone.utc),
        }

        resp = client.post("/api/internal/feeds", json=self._payload(url="nonsense"), headers=auth_headers)

        assert resp.status_code == 201
        assert repo.insert_feed.call_args.kwargs["source"] == UNKNOWN_SOURCE

    def test_lists_missing_fields(self, client, auth_headers, repo):
        resp = client.post(
            "/api/internal/feeds",
            json={"title": "Only a title", "url": "   "},
            headers=auth_headers,
        )

        assert resp.status_code == 400
        fields = {err["field"] for err in resp.json()["errors"]}
        assert fields == {"summary", "category", "url"}
        repo.insert_feed.assert_not_called()

    def test_title_too_long_echoes_length(self, client, auth_headers, repo):
        resp = client.post("/api/internal/feeds", json=self._payload(title="T" * 612), headers=auth_headers)

        assert resp.status_code == 400
        assert resp.json()["errors"] == [
            {"field": "title", "message": "Title too long (max 500 characters, received 612)"}
        ]
        assert resp.json()["error"]["length"] == 612

    def test_summary_too_long(self, client, auth_headers, repo):
        resp = client.post("/api/internal/feeds", json=self._payload(summary="S" * 10_001), headers=auth_headers)

        assert resp.status_code == 400
        assert "received 10001" in resp.json()["errors"][0]["message"]
        assert resp.json()["error"]["length"] == 10_001

    def test_malformed_json_is_400(self, client, auth_headers, repo):
        resp = client.post(
            "/api/internal/feeds",
            content=b"{not json",
            headers={**auth_headers, "Content-Type": "application/json"},
        )
        assert resp.status_code == 400
        assert resp.json()["errors"] == [{"field": "body", "message": "Request body must be valid JSON"}]

    def test_missing_system_user_is_400(self, client, auth_headers, repo):
        repo.insert_feed.side_effect = asyncpg.ForeignKeyViolationError("violates foreign key constraint")

        resp = client.post("/api/internal/feeds", json=self._payload(), headers=auth_headers)

        assert resp.status_code == 400
        body = resp.json()
        assert body["error"]["code"] == "INVALID_USER_REFERENCE"
        assert SYSTEM_USER_ID in body["message"]

    def test_other_insert_failure_is_500(self, client, auth_headers, repo):
        repo.insert_feed.side_effect = asyncpg.PostgresError("disk full")

        resp = client.post("/api/internal/feeds", json=self._payload(), headers=auth_headers)

        assert resp.status_code == 500
        assert resp.json()["error"]["code"] == "INTERNAL_ERROR"


class TestScope:
    def test_count_and_page_share_the_predicate(self):
        user_id = uuid.UUID(USER_ID)
        assert repository._scope(user_id) == ('WHERE "userId" = $1', [user_id])
        assert repository._scope(None) == ("", [])
