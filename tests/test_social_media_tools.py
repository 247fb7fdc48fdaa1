"""Tests for social media posting tools."""

from datetime import datetime, timezone

import pytest

from app.core.tooling import GHLToolError
from conftest import LOCATION_ID, fail, ok
from social_media_tools import SocialMediaTools, post_window

NOW = datetime(2025, 10, 20, 12, 0, 0, tzinfo=timezone.utc)
BASE = f"/social-media-posting/{LOCATION_ID}"


@pytest.fixture
def social(client):
    return SocialMediaTools(client)


class TestPostWindow:
    def test_scheduled_looks_ahead_one_year(self):
        assert post_window("scheduled", NOW) == ("2025-10-20T12:00:00.000Z", "2026-10-20T12:00:00.000Z")

    def test_draft_spans_two_years(self):
        assert post_window("draft", NOW) == ("2024-10-20T12:00:00.000Z", "2026-10-20T12:00:00.000Z")

    @pytest.mark.parametrize("post_type", [None, "all", "published", "failed"])
    def test_everything_else_is_last_30_days(self, post_type):
        assert post_window(post_type, NOW) == ("2025-09-20T12:00:00.000Z", "2025-10-20T12:00:00.000Z")


class TestSearch:
    async def test_defaults_are_sent_as_strings(self, social, client):
        client.queue(ok({"results": {"posts": [{"_id": "p1"}], "count": 1}}))

        result = await social.execute_tool("search_social_posts", {"fromDate": "2025-01-01T00:00:00.000Z",
                                                                   "toDate": "2025-02-01T00:00:00.000Z"})

        assert client.last.method == "POST"
        assert client.last.endpoint == f"{BASE}/posts/list"
        assert client.last.json_body == {
            "fromDate": "2025-01-01T00:00:00.000Z",
            "toDate": "2025-02-01T00:00:00.000Z",
            "type": "all",
            "skip": "0",
            "limit": "10",
            "includeUsers": "true",
        }
        assert result["count"] == 1
        assert result["message"] == "Found 1 social media posts (2025-01-01T00:00:00.000Z to 2025-02-01T00:00:00.000Z)"

    async def test_missing_dates_are_filled(self, social, client):
        client.queue(ok({"results": {"posts": [], "count": 0}}))

        await social.execute_tool("search_social_posts", {"type": "scheduled"})

        body = client.last.json_body
        assert body["fromDate"] < body["toDate"]
        assert body["fromDate"].endswith("Z")


class TestCreatePost:
    async def test_author_defaults(self, social, client):
        client.queue(ok({"results": {"post": {"_id": "p1"}}}))

        await social.execute_tool("create_social_post", {"accountIds": ["acc-1"], "summary": "Hello"})

        body = client.last.json_body
        assert client.last.endpoint == f"{BASE}/posts"
        assert body["type"] == "post"
        assert body["media"] == []
        assert body["userId"] == "mcp-server"
        assert body["createdBy"] == "mcp-server"


class TestUpdatePost:
    async def test_keeps_existing_status_and_media(self, social, client):
        existing = {
            "_id": "p1",
            "status": "draft",
            "type": "reel",
            "media": [{"url": "https://cdn.example.com/a.mp4"}],
            "scheduleDate": "2025-11-01T10:00:00.000Z",
        }
        client.queue(ok({"results": {"post": existing}}), ok({"results": {"post": {**existing, "summary": "New"}}}))

        result = await social.execute_tool("update_social_post", {
            "postId": "p1",
            "accountIds": ["acc-1"],
            "summary": "New",
        })

        read, write = client.calls
        assert (read.method, read.endpoint) == ("GET", f"{BASE}/posts/p1")
        assert (write.method, write.endpoint) == ("PUT", f"{BASE}/posts/p1")
        assert write.json_body["status"] == "draft"
        assert write.json_body["type"] == "reel"
        assert write.json_body["media"] == existing["media"]
        assert write.json_body["scheduleDate"] == "2025-11-01T10:00:00.000Z"
        assert result["postId"] == "p1"
        assert result["message"] == "Social media post updated successfully"

    async def test_explicit_values_win(self, social, client):
        client.queue(ok({"results": {"post": {"_id": "p1", "status": "draft"}}}), ok({"results": {"post": {"_id": "p1"}}}))

        result = await social.execute_tool("update_social_post", {
            "postId": "p1",
            "accountIds": ["acc-1"],
            "summary": "Go",
            "status": "scheduled",
            "scheduleDate": "2025-12-01T09:00:00.000Z",
        })

        body = client.last.json_body
        assert body["status"] == "scheduled"
        assert body["scheduleDate"] == "2025-12-01T09:00:00.000Z"
        assert result["message"].endswith("and rescheduled")

    async def test_read_failure_skips_update(self, social, client):
        client.queue(fail(404, "Post not found"))

        with pytest.raises(GHLToolError):
            await social.execute_tool("update_social_post", {"postId": "p1", "accountIds": ["a"], "summary": "x"})

        assert len(client.calls) == 1


class TestPlatformAccounts:
    @pytest.mark.parametrize("platform, resource", [("google", "locations"), ("facebook", "accounts")])
    async def test_resource_by_platform(self, social, client, platform, resource):
        client.queue(ok({"results": {}}))

        await social.execute_tool("get_platform_accounts", {"platform": platform, "accountId": "oauth-1"})

        assert client.last.endpoint == (
            f"/social-media-posting/oauth/{LOCATION_ID}/{platform}/{resource}/oauth-1"
        )
