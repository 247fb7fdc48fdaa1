"""Tests for blog tools."""

import pytest

from app.core.tooling import GHLToolError
from blog_tools import BlogTools
from conftest import LOCATION_ID, fail, ok

NEW_POST = {
    "title": "Spring Sale",
    "blogId": "blog-1",
    "content": "<p>Hello</p>",
    "description": "Deals",
    "imageUrl": "https://example.com/a.png",
    "imageAltText": "Banner",
    "urlSlug": "spring-sale",
    "author": "auth-1",
    "categories": ["cat-1"],
}


@pytest.fixture
def blogs(client):
    return BlogTools(client)


class TestBlogTools:
    async def test_create_post_defaults(self, blogs, client):
        client.queue(ok({"data": {"_id": "post-1"}}))

        result = await blogs.execute_tool("create_blog_post", NEW_POST)

        body = client.last.json_body
        assert client.last.endpoint == "/blogs/posts"
        assert body["rawHTML"] == "<p>Hello</p>"
        assert "content" not in body
        assert body["status"] == "DRAFT"
        assert body["tags"] == []
        assert body["publishedAt"].endswith("Z")
        assert body["locationId"] == LOCATION_ID
        assert result["message"] == 'Blog post "Spring Sale" created successfully with ID: post-1'

    async def test_create_post_with_null_data(self, blogs, client):
        client.queue(ok({"data": None}))

        result = await blogs.execute_tool("create_blog_post", NEW_POST)

        assert result["message"] == 'Blog post "Spring Sale" created successfully with ID: unknown'

    async def test_duplicate_slug_on_conflict(self, blogs, client):
        client.queue(fail(409, "Conflict"))

        with pytest.raises(GHLToolError, match='Blog post slug already exists: "spring-sale"'):
            await blogs.execute_tool("create_blog_post", NEW_POST)

    async def test_duplicate_slug_on_validation_message(self, blogs, client):
        client.queue(fail(400, "URL slug already exists"))

        with pytest.raises(GHLToolError, match="check_url_slug"):
            await blogs.execute_tool("create_blog_post", NEW_POST)

    async def test_other_validation_errors_are_generic(self, blogs, client):
        client.queue(fail(400, "imageUrl must be a URL"))

        with pytest.raises(GHLToolError) as excinfo:
            await blogs.execute_tool("create_blog_post", NEW_POST)

        assert "check_url_slug" not in str(excinfo.value)
        assert "Invalid request for create_blog_post" in str(excinfo.value)

    @pytest.mark.parametrize("exists, message", [
        (True, 'URL slug "spring-sale" is already in use'),
        (False, 'URL slug "spring-sale" is available'),
    ])
    async def test_check_url_slug(self, blogs, client, exists, message):
        client.queue(ok({"exists": exists}))

        result = await blogs.execute_tool("check_url_slug", {"urlSlug": "spring-sale"})

        assert client.last.endpoint == "/blogs/posts/url-slug-exists"
        assert client.last.params == {"urlSlug": "spring-sale", "locationId": LOCATION_ID}
        assert result["available"] is not exists
        assert result["message"] == message

    async def test_posts_listing(self, blogs, client):
        client.queue(ok({"blogs": [{"_id": "p1"}, {"_id": "p2"}]}))

        result = await blogs.execute_tool("get_blog_posts", {"blogId": "blog-1"})

        assert client.last.params["limit"] == 10
        assert client.last.params["offset"] == 0
        assert result["posts"] == [{"_id": "p1"}, {"_id": "p2"}]
        assert result["message"] == "Retrieved 2 blog posts from blog blog-1"
