"""
GoHighLevel Blog Tools for the GHL MCP Server

This module exposes blog management as MCP tools.

Capabilities:
- Create and update blog posts (HTML content)
- List posts, blog sites, authors and categories
- Check URL slug availability

Authentication: Uses the shared GHLClient (Bearer token, see ghl_client.py).
Requires blogs/post.write, blogs/post-update.write, blogs/check-slug.readonly,
blogs/category.readonly and blogs/author.readonly scopes.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, List, Literal

from pydantic import BaseModel, Field

from app.core.tooling import ToolModule, ToolSpec, hint

logger = logging.getLogger(__name__)

BlogStatus = Literal["DRAFT", "PUBLISHED", "SCHEDULED", "ARCHIVED"]


# =============================================================================
# Input Models
# =============================================================================

class CreateBlogPostParams(BaseModel):
    title: str = Field(description="Blog post title")
    blogId: str = Field(description="Blog site ID (use get_blog_sites to find available blogs)")
    content: str = Field(description="Full HTML content of the blog post")
    description: str = Field(description="Short description/excerpt of the blog post")
    imageUrl: str = Field(description="URL of the featured image")
    imageAltText: str = Field(description="Alt text for the featured image (SEO and accessibility)")
    urlSlug: str = Field(description="URL slug (use check_url_slug to verify availability)")
    author: str = Field(description="Author ID (use get_blog_authors to find available authors)")
    categories: List[str] = Field(description="Category IDs (use get_blog_categories to find available categories)")
    tags: Optional[List[str]] = Field(None, description="Tags for the blog post")
    status: Optional[BlogStatus] = Field(None, description="Publication status (default: DRAFT)")
    canonicalLink: Optional[str] = Field(None, description="Canonical URL for SEO")
    publishedAt: Optional[str] = Field(None, description="ISO timestamp of the publication date (defaults to now)")


class UpdateBlogPostParams(BaseModel):
    postId: str = Field(description="Blog post ID to update")
    blogId: str = Field(description="Blog site ID that contains the post")
    title: Optional[str] = Field(None, description="Updated title")
    content: Optional[str] = Field(None, description="Updated HTML content")
    description: Optional[str] = Field(None, description="Updated description/excerpt")
    imageUrl: Optional[str] = Field(None, description="Updated featured image URL")
    imageAltText: Optional[str] = Field(None, description="Updated featured image alt text")
    urlSlug: Optional[str] = Field(None, description="Updated URL slug (use check_url_slug to verify availability)")
    author: Optional[str] = Field(None, description="Updated author ID")
    categories: Optional[List[str]] = Field(None, description="Updated category IDs")
    tags: Optional[List[str]] = Field(None, description="Updated tags")
    status: Optional[BlogStatus] = Field(None, description="Updated publication status")
    canonicalLink: Optional[str] = Field(None, description="Updated canonical URL")
    publishedAt: Optional[str] = Field(None, description="Updated ISO publication timestamp")


class GetBlogPostsParams(BaseModel):
    blogId: str = Field(description="Blog site ID to get posts from (use get_blog_sites to find available blogs)")
    limit: Optional[int] = Field(None, ge=1, le=100, description="Number of posts to retrieve (default: 10)")
    offset: Optional[int] = Field(None, ge=0, description="Number of posts to skip (default: 0)")
    searchTerm: Optional[str] = Field(None, description="Filter posts by title or content")
    status: Optional[BlogStatus] = Field(None, description="Filter by publication status")


class GetBlogSitesParams(BaseModel):
    limit: Optional[int] = Field(None, ge=1, le=100, description="Number of blogs to retrieve (default: 10)")
    skip: Optional[int] = Field(None, ge=0, description="Number of blogs to skip (default: 0)")
    searchTerm: Optional[str] = Field(None, description="Filter blogs by name")


class OffsetPageParams(BaseModel):
    limit: Optional[int] = Field(None, ge=1, le=100, description="Number of items to retrieve (default: 10)")
    offset: Optional[int] = Field(None, ge=0, description="Number of items to skip (default: 0)")


class CheckUrlSlugParams(BaseModel):
    urlSlug: str = Field(description="URL slug to check")
    postId: Optional[str] = Field(None, description="Post ID being updated (excluded from the check)")


# =============================================================================
# Helper Functions
# =============================================================================

def _as_raw_html(args: dict) -> dict:
    # The API stores post bodies as rawHTML
    if "content" in args:
        args["rawHTML"] = args.pop("content")
    return args


def _new_post(args: dict) -> dict:
    args.setdefault("status", "DRAFT")
    args.setdefault("tags", [])
    args.setdefault("publishedAt", datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"))
    return _as_raw_html(args)


def _listing(key: str, source: str, label: str):
    def reshape(data, args):
        items = data.get(source) or []
        suffix = f" from blog {args['blogId']}" if args.get("blogId") else ""
        return {
            "success": True,
            key: items,
            "count": len(items),
            "message": f"Retrieved {len(items)} {label}{suffix}",
        }
    return reshape


def _created_result(data, args):
    post = data.get("data") or data
    return {
        "success": True,
        "blogPost": post,
        "message": f"Blog post \"{args['title']}\" created successfully with ID: {post.get('_id', 'unknown')}",
    }


def _slug_result(data, args):
    exists = bool(data.get("exists"))
    slug = args["urlSlug"]
    return {
        "success": True,
        "urlSlug": slug,
        "exists": exists,
        "available": not exists,
        "message": f'URL slug "{slug}" is already in use' if exists else f'URL slug "{slug}" is available',
    }


DUPLICATE_SLUG = (
    'Blog post slug already exists: "{urlSlug}"\n'
    "The URL slug you provided is already in use by another blog post.\n"
    "Solutions:\n"
    "1. Use check_url_slug tool to find an available slug\n"
    "2. Choose a different slug manually\n"
    "3. Let GHL auto-generate a slug by using a unique title"
)


# =============================================================================
# Tool Module
# =============================================================================

class BlogTools(ToolModule):
    family = "blog"
    subject = "blog post"
    lookup = "get_blog_posts"

    def build_specs(self):
        return [
            ToolSpec(
                name="create_blog_post",
                description="Create a blog post. Status defaults to DRAFT and publishedAt to now.",
                params=CreateBlogPostParams,
                method="POST", path="/blogs/posts",
                location="locationId",
                transform=_new_post,
                reshape=_created_result,
                hints=(
                    hint(409, DUPLICATE_SLUG),
                    hint((400, 422), DUPLICATE_SLUG, contains=("slug", "already exists")),
                ),
                subject="blog", lookup="get_blog_sites",
            ),
            ToolSpec(
                name="update_blog_post",
                description="Update a blog post. Only provided fields change.",
                params=UpdateBlogPostParams,
                method="PUT", path="/blogs/posts/{postId}",
                location="locationId",
                transform=_as_raw_html,
                reshape=lambda data, args: {
                    "success": True,
                    "blogPost": data.get("updatedBlogPost") or data,
                    "message": "Blog post updated successfully",
                },
                hints=(hint(409, DUPLICATE_SLUG),),
            ),
            ToolSpec(
                name="get_blog_posts",
                description="List and search posts of a blog site",
                params=GetBlogPostsParams,
                path="/blogs/posts/all",
                location="locationId",
                defaults={"limit": 10, "offset": 0},
                reshape=_listing("posts", "blogs", "blog posts"),
                subject="blog", lookup="get_blog_sites",
            ),
            ToolSpec(
                name="get_blog_sites",
                description="List blog sites of the location",
                params=GetBlogSitesParams,
                path="/blogs/site/all",
                location="locationId",
                defaults={"skip": 0, "limit": 10},
                reshape=_listing("sites", "data", "blog sites"),
            ),
            ToolSpec(
                name="get_blog_authors",
                description="List blog authors (author IDs for create_blog_post)",
                params=OffsetPageParams,
                path="/blogs/authors",
                location="locationId",
                defaults={"limit": 10, "offset": 0},
                reshape=_listing("authors", "authors", "blog authors"),
            ),
            ToolSpec(
                name="get_blog_categories",
                description="List blog categories (category IDs for create_blog_post)",
                params=OffsetPageParams,
                path="/blogs/categories",
                location="locationId",
                defaults={"limit": 10, "offset": 0},
                reshape=_listing("categories", "categories", "blog categories"),
            ),
            ToolSpec(
                name="check_url_slug",
                description="Check whether a URL slug is free to use",
                params=CheckUrlSlugParams,
                path="/blogs/posts/url-slug-exists",
                location="locationId",
                reshape=_slug_result,
            ),
        ]
