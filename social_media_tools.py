"""
GoHighLevel Social Media Tools for the GHL MCP Server

This module exposes the Social Planner API as MCP tools.

Capabilities:
- Search, create, read, update and delete social posts
- Connected accounts and groups
- CSV bulk import
- Categories and tags
- OAuth account connection per platform

Authentication: Uses the shared GHLClient (Bearer token, see ghl_client.py).
Requires socialplanner/post, socialplanner/account, socialplanner/csv,
socialplanner/category, socialplanner/tag and socialplanner/oauth scopes.

Post responses are nested under "results" by the API; the helpers below
unwrap them.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, List, Literal

from pydantic import BaseModel, Field

from app.core.tooling import ToolModule, ToolSpec, envelope, hint

logger = logging.getLogger(__name__)

BASE = "/social-media-posting/{locationId}"
DEFAULT_AUTHOR = "mcp-server"

PostType = Literal["post", "story", "reel"]
PostStatus = Literal["draft", "scheduled", "published"]
Platform = Literal["google", "facebook", "instagram", "linkedin", "twitter", "tiktok", "tiktok-business"]


# =============================================================================
# Input Models
# =============================================================================

class MediaItem(BaseModel):
    url: str = Field(description="Media URL (must be publicly accessible)")
    caption: Optional[str] = Field(None, description="Media caption")
    type: Optional[str] = Field(None, description='Media MIME type (e.g., "image/png", "video/mp4")')


class TikTokPostDetails(BaseModel):
    privacyLevel: Optional[str] = Field(None, description='Privacy level (e.g., "PUBLIC_TO_EVERYONE")')
    promoteOtherBrand: Optional[bool] = None
    enableComment: Optional[bool] = None
    enableDuet: Optional[bool] = None
    enableStitch: Optional[bool] = None
    videoDisclosure: Optional[bool] = None
    promoteYourBrand: Optional[bool] = None


class GmbPostDetails(BaseModel):
    gmbEventType: Optional[Literal["STANDARD", "EVENT", "OFFER"]] = None
    title: Optional[str] = None
    actionType: Optional[Literal["book", "order", "shop", "learn_more", "sign_up", "call"]] = None


class SearchPostsParams(BaseModel):
    type: Optional[Literal["recent", "all", "scheduled", "draft", "failed", "in_review",
                           "published", "in_progress", "deleted"]] = Field(
        None, description="Filter posts by status (default: all)"
    )
    accounts: Optional[str] = Field(None, description="Comma-separated account IDs to filter by")
    skip: Optional[int] = Field(None, ge=0, description="Number of posts to skip for pagination (default: 0)")
    limit: Optional[int] = Field(None, ge=1, description="Number of posts to return (default: 10)")
    fromDate: Optional[str] = Field(None, description="Start date in ISO format (default depends on type)")
    toDate: Optional[str] = Field(None, description="End date in ISO format (default depends on type)")
    includeUsers: Optional[bool] = Field(None, description="Include user data in response (default: true)")
    postType: Optional[PostType] = Field(None, description="Type of post to search for")


class PostContent(BaseModel):
    accountIds: List[str] = Field(description="Social media account IDs to post to (get from get_social_accounts)")
    summary: str = Field(description="Post content/caption text")
    type: Optional[PostType] = Field(None, description='Type of content (default: "post")')
    media: Optional[List[MediaItem]] = Field(None, description="Media attachments (images/videos)")
    status: Optional[PostStatus] = Field(None, description="Post status")
    scheduleDate: Optional[str] = Field(None, description='Schedule date in ISO 8601 format (e.g., "2025-10-24T14:00:00.000Z")')
    followUpComment: Optional[str] = Field(None, description="Auto-comment to post after publishing")
    tags: Optional[List[str]] = Field(None, description="Tag IDs to associate with the post")
    categoryId: Optional[str] = Field(None, description="Category ID for organization")
    userId: Optional[str] = Field(None, description="User ID")
    createdBy: Optional[str] = Field(None, description="User ID who created the post")
    tiktokPostDetails: Optional[TikTokPostDetails] = Field(None, description="TikTok-specific settings (TikTok accounts only)")
    gmbPostDetails: Optional[GmbPostDetails] = Field(None, description="Google My Business settings (GMB accounts only)")


class PostIdParams(BaseModel):
    postId: str = Field(description="Social media post ID")


class UpdatePostParams(PostContent):
    postId: str = Field(description="Social media post ID to update")
    scheduleTimeUpdated: Optional[bool] = Field(None, description="Set to true when changing schedule time")


class BulkDeletePostsParams(BaseModel):
    postIds: List[str] = Field(min_length=1, max_length=50, description="Post IDs to delete (max 50)")


class NoParams(BaseModel):
    pass


class DeleteAccountParams(BaseModel):
    accountId: str = Field(description="Account ID to delete")
    companyId: Optional[str] = Field(None, description="Company ID")
    userId: Optional[str] = Field(None, description="User ID")


class UploadCsvParams(BaseModel):
    file: str = Field(description="CSV file data (base64 or file path)")


class CsvStatusParams(BaseModel):
    skip: Optional[int] = Field(None, ge=0, description="Number to skip (default: 0)")
    limit: Optional[int] = Field(None, ge=1, description="Number to return (default: 10)")
    includeUsers: Optional[bool] = Field(None, description="Include user data")
    userId: Optional[str] = Field(None, description="Filter by user ID")


class SetCsvAccountsParams(BaseModel):
    accountIds: List[str] = Field(description="Account IDs for CSV import")
    filePath: str = Field(description="CSV file path")
    rowsCount: int = Field(description="Number of rows to process")
    fileName: str = Field(description="CSV file name")
    approver: Optional[str] = Field(None, description="Approver user ID")
    userId: Optional[str] = Field(None, description="User ID")


class SearchTextParams(BaseModel):
    searchText: Optional[str] = Field(None, description="Search text")
    limit: Optional[int] = Field(None, ge=1, description="Number to return (default: 10)")
    skip: Optional[int] = Field(None, ge=0, description="Number to skip (default: 0)")


class CategoryIdParams(BaseModel):
    categoryId: str = Field(description="Category ID")


class TagIdsParams(BaseModel):
    tagIds: List[str] = Field(min_length=1, description="Tag IDs")


class StartOAuthParams(BaseModel):
    platform: Platform = Field(description="Social media platform")
    userId: str = Field(description="User ID initiating OAuth")
    page: Optional[str] = Field(None, description="Page context")
    reconnect: Optional[bool] = Field(None, description="Whether this is a reconnection")


class PlatformAccountsParams(BaseModel):
    platform: Platform = Field(description="Social media platform")
    accountId: str = Field(description="OAuth account ID returned by the OAuth flow")


# =============================================================================
# Helper Functions
# =============================================================================

def _iso(moment: datetime) -> str:
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def post_window(post_type: Optional[str], now: Optional[datetime] = None):
    """Default (fromDate, toDate) for a post search.

    Scheduled posts live in the future, drafts can be anywhere, and everything
    else is looked up over the last 30 days.
    """
    now = now or datetime.now(timezone.utc)
    year = timedelta(days=365)
    if post_type == "scheduled":
        return _iso(now), _iso(now + year)
    if post_type == "draft":
        return _iso(now - year), _iso(now + year)
    return _iso(now - timedelta(days=30)), _iso(now)


def _search_body(args: dict) -> dict:
    start, end = post_window(args.get("type"))
    args.setdefault("fromDate", start)
    args.setdefault("toDate", end)
    args["type"] = args.get("type", "all")
    args["skip"] = str(args.get("skip", 0))
    args["limit"] = str(args.get("limit", 10))
    args["includeUsers"] = str(args.get("includeUsers", True)).lower()
    return args


def _author(args: dict) -> dict:
    """The API rejects posts unless both userId and createdBy are non-empty."""
    args["userId"] = args.get("userId") or args.get("createdBy") or DEFAULT_AUTHOR
    args["createdBy"] = args.get("createdBy") or args["userId"]
    return args


def _new_post(args: dict) -> dict:
    args.setdefault("type", "post")
    args.setdefault("media", [])
    return _author(args)


def _results(data) -> dict:
    if not isinstance(data, dict):
        return {}
    return data.get("results") or data


def _post_of(data):
    return _results(data).get("post") or (data.get("post") if isinstance(data, dict) else None)


def _search_result(data, args):
    results = _results(data)
    posts = results.get("posts") or []
    count = results.get("count") or 0
    return {
        "success": True,
        "posts": posts,
        "count": count,
        "message": f"Found {count} social media posts ({args['fromDate']} to {args['toDate']})",
    }


def _created_result(data, args):
    post = _post_of(data)
    suffix = {"scheduled": " and scheduled", "draft": " as draft"}.get(args.get("status"), "")
    return {
        "success": True,
        "post": post,
        "postId": post.get("_id") if isinstance(post, dict) else None,
        "message": f"Social media post created successfully{suffix}",
    }


def _accounts_result(data, args):
    results = _results(data)
    accounts = results.get("accounts") or []
    groups = results.get("groups") or []
    return {
        "success": True,
        "accounts": accounts,
        "groups": groups,
        "message": f"Retrieved {len(accounts)} social media accounts and {len(groups)} groups",
    }


def _listing(key: str, label: str):
    def reshape(data, args):
        results = _results(data)
        count = results.get("count") or 0
        return {
            "success": True,
            key: results.get(key) or [],
            "count": count,
            "message": f"Retrieved {count} {label}",
        }
    return reshape


def _platform_resource(args: dict) -> dict:
    args["resource"] = "locations" if args["platform"] == "google" else "accounts"
    return args


# =============================================================================
# Tool Module
# =============================================================================

class SocialMediaTools(ToolModule):
    family = "social media"
    subject = "social post"
    lookup = "search_social_posts"

    def build_specs(self):
        account = dict(subject="social account", lookup="get_social_accounts")
        return [
            # -----------------------------------------------------------------
            # Posts
            # -----------------------------------------------------------------
            ToolSpec(
                name="search_social_posts",
                description="Search social posts. Without dates, scheduled posts are searched over the next year, "
                            "drafts over +/- one year, everything else over the last 30 days.",
                params=SearchPostsParams,
                method="POST", path=f"{BASE}/posts/list",
                location="locationId",
                transform=_search_body,
                reshape=_search_result,
                read_only=True, idempotent=True,
            ),
            ToolSpec(
                name="create_social_post",
                description="Create a social post on one or more connected accounts. "
                            "Use status draft or scheduled (with scheduleDate) to avoid publishing immediately.",
                params=PostContent,
                method="POST", path=f"{BASE}/posts",
                location="locationId",
                transform=_new_post,
                reshape=_created_result,
                hints=(
                    hint((400, 422), "Invalid social post.\nCommon issues:\n"
                                     "- accountIds must come from get_social_accounts\n"
                                     "- scheduled posts need an ISO 8601 scheduleDate in the future\n"
                                     "- media URLs must be publicly accessible"),
                ),
                **account,
            ),
            ToolSpec(
                name="get_social_post",
                description="Get a social post by ID",
                params=PostIdParams,
                path=f"{BASE}/posts/{{postId}}",
                location="locationId",
                reshape=lambda data, args: {
                    "success": True,
                    "post": _post_of(data),
                    "message": f"Retrieved social media post {args['postId']}",
                },
            ),
            ToolSpec(
                name="update_social_post",
                description="Update a social post. Status, type, media and schedule are kept from the "
                            "existing post unless provided, so a draft is never published by accident.",
                params=UpdatePostParams,
                method="PUT", path=f"{BASE}/posts/{{postId}}",
                location="locationId",
                handler=self._update_post,
            ),
            ToolSpec(
                name="delete_social_post",
                description="Delete a social post",
                params=PostIdParams,
                method="DELETE", path=f"{BASE}/posts/{{postId}}",
                location="locationId",
                reshape=lambda data, args: envelope(
                    None, f"Social media post {args['postId']} deleted successfully"),
            ),
            ToolSpec(
                name="bulk_delete_social_posts",
                description="Delete up to 50 social posts in one call",
                params=BulkDeletePostsParams,
                method="POST", path=f"{BASE}/posts/bulk-delete",
                location="locationId",
                reshape=lambda data, args: envelope(
                    None, f"{_results(data).get('deletedCount') or 0} social media posts deleted successfully",
                    deletedCount=_results(data).get("deletedCount") or 0),
                destructive=True,
            ),

            # -----------------------------------------------------------------
            # Accounts
            # -----------------------------------------------------------------
            ToolSpec(
                name="get_social_accounts",
                description="List connected social media accounts and groups",
                params=NoParams,
                path=f"{BASE}/accounts",
                location="locationId",
                reshape=_accounts_result,
            ),
            ToolSpec(
                name="delete_social_account",
                description="Disconnect a social media account",
                params=DeleteAccountParams,
                method="DELETE", path=f"{BASE}/accounts/{{accountId}}",
                location="locationId",
                message="Social media account {accountId} deleted successfully",
                **account,
            ),

            # -----------------------------------------------------------------
            # CSV import
            # -----------------------------------------------------------------
            ToolSpec(
                name="upload_social_csv",
                description="Upload a CSV of posts for bulk import",
                params=UploadCsvParams,
                method="POST", path=f"{BASE}/csv",
                location="locationId",
                reshape=lambda data, args: envelope(data, "CSV file uploaded successfully"),
            ),
            ToolSpec(
                name="get_csv_upload_status",
                description="List CSV imports and their processing status",
                params=CsvStatusParams,
                path=f"{BASE}/csv",
                location="locationId",
                defaults={"skip": 0, "limit": 10},
                reshape=lambda data, args: envelope(data, "Retrieved CSV upload status"),
            ),
            ToolSpec(
                name="set_csv_accounts",
                description="Assign accounts to an uploaded CSV before processing",
                params=SetCsvAccountsParams,
                method="POST", path=f"{BASE}/set-accounts",
                location="locationId",
                reshape=lambda data, args: envelope(
                    data, f"CSV accounts set for {args['rowsCount']} rows of {args['fileName']}"),
                **account,
            ),

            # -----------------------------------------------------------------
            # Categories and tags
            # -----------------------------------------------------------------
            ToolSpec(
                name="get_social_categories",
                description="List social post categories",
                params=SearchTextParams,
                path=f"{BASE}/categories",
                location="locationId",
                reshape=_listing("categories", "social media categories"),
            ),
            ToolSpec(
                name="get_social_category",
                description="Get a social post category by ID",
                params=CategoryIdParams,
                path=f"{BASE}/categories/{{categoryId}}",
                location="locationId",
                subject="category", lookup="get_social_categories",
                reshape=lambda data, args: {
                    "success": True,
                    "category": _results(data).get("category"),
                    "message": f"Retrieved social media category {args['categoryId']}",
                },
            ),
            ToolSpec(
                name="get_social_tags",
                description="List social post tags",
                params=SearchTextParams,
                path=f"{BASE}/tags",
                location="locationId",
                reshape=_listing("tags", "social media tags"),
            ),
            ToolSpec(
                name="get_social_tags_by_ids",
                description="Get social post tags by their IDs",
                params=TagIdsParams,
                method="POST", path=f"{BASE}/tags/details",
                location="locationId",
                reshape=_listing("tags", "social media tags by IDs"),
                read_only=True, idempotent=True,
            ),

            # -----------------------------------------------------------------
            # OAuth
            # -----------------------------------------------------------------
            ToolSpec(
                name="start_social_oauth",
                description="Start the OAuth flow to connect a social media platform",
                params=StartOAuthParams,
                path="/social-media-posting/oauth/{platform}/start",
                location="locationId",
                reshape=lambda data, args: {
                    "success": True,
                    "oauthData": data,
                    "message": f"OAuth process started for {args['platform']}",
                },
                read_only=False,
            ),
            ToolSpec(
                name="get_platform_accounts",
                description="List the pages/profiles/locations available on a platform after OAuth",
                params=PlatformAccountsParams,
                path="/social-media-posting/oauth/{locationId}/{platform}/{resource}/{accountId}",
                location="locationId",
                transform=_platform_resource,
                id_field="accountId",
                reshape=lambda data, args: {
                    "success": True,
                    "platformAccounts": data,
                    "message": f"Retrieved {args['platform']} accounts for OAuth ID {args['accountId']}",
                },
                subject="OAuth account",
            ),
        ]

    # -------------------------------------------------------------------------
    # Custom handlers
    # -------------------------------------------------------------------------

    async def _update_post(self, spec: ToolSpec, values: dict) -> dict:
        """Read the existing post, then PUT the merged post.

        Nothing is rolled back if the update fails after the read.
        """
        path, _, _ = self.prepare(spec, {"postId": values["postId"]})
        existing = _post_of(await self.send(spec, values, "GET", path)) or {}

        body = {
            "accountIds": values["accountIds"],
            "summary": values["summary"],
            "type": values.get("type") or existing.get("type") or "post",
            "media": values.get("media") or existing.get("media") or [],
            "status": values.get("status") or existing.get("status") or "draft",
        }
        body["userId"] = values.get("userId") or DEFAULT_AUTHOR
        body["createdBy"] = values.get("createdBy") or values.get("userId") or DEFAULT_AUTHOR
        for key in ("scheduleDate", "followUpComment", "tags", "categoryId",
                    "scheduleTimeUpdated", "tiktokPostDetails", "gmbPostDetails"):
            if key in values:
                body[key] = values[key]
        if "scheduleDate" not in body and existing.get("scheduleDate"):
            body["scheduleDate"] = existing["scheduleDate"]

        data = await self.send(spec, values, "PUT", path, body=body)
        post = _post_of(data)
        return {
            "success": True,
            "post": post,
            "postId": post.get("_id") if isinstance(post, dict) else values["postId"],
            "message": "Social media post updated successfully" + (" and rescheduled" if values.get("scheduleDate") else ""),
        }
