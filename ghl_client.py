"""
GoHighLevel API Client for the GHL MCP Server

This module provides the single HTTP client shared by every GoHighLevel tool
module. It wraps the LeadConnector REST API v2 and always answers with an
ApiResponse envelope instead of raising on HTTP errors, so tool modules can
switch on the structured status code.

Capabilities:
- Bearer token authentication with the pinned API Version header
- Rate-limit retry (429) honoring Retry-After
- Structured error extraction (status code + message) from GHL error bodies
- Injected default location (sub-account) used by location-scoped tools

Authentication: Uses a Private Integration token or OAuth access token
(Bearer token).

Environment Variables:
    GHL_API_KEY: GoHighLevel Private Integration / OAuth access token
    GHL_LOCATION_ID: Default location (sub-account) ID
    GHL_BASE_URL: API base URL (default: https://services.leadconnectorhq.com)
    GHL_API_VERSION: Version header value (default: 2021-07-28)
    GHL_TIMEOUT: Request timeout in seconds (default: 30)
"""

import os
import json
import asyncio
import logging
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional, Any

import httpx
from pydantic import BaseModel

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://services.leadconnectorhq.com"
DEFAULT_API_VERSION = "2021-07-28"


# =============================================================================
# Configuration
# =============================================================================

class GHLConfig:
    """GoHighLevel API configuration. Built once and passed to GHLClient."""

    def __init__(self, access_token: str = "", location_id: str = "",
                 base_url: str = DEFAULT_BASE_URL,
                 api_version: str = DEFAULT_API_VERSION,
                 timeout: float = 30.0):
        self.access_token = access_token
        self.location_id = location_id
        self.base_url = base_url.rstrip("/")
        self.api_version = api_version
        self.timeout = timeout

    @classmethod
    def from_env(cls) -> "GHLConfig":
        """Load configuration from Secret Manager and the environment."""
        token = None
        try:
            from app.core.config import get_secret_sync
            token = get_secret_sync("GHL_API_KEY")
        except Exception as e:
            logger.debug(f"Secret Manager lookup skipped: {e}")

        return cls(
            access_token=token or os.getenv("GHL_API_KEY", ""),
            location_id=os.getenv("GHL_LOCATION_ID", ""),
            base_url=os.getenv("GHL_BASE_URL", DEFAULT_BASE_URL),
            api_version=os.getenv("GHL_API_VERSION", DEFAULT_API_VERSION),
            timeout=float(os.getenv("GHL_TIMEOUT", "30")),
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.access_token and self.location_id)

    @property
    def not_configured_error(self) -> str:
        missing = []
        if not self.access_token:
            missing.append("GHL_API_KEY")
        if not self.location_id:
            missing.append("GHL_LOCATION_ID")
        return f"Error: GoHighLevel not configured. Set {', '.join(missing)}."


# =============================================================================
# Response Envelope
# =============================================================================

class ApiError(BaseModel):
    """Structured API failure. status_code is None for transport errors."""
    status_code: Optional[int] = None
    message: str


class ApiResponse(BaseModel):
    success: bool
    data: Any = None
    error: Optional[ApiError] = None

    @classmethod
    def ok(cls, data: Any) -> "ApiResponse":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, status_code: Optional[int], message: str) -> "ApiResponse":
        return cls(success=False, error=ApiError(status_code=status_code, message=message))


def _error_message(response: httpx.Response) -> str:
    """Pull the most useful message out of a GHL error body."""
    try:
        body = response.json()
    except (json.JSONDecodeError, ValueError):
        return response.text or response.reason_phrase

    if isinstance(body, dict):
        message = body.get("message") or body.get("error") or body.get("msg")
        if isinstance(message, list):
            return "; ".join(str(m) for m in message)
        if message:
            return str(message)
    return response.text or response.reason_phrase


def _clean_params(params: Optional[dict]) -> Optional[dict]:
    if not params:
        return None
    return {k: v for k, v in params.items() if v is not None}


def _retry_delay(value: Optional[str], default: float = 5.0, cap: float = 30.0) -> float:
    """Seconds to wait for a Retry-After header given as seconds or an HTTP-date."""
    if not value:
        return default
    try:
        delay = float(value)
    except ValueError:
        try:
            when = parsedate_to_datetime(value)
        except (TypeError, ValueError):
            logger.debug(f"Unparseable Retry-After header: {value!r}")
            return default
        if when.tzinfo is None:
            when = when.replace(tzinfo=timezone.utc)
        delay = (when - datetime.now(timezone.utc)).total_seconds()
    return min(max(delay, 0.0), cap)


# =============================================================================
# Client
# =============================================================================

class GHLClient:
    """Async GoHighLevel API v2 client."""

    MAX_ATTEMPTS = 3

    def __init__(self, config: GHLConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self._transport = transport

    @property
    def location_id(self) -> str:
        return self.config.location_id

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.config.access_token}",
            "Version": self.config.api_version,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def request(
        self,
        method: str,
        endpoint: str,
        params: dict = None,
        json_body: Any = None,
    ) -> ApiResponse:
        """Make a GHL API request with rate-limit retry and error parsing."""
        url = f"{self.config.base_url}{endpoint}"
        logger.debug(f"GHL {method} {endpoint}")

        try:
            async with httpx.AsyncClient(timeout=self.config.timeout, transport=self._transport) as client:
                for attempt in range(self.MAX_ATTEMPTS):
                    response = await client.request(
                        method=method,
                        url=url,
                        headers=self._headers(),
                        params=_clean_params(params),
                        json=json_body,
                    )

                    if response.status_code == 429 and attempt < self.MAX_ATTEMPTS - 1:
                        retry_after = _retry_delay(response.headers.get("Retry-After"))
                        logger.warning(f"Rate limited by GHL on {endpoint}, retrying in {retry_after:g}s")
                        await asyncio.sleep(retry_after)
                        continue
                    break
        except httpx.HTTPError as e:
            logger.error(f"GHL request {method} {endpoint} failed: {e}")
            return ApiResponse.fail(None, f"Request to GoHighLevel failed: {e}")

        if response.status_code >= 400:
            message = _error_message(response)
            return ApiResponse.fail(
                response.status_code,
                f"GHL API Error ({response.status_code}): {message}",
            )

        if response.status_code == 204 or not response.content:
            return ApiResponse.ok({})

        try:
            return ApiResponse.ok(response.json())
        except (json.JSONDecodeError, ValueError):
            return ApiResponse.ok({"raw": response.text})
