import os
import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import PlainTextResponse
from app.core.config import get_secret_sync

logger = logging.getLogger(__name__)


# API Key validation middleware
class APIKeyMiddleware(BaseHTTPMiddleware):
    """Middleware to validate the API key for the MCP and catalogue endpoints."""

    # Paths that don't require API key authentication
    PUBLIC_PATHS = {"/health", "/"}

    def __init__(self, app, api_key: str = None):
        super().__init__(app)
        # Store the initial key but defer Secret Manager lookup to first request
        self._api_key = api_key or os.getenv("MCP_API_KEY")
        self._key_loaded = self._api_key is not None
        if self._api_key:
            logger.info("API key authentication enabled for MCP endpoints")
        else:
            logger.info("API key will be loaded from Secret Manager on first request")

    @property
    def api_key(self):
        """Lazily load API key from Secret Manager if not already set."""
        if not self._key_loaded:
            self._api_key = get_secret_sync("MCP_API_KEY")
            self._key_loaded = True
            if self._api_key:
                logger.info("API key loaded from Secret Manager")
            else:
                logger.warning("No MCP_API_KEY configured - endpoints are unprotected!")
        return self._api_key

    @staticmethod
    def provided_key(request):
        """API key from the api_key query param, X-API-Key, or a Bearer token."""
        authorization = request.headers.get("Authorization", "")
        bearer = authorization[len("Bearer "):] if authorization.startswith("Bearer ") else ""
        return (
            request.query_params.get("api_key") or
            request.headers.get("X-API-Key") or
            bearer
        )

    async def dispatch(self, request, call_next):
        path = request.url.path

        # Allow public paths without authentication
        if path in self.PUBLIC_PATHS:
            return await call_next(request)

        # If no API key is configured, allow all requests
        if not self.api_key:
            return await call_next(request)

        if self.provided_key(request) != self.api_key:
            logger.warning(f"Unauthorized request to {path} from {request.client.host if request.client else 'unknown'}")
            return PlainTextResponse("Unauthorized - Invalid or missing API key", status_code=401)

        return await call_next(request)
