import os
import logging
from typing import Optional

# Setup logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

DEFAULT_PROJECT_ID = "ghl-mcp-server"


def get_secret_sync(secret_id: str, timeout_seconds: float = 5.0) -> Optional[str]:
    """Read the latest version of a secret from Google Secret Manager.

    Args:
        secret_id: The ID of the secret to read
        timeout_seconds: Timeout for the Secret Manager API call (default 5 seconds)

    Returns None when the secret cannot be read (no credentials, missing
    secret, timeout); callers fall back to the environment.
    """
    try:
        from google.cloud import secretmanager

        client = secretmanager.SecretManagerServiceClient()
        # GCP_PROJECT_ID is set explicitly in Cloud Run, GOOGLE_CLOUD_PROJECT by the SDK
        project_id = os.getenv("GCP_PROJECT_ID", os.getenv("GOOGLE_CLOUD_PROJECT", DEFAULT_PROJECT_ID))
        name = f"projects/{project_id}/secrets/{secret_id}/versions/latest"

        response = client.access_secret_version(
            request={"name": name},
            timeout=timeout_seconds
        )
        return response.payload.data.decode("UTF-8")
    except Exception as e:
        logger.warning(f"Failed to read secret {secret_id} from Secret Manager: {e}")
        return None


class ServerSettings:
    """Process-level settings for server.py. Tool modules never read these."""

    def __init__(self, port: int = 8000, transport: str = "http",
                 tool_timeout: float = 30.0, host: str = "0.0.0.0"):
        self.port = port
        self.transport = transport
        self.tool_timeout = tool_timeout
        self.host = host

    @classmethod
    def from_env(cls) -> "ServerSettings":
        transport = os.getenv("MCP_TRANSPORT", "http").lower()
        if transport not in ("http", "stdio"):
            logger.warning(f"Unknown MCP_TRANSPORT '{transport}', using http")
            transport = "http"
        return cls(
            port=int(os.getenv("PORT", "8000")),
            transport=transport,
            tool_timeout=float(os.getenv("TOOL_TIMEOUT_SECONDS", "30")),
            host=os.getenv("HOST", "0.0.0.0"),
        )
