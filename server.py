"""
GoHighLevel MCP Server
Exposes the GoHighLevel (LeadConnector) CRM REST API v2 as MCP tools: contacts,
conversations, opportunities, calendars, locations, payments, invoices, products,
store, social media, blogs, media, surveys, associations, custom fields, custom
objects, workflows, email templates and email verification.

Every tool family is a ToolModule (see app/core/tooling.py). This module only
wires them into FastMCP, serves the HTTP endpoints and starts uvicorn.

Environment Variables:
    GHL_API_KEY, GHL_LOCATION_ID, ...: see ghl_client.py
    MCP_API_KEY: API key required on /mcp, /tools and /capabilities (optional)
    MCP_TRANSPORT: http (default) or stdio
    PORT / HOST: HTTP listen address (default 0.0.0.0:8000)
    TOOL_TIMEOUT_SECONDS: upper bound for a single tool call (default 30)
"""

import asyncio
import logging
import time
from typing import Any, Dict, List

from fastapi import FastAPI
from fastmcp import FastMCP
from fastmcp.tools import Tool
from fastmcp.tools.tool import ToolResult
from mcp.types import ToolAnnotations
from pydantic import Field

from app.core.auth import APIKeyMiddleware
from app.core.config import ServerSettings
from app.core.tooling import GHLToolError, ToolModule
from ghl_client import GHLClient, GHLConfig

from association_tools import AssociationTools
from blog_tools import BlogTools
from calendar_tools import CalendarTools
from contact_tools import ContactTools
from conversation_tools import ConversationTools
from custom_field_tools import CustomFieldTools
from email_tools import EmailTools
from email_verification_tools import EmailVerificationTools
from invoices_tools import InvoicesTools
from location_tools import LocationTools
from media_tools import MediaTools
from object_tools import ObjectTools
from opportunity_tools import OpportunityTools
from payments_tools import PaymentsTools
from products_tools import ProductsTools
from social_media_tools import SocialMediaTools
from store_tools import StoreTools
from survey_tools import SurveyTools
from workflow_tools import WorkflowTools

logger = logging.getLogger(__name__)

SERVER_NAME = "GoHighLevel MCP Server"
SERVER_VERSION = "1.0.0"

TOOL_MODULES = (
    ContactTools,
    ConversationTools,
    OpportunityTools,
    CalendarTools,
    LocationTools,
    PaymentsTools,
    InvoicesTools,
    ProductsTools,
    StoreTools,
    SocialMediaTools,
    BlogTools,
    MediaTools,
    SurveyTools,
    AssociationTools,
    CustomFieldTools,
    ObjectTools,
    WorkflowTools,
    EmailTools,
    EmailVerificationTools,
)


# ============================================================================
# TOOL REGISTRY
# ============================================================================

def build_tool_modules(client) -> List[ToolModule]:
    """Instantiate every tool family. Tool names must be unique server-wide."""
    modules = [cls(client) for cls in TOOL_MODULES]
    owners: Dict[str, str] = {}
    for module in modules:
        for name in module.tool_names:
            if name in owners:
                raise ValueError(
                    f"Duplicate tool name '{name}' in {module.family} tools "
                    f"(already registered by {owners[name]} tools)"
                )
            owners[name] = module.family
    return modules


class GHLTool(Tool):
    """An MCP tool backed by a ToolModule descriptor."""

    module: Any = Field(exclude=True)
    timeout: float = 30.0

    async def run(self, arguments: Dict[str, Any]) -> ToolResult:
        logger.info(f"Running tool {self.name}")
        started = time.monotonic()
        try:
            result = await asyncio.wait_for(
                self.module.execute_tool(self.name, arguments),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.error(f"Tool {self.name} timed out after {self.timeout:.0f}s")
            raise GHLToolError(
                f"{self.name} timed out after {self.timeout:.0f} seconds. "
                f"GoHighLevel did not answer in time; try again or narrow the request.",
                tool=self.name,
            )
        except GHLToolError:
            raise
        except Exception:
            logger.exception(f"Tool {self.name} failed unexpectedly")
            raise

        logger.info(f"Tool {self.name} completed in {time.monotonic() - started:.2f}s")
        return ToolResult(structured_content=result)


def register_tools(mcp: FastMCP, modules: List[ToolModule], timeout: float = 30.0) -> int:
    count = 0
    for module in modules:
        for definition in module.get_tool_definitions():
            annotations = definition["annotations"]
            mcp.add_tool(GHLTool(
                name=definition["name"],
                title=annotations["title"],
                description=definition["description"],
                parameters=definition["inputSchema"],
                annotations=ToolAnnotations(**annotations),
                module=module,
                timeout=timeout,
            ))
            count += 1
        logger.info(f"Registered {len(module.tool_names)} {module.family} tools")
    return count


def create_mcp(modules: List[ToolModule], timeout: float = 30.0) -> FastMCP:
    mcp = FastMCP(SERVER_NAME)
    total = register_tools(mcp, modules, timeout)
    logger.info(f"{total} tools registered on {SERVER_NAME}")
    return mcp


# ============================================================================
# HTTP APP
# ============================================================================

def tool_catalogue(modules: List[ToolModule]) -> List[dict]:
    return [
        {**definition, "family": module.family}
        for module in modules
        for definition in module.get_tool_definitions()
    ]


def create_app(mcp: FastMCP, modules: List[ToolModule], config: GHLConfig, api_key: str = None) -> FastAPI:
    """FastAPI app serving health/catalogue routes with the MCP endpoint at /mcp."""
    mcp_app = mcp.http_app(path="/mcp")
    app = FastAPI(title=SERVER_NAME, version=SERVER_VERSION, lifespan=mcp_app.lifespan)

    # Health check endpoint (for Cloud Run)
    @app.get("/health")
    async def health():
        families = {module.family: len(module.tool_names) for module in modules}
        return {
            "status": "ok" if config.is_configured else "degraded",
            "configured": config.is_configured,
            "families": families,
            "total_tools": sum(families.values()),
        }

    @app.get("/")
    async def root():
        return {"name": SERVER_NAME, "version": SERVER_VERSION, "mcp": "/mcp", "health": "/health"}

    @app.get("/capabilities")
    async def capabilities():
        return {
            "name": SERVER_NAME,
            "version": SERVER_VERSION,
            "families": sorted(module.family for module in modules),
            "tools": sum(len(module.tool_names) for module in modules),
        }

    @app.get("/tools")
    async def list_tools():
        tools = tool_catalogue(modules)
        return {"tools": tools, "count": len(tools)}

    # Routes above are matched before the MCP mount
    app.mount("/", mcp_app)
    app.add_middleware(APIKeyMiddleware, api_key=api_key)
    return app


# ============================================================================
# STARTUP AND SERVER
# ============================================================================

def main():
    settings = ServerSettings.from_env()
    config = GHLConfig.from_env()
    if not config.is_configured:
        logger.warning(config.not_configured_error)

    client = GHLClient(config)
    modules = build_tool_modules(client)
    mcp = create_mcp(modules, settings.tool_timeout)

    if settings.transport == "stdio":
        logger.info("Starting MCP server on stdio")
        mcp.run()
        return

    import uvicorn

    app = create_app(mcp, modules, config)
    logger.info(f"Starting server on {settings.host}:{settings.port}")
    # Cloud Run optimized uvicorn configuration
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        timeout_keep_alive=5,
        access_log=False,
        log_level="info",
    )


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        logger.info("Shutting down")
