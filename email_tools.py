"""
GoHighLevel Email Marketing Tools for the GHL MCP Server

This module exposes email campaigns and the email template builder as MCP tools.

Capabilities:
- List email campaigns (scheduled sends) by status
- Create, list, update and delete email builder templates

Authentication: Uses the shared GHLClient (Bearer token, see ghl_client.py).
Requires emails/builder.readonly, emails/builder.write and
emails/schedule.readonly scopes.
"""

import logging
from typing import Optional, Literal

from pydantic import BaseModel, Field

from app.core.tooling import ToolModule, ToolSpec, envelope, location_field

logger = logging.getLogger(__name__)


# =============================================================================
# Input Models
# =============================================================================

class GetCampaignsParams(BaseModel):
    locationId: Optional[str] = location_field()
    status: Optional[Literal["active", "pause", "complete", "cancelled", "retry", "draft", "resend-scheduled"]] = Field(
        None, description="Filter campaigns by status (default: active)"
    )
    limit: Optional[int] = Field(None, ge=1, description="Maximum number of campaigns to return (default: 10)")
    offset: Optional[int] = Field(None, ge=0, description="Number of campaigns to skip (default: 0)")


class CreateTemplateParams(BaseModel):
    locationId: Optional[str] = location_field()
    title: str = Field(description="Title/name of the email template")
    html: str = Field(description="HTML content of the template (use inline CSS)")
    isPlainText: Optional[bool] = Field(None, description="Template is plain text instead of HTML (default: false)")


class GetTemplatesParams(BaseModel):
    locationId: Optional[str] = location_field()
    limit: Optional[int] = Field(None, ge=1, description="Maximum number of templates to return (default: 10)")
    offset: Optional[int] = Field(None, ge=0, description="Number of templates to skip (default: 0)")


class UpdateTemplateParams(BaseModel):
    locationId: Optional[str] = location_field()
    templateId: str = Field(description="ID of the template to update")
    html: str = Field(description="Updated HTML content of the template")
    previewText: Optional[str] = Field(None, description="Updated preview/snippet text")


class DeleteTemplateParams(BaseModel):
    locationId: Optional[str] = location_field()
    templateId: str = Field(description="ID of the template to delete")


def _templates_result(data, args):
    # The builder listing is either a bare list or wrapped as {builders: [...]}
    templates = data if isinstance(data, list) else (data.get("builders") or data.get("templates") or [])
    return {
        "success": True,
        "templates": templates,
        "message": f"Successfully retrieved {len(templates)} email templates.",
    }


class EmailTools(ToolModule):
    family = "email"
    subject = "email template"
    lookup = "get_email_templates"

    def build_specs(self):
        return [
            ToolSpec(
                name="get_email_campaigns",
                description="List email campaigns (scheduled sends), filtered by status",
                params=GetCampaignsParams,
                path="/emails/schedule",
                location="locationId",
                defaults={"status": "active", "limit": 10, "offset": 0},
                reshape=lambda data, args: {
                    "success": True,
                    "campaigns": data.get("schedules") or [],
                    "total": data.get("total"),
                    "message": f"Successfully retrieved {len(data.get('schedules') or [])} email campaigns.",
                },
            ),
            ToolSpec(
                name="create_email_template",
                description="Create an email template in the email builder",
                params=CreateTemplateParams,
                method="POST", path="/emails/builder",
                location="locationId",
                defaults={"type": "html"},
                reshape=lambda data, args: {
                    "success": True,
                    "template": data,
                    "message": "Successfully created email template.",
                },
            ),
            ToolSpec(
                name="get_email_templates",
                description="List email builder templates",
                params=GetTemplatesParams,
                path="/emails/builder",
                location="locationId",
                defaults={"limit": 10, "offset": 0},
                reshape=_templates_result,
            ),
            ToolSpec(
                name="update_email_template",
                description="Replace the HTML content of an email template",
                params=UpdateTemplateParams,
                method="POST", path="/emails/builder/data",
                location="locationId",
                defaults={"editorType": "html"},
                id_field="templateId",
                reshape=lambda data, args: envelope(None, "Successfully updated email template."),
                idempotent=True,
            ),
            ToolSpec(
                name="delete_email_template",
                description="Delete an email template",
                params=DeleteTemplateParams,
                method="DELETE", path="/emails/builder/{locationId}/{templateId}",
                location="locationId",
                reshape=lambda data, args: envelope(None, "Successfully deleted email template."),
            ),
        ]
