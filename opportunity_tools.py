"""
GoHighLevel Opportunity Tools for the GHL MCP Server

This module exposes sales pipelines and opportunities as MCP tools.

Capabilities:
- Search opportunities across pipelines, stages, contacts and owners
- List pipelines with their stages
- Create, update, move, and delete opportunities
- Upsert by pipeline + contact
- Manage opportunity followers

Authentication: Uses the shared GHLClient (Bearer token, see ghl_client.py).
Requires opportunities.readonly and opportunities.write scopes.

Notes:
    The search endpoint takes snake_case query parameters while the rest of
    the Opportunities API is camelCase. Monetary values are integer CENTS.
"""

import logging
from typing import Optional, List, Literal

from pydantic import BaseModel, Field

from app.core.tooling import ToolModule, ToolSpec, hint

logger = logging.getLogger(__name__)

OpportunityStatus = Literal["open", "won", "lost", "abandoned"]

SEARCH_RENAMES = {
    "locationId": "location_id",
    "query": "q",
    "pipelineId": "pipeline_id",
    "pipelineStageId": "pipeline_stage_id",
    "contactId": "contact_id",
    "assignedTo": "assigned_to",
}


# =============================================================================
# Input Models
# =============================================================================

class SearchOpportunitiesParams(BaseModel):
    query: Optional[str] = Field(None, description="General search query (searches name, contact info)")
    pipelineId: Optional[str] = Field(None, description="Filter by specific pipeline ID")
    pipelineStageId: Optional[str] = Field(None, description="Filter by specific pipeline stage ID")
    contactId: Optional[str] = Field(None, description="Filter by specific contact ID")
    status: Optional[Literal["open", "won", "lost", "abandoned", "all"]] = Field(
        None, description="Filter by opportunity status"
    )
    assignedTo: Optional[str] = Field(None, description="Filter by assigned user ID")
    limit: Optional[int] = Field(
        None, ge=1, le=100, description="Maximum number of opportunities to return (default: 20, max: 100)"
    )


class GetPipelinesParams(BaseModel):
    pass


class OpportunityIdParams(BaseModel):
    opportunityId: str = Field(description="The unique ID of the opportunity")


class CreateOpportunityParams(BaseModel):
    name: str = Field(description="Name/title of the opportunity")
    pipelineId: str = Field(description="ID of the pipeline this opportunity belongs to (use get_pipelines)")
    contactId: str = Field(description="ID of the contact associated with this opportunity")
    pipelineStageId: Optional[str] = Field(None, description="Initial pipeline stage ID (defaults to first stage)")
    status: Optional[OpportunityStatus] = Field(None, description="Initial status of the opportunity (default: open)")
    monetaryValue: Optional[int] = Field(None, description="Monetary value in CENTS (e.g., 10000 = $100.00)")
    assignedTo: Optional[str] = Field(None, description="User ID to assign this opportunity to")


class UpdateOpportunityStatusParams(BaseModel):
    opportunityId: str = Field(description="The unique ID of the opportunity")
    status: OpportunityStatus = Field(description="New status for the opportunity")
    pipelineStageId: Optional[str] = Field(None, description="Move to this pipeline stage (if changing stage)")
    wonReason: Optional[str] = Field(None, description="Reason for won status (recommended when status=won)")
    lostReason: Optional[str] = Field(None, description="Reason for lost status (recommended when status=lost)")


class UpdateOpportunityParams(BaseModel):
    opportunityId: str = Field(description="The unique ID of the opportunity to update")
    name: Optional[str] = Field(None, description="Updated name/title of the opportunity")
    pipelineId: Optional[str] = Field(None, description="Updated pipeline ID")
    pipelineStageId: Optional[str] = Field(None, description="Updated pipeline stage ID")
    status: Optional[OpportunityStatus] = Field(None, description="Updated status of the opportunity")
    monetaryValue: Optional[int] = Field(None, description="Updated monetary value in CENTS (e.g., 25050 = $250.50)")
    assignedTo: Optional[str] = Field(None, description="Updated assigned user ID")


class UpsertOpportunityParams(BaseModel):
    pipelineId: str = Field(description="ID of the pipeline this opportunity belongs to")
    contactId: str = Field(description="ID of the contact associated with this opportunity")
    name: Optional[str] = Field(None, description="Name/title of the opportunity")
    status: Optional[OpportunityStatus] = Field(None, description="Status of the opportunity (default: open)")
    pipelineStageId: Optional[str] = Field(None, description="Pipeline stage ID")
    monetaryValue: Optional[int] = Field(None, description="Monetary value in CENTS (e.g., 50000 = $500.00)")
    assignedTo: Optional[str] = Field(None, description="User ID to assign this opportunity to")


class OpportunityFollowersParams(BaseModel):
    opportunityId: str = Field(description="The unique ID of the opportunity")
    followers: List[str] = Field(description="Array of user IDs")


# =============================================================================
# Helper Functions
# =============================================================================

def _search_query(args: dict) -> dict:
    query = (args.pop("query", None) or "").strip()
    if query:
        args["query"] = query
    return args


def _search_result(data, args):
    opportunities = data.get("opportunities") or []
    meta = data.get("meta") or {}
    total = meta.get("total") or len(opportunities)
    return {
        "success": True,
        "opportunities": opportunities,
        "meta": meta,
        "message": f"Found {len(opportunities)} opportunities ({total} total)",
    }


def _created_result(data, args):
    opportunity = data.get("opportunity") or data
    return {
        "success": True,
        "opportunity": opportunity,
        "message": f"Opportunity created successfully with ID: {opportunity.get('id', 'unknown')}",
    }


def _upsert_result(data, args):
    is_new = bool(data.get("new"))
    return {
        "success": True,
        "opportunity": data.get("opportunity") or {},
        "isNew": is_new,
        "message": f"Opportunity {'created' if is_new else 'updated'} successfully",
    }


def _followers_result(verb: str, key: str):
    def reshape(data, args):
        changed = data.get(key) or []
        preposition = "to" if verb == "Added" else "from"
        return {
            "success": True,
            "followers": data.get("followers") or [],
            key: changed,
            "message": f"{verb} {len(changed)} followers {preposition} opportunity",
        }
    return reshape


OPPORTUNITY_NOT_FOUND = ("Opportunity not found: {opportunityId}\n"
                         "The opportunity may have been deleted or the ID is incorrect.\n"
                         "Use search_opportunities to find the correct opportunity ID.")


# =============================================================================
# Tool Module
# =============================================================================

class OpportunityTools(ToolModule):
    family = "opportunity"
    subject = "opportunity"
    lookup = "search_opportunities"

    def build_specs(self):
        pipeline_hint = hint(400, "Invalid pipeline or stage configuration.\nPossible issues:\n"
                                  "1. Pipeline ID doesn't exist for this location\n"
                                  "2. Stage ID doesn't belong to the specified pipeline\n"
                                  "3. Pipeline is archived or deleted\n"
                                  "Use get_pipelines tool to see available pipelines and stages.")
        contact_hint = hint(404, "Contact not found: {contactId}\n"
                                 "Opportunities must be associated with an existing contact.\n"
                                 "Use search_contacts or create_contact first.")
        return [
            ToolSpec(
                name="search_opportunities",
                description="Search for opportunities in GoHighLevel CRM by pipeline, stage, contact, "
                            "status or assigned user. Call with no parameters to list recent opportunities.",
                params=SearchOpportunitiesParams,
                path="/opportunities/search",
                location="locationId",
                defaults={"limit": 20},
                transform=_search_query,
                renames=SEARCH_RENAMES,
                reshape=_search_result,
            ),
            ToolSpec(
                name="get_pipelines",
                description="Get all sales pipelines and their stages. Use this to find pipeline and stage IDs.",
                params=GetPipelinesParams,
                path="/opportunities/pipelines",
                location="locationId",
                reshape=lambda data, args: {
                    "success": True,
                    "pipelines": data.get("pipelines") or [],
                    "message": f"Retrieved {len(data.get('pipelines') or [])} pipelines",
                },
            ),
            ToolSpec(
                name="get_opportunity",
                description="Get detailed information about a specific opportunity by ID",
                params=OpportunityIdParams,
                path="/opportunities/{opportunityId}",
                reshape=lambda data, args: {
                    "success": True,
                    "opportunity": data.get("opportunity") or data,
                    "message": "Opportunity retrieved successfully",
                },
                hints=(hint(404, OPPORTUNITY_NOT_FOUND),),
            ),
            ToolSpec(
                name="create_opportunity",
                description="Create a new opportunity in a pipeline for an existing contact. "
                            "monetaryValue is in CENTS.",
                params=CreateOpportunityParams,
                method="POST", path="/opportunities/",
                location="locationId",
                defaults={"status": "open"},
                reshape=_created_result,
                hints=(pipeline_hint, contact_hint,
                       hint((401, 403), "Permission denied: Cannot create opportunities.\nPlease check:\n"
                                        "- API key has opportunity management permissions\n"
                                        "- User has access to this pipeline\n"
                                        "- Location settings allow opportunity creation")),
            ),
            ToolSpec(
                name="update_opportunity_status",
                description="Update the status of an opportunity (open, won, lost, abandoned)",
                params=UpdateOpportunityStatusParams,
                method="PUT", path="/opportunities/{opportunityId}/status",
                message="Opportunity status updated to {status}",
                hints=(
                    hint((400, 409, 422), "Cannot update opportunity status.\nPossible reasons:\n"
                                          "1. Opportunity is already in final state (won/lost)\n"
                                          "2. Status change not allowed from current stage\n"
                                          "3. Required fields missing for status change (e.g., won/lost reason)\n"
                                          "4. Pipeline workflow rules prevent this status change\n"
                                          "Requested status: {status}\n"
                                          "Check pipeline workflow rules in GHL settings."),
                    hint(404, OPPORTUNITY_NOT_FOUND),
                ),
            ),
            ToolSpec(
                name="update_opportunity",
                description="Update an opportunity. Only the provided fields are changed. "
                            "monetaryValue is in CENTS.",
                params=UpdateOpportunityParams,
                method="PUT", path="/opportunities/{opportunityId}",
                reshape=lambda data, args: {
                    "success": True,
                    "opportunity": data.get("opportunity") or data,
                    "message": "Opportunity updated successfully",
                },
                hints=(hint(404, OPPORTUNITY_NOT_FOUND), pipeline_hint),
            ),
            ToolSpec(
                name="delete_opportunity",
                description="Permanently delete an opportunity",
                params=OpportunityIdParams,
                method="DELETE", path="/opportunities/{opportunityId}",
                message="Opportunity deleted successfully",
                hints=(hint(404, OPPORTUNITY_NOT_FOUND),),
            ),
            ToolSpec(
                name="upsert_opportunity",
                description="Create or update an opportunity for a contact in a pipeline. "
                            "GoHighLevel matches on pipeline + contact.",
                params=UpsertOpportunityParams,
                method="POST", path="/opportunities/upsert",
                location="locationId",
                defaults={"status": "open"},
                reshape=_upsert_result,
                hints=(pipeline_hint, contact_hint),
            ),
            ToolSpec(
                name="add_opportunity_followers",
                description="Add users as followers of an opportunity",
                params=OpportunityFollowersParams,
                method="POST", path="/opportunities/{opportunityId}/followers",
                reshape=_followers_result("Added", "followersAdded"),
                hints=(hint(404, OPPORTUNITY_NOT_FOUND),),
            ),
            ToolSpec(
                name="remove_opportunity_followers",
                description="Remove followers from an opportunity",
                params=OpportunityFollowersParams,
                method="DELETE", path="/opportunities/{opportunityId}/followers",
                body=("followers",),
                reshape=_followers_result("Removed", "followersRemoved"),
                hints=(hint(404, OPPORTUNITY_NOT_FOUND),),
            ),
        ]
