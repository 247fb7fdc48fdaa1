"""
GoHighLevel Location Tools for the GHL MCP Server

This module exposes locations (sub-accounts) and their settings as MCP tools.

Capabilities:
- Search, read, create, update, and delete locations
- Location tags
- Location task search
- Location custom fields and custom values
- Message templates and available timezones

Authentication: Uses the shared GHLClient (Bearer token, see ghl_client.py).
Creating and deleting locations needs an agency-level token
(locations.write); everything else runs with a location token.

Every tool that takes an optional locationId falls back to GHL_LOCATION_ID.
"""

import logging
from typing import Optional, List, Literal

from pydantic import BaseModel, Field

from app.core.tooling import ToolModule, ToolSpec, location_field, hint

logger = logging.getLogger(__name__)


# =============================================================================
# Input Models
# =============================================================================

class SearchLocationsParams(BaseModel):
    companyId: Optional[str] = Field(None, description="Company/Agency ID to filter locations")
    email: Optional[str] = Field(None, description="Filter by location email address")
    skip: Optional[int] = Field(None, ge=0, description="Number of results to skip for pagination (default: 0)")
    limit: Optional[int] = Field(None, ge=1, le=100, description="Maximum number of locations to return (default: 10, max: 100)")
    order: Optional[Literal["asc", "desc"]] = Field(None, description="Sort order by creation date (default: asc)")


class GetLocationParams(BaseModel):
    locationId: Optional[str] = location_field("The unique ID of the location to retrieve (defaults to the configured location)")


class ProspectInfo(BaseModel):
    firstName: str = Field(description="Primary contact first name")
    lastName: str = Field(description="Primary contact last name")
    email: str = Field(description="Primary contact email address")


class CreateLocationParams(BaseModel):
    name: str = Field(description='Name of the sub-account/location (e.g., "Acme Corp - NYC")')
    companyId: str = Field(description="Parent company/agency ID")
    prospectInfo: ProspectInfo = Field(description="Primary contact information for the location")
    phone: Optional[str] = Field(None, description="Business phone with country code (e.g., +14155551234)")
    address: Optional[str] = Field(None, description="Street address of the business")
    city: Optional[str] = Field(None, description="City where business is located")
    state: Optional[str] = Field(None, description='State/province (e.g., "CA", "New York")')
    country: Optional[str] = Field(None, description="2-letter country code (e.g., US, CA, GB)")
    postalCode: Optional[str] = Field(None, description="Postal/ZIP code")
    website: Optional[str] = Field(None, description="Business website URL")
    timezone: Optional[str] = Field(None, description="Business timezone. Use get_timezones for valid values")
    snapshotId: Optional[str] = Field(None, description="Snapshot/template ID to load into the location")


class UpdateLocationParams(BaseModel):
    locationId: str = Field(description="The unique ID of the location to update")
    name: Optional[str] = Field(None, description="Updated name of the sub-account/location")
    companyId: Optional[str] = Field(None, description="Move location to different company/agency")
    phone: Optional[str] = Field(None, description="Updated phone number with country code")
    address: Optional[str] = Field(None, description="Updated street address")
    city: Optional[str] = Field(None, description="Updated city")
    state: Optional[str] = Field(None, description="Updated state/province")
    country: Optional[str] = Field(None, description="Updated 2-letter country code")
    postalCode: Optional[str] = Field(None, description="Updated postal/ZIP code")
    website: Optional[str] = Field(None, description="Updated website URL")
    timezone: Optional[str] = Field(None, description="Updated timezone (use get_timezones for valid values)")


class DeleteLocationParams(BaseModel):
    locationId: str = Field(description="The unique ID of the location to delete")
    deleteTwilioAccount: Optional[bool] = Field(None, description="Whether to delete associated Twilio account (default: false)")


class LocationScopedParams(BaseModel):
    locationId: Optional[str] = location_field()


class CreateTagParams(LocationScopedParams):
    name: str = Field(description="Name of the tag (must be unique within location)")


class TagIdParams(LocationScopedParams):
    tagId: str = Field(description="The tag ID")


class UpdateTagParams(TagIdParams):
    name: str = Field(description="Updated name for the tag (must be unique within location)")


class SearchTasksParams(LocationScopedParams):
    contactId: Optional[List[str]] = Field(None, description="Filter by specific contact IDs")
    completed: Optional[bool] = Field(None, description="Filter by completion status")
    assignedTo: Optional[List[str]] = Field(None, description="Filter by assigned user IDs")
    query: Optional[str] = Field(None, description="Search query for task content")
    limit: Optional[int] = Field(None, ge=1, description="Maximum number of tasks to return (default: 25)")
    skip: Optional[int] = Field(None, ge=0, description="Number of tasks to skip for pagination (default: 0)")
    businessId: Optional[str] = Field(None, description="Business ID filter")


class GetCustomFieldsParams(LocationScopedParams):
    model: Optional[Literal["contact", "opportunity", "all"]] = Field(None, description="Filter by model type (default: all)")


class CreateCustomFieldParams(LocationScopedParams):
    name: str = Field(description="Name/label of the custom field (shown to users)")
    dataType: Literal["TEXT", "TEXTAREA", "NUMBER", "CHECKBOX", "SELECT", "RADIO", "DATE"] = Field(
        description="Data type of the field"
    )
    model: Literal["contact", "opportunity"] = Field(description="Model to create the field for")
    placeholder: Optional[str] = Field(None, description="Placeholder text shown in empty field")
    position: Optional[int] = Field(None, description="Display order/position (default: 0)")


class CustomFieldIdParams(LocationScopedParams):
    customFieldId: str = Field(description="The custom field ID")


class UpdateCustomFieldParams(CustomFieldIdParams):
    name: str = Field(description="Updated name/label of the custom field")
    placeholder: Optional[str] = Field(None, description="Updated placeholder text")
    position: Optional[int] = Field(None, description="Updated display order/position")


class GetCustomValuesParams(LocationScopedParams):
    limit: Optional[int] = Field(None, ge=1, description="Max number of values to return (default: 25)")


class CreateCustomValueParams(LocationScopedParams):
    name: str = Field(description="Name of the custom value")
    value: str = Field(description="Value to set")


class CustomValueIdParams(LocationScopedParams):
    customValueId: str = Field(description="The custom value ID")


class UpdateCustomValueParams(CustomValueIdParams):
    name: str = Field(description="Name of the custom value")
    value: str = Field(description="New value")


class GetTemplatesParams(LocationScopedParams):
    originId: Optional[str] = Field(None, description="Origin ID (defaults to locationId if not provided)")
    type: Optional[Literal["sms", "email", "whatsapp"]] = Field(None, description="Filter by template type")
    deleted: Optional[bool] = Field(None, description="Include deleted templates (default: false)")
    skip: Optional[int] = Field(None, ge=0, description="Number to skip for pagination (default: 0)")
    limit: Optional[int] = Field(None, ge=1, le=100, description="Maximum number to return (default: 25, max: 100)")


class TemplateIdParams(LocationScopedParams):
    templateId: str = Field(description="The template ID to delete")


# =============================================================================
# Response Shaping
# =============================================================================

def _unwrap(key: str, message: str):
    def reshape(data, args):
        return {"success": True, key: data.get(key, data), "message": message.format(**args)}
    return reshape


def _items(key: str, label: str):
    def reshape(data, args):
        items = data.get(key) or []
        return {"success": True, key: items, "message": f"Retrieved {len(items)} {label}"}
    return reshape


def _custom_values_result(data, args):
    """Slice locally: the endpoint has no pagination and large locations time out."""
    everything = data.get("customValues") or []
    limit = args["limit"]
    values = everything[:limit]
    has_more = len(everything) > limit
    logger.debug(f"Custom values for {args['locationId']}: total={len(everything)} returned={len(values)}")
    return {
        "success": True,
        "customValues": values,
        "total": len(everything),
        "returned": len(values),
        "hasMore": has_more,
        "message": f"Retrieved {len(values)} of {len(everything)} custom values"
                   f"{' (use limit parameter to get more)' if has_more else ''}",
    }


def _templates_result(data, args):
    templates = data.get("templates") or []
    total = data.get("totalCount") or len(templates)
    return {
        "success": True,
        "templates": templates,
        "totalCount": total,
        "message": f"Retrieved {len(templates)} templates ({total} total)",
    }


def _timezones_result(data, args):
    if isinstance(data, list):
        timezones = data
    else:
        timezones = data.get("timeZones") or data.get("timezones") or []
    return {
        "success": True,
        "timezones": timezones,
        "message": f"Retrieved {len(timezones)} available timezones",
    }


# =============================================================================
# Tool Module
# =============================================================================

class LocationTools(ToolModule):
    family = "location"
    subject = "location"
    lookup = "search_locations"

    def build_specs(self):
        tag_lookup = dict(subject="location tag", lookup="get_location_tags")
        field_lookup = dict(subject="custom field", lookup="get_location_custom_fields")
        value_lookup = dict(subject="custom value", lookup="get_location_custom_values")
        agency_only = hint((401, 403), "Permission denied: managing locations requires an agency-level token "
                                       "with locations.write scope.\nA location (sub-account) token cannot "
                                       "create, move, or delete locations.")
        return [
            # -----------------------------------------------------------------
            # Locations
            # -----------------------------------------------------------------
            ToolSpec(
                name="search_locations",
                description="Search locations (sub-accounts) under an agency",
                params=SearchLocationsParams,
                path="/locations/search",
                defaults={"skip": 0, "limit": 10},
                reshape=lambda data, args: {
                    "success": True,
                    "locations": data.get("locations") or [],
                    "message": f"Found {len(data.get('locations') or [])} locations",
                },
                hints=(agency_only,),
            ),
            ToolSpec(
                name="get_location",
                description="Get detailed information about a location (sub-account)",
                params=GetLocationParams,
                path="/locations/{locationId}",
                location="locationId", id_field="locationId",
                reshape=_unwrap("location", "Location retrieved successfully"),
            ),
            ToolSpec(
                name="create_location",
                description="Create a new location (sub-account). Requires an agency-level token.",
                params=CreateLocationParams,
                method="POST", path="/locations/",
                reshape=lambda data, args: {
                    "success": True,
                    "location": data,
                    "message": f"Location \"{args['name']}\" created successfully",
                },
                hints=(agency_only,),
            ),
            ToolSpec(
                name="update_location",
                description="Update a location's business details. Only the provided fields are changed.",
                params=UpdateLocationParams,
                method="PUT", path="/locations/{locationId}",
                id_field="locationId",
                reshape=lambda data, args: {
                    "success": True,
                    "location": data,
                    "message": "Location updated successfully",
                },
                hints=(agency_only,),
            ),
            ToolSpec(
                name="delete_location",
                description="Permanently delete a location (sub-account). Requires an agency-level token.",
                params=DeleteLocationParams,
                method="DELETE", path="/locations/{locationId}",
                id_field="locationId",
                defaults={"deleteTwilioAccount": False},
                reshape=lambda data, args: {
                    "success": True,
                    "message": data.get("message") or "Location deleted successfully",
                },
                hints=(agency_only,),
            ),

            # -----------------------------------------------------------------
            # Tags
            # -----------------------------------------------------------------
            ToolSpec(
                name="get_location_tags",
                description="List all tags defined in the location",
                params=LocationScopedParams,
                path="/locations/{locationId}/tags",
                location="locationId",
                reshape=_items("tags", "location tags"),
            ),
            ToolSpec(
                name="create_location_tag",
                description="Create a new tag in the location",
                params=CreateTagParams,
                method="POST", path="/locations/{locationId}/tags",
                location="locationId",
                reshape=lambda data, args: {
                    "success": True,
                    "tag": data.get("tag") or data,
                    "message": f"Tag \"{args['name']}\" created successfully",
                },
                hints=(hint((400, 409), "Tag \"{name}\" could not be created.\n"
                                        "Tag names must be unique within a location. "
                                        "Use get_location_tags to check existing tags."),),
            ),
            ToolSpec(
                name="get_location_tag",
                description="Get a specific location tag",
                params=TagIdParams,
                path="/locations/{locationId}/tags/{tagId}",
                location="locationId", **tag_lookup,
                reshape=_unwrap("tag", "Location tag retrieved successfully"),
            ),
            ToolSpec(
                name="update_location_tag",
                description="Rename a location tag",
                params=UpdateTagParams,
                method="PUT", path="/locations/{locationId}/tags/{tagId}",
                location="locationId", **tag_lookup,
                reshape=_unwrap("tag", "Location tag updated successfully"),
            ),
            ToolSpec(
                name="delete_location_tag",
                description="Delete a location tag",
                params=TagIdParams,
                method="DELETE", path="/locations/{locationId}/tags/{tagId}",
                location="locationId", **tag_lookup,
                message="Location tag deleted successfully",
            ),

            # -----------------------------------------------------------------
            # Tasks
            # -----------------------------------------------------------------
            ToolSpec(
                name="search_location_tasks",
                description="Search tasks across all contacts in the location",
                params=SearchTasksParams,
                method="POST", path="/locations/{locationId}/tasks/search",
                location="locationId",
                reshape=lambda data, args: {
                    "success": True,
                    "tasks": data.get("tasks") or [],
                    "message": f"Found {len(data.get('tasks') or [])} tasks",
                },
                read_only=True, idempotent=True,
            ),

            # -----------------------------------------------------------------
            # Custom fields
            # -----------------------------------------------------------------
            ToolSpec(
                name="get_location_custom_fields",
                description="List custom fields defined for contacts and/or opportunities",
                params=GetCustomFieldsParams,
                path="/locations/{locationId}/customFields",
                location="locationId",
                reshape=_items("customFields", "custom fields"),
            ),
            ToolSpec(
                name="create_location_custom_field",
                description="Create a custom field for contacts or opportunities",
                params=CreateCustomFieldParams,
                method="POST", path="/locations/{locationId}/customFields",
                location="locationId",
                reshape=lambda data, args: {
                    "success": True,
                    "customField": data.get("customField") or data,
                    "message": f"Custom field \"{args['name']}\" created successfully",
                },
            ),
            ToolSpec(
                name="get_location_custom_field",
                description="Get a specific custom field",
                params=CustomFieldIdParams,
                path="/locations/{locationId}/customFields/{customFieldId}",
                location="locationId", **field_lookup,
                reshape=_unwrap("customField", "Custom field retrieved successfully"),
            ),
            ToolSpec(
                name="update_location_custom_field",
                description="Update a custom field's label, placeholder or position",
                params=UpdateCustomFieldParams,
                method="PUT", path="/locations/{locationId}/customFields/{customFieldId}",
                location="locationId", **field_lookup,
                reshape=_unwrap("customField", "Custom field updated successfully"),
            ),
            ToolSpec(
                name="delete_location_custom_field",
                description="Delete a custom field and its stored values",
                params=CustomFieldIdParams,
                method="DELETE", path="/locations/{locationId}/customFields/{customFieldId}",
                location="locationId", **field_lookup,
                message="Custom field deleted successfully",
            ),

            # -----------------------------------------------------------------
            # Custom values
            # -----------------------------------------------------------------
            ToolSpec(
                name="get_location_custom_values",
                description="List location custom values (merge fields). "
                            "Returns at most `limit` values (default 25); hasMore flags truncation.",
                params=GetCustomValuesParams,
                path="/locations/{locationId}/customValues",
                location="locationId",
                defaults={"limit": 25},
                exclude=("limit",),
                reshape=_custom_values_result,
            ),
            ToolSpec(
                name="create_location_custom_value",
                description="Create a location custom value",
                params=CreateCustomValueParams,
                method="POST", path="/locations/{locationId}/customValues",
                location="locationId",
                reshape=lambda data, args: {
                    "success": True,
                    "customValue": data.get("customValue") or data,
                    "message": f"Custom value \"{args['name']}\" created successfully",
                },
            ),
            ToolSpec(
                name="get_location_custom_value",
                description="Get a specific location custom value",
                params=CustomValueIdParams,
                path="/locations/{locationId}/customValues/{customValueId}",
                location="locationId", **value_lookup,
                reshape=_unwrap("customValue", "Custom value retrieved successfully"),
            ),
            ToolSpec(
                name="update_location_custom_value",
                description="Update a location custom value",
                params=UpdateCustomValueParams,
                method="PUT", path="/locations/{locationId}/customValues/{customValueId}",
                location="locationId", **value_lookup,
                reshape=_unwrap("customValue", "Custom value updated successfully"),
            ),
            ToolSpec(
                name="delete_location_custom_value",
                description="Delete a location custom value",
                params=CustomValueIdParams,
                method="DELETE", path="/locations/{locationId}/customValues/{customValueId}",
                location="locationId", **value_lookup,
                message="Custom value deleted successfully",
            ),

            # -----------------------------------------------------------------
            # Templates and settings
            # -----------------------------------------------------------------
            ToolSpec(
                name="get_location_templates",
                description="List SMS, email and WhatsApp templates in the location",
                params=GetTemplatesParams,
                path="/locations/{locationId}/templates",
                location="locationId",
                defaults={"originId": lambda values: values["locationId"]},
                reshape=_templates_result,
            ),
            ToolSpec(
                name="delete_location_template",
                description="Delete a message template",
                params=TemplateIdParams,
                method="DELETE", path="/locations/{locationId}/templates/{templateId}",
                location="locationId",
                subject="template", lookup="get_location_templates",
                message="Template deleted successfully",
            ),
            ToolSpec(
                name="get_timezones",
                description="List timezones accepted by GoHighLevel for locations and calendars",
                params=LocationScopedParams,
                path="/locations/{locationId}/timezones",
                location="locationId",
                reshape=_timezones_result,
            ),
        ]
