"""
GoHighLevel Custom Objects Tools for the GHL MCP Server

This module exposes object schemas and object records as MCP tools.

Capabilities:
- List objects (standard and custom) of a location
- Create, read and update custom object schemas
- Create, read, update, delete and search object records

Authentication: Uses the shared GHLClient (Bearer token, see ghl_client.py).
Requires objects/schema.readonly, objects/schema.write, objects/record.readonly
and objects/record.write scopes.

Custom object keys carry the "custom_objects." prefix (e.g. custom_objects.pet);
standard objects use their plain name (contact, opportunity, business).
"""

import logging
from typing import Optional, List, Literal, Dict, Any

from pydantic import BaseModel, Field

from app.core.tooling import ToolModule, ToolSpec, location_field, hint

logger = logging.getLogger(__name__)

CUSTOM_PREFIX = "custom_objects."


# =============================================================================
# Input Models
# =============================================================================

class LocationScoped(BaseModel):
    locationId: Optional[str] = location_field()


class Labels(BaseModel):
    singular: str = Field(description='Singular name (e.g., "Pet")')
    plural: str = Field(description='Plural name (e.g., "Pets")')


class PrimaryDisplayProperty(BaseModel):
    key: str = Field(description='Property key (e.g., "name")')
    name: str = Field(description='Display name (e.g., "Pet Name")')
    dataType: Literal["TEXT", "NUMERICAL"] = Field(description="Data type")


class CreateSchemaParams(LocationScoped):
    labels: Labels = Field(description="Singular and plural names for the custom object")
    key: str = Field(description='Unique key for the object (e.g., "pet"). The "custom_objects." prefix is added automatically')
    description: Optional[str] = Field(None, description="Description of the custom object")
    primaryDisplayPropertyDetails: PrimaryDisplayProperty = Field(description="Primary display property")


class GetSchemaParams(LocationScoped):
    key: str = Field(description='Object key (e.g., "custom_objects.pet" for custom, "contact" for standard)')
    fetchProperties: Optional[bool] = Field(None, description="Fetch all standard/custom fields (default: true)")


class UpdateSchemaParams(LocationScoped):
    key: str = Field(description="Object key to update")
    searchableProperties: List[str] = Field(
        description='Field keys that should be searchable (e.g., ["custom_objects.pet.name"])'
    )
    labels: Optional[Labels] = Field(None, description="Updated singular and plural names")
    description: Optional[str] = Field(None, description="Updated description")


class RecordFields(LocationScoped):
    owner: Optional[List[str]] = Field(None, max_length=1, description="Owner user ID (max 1, custom objects only)")
    followers: Optional[List[str]] = Field(None, max_length=10, description="Follower user IDs (max 10)")


class CreateRecordParams(RecordFields):
    schemaKey: str = Field(description='Schema key of the object (e.g., "custom_objects.pet", "business")')
    properties: Dict[str, Any] = Field(description='Record properties (e.g., {"name": "Buddy", "breed": "Golden Retriever"})')


class RecordIdParams(BaseModel):
    schemaKey: str = Field(description="Schema key of the object")
    recordId: str = Field(description="Record ID")


class UpdateRecordParams(RecordFields):
    schemaKey: str = Field(description="Schema key of the object")
    recordId: str = Field(description="ID of the record to update")
    properties: Optional[Dict[str, Any]] = Field(None, description="Updated record properties")


class SearchRecordsParams(LocationScoped):
    schemaKey: str = Field(description="Schema key of the object to search in")
    query: str = Field(description='Search query on searchable properties (e.g., "name:Buddy")')
    page: Optional[int] = Field(None, ge=1, description="Page number (default: 1)")
    pageLimit: Optional[int] = Field(None, ge=1, le=100, description="Records per page (default: 10, max: 100)")
    searchAfter: Optional[List[str]] = Field(None, description="Cursor returned by a previous search")


# =============================================================================
# Helper Functions
# =============================================================================

def _prefixed_key(args: dict) -> dict:
    if not args["key"].startswith(CUSTOM_PREFIX):
        args["key"] = CUSTOM_PREFIX + args["key"]
    return args


def _record_result(message: str):
    def reshape(data, args):
        record = data.get("record") or data
        return {"success": True, "record": record, "message": message.format(**args)}
    return reshape


def _search_result(data, args):
    records = data.get("records") or []
    total = data.get("total", len(records))
    return {
        "success": True,
        "records": records,
        "total": total,
        "message": f"Found {len(records)} records in {args['schemaKey']} ({total} total)",
    }


# =============================================================================
# Tool Module
# =============================================================================

class ObjectTools(ToolModule):
    family = "object"
    subject = "object"
    lookup = "get_all_objects"

    def build_specs(self):
        record = dict(subject="record", lookup="search_object_records")
        return [
            ToolSpec(
                name="get_all_objects",
                description="List standard and custom objects of the location",
                params=LocationScoped,
                path="/objects/",
                location="locationId",
                reshape=lambda data, args: {
                    "success": True,
                    "objects": data.get("objects") or [],
                    "message": f"Retrieved {len(data.get('objects') or [])} objects for location",
                },
            ),
            ToolSpec(
                name="create_object_schema",
                description="Create a custom object schema",
                params=CreateSchemaParams,
                method="POST", path="/objects/",
                location="locationId",
                transform=_prefixed_key,
                reshape=lambda data, args: {
                    "success": True,
                    "object": data.get("object") or data,
                    "message": f"Custom object schema created successfully with key: {args['key']}",
                },
                hints=(hint(409, "A custom object with key '{key}' already exists.\n"
                                 "Use get_all_objects to list existing objects."),),
            ),
            ToolSpec(
                name="get_object_schema",
                description="Get an object schema and its fields",
                params=GetSchemaParams,
                path="/objects/{key}",
                location="locationId",
                reshape=lambda data, args: {
                    "success": True,
                    "object": data.get("object"),
                    "fields": data.get("fields"),
                    "cache": data.get("cache"),
                    "message": f"Object schema retrieved successfully for key: {args['key']}",
                },
            ),
            ToolSpec(
                name="update_object_schema",
                description="Update an object schema's labels, description or searchable properties",
                params=UpdateSchemaParams,
                method="PUT", path="/objects/{key}",
                location="locationId",
                reshape=lambda data, args: {
                    "success": True,
                    "object": data.get("object") or data,
                    "message": f"Object schema updated successfully for key: {args['key']}",
                },
            ),

            # -----------------------------------------------------------------
            # Records
            # -----------------------------------------------------------------
            ToolSpec(
                name="create_object_record",
                description="Create a record of an object",
                params=CreateRecordParams,
                method="POST", path="/objects/{schemaKey}/records",
                location="locationId",
                reshape=lambda data, args: {
                    "success": True,
                    "record": data.get("record") or data,
                    "recordId": (data.get("record") or {}).get("id"),
                    "message": f"Record created successfully in {args['schemaKey']} "
                               f"with ID: {(data.get('record') or {}).get('id', 'unknown')}",
                },
                hints=(hint((400, 422), "Invalid record for {schemaKey}.\nProperty keys must match the object's "
                                        "field keys (see get_object_schema) and owner is only allowed on "
                                        "custom objects."),),
            ),
            ToolSpec(
                name="get_object_record",
                description="Get a record by ID",
                params=RecordIdParams,
                path="/objects/{schemaKey}/records/{recordId}",
                reshape=_record_result("Record retrieved successfully from {schemaKey}"),
                **record,
            ),
            ToolSpec(
                name="update_object_record",
                description="Update a record. Only provided fields change.",
                params=UpdateRecordParams,
                method="PUT", path="/objects/{schemaKey}/records/{recordId}",
                location="locationId",
                query=("locationId",),
                reshape=_record_result("Record updated successfully in {schemaKey}"),
                **record,
            ),
            ToolSpec(
                name="delete_object_record",
                description="Delete a record",
                params=RecordIdParams,
                method="DELETE", path="/objects/{schemaKey}/records/{recordId}",
                reshape=lambda data, args: {
                    "success": True,
                    "deletedId": args["recordId"],
                    "message": f"Record deleted successfully from {args['schemaKey']}",
                },
                **record,
            ),
            ToolSpec(
                name="search_object_records",
                description="Search records of an object by its searchable properties",
                params=SearchRecordsParams,
                method="POST", path="/objects/{schemaKey}/records/search",
                location="locationId",
                defaults={"page": 1, "pageLimit": 10},
                reshape=_search_result,
                read_only=True, idempotent=True,
            ),
        ]
