"""
GoHighLevel Association Tools for the GHL MCP Server

Associations link two object types (contacts, opportunities, custom objects);
relations link two concrete records through an association.

Authentication: Uses the shared GHLClient (Bearer token, see ghl_client.py).
Requires associations.readonly, associations.write and
associations/relation scopes.
"""

import logging
from typing import Optional, List

from pydantic import BaseModel, Field

from app.core.tooling import ToolModule, ToolSpec, envelope, counted, location_field, hint

logger = logging.getLogger(__name__)


# =============================================================================
# Input Models
# =============================================================================

class LocationScoped(BaseModel):
    locationId: Optional[str] = location_field()


class ListAssociationsParams(LocationScoped):
    skip: Optional[int] = Field(None, ge=0, description="Number of records to skip for pagination (default: 0)")
    limit: Optional[int] = Field(None, ge=1, le=100, description="Maximum number of records to return (default: 20, max: 100)")


class CreateAssociationParams(LocationScoped):
    key: str = Field(description='Unique key for the association (e.g., "student_parent")')
    firstObjectLabel: str = Field(description='Label for the first object (e.g., "student")')
    firstObjectKey: str = Field(description='Key for the first object (e.g., "custom_objects.student")')
    secondObjectLabel: str = Field(description='Label for the second object (e.g., "parent")')
    secondObjectKey: str = Field(description='Key for the second object (e.g., "contact")')


class AssociationIdParams(BaseModel):
    associationId: str = Field(description="Association ID")


class UpdateAssociationParams(AssociationIdParams):
    firstObjectLabel: str = Field(description="New label for the first object in the association")
    secondObjectLabel: str = Field(description="New label for the second object in the association")


class AssociationKeyParams(LocationScoped):
    keyName: str = Field(description="Key name of the association")


class ObjectKeyParams(LocationScoped):
    objectKey: str = Field(description='Object key (e.g., "custom_objects.pet", "contact", "opportunity")')


class CreateRelationParams(LocationScoped):
    associationId: str = Field(description="Association ID to use for this relation")
    firstRecordId: str = Field(description="ID of the first record (matches the first object of the association)")
    secondRecordId: str = Field(description="ID of the second record (matches the second object of the association)")


class RelationsByRecordParams(LocationScoped):
    recordId: str = Field(description="Record ID to get relations for")
    skip: Optional[int] = Field(None, ge=0, description="Number of records to skip for pagination (default: 0)")
    limit: Optional[int] = Field(None, ge=1, description="Maximum number of records to return (default: 20)")
    associationIds: Optional[List[str]] = Field(None, description="Only return relations of these associations")


class DeleteRelationParams(LocationScoped):
    relationId: str = Field(description="Relation ID to delete")


# =============================================================================
# Tool Module
# =============================================================================

class AssociationTools(ToolModule):
    family = "association"
    subject = "association"
    lookup = "get_all_associations"

    def build_specs(self):
        page = {"skip": 0, "limit": 20}
        relation = dict(subject="relation", lookup="get_relations_by_record")
        return [
            ToolSpec(
                name="get_all_associations",
                description="List all associations defined for the location",
                params=ListAssociationsParams,
                path="/associations/",
                location="locationId",
                defaults=page,
                reshape=counted("associations", "associations"),
            ),
            ToolSpec(
                name="create_association",
                description="Create an association between two object types",
                params=CreateAssociationParams,
                method="POST", path="/associations/",
                location="locationId",
                message="Association '{key}' created successfully",
                hints=(hint(409, "Association key '{key}' already exists.\n"
                                 "Use get_association_by_key to inspect it or pick another key."),
                       hint((400, 422), "Invalid association.\nObject keys must be existing object keys "
                                        "such as contact, opportunity or custom_objects.<name>.")),
            ),
            ToolSpec(
                name="get_association_by_id",
                description="Get an association by ID",
                params=AssociationIdParams,
                path="/associations/{associationId}",
                message="Association retrieved successfully",
            ),
            ToolSpec(
                name="update_association",
                description="Update the labels of an association",
                params=UpdateAssociationParams,
                method="PUT", path="/associations/{associationId}",
                message="Association updated successfully",
            ),
            ToolSpec(
                name="delete_association",
                description="Delete an association and all relations that use it",
                params=AssociationIdParams,
                method="DELETE", path="/associations/{associationId}",
                message="Association deleted successfully",
            ),
            ToolSpec(
                name="get_association_by_key",
                description="Get an association by its key name",
                params=AssociationKeyParams,
                path="/associations/key/{keyName}",
                location="locationId",
                message="Association with key '{keyName}' retrieved successfully",
            ),
            ToolSpec(
                name="get_association_by_object_key",
                description="Get associations involving an object key",
                params=ObjectKeyParams,
                path="/associations/objectKey/{objectKey}",
                location="locationId",
                message="Association with object key '{objectKey}' retrieved successfully",
            ),

            # -----------------------------------------------------------------
            # Relations
            # -----------------------------------------------------------------
            ToolSpec(
                name="create_relation",
                description="Link two records through an association",
                params=CreateRelationParams,
                method="POST", path="/associations/relations",
                location="locationId",
                message="Relation created successfully between records",
                id_field="associationId",
                hints=(hint(409, "These records are already related through association {associationId}."),),
            ),
            ToolSpec(
                name="get_relations_by_record",
                description="List relations of a record",
                params=RelationsByRecordParams,
                path="/associations/relations/{recordId}",
                location="locationId",
                defaults=page,
                reshape=lambda data, args: envelope(
                    data, f"Retrieved {len((data or {}).get('relations') or [])} relations for record"),
                subject="record",
            ),
            ToolSpec(
                name="delete_relation",
                description="Delete a relation between two records",
                params=DeleteRelationParams,
                method="DELETE", path="/associations/relations/{relationId}",
                location="locationId",
                message="Relation deleted successfully",
                **relation,
            ),
        ]
