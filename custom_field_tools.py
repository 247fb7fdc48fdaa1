"""
GoHighLevel Custom Fields (v2) Tools for the GHL MCP Server

Custom fields and folders for custom objects. Field and object keys use the
"custom_object.<object>" / "custom_object.<object>.<field>" format.

Authentication: Uses the shared GHLClient (Bearer token, see ghl_client.py).
Requires locations/customFields.readonly and locations/customFields.write scopes.
"""

import logging
from typing import Optional, List, Literal

from pydantic import BaseModel, Field

from app.core.tooling import ToolModule, ToolSpec, location_field, hint

logger = logging.getLogger(__name__)

FieldDataType = Literal[
    "TEXT", "LARGE_TEXT", "NUMERICAL", "PHONE", "MONETORY", "CHECKBOX", "SINGLE_OPTIONS",
    "MULTIPLE_OPTIONS", "DATE", "TEXTBOX_LIST", "FILE_UPLOAD", "RADIO", "EMAIL",
]
AcceptedFormat = Literal[".pdf", ".docx", ".doc", ".jpg", ".jpeg", ".png", ".gif", ".csv", ".xlsx", ".xls", "all"]


# =============================================================================
# Input Models
# =============================================================================

class FieldOption(BaseModel):
    key: str = Field(description="Key of the option")
    label: str = Field(description="Label of the option")
    url: Optional[str] = Field(None, description="URL associated with the option (RADIO type only)")


class IdParams(BaseModel):
    id: str = Field(description="Custom field or folder ID")


class FieldSettings(BaseModel):
    locationId: Optional[str] = location_field()
    name: Optional[str] = Field(None, description="Field name")
    description: Optional[str] = Field(None, description="Description of the field")
    placeholder: Optional[str] = Field(None, description="Placeholder text")
    showInForms: Optional[bool] = Field(None, description="Show the field in forms (default: true)")
    options: Optional[List[FieldOption]] = Field(
        None, description="Options for SINGLE_OPTIONS, MULTIPLE_OPTIONS, RADIO, CHECKBOX and TEXTBOX_LIST fields. "
                          "Replaces ALL existing options on update."
    )
    acceptedFormats: Optional[AcceptedFormat] = Field(None, description="Allowed file formats (FILE_UPLOAD only)")
    maxFileLimit: Optional[int] = Field(None, description="Maximum number of files (FILE_UPLOAD only)")


class CreateFieldParams(FieldSettings):
    dataType: FieldDataType = Field(description="Type of field to create")
    fieldKey: str = Field(description='Field key, e.g. "custom_object.pet.name"')
    objectKey: str = Field(description='Object key, e.g. "custom_object.pet"')
    parentId: str = Field(description="ID of the parent folder")
    allowCustomOption: Optional[bool] = Field(None, description="Allow custom option values (RADIO only)")


class UpdateFieldParams(FieldSettings):
    id: str = Field(description="ID of the custom field to update")


class ObjectKeyParams(BaseModel):
    locationId: Optional[str] = location_field()
    objectKey: str = Field(description='Object key, e.g. "custom_object.pet"')


class CreateFolderParams(ObjectKeyParams):
    name: str = Field(description="Folder name")


class UpdateFolderParams(BaseModel):
    locationId: Optional[str] = location_field()
    id: str = Field(description="ID of the folder to update")
    name: str = Field(description="New folder name")


class DeleteFolderParams(BaseModel):
    locationId: Optional[str] = location_field()
    id: str = Field(description="ID of the folder to delete")


# =============================================================================
# Tool Module
# =============================================================================

class CustomFieldTools(ToolModule):
    family = "custom field"
    subject = "custom field"
    lookup = "get_custom_fields_by_object_key"

    def build_specs(self):
        folder = dict(subject="custom field folder")
        return [
            ToolSpec(
                name="get_custom_field_by_id",
                description="Get a custom field or folder by ID",
                params=IdParams,
                path="/custom-fields/{id}",
                message="Custom field/folder retrieved successfully",
            ),
            ToolSpec(
                name="create_custom_field",
                description="Create a custom field on a custom object",
                params=CreateFieldParams,
                method="POST", path="/custom-fields/",
                location="locationId",
                defaults={"showInForms": True},
                message="Custom field '{fieldKey}' created successfully",
                hints=(hint(409, "Field key '{fieldKey}' already exists on {objectKey}."),
                       hint((400, 422), "Invalid custom field.\nfieldKey must look like "
                                        "custom_object.<object>.<field>, objectKey like custom_object.<object>, "
                                        "and option-based types need options.")),
            ),
            ToolSpec(
                name="update_custom_field",
                description="Update a custom field. options replaces the full option list.",
                params=UpdateFieldParams,
                method="PUT", path="/custom-fields/{id}",
                location="locationId",
                defaults={"showInForms": True},
                message="Custom field updated successfully",
            ),
            ToolSpec(
                name="delete_custom_field",
                description="Delete a custom field",
                params=IdParams,
                method="DELETE", path="/custom-fields/{id}",
                message="Custom field deleted successfully",
            ),
            ToolSpec(
                name="get_custom_fields_by_object_key",
                description="List the custom fields and folders of an object",
                params=ObjectKeyParams,
                path="/custom-fields/object-key/{objectKey}",
                location="locationId",
                subject="object", lookup="get_all_objects",
                reshape=lambda data, args: {
                    "success": True,
                    "data": data,
                    "message": f"Retrieved {len(data.get('fields') or [])} fields and "
                               f"{len(data.get('folders') or [])} folders for object '{args['objectKey']}'",
                },
            ),
            ToolSpec(
                name="create_custom_field_folder",
                description="Create a folder for organizing an object's custom fields",
                params=CreateFolderParams,
                method="POST", path="/custom-fields/folder",
                location="locationId",
                message="Custom field folder '{name}' created successfully",
                **folder,
            ),
            ToolSpec(
                name="update_custom_field_folder",
                description="Rename a custom field folder",
                params=UpdateFolderParams,
                method="PUT", path="/custom-fields/folder/{id}",
                location="locationId",
                message="Custom field folder updated to '{name}'",
                **folder,
            ),
            ToolSpec(
                name="delete_custom_field_folder",
                description="Delete a custom field folder",
                params=DeleteFolderParams,
                method="DELETE", path="/custom-fields/folder/{id}",
                location="locationId",
                message="Custom field folder deleted successfully",
                **folder,
            ),
        ]
