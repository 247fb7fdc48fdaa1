"""
GoHighLevel Contact Tools for the GHL MCP Server

This module exposes the GoHighLevel Contacts API as MCP tools.

Capabilities:
- Create, search, read, update, delete and upsert contacts
- Tag management (per contact and in bulk)
- Tasks and notes attached to a contact
- Duplicate detection and business association
- Appointments, followers, campaign and workflow enrolment

Authentication: Uses the shared GHLClient (Bearer token, see ghl_client.py).
Contact scopes required: contacts.readonly, contacts.write.
"""

import logging
from typing import Optional, List, Dict, Any, Union, Literal

from pydantic import BaseModel, Field

from app.core.tooling import ToolModule, ToolSpec, envelope, count_of, hint

logger = logging.getLogger(__name__)


# =============================================================================
# Input Models
# =============================================================================

class CustomFieldValue(BaseModel):
    id: str = Field(description="Custom field ID")
    field_value: Union[str, float, List[str], Dict[str, Any]] = Field(description="Value for the custom field")


class ContactIdParams(BaseModel):
    contactId: str = Field(description="Contact ID")


class CreateContactParams(BaseModel):
    firstName: Optional[str] = Field(None, description="Contact first name")
    lastName: Optional[str] = Field(None, description="Contact last name")
    email: str = Field(description="Contact email address")
    phone: Optional[str] = Field(None, description="Contact phone number")
    tags: Optional[List[str]] = Field(None, description="Tags to assign to contact")
    source: Optional[str] = Field(None, description="Source of the contact")


class SearchContactsParams(BaseModel):
    query: Optional[str] = Field(None, description="Search query string")
    email: Optional[str] = Field(None, description="Filter by email address")
    phone: Optional[str] = Field(None, description="Filter by phone number")
    limit: Optional[int] = Field(None, ge=1, le=100, description="Maximum number of results (default: 25)")


class UpdateContactParams(BaseModel):
    contactId: str = Field(description="Contact ID")
    firstName: Optional[str] = Field(None, description="Contact first name")
    lastName: Optional[str] = Field(None, description="Contact last name")
    email: Optional[str] = Field(None, description="Contact email address")
    phone: Optional[str] = Field(None, description="Contact phone number")
    tags: Optional[List[str]] = Field(None, description="Tags to assign to contact")
    customFields: Optional[List[CustomFieldValue]] = Field(
        None, description="Custom field values as [{id, field_value}]"
    )


class ContactTagsParams(BaseModel):
    contactId: str = Field(description="Contact ID")
    tags: List[str] = Field(description="Tags to add or remove")


class CreateTaskParams(BaseModel):
    contactId: str = Field(description="Contact ID")
    title: str = Field(description="Task title")
    body: Optional[str] = Field(None, description="Task description")
    dueDate: str = Field(description="Due date (ISO format)")
    completed: Optional[bool] = Field(None, description="Task completion status (default: false)")
    assignedTo: Optional[str] = Field(None, description="User ID to assign the task to")


class TaskIdParams(BaseModel):
    contactId: str = Field(description="Contact ID")
    taskId: str = Field(description="Task ID")


class UpdateTaskParams(TaskIdParams):
    title: Optional[str] = Field(None, description="Task title")
    body: Optional[str] = Field(None, description="Task description")
    dueDate: Optional[str] = Field(None, description="Due date (ISO format)")
    completed: Optional[bool] = Field(None, description="Task completion status")
    assignedTo: Optional[str] = Field(None, description="User ID to assign the task to")


class TaskCompletionParams(TaskIdParams):
    completed: bool = Field(description="Completion status")


class CreateNoteParams(BaseModel):
    contactId: str = Field(description="Contact ID")
    body: str = Field(description="Note content")
    userId: Optional[str] = Field(None, description="User ID creating the note")


class NoteIdParams(BaseModel):
    contactId: str = Field(description="Contact ID")
    noteId: str = Field(description="Note ID")


class UpdateNoteParams(NoteIdParams):
    body: str = Field(description="Note content")
    userId: Optional[str] = Field(None, description="User ID updating the note")


class UpsertContactParams(BaseModel):
    firstName: Optional[str] = Field(None, description="Contact first name")
    lastName: Optional[str] = Field(None, description="Contact last name")
    name: Optional[str] = Field(None, description="Full name")
    email: Optional[str] = Field(None, description="Contact email address")
    phone: Optional[str] = Field(None, description="Contact phone number")
    address: Optional[str] = Field(None, description="Street address")
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postalCode: Optional[str] = None
    website: Optional[str] = None
    timezone: Optional[str] = None
    companyName: Optional[str] = None
    tags: Optional[List[str]] = Field(None, description="Tags to assign to contact")
    customFields: Optional[List[CustomFieldValue]] = None
    source: Optional[str] = Field(None, description="Source of the contact")
    assignedTo: Optional[str] = Field(None, description="User ID to assign contact to")


class DuplicateContactParams(BaseModel):
    email: Optional[str] = Field(None, description="Email to check for duplicates")
    phone: Optional[str] = Field(None, description="Phone to check for duplicates")


class ContactsByBusinessParams(BaseModel):
    businessId: str = Field(description="Business ID")
    limit: Optional[int] = Field(None, ge=1, description="Maximum number of results (default: 25)")
    skip: Optional[int] = Field(None, ge=0, description="Number of results to skip (default: 0)")
    query: Optional[str] = Field(None, description="Search query")


class BulkTagsParams(BaseModel):
    contactIds: List[str] = Field(description="Array of contact IDs")
    tags: List[str] = Field(description="Tags to add or remove")
    operation: Literal["add", "remove"] = Field(description="Operation to perform")
    removeAllTags: Optional[bool] = Field(None, description="Remove all existing tags before adding new ones")


class BulkBusinessParams(BaseModel):
    contactIds: List[str] = Field(description="Array of contact IDs")
    businessId: Optional[str] = Field(None, description="Business ID (omit to remove from business)")


class FollowersParams(BaseModel):
    contactId: str = Field(description="Contact ID")
    followers: List[str] = Field(description="Array of user IDs")


class CampaignParams(BaseModel):
    contactId: str = Field(description="Contact ID")
    campaignId: str = Field(description="Campaign ID")


class WorkflowParams(BaseModel):
    contactId: str = Field(description="Contact ID")
    workflowId: str = Field(description="Workflow ID")
    eventStartTime: Optional[str] = Field(None, description="Event start time (ISO format)")


# =============================================================================
# Helper Functions
# =============================================================================

def _search_body(args: dict) -> dict:
    """Fold the email/phone shortcuts into the v2 search filter list."""
    filters = [
        {"field": key, "operator": "eq", "value": args.pop(key)}
        for key in ("email", "phone")
        if args.get(key)
    ]
    if filters:
        args["filters"] = filters
    return args


def _listing(source: str, key: str):
    def reshape(data, args):
        items = data.get(source, []) if isinstance(data, dict) else (data or [])
        return {
            "success": True,
            key: items,
            "count": len(items),
            "contactId": args["contactId"],
            "message": f"Retrieved {len(items)} {key} for contact {args['contactId']}",
        }
    return reshape


def _contact_search_result(data, args):
    contacts = data.get("contacts") or []
    total = data.get("total")
    if total is None:
        total = len(contacts)
    return envelope(data, f"Found {len(contacts)} contacts ({total} total)")


def _upsert_result(data, args):
    is_new = bool(data.get("new"))
    contact = data.get("contact") or {}
    return {
        "success": True,
        "contact": contact,
        "isNew": is_new,
        "message": f"Contact {'created' if is_new else 'updated'} successfully with ID: {contact.get('id', 'unknown')}",
    }


# =============================================================================
# Tool Module
# =============================================================================

class ContactTools(ToolModule):
    family = "contact"
    subject = "contact"
    lookup = "search_contacts"

    def build_specs(self):
        task_hints = (hint(404, "Contact task not found: {ids}\nThe task or its contact may have been deleted.\n"
                                "Use get_contact_tasks to list the tasks for this contact."),)
        note_hints = (hint(404, "Contact note not found: {ids}\nThe note or its contact may have been deleted.\n"
                                "Use get_contact_notes to list the notes for this contact."),)
        return [
            # -----------------------------------------------------------------
            # Basic contact management
            # -----------------------------------------------------------------
            ToolSpec(
                name="create_contact",
                description="Create a new contact in GoHighLevel",
                params=CreateContactParams,
                method="POST", path="/contacts/",
                location="locationId",
                message="Contact created successfully",
                hints=(hint(400, "Invalid contact data for create_contact.\nCheck that email is a valid address and "
                                 "phone uses E.164 format (e.g. +15551234567)."),
                       hint(409, "A contact with this email or phone already exists in the location.\n"
                                 "Use upsert_contact to merge, or get_duplicate_contact to find it.")),
            ),
            ToolSpec(
                name="search_contacts",
                description="Search for contacts by name, email, phone, or other criteria. "
                            "Call with no parameters to list all contacts.",
                params=SearchContactsParams,
                method="POST", path="/contacts/search",
                location="locationId",
                defaults={"limit": 25},
                renames={"limit": "pageLimit"},
                transform=_search_body,
                reshape=_contact_search_result,
                read_only=True, idempotent=True,
            ),
            ToolSpec(
                name="get_contact",
                description="Get detailed information about a specific contact",
                params=ContactIdParams,
                path="/contacts/{contactId}",
                message="Contact {contactId} retrieved successfully",
            ),
            ToolSpec(
                name="update_contact",
                description="Update contact information. Only the provided fields are changed.",
                params=UpdateContactParams,
                method="PUT", path="/contacts/{contactId}",
                message="Contact {contactId} updated successfully",
            ),
            ToolSpec(
                name="delete_contact",
                description="Delete a contact from GoHighLevel",
                params=ContactIdParams,
                method="DELETE", path="/contacts/{contactId}",
                message="Contact {contactId} deleted successfully",
            ),
            ToolSpec(
                name="add_contact_tags",
                description="Add tags to a contact",
                params=ContactTagsParams,
                method="POST", path="/contacts/{contactId}/tags",
                reshape=lambda data, args: envelope(
                    data, f"Added {len(args['tags'])} tags to contact {args['contactId']}"),
            ),
            ToolSpec(
                name="remove_contact_tags",
                description="Remove tags from a contact",
                params=ContactTagsParams,
                method="DELETE", path="/contacts/{contactId}/tags",
                body=("tags",),
                reshape=lambda data, args: envelope(
                    data, f"Removed {len(args['tags'])} tags from contact {args['contactId']}"),
            ),

            # -----------------------------------------------------------------
            # Tasks
            # -----------------------------------------------------------------
            ToolSpec(
                name="get_contact_tasks",
                description="Get all tasks for a contact",
                params=ContactIdParams,
                path="/contacts/{contactId}/tasks",
                reshape=_listing("tasks", "tasks"),
            ),
            ToolSpec(
                name="create_contact_task",
                description="Create a new task for a contact",
                params=CreateTaskParams,
                method="POST", path="/contacts/{contactId}/tasks",
                defaults={"completed": False},
                message="Task '{title}' created for contact {contactId}",
            ),
            ToolSpec(
                name="get_contact_task",
                description="Get a specific task for a contact",
                params=TaskIdParams,
                path="/contacts/{contactId}/tasks/{taskId}",
                hints=task_hints,
                message="Task {taskId} retrieved successfully",
            ),
            ToolSpec(
                name="update_contact_task",
                description="Update a task for a contact",
                params=UpdateTaskParams,
                method="PUT", path="/contacts/{contactId}/tasks/{taskId}",
                hints=task_hints,
                message="Task {taskId} updated successfully",
            ),
            ToolSpec(
                name="delete_contact_task",
                description="Delete a task for a contact",
                params=TaskIdParams,
                method="DELETE", path="/contacts/{contactId}/tasks/{taskId}",
                hints=task_hints,
                message="Task {taskId} deleted successfully",
            ),
            ToolSpec(
                name="update_task_completion",
                description="Mark a contact task as completed or not completed",
                params=TaskCompletionParams,
                method="PUT", path="/contacts/{contactId}/tasks/{taskId}/completed",
                hints=task_hints,
                message="Task {taskId} completion set to {completed}",
            ),

            # -----------------------------------------------------------------
            # Notes
            # -----------------------------------------------------------------
            ToolSpec(
                name="get_contact_notes",
                description="Get all notes for a contact",
                params=ContactIdParams,
                path="/contacts/{contactId}/notes",
                reshape=_listing("notes", "notes"),
            ),
            ToolSpec(
                name="create_contact_note",
                description="Create a new note for a contact",
                params=CreateNoteParams,
                method="POST", path="/contacts/{contactId}/notes",
                message="Note created for contact {contactId}",
            ),
            ToolSpec(
                name="get_contact_note",
                description="Get a specific note for a contact",
                params=NoteIdParams,
                path="/contacts/{contactId}/notes/{noteId}",
                hints=note_hints,
                message="Note {noteId} retrieved successfully",
            ),
            ToolSpec(
                name="update_contact_note",
                description="Update a note for a contact",
                params=UpdateNoteParams,
                method="PUT", path="/contacts/{contactId}/notes/{noteId}",
                hints=note_hints,
                message="Note {noteId} updated successfully",
            ),
            ToolSpec(
                name="delete_contact_note",
                description="Delete a note for a contact",
                params=NoteIdParams,
                method="DELETE", path="/contacts/{contactId}/notes/{noteId}",
                hints=note_hints,
                message="Note {noteId} deleted successfully",
            ),

            # -----------------------------------------------------------------
            # Advanced operations
            # -----------------------------------------------------------------
            ToolSpec(
                name="upsert_contact",
                description="Create or update contact based on email/phone (smart merge). "
                            "The location's duplicate settings decide which contact is updated.",
                params=UpsertContactParams,
                method="POST", path="/contacts/upsert",
                location="locationId",
                renames={"address": "address1"},
                reshape=_upsert_result,
            ),
            ToolSpec(
                name="get_duplicate_contact",
                description="Check for duplicate contacts by email or phone",
                params=DuplicateContactParams,
                path="/contacts/search/duplicate",
                location="locationId",
                renames={"phone": "number"},
                reshape=lambda data, args: envelope(
                    data,
                    "Duplicate contact found" if data.get("contact") else "No duplicate contact found"),
            ),
            ToolSpec(
                name="get_contacts_by_business",
                description="Get contacts associated with a specific business",
                params=ContactsByBusinessParams,
                path="/contacts/business/{businessId}",
                location="locationId",
                defaults={"limit": 25, "skip": 0},
                subject="business", id_field="businessId",
                reshape=lambda data, args: envelope(
                    data, f"Found {count_of(data, 'contacts')} contacts for business {args['businessId']}"),
            ),
            ToolSpec(
                name="get_contact_appointments",
                description="Get all appointments for a contact",
                params=ContactIdParams,
                path="/contacts/{contactId}/appointments",
                reshape=_listing("events", "appointments"),
            ),

            # -----------------------------------------------------------------
            # Bulk operations
            # -----------------------------------------------------------------
            ToolSpec(
                name="bulk_update_contact_tags",
                description="Bulk add or remove tags from multiple contacts",
                params=BulkTagsParams,
                method="POST", path="/contacts/bulk/tags/update/{operation}",
                location="locationId",
                renames={"contactIds": "contacts"},
                reshape=lambda data, args: envelope(
                    data, f"Bulk {args['operation']} of {len(args['tags'])} tags on {len(args['contactIds'])} contacts completed"),
                idempotent=True,
            ),
            ToolSpec(
                name="bulk_update_contact_business",
                description="Bulk update business association for multiple contacts",
                params=BulkBusinessParams,
                method="POST", path="/contacts/bulk/business",
                location="locationId",
                renames={"contactIds": "ids"},
                reshape=lambda data, args: envelope(
                    data, f"Business association updated for {len(args['contactIds'])} contacts"),
                idempotent=True,
            ),

            # -----------------------------------------------------------------
            # Followers, campaigns, workflows
            # -----------------------------------------------------------------
            ToolSpec(
                name="add_contact_followers",
                description="Add followers to a contact",
                params=FollowersParams,
                method="POST", path="/contacts/{contactId}/followers",
                reshape=lambda data, args: envelope(
                    data, f"Added {len(args['followers'])} followers to contact {args['contactId']}"),
            ),
            ToolSpec(
                name="remove_contact_followers",
                description="Remove followers from a contact",
                params=FollowersParams,
                method="DELETE", path="/contacts/{contactId}/followers",
                body=("followers",),
                reshape=lambda data, args: envelope(
                    data, f"Removed {len(args['followers'])} followers from contact {args['contactId']}"),
            ),
            ToolSpec(
                name="add_contact_to_campaign",
                description="Add contact to a marketing campaign",
                params=CampaignParams,
                method="POST", path="/contacts/{contactId}/campaigns/{campaignId}",
                message="Contact {contactId} added to campaign {campaignId}",
            ),
            ToolSpec(
                name="remove_contact_from_campaign",
                description="Remove contact from a specific campaign",
                params=CampaignParams,
                method="DELETE", path="/contacts/{contactId}/campaigns/{campaignId}",
                message="Contact {contactId} removed from campaign {campaignId}",
            ),
            ToolSpec(
                name="remove_contact_from_all_campaigns",
                description="Remove contact from all campaigns",
                params=ContactIdParams,
                method="DELETE", path="/contacts/{contactId}/campaigns/removeAll",
                message="Contact {contactId} removed from all campaigns",
            ),
            ToolSpec(
                name="add_contact_to_workflow",
                description="Add contact to a workflow",
                params=WorkflowParams,
                method="POST", path="/contacts/{contactId}/workflow/{workflowId}",
                message="Contact {contactId} added to workflow {workflowId}",
            ),
            ToolSpec(
                name="remove_contact_from_workflow",
                description="Remove contact from a workflow",
                params=WorkflowParams,
                method="DELETE", path="/contacts/{contactId}/workflow/{workflowId}",
                body=("eventStartTime",),
                message="Contact {contactId} removed from workflow {workflowId}",
            ),
        ]
