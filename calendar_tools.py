"""
GoHighLevel Calendar Tools for the GHL MCP Server

This module exposes GoHighLevel calendars, appointments and block slots as
MCP tools, designed for AI agent-driven scheduling.

Capabilities:
- List calendar groups and calendars
- Create, update, and delete calendars
- Query events in a date range and find free booking slots
- Book, read, reschedule, and cancel appointments
- Block time on a calendar

Authentication: Uses the shared GHLClient (Bearer token, see ghl_client.py).
Requires calendars.readonly, calendars.write, calendars/events.readonly and
calendars/events.write scopes.

Date handling:
    GHL expects epoch milliseconds for event and slot queries. ISO 8601 input
    is converted here; values that are already all digits are passed through.
"""

import re
import logging
from typing import Optional, Literal
from datetime import datetime, timezone

from pydantic import BaseModel, Field

from app.core.tooling import ToolModule, ToolSpec, envelope, hint

logger = logging.getLogger(__name__)

_DIGITS = re.compile(r"^\d+$")
_FRACTION = re.compile(r"\.(\d+)")

AppointmentStatus = Literal["confirmed", "showed", "noshow", "cancelled"]


# =============================================================================
# Helper Functions
# =============================================================================

def _parse_datetime(value: str) -> Optional[datetime]:
    """Parse ISO 8601 date or datetime. Naive values are treated as UTC."""
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    # fromisoformat on 3.10 only takes 3 or 6 fractional digits
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def to_epoch_millis(value: str) -> str:
    """Convert an ISO timestamp to epoch milliseconds for event range queries.

    Digit-only input is already milliseconds. Unparseable input is passed
    through unchanged so the API can report it.
    """
    if _DIGITS.match(value):
        return value
    parsed = _parse_datetime(value)
    if parsed is None:
        return value
    return str(int(parsed.timestamp() * 1000))


def date_to_epoch_millis(value: str) -> int:
    """Convert a YYYY-MM-DD (or ISO) value to epoch milliseconds for free-slot queries.

    Date-only values resolve to the start of that day in UTC. Unparseable
    input falls back to the current time.
    """
    if _DIGITS.match(value):
        return int(value)
    parsed = _parse_datetime(value)
    if parsed is None:
        logger.warning(f"Could not parse date '{value}' for free-slot query, using current time")
        return int(datetime.now(timezone.utc).timestamp() * 1000)
    return int(parsed.timestamp() * 1000)


def _event_range(args: dict) -> dict:
    args["startTime"] = to_epoch_millis(args["startTime"])
    args["endTime"] = to_epoch_millis(args["endTime"])
    return args


def _slot_range(args: dict) -> dict:
    args["startDate"] = date_to_epoch_millis(args["startDate"])
    args["endDate"] = date_to_epoch_millis(args["endDate"])
    return args


def _permission(action: str, *checks: str) -> str:
    lines = "\n".join(f"- {c}" for c in checks)
    return f"Permission denied: Cannot {action}.\nPlease check:\n{lines}"


ISO_HELP = ("Invalid date/time format.\nUse ISO 8601 format for startTime and endTime.\n"
            "Example: \"2025-10-20T14:00:00Z\"")

CALENDAR_NOT_FOUND = ("Calendar not found: {calendarId}\n"
                      "The calendar may have been deleted or the ID is incorrect.\n"
                      "Use get_calendars tool to find valid calendar IDs.")

APPOINTMENT_NOT_FOUND = ("Appointment not found: {eventId}\n"
                         "The appointment may have been deleted or the ID is incorrect.\n"
                         "Use get_calendar_events tool to find valid appointment IDs.")


# =============================================================================
# Input Models
# =============================================================================

class GetCalendarGroupsParams(BaseModel):
    pass


class GetCalendarsParams(BaseModel):
    groupId: Optional[str] = Field(None, description="Optional: Filter calendars by calendar group ID")


class CreateCalendarParams(BaseModel):
    name: str = Field(description='Calendar name (e.g., "Sales Consultations")')
    description: str = Field(description="Calendar description/purpose")
    groupId: Optional[str] = Field(None, description="Calendar group ID to assign this calendar to")
    meetingLocation: Optional[str] = Field(None, description="Default meeting location (address, Zoom link, etc.)")
    slotDuration: Optional[int] = Field(None, description="Default appointment duration in minutes (e.g., 30, 60)")
    slotInterval: Optional[int] = Field(None, description="Booking interval in minutes (e.g., 15, 30)")


class UpdateCalendarParams(BaseModel):
    calendarId: str = Field(description="The unique ID of the calendar to update")
    name: Optional[str] = Field(None, description="New calendar name")
    description: Optional[str] = Field(None, description="New calendar description")
    groupId: Optional[str] = Field(None, description="Move to different calendar group")
    meetingLocation: Optional[str] = Field(None, description="Update meeting location")
    slotDuration: Optional[int] = Field(None, description="Update appointment duration in minutes")
    slotInterval: Optional[int] = Field(None, description="Update booking interval in minutes")


class CalendarIdParams(BaseModel):
    calendarId: str = Field(description="The unique ID of the calendar")


class CalendarEventsParams(BaseModel):
    calendarId: str = Field(description="The unique ID of the calendar to query")
    startTime: str = Field(description='Start of date range in ISO 8601 format (e.g., "2025-10-20T09:00:00Z")')
    endTime: str = Field(description='End of date range in ISO 8601 format (e.g., "2025-10-21T17:00:00Z")')


class FreeSlotsParams(BaseModel):
    calendarId: str = Field(description="The unique ID of the calendar to check availability")
    startDate: str = Field(description='Start date (YYYY-MM-DD format, e.g., "2025-10-20")')
    endDate: str = Field(description='End date (YYYY-MM-DD format, e.g., "2025-10-27")')
    timezone: str = Field(description='Timezone for availability (IANA format, e.g., "America/New_York", "UTC")')


class CreateAppointmentParams(BaseModel):
    calendarId: str = Field(description="The unique ID of the calendar to book on")
    contactId: str = Field(description="The GHL contact ID for this appointment")
    startTime: str = Field(description='Appointment start time in ISO 8601 format (e.g., "2025-10-20T14:00:00Z")')
    endTime: str = Field(description='Appointment end time in ISO 8601 format (e.g., "2025-10-20T15:00:00Z")')
    title: Optional[str] = Field(None, description="Appointment title/subject")
    appointmentStatus: Optional[AppointmentStatus] = Field(None, description="Appointment status")
    assignedUserId: Optional[str] = Field(None, description="Assign to specific team member (user ID)")


class EventIdParams(BaseModel):
    eventId: str = Field(description="The unique ID of the appointment/event")


class UpdateAppointmentParams(BaseModel):
    eventId: str = Field(description="The unique ID of the appointment to update")
    startTime: Optional[str] = Field(None, description="New start time in ISO 8601 format")
    endTime: Optional[str] = Field(None, description="New end time in ISO 8601 format")
    title: Optional[str] = Field(None, description="New appointment title")
    appointmentStatus: Optional[AppointmentStatus] = Field(None, description="New appointment status")
    assignedUserId: Optional[str] = Field(None, description="Reassign to different team member")


class CreateBlockSlotParams(BaseModel):
    calendarId: str = Field(description="The unique ID of the calendar to block time on")
    startTime: str = Field(description='Block start time in ISO 8601 format (e.g., "2025-10-20T12:00:00Z")')
    endTime: str = Field(description='Block end time in ISO 8601 format (e.g., "2025-10-20T13:00:00Z")')
    title: Optional[str] = Field(None, description='Description of the block (e.g., "Lunch Break")')
    assignedUserId: Optional[str] = Field(None, description="Assign to specific team member (user ID)")


class UpdateBlockSlotParams(BaseModel):
    eventId: str = Field(description="The unique ID of the block slot to update")
    startTime: Optional[str] = Field(None, description="New start time in ISO 8601 format")
    endTime: Optional[str] = Field(None, description="New end time in ISO 8601 format")
    title: Optional[str] = Field(None, description="New description for the block")
    assignedUserId: Optional[str] = Field(None, description="Reassign to different team member")


# =============================================================================
# Response Shaping
# =============================================================================

def _calendars_result(data, args):
    calendars = data.get("calendars") or []
    scope = f" in group {args['groupId']}" if args.get("groupId") else ""
    return envelope(data, f"Retrieved {len(calendars)} calendars{scope}")


def _events_result(data, args):
    events = data.get("events") or []
    return envelope(data, f"Found {len(events)} events on calendar {args['calendarId']}")


def _slots_result(data, args):
    days = [k for k, v in data.items() if isinstance(v, dict) and "slots" in v]
    total = sum(len(data[d].get("slots") or []) for d in days)
    return envelope(data, f"Found {total} free slots across {len(days)} days on calendar {args['calendarId']}")


# =============================================================================
# Tool Module
# =============================================================================

class CalendarTools(ToolModule):
    family = "calendar"
    subject = "calendar"
    lookup = "get_calendars"

    def build_specs(self):
        return [
            # -----------------------------------------------------------------
            # Calendar management
            # -----------------------------------------------------------------
            ToolSpec(
                name="get_calendar_groups",
                description="List all calendar groups in the location. Groups organise calendars by team or service.",
                params=GetCalendarGroupsParams,
                path="/calendars/groups",
                location="locationId",
                reshape=lambda data, args: envelope(data, f"Retrieved {len(data.get('groups', []))} calendar groups"),
                hints=(
                    hint((401, 403), _permission("access calendar groups",
                                                 "API key has calendar read permissions",
                                                 "User has access to calendars in this location",
                                                 "Location has calendars feature enabled")),
                    hint(500, "Calendar service error: The calendar system may not be properly configured.\n"
                              "Please verify:\n- Calendars feature is enabled for this location\n"
                              "- Calendar settings are configured in GHL dashboard"),
                ),
            ),
            ToolSpec(
                name="get_calendars",
                description="List calendars in the location, optionally filtered by calendar group.",
                params=GetCalendarsParams,
                path="/calendars/",
                location="locationId",
                reshape=_calendars_result,
                hints=(
                    hint(404, "Calendar group not found: {groupId}\n"
                              "The specified group ID doesn't exist or has been deleted.\n"
                              "Use get_calendar_groups tool to see available groups."),
                    hint((401, 403), _permission("access calendars",
                                                 "API key has calendar read permissions",
                                                 "User has access to calendars in this location")),
                ),
            ),
            ToolSpec(
                name="create_calendar",
                description="Create a new booking calendar. Requires admin or calendar management permissions.",
                params=CreateCalendarParams,
                method="POST", path="/calendars/",
                location="locationId",
                reshape=lambda data, args: envelope(
                    data, f"Calendar '{args['name']}' created with ID: {data.get('calendar', {}).get('id', 'unknown')}"),
                hints=(
                    hint((401, 403), _permission("create calendars",
                                                 "API key has calendar write/admin permissions",
                                                 "User role allows calendar creation",
                                                 "Location plan includes calendar management")),
                    hint(400, "Invalid calendar data.\nCommon issues:\n- Missing required fields (name, description)\n"
                              "- Invalid groupId (use get_calendar_groups to verify)\n"
                              "- Invalid slot duration or interval values\n- Name already in use"),
                    hint(404, "Calendar group not found: {groupId}\nThe specified group ID doesn't exist.\n"
                              "Use get_calendar_groups tool to find valid group IDs."),
                ),
            ),
            ToolSpec(
                name="update_calendar",
                description="Update calendar settings. Only the provided fields are changed.",
                params=UpdateCalendarParams,
                method="PUT", path="/calendars/{calendarId}",
                message="Calendar {calendarId} updated successfully",
                hints=(
                    hint(404, CALENDAR_NOT_FOUND),
                    hint((401, 403), _permission("update calendar",
                                                 "API key has calendar write/admin permissions",
                                                 "User has permission to modify this calendar",
                                                 "Calendar is not system-protected")),
                    hint(400, "Invalid update data.\nCommon issues:\n"
                              "- Invalid groupId (use get_calendar_groups to verify)\n"
                              "- Invalid slot duration or interval values\n- Name conflicts with existing calendar"),
                ),
            ),
            ToolSpec(
                name="delete_calendar",
                description="Permanently delete a calendar. Fails while the calendar has active appointments.",
                params=CalendarIdParams,
                method="DELETE", path="/calendars/{calendarId}",
                message="Calendar {calendarId} deleted successfully",
                hints=(
                    hint(404, "Calendar not found: {calendarId}\n"
                              "The calendar may have already been deleted or the ID is incorrect.\n"
                              "Use get_calendars tool to verify calendar exists."),
                    hint((401, 403), _permission("delete calendar",
                                                 "API key has calendar admin permissions",
                                                 "User has permission to delete calendars",
                                                 "Calendar is not system-protected")),
                    hint(409, "Cannot delete calendar: Active appointments exist.\n"
                              "This calendar has scheduled appointments and cannot be deleted.\nOptions:\n"
                              "1. Cancel all appointments first (use get_calendar_events to find them)\n"
                              "2. Disable the calendar instead of deleting\n"
                              "3. Wait until all appointments are completed"),
                ),
            ),

            # -----------------------------------------------------------------
            # Appointment booking
            # -----------------------------------------------------------------
            ToolSpec(
                name="get_calendar_events",
                description="Get appointments and blocked slots on a calendar within a date range. "
                            "Times are ISO 8601 and converted to epoch milliseconds.",
                params=CalendarEventsParams,
                path="/calendars/events",
                location="locationId",
                transform=_event_range,
                reshape=_events_result,
                hints=(
                    hint(404, CALENDAR_NOT_FOUND),
                    hint(400, "Invalid date/time format.\nDate/time must be in ISO 8601 format.\nExamples:\n"
                              "- \"2025-10-20T09:00:00Z\" (UTC)\n"
                              "- \"2025-10-20T14:00:00-05:00\" (with timezone offset)", contains="time"),
                    hint((401, 403), _permission("access calendar events",
                                                 "API key has calendar read permissions",
                                                 "User has access to this calendar")),
                ),
            ),
            ToolSpec(
                name="get_free_slots",
                description="Find available booking slots on a calendar between two dates (YYYY-MM-DD) "
                            "in the given IANA timezone.",
                params=FreeSlotsParams,
                path="/calendars/{calendarId}/free-slots",
                transform=_slot_range,
                reshape=_slots_result,
                hints=(
                    hint(404, CALENDAR_NOT_FOUND),
                    hint(400, "Invalid timezone: {timezone}\nUse standard IANA timezone format.\nExamples:\n"
                              "- \"America/New_York\"\n- \"Europe/London\"\n- \"Asia/Tokyo\"\n- \"UTC\"",
                         contains=("timezone", "time zone")),
                    hint(400, "Invalid date format.\nDate must be in YYYY-MM-DD format.\n"
                              "Examples: \"2025-10-20\", \"2025-12-31\"", contains="date"),
                    hint((401, 403), _permission("check calendar availability",
                                                 "API key has calendar read permissions",
                                                 "User has access to this calendar")),
                ),
            ),
            ToolSpec(
                name="create_appointment",
                description="Book an appointment for a contact on a calendar. "
                            "Use get_free_slots first to pick an available time.",
                params=CreateAppointmentParams,
                method="POST", path="/calendars/events/appointments",
                location="locationId",
                reshape=lambda data, args: envelope(
                    data, f"Appointment booked with ID: {data.get('id', 'unknown')}"),
                hints=(
                    hint(409, "Appointment conflict: Time slot is already booked.\n"
                              "The requested time slot is not available.\nSolutions:\n"
                              "1. Use get_free_slots tool to find available times\n"
                              "2. Choose a different time slot\n"
                              "3. Check calendar availability before booking"),
                    hint(404, CALENDAR_NOT_FOUND, contains="calendar"),
                    hint(404, "Contact not found: {contactId}\n"
                              "The contact ID doesn't exist or has been deleted.\n"
                              "Use search_contacts tool to find valid contact IDs.", contains="contact"),
                    hint(400, ISO_HELP, contains="time"),
                    hint(400, "Invalid appointment data.\nCommon issues:\n"
                              "- Missing required fields (calendarId, contactId, startTime, endTime)\n"
                              "- Invalid time range (endTime must be after startTime)\n"
                              "- Invalid status value\n- Invalid assignedUserId"),
                    hint((401, 403), _permission("create appointments",
                                                 "API key has calendar write permissions",
                                                 "User has permission to book on this calendar",
                                                 "Calendar allows public booking")),
                ),
            ),
            ToolSpec(
                name="get_appointment",
                description="Get details of a specific appointment",
                params=EventIdParams,
                path="/calendars/events/appointments/{eventId}",
                message="Appointment {eventId} retrieved successfully",
                hints=(
                    hint(404, APPOINTMENT_NOT_FOUND),
                    hint((401, 403), _permission("access this appointment",
                                                 "API key has calendar read permissions",
                                                 "User has access to this appointment")),
                ),
            ),
            ToolSpec(
                name="update_appointment",
                description="Reschedule or update an appointment. Only the provided fields are changed.",
                params=UpdateAppointmentParams,
                method="PUT", path="/calendars/events/appointments/{eventId}",
                message="Appointment {eventId} updated successfully",
                hints=(
                    hint(404, APPOINTMENT_NOT_FOUND),
                    hint(409, "Appointment conflict: New time slot is already booked.\n"
                              "When rescheduling, the new time slot must be available.\nSolutions:\n"
                              "1. Use get_free_slots tool to find available times\n"
                              "2. Choose a different time slot"),
                    hint(400, ISO_HELP, contains="time"),
                    hint(400, "Invalid update data.\nCommon issues:\n"
                              "- Invalid time range (endTime must be after startTime)\n"
                              "- Invalid status value\n- Invalid assignedUserId"),
                    hint((401, 403), _permission("update this appointment",
                                                 "API key has calendar write permissions",
                                                 "User has permission to modify this appointment")),
                ),
            ),
            ToolSpec(
                name="delete_appointment",
                description="Cancel and delete an appointment",
                params=EventIdParams,
                method="DELETE", path="/calendars/events/{eventId}",
                message="Appointment {eventId} deleted successfully",
                hints=(
                    hint(404, "Appointment not found: {eventId}\n"
                              "The appointment may have already been deleted or the ID is incorrect.\n"
                              "Use get_calendar_events tool to verify appointment exists."),
                    hint((401, 403), _permission("delete this appointment",
                                                 "API key has calendar write/delete permissions",
                                                 "User has permission to cancel this appointment")),
                ),
            ),

            # -----------------------------------------------------------------
            # Schedule control
            # -----------------------------------------------------------------
            ToolSpec(
                name="create_block_slot",
                description="Block time on a calendar so it cannot be booked (e.g. lunch, holidays).",
                params=CreateBlockSlotParams,
                method="POST", path="/calendars/events/block-slots",
                location="locationId",
                reshape=lambda data, args: envelope(
                    data, f"Block slot created with ID: {data.get('id', 'unknown')}"),
                hints=(
                    hint(404, CALENDAR_NOT_FOUND),
                    hint(409, "Time conflict: The specified time overlaps with existing block or appointment.\n"
                              "The time slot you're trying to block is already occupied.\nSolutions:\n"
                              "1. Use get_calendar_events to see existing blocks/appointments\n"
                              "2. Choose a different time slot\n"
                              "3. Delete conflicting block/appointment first"),
                    hint(400, ISO_HELP, contains="time"),
                    hint(400, "Invalid block slot data.\nCommon issues:\n"
                              "- Missing required fields (calendarId, startTime, endTime)\n"
                              "- Invalid time range (endTime must be after startTime)\n- Invalid assignedUserId"),
                    hint((401, 403), _permission("create block slots",
                                                 "API key has calendar write permissions",
                                                 "User has permission to block time on this calendar")),
                ),
            ),
            ToolSpec(
                name="update_block_slot",
                description="Move or relabel an existing block slot",
                params=UpdateBlockSlotParams,
                method="PUT", path="/calendars/events/block-slots/{eventId}",
                message="Block slot {eventId} updated successfully",
                hints=(
                    hint(404, "Block slot not found: {eventId}\n"
                              "The block slot may have been deleted or the ID is incorrect.\n"
                              "Use get_calendar_events tool to find valid block slot IDs."),
                    hint(409, "Time conflict: New time overlaps with existing block or appointment.\n"
                              "When rescheduling a block, the new time must be available.\nSolutions:\n"
                              "1. Use get_calendar_events to check for conflicts\n"
                              "2. Choose a different time slot"),
                    hint(400, ISO_HELP, contains="time"),
                    hint(400, "Invalid update data.\nCommon issues:\n"
                              "- Invalid time range (endTime must be after startTime)\n- Invalid assignedUserId"),
                    hint((401, 403), _permission("update this block slot",
                                                 "API key has calendar write permissions",
                                                 "User has permission to modify blocks on this calendar")),
                ),
            ),
        ]
