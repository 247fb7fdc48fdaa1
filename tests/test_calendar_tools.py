"""Tests for calendar tools and their date conversion helpers."""

import logging
from datetime import datetime, timezone

import pytest

from app.core.tooling import GHLToolError
from calendar_tools import CalendarTools, date_to_epoch_millis, to_epoch_millis
from conftest import LOCATION_ID, fail, ok

OCT_20_2025_MS = 1760918400000


@pytest.fixture
def calendars(client):
    return CalendarTools(client)


class TestDateConversion:
    def test_iso_utc(self):
        assert to_epoch_millis("2025-10-20T00:00:00Z") == str(OCT_20_2025_MS)

    def test_iso_with_offset(self):
        assert to_epoch_millis("2025-10-20T00:00:00-05:00") == str(OCT_20_2025_MS + 5 * 3600 * 1000)

    @pytest.mark.parametrize("value, offset_ms", [
        ("2025-10-20T09:00:00.5Z", 9 * 3600 * 1000 + 500),
        ("2025-10-20T00:00:00.25+00:00", 250),
        ("2025-10-20T00:00:00.1234567Z", 123),
    ])
    def test_any_fraction_length(self, value, offset_ms):
        assert to_epoch_millis(value) == str(OCT_20_2025_MS + offset_ms)

    def test_digits_pass_through(self):
        assert to_epoch_millis("1700000000000") == "1700000000000"

    def test_unparseable_passes_through(self):
        assert to_epoch_millis("next tuesday") == "next tuesday"

    def test_date_only_is_start_of_day_utc(self):
        assert date_to_epoch_millis("2025-10-20") == OCT_20_2025_MS

    def test_date_digits(self):
        assert date_to_epoch_millis("1700000000000") == 1700000000000

    def test_unparseable_date_falls_back_to_now(self, caplog):
        before = int(datetime.now(timezone.utc).timestamp() * 1000)
        with caplog.at_level(logging.WARNING):
            value = date_to_epoch_millis("someday")
        after = int(datetime.now(timezone.utc).timestamp() * 1000)

        assert before <= value <= after
        assert "someday" in caplog.text


class TestCalendarTools:
    async def test_events_query_uses_epoch_millis(self, calendars, client):
        client.queue(ok({"events": [{"id": "e1"}, {"id": "e2"}]}))

        result = await calendars.execute_tool("get_calendar_events", {
            "calendarId": "cal-1",
            "startTime": "2025-10-20T00:00:00Z",
            "endTime": "1760922000000",
        })

        assert client.last.endpoint == "/calendars/events"
        assert client.last.params == {
            "calendarId": "cal-1",
            "startTime": str(OCT_20_2025_MS),
            "endTime": "1760922000000",
            "locationId": LOCATION_ID,
        }
        assert result["message"] == "Found 2 events on calendar cal-1"

    async def test_free_slots(self, calendars, client):
        client.queue(ok({
            "2025-10-20": {"slots": ["2025-10-20T09:00:00Z", "2025-10-20T10:00:00Z"]},
            "2025-10-21": {"slots": ["2025-10-21T09:00:00Z"]},
            "traceId": "abc",
        }))

        result = await calendars.execute_tool("get_free_slots", {
            "calendarId": "cal-1",
            "startDate": "2025-10-20",
            "endDate": "2025-10-21",
            "timezone": "UTC",
        })

        assert client.last.endpoint == "/calendars/cal-1/free-slots"
        assert client.last.params["startDate"] == OCT_20_2025_MS
        assert client.last.params["timezone"] == "UTC"
        assert result["message"] == "Found 3 free slots across 2 days on calendar cal-1"

    async def test_booking_conflict(self, calendars, client):
        client.queue(fail(409, "The slot you have selected is no longer available"))

        with pytest.raises(GHLToolError) as excinfo:
            await calendars.execute_tool("create_appointment", {
                "calendarId": "cal-1",
                "contactId": "c1",
                "startTime": "2025-10-20T14:00:00Z",
                "endTime": "2025-10-20T15:00:00Z",
            })

        assert excinfo.value.status_code == 409
        assert "get_free_slots" in str(excinfo.value)

    @pytest.mark.parametrize("message, expected", [
        ("Calendar not found", "Calendar not found: cal-1"),
        ("Contact not found", "Contact not found: c1"),
    ])
    async def test_appointment_not_found_is_refined_by_message(self, calendars, client, message, expected):
        client.queue(fail(404, message))

        with pytest.raises(GHLToolError) as excinfo:
            await calendars.execute_tool("create_appointment", {
                "calendarId": "cal-1",
                "contactId": "c1",
                "startTime": "2025-10-20T14:00:00Z",
                "endTime": "2025-10-20T15:00:00Z",
            })

        assert str(excinfo.value).startswith(expected)

    async def test_delete_calendar_with_appointments(self, calendars, client):
        client.queue(fail(409, "Calendar has upcoming events"))

        with pytest.raises(GHLToolError, match="Active appointments exist"):
            await calendars.execute_tool("delete_calendar", {"calendarId": "cal-1"})
