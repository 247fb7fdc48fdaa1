"""Tests for the declarative tool framework in app/core/tooling.py."""

from typing import List, Optional

import pytest
from fastmcp.exceptions import ToolError
from pydantic import BaseModel, Field

from app.core.tooling import (
    GHLToolError,
    ToolInputError,
    ToolModule,
    ToolSpec,
    UnknownToolError,
    count_of,
    counted,
    envelope,
    hint,
    location_field,
    render,
)
from conftest import LOCATION_ID, fail, ok


class WidgetIdParams(BaseModel):
    widgetId: str = Field(description="Widget ID")


class ListWidgetsParams(BaseModel):
    locationId: Optional[str] = location_field()
    limit: Optional[int] = Field(None, ge=1, le=100)
    query: Optional[str] = None


class CreateWidgetParams(BaseModel):
    locationId: Optional[str] = location_field()
    name: str
    size: Optional[int] = None


class RemoveTagsParams(BaseModel):
    widgetId: str
    tags: List[str]


class WidgetTools(ToolModule):
    family = "widget"
    subject = "widget"
    lookup = "list_widgets"

    def build_specs(self):
        return [
            ToolSpec(
                name="get_widget",
                description="Get a widget",
                params=WidgetIdParams,
                path="/widgets/{widgetId}",
                message="Widget {widgetId} retrieved",
            ),
            ToolSpec(
                name="list_widgets",
                description="List widgets",
                params=ListWidgetsParams,
                path="/widgets/",
                location="locationId",
                defaults={"limit": 25},
                renames={"query": "q"},
                reshape=counted("widgets", "widgets"),
            ),
            ToolSpec(
                name="create_widget",
                description="Create a widget",
                params=CreateWidgetParams,
                method="POST", path="/widgets/",
                location="locationId",
                query=("locationId",),
                defaults={"size": lambda values: len(values["name"])},
                hints=(hint(409, "Widget '{name}' already exists"),
                       hint(400, "Bad widget size", contains="size")),
            ),
            ToolSpec(
                name="remove_widget_tags",
                description="Remove tags",
                params=RemoveTagsParams,
                method="DELETE", path="/widgets/{widgetId}/tags",
                body=("tags",),
            ),
        ]


@pytest.fixture
def widgets(client):
    return WidgetTools(client)


# ── Registry ────────────────────────────────────────────────────────────────


class TestRegistry:
    def test_tool_names_and_definitions(self, widgets):
        assert widgets.tool_names == ["get_widget", "list_widgets", "create_widget", "remove_widget_tags"]
        assert widgets.has_tool("get_widget")
        assert not widgets.has_tool("get_gadget")

        definitions = {d["name"]: d for d in widgets.get_tool_definitions()}
        schema = definitions["create_widget"]["inputSchema"]
        assert schema["required"] == ["name"]
        assert "locationId" in schema["properties"]

    def test_annotations_follow_method(self, widgets):
        annotations = {d["name"]: d["annotations"] for d in widgets.get_tool_definitions()}
        assert annotations["get_widget"]["readOnlyHint"] is True
        assert annotations["get_widget"]["title"] == "Get Widget"
        assert annotations["create_widget"]["readOnlyHint"] is False
        assert annotations["create_widget"]["idempotentHint"] is False
        assert annotations["remove_widget_tags"]["destructiveHint"] is True

    def test_duplicate_names_rejected(self, client):
        class Twice(ToolModule):
            def build_specs(self):
                spec = ToolSpec(name="same", description="", params=WidgetIdParams, path="/x/{widgetId}")
                return [spec, spec]

        with pytest.raises(ValueError, match="same"):
            Twice(client)


# ── Dispatch ────────────────────────────────────────────────────────────────


class TestDispatch:
    async def test_unknown_tool(self, widgets):
        with pytest.raises(UnknownToolError, match="Unknown widget tool: get_gadget"):
            await widgets.execute_tool("get_gadget", {})

    async def test_invalid_arguments(self, widgets, client):
        with pytest.raises(ToolInputError, match="widgetId"):
            await widgets.execute_tool("get_widget", {})
        assert client.calls == []

    async def test_errors_are_tool_errors(self):
        assert issubclass(GHLToolError, ToolError)

    async def test_get_sends_query_params(self, widgets, client):
        client.queue(ok({"widgets": [{"id": "w1"}, {"id": "w2"}]}))

        result = await widgets.execute_tool("list_widgets", {"query": "blue"})

        assert client.last.method == "GET"
        assert client.last.endpoint == "/widgets/"
        assert client.last.params == {"locationId": LOCATION_ID, "limit": 25, "q": "blue"}
        assert client.last.json_body is None
        assert result["success"] is True
        assert result["message"] == "Retrieved 2 widgets"

    async def test_explicit_location_wins(self, widgets, client):
        await widgets.execute_tool("list_widgets", {"locationId": "other", "limit": 5})
        assert client.last.params["locationId"] == "other"
        assert client.last.params["limit"] == 5

    async def test_write_splits_query_and_body(self, widgets, client):
        await widgets.execute_tool("create_widget", {"name": "gear"})

        assert client.last.method == "POST"
        assert client.last.params == {"locationId": LOCATION_ID}
        assert client.last.json_body == {"name": "gear", "size": 4}

    async def test_path_values_are_quoted(self, widgets, client):
        result = await widgets.execute_tool("get_widget", {"widgetId": "a/b c"})

        assert client.last.endpoint == "/widgets/a%2Fb%20c"
        assert client.last.params is None
        assert result == {"success": True, "data": {}, "message": "Widget a/b c retrieved"}

    async def test_delete_with_body(self, widgets, client):
        await widgets.execute_tool("remove_widget_tags", {"widgetId": "w1", "tags": ["vip"]})

        assert client.last.method == "DELETE"
        assert client.last.endpoint == "/widgets/w1/tags"
        assert client.last.json_body == {"tags": ["vip"]}


# ── Error decoration ────────────────────────────────────────────────────────


class TestErrorDecoration:
    async def test_not_found_names_identifier_and_lookup(self, widgets, client):
        client.queue(fail(404, "Widget not found"))

        with pytest.raises(GHLToolError) as excinfo:
            await widgets.execute_tool("get_widget", {"widgetId": "w9"})

        text = str(excinfo.value)
        assert excinfo.value.status_code == 404
        assert excinfo.value.tool == "get_widget"
        assert text.startswith("Widget not found: w9")
        assert "Use the list_widgets tool" in text
        assert text.endswith("Original error: GHL API Error (404): Widget not found")

    async def test_permission_guidance(self, widgets, client):
        client.queue(fail(403, "Forbidden"))
        with pytest.raises(GHLToolError, match="Permission denied for get_widget"):
            await widgets.execute_tool("get_widget", {"widgetId": "w1"})

    async def test_tool_hint_before_default(self, widgets, client):
        client.queue(fail(409, "duplicate"))
        with pytest.raises(GHLToolError, match="Widget 'gear' already exists"):
            await widgets.execute_tool("create_widget", {"name": "gear"})

    async def test_hint_narrowed_by_message(self, widgets, client):
        client.queue(fail(400, "size must be positive"), fail(400, "name is too long"))

        with pytest.raises(GHLToolError, match="Bad widget size"):
            await widgets.execute_tool("create_widget", {"name": "gear"})
        with pytest.raises(GHLToolError) as excinfo:
            await widgets.execute_tool("create_widget", {"name": "gear"})
        assert "Invalid request for create_widget" in str(excinfo.value)
        assert "required: name" in str(excinfo.value)

    async def test_status_not_matched_by_substring(self, widgets, client):
        # A 500 whose text mentions 404 is still a 500
        client.queue(fail(500, "upstream returned 404"))
        with pytest.raises(GHLToolError) as excinfo:
            await widgets.execute_tool("get_widget", {"widgetId": "w1"})
        assert str(excinfo.value) == "Failed to get widget: GHL API Error (500): upstream returned 404"

    async def test_transport_failure(self, widgets, client):
        from ghl_client import ApiResponse

        client.queue(ApiResponse.fail(None, "Request to GoHighLevel failed: timed out"))
        with pytest.raises(GHLToolError) as excinfo:
            await widgets.execute_tool("get_widget", {"widgetId": "w1"})
        assert excinfo.value.status_code is None
        assert "timed out" in str(excinfo.value)


# ── Helpers ─────────────────────────────────────────────────────────────────


class TestHelpers:
    def test_render_tolerates_missing_keys(self):
        assert render("Contact {contactId} in {locationId}", {"contactId": "c1"}) == "Contact c1 in unknown"

    def test_envelope(self):
        assert envelope({"a": 1}, "done") == {"success": True, "data": {"a": 1}, "message": "done"}
        assert envelope(None, "done", id="x") == {"success": True, "id": "x", "message": "done"}

    def test_count_of(self):
        assert count_of({"items": [1, 2, 3]}, "items") == 3
        assert count_of({"items": None}, "items") == 0
        assert count_of([], "items") == 0
