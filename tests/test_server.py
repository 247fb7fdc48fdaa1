"""Server wiring tests: module registry, FastMCP tools and the HTTP app."""

import asyncio

import pytest
from fastmcp import Client
from fastmcp.exceptions import ToolError
from starlette.testclient import TestClient

import server
from app.core.tooling import GHLToolError, ToolInputError
from contact_tools import ContactTools
from conftest import FakeClient, fail, ok
from ghl_client import GHLConfig


@pytest.fixture
def modules(client):
    return server.build_tool_modules(client)


class TestRegistry:
    def test_every_family_is_built(self, modules):
        families = {module.family for module in modules}
        assert len(modules) == len(server.TOOL_MODULES)
        assert {"contact", "calendar", "invoices", "social media", "email verification"} <= families

    def test_tool_names_are_unique(self, modules):
        names = [name for module in modules for name in module.tool_names]
        assert len(names) == len(set(names))
        assert "send_sms" in names
        assert "get_media_files" in names

    def test_duplicate_names_rejected(self, monkeypatch):
        monkeypatch.setattr(server, "TOOL_MODULES", (ContactTools, ContactTools))

        with pytest.raises(ValueError, match="Duplicate tool name 'create_contact'"):
            server.build_tool_modules(FakeClient())


def sample_value(schema: dict, defs: dict):
    """Smallest value that satisfies a JSON schema fragment."""
    if "$ref" in schema:
        return sample_value(defs[schema["$ref"].rsplit("/", 1)[-1]], defs)
    if "const" in schema:
        return schema["const"]
    if "enum" in schema:
        return schema["enum"][0]
    for key in ("anyOf", "oneOf", "allOf"):
        if key in schema:
            options = [s for s in schema[key] if s.get("type") != "null"]
            return sample_value(options[0], defs)

    kind = schema.get("type")
    if kind == "string":
        return "https://example.com/hook" if "http" in schema.get("pattern", "") else "sample-1"
    if kind in ("integer", "number"):
        value = max(schema.get("minimum", 1), 1)
        return min(value, schema.get("maximum", value))
    if kind == "boolean":
        return True
    if kind == "array":
        return [sample_value(schema.get("items", {}), defs)] * max(schema.get("minItems", 1), 1)
    if kind == "object":
        return sample_arguments(schema, defs)
    return "sample-1"


def sample_arguments(schema: dict, defs: dict, everything: bool = False) -> dict:
    properties = schema.get("properties", {})
    names = properties if everything else schema.get("required", [])
    return {name: sample_value(properties[name], defs) for name in names}


def every_tool():
    for module in server.build_tool_modules(FakeClient()):
        for definition in module.get_tool_definitions():
            yield pytest.param(type(module), definition, id=definition["name"])


class TestRouting:
    @pytest.mark.parametrize("module_class, definition", list(every_tool()))
    async def test_every_tool_reaches_the_api(self, module_class, definition):
        schema = definition["inputSchema"]
        defs = schema.get("$defs", {})
        client = FakeClient()
        module = module_class(client)

        try:
            await module.execute_tool(definition["name"], sample_arguments(schema, defs))
        except ToolInputError:
            # Some models need one of several optional fields
            client.calls.clear()
            await module.execute_tool(definition["name"], sample_arguments(schema, defs, everything=True))

        assert 1 <= len(client.calls) <= 2
        for call in client.calls:
            assert call.endpoint.startswith("/")
            assert "{" not in call.endpoint and "}" not in call.endpoint
            assert "//" not in call.endpoint


class SlowModule:
    family = "slow"

    async def execute_tool(self, name, args):
        await asyncio.sleep(5)


class TestGHLTool:
    async def test_run_returns_envelope(self, client):
        client.queue(ok({"contact": {"id": "c1"}}))
        tool = server.GHLTool(
            name="get_contact",
            description="Get a contact",
            parameters={"type": "object", "properties": {"contactId": {"type": "string"}}},
            module=ContactTools(client),
        )

        result = await tool.run({"contactId": "c1"})

        assert result.structured_content == {
            "success": True,
            "data": {"contact": {"id": "c1"}},
            "message": "Contact c1 retrieved successfully",
        }

    async def test_timeout(self):
        tool = server.GHLTool(
            name="slow_tool",
            description="",
            parameters={"type": "object", "properties": {}},
            module=SlowModule(),
            timeout=0.01,
        )

        with pytest.raises(GHLToolError, match="slow_tool timed out"):
            await tool.run({})


class TestMCP:
    async def test_tools_registered_with_annotations(self, modules):
        mcp = server.create_mcp(modules)

        tools = await mcp.get_tools()

        assert len(tools) == sum(len(module.tool_names) for module in modules)
        assert tools["get_contact"].annotations.readOnlyHint is True
        assert tools["delete_contact"].annotations.destructiveHint is True
        assert "contactId" in tools["get_contact"].parameters["properties"]

    async def test_call_through_mcp_client(self, client, modules):
        client.queue(ok({"contact": {"id": "c1"}}), fail(404, "Contact not found"))
        mcp = server.create_mcp(modules)

        async with Client(mcp) as mcp_client:
            result = await mcp_client.call_tool("get_contact", {"contactId": "c1"})
            assert result.structured_content["message"] == "Contact c1 retrieved successfully"

            with pytest.raises(ToolError, match="Contact not found: c404"):
                await mcp_client.call_tool("get_contact", {"contactId": "c404"})


class TestHTTPApp:
    @pytest.fixture
    def http(self, modules):
        mcp = server.create_mcp(modules)
        config = GHLConfig(access_token="t", location_id="loc-123")
        return TestClient(server.create_app(mcp, modules, config, api_key="k"))

    def test_health_is_public(self, http, modules):
        response = http.get("/health")

        body = response.json()
        assert response.status_code == 200
        assert body["status"] == "ok"
        assert body["families"]["contact"] == len(ContactTools(FakeClient()).tool_names)
        assert body["total_tools"] == sum(len(module.tool_names) for module in modules)

    def test_tools_requires_key(self, http):
        assert http.get("/tools").status_code == 401

        response = http.get("/tools", headers={"X-API-Key": "k"})

        tools = response.json()["tools"]
        assert response.status_code == 200
        assert {"name", "description", "inputSchema", "annotations", "family"} <= set(tools[0])
        assert response.json()["count"] == len(tools)

    def test_capabilities(self, http):
        body = http.get("/capabilities", params={"api_key": "k"}).json()
        assert "payments" in body["families"]
        assert body["tools"] > 200

    def test_degraded_when_unconfigured(self, modules):
        mcp = server.create_mcp(modules)
        app = server.create_app(mcp, modules, GHLConfig(), api_key="k")

        assert TestClient(app).get("/health").json()["status"] == "degraded"
