"""Tests for location tools."""

import pytest

from app.core.tooling import GHLToolError
from conftest import LOCATION_ID, fail, ok
from location_tools import LocationTools


@pytest.fixture
def locations(client):
    return LocationTools(client)


def custom_values(count):
    return ok({"customValues": [{"id": f"cv{i}", "name": f"Value {i}"} for i in range(count)]})


class TestCustomValues:
    async def test_truncates_to_default_limit(self, locations, client):
        client.queue(custom_values(30))

        result = await locations.execute_tool("get_location_custom_values")

        assert client.last.endpoint == f"/locations/{LOCATION_ID}/customValues"
        assert client.last.params is None
        assert result["returned"] == 25
        assert result["total"] == 30
        assert result["hasMore"] is True
        assert result["message"] == "Retrieved 25 of 30 custom values (use limit parameter to get more)"

    async def test_everything_fits(self, locations, client):
        client.queue(custom_values(3))

        result = await locations.execute_tool("get_location_custom_values", {"limit": 10})

        assert len(result["customValues"]) == 3
        assert result["hasMore"] is False
        assert result["message"] == "Retrieved 3 of 3 custom values"

    async def test_missing_custom_value(self, locations, client):
        client.queue(fail(404, "Custom value not found"))

        with pytest.raises(GHLToolError) as excinfo:
            await locations.execute_tool("get_location_custom_value", {"customValueId": "cv404"})

        assert str(excinfo.value).startswith("Custom value not found: cv404")
        assert "get_location_custom_values" in str(excinfo.value)


class TestLocationScope:
    async def test_explicit_location(self, locations, client):
        client.queue(custom_values(0))

        await locations.execute_tool("get_location_custom_values", {"locationId": "loc-other"})

        assert client.last.endpoint == "/locations/loc-other/customValues"
