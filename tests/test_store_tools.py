"""Tests for store (shipping) tools."""

import pytest

from app.core.tooling import GHLToolError
from conftest import LOCATION_ID, fail, ok
from store_tools import StoreTools


@pytest.fixture
def store(client):
    return StoreTools(client)


class TestStoreTools:
    async def test_list_zones_uses_alt_scope(self, store, client):
        client.queue(ok({"data": [{"_id": "z1"}], "total": 1}))

        result = await store.execute_tool("list_shipping_zones", {"withShippingRate": True})

        assert client.last.endpoint == "/store/shipping-zone"
        assert client.last.params == {"withShippingRate": True, "altId": LOCATION_ID, "altType": "location"}
        assert result["shippingZones"] == [{"_id": "z1"}]
        assert result["message"] == "Retrieved 1 shipping zones"

    async def test_zone_in_use(self, store, client):
        client.queue(fail(409, "Shipping zone has rates"))

        with pytest.raises(GHLToolError) as excinfo:
            await store.execute_tool("delete_shipping_zone", {"shippingZoneId": "z1"})

        assert excinfo.value.status_code == 409
        assert str(excinfo.value).startswith("Cannot delete shipping zone z1")
        assert "delete_shipping_rate" in str(excinfo.value)

    async def test_delete_zone(self, store, client):
        result = await store.execute_tool("delete_shipping_zone", {"shippingZoneId": "z1"})

        assert client.last.method == "DELETE"
        assert client.last.endpoint == "/store/shipping-zone/z1"
        assert result["message"] == "Shipping zone z1 deleted successfully"

    async def test_store_setting(self, store, client):
        client.queue(ok({"data": {"storeOrderNotification": "orders@example.com"}}))

        result = await store.execute_tool("get_store_setting")

        assert client.last.params == {"altId": LOCATION_ID, "altType": "location"}
        assert result["storeSetting"] == {"storeOrderNotification": "orders@example.com"}

    async def test_missing_zone_guidance(self, store, client):
        client.queue(fail(404, "not found"))

        with pytest.raises(GHLToolError, match="Shipping zone not found: z404"):
            await store.execute_tool("get_shipping_zone", {"shippingZoneId": "z404"})
