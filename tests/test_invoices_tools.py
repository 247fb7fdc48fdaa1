"""Tests for invoice and estimate tools."""

import pytest

from app.core.tooling import GHLToolError
from conftest import LOCATION_ID, fail, ok
from invoices_tools import InvoicesTools


@pytest.fixture
def invoices(client):
    return InvoicesTools(client)


class TestInvoicesTools:
    async def test_list_scopes_by_alt_id(self, invoices, client):
        client.queue(ok({"invoices": [{"_id": "i1"}, {"_id": "i2"}], "total": 12}))

        result = await invoices.execute_tool("list_invoices", {"status": "sent"})

        assert client.last.endpoint == "/invoices/"
        assert client.last.params == {
            "status": "sent",
            "altId": LOCATION_ID,
            "altType": "location",
            "limit": "10",
            "offset": "0",
        }
        assert result["message"] == "Retrieved 2 of 12 invoices"

    async def test_explicit_alt_id(self, invoices, client):
        await invoices.execute_tool("get_invoice", {"invoiceId": "i1", "altId": "loc-other"})

        assert client.last.endpoint == "/invoices/i1"
        assert client.last.params == {"altId": "loc-other", "altType": "location"}

    async def test_delete_estimate_sends_alt_in_body(self, invoices, client):
        result = await invoices.execute_tool("delete_estimate", {"estimateId": "e1"})

        assert client.last.method == "DELETE"
        assert client.last.endpoint == "/invoices/estimate/e1"
        assert client.last.params is None
        assert client.last.json_body == {"altId": LOCATION_ID, "altType": "location"}
        assert result["message"] == "Estimate e1 deleted successfully"

    async def test_send_invoice_message(self, invoices, client):
        client.queue(ok({"invoice": {"_id": "i1"}}))

        result = await invoices.execute_tool("send_invoice", {
            "invoiceId": "i1",
            "userId": "u1",
            "action": "email",
            "liveMode": False,
        })

        assert client.last.endpoint == "/invoices/i1/send"
        assert client.last.json_body["altId"] == LOCATION_ID
        assert result["message"] == "Invoice i1 sent via email"

    async def test_estimate_not_found(self, invoices, client):
        client.queue(fail(404, "Estimate not found"))

        with pytest.raises(GHLToolError) as excinfo:
            await invoices.execute_tool("delete_estimate", {"estimateId": "e404"})

        assert str(excinfo.value).startswith("Estimate not found: e404")
        assert "list_estimates" in str(excinfo.value)
