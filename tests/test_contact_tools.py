"""Tests for contact tools."""

import pytest

from app.core.tooling import GHLToolError
from contact_tools import ContactTools
from conftest import LOCATION_ID, fail, ok


@pytest.fixture
def contacts(client):
    return ContactTools(client)


class TestContactTools:
    async def test_create_contact_fills_location(self, contacts, client):
        client.queue(ok({"contact": {"id": "c1"}}))

        result = await contacts.execute_tool("create_contact", {"email": "ada@example.com", "firstName": "Ada"})

        assert client.last.method == "POST"
        assert client.last.endpoint == "/contacts/"
        assert client.last.json_body == {"email": "ada@example.com", "firstName": "Ada", "locationId": LOCATION_ID}
        assert result["success"] is True
        assert result["data"] == {"contact": {"id": "c1"}}
        assert result["message"] == "Contact created successfully"

    async def test_search_builds_filters(self, contacts, client):
        client.queue(ok({"contacts": [{"id": "c1"}], "total": 7}))

        result = await contacts.execute_tool("search_contacts", {"email": "ada@example.com"})

        assert client.last.endpoint == "/contacts/search"
        assert client.last.json_body == {
            "locationId": LOCATION_ID,
            "pageLimit": 25,
            "filters": [{"field": "email", "operator": "eq", "value": "ada@example.com"}],
        }
        assert result["message"] == "Found 1 contacts (7 total)"

    async def test_search_without_arguments_lists(self, contacts, client):
        client.queue(ok({"contacts": []}))
        await contacts.execute_tool("search_contacts")
        assert client.last.json_body == {"locationId": LOCATION_ID, "pageLimit": 25}

    async def test_remove_tags_sends_body_on_delete(self, contacts, client):
        result = await contacts.execute_tool("remove_contact_tags", {"contactId": "c1", "tags": ["a", "b"]})

        assert client.last.method == "DELETE"
        assert client.last.endpoint == "/contacts/c1/tags"
        assert client.last.json_body == {"tags": ["a", "b"]}
        assert result["message"] == "Removed 2 tags from contact c1"

    async def test_upsert_reports_new_flag(self, contacts, client):
        client.queue(ok({"new": False, "contact": {"id": "c7"}}))

        result = await contacts.execute_tool("upsert_contact", {"email": "ada@example.com"})

        assert len(client.calls) == 1
        assert result["isNew"] is False
        assert result["message"] == "Contact updated successfully with ID: c7"

    async def test_contact_not_found(self, contacts, client):
        client.queue(fail(404, "Contact not found"))

        with pytest.raises(GHLToolError) as excinfo:
            await contacts.execute_tool("get_contact", {"contactId": "missing"})

        assert "Contact not found: missing" in str(excinfo.value)
        assert "search_contacts" in str(excinfo.value)

    async def test_task_not_found_names_both_ids(self, contacts, client):
        client.queue(fail(404, "Task not found"))

        with pytest.raises(GHLToolError, match="Contact task not found: c1, t1"):
            await contacts.execute_tool("get_contact_task", {"contactId": "c1", "taskId": "t1"})

    async def test_duplicate_create_guidance(self, contacts, client):
        client.queue(fail(409, "This location does not allow duplicated contacts"))

        with pytest.raises(GHLToolError, match="upsert_contact"):
            await contacts.execute_tool("create_contact", {"email": "ada@example.com"})

    async def test_get_contact_is_repeatable(self, contacts, client):
        client.responder = lambda call: ok({"contact": {"id": "c1", "firstName": "Ada"}})

        first = await contacts.execute_tool("get_contact", {"contactId": "c1"})
        second = await contacts.execute_tool("get_contact", {"contactId": "c1"})

        assert first == second
        assert client.calls[0] == client.calls[1]

    async def test_null_collections_from_api(self, contacts, client):
        client.queue(ok({"contacts": None, "total": None}), ok({"new": True, "contact": None}))

        found = await contacts.execute_tool("search_contacts")
        upserted = await contacts.execute_tool("upsert_contact", {"email": "ada@example.com"})

        assert found["message"] == "Found 0 contacts (0 total)"
        assert upserted["contact"] == {}
        assert upserted["message"] == "Contact created successfully with ID: unknown"
