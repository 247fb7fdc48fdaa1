"""Tests for the smaller tool families: workflows, surveys, associations,
email builder, email verification and custom objects."""

import pytest

from app.core.tooling import GHLToolError
from association_tools import AssociationTools
from conftest import LOCATION_ID, fail, ok
from email_tools import EmailTools
from email_verification_tools import EmailVerificationTools, verification_message
from object_tools import ObjectTools
from survey_tools import SurveyTools
from workflow_tools import WorkflowTools


class TestWorkflowTools:
    async def test_status_breakdown(self, client):
        client.queue(ok({"workflows": [
            {"id": "w1", "status": "published"},
            {"id": "w2", "status": "draft"},
            {"id": "w3", "status": "published"},
        ]}))

        result = await WorkflowTools(client).execute_tool("get_workflows")

        assert client.last.endpoint == "/workflows/"
        assert client.last.params == {"locationId": LOCATION_ID}
        assert result["metadata"] == {"totalWorkflows": 3, "workflowStatuses": {"published": 2, "draft": 1}}


class TestSurveyTools:
    async def test_surveys_pagination_metadata(self, client):
        client.queue(ok({"surveys": [{"id": "s1"}], "total": 4}))

        result = await SurveyTools(client).execute_tool("get_surveys", {"type": "folder"})

        assert client.last.params == {"type": "folder", "locationId": LOCATION_ID, "skip": 0, "limit": 10}
        assert result["metadata"] == {
            "totalSurveys": 4,
            "returnedCount": 1,
            "pagination": {"skip": 0, "limit": 10},
            "filterType": "folder",
        }

    async def test_submission_filters(self, client):
        client.queue(ok({"submissions": [], "meta": {"total": 0, "currentPage": 1}}))

        result = await SurveyTools(client).execute_tool("get_survey_submissions", {
            "surveyId": "s1",
            "q": "ada@example.com",
        })

        assert client.last.params["page"] == 1
        assert client.last.params["limit"] == 20
        assert result["metadata"]["filters"] == {"surveyId": "s1", "search": "ada@example.com"}
        assert result["metadata"]["pagination"]["limit"] == 20


class TestAssociationTools:
    async def test_relations_for_record(self, client):
        client.queue(ok({"relations": [{"id": "r1"}, {"id": "r2"}]}))

        result = await AssociationTools(client).execute_tool("get_relations_by_record", {"recordId": "rec-1"})

        assert client.last.endpoint == "/associations/relations/rec-1"
        assert client.last.params == {"locationId": LOCATION_ID, "skip": 0, "limit": 20}
        assert result["message"] == "Retrieved 2 relations for record"

    async def test_duplicate_relation(self, client):
        client.queue(fail(409, "Relation already exists"))

        with pytest.raises(GHLToolError, match="already related through association as-1"):
            await AssociationTools(client).execute_tool("create_relation", {
                "associationId": "as-1",
                "firstRecordId": "a",
                "secondRecordId": "b",
            })


class TestEmailTools:
    async def test_campaign_defaults(self, client):
        client.queue(ok({"schedules": [{"id": "c1"}], "total": 1}))

        result = await EmailTools(client).execute_tool("get_email_campaigns")

        assert client.last.endpoint == "/emails/schedule"
        assert client.last.params == {"locationId": LOCATION_ID, "status": "active", "limit": 10, "offset": 0}
        assert result["campaigns"] == [{"id": "c1"}]

    async def test_delete_template_path(self, client):
        result = await EmailTools(client).execute_tool("delete_email_template", {"templateId": "t1"})

        assert client.last.method == "DELETE"
        assert client.last.endpoint == f"/emails/builder/{LOCATION_ID}/t1"
        assert result == {"success": True, "message": "Successfully deleted email template."}


class TestEmailVerification:
    async def test_location_goes_in_query(self, client):
        client.queue(ok({"result": "deliverable", "risk": "low", "reason": [],
                         "leadconnectorRecomendation": {"isEmailValid": True}}))

        result = await EmailVerificationTools(client).execute_tool("verify_email", {
            "type": "email",
            "verify": "ada@example.com",
        })

        assert client.last.method == "POST"
        assert client.last.endpoint == "/email/verify"
        assert client.last.params == {"locationId": LOCATION_ID}
        assert client.last.json_body == {"type": "email", "verify": "ada@example.com"}
        assert result["message"] == "Email verification completed. Result: deliverable, Risk: low, Recommended: Valid"

    def test_message_with_reasons(self):
        message = verification_message({"result": "undeliverable", "risk": "high",
                                        "reason": ["mailbox_full", "disposable"]})
        assert message == "Email verification completed. Result: undeliverable, Risk: high, " \
                          "Reasons: mailbox_full, disposable"

    def test_not_processed(self):
        assert verification_message({"message": "Insufficient balance"}) == \
            "Email verification not processed: Insufficient balance"

    async def test_wallet_empty(self, client):
        client.queue(fail(402, "Payment required"))

        with pytest.raises(GHLToolError, match="wallet"):
            await EmailVerificationTools(client).execute_tool("verify_email", {"type": "contact", "verify": "c1"})


class TestObjectTools:
    async def test_schema_key_is_prefixed(self, client):
        client.queue(ok({"object": {"key": "custom_objects.pet"}}))

        result = await ObjectTools(client).execute_tool("create_object_schema", {
            "labels": {"singular": "Pet", "plural": "Pets"},
            "key": "pet",
            "primaryDisplayPropertyDetails": {"key": "name", "name": "Pet Name", "dataType": "TEXT"},
        })

        assert client.last.json_body["key"] == "custom_objects.pet"
        assert client.last.json_body["locationId"] == LOCATION_ID
        assert result["message"] == "Custom object schema created successfully with key: custom_objects.pet"

    async def test_prefix_not_doubled(self, client):
        await ObjectTools(client).execute_tool("create_object_schema", {
            "labels": {"singular": "Pet", "plural": "Pets"},
            "key": "custom_objects.pet",
            "primaryDisplayPropertyDetails": {"key": "name", "name": "Pet Name", "dataType": "TEXT"},
        })
        assert client.last.json_body["key"] == "custom_objects.pet"

    async def test_update_record_location_in_query(self, client):
        client.queue(ok({"record": {"id": "r1"}}))

        await ObjectTools(client).execute_tool("update_object_record", {
            "schemaKey": "custom_objects.pet",
            "recordId": "r1",
            "properties": {"name": "Buddy"},
        })

        assert client.last.method == "PUT"
        assert client.last.endpoint == "/objects/custom_objects.pet/records/r1"
        assert client.last.params == {"locationId": LOCATION_ID}
        assert client.last.json_body == {"properties": {"name": "Buddy"}}

    async def test_search_records(self, client):
        client.queue(ok({"records": [{"id": "r1"}], "total": 9}))

        result = await ObjectTools(client).execute_tool("search_object_records", {
            "schemaKey": "custom_objects.pet",
            "query": "name:Buddy",
        })

        assert client.last.json_body == {"query": "name:Buddy", "locationId": LOCATION_ID, "page": 1, "pageLimit": 10}
        assert result["message"] == "Found 1 records in custom_objects.pet (9 total)"
