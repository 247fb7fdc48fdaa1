"""Tests for conversation and messaging tools."""

import pytest

from app.core.tooling import GHLToolError
from conftest import fail, ok
from conversation_tools import ConversationTools


@pytest.fixture
def conversations(client):
    return ConversationTools(client)


class TestMessaging:
    async def test_send_sms_sets_type(self, conversations, client):
        client.queue(ok({"messageId": "m1", "conversationId": "conv-1"}))

        result = await conversations.execute_tool("send_sms", {"contactId": "c1", "message": "Hi there"})

        assert client.last.endpoint == "/conversations/messages"
        assert client.last.json_body == {"contactId": "c1", "message": "Hi there", "type": "SMS"}
        assert result == {
            "success": True,
            "messageId": "m1",
            "conversationId": "conv-1",
            "message": "SMS sent successfully to contact c1",
        }

    async def test_sms_length_is_validated(self, conversations, client):
        with pytest.raises(GHLToolError, match="message"):
            await conversations.execute_tool("send_sms", {"contactId": "c1", "message": "x" * 1601})
        assert client.calls == []


class TestGetConversation:
    async def test_reads_conversation_then_messages(self, conversations, client):
        client.queue(
            ok({"id": "conv-1", "contactId": "c1"}),
            ok({"messages": {"messages": [{"id": "m1"}, {"id": "m2"}], "nextPage": True}}),
        )

        result = await conversations.execute_tool("get_conversation", {
            "conversationId": "conv-1",
            "messageTypes": ["TYPE_SMS", "TYPE_EMAIL"],
        })

        first, second = client.calls
        assert (first.method, first.endpoint) == ("GET", "/conversations/conv-1")
        assert (second.method, second.endpoint) == ("GET", "/conversations/conv-1/messages")
        assert second.params == {"limit": 20, "type": "TYPE_SMS,TYPE_EMAIL"}
        assert result["conversation"] == {"id": "conv-1", "contactId": "c1"}
        assert [m["id"] for m in result["messages"]] == ["m1", "m2"]
        assert result["hasMoreMessages"] is True
        assert result["message"] == "Retrieved conversation with 2 messages"

    async def test_flat_message_list(self, conversations, client):
        client.queue(ok({"id": "conv-1"}), ok({"messages": [{"id": "m1"}]}))

        result = await conversations.execute_tool("get_conversation", {"conversationId": "conv-1", "limit": 5})

        assert client.last.params == {"limit": 5}
        assert result["messages"] == [{"id": "m1"}]
        assert result["hasMoreMessages"] is False

    async def test_missing_conversation_stops_before_messages(self, conversations, client):
        client.queue(fail(404, "Conversation not found"))

        with pytest.raises(GHLToolError, match="not found: conv-x"):
            await conversations.execute_tool("get_conversation", {"conversationId": "conv-x"})

        assert len(client.calls) == 1

    async def test_message_failure_fails_the_tool(self, conversations, client):
        client.queue(ok({"id": "conv-1"}), fail(500, "boom"))

        with pytest.raises(GHLToolError) as excinfo:
            await conversations.execute_tool("get_conversation", {"conversationId": "conv-1"})

        assert excinfo.value.status_code == 500
        assert len(client.calls) == 2
