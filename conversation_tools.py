"""
GoHighLevel Conversation Tools for the GHL MCP Server

This module exposes conversations and messaging as MCP tools.

Capabilities:
- Send SMS and email to contacts
- Search, read, create, update, and delete conversations
- Read individual messages and email messages
- Record inbound messages and outbound calls manually
- Call recordings and transcriptions
- Cancel scheduled messages, live chat typing indicator

Authentication: Uses the shared GHLClient (Bearer token, see ghl_client.py).
Requires conversations.readonly, conversations.write,
conversations/message.readonly and conversations/message.write scopes.
"""

import logging
from typing import Optional, List, Literal

from pydantic import BaseModel, Field, ConfigDict

from app.core.tooling import ToolModule, ToolSpec, hint

logger = logging.getLogger(__name__)

CallStatus = Literal["pending", "completed", "answered", "busy", "no-answer",
                     "failed", "canceled", "voicemail"]

MessageType = Literal["TYPE_SMS", "TYPE_EMAIL", "TYPE_CALL", "TYPE_FACEBOOK",
                      "TYPE_INSTAGRAM", "TYPE_WHATSAPP", "TYPE_LIVE_CHAT"]


# =============================================================================
# Input Models
# =============================================================================

class SendSmsParams(BaseModel):
    contactId: str = Field(description="The unique ID of the contact to send SMS to")
    message: str = Field(max_length=1600, description="The SMS message content to send")
    fromNumber: Optional[str] = Field(None, description="Optional: Phone number to send from (must be configured in GHL)")


class SendEmailParams(BaseModel):
    contactId: str = Field(description="The unique ID of the contact to send email to")
    subject: str = Field(description="Email subject line")
    html: str = Field(description="Email body (can be plain text or HTML - this parameter is required by GHL API)")
    message: Optional[str] = Field(None, description="Plain text fallback (optional, not reliably processed by GHL API)")
    emailFrom: Optional[str] = Field(None, description="Optional: Email address to send from (must be configured in GHL)")
    attachments: Optional[List[str]] = Field(None, description="Optional: Array of attachment URLs")
    emailCc: Optional[List[str]] = Field(None, description="Optional: Array of CC email addresses")
    emailBcc: Optional[List[str]] = Field(None, description="Optional: Array of BCC email addresses")


class SearchConversationsParams(BaseModel):
    contactId: Optional[str] = Field(None, description="Filter conversations for a specific contact")
    query: Optional[str] = Field(None, description="Search query to filter conversations")
    status: Optional[Literal["all", "read", "unread", "starred", "recents"]] = Field(
        None, description="Filter conversations by read status (default: all)"
    )
    limit: Optional[int] = Field(None, ge=1, le=100, description="Maximum number of conversations to return (default: 20, max: 100)")
    assignedTo: Optional[str] = Field(None, description="Filter by user ID assigned to conversations")


class GetConversationParams(BaseModel):
    conversationId: str = Field(description="The unique ID of the conversation to retrieve")
    limit: Optional[int] = Field(None, ge=1, le=100, description="Maximum number of messages to return (default: 20)")
    messageTypes: Optional[List[MessageType]] = Field(None, description="Filter messages by type (optional)")


class CreateConversationParams(BaseModel):
    contactId: str = Field(description="The unique ID of the contact to create conversation with")


class UpdateConversationParams(BaseModel):
    conversationId: str = Field(description="The unique ID of the conversation to update")
    starred: Optional[bool] = Field(None, description="Star or unstar the conversation")
    unreadCount: Optional[int] = Field(None, ge=0, description="Set the unread message count (0 to mark as read)")


class RecentMessagesParams(BaseModel):
    limit: Optional[int] = Field(None, ge=1, le=50, description="Maximum number of conversations to check (default: 10)")
    status: Optional[Literal["all", "unread"]] = Field(None, description="Filter by conversation status (default: unread)")


class ConversationIdParams(BaseModel):
    conversationId: str = Field(description="The unique ID of the conversation")


class EmailMessageIdParams(BaseModel):
    emailMessageId: str = Field(description="The unique ID of the email message")


class MessageIdParams(BaseModel):
    messageId: str = Field(description="The unique ID of the message")


class UploadAttachmentsParams(BaseModel):
    conversationId: str = Field(description="The conversation ID to upload attachments for")
    attachmentUrls: List[str] = Field(description="Array of file URLs to upload as attachments")


class MessageErrorDetails(BaseModel):
    code: Optional[str] = None
    type: Optional[str] = None
    message: Optional[str] = None


class UpdateMessageStatusParams(BaseModel):
    messageId: str = Field(description="The unique ID of the message to update")
    status: Literal["delivered", "failed", "pending", "read"] = Field(description="New status for the message")
    error: Optional[MessageErrorDetails] = Field(None, description="Error details if status is failed")
    emailMessageId: Optional[str] = Field(None, description="Email message ID if updating email status")
    recipients: Optional[List[str]] = Field(None, description="Email delivery status for additional recipients")


class CallDetails(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    to: Optional[str] = Field(None, description="Called number")
    from_: Optional[str] = Field(None, alias="from", description="Caller number")
    status: Optional[CallStatus] = Field(None, description="Call status")


class InboundMessageParams(BaseModel):
    type: Literal["SMS", "Email", "WhatsApp", "GMB", "IG", "FB", "Custom", "WebChat", "Live_Chat", "Call"] = Field(
        description="Type of inbound message to add"
    )
    conversationId: str = Field(description="The conversation to add the message to")
    conversationProviderId: str = Field(description="Conversation provider ID for the message")
    message: Optional[str] = Field(None, description="Message content (for text-based messages)")
    attachments: Optional[List[str]] = Field(None, description="Array of attachment URLs")
    html: Optional[str] = Field(None, description="HTML content for email messages")
    subject: Optional[str] = Field(None, description="Subject line for email messages")
    emailFrom: Optional[str] = Field(None, description="From email address")
    emailTo: Optional[str] = Field(None, description="To email address")
    emailCc: Optional[List[str]] = Field(None, description="CC email addresses")
    emailBcc: Optional[List[str]] = Field(None, description="BCC email addresses")
    emailMessageId: Optional[str] = Field(None, description="Email message ID for threading")
    altId: Optional[str] = Field(None, description="External provider message ID")
    date: Optional[str] = Field(None, description="Date of the message (ISO format)")
    call: Optional[CallDetails] = Field(None, description="Call details for call-type messages")


class OutboundCallParams(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    conversationId: str = Field(description="The conversation to add the call to")
    conversationProviderId: str = Field(description="Conversation provider ID for the call")
    to: str = Field(description="Called phone number")
    from_: str = Field(alias="from", description="Caller phone number")
    status: CallStatus = Field(description="Call completion status")
    attachments: Optional[List[str]] = Field(None, description="Array of attachment URLs")
    altId: Optional[str] = Field(None, description="External provider call ID")
    date: Optional[str] = Field(None, description="Date of the call (ISO format)")


class LiveChatTypingParams(BaseModel):
    visitorId: str = Field(description="Unique visitor ID for the live chat session")
    conversationId: str = Field(description="The conversation ID for the live chat")
    isTyping: bool = Field(description="Whether the agent is currently typing")


# =============================================================================
# Helper Functions
# =============================================================================

def _message_type(kind: str):
    def transform(args: dict) -> dict:
        args["type"] = kind
        return args
    return transform


def _outbound_call(args: dict) -> dict:
    args["type"] = "Call"
    args["call"] = {key: args.pop(key) for key in ("to", "from", "status")}
    return args


def _sent(channel: str):
    def reshape(data, args):
        result = {
            "success": True,
            "messageId": data.get("messageId"),
            "conversationId": data.get("conversationId"),
        }
        if data.get("emailMessageId"):
            result["emailMessageId"] = data["emailMessageId"]
        result["message"] = f"{channel} sent successfully to contact {args['contactId']}"
        return result
    return reshape


def _processed(label: str):
    def reshape(data, args):
        return {
            "success": True,
            "messageId": data.get("messageId"),
            "conversationId": data.get("conversationId", args["conversationId"]),
            "message": f"{label} added successfully to conversation {args['conversationId']}",
        }
    return reshape


def _search_result(data, args):
    conversations = data.get("conversations") or []
    total = data.get("total", len(conversations))
    return {
        "success": True,
        "conversations": conversations,
        "total": total,
        "message": f"Found {len(conversations)} conversations ({total} total)",
    }


def _summarise(conversation: dict) -> dict:
    return {
        "conversationId": conversation.get("id"),
        "contactName": conversation.get("fullName") or conversation.get("contactName"),
        "contactEmail": conversation.get("email"),
        "contactPhone": conversation.get("phone"),
        "lastMessageBody": conversation.get("lastMessageBody"),
        "lastMessageType": conversation.get("lastMessageType"),
        "unreadCount": conversation.get("unreadCount"),
        "starred": conversation.get("starred"),
    }


def _recent_result(data, args):
    conversations = [_summarise(c) for c in data.get("conversations") or []]
    return {
        "success": True,
        "conversations": conversations,
        "message": f"Retrieved {len(conversations)} recent conversations",
    }


def _cancelled(label: str):
    def reshape(data, args):
        return {
            "success": True,
            "status": data.get("status"),
            "message": data.get("message") or f"Scheduled {label} cancelled successfully",
        }
    return reshape


def _transcriptions(data, args):
    items = data if isinstance(data, list) else (data.get("transcriptions") or [])
    return {
        "success": True,
        "transcriptions": items,
        "message": f"Retrieved call transcription for message {args['messageId']}",
    }


CALLS_NOT_CONFIGURED = (
    "Call functionality is not configured for this GHL account.\nPossible reasons:\n"
    "1. No phone number is set up in GHL\n2. Call provider not configured\n"
    "3. Account doesn't have calling permissions\n"
    "4. The message ID provided is not a call message\n"
    "To fix this:\n- Go to GHL Settings > Phone Numbers\n"
    "- Set up a phone number or calling provider\n"
    "- Ensure your account has calling capabilities enabled\n"
    "- Verify the message ID is for a call (not SMS/Email)"
)

MESSAGE_NOT_FOUND = ("Message not found: {messageId}\n"
                     "The message may have been deleted or the ID is incorrect.")


# =============================================================================
# Tool Module
# =============================================================================

class ConversationTools(ToolModule):
    family = "conversation"
    subject = "conversation"
    lookup = "search_conversations"

    def build_specs(self):
        return [
            # -----------------------------------------------------------------
            # Messaging
            # -----------------------------------------------------------------
            ToolSpec(
                name="send_sms",
                description="Send an SMS message to a contact in GoHighLevel",
                params=SendSmsParams,
                method="POST", path="/conversations/messages",
                transform=_message_type("SMS"),
                reshape=_sent("SMS"),
                subject="contact", lookup="search_contacts",
                hints=(hint(400, "SMS could not be sent.\nCheck that the contact has a valid phone number "
                                 "and that fromNumber (if given) is a number configured in GHL."),),
            ),
            ToolSpec(
                name="send_email",
                description="Send an email to a contact. html carries the body (plain text or HTML).",
                params=SendEmailParams,
                method="POST", path="/conversations/messages",
                transform=_message_type("Email"),
                reshape=_sent("Email"),
                subject="contact", lookup="search_contacts",
                hints=(hint(400, "Email could not be sent.\nCheck that the contact has a valid email address "
                                 "and that emailFrom (if given) is a sender configured in GHL."),),
            ),

            # -----------------------------------------------------------------
            # Conversations
            # -----------------------------------------------------------------
            ToolSpec(
                name="search_conversations",
                description="Search conversations in GoHighLevel with various filters",
                params=SearchConversationsParams,
                path="/conversations/search",
                location="locationId",
                defaults={"status": "all", "limit": 20},
                reshape=_search_result,
            ),
            ToolSpec(
                name="get_conversation",
                description="Get detailed conversation information including message history",
                params=GetConversationParams,
                path="/conversations/{conversationId}",
                handler=self._get_conversation,
            ),
            ToolSpec(
                name="create_conversation",
                description="Create a new conversation with a contact",
                params=CreateConversationParams,
                method="POST", path="/conversations/",
                location="locationId",
                reshape=lambda data, args: {
                    "success": True,
                    "conversationId": (data.get("conversation") or data).get("id"),
                    "message": f"Conversation created successfully with contact {args['contactId']}",
                },
                subject="contact", lookup="search_contacts",
            ),
            ToolSpec(
                name="update_conversation",
                description="Update conversation properties (star, mark read, etc.)",
                params=UpdateConversationParams,
                method="PUT", path="/conversations/{conversationId}",
                location="locationId",
                reshape=lambda data, args: {
                    "success": True,
                    "conversation": data.get("conversation") or data,
                    "message": "Conversation updated successfully",
                },
            ),
            ToolSpec(
                name="get_recent_messages",
                description="Get recent messages across all conversations for monitoring",
                params=RecentMessagesParams,
                path="/conversations/search",
                location="locationId",
                defaults={"limit": 10, "status": "unread",
                          "sortBy": "last_message_date", "sort": "desc"},
                reshape=_recent_result,
            ),
            ToolSpec(
                name="delete_conversation",
                description="Delete a conversation permanently",
                params=ConversationIdParams,
                method="DELETE", path="/conversations/{conversationId}",
                message="Conversation deleted successfully",
            ),

            # -----------------------------------------------------------------
            # Messages
            # -----------------------------------------------------------------
            ToolSpec(
                name="get_email_message",
                description="Get detailed email message information by email message ID",
                params=EmailMessageIdParams,
                path="/conversations/messages/email/{emailMessageId}",
                subject="email message",
                reshape=lambda data, args: {
                    "success": True,
                    "emailMessage": data.get("emailMessage") or data,
                    "message": f"Retrieved email message with ID {args['emailMessageId']}",
                },
            ),
            ToolSpec(
                name="get_message",
                description="Get detailed message information by message ID",
                params=MessageIdParams,
                path="/conversations/messages/{messageId}",
                subject="message",
                reshape=lambda data, args: {
                    "success": True,
                    "messageData": data.get("message") or data,
                    "message": f"Retrieved message with ID {args['messageId']}",
                },
            ),
            ToolSpec(
                name="upload_message_attachments",
                description="Upload file attachments for use in messages",
                params=UploadAttachmentsParams,
                method="POST", path="/conversations/messages/upload",
                location="locationId",
                reshape=lambda data, args: {
                    "success": True,
                    "uploadedFiles": data.get("uploadedFiles"),
                    "message": f"Attachments uploaded successfully to conversation {args['conversationId']}",
                },
            ),
            ToolSpec(
                name="update_message_status",
                description="Update the delivery status of a message (delivered, failed, pending, read). "
                            "Requires an active messaging provider.",
                params=UpdateMessageStatusParams,
                method="PUT", path="/conversations/messages/{messageId}/status",
                message="Message status updated to {status} successfully",
                subject="message",
                hints=(
                    hint(403, "Cannot update message status: No conversation provider configured.\n"
                              "This message exists but requires an active SMS/messaging provider to update its status.\n"
                              "Possible reasons:\n"
                              "1. No SMS provider (Twilio, Bandwidth, etc.) is configured in GHL\n"
                              "2. The provider that sent this message is no longer active\n"
                              "3. Account doesn't have messaging provider permissions\n"
                              "Message ID: {messageId}\nAttempted status: {status}\n"
                              "Note: You can retrieve this message using get_message, but status updates "
                              "require an active messaging provider.",
                         contains="no conversation provider found"),
                    hint(401, "Cannot update message status: Message exists but status updates are not supported.\n"
                              "This typically happens with email messages, which have read-only status via the GHL API.\n"
                              "Message ID: {messageId}\nAttempted status: {status}\n"
                              "Note: You can retrieve this message using get_email_message or get_message, "
                              "but status modification is restricted.",
                         contains="no message found"),
                    hint(403, "Permission denied: Cannot update message status.\nPlease check:\n"
                              "- API key has write permissions for messages\n"
                              "- Account has messaging/conversation permissions\n"
                              "- Provider configuration is active\nMessage ID: {messageId}"),
                    hint(401, "Authentication error: Unable to update message status.\nPlease verify:\n"
                              "- API key is valid and not expired\n- API key has correct permissions\n"
                              "- Message ID is correct: {messageId}"),
                    hint(404, MESSAGE_NOT_FOUND),
                ),
            ),
            ToolSpec(
                name="add_inbound_message",
                description="Manually add an inbound message to a conversation",
                params=InboundMessageParams,
                method="POST", path="/conversations/messages/inbound",
                reshape=_processed("Inbound message"),
                hints=(hint(500, "Inbound message of type {type} was rejected by GHL.\n"
                                 "For Call messages this usually means call functionality is not configured:\n"
                                 "- Go to GHL Settings > Phone Numbers\n"
                                 "- Set up a phone number or calling provider\n"
                                 "- Ensure your account has calling capabilities enabled"),),
            ),
            ToolSpec(
                name="add_outbound_call",
                description="Manually add an outbound call record to a conversation",
                params=OutboundCallParams,
                method="POST", path="/conversations/messages/outbound",
                transform=_outbound_call,
                reshape=_processed("Outbound call"),
                hints=(hint(500, CALLS_NOT_CONFIGURED),),
            ),

            # -----------------------------------------------------------------
            # Call recordings and transcriptions
            # -----------------------------------------------------------------
            ToolSpec(
                name="get_message_recording",
                description="Get call recording audio for a message",
                params=MessageIdParams,
                path="/conversations/messages/{messageId}/locations/{locationId}/recording",
                location="locationId",
                subject="message",
                reshape=lambda data, args: {
                    "success": True,
                    "recording": data.get("audioData", data.get("raw")),
                    "contentType": data.get("contentType", "audio/x-wav"),
                    "message": f"Retrieved call recording for message {args['messageId']}",
                },
                hints=(hint(500, CALLS_NOT_CONFIGURED),),
            ),
            ToolSpec(
                name="get_message_transcription",
                description="Get call transcription text for a message",
                params=MessageIdParams,
                path="/conversations/locations/{locationId}/messages/{messageId}/transcription",
                location="locationId",
                subject="message",
                reshape=_transcriptions,
                hints=(hint(500, CALLS_NOT_CONFIGURED + "\n- Enable call transcription in your GHL account settings"),),
            ),
            ToolSpec(
                name="download_transcription",
                description="Download call transcription as a text file",
                params=MessageIdParams,
                path="/conversations/locations/{locationId}/messages/{messageId}/transcription/download",
                location="locationId",
                subject="message",
                reshape=lambda data, args: {
                    "success": True,
                    "transcription": data.get("raw") or data if isinstance(data, dict) else data,
                    "message": f"Downloaded call transcription for message {args['messageId']}",
                },
            ),

            # -----------------------------------------------------------------
            # Scheduling and live chat
            # -----------------------------------------------------------------
            ToolSpec(
                name="cancel_scheduled_message",
                description="Cancel a scheduled message before it is sent",
                params=MessageIdParams,
                method="DELETE", path="/conversations/messages/{messageId}/schedule",
                subject="scheduled message",
                reshape=_cancelled("message"),
            ),
            ToolSpec(
                name="cancel_scheduled_email",
                description="Cancel a scheduled email before it is sent",
                params=EmailMessageIdParams,
                method="DELETE", path="/conversations/messages/email/{emailMessageId}/schedule",
                subject="scheduled email",
                reshape=_cancelled("email"),
            ),
            ToolSpec(
                name="live_chat_typing",
                description="Send typing indicator for live chat conversations",
                params=LiveChatTypingParams,
                method="POST", path="/conversations/providers/live-chat/typing",
                location="locationId",
                reshape=lambda data, args: {
                    "success": bool(data.get("success", True)),
                    "message": f"Live chat typing indicator {'enabled' if args['isTyping'] else 'disabled'} successfully",
                },
                idempotent=True,
            ),
        ]

    async def _get_conversation(self, spec: ToolSpec, values: dict) -> dict:
        """Fetch the conversation, then its messages. The two reads are independent."""
        conversation_id = values["conversationId"]
        path, _, _ = self.prepare(spec, {"conversationId": conversation_id})
        conversation = await self.send(spec, values, "GET", path)

        params = {"limit": values.get("limit", 20)}
        if values.get("messageTypes"):
            params["type"] = ",".join(values["messageTypes"])
        messages_data = await self.send(spec, values, "GET", f"{path}/messages", params=params)

        # Messages come back either flat or wrapped as {messages: {messages, nextPage}}
        container = messages_data.get("messages", {}) if isinstance(messages_data, dict) else {}
        if isinstance(container, dict):
            messages = container.get("messages") or []
            has_more = bool(container.get("nextPage", messages_data.get("nextPage")))
        else:
            messages = container or []
            has_more = bool(messages_data.get("nextPage"))

        return {
            "success": True,
            "conversation": conversation.get("conversation", conversation) if isinstance(conversation, dict) else conversation,
            "messages": messages,
            "hasMoreMessages": has_more,
            "message": f"Retrieved conversation with {len(messages)} messages",
        }
