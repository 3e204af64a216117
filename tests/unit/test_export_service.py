"""
Unit tests for conversation export rendering.
"""

import json
from datetime import datetime, timedelta, timezone
from uuid import uuid4

from haven.models.conversation import Conversation, Message
from haven.models.enums import ChatMode, ExportFormat, MessageRole
from haven.services.export_service import build_export_document, render_export, render_text

CREATED = datetime(2024, 2, 14, 9, 30, tzinfo=timezone.utc)
EXPORTED = datetime(2024, 2, 20, 18, 0, tzinfo=timezone.utc)


def _conversation() -> Conversation:
    return Conversation(
        id=uuid4(),
        user_id="owner",
        mode=ChatMode.SPIRITUAL,
        sub_category="meditation",
        title="Finding Inner Peace",
        messages=[
            Message(role=MessageRole.USER, content="How do I start?", timestamp=CREATED),
            Message(
                role=MessageRole.ASSISTANT,
                content="Begin with your breath.",
                timestamp=CREATED + timedelta(seconds=1, milliseconds=500),
            ),
        ],
        created_at=CREATED,
        updated_at=CREATED + timedelta(seconds=2),
    )


def test_export_document_numbers_messages_and_offsets():
    conversation = _conversation()

    document = build_export_document(conversation, "owner", EXPORTED)

    assert document.chat_id == conversation.id
    assert document.message_count == 2
    assert [m.message_number for m in document.conversation] == [1, 2]
    assert [m.time_from_start_ms for m in document.conversation] == [0, 1500]
    assert document.exported_by == "owner"
    assert document.exported_at == EXPORTED


def test_json_export():
    conversation = _conversation()

    result = render_export(conversation, ExportFormat.JSON, "owner", EXPORTED)

    assert result.media_type == "application/json"
    assert result.filename == f"chat-{conversation.id}.json"
    body = json.loads(result.content)
    assert body["title"] == "Finding Inner Peace"
    assert body["mode"] == "spiritual"
    assert body["conversation"][1]["role"] == "assistant"


def test_text_export():
    conversation = _conversation()

    result = render_export(conversation, ExportFormat.TEXT, "owner", EXPORTED)

    assert result.media_type == "text/plain"
    assert result.filename == f"chat-{conversation.id}.txt"
    text = result.content.decode("utf-8")
    assert text.startswith("Chat: Finding Inner Peace\nType: spiritual\n")
    assert "[1] USER: How do I start?" in text
    assert "[2] ASSISTANT: Begin with your breath." in text


def test_text_export_of_empty_conversation():
    conversation = _conversation().model_copy(update={"messages": []})

    assert "Messages: 0" in render_text(conversation)


def test_structured_export_of_four_messages_reparses():
    conversation = _conversation()
    later = [
        Message(role=MessageRole.USER, content="And then?", timestamp=CREATED + timedelta(minutes=1)),
        Message(role=MessageRole.ASSISTANT, content="Keep going.", timestamp=CREATED + timedelta(minutes=2)),
    ]
    conversation = conversation.model_copy(update={"messages": conversation.messages + later})

    body = json.loads(render_export(conversation, ExportFormat.JSON, "owner", EXPORTED).content)

    offsets = [m["time_from_start_ms"] for m in body["conversation"]]
    assert body["message_count"] == 4
    assert offsets == sorted(offsets)
