"""
Conversation export rendering.
"""

from datetime import datetime

from haven.models.conversation import Conversation
from haven.models.enums import ExportFormat
from haven.models.export import ConversationExport, ExportedMessage, ExportResult
from haven.utils.datetime_utils import millis_between

_MEDIA_TYPES = {
    ExportFormat.JSON: "application/json",
    ExportFormat.TEXT: "text/plain",
}
_EXTENSIONS = {
    ExportFormat.JSON: "json",
    ExportFormat.TEXT: "txt",
}


def export_filename(conversation_id, export_format: ExportFormat) -> str:
    return f"chat-{conversation_id}.{_EXTENSIONS[export_format]}"


def build_export_document(
    conversation: Conversation,
    exported_by: str,
    exported_at: datetime,
) -> ConversationExport:
    """Structured export. time_from_start_ms is relative to created_at."""
    return ConversationExport(
        chat_id=conversation.id,
        title=conversation.title,
        mode=conversation.mode,
        sub_category=conversation.sub_category,
        created_at=conversation.created_at,
        message_count=len(conversation.messages),
        conversation=[
            ExportedMessage(
                message_number=index,
                role=message.role,
                content=message.content,
                timestamp=message.timestamp,
                time_from_start_ms=millis_between(conversation.created_at, message.timestamp),
            )
            for index, message in enumerate(conversation.messages, start=1)
        ],
        exported_at=exported_at,
        exported_by=exported_by,
    )


def render_text(conversation: Conversation) -> str:
    lines = [
        f"Chat: {conversation.title}",
        f"Type: {conversation.mode.value}",
        f"Created: {conversation.created_at.isoformat()}",
        f"Messages: {len(conversation.messages)}",
        "",
        "--- Conversation ---",
        "",
    ]
    for index, message in enumerate(conversation.messages, start=1):
        lines.append(f"[{index}] {message.role.value.upper()}: {message.content}")
        lines.append(f"Time: {message.timestamp.isoformat()}")
        lines.append("")
    return "\n".join(lines)


def render_export(
    conversation: Conversation,
    export_format: ExportFormat,
    exported_by: str,
    exported_at: datetime,
) -> ExportResult:
    if export_format == ExportFormat.TEXT:
        content = render_text(conversation).encode("utf-8")
    else:
        document = build_export_document(conversation, exported_by, exported_at)
        content = document.model_dump_json(indent=2).encode("utf-8")

    return ExportResult(
        content=content,
        media_type=_MEDIA_TYPES[export_format],
        filename=export_filename(conversation.id, export_format),
    )
