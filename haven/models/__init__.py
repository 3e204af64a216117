"""Pydantic models (schemas) for the application."""

from haven.models.enums import (
    ChatMode,
    EngagementLevel,
    ExportFormat,
    MessageRole,
    SortField,
    SortOrder,
)
from haven.models.conversation import (
    AppendResult,
    Conversation,
    ConversationPage,
    ConversationSummary,
    Message,
)
from haven.models.analytics import (
    ChatStatistics,
    ChatTypeActivity,
    DailyActivity,
    HistoryStatistics,
    Insights,
    StatisticsReport,
)
from haven.models.history import HistoryItem, HistoryPage, HistoryQuery, Pagination
from haven.models.export import ConversationExport, ExportResult

__all__ = [
    # Enums
    "ChatMode",
    "EngagementLevel",
    "ExportFormat",
    "MessageRole",
    "SortField",
    "SortOrder",
    # Conversation
    "AppendResult",
    "Conversation",
    "ConversationPage",
    "ConversationSummary",
    "Message",
    # Analytics
    "ChatStatistics",
    "ChatTypeActivity",
    "DailyActivity",
    "HistoryStatistics",
    "Insights",
    "StatisticsReport",
    # History
    "HistoryItem",
    "HistoryPage",
    "HistoryQuery",
    "Pagination",
    # Export
    "ConversationExport",
    "ExportResult",
]
