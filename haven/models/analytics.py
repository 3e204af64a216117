"""
Analytics report models.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from haven.models.enums import ChatMode, EngagementLevel


class ModeCounts(BaseModel):
    """One counter per chat mode."""

    mental_health_chats: int = 0
    spiritual_chats: int = 0
    general_chats: int = 0


class HistoryStatistics(ModeCounts):
    """Owner-wide statistics attached to history results."""

    total_chats: int = 0
    total_messages: int = 0
    bookmarked_chats: int = 0
    avg_messages_per_chat: float = 0


class ChatStatistics(ModeCounts):
    """Statistics block of the analytics report."""

    total_chats: int = 0
    total_messages: int = 0
    avg_messages_per_chat: float = 0
    longest_conversation: int = 0
    shortest_conversation: int = 0


class DailyActivity(BaseModel):
    day: date
    chats_created: int
    messages_exchanged: int


class ChatTypeActivity(BaseModel):
    mode: ChatMode
    count: int
    total_messages: int
    avg_messages_per_chat: float


class Insights(BaseModel):
    most_active_day: Optional[DailyActivity] = None
    preferred_chat_type: Optional[ChatMode] = None
    engagement_level: EngagementLevel = EngagementLevel.LOW


class StatisticsReport(BaseModel):
    """Full analytics output for one owner."""

    period_days: Optional[int] = Field(None, description="Trailing window, None for all time")
    statistics: ChatStatistics
    daily_activity: list[DailyActivity]
    chat_type_activity: list[ChatTypeActivity]
    insights: Insights
