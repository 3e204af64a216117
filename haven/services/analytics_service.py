"""
Conversation analytics.

Each statistics block is an independent reducer fed by the same single pass
over an owner's conversations, so every block sees the same snapshot.
"""

from __future__ import annotations

from collections import Counter
from datetime import date, datetime, timedelta
from typing import Callable, Iterable, Optional, Protocol

from haven.core.config import Settings, get_settings
from haven.core.exceptions import InvalidQueryError
from haven.interfaces.conversation_repository import IConversationRepository
from haven.models.analytics import (
    ChatStatistics,
    ChatTypeActivity,
    DailyActivity,
    HistoryStatistics,
    Insights,
    ModeCounts,
    StatisticsReport,
)
from haven.models.conversation import Conversation
from haven.models.enums import ChatMode, EngagementLevel
from haven.utils.datetime_utils import local_date, now_utc

HIGH_ENGAGEMENT_THRESHOLD = 10
MEDIUM_ENGAGEMENT_THRESHOLD = 5


class Reducer(Protocol):
    def add(self, conversation: Conversation) -> None:
        ...


def aggregate(conversations: Iterable[Conversation], *reducers: Reducer) -> None:
    """Feed every conversation to every reducer in one pass."""
    for conversation in conversations:
        for reducer in reducers:
            reducer.add(conversation)


def _average(total: int, count: int) -> float:
    return total / count if count else 0


# ===========================================
# Reducers
# ===========================================


class TotalsReducer:
    """Chat/message totals, bookmarks and conversation length extremes."""

    def __init__(self) -> None:
        self.total_chats = 0
        self.total_messages = 0
        self.bookmarked_chats = 0
        self.longest_conversation = 0
        self.shortest_conversation: Optional[int] = None

    def add(self, conversation: Conversation) -> None:
        length = len(conversation.messages)
        self.total_chats += 1
        self.total_messages += length
        if conversation.is_bookmarked:
            self.bookmarked_chats += 1
        self.longest_conversation = max(self.longest_conversation, length)
        if self.shortest_conversation is None or length < self.shortest_conversation:
            self.shortest_conversation = length

    @property
    def avg_messages_per_chat(self) -> float:
        return _average(self.total_messages, self.total_chats)


class ModeCountReducer:
    """One counter per chat mode."""

    def __init__(self) -> None:
        self.counts: Counter[ChatMode] = Counter()

    def add(self, conversation: Conversation) -> None:
        self.counts[conversation.mode] += 1

    def result(self) -> ModeCounts:
        return ModeCounts(
            mental_health_chats=self.counts[ChatMode.MENTAL_HEALTH],
            spiritual_chats=self.counts[ChatMode.SPIRITUAL],
            general_chats=self.counts[ChatMode.GENERAL],
        )


class DailyActivityReducer:
    """Chats created and messages exchanged per calendar day of creation."""

    def __init__(self, tz_name: str = "UTC") -> None:
        self.tz_name = tz_name
        self.chats: Counter[date] = Counter()
        self.messages: Counter[date] = Counter()

    def add(self, conversation: Conversation) -> None:
        day = local_date(conversation.created_at, self.tz_name)
        self.chats[day] += 1
        self.messages[day] += len(conversation.messages)

    def result(self) -> list[DailyActivity]:
        """Ascending by day; days without conversations are absent."""
        return [
            DailyActivity(
                day=day,
                chats_created=self.chats[day],
                messages_exchanged=self.messages[day],
            )
            for day in sorted(self.chats)
        ]


class ChatTypeActivityReducer:
    """Per-mode count, message total and average."""

    def __init__(self) -> None:
        self.counts: Counter[ChatMode] = Counter()
        self.messages: Counter[ChatMode] = Counter()

    def add(self, conversation: Conversation) -> None:
        self.counts[conversation.mode] += 1
        self.messages[conversation.mode] += len(conversation.messages)

    def result(self) -> list[ChatTypeActivity]:
        """Descending by count, ties by mode name."""
        modes = sorted(self.counts, key=lambda mode: (-self.counts[mode], mode.value))
        return [
            ChatTypeActivity(
                mode=mode,
                count=self.counts[mode],
                total_messages=self.messages[mode],
                avg_messages_per_chat=_average(self.messages[mode], self.counts[mode]),
            )
            for mode in modes
        ]


# ===========================================
# Insights
# ===========================================


def engagement_level(avg_messages_per_chat: float) -> EngagementLevel:
    if avg_messages_per_chat > HIGH_ENGAGEMENT_THRESHOLD:
        return EngagementLevel.HIGH
    if avg_messages_per_chat > MEDIUM_ENGAGEMENT_THRESHOLD:
        return EngagementLevel.MEDIUM
    return EngagementLevel.LOW


def most_active_day(daily_activity: list[DailyActivity]) -> Optional[DailyActivity]:
    """Day with the most chats created; the earliest such day wins ties."""
    best: Optional[DailyActivity] = None
    for entry in sorted(daily_activity, key=lambda item: item.day):
        if best is None or entry.chats_created > best.chats_created:
            best = entry
    return best


def derive_insights(
    avg_messages_per_chat: float,
    daily_activity: list[DailyActivity],
    chat_type_activity: list[ChatTypeActivity],
) -> Insights:
    return Insights(
        most_active_day=most_active_day(daily_activity),
        preferred_chat_type=chat_type_activity[0].mode if chat_type_activity else None,
        engagement_level=engagement_level(avg_messages_per_chat),
    )


def build_statistics_report(
    conversations: Iterable[Conversation],
    period_days: Optional[int] = None,
    tz_name: str = "UTC",
) -> StatisticsReport:
    totals = TotalsReducer()
    modes = ModeCountReducer()
    daily = DailyActivityReducer(tz_name)
    chat_types = ChatTypeActivityReducer()
    aggregate(conversations, totals, modes, daily, chat_types)

    daily_activity = daily.result()
    chat_type_activity = chat_types.result()
    statistics = ChatStatistics(
        **modes.result().model_dump(),
        total_chats=totals.total_chats,
        total_messages=totals.total_messages,
        avg_messages_per_chat=totals.avg_messages_per_chat,
        longest_conversation=totals.longest_conversation,
        shortest_conversation=totals.shortest_conversation or 0,
    )
    return StatisticsReport(
        period_days=period_days,
        statistics=statistics,
        daily_activity=daily_activity,
        chat_type_activity=chat_type_activity,
        insights=derive_insights(
            totals.avg_messages_per_chat,
            daily_activity,
            chat_type_activity,
        ),
    )


def build_history_statistics(conversations: Iterable[Conversation]) -> HistoryStatistics:
    totals = TotalsReducer()
    modes = ModeCountReducer()
    aggregate(conversations, totals, modes)
    return HistoryStatistics(
        **modes.result().model_dump(),
        total_chats=totals.total_chats,
        total_messages=totals.total_messages,
        bookmarked_chats=totals.bookmarked_chats,
        avg_messages_per_chat=totals.avg_messages_per_chat,
    )


class AnalyticsService:
    """Read-only analytics over an owner's conversations."""

    def __init__(
        self,
        repo: IConversationRepository,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.repo = repo
        self.settings = settings or get_settings()
        self._clock = clock

    async def get_statistics(
        self,
        user_id: str,
        period_days: Optional[int] = None,
    ) -> StatisticsReport:
        """
        Statistics over conversations created in the trailing period.

        Args:
            user_id: Owner user ID
            period_days: Trailing window in days; None covers all history
        """
        created_from = None
        if period_days is not None:
            if period_days < 1:
                raise InvalidQueryError("period_days must be at least 1")
            created_from = self._clock() - timedelta(days=period_days)

        conversations = await self.repo.list_conversations(user_id, created_from=created_from)
        return build_statistics_report(
            conversations,
            period_days=period_days,
            tz_name=self.settings.ANALYTICS_TIMEZONE,
        )
