"""
Unit tests for analytics reducers, insights and the analytics service.
"""

from datetime import date, datetime, timedelta, timezone
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from haven.core.exceptions import InvalidQueryError
from haven.models.analytics import ChatTypeActivity, DailyActivity
from haven.models.conversation import Conversation, Message
from haven.models.enums import ChatMode, EngagementLevel, MessageRole
from haven.services.analytics_service import (
    AnalyticsService,
    build_history_statistics,
    build_statistics_report,
    engagement_level,
    most_active_day,
)

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def _make_conversation(
    mode: ChatMode,
    message_count: int,
    created_at: datetime = NOW,
    is_bookmarked: bool = False,
) -> Conversation:
    messages = [
        Message(
            role=MessageRole.USER if i % 2 == 0 else MessageRole.ASSISTANT,
            content=f"message {i}",
            timestamp=created_at + timedelta(seconds=i),
        )
        for i in range(message_count)
    ]
    return Conversation(
        id=uuid4(),
        user_id="owner",
        mode=mode,
        messages=messages,
        is_bookmarked=is_bookmarked,
        created_at=created_at,
        updated_at=created_at,
    )


def test_empty_report_has_zero_average_and_low_engagement():
    report = build_statistics_report([])

    assert report.statistics.total_chats == 0
    assert report.statistics.avg_messages_per_chat == 0
    assert report.statistics.shortest_conversation == 0
    assert report.daily_activity == []
    assert report.chat_type_activity == []
    assert report.insights.most_active_day is None
    assert report.insights.preferred_chat_type is None
    assert report.insights.engagement_level == EngagementLevel.LOW


def test_statistics_totals_and_mode_counts():
    conversations = [
        _make_conversation(ChatMode.MENTAL_HEALTH, 4),
        _make_conversation(ChatMode.MENTAL_HEALTH, 2),
        _make_conversation(ChatMode.SPIRITUAL, 6),
    ]

    stats = build_statistics_report(conversations).statistics

    assert stats.total_chats == 3
    assert stats.total_messages == 12
    assert stats.mental_health_chats == 2
    assert stats.spiritual_chats == 1
    assert stats.general_chats == 0
    assert stats.avg_messages_per_chat == 4
    assert stats.longest_conversation == 6
    assert stats.shortest_conversation == 2


def test_mode_counts_sum_to_total():
    conversations = [
        _make_conversation(mode, 2) for mode in [ChatMode.GENERAL, ChatMode.SPIRITUAL, ChatMode.GENERAL]
    ]

    stats = build_statistics_report(conversations).statistics

    assert stats.mental_health_chats + stats.spiritual_chats + stats.general_chats == stats.total_chats


def test_daily_activity_ascending_without_empty_days():
    conversations = [
        _make_conversation(ChatMode.GENERAL, 2, NOW),
        _make_conversation(ChatMode.GENERAL, 4, NOW - timedelta(days=3)),
        _make_conversation(ChatMode.SPIRITUAL, 6, NOW - timedelta(days=3, hours=1)),
    ]

    daily = build_statistics_report(conversations).daily_activity

    assert [entry.day for entry in daily] == [date(2024, 6, 12), date(2024, 6, 15)]
    assert daily[0].chats_created == 2
    assert daily[0].messages_exchanged == 10
    assert daily[1].chats_created == 1


def test_daily_activity_uses_configured_timezone():
    late_evening = datetime(2024, 1, 19, 23, 0, tzinfo=timezone.utc)
    conversations = [_make_conversation(ChatMode.GENERAL, 2, late_evening)]

    utc_daily = build_statistics_report(conversations, tz_name="UTC").daily_activity
    tokyo_daily = build_statistics_report(conversations, tz_name="Asia/Tokyo").daily_activity

    assert utc_daily[0].day == date(2024, 1, 19)
    assert tokyo_daily[0].day == date(2024, 1, 20)


def test_chat_type_activity_sorted_by_count_then_mode():
    conversations = [
        _make_conversation(ChatMode.SPIRITUAL, 2),
        _make_conversation(ChatMode.GENERAL, 4),
        _make_conversation(ChatMode.MENTAL_HEALTH, 8),
        _make_conversation(ChatMode.MENTAL_HEALTH, 2),
    ]

    activity = build_statistics_report(conversations).chat_type_activity

    assert [entry.mode for entry in activity] == [
        ChatMode.MENTAL_HEALTH,
        ChatMode.GENERAL,
        ChatMode.SPIRITUAL,
    ]
    assert activity[0].count == 2
    assert activity[0].total_messages == 10
    assert activity[0].avg_messages_per_chat == 5


def test_preferred_chat_type_is_most_frequent_mode():
    conversations = [
        _make_conversation(ChatMode.SPIRITUAL, 2),
        _make_conversation(ChatMode.SPIRITUAL, 2),
        _make_conversation(ChatMode.GENERAL, 20),
    ]

    insights = build_statistics_report(conversations).insights

    assert insights.preferred_chat_type == ChatMode.SPIRITUAL


@pytest.mark.parametrize(
    "average,expected",
    [
        (10.1, EngagementLevel.HIGH),
        (10.0, EngagementLevel.MEDIUM),
        (5.1, EngagementLevel.MEDIUM),
        (5.0, EngagementLevel.LOW),
        (0, EngagementLevel.LOW),
    ],
)
def test_engagement_thresholds_are_strict(average, expected):
    assert engagement_level(average) == expected


def test_engagement_from_report_average():
    conversations = [_make_conversation(ChatMode.GENERAL, 12), _make_conversation(ChatMode.GENERAL, 10)]

    insights = build_statistics_report(conversations).insights

    assert insights.engagement_level == EngagementLevel.HIGH


def test_most_active_day_ties_go_to_earliest_day():
    daily = [
        DailyActivity(day=date(2024, 6, 3), chats_created=2, messages_exchanged=4),
        DailyActivity(day=date(2024, 6, 1), chats_created=2, messages_exchanged=9),
        DailyActivity(day=date(2024, 6, 2), chats_created=1, messages_exchanged=2),
    ]

    assert most_active_day(daily).day == date(2024, 6, 1)
    assert most_active_day([]) is None


def test_chat_type_activity_model_average():
    entry = ChatTypeActivity(mode=ChatMode.GENERAL, count=0, total_messages=0, avg_messages_per_chat=0)

    assert entry.avg_messages_per_chat == 0


def test_history_statistics_counts_bookmarks():
    conversations = [
        _make_conversation(ChatMode.GENERAL, 2, is_bookmarked=True),
        _make_conversation(ChatMode.SPIRITUAL, 4),
    ]

    stats = build_history_statistics(conversations)

    assert stats.total_chats == 2
    assert stats.total_messages == 6
    assert stats.bookmarked_chats == 1
    assert stats.avg_messages_per_chat == 3
    assert stats.general_chats == 1
    assert stats.spiritual_chats == 1


@pytest.mark.asyncio
async def test_service_limits_to_trailing_period(settings):
    repo = AsyncMock()
    repo.list_conversations.return_value = [_make_conversation(ChatMode.GENERAL, 2)]
    service = AnalyticsService(repo, settings=settings, clock=lambda: NOW)

    report = await service.get_statistics("owner", period_days=7)

    repo.list_conversations.assert_awaited_once_with("owner", created_from=NOW - timedelta(days=7))
    assert report.period_days == 7
    assert report.statistics.total_chats == 1


@pytest.mark.asyncio
async def test_service_without_period_covers_all_history(settings):
    repo = AsyncMock()
    repo.list_conversations.return_value = []
    service = AnalyticsService(repo, settings=settings, clock=lambda: NOW)

    report = await service.get_statistics("owner", period_days=None)

    repo.list_conversations.assert_awaited_once_with("owner", created_from=None)
    assert report.period_days is None


@pytest.mark.asyncio
@pytest.mark.parametrize("period_days", [0, -3])
async def test_service_rejects_non_positive_period(settings, period_days):
    service = AnalyticsService(AsyncMock(), settings=settings)

    with pytest.raises(InvalidQueryError):
        await service.get_statistics("owner", period_days=period_days)
