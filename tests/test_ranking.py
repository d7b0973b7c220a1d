from __future__ import annotations

from datetime import date, timedelta

from funding_feeds.models import EventRecord, FeedEventRecord, OpportunityRecord
from funding_feeds.ranking import (
    ACTIVE,
    EXPIRED,
    UNDATED,
    apply_recency_filter,
    dedupe_events,
    rank,
    rank_opportunities,
    sort_events,
)

TODAY = date(2026, 3, 1)


def _opportunity(title: str, deadline: date | None = None, published: date | None = None):
    return OpportunityRecord(
        title=title,
        program="LIFE",
        beneficiary="SMEs",
        country="EU",
        url=f"https://cinea.ec.europa.eu/calls/{title}_en",
        published=published,
        deadline=deadline,
    )


def test_rank_buckets() -> None:
    assert rank(_opportunity("a", deadline=TODAY), TODAY) == ACTIVE
    assert rank(_opportunity("b"), TODAY) == UNDATED
    assert rank(_opportunity("c", deadline=TODAY - timedelta(days=1)), TODAY) == EXPIRED


def test_ranking_orders_active_then_undated_then_expired() -> None:
    records = [
        _opportunity("expired-old", deadline=date(2025, 6, 1)),
        _opportunity("undated-old", published=date(2026, 1, 1)),
        _opportunity("active-late", deadline=date(2026, 9, 1)),
        _opportunity("expired-recent", deadline=date(2026, 2, 1)),
        _opportunity("undated-unpublished"),
        _opportunity("active-today", deadline=TODAY),
        _opportunity("undated-new", published=date(2026, 2, 20)),
    ]

    ranked = rank_opportunities(records, TODAY)

    assert [record.title for record in ranked] == [
        "active-today",
        "active-late",
        "undated-new",
        "undated-old",
        "undated-unpublished",
        "expired-recent",
        "expired-old",
    ]


def test_ranking_ties_keep_feed_order() -> None:
    deadline = date(2026, 4, 1)
    expired = date(2026, 1, 1)
    records = [
        _opportunity("a1", deadline=deadline),
        _opportunity("e1", deadline=expired),
        _opportunity("a2", deadline=deadline),
        _opportunity("u1", published=date(2026, 2, 1)),
        _opportunity("e2", deadline=expired),
        _opportunity("u2", published=date(2026, 2, 1)),
    ]

    ranked = rank_opportunities(records, TODAY)

    assert [record.title for record in ranked] == ["a1", "a2", "u1", "u2", "e1", "e2"]


def test_active_deadlines_are_non_decreasing_and_never_follow_expired() -> None:
    records = [
        _opportunity(
            f"r{index}",
            deadline=None if index % 5 == 0 else TODAY + timedelta(days=(index * 37) % 90 - 45),
            published=TODAY - timedelta(days=index),
        )
        for index in range(40)
    ]

    ranked = rank_opportunities(records, TODAY)
    buckets = [rank(record, TODAY) for record in ranked]

    assert buckets == sorted(buckets)
    active = [record.deadline for record in ranked if rank(record, TODAY) == ACTIVE]
    assert active == sorted(active)
    assert len(ranked) == len(records)


def test_recency_filter_drops_old_records_and_keeps_unpublished() -> None:
    records = [
        _opportunity("recent", published=TODAY - timedelta(days=30)),
        _opportunity("edge", published=TODAY - timedelta(days=365)),
        _opportunity("old", published=TODAY - timedelta(days=366)),
        _opportunity("unknown"),
    ]

    kept = apply_recency_filter(records, TODAY)

    assert [record.title for record in kept] == ["recent", "edge", "unknown"]


def test_recency_filter_falls_back_to_prefix_when_everything_is_old() -> None:
    records = [
        _opportunity(f"old{index}", published=date(2020, 1, 1) + timedelta(days=index))
        for index in range(5)
    ]

    kept = apply_recency_filter(records, TODAY, fallback_limit=3)

    assert [record.title for record in kept] == ["old0", "old1", "old2"]
    assert apply_recency_filter([], TODAY) == []


def test_dedupe_events_first_seen_wins_and_is_idempotent() -> None:
    events = [
        EventRecord(title="Info day", date=date(2026, 3, 2), venue="Online only"),
        EventRecord(title="Info day", date=date(2026, 3, 2), venue="Brussels, Belgium"),
        EventRecord(title="Info day", date=date(2026, 4, 2)),
        EventRecord(title="Workshop", date=None),
        EventRecord(title="Workshop", date=None),
    ]

    once = dedupe_events(events)
    twice = dedupe_events(once)

    assert [(event.title, event.date) for event in once] == [
        ("Info day", date(2026, 3, 2)),
        ("Info day", date(2026, 4, 2)),
        ("Workshop", None),
    ]
    assert once[0].venue == "Online only"
    assert twice == once


def test_sort_events_ascending_with_undated_last() -> None:
    events = [
        FeedEventRecord(title="later", country="EU", date=date(2026, 5, 1)),
        FeedEventRecord(title="undated", country="EU"),
        FeedEventRecord(title="sooner", country="EU", date=date(2026, 2, 1)),
    ]

    assert [event.title for event in sort_events(events)] == ["sooner", "later", "undated"]
