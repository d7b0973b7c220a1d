from __future__ import annotations

from datetime import date, timedelta
from typing import Sequence, TypeVar

from funding_feeds.models import EventRecord, FeedEventRecord, OpportunityRecord

ACTIVE = 0
UNDATED = 1
EXPIRED = 2

DEFAULT_RECENCY_DAYS = 365
DEFAULT_FALLBACK_LIMIT = 100

EventT = TypeVar("EventT", EventRecord, FeedEventRecord)


def rank(record: OpportunityRecord, today: date) -> int:
    if record.deadline is None:
        return UNDATED
    return ACTIVE if record.deadline >= today else EXPIRED


def rank_opportunities(
    records: Sequence[OpportunityRecord],
    today: date,
) -> list[OpportunityRecord]:
    """Order records active, undated, expired.

    Active calls close soonest first, expired calls are most recently closed
    first and undated calls are newest first. Python's sort is stable, so
    equal keys keep feed order.
    """
    buckets: dict[int, list[OpportunityRecord]] = {ACTIVE: [], UNDATED: [], EXPIRED: []}
    for record in records:
        buckets[rank(record, today)].append(record)

    active = sorted(buckets[ACTIVE], key=lambda record: record.deadline)
    undated = sorted(
        buckets[UNDATED],
        key=lambda record: record.published or date.min,
        reverse=True,
    )
    expired = sorted(buckets[EXPIRED], key=lambda record: record.deadline, reverse=True)
    return active + undated + expired


def apply_recency_filter(
    records: Sequence[OpportunityRecord],
    today: date,
    *,
    max_age_days: int = DEFAULT_RECENCY_DAYS,
    fallback_limit: int = DEFAULT_FALLBACK_LIMIT,
) -> list[OpportunityRecord]:
    cutoff = today - timedelta(days=max_age_days)
    kept = [
        record
        for record in records
        if record.published is None or record.published >= cutoff
    ]
    if not kept:
        return list(records[:fallback_limit])
    return kept


def dedupe_events(records: Sequence[EventT]) -> list[EventT]:
    seen: set[tuple[str, date | None]] = set()
    unique: list[EventT] = []
    for record in records:
        key = (record.title, record.date)
        if key in seen:
            continue
        seen.add(key)
        unique.append(record)
    return unique


def sort_events(records: Sequence[EventT]) -> list[EventT]:
    """Ascending by start date; undated events go last."""
    return sorted(
        records,
        key=lambda record: (record.date is None, record.date or date.min),
    )
