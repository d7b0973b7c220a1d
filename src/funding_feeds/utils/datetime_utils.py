from __future__ import annotations

from datetime import date, datetime, timezone

from dateutil import parser


def to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_date_utc(value: str | None) -> date | None:
    """Calendar date (UTC) of an RFC-822 or ISO timestamp, or None."""
    value = (value or "").strip()
    if not value:
        return None
    try:
        return to_utc(parser.parse(value)).date()
    except (ValueError, TypeError, OverflowError):
        return None


def safe_date(year: int | str, month: int | str, day: int | str) -> date | None:
    try:
        return date(int(year), int(month), int(day))
    except (TypeError, ValueError):
        return None


def format_timestamp(value: datetime) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix."""
    return to_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")
