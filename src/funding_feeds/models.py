from __future__ import annotations

from dataclasses import dataclass
import datetime
from typing import Any


def _iso(value: datetime.date | None) -> str:
    return value.isoformat() if value is not None else ""


@dataclass(slots=True)
class RawFeedItem:
    title: str
    description: str
    link: str = ""
    guid: str = ""
    pub_date: str = ""


@dataclass(slots=True)
class OpportunityRecord:
    title: str
    program: str
    beneficiary: str
    country: str
    url: str
    published: datetime.date | None = None
    deadline: datetime.date | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "program": self.program,
            "beneficiary": self.beneficiary,
            "country": self.country,
            "published": _iso(self.published),
            "deadline": _iso(self.deadline),
            "url": self.url,
        }


@dataclass(slots=True)
class EventRecord:
    """An event scraped from the agency homepage events block."""

    title: str
    date: datetime.date | None
    end_date: datetime.date | None = None
    date_label: str = ""
    type: str = ""
    venue: str = ""
    link: str = ""
    source: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "date": _iso(self.date),
            "end_date": _iso(self.end_date),
            "date_label": self.date_label,
            "type": self.type,
            "venue": self.venue,
            "link": self.link,
            "source": self.source,
        }


@dataclass(slots=True)
class FeedEventRecord:
    """An event read from an RSS feed."""

    title: str
    country: str
    city: str = ""
    date: datetime.date | None = None
    url: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "country": self.country,
            "city": self.city,
            "date": _iso(self.date),
            "url": self.url,
        }


@dataclass(slots=True)
class DateBlock:
    """One date-block entry cut out of the homepage events region."""

    day: str
    month: str = ""
    year: str = ""
    href: str = ""
    title: str = ""
    text: str = ""


Record = OpportunityRecord | EventRecord | FeedEventRecord
