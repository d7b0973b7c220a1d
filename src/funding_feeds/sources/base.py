from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from funding_feeds.config import SourceSettings
from funding_feeds.fetcher import HttpFetcher
from funding_feeds.models import RawFeedItem, Record
from funding_feeds.utils.url_utils import is_http_url


class Source(ABC):
    kind: str = "records"

    def __init__(self, settings: SourceSettings, fetcher: HttpFetcher) -> None:
        self.settings = settings
        self.source_id = settings.id
        self.url = settings.url
        self.fetcher = fetcher

    @abstractmethod
    def fetch(self, today: date) -> list[Record]:
        """Fetch, decode and infer records from the source.

        Transport failures propagate as ``FetchError``.
        """


def item_url(item: RawFeedItem) -> str:
    """Link of a feed item, falling back to an absolute guid."""
    if is_http_url(item.link):
        return item.link.strip()
    if is_http_url(item.guid):
        return item.guid.strip()
    return ""
