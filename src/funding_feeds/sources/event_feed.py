from __future__ import annotations

import logging
from datetime import date

from funding_feeds.config import SourceSettings, option_int, option_str
from funding_feeds.fetcher import HttpFetcher
from funding_feeds.inference import infer_event_date, infer_event_location
from funding_feeds.markup import html_to_text, normalize_text, parse_feed_items
from funding_feeds.models import FeedEventRecord, RawFeedItem
from funding_feeds.utils.datetime_utils import parse_date_utc

from .base import Source, item_url
from .registry import register_source

logger = logging.getLogger(__name__)


class FeedEventSource(Source):
    """Events announced through an RSS feed."""

    kind = "events"

    def __init__(self, settings: SourceSettings, fetcher: HttpFetcher) -> None:
        super().__init__(settings, fetcher)
        self.max_items = option_int(settings, "max_items", 60, minimum=1)
        self.country = option_str(settings, "country", "EU")

    def fetch(self, today: date) -> list[FeedEventRecord]:
        xml = self.fetcher.fetch_text(self.url)
        items = parse_feed_items(xml, limit=self.max_items)
        records = [
            record
            for record in (self._item_to_record(item) for item in items)
            if record is not None
        ]
        logger.info("Source %s parsed %d event items", self.source_id, len(records))
        return records

    def _item_to_record(self, item: RawFeedItem) -> FeedEventRecord | None:
        title = normalize_text(item.title)
        if not title:
            return None

        text = f"{title}\n{html_to_text(item.description)}"
        city, country = infer_event_location(text, self.country)

        return FeedEventRecord(
            title=title,
            country=country,
            city=city,
            date=infer_event_date(text, fallback=parse_date_utc(item.pub_date)),
            url=item_url(item),
        )


@register_source("event_rss")
def _build_event_feed_source(settings: SourceSettings, fetcher: HttpFetcher) -> Source:
    return FeedEventSource(settings, fetcher)
