from __future__ import annotations

import logging
from datetime import date

from funding_feeds.config import SourceSettings, option_int, option_str
from funding_feeds.fetcher import HttpFetcher
from funding_feeds.inference import infer_beneficiary, infer_deadline, infer_program
from funding_feeds.markup import html_to_text, normalize_text, parse_feed_items
from funding_feeds.models import OpportunityRecord, RawFeedItem
from funding_feeds.utils.datetime_utils import parse_date_utc

from .base import Source, item_url
from .registry import register_source

logger = logging.getLogger(__name__)

UNTITLED_CALL = "Untitled call"


class OpportunityFeedSource(Source):
    """Funding calls from an RSS feed."""

    kind = "opportunities"

    def __init__(self, settings: SourceSettings, fetcher: HttpFetcher) -> None:
        super().__init__(settings, fetcher)
        self.max_items = option_int(settings, "max_items", 60, minimum=1)
        self.country = option_str(settings, "country", "EU")

    def fetch(self, today: date) -> list[OpportunityRecord]:
        xml = self.fetcher.fetch_text(self.url)
        items = parse_feed_items(xml, limit=self.max_items)

        records: list[OpportunityRecord] = []
        for item in items:
            record = self._item_to_record(item, today)
            if record is None:
                logger.debug("Dropping feed item without URL: %r", item.title)
                continue
            records.append(record)

        logger.info(
            "Source %s parsed %d items, kept %d with a URL",
            self.source_id,
            len(items),
            len(records),
        )
        return records

    def _item_to_record(self, item: RawFeedItem, today: date) -> OpportunityRecord | None:
        url = item_url(item)
        if not url:
            return None

        title = normalize_text(item.title) or UNTITLED_CALL
        description = html_to_text(item.description)

        return OpportunityRecord(
            title=title,
            program=infer_program(f"{title} {description}"),
            beneficiary=infer_beneficiary(description),
            country=self.country,
            url=url,
            published=parse_date_utc(item.pub_date),
            deadline=infer_deadline(description, today),
        )


@register_source("opportunity_rss")
def _build_opportunity_source(settings: SourceSettings, fetcher: HttpFetcher) -> Source:
    return OpportunityFeedSource(settings, fetcher)
