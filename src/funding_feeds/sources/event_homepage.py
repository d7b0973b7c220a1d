from __future__ import annotations

import logging
import re
from datetime import date

from funding_feeds.config import SourceSettings, option_str
from funding_feeds.fetcher import HttpFetcher
from funding_feeds.inference import infer_event_type, infer_venue, parse_date_block
from funding_feeds.markup import extract_date_blocks
from funding_feeds.models import EventRecord
from funding_feeds.utils.url_utils import ensure_absolute_url

from .base import Source
from .registry import register_source

logger = logging.getLogger(__name__)

DEFAULT_SOURCE_LABEL = "CINEA homepage events"
_SEE_ALL = re.compile(r"^see all our events$", re.IGNORECASE)


def extract_homepage_events(
    page_html: str,
    base_url: str,
    source_label: str = DEFAULT_SOURCE_LABEL,
) -> list[EventRecord]:
    """Events listed in the homepage events block, in page order."""
    events: list[EventRecord] = []
    for block in extract_date_blocks(page_html):
        if not block.title or _SEE_ALL.match(block.title):
            continue

        start, end = parse_date_block(block.day, block.month, block.year)
        events.append(
            EventRecord(
                title=block.title,
                date=start,
                end_date=end,
                date_label=" ".join(part for part in (block.day, block.month, block.year) if part),
                type=infer_event_type(block.text),
                venue=infer_venue(block.text),
                link=ensure_absolute_url(block.href, base_url),
                source=source_label,
            )
        )
    return events


class HomepageEventSource(Source):
    """Events scraped from the events block of the agency homepage."""

    kind = "events"

    def __init__(self, settings: SourceSettings, fetcher: HttpFetcher) -> None:
        super().__init__(settings, fetcher)
        self.source_label = option_str(settings, "source_label", DEFAULT_SOURCE_LABEL)

    def fetch(self, today: date) -> list[EventRecord]:
        page_html = self.fetcher.fetch_text(self.url)
        events = extract_homepage_events(page_html, self.url, self.source_label)
        if not events:
            logger.warning("No events found in homepage block at %s", self.url)
        else:
            logger.info("Source %s scraped %d homepage events", self.source_id, len(events))
        return events


@register_source("event_homepage")
def _build_homepage_source(settings: SourceSettings, fetcher: HttpFetcher) -> Source:
    return HomepageEventSource(settings, fetcher)
