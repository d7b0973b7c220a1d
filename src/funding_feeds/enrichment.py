from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Sequence

from funding_feeds.errors import FetchError
from funding_feeds.fetcher import HttpFetcher
from funding_feeds.inference import earliest_upcoming, find_page_dates
from funding_feeds.models import OpportunityRecord
from funding_feeds.utils.url_utils import is_http_url

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class EnrichmentStats:
    attempted: int = 0
    found: int = 0


class DeadlineEnricher:
    """Recover missing deadlines by scanning each record's own page.

    One instance serves one run. Every page fetch counts against ``quota``
    whether or not it succeeds; once the quota is spent the remaining
    records stay without a deadline.
    """

    def __init__(
        self,
        fetcher: HttpFetcher,
        *,
        today: date,
        quota: int = 20,
        timeout_seconds: float = 12.0,
    ) -> None:
        self.fetcher = fetcher
        self.today = today
        self.quota = quota
        self.timeout_seconds = timeout_seconds
        self.attempts = 0

    @property
    def remaining(self) -> int:
        return max(self.quota - self.attempts, 0)

    def enrich(self, records: Sequence[OpportunityRecord]) -> EnrichmentStats:
        stats = EnrichmentStats()

        for record in _candidates(records):
            if self.remaining == 0:
                logger.info("Enrichment quota (%d) reached; stopping", self.quota)
                break

            self.attempts += 1
            stats.attempted += 1

            deadline = self.lookup_deadline(record.url)
            if deadline is not None:
                record.deadline = deadline
                stats.found += 1

        logger.info(
            "Enrichment complete | attempted=%d found=%d",
            stats.attempted,
            stats.found,
        )
        return stats

    def lookup_deadline(self, url: str) -> date | None:
        try:
            body = self.fetcher.fetch_text(url, timeout=self.timeout_seconds)
        except FetchError as exc:
            logger.warning("Deadline lookup failed for %s: %s", url, exc)
            return None

        return earliest_upcoming(find_page_dates(body), self.today)


def _candidates(records: Sequence[OpportunityRecord]) -> list[OpportunityRecord]:
    eligible = [
        record
        for record in records
        if record.deadline is None and is_http_url(record.url)
    ]
    # most recently published first; unpublished last, feed order kept on ties
    return sorted(
        eligible,
        key=lambda record: record.published or date.min,
        reverse=True,
    )
