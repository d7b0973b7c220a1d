from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Callable, Sequence

from funding_feeds.config import EnrichmentSettings, option_int
from funding_feeds.enrichment import DeadlineEnricher
from funding_feeds.errors import FetchError
from funding_feeds.fetcher import HttpFetcher
from funding_feeds.models import Record
from funding_feeds.ranking import (
    DEFAULT_FALLBACK_LIMIT,
    DEFAULT_RECENCY_DAYS,
    apply_recency_filter,
    dedupe_events,
    rank_opportunities,
    sort_events,
)
from funding_feeds.sources import Source
from funding_feeds.store import SnapshotStore
from funding_feeds.utils.datetime_utils import format_timestamp, utc_now

logger = logging.getLogger(__name__)

PreviewCallback = Callable[[str, list[dict[str, Any]], dict[str, Any]], None]


@dataclass(slots=True)
class RunStats:
    source_id: str
    fetched: int = 0
    enrichment_attempted: int = 0
    enrichment_found: int = 0
    written: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class SnapshotService(ABC):
    """fetch → normalize → write, for one configured source.

    A failed primary fetch aborts the run before anything is written, so the
    previous snapshot stays in place.
    """

    def __init__(
        self,
        *,
        source: Source,
        store: SnapshotStore,
        dry_run: bool = False,
        clock: Callable[[], datetime] = utc_now,
        preview_callback: PreviewCallback | None = None,
    ) -> None:
        self.source = source
        self.store = store
        self.dry_run = dry_run
        self.clock = clock
        self.preview_callback = preview_callback

    def run_once(self) -> RunStats:
        stats = RunStats(source_id=self.source.source_id)
        now = self.clock()
        today = now.date()

        try:
            records = self.source.fetch(today)
        except FetchError as exc:
            message = f"source {self.source.source_id} fetch failed: {exc}"
            logger.error(message)
            stats.errors.append(message)
            return stats

        stats.fetched = len(records)
        final = self.normalize(records, today, stats)

        payload = [record.to_dict() for record in final]
        metadata = {
            "lastUpdated": format_timestamp(now),
            f"{self.source.kind}Count": len(payload),
            "source": self.source.url,
        }

        if self.dry_run:
            if self.preview_callback is not None:
                self.preview_callback(self.source.source_id, payload, metadata)
            return stats

        try:
            self.store.write(payload, metadata)
        except OSError as exc:
            message = f"failed to write snapshot for {self.source.source_id}: {exc}"
            logger.error(message)
            stats.errors.append(message)
            return stats

        stats.written = len(payload)
        return stats

    @abstractmethod
    def normalize(self, records: Sequence[Record], today: date, stats: RunStats) -> list[Record]:
        """Return the final ordered collection to persist."""


class OpportunityService(SnapshotService):
    def __init__(
        self,
        *,
        fetcher: HttpFetcher,
        enrichment: EnrichmentSettings,
        recency_days: int = DEFAULT_RECENCY_DAYS,
        fallback_limit: int = DEFAULT_FALLBACK_LIMIT,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.fetcher = fetcher
        self.enrichment = enrichment
        self.recency_days = recency_days
        self.fallback_limit = fallback_limit

    def normalize(self, records, today, stats):
        enricher = DeadlineEnricher(
            self.fetcher,
            today=today,
            quota=self.enrichment.quota,
            timeout_seconds=self.enrichment.timeout_seconds,
        )
        enrichment_stats = enricher.enrich(records)
        stats.enrichment_attempted = enrichment_stats.attempted
        stats.enrichment_found = enrichment_stats.found

        ranked = rank_opportunities(records, today)
        filtered = apply_recency_filter(
            ranked,
            today,
            max_age_days=self.recency_days,
            fallback_limit=self.fallback_limit,
        )
        if len(filtered) < len(ranked):
            logger.info(
                "Recency filter kept %d of %d opportunities",
                len(filtered),
                len(ranked),
            )
        return filtered


class EventService(SnapshotService):
    def normalize(self, records, today, stats):
        unique = dedupe_events(records)
        if len(unique) < len(records):
            logger.info("Dropped %d duplicate events", len(records) - len(unique))
        return sort_events(unique)


def build_service(
    source: Source,
    store: SnapshotStore,
    *,
    fetcher: HttpFetcher,
    enrichment: EnrichmentSettings,
    **kwargs: Any,
) -> SnapshotService:
    if source.kind == "opportunities":
        return OpportunityService(
            source=source,
            store=store,
            fetcher=fetcher,
            enrichment=enrichment,
            recency_days=option_int(
                source.settings, "recency_days", DEFAULT_RECENCY_DAYS, minimum=0
            ),
            fallback_limit=option_int(
                source.settings, "fallback_limit", DEFAULT_FALLBACK_LIMIT, minimum=1
            ),
            **kwargs,
        )
    if source.kind == "events":
        return EventService(source=source, store=store, **kwargs)
    raise ValueError(f"No pipeline for source kind '{source.kind}'")
