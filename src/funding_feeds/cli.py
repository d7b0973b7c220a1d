from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any

from funding_feeds.config import AppConfig, ConfigError, SourceSettings, load_config
from funding_feeds.fetcher import HttpFetcher
from funding_feeds.logging_config import setup_logging
from funding_feeds.service import RunStats, build_service
from funding_feeds.sources import (
    SourceRegistrationError,
    create_source,
    registered_source_types,
)
from funding_feeds.store import JsonSnapshotStore

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="funding-feeds",
        description="Fetch funding calls and events and write JSON snapshots.",
    )
    parser.add_argument(
        "-c",
        "--config",
        default="config.yaml",
        help="Path to config YAML file (default: config.yaml)",
    )
    parser.add_argument(
        "--log-level",
        help="Override config log level (e.g. INFO, DEBUG)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("run", help="Fetch sources and write snapshots")
    run.add_argument("source_ids", nargs="*", metavar="SOURCE_ID", help="Limit to these sources")

    dry_run = subparsers.add_parser("dry-run", help="Fetch sources and print records")
    dry_run.add_argument(
        "source_ids", nargs="*", metavar="SOURCE_ID", help="Limit to these sources"
    )

    subparsers.add_parser("list-sources", help="Print registered source types")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "list-sources":
        for source_type in registered_source_types():
            print(source_type)
        return 0

    try:
        app_config = load_config(args.config)
    except ConfigError as exc:
        print(f"Config error: {exc}", file=sys.stderr)
        return 2

    setup_logging(args.log_level or app_config.log_level)

    try:
        selected = _select_sources(app_config, args.source_ids)
    except ConfigError as exc:
        parser.error(str(exc))

    dry_run = args.command == "dry-run"
    fetcher = HttpFetcher(app_config.http)

    try:
        sources = [create_source(settings, fetcher) for settings in selected]
    except (ConfigError, SourceRegistrationError) as exc:
        print(f"Config error: {exc}", file=sys.stderr)
        return 2

    results: list[RunStats] = []
    for source in sources:
        settings = source.settings
        service = build_service(
            source,
            JsonSnapshotStore(settings.records_path, settings.metadata_path),
            fetcher=fetcher,
            enrichment=app_config.enrichment,
            dry_run=dry_run,
            preview_callback=_print_preview if dry_run else None,
        )
        stats = service.run_once()
        logger.info(
            "Run complete | source=%s fetched=%d enrichment_attempted=%d "
            "enrichment_found=%d written=%d errors=%d",
            stats.source_id,
            stats.fetched,
            stats.enrichment_attempted,
            stats.enrichment_found,
            stats.written,
            len(stats.errors),
        )
        results.append(stats)

    return 0 if all(stats.ok for stats in results) else 1


def _select_sources(app_config: AppConfig, source_ids: list[str]) -> list[SourceSettings]:
    if not source_ids:
        return list(app_config.sources)
    return [app_config.source(source_id) for source_id in source_ids]


def _print_preview(source_id: str, records: list[dict[str, Any]], metadata: dict[str, Any]) -> None:
    print(f"[DRY RUN] {source_id}:")
    print(json.dumps({"metadata": metadata, "records": records}, ensure_ascii=False, indent=2))
    print("")


if __name__ == "__main__":
    raise SystemExit(main())
