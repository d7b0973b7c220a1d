from __future__ import annotations

from pathlib import Path

import pytest

from funding_feeds.config import ConfigError, load_config, option_int


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_load_config_applies_defaults_and_resolves_paths(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        """
sources:
  - id: opportunities
    type: opportunity_rss
    url: https://feed.test/rss
    max_items: 10
  - id: events
    type: event_homepage
    url: https://site.test/index_en
    records_path: out/ev.json
""",
    )

    config = load_config(path)

    assert config.log_level == "INFO"
    assert config.http.timeout_seconds == 30
    assert config.http.accept_language == "en-GB,en;q=0.9"
    assert config.enrichment.quota == 20
    assert config.enrichment.timeout_seconds == 12

    opportunities = config.source("opportunities")
    assert opportunities.records_path == str((tmp_path / "data/opportunities.json").resolve())
    assert opportunities.metadata_path == str((tmp_path / "data/meta.json").resolve())
    assert opportunities.options == {"max_items": 10}
    assert option_int(opportunities, "max_items", 60) == 10

    events = config.source("events")
    assert events.records_path == str((tmp_path / "out/ev.json").resolve())
    assert events.metadata_path == str((tmp_path / "data/meta_events.json").resolve())


def test_load_config_reads_http_and_enrichment_sections(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        """
log_level: debug
http:
  user_agent: test-agent
  timeout_seconds: null
enrichment:
  quota: 5
  timeout_seconds: 3.5
sources:
  - {id: feed, type: event_rss, url: "https://feed.test/events"}
""",
    )

    config = load_config(path)

    assert config.log_level == "DEBUG"
    assert config.http.user_agent == "test-agent"
    assert config.http.timeout_seconds is None
    assert config.enrichment.quota == 5
    assert config.enrichment.timeout_seconds == 3.5


@pytest.mark.parametrize(
    "text, message",
    [
        ("sources: []", "at least one source"),
        ("- just a list", "must be a mapping"),
        ("sources:\n  - {id: a, type: opportunity_rss}", "missing one of"),
        (
            "sources:\n  - {id: a, type: event_rss, url: u}\n  - {id: a, type: event_rss, url: v}",
            "Duplicate source id",
        ),
        (
            "enrichment: {quota: -1}\nsources:\n  - {id: a, type: event_rss, url: u}",
            "enrichment.quota must be >= 0",
        ),
        (
            "http: {timeout_seconds: fast}\nsources:\n  - {id: a, type: event_rss, url: u}",
            "http.timeout_seconds",
        ),
    ],
)
def test_invalid_config_raises(tmp_path: Path, text: str, message: str) -> None:
    with pytest.raises(ConfigError, match=message):
        load_config(_write(tmp_path, text))


def test_missing_config_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path / "absent.yaml")


def test_unknown_source_id_raises(tmp_path: Path) -> None:
    config = load_config(_write(tmp_path, "sources:\n  - {id: a, type: event_rss, url: u}"))

    with pytest.raises(ConfigError, match="Unknown source id"):
        config.source("b")
