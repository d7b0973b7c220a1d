from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120 Safari/537.36"
)
DEFAULT_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
DEFAULT_ACCEPT_LANGUAGE = "en-GB,en;q=0.9"

_DEFAULT_OUTPUT_PATHS = {
    "opportunity_rss": ("data/opportunities.json", "data/meta.json"),
    "event_homepage": ("data/events.json", "data/meta_events.json"),
    "event_rss": ("data/events.json", "data/meta_events.json"),
}


class ConfigError(ValueError):
    """Raised when configuration is invalid."""


@dataclass(slots=True)
class HttpSettings:
    user_agent: str = DEFAULT_USER_AGENT
    accept: str = DEFAULT_ACCEPT
    accept_language: str = DEFAULT_ACCEPT_LANGUAGE
    timeout_seconds: float | None = 30.0


@dataclass(slots=True)
class EnrichmentSettings:
    quota: int = 20
    timeout_seconds: float = 12.0


@dataclass(slots=True)
class SourceSettings:
    id: str
    type: str
    url: str
    records_path: str = ""
    metadata_path: str = ""
    options: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class AppConfig:
    sources: list[SourceSettings]
    http: HttpSettings = field(default_factory=HttpSettings)
    enrichment: EnrichmentSettings = field(default_factory=EnrichmentSettings)
    log_level: str = "INFO"

    def source(self, source_id: str) -> SourceSettings:
        for settings in self.sources:
            if settings.id == source_id:
                return settings
        raise ConfigError(f"Unknown source id: {source_id}")


def _as_int(value: Any, *, field_name: str, minimum: int | None = None) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{field_name} must be an integer")

    try:
        parsed = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{field_name} must be an integer") from exc

    if minimum is not None and parsed < minimum:
        raise ConfigError(f"{field_name} must be >= {minimum}")
    return parsed


def _as_timeout(value: Any, *, field_name: str) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise ConfigError(f"{field_name} must be a number of seconds")

    try:
        parsed = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{field_name} must be a number of seconds") from exc

    if parsed <= 0:
        raise ConfigError(f"{field_name} must be > 0")
    return parsed


def _as_mapping(value: Any, *, field_name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"{field_name} must be a mapping")
    return value


def _resolve_relative_path(config_path: Path, raw_path: str) -> str:
    candidate = Path(raw_path).expanduser()
    if candidate.is_absolute():
        return str(candidate)
    return str((config_path.parent / candidate).resolve())


def _default_output_paths(source_id: str, source_type: str) -> tuple[str, str]:
    defaults = _DEFAULT_OUTPUT_PATHS.get(source_type)
    if defaults is not None:
        return defaults
    return f"data/{source_id}.json", f"data/meta_{source_id}.json"


def load_config(path: str | Path) -> AppConfig:
    config_path = Path(path).expanduser().resolve()
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    with config_path.open("r", encoding="utf-8") as handle:
        parsed = yaml.safe_load(handle) or {}

    if not isinstance(parsed, dict):
        raise ConfigError("Config root must be a mapping")

    raw_sources = parsed.get("sources", [])
    if not isinstance(raw_sources, list) or not raw_sources:
        raise ConfigError("Config must define at least one source")

    sources: list[SourceSettings] = []
    seen_ids: set[str] = set()
    for index, source in enumerate(raw_sources, start=1):
        if not isinstance(source, dict):
            raise ConfigError(f"Source entry #{index} must be a mapping")

        source_id = str(source.get("id", "")).strip()
        source_type = str(source.get("type", "")).strip()
        source_url = str(source.get("url", "")).strip()
        if not source_id or not source_type or not source_url:
            raise ConfigError(f"Source entry #{index} missing one of: id, type, url")
        if source_id in seen_ids:
            raise ConfigError(f"Duplicate source id: {source_id}")
        seen_ids.add(source_id)

        default_records, default_metadata = _default_output_paths(source_id, source_type)
        records_path = str(source.get("records_path") or default_records).strip()
        metadata_path = str(source.get("metadata_path") or default_metadata).strip()

        options = {
            key: value
            for key, value in source.items()
            if key not in {"id", "type", "url", "records_path", "metadata_path"}
        }

        sources.append(
            SourceSettings(
                id=source_id,
                type=source_type,
                url=source_url,
                records_path=_resolve_relative_path(config_path, records_path),
                metadata_path=_resolve_relative_path(config_path, metadata_path),
                options=options,
            )
        )

    raw_http = _as_mapping(parsed.get("http"), field_name="http")
    http_settings = HttpSettings(
        user_agent=str(raw_http.get("user_agent") or DEFAULT_USER_AGENT).strip(),
        accept=str(raw_http.get("accept") or DEFAULT_ACCEPT).strip(),
        accept_language=str(
            raw_http.get("accept_language") or DEFAULT_ACCEPT_LANGUAGE
        ).strip(),
        timeout_seconds=_as_timeout(
            raw_http.get("timeout_seconds", 30),
            field_name="http.timeout_seconds",
        ),
    )

    raw_enrichment = _as_mapping(parsed.get("enrichment"), field_name="enrichment")
    enrichment_timeout = _as_timeout(
        raw_enrichment.get("timeout_seconds", 12),
        field_name="enrichment.timeout_seconds",
    )
    if enrichment_timeout is None:
        raise ConfigError("enrichment.timeout_seconds must be set")

    enrichment_settings = EnrichmentSettings(
        quota=_as_int(
            raw_enrichment.get("quota", 20),
            field_name="enrichment.quota",
            minimum=0,
        ),
        timeout_seconds=enrichment_timeout,
    )

    return AppConfig(
        sources=sources,
        http=http_settings,
        enrichment=enrichment_settings,
        log_level=str(parsed.get("log_level", "INFO")).upper(),
    )


def option_int(settings: SourceSettings, key: str, default: int, *, minimum: int = 0) -> int:
    return _as_int(
        settings.options.get(key, default),
        field_name=f"sources.{settings.id}.{key}",
        minimum=minimum,
    )


def option_str(settings: SourceSettings, key: str, default: str) -> str:
    value = settings.options.get(key)
    if value is None:
        return default
    return str(value).strip() or default
