"""Config ``type`` → source factory lookup.

Source modules register themselves on import; ``funding_feeds.sources``
imports all of them so the table is complete once the package is loaded.
"""

from __future__ import annotations

from typing import Callable

from funding_feeds.config import SourceSettings
from funding_feeds.fetcher import HttpFetcher

from .base import Source

SourceFactory = Callable[[SourceSettings, HttpFetcher], Source]

_FACTORIES: dict[str, SourceFactory] = {}


class SourceRegistrationError(ValueError):
    """Raised for unknown or doubly registered source types."""


def register_source(source_type: str) -> Callable[[SourceFactory], SourceFactory]:
    def decorator(factory: SourceFactory) -> SourceFactory:
        existing = _FACTORIES.get(source_type)
        if existing is not None and existing is not factory:
            raise SourceRegistrationError(f"Source type '{source_type}' is already registered")
        _FACTORIES[source_type] = factory
        return factory

    return decorator


def create_source(settings: SourceSettings, fetcher: HttpFetcher) -> Source:
    """Build the source configured by ``settings``, sharing one fetcher per run."""
    try:
        factory = _FACTORIES[settings.type]
    except KeyError:
        known = ", ".join(registered_source_types()) or "none"
        raise SourceRegistrationError(
            f"Source '{settings.id}' has unknown type '{settings.type}' (known: {known})"
        ) from None
    return factory(settings, fetcher)


def registered_source_types() -> list[str]:
    return sorted(_FACTORIES)
