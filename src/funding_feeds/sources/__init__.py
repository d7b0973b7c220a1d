"""Source implementations and registry."""

from .base import Source, item_url
from .event_feed import FeedEventSource
from .event_homepage import HomepageEventSource, extract_homepage_events
from .opportunity_feed import OpportunityFeedSource
from .registry import (
    SourceRegistrationError,
    create_source,
    register_source,
    registered_source_types,
)

__all__ = [
    "Source",
    "SourceRegistrationError",
    "FeedEventSource",
    "HomepageEventSource",
    "OpportunityFeedSource",
    "create_source",
    "extract_homepage_events",
    "item_url",
    "register_source",
    "registered_source_types",
]
