"""Regex-level decoding of RSS items and HTML fragments.

The source feeds are byte-stable, so items and subfields are cut out with
non-greedy block matches instead of a full XML parser. Nothing in here
raises on unexpected markup: unmatched fields come back empty.
"""

from __future__ import annotations

import html as html_lib
import re
from functools import lru_cache

from funding_feeds.models import DateBlock, RawFeedItem

_ITEM_BLOCK = re.compile(r"<item(?:\s[^>]*)?>(.*?)</item>", re.IGNORECASE | re.DOTALL)
_LINE_BREAKS = re.compile(
    r"<br\s*/?>|</(?:p|li|div|section|article|tr|h\d)\s*>",
    re.IGNORECASE,
)
_HTML_TAGS = re.compile(r"<[^>]+>")
_HORIZONTAL_SPACE = re.compile(r"[^\S\n]+")
_MULTISPACE = re.compile(r"\s+")

EVENTS_BLOCK_ANCHOR = 'id="block-eventsglobal"'
_EVENTS_BLOCK = re.compile(re.escape(EVENTS_BLOCK_ANCHOR), re.IGNORECASE)
EVENTS_BLOCK_WINDOW = 60_000
DATE_BLOCK_WINDOW = 4_000

_DAY_SPAN = re.compile(
    r'<span[^>]*class="ecl-date-block__day"[^>]*>(.*?)</span>',
    re.IGNORECASE | re.DOTALL,
)
_MONTH_ABBR = re.compile(
    r'<abbr[^>]*class="ecl-date-block__month"[^>]*>(.*?)</abbr>',
    re.IGNORECASE | re.DOTALL,
)
_YEAR_SPAN = re.compile(
    r'<span[^>]*class="ecl-date-block__year"[^>]*>(.*?)</span>',
    re.IGNORECASE | re.DOTALL,
)
_EVENT_LINK = re.compile(
    r'<a[^>]+href="([^"]*/news-events/events/[^"]+)"[^>]*>(.*?)</a>',
    re.IGNORECASE | re.DOTALL,
)
_ANY_LINK = re.compile(r'<a[^>]+href="([^"]+)"[^>]*>(.*?)</a>', re.IGNORECASE | re.DOTALL)


def extract_items(xml: str) -> list[str]:
    return [match.group(1) for match in _ITEM_BLOCK.finditer(xml or "")]


@lru_cache(maxsize=32)
def _plain_tag(tag: str) -> re.Pattern[str]:
    name = re.escape(tag)
    return re.compile(rf"<{name}(?:\s[^>]*)?>(.*?)</{name}>", re.IGNORECASE | re.DOTALL)


@lru_cache(maxsize=32)
def _cdata_tag(tag: str) -> re.Pattern[str]:
    name = re.escape(tag)
    return re.compile(
        rf"<{name}(?:\s[^>]*)?>\s*<!\[CDATA\[(.*?)\]\]>\s*</{name}>",
        re.IGNORECASE | re.DOTALL,
    )


def decode_entities(value: str) -> str:
    return html_lib.unescape(value or "").strip()


def get_tag(block: str, tag: str) -> str:
    match = _plain_tag(tag).search(block or "")
    return decode_entities(match.group(1)) if match else ""


def get_cdata_or_tag(block: str, tag: str) -> str:
    match = _cdata_tag(tag).search(block or "")
    if match:
        return decode_entities(match.group(1))
    return get_tag(block, tag)


def parse_feed_items(xml: str, limit: int | None = None) -> list[RawFeedItem]:
    blocks = extract_items(xml)
    if limit is not None:
        blocks = blocks[:limit]

    return [
        RawFeedItem(
            title=get_cdata_or_tag(block, "title"),
            description=get_cdata_or_tag(block, "description"),
            link=get_cdata_or_tag(block, "link"),
            guid=get_cdata_or_tag(block, "guid"),
            pub_date=get_tag(block, "pubDate"),
        )
        for block in blocks
    ]


def html_to_text(value: str) -> str:
    with_breaks = _LINE_BREAKS.sub("\n", value or "")
    without_tags = _HTML_TAGS.sub(" ", with_breaks)
    unescaped = html_lib.unescape(without_tags).replace("\r", "")

    cleaned_lines = []
    for line in unescaped.split("\n"):
        normalized = _HORIZONTAL_SPACE.sub(" ", line).strip()
        if normalized:
            cleaned_lines.append(normalized)
    return "\n".join(cleaned_lines)


def normalize_text(value: str) -> str:
    return _MULTISPACE.sub(" ", html_to_text(value)).strip()


def extract_date_blocks(page_html: str) -> list[DateBlock]:
    """Cut the homepage events region into per-date-block chunks.

    Each day span opens a bounded lookahead window in which the month, the
    year and the event link are searched for. Missing parts stay empty.
    """
    page = page_html or ""
    anchor = _EVENTS_BLOCK.search(page)
    if anchor is None:
        return []
    region = page[anchor.start() : anchor.start() + EVENTS_BLOCK_WINDOW]

    blocks: list[DateBlock] = []
    for day_match in _DAY_SPAN.finditer(region):
        chunk = region[day_match.start() : day_match.start() + DATE_BLOCK_WINDOW]

        month_match = _MONTH_ABBR.search(chunk)
        year_match = _YEAR_SPAN.search(chunk)
        link_match = _EVENT_LINK.search(chunk) or _ANY_LINK.search(chunk)

        blocks.append(
            DateBlock(
                day=normalize_text(day_match.group(1)),
                month=normalize_text(month_match.group(1)) if month_match else "",
                year=normalize_text(year_match.group(1)) if year_match else "",
                href=html_lib.unescape(link_match.group(1)).strip() if link_match else "",
                title=normalize_text(link_match.group(2)) if link_match else "",
                text=normalize_text(chunk),
            )
        )
    return blocks
