"""Heuristic field inference over free text.

Every function here is pure: the result depends only on the text and, for
deadline selection, on the ``today`` reference passed in.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Iterable, Sequence

from funding_feeds.utils.datetime_utils import safe_date

DEFAULT_PROGRAM = "EU (F&T Portal)"
DEFAULT_BENEFICIARY = "other beneficiaries"
ONLINE_CITY = "Online"
ONLINE_VENUE = "Online only"

Rule = tuple[re.Pattern[str], str]


def _keyword_rule(keywords: Sequence[str], tag: str) -> Rule:
    alternation = "|".join(re.escape(keyword) for keyword in keywords)
    return re.compile(alternation, re.IGNORECASE), tag


PROGRAM_RULES: tuple[Rule, ...] = tuple(
    _keyword_rule([keyword], keyword.upper())
    for keyword in (
        "life",
        "horizon europe",
        "cef",
        "erasmus",
        "single market",
        "interreg",
        "cerv",
        "eu4health",
        "innovation fund",
        "just transition",
    )
)

BENEFICIARY_RULES: tuple[Rule, ...] = (
    _keyword_rule(["sme", "small and medium"], "SMEs"),
    _keyword_rule(["ngo", "non-government"], "NGOs/bodies"),
    _keyword_rule(["municipal", "local authority"], "municipalities/bodies"),
    _keyword_rule(["citizen", "individual"], "citizens"),
)

EVENT_TYPE_LABELS = (
    "Conferences and summits",
    "Training and workshops",
    "Expert meetings",
    "Info days",
)
_EVENT_TYPE = re.compile(
    r"\b(" + "|".join(re.escape(label) for label in EVENT_TYPE_LABELS) + r")\b",
    re.IGNORECASE,
)

MONTHS = {
    name: number
    for number, name in enumerate(
        (
            "january",
            "february",
            "march",
            "april",
            "may",
            "june",
            "july",
            "august",
            "september",
            "october",
            "november",
            "december",
        ),
        start=1,
    )
}
MONTH_ABBREVIATIONS = {name[:3].title(): number for name, number in MONTHS.items()}

_ISO_DATE = re.compile(r"\b(20\d{2})-(\d{2})-(\d{2})\b")
_MONTH_NAME_DATE = re.compile(
    r"\b(\d{1,2})\s+(" + "|".join(MONTHS) + r")\s+(20\d{2})\b",
    re.IGNORECASE,
)
_DAY_FIRST_DATE = re.compile(r"\b(\d{1,2})[/-](\d{1,2})[/-](20\d{2})\b")
_SLASH_DATE = re.compile(r"\b(\d{2})/(\d{2})/(20\d{2})\b")
_DASH_DATE = re.compile(r"\b(\d{2})-(\d{2})-(20\d{2})\b")

DEADLINE_PHRASES = re.compile(
    r"open until|applications? (?:are )?open until|applications? close"
    r"|submission deadline|deadline is",
    re.IGNORECASE,
)
DEADLINE_WINDOW = 120

_MULTISPACE = re.compile(r"\s+")
_ONLINE = re.compile(r"\bonline\b", re.IGNORECASE)
_ONLINE_ONLY = re.compile(r"online only", re.IGNORECASE)
_CAPITALIZED = r"[A-Z][\w'-]*(?: [A-Z][\w'-]*)*"
_CITY_COUNTRY = re.compile(rf"\b({_CAPITALIZED}),\s*({_CAPITALIZED})")
_VENUE = re.compile(
    r"([A-Z][A-Za-zÀ-ÖØ-öø-ÿ .'-]{2,},\s*[A-Z][A-Za-zÀ-ÖØ-öø-ÿ .'-]{2,})"
)
MAX_VENUE_LENGTH = 80
_DAY_RANGE = re.compile(r"^(\d{1,2})\s*-\s*(\d{1,2})$")
_SINGLE_DAY = re.compile(r"^\d{1,2}$")
_YEAR = re.compile(r"^\d{4}$")


def classify(text: str, rules: Iterable[Rule], default: str) -> str:
    """Return the tag of the first rule whose pattern occurs in ``text``."""
    for pattern, tag in rules:
        if pattern.search(text or ""):
            return tag
    return default


def infer_program(text: str) -> str:
    return classify(text, PROGRAM_RULES, DEFAULT_PROGRAM)


def infer_beneficiary(text: str) -> str:
    return classify(text, BENEFICIARY_RULES, DEFAULT_BENEFICIARY)


def find_iso_dates(text: str) -> list[date]:
    return _collect(_ISO_DATE.finditer(text or ""), lambda m: (m[1], m[2], m[3]))


def find_month_name_dates(text: str) -> list[date]:
    """All ``15 April 2026`` style dates, in order of appearance."""
    return _collect(
        _MONTH_NAME_DATE.finditer(text or ""),
        lambda m: (m[3], MONTHS[m[2].lower()], m[1]),
    )


def find_day_first_dates(text: str) -> list[date]:
    return _collect(_DAY_FIRST_DATE.finditer(text or ""), lambda m: (m[3], m[2], m[1]))


def find_page_dates(body: str) -> list[date]:
    """Every slash, dash and month-name date in a raw page body.

    Grouped by form (slash, then dash, then month-name) rather than by
    position; callers only ever pick the minimum.
    """
    dates = _collect(_SLASH_DATE.finditer(body or ""), lambda m: (m[3], m[2], m[1]))
    dates.extend(_collect(_DASH_DATE.finditer(body or ""), lambda m: (m[3], m[2], m[1])))
    dates.extend(find_month_name_dates(body))
    return dates


def _collect(matches, parts) -> list[date]:
    found: list[date] = []
    for match in matches:
        value = safe_date(*parts(match))
        if value is not None:
            found.append(value)
    return found


def earliest_upcoming(dates: Iterable[date], today: date) -> date | None:
    upcoming = [value for value in dates if value >= today]
    return min(upcoming) if upcoming else None


def infer_deadline(text: str, today: date) -> date | None:
    """Infer an application deadline from a call description.

    An ISO date anywhere wins outright. Otherwise month-name dates are
    searched in the window following the first deadline phrase, preferring
    the earliest one not before ``today`` and falling back to the last one
    mentioned. Without a usable phrase window the last month-name date in
    the whole text is taken.
    """
    iso_dates = find_iso_dates(text)
    if iso_dates:
        return iso_dates[0]

    collapsed = _MULTISPACE.sub(" ", text or "")

    phrase = DEADLINE_PHRASES.search(collapsed)
    if phrase is not None:
        window = collapsed[phrase.start() : phrase.end() + DEADLINE_WINDOW]
        found = find_month_name_dates(window)
        if found:
            return earliest_upcoming(found, today) or found[-1]

    all_dates = find_month_name_dates(collapsed)
    if all_dates:
        return all_dates[-1]
    return None


def infer_event_date(text: str, fallback: date | None = None) -> date | None:
    for finder in (find_iso_dates, find_day_first_dates, find_month_name_dates):
        found = finder(text)
        if found:
            return found[0]
    return fallback


def infer_event_location(text: str, default_country: str) -> tuple[str, str]:
    """Return ``(city, country)`` for an RSS event."""
    if _ONLINE.search(text or ""):
        return ONLINE_CITY, default_country

    match = _CITY_COUNTRY.search(text or "")
    if match:
        return match.group(1).strip(), match.group(2).strip()
    return "", default_country


def infer_event_type(text: str) -> str:
    match = _EVENT_TYPE.search(text or "")
    return match.group(1) if match else ""


def infer_venue(text: str) -> str:
    if _ONLINE_ONLY.search(text or ""):
        return ONLINE_VENUE

    match = _VENUE.search(text or "")
    if match and len(match.group(1)) <= MAX_VENUE_LENGTH:
        return match.group(1).strip()
    return ""


def parse_date_block(day: str, month: str, year: str) -> tuple[date | None, date | None]:
    """Turn homepage date-block parts (``02-06``, ``Mar``, ``2026``) into dates.

    Returns ``(start, end)``; ``end`` is only set for day ranges.
    """
    day, month, year = (day or "").strip(), (month or "").strip(), (year or "").strip()
    month_number = MONTH_ABBREVIATIONS.get(month[:3].title()) if month else None
    if not _YEAR.match(year) or month_number is None:
        return None, None

    day_range = _DAY_RANGE.match(day)
    if day_range:
        start = safe_date(year, month_number, day_range.group(1))
        end = safe_date(year, month_number, day_range.group(2))
        return (start, end) if start is not None else (None, None)

    if _SINGLE_DAY.match(day):
        return safe_date(year, month_number, day), None
    return None, None
