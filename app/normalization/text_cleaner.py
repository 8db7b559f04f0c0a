"""Address text cleaner.

Turns a raw, possibly multi-line address cell (as exported from a shipping
spreadsheet) into a single comma-delimited line suitable for geocoding:

1. Email addresses and phone numbers are removed.
2. A leading name line (no digits, followed by a line with digits) is
   dropped.
3. Lines are joined with ``", "`` and whitespace is collapsed.
4. A comma is inserted after a street suffix that runs straight into the
   next capitalised word (``"123 Main St Springfield"``).
5. Unit tokens are rewritten as ``"<Token> <value>, "``.
6. Long region names following a locality are abbreviated ("California"
   only before a ZIP); Australian state codes uppercased.
7. A comma is placed before a trailing country name.
8. A comma is placed between ``<postcode> <locality>`` and a following
   European country name.
9. Trailing punctuation is stripped.

Pure and deterministic.  Safety rule: raw values are never logged.
"""
from __future__ import annotations

import logging
import re

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Personal data
# ---------------------------------------------------------------------------

_EMAIL_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")

# Digit runs with optional separators; ``_strip_phone`` decides whether a
# candidate is really a phone number.  Separators exclude newlines so a
# match never spans two lines.
_PHONE_CANDIDATE_RE = re.compile(r"(?<![\w+])\+?\(?\d[\d \t().-]{5,}\d(?![\w-])")
_ZIP_RE = re.compile(r"\d{5}(?:-\d{4})?")
# "<house or unit number> <ZIP>" pairs such as "Suite 100 20500".
_NUMBER_THEN_ZIP_RE = re.compile(r"\d{1,5}[ \t]+\d{5}")
# House-number ranges ("1234-1236 Main St") are followed by a street word.
_HOUSE_RANGE_RE = re.compile(r"\d{1,5}-\d{1,5}")
_WORD_FOLLOWS_RE = re.compile(r"[ \t]+[^\W\d_]")


def _strip_phone(match: re.Match[str]) -> str:
    candidate = match.group(0)
    digits = sum(ch.isdigit() for ch in candidate)
    if digits < 7:
        return candidate
    if _ZIP_RE.fullmatch(candidate) or _NUMBER_THEN_ZIP_RE.fullmatch(candidate):
        return candidate
    if _HOUSE_RANGE_RE.fullmatch(candidate) and _WORD_FOLLOWS_RE.match(match.string, match.end()):
        return candidate
    return ""


# Contact labels left dangling at the end of a line once the value is gone.
_CONTACT_LABEL_RE = re.compile(
    r"\b(?:tel|phone|ph|mobile|mob|cell|email|e-mail)[ \t]*[:.]?[ \t]*$",
    re.IGNORECASE | re.MULTILINE,
)


def _remove_personal_data(text: str) -> str:
    text = _EMAIL_RE.sub("", text)
    text = _PHONE_CANDIDATE_RE.sub(_strip_phone, text)
    return _CONTACT_LABEL_RE.sub("", text)


# ---------------------------------------------------------------------------
# Line handling
# ---------------------------------------------------------------------------

_HAS_DIGIT_RE = re.compile(r"\d")
_WHITESPACE_RE = re.compile(r"[ \t\u00a0]+")
_COMMA_RUN_RE = re.compile(r"\s*,(?:\s*,)*\s*")


def _reflow(text: str) -> str:
    lines = [line.strip(" \t,;") for line in text.splitlines()]
    lines = [line for line in lines if line]

    if (
        len(lines) >= 2
        and not _HAS_DIGIT_RE.search(lines[0])
        and _HAS_DIGIT_RE.search(lines[1])
    ):
        lines = lines[1:]

    joined = ", ".join(lines)
    joined = _WHITESPACE_RE.sub(" ", joined)
    joined = _COMMA_RUN_RE.sub(", ", joined)
    return joined.strip(" ,")


# ---------------------------------------------------------------------------
# Street suffixes and unit tokens
# ---------------------------------------------------------------------------

STREET_SUFFIXES: tuple[str, ...] = (
    "Rd", "Road", "St", "Street", "Ave", "Avenue", "Blvd", "Boulevard",
    "Dr", "Drive", "Ln", "Lane", "Ct", "Court", "Pl", "Place", "Way",
    "Ter", "Terrace", "Cir", "Circle", "Hwy", "Highway", "Pkwy", "Parkway",
    "Sq", "Square", "Cres", "Crescent",
)

# "<number> <1-4 words> <suffix>" followed by a capitalised word with no
# punctuation in between.  The leading number anchors the match to the
# street line so locality names like "St Louis" are left alone.
_SUFFIX_RUN_ON_RE = re.compile(
    r"(\b\d+[A-Za-z]?\s+(?:[\w.'-]+\s+){1,3}?(?i:" + "|".join(STREET_SUFFIXES) + r")\b\.?)"
    r"\s+(?=[A-Z][a-z])"
)

UNIT_TOKENS: tuple[str, ...] = (
    "Apartment", "Apt", "Suite", "Ste", "Unit", "Floor",
    "Room", "Rm",
)

_UNIT_RE = re.compile(
    r"\b(?P<token>" + "|".join(UNIT_TOKENS) + r")\b\.?\s*#?\s*"
    r"(?P<value>\d[\w-]*|[A-Z]{1,2}\d*(?![\w-]))"
    r"\s*,?\s*",
    re.IGNORECASE,
)

_UNIT_STRIP_RE = re.compile(
    r",?\s*\b(?:" + "|".join(UNIT_TOKENS) + r")\b\.?\s*#?\s*"
    r"(?:\d[\w-]*|[A-Z]{1,2}\d*(?![\w-]))",
    re.IGNORECASE,
)


def _format_unit(match: re.Match[str]) -> str:
    token = match.group("token")
    return f"{token[0].upper()}{token[1:].lower()} {match.group('value')}, "


# ---------------------------------------------------------------------------
# Regions
# ---------------------------------------------------------------------------

REGION_ABBREVIATIONS: dict[str, str] = {
    # United States
    "alabama": "AL", "alaska": "AK", "arizona": "AZ", "arkansas": "AR",
    "california": "CA", "colorado": "CO", "connecticut": "CT",
    "delaware": "DE", "florida": "FL", "georgia": "GA", "hawaii": "HI",
    "idaho": "ID", "illinois": "IL", "indiana": "IN", "iowa": "IA",
    "kansas": "KS", "kentucky": "KY", "louisiana": "LA", "maine": "ME",
    "maryland": "MD", "massachusetts": "MA", "michigan": "MI",
    "minnesota": "MN", "mississippi": "MS", "missouri": "MO",
    "montana": "MT", "nebraska": "NE", "nevada": "NV",
    "new hampshire": "NH", "new jersey": "NJ", "new mexico": "NM",
    "new york": "NY", "north carolina": "NC", "north dakota": "ND",
    "ohio": "OH", "oklahoma": "OK", "oregon": "OR",
    "pennsylvania": "PA", "rhode island": "RI", "south carolina": "SC",
    "south dakota": "SD", "tennessee": "TN", "texas": "TX", "utah": "UT",
    "vermont": "VT", "virginia": "VA", "washington": "WA",
    "west virginia": "WV", "wisconsin": "WI", "wyoming": "WY",
    "district of columbia": "DC",
    # Canada
    "british columbia": "BC", "alberta": "AB", "saskatchewan": "SK",
    "manitoba": "MB", "ontario": "ON", "quebec": "QC",
    "new brunswick": "NB", "nova scotia": "NS",
    "prince edward island": "PE", "newfoundland and labrador": "NL",
    # Australia
    "new south wales": "NSW", "victoria": "VIC", "queensland": "QLD",
    "western australia": "WA", "south australia": "SA", "tasmania": "TAS",
    "australian capital territory": "ACT", "northern territory": "NT",
}

AU_STATES: frozenset[str] = frozenset({"NSW", "VIC", "QLD", "WA", "SA", "TAS", "ACT", "NT"})

# A region name is only abbreviated where a state sits in an address: just
# before a postal code, at the end of the string, or before a country name.
# "Washington, DC" and "Pennsylvania Ave" are left alone.
_REGION_TAIL = (
    r"(?=\s*,?\s*(?:\d{4,5}(?:-\d{4})?\b|[A-Z]\d[A-Z][ -]?\d[A-Z]\d\b|$"
    r"|(?i:usa|united states|canada|australia)\s*$))"
)
_REGION_RE = re.compile(
    r"\b(" + "|".join(re.escape(n) for n in sorted(REGION_ABBREVIATIONS, key=len, reverse=True)) + r")\b"
    + _REGION_TAIL,
    re.IGNORECASE,
)

_AU_STATE_RE = re.compile(
    r"\b(" + "|".join(sorted(AU_STATES)) + r")\b(?=\s*,?\s*\d{4}\b)",
    re.IGNORECASE,
)

# Region names that country detection reads as a keyword.  They are only
# abbreviated in front of a US ZIP, where "CA 90012" still detects as US.
ZIP_ONLY_REGIONS: frozenset[str] = frozenset({"california"})
_US_ZIP_AHEAD_RE = re.compile(r"\s*,?\s*\d{5}(?:-\d{4})?\b")


def _has_locality_before(text: str, start: int) -> bool:
    """Return ``True`` when a locality precedes the region at *start*.

    The comma segment holding (or, after a comma, preceding) the region must
    not start with a digit; a street line such as "123 Broadway" is not a
    locality, so "123 Broadway, New York 10001" keeps its city name.
    """
    before = text[:start].rstrip()
    if not before:
        return False
    if before.endswith(","):
        before = before[:-1]
    segment = before.rsplit(",", 1)[-1].strip()
    return bool(segment) and not segment[0].isdigit()


def _abbreviate_region(match: re.Match[str]) -> str:
    name = match.group(1).lower()
    if not _has_locality_before(match.string, match.start()):
        return match.group(0)
    if name in ZIP_ONLY_REGIONS and not _US_ZIP_AHEAD_RE.match(match.string, match.end()):
        return match.group(0)
    return REGION_ABBREVIATIONS[name]


def _abbreviate_regions(text: str) -> str:
    text = _REGION_RE.sub(_abbreviate_region, text)
    return _AU_STATE_RE.sub(lambda m: m.group(1).upper(), text)


# ---------------------------------------------------------------------------
# Countries
# ---------------------------------------------------------------------------

EUROPEAN_COUNTRIES: tuple[str, ...] = (
    "Germany", "Deutschland", "France", "Italy", "Italia", "Spain", "España",
    "Netherlands", "Belgium", "Austria", "Switzerland", "Portugal",
    "Denmark", "Sweden", "Norway", "Finland", "Poland", "Ireland",
)

TRAILING_COUNTRIES: tuple[str, ...] = (
    "United States of America", "United States", "U.S.A.", "USA",
    "United Kingdom", "Great Britain", "Canada", "Australia",
) + EUROPEAN_COUNTRIES

_COUNTRY_NAMES_ALT = "|".join(re.escape(c) for c in sorted(TRAILING_COUNTRIES, key=len, reverse=True))

_TRAILING_COUNTRY_RE = re.compile(
    r"(?<=[^,\s])\s+((?i:" + _COUNTRY_NAMES_ALT + r")|US|UK|GB)[\s.]*$"
)

_EU_COUNTRY_AFTER_LOCALITY_RE = re.compile(
    r"(\b\d{4,5}\s+[^\W\d_][\w'.-]*(?:\s+[^\W\d_][\w'.-]*)*?)\s+"
    r"((?i:" + "|".join(re.escape(c) for c in EUROPEAN_COUNTRIES) + r"))\b"
)

_TRAILING_PUNCT_RE = re.compile(r"[\s,;:.\-]+$")


def strip_unit_tokens(text: str) -> str:
    """Remove unit / apartment tokens (``"Apt 4B"``, ``"Suite 100"``) from *text*."""
    if not text:
        return ""
    stripped = _UNIT_STRIP_RE.sub("", text)
    stripped = _COMMA_RUN_RE.sub(", ", stripped)
    return _TRAILING_PUNCT_RE.sub("", stripped).strip(" ,")


def clean_address(raw: str | None) -> str:
    """Return *raw* as a single cleaned, comma-delimited line.

    Parameters
    ----------
    raw:
        Raw address cell.  May span several lines and contain a contact
        email or phone number.

    Returns
    -------
    str
        The cleaned line, or ``""`` for empty input.  Never raises.
    """
    if not raw or not raw.strip():
        return ""

    text = _remove_personal_data(raw)
    text = _reflow(text)
    if not text:
        logger.debug("clean_address: nothing left after removing personal data")
        return ""

    text = _SUFFIX_RUN_ON_RE.sub(r"\1, ", text)
    text = _UNIT_RE.sub(_format_unit, text)
    text = _abbreviate_regions(text)
    text = _TRAILING_COUNTRY_RE.sub(r", \1", text)
    text = _EU_COUNTRY_AFTER_LOCALITY_RE.sub(r"\1, \2", text)

    text = _COMMA_RUN_RE.sub(", ", text)
    text = _WHITESPACE_RE.sub(" ", text)
    return _TRAILING_PUNCT_RE.sub("", text).strip(" ,")
