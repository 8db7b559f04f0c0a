"""Country detection for cleaned address strings.

``detect_country()`` is a priority cascade: an explicit country wins, then
an ordered list of ``(predicate, code)`` rules is evaluated top-to-bottom
and the first match wins.  The order is significant for ambiguous inputs
(a ``"CA"`` token, ``"California"`` next to a Canadian-looking postcode).

Safety rule: raw values are never logged.
"""
from __future__ import annotations

import logging
import re
from typing import Callable

from app.normalization.postal import has_postal

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Country keyword table
# ---------------------------------------------------------------------------

# Names are matched case-insensitively; bare two/three-letter codes are
# matched case-sensitively so words like "us" in free text do not count.
_CANADA_RE = re.compile(r"\b(?i:canada)\b")
_CALIFORNIA_RE = re.compile(r"\b(?i:california)\b")
_FRANCE_RE = re.compile(r"\b(?i:france)\b")
_US_RE = re.compile(r"\b(?i:united\s+states(?:\s+of\s+america)?)\b|\bU\.S\.A\b\.?|\b(?:USA|US)\b")
_AUSTRALIA_RE = re.compile(r"\b(?i:australia)\b")
_GB_RE = re.compile(r"\b(?i:united\s+kingdom|great\s+britain|england)\b|\b(?:UK|GB)\b")
_GERMANY_RE = re.compile(r"\b(?i:germany|deutschland)\b")
_ITALY_RE = re.compile(r"\b(?i:italy|italia)\b")
_SPAIN_RE = re.compile(r"\b(?i:spain|españa)\b")

_COUNTRY_KEYWORDS: list[tuple[re.Pattern[str], str]] = [
    (_CANADA_RE, "CA"),
    (_CALIFORNIA_RE, "US"),
    (_FRANCE_RE, "FR"),
    (_US_RE, "US"),
    (_AUSTRALIA_RE, "AU"),
    (_GB_RE, "GB"),
    (_GERMANY_RE, "DE"),
    (_ITALY_RE, "IT"),
    (_SPAIN_RE, "ES"),
]

# Keywords that name a country outright.  "California" names a state, so it
# is not a country mention for the normalizer.
_COUNTRY_MENTIONS: list[re.Pattern[str]] = [
    _CANADA_RE,
    _FRANCE_RE,
    _US_RE,
    _AUSTRALIA_RE,
    _GB_RE,
    _GERMANY_RE,
    _ITALY_RE,
    _SPAIN_RE,
]

_COUNTRY_ALIASES: dict[str, str] = {
    "USA": "US",
    "U.S.A.": "US",
    "U.S.": "US",
    "UNITED STATES": "US",
    "UNITED STATES OF AMERICA": "US",
    "UK": "GB",
    "UNITED KINGDOM": "GB",
    "GREAT BRITAIN": "GB",
    "ENGLAND": "GB",
    "CANADA": "CA",
    "AUSTRALIA": "AU",
    "GERMANY": "DE",
    "FRANCE": "FR",
    "ITALY": "IT",
    "SPAIN": "ES",
}

_CA_TOKEN_RE = re.compile(r"\bCA\b")
_CA_THEN_ZIP_RE = re.compile(r"\bCA\s+\d{5}(?:-\d{4})?\b")
_US_STATE_ZIP_TAIL_RE = re.compile(r"\b[A-Z]{2}\s+\d{5}(?:-\d{4})?\s*$")
_FOUR_DIGITS_RE = re.compile(r"\b\d{4}\b")
_AU_STATE_RE = re.compile(r"\b(?:NSW|VIC|QLD|WA|SA|TAS|ACT|NT)\b")


def _keyword_rule(text: str) -> str | None:
    for pattern, code in _COUNTRY_KEYWORDS:
        if pattern.search(text):
            return code
    return None


def _ca_token_rule(text: str) -> str | None:
    """Disambiguate a bare ``CA`` token: California before a ZIP, else Canada."""
    if not _CA_TOKEN_RE.search(text):
        return None
    if _CA_THEN_ZIP_RE.search(text):
        return "US"
    if has_postal(text, "CA"):
        return "CA"
    return None


def _us_state_zip_rule(text: str) -> str | None:
    return "US" if _US_STATE_ZIP_TAIL_RE.search(text) else None


def _ca_postal_rule(text: str) -> str | None:
    return "CA" if has_postal(text, "CA") else None


def _gb_postal_rule(text: str) -> str | None:
    return "GB" if has_postal(text, "GB") else None


def _au_rule(text: str) -> str | None:
    if _FOUR_DIGITS_RE.search(text) and _AU_STATE_RE.search(text):
        return "AU"
    return None


_DETECTION_RULES: list[tuple[str, Callable[[str], str | None]]] = [
    ("keyword", _keyword_rule),
    ("ca_token", _ca_token_rule),
    ("us_state_zip", _us_state_zip_rule),
    ("ca_postal", _ca_postal_rule),
    ("gb_postal", _gb_postal_rule),
    ("au_state_postcode", _au_rule),
]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def canonical_country(value: str | None) -> str:
    """Return an explicit country value as an uppercase code.

    Common country names and abbreviations (``"USA"``, ``"United Kingdom"``)
    map to their ISO-3166-1 alpha-2 code; anything else is returned
    stripped and uppercased.
    """
    if not value:
        return ""
    upper = " ".join(value.split()).upper()
    return _COUNTRY_ALIASES.get(upper, upper)


def mentions_country(text: str) -> bool:
    """Return ``True`` if *text* names any supported country."""
    return any(pattern.search(text) for pattern in _COUNTRY_MENTIONS)


def detect_country(
    text: str,
    explicit: str | None = None,
    default: str | None = None,
) -> str:
    """Return the ISO-3166-1 alpha-2 country code for *text*, or ``""``.

    Detection order (first match wins):

    1. *explicit* country, uppercased
    2. Country-name keywords (Canada, California, France, US/USA,
       Australia, UK/GB, Germany, Italy, Spain)
    3. A ``CA`` token: US when followed by a ZIP, Canada when a Canadian
       postcode is present
    4. Trailing ``<state> <ZIP>`` (US)
    5. Canadian postcode
    6. UK postcode
    7. Four-digit postcode plus an Australian state abbreviation
    8. *default*, uppercased, or ``""``
    """
    explicit_code = canonical_country(explicit)
    if explicit_code:
        return explicit_code

    if text:
        for name, rule in _DETECTION_RULES:
            code = rule(text)
            if code:
                logger.debug("detect_country: rule=%s country=%s", name, code)
                return code

    return canonical_country(default)
