"""Address normalizer and US structured parser.

``normalize_address()`` produces the exact query string sent to the
geocoders: the cleaned address with the detected country appended when the
string does not already carry one.  It is idempotent.

``parse_us_address()`` splits a normalized US string of the shape
``<street>, <city>, <ST> <ZIP>`` into the fields of a structured geocoder
query.  Returns ``None`` when the shape does not match.

Safety rule: raw values are never logged.
"""
from __future__ import annotations

import logging
import re
from typing import NamedTuple

from app.normalization.country_detector import mentions_country
from app.normalization.text_cleaner import strip_unit_tokens

logger = logging.getLogger(__name__)


class USAddressParts(NamedTuple):
    street: str
    city: str
    state: str
    postalcode: str


# Street is greedy so that extra leading segments ("123 Main St, Apt 4B")
# stay with the street; city is the last segment before "<ST> <ZIP>".
_US_PATTERN_RE = re.compile(
    r"^(?P<street>.+),\s*(?P<city>[^,\d]+),\s*(?P<state>[A-Z]{2})\s+"
    r"(?P<zip>\d{5}(?:-\d{4})?)"
    r"(?:\s*,\s*(?:US|USA|U\.S\.A\.?|(?i:united\s+states(?:\s+of\s+america)?)))?\s*$"
)


def normalize_address(cleaned: str, country: str | None) -> str:
    """Return *cleaned* with ``", <country>"`` appended when needed.

    Parameters
    ----------
    cleaned:
        Output of :func:`app.normalization.text_cleaner.clean_address`.
    country:
        Detected ISO-3166-1 alpha-2 code, or ``""`` when undetermined.

    Returns
    -------
    str
        *cleaned* unchanged when it is empty, when *country* is empty, when
        any supported country name / abbreviation already appears, or when
        the code itself appears as a token.  Otherwise
        ``f"{cleaned}, {country}"``.
    """
    if not cleaned or not country:
        return cleaned or ""

    code = country.strip().upper()
    if mentions_country(cleaned):
        return cleaned
    if re.search(r"\b" + re.escape(code) + r"\b", cleaned):
        return cleaned
    return f"{cleaned}, {code}"


def parse_us_address(normalized: str) -> USAddressParts | None:
    """Return the street / city / state / ZIP of a US address, or ``None``.

    Unit tokens are removed from the street so the structured query carries
    only the deliverable street line.
    """
    if not normalized:
        return None

    m = _US_PATTERN_RE.match(normalized.strip())
    if m is None:
        logger.debug("parse_us_address: no <street>, <city>, <ST> <ZIP> shape (length=%d)", len(normalized))
        return None

    street = strip_unit_tokens(m.group("street").strip())
    city = m.group("city").strip()
    if not street or not city:
        return None

    return USAddressParts(
        street=street,
        city=city,
        state=m.group("state"),
        postalcode=m.group("zip"),
    )
