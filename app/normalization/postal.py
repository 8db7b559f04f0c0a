"""Per-country postal code validators.

Each supported country maps to one regular expression.  ``validate_postal``
anchors the pattern against a whole candidate code; ``find_postal`` searches
for the last code of that shape inside a longer address string.

Unknown country codes validate nothing.
"""
from __future__ import annotations

import re

_POSTAL_PATTERNS: dict[str, str] = {
    "US": r"\d{5}(?:-\d{4})?",
    "CA": r"[A-Z]\d[A-Z][ -]?\d[A-Z]\d",
    "AU": r"\d{4}",
    "GB": r"[A-Z]{1,2}\d[A-Z\d]?\s*\d[A-Z]{2}",
}

# Case-insensitive for the alphanumeric formats (CA, GB); harmless for digits.
POSTAL_VALIDATORS: dict[str, re.Pattern[str]] = {
    country: re.compile(rf"^{pattern}$", re.IGNORECASE)
    for country, pattern in _POSTAL_PATTERNS.items()
}

_POSTAL_SEARCH: dict[str, re.Pattern[str]] = {
    country: re.compile(rf"(?<![\w-])({pattern})(?![\w-])", re.IGNORECASE)
    for country, pattern in _POSTAL_PATTERNS.items()
}


def validate_postal(code: str | None, country: str | None) -> bool:
    """Return ``True`` when *code* is a well-formed postal code for *country*."""
    if not code or not country:
        return False
    validator = POSTAL_VALIDATORS.get(country.upper())
    if validator is None:
        return False
    return validator.match(code.strip()) is not None


def find_postal(text: str, country: str | None) -> str | None:
    """Return the last postal code of *country*'s shape found in *text*.

    The last occurrence is used because postal codes trail the locality in
    every supported format, while house numbers lead the string.
    """
    if not text or not country:
        return None
    pattern = _POSTAL_SEARCH.get(country.upper())
    if pattern is None:
        return None
    matches = pattern.findall(text)
    return matches[-1] if matches else None


def has_postal(text: str, country: str) -> bool:
    """Return ``True`` if *text* contains a postal code shaped for *country*."""
    pattern = _POSTAL_SEARCH.get(country.upper())
    return bool(pattern and pattern.search(text))
