"""Normalization package.

Pure text stages of the verification pipeline, applied in order::

    clean_address(raw) -> cleaned
    detect_country(cleaned, explicit, default) -> country
    normalize_address(cleaned, country) -> normalized
    parse_us_address(normalized) -> USAddressParts | None

No network access and no state.  Raw address text is never logged.
"""
