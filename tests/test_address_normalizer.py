"""Tests for app/normalization/address_normalizer.py and app/normalization/postal.py."""
from __future__ import annotations

import pytest

from app.normalization.address_normalizer import (
    USAddressParts,
    normalize_address,
    parse_us_address,
)
from app.normalization.postal import find_postal, validate_postal


class TestNormalizeAddress:
    def test_country_appended(self) -> None:
        assert normalize_address("123 Main St, Springfield, IL 62704", "US") == (
            "123 Main St, Springfield, IL 62704, US"
        )

    def test_idempotent(self) -> None:
        once = normalize_address("123 Main St, Springfield, IL 62704", "US")
        assert normalize_address(once, "US") == once

    def test_existing_country_name_kept(self) -> None:
        text = "123 Main St, Springfield, IL 62704, USA"
        assert normalize_address(text, "US") == text

    def test_other_country_name_not_duplicated(self) -> None:
        text = "Unter den Linden 77, 10117 Berlin, Germany"
        assert normalize_address(text, "DE") == text

    def test_code_token_already_present(self) -> None:
        text = "Calle Mayor 1, 28013 Madrid ES"
        assert normalize_address(text, "ES") == text

    def test_state_name_is_not_a_country(self) -> None:
        assert normalize_address("1 Infinite Loop, Cupertino, California", "US") == (
            "1 Infinite Loop, Cupertino, California, US"
        )

    def test_unknown_country_leaves_text(self) -> None:
        assert normalize_address("Springfield", "") == "Springfield"

    def test_empty_input(self) -> None:
        assert normalize_address("", "US") == ""


class TestParseUSAddress:
    def test_basic_shape(self) -> None:
        assert parse_us_address("123 Main St, Springfield, IL 62704, US") == USAddressParts(
            street="123 Main St",
            city="Springfield",
            state="IL",
            postalcode="62704",
        )

    def test_without_country(self) -> None:
        parts = parse_us_address("123 Main St, Springfield, IL 62704")
        assert parts is not None
        assert parts.city == "Springfield"

    def test_unit_removed_from_street(self) -> None:
        parts = parse_us_address("123 Main St, Apt 4B, Springfield, IL 62704, US")
        assert parts is not None
        assert parts.street == "123 Main St"
        assert parts.city == "Springfield"

    def test_zip_plus_four(self) -> None:
        parts = parse_us_address("1600 Pennsylvania Ave NW, Washington, DC 20500-0003, USA")
        assert parts is not None
        assert parts.state == "DC"
        assert parts.postalcode == "20500-0003"

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "Springfield, IL 62704",
            "123 Main St, Springfield, Illinois",
            "10 Downing Street, London SW1A 2AA, GB",
        ],
    )
    def test_non_matching_shapes(self, text: str) -> None:
        assert parse_us_address(text) is None


class TestPostalValidators:
    @pytest.mark.parametrize(
        ("code", "country"),
        [
            ("62704", "US"),
            ("62704-1234", "US"),
            ("K1A 0B1", "CA"),
            ("k1a0b1", "CA"),
            ("2000", "AU"),
            ("SW1A 2AA", "GB"),
            ("M1 1AE", "GB"),
        ],
    )
    def test_valid(self, code: str, country: str) -> None:
        assert validate_postal(code, country)

    @pytest.mark.parametrize(
        ("code", "country"),
        [
            ("6270", "US"),
            ("62704-12", "US"),
            ("12345", "CA"),
            ("20000", "AU"),
            ("75001", "FR"),
            (None, "US"),
            ("62704", None),
        ],
    )
    def test_invalid(self, code, country) -> None:
        assert not validate_postal(code, country)

    def test_find_postal_uses_last_match(self) -> None:
        assert find_postal("12345 Main St, Springfield, IL 62704, US", "US") == "62704"

    def test_find_postal_missing(self) -> None:
        assert find_postal("123 Main St, Springfield", "US") is None

    def test_find_postal_unknown_country(self) -> None:
        assert find_postal("10117 Berlin", "DE") is None
