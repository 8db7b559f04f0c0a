"""Tests for app/normalization/text_cleaner.py."""
from __future__ import annotations

import pytest

from app.normalization.text_cleaner import clean_address, strip_unit_tokens


class TestPersonalDataRemoval:
    def test_email_and_phone_lines_removed(self) -> None:
        raw = (
            "John Doe\n"
            "123 Main St\n"
            "Springfield, IL 62704\n"
            "john.doe@example.com\n"
            "(555) 123-4567"
        )
        assert clean_address(raw) == "123 Main St, Springfield, IL 62704"

    def test_international_phone_removed(self) -> None:
        raw = "+44 20 7946 0958\n10 Downing Street\nLondon SW1A 2AA"
        assert clean_address(raw) == "10 Downing Street, London SW1A 2AA"

    def test_inline_email_removed_without_double_comma(self) -> None:
        raw = "123 Main St, jane@example.org, Springfield, IL 62704"
        assert clean_address(raw) == "123 Main St, Springfield, IL 62704"

    def test_contact_label_dropped_with_value(self) -> None:
        raw = "123 Main St\nSpringfield, IL 62704\nTel: 555-123-4567"
        assert clean_address(raw) == "123 Main St, Springfield, IL 62704"

    def test_zip_plus_four_is_not_a_phone(self) -> None:
        assert clean_address("123 Main St, Springfield, IL 62704-1234") == (
            "123 Main St, Springfield, IL 62704-1234"
        )

    def test_house_number_range_is_not_a_phone(self) -> None:
        assert clean_address("1234-1236 Main St, Springfield, IL 62704") == (
            "1234-1236 Main St, Springfield, IL 62704"
        )

    def test_hyphenated_phone_at_line_end_still_removed(self) -> None:
        assert clean_address("123 Main St, Springfield, IL 62704\n555-1234") == (
            "123 Main St, Springfield, IL 62704"
        )

    def test_unit_number_then_zip_is_not_a_phone(self) -> None:
        assert clean_address("1600 Pennsylvania Ave NW, Suite 100 20500") == (
            "1600 Pennsylvania Ave NW, Suite 100, 20500"
        )


class TestLineReflow:
    def test_empty_input(self) -> None:
        assert clean_address("") == ""

    def test_none_input(self) -> None:
        assert clean_address(None) == ""

    def test_whitespace_only(self) -> None:
        assert clean_address("   \n\t ") == ""

    def test_only_personal_data(self) -> None:
        assert clean_address("jane@example.org\n+1 555 123 4567") == ""

    def test_name_line_dropped_when_next_line_has_digits(self) -> None:
        assert clean_address("Jane Smith\n42 Elm Road\nLeeds LS1 4AP") == "42 Elm Road, Leeds LS1 4AP"

    def test_first_line_kept_when_it_has_digits(self) -> None:
        assert clean_address("Flat 2\n42 Elm Road") == "Flat 2, 42 Elm Road"

    def test_single_line_not_dropped(self) -> None:
        assert clean_address("Springfield") == "Springfield"

    def test_whitespace_collapsed(self) -> None:
        assert clean_address("123   Main St,   Springfield,  IL   62704") == (
            "123 Main St, Springfield, IL 62704"
        )


class TestStreetSuffixAndUnits:
    def test_comma_inserted_after_run_on_suffix(self) -> None:
        assert clean_address("123 Main St Springfield IL 62704") == "123 Main St, Springfield IL 62704"

    def test_locality_starting_with_st_left_alone(self) -> None:
        assert clean_address("500 Market St St Louis MO 63101") == "500 Market St, St Louis MO 63101"

    def test_existing_comma_not_doubled(self) -> None:
        assert clean_address("123 Main St, Springfield") == "123 Main St, Springfield"

    def test_unit_token_normalized(self) -> None:
        assert clean_address("123 Main St Apt 4B Springfield, IL 62704") == (
            "123 Main St, Apt 4B, Springfield, IL 62704"
        )

    def test_unit_token_with_hash_and_period(self) -> None:
        assert clean_address("77 High Street, ste. #12 Boston, MA 02110") == (
            "77 High Street, Ste 12, Boston, MA 02110"
        )

    def test_trailing_unit_has_no_dangling_comma(self) -> None:
        assert clean_address("123 Main St, Springfield, IL 62704, Unit 7") == (
            "123 Main St, Springfield, IL 62704, Unit 7"
        )

    def test_state_code_fl_not_treated_as_unit(self) -> None:
        assert clean_address("1 Ocean Dr, Miami, FL 33139") == "1 Ocean Dr, Miami, FL 33139"


class TestRegionsAndCountries:
    def test_long_state_name_abbreviated_before_zip(self) -> None:
        assert clean_address("500 Main Street, Columbia, South Carolina 29201") == (
            "500 Main Street, Columbia, SC 29201"
        )

    def test_california_kept_without_zip(self) -> None:
        assert clean_address("500 Main St, Los Angeles, California") == (
            "500 Main St, Los Angeles, California"
        )

    def test_california_kept_before_canadian_postcode(self) -> None:
        assert clean_address("1 Main St, Los Angeles, California K1A 0B1") == (
            "1 Main St, Los Angeles, California K1A 0B1"
        )

    def test_california_abbreviated_before_zip(self) -> None:
        assert clean_address("500 Main St, Los Angeles, California 90012") == (
            "500 Main St, Los Angeles, CA 90012"
        )

    def test_city_named_after_state_kept(self) -> None:
        assert clean_address("123 Broadway, New York 10001") == "123 Broadway, New York 10001"

    def test_state_after_city_named_after_it(self) -> None:
        assert clean_address("123 Broadway, New York, New York 10001") == "123 Broadway, New York, NY 10001"

    def test_state_name_at_end_abbreviated(self) -> None:
        assert clean_address("12 Oak Ave, Springfield, Illinois") == "12 Oak Ave, Springfield, IL"

    def test_street_named_after_state_left_alone(self) -> None:
        assert clean_address("1600 Pennsylvania Ave NW, Washington, DC 20500") == (
            "1600 Pennsylvania Ave NW, Washington, DC 20500"
        )

    def test_australian_state_uppercased(self) -> None:
        assert clean_address("1 Martin Pl, Sydney nsw 2000") == "1 Martin Pl, Sydney NSW 2000"

    def test_australian_state_name_abbreviated(self) -> None:
        assert clean_address("8 Collins St, Melbourne Victoria 3000") == "8 Collins St, Melbourne VIC 3000"

    def test_comma_before_trailing_country(self) -> None:
        assert clean_address("123 Main St, Springfield, IL 62704 USA") == (
            "123 Main St, Springfield, IL 62704, USA"
        )

    def test_comma_before_trailing_country_name(self) -> None:
        assert clean_address("100 King St W, Toronto ON M5H 1A1 Canada") == (
            "100 King St W, Toronto ON M5H 1A1, Canada"
        )

    def test_trailing_european_country(self) -> None:
        assert clean_address("Unter den Linden 77, 10117 Berlin Germany") == (
            "Unter den Linden 77, 10117 Berlin, Germany"
        )

    def test_european_country_after_postcode_and_locality(self) -> None:
        assert clean_address("Musterstrasse 5, 10117 Berlin Germany DE") == (
            "Musterstrasse 5, 10117 Berlin, Germany DE"
        )

    def test_trailing_punctuation_stripped(self) -> None:
        assert clean_address("123 Main St, Springfield, IL 62704.,; ") == "123 Main St, Springfield, IL 62704"


class TestStripUnitTokens:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("123 Main St, Apt 4B, Springfield, IL 62704, US", "123 Main St, Springfield, IL 62704, US"),
            ("Suite 100, 1 Market St, San Francisco", "1 Market St, San Francisco"),
            ("123 Main St, Springfield", "123 Main St, Springfield"),
            ("", ""),
        ],
    )
    def test_strip(self, text: str, expected: str) -> None:
        assert strip_unit_tokens(text) == expected
