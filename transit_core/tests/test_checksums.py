# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for the Luhn and ISO 6346 check digit algorithms.
"""

import pytest

from transit_core.domain.checksums import (
    ISO6346_LETTER_VALUES,
    compute_iso6346_check_digit,
    compute_luhn_checksum,
)
from transit_core.errors import FormatError


class TestLuhnChecksum:
    """Test Luhn check digit computation."""

    @pytest.mark.parametrize("digits,expected", [
        ("123456789", 3),
        ("490067715", 2),
        ("0", 0),
        ("", 0),
    ])
    def test_known_values(self, digits, expected):
        assert compute_luhn_checksum(digits) == expected

    def test_non_digits_are_ignored(self):
        """Separators and letters do not take part in the checksum."""
        assert compute_luhn_checksum("IM4-26-123456") == compute_luhn_checksum("426123456")
        assert compute_luhn_checksum("IT-26-123456-789") == compute_luhn_checksum("26123456789")

    def test_result_completes_sum_to_multiple_of_ten(self):
        """Rightmost payload digit is not doubled; the check digit closes the sum."""
        payload = "4261234567"
        check = compute_luhn_checksum(payload)

        total = check
        for index, char in enumerate(reversed(payload)):
            digit = int(char)
            if index % 2 == 1:
                digit *= 2
                if digit > 9:
                    digit -= 9
            total += digit
        assert total % 10 == 0

    def test_single_digit_change_changes_checksum(self):
        assert compute_luhn_checksum("426123456789") != compute_luhn_checksum("426123456788")


class TestIso6346CheckDigit:
    """Test ISO 6346 container check digit computation."""

    @pytest.mark.parametrize("prefix,expected", [
        ("CSQU305438", 3),
        ("MSCU123456", 6),
        ("MSKU123456", 5),
    ])
    def test_known_values(self, prefix, expected):
        assert compute_iso6346_check_digit(prefix) == expected

    def test_lowercase_and_separators_accepted(self):
        assert compute_iso6346_check_digit("csqu 305438") == 3
        assert compute_iso6346_check_digit("CSQU-305438") == 3

    def test_letter_values_skip_multiples_of_eleven(self):
        assert 11 not in ISO6346_LETTER_VALUES.values()
        assert 22 not in ISO6346_LETTER_VALUES.values()
        assert 33 not in ISO6346_LETTER_VALUES.values()
        assert ISO6346_LETTER_VALUES['A'] == 10
        assert ISO6346_LETTER_VALUES['Z'] == 38

    def test_result_is_single_digit(self):
        """A remainder of 10 is mapped to 0."""
        for serial in range(0, 200):
            digit = compute_iso6346_check_digit(f"ABCU{serial:06d}")
            assert 0 <= digit <= 9

    @pytest.mark.parametrize("prefix", [
        "CSQU30543",      # too short
        "CSQU3054381",    # too long
        "CSQ1305438",     # digit in owner code
        "CSQUA05438",     # letter in serial
        "",
        None,
    ])
    def test_malformed_prefix_raises(self, prefix):
        with pytest.raises(FormatError) as exc_info:
            compute_iso6346_check_digit(prefix)

        assert exc_info.value.error_type == "format-error"
