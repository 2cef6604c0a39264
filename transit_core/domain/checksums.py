# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Check digit algorithms used by the identifier validators.

Both functions are pure: no I/O, no state, same output for the same input.
"""

import re

from transit_core.errors import FormatError


# ISO 6346 letter equivalents. Multiples of 11 (11, 22, 33) are skipped.
ISO6346_LETTER_VALUES = {
    'A': 10, 'B': 12, 'C': 13, 'D': 14, 'E': 15, 'F': 16, 'G': 17,
    'H': 18, 'I': 19, 'J': 20, 'K': 21, 'L': 23, 'M': 24, 'N': 25,
    'O': 26, 'P': 27, 'Q': 28, 'R': 29, 'S': 30, 'T': 31, 'U': 32,
    'V': 34, 'W': 35, 'X': 36, 'Y': 37, 'Z': 38,
}

_OWNER_SERIAL_PATTERN = re.compile(r'^[A-Z]{4}\d{6}$')
_SEPARATORS = re.compile(r'[\s\-_]')


def compute_luhn_checksum(digit_string: str) -> int:
    """
    Compute the Luhn check digit of a string.

    Non-digit characters are ignored, so "IM4-26-123456" is processed as
    "426123456". The rightmost digit is taken as is and every second digit
    to its left is doubled (minus 9 when above 9); the result is the digit
    that brings the sum to a multiple of ten.

    Args:
        digit_string: Text containing the digits to protect

    Returns:
        Check digit between 0 and 9 (0 for input without digits)
    """
    digits = [int(char) for char in str(digit_string) if char.isdigit()]

    total = 0
    double = False
    for digit in reversed(digits):
        if double:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
        double = not double

    return (10 - total % 10) % 10


def compute_iso6346_check_digit(owner_code_plus_serial: str) -> int:
    """
    Compute the ISO 6346 check digit for a container prefix.

    Args:
        owner_code_plus_serial: 4 letters followed by 6 digits, e.g. "CSQU305438"

    Returns:
        Check digit between 0 and 9 (a remainder of 10 maps to 0)

    Raises:
        FormatError: If the input is not 4 letters followed by 6 digits
    """
    prefix = _SEPARATORS.sub('', str(owner_code_plus_serial or '')).upper()
    if not _OWNER_SERIAL_PATTERN.match(prefix):
        raise FormatError(
            f"Container prefix must be 4 letters followed by 6 digits, got '{owner_code_plus_serial}'"
        )

    total = 0
    for position, char in enumerate(prefix):
        value = ISO6346_LETTER_VALUES[char] if char.isalpha() else int(char)
        total += value * (2 ** position)

    remainder = total % 11
    return 0 if remainder == 10 else remainder
