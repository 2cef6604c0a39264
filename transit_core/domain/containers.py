# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
ISO 6346 container number validation.

A container number is a 3-letter owner code, a 1-letter equipment category,
a 6-digit serial number and a check digit, e.g. CSQU3054383.
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional

from transit_core.domain.checksums import compute_iso6346_check_digit
from transit_core.errors import ChecksumError, FormatError


MAX_RAW_LENGTH = 20
CONTAINER_LENGTH = 11

_CONTAINER_PATTERN = re.compile(r'^[A-Z]{4}\d{7}$')
_PREFIX_PATTERN = re.compile(r'^[A-Z]{4}\d{6}$')
_SEPARATORS = re.compile(r'[\s\-_]')

EQUIPMENT_CATEGORIES = {
    'U': 'Freight container',
    'J': 'Detachable freight container equipment',
    'Z': 'Trailer or chassis',
    'R': 'Refrigerated container',
    'T': 'Tank container',
    'G': 'General purpose container',
    'H': 'Refrigerated or heated container',
    'P': 'Platform container',
    'S': 'Named cargo container',
}

# Owner prefixes registered by the main lines calling at Conakry.
CONTAINER_OWNER_CODES: Dict[str, List[str]] = {
    'Maersk': ['MSK', 'MAE', 'MSKU'],
    'CMA CGM': ['CMA', 'CCG', 'ANL'],
    'MSC': ['MSC', 'MED', 'MSCU'],
    'Hapag-Lloyd': ['HLC', 'HPL', 'HLCU'],
    'COSCO': ['COS', 'OOL', 'COSU'],
    'Evergreen': ['EGL', 'EVG'],
    'ONE': ['ONE', 'ONEU'],
}


@dataclass
class ContainerValidationResult:
    """Result of container number validation."""
    is_valid: bool
    normalized: Optional[str] = None
    owner_code: Optional[str] = None
    serial_number: Optional[str] = None
    check_digit: Optional[int] = None
    expected_check_digit: Optional[int] = None
    error: Optional[str] = None
    error_type: Optional[str] = None

    @property
    def check_digit_match(self) -> bool:
        return self.check_digit is not None and self.check_digit == self.expected_check_digit


@dataclass
class ContainerInfo:
    """Decoded owner and equipment information."""
    owner_code: str
    equipment_category: str
    description: str


def normalize_container(value: str) -> str:
    """Upper-case a container number and strip whitespace, hyphens and underscores."""
    if not value or not isinstance(value, str):
        return ''
    return _SEPARATORS.sub('', value[:MAX_RAW_LENGTH].upper())


def validate_container_number(value: str) -> ContainerValidationResult:
    """
    Validate a container number and its ISO 6346 check digit.

    On a check digit mismatch the owner code, serial number and both digits
    are still returned so the discrepancy can be audited.

    Args:
        value: Raw container number ("MSCU 123456-6" is accepted)

    Returns:
        ContainerValidationResult
    """
    if not value or not isinstance(value, str):
        return ContainerValidationResult(
            is_valid=False,
            error="Container number is missing",
            error_type="format-error",
        )

    normalized = normalize_container(value)

    try:
        if len(normalized) != CONTAINER_LENGTH:
            raise FormatError(
                f"Invalid container number length: {len(normalized)} characters (expected {CONTAINER_LENGTH})"
            )
        if not _CONTAINER_PATTERN.match(normalized):
            raise FormatError(
                "Invalid container number format: expected 4 letters + 7 digits (e.g. CSQU3054383)"
            )
    except FormatError as e:
        return ContainerValidationResult(
            is_valid=False,
            normalized=normalized,
            error=e.message,
            error_type=e.error_type,
        )

    owner_code = normalized[:4]
    serial_number = normalized[4:10]
    provided = int(normalized[10])
    expected = compute_iso6346_check_digit(normalized[:10])

    result = ContainerValidationResult(
        is_valid=provided == expected,
        normalized=normalized,
        owner_code=owner_code,
        serial_number=serial_number,
        check_digit=provided,
        expected_check_digit=expected,
    )
    if not result.is_valid:
        error = ChecksumError(
            f"Check digit mismatch: provided check digit {provided}, expected {expected}",
            provided=provided,
            expected=expected,
        )
        result.error = error.message
        result.error_type = error.error_type

    return result


def generate_container_with_check(prefix: str) -> str:
    """
    Append the ISO 6346 check digit to a 10-character container prefix.

    Raises:
        FormatError: If the prefix is not 4 letters followed by 6 digits
    """
    normalized = normalize_container(prefix)
    return f"{normalized}{compute_iso6346_check_digit(normalized)}"


def decode_container_info(value: str) -> Optional[ContainerInfo]:
    """Decode the owner code and equipment category letter."""
    normalized = normalize_container(value)
    if len(normalized) < 4:
        return None

    owner_code = normalized[:3]
    equipment_category = EQUIPMENT_CATEGORIES.get(normalized[3], 'Unknown')

    return ContainerInfo(
        owner_code=owner_code,
        equipment_category=equipment_category,
        description=f"{owner_code} - {equipment_category}",
    )


def is_container_owned_by(value: str, shipping_line: str) -> bool:
    """Check whether a container's owner prefix belongs to a shipping line."""
    normalized = normalize_container(value)
    codes = CONTAINER_OWNER_CODES.get(shipping_line)
    if not codes or len(normalized) < 3:
        return False
    return normalized[:3] in codes or normalized[:4] in codes


def suggest_container_corrections(value: str) -> List[str]:
    """Suggest fixes for a container number that failed validation."""
    suggestions = []
    normalized = normalize_container(value)

    if _PREFIX_PATTERN.match(normalized):
        suggestions.append(f"Append check digit: {generate_container_with_check(normalized)}")

    if value != normalized:
        suggestions.append(f"Use the normalised form: {normalized}")

    if _CONTAINER_PATTERN.match(normalized):
        corrected = generate_container_with_check(normalized[:10])
        if corrected != normalized:
            suggestions.append(f"Correct check digit: {corrected}")

    return suggestions
