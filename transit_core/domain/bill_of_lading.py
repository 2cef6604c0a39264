# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Bill of lading (BL) number validation.

Each shipping line numbers its bills of lading differently. Numbers are
normalised (upper-cased, whitespace, hyphens and underscores removed) before
being matched against the carrier's pattern, or against a generic 8-20
alphanumeric rule when the carrier is unknown.
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional

from transit_core.errors import FormatError


GENERIC_FORMAT = 'Generic'
MAX_RAW_LENGTH = 50
MIN_LENGTH = 8
MAX_LENGTH = 20


@dataclass(frozen=True)
class BLFormat:
    """Numbering rule of a shipping line."""
    pattern: re.Pattern
    description: str
    example: str


BL_FORMATS: Dict[str, BLFormat] = {
    'Maersk': BLFormat(re.compile(r'^[A-Z]{4}\d{7,10}$'), '4 letters + 7-10 digits', 'MEDU1234567'),
    'CMA CGM': BLFormat(
        re.compile(r'^(CMA|CCG)[A-Z0-9]{9,12}$'),
        'CMA/CCG prefix + 9-12 alphanumeric characters',
        'CMAU1234567890',
    ),
    'MSC': BLFormat(
        re.compile(r'^MSC[A-Z0-9]{9,12}$'),
        'MSC prefix + 9-12 alphanumeric characters',
        'MSCU1234567890',
    ),
    'Hapag-Lloyd': BLFormat(re.compile(r'^HLCU\d{9,11}$'), 'HLCU prefix + 9-11 digits', 'HLCU123456789'),
    'Grimaldi': BLFormat(
        re.compile(r'^(GRI|GRML)[A-Z0-9]{8,12}$'),
        'GRI/GRML prefix + 8-12 alphanumeric characters',
        'GRML12345678',
    ),
    'COSCO': BLFormat(re.compile(r'^(COSU|COSCO)\d{9,11}$'), 'COSU/COSCO prefix + 9-11 digits', 'COSU123456789'),
    'Evergreen': BLFormat(
        re.compile(r'^(EGLV|EVGR)[A-Z0-9]{8,12}$'),
        'EGLV/EVGR prefix + 8-12 alphanumeric characters',
        'EGLV12345678',
    ),
    'ONE (Ocean Network Express)': BLFormat(
        re.compile(r'^ONE[A-Z0-9]{9,12}$'),
        'ONE prefix + 9-12 alphanumeric characters',
        'ONEU123456789',
    ),
    GENERIC_FORMAT: BLFormat(
        re.compile(r'^[A-Z0-9]{8,20}$'),
        '8-20 alphanumeric characters (generic format)',
        'ABC12345678',
    ),
}

# Checked in insertion order, first match wins.
PREFIX_TO_SHIPPING_LINE = {
    'MEDU': 'Maersk',
    'MAEU': 'Maersk',
    'MSKU': 'Maersk',
    'CMA': 'CMA CGM',
    'CCG': 'CMA CGM',
    'MSC': 'MSC',
    'HLCU': 'Hapag-Lloyd',
    'GRML': 'Grimaldi',
    'GRI': 'Grimaldi',
    'COSU': 'COSCO',
    'COSCO': 'COSCO',
    'EGLV': 'Evergreen',
    'EVGR': 'Evergreen',
    'ONE': 'ONE (Ocean Network Express)',
}

SHIPPING_LINE_SYNONYMS = {
    'maersk': 'Maersk',
    'mærsk': 'Maersk',
    'cma cgm': 'CMA CGM',
    'cma': 'CMA CGM',
    'cmacgm': 'CMA CGM',
    'cma-cgm': 'CMA CGM',
    'msc': 'MSC',
    'mediterranean shipping company': 'MSC',
    'hapag lloyd': 'Hapag-Lloyd',
    'hapag-lloyd': 'Hapag-Lloyd',
    'hapag': 'Hapag-Lloyd',
    'grimaldi': 'Grimaldi',
    'grimaldi lines': 'Grimaldi',
    'cosco': 'COSCO',
    'evergreen': 'Evergreen',
    'evergreen line': 'Evergreen',
    'one': 'ONE (Ocean Network Express)',
    'ocean network express': 'ONE (Ocean Network Express)',
}

_SEPARATORS = re.compile(r'[\s\-_]')


@dataclass
class BLValidationResult:
    """Result of bill of lading validation."""
    is_valid: bool
    normalized: Optional[str] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    detected_format: Optional[str] = None


def normalize_bl(value: str) -> str:
    """Upper-case a BL number and strip whitespace, hyphens and underscores."""
    if not value or not isinstance(value, str):
        return ''
    # Bounded before the regex work
    return _SEPARATORS.sub('', value[:MAX_RAW_LENGTH].upper())


def normalize_shipping_line(free_text: str) -> str:
    """
    Map a free-text shipping line name to its canonical label.

    >>> normalize_shipping_line('hapag lloyd')
    'Hapag-Lloyd'
    """
    if not free_text or not isinstance(free_text, str):
        return GENERIC_FORMAT
    return SHIPPING_LINE_SYNONYMS.get(free_text.strip().lower(), GENERIC_FORMAT)


def detect_shipping_line(bl_number: str) -> Optional[str]:
    """Detect the shipping line from the BL prefix, or None when unknown."""
    normalized = normalize_bl(bl_number)
    for prefix, shipping_line in PREFIX_TO_SHIPPING_LINE.items():
        if normalized.startswith(prefix):
            return shipping_line
    return None


def _resolve_carrier(carrier: Optional[str], normalized: str) -> str:
    if carrier:
        if carrier in BL_FORMATS:
            return carrier
        return normalize_shipping_line(carrier)
    return detect_shipping_line(normalized) or GENERIC_FORMAT


def _check_bl(normalized: str, carrier_label: str) -> None:
    if len(normalized) < MIN_LENGTH:
        raise FormatError(f"BL number too short (min {MIN_LENGTH} characters)")
    if len(normalized) > MAX_LENGTH:
        raise FormatError(f"BL number too long (max {MAX_LENGTH} characters)")

    bl_format = BL_FORMATS[carrier_label]
    if not bl_format.pattern.match(normalized):
        if carrier_label == GENERIC_FORMAT:
            raise FormatError(
                "Invalid BL format: expected 8-20 upper-case alphanumeric characters"
            )
        raise FormatError(
            f"Invalid BL format for {carrier_label}: expected {bl_format.description}"
        )


def validate_bl_number(value: str, carrier: Optional[str] = None) -> BLValidationResult:
    """
    Validate a bill of lading number against its carrier's format.

    The carrier is taken as given (canonical label or free-text synonym);
    without one, it is detected from the BL prefix. Unknown carriers fall
    back to the generic rule.

    Args:
        value: Raw BL number
        carrier: Optional shipping line name

    Returns:
        BLValidationResult with the normalised value and the format applied
    """
    if not value or not isinstance(value, str):
        return BLValidationResult(
            is_valid=False,
            error="BL number is missing",
            error_type="format-error",
        )

    normalized = normalize_bl(value)
    carrier_label = _resolve_carrier(carrier, normalized)

    try:
        _check_bl(normalized, carrier_label)
    except FormatError as e:
        within_bounds = MIN_LENGTH <= len(normalized) <= MAX_LENGTH
        return BLValidationResult(
            is_valid=False,
            normalized=normalized,
            error=e.message,
            error_type=e.error_type,
            detected_format=carrier_label if within_bounds and carrier_label != GENERIC_FORMAT else None,
        )

    return BLValidationResult(is_valid=True, normalized=normalized, detected_format=carrier_label)


def get_bl_format_info(shipping_line: str) -> Optional[Dict[str, str]]:
    """Return the description and example of a carrier's BL format."""
    bl_format = BL_FORMATS.get(shipping_line)
    if bl_format is None:
        return None
    return {'description': bl_format.description, 'example': bl_format.example}


def get_supported_shipping_lines() -> List[str]:
    return [name for name in BL_FORMATS if name != GENERIC_FORMAT]


def suggest_bl_corrections(value: str, carrier: Optional[str] = None) -> List[str]:
    """
    Suggest fixes for an invalid BL number.

    Args:
        value: BL number as typed
        carrier: Shipping line the user selected, if any

    Returns:
        Human-readable suggestions, possibly empty
    """
    suggestions = []
    normalized = normalize_bl(value)

    if len(normalized) < MIN_LENGTH:
        suggestions.append(f"Pad with zeros: {normalized.ljust(MIN_LENGTH, '0')}")

    if value != normalized:
        suggestions.append(f"Use the normalised form: {normalized}")

    detected = detect_shipping_line(normalized)
    if detected and detected != carrier:
        suggestions.append(f"Detected shipping line: {detected}")

    if carrier and carrier in BL_FORMATS:
        suggestions.append(f"Expected format: {BL_FORMATS[carrier].example}")

    return suggestions
