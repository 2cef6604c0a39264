# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Shipment tracking numbers.

Format: REGIME-YY-SEQ6-RAND3-C-GN, e.g. IM4-26-654321-456-7-GN. The check
digit is the Luhn checksum of every digit in REGIME+YY+SEQ6+RAND3, so the
"4" of IM4 takes part in it. A tracking number can be re-verified without
any stored state.
"""

import random
import re
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from transit_core.domain.checksums import compute_luhn_checksum
from transit_core.errors import ChecksumError, FormatError, IdentifierError


TRACKING_REGIMES = ('IM4', 'IT', 'AT', 'EXPORT')
TRACKING_SUFFIX = 'GN'
YEAR_TOLERANCE = 5

_TRACKING_PATTERN = re.compile(r'^([A-Z0-9]+)-(\d{2})-(\d{6})-(\d{3})-(\d)-GN$')

_random = random.Random()


@dataclass
class TrackingValidationResult:
    """Result of tracking number validation."""
    is_valid: bool
    error: Optional[str] = None
    error_type: Optional[str] = None


def _normalize_regime(regime: str) -> str:
    regime_upper = str(regime or '').strip().upper()
    if regime_upper not in TRACKING_REGIMES:
        raise FormatError(
            f"Unknown customs regime '{regime}', expected one of IM4, IT, AT, Export"
        )
    return regime_upper


def generate_tracking_number(regime: str, now: Optional[datetime] = None) -> str:
    """
    Generate a new tracking number for a shipment.

    SEQ6 comes from the low digits of the microsecond clock and RAND3 adds
    entropy for numbers generated within the same tick. Uniqueness is
    probabilistic; callers that persist tracking numbers should rely on a
    unique index to catch the rare collision.

    Args:
        regime: Customs regime (IM4, IT, AT or Export, any case)
        now: Reference date for the year segment (defaults to today)

    Returns:
        Tracking number string

    Raises:
        FormatError: If the regime is unknown
    """
    regime_upper = _normalize_regime(regime)
    now = now or datetime.now()

    year = f"{now.year % 100:02d}"
    sequence = f"{(time.time_ns() // 1000) % 1_000_000:06d}"
    rand = str(_random.randint(100, 999))

    checksum = compute_luhn_checksum(f"{regime_upper}{year}{sequence}{rand}")

    return f"{regime_upper}-{year}-{sequence}-{rand}-{checksum}-{TRACKING_SUFFIX}"


def parse_tracking_number(value: str, now: Optional[datetime] = None) -> dict:
    """
    Split a tracking number into its segments after full verification.

    Raises:
        FormatError: If the structure, regime or year is invalid
        ChecksumError: If the check digit does not match
    """
    candidate = str(value or '').strip().upper()
    match = _TRACKING_PATTERN.match(candidate)
    if not match:
        raise FormatError(
            "Invalid tracking number format, expected REGIME-YY-NNNNNN-NNN-C-GN"
        )

    regime, year, sequence, rand, checksum_str = match.groups()
    if regime not in TRACKING_REGIMES:
        raise FormatError(f"Invalid tracking number format: unknown regime '{regime}'")

    provided = int(checksum_str)
    expected = compute_luhn_checksum(f"{regime}{year}{sequence}{rand}")
    if provided != expected:
        raise ChecksumError(
            f"Checksum mismatch: tracking number checksum digit is {provided}, expected {expected}",
            provided=provided,
            expected=expected,
        )

    current_year = (now or datetime.now()).year
    tracking_year = 2000 + int(year)
    if abs(tracking_year - current_year) > YEAR_TOLERANCE:
        raise FormatError(
            f"Invalid tracking number year {tracking_year}, must be within "
            f"{YEAR_TOLERANCE} years of {current_year}"
        )

    return {
        'regime': regime,
        'year': tracking_year,
        'sequence': sequence,
        'random': rand,
        'checksum': provided,
    }


def validate_tracking_number(value: str, now: Optional[datetime] = None) -> TrackingValidationResult:
    """
    Validate a tracking number's structure and checksum.

    Args:
        value: Tracking number to verify (surrounding spaces and case are ignored)
        now: Reference date for the year window (defaults to today)

    Returns:
        TrackingValidationResult, with error_type "format-error" or "checksum-error"
    """
    try:
        parse_tracking_number(value, now=now)
    except IdentifierError as e:
        return TrackingValidationResult(is_valid=False, error=e.message, error_type=e.error_type)

    return TrackingValidationResult(is_valid=True)
