# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Exception hierarchy for the transit core.

Validators raise FormatError/ChecksumError internally and turn them into
result objects; services raise the remaining types to their callers.
"""

from typing import Any, Dict


class TransitCoreError(Exception):
    """Base class for transit core exceptions."""

    def __init__(self, message: str, error_type: str = "application-error"):
        super().__init__(message)
        self.message = message
        self.error_type = error_type

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.error_type, "message": self.message}


class IdentifierError(TransitCoreError):
    """Base class for identifier validation failures."""


class FormatError(IdentifierError):
    """Identifier does not match its structural pattern."""

    def __init__(self, message: str):
        super().__init__(message, "format-error")


class ChecksumError(IdentifierError):
    """Identifier is well formed but its check digit is wrong."""

    def __init__(self, message: str, provided: int = None, expected: int = None):
        super().__init__(message, "checksum-error")
        self.provided = provided
        self.expected = expected


class RatesUnavailableError(TransitCoreError):
    """Exception raised when no customs rate schedule can be obtained."""

    def __init__(self, message: str):
        super().__init__(message, "rates-unavailable")


class ConfigurationError(TransitCoreError):
    """Exception for invalid runtime configuration."""

    def __init__(self, message: str):
        super().__init__(message, "configuration-error")
