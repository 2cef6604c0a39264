# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Services package - External integrations and side effects.
"""

from .customs_rates import (
    CustomsRatesService,
    days_since,
    is_rates_stale,
    format_last_update,
    reference_rates
)
from .payments import LiquidationPaymentService

__all__ = [
    "CustomsRatesService",
    "days_since",
    "is_rates_stale",
    "format_last_update",
    "reference_rates",
    "LiquidationPaymentService"
]
