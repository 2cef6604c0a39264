# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Models package - Pydantic schemas and data models for the transit core.
"""

# Base models
from .base import BaseEntity, BaseEntityCreate, generate_entity_id, to_decimal

# Enumerations
from .enums import (
    ExpenseType,
    CustomsRegime,
    TaxCode,
    ExemptionType,
    HsCategory,
    DocumentType,
    DocumentStatus
)

# Core entities
from .entities import (
    Expense,
    Shipment,
    ShipmentDocument,
    CustomsRates,
    LIQUIDATION_CATEGORY
)

# Request models
from .requests import (
    CreateShipmentRequest,
    CreateExpenseRequest,
    CustomsCalculationRequest,
    GN_CITIES
)

__all__ = [
    # Base models
    "BaseEntity",
    "BaseEntityCreate",
    "generate_entity_id",
    "to_decimal",

    # Enumerations
    "ExpenseType",
    "CustomsRegime",
    "TaxCode",
    "ExemptionType",
    "HsCategory",
    "DocumentType",
    "DocumentStatus",

    # Core entities
    "Expense",
    "Shipment",
    "ShipmentDocument",
    "CustomsRates",
    "LIQUIDATION_CATEGORY",

    # Request models
    "CreateShipmentRequest",
    "CreateExpenseRequest",
    "CustomsCalculationRequest",
    "GN_CITIES"
]
