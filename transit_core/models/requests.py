# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Request models validated at the boundary, before data reaches the ledger
or persistence.
"""

import re
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional
from pydantic import Field, ValidationInfo, field_validator, model_validator

from transit_core.domain.bill_of_lading import normalize_bl, validate_bl_number
from transit_core.domain.containers import normalize_container, validate_container_number
from .base import BaseEntityCreate
from .entities import CustomsRates, Expense, _coerce_decimal
from .enums import CustomsRegime, ExemptionType, ExpenseType


GN_CITIES = ('Conakry', 'Kamsar', 'Boké', 'Kankan', 'Labé', 'Nzérékoré')
DEFAULT_DESTINATION = 'Conakry, GN'
EXPENSE_CATEGORIES = ('Douane', 'Port', 'Logistique', 'Agence', 'Autre')

MIN_EXPENSE_AMOUNT = Decimal('1000')
MAX_EXPENSE_AMOUNT = Decimal('1000000000')
# Keeps CAF and duties within the 28-digit money context
MAX_DECLARED_VALUE = Decimal(10) ** 15
ETA_MAX_PAST_DAYS = 7

_CLIENT_NAME_PATTERN = re.compile(r"^[a-zA-ZÀ-ÿ\s'-]+$")


def _one_year_after(day: date) -> date:
    try:
        return day.replace(year=day.year + 1)
    except ValueError:
        # 29 February
        return day.replace(year=day.year + 1, day=28)


class CreateShipmentRequest(BaseEntityCreate):
    """Request model for opening a shipment file."""

    client_name: str = Field(..., min_length=3, max_length=100, description="Importer or exporter name")
    description: str = Field(..., min_length=5, max_length=500, description="Goods description")
    origin: str = Field(..., min_length=2, max_length=100, description="Port and country of origin")
    destination: str = Field(default=DEFAULT_DESTINATION, description="Guinean destination city")
    eta: date = Field(..., description="Estimated time of arrival")
    shipping_line: str = Field(..., min_length=2, description="Carrier name")
    bl_number: str = Field(..., min_length=5, max_length=20, description="Bill of lading number")
    container_number: Optional[str] = Field(None, description="ISO 6346 container number")
    customs_regime: CustomsRegime = Field(..., description="Declared customs regime")

    @field_validator('client_name')
    @classmethod
    def validate_client_name(cls, v):
        """Validate client name characters."""
        if not _CLIENT_NAME_PATTERN.match(v):
            raise ValueError('Client name may only contain letters, spaces, hyphens and apostrophes')
        return v

    @field_validator('destination')
    @classmethod
    def validate_destination(cls, v):
        """Destination must be a served Guinean city."""
        if not any(city in v for city in GN_CITIES):
            raise ValueError(f"Destination must be one of: {', '.join(GN_CITIES)}")
        return v

    @field_validator('eta')
    @classmethod
    def validate_eta(cls, v):
        """ETA may be at most a week in the past and a year ahead."""
        today = date.today()
        if v < today - timedelta(days=ETA_MAX_PAST_DAYS):
            raise ValueError(f'ETA cannot be more than {ETA_MAX_PAST_DAYS} days in the past')
        if v > _one_year_after(today):
            raise ValueError('ETA cannot be more than one year ahead')
        return v

    @field_validator('bl_number')
    @classmethod
    def check_bl_number(cls, v, info: ValidationInfo):
        """Validate the BL number against the carrier's format."""
        result = validate_bl_number(v, info.data.get('shipping_line'))
        if not result.is_valid:
            raise ValueError(result.error)
        return normalize_bl(v)

    @field_validator('container_number')
    @classmethod
    def check_container_number(cls, v):
        """Validate the container number and its check digit."""
        if not v:
            return None
        result = validate_container_number(v)
        if not result.is_valid:
            raise ValueError(result.error)
        return normalize_container(v)

    @model_validator(mode='after')
    def validate_regime_route(self):
        """Transit must leave Guinea and exports must start from it."""
        if self.customs_regime == CustomsRegime.IT and 'conakry' in self.destination.lower():
            raise ValueError('Transit regime (IT) requires a destination outside Conakry')
        if self.customs_regime == CustomsRegime.EXPORT and 'gn' not in self.origin.lower():
            raise ValueError('Export regime requires an origin in Guinea')
        return self


class CreateExpenseRequest(BaseEntityCreate):
    """Request model for recording a ledger entry."""

    description: str = Field(..., min_length=3, max_length=200, description="Entry description")
    amount: Decimal = Field(..., description="Amount in whole GNF")
    category: str = Field(default='Autre', description="Business category")
    type: ExpenseType = Field(..., description="Provision, disbursement or fee")
    paid: bool = Field(default=False, description="Already settled")

    @field_validator('amount', mode='before')
    @classmethod
    def coerce_amount(cls, v):
        return _coerce_decimal(v)

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v):
        """GNF has no subunit in practice; amounts are whole and bounded."""
        if v <= 0:
            raise ValueError('Amount must be positive')
        if v != v.to_integral_value():
            raise ValueError('Amount must be a whole number of GNF')
        if v < MIN_EXPENSE_AMOUNT:
            raise ValueError(f'Minimum amount is {MIN_EXPENSE_AMOUNT} GNF')
        if v > MAX_EXPENSE_AMOUNT:
            raise ValueError('Suspicious amount (max 1 000 000 000 GNF)')
        return v

    @field_validator('category')
    @classmethod
    def validate_category(cls, v):
        if v not in EXPENSE_CATEGORIES:
            raise ValueError(f"Category must be one of: {', '.join(EXPENSE_CATEGORIES)}")
        return v

    def to_expense(self) -> Expense:
        """Build the ledger entry for this request."""
        return Expense(
            description=self.description,
            amount=self.amount,
            category=self.category,
            type=self.type,
            paid=self.paid,
        )


class CustomsCalculationRequest(BaseEntityCreate):
    """Request model for a duty estimate."""

    fob: Decimal = Field(..., ge=0, le=MAX_DECLARED_VALUE, description="Free-on-board value (GNF)")
    freight: Decimal = Field(default=Decimal(0), ge=0, le=MAX_DECLARED_VALUE, description="Freight cost (GNF)")
    insurance: Decimal = Field(default=Decimal(0), ge=0, le=MAX_DECLARED_VALUE, description="Insurance cost (GNF)")
    hs_code: Optional[str] = Field(None, description="Harmonized System code")
    commodity_category: Optional[str] = Field(None, max_length=200, description="Free-text goods description")
    regime: CustomsRegime = Field(default=CustomsRegime.IM4, description="Customs regime")
    origin: Optional[str] = Field(None, max_length=100, description="Country of origin")
    exemption_type: Optional[ExemptionType] = Field(None, description="Exemption scheme")

    @field_validator('fob', 'freight', 'insurance', mode='before')
    @classmethod
    def coerce_amounts(cls, v):
        return _coerce_decimal(v)

    @field_validator('hs_code')
    @classmethod
    def validate_hs_code(cls, v):
        """HS codes are 4 to 10 digits, dots allowed."""
        if v is None:
            return v
        digits = v.replace('.', '').strip()
        if not re.match(r'^\d{4,10}$', digits):
            raise ValueError('HS code must contain 4 to 10 digits')
        return digits

    def calculate(self, base_rates: CustomsRates):
        """Run the contextual duty calculation for this request."""
        from transit_core.domain.tariff import calculate_contextual_duties

        return calculate_contextual_duties(
            self.fob,
            self.freight,
            self.insurance,
            base_rates,
            regime=self.regime,
            hs_code=self.hs_code,
            commodity_category=self.commodity_category,
            origin=self.origin,
            exemption_type=self.exemption_type,
        )
