# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Core entity models for the transit core.
"""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator, ConfigDict
from .base import BaseEntity, to_decimal
from .enums import ExpenseType, CustomsRegime, DocumentStatus, DocumentType


LIQUIDATION_CATEGORY = "Douane"
DEFAULT_EXPENSE_CATEGORY = "Autre"


def _coerce_decimal(v):
    if v is None:
        return v
    try:
        return to_decimal(v)
    except (InvalidOperation, TypeError) as e:
        raise ValueError(f'Invalid decimal value: {v!r}') from e


class Expense(BaseEntity):
    """
    Ledger entry of a shipment.

    Entries are append-only: the only permitted change is paid going from
    False to True, through mark_paid(), which returns a new entry. Negative
    amounts are representable so integrity checks can report them.
    """

    model_config = ConfigDict(frozen=True)

    description: str = Field(..., min_length=1, max_length=500, description="Entry description")
    amount: Decimal = Field(..., description="Signed amount in GNF")
    paid: bool = Field(default=False, description="Whether the amount has been settled")
    category: str = Field(default=DEFAULT_EXPENSE_CATEGORY, description="Business category, e.g. Douane")
    type: ExpenseType = Field(..., description="Provision, disbursement or fee")
    date: datetime = Field(default_factory=datetime.utcnow, description="Value date")
    receipt_url: Optional[str] = Field(None, description="Scanned receipt location")

    @field_validator('amount', mode='before')
    @classmethod
    def validate_amount(cls, v):
        """Convert amounts to Decimal without float artefacts."""
        return _coerce_decimal(v)

    @field_validator('description')
    @classmethod
    def validate_description(cls, v):
        if not v.strip():
            raise ValueError('Expense description cannot be empty')
        return v.strip()

    def is_liquidation(self) -> bool:
        """Customs duty bill awaiting payment."""
        return (
            self.category == LIQUIDATION_CATEGORY
            and self.type == ExpenseType.DISBURSEMENT
            and not self.paid
        )

    def mark_paid(self) -> "Expense":
        """Return a settled copy of this entry."""
        if self.paid:
            return self
        return self.model_copy(update={"paid": True})


class ShipmentDocument(BaseEntity):
    """Document attached to a shipment file."""

    name: str = Field(..., min_length=1, max_length=200, description="File name")
    type: DocumentType = Field(..., description="Document kind")
    status: DocumentStatus = Field(default=DocumentStatus.PENDING, description="Review state")
    url: Optional[str] = Field(None, description="Storage location")

    def is_verified_bl(self) -> bool:
        return self.type == DocumentType.BL and self.status == DocumentStatus.VERIFIED


class Shipment(BaseEntity):
    """Shipment file with its expense ledger."""

    tracking_number: str = Field(default="", description="REGIME-YY-SEQ-RND-C-GN identifier")
    bl_number: Optional[str] = Field(None, description="Bill of lading number")
    client_name: Optional[str] = Field(None, description="Importer or exporter name")
    container_number: Optional[str] = Field(None, description="ISO 6346 container number")
    shipping_line: Optional[str] = Field(None, description="Carrier name")
    customs_regime: Optional[CustomsRegime] = Field(None, description="Declared customs regime")
    origin: Optional[str] = Field(None, description="Port or country of origin")
    destination: Optional[str] = Field(None, description="Destination city")
    expenses: List[Expense] = Field(default_factory=list, description="Ledger entries in insertion order")
    documents: List[ShipmentDocument] = Field(default_factory=list, description="Attached documents")

    def add_expense(self, expense: Expense) -> None:
        """Append a ledger entry."""
        self.expenses.append(expense)

    def mark_expense_paid(self, expense_id: str) -> Expense:
        """
        Settle a ledger entry in place.

        Raises:
            KeyError: If no entry has this id
        """
        for index, expense in enumerate(self.expenses):
            if expense.id == expense_id:
                settled = expense.mark_paid()
                self.expenses[index] = settled
                return settled
        raise KeyError(expense_id)

    def has_verified_bl(self) -> bool:
        """True when a bill of lading has been checked against the original."""
        return any(document.is_verified_bl() for document in self.documents)


class CustomsRates(BaseModel):
    """
    Customs rate schedule.

    Rates are fractions (0.18 for 18%). Bounds are not enforced here so that
    an out-of-range schedule can be represented and rejected by
    validate_customs_rates().
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    dd: Decimal = Field(..., description="Customs duty rate")
    rtl: Decimal = Field(..., description="Levy rate on CAF (RTL)")
    rdl: Decimal = Field(..., description="Levy rate on CAF (RDL)")
    tvs: Decimal = Field(..., description="Tax rate applied to CAF + DD")
    last_update: Optional[datetime] = Field(None, alias="lastUpdate", description="Schedule publication time")
    source: Optional[str] = Field(None, description="Legal source of the schedule")
    source_url: Optional[str] = Field(None, alias="sourceUrl", description="Official publication URL")
    version_id: Optional[str] = Field(None, alias="versionId", description="Schedule version")
    signed_by: Optional[str] = Field(None, alias="signedBy", description="Authority that signed the schedule")
    signed_at: Optional[datetime] = Field(None, alias="signedAt", description="Signature time")

    @field_validator('dd', 'rtl', 'rdl', 'tvs', mode='before')
    @classmethod
    def validate_rate(cls, v):
        """Convert rates to Decimal without float artefacts."""
        return _coerce_decimal(v)
