# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Pytest configuration and fixtures.
"""

import os
import pytest
from datetime import datetime

from transit_core.models.entities import CustomsRates, Expense, Shipment, ShipmentDocument
from transit_core.models.enums import DocumentStatus, DocumentType, ExpenseType

# Set test environment
os.environ['ENVIRONMENT'] = 'test'
os.environ['OTEL_ENABLED'] = 'false'


@pytest.fixture
def example_rates():
    """Rate schedule of the worked example (20% / 5% / 3% / 10%)."""
    return CustomsRates(dd="0.2", rtl="0.05", rdl="0.03", tvs="0.1")


@pytest.fixture
def guinea_rates():
    """Reference Guinean schedule."""
    return CustomsRates(
        dd="0.20",
        rtl="0.02",
        rdl="0.015",
        tvs="0.18",
        last_update=datetime(2026, 1, 1),
        source="Décret Gouvernemental 2026-01 / Customs Authority",
        version_id="2026-01-v1"
    )


@pytest.fixture
def make_expense():
    """Factory for ledger entries."""
    def _make(amount, type=ExpenseType.PROVISION, paid=True, category="Autre", description=None):
        return Expense(
            description=description or f"{type} {amount}",
            amount=amount,
            type=type,
            paid=paid,
            category=category
        )
    return _make


@pytest.fixture
def make_shipment():
    """Factory for shipments with a given ledger and, by default, a verified BL."""
    def _make(expenses=None, tracking_number="IM4-26-123456-789-0-GN", bl_status=DocumentStatus.VERIFIED):
        documents = []
        if bl_status is not None:
            documents.append(ShipmentDocument(name="BL MEDU1234567.pdf", type=DocumentType.BL, status=bl_status))
        return Shipment(
            tracking_number=tracking_number,
            bl_number="MEDU1234567",
            client_name="Soguiplast SARL",
            expenses=list(expenses or []),
            documents=documents
        )
    return _make


@pytest.fixture
def funded_shipment(make_expense, make_shipment):
    """Shipment with 8M of paid provisions and 3M of paid disbursements."""
    return make_shipment([
        make_expense(5_000_000, ExpenseType.PROVISION),
        make_expense(3_000_000, ExpenseType.PROVISION),
        make_expense(2_000_000, ExpenseType.DISBURSEMENT, category="Port"),
        make_expense(1_000_000, ExpenseType.DISBURSEMENT, category="Logistique"),
    ])


@pytest.fixture
def underfunded_shipment(make_expense, make_shipment):
    """Shipment whose 3M customs liquidation exceeds its 1M provision."""
    return make_shipment([
        make_expense(1_000_000, ExpenseType.PROVISION),
        make_expense(
            3_000_000,
            ExpenseType.DISBURSEMENT,
            paid=False,
            category="Douane",
            description="Liquidation douane"
        ),
    ])
