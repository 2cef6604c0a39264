# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Business rule enforcement acceptance tests.

Walks a shipment file from opening to customs liquidation payment, checking
that identifiers, duty amounts and ledger rules hold together end to end.
"""

import logging
import pytest
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from transit_core.domain.containers import validate_container_number
from transit_core.domain.customs import calculate_customs_duties
from transit_core.domain.ledger import (
    calculate_balance,
    can_pay_liquidation,
    generate_financial_report,
    get_recommended_provision_amount,
    validate_financial_integrity,
)
from transit_core.domain.tracking import generate_tracking_number, validate_tracking_number
from transit_core.models import (
    CreateExpenseRequest,
    CreateShipmentRequest,
    CustomsCalculationRequest,
    CustomsRates,
    DocumentStatus,
    DocumentType,
    Shipment,
    ShipmentDocument,
)
from transit_core.services import CustomsRatesService, LiquidationPaymentService

NOW = datetime(2026, 3, 2, 9, 30, tzinfo=timezone.utc)


class TestImportWorkflow:
    """Opening a file, estimating duties and paying the liquidation."""

    @pytest.fixture(autouse=True)
    def setup_workflow(self, monkeypatch):
        """Open an IM4 shipment with reference rates."""
        monkeypatch.delenv("CUSTOMS_RATES_API_URL", raising=False)
        monkeypatch.delenv("SUSPICIOUS_THRESHOLD", raising=False)
        monkeypatch.setenv("ENVIRONMENT", "test")

        self.request = CreateShipmentRequest(
            client_name="Soguiplast SARL",
            description="Polyethylene granules, 40 pallets",
            origin="Antwerp, BE",
            eta=date.today() + timedelta(days=12),
            shipping_line="Maersk",
            bl_number="MEDU 123 4567",
            container_number="CSQU3054383",
            customs_regime="IM4",
        )
        self.shipment = Shipment(
            tracking_number=generate_tracking_number(self.request.customs_regime, now=NOW),
            bl_number=self.request.bl_number,
            client_name=self.request.client_name,
            container_number=self.request.container_number,
            shipping_line=self.request.shipping_line,
            customs_regime=self.request.customs_regime,
            origin=self.request.origin,
            destination=self.request.destination,
        )
        self.rates = CustomsRatesService().fetch_current_rates(now=NOW)
        self.payments = LiquidationPaymentService()

    def record(self, **fields):
        expense = CreateExpenseRequest(**fields).to_expense()
        self.shipment.add_expense(expense)
        return expense

    def test_identifiers_verifiable_without_state(self):
        assert validate_tracking_number(self.shipment.tracking_number, now=NOW).is_valid
        assert self.shipment.bl_number == "MEDU1234567"
        assert validate_container_number(self.shipment.container_number).is_valid

    def test_duty_estimate_becomes_liquidation(self):
        estimate = CustomsCalculationRequest(fob=40_000_000, freight=3_000_000, insurance=500_000, hs_code="3920")
        result = estimate.calculate(self.rates)

        # 5% band: CAF 43.5M, DD 2.175M, RTL 870k, RDL 652.5k, TVS 18% of 45.675M
        assert result.breakdown.value_caf == Decimal("43500000")
        assert result.breakdown.dd == Decimal("2175000")
        assert result.breakdown.rtl == Decimal("870000")
        assert result.breakdown.rdl == Decimal("652500")
        assert result.breakdown.tvs == Decimal("8221500")
        assert result.breakdown.total_duties == Decimal("11919000")

        self.record(description="Provision client", amount=5_000_000, type="PROVISION", paid=True)
        liquidation = self.record(
            description="Liquidation douane",
            amount=result.breakdown.total_duties,
            category="Douane",
            type="DISBURSEMENT",
        )

        decision = self.payments.authorize(self.shipment)
        assert not decision.success
        assert decision.required_amount == Decimal("6919000")
        assert get_recommended_provision_amount(self.shipment) == Decimal("7610900")

        self.record(description="Provision complémentaire", amount=7_610_900, type="PROVISION", paid=True)
        assert self.payments.authorize(self.shipment).success

        self.shipment.mark_expense_paid(liquidation.id)
        balance = calculate_balance(self.shipment)

        assert balance.balance == Decimal("691900")
        assert can_pay_liquidation(self.shipment).message == "No pending customs liquidation found."
        assert validate_financial_integrity(self.shipment) == []

    def test_liquidation_waits_for_verified_bl(self):
        self.record(description="Provision client", amount=5_000_000, type="PROVISION", paid=True)
        self.record(description="Liquidation douane", amount=3_000_000, category="Douane", type="DISBURSEMENT")
        bl = ShipmentDocument(name="BL MEDU1234567.pdf", type=DocumentType.BL)
        self.shipment.documents.append(bl)

        assert validate_financial_integrity(self.shipment) == ["Liquidation without verified BL"]
        assert "ANOMALIES DETECTED:\n   - Liquidation without verified BL" in generate_financial_report(self.shipment)

        self.shipment.documents[0] = bl.model_copy(update={"status": DocumentStatus.VERIFIED})

        assert validate_financial_integrity(self.shipment) == []

    def test_fees_reported_not_deducted(self):
        self.record(description="Provision client", amount=2_000_000, type="PROVISION", paid=True)
        self.record(description="Honoraires agence", amount=350_000, category="Agence", type="FEE", paid=True)

        report = generate_financial_report(self.shipment)

        assert "FEES:\n   Total: 350\u202f000 GNF" in report
        assert "AVAILABLE BALANCE: 2\u202f000\u202f000 GNF" in report

    def test_payment_attempts_are_audited(self, caplog):
        self.record(description="Liquidation douane", amount=1_000_000, category="Douane", type="DISBURSEMENT")

        with caplog.at_level(logging.INFO, logger="transit_core.services.payments"):
            self.payments.authorize(self.shipment)

        audits = [r for r in caplog.records if getattr(r, "audit_category", None) == "payment"]
        assert len(audits) == 1
        assert audits[0].tracking_number == self.shipment.tracking_number


class TestCustomsRegimeRules:
    """Regime specific duty and routing rules."""

    @pytest.fixture(autouse=True)
    def setup_rates(self):
        self.rates = CustomsRates(dd="0.2", rtl="0.05", rdl="0.03", tvs="0.1")

    def test_reference_example(self):
        breakdown = calculate_customs_duties(1_000_000, 100_000, 50_000, self.rates)

        assert (breakdown.value_caf, breakdown.total_duties) == (Decimal("1150000"), Decimal("460000"))

    def test_transit_suspends_duties(self):
        result = CustomsCalculationRequest(fob=1_000_000, regime="IT").calculate(self.rates)

        assert result.breakdown.total_duties == 0
        assert result.total_cost == Decimal("1000000")

    def test_transit_cannot_end_in_conakry(self):
        with pytest.raises(ValueError):
            CreateShipmentRequest(
                client_name="Sahel Logistique",
                description="Cement bags for Bamako",
                origin="Tema, GH",
                eta=date.today() + timedelta(days=5),
                shipping_line="MSC",
                bl_number="MSCU1234567890",
                customs_regime="IT",
            )

    def test_ecowas_exemption_keeps_levies(self):
        result = CustomsCalculationRequest(fob=1_000_000, exemption_type="CEDEAO").calculate(self.rates)

        assert result.breakdown.dd == 0
        assert result.breakdown.rtl == Decimal("50000")
        assert result.breakdown.tvs == Decimal("100000")


class TestFraudRules:
    """Anomalies block payment regardless of the balance."""

    def test_suspicious_liquidation_blocked(self, monkeypatch):
        monkeypatch.delenv("SUSPICIOUS_THRESHOLD", raising=False)
        shipment = Shipment(tracking_number=generate_tracking_number("IM4", now=NOW))
        for _ in range(3):
            shipment.add_expense(
                CreateExpenseRequest(description="Provision", amount=100_000_000, type="PROVISION", paid=True).to_expense()
            )
        shipment.add_expense(
            CreateExpenseRequest(
                description="Liquidation douane",
                amount=250_000_000,
                category="Douane",
                type="DISBURSEMENT",
            ).to_expense()
        )

        assert can_pay_liquidation(shipment).success
        decision = LiquidationPaymentService().authorize(shipment)

        assert not decision.success
        assert decision.message.startswith("Anomaly detected")
        assert "Suspicious amount detected (> 100\u202f000\u202f000 GNF)" in validate_financial_integrity(shipment)
