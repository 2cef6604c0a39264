# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Liquidation payment authorization with audit logging.
"""

import os
import logging
from decimal import Decimal
from typing import Optional
from opentelemetry import trace

from transit_core.domain.ledger import (
    PaymentResult,
    SUSPICIOUS_AMOUNT_THRESHOLD,
    calculate_balance,
    can_pay_liquidation,
    find_pending_liquidation,
    validate_liquidation_amount,
)
from transit_core.models.base import to_decimal
from transit_core.models.entities import Shipment

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class LiquidationPaymentService:
    """Authorizes customs liquidation payments and keeps an audit trail."""

    def __init__(self, suspicious_threshold: Optional[Decimal] = None):
        """
        Initialize the payment service.

        Args:
            suspicious_threshold: Amount above which a liquidation is refused
                (defaults to SUSPICIOUS_THRESHOLD, then 100 000 000 GNF)
        """
        if suspicious_threshold is None:
            suspicious_threshold = os.getenv("SUSPICIOUS_THRESHOLD") or SUSPICIOUS_AMOUNT_THRESHOLD
        self.suspicious_threshold = to_decimal(suspicious_threshold)

    def authorize(self, shipment: Shipment) -> PaymentResult:
        """
        Decide whether the pending liquidation of a shipment may be paid.

        The liquidation amount is checked for plausibility before the
        balance is compared with it. Every decision is audit-logged.
        """
        with tracer.start_as_current_span("payments.authorize") as span:
            span.set_attributes({
                "shipment.id": shipment.id,
                "shipment.tracking_number": shipment.tracking_number,
            })

            liquidation = find_pending_liquidation(shipment)
            if liquidation is not None:
                check = validate_liquidation_amount(liquidation, self.suspicious_threshold)
                if not check.valid:
                    logger.error(
                        "Liquidation amount rejected",
                        extra={
                            "shipment_id": shipment.id,
                            "expense_id": liquidation.id,
                            "amount": str(liquidation.amount),
                            "reason": check.reason,
                        }
                    )
                    span.set_attribute("payment.authorized", False)
                    result = PaymentResult(success=False, message=f"Anomaly detected: {check.reason}")
                    self.log_payment_attempt(shipment, False)
                    return result

            result = can_pay_liquidation(shipment)
            span.set_attribute("payment.authorized", result.success)
            self.log_payment_attempt(shipment, result.success)
            return result

    def log_payment_attempt(self, shipment: Shipment, success: bool) -> None:
        """Write the audit record of a liquidation payment attempt."""
        with tracer.start_as_current_span("payments.log_attempt") as span:
            balance = calculate_balance(shipment).balance
            liquidation = find_pending_liquidation(shipment)
            amount = liquidation.amount if liquidation is not None else None

            span_context = span.get_span_context()
            audit_entry = {
                "audit_category": "payment",
                "shipment_id": shipment.id,
                "tracking_number": shipment.tracking_number,
                "amount": str(amount) if amount is not None else None,
            }
            if span_context.is_valid:
                audit_entry["trace_id"] = format(span_context.trace_id, "032x")

            if success:
                audit_entry.update({
                    "balance_before": str(balance),
                    "balance_after": str(balance - amount if amount is not None else balance),
                })
                logger.info("Liquidation payment authorized", extra=audit_entry)
            else:
                shortfall = amount - balance if amount is not None else Decimal(0)
                audit_entry.update({
                    "balance": str(balance),
                    "shortfall": str(max(shortfall, Decimal(0))),
                })
                logger.warning("Liquidation payment refused", extra=audit_entry)
