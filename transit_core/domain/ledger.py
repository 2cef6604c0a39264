# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Payment and provision ledger logic for shipment files.

The client deposits provisions; the broker pays disbursements on the
client's behalf, customs liquidations among them. Only settled entries
count towards the available balance:

    balance = paid provisions - paid disbursements

Fees are reported separately and do not affect the balance. Every function
recomputes from the expense list; nothing is cached.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_CEILING, ROUND_HALF_UP
from typing import Iterable, List, Optional

from transit_core.models.entities import Expense, Shipment
from transit_core.models.enums import ExpenseType


SUSPICIOUS_AMOUNT_THRESHOLD = Decimal("100000000")
PROVISION_SAFETY_MARGIN = Decimal("1.10")

REPORT_WIDTH = 60
GROUP_SEPARATOR = "\u202f"


@dataclass(frozen=True)
class Balance:
    """Ledger totals of a shipment, in GNF."""
    provisions: Decimal
    paid_provisions: Decimal
    disbursements: Decimal
    paid_disbursements: Decimal
    fees: Decimal
    balance: Decimal


@dataclass
class PaymentResult:
    """Outcome of a liquidation payment check."""
    success: bool
    message: str
    required_amount: Optional[Decimal] = None
    current_balance: Optional[Decimal] = None


@dataclass
class LiquidationCheck:
    """Outcome of the liquidation amount plausibility check."""
    valid: bool
    reason: Optional[str] = None


def _total(expenses: Iterable[Expense]) -> Decimal:
    return sum((expense.amount for expense in expenses), Decimal(0))


def calculate_balance(shipment: Shipment) -> Balance:
    """
    Compute the ledger totals of a shipment.

    Args:
        shipment: Shipment with its expenses

    Returns:
        Balance with balance = paid provisions - paid disbursements
    """
    provisions = [e for e in shipment.expenses if e.type == ExpenseType.PROVISION]
    disbursements = [e for e in shipment.expenses if e.type == ExpenseType.DISBURSEMENT]
    fees = [e for e in shipment.expenses if e.type == ExpenseType.FEE]

    paid_provisions = _total(e for e in provisions if e.paid)
    paid_disbursements = _total(e for e in disbursements if e.paid)

    return Balance(
        provisions=_total(provisions),
        paid_provisions=paid_provisions,
        disbursements=_total(disbursements),
        paid_disbursements=paid_disbursements,
        fees=_total(fees),
        balance=paid_provisions - paid_disbursements,
    )


def find_pending_liquidation(shipment: Shipment) -> Optional[Expense]:
    """
    Find the customs liquidation awaiting payment.

    A liquidation is an unpaid DISBURSEMENT in the "Douane" category. When
    several are pending, the first one in ledger order is returned.
    """
    for expense in shipment.expenses:
        if expense.is_liquidation():
            return expense
    return None


def can_pay_liquidation(shipment: Shipment) -> PaymentResult:
    """
    Check whether the available balance covers the pending liquidation.

    Args:
        shipment: Shipment with its expenses

    Returns:
        PaymentResult; on insufficient funds required_amount holds the shortfall
    """
    liquidation = find_pending_liquidation(shipment)
    if liquidation is None:
        return PaymentResult(success=False, message="No pending customs liquidation found.")

    balance = calculate_balance(shipment).balance

    if balance < liquidation.amount:
        return PaymentResult(
            success=False,
            message=(
                f"Insufficient balance: {format_gnf(balance)} available, "
                f"{format_gnf(liquidation.amount)} required."
            ),
            required_amount=liquidation.amount - balance,
            current_balance=balance,
        )

    return PaymentResult(success=True, message="Payment authorized.", current_balance=balance)


def is_provision_required(shipment: Shipment) -> bool:
    """True when a pending liquidation exceeds the available balance."""
    result = can_pay_liquidation(shipment)
    return not result.success and result.required_amount is not None and result.required_amount > 0


def get_recommended_provision_amount(shipment: Shipment) -> Decimal:
    """
    Provision to request from the client before paying the liquidation.

    The shortfall plus a 10% safety margin, rounded up to the whole franc;
    0 when no provision is needed.
    """
    result = can_pay_liquidation(shipment)
    if not result.required_amount or result.required_amount <= 0:
        return Decimal(0)
    return (result.required_amount * PROVISION_SAFETY_MARGIN).to_integral_value(rounding=ROUND_CEILING)


def calculate_balance_after_payment(shipment: Shipment) -> Optional[Decimal]:
    """Balance left once the pending liquidation is paid, None without one."""
    liquidation = find_pending_liquidation(shipment)
    if liquidation is None:
        return None
    return calculate_balance(shipment).balance - liquidation.amount


def validate_liquidation_amount(
    liquidation: Expense,
    suspicious_threshold: Decimal = SUSPICIOUS_AMOUNT_THRESHOLD,
) -> LiquidationCheck:
    """
    Plausibility check of a liquidation amount before it is paid.

    Amounts above the threshold are treated as suspect (typing error or
    tampering); zero and negative amounts are invalid.
    """
    if liquidation.amount > suspicious_threshold:
        return LiquidationCheck(valid=False, reason=f"Suspicious amount: {format_gnf(liquidation.amount)}")
    if liquidation.amount <= 0:
        return LiquidationCheck(valid=False, reason="Amount is zero or negative")
    return LiquidationCheck(valid=True)


def validate_financial_integrity(shipment: Shipment) -> List[str]:
    """
    Detect ledger anomalies.

    Checks, in order: negative provision entries, paid disbursements above
    paid provisions, any entry above 100 000 000 GNF, and a pending customs
    liquidation on a file without a verified bill of lading.

    Returns:
        Anomaly messages, empty when the ledger is consistent
    """
    issues = []
    balance = calculate_balance(shipment)

    if any(e.type == ExpenseType.PROVISION and e.amount < 0 for e in shipment.expenses):
        issues.append("Negative provisions detected")

    if balance.paid_disbursements > balance.paid_provisions:
        issues.append("Paid disbursements exceed provisions received")

    if any(e.amount > SUSPICIOUS_AMOUNT_THRESHOLD for e in shipment.expenses):
        issues.append(f"Suspicious amount detected (> {format_gnf(SUSPICIOUS_AMOUNT_THRESHOLD)})")

    if find_pending_liquidation(shipment) is not None and not shipment.has_verified_bl():
        issues.append("Liquidation without verified BL")

    return issues


def format_gnf(amount) -> str:
    """
    Format an amount in Guinean francs.

    Digits are grouped by threes with a narrow no-break space (U+202F), as
    French number formatting does: 1 500 000 GNF.
    """
    value = Decimal(str(amount)).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    return f"{int(value):,}".replace(",", GROUP_SEPARATOR) + " GNF"


def generate_financial_report(shipment: Shipment) -> str:
    """
    Render a plain-text financial summary of a shipment.

    Sections: provisions, disbursements, fees, available balance, then the
    pending liquidation and detected anomalies when there are any.
    """
    balance = calculate_balance(shipment)
    liquidation = find_pending_liquidation(shipment)
    issues = validate_financial_integrity(shipment)

    lines = [
        f"FINANCIAL REPORT - {shipment.tracking_number}",
        "=" * REPORT_WIDTH,
        "",
        "PROVISIONS:",
        f"   Total: {format_gnf(balance.provisions)}",
        f"   Paid: {format_gnf(balance.paid_provisions)}",
        "",
        "DISBURSEMENTS:",
        f"   Total: {format_gnf(balance.disbursements)}",
        f"   Paid: {format_gnf(balance.paid_disbursements)}",
        "",
        "FEES:",
        f"   Total: {format_gnf(balance.fees)}",
        "",
        f"AVAILABLE BALANCE: {format_gnf(balance.balance)}",
        "",
    ]

    if liquidation is not None:
        payment = can_pay_liquidation(shipment)
        lines += [
            "PENDING LIQUIDATION:",
            f"   Amount: {format_gnf(liquidation.amount)}",
            f"   Description: {liquidation.description}",
            f"   Status: {'Payable' if payment.success else 'Insufficient funds'}",
        ]
        if payment.required_amount:
            lines.append(f"   Shortfall: {format_gnf(payment.required_amount)}")
        lines.append("")

    if issues:
        lines.append("ANOMALIES DETECTED:")
        lines += [f"   - {issue}" for issue in issues]

    return "\n".join(lines) + "\n"
