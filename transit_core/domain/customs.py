# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Customs duty calculation for imports into Guinea.

    CAF  = FOB + freight + insurance
    DD   = CAF x dd
    RTL  = CAF x rtl
    RDL  = CAF x rdl
    TVS  = (CAF + DD) x tvs
    total duties = DD + RTL + RDL + TVS

Arithmetic is exact decimal; each output field is rounded half-up to two
decimals once all arithmetic is done, so totals are not re-derived from
rounded parts.
"""

from dataclasses import dataclass
from decimal import Context, Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Any, Dict, Mapping, Union

from transit_core.models.base import to_decimal
from transit_core.models.entities import CustomsRates


TWOPLACES = Decimal("0.01")
FOURPLACES = Decimal("0.0001")
RATE_FIELDS = ('dd', 'rtl', 'rdl', 'tvs')

MONEY_CONTEXT = Context(prec=28, rounding=ROUND_HALF_UP)

RatesLike = Union[CustomsRates, Mapping[str, Any]]


@dataclass(frozen=True)
class CustomsDutiesBreakdown:
    """Detailed customs duties, amounts in GNF rounded to 2 decimals."""
    value_caf: Decimal
    dd: Decimal
    rtl: Decimal
    rdl: Decimal
    tvs: Decimal
    total_duties: Decimal
    taxable_base_tvs: Decimal

    def to_dict(self) -> Dict[str, str]:
        return {
            'value_caf': str(self.value_caf),
            'dd': str(self.dd),
            'rtl': str(self.rtl),
            'rdl': str(self.rdl),
            'tvs': str(self.tvs),
            'total_duties': str(self.total_duties),
            'taxable_base_tvs': str(self.taxable_base_tvs),
        }


def _round_money(value: Decimal) -> Decimal:
    return value.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def get_rate(rates: RatesLike, name: str) -> Decimal:
    """Read one rate from a CustomsRates model or a plain mapping."""
    if isinstance(rates, Mapping):
        value = rates[name]
    else:
        value = getattr(rates, name)
    return to_decimal(value)


def calculate_customs_duties(fob: Any, freight: Any, insurance: Any, rates: RatesLike) -> CustomsDutiesBreakdown:
    """
    Calculate all customs duties for a shipment.

    Args:
        fob: Free-on-board value of the goods (GNF)
        freight: Freight cost (GNF)
        insurance: Insurance cost (GNF)
        rates: Rate schedule (CustomsRates or mapping with dd, rtl, rdl, tvs)

    Returns:
        CustomsDutiesBreakdown
    """
    with localcontext(MONEY_CONTEXT):
        caf = to_decimal(fob) + to_decimal(freight) + to_decimal(insurance)

        dd = caf * get_rate(rates, 'dd')
        rtl = caf * get_rate(rates, 'rtl')
        rdl = caf * get_rate(rates, 'rdl')

        taxable_base_tvs = caf + dd
        tvs = taxable_base_tvs * get_rate(rates, 'tvs')

        total_duties = dd + rtl + rdl + tvs

        return CustomsDutiesBreakdown(
            value_caf=_round_money(caf),
            dd=_round_money(dd),
            rtl=_round_money(rtl),
            rdl=_round_money(rdl),
            tvs=_round_money(tvs),
            total_duties=_round_money(total_duties),
            taxable_base_tvs=_round_money(taxable_base_tvs),
        )


def validate_customs_rates(rates: RatesLike) -> bool:
    """Check that the four rates are numeric fractions within [0, 1]."""
    try:
        values = [get_rate(rates, name) for name in RATE_FIELDS]
    except (KeyError, AttributeError, TypeError, InvalidOperation):
        return False

    return all(value.is_finite() and Decimal(0) <= value <= Decimal(1) for value in values)


def calculate_duties_percentage(breakdown: CustomsDutiesBreakdown) -> Decimal:
    """
    Share of the CAF value represented by total duties, as a fraction.

    Returns 0 when the CAF value is 0.
    """
    if breakdown.value_caf == 0:
        return Decimal(0)
    with localcontext(MONEY_CONTEXT):
        return (breakdown.total_duties / breakdown.value_caf).quantize(FOURPLACES, rounding=ROUND_HALF_UP)
