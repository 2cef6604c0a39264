# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tariff lookup and contextual duty calculation.

Resolves the rates that actually apply to a declaration (HS heading, customs
regime, exemption scheme) and runs them through calculate_customs_duties.
DD rates follow the ECOWAS common external tariff bands:

    0%  essential social goods
    5%  raw materials and capital goods
    10% intermediate goods
    20% final consumer goods
    35% specific goods (tobacco, alcohol, jewellery)
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple

from transit_core.domain.customs import (
    CustomsDutiesBreakdown,
    RatesLike,
    calculate_customs_duties,
    get_rate,
)
from transit_core.models.entities import CustomsRates
from transit_core.models.enums import CustomsRegime, ExemptionType, HsCategory, TaxCode

logger = logging.getLogger(__name__)


DEFAULT_DD_RATE = Decimal("0.20")
HIGH_VALUE_THRESHOLD = Decimal("100000000")


@dataclass(frozen=True)
class HsCodeEntry:
    """Harmonized System heading with its customs duty band."""
    code: str
    description: str
    dd_rate: Decimal
    category: HsCategory
    examples: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ExemptionInfo:
    """Exemption scheme and the taxes it waives."""
    type: ExemptionType
    description: str
    taxes_exempted: Tuple[TaxCode, ...]
    required_documents: Tuple[str, ...]


def _hs(code, description, rate, category, *examples):
    return HsCodeEntry(code, description, Decimal(rate), category, tuple(examples))


HS_CODE_DATABASE: Dict[str, HsCodeEntry] = {entry.code: entry for entry in [
    _hs('3002', 'Essential medicines (vaccines, sera)', '0', HsCategory.ESSENTIAL,
        'COVID vaccines', 'Antimalarials', 'Antibiotics'),
    _hs('1001', 'Wheat and meslin', '0', HsCategory.ESSENTIAL, 'Soft wheat', 'Durum wheat'),
    _hs('1006', 'Rice', '0', HsCategory.ESSENTIAL, 'Milled rice', 'Broken rice', 'Paddy rice'),
    _hs('3920', 'Plates and sheets of plastics', '0.05', HsCategory.RAW_MATERIAL,
        'Polyethylene', 'Polypropylene', 'PVC'),
    _hs('7208', 'Flat-rolled products of iron or steel', '0.05', HsCategory.RAW_MATERIAL,
        'Rolled sheets', 'Reinforcing bars'),
    _hs('8471', 'Automatic data processing machines', '0.05', HsCategory.RAW_MATERIAL,
        'Computers', 'Servers', 'Processing units'),
    _hs('8429', 'Bulldozers, graders and excavators', '0.05', HsCategory.RAW_MATERIAL,
        'Hydraulic excavator', 'Bulldozer', 'Loader'),
    _hs('3926', 'Articles of plastics', '0.10', HsCategory.INTERMEDIATE,
        'Plastic household articles', 'Containers'),
    _hs('7326', 'Articles of iron or steel', '0.10', HsCategory.INTERMEDIATE,
        'Steel structures', 'Forged parts'),
    _hs('8481', 'Taps, cocks and valves', '0.10', HsCategory.INTERMEDIATE,
        'Valves', 'Industrial taps'),
    _hs('8704', 'Motor vehicles for the transport of goods', '0.10', HsCategory.INTERMEDIATE,
        'Trucks', 'Pick-up', 'Vans'),
    _hs('8502', 'Electric generating sets', '0.10', HsCategory.INTERMEDIATE,
        'Diesel generators', 'Alternators'),
    _hs('8703', 'Passenger motor cars', '0.20', HsCategory.FINAL_GOODS,
        'Private cars', 'SUV', 'Sedans'),
    _hs('8528', 'Television receivers and monitors', '0.20', HsCategory.FINAL_GOODS,
        'LED TV', 'Plasma TV', 'Monitors'),
    _hs('6403', 'Footwear with leather uppers', '0.20', HsCategory.FINAL_GOODS,
        'Dress shoes', 'Boots'),
    _hs('2402', 'Cigars and cigarettes', '0.35', HsCategory.SPECIFIC,
        'Cigarettes', 'Cigars', 'Rolling tobacco'),
    _hs('2208', 'Undenatured ethyl alcohol and spirits', '0.35', HsCategory.SPECIFIC,
        'Whisky', 'Vodka', 'Rum', 'Cognac'),
    _hs('7113', 'Articles of jewellery', '0.35', HsCategory.SPECIFIC,
        'Gold jewellery', 'Silver jewellery', 'Precious articles'),
]}

_ALL_TAXES = (TaxCode.DD, TaxCode.RTL, TaxCode.RDL, TaxCode.TVS)

EXEMPTIONS: Dict[ExemptionType, ExemptionInfo] = {
    ExemptionType.DIPLOMATIC: ExemptionInfo(
        ExemptionType.DIPLOMATIC,
        'Diplomatic and consular corps (Vienna Convention)',
        _ALL_TAXES,
        ('Diplomatic card', 'Foreign Affairs ministry certificate', 'Validated goods list'),
    ),
    ExemptionType.HUMANITARIAN: ExemptionInfo(
        ExemptionType.HUMANITARIAN,
        'Humanitarian aid (WFP, UNHCR, approved NGOs)',
        _ALL_TAXES,
        ('Customs exemption certificate', 'Agreement with the Guinean State', 'Planning ministry certificate'),
    ),
    ExemptionType.GOVERNMENT: ExemptionInfo(
        ExemptionType.GOVERNMENT,
        'Guinean public administration',
        _ALL_TAXES,
        ('Exemption decision', 'Administration purchase order', 'Budget approval'),
    ),
    ExemptionType.MINING: ExemptionInfo(
        ExemptionType.MINING,
        'Mining equipment (2011 Mining Code)',
        (TaxCode.DD,),
        ('Mining agreement', 'Mines ministry certificate', 'Approved investment programme'),
    ),
    ExemptionType.AGRICULTURE: ExemptionInfo(
        ExemptionType.AGRICULTURE,
        'Agricultural inputs (seeds, fertiliser, tractors)',
        (TaxCode.DD, TaxCode.TVS),
        ('Agriculture ministry authorisation', 'Phytosanitary certificate', 'Pro forma invoice'),
    ),
    ExemptionType.HEALTH: ExemptionInfo(
        ExemptionType.HEALTH,
        'WHO essential medicines list',
        (TaxCode.DD, TaxCode.TVS),
        ('National pharmacy authorisation', 'WHO conformity certificate', 'Health ministry visa'),
    ),
    ExemptionType.EDUCATION: ExemptionInfo(
        ExemptionType.EDUCATION,
        'Educational material (books, school equipment)',
        (TaxCode.DD, TaxCode.TVS),
        ('Education ministry certificate', 'Detailed equipment list'),
    ),
    ExemptionType.CEDEAO: ExemptionInfo(
        ExemptionType.CEDEAO,
        'ECOWAS originating products (certificate of origin)',
        (TaxCode.DD,),
        ('ECOWAS certificate of origin (form C)', 'Commercial invoice', 'Chamber of commerce certificate'),
    ),
    ExemptionType.TEMPORARY: ExemptionInfo(
        ExemptionType.TEMPORARY,
        'Temporary admission (site equipment, trade fairs)',
        (TaxCode.DD, TaxCode.TVS),
        ('Re-export undertaking', 'Bank guarantee', 'Justified length of stay'),
    ),
    ExemptionType.TRANSIT: ExemptionInfo(
        ExemptionType.TRANSIT,
        'International transit (Mali, Burkina Faso, ...)',
        _ALL_TAXES,
        ('Transit declaration', 'Transit bond', 'Defined itinerary'),
    ),
}

_SUSPENSIVE_REGIMES = (CustomsRegime.IT.value, CustomsRegime.AT.value)


@dataclass
class ContextualDutiesResult:
    """Duties for a declaration together with the rates that produced them."""
    breakdown: CustomsDutiesBreakdown
    applied_rates: CustomsRates
    total_cost: Decimal
    hs_code: Optional[str] = None
    commodity_category: Optional[str] = None
    exemptions: List[ExemptionInfo] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    scenario_name: Optional[str] = None


def get_dd_rate_by_hs_code(hs_code: str) -> Decimal:
    """
    Look up the DD rate of an HS code.

    Tries the exact code, then its 4-digit heading, and falls back to the
    20% final goods band.
    """
    code = str(hs_code or '').replace('.', '').strip()

    entry = HS_CODE_DATABASE.get(code) or HS_CODE_DATABASE.get(code[:4])
    if entry:
        return entry.dd_rate

    logger.warning(
        "HS code not found, default DD rate applied",
        extra={"hs_code": hs_code, "dd_rate": str(DEFAULT_DD_RATE)}
    )
    return DEFAULT_DD_RATE


def search_hs_codes(keyword: str) -> List[HsCodeEntry]:
    """Find HS headings whose description or examples contain a keyword."""
    needle = str(keyword or '').strip().lower()
    if not needle:
        return []

    return [
        entry for entry in HS_CODE_DATABASE.values()
        if needle in entry.description.lower()
        or any(needle in example.lower() for example in entry.examples)
    ]


def suggest_hs_code(description: str) -> Optional[str]:
    results = search_hs_codes(description)
    return results[0].code if results else None


def _normalize_regime(regime: Any) -> Optional[str]:
    if regime is None:
        return None
    if isinstance(regime, CustomsRegime):
        return regime.value
    candidate = str(regime).strip().upper()
    for member in CustomsRegime:
        if member.value.upper() == candidate:
            return member.value
    raise ValueError(f"Unknown customs regime: {regime}")


def resolve_applied_rates(
    base_rates: RatesLike,
    regime: Optional[Any] = None,
    hs_code: Optional[str] = None,
    commodity_category: Optional[str] = None,
    exemption_type: Optional[Any] = None,
) -> Tuple[CustomsRates, List[ExemptionInfo], List[str]]:
    """
    Work out which rates apply to a declaration.

    The DD rate comes from the HS code when given, otherwise from a heading
    suggested by the commodity description, otherwise from base_rates.
    Transit and temporary admission suspend every duty, exports bear none,
    and an exemption scheme zeroes exactly the taxes it lists.

    Args:
        base_rates: Reference rate schedule (RTL, RDL and TVS are taken from it)
        regime: CustomsRegime or its value
        hs_code: Harmonized System code
        commodity_category: Free-text goods description
        exemption_type: ExemptionType or its value

    Returns:
        Tuple of (applied rates, exemptions applied, warnings)
    """
    warnings: List[str] = []
    exemptions: List[ExemptionInfo] = []

    rates = {name: get_rate(base_rates, name) for name in ('dd', 'rtl', 'rdl', 'tvs')}

    if hs_code:
        rates['dd'] = get_dd_rate_by_hs_code(hs_code)
    elif commodity_category:
        suggested = suggest_hs_code(commodity_category)
        if suggested:
            rates['dd'] = get_dd_rate_by_hs_code(suggested)
            warnings.append(f"Suggested HS code: {suggested} (check before filing)")

    regime_value = _normalize_regime(regime)

    if regime_value in _SUSPENSIVE_REGIMES:
        exemptions.append(EXEMPTIONS[ExemptionType.TRANSIT])
        rates = dict.fromkeys(rates, Decimal(0))
        warnings.append(f"Regime {regime_value}: duties suspended (bond required)")
    elif regime_value == CustomsRegime.EXPORT.value:
        rates = dict.fromkeys(rates, Decimal(0))
        warnings.append("Export: no import duties")
    elif exemption_type:
        exemption = EXEMPTIONS[ExemptionType(exemption_type)]
        exemptions.append(exemption)
        for tax in exemption.taxes_exempted:
            rates[tax.value.lower()] = Decimal(0)
        warnings.append(f"Exemption {exemption.type.value} applied")

    applied = CustomsRates(**rates)
    if isinstance(base_rates, CustomsRates):
        applied = applied.model_copy(update={
            'last_update': base_rates.last_update,
            'source': base_rates.source,
            'version_id': base_rates.version_id,
        })

    return applied, exemptions, warnings


def calculate_contextual_duties(
    fob: Any,
    freight: Any,
    insurance: Any,
    base_rates: RatesLike,
    regime: Optional[Any] = None,
    hs_code: Optional[str] = None,
    commodity_category: Optional[str] = None,
    origin: Optional[str] = None,
    exemption_type: Optional[Any] = None,
) -> ContextualDutiesResult:
    """
    Calculate duties for a declaration in its customs context.

    Raises:
        ValueError: If the CAF value is not positive
    """
    applied, exemptions, warnings = resolve_applied_rates(
        base_rates,
        regime=regime,
        hs_code=hs_code,
        commodity_category=commodity_category,
        exemption_type=exemption_type,
    )

    breakdown = calculate_customs_duties(fob, freight, insurance, applied)
    if breakdown.value_caf <= 0:
        raise ValueError("CAF value must be positive")

    if origin and ('CEDEAO' in origin.upper() or 'ECOWAS' in origin.upper()):
        warnings.append("ECOWAS origin: check the certificate of origin for a DD exemption")

    if breakdown.value_caf > HIGH_VALUE_THRESHOLD:
        warnings.append("High value: a customs inspector valuation check is likely")

    logger.debug(
        "Contextual duties calculated",
        extra={
            "hs_code": hs_code,
            "regime": _normalize_regime(regime),
            "value_caf": str(breakdown.value_caf),
            "total_duties": str(breakdown.total_duties),
        }
    )

    return ContextualDutiesResult(
        breakdown=breakdown,
        applied_rates=applied,
        total_cost=breakdown.value_caf + breakdown.total_duties,
        hs_code=hs_code,
        commodity_category=commodity_category,
        exemptions=exemptions,
        warnings=warnings,
    )


def compare_scenarios(scenarios: Iterable[Dict[str, Any]], base_rates: RatesLike) -> List[ContextualDutiesResult]:
    """
    Calculate several declarations side by side.

    Each scenario is a dict with a "name" and the keyword arguments of
    calculate_contextual_duties (fob, freight, insurance, regime, ...).
    """
    results = []
    for scenario in scenarios:
        params = dict(scenario)
        name = params.pop('name', None)
        result = calculate_contextual_duties(base_rates=base_rates, **params)
        result.scenario_name = name
        results.append(result)
    return results
