"""
FinPlan Tax Calculator
Pure Python, deterministic. Same input → same output.

Marginal slab tax, then surcharge on the base tax, then 4% cess on
(base tax + surcharge). Arithmetic runs in Decimal and every monetary
component is rounded half-up to 2 dp exactly once, so the reported
total always equals base_tax + surcharge + cess to the paisa.
"""
from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Mapping, Optional

from finplan.tax.deductions import apply_caps, parse_breakdown, parse_regime
from finplan.tax.schemas import Regime, TaxResult, TaxSlab
from finplan.tax.slabs import CESS_RATE, slabs_for, surcharge_rate
from finplan.validation import check_amount, raise_if_any

logger = logging.getLogger(__name__)

_CENT = Decimal("0.01")
_HUNDRED = Decimal(100)


def round_money(value: Decimal) -> Decimal:
    """Round half-up to 2 decimal places."""
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def slab_tax(taxable_income: Decimal, slabs: Iterable[TaxSlab]) -> Decimal:
    """
    Progressive tax: each slab taxes only the part of taxable_income inside it.
    Stops at the first slab whose lower bound is at or above taxable_income.
    """
    tax = Decimal(0)
    for slab in slabs:
        lower = Decimal(str(slab.lower_bound))
        if taxable_income <= lower:
            break
        upper = Decimal(str(slab.upper_bound))
        tax += (min(taxable_income, upper) - lower) * Decimal(str(slab.rate)) / _HUNDRED
    return tax


def build_tax_result(
    gross_income: Decimal,
    regime: Regime,
    deduction_total: Decimal,
    deduction_breakdown: Optional[Mapping[str, float]] = None,
) -> TaxResult:
    """
    Compute a TaxResult from inputs that have already been validated.

    The new regime ignores deduction_total; its reported deductions are 0.
    """
    if regime is Regime.new:
        deduction_total = Decimal(0)
        taxable = gross_income
    else:
        taxable = max(Decimal(0), gross_income - deduction_total)

    raw_base = slab_tax(taxable, slabs_for(regime))
    base_tax = round_money(raw_base)
    surcharge = round_money(raw_base * surcharge_rate(taxable) / _HUNDRED)
    cess = round_money((base_tax + surcharge) * CESS_RATE / _HUNDRED)
    total = base_tax + surcharge + cess

    effective_rate = float(total / gross_income) if gross_income > 0 else 0.0

    return TaxResult(
        regime=regime,
        gross_income=float(gross_income),
        total_deductions=float(deduction_total),
        taxable_income=float(taxable),
        base_tax=float(base_tax),
        surcharge=float(surcharge),
        cess=float(cess),
        total=float(total),
        effective_rate=effective_rate,
        deduction_breakdown=dict(deduction_breakdown or {}),
    )


def compute_tax(gross_income: Any, regime: Any, deduction_total: Any = 0) -> TaxResult:
    """
    Tax for a gross income and an already-aggregated deduction total.

    Raises:
        EngineValidationError: negative/non-numeric amounts or unknown regime.
    """
    violations: list[dict] = []
    gross = check_amount(violations, "gross_income", gross_income)
    resolved = parse_regime(violations, regime)
    deductions = check_amount(violations, "deduction_total", deduction_total)
    raise_if_any(violations)

    return build_tax_result(gross, resolved, deductions)


def calculate_tax(gross_income: Any, regime: Any, deductions: Any = None) -> TaxResult:
    """
    Tax for a gross income under one regime, given an itemised deduction breakdown.

    Deductions are capped per section and per combined group before use; under
    the new regime they are validated but contribute nothing.

    Raises:
        EngineValidationError: every input problem found, reported together.
    """
    violations: list[dict] = []
    gross = check_amount(violations, "gross_income", gross_income)
    resolved = parse_regime(violations, regime)
    claims = parse_breakdown(violations, deductions)
    raise_if_any(violations)

    aggregated = apply_caps(claims, resolved)
    result = build_tax_result(
        gross,
        resolved,
        Decimal(str(aggregated.total)),
        aggregated.applied,
    )
    logger.debug(
        "Tax calculated regime=%s sections=%d surcharge_applied=%s",
        resolved.value,
        len(claims),
        result.surcharge > 0,
    )
    return result


__all__ = [
    "round_money",
    "slab_tax",
    "build_tax_result",
    "compute_tax",
    "calculate_tax",
]
