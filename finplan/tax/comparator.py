"""
Regime comparison — runs the calculator for both regimes on the same income
and deduction claim, and recommends the cheaper one.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Mapping

from finplan.tax.calculator import build_tax_result
from finplan.tax.deductions import apply_caps, parse_breakdown
from finplan.tax.schemas import DeductionSection, Regime, RegimeComparison, TaxResult
from finplan.validation import check_amount, raise_if_any

logger = logging.getLogger(__name__)


def _result_for(gross: Decimal, regime: Regime, claims: Mapping[DeductionSection, Decimal]) -> TaxResult:
    aggregated = apply_caps(claims, regime)
    return build_tax_result(gross, regime, Decimal(str(aggregated.total)), aggregated.applied)


def recommend(old: TaxResult, new: TaxResult) -> RegimeComparison:
    """Lower total wins; an exact tie goes to the new regime."""
    if old.total < new.total:
        recommended = Regime.old
    else:
        recommended = Regime.new
    savings = abs(Decimal(str(old.total)) - Decimal(str(new.total)))
    return RegimeComparison(old=old, new=new, recommended=recommended, savings=float(savings))


def compare_claims(gross: Decimal, claims: Mapping[DeductionSection, Decimal]) -> RegimeComparison:
    """Compare regimes for inputs that have already been validated."""
    return recommend(
        _result_for(gross, Regime.old, claims),
        _result_for(gross, Regime.new, claims),
    )


def compare_regimes(gross_income: Any, deductions: Any = None) -> RegimeComparison:
    """
    Compare old and new regime tax for the same income and deduction claim.

    Raises:
        EngineValidationError: negative income or a malformed breakdown.
    """
    violations: list[dict] = []
    gross = check_amount(violations, "gross_income", gross_income)
    claims = parse_breakdown(violations, deductions)
    raise_if_any(violations)

    comparison = compare_claims(gross, claims)
    logger.info(
        "Regimes compared recommended=%s sections=%d",
        comparison.recommended.value,
        len(claims),
    )
    return comparison


__all__ = ["recommend", "compare_claims", "compare_regimes"]
