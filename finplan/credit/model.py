"""
FinPlan Credit Score Model — CIBIL-style weighted estimate.
Pure Python, deterministic. Same input → same output.

    score = round_half_up(Σ weight_i × normalized_value_i × 600 + 300)

clamped to [300, 900]. Grade cut-points are fixed: ≥750 Excellent,
≥650 Good, ≥550 Fair, otherwise Poor.
"""
from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional, Sequence

from finplan.credit.schemas import (
    CreditFactor,
    CreditFactorName,
    CreditGrade,
    CreditScoreResult,
    FactorContribution,
    RawCreditProfile,
)
from finplan.validation import check_count, check_range, raise_if_any

logger = logging.getLogger(__name__)

# ===========================================================================
# SCORE CONSTANTS
# ===========================================================================

MIN_SCORE = 300
MAX_SCORE = 900
SCORE_SPAN = MAX_SCORE - MIN_SCORE      # 600
FACTOR_COUNT = 5
WEIGHT_TOLERANCE = 1e-6

STANDARD_WEIGHTS: dict[CreditFactorName, float] = {
    CreditFactorName.payment_history: 0.35,
    CreditFactorName.credit_utilization: 0.30,
    CreditFactorName.credit_age: 0.15,
    CreditFactorName.credit_mix: 0.10,
    CreditFactorName.new_credit: 0.10,
}

# Grade thresholds, highest first
GRADE_THRESHOLDS: tuple[tuple[int, CreditGrade], ...] = (
    (750, CreditGrade.excellent),
    (650, CreditGrade.good),
    (550, CreditGrade.fair),
)

# Normalisation ceilings for raw behaviour
HISTORY_MONTHS_FOR_FULL = 120    # 10 years of history scores 1.0
MIX_TYPES_FOR_FULL = 5
INQUIRIES_FOR_ZERO = 10


def grade_for(score: int) -> CreditGrade:
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return CreditGrade.poor


def clamp_score(score: int) -> int:
    return max(MIN_SCORE, min(MAX_SCORE, score))


def _round_half_up(value: float) -> int:
    return int(Decimal(str(value)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def _parse_factor(violations: list[dict], index: int, item: Any) -> Optional[CreditFactor]:
    field = f"factors[{index}]"
    if isinstance(item, CreditFactor):
        name, weight, value = item.name, item.weight, item.normalized_value
    elif isinstance(item, Mapping):
        name = item.get("name")
        weight = item.get("weight")
        value = item.get("normalized_value", item.get("normalizedValue"))
    else:
        violations.append({"field": field, "issue": "Factor must be an object with weight and normalized_value."})
        return None

    before = len(violations)
    checked_weight = check_range(violations, f"{field}.weight", weight, 0.0, 1.0)
    checked_value = check_range(violations, f"{field}.normalized_value", value, 0.0, 1.0)
    if len(violations) > before:
        return None
    return CreditFactor(
        name=None if name is None else str(name),
        weight=checked_weight,
        normalized_value=checked_value,
    )


def estimate_credit_score(factors: Any) -> CreditScoreResult:
    """
    Combine five weighted, pre-normalised factors into a 300–900 score.

    Raises:
        EngineValidationError: not exactly five factors, weights not summing to
            1.0 (±1e-6), or any weight/normalized value outside [0, 1].
    """
    violations: list[dict] = []
    if isinstance(factors, (str, bytes, Mapping)) or not isinstance(factors, Sequence):
        raise_if_any([{"field": "factors", "issue": "Factors must be a list."}])
    if len(factors) != FACTOR_COUNT:
        violations.append({
            "field": "factors",
            "issue": f"Expected exactly {FACTOR_COUNT} factors, got {len(factors)}.",
        })

    parsed = [_parse_factor(violations, i, item) for i, item in enumerate(factors)]
    if all(f is not None for f in parsed) and parsed:
        weight_sum = math.fsum(f.weight for f in parsed)
        if abs(weight_sum - 1.0) > WEIGHT_TOLERANCE:
            violations.append({
                "field": "factors",
                "issue": f"Factor weights must sum to 1.0, got {weight_sum:.6f}.",
            })
    raise_if_any(violations)

    weighted = math.fsum(f.weight * f.normalized_value for f in parsed)
    score = clamp_score(_round_half_up(weighted * SCORE_SPAN + MIN_SCORE))
    grade = grade_for(score)

    logger.debug("Credit score estimated grade=%s", grade.value)
    return CreditScoreResult(
        score=score,
        grade=grade,
        breakdown=[
            FactorContribution(
                name=f.name,
                weight=f.weight,
                normalized_value=f.normalized_value,
                points=round(f.weight * f.normalized_value * SCORE_SPAN, 2),
            )
            for f in parsed
        ],
    )


def standard_factors(
    payment_history: float,
    credit_utilization: float,
    credit_age: float,
    credit_mix: float,
    new_credit: float,
) -> list[CreditFactor]:
    """Five standing factors with their standard weights, values already in [0, 1]."""
    values = {
        CreditFactorName.payment_history: payment_history,
        CreditFactorName.credit_utilization: credit_utilization,
        CreditFactorName.credit_age: credit_age,
        CreditFactorName.credit_mix: credit_mix,
        CreditFactorName.new_credit: new_credit,
    }
    return [
        CreditFactor(name=name.value, weight=weight, normalized_value=values[name])
        for name, weight in STANDARD_WEIGHTS.items()
    ]


def parse_raw_profile(violations: list[dict], raw: Any, field: str = "profile") -> Optional[RawCreditProfile]:
    if isinstance(raw, RawCreditProfile):
        raw = raw.model_dump()
    if not isinstance(raw, Mapping):
        violations.append({"field": field, "issue": "Credit profile must be an object."})
        return None

    before = len(violations)
    on_time = check_range(violations, f"{field}.on_time_payment_pct", raw.get("on_time_payment_pct"), 0, 100)
    utilization = check_range(
        violations, f"{field}.credit_utilization_pct", raw.get("credit_utilization_pct"), 0, math.inf,
    )
    months = check_range(violations, f"{field}.credit_history_months", raw.get("credit_history_months"), 0, math.inf)
    mix = check_count(violations, f"{field}.credit_mix_types", raw.get("credit_mix_types"))
    inquiries = check_count(violations, f"{field}.recent_inquiries", raw.get("recent_inquiries"))
    if len(violations) > before:
        return None
    return RawCreditProfile(
        on_time_payment_pct=on_time,
        credit_utilization_pct=utilization,
        credit_history_months=months,
        credit_mix_types=mix,
        recent_inquiries=inquiries,
    )


def normalize_credit_profile(raw: Any) -> list[CreditFactor]:
    """
    Map observed behaviour onto the five standing factors.

      payment history    = on_time_payment_pct / 100
      credit utilization = max(0, (100 - utilization_pct) / 100)   lower is better
      credit age         = min(1, history_months / 120)
      credit mix         = min(1, mix_types / 5)
      new credit         = max(0, (10 - recent_inquiries) / 10)

    Raises:
        EngineValidationError: missing or out-of-range raw values.
    """
    violations: list[dict] = []
    profile = parse_raw_profile(violations, raw)
    raise_if_any(violations)

    return standard_factors(
        payment_history=profile.on_time_payment_pct / 100,
        credit_utilization=max(0.0, (100 - profile.credit_utilization_pct) / 100),
        credit_age=min(1.0, profile.credit_history_months / HISTORY_MONTHS_FOR_FULL),
        credit_mix=min(1.0, profile.credit_mix_types / MIX_TYPES_FOR_FULL),
        new_credit=max(0.0, (INQUIRIES_FOR_ZERO - profile.recent_inquiries) / INQUIRIES_FOR_ZERO),
    )


__all__ = [
    "MIN_SCORE",
    "MAX_SCORE",
    "STANDARD_WEIGHTS",
    "GRADE_THRESHOLDS",
    "grade_for",
    "clamp_score",
    "estimate_credit_score",
    "standard_factors",
    "parse_raw_profile",
    "normalize_credit_profile",
]
