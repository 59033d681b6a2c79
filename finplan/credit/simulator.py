"""
Scenario simulator — what-if projection of a credit score from three
behavioural levers, using fixed point deltas instead of re-running the
weighted model.

    utilization   < 30%        +20
                  30% – <50%   +10
                  50% – 70%      0
                  > 70%        -30
    new accounts  -15 each
    missed EMIs   -25 each (last 6 months)
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from finplan.credit.model import MAX_SCORE, MIN_SCORE, clamp_score, grade_for
from finplan.credit.schemas import (
    FactorImpact,
    ImpactLabel,
    ScenarioInputs,
    ScenarioLever,
    ScenarioResult,
)
from finplan.validation import check_count, check_range, raise_if_any

logger = logging.getLogger(__name__)

# (utilization strictly below, points); above the last band → UTILIZATION_HIGH_PENALTY
UTILIZATION_TIERS: tuple[tuple[float, int], ...] = (
    (30, 20),
    (50, 10),
)
UTILIZATION_NEUTRAL_MAX = 70
UTILIZATION_HIGH_PENALTY = -30

NEW_ACCOUNT_PENALTY = -15
MISSED_PAYMENT_PENALTY = -25


def utilization_impact(utilization_pct: float) -> int:
    for ceiling, points in UTILIZATION_TIERS:
        if utilization_pct < ceiling:
            return points
    if utilization_pct <= UTILIZATION_NEUTRAL_MAX:
        return 0
    return UTILIZATION_HIGH_PENALTY


def impact_label(score_change: int) -> ImpactLabel:
    if score_change > 20:
        return ImpactLabel.high
    if score_change > 10:
        return ImpactLabel.medium
    if score_change > 0:
        return ImpactLabel.low
    return ImpactLabel.negative


def _read_inputs(inputs: Any) -> Mapping:
    if isinstance(inputs, ScenarioInputs):
        return inputs.model_dump()
    if isinstance(inputs, Mapping):
        # accept both snake_case and the camelCase names used by the UI
        return {
            "credit_utilization_pct": inputs.get("credit_utilization_pct", inputs.get("creditUtilizationPct")),
            "new_accounts_opened": inputs.get("new_accounts_opened", inputs.get("newAccountsOpened", 0)),
            "missed_payments_last_6_months": inputs.get(
                "missed_payments_last_6_months", inputs.get("missedPaymentsLast6Months", 0)
            ),
        }
    return {}


def simulate_scenario(baseline_score: Any, inputs: Any) -> ScenarioResult:
    """
    Project a score from a baseline and three levers.

    per_factor_impact is always ordered utilization, new credit, missed payments.
    total_impact is the raw sum; projected_score is clamped to [300, 900].

    Raises:
        EngineValidationError: baseline outside [300, 900] or not whole,
            utilization outside [0, 100], or negative counts.
    """
    violations: list[dict] = []
    baseline = check_count(violations, "baseline_score", baseline_score)
    if baseline is not None and not MIN_SCORE <= baseline <= MAX_SCORE:
        violations.append({
            "field": "baseline_score",
            "issue": f"Baseline score must be between {MIN_SCORE} and {MAX_SCORE}.",
        })

    values = _read_inputs(inputs)
    if not values:
        violations.append({"field": "inputs", "issue": "Scenario inputs must be an object."})
    else:
        utilization = check_range(
            violations, "inputs.credit_utilization_pct", values["credit_utilization_pct"], 0, 100,
        )
        new_accounts = check_count(violations, "inputs.new_accounts_opened", values["new_accounts_opened"])
        missed = check_count(
            violations, "inputs.missed_payments_last_6_months", values["missed_payments_last_6_months"],
        )
    raise_if_any(violations)

    impacts = [
        FactorImpact(factor=ScenarioLever.credit_utilization, delta=utilization_impact(utilization)),
        FactorImpact(factor=ScenarioLever.new_credit, delta=new_accounts * NEW_ACCOUNT_PENALTY),
        FactorImpact(factor=ScenarioLever.missed_payments, delta=missed * MISSED_PAYMENT_PENALTY),
    ]
    total_impact = sum(i.delta for i in impacts)
    projected = clamp_score(baseline + total_impact)

    logger.debug("Scenario simulated total_impact=%d", total_impact)
    return ScenarioResult(
        baseline_score=baseline,
        projected_score=projected,
        projected_grade=grade_for(projected),
        total_impact=total_impact,
        impact_label=impact_label(projected - baseline),
        per_factor_impact=impacts,
    )


__all__ = [
    "UTILIZATION_TIERS",
    "NEW_ACCOUNT_PENALTY",
    "MISSED_PAYMENT_PENALTY",
    "utilization_impact",
    "impact_label",
    "simulate_scenario",
]
