"""
Credit advisor — structured improvement recommendations.

Returns action codes, priorities and expected point ranges only; wording is
left to the presentation layer.
"""
from __future__ import annotations

import logging
from typing import Any

from finplan.credit.model import MAX_SCORE, MIN_SCORE, parse_raw_profile
from finplan.credit.schemas import (
    CreditFactorName,
    ImprovementAction,
    ImprovementRecommendation,
    Priority,
)
from finplan.validation import check_count, raise_if_any

logger = logging.getLogger(__name__)

_ON_TIME_TARGET_PCT = 95
_UTILIZATION_TARGET_PCT = 30
_HISTORY_TARGET_MONTHS = 36
_MIX_TARGET_TYPES = 2

# (score strictly below, recommendation) — first match wins
_SCORE_BANDS: tuple[tuple[int, ImprovementRecommendation], ...] = (
    (600, ImprovementRecommendation(
        action=ImprovementAction.build_credit_history, priority=Priority.critical,
        expected_points_min=50, expected_points_max=100,
        timeline_months_min=6, timeline_months_max=12,
    )),
    (700, ImprovementRecommendation(
        action=ImprovementAction.improve_payment_history, priority=Priority.high,
        factor=CreditFactorName.payment_history,
        expected_points_min=30, expected_points_max=50,
        timeline_months_min=3, timeline_months_max=6,
    )),
    (750, ImprovementRecommendation(
        action=ImprovementAction.reduce_utilization, priority=Priority.medium,
        factor=CreditFactorName.credit_utilization,
        expected_points_min=20, expected_points_max=30,
        timeline_months_min=1, timeline_months_max=3,
    )),
)

_MAINTAIN = ImprovementRecommendation(
    action=ImprovementAction.maintain_credit, priority=Priority.low,
)


def recommend_improvements(score: Any) -> list[ImprovementRecommendation]:
    """
    Band recommendation for a score: <600 build history, <700 payment history,
    <750 utilization, otherwise maintain.

    Raises:
        EngineValidationError: score not a whole number in [300, 900].
    """
    violations: list[dict] = []
    checked = check_count(violations, "score", score)
    if checked is not None and not MIN_SCORE <= checked <= MAX_SCORE:
        violations.append({"field": "score", "issue": f"Score must be between {MIN_SCORE} and {MAX_SCORE}."})
    raise_if_any(violations)

    for ceiling, recommendation in _SCORE_BANDS:
        if checked < ceiling:
            return [recommendation]
    return [_MAINTAIN]


def review_factors(raw: Any) -> list[ImprovementRecommendation]:
    """
    Factor-driven actions for a raw credit profile, highest priority first.

    Raises:
        EngineValidationError: missing or out-of-range raw values.
    """
    violations: list[dict] = []
    profile = parse_raw_profile(violations, raw)
    raise_if_any(violations)

    actions: list[ImprovementRecommendation] = []
    if profile.on_time_payment_pct < _ON_TIME_TARGET_PCT:
        actions.append(ImprovementRecommendation(
            action=ImprovementAction.improve_payment_history, priority=Priority.high,
            factor=CreditFactorName.payment_history,
        ))
    if profile.credit_utilization_pct > _UTILIZATION_TARGET_PCT:
        actions.append(ImprovementRecommendation(
            action=ImprovementAction.reduce_utilization, priority=Priority.high,
            factor=CreditFactorName.credit_utilization,
        ))
    if profile.credit_history_months < _HISTORY_TARGET_MONTHS:
        actions.append(ImprovementRecommendation(
            action=ImprovementAction.keep_old_accounts, priority=Priority.medium,
            factor=CreditFactorName.credit_age,
        ))
    if profile.credit_mix_types < _MIX_TARGET_TYPES:
        actions.append(ImprovementRecommendation(
            action=ImprovementAction.diversify_credit_mix, priority=Priority.low,
            factor=CreditFactorName.credit_mix,
        ))

    logger.debug("Factor review produced %d action(s)", len(actions))
    return actions


__all__ = ["recommend_improvements", "review_factors"]
