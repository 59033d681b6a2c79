"""
schemas.py — credit engine Pydantic v2 data contracts.

Defines:
  - CreditFactorName, CreditGrade, ImpactLabel, Priority, ImprovementAction enums
  - CreditFactor, FactorContribution, CreditScoreResult
  - RawCreditProfile                (raw behaviour before normalisation)
  - ScenarioInputs, FactorImpact, ScenarioResult
  - ImprovementRecommendation
  - *Request models                 (HTTP bodies)

Range checks live in the engine functions, not on these models, so that an
out-of-range value is reported as an engine validation error with a field path.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class CreditFactorName(str, Enum):
    payment_history = "payment_history"
    credit_utilization = "credit_utilization"
    credit_age = "credit_age"
    credit_mix = "credit_mix"
    new_credit = "new_credit"


class CreditGrade(str, Enum):
    poor = "Poor"
    fair = "Fair"
    good = "Good"
    excellent = "Excellent"


class ScenarioLever(str, Enum):
    credit_utilization = "credit_utilization"
    new_credit = "new_credit"
    missed_payments = "missed_payments"


class ImpactLabel(str, Enum):
    high = "High"
    medium = "Medium"
    low = "Low"
    negative = "Negative"


class Priority(str, Enum):
    critical = "Critical"
    high = "High"
    medium = "Medium"
    low = "Low"


class ImprovementAction(str, Enum):
    build_credit_history = "build_credit_history"
    improve_payment_history = "improve_payment_history"
    reduce_utilization = "reduce_utilization"
    maintain_credit = "maintain_credit"
    keep_old_accounts = "keep_old_accounts"
    diversify_credit_mix = "diversify_credit_mix"


# ---------------------------------------------------------------------------
# Score model
# ---------------------------------------------------------------------------

class CreditFactor(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    name: Optional[str] = None
    weight: float                               # fraction; a factor set sums to 1.0
    normalized_value: float = Field(alias="normalizedValue")   # [0, 1], 1 = best


class FactorContribution(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    name: Optional[str] = None
    weight: float
    normalized_value: float
    points: float               # weight × normalized_value × 600


class CreditScoreResult(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    score: int                  # [300, 900]
    grade: CreditGrade
    breakdown: List[FactorContribution] = Field(default_factory=list)


class RawCreditProfile(BaseModel):
    """Observed behaviour, before mapping onto the five [0, 1] factors."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    on_time_payment_pct: float          # 0–100
    credit_utilization_pct: float       # ≥ 0; above 100 means over limit
    credit_history_months: float        # ≥ 0
    credit_mix_types: int               # distinct account types held
    recent_inquiries: int               # hard enquiries, last 6 months


# ---------------------------------------------------------------------------
# Scenario simulator
# ---------------------------------------------------------------------------

class ScenarioInputs(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    credit_utilization_pct: float = Field(alias="creditUtilizationPct")
    new_accounts_opened: int = Field(default=0, alias="newAccountsOpened")
    missed_payments_last_6_months: int = Field(default=0, alias="missedPaymentsLast6Months")


class FactorImpact(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    factor: ScenarioLever
    delta: int


class ScenarioResult(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    baseline_score: int
    projected_score: int
    projected_grade: CreditGrade
    total_impact: int                   # Σ deltas, before clamping
    impact_label: ImpactLabel           # on projected - baseline
    per_factor_impact: List[FactorImpact]


# ---------------------------------------------------------------------------
# Advisor
# ---------------------------------------------------------------------------

class ImprovementRecommendation(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    action: ImprovementAction
    priority: Priority
    factor: Optional[CreditFactorName] = None
    expected_points_min: int = 0
    expected_points_max: int = 0
    timeline_months_min: Optional[int] = None    # None → ongoing
    timeline_months_max: Optional[int] = None


# ---------------------------------------------------------------------------
# HTTP request bodies
# ---------------------------------------------------------------------------

class CreditScoreRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    factors: List[Any]


class ScenarioRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    baseline_score: Any
    inputs: Any


class RecommendationRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    score: Any
    profile: Optional[Any] = None


__all__ = [
    "CreditFactorName",
    "CreditGrade",
    "ScenarioLever",
    "ImpactLabel",
    "Priority",
    "ImprovementAction",
    "CreditFactor",
    "FactorContribution",
    "CreditScoreResult",
    "RawCreditProfile",
    "ScenarioInputs",
    "FactorImpact",
    "ScenarioResult",
    "ImprovementRecommendation",
    "CreditScoreRequest",
    "ScenarioRequest",
    "RecommendationRequest",
]
