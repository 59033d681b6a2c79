"""
schemas.py — tax engine Pydantic v2 data contracts.

Defines:
  - Regime, DeductionSection enums
  - TaxSlab, DeductionRule          (static table rows)
  - AggregatedDeductions            (deductions after section + group caps)
  - TaxResult                       (one regime's computation)
  - RegimeComparison                (both regimes + recommendation)
  - DeductionSuggestion, Transaction, OptimizationResult  (what-if layer)
  - *Request models                 (HTTP bodies; intentionally loose so the
                                     engine's own validation reports issues)

All engine outputs are frozen: constructed once per call, never mutated.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Regime(str, Enum):
    old = "old"
    new = "new"


class DeductionSection(str, Enum):
    sec_80c = "80C"
    sec_80d = "80D"
    nps = "NPS"          # Section 80CCD(1B)
    sec_24b = "24b"      # Home loan interest
    hra = "HRA"
    sec_80g = "80G"
    sec_80e = "80E"
    sec_80ee = "80EE"
    sec_80eea = "80EEA"
    sec_80eeb = "80EEB"
    sec_80tta = "80TTA"
    sec_80ttb = "80TTB"


# ---------------------------------------------------------------------------
# Static table rows
# ---------------------------------------------------------------------------

class TaxSlab(BaseModel):
    """One progressive band: [lower_bound, upper_bound) taxed at rate percent."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    lower_bound: float
    upper_bound: float           # float("inf") for the top slab
    rate: float                  # percent, e.g. 5 for 5%


class DeductionRule(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    section: DeductionSection
    cap: Optional[float] = None          # None → uncapped
    group: Optional[str] = None          # combined-cap group name
    description: str = ""


# ---------------------------------------------------------------------------
# Engine outputs
# ---------------------------------------------------------------------------

class AggregatedDeductions(BaseModel):
    """
    Deductions actually applied for a regime.

    applied holds the post-cap amount per section (section value → amount).
    Under the new regime every applied amount is 0 and total is 0.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    regime: Regime
    applied: Dict[str, float] = Field(default_factory=dict)
    total: float = 0.0


class TaxResult(BaseModel):
    """
    Complete tax computation for one regime.

    Computation sequence:
      1. taxable_income = max(0, gross_income - total_deductions)  (old)
         taxable_income = gross_income                              (new)
      2. base_tax  = marginal slab tax on taxable_income
      3. surcharge = ladder rate (by taxable_income) × base_tax
      4. cess      = 4% of (base_tax + surcharge)
      5. total     = base_tax + surcharge + cess
    Each monetary component is rounded half-up to 2 dp exactly once.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    regime: Regime
    gross_income: float
    total_deductions: float
    taxable_income: float
    base_tax: float
    surcharge: float
    cess: float
    total: float
    effective_rate: float            # total / gross_income, 0 when gross is 0
    deduction_breakdown: Dict[str, float] = Field(default_factory=dict)


class RegimeComparison(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    old: TaxResult
    new: TaxResult
    recommended: Regime
    savings: float                   # abs(old.total - new.total)


class Transaction(BaseModel):
    """A bank/card transaction line, as supplied by the ingestion layer."""
    model_config = ConfigDict(extra="ignore", frozen=True, allow_inf_nan=False)

    description: str
    amount: float


class DeductionSuggestion(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    section: DeductionSection
    current_amount: float            # currently applied (post-cap)
    additional_amount: float         # extra claim that still reduces tax
    estimated_saving: float          # old-regime total tax reduction
    source: str = "headroom"         # "headroom" | "transactions"


class OptimizationResult(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    suggestions: List[DeductionSuggestion] = Field(default_factory=list)
    detected: Dict[str, float] = Field(default_factory=dict)
    unclaimed: List[DeductionSuggestion] = Field(default_factory=list)
    max_potential_saving: float = 0.0
    current: RegimeComparison
    optimized: RegimeComparison


# ---------------------------------------------------------------------------
# HTTP request bodies
# ---------------------------------------------------------------------------

class TaxCalculateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    gross_income: Any
    regime: Any
    deductions: Any = Field(default_factory=dict)


class RegimeCompareRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    gross_income: Any
    deductions: Any = Field(default_factory=dict)


class TaxOptimizeRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    gross_income: Any
    deductions: Any = Field(default_factory=dict)
    transactions: List[Transaction] = Field(default_factory=list)


__all__ = [
    "Regime",
    "DeductionSection",
    "TaxSlab",
    "DeductionRule",
    "AggregatedDeductions",
    "TaxResult",
    "RegimeComparison",
    "Transaction",
    "DeductionSuggestion",
    "OptimizationResult",
    "TaxCalculateRequest",
    "RegimeCompareRequest",
    "TaxOptimizeRequest",
]
