"""
FinPlan Deduction Optimizer
What-if layer over the calculator. Pure functions. No I/O.

Headroom suggestions re-run the old-regime calculation with the extra claim
filled in, so the reported saving includes slab, surcharge and cess effects
exactly rather than through an approximate marginal rate.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from decimal import Decimal
from typing import Any, Iterable, Optional

from finplan.tax.calculator import build_tax_result, round_money
from finplan.tax.comparator import compare_claims
from finplan.tax.deductions import DEDUCTION_RULES, GROUP_CAPS, apply_caps, parse_breakdown
from finplan.tax.schemas import (
    DeductionSection,
    DeductionSuggestion,
    OptimizationResult,
    Regime,
    Transaction,
)
from finplan.validation import check_amount, raise_if_any

logger = logging.getLogger(__name__)

_SUGGESTION_MIN_SAVING = 1_000   # Suppress suggestions where tax saving < ₹1,000
_MAX_SUGGESTIONS = 3

OPTIMIZABLE_SECTIONS: tuple[DeductionSection, ...] = (
    DeductionSection.sec_80c,
    DeductionSection.sec_80d,
    DeductionSection.nps,
    DeductionSection.sec_24b,
)

# Lower-cased substrings of a transaction description → section it evidences
TRANSACTION_KEYWORDS: dict[DeductionSection, tuple[str, ...]] = {
    DeductionSection.sec_80c: ("elss", "ppf", "epf"),
    DeductionSection.nps: ("nps",),
    DeductionSection.sec_80d: ("health insurance", "medical insurance"),
    DeductionSection.sec_24b: ("home loan interest", "housing loan interest"),
}


# ===========================================================================
# INTERNAL HELPERS
# ===========================================================================

def _old_total(gross: Decimal, claims: Mapping[DeductionSection, Decimal]) -> Decimal:
    aggregated = apply_caps(claims, Regime.old)
    result = build_tax_result(gross, Regime.old, Decimal(str(aggregated.total)))
    return Decimal(str(result.total))


def _headroom(claims: Mapping[DeductionSection, Decimal]) -> dict[DeductionSection, tuple[Decimal, Decimal]]:
    """section → (currently applied, extra amount that would still be applied)."""
    applied = apply_caps(claims, Regime.old).applied
    group_room = {group: Decimal(cap) for group, cap in GROUP_CAPS.items()}
    for section, amount in applied.items():
        rule = DEDUCTION_RULES[DeductionSection(section)]
        if rule.group is not None:
            group_room[rule.group] -= Decimal(str(amount))

    room: dict[DeductionSection, tuple[Decimal, Decimal]] = {}
    for section in OPTIMIZABLE_SECTIONS:
        rule = DEDUCTION_RULES[section]
        used = Decimal(str(applied.get(section.value, 0.0)))
        extra = Decimal(str(rule.cap)) - used
        if rule.group is not None:
            extra = min(extra, group_room[rule.group])
        room[section] = (used, max(Decimal(0), extra))
    return room


def _suggestion(
    gross: Decimal,
    claims: Mapping[DeductionSection, Decimal],
    baseline: Decimal,
    section: DeductionSection,
    used: Decimal,
    extra: Decimal,
    source: str,
) -> Optional[DeductionSuggestion]:
    if extra <= 0:
        return None
    trial = dict(claims)
    trial[section] = used + extra
    saving = round_money(baseline - _old_total(gross, trial))
    if saving < _SUGGESTION_MIN_SAVING:
        return None
    return DeductionSuggestion(
        section=section,
        current_amount=float(used),
        additional_amount=float(extra),
        estimated_saving=float(saving),
        source=source,
    )


def _validated_transactions(violations: list[dict], transactions: Any) -> list[Transaction]:
    if transactions is None:
        return []
    if isinstance(transactions, (str, bytes, Mapping)) or not isinstance(transactions, Iterable):
        violations.append({"field": "transactions", "issue": "Transactions must be a list."})
        return []

    parsed: list[Transaction] = []
    for index, item in enumerate(transactions):
        field = f"transactions[{index}]"
        if isinstance(item, Transaction):
            description, amount = item.description, item.amount
        elif isinstance(item, Mapping):
            description, amount = item.get("description"), item.get("amount")
        else:
            violations.append({"field": field, "issue": "Transaction must be an object."})
            continue
        if not isinstance(description, str):
            violations.append({"field": f"{field}.description", "issue": "Description must be a string."})
            continue
        # Debits arrive negative; only the magnitude is bounded and summed.
        magnitude = abs(amount) if isinstance(amount, (int, float)) and not isinstance(amount, bool) else amount
        if check_amount(violations, f"{field}.amount", magnitude) is not None:
            parsed.append(Transaction(description=description, amount=float(amount)))
    return parsed


# ===========================================================================
# PUBLIC API
# ===========================================================================

def scan_transactions(transactions: Any) -> dict[str, float]:
    """
    Sum transaction amounts whose description evidences a deductible spend.

    Matching is a lower-cased substring check; each transaction counts toward
    the first section whose keyword it contains. Returns section value → total.

    Raises:
        EngineValidationError: malformed transaction list.
    """
    violations: list[dict] = []
    parsed = _validated_transactions(violations, transactions)
    raise_if_any(violations)

    totals: dict[str, Decimal] = {}
    for txn in parsed:
        text = txn.description.lower()
        for section, keywords in TRANSACTION_KEYWORDS.items():
            if any(keyword in text for keyword in keywords):
                totals[section.value] = totals.get(section.value, Decimal(0)) + abs(Decimal(str(txn.amount)))
                break
    return {section: float(amount) for section, amount in totals.items()}


def suggest_deductions(gross_income: Any, deductions: Any = None) -> list[DeductionSuggestion]:
    """
    Old-regime suggestions for unused 80C, 80D, NPS and 24(b) headroom.

    Headroom respects both the section cap and what is left of the combined
    80C + 80D + NPS cap. Suppresses suggestions saving < ₹1,000.
    Returns at most 3 suggestions, sorted by saving descending.
    """
    violations: list[dict] = []
    gross = check_amount(violations, "gross_income", gross_income)
    claims = parse_breakdown(violations, deductions)
    raise_if_any(violations)

    return _headroom_suggestions(gross, claims)


def _headroom_suggestions(
    gross: Decimal,
    claims: Mapping[DeductionSection, Decimal],
) -> list[DeductionSuggestion]:
    baseline = _old_total(gross, claims)
    candidates = []
    for section, (used, extra) in _headroom(claims).items():
        suggestion = _suggestion(gross, claims, baseline, section, used, extra, "headroom")
        if suggestion is not None:
            candidates.append(suggestion)

    candidates.sort(key=lambda s: s.estimated_saving, reverse=True)
    return candidates[:_MAX_SUGGESTIONS]


def optimize(gross_income: Any, deductions: Any = None, transactions: Any = None) -> OptimizationResult:
    """
    Full what-if report for a taxpayer.

    - suggestions: headroom suggestions (see suggest_deductions)
    - detected:    deductible spend found in transactions, per section
    - unclaimed:   detected spend not yet claimed, with its saving
    - max_potential_saving: old-regime saving with every optimisable section
      filled to its cap (group cap respected)
    - current / optimized: regime comparison before and after that fill

    Raises:
        EngineValidationError: every input problem found, reported together.
    """
    violations: list[dict] = []
    gross = check_amount(violations, "gross_income", gross_income)
    claims = parse_breakdown(violations, deductions)
    parsed = _validated_transactions(violations, transactions)
    raise_if_any(violations)

    suggestions = _headroom_suggestions(gross, claims)
    detected = scan_transactions(parsed)

    baseline = _old_total(gross, claims)
    unclaimed: list[DeductionSuggestion] = []
    for section, (used, extra) in _headroom(claims).items():
        found = Decimal(str(detected.get(section.value, 0.0)))
        claimable = min(extra, max(Decimal(0), found - used))
        suggestion = _suggestion(gross, claims, baseline, section, used, claimable, "transactions")
        if suggestion is not None:
            unclaimed.append(suggestion)
    unclaimed.sort(key=lambda s: s.estimated_saving, reverse=True)

    maxed = dict(claims)
    for section in OPTIMIZABLE_SECTIONS:
        maxed[section] = Decimal(str(DEDUCTION_RULES[section].cap))
    max_saving = round_money(baseline - _old_total(gross, maxed))

    logger.info(
        "Optimization suggestions=%d unclaimed=%d transactions=%d",
        len(suggestions),
        len(unclaimed),
        len(parsed),
    )
    return OptimizationResult(
        suggestions=suggestions,
        detected=detected,
        unclaimed=unclaimed,
        max_potential_saving=float(max(Decimal(0), max_saving)),
        current=compare_claims(gross, claims),
        optimized=compare_claims(gross, maxed),
    )


__all__ = [
    "OPTIMIZABLE_SECTIONS",
    "TRANSACTION_KEYWORDS",
    "scan_transactions",
    "suggest_deductions",
    "optimize",
]
