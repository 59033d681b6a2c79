"""
Deduction aggregation — turns an itemised claim into the single deduction total
consumed by the tax calculator.

Per-section caps apply first. Sections in the combined 80C + 80D + NPS group
are then filled in table order (80C → 80D → NPS) until the group cap is
exhausted; anything beyond the group cap is dropped, never moved to another
section. Under the new regime every deduction is disallowed and the total is 0.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from decimal import Decimal
from typing import Any, Optional

from finplan.tax.schemas import (
    AggregatedDeductions,
    DeductionRule,
    DeductionSection,
    Regime,
)
from finplan.validation import check_amount, raise_if_any

logger = logging.getLogger(__name__)

# ===========================================================================
# DEDUCTION CAP CONSTANTS
# ===========================================================================

CAP_80C     = 150_000
CAP_80D     = 50_000     # independent ceiling, also counted against the combined cap
CAP_NPS     = 50_000     # Section 80CCD(1B)
CAP_24B     = 200_000
CAP_80EE    = 50_000
CAP_80EEA   = 150_000
CAP_80EEB   = 150_000
CAP_80TTA   = 10_000
CAP_80TTB   = 50_000

GROUP_80C_80D_NPS   = "80C+80D+NPS"
COMBINED_CAP_80C_80D_NPS = 150_000

GROUP_CAPS: dict[str, int] = {
    GROUP_80C_80D_NPS: COMBINED_CAP_80C_80D_NPS,
}

# Order matters: grouped sections consume the group cap in this order.
DEDUCTION_RULES: dict[DeductionSection, DeductionRule] = {
    rule.section: rule
    for rule in (
        DeductionRule(section=DeductionSection.sec_80c, cap=CAP_80C, group=GROUP_80C_80D_NPS,
                      description="Life insurance, PPF, EPF, ELSS, etc."),
        DeductionRule(section=DeductionSection.sec_80d, cap=CAP_80D, group=GROUP_80C_80D_NPS,
                      description="Health insurance premium"),
        DeductionRule(section=DeductionSection.nps, cap=CAP_NPS, group=GROUP_80C_80D_NPS,
                      description="National Pension System, Section 80CCD(1B)"),
        DeductionRule(section=DeductionSection.sec_24b, cap=CAP_24B,
                      description="Home loan interest"),
        DeductionRule(section=DeductionSection.hra,
                      description="House rent allowance exemption"),
        DeductionRule(section=DeductionSection.sec_80g,
                      description="Donations to charitable institutions"),
        DeductionRule(section=DeductionSection.sec_80e,
                      description="Education loan interest"),
        DeductionRule(section=DeductionSection.sec_80ee, cap=CAP_80EE,
                      description="First-time home buyer interest"),
        DeductionRule(section=DeductionSection.sec_80eea, cap=CAP_80EEA,
                      description="Affordable housing interest"),
        DeductionRule(section=DeductionSection.sec_80eeb, cap=CAP_80EEB,
                      description="Electric vehicle loan interest"),
        DeductionRule(section=DeductionSection.sec_80tta, cap=CAP_80TTA,
                      description="Savings account interest"),
        DeductionRule(section=DeductionSection.sec_80ttb, cap=CAP_80TTB,
                      description="Senior citizen interest income"),
    )
}

_ALIASES: dict[str, DeductionSection] = {
    **{section.value.lower(): section for section in DeductionSection},
    "24(b)": DeductionSection.sec_24b,
    "80ccd(1b)": DeductionSection.nps,
    "80ccd1b": DeductionSection.nps,
}


def parse_section(key: Any) -> Optional[DeductionSection]:
    """Resolve a section identifier ("80C", "24(b)", DeductionSection.nps …)."""
    if isinstance(key, DeductionSection):
        return key
    if not isinstance(key, str):
        return None
    return _ALIASES.get(key.strip().lower())


def parse_regime(violations: list[dict], value: Any, field: str = "regime") -> Optional[Regime]:
    if isinstance(value, Regime):
        return value
    if isinstance(value, str):
        try:
            return Regime(value.strip().lower())
        except ValueError:
            pass
    violations.append({"field": field, "issue": f"Unknown regime {value!r}; expected 'old' or 'new'."})
    return None


def parse_breakdown(
    violations: list[dict],
    breakdown: Any,
    field: str = "deductions",
) -> dict[DeductionSection, Decimal]:
    """
    Validate a {section: claimed amount} mapping.

    Records a violation for a non-mapping, unknown sections, the same section
    given twice under different aliases, and negative or non-numeric amounts.
    """
    claims: dict[DeductionSection, Decimal] = {}
    if breakdown is None:
        return claims
    if not isinstance(breakdown, Mapping):
        violations.append({"field": field, "issue": "Deductions must be a mapping of section to amount."})
        return claims

    for key, amount in breakdown.items():
        section = parse_section(key)
        if section is None:
            violations.append({"field": f"{field}.{key}", "issue": f"Unknown deduction section {key!r}."})
            continue
        if section in claims:
            violations.append({"field": f"{field}.{key}", "issue": f"Section {section.value} given more than once."})
            continue
        value = check_amount(violations, f"{field}.{key}", amount)
        if value is not None:
            claims[section] = value
    return claims


def apply_caps(claims: Mapping[DeductionSection, Decimal], regime: Regime) -> AggregatedDeductions:
    """Apply section and group caps to already-validated claims."""
    if regime is Regime.new:
        return AggregatedDeductions(
            regime=regime,
            applied={section.value: 0.0 for section in claims},
            total=0.0,
        )

    group_room = {group: Decimal(cap) for group, cap in GROUP_CAPS.items()}
    applied: dict[str, float] = {}
    total = Decimal(0)
    for section, rule in DEDUCTION_RULES.items():
        if section not in claims:
            continue
        amount = claims[section]
        if rule.cap is not None:
            amount = min(amount, Decimal(str(rule.cap)))
        if rule.group is not None:
            amount = min(amount, group_room[rule.group])
            group_room[rule.group] -= amount
        applied[section.value] = float(amount)
        total += amount

    return AggregatedDeductions(regime=regime, applied=applied, total=float(total))


def aggregate_deductions(breakdown: Any, regime: Any = Regime.old) -> AggregatedDeductions:
    """
    Validate a deduction breakdown and return the capped amounts and total.

    Raises:
        EngineValidationError: unknown section/regime or a negative amount.
    """
    violations: list[dict] = []
    resolved = parse_regime(violations, regime)
    claims = parse_breakdown(violations, breakdown)
    raise_if_any(violations)

    result = apply_caps(claims, resolved)
    logger.debug(
        "Aggregated %d deduction section(s) regime=%s",
        len(claims),
        resolved.value,
    )
    return result


def deduction_catalog() -> list[DeductionRule]:
    """Every supported section with its cap, group and description."""
    return list(DEDUCTION_RULES.values())


__all__ = [
    "CAP_80C", "CAP_80D", "CAP_NPS", "CAP_24B",
    "CAP_80EE", "CAP_80EEA", "CAP_80EEB", "CAP_80TTA", "CAP_80TTB",
    "GROUP_80C_80D_NPS", "COMBINED_CAP_80C_80D_NPS", "GROUP_CAPS",
    "DEDUCTION_RULES",
    "parse_section", "parse_regime", "parse_breakdown",
    "apply_caps", "aggregate_deductions", "deduction_catalog",
]
