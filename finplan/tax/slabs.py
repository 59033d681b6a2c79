"""
Slab tables and surcharge ladder for both regimes.

Both tables are checked when this module is imported; a broken table raises
ConfigurationError immediately instead of producing wrong tax later.
"""
from __future__ import annotations

import math

from finplan.errors import ConfigurationError
from finplan.tax.schemas import Regime, TaxSlab

# ===========================================================================
# OLD REGIME SLAB BREAKPOINTS (0% band = ₹2.5L basic exemption)
# ===========================================================================

OLD_SLAB_2_5L = 250_000
OLD_SLAB_5L   = 500_000
OLD_SLAB_10L  = 1_000_000

# ===========================================================================
# NEW REGIME SLAB BREAKPOINTS (0% band encoded in the table itself)
# ===========================================================================

NEW_SLAB_3L  = 300_000
NEW_SLAB_6L  = 600_000
NEW_SLAB_9L  = 900_000
NEW_SLAB_12L = 1_200_000
NEW_SLAB_15L = 1_500_000

CESS_RATE = 4          # percent of (base tax + surcharge), both regimes

_INF = float("inf")

OLD_REGIME_SLABS: tuple[TaxSlab, ...] = (
    TaxSlab(lower_bound=0,             upper_bound=OLD_SLAB_2_5L, rate=0),
    TaxSlab(lower_bound=OLD_SLAB_2_5L, upper_bound=OLD_SLAB_5L,   rate=5),
    TaxSlab(lower_bound=OLD_SLAB_5L,   upper_bound=OLD_SLAB_10L,  rate=20),
    TaxSlab(lower_bound=OLD_SLAB_10L,  upper_bound=_INF,          rate=30),
)

NEW_REGIME_SLABS: tuple[TaxSlab, ...] = (
    TaxSlab(lower_bound=0,            upper_bound=NEW_SLAB_3L,  rate=0),
    TaxSlab(lower_bound=NEW_SLAB_3L,  upper_bound=NEW_SLAB_6L,  rate=5),
    TaxSlab(lower_bound=NEW_SLAB_6L,  upper_bound=NEW_SLAB_9L,  rate=10),
    TaxSlab(lower_bound=NEW_SLAB_9L,  upper_bound=NEW_SLAB_12L, rate=15),
    TaxSlab(lower_bound=NEW_SLAB_12L, upper_bound=NEW_SLAB_15L, rate=20),
    TaxSlab(lower_bound=NEW_SLAB_15L, upper_bound=_INF,         rate=30),
)

# ===========================================================================
# SURCHARGE LADDER — (taxable income strictly above, percent of base tax)
# Ordered highest threshold first; the first match wins.
# ===========================================================================

SURCHARGE_LADDER: tuple[tuple[int, int], ...] = (
    (50_000_000, 37),   # > ₹5 cr
    (10_000_000, 25),   # > ₹1 cr
    (5_000_000,  15),   # > ₹50L
    (1_000_000,  10),   # > ₹10L
)

_SLABS = {
    Regime.old: OLD_REGIME_SLABS,
    Regime.new: NEW_REGIME_SLABS,
}


def slabs_for(regime: Regime) -> list[TaxSlab]:
    """Ordered slab list for a regime."""
    return list(_SLABS[regime])


def surcharge_rate(taxable_income: float) -> int:
    """Surcharge percent applicable to taxable_income (0 below the first threshold)."""
    for threshold, rate in SURCHARGE_LADDER:
        if taxable_income > threshold:
            return rate
    return 0


def _check_slab_table(name: str, slabs: tuple[TaxSlab, ...]) -> None:
    if not slabs:
        raise ConfigurationError(f"{name}: slab table is empty")
    if slabs[0].lower_bound != 0:
        raise ConfigurationError(f"{name}: first slab must start at 0")
    if not math.isinf(slabs[-1].upper_bound):
        raise ConfigurationError(f"{name}: last slab must be unbounded")
    for prev, nxt in zip(slabs, slabs[1:]):
        if prev.upper_bound != nxt.lower_bound:
            raise ConfigurationError(
                f"{name}: slabs not contiguous at {prev.upper_bound} / {nxt.lower_bound}"
            )
    for slab in slabs:
        if slab.upper_bound <= slab.lower_bound:
            raise ConfigurationError(f"{name}: empty or inverted slab starting at {slab.lower_bound}")
        if slab.rate < 0:
            raise ConfigurationError(f"{name}: negative rate in slab starting at {slab.lower_bound}")


def _check_surcharge_ladder(ladder: tuple[tuple[int, int], ...]) -> None:
    for (hi, hi_rate), (lo, lo_rate) in zip(ladder, ladder[1:]):
        if not hi > lo:
            raise ConfigurationError("surcharge thresholds must be strictly decreasing")
        if not hi_rate > lo_rate:
            raise ConfigurationError("surcharge rates must rise with the threshold")


def validate_tables() -> None:
    """Check every built-in table. Runs at import."""
    for regime, slabs in _SLABS.items():
        _check_slab_table(f"{regime.value} regime", slabs)
    _check_surcharge_ladder(SURCHARGE_LADDER)


validate_tables()
