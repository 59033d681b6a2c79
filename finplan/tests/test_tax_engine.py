"""
Tax calculator and regime comparator test suite.
All expected values hand-computed from the slab tables and surcharge ladder.

Groups:
  1. Named constant verification, exact equality
  2. Parametrised calculate_tax cases, exact to the paisa
  3. Regime comparison cases
  4. Properties (monotonicity, continuity, cess, symmetry, idempotence)
  5. Validation errors
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

import pytest

from finplan.errors import ConfigurationError, EngineValidationError
from finplan.tax import slabs
from finplan.tax.calculator import calculate_tax, compute_tax
from finplan.tax.comparator import compare_regimes, recommend
from finplan.tax.schemas import Regime, TaxSlab
from finplan.tax.slabs import (
    CESS_RATE,
    NEW_REGIME_SLABS,
    OLD_REGIME_SLABS,
    SURCHARGE_LADDER,
    slabs_for,
    surcharge_rate,
)


# ===========================================================================
# TEST GROUP 1: Named constant verification
# ===========================================================================

def test_old_regime_slab_table() -> None:
    assert [(s.lower_bound, s.upper_bound, s.rate) for s in OLD_REGIME_SLABS] == [
        (0, 250_000, 0),
        (250_000, 500_000, 5),
        (500_000, 1_000_000, 20),
        (1_000_000, float("inf"), 30),
    ]


def test_new_regime_slab_table() -> None:
    assert [(s.lower_bound, s.upper_bound, s.rate) for s in NEW_REGIME_SLABS] == [
        (0, 300_000, 0),
        (300_000, 600_000, 5),
        (600_000, 900_000, 10),
        (900_000, 1_200_000, 15),
        (1_200_000, 1_500_000, 20),
        (1_500_000, float("inf"), 30),
    ]


def test_slabs_for_returns_regime_table() -> None:
    assert slabs_for(Regime.old) == list(OLD_REGIME_SLABS)
    assert slabs_for(Regime.new) == list(NEW_REGIME_SLABS)


def test_surcharge_ladder_strictly_ordered() -> None:
    assert SURCHARGE_LADDER == (
        (50_000_000, 37),
        (10_000_000, 25),
        (5_000_000, 15),
        (1_000_000, 10),
    )
    assert CESS_RATE == 4


@pytest.mark.parametrize(
    "taxable, expected",
    [
        (0, 0),
        (1_000_000, 0),          # threshold itself is not "above"
        (1_000_001, 10),
        (5_000_000, 10),
        (5_000_001, 15),
        (10_000_001, 25),
        (50_000_000, 25),
        (50_000_001, 37),
    ],
)
def test_surcharge_rate_thresholds(taxable: int, expected: int) -> None:
    assert surcharge_rate(taxable) == expected


def test_broken_slab_table_fails_fast(monkeypatch: pytest.MonkeyPatch) -> None:
    gap = (
        TaxSlab(lower_bound=0, upper_bound=100_000, rate=0),
        TaxSlab(lower_bound=150_000, upper_bound=float("inf"), rate=10),
    )
    monkeypatch.setitem(slabs._SLABS, Regime.old, gap)
    with pytest.raises(ConfigurationError):
        slabs.validate_tables()


def test_unordered_surcharge_ladder_fails_fast(monkeypatch: pytest.MonkeyPatch) -> None:
    # The duplicated ">50L" rung found in older UI code must be rejected.
    monkeypatch.setattr(slabs, "SURCHARGE_LADDER", ((5_000_000, 37), (10_000_000, 25), (5_000_000, 15)))
    with pytest.raises(ConfigurationError):
        slabs.validate_tables()


# ===========================================================================
# TEST GROUP 2: calculate_tax cases
# ===========================================================================

@dataclass
class TaxCase:
    description: str
    gross_income: float
    regime: str
    deductions: dict = field(default_factory=dict)
    expected_taxable: float = 0.0
    expected_base: float = 0.0
    expected_surcharge: float = 0.0
    expected_cess: float = 0.0
    expected_total: float = 0.0


TAX_CASES: list[TaxCase] = [
    TaxCase("new_zero_income", 0, "new"),
    TaxCase("new_300000_entirely_zero_band", 300_000, "new", expected_taxable=300_000),
    TaxCase(
        "old_12L_with_full_80c",
        1_200_000, "old", {"80C": 150_000},
        # taxable=1050000; slab: 0+12500+100000+15000=127500
        # surcharge 10% (>10L)=12750, cess=4%*140250=5610
        expected_taxable=1_050_000, expected_base=127_500,
        expected_surcharge=12_750, expected_cess=5_610, expected_total=145_860,
    ),
    TaxCase(
        "new_600000_top_of_5pct_band",
        600_000, "new",
        expected_taxable=600_000, expected_base=15_000, expected_cess=600, expected_total=15_600,
    ),
    TaxCase(
        "new_10L_at_surcharge_threshold_no_surcharge",
        1_000_000, "new",
        # 15000+30000+15%*100000=60000, not above 10L → no surcharge
        expected_taxable=1_000_000, expected_base=60_000, expected_cess=2_400, expected_total=62_400,
    ),
    TaxCase(
        "new_15L_surcharge_10pct",
        1_500_000, "new",
        # 15000+30000+45000+60000=150000, surcharge=15000, cess=4%*165000=6600
        expected_taxable=1_500_000, expected_base=150_000,
        expected_surcharge=15_000, expected_cess=6_600, expected_total=171_600,
    ),
    TaxCase(
        "new_20L_top_slab",
        2_000_000, "new",
        # 150000+30%*500000=300000, surcharge=30000, cess=4%*330000=13200
        expected_taxable=2_000_000, expected_base=300_000,
        expected_surcharge=30_000, expected_cess=13_200, expected_total=343_200,
    ),
    TaxCase(
        "old_5L_no_rebate_modelled",
        500_000, "old",
        expected_taxable=500_000, expected_base=12_500, expected_cess=500, expected_total=13_000,
    ),
    TaxCase(
        "old_10L_at_threshold",
        1_000_000, "old",
        expected_taxable=1_000_000, expected_base=112_500, expected_cess=4_500, expected_total=117_000,
    ),
    TaxCase(
        "old_60L_surcharge_15pct",
        6_000_000, "old",
        # 112500+30%*5000000=1612500, surcharge=241875, cess=4%*1854375=74175
        expected_taxable=6_000_000, expected_base=1_612_500,
        expected_surcharge=241_875, expected_cess=74_175, expected_total=1_928_550,
    ),
    TaxCase(
        "old_1_2cr_surcharge_25pct",
        12_000_000, "old",
        # 112500+30%*11000000=3412500, surcharge=853125, cess=4%*4265625=170625
        expected_taxable=12_000_000, expected_base=3_412_500,
        expected_surcharge=853_125, expected_cess=170_625, expected_total=4_436_250,
    ),
    TaxCase(
        "new_6cr_surcharge_37pct",
        60_000_000, "new",
        # 150000+30%*58500000=17700000, surcharge=6549000, cess=4%*24249000=969960
        expected_taxable=60_000_000, expected_base=17_700_000,
        expected_surcharge=6_549_000, expected_cess=969_960, expected_total=25_218_960,
    ),
    TaxCase(
        "old_deductions_exceed_income_taxable_zero",
        100_000, "old", {"80C": 150_000},
    ),
    TaxCase(
        "old_combined_cap_trims_nps",
        800_000, "old", {"80C": 100_000, "80D": 30_000, "NPS": 40_000},
        # group: 100000+30000+20000(NPS trimmed)=150000, taxable=650000
        # slab: 12500+30000=42500, cess=1700
        expected_taxable=650_000, expected_base=42_500, expected_cess=1_700, expected_total=44_200,
    ),
    TaxCase(
        "old_ungrouped_sections_pass_through",
        900_000, "old", {"80C": 100_000, "24b": 250_000, "HRA": 120_000},
        # 80C 100000 + 24b capped 200000 + HRA 120000 = 420000, taxable=480000
        # slab: 5%*230000=11500, cess=460
        expected_taxable=480_000, expected_base=11_500, expected_cess=460, expected_total=11_960,
    ),
    TaxCase(
        "new_regime_ignores_deductions",
        600_000, "new", {"80C": 150_000, "24b": 200_000},
        expected_taxable=600_000, expected_base=15_000, expected_cess=600, expected_total=15_600,
    ),
    TaxCase(
        "old_half_paisa_rounds_up",
        250_000.3, "old",
        # 5%*0.3=0.015 → 0.02 (half-up), cess 4%*0.02=0.0008 → 0.00
        expected_taxable=250_000.3, expected_base=0.02, expected_total=0.02,
    ),
]


@pytest.mark.parametrize("case", [pytest.param(c, id=c.description) for c in TAX_CASES])
def test_calculate_tax(case: TaxCase) -> None:
    result = calculate_tax(case.gross_income, case.regime, case.deductions)

    assert result.taxable_income == pytest.approx(case.expected_taxable)
    assert result.base_tax == case.expected_base
    assert result.surcharge == case.expected_surcharge
    assert result.cess == case.expected_cess
    assert result.total == case.expected_total


def test_effective_rate_is_fraction_of_gross() -> None:
    result = calculate_tax(1_200_000, "old", {"80C": 150_000})
    assert result.effective_rate == pytest.approx(145_860 / 1_200_000)


def test_effective_rate_zero_for_zero_income() -> None:
    assert calculate_tax(0, "old").effective_rate == 0.0


def test_result_reports_applied_deductions() -> None:
    result = calculate_tax(1_200_000, "old", {"80C": 200_000, "80D": 10_000})
    assert result.deduction_breakdown == {"80C": 150_000.0, "80D": 0.0}
    assert result.total_deductions == 150_000


def test_new_regime_reports_zero_deductions() -> None:
    result = calculate_tax(1_200_000, Regime.new, {"80C": 150_000})
    assert result.total_deductions == 0.0
    assert result.deduction_breakdown == {"80C": 0.0}


def test_compute_tax_with_aggregated_total() -> None:
    result = compute_tax(1_200_000, "old", 150_000)
    assert result.total == 145_860


def test_compute_tax_new_regime_ignores_total() -> None:
    assert compute_tax(1_200_000, "new", 500_000).taxable_income == 1_200_000


def test_regime_string_is_case_insensitive() -> None:
    assert calculate_tax(600_000, "NEW").regime is Regime.new


# ===========================================================================
# TEST GROUP 3: Regime comparison
# ===========================================================================

@dataclass
class CompareCase:
    description: str
    gross_income: float
    deductions: dict
    expected_old: float
    expected_new: float
    expected_regime: Regime
    expected_savings: float


COMPARE_CASES: list[CompareCase] = [
    CompareCase(
        "12L_full_80c_new_wins",
        1_200_000, {"80C": 150_000},
        # NEW: 15000+30000+45000=90000, surcharge 9000, cess 3960 → 102960
        145_860, 102_960, Regime.new, 42_900,
    ),
    CompareCase(
        "10L_heavy_deductions_old_wins",
        1_000_000, {"80C": 150_000, "24b": 200_000, "HRA": 200_000},
        # OLD taxable=450000: 5%*200000=10000, cess=400
        10_400, 62_400, Regime.old, 52_000,
    ),
    CompareCase("zero_income_tie_goes_new", 0, {}, 0, 0, Regime.new, 0),
    CompareCase("both_zero_band_tie_goes_new", 250_000, {}, 0, 0, Regime.new, 0),
]


@pytest.mark.parametrize("case", [pytest.param(c, id=c.description) for c in COMPARE_CASES])
def test_compare_regimes(case: CompareCase) -> None:
    result = compare_regimes(case.gross_income, case.deductions)

    assert result.old.total == case.expected_old
    assert result.new.total == case.expected_new
    assert result.recommended is case.expected_regime
    assert result.savings == case.expected_savings


def test_compare_uses_same_inputs_for_both_regimes() -> None:
    result = compare_regimes(900_000, {"80C": 50_000})
    assert result.old.gross_income == result.new.gross_income == 900_000
    assert result.old.regime is Regime.old
    assert result.new.regime is Regime.new


# ===========================================================================
# TEST GROUP 4: Properties
# ===========================================================================

_INCOMES = [0, 1, 249_999, 250_000, 300_000, 499_999.99, 500_000, 750_000, 999_999,
            1_000_000, 1_000_001, 1_250_000, 1_500_000, 3_000_000, 5_000_000,
            5_000_001, 9_999_999, 10_000_001, 49_999_999, 50_000_001, 80_000_000]


@pytest.mark.parametrize("regime", ["old", "new"])
def test_total_non_decreasing_in_income(regime: str) -> None:
    totals = [calculate_tax(income, regime, {"80C": 100_000}).total for income in _INCOMES]
    assert totals == sorted(totals)


@pytest.mark.parametrize("regime", ["old", "new"])
def test_zero_income_zero_tax(regime: str) -> None:
    assert calculate_tax(0, regime, {}).total == 0


@pytest.mark.parametrize(
    "regime, boundary",
    [("old", s.upper_bound) for s in OLD_REGIME_SLABS[:-1]]
    + [("new", s.upper_bound) for s in NEW_REGIME_SLABS[:-1]],
)
def test_base_tax_continuous_at_slab_boundaries(regime: str, boundary: float) -> None:
    below = compute_tax(boundary - 0.01, regime).base_tax
    at = compute_tax(boundary, regime).base_tax
    # one paisa at the lower band's rate, plus one paisa of rounding
    assert 0 <= at - below <= 0.01


@pytest.mark.parametrize("income", _INCOMES)
@pytest.mark.parametrize("regime", ["old", "new"])
def test_cess_is_four_percent_of_base_plus_surcharge(regime: str, income: float) -> None:
    result = calculate_tax(income, regime)
    expected = (Decimal(str(result.base_tax)) + Decimal(str(result.surcharge))) * Decimal("0.04")
    assert Decimal(str(result.cess)) == expected.quantize(Decimal("0.01"), rounding="ROUND_HALF_UP")
    assert result.total == pytest.approx(result.base_tax + result.surcharge + result.cess, abs=1e-6)


@pytest.mark.parametrize("income", [0, 400_000, 1_200_000, 7_500_000])
def test_savings_symmetric_when_regimes_swapped(income: float) -> None:
    comparison = compare_regimes(income, {"80C": 150_000, "24b": 200_000})
    swapped = recommend(comparison.new, comparison.old)
    assert swapped.savings == comparison.savings
    assert comparison.savings >= 0


def test_calculate_tax_is_idempotent() -> None:
    first = calculate_tax(1_734_567.89, "old", {"80C": 120_000, "80D": 40_000})
    second = calculate_tax(1_734_567.89, "old", {"80C": 120_000, "80D": 40_000})
    assert first.model_dump_json() == second.model_dump_json()


# ===========================================================================
# TEST GROUP 5: Validation errors
# ===========================================================================

def test_negative_income_rejected() -> None:
    with pytest.raises(EngineValidationError) as exc_info:
        calculate_tax(-1, "old")
    assert exc_info.value.fields == {"gross_income"}


def test_unknown_regime_rejected() -> None:
    with pytest.raises(EngineValidationError) as exc_info:
        calculate_tax(100_000, "flat")
    assert exc_info.value.fields == {"regime"}


def test_all_violations_reported_together() -> None:
    with pytest.raises(EngineValidationError) as exc_info:
        calculate_tax(-5, "flat", {"80C": -1, "99Z": 10})
    assert exc_info.value.fields == {"gross_income", "regime", "deductions.80C", "deductions.99Z"}


@pytest.mark.parametrize("bad", [float("nan"), float("inf"), "1000", None, True])
def test_non_numeric_income_rejected(bad: object) -> None:
    with pytest.raises(EngineValidationError):
        calculate_tax(bad, "new")


def test_negative_deduction_rejected_even_under_new_regime() -> None:
    with pytest.raises(EngineValidationError) as exc_info:
        calculate_tax(500_000, "new", {"80D": -100})
    assert exc_info.value.fields == {"deductions.80D"}


def test_compare_rejects_negative_income() -> None:
    with pytest.raises(EngineValidationError):
        compare_regimes(-100, {})


def test_validation_error_is_value_error_with_json_message() -> None:
    with pytest.raises(ValueError) as exc_info:
        compute_tax(-1, "old")
    assert '"field": "gross_income"' in str(exc_info.value)


def test_income_at_amount_ceiling_is_computed() -> None:
    # 150000 + 30% * (1e15 - 1500000) = 299999999700000
    # surcharge 37% = 110999999889000, cess 4% of the sum = 16439999983560
    result = calculate_tax(10 ** 15, "new")
    assert result.base_tax == 299_999_999_700_000
    assert result.surcharge == 110_999_999_889_000
    assert result.cess == 16_439_999_983_560
    assert result.total == 427_439_999_572_560


@pytest.mark.parametrize(
    "income",
    [10 ** 15 + 1, 1e27, 10 ** 400],
    ids=["just_above_ceiling", "float_1e27", "int_too_large_for_float"],
)
def test_oversized_income_rejected(income: float) -> None:
    with pytest.raises(EngineValidationError) as exc_info:
        calculate_tax(income, "old", {})
    assert exc_info.value.fields == {"gross_income"}


def test_oversized_deduction_and_total_rejected() -> None:
    with pytest.raises(EngineValidationError) as exc_info:
        calculate_tax(1_000_000, "old", {"80C": 10 ** 400})
    assert exc_info.value.fields == {"deductions.80C"}

    with pytest.raises(EngineValidationError) as exc_info:
        compute_tax(1_000_000, "old", 1e30)
    assert exc_info.value.fields == {"deduction_total"}


def test_compare_rejects_oversized_income() -> None:
    with pytest.raises(EngineValidationError) as exc_info:
        compare_regimes(10 ** 400, {})
    assert exc_info.value.fields == {"gross_income"}
