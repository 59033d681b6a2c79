"""FinPlan — tax and credit-score computation engine."""
from finplan.credit.model import estimate_credit_score
from finplan.credit.simulator import simulate_scenario
from finplan.errors import ConfigurationError, EngineValidationError
from finplan.tax.calculator import calculate_tax
from finplan.tax.comparator import compare_regimes

__all__ = [
    "calculate_tax",
    "compare_regimes",
    "estimate_credit_score",
    "simulate_scenario",
    "EngineValidationError",
    "ConfigurationError",
]
