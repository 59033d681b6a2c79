"""
Test configuration for FinPlan tests.

sys.path is configured so 'from finplan...' resolves whether pytest runs from
the project root or from inside finplan/ without an editable install.
"""
import sys
from pathlib import Path

import pytest

_project_root = Path(__file__).parent.parent.parent        # .../package/

if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))


@pytest.fixture
def perfect_factors() -> list[dict]:
    """Five standing factors, every one at its best value."""
    return [
        {"name": "payment_history", "weight": 0.35, "normalized_value": 1.0},
        {"name": "credit_utilization", "weight": 0.30, "normalized_value": 1.0},
        {"name": "credit_age", "weight": 0.15, "normalized_value": 1.0},
        {"name": "credit_mix", "weight": 0.10, "normalized_value": 1.0},
        {"name": "new_credit", "weight": 0.10, "normalized_value": 1.0},
    ]


@pytest.fixture
def sample_transactions() -> list[dict]:
    return [
        {"description": "ELSS SIP - Axis Long Term Equity", "amount": -5_000},
        {"description": "Star Health Insurance premium", "amount": -12_000},
        {"description": "HDFC Home Loan Interest debit", "amount": -18_000},
        {"description": "NPS Tier 1 contribution", "amount": -2_000},
        {"description": "Groceries - BigBasket", "amount": -3_000},
        {"description": "PPF deposit", "amount": 10_000},
    ]
