"""
Shared input checks for the engine's public functions.

Each helper appends {field, issue} dicts to a caller-owned ``violations`` list
instead of raising, so a public function can collect every problem with its
input before raising a single EngineValidationError.
"""
from __future__ import annotations

import math
from decimal import Decimal
from numbers import Real
from typing import Any, Optional

from finplan.errors import EngineValidationError

# Ceiling for monetary amounts (₹1e15). Keeps every Decimal intermediate well
# inside the default 28-digit context.
MAX_AMOUNT = 10 ** 15
# Ceiling for counts (accounts, inquiries, scores); anything above is nonsense input.
MAX_COUNT = 10 ** 9


def _is_number(value: Any) -> bool:
    # bool is a Real subclass; True/False are never valid amounts
    return isinstance(value, Real) and not isinstance(value, bool)


def _as_float(value: Real) -> Optional[float]:
    """float(value) when finite; None for nan/inf or an int too large for a float."""
    try:
        result = float(value)
    except OverflowError:
        return None
    return result if math.isfinite(result) else None


def check_amount(violations: list[dict], field: str, value: Any) -> Optional[Decimal]:
    """Non-negative finite monetary amount up to MAX_AMOUNT → Decimal, else record a violation."""
    if not _is_number(value):
        violations.append({"field": field, "issue": f"Expected a number, got {type(value).__name__}."})
        return None
    if _as_float(value) is None:
        violations.append({"field": field, "issue": "Value must be a finite number."})
        return None
    if value < 0:
        violations.append({"field": field, "issue": "Value must not be negative."})
        return None
    if value > MAX_AMOUNT:
        violations.append({"field": field, "issue": f"Value must not exceed {MAX_AMOUNT:.0e}."})
        return None
    return Decimal(str(value))


def check_range(
    violations: list[dict],
    field: str,
    value: Any,
    low: float,
    high: float,
) -> Optional[float]:
    """Finite number within [low, high] inclusive."""
    if not _is_number(value):
        violations.append({"field": field, "issue": f"Expected a number, got {type(value).__name__}."})
        return None
    as_float = _as_float(value)
    if as_float is None or not low <= as_float <= high:
        violations.append({"field": field, "issue": f"Value must be between {low:g} and {high:g}."})
        return None
    return as_float


def check_count(violations: list[dict], field: str, value: Any) -> Optional[int]:
    """Non-negative whole number up to MAX_COUNT. Integral floats (2.0) are accepted."""
    if not _is_number(value) or _as_float(value) is None or int(value) != value:
        violations.append({"field": field, "issue": "Expected a whole number."})
        return None
    if value < 0:
        violations.append({"field": field, "issue": "Count must not be negative."})
        return None
    if value > MAX_COUNT:
        violations.append({"field": field, "issue": f"Count must not exceed {MAX_COUNT:.0e}."})
        return None
    return int(value)


def raise_if_any(violations: list[dict]) -> None:
    if violations:
        raise EngineValidationError(violations)
