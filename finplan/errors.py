"""
errors.py — exception taxonomy shared by the tax and credit engines.

EngineValidationError
    Malformed or out-of-domain caller input. Carries every violation found in a
    single pass as a list of {"field": str | None, "issue": str} dicts. The
    exception message is the JSON encoding of that list, so handlers that only
    see a ValueError can still rebuild the standard error envelope.

ConfigurationError
    A static rate table (slabs, surcharge ladder) that breaks its own
    invariants. Raised at import time; a programming defect, never a caller
    error.
"""
from __future__ import annotations

import json
from typing import Any, Iterable


class EngineValidationError(ValueError):
    """Input rejected before any computation ran."""

    def __init__(self, violations: Iterable[dict[str, Any]]) -> None:
        self.violations: list[dict[str, Any]] = list(violations)
        super().__init__(json.dumps(self.violations))

    @property
    def fields(self) -> set[str | None]:
        return {v.get("field") for v in self.violations}


class ConfigurationError(RuntimeError):
    """A built-in rate table is inconsistent."""


__all__ = ["EngineValidationError", "ConfigurationError"]
