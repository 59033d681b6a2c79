"""
Tax HTTP routes — POST /api/tax/calculate,
                  POST /api/tax/compare-regimes,
                  POST /api/tax/optimize,
                  GET  /api/tax/deductions

Engine validation errors propagate to the global handler in main.py, which
renders the standard 422 envelope.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from finplan.tax.calculator import calculate_tax
from finplan.tax.comparator import compare_regimes
from finplan.tax.deductions import deduction_catalog
from finplan.tax.optimizer import optimize
from finplan.tax.schemas import (
    RegimeCompareRequest,
    TaxCalculateRequest,
    TaxOptimizeRequest,
)

router = APIRouter(prefix="/api/tax", tags=["tax"])
logger = logging.getLogger(__name__)


@router.post("/calculate")
async def calculate(body: TaxCalculateRequest) -> JSONResponse:
    """Tax for one regime with an itemised deduction breakdown."""
    result = calculate_tax(body.gross_income, body.regime, body.deductions)
    logger.info("Tax calculated regime=%s", result.regime.value)
    return JSONResponse(status_code=200, content=result.model_dump(mode="json"))


@router.post("/compare-regimes")
async def compare(body: RegimeCompareRequest) -> JSONResponse:
    """Old vs new regime on the same income and deductions, with a recommendation."""
    comparison = compare_regimes(body.gross_income, body.deductions)
    return JSONResponse(status_code=200, content=comparison.model_dump(mode="json"))


@router.post("/optimize")
async def optimize_deductions(body: TaxOptimizeRequest) -> JSONResponse:
    """Deduction headroom, unclaimed spends from transactions, and the maxed-out comparison."""
    result = optimize(body.gross_income, body.deductions, body.transactions)
    return JSONResponse(status_code=200, content=result.model_dump(mode="json"))


@router.get("/deductions")
async def list_deductions() -> JSONResponse:
    """Supported deduction sections with caps and combined-cap groups."""
    catalog = [rule.model_dump(mode="json") for rule in deduction_catalog()]
    return JSONResponse(status_code=200, content=catalog)
