"""
Credit HTTP routes — POST /api/credit/score,
                     POST /api/credit/normalize,
                     POST /api/credit/simulate,
                     POST /api/credit/recommendations
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse

from finplan.credit.advisor import recommend_improvements, review_factors
from finplan.credit.model import estimate_credit_score, normalize_credit_profile
from finplan.credit.schemas import (
    CreditScoreRequest,
    RecommendationRequest,
    ScenarioRequest,
)
from finplan.credit.simulator import simulate_scenario

router = APIRouter(prefix="/api/credit", tags=["credit"])
logger = logging.getLogger(__name__)


@router.post("/score")
async def score(body: CreditScoreRequest) -> JSONResponse:
    """Score from five pre-normalised weighted factors."""
    result = estimate_credit_score(body.factors)
    logger.info("Credit score estimated grade=%s", result.grade.value)
    return JSONResponse(status_code=200, content=result.model_dump(mode="json"))


@router.post("/normalize")
async def normalize_and_score(payload: dict = Body(...)) -> JSONResponse:
    """Normalise raw credit behaviour onto the standing factors, then score it."""
    factors = normalize_credit_profile(payload)
    result = estimate_credit_score(factors)
    return JSONResponse(
        status_code=200,
        content={
            "factors": [f.model_dump(mode="json") for f in factors],
            "result": result.model_dump(mode="json"),
            "actions": [a.model_dump(mode="json") for a in review_factors(payload)],
        },
    )


@router.post("/simulate")
async def simulate(body: ScenarioRequest) -> JSONResponse:
    """What-if projection from utilization, new accounts and missed payments."""
    result = simulate_scenario(body.baseline_score, body.inputs)
    return JSONResponse(status_code=200, content=result.model_dump(mode="json"))


@router.post("/recommendations")
async def recommendations(body: RecommendationRequest) -> JSONResponse:
    """Band recommendation for a score, plus factor actions when a raw profile is supplied."""
    items = recommend_improvements(body.score)
    if body.profile is not None:
        items = items + review_factors(body.profile)
    return JSONResponse(status_code=200, content=[r.model_dump(mode="json") for r in items])
