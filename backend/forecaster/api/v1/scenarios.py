"""
scenarios.py — Scenario API Endpoints

Purpose:
- Evaluate a scenario (baseline model + parameter deltas) against its baseline
- Return advisory "related change" suggestions for a delta edit

Endpoints:
- POST /api/v1/scenarios/evaluate
- POST /api/v1/scenarios/suggestions
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from forecaster.api.v1.forecasts import invalid_model_error
from forecaster.core.logging import get_logger
from forecaster.services.forecasting.relationships import (
    describe_relationship,
    suggest_related_changes,
)
from forecaster.services.forecasting.scenarios import evaluate_scenario
from forecaster.services.forecasting.types import (
    IncompleteModelError,
    InvalidAssumptionError,
    build_financial_model,
    build_parameter_deltas,
)

logger = get_logger(__name__)

router = APIRouter(
    prefix="/scenarios",
    tags=["scenarios"]
)

# -----------------------------------------------------------------------------
# Request/Response Schemas
# -----------------------------------------------------------------------------


class EvaluateScenarioRequest(BaseModel):
    model: Dict[str, Any]
    deltas: Optional[Dict[str, Any]] = None


class SuggestionsRequest(BaseModel):
    sourceParam: str
    sourceValue: float
    deltas: Optional[Dict[str, Any]] = None


class SuggestionsResponse(BaseModel):
    suggestions: Dict[str, float]
    descriptions: Dict[str, str]


# -----------------------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------------------


@router.post("/evaluate")
async def evaluate(request: EvaluateScenarioRequest):
    """
    Baseline and scenario series with summaries, comparison and chart rows.

    Omitted delta fields are neutral, so an empty `deltas` object returns a
    scenario identical to the baseline.
    """
    try:
        model = build_financial_model(request.model)
        deltas = build_parameter_deltas(request.deltas)
        return evaluate_scenario(model, deltas).to_dict()
    except (IncompleteModelError, InvalidAssumptionError) as exc:
        logger.warning("Rejected scenario request: %s", exc)
        raise invalid_model_error(exc)
    except Exception as exc:
        logger.exception("Error evaluating scenario: %s", exc)
        raise HTTPException(status_code=500, detail=f"Error evaluating scenario: {str(exc)}")


@router.post("/suggestions", response_model=SuggestionsResponse)
async def suggestions(request: SuggestionsRequest):
    """
    Suggested values for parameters related to the one being edited.

    Suggestions are never applied here; the client applies the ones the user accepts.
    """
    try:
        deltas = build_parameter_deltas(request.deltas)
        suggested = suggest_related_changes(request.sourceParam, request.sourceValue, deltas)
    except InvalidAssumptionError as exc:
        logger.warning("Rejected suggestions request: %s", exc)
        raise invalid_model_error(exc)

    return SuggestionsResponse(
        suggestions=suggested,
        descriptions={
            target: describe_relationship(request.sourceParam, target) or ""
            for target in suggested
        },
    )
