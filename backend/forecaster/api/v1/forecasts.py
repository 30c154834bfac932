"""
forecasts.py — Forecast API Endpoints

Purpose:
- Generate a forecast series (plus its summary) from a posted model
- Investment metrics and actual-vs-forecast accuracy over that series

Endpoints:
- POST /api/v1/forecasts/generate
- POST /api/v1/forecasts/analysis
- POST /api/v1/forecasts/accuracy

No persistence: the model arrives in the request body in its stored JSON form.
"""

from typing import Any, Dict, List, Literal

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from forecaster.core.logging import get_logger
from forecaster.services.forecasting.accuracy import forecast_accuracy
from forecaster.services.forecasting.analysis import investment_summary
from forecaster.services.forecasting.metrics import summarize_forecast
from forecaster.services.forecasting.scenarios import cached_forecast
from forecaster.services.forecasting.types import (
    IncompleteModelError,
    InvalidAssumptionError,
    build_financial_model,
)

logger = get_logger(__name__)

router = APIRouter(
    prefix="/forecasts",
    tags=["forecasts"]
)

# -----------------------------------------------------------------------------
# Request/Response Schemas
# -----------------------------------------------------------------------------


class GenerateForecastRequest(BaseModel):
    model: Dict[str, Any]


class GenerateForecastResponse(BaseModel):
    periods: List[Dict[str, Any]]
    summary: Dict[str, Any]


class AnalysisRequest(BaseModel):
    model: Dict[str, Any]
    discountRate: float = Field(0.1, description="Per-period discount rate (decimal)")


class AccuracyRequest(BaseModel):
    model: Dict[str, Any]
    actuals: List[Dict[str, Any]]
    metric: Literal["revenue", "costs", "profit"] = "revenue"


def invalid_model_error(exc: ValueError) -> HTTPException:
    """422 payload for models the engine cannot compute."""
    detail: Dict[str, Any] = {"error": "incomplete_model" if isinstance(exc, IncompleteModelError)
                              else "invalid_assumption",
                              "message": str(exc)}
    if isinstance(exc, IncompleteModelError):
        detail["missingFields"] = exc.missing_fields
    return HTTPException(status_code=422, detail=detail)


# -----------------------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------------------


@router.post("/generate", response_model=GenerateForecastResponse)
async def generate_forecast(request: GenerateForecastRequest):
    """
    Generate the period-by-period forecast for a model.

    Returns every period's revenue/cost/profit (with cumulative values and
    breakdowns) and the summary metrics of the series.
    """
    try:
        model = build_financial_model(request.model)
        series = cached_forecast(model)
        return GenerateForecastResponse(
            periods=[p.to_dict() for p in series],
            summary=summarize_forecast(series).to_dict(),
        )
    except (IncompleteModelError, InvalidAssumptionError) as exc:
        logger.warning("Rejected forecast request: %s", exc)
        raise invalid_model_error(exc)
    except Exception as exc:
        logger.exception("Error generating forecast: %s", exc)
        raise HTTPException(status_code=500, detail=f"Error generating forecast: {str(exc)}")


@router.post("/analysis")
async def analyze_forecast(request: AnalysisRequest):
    """NPV / IRR / payback / ROI of the forecast's per-period profit."""
    try:
        model = build_financial_model(request.model)
        series = cached_forecast(model)
        return investment_summary(series, request.discountRate).to_dict()
    except (IncompleteModelError, InvalidAssumptionError) as exc:
        logger.warning("Rejected analysis request: %s", exc)
        raise invalid_model_error(exc)
    except Exception as exc:
        logger.exception("Error analyzing forecast: %s", exc)
        raise HTTPException(status_code=500, detail=f"Error analyzing forecast: {str(exc)}")


@router.post("/accuracy")
async def forecast_accuracy_report(request: AccuracyRequest):
    """Accuracy of the forecast against recorded actuals for one metric."""
    try:
        model = build_financial_model(request.model)
        series = cached_forecast(model)
        return forecast_accuracy(series, request.actuals, request.metric).to_dict()
    except (IncompleteModelError, InvalidAssumptionError) as exc:
        logger.warning("Rejected accuracy request: %s", exc)
        raise invalid_model_error(exc)
    except Exception as exc:
        logger.exception("Error computing forecast accuracy: %s", exc)
        raise HTTPException(status_code=500, detail=f"Error computing accuracy: {str(exc)}")
