"""
Forecast engine: growth curves, per-period revenue/cost, time series,
scenario deltas and comparison metrics.
"""

from forecaster.services.forecasting.deltas import (
    apply_scenario_deltas,
    generate_scenario_time_series,
    merge_deltas,
)
from forecaster.services.forecasting.growth import growth_factor
from forecaster.services.forecasting.metrics import compare_summaries, summarize_forecast
from forecaster.services.forecasting.scenarios import evaluate_scenario
from forecaster.services.forecasting.time_series import generate_forecast_time_series
from forecaster.services.forecasting.types import (
    FinancialModel,
    ForecastPeriodData,
    IncompleteModelError,
    InvalidAssumptionError,
    ScenarioParameterDeltas,
    build_financial_model,
    build_parameter_deltas,
)

__all__ = [
    "FinancialModel",
    "ForecastPeriodData",
    "IncompleteModelError",
    "InvalidAssumptionError",
    "ScenarioParameterDeltas",
    "apply_scenario_deltas",
    "build_financial_model",
    "build_parameter_deltas",
    "compare_summaries",
    "evaluate_scenario",
    "generate_forecast_time_series",
    "generate_scenario_time_series",
    "growth_factor",
    "merge_deltas",
    "summarize_forecast",
]
