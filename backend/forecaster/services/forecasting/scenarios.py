"""
scenarios.py — Scenario Entity Helpers & Baseline-vs-Scenario Pipeline

Purpose:
- Create scenarios (all-zero deltas) and edit their deltas field by field
- Evaluate a scenario: baseline series, adjusted series, both summaries,
  comparison metrics and chart rows in one call

Series generation is memoized through core.cache when
settings.FORECAST_CACHE_ENABLED is set. The cache key is built from the full
content of the model and the delta set.
"""

from dataclasses import asdict, replace
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional

from forecaster.core.cache import cache_get, cache_set, make_content_key
from forecaster.core.config import settings
from forecaster.core.logging import get_logger
from forecaster.services.forecasting.deltas import (
    apply_scenario_deltas,
    merge_deltas,
)
from forecaster.services.forecasting.metrics import (
    build_chart_rows,
    compare_summaries,
    summarize_forecast,
)
from forecaster.services.forecasting.time_series import generate_forecast_time_series
from forecaster.services.forecasting.types import (
    FinancialModel,
    ForecastPeriodData,
    Scenario,
    ScenarioForecastData,
    ScenarioParameterDeltas,
    ensure_complete,
)

logger = get_logger(__name__)

CACHE_NAMESPACE = "forecast"


def create_scenario(
    name: str,
    project_id: str,
    base_model_id: str,
    description: Optional[str] = None,
    scenario_id: Optional[str] = None,
) -> Scenario:
    """New scenario with neutral deltas."""
    now = datetime.now(timezone.utc)
    return Scenario(
        id=scenario_id,
        name=name,
        description=description,
        project_id=project_id,
        base_model_id=base_model_id,
        parameter_deltas=ScenarioParameterDeltas(),
        created_at=now,
        updated_at=now,
    )


def update_scenario_deltas(scenario: Scenario, changes: Mapping[str, Any]) -> Scenario:
    """Copy of `scenario` with only the named delta fields changed."""
    return replace(
        scenario,
        parameter_deltas=merge_deltas(scenario.parameter_deltas, changes),
        updated_at=datetime.now(timezone.utc),
    )


def forecast_cache_key(model: FinancialModel, deltas: Optional[ScenarioParameterDeltas] = None) -> str:
    """Content key for a (model, deltas) pair; None deltas means baseline."""
    delta_payload = deltas.to_dict() if deltas is not None else None
    return make_content_key(
        CACHE_NAMESPACE,
        asdict(model),
        delta_payload,
        settings.FORECAST_DEFAULT_HORIZON,
    )


def cached_forecast(
    model: FinancialModel,
    deltas: Optional[ScenarioParameterDeltas] = None,
) -> List[ForecastPeriodData]:
    """
    Forecast series for `model` (adjusted by `deltas` when given), memoized.

    The returned list is a fresh list; the period rows are shared with the
    cache and must be treated as read-only.
    """
    def compute() -> List[ForecastPeriodData]:
        adjusted = apply_scenario_deltas(model, deltas) if deltas is not None else model
        return generate_forecast_time_series(adjusted)

    ensure_complete(model)

    if not settings.FORECAST_CACHE_ENABLED:
        return compute()

    key = forecast_cache_key(model, deltas)
    series = cache_get(key)
    if series is None:
        series = compute()
        cache_set(key, series)
    else:
        logger.debug("Forecast cache hit %s", key)
    return list(series)


def evaluate_scenario(
    base_model: FinancialModel,
    deltas: ScenarioParameterDeltas,
) -> ScenarioForecastData:
    """
    Run baseline and scenario forecasts and compare them.

    Raises:
        IncompleteModelError: the baseline model lacks required fields
    """
    baseline_series = cached_forecast(base_model)
    scenario_series = cached_forecast(base_model, deltas)

    baseline_summary = summarize_forecast(baseline_series)
    scenario_summary = summarize_forecast(scenario_series)
    comparison = compare_summaries(baseline_summary, scenario_summary)

    logger.info(
        "Evaluated scenario on model %s: revenue %+.2f (%.1f%%), profit %+.2f",
        base_model.id or "<unsaved>",
        comparison.revenue_delta,
        comparison.revenue_delta_percent,
        comparison.profit_delta,
    )

    return ScenarioForecastData(
        baseline_data=baseline_series,
        scenario_data=scenario_series,
        baseline_summary=baseline_summary,
        summary_metrics=scenario_summary,
        comparison_metrics=comparison,
        chart_data=build_chart_rows(baseline_series, scenario_series),
    )
