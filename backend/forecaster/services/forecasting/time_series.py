"""
time_series.py — Forecast Time-Series Generator

Purpose:
- Drive the revenue and cost calculators across periods 1..N
- Accumulate cumulative revenue / cost / profit
- Return the ordered ForecastPeriodData series

Period count:
- WeeklyEvent models: metadata.weeks
- Generic models: metadata.months
- Otherwise: settings.FORECAST_DEFAULT_HORIZON

Invariants of the output:
- profit = revenue - cost for every period
- cumulative_x[p] = cumulative_x[p-1] + x[p], cumulative_x[1] = x[1]
- one row per period, ascending, no rounding applied

Deterministic: the same model always yields the same series.
"""

from typing import List, Optional

from forecaster.core.config import settings
from forecaster.core.logging import get_logger
from forecaster.services.forecasting.costs import cost_for_period
from forecaster.services.forecasting.revenue import revenue_for_period
from forecaster.services.forecasting.types import (
    FinancialModel,
    ForecastPeriodData,
    ensure_complete,
)

logger = get_logger(__name__)


def generate_forecast_time_series(
    model: FinancialModel,
    default_horizon: Optional[int] = None,
) -> List[ForecastPeriodData]:
    """
    Generate the full forecast series for a model.

    Args:
        model: financial model (baseline or scenario-adjusted)
        default_horizon: period count for models without their own duration;
            defaults to settings.FORECAST_DEFAULT_HORIZON

    Returns:
        List of ForecastPeriodData, one per period

    Raises:
        IncompleteModelError: required assumptions are missing. No partial or
            zero-filled series is ever returned.
    """
    ensure_complete(model)
    assumptions = model.assumptions
    horizon = default_horizon or settings.FORECAST_DEFAULT_HORIZON
    period_count = assumptions.period_count(horizon)
    unit = assumptions.period_unit.value

    series: List[ForecastPeriodData] = []
    cumulative_revenue = 0.0
    cumulative_cost = 0.0
    cumulative_profit = 0.0
    previous_attendance = None

    for period in range(1, period_count + 1):
        revenue = revenue_for_period(model, period, previous_attendance)
        cost = cost_for_period(model, period, revenue.by_stream, period_count)
        profit = revenue.total - cost.total

        cumulative_revenue += revenue.total
        cumulative_cost += cost.total
        cumulative_profit += profit

        series.append(ForecastPeriodData(
            period=period,
            point=f"{unit} {period}",
            revenue=revenue.total,
            cost=cost.total,
            profit=profit,
            cumulative_revenue=cumulative_revenue,
            cumulative_cost=cumulative_cost,
            cumulative_profit=cumulative_profit,
            attendance=revenue.attendance,
            revenue_by_stream=revenue.by_stream,
            cost_by_category=cost.by_category,
        ))
        previous_attendance = revenue.attendance

        if period <= 3:
            logger.debug(
                "[%s] revenue=%.2f cost=%.2f profit=%.2f",
                series[-1].point, revenue.total, cost.total, profit,
            )

    logger.info(
        "Generated %d-period forecast for model %s (%s)",
        period_count, model.id or "<unsaved>", model.name or "unnamed",
    )
    return series
