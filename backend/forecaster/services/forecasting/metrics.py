"""
metrics.py — Summary & Comparison Metrics

Purpose:
- Reduce a forecast series to ScenarioSummaryMetrics
- Compare a baseline and a scenario summary (ScenarioComparisonMetrics)
- Build per-period baseline-vs-scenario chart rows

Conventions:
- Ratios never raise: a zero denominator yields 0 (profit margin, percent deltas)
- Break-even is the first 0-based index whose cumulative profit is >= 0,
  {index: None, label: "N/A"} when never reached
- breakEvenDelta = scenario index - baseline index. A series that never breaks
  even counts as breaking even at index `period_count` (the first index past
  its horizon), so the sign is the same in every case: negative means the
  scenario breaks even sooner, positive later, 0 when neither does
"""

from typing import Any, Dict, List, Optional

from forecaster.services.forecasting.types import (
    BreakEvenPeriod,
    ForecastPeriodData,
    ScenarioComparisonMetrics,
    ScenarioSummaryMetrics,
)

NOT_REACHED_LABEL = "N/A"


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Safely divide two numbers, returning default if denominator is zero."""
    if denominator == 0 or denominator is None:
        return default
    return numerator / denominator


def find_break_even(series: List[ForecastPeriodData]) -> BreakEvenPeriod:
    """First period whose cumulative profit is non-negative."""
    for index, period in enumerate(series):
        if period.cumulative_profit >= 0:
            return BreakEvenPeriod(index=index, label=period.point)
    return BreakEvenPeriod(index=None, label=NOT_REACHED_LABEL)


def summarize_forecast(series: List[ForecastPeriodData]) -> ScenarioSummaryMetrics:
    """
    Aggregate metrics of one forecast series.

    Totals come from the last period's cumulative values; averages are per period.
    An empty series yields all-zero metrics with no break-even.
    """
    if not series:
        return ScenarioSummaryMetrics(
            total_revenue=0.0,
            total_costs=0.0,
            total_profit=0.0,
            profit_margin=0.0,
            break_even_period=BreakEvenPeriod(index=None, label=NOT_REACHED_LABEL),
            average_weekly_revenue=0.0,
            average_weekly_costs=0.0,
            average_weekly_profit=0.0,
            period_count=0,
        )

    last = series[-1]
    count = len(series)
    total_revenue = last.cumulative_revenue
    total_profit = last.cumulative_profit

    return ScenarioSummaryMetrics(
        total_revenue=total_revenue,
        total_costs=last.cumulative_cost,
        total_profit=total_profit,
        profit_margin=total_profit / total_revenue * 100 if total_revenue > 0 else 0.0,
        break_even_period=find_break_even(series),
        average_weekly_revenue=sum(p.revenue for p in series) / count,
        average_weekly_costs=sum(p.cost for p in series) / count,
        average_weekly_profit=sum(p.profit for p in series) / count,
        period_count=count,
    )


def _percent_change(delta: float, baseline: float) -> float:
    return safe_divide(delta, baseline) * 100


def _break_even_position(summary: ScenarioSummaryMetrics) -> Optional[int]:
    if summary.break_even_period.index is not None:
        return summary.break_even_period.index
    return summary.period_count if summary.period_count else None


def break_even_delta(
    baseline: ScenarioSummaryMetrics,
    scenario: ScenarioSummaryMetrics,
) -> int:
    """Scenario minus baseline break-even index (see module docstring)."""
    baseline_index = baseline.break_even_period.index
    scenario_index = scenario.break_even_period.index
    if baseline_index is None and scenario_index is None:
        return 0
    if baseline_index is not None and scenario_index is not None:
        return scenario_index - baseline_index

    baseline_pos = _break_even_position(baseline)
    scenario_pos = _break_even_position(scenario)
    if baseline_pos is None:
        # Baseline horizon unknown: scenario reaching break-even is a gain
        baseline_pos = scenario_index + 1
    if scenario_pos is None:
        scenario_pos = baseline_index + 1
    return scenario_pos - baseline_pos


def compare_summaries(
    baseline: ScenarioSummaryMetrics,
    scenario: ScenarioSummaryMetrics,
) -> ScenarioComparisonMetrics:
    """Absolute and percent differences of scenario vs baseline."""
    revenue_delta = scenario.total_revenue - baseline.total_revenue
    costs_delta = scenario.total_costs - baseline.total_costs
    profit_delta = scenario.total_profit - baseline.total_profit

    return ScenarioComparisonMetrics(
        revenue_delta=revenue_delta,
        revenue_delta_percent=_percent_change(revenue_delta, baseline.total_revenue),
        costs_delta=costs_delta,
        costs_delta_percent=_percent_change(costs_delta, baseline.total_costs),
        profit_delta=profit_delta,
        profit_delta_percent=_percent_change(profit_delta, baseline.total_profit),
        margin_delta=scenario.profit_margin - baseline.profit_margin,
        break_even_delta=break_even_delta(baseline, scenario),
    )


def build_chart_rows(
    baseline_series: List[ForecastPeriodData],
    scenario_series: List[ForecastPeriodData],
) -> List[Dict[str, Any]]:
    """Per-period baseline vs scenario rows, one per baseline period."""
    rows = []
    for index, baseline in enumerate(baseline_series):
        scenario = scenario_series[index] if index < len(scenario_series) else None
        scenario_revenue = scenario.revenue if scenario else 0.0
        scenario_profit = scenario.profit if scenario else 0.0
        rows.append({
            "name": f"Period {baseline.period}",
            "baselineRevenue": baseline.revenue,
            "baselineProfit": baseline.profit,
            "scenarioRevenue": scenario_revenue,
            "scenarioProfit": scenario_profit,
            "revenueDiff": scenario_revenue - baseline.revenue,
            "profitDiff": scenario_profit - baseline.profit,
        })
    return rows
