"""
Tests for summary metrics, baseline-vs-scenario comparison and chart rows.
"""

from typing import List, Optional

import pytest

from forecaster.services.forecasting.metrics import (
    NOT_REACHED_LABEL,
    break_even_delta,
    build_chart_rows,
    compare_summaries,
    find_break_even,
    safe_divide,
    summarize_forecast,
)
from forecaster.services.forecasting.types import (
    BreakEvenPeriod,
    ForecastPeriodData,
    ScenarioSummaryMetrics,
)


def make_series(profits: List[float], revenue: float = 100.0) -> List[ForecastPeriodData]:
    """Weekly series with the given per-period profits and constant revenue."""
    series = []
    cum_revenue = cum_cost = cum_profit = 0.0
    for i, profit in enumerate(profits, start=1):
        cost = revenue - profit
        cum_revenue += revenue
        cum_cost += cost
        cum_profit += profit
        series.append(ForecastPeriodData(
            period=i,
            point=f"Week {i}",
            revenue=revenue,
            cost=cost,
            profit=profit,
            cumulative_revenue=cum_revenue,
            cumulative_cost=cum_cost,
            cumulative_profit=cum_profit,
        ))
    return series


def make_summary(
    revenue: float = 0.0,
    costs: float = 0.0,
    break_even: Optional[int] = None,
    period_count: int = 6,
) -> ScenarioSummaryMetrics:
    profit = revenue - costs
    return ScenarioSummaryMetrics(
        total_revenue=revenue,
        total_costs=costs,
        total_profit=profit,
        profit_margin=profit / revenue * 100 if revenue > 0 else 0.0,
        break_even_period=BreakEvenPeriod(
            index=break_even,
            label=f"Week {break_even + 1}" if break_even is not None else NOT_REACHED_LABEL,
        ),
        average_weekly_revenue=revenue / period_count,
        average_weekly_costs=costs / period_count,
        average_weekly_profit=profit / period_count,
        period_count=period_count,
    )


def test_safe_divide():
    assert safe_divide(10, 4) == 2.5
    assert safe_divide(10, 0) == 0.0
    assert safe_divide(10, 0, default=-1.0) == -1.0


def test_break_even_is_first_non_negative_cumulative():
    # cumulative: -10, 5, -3, 7
    series = make_series([-10, 15, -8, 10])
    assert find_break_even(series) == BreakEvenPeriod(index=1, label="Week 2")


def test_break_even_at_exactly_zero():
    series = make_series([-10, 10])
    assert find_break_even(series).index == 1


def test_break_even_never_reached():
    series = make_series([-10, -5, 2])
    assert find_break_even(series) == BreakEvenPeriod(index=None, label=NOT_REACHED_LABEL)


def test_summarize_forecast():
    series = make_series([-50, 20, 60, 70])
    summary = summarize_forecast(series)

    assert summary.total_revenue == 400.0
    assert summary.total_costs == 300.0
    assert summary.total_profit == 100.0
    assert summary.profit_margin == 25.0
    assert summary.break_even_period.index == 2
    assert summary.average_weekly_revenue == 100.0
    assert summary.average_weekly_costs == 75.0
    assert summary.average_weekly_profit == 25.0
    assert summary.period_count == 4


def test_margin_is_zero_without_revenue():
    summary = summarize_forecast(make_series([-5, -5], revenue=0.0))
    assert summary.total_revenue == 0.0
    assert summary.profit_margin == 0.0


def test_summarize_empty_series():
    summary = summarize_forecast([])
    assert summary.total_revenue == 0.0
    assert summary.break_even_period.index is None
    assert summary.period_count == 0


def test_compare_summaries_revenue_example():
    baseline = make_summary(revenue=1000.0, costs=800.0)
    scenario = make_summary(revenue=1200.0, costs=800.0)
    comparison = compare_summaries(baseline, scenario)

    assert comparison.revenue_delta == 200.0
    assert comparison.revenue_delta_percent == pytest.approx(20.0)
    assert comparison.costs_delta == 0.0
    assert comparison.costs_delta_percent == 0.0
    assert comparison.profit_delta == 200.0
    assert comparison.profit_delta_percent == pytest.approx(100.0)
    assert comparison.margin_delta == pytest.approx(33.333333 - 20.0)


def test_percent_deltas_are_zero_for_zero_baseline():
    comparison = compare_summaries(make_summary(), make_summary(revenue=500.0, costs=100.0))
    assert comparison.revenue_delta == 500.0
    assert comparison.revenue_delta_percent == 0.0
    assert comparison.costs_delta_percent == 0.0
    assert comparison.profit_delta_percent == 0.0


def test_identical_summaries_compare_to_zero():
    summary = make_summary(revenue=900.0, costs=300.0, break_even=2)
    comparison = compare_summaries(summary, summary)
    assert comparison.to_dict() == {
        "revenueDelta": 0.0,
        "revenueDeltaPercent": 0.0,
        "costsDelta": 0.0,
        "costsDeltaPercent": 0.0,
        "profitDelta": 0.0,
        "profitDeltaPercent": 0.0,
        "marginDelta": 0.0,
        "breakEvenDelta": 0,
    }


def test_break_even_delta_both_reached():
    assert break_even_delta(make_summary(break_even=3), make_summary(break_even=1)) == -2
    assert break_even_delta(make_summary(break_even=1), make_summary(break_even=4)) == 3


def test_break_even_delta_neither_reached():
    assert break_even_delta(make_summary(), make_summary()) == 0


def test_break_even_delta_only_scenario_reaches():
    # baseline counts as the first index past its 6-period horizon
    assert break_even_delta(make_summary(period_count=6), make_summary(break_even=2)) == -4


def test_break_even_delta_only_baseline_reaches():
    assert break_even_delta(make_summary(break_even=2), make_summary(period_count=6)) == 4


def test_chart_rows():
    baseline = make_series([10, 20])
    scenario = make_series([15, 30], revenue=120.0)
    rows = build_chart_rows(baseline, scenario)

    assert rows[0] == {
        "name": "Period 1",
        "baselineRevenue": 100.0,
        "baselineProfit": 10,
        "scenarioRevenue": 120.0,
        "scenarioProfit": 15,
        "revenueDiff": 20.0,
        "profitDiff": 5,
    }
    assert rows[1]["profitDiff"] == 10
    assert len(rows) == 2
