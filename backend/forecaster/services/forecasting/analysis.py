"""
analysis.py — Investment Metrics over a Forecast

Purpose:
- NPV, IRR and payback period of a per-period cash-flow list
- Actual-vs-forecast variance

Rates are per period (a weekly forecast needs a weekly discount rate).
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from forecaster.services.forecasting.metrics import safe_divide
from forecaster.services.forecasting.types import ForecastPeriodData

IRR_MAX_ITERATIONS = 100
IRR_TOLERANCE = 1e-6


@dataclass
class Variance:
    absolute: float
    percent: float


@dataclass
class InvestmentSummary:
    npv: float
    irr: Optional[float]  # percent, None when it cannot be solved
    payback_period: float
    roi: float  # percent of total cost

    def to_dict(self) -> Dict[str, Any]:
        return {
            "npv": self.npv,
            "irr": self.irr,
            "paybackPeriod": self.payback_period,
            "roi": self.roi,
        }


def npv(cash_flows: List[float], discount_rate: float) -> float:
    """Net present value; cash_flows[0] is undiscounted."""
    return sum(cf / (1 + discount_rate) ** t for t, cf in enumerate(cash_flows))


def irr(cash_flows: List[float], guess: float = 0.1) -> Optional[float]:
    """
    Internal rate of return by Newton-Raphson.

    Returns the decimal rate, or None when the cash flows never change sign,
    the derivative vanishes or the iteration does not converge.
    """
    signs = {cf > 0 for cf in cash_flows if cf != 0}
    if len(signs) < 2:
        return None

    rate = guess
    for _ in range(IRR_MAX_ITERATIONS):
        try:
            value = npv(cash_flows, rate)
            derivative = sum(
                -t * cf / (1 + rate) ** (t + 1) for t, cf in enumerate(cash_flows)
            )
        except (OverflowError, ZeroDivisionError):
            return None
        if abs(derivative) < IRR_TOLERANCE:
            return None
        next_rate = rate - value / derivative
        if abs(next_rate - rate) < IRR_TOLERANCE:
            return next_rate
        if next_rate <= -1:
            return None
        rate = next_rate
    return None


def payback_period(cash_flows: List[float]) -> float:
    """
    Periods until cumulative cash flow turns non-negative, interpolated
    between the last negative and the first non-negative point, with
    cash_flows[0] at time 0. len(cash_flows) when never recovered.

    Example: [-100, 50, 100] → 1.5
    """
    cumulative = 0.0
    for t, cf in enumerate(cash_flows):
        previous = cumulative
        cumulative += cf
        if cumulative >= 0:
            if t == 0 or previous >= 0:
                return float(t)
            return (t - 1) + abs(previous) / cf
    return float(len(cash_flows))


def calculate_variance(actual: float, forecast: float) -> Variance:
    """actual - forecast, and that difference as a percent of forecast (0 when forecast is 0)."""
    absolute = actual - forecast
    return Variance(absolute=absolute, percent=safe_divide(absolute, forecast) * 100)


def investment_summary(
    series: List[ForecastPeriodData],
    discount_rate: float,
) -> InvestmentSummary:
    """Investment metrics of a forecast's per-period profit."""
    profits = [period.profit for period in series]
    rate = irr(profits) if profits else None
    total_cost = series[-1].cumulative_cost if series else 0.0
    total_profit = series[-1].cumulative_profit if series else 0.0
    return InvestmentSummary(
        npv=npv(profits, discount_rate),
        irr=rate * 100 if rate is not None else None,
        payback_period=payback_period(profits),
        roi=safe_divide(total_profit, total_cost) * 100,
    )
