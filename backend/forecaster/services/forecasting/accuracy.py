"""
accuracy.py — Forecast Accuracy Against Actuals

Purpose:
- Pair recorded actuals with forecast periods (by period number)
- Per-period absolute / percentage error and letter grade
- Overall MAPE, recent trend and a 0-100 confidence score

MAPE skips periods whose actual is zero (no percentage error is defined for
them). The trend compares the mean percentage error of the first and second
half of the last six periods; fewer than three periods is always "stable".
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from forecaster.core.logging import get_logger
from forecaster.services.forecasting.types import ForecastPeriodData, InvalidAssumptionError

logger = get_logger(__name__)

TREND_WINDOW = 6
TREND_THRESHOLD = 5.0

# Upper bound of percentage error for each grade
GRADE_BOUNDS = (
    (10.0, "A"),
    (20.0, "B"),
    (30.0, "C"),
    (40.0, "D"),
)

# metric name → (actuals key, ForecastPeriodData attribute)
METRICS = {
    "revenue": ("revenue", "revenue"),
    "costs": ("cost", "cost"),
    "profit": ("profit", "profit"),
}


@dataclass
class AccuracyPeriod:
    period: int
    projected: float
    actual: float
    absolute_error: float
    percentage_error: float
    accuracy_grade: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "period": self.period,
            "projected": self.projected,
            "actual": self.actual,
            "absoluteError": self.absolute_error,
            "percentageError": self.percentage_error,
            "accuracyGrade": self.accuracy_grade,
        }


@dataclass
class ForecastAccuracy:
    metric: str
    periods: List[AccuracyPeriod]
    overall_mape: float
    accuracy_trend: str
    confidence_score: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "metric": self.metric,
            "periods": [p.to_dict() for p in self.periods],
            "overallMAPE": self.overall_mape,
            "accuracyTrend": self.accuracy_trend,
            "confidenceScore": self.confidence_score,
        }


def accuracy_grade(percentage_error: float) -> str:
    for bound, grade in GRADE_BOUNDS:
        if percentage_error <= bound:
            return grade
    return "F"


def mape(projections: List[float], actuals: List[float]) -> float:
    """Mean absolute percentage error, zero actuals excluded."""
    if len(projections) != len(actuals) or not projections:
        return 0.0
    errors = [
        abs((actual - projected) / actual) * 100
        for projected, actual in zip(projections, actuals)
        if actual != 0
    ]
    return sum(errors) / len(errors) if errors else 0.0


def accuracy_trend(periods: List[AccuracyPeriod]) -> str:
    if len(periods) < 3:
        return "stable"
    recent = periods[-TREND_WINDOW:]
    half = len(recent) // 2
    first = sum(p.percentage_error for p in recent[:half]) / half
    second = sum(p.percentage_error for p in recent[half:]) / (len(recent) - half)
    if second < first - TREND_THRESHOLD:
        return "improving"
    if second > first + TREND_THRESHOLD:
        return "declining"
    return "stable"


def confidence_score(overall_mape: float, trend: str) -> int:
    score = max(0.0, 100 - overall_mape * 2)
    if trend == "improving":
        score = min(100.0, score + 10)
    elif trend == "declining":
        score = max(0.0, score - 15)
    return int(round(score))


def forecast_accuracy(
    series: List[ForecastPeriodData],
    actuals: List[Mapping[str, Any]],
    metric: str = "revenue",
) -> ForecastAccuracy:
    """
    Accuracy of `series` for one metric against recorded actuals.

    Args:
        series: generated forecast
        actuals: [{"period": int, "revenue"?: float, "cost"?: float, "profit"?: float}]
            Profit actuals are derived as revenue - cost when not given.
        metric: "revenue", "costs" or "profit"

    Raises:
        InvalidAssumptionError: unknown metric, an actuals entry without an
            integer period, or a non-numeric actual value
    """
    if metric not in METRICS:
        raise InvalidAssumptionError(f"metric must be one of: {', '.join(METRICS)}")
    actual_key, attr = METRICS[metric]
    by_period = {p.period: p for p in series}

    periods: List[AccuracyPeriod] = []
    entries = [(_period(entry, i), entry) for i, entry in enumerate(actuals)]
    for period, entry in sorted(entries, key=lambda pair: pair[0]):
        forecast = by_period.get(period)
        actual = _actual_value(entry, actual_key)
        if forecast is None or actual is None:
            continue
        projected = getattr(forecast, attr)
        absolute_error = abs(actual - projected)
        percentage_error = absolute_error / abs(actual) * 100 if actual != 0 else 0.0
        periods.append(AccuracyPeriod(
            period=forecast.period,
            projected=projected,
            actual=actual,
            absolute_error=absolute_error,
            percentage_error=percentage_error,
            accuracy_grade=accuracy_grade(percentage_error),
        ))

    overall = mape([p.projected for p in periods], [p.actual for p in periods])
    trend = accuracy_trend(periods)
    logger.debug("Accuracy for %s over %d periods: MAPE %.2f", metric, len(periods), overall)
    return ForecastAccuracy(
        metric=metric,
        periods=periods,
        overall_mape=overall,
        accuracy_trend=trend,
        confidence_score=confidence_score(overall, trend),
    )


def _period(entry: Any, index: int) -> int:
    if not isinstance(entry, Mapping):
        raise InvalidAssumptionError(f"actuals[{index}] must be an object, got {entry!r}")
    period = entry.get("period")
    if isinstance(period, float) and period.is_integer():
        period = int(period)
    if isinstance(period, bool) or not isinstance(period, int):
        raise InvalidAssumptionError(f"actuals[{index}].period must be an integer, got {period!r}")
    return period


def _number(value: Any, field_name: str) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidAssumptionError(f"{field_name} must be a number, got {value!r}")
    return float(value)


def _actual_value(entry: Mapping[str, Any], key: str) -> Optional[float]:
    if key == "profit" and entry.get("profit") is None:
        revenue = _number(entry.get("revenue"), "actuals.revenue")
        cost = _number(entry.get("cost"), "actuals.cost")
        if revenue is None or cost is None:
            return None
        return revenue - cost
    return _number(entry.get(key), f"actuals.{key}")
