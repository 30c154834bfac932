"""
revenue.py — Per-Period Revenue Calculator

Purpose:
- Compute one period's revenue, broken out by stream

Attendance-driven (WeeklyEvent) models:
- attendance(p) = initialWeeklyAttendance × factor(attendanceGrowthRate, p),
  rounded to whole attendees
- each per-attendee spend grows at its own rate when useCustomerSpendGrowth
  is set, otherwise it is held flat
- stream revenue = attendance × spend of that category

Generic streams:
- value × factor(growthModel.type, growthModel.rate, p), converted to the
  model's period unit when the stream declares a different frequency

Growth shape (linear/exponential) always follows growthModel.type; attendance
and spend growth rates are percentages, growthModel.rate is a decimal.

Attendance is computed in closed form from the period index, so the optional
previous_attendance argument of revenue_for_period never changes a value; it
only feeds the period-over-period debug log.
"""

import math
from typing import Dict, Optional, Tuple

from forecaster.core.config import settings
from forecaster.core.logging import get_logger
from forecaster.services.forecasting.growth import growth_factor, percent_to_rate
from forecaster.services.forecasting.types import (
    FinancialModel,
    GrowthType,
    PeriodUnit,
    RevenueBreakdown,
    RevenueStream,
    WeeklyEventMetadata,
    ensure_complete,
)

logger = get_logger(__name__)

TICKET_STREAM = "Ticket Sales"
FB_STREAM = "F&B Sales"
MERCHANDISE_STREAM = "Merchandise Sales"
ONLINE_STREAM = "Online Sales"
MISC_STREAM = "Miscellaneous Revenue"

# (stream name, PerCustomerSpend attribute, SpendGrowth attribute)
ATTENDEE_STREAMS: Tuple[Tuple[str, str, str], ...] = (
    (TICKET_STREAM, "ticket_price", "ticket_price_growth"),
    (FB_STREAM, "fb_spend", "fb_spend_growth"),
    (MERCHANDISE_STREAM, "merchandise_spend", "merchandise_spend_growth"),
    (ONLINE_STREAM, "online_spend", "online_spend_growth"),
    (MISC_STREAM, "misc_spend", "misc_spend_growth"),
)
ATTENDEE_STREAM_NAMES = frozenset(name for name, _, _ in ATTENDEE_STREAMS)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def attendance_for_period(
    metadata: WeeklyEventMetadata,
    growth_type: GrowthType,
    period_index: int,
) -> int:
    """Whole-attendee attendance for one period."""
    rate = percent_to_rate(metadata.growth.attendance_growth_rate)
    raw = metadata.initial_weekly_attendance * growth_factor(growth_type, rate, period_index)
    return _round_half_up(raw)


def spend_for_period(
    metadata: WeeklyEventMetadata,
    growth_type: GrowthType,
    period_index: int,
) -> Dict[str, float]:
    """Per-attendee spend by stream name for one period."""
    spend: Dict[str, float] = {}
    for stream_name, spend_attr, growth_attr in ATTENDEE_STREAMS:
        base = getattr(metadata.per_customer, spend_attr) or 0.0
        if metadata.growth.use_customer_spend_growth:
            rate = percent_to_rate(getattr(metadata.growth, growth_attr))
            base *= growth_factor(growth_type, rate, period_index)
        spend[stream_name] = base
    return spend


def frequency_multiplier(
    frequency: Optional[str],
    period_unit: PeriodUnit,
    weeks_per_month: float,
) -> float:
    """Convert a stream's stated frequency into per-period units."""
    if frequency is None or frequency == "one-time":
        return 1.0

    months_per_period = 1.0 if period_unit is PeriodUnit.MONTH else 1.0 / weeks_per_month
    if frequency == "weekly":
        return 1.0 if period_unit is PeriodUnit.WEEK else weeks_per_month
    if frequency == "monthly":
        return months_per_period
    if frequency == "quarterly":
        return months_per_period / 3.0
    if frequency == "annually":
        return 1.0 / 52.0 if period_unit is PeriodUnit.WEEK else 1.0 / 12.0
    raise ValueError(f"Unsupported revenue frequency: {frequency!r}")


def stream_value_for_period(
    stream: RevenueStream,
    growth_type: GrowthType,
    rate: float,
    period_index: int,
    period_unit: PeriodUnit,
    weeks_per_month: float,
) -> float:
    """Grown, unit-converted value of one generic stream."""
    if stream.frequency == "one-time":
        return stream.value if period_index == 1 else 0.0
    multiplier = frequency_multiplier(stream.frequency, period_unit, weeks_per_month)
    return stream.value * growth_factor(growth_type, rate, period_index) * multiplier


def revenue_for_period(
    model: FinancialModel,
    period_index: int,
    previous_attendance: Optional[int] = None,
) -> RevenueBreakdown:
    """
    Revenue for one period.

    Args:
        model: complete financial model
        period_index: 1-based period
        previous_attendance: attendance of the prior period, if the caller
            tracks it; only used for period-over-period debug logging since
            attendance is computed in closed form

    Returns:
        RevenueBreakdown with total, per-stream values and (attendance models) attendance

    Raises:
        IncompleteModelError: model lacks required fields
    """
    ensure_complete(model)
    assumptions = model.assumptions
    growth_type = assumptions.growth_model.type
    event = assumptions.event_metadata

    by_stream: Dict[str, float] = {}
    attendance: Optional[int] = None

    if event is not None:
        attendance = attendance_for_period(event, growth_type, period_index)
        for stream_name, spend in spend_for_period(event, growth_type, period_index).items():
            by_stream[stream_name] = attendance * spend
        if previous_attendance is not None:
            logger.debug(
                "Period %d attendance %d (prev %d)", period_index, attendance, previous_attendance
            )

    for stream in assumptions.revenue:
        # Attendee streams are already derived from attendance × spend
        if event is not None and stream.name in ATTENDEE_STREAM_NAMES:
            continue
        value = stream_value_for_period(
            stream,
            growth_type,
            assumptions.growth_model.rate,
            period_index,
            assumptions.period_unit,
            settings.WEEKS_PER_MONTH,
        )
        by_stream[stream.name] = by_stream.get(stream.name, 0.0) + value

    return RevenueBreakdown(
        total=sum(by_stream.values()),
        by_stream=by_stream,
        attendance=attendance,
    )
