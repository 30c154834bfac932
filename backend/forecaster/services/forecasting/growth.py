"""
growth.py — Growth Curve Evaluator

Purpose:
- Turn a growth assumption (linear or exponential, decimal rate) into the
  multiplier that projects a period-1 value into a later period.

Shapes (period 1 always has factor 1):
- linear:       1 + rate × (period - 1)
- exponential:  (1 + rate) ^ (period - 1)

Declines:
- Negative rates are allowed. A factor never drops below 0: a linear decline
  bottoms out at zero, and an exponential base (1 + rate) is clamped at 0, so
  rate <= -1 means the driver is gone from period 2 onwards instead of
  oscillating in sign.
"""

from typing import Union

from forecaster.services.forecasting.types import GrowthType


def percent_to_rate(percent: float) -> float:
    """2.5 (percent) → 0.025 (decimal rate)."""
    return (percent or 0.0) / 100.0


def growth_factor(
    growth_type: Union[GrowthType, str],
    rate: float,
    period_index: int,
) -> float:
    """
    Multiplier applied to a base value in `period_index` (1-based).

    Args:
        growth_type: "linear" or "exponential"
        rate: decimal growth per period (0.1 = 10%)
        period_index: forecast period, >= 1

    Returns:
        Non-negative growth factor.

    Raises:
        ValueError: period_index < 1 or unknown growth type
    """
    if period_index < 1:
        raise ValueError(f"period_index must be >= 1, got {period_index}")

    growth_type = GrowthType(growth_type)
    steps = period_index - 1
    rate = rate or 0.0

    if growth_type is GrowthType.LINEAR:
        factor = 1.0 + rate * steps
    else:
        base = max(1.0 + rate, 0.0)
        factor = base ** steps

    return max(factor, 0.0)
