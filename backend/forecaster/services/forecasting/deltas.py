"""
deltas.py — Scenario Delta Applicator

Purpose:
- Apply ScenarioParameterDeltas to a baseline FinancialModel, producing a new
  (adjusted) model; the baseline is never modified
- Merge partial delta edits without touching unrelated fields

Adjustments:
- pricingPercent           × (1 + p/100) on every per-attendee spend and every
                           generic revenue stream value
- attendanceGrowthPercent  added (percentage points) to attendanceGrowthRate
- cogsMultiplier           × (1 + m/100) on fbCOGSPercent, merchandiseCogsPercent
                           and staffCostPerPerson
- marketingSpendPercent    × (1 + m/100) on channel budgets and the high-level
                           budget; marketingSpendByChannel[id] replaces it for
                           that channel

Every neutral (0) field leaves its driver bit-for-bit unchanged, so all-zero
deltas reproduce the baseline series exactly.
"""

from dataclasses import replace
from typing import Any, Dict, List, Mapping

from forecaster.core.logging import get_logger
from forecaster.services.forecasting.time_series import generate_forecast_time_series
from forecaster.services.forecasting.types import (
    DELTA_FIELDS,
    FinancialModel,
    ForecastPeriodData,
    InvalidAssumptionError,
    MarketingSetup,
    ScenarioParameterDeltas,
    ensure_complete,
)

logger = get_logger(__name__)


def _scale(value: float, percent: float) -> float:
    if not percent:
        return value
    return value * (1 + percent / 100.0)


def _adjust_marketing(marketing: MarketingSetup, deltas: ScenarioParameterDeltas) -> MarketingSetup:
    channels = tuple(
        replace(
            channel,
            weekly_budget=_scale(
                channel.weekly_budget,
                deltas.marketing_spend_by_channel.get(channel.id, deltas.marketing_spend_percent),
            ),
        )
        for channel in marketing.channels
    )
    return replace(
        marketing,
        channels=channels,
        total_budget=_scale(marketing.total_budget, deltas.marketing_spend_percent),
    )


def apply_scenario_deltas(
    base_model: FinancialModel,
    deltas: ScenarioParameterDeltas,
) -> FinancialModel:
    """
    Return a new model with the scenario deltas applied.

    Raises:
        IncompleteModelError: the baseline lacks required fields
    """
    ensure_complete(base_model)
    assumptions = base_model.assumptions

    revenue = tuple(
        replace(stream, value=_scale(stream.value, deltas.pricing_percent))
        for stream in assumptions.revenue
    )

    metadata = assumptions.metadata
    event = assumptions.event_metadata
    if event is not None:
        spend = event.per_customer
        metadata = replace(
            event,
            per_customer=replace(
                spend,
                ticket_price=_scale(spend.ticket_price, deltas.pricing_percent),
                fb_spend=_scale(spend.fb_spend, deltas.pricing_percent),
                merchandise_spend=_scale(spend.merchandise_spend, deltas.pricing_percent),
                online_spend=_scale(spend.online_spend, deltas.pricing_percent),
                misc_spend=_scale(spend.misc_spend, deltas.pricing_percent),
            ),
            growth=replace(
                event.growth,
                attendance_growth_rate=event.growth.attendance_growth_rate + deltas.attendance_growth_percent,
            ),
            costs=replace(
                event.costs,
                fb_cogs_percent=_scale(event.costs.fb_cogs_percent, deltas.cogs_multiplier),
                merchandise_cogs_percent=_scale(event.costs.merchandise_cogs_percent, deltas.cogs_multiplier),
                staff_cost_per_person=_scale(event.costs.staff_cost_per_person, deltas.cogs_multiplier),
            ),
        )

    marketing = assumptions.marketing
    if marketing is not None:
        marketing = _adjust_marketing(marketing, deltas)

    logger.debug("Applied scenario deltas %s to model %s", deltas.to_dict(), base_model.id)
    return replace(
        base_model,
        assumptions=replace(
            assumptions,
            revenue=revenue,
            metadata=metadata,
            marketing=marketing,
        ),
    )


def generate_scenario_time_series(
    base_model: FinancialModel,
    deltas: ScenarioParameterDeltas,
) -> List[ForecastPeriodData]:
    """Forecast series of the baseline model adjusted by `deltas`."""
    return generate_forecast_time_series(apply_scenario_deltas(base_model, deltas))


def merge_deltas(
    deltas: ScenarioParameterDeltas,
    changes: Mapping[str, Any],
) -> ScenarioParameterDeltas:
    """
    Return `deltas` with only the named fields replaced.

    Keys may be contract names (pricingPercent) or attribute names
    (pricing_percent). marketingSpendByChannel entries are merged per channel,
    so editing one channel keeps the others.

    Raises:
        InvalidAssumptionError: unknown field or non-numeric value
    """
    attributes = set(DELTA_FIELDS.values())
    updates: Dict[str, Any] = {}

    for key, value in changes.items():
        attr = DELTA_FIELDS.get(key, key)
        if attr not in attributes:
            raise InvalidAssumptionError(f"Unknown delta field: {key}")

        if attr == "marketing_spend_by_channel":
            if not isinstance(value, Mapping):
                raise InvalidAssumptionError("marketingSpendByChannel must be a mapping")
            merged = dict(deltas.marketing_spend_by_channel)
            for channel_id, pct in value.items():
                merged[str(channel_id)] = _require_number(pct, f"marketingSpendByChannel.{channel_id}")
            updates[attr] = merged
        else:
            updates[attr] = _require_number(value, key)

    return replace(deltas, **updates)


def _require_number(value: Any, field_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidAssumptionError(f"{field_name} must be a number, got {value!r}")
    return float(value)
