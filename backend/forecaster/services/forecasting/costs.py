"""
costs.py — Per-Period Cost Calculator

Purpose:
- Compute one period's cost, broken out into fixed categories that always
  sum to the period total:
    * COGS:             fbCOGSPercent / merchandiseCogsPercent of the same
                        period's F&B / merchandise revenue
    * Staffing:         staffCount × staffCostPerPerson (+ management costs),
                        flat every period; plus cost lines tagged "staffing"
    * Fixed/Setup:      fixed cost lines; period 1 only, or spread evenly over
                        every period (1..N) when spreadSetupCosts is set
    * Other Recurring:  recurring/variable lines grown at growthModel.rate ×
                        COST_GROWTH_DAMPENING (or the line's own rate)
    * Marketing:        channel budgets or the high-level budget schedule;
                        plus cost lines tagged "marketing"
"""

from typing import Dict, Optional

from forecaster.core.config import settings
from forecaster.core.logging import get_logger
from forecaster.services.forecasting.growth import growth_factor
from forecaster.services.forecasting.revenue import FB_STREAM, MERCHANDISE_STREAM
from forecaster.services.forecasting.types import (
    AllocationMode,
    BudgetApplication,
    CostBreakdown,
    CostCategory,
    CostType,
    FinancialModel,
    GrowthModel,
    MarketingSetup,
    PeriodUnit,
    ensure_complete,
)

logger = get_logger(__name__)

COGS = "COGS"
MARKETING = "Marketing"
FIXED_SETUP = "Fixed/Setup"
OTHER_RECURRING = "Other Recurring"
STAFFING = "Staffing"

COST_CATEGORIES = (COGS, MARKETING, FIXED_SETUP, OTHER_RECURRING, STAFFING)

# CostCategory.category tag → breakdown bucket for recurring/variable lines
_TAGGED_BUCKETS = {
    "staffing": STAFFING,
    "marketing": MARKETING,
}


def marketing_cost_for_period(
    marketing: Optional[MarketingSetup],
    period_index: int,
    period_count: int,
    period_unit: PeriodUnit,
    weeks_per_month: float,
) -> float:
    """
    Marketing spend applied in one period.

    channels:   sum of weekly channel budgets, scaled to months for monthly models
    highLevel:  upfront       → whole budget in period 1
                spreadEvenly  → budget / period_count every period
                spreadCustom  → budget / spreadDuration for periods 1..spreadDuration
    """
    if marketing is None or marketing.allocation_mode is AllocationMode.NONE:
        return 0.0

    if marketing.allocation_mode is AllocationMode.CHANNELS:
        weekly_total = sum(channel.weekly_budget for channel in marketing.channels)
        if period_unit is PeriodUnit.MONTH:
            return weekly_total * weeks_per_month
        return weekly_total

    budget = marketing.total_budget or 0.0
    application = marketing.budget_application
    if application is BudgetApplication.UPFRONT:
        return budget if period_index == 1 else 0.0
    if application is BudgetApplication.SPREAD_CUSTOM:
        duration = marketing.spread_duration or period_count
        return budget / duration if period_index <= duration else 0.0
    return budget / period_count


def cost_line_for_period(
    cost: CostCategory,
    growth_model: GrowthModel,
    period_index: int,
    period_count: int,
    spread_setup_costs: bool,
    dampening: float,
) -> float:
    """Value of one cost line in one period."""
    if cost.type is CostType.FIXED:
        if spread_setup_costs:
            return cost.value / period_count
        return cost.value if period_index == 1 else 0.0

    rate = cost.growth_rate if cost.growth_rate is not None else growth_model.rate * dampening
    return cost.value * growth_factor(growth_model.type, rate, period_index)


def cost_for_period(
    model: FinancialModel,
    period_index: int,
    period_revenue_by_stream: Dict[str, float],
    period_count: Optional[int] = None,
) -> CostBreakdown:
    """
    Cost for one period.

    Args:
        model: complete financial model
        period_index: 1-based period
        period_revenue_by_stream: the same period's revenue breakdown (COGS base)
        period_count: forecast length; resolved from the model when omitted

    Returns:
        CostBreakdown whose by_category values sum to total

    Raises:
        IncompleteModelError: model lacks required fields
    """
    ensure_complete(model)
    assumptions = model.assumptions
    event = assumptions.event_metadata
    if period_count is None:
        period_count = assumptions.period_count(settings.FORECAST_DEFAULT_HORIZON)

    by_category: Dict[str, float] = {name: 0.0 for name in COST_CATEGORIES}

    spread_setup = False
    if event is not None:
        rules = event.costs
        spread_setup = rules.spread_setup_costs
        fb_revenue = period_revenue_by_stream.get(FB_STREAM, 0.0)
        merch_revenue = period_revenue_by_stream.get(MERCHANDISE_STREAM, 0.0)
        by_category[COGS] += (
            fb_revenue * rules.fb_cogs_percent / 100.0
            + merch_revenue * rules.merchandise_cogs_percent / 100.0
        )
        by_category[STAFFING] += rules.staff_count * rules.staff_cost_per_person + rules.management_costs

    for cost in assumptions.costs:
        value = cost_line_for_period(
            cost,
            assumptions.growth_model,
            period_index,
            period_count,
            spread_setup,
            settings.COST_GROWTH_DAMPENING,
        )
        if cost.type is CostType.FIXED:
            bucket = FIXED_SETUP
        else:
            bucket = _TAGGED_BUCKETS.get((cost.category or "").lower(), OTHER_RECURRING)
        by_category[bucket] += value

    by_category[MARKETING] += marketing_cost_for_period(
        assumptions.marketing,
        period_index,
        period_count,
        assumptions.period_unit,
        settings.WEEKS_PER_MONTH,
    )

    total = sum(by_category.values())
    if period_index == 1:
        logger.debug("Period 1 cost breakdown: %s (total %.2f)", by_category, total)
    return CostBreakdown(total=total, by_category=by_category)
