"""
types.py — Shared Data Layer for the Forecasting Modules

Purpose:
- Define the financial model (assumptions), scenario deltas and forecast
  output structures shared by every forecasting module
- Load the stored JSON form of a model / delta set into those structures

Models are frozen dataclasses. Editing a model means building a new one
(see deltas.py), never mutating the loaded instance.

Metadata is a tagged union: WeeklyEventMetadata (attendance-driven models)
or GenericMetadata (everything else). Callers branch with isinstance, not by
probing for optional keys.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union


# ============================================================================
# Errors
# ============================================================================


class IncompleteModelError(ValueError):
    """Required assumption fields are missing; no forecast can be computed."""

    def __init__(self, missing_fields: List[str]):
        self.missing_fields = list(missing_fields)
        super().__init__(
            "Financial model is incomplete, missing: " + ", ".join(self.missing_fields)
        )


class InvalidAssumptionError(ValueError):
    """An assumption field is present but holds an unusable value."""


# ============================================================================
# Enumerations
# ============================================================================


class GrowthType(str, Enum):
    LINEAR = "linear"
    EXPONENTIAL = "exponential"


class CostType(str, Enum):
    FIXED = "fixed"
    RECURRING = "recurring"
    VARIABLE = "variable"


class AllocationMode(str, Enum):
    CHANNELS = "channels"
    HIGH_LEVEL = "highLevel"
    NONE = "none"


class BudgetApplication(str, Enum):
    UPFRONT = "upfront"
    SPREAD_EVENLY = "spreadEvenly"
    SPREAD_CUSTOM = "spreadCustom"


class PeriodUnit(str, Enum):
    WEEK = "Week"
    MONTH = "Month"


WEEKLY_EVENT = "WeeklyEvent"
# Older stored models use "Weekly"
_WEEKLY_ALIASES = {WEEKLY_EVENT, "Weekly"}
GENERIC_METADATA_TYPES = {"MonthlySubscription", "OneTime", "Custom"}

REVENUE_FREQUENCIES = {"weekly", "monthly", "quarterly", "annually", "one-time"}


# ============================================================================
# Model Assumptions
# ============================================================================


@dataclass(frozen=True)
class RevenueStream:
    """Named revenue stream with its period-1 value."""
    name: str
    value: float
    type: str = "recurring"
    frequency: Optional[str] = None  # None = per-period value


@dataclass(frozen=True)
class CostCategory:
    """Named cost line."""
    name: str
    value: float
    type: CostType = CostType.RECURRING
    category: Optional[str] = None  # staffing | marketing | operations | other
    growth_rate: Optional[float] = None  # decimal; overrides the dampened model rate


@dataclass(frozen=True)
class GrowthModel:
    """Default growth applied to revenue streams (rate is a decimal, 0.05 = 5%)."""
    type: GrowthType
    rate: float


@dataclass(frozen=True)
class PerCustomerSpend:
    ticket_price: float = 0.0
    fb_spend: float = 0.0
    merchandise_spend: float = 0.0
    online_spend: float = 0.0
    misc_spend: float = 0.0


@dataclass(frozen=True)
class SpendGrowth:
    """Attendance-model growth rates, all in percent (2.0 = 2% per period)."""
    attendance_growth_rate: float = 0.0
    use_customer_spend_growth: bool = False
    ticket_price_growth: float = 0.0
    fb_spend_growth: float = 0.0
    merchandise_spend_growth: float = 0.0
    online_spend_growth: float = 0.0
    misc_spend_growth: float = 0.0


@dataclass(frozen=True)
class EventCostRules:
    """Attendance-model cost rules. COGS values are percentages of the tied stream."""
    fb_cogs_percent: float = 0.0
    merchandise_cogs_percent: float = 0.0
    staff_count: float = 0.0
    staff_cost_per_person: float = 0.0
    management_costs: float = 0.0
    spread_setup_costs: bool = False


@dataclass(frozen=True)
class WeeklyEventMetadata:
    """Attendance-driven model: revenue = attendance × per-attendee spend."""
    initial_weekly_attendance: float
    per_customer: PerCustomerSpend
    weeks: Optional[int] = None
    growth: SpendGrowth = field(default_factory=SpendGrowth)
    costs: EventCostRules = field(default_factory=EventCostRules)
    type: str = WEEKLY_EVENT


@dataclass(frozen=True)
class GenericMetadata:
    """Any non-attendance model (subscription, one-off, custom)."""
    type: str = "Custom"
    months: Optional[int] = None


ModelMetadata = Union[WeeklyEventMetadata, GenericMetadata]


@dataclass(frozen=True)
class MarketingChannel:
    id: str
    weekly_budget: float
    name: str = ""
    channel_type: str = ""


@dataclass(frozen=True)
class MarketingSetup:
    allocation_mode: AllocationMode = AllocationMode.NONE
    channels: Tuple[MarketingChannel, ...] = ()
    total_budget: float = 0.0
    budget_application: BudgetApplication = BudgetApplication.SPREAD_EVENLY
    spread_duration: Optional[int] = None


@dataclass(frozen=True)
class Assumptions:
    revenue: Tuple[RevenueStream, ...]
    costs: Tuple[CostCategory, ...]
    growth_model: GrowthModel
    metadata: Optional[ModelMetadata] = None
    marketing: Optional[MarketingSetup] = None

    @property
    def event_metadata(self) -> Optional[WeeklyEventMetadata]:
        """Attendance metadata, or None for generic models."""
        if isinstance(self.metadata, WeeklyEventMetadata):
            return self.metadata
        return None

    @property
    def period_unit(self) -> PeriodUnit:
        return PeriodUnit.WEEK if self.event_metadata is not None else PeriodUnit.MONTH

    def period_count(self, default_horizon: int) -> int:
        """Forecast length: weeks for attendance models, months for generic ones."""
        if isinstance(self.metadata, WeeklyEventMetadata) and self.metadata.weeks:
            count = self.metadata.weeks
        elif isinstance(self.metadata, GenericMetadata) and self.metadata.months:
            count = self.metadata.months
        else:
            count = default_horizon
        return max(1, int(count))


@dataclass(frozen=True)
class FinancialModel:
    assumptions: Assumptions
    id: Optional[str] = None
    name: str = ""


def ensure_complete(model: Optional[FinancialModel]) -> FinancialModel:
    """
    Raise IncompleteModelError unless the model carries every field the
    engine needs. Returns the model for chaining.
    """
    if model is None or getattr(model, "assumptions", None) is None:
        raise IncompleteModelError(["assumptions"])

    assumptions = model.assumptions
    missing = [
        name
        for name, value in (
            ("revenue", assumptions.revenue),
            ("costs", assumptions.costs),
            ("growthModel", assumptions.growth_model),
        )
        if value is None
    ]
    event = assumptions.event_metadata
    if event is not None:
        if event.initial_weekly_attendance is None:
            missing.append("metadata.initialWeeklyAttendance")
        if event.per_customer is None:
            missing.append("metadata.perCustomer")
    if missing:
        raise IncompleteModelError(missing)
    return model


# ============================================================================
# Scenario Inputs
# ============================================================================


@dataclass(frozen=True)
class ScenarioParameterDeltas:
    """
    Relative adjustments to baseline drivers. Every field defaults to the
    neutral value 0 (no change).

    - marketing_spend_percent: % change of every marketing budget
    - marketing_spend_by_channel: channel id → % change, replaces the overall
      percentage for that channel
    - pricing_percent: % change of every per-attendee spend / stream value
    - attendance_growth_percent: percentage points added to attendance growth
    - cogs_multiplier: % change of COGS percentages and staff cost per person
    """
    marketing_spend_percent: float = 0.0
    marketing_spend_by_channel: Dict[str, float] = field(default_factory=dict)
    pricing_percent: float = 0.0
    attendance_growth_percent: float = 0.0
    cogs_multiplier: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "marketingSpendPercent": self.marketing_spend_percent,
            "marketingSpendByChannel": dict(self.marketing_spend_by_channel),
            "pricingPercent": self.pricing_percent,
            "attendanceGrowthPercent": self.attendance_growth_percent,
            "cogsMultiplier": self.cogs_multiplier,
        }


# Contract name → dataclass attribute
DELTA_FIELDS: Dict[str, str] = {
    "marketingSpendPercent": "marketing_spend_percent",
    "marketingSpendByChannel": "marketing_spend_by_channel",
    "pricingPercent": "pricing_percent",
    "attendanceGrowthPercent": "attendance_growth_percent",
    "cogsMultiplier": "cogs_multiplier",
}


@dataclass(frozen=True)
class Scenario:
    name: str
    project_id: str
    base_model_id: str
    parameter_deltas: ScenarioParameterDeltas
    created_at: datetime
    updated_at: datetime
    id: Optional[str] = None
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "projectId": self.project_id,
            "baseModelId": self.base_model_id,
            "parameterDeltas": self.parameter_deltas.to_dict(),
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }


# ============================================================================
# Output Dataclasses
# ============================================================================


@dataclass
class RevenueBreakdown:
    """Revenue of one period, total plus per-stream values."""
    total: float
    by_stream: Dict[str, float]
    attendance: Optional[int] = None


@dataclass
class CostBreakdown:
    """Cost of one period, total plus per-category values (summing to total)."""
    total: float
    by_category: Dict[str, float]


@dataclass
class ForecastPeriodData:
    """One forecast period (1-indexed)."""
    period: int
    point: str  # e.g. "Week 3"
    revenue: float
    cost: float
    profit: float
    cumulative_revenue: float
    cumulative_cost: float
    cumulative_profit: float
    attendance: Optional[int] = None
    revenue_by_stream: Dict[str, float] = field(default_factory=dict)
    cost_by_category: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "period": self.period,
            "point": self.point,
            "revenue": self.revenue,
            "cost": self.cost,
            "profit": self.profit,
            "cumulativeRevenue": self.cumulative_revenue,
            "cumulativeCost": self.cumulative_cost,
            "cumulativeProfit": self.cumulative_profit,
            "revenueByStream": dict(self.revenue_by_stream),
            "costByCategory": dict(self.cost_by_category),
        }
        if self.attendance is not None:
            data["attendance"] = self.attendance
        return data


@dataclass
class BreakEvenPeriod:
    index: Optional[int]  # 0-based index into the series, None if never reached
    label: str


@dataclass
class ScenarioSummaryMetrics:
    total_revenue: float
    total_costs: float
    total_profit: float
    profit_margin: float  # percent
    break_even_period: BreakEvenPeriod
    average_weekly_revenue: float
    average_weekly_costs: float
    average_weekly_profit: float
    period_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalRevenue": self.total_revenue,
            "totalCosts": self.total_costs,
            "totalProfit": self.total_profit,
            "profitMargin": self.profit_margin,
            "breakEvenPeriod": {
                "index": self.break_even_period.index,
                "label": self.break_even_period.label,
            },
            "averageWeeklyRevenue": self.average_weekly_revenue,
            "averageWeeklyCosts": self.average_weekly_costs,
            "averageWeeklyProfit": self.average_weekly_profit,
            "periodCount": self.period_count,
        }


@dataclass
class ScenarioComparisonMetrics:
    revenue_delta: float
    revenue_delta_percent: float
    costs_delta: float
    costs_delta_percent: float
    profit_delta: float
    profit_delta_percent: float
    margin_delta: float  # percentage points
    break_even_delta: int  # periods; negative = scenario breaks even sooner

    def to_dict(self) -> Dict[str, Any]:
        return {
            "revenueDelta": self.revenue_delta,
            "revenueDeltaPercent": self.revenue_delta_percent,
            "costsDelta": self.costs_delta,
            "costsDeltaPercent": self.costs_delta_percent,
            "profitDelta": self.profit_delta,
            "profitDeltaPercent": self.profit_delta_percent,
            "marginDelta": self.margin_delta,
            "breakEvenDelta": self.break_even_delta,
        }


@dataclass
class ScenarioForecastData:
    """Everything a scenario view needs: both series, their summaries, the deltas."""
    baseline_data: List[ForecastPeriodData]
    scenario_data: List[ForecastPeriodData]
    baseline_summary: ScenarioSummaryMetrics
    summary_metrics: ScenarioSummaryMetrics
    comparison_metrics: ScenarioComparisonMetrics
    chart_data: List[Dict[str, Any]]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "baselineData": [p.to_dict() for p in self.baseline_data],
            "scenarioData": [p.to_dict() for p in self.scenario_data],
            "baselineSummary": self.baseline_summary.to_dict(),
            "summaryMetrics": self.summary_metrics.to_dict(),
            "comparisonMetrics": self.comparison_metrics.to_dict(),
            "chartData": list(self.chart_data),
        }


# ============================================================================
# JSON Loading
# ============================================================================


def _number(value: Any, field_name: str, default: Optional[float] = None) -> Optional[float]:
    """Coerce a JSON number; None/missing yields the default."""
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidAssumptionError(f"{field_name} must be a number, got {value!r}")
    return float(value)


def _object(value: Any, field_name: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise InvalidAssumptionError(f"{field_name} must be an object, got {value!r}")
    return value


def _list(value: Any, field_name: str) -> List[Any]:
    if not isinstance(value, list):
        raise InvalidAssumptionError(f"{field_name} must be a list, got {value!r}")
    return value


def _count(value: Any, field_name: str) -> Optional[int]:
    """Positive period count, or None when absent/non-positive."""
    number = _number(value, field_name)
    if number is None or number <= 0:
        return None
    return int(number)


def _enum(enum_cls, value: Any, field_name: str, default=None):
    if value is None or value == "":
        return default
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InvalidAssumptionError(f"{field_name} must be one of: {allowed} (got {value!r})")


def _parse_revenue(items: List[Dict[str, Any]]) -> Tuple[RevenueStream, ...]:
    streams = []
    for i, item in enumerate(_list(items, "revenue")):
        item = _object(item, f"revenue[{i}]")
        frequency = item.get("frequency")
        if frequency is not None and (not isinstance(frequency, str) or frequency not in REVENUE_FREQUENCIES):
            raise InvalidAssumptionError(f"revenue[{i}].frequency {frequency!r} is not supported")
        streams.append(RevenueStream(
            name=str(item.get("name", f"Stream {i + 1}")),
            value=_number(item.get("value"), f"revenue[{i}].value", 0.0),
            type=str(item.get("type") or "recurring"),
            frequency=frequency,
        ))
    return tuple(streams)


def _parse_costs(items: List[Dict[str, Any]]) -> Tuple[CostCategory, ...]:
    costs = []
    for i, item in enumerate(_list(items, "costs")):
        item = _object(item, f"costs[{i}]")
        raw_type = item.get("type")
        costs.append(CostCategory(
            name=str(item.get("name", f"Cost {i + 1}")),
            value=_number(item.get("value"), f"costs[{i}].value", 0.0),
            type=_enum(CostType, raw_type.lower() if isinstance(raw_type, str) else raw_type,
                       f"costs[{i}].type", CostType.RECURRING),
            category=item.get("category"),
            growth_rate=_number(item.get("growthRate"), f"costs[{i}].growthRate"),
        ))
    return tuple(costs)


def _parse_metadata(data: Optional[Dict[str, Any]]) -> Tuple[Optional[ModelMetadata], List[str]]:
    """Returns (metadata, missing_fields)."""
    if not data:
        return None, []

    data = _object(data, "metadata")
    meta_type = data.get("type")
    if meta_type is not None and not isinstance(meta_type, str):
        raise InvalidAssumptionError(f"metadata.type must be a string, got {meta_type!r}")
    if meta_type not in _WEEKLY_ALIASES:
        if meta_type is not None and meta_type not in GENERIC_METADATA_TYPES:
            raise InvalidAssumptionError(f"Unknown metadata type {meta_type!r}")
        return GenericMetadata(
            type=meta_type or "Custom",
            months=_count(data.get("months"), "metadata.months"),
        ), []

    missing = []
    if data.get("initialWeeklyAttendance") is None:
        missing.append("metadata.initialWeeklyAttendance")
    if data.get("perCustomer") is None:
        missing.append("metadata.perCustomer")
    if missing:
        return None, missing

    spend = _object(data["perCustomer"], "metadata.perCustomer")
    growth = _object(data.get("growth") or {}, "metadata.growth")
    costs = _object(data.get("costs") or {}, "metadata.costs")
    merch_cogs = costs.get("merchandiseCogsPercent", costs.get("merchandiseCOGSPercent"))

    metadata = WeeklyEventMetadata(
        initial_weekly_attendance=_number(
            data["initialWeeklyAttendance"], "metadata.initialWeeklyAttendance"),
        weeks=_count(data.get("weeks"), "metadata.weeks"),
        per_customer=PerCustomerSpend(
            ticket_price=_number(spend.get("ticketPrice"), "perCustomer.ticketPrice", 0.0),
            fb_spend=_number(spend.get("fbSpend"), "perCustomer.fbSpend", 0.0),
            merchandise_spend=_number(spend.get("merchandiseSpend"), "perCustomer.merchandiseSpend", 0.0),
            online_spend=_number(spend.get("onlineSpend"), "perCustomer.onlineSpend", 0.0),
            misc_spend=_number(spend.get("miscSpend"), "perCustomer.miscSpend", 0.0),
        ),
        growth=SpendGrowth(
            attendance_growth_rate=_number(growth.get("attendanceGrowthRate"), "growth.attendanceGrowthRate", 0.0),
            use_customer_spend_growth=bool(
                growth.get("useCustomerSpendGrowth", data.get("useCustomerSpendGrowth", False))),
            ticket_price_growth=_number(growth.get("ticketPriceGrowth"), "growth.ticketPriceGrowth", 0.0),
            fb_spend_growth=_number(growth.get("fbSpendGrowth"), "growth.fbSpendGrowth", 0.0),
            merchandise_spend_growth=_number(
                growth.get("merchandiseSpendGrowth"), "growth.merchandiseSpendGrowth", 0.0),
            online_spend_growth=_number(growth.get("onlineSpendGrowth"), "growth.onlineSpendGrowth", 0.0),
            misc_spend_growth=_number(growth.get("miscSpendGrowth"), "growth.miscSpendGrowth", 0.0),
        ),
        costs=EventCostRules(
            fb_cogs_percent=_number(costs.get("fbCOGSPercent"), "costs.fbCOGSPercent", 0.0),
            merchandise_cogs_percent=_number(merch_cogs, "costs.merchandiseCogsPercent", 0.0),
            staff_count=_number(costs.get("staffCount"), "costs.staffCount", 0.0),
            staff_cost_per_person=_number(costs.get("staffCostPerPerson"), "costs.staffCostPerPerson", 0.0),
            management_costs=_number(costs.get("managementCosts"), "costs.managementCosts", 0.0),
            spread_setup_costs=bool(costs.get("spreadSetupCosts", False)),
        ),
    )
    return metadata, []


def _parse_marketing(data: Optional[Dict[str, Any]]) -> Optional[MarketingSetup]:
    if not data:
        return None

    data = _object(data, "marketing")
    channels = []
    for i, ch in enumerate(_list(data.get("channels") or [], "marketing.channels")):
        ch = _object(ch, f"marketing.channels[{i}]")
        channels.append(MarketingChannel(
            id=str(ch.get("id", i)),
            weekly_budget=_number(ch.get("weeklyBudget"), f"marketing.channels[{i}].weeklyBudget", 0.0),
            name=ch.get("name") or "",
            channel_type=ch.get("channelType") or "",
        ))

    # Unknown application strings fall back to an even spread
    application = data.get("budgetApplication")
    if not isinstance(application, str) or application not in {b.value for b in BudgetApplication}:
        application = BudgetApplication.SPREAD_EVENLY.value

    return MarketingSetup(
        allocation_mode=_enum(AllocationMode, data.get("allocationMode"),
                              "marketing.allocationMode", AllocationMode.NONE),
        channels=tuple(channels),
        total_budget=_number(data.get("totalBudget"), "marketing.totalBudget", 0.0),
        budget_application=BudgetApplication(application),
        spread_duration=_count(data.get("spreadDuration"), "marketing.spreadDuration"),
    )


def build_financial_model(data: Dict[str, Any]) -> FinancialModel:
    """
    Build a FinancialModel from its stored JSON form.

    Accepts either a full model ({"id", "name", "assumptions": {...}}) or a
    bare assumptions object. Keys use the camelCase names of the store.

    Raises:
        IncompleteModelError: revenue / costs / growthModel (or the attendance
            fields of a WeeklyEvent model) are missing
        InvalidAssumptionError: a field holds a value of the wrong kind
    """
    if not isinstance(data, dict):
        raise IncompleteModelError(["assumptions"])

    if "assumptions" in data:
        raw = data.get("assumptions")
        model_id = data.get("id")
        name = data.get("name") or ""
    else:
        raw, model_id, name = data, None, ""

    if not isinstance(raw, dict):
        raise IncompleteModelError(["assumptions"])

    missing = [key for key in ("revenue", "costs", "growthModel") if raw.get(key) is None]
    metadata, metadata_missing = _parse_metadata(raw.get("metadata"))
    missing.extend(metadata_missing)
    if missing:
        raise IncompleteModelError(missing)

    growth = _object(raw["growthModel"], "growthModel")
    assumptions = Assumptions(
        revenue=_parse_revenue(raw["revenue"]),
        costs=_parse_costs(raw["costs"]),
        growth_model=GrowthModel(
            type=_enum(GrowthType, growth.get("type"), "growthModel.type", GrowthType.EXPONENTIAL),
            rate=_number(growth.get("rate"), "growthModel.rate", 0.0),
        ),
        metadata=metadata,
        marketing=_parse_marketing(raw.get("marketing")),
    )
    return FinancialModel(
        assumptions=assumptions,
        id=str(model_id) if model_id is not None else None,
        name=str(name),
    )


def build_parameter_deltas(data: Optional[Dict[str, Any]]) -> ScenarioParameterDeltas:
    """
    Build ScenarioParameterDeltas from JSON; absent fields are neutral (0).
    """
    data = _object(data or {}, "deltas")
    unknown = set(data) - set(DELTA_FIELDS)
    if unknown:
        raise InvalidAssumptionError(f"Unknown delta fields: {', '.join(sorted(unknown))}")

    by_channel = data.get("marketingSpendByChannel") or {}
    if not isinstance(by_channel, dict):
        raise InvalidAssumptionError("marketingSpendByChannel must be an object")

    return ScenarioParameterDeltas(
        marketing_spend_percent=_number(data.get("marketingSpendPercent"), "marketingSpendPercent", 0.0),
        marketing_spend_by_channel={
            str(channel_id): _number(pct, f"marketingSpendByChannel.{channel_id}", 0.0)
            for channel_id, pct in by_channel.items()
        },
        pricing_percent=_number(data.get("pricingPercent"), "pricingPercent", 0.0),
        attendance_growth_percent=_number(data.get("attendanceGrowthPercent"), "attendanceGrowthPercent", 0.0),
        cogs_multiplier=_number(data.get("cogsMultiplier"), "cogsMultiplier", 0.0),
    )
