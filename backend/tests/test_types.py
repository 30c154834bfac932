"""
Tests for loading stored model / delta JSON into the engine dataclasses.
"""

import pytest

from forecaster.services.forecasting.types import (
    BudgetApplication,
    CostType,
    GenericMetadata,
    GrowthType,
    IncompleteModelError,
    InvalidAssumptionError,
    PeriodUnit,
    ScenarioParameterDeltas,
    WeeklyEventMetadata,
    build_financial_model,
    build_parameter_deltas,
)


def test_full_model_and_bare_assumptions(generic_model_data):
    full = build_financial_model(generic_model_data)
    bare = build_financial_model(generic_model_data["assumptions"])

    assert full.id == "generic-1"
    assert full.name == "Ticket Stream"
    assert bare.id is None
    assert full.assumptions == bare.assumptions
    assert full.assumptions.growth_model.type is GrowthType.LINEAR


def test_event_model_loads_metadata(event_model_data):
    assumptions = build_financial_model(event_model_data).assumptions
    event = assumptions.event_metadata

    assert isinstance(event, WeeklyEventMetadata)
    assert event.weeks == 4
    assert event.per_customer.ticket_price == 10.0
    assert event.per_customer.online_spend == 0.0
    assert event.costs.merchandise_cogs_percent == 50.0
    assert assumptions.period_unit is PeriodUnit.WEEK
    assert assumptions.costs[0].type is CostType.FIXED


def test_missing_core_fields(generic_model_data):
    del generic_model_data["assumptions"]["growthModel"]
    del generic_model_data["assumptions"]["costs"]
    with pytest.raises(IncompleteModelError) as exc_info:
        build_financial_model(generic_model_data)
    assert exc_info.value.missing_fields == ["costs", "growthModel"]


def test_missing_event_fields(event_model_data):
    del event_model_data["assumptions"]["metadata"]["perCustomer"]
    with pytest.raises(IncompleteModelError) as exc_info:
        build_financial_model(event_model_data)
    assert exc_info.value.missing_fields == ["metadata.perCustomer"]


def test_missing_assumptions():
    with pytest.raises(IncompleteModelError):
        build_financial_model({"id": "x", "assumptions": None})


def test_weekly_alias(event_model_data):
    event_model_data["assumptions"]["metadata"]["type"] = "Weekly"
    model = build_financial_model(event_model_data)
    assert isinstance(model.assumptions.metadata, WeeklyEventMetadata)


def test_generic_metadata(generic_model_data):
    generic_model_data["assumptions"]["metadata"] = {"type": "OneTime", "months": 3}
    assumptions = build_financial_model(generic_model_data).assumptions
    assert assumptions.metadata == GenericMetadata(type="OneTime", months=3)
    assert assumptions.event_metadata is None
    assert assumptions.period_count(12) == 3


def test_period_count_falls_back_to_default(generic_model_data):
    assumptions = build_financial_model(generic_model_data).assumptions
    assert assumptions.period_count(12) == 12
    assert assumptions.period_unit is PeriodUnit.MONTH


def test_unknown_metadata_type(generic_model_data):
    generic_model_data["assumptions"]["metadata"] = {"type": "Franchise"}
    with pytest.raises(InvalidAssumptionError):
        build_financial_model(generic_model_data)


def test_field_aliases_and_defaults(event_model_data):
    assumptions = event_model_data["assumptions"]
    costs = assumptions["metadata"]["costs"]
    costs["merchandiseCOGSPercent"] = costs.pop("merchandiseCogsPercent")
    assumptions["costs"][0]["type"] = "Fixed"
    del assumptions["costs"][1]["type"]
    assumptions["growthModel"] = {"rate": 0.05}
    assumptions["marketing"]["budgetApplication"] = "whenever"

    model = build_financial_model(event_model_data)
    assert model.assumptions.event_metadata.costs.merchandise_cogs_percent == 50.0
    assert model.assumptions.costs[0].type is CostType.FIXED
    assert model.assumptions.costs[1].type is CostType.RECURRING
    assert model.assumptions.growth_model.type is GrowthType.EXPONENTIAL
    assert model.assumptions.marketing.budget_application is BudgetApplication.SPREAD_EVENLY


def test_invalid_values(generic_model_data):
    generic_model_data["assumptions"]["revenue"][0]["value"] = "lots"
    with pytest.raises(InvalidAssumptionError):
        build_financial_model(generic_model_data)


def test_invalid_growth_type(generic_model_data):
    generic_model_data["assumptions"]["growthModel"]["type"] = "logistic"
    with pytest.raises(InvalidAssumptionError):
        build_financial_model(generic_model_data)


def test_invalid_frequency(generic_model_data):
    generic_model_data["assumptions"]["revenue"][0]["frequency"] = "hourly"
    with pytest.raises(InvalidAssumptionError):
        build_financial_model(generic_model_data)


def test_build_parameter_deltas():
    assert build_parameter_deltas(None) == ScenarioParameterDeltas()
    assert build_parameter_deltas({}) == ScenarioParameterDeltas()

    deltas = build_parameter_deltas({
        "pricingPercent": 20,
        "marketingSpendByChannel": {"social": 15},
    })
    assert deltas.pricing_percent == 20.0
    assert deltas.marketing_spend_by_channel == {"social": 15.0}
    assert deltas.to_dict()["pricingPercent"] == 20.0


def test_build_parameter_deltas_rejects_unknown_fields():
    with pytest.raises(InvalidAssumptionError):
        build_parameter_deltas({"pricePercent": 20})


@pytest.mark.parametrize(
    "path, value",
    [
        (("growthModel",), "linear"),
        (("revenue",), "abc"),
        (("costs",), {"name": "Rent"}),
        (("revenue", 0), 1000),
        (("costs", 0), "Setup Costs"),
        (("metadata",), "WeeklyEvent"),
        (("metadata", "type"), ["WeeklyEvent"]),
        (("metadata", "perCustomer"), 5),
        (("metadata", "growth"), "fast"),
        (("metadata", "costs"), [30, 50]),
        (("marketing",), "highLevel"),
        (("revenue", 0, "frequency"), ["weekly"]),
    ],
)
def test_wrongly_shaped_containers_rejected(event_model_data, path, value):
    target = event_model_data["assumptions"]
    for key in path[:-1]:
        target = target[key]
    target[path[-1]] = value

    with pytest.raises(InvalidAssumptionError):
        build_financial_model(event_model_data)


def test_marketing_channel_must_be_object(event_model_data):
    event_model_data["assumptions"]["marketing"] = {
        "allocationMode": "channels",
        "channels": ["social"],
    }
    with pytest.raises(InvalidAssumptionError):
        build_financial_model(event_model_data)


def test_build_parameter_deltas_rejects_non_object():
    with pytest.raises(InvalidAssumptionError):
        build_parameter_deltas(["pricingPercent"])


def test_non_string_budget_application_falls_back(event_model_data):
    event_model_data["assumptions"]["marketing"]["budgetApplication"] = ["upfront"]
    model = build_financial_model(event_model_data)
    assert model.assumptions.marketing.budget_application is BudgetApplication.SPREAD_EVENLY
