"""
Tests for advisory parameter relationship suggestions.
"""

import pytest

from forecaster.services.forecasting.relationships import (
    accept_suggestions,
    describe_relationship,
    suggest_related_changes,
)
from forecaster.services.forecasting.types import (
    InvalidAssumptionError,
    ScenarioParameterDeltas,
)


def test_marketing_suggests_attendance_growth():
    suggestions = suggest_related_changes("marketingSpendPercent", 10, ScenarioParameterDeltas())
    assert suggestions == {"attendanceGrowthPercent": 2.0}


def test_pricing_suggests_lower_attendance_growth():
    suggestions = suggest_related_changes("pricingPercent", 10, ScenarioParameterDeltas())
    assert suggestions == {"attendanceGrowthPercent": -5.0}


def test_suggestion_rounded_to_one_decimal():
    suggestions = suggest_related_changes("marketingSpendPercent", 7, ScenarioParameterDeltas())
    assert suggestions == {"attendanceGrowthPercent": 1.4}


def test_no_suggestion_when_already_matching():
    current = ScenarioParameterDeltas(attendance_growth_percent=-5.0)
    assert suggest_related_changes("pricingPercent", 10, current) == {}


def test_negligible_change_is_not_suggested():
    assert suggest_related_changes("marketingSpendPercent", 0.04, ScenarioParameterDeltas()) == {}


def test_parameters_without_relationships():
    for param in ("attendanceGrowthPercent", "cogsMultiplier", "marketingSpendByChannel"):
        assert suggest_related_changes(param, 25, ScenarioParameterDeltas()) == {}


def test_unknown_parameter_rejected():
    with pytest.raises(InvalidAssumptionError):
        suggest_related_changes("discountPercent", 10, ScenarioParameterDeltas())


def test_suggestions_never_change_the_deltas():
    deltas = ScenarioParameterDeltas(marketing_spend_percent=10)
    suggest_related_changes("marketingSpendPercent", 10, deltas)
    assert deltas.attendance_growth_percent == 0.0


def test_describe_relationship():
    assert "price elasticity" in describe_relationship("pricingPercent", "attendanceGrowthPercent")
    assert describe_relationship("cogsMultiplier", "attendanceGrowthPercent") is None


def test_accept_only_named_suggestions():
    deltas = ScenarioParameterDeltas(marketing_spend_percent=10)
    suggestions = {"attendanceGrowthPercent": 2.0}

    assert accept_suggestions(deltas, suggestions, []) is deltas

    accepted = accept_suggestions(deltas, suggestions, ["attendanceGrowthPercent"])
    assert accepted.attendance_growth_percent == 2.0
    assert accepted.marketing_spend_percent == 10.0
