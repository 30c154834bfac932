"""
relationships.py — Advisory Parameter Relationships

Adjusting one scenario delta often implies a change in another (more
marketing → more attendance, higher prices → lower attendance). This module
only *suggests* those changes. Nothing here mutates a delta set on its own:
callers show the suggestions and apply the ones the user accepts through
accept_suggestions().
"""

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional

from forecaster.core.logging import get_logger
from forecaster.services.forecasting.deltas import merge_deltas
from forecaster.services.forecasting.types import (
    DELTA_FIELDS,
    InvalidAssumptionError,
    ScenarioParameterDeltas,
)

logger = get_logger(__name__)

# Suggestions closer than this to the current value are not worth showing
SUGGESTION_TOLERANCE = 0.01


@dataclass(frozen=True)
class ParameterRelationship:
    target_param: str
    description: str
    calculate_suggestion: Callable[[float], float]


def _round_one_decimal(value: float) -> float:
    return round(value * 10) / 10


PARAMETER_RELATIONSHIPS: Dict[str, List[ParameterRelationship]] = {
    "marketingSpendPercent": [
        ParameterRelationship(
            target_param="attendanceGrowthPercent",
            description="Increased marketing typically leads to higher attendance",
            # 10% more marketing ≈ 2 points more attendance growth
            calculate_suggestion=lambda change: _round_one_decimal(change * 0.2),
        ),
    ],
    "pricingPercent": [
        ParameterRelationship(
            target_param="attendanceGrowthPercent",
            description="Price increases typically reduce attendance (price elasticity)",
            # elasticity of -0.5
            calculate_suggestion=lambda change: _round_one_decimal(change * -0.5),
        ),
    ],
    "attendanceGrowthPercent": [],
    "cogsMultiplier": [],
    "marketingSpendByChannel": [],
}


def suggest_related_changes(
    source_param: str,
    source_value: float,
    current_deltas: ScenarioParameterDeltas,
) -> Dict[str, float]:
    """
    Suggested values for parameters related to `source_param`.

    Returns:
        {contract name: suggested value}; empty when nothing differs from the
        current deltas by more than SUGGESTION_TOLERANCE
    """
    if source_param not in PARAMETER_RELATIONSHIPS:
        raise InvalidAssumptionError(f"Unknown delta field: {source_param}")

    suggestions: Dict[str, float] = {}
    for relationship in PARAMETER_RELATIONSHIPS[source_param]:
        current = getattr(current_deltas, DELTA_FIELDS[relationship.target_param])
        suggested = relationship.calculate_suggestion(source_value)
        if abs(suggested - current) > SUGGESTION_TOLERANCE:
            suggestions[relationship.target_param] = suggested

    logger.debug("Suggestions for %s=%s: %s", source_param, source_value, suggestions)
    return suggestions


def describe_relationship(source_param: str, target_param: str) -> Optional[str]:
    """Human-readable rationale linking two parameters, or None."""
    for relationship in PARAMETER_RELATIONSHIPS.get(source_param, []):
        if relationship.target_param == target_param:
            return relationship.description
    return None


def accept_suggestions(
    deltas: ScenarioParameterDeltas,
    suggestions: Dict[str, float],
    accepted: Iterable[str],
) -> ScenarioParameterDeltas:
    """Apply only the suggestion fields the caller explicitly accepted."""
    chosen = {name: suggestions[name] for name in accepted if name in suggestions}
    if not chosen:
        return deltas
    return merge_deltas(deltas, chosen)
