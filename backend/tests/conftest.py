"""
Shared fixtures: stored-JSON forms of a generic model and an attendance model.
"""

import copy
from typing import Any, Dict

import pytest

from forecaster.core.cache import cache_clear


GENERIC_MODEL: Dict[str, Any] = {
    "id": "generic-1",
    "name": "Ticket Stream",
    "assumptions": {
        "revenue": [{"name": "Tickets", "value": 1000}],
        "costs": [],
        "growthModel": {"type": "linear", "rate": 0.1},
    },
}

# 4-week event, 10% weekly attendance growth, flat spend:
#   attendance 100, 110, 121, 133
#   week 1 revenue 1900 (tickets 1000, F&B 500, merch 200, sponsorship 200)
#   week 1 cost 1750 (COGS 250, staffing 100, setup 1200, venue 100, marketing 100)
EVENT_MODEL: Dict[str, Any] = {
    "id": "event-1",
    "name": "Friday Market",
    "assumptions": {
        "revenue": [
            {"name": "Ticket Sales", "value": 5000, "type": "recurring", "frequency": "weekly"},
            {"name": "Sponsorship", "value": 200, "type": "recurring"},
        ],
        "costs": [
            {"name": "Setup Costs", "value": 1200, "type": "fixed"},
            {"name": "Venue Hire", "value": 100, "type": "recurring", "category": "operations"},
        ],
        "growthModel": {"type": "exponential", "rate": 0.0},
        "metadata": {
            "type": "WeeklyEvent",
            "weeks": 4,
            "initialWeeklyAttendance": 100,
            "perCustomer": {"ticketPrice": 10, "fbSpend": 5, "merchandiseSpend": 2},
            "growth": {"attendanceGrowthRate": 10, "useCustomerSpendGrowth": False},
            "costs": {
                "fbCOGSPercent": 30,
                "merchandiseCogsPercent": 50,
                "staffCount": 2,
                "staffCostPerPerson": 50,
            },
        },
        "marketing": {
            "allocationMode": "highLevel",
            "totalBudget": 400,
            "budgetApplication": "spreadEvenly",
        },
    },
}


@pytest.fixture
def generic_model_data() -> Dict[str, Any]:
    return copy.deepcopy(GENERIC_MODEL)


@pytest.fixture
def event_model_data() -> Dict[str, Any]:
    return copy.deepcopy(EVENT_MODEL)


@pytest.fixture(autouse=True)
def clear_forecast_cache():
    cache_clear()
    yield
    cache_clear()
