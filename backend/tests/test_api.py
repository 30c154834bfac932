"""
Tests for the forecast and scenario HTTP endpoints.
"""

import pytest
from fastapi.testclient import TestClient

from forecaster.core.cache import cache_size
from forecaster.core.config import settings
from forecaster.main import app


@pytest.fixture
def client():
    return TestClient(app)


def test_health(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_generate_forecast(client, generic_model_data):
    response = client.post("/api/v1/forecasts/generate", json={"model": generic_model_data})
    assert response.status_code == 200

    body = response.json()
    assert len(body["periods"]) == settings.FORECAST_DEFAULT_HORIZON
    assert body["periods"][0]["point"] == "Month 1"
    assert body["periods"][0]["revenue"] == pytest.approx(1000.0)
    assert body["summary"]["profitMargin"] == 100.0
    assert body["summary"]["breakEvenPeriod"] == {"index": 0, "label": "Month 1"}


def test_generate_incomplete_model(client, generic_model_data):
    del generic_model_data["assumptions"]["growthModel"]
    response = client.post("/api/v1/forecasts/generate", json={"model": generic_model_data})
    assert response.status_code == 422

    detail = response.json()["detail"]
    assert detail["error"] == "incomplete_model"
    assert detail["missingFields"] == ["growthModel"]


def test_generate_invalid_assumption(client, generic_model_data):
    generic_model_data["assumptions"]["growthModel"]["type"] = "logistic"
    response = client.post("/api/v1/forecasts/generate", json={"model": generic_model_data})
    assert response.status_code == 422
    assert response.json()["detail"]["error"] == "invalid_assumption"


def test_evaluate_scenario(client, event_model_data):
    response = client.post(
        "/api/v1/scenarios/evaluate",
        json={"model": event_model_data, "deltas": {"pricingPercent": 10}},
    )
    assert response.status_code == 200

    body = response.json()
    assert len(body["baselineData"]) == 4
    assert len(body["scenarioData"]) == 4
    assert body["comparisonMetrics"]["revenueDelta"] > 0
    assert body["baselineData"][0]["attendance"] == 100
    assert body["chartData"][0]["name"] == "Period 1"


def test_evaluate_without_deltas_matches_baseline(client, event_model_data):
    response = client.post("/api/v1/scenarios/evaluate", json={"model": event_model_data})
    body = response.json()
    assert body["scenarioData"] == body["baselineData"]
    assert body["comparisonMetrics"]["breakEvenDelta"] == 0


def test_evaluate_unknown_delta(client, event_model_data):
    response = client.post(
        "/api/v1/scenarios/evaluate",
        json={"model": event_model_data, "deltas": {"ticketPercent": 10}},
    )
    assert response.status_code == 422


def test_suggestions(client):
    response = client.post(
        "/api/v1/scenarios/suggestions",
        json={"sourceParam": "marketingSpendPercent", "sourceValue": 10},
    )
    assert response.status_code == 200

    body = response.json()
    assert body["suggestions"] == {"attendanceGrowthPercent": 2.0}
    assert "attendance" in body["descriptions"]["attendanceGrowthPercent"]


def test_suggestions_unknown_param(client):
    response = client.post(
        "/api/v1/scenarios/suggestions",
        json={"sourceParam": "discount", "sourceValue": 10},
    )
    assert response.status_code == 422


def test_analysis(client, event_model_data):
    response = client.post(
        "/api/v1/forecasts/analysis",
        json={"model": event_model_data, "discountRate": 0.01},
    )
    assert response.status_code == 200
    assert set(response.json()) == {"npv", "irr", "paybackPeriod", "roi"}


def test_accuracy(client, generic_model_data):
    response = client.post(
        "/api/v1/forecasts/accuracy",
        json={
            "model": generic_model_data,
            "actuals": [{"period": 1, "revenue": 900.0}],
            "metric": "revenue",
        },
    )
    assert response.status_code == 200

    body = response.json()
    assert body["metric"] == "revenue"
    assert body["periods"][0]["accuracyGrade"] == "B"


def test_accuracy_rejects_unknown_metric(client, generic_model_data):
    response = client.post(
        "/api/v1/forecasts/accuracy",
        json={"model": generic_model_data, "actuals": [], "metric": "margin"},
    )
    assert response.status_code == 422


def test_generate_wrongly_shaped_growth_model(client):
    model = {"revenue": [], "costs": [], "growthModel": "linear"}
    response = client.post("/api/v1/forecasts/generate", json={"model": model})
    assert response.status_code == 422
    assert response.json()["detail"]["error"] == "invalid_assumption"


def test_generate_wrongly_shaped_per_customer(client, event_model_data):
    event_model_data["assumptions"]["metadata"]["perCustomer"] = 5
    response = client.post("/api/v1/forecasts/generate", json={"model": event_model_data})
    assert response.status_code == 422


def test_accuracy_rejects_mixed_period_types(client, generic_model_data):
    response = client.post(
        "/api/v1/forecasts/accuracy",
        json={
            "model": generic_model_data,
            "actuals": [{"period": "3", "revenue": 900.0}, {"period": 4, "revenue": 950.0}],
        },
    )
    assert response.status_code == 422
    assert response.json()["detail"]["error"] == "invalid_assumption"


def test_repeated_distinct_requests_stay_within_cache_bound(client, monkeypatch, generic_model_data):
    monkeypatch.setattr(settings, "FORECAST_CACHE_MAX_ENTRIES", 5)
    for value in range(20):
        generic_model_data["assumptions"]["revenue"][0]["value"] = 1000 + value
        response = client.post("/api/v1/forecasts/generate", json={"model": generic_model_data})
        assert response.status_code == 200
    assert cache_size() == 5
