"""Tests for the OpenWeather client and the weather endpoint."""

from __future__ import annotations

import httpx
import pytest
from fastapi.testclient import TestClient

from app.config import settings
from app.core.errors import AppError, ErrorTypes
from app.main import app
from app.modules.weather.routes import get_weather_service
from app.modules.weather.service import WeatherService

CURRENT = {
    "main": {"temp": 84.4, "feels_like": 90.6, "humidity": 70},
    "weather": [{"main": "Clear"}],
    "wind": {"speed": 5.1},
}

# 2024-08-01 00:00 and 03:00 UTC, then 2024-08-02 00:00 UTC
FORECAST = {
    "list": [
        {"dt": 1722470400, "main": {"temp_max": 90.4, "temp_min": 78.0}, "weather": [{"main": "Clouds"}]},
        {"dt": 1722481200, "main": {"temp_max": 92.6, "temp_min": 76.2}, "weather": [{"main": "Rain"}]},
        {"dt": 1722556800, "main": {"temp_max": 88.0, "temp_min": 75.0}, "weather": [{"main": "Clear"}]},
    ]
}


def _service(handler, api_key: str = "test-key") -> WeatherService:
    return WeatherService(httpx.Client(transport=httpx.MockTransport(handler)), api_key=api_key)


def _openweather(requests: list):
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.url.path.endswith("/forecast"):
            return httpx.Response(200, json=FORECAST)
        return httpx.Response(200, json=CURRENT)
    return handler


def test_current_conditions() -> None:
    requests: list = []
    current = _service(_openweather(requests)).get_current(26.5, -81.9)

    assert (current.temp, current.feels_like, current.condition) == (84, 91, "Clear")
    assert current.summary() == "Clear, 84°F"
    params = requests[0].url.params
    assert params["appid"] == "test-key"
    assert params["units"] == "imperial"
    assert params["lat"] == "26.5"


def test_forecast_groups_by_day() -> None:
    forecast = _service(_openweather([])).get_forecast()

    assert [(d.day, d.high, d.low, d.condition) for d in forecast] == [
        ("Today", 93, 76, "clouds"),
        ("Tomorrow", 88, 75, "clear"),
    ]


@pytest.mark.parametrize("status, code", [(401, "API_UNAUTHORIZED"), (429, "API_RATE_LIMIT"), (500, "API_REQUEST_FAILED")])
def test_upstream_errors(status: int, code: str) -> None:
    service = _service(lambda request: httpx.Response(status, text="upstream"))
    with pytest.raises(AppError) as exc_info:
        service.get_current()
    assert exc_info.value.code == code


def test_unexpected_payload() -> None:
    service = _service(lambda request: httpx.Response(200, json={"main": {}}))
    with pytest.raises(AppError) as exc_info:
        service.get_current()
    assert exc_info.value.message == "Unexpected weather response"


@pytest.mark.parametrize("payload", [
    {"list": [{"dt": 1722470400}]},
    {"list": [{"dt": 1722470400, "main": {"temp_max": 90, "temp_min": 78}, "weather": []}]},
    {"list": [{"dt": "soon", "main": {"temp_max": 90, "temp_min": 78}, "weather": [{"main": "Clear"}]}]},
    {"list": "none"},
    [],
])
def test_malformed_forecast(payload) -> None:
    service = _service(lambda request: httpx.Response(200, json=payload))
    with pytest.raises(AppError) as exc_info:
        service.get_forecast()
    assert exc_info.value.code == ErrorTypes.API_REQUEST_FAILED
    assert exc_info.value.message == "Unexpected weather response"


def test_missing_api_key(monkeypatch) -> None:
    monkeypatch.setattr(settings, "openweather_api_key", None)
    service = _service(_openweather([]), api_key="")
    with pytest.raises(AppError) as exc_info:
        service.get_current()
    assert exc_info.value.status_code == 503


def test_weather_route(client: TestClient) -> None:
    app.dependency_overrides[get_weather_service] = lambda: _service(_openweather([]))
    body = client.get("/api/v1/weather").json()

    assert body["summary"] == "Clear, 84°F"
    assert body["current"]["humidity"] == 70
    assert len(body["forecast"]) == 2


def test_weather_route_without_forecast(client: TestClient) -> None:
    requests: list = []
    app.dependency_overrides[get_weather_service] = lambda: _service(_openweather(requests))
    body = client.get("/api/v1/weather", params={"include_forecast": False}).json()

    assert body["forecast"] == []
    assert len(requests) == 1


def test_service_closes_only_its_own_client() -> None:
    injected = httpx.Client(transport=httpx.MockTransport(_openweather([])))
    WeatherService(injected, api_key="k").close()
    assert not injected.is_closed

    owned = WeatherService(api_key="k")
    owned.close()
    assert owned.client.is_closed


def test_route_dependency_closes_service_client() -> None:
    dependency = get_weather_service()
    service = next(dependency)
    assert not service.client.is_closed

    dependency.close()

    assert service.client.is_closed
