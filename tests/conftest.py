# ABOUTME: Shared test fixtures for the current weather test suite.
# ABOUTME: Provides provider payloads, mock HTTP client builders, and module configs.

from unittest.mock import AsyncMock

import httpx
import pytest

from current_weather.models import ModuleConfig


def owm_payload(
    name: str = "Paris",
    country: str = "FR",
    city_id: int = 2988507,
    temp: float = 12.34,
    pressure: int = 1012,
    wind_speed: float = 4.1,
    wind_deg: float | None = 80,
) -> dict:
    """Build an OpenWeatherMap /weather JSON body."""
    wind = {"speed": wind_speed}
    if wind_deg is not None:
        wind["deg"] = wind_deg
    return {
        "coord": {"lon": 2.3488, "lat": 48.8534},
        "weather": [{"id": 803, "main": "Clouds", "description": "broken clouds", "icon": "04d"}],
        "main": {"temp": temp, "feels_like": 11.5, "pressure": pressure, "humidity": 81},
        "wind": wind,
        "clouds": {"all": 75},
        "sys": {"country": country},
        "id": city_id,
        "name": name,
        "cod": 200,
    }


def mock_client(json_data: dict, status_code: int = 200) -> httpx.AsyncClient:
    """Create a mock httpx.AsyncClient that returns the given JSON response."""
    mock = AsyncMock(spec=httpx.AsyncClient)
    response = httpx.Response(status_code=status_code, json=json_data, request=httpx.Request("GET", "https://test"))
    mock.get.return_value = response
    return mock


@pytest.fixture
def enabled_config() -> ModuleConfig:
    return ModuleConfig(
        enabled=True,
        api_key="secret-key",
        default_city="Paris",
        default_country="FR",
        default_city_id=2988507,
    )
