# ABOUTME: Service layer for the OpenWeatherMap current-weather call and response parsing.
# ABOUTME: Resolves query and API key from config, classifies failures into WeatherError values.

import httpx
from pydantic import ValidationError

from current_weather.config_store import DEFAULT_API_URL
from current_weather.models import ErrorKind, LocationQuery, ModuleConfig, WeatherError, WeatherResult

ICON_URL = "https://openweathermap.org/img/w/{icon}.png"


def combine_city_country(city: str, country: str | None = None) -> str:
    """Join city and country into the provider's "q" form, e.g. "Paris, FR"."""
    city = city.strip()
    country = (country or "").strip()
    if not country:
        return city
    return f"{city}, {country}"


def resolve_query(config: ModuleConfig, query: LocationQuery | None = None) -> LocationQuery | None:
    """Return the explicit query, else the configured default location, else None."""
    if query is not None and not query.is_empty:
        return query
    if config.use_direct_id:
        if config.default_city_id is None:
            return None
        return LocationQuery(city_id=config.default_city_id)
    if not (config.default_city or "").strip():
        return None
    return LocationQuery(city=config.default_city, country=config.default_country)


def resolve_api_key(config: ModuleConfig, api_key: str | None = None) -> str | None:
    """Return the override key when given, else the configured one. Empty keys resolve to None."""
    key = api_key if api_key is not None else config.api_key
    key = (key or "").strip()
    return key or None


def build_query_params(query: LocationQuery, api_key: str, units: str, lang: str) -> dict:
    """Query parameters for the /weather endpoint, addressing by id or by "q"."""
    params = {"appid": api_key, "units": units, "lang": lang}
    if query.city_id is not None:
        params["id"] = query.city_id
    else:
        params["q"] = combine_city_country(query.city or "", query.country)
    return params


def icon_url(icon: str) -> str:
    """Provider URL of the image for a weather icon code."""
    return ICON_URL.format(icon=icon)


def parse_current_weather(data: dict, units: str = "metric") -> WeatherResult:
    """Parse an OpenWeatherMap /weather JSON body into a WeatherResult.

    Raises KeyError, IndexError, TypeError or ValidationError on malformed payloads.
    """
    weather = data["weather"][0]
    main = data["main"]
    wind = data.get("wind") or {}
    return WeatherResult(
        city_id=data["id"],
        city_name=data["name"],
        country_code=(data.get("sys") or {}).get("country", ""),
        description=weather.get("description", ""),
        icon=weather["icon"],
        icon_url=icon_url(weather["icon"]),
        temperature=main["temp"],
        humidity=main["humidity"],
        wind_speed=wind.get("speed", 0.0),
        wind_direction=wind.get("deg"),
        pressure=main["pressure"],
        cloudiness=(data.get("clouds") or {}).get("all", 0),
        units=units,
    )


def _provider_message(resp: httpx.Response) -> str:
    """Extract the provider's error message, falling back to the HTTP reason phrase."""
    try:
        data = resp.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return f"HTTP {resp.status_code} {resp.reason_phrase}".strip()


def classify_response(resp: httpx.Response) -> WeatherError | None:
    """Map a non-successful provider response to a WeatherError, or None when it succeeded."""
    if resp.is_success:
        return None
    message = _provider_message(resp)
    if resp.status_code == 401:
        return WeatherError(kind=ErrorKind.INVALID_API_KEY, message=message)
    if resp.status_code == 404:
        return WeatherError(kind=ErrorKind.LOCATION_NOT_FOUND, message=message)
    return WeatherError(kind=ErrorKind.UPSTREAM_ERROR, message=message)


async def lookup_weather(
    client: httpx.AsyncClient,
    config: ModuleConfig,
    query: LocationQuery | None = None,
    api_key: str | None = None,
    lang: str = "en",
    base_url: str = DEFAULT_API_URL,
) -> WeatherResult | WeatherError:
    """Fetch current weather for a query, falling back to the configured default location.

    An override api_key bypasses the enabled flag so unsaved settings can be checked.
    Makes exactly one request and never raises for provider or transport failures.
    """
    if not config.enabled and api_key is None:
        return WeatherError(kind=ErrorKind.UNCONFIGURED, message="Module has been disabled.")

    key = resolve_api_key(config, api_key)
    if key is None:
        return WeatherError(kind=ErrorKind.UNCONFIGURED, message="OpenWeatherMap API key is not configured.")

    effective = resolve_query(config, query)
    if effective is None:
        return WeatherError(kind=ErrorKind.UNCONFIGURED, message="No default city is configured.")

    units = config.units.value
    params = build_query_params(effective, key, units, lang)
    try:
        resp = await client.get(f"{base_url.rstrip('/')}/weather", params=params)
    except httpx.HTTPError as e:
        return WeatherError(kind=ErrorKind.UPSTREAM_ERROR, message=f"Weather API request failed: {e}")

    error = classify_response(resp)
    if error is not None:
        return error

    try:
        return parse_current_weather(resp.json(), units)
    except (ValueError, KeyError, IndexError, TypeError, ValidationError) as e:
        return WeatherError(kind=ErrorKind.UPSTREAM_ERROR, message=f"Unexpected weather API response: {e}")
