# ABOUTME: Pure formatting of WeatherResult values into display strings for the weather page.
# ABOUTME: Output depends only on the result's unit system, never on locale or request language.

from current_weather.models import Units, WeatherDisplay, WeatherResult

DEFAULT_TITLE = "Current Weather"

MPH_TO_MS = 0.44704
HPA_TO_INHG = 0.0295299830714

# Upper bound in m/s (exclusive) for each Beaufort force, 0 through 11; anything above is force 12.
BEAUFORT_SCALE = [
    (0.5, "Calm"),
    (1.6, "Light air"),
    (3.4, "Light breeze"),
    (5.5, "Gentle breeze"),
    (8.0, "Moderate breeze"),
    (10.8, "Fresh breeze"),
    (13.9, "Strong breeze"),
    (17.2, "Near gale"),
    (20.8, "Gale"),
    (24.5, "Strong gale"),
    (28.5, "Storm"),
    (32.7, "Violent storm"),
]
HURRICANE = "Hurricane"

COMPASS_POINTS = [
    "North",
    "North-northeast",
    "Northeast",
    "East-northeast",
    "East",
    "East-southeast",
    "Southeast",
    "South-southeast",
    "South",
    "South-southwest",
    "Southwest",
    "West-southwest",
    "West",
    "West-northwest",
    "Northwest",
    "North-northwest",
]


def format_temperature(value: float, units: Units) -> str:
    """Format a temperature with one decimal and the unit system's degree symbol."""
    symbol = "°F" if units == Units.IMPERIAL else "°C"
    return f"{value:.1f} {symbol}"


def format_pressure(hpa: float, units: Units) -> str:
    """Format pressure given in hPa; imperial is shown in inches of mercury."""
    if units == Units.IMPERIAL:
        return f"{hpa * HPA_TO_INHG:.2f} inHg"
    return f"{hpa:.0f} hPa"


def format_wind_speed(value: float, units: Units) -> str:
    """Format a wind speed in m/s (metric) or mph (imperial)."""
    symbol = "mph" if units == Units.IMPERIAL else "m/s"
    return f"{value:.1f} {symbol}"


def format_percent(value: int) -> str:
    """Format a percentage value such as humidity or cloud cover."""
    return f"{value} %"


def wind_speed_description(value: float, units: Units) -> str:
    """Beaufort scale name for a wind speed in the given unit system."""
    speed = value * MPH_TO_MS if units == Units.IMPERIAL else value
    for upper, name in BEAUFORT_SCALE:
        if speed < upper:
            return name
    return HURRICANE


def wind_direction_description(degrees: float | None) -> str:
    """16-point compass name for a meteorological wind direction, empty when unknown."""
    if degrees is None:
        return ""
    index = int((degrees % 360) / 22.5 + 0.5) % len(COMPASS_POINTS)
    return COMPASS_POINTS[index]


def to_display(result: WeatherResult) -> WeatherDisplay:
    """Map a WeatherResult into the formatted display strings of a weather page."""
    units = result.units
    return WeatherDisplay(
        icon_url=result.icon_url,
        city=f"{result.city_name}, {result.country_code}",
        description=result.description,
        temperature=format_temperature(result.temperature, units),
        humidity=format_percent(result.humidity),
        wind_speed=format_wind_speed(result.wind_speed, units),
        wind_speed_description=wind_speed_description(result.wind_speed, units),
        wind_direction=wind_direction_description(result.wind_direction),
        pressure=format_pressure(result.pressure, units),
        clouds=format_percent(result.cloudiness),
    )


def page_title(result: WeatherResult | None = None) -> str:
    """Page title naming the location, or the generic title when there is no result."""
    if result is None:
        return DEFAULT_TITLE
    return f"Current weather for: {result.city_name}, {result.country_code}"
