# ABOUTME: Pydantic BaseModels for module configuration, location queries, and weather results.
# ABOUTME: Defines the typed values passed between lookup, settings validation, and presentation.

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Units(str, Enum):
    """Unit system requested from the provider and used for formatting."""

    METRIC = "metric"
    IMPERIAL = "imperial"


class ModuleConfig(BaseModel):
    """Persisted module settings, read by every lookup."""

    enabled: bool = False
    api_key: str = ""
    units: Units = Units.METRIC
    default_city: str | None = None
    default_country: str | None = None
    default_city_id: int | None = Field(default=None, ge=0)
    use_direct_id: bool = False


class LocationQuery(BaseModel):
    """Location to look up, either by provider city id or by city name and optional country."""

    city: str | None = None
    country: str | None = None
    city_id: int | None = None

    @property
    def is_empty(self) -> bool:
        """True when neither a city id nor a city name is set."""
        return self.city_id is None and not (self.city or "").strip()

    @classmethod
    def from_path(cls, city: str | None = None, country: str | None = None) -> "LocationQuery":
        """Build a query from page path parameters.

        A purely numeric city with no country is treated as a provider city id.
        """
        city = (city or "").strip()
        country = (country or "").strip()
        if city.isascii() and city.isdigit() and not country:
            try:
                return cls(city_id=int(city))
            except ValueError:
                # Beyond the interpreter's int digit limit; let the provider treat it as a name.
                pass
        return cls(city=city or None, country=country or None)


class WeatherResult(BaseModel):
    """Current weather for one location as returned by the provider."""

    model_config = ConfigDict(frozen=True)

    city_id: int
    city_name: str
    country_code: str
    description: str
    icon: str
    icon_url: str
    temperature: float
    humidity: int
    wind_speed: float
    wind_direction: float | None = None
    pressure: float
    cloudiness: int
    units: Units = Units.METRIC


class ErrorKind(str, Enum):
    UNCONFIGURED = "unconfigured"
    INVALID_API_KEY = "invalid_api_key"
    LOCATION_NOT_FOUND = "location_not_found"
    UPSTREAM_ERROR = "upstream_error"


class WeatherError(BaseModel):
    """Classified lookup failure, returned in place of a WeatherResult."""

    model_config = ConfigDict(frozen=True)

    kind: ErrorKind
    message: str = ""


class WeatherDisplay(BaseModel):
    """Formatted display strings for a weather page."""

    icon_url: str
    city: str
    description: str
    temperature: str
    humidity: str
    wind_speed: str
    wind_speed_description: str
    wind_direction: str
    pressure: str
    clouds: str
