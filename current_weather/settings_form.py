# ABOUTME: Settings form parsing and validation against the live weather API before saving.
# ABOUTME: Maps classified lookup errors to field-level messages and writes back canonical location data.

import logging
from collections.abc import Mapping

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from current_weather.config_store import DEFAULT_API_URL
from current_weather.models import ErrorKind, LocationQuery, ModuleConfig, Units, WeatherError, WeatherResult
from current_weather.weather_service import lookup_weather

logger = logging.getLogger(__name__)

WRONG_CITY_NAME = "Wrong city name, Weather for this city has not been found."
WRONG_CITY_ID = "Wrong city ID, Weather for this city has not been found."


class SettingsForm(BaseModel):
    """Submitted settings form values: status, key, units, country, city, direct_id, city_id."""

    model_config = ConfigDict(str_strip_whitespace=True)

    status: bool = False
    key: str = ""
    units: Units = Units.METRIC
    country: str = ""
    city: str = ""
    direct_id: bool = False
    city_id: int | None = Field(default=None, ge=0)

    @field_validator("status", "direct_id", mode="before")
    @classmethod
    def _blank_checkbox_is_unchecked(cls, value):
        if isinstance(value, str) and not value.strip():
            return False
        return value

    @field_validator("city_id", mode="before")
    @classmethod
    def _blank_city_id_is_missing(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def to_config(self) -> ModuleConfig:
        """Candidate ModuleConfig built from the submitted values."""
        return ModuleConfig(
            enabled=self.status,
            api_key=self.key,
            units=self.units,
            default_city=self.city or None,
            default_country=self.country or None,
            default_city_id=self.city_id,
            use_direct_id=self.direct_id,
        )

    def to_query(self) -> LocationQuery:
        """Location the submitted settings address, by id or by city and country."""
        if self.direct_id:
            return LocationQuery(city_id=self.city_id)
        return LocationQuery(city=self.city, country=self.country)


class SettingsOutcome(BaseModel):
    """Validation result: field errors, or the config to save when there are none."""

    errors: dict[str, str] = {}
    config: ModuleConfig | None = None

    @property
    def is_valid(self) -> bool:
        return not self.errors and self.config is not None


def parse_settings_form(data: Mapping) -> tuple[SettingsForm | None, dict[str, str]]:
    """Parse raw form values, returning the form or per-field error messages."""
    try:
        return SettingsForm.model_validate(dict(data)), {}
    except ValidationError as e:
        errors = {}
        for err in e.errors():
            field = str(err["loc"][0]) if err["loc"] else "form"
            errors.setdefault(field, err["msg"])
        return None, errors


def required_field_errors(form: SettingsForm) -> dict[str, str]:
    """Messages for fields that must be filled in before the provider can be asked."""
    errors = {}
    if not form.key:
        errors["key"] = "OpenWeatherMap key field is required."
    if form.direct_id:
        if form.city_id is None:
            errors["city_id"] = "City id field is required."
    else:
        if not form.city:
            errors["city"] = "City field is required."
        if not form.country:
            errors["country"] = "Country field is required."
    return errors


def error_field(error: WeatherError, form: SettingsForm) -> str:
    """Form field an error belongs to: the location field for not-found, the key field otherwise."""
    if error.kind == ErrorKind.LOCATION_NOT_FOUND:
        return "city_id" if form.direct_id else "city"
    return "key"


def error_message(error: WeatherError, form: SettingsForm) -> str:
    """Field message for a classified lookup error."""
    if error.kind == ErrorKind.LOCATION_NOT_FOUND:
        return WRONG_CITY_ID if form.direct_id else WRONG_CITY_NAME
    return error.message or "Unable to reach the weather service with this key."


def name_mismatch(result: WeatherResult, form: SettingsForm) -> bool:
    """True when the provider resolved a different city or country than the one submitted."""
    return (
        result.city_name.lower() != form.city.lower()
        or result.country_code.lower() != form.country.lower()
    )


def write_back(config: ModuleConfig, result: WeatherResult, form: SettingsForm) -> ModuleConfig:
    """Store the provider's canonical id (name lookups) or name and country (id lookups)."""
    if form.direct_id:
        return config.model_copy(
            update={"default_city": result.city_name, "default_country": result.country_code}
        )
    return config.model_copy(update={"default_city_id": result.city_id})


async def validate_settings(
    client: httpx.AsyncClient,
    form: SettingsForm,
    lang: str = "en",
    base_url: str = DEFAULT_API_URL,
) -> SettingsOutcome:
    """Check submitted settings against the provider using the submitted, unsaved key and location.

    A disabled module may be saved with fields left blank; whatever key and location it does
    carry are still checked.
    """
    candidate = form.to_config()
    errors = required_field_errors(form)
    if errors:
        if not form.status:
            return SettingsOutcome(config=candidate)
        return SettingsOutcome(errors=errors)

    outcome = await lookup_weather(
        client, candidate, form.to_query(), api_key=form.key, lang=lang, base_url=base_url
    )
    if isinstance(outcome, WeatherError):
        logger.info(f"Settings validation failed ({outcome.kind.value}): {outcome.message}")
        return SettingsOutcome(errors={error_field(outcome, form): error_message(outcome, form)})

    if not form.direct_id and name_mismatch(outcome, form):
        logger.info(
            f"Settings validation resolved {outcome.city_name}, {outcome.country_code} "
            f"for submitted {form.city}, {form.country}"
        )
        return SettingsOutcome(errors={"city": WRONG_CITY_NAME})

    return SettingsOutcome(config=write_back(candidate, outcome, form))
