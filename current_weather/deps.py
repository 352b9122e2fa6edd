# ABOUTME: Dependency container for the web handlers using Pydantic BaseModel.
# ABOUTME: Holds the httpx.AsyncClient, the config store, and process settings.

import httpx
from pydantic import BaseModel, ConfigDict

from current_weather.config_store import AppSettings, ConfigStore, load_settings


class WeatherDeps(BaseModel):
    """Dependencies injected into the page and settings handlers."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    http_client: httpx.AsyncClient
    config_store: ConfigStore
    settings: AppSettings


def create_http_client() -> httpx.AsyncClient:
    """Create the shared httpx client.

    A single upstream failure is surfaced immediately, so no retrying transport is mounted.
    """
    return httpx.AsyncClient()


def create_deps(settings: AppSettings | None = None) -> WeatherDeps:
    """Build WeatherDeps from the given settings, or from the environment when omitted."""
    settings = settings or load_settings()
    return WeatherDeps(
        http_client=create_http_client(),
        config_store=ConfigStore(settings.config_path),
        settings=settings,
    )
