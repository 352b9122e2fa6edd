# ABOUTME: Process settings from the environment and the JSON-file store for module configuration.
# ABOUTME: ModuleConfig is read on every request and written only by the settings workflow.

import logging
import os
import tempfile
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError

from current_weather.models import ModuleConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "current_weather.json"
DEFAULT_API_URL = "https://api.openweathermap.org/data/2.5"


class ConfigStoreError(Exception):
    """Raised when the module configuration cannot be read or written."""


class AppSettings(BaseModel):
    """Process-level settings taken from environment variables."""

    config_path: str = DEFAULT_CONFIG_PATH
    admin_token: str = ""
    api_url: str = DEFAULT_API_URL
    log_level: str = "INFO"


def load_settings() -> AppSettings:
    """Load AppSettings from the environment, reading a .env file if present."""
    load_dotenv()
    return AppSettings(
        config_path=os.environ.get("CURRENT_WEATHER_CONFIG", DEFAULT_CONFIG_PATH),
        admin_token=os.environ.get("CURRENT_WEATHER_ADMIN_TOKEN", ""),
        api_url=os.environ.get("OPENWEATHERMAP_URL", DEFAULT_API_URL),
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    )


class ConfigStore:
    """Stores the ModuleConfig as a JSON document on disk."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> ModuleConfig:
        """Return the stored config, or the default (disabled) config if nothing is stored yet."""
        if not self.path.exists():
            return ModuleConfig()
        try:
            return ModuleConfig.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            raise ConfigStoreError(f"Failed to load config from {self.path}: {e}") from e

    def save(self, config: ModuleConfig) -> None:
        """Write the config atomically: temp file in the same directory, then rename."""
        directory = self.path.parent
        tmp_name = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=f".{self.path.name}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(config.model_dump_json(indent=2))
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise ConfigStoreError(f"Failed to save config to {self.path}: {e}") from e
        logger.info(f"Saved module configuration to {self.path}")
