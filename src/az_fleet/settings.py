"""Fleet settings loaded from environment variables."""

import logging
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


class FleetSettings(BaseSettings):
    """Configuration for rendering and the command line.

    Values are read from ``AZ_FLEET_*`` environment variables
    (case-insensitive) and optionally from a ``.env`` file in the working
    directory.  Builders never consult these settings.
    """

    default_location: str = "[resourceGroup().location]"
    json_indent: int = 2
    log_level: LogLevel = "WARNING"

    model_config = {
        "env_prefix": "AZ_FLEET_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value

    @field_validator("json_indent")
    @classmethod
    def _non_negative_indent(cls, value: int) -> int:
        if value < 0:
            raise ValueError("AZ_FLEET_JSON_INDENT must be zero or greater")
        return value


def get_settings() -> FleetSettings:
    """Return settings freshly read from the environment."""
    settings = FleetSettings()
    logger.debug(
        "Settings loaded: default_location=%s json_indent=%d log_level=%s",
        settings.default_location,
        settings.json_indent,
        settings.log_level,
    )
    return settings
