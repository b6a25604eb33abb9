"""Engine configuration using Pydantic Settings.

Configuration is loaded from environment variables. Point `ENV_FILE` at a
local env file during development; leave it unset in deployed environments
so injected variables are the single source of truth.
"""

import os
import re
from enum import Enum

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppEnvironment(str, Enum):
    """Application environment values."""

    LOCAL = "local"
    TEST = "test"
    PROD = "prod"


_REGION_PATTERN = re.compile(r"^[A-Z]{2}$")


class Settings(BaseSettings):
    """
    Engine settings with type validation.

    Only settings the validation engine itself consumes live here; the HTTP
    layer embedding the engine keeps its own configuration.
    """

    model_config = SettingsConfigDict(
        env_file=os.getenv("ENV_FILE") or None, env_prefix="", extra="ignore"
    )

    # Application
    app_env: AppEnvironment = AppEnvironment.LOCAL
    app_name: str = "rental-rules"
    app_log_level: str = "INFO"

    # Observability
    observability_enabled: bool = True
    observability_structured_logs: bool = True

    # Region used for phone validation when no dial code is submitted
    default_phone_region: str = "NL"

    # Directory receiving compiled client manifests
    manifest_output_dir: str = ".local/rule-manifests"

    @field_validator("app_env", mode="before")
    @classmethod
    def validate_app_env(cls, v: str | AppEnvironment) -> AppEnvironment:
        """Validate and parse app_env to AppEnvironment enum."""
        if isinstance(v, AppEnvironment):
            return v
        try:
            return AppEnvironment(v.lower())
        except ValueError:
            raise ValueError(
                f"app_env must be one of {[e.value for e in AppEnvironment]}, got '{v}'"
            )

    @field_validator("app_log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and check the log level name."""
        level = v.strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"app_log_level must be a standard logging level, got '{v}'")
        return level

    @field_validator("default_phone_region")
    @classmethod
    def validate_default_phone_region(cls, v: str) -> str:
        """Normalize the default region to an ISO 3166-1 alpha-2 code."""
        region = v.strip().upper()
        if not _REGION_PATTERN.match(region):
            raise ValueError(
                f"default_phone_region must be an ISO 3166-1 alpha-2 code, got '{v}'"
            )
        return region


settings = Settings()
