"""Application settings for the SomethingToDo functions backend."""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

import structlog
from pydantic import AliasChoices, Field
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

logger = structlog.get_logger(__name__)

DEFAULT_DEV_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://localhost:5000",
]

# Keys required to serve chat and live search traffic.
REQUIRED_KEYS = {
    "openai_api_key": "OPENAI_API_KEY",
    "rapidapi_key": "RAPIDAPI_KEY",
}

# Field name -> (section, key) in the functions runtime config.
RUNTIME_CONFIG_KEYS = {
    "openai_api_key": ("openai", "api_key"),
    "rapidapi_key": ("rapidapi", "key"),
    "allowed_origins": ("app", "allowed_origins"),
    "rate_limit_max": ("security", "rate_limit_max"),
    "rate_limit_window": ("security", "rate_limit_window"),
}


class RuntimeConfigSettingsSource(PydanticBaseSettingsSource):
    """Settings source backed by the functions runtime config.

    Deployed functions receive the config as JSON in ``CLOUD_RUNTIME_CONFIG``;
    the local emulator reads ``.runtimeconfig.json`` from the working directory.
    """

    def _load(self) -> dict[str, Any]:
        raw = os.environ.get("CLOUD_RUNTIME_CONFIG")
        if raw:
            try:
                return json.loads(raw)
            except json.JSONDecodeError:
                logger.warning("CLOUD_RUNTIME_CONFIG is not valid JSON, ignoring it")
                return {}

        path = Path(os.environ.get("RUNTIME_CONFIG_PATH", ".runtimeconfig.json"))
        if not path.is_file():
            return {}
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not read runtime config file", path=str(path), error=str(e))
            return {}

    def get_field_value(self, field: FieldInfo, field_name: str) -> tuple[Any, str, bool]:
        # Values are resolved in bulk by __call__.
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        config = self._load()
        values: dict[str, Any] = {}
        for field_name, (section, key) in RUNTIME_CONFIG_KEYS.items():
            section_values = config.get(section) or {}
            value = section_values.get(key) if isinstance(section_values, dict) else None
            if value not in (None, ""):
                values[field_name] = value
        return values


class Settings(BaseSettings):
    """Settings resolved once at startup.

    Precedence: init kwargs, runtime config, environment, ``.env`` file, defaults.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Core application settings
    app_env: Literal["development", "staging", "production", "test"] = Field(
        default="development",
        validation_alias=AliasChoices("app_env", "node_env"),
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    debug: bool = False
    version: str = "1.0.0"
    max_request_bytes: int = 10 * 1024 * 1024

    # CORS - comma separated, parsed by cors_origins
    allowed_origins: str = "http://localhost:3000"

    # Rate limiting (window in milliseconds)
    rate_limit_max: int = Field(default=100, ge=1)
    rate_limit_window: int = Field(default=60000, ge=1)
    # Key the limiter on the proxy-appended X-Forwarded-For hop instead of the peer
    trust_proxy: bool = False

    # Chat completion
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    openai_max_tokens: int = 1000
    openai_temperature: float = 0.7
    openai_timeout_seconds: float = 30.0
    chat_history_limit: int = 20
    chat_context_turns: int = 10

    # Events search
    rapidapi_key: str | None = None
    rapidapi_host: str = "real-time-events-search.p.rapidapi.com"

    # Firebase
    firebase_admin_sdk_json: str | None = None
    firebase_admin_sdk_path: str | None = None
    firebase_project_id: str | None = None
    firestore_database: str = "(default)"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            RuntimeConfigSettingsSource(settings_cls),
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )

    @property
    def cors_origins(self) -> list[str]:
        """Parse allowed origins from the comma separated setting."""
        origins = [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]
        return origins or list(DEFAULT_DEV_ORIGINS)

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"

    def missing_required(self) -> list[str]:
        """Return the environment names of required keys that are not set."""
        return [env_name for field_name, env_name in REQUIRED_KEYS.items() if not getattr(self, field_name)]


def validate_environment(settings: Settings) -> list[str]:
    """Log every missing required key.

    Serving continues without them: chat answers 503 and search falls back
    to placeholder events.
    """
    missing = settings.missing_required()
    if missing:
        logger.error(
            "Missing required configuration",
            missing=missing,
            hint="Set them in the functions runtime config or a local .env file",
        )
    return missing


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
