"""Settings for the FreeTalk maintenance tools."""

from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_field(default, *env_names: str):
    if env_names:
        alias = AliasChoices(*env_names) if len(env_names) > 1 else env_names[0]
        return Field(default=default, validation_alias=alias)
    return Field(default=default)


class Settings(BaseSettings):
    store_endpoint: Optional[str] = _env_field(None, "STORE_ENDPOINT")
    # Name the web API's .env uses; read when STORE_ENDPOINT is unset or blank
    mongodb_uri: Optional[str] = _env_field(None, "MONGODB_URI")
    store_database: Optional[str] = _env_field(None, "STORE_DATABASE")
    store_connect_timeout_ms: int = _env_field(5000, "STORE_CONNECT_TIMEOUT_MS")
    store_socket_timeout_ms: int = _env_field(45000, "STORE_SOCKET_TIMEOUT_MS")

    environment: str = _env_field("production", "ENV", "APP_ENV", "ENVIRONMENT")
    obs_log_level: str = _env_field("INFO", "LOG_LEVEL")
    obs_log_sampling_rate_info: float = _env_field(1.0, "LOG_SAMPLING_RATE_INFO")
    service_name: str = _env_field("freetalk-tools", "SERVICE_NAME")
    git_commit: str = _env_field("unknown", "GIT_COMMIT", "COMMIT_SHA", "SOURCE_VERSION")

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("store_endpoint", "mongodb_uri", "store_database", mode="before")
    def _blank_to_none(cls, value):  # type: ignore[override]
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("obs_log_level", mode="before")
    def _normalise_level(cls, value):  # type: ignore[override]
        if value in (None, ""):
            return "INFO"
        return str(value).strip().upper()

    @model_validator(mode="after")
    def _fall_back_to_mongodb_uri(self) -> "Settings":
        if self.store_endpoint is None:
            self.store_endpoint = self.mongodb_uri
        return self


settings = Settings()
