"""Application configuration using Pydantic settings."""
from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class GraphQLSettings(BaseModel):
    url: str | None = Field(default=None, description="Project base URL; the endpoint is <url>/graphql/v1")
    api_key: str | None = Field(default=None, description="Publishable apikey sent with every request")


class GeneratorSettings(BaseModel):
    url: str | None = Field(default=None, description="Base URL of the step generation service")
    timeout_s: float = 60.0


class LocalStateSettings(BaseModel):
    enabled: bool = True
    database_url: str = Field(
        default="sqlite+aiosqlite:///./processcoach-local.db",
        description="SQLAlchemy async URL of the per-device state store",
    )
    owner_token_key: str = "client_id"


class ObservabilitySettings(BaseModel):
    otel_service_name: str = "processcoach"
    otel_exporter_otlp_endpoint: str | None = None
    log_level: str = "INFO"


class ProcessCoachSettings(BaseSettings):
    graphql: GraphQLSettings = GraphQLSettings()
    generator: GeneratorSettings = GeneratorSettings()
    local_state: LocalStateSettings = LocalStateSettings()
    observability: ObservabilitySettings = ObservabilitySettings()
    environment: Literal["dev", "qa", "prod"] | str = "dev"
    editor_idle_ttl_s: float = Field(default=1800.0, description="Idle editor sessions are closed after this many seconds")

    model_config = SettingsConfigDict(env_nested_delimiter="__", env_prefix="PROCESSCOACH_", case_sensitive=False)


@lru_cache(maxsize=1)
def get_settings(**kwargs: Any) -> ProcessCoachSettings:
    """Return cached settings instance."""
    return ProcessCoachSettings(**kwargs)


__all__ = ["ProcessCoachSettings", "get_settings"]
