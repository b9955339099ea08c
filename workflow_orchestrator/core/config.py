"""Application configuration using Pydantic settings."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class OrchestratorSettings(BaseSettings):
    """Workflow orchestrator configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="WFO_",
        extra="ignore",
    )

    environment: Literal["local", "test", "staging", "production"] = Field(default="local")
    service_name: str = Field(default="workflow-orchestrator")
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=True)
    log_propagate: bool = Field(default=False)
    queue_backend: Literal["memory", "database", "redis"] = Field(default="memory")
    database_url: str = Field(default="sqlite:///./data/workflow_queue.db")
    sql_echo: bool = Field(default=False)
    queue_table: str = Field(default="workflow_queue")
    queue_poll_interval: float = Field(default=0.1, gt=0)
    redis_url: str | None = Field(default=None)
    redis_token: str | None = Field(default=None)
    redis_queue_prefix: str = Field(default="workflow_queue:")
    redis_timeout: float = Field(default=5.0, gt=0)
    max_async_retries: int = Field(default=3, ge=0)

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @field_validator("redis_url", "redis_token", mode="before")
    @classmethod
    def empty_string_to_none(cls, value: str | None) -> str | None:
        if value == "":
            return None
        return value


@lru_cache
def get_settings() -> OrchestratorSettings:
    """Return cached orchestrator settings instance."""

    return OrchestratorSettings()
