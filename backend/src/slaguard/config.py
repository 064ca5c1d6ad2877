"""Application configuration using Pydantic settings."""

from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration pulled from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="",
        populate_by_name=True,
        extra="ignore",
    )

    environment: str = Field(default="local", alias="ENVIRONMENT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    repository: str = Field(default="memory", alias="SLA_REPOSITORY")
    database_url: str = Field(default="sqlite:///./slaguard.db", alias="DATABASE_URL")
    external_ids: bool = Field(default=False, alias="SLA_EXTERNAL_IDS")

    check_period: int = Field(default=60, alias="SLA_CHECK_PERIOD")
    assessment_workers: int = Field(default=1, alias="SLA_ASSESSMENT_WORKERS")
    max_delta: float = Field(default=0.1, alias="SLA_MAX_DELTA")

    adapter: str = Field(default="random", alias="SLA_ADAPTER")
    random_size: int = Field(default=3, alias="SLA_RANDOM_SIZE")
    prometheus_url: str = Field(default="http://prometheus:9090", alias="SLA_PROMETHEUS_URL")
    retrieval_timeout: float = Field(default=10, alias="SLA_RETRIEVAL_TIMEOUT")

    notifiers: str = Field(default="log", alias="SLA_NOTIFIERS")
    webhook_url: Optional[str] = Field(default=None, alias="SLA_WEBHOOK_URL")
    slack_webhook_url: Optional[str] = Field(default=None, alias="SLACK_WEBHOOK_URL")

    redis_url: str = Field(default="redis://redis:6379/0", alias="REDIS_URL")

    @property
    def notifier_names(self) -> List[str]:
        return [name.strip().lower() for name in self.notifiers.split(",") if name.strip()]


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()
