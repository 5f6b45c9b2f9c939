"""Application configuration utilities."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", description="Root logger level")
    json_logs: bool = Field(default=True, description="Enable JSON formatted logs")


class RenderConfig(BaseModel):
    version: int = Field(default=5, ge=1, le=40, description="Minimum QR version")
    error_correction: Literal["L", "M", "Q", "H"] = Field(default="L")
    scale: int = Field(default=5, ge=1, le=50, description="Pixels per module")
    quiet_zone: bool = Field(default=True)
    label: str | None = Field(default=None, description="Caption drawn under API-rendered codes")


class Settings(BaseSettings):
    """Central application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=(Path(__file__).resolve().parent.parent / ".env"),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    app_name: str = Field(default="qrisdyn")
    environment: Literal["development", "staging", "production"] = Field(default="development")
    api_key: str = Field(default="dev-secret-key")
    database_url: str = Field(default="sqlite+aiosqlite:///./qrisdyn.db")
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    render: RenderConfig = Field(default_factory=RenderConfig)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return memoized application settings."""

    return Settings()


settings = get_settings()
