# python
# app/core/config.py
"""Configuration settings for the Files Manager service.

Uses Pydantic BaseSettings for environment variable management.
"""
from enum import Enum

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentEnum(str, Enum):
    development = "development"
    testing = "testing"
    staging = "staging"
    production = "production"


class LogLevelEnum(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormatEnum(str, Enum):
    simple = "simple"
    json = "json"


class ThumbnailBackendEnum(str, Enum):
    local = "local"
    celery = "celery"


class Settings(BaseSettings):
    # Pydantic v2 settings configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ===== Application Settings =====
    app_name: str = Field(default="Files Manager API", description="Application name")
    environment: EnvironmentEnum = Field(
        default=EnvironmentEnum.development, description="Environment type"
    )
    debug: bool = Field(default=False, description="Debug mode")
    version: str = Field(default="1.0.0", description="Application version")

    # ===== Session Settings =====
    session_ttl_seconds: int = Field(
        default=24 * 60 * 60, description="Lifetime of an issued X-Token in seconds"
    )

    # ===== Database Settings =====
    database_url: str = Field(
        default="sqlite+aiosqlite:///./files_manager.db", description="Database connection URL"
    )
    db_pool_size: int = Field(default=20, description="Database connection pool size")
    db_max_overflow: int = Field(default=0, description="Database max overflow connections")
    db_command_timeout: float = Field(
        default=10.0, description="Upper bound in seconds for a single database command"
    )

    # ===== Redis Configuration =====
    redis_url: str = Field(default="redis://localhost:6379/0", description="Redis connection URL")
    redis_socket_timeout: float = Field(default=5.0, description="Redis socket timeout in seconds")

    # ===== File Storage Settings =====
    storage_folder: str = Field(
        default="/tmp/files_manager", description="Directory holding uploaded blobs"
    )
    storage_timeout: float = Field(
        default=30.0, description="Upper bound in seconds for a single blob read or write"
    )
    max_file_size: int = Field(default=52428800, description="Maximum file size in bytes (50MB)")
    page_size: int = Field(default=20, description="Number of files per listing page")

    # ===== Thumbnails =====
    thumbnail_backend: ThumbnailBackendEnum = Field(
        default=ThumbnailBackendEnum.local, description="Where thumbnail jobs are executed"
    )
    thumbnail_workers: int = Field(default=4, description="Size of the thumbnail worker pool")
    thumbnail_queue_size: int = Field(
        default=100, description="Maximum number of pending thumbnail jobs (local backend)"
    )
    thumbnail_max_attempts: int = Field(
        default=3, description="Attempts per thumbnail write before the job is failed"
    )
    thumbnail_backoff_seconds: float = Field(
        default=0.5, description="Base delay between thumbnail write attempts"
    )
    thumbnail_widths: list[int] = Field(
        default=[500, 250, 100], description="Target widths of generated thumbnails"
    )

    # ===== Background Tasks (Celery) =====
    celery_broker_url: str = Field(
        default="redis://localhost:6379/1", description="Celery broker URL"
    )
    celery_result_backend: str = Field(
        default="redis://localhost:6379/2", description="Celery result backend"
    )

    # ===== Monitoring & Logging =====
    log_level: LogLevelEnum = Field(default=LogLevelEnum.INFO, description="Logging level")
    log_format: LogFormatEnum = Field(default=LogFormatEnum.simple, description="Log format")

    # ===== Server Settings =====
    host: str = Field(default="127.0.0.1", description="Host to bind the server")
    port: int = Field(default=5000, description="Port to bind the server")

    # ===== Computed Properties =====
    @property
    def is_development(self) -> bool:
        return self.environment == EnvironmentEnum.development

    @property
    def is_production(self) -> bool:
        return self.environment == EnvironmentEnum.production

    @property
    def is_testing(self) -> bool:
        return self.environment == EnvironmentEnum.testing

    @property
    def is_postgres(self) -> bool:
        return self.database_url.startswith("postgresql")

    # ===== Validation Methods =====
    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v):
        if v and isinstance(v, str):
            lv = v.lower()
            if lv in ["dev", "develop"]:
                return "development"
            if lv in ["prod"]:
                return "production"
        return v

    @field_validator("max_file_size")
    @classmethod
    def validate_file_size(cls, v):
        if v > 100 * 1024 * 1024:
            raise ValueError("Maximum file size cannot exceed 100MB")
        return v

    @field_validator("thumbnail_workers", "thumbnail_max_attempts", "thumbnail_queue_size")
    @classmethod
    def validate_positive(cls, v):
        if v < 1:
            raise ValueError("Value must be at least 1")
        return v

    @field_validator("thumbnail_widths")
    @classmethod
    def validate_widths(cls, v):
        if not v:
            raise ValueError("At least one thumbnail width is required")
        if any(width <= 0 for width in v):
            raise ValueError("Thumbnail widths must be positive")
        return v

    @model_validator(mode="after")
    def set_computed_fields(self):
        if self.is_testing and self.thumbnail_backend == ThumbnailBackendEnum.celery:
            self.thumbnail_backend = ThumbnailBackendEnum.local
        return self


settings = Settings()


def get_config_summary() -> dict:
    return {
        "app_name": settings.app_name,
        "version": settings.version,
        "environment": settings.environment,
        "debug": settings.debug,
        "database": "postgresql" if settings.is_postgres else "sqlite",
        "storage_folder": settings.storage_folder,
        "thumbnail_backend": settings.thumbnail_backend,
        "thumbnail_workers": settings.thumbnail_workers,
        "session_ttl_seconds": settings.session_ttl_seconds,
    }


__all__ = [
    "settings",
    "Settings",
    "get_config_summary",
    "EnvironmentEnum",
    "LogLevelEnum",
    "LogFormatEnum",
    "ThumbnailBackendEnum",
]
