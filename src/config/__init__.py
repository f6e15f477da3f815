"""
Configuration Module
====================

Process settings (pydantic-settings, read from the environment and .env)
and the enums shared by every module.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Deployment-level settings.

    Per-type SLA hours and the warning window are runtime configuration
    resolved through the configuration store; the values here are only
    the last-resort defaults.
    """

    # ========== Application ==========
    app_name: str = Field(default="complaint-sla-service", description="Service name stamped on log records")
    app_version: str = Field(default="1.0.0", description="Reported by /health")
    environment: str = Field(default="development", description="development, staging, production or test")
    debug: bool = Field(default=False, description="Echo SQL statements")
    log_level: str = Field(default="INFO", description="Root log level")

    # ========== Server ==========
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=8000, description="Bind port", ge=1, le=65535)

    # ========== Database ==========
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/complaints",
        description="Async SQLAlchemy connection URL"
    )
    db_pool_size: int = Field(default=5, description="Pool size (server databases only)", ge=1)
    db_max_overflow: int = Field(default=10, description="Connections allowed beyond the pool", ge=0)

    # ========== SLA Configuration ==========
    config_seed_path: Path = Field(
        default=Path("config_seed.yaml"),
        description="Path to the static configuration seed table (YAML)"
    )
    config_cache_ttl_seconds: int = Field(
        default=300,
        description="Time-to-live of resolved configuration values",
        ge=0
    )
    sla_warning_window_hours: float = Field(
        default=24.0,
        description="Hours before the deadline at which an active complaint turns WARNING",
        ge=0
    )

    # ========== Reports ==========
    default_report_window_days: int = Field(
        default=30,
        description="Report window used when a filter omits its date range",
        ge=1
    )
    default_page_size: int = Field(default=1000, ge=1)
    max_page_size: int = Field(default=10000, ge=1)

    # ========== CORS ==========
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:8080"],
        description="Origins allowed to call the API from a browser"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in {"development", "staging", "production", "test"}:
            raise ValueError(f"unknown environment '{v}'")
        return v


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()


# ========== Constants ==========

class ComplaintStatus(str, Enum):
    """Complaint lifecycle statuses."""
    REGISTERED = "REGISTERED"
    ASSIGNED = "ASSIGNED"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"
    REOPENED = "REOPENED"


class Priority(str, Enum):
    """Complaint priority levels."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class SLAStatus(str, Enum):
    """SLA classification of a single complaint."""
    ON_TIME = "ON_TIME"
    WARNING = "WARNING"
    OVERDUE = "OVERDUE"
    COMPLETED = "COMPLETED"
    NOT_APPLICABLE = "N/A"


class ConfigSource(str, Enum):
    """Where a resolved configuration value came from."""
    CACHE = "cache"
    STORE = "store"
    SEED = "seed"
    DEFAULT = "default"


class UserRole(str, Enum):
    """Roles that shape report visibility."""
    ADMINISTRATOR = "ADMINISTRATOR"
    WARD_OFFICER = "WARD_OFFICER"
    MAINTENANCE_TEAM = "MAINTENANCE_TEAM"
    CITIZEN = "CITIZEN"


class RowDimension(str, Enum):
    """Row axis of the distribution matrix."""
    REGION = "region"
    SUB_REGION = "sub_region"


# ========== Groupings ==========

ACTIVE_STATUSES = frozenset({
    ComplaintStatus.REGISTERED, ComplaintStatus.ASSIGNED,
    ComplaintStatus.IN_PROGRESS, ComplaintStatus.REOPENED
})
COMPLETED_STATUSES = frozenset({ComplaintStatus.RESOLVED, ComplaintStatus.CLOSED})

VALID_STATUSES = [s.value for s in ComplaintStatus]
VALID_PRIORITIES = [p.value for p in Priority]
VALID_SLA_STATUSES = [s.value for s in SLAStatus]

# Prefix of legacy keyed complaint-type records in system_config
LEGACY_TYPE_PREFIX = "COMPLAINT_TYPE_"
# Reserved cache key of the resolved full type catalog
CATALOG_CACHE_KEY = "__complaint_type_catalog__"
