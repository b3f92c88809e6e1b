"""Configuration management with pydantic-settings.

Provides type-safe configuration with environment variable validation.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable validation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Database ===
    database_url: str = Field(
        "sqlite:///./clinic_stock.db",
        description="Database URL (SQLite for local use, MySQL/Postgres in production)",
    )

    # === Application settings ===
    app_name: str = Field("Clinic Stock", description="Application display name")
    app_version: str = Field("1.0.0", description="Application version")
    environment: str = Field("production", description="Deployment environment label")
    dev_mode: bool = Field(False, description="Resolve anonymous requests to a synthetic admin")
    report_footer: str = Field(
        "Clinic Stock Management System", description="Footer line printed on HTML reports"
    )

    # === Logging ===
    log_level: str = Field("INFO", description="Root log level")
    log_file_path: str | None = Field(None, description="JSON log file path (None = stdout only)")

    # === Predictive analytics policy ===
    analytics_lead_time_days: int = Field(7, ge=0, description="Replenishment lead time in days")
    analytics_safety_factor: float = Field(
        0.5, ge=0, description="Share of lead-time consumption held as safety stock"
    )
    analytics_supply_days: int = Field(30, ge=0, description="Days of supply per reorder")

    # === Stock rules ===
    default_low_stock_threshold: int = Field(10, ge=0, description="Threshold for new items")
    expiry_warning_days: int = Field(90, ge=0, description="Expiry warning window in days")

    # === Notifications ===
    notify_email_enabled: bool = Field(True, description="Deliver email notifications")
    notify_sms_enabled: bool = Field(True, description="Deliver SMS notifications")
    owner_email: str = Field("", description="Clinic owner email for critical alerts")

    # === Export ===
    export_max_rows: int = Field(100000, description="Maximum rows per export")

    @property
    def analytics_policy_kwargs(self) -> dict:
        """Reorder policy parameters as keyword arguments."""
        return {
            "lead_time_days": self.analytics_lead_time_days,
            "safety_factor": self.analytics_safety_factor,
            "supply_days": self.analytics_supply_days,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Raises:
        RuntimeError: If environment variables fail validation.

    """
    try:
        return Settings()
    except ValidationError as e:
        bad_fields = [str(error["loc"][0]).upper() for error in e.errors() if error["loc"]]

        error_msg = (
            f"Configuration error: invalid environment variables: "
            f"{', '.join(bad_fields)}\n"
            f"Please fix them in .env file or the process environment."
        )
        raise RuntimeError(error_msg) from e


__all__ = ["Settings", "get_settings"]
