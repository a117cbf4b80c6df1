"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings.

    All values loaded from .env file or environment variables.
    Validation happens automatically on startup.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),  # Check current dir, then parent
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra env vars
    )

    # ===================
    # RULE STORE
    # ===================
    rules_store: str = Field(
        default="memory",
        pattern="^(memory|supabase)$",
        description="Backend for cutoff rules and branch facts"
    )
    supabase_url: Optional[str] = Field(
        None,
        description="Supabase project URL (required when rules_store=supabase)"
    )
    supabase_key: Optional[str] = Field(
        None,
        description="Supabase anon/public key"
    )

    # ===================
    # CUTOFF CLOCK
    # ===================
    cutoff_refresh_seconds: float = Field(
        default=30.0,
        gt=0,
        le=300,
        description="Live cutoff display recompute interval"
    )
    cutoff_soon_minutes: int = Field(
        default=60,
        ge=1,
        le=240,
        description="Minutes before cutoff at which the display turns YELLOW"
    )
    upcoming_blackout_days: int = Field(
        default=14,
        ge=1,
        le=90,
        description="Look-ahead window for upcoming blackouts"
    )
    promise_search_days: int = Field(
        default=30,
        ge=1,
        le=365,
        description="Days scanned for the earliest valid ship date"
    )

    # ===================
    # RANKING
    # ===================
    candidate_fetch_timeout_seconds: float = Field(
        default=2.0,
        gt=0,
        le=30,
        description="Per-candidate timeout for rule and inventory fetches"
    )

    # ===================
    # SCORING WEIGHTS
    # ===================
    weight_inventory: int = Field(default=30, ge=0, le=100, description="Inventory score ceiling")
    weight_cutoff: int = Field(default=30, ge=0, le=100, description="Cutoff score ceiling")
    weight_processing: int = Field(default=25, ge=0, le=100, description="Processing score ceiling")
    weight_distance: int = Field(default=15, ge=0, le=100, description="Distance score ceiling")

    # ===================
    # SCORING THRESHOLDS
    # ===================
    inventory_saturation_qty: int = Field(
        default=100,
        ge=1,
        description="On-hand units at which the inventory score saturates"
    )
    cutoff_saturation_minutes: int = Field(
        default=240,
        ge=1,
        description="Minutes remaining at which the cutoff score saturates"
    )
    cutoff_passed_score: int = Field(
        default=2,
        ge=0,
        description="Floor score for a valid ship day whose cutoff has passed"
    )
    distance_full_miles: float = Field(default=30, gt=0, description="Full distance score up to this range")
    distance_near_miles: float = Field(default=100, gt=0, description="0.7x distance score up to this range")
    distance_far_miles: float = Field(default=250, gt=0, description="0.4x distance score up to this range")

    # ===================
    # APP SETTINGS
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Application environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API host"
    )
    api_port: int = Field(
        default=8000,
        ge=1000,
        le=65535,
        description="API port"
    )
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Browser origins allowed to call the API"
    )

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def supabase_configured(self) -> bool:
        """Check if Supabase credentials are present."""
        return bool(self.supabase_url and self.supabase_key)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If env vars are invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
