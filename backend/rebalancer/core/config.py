"""Application configuration using pydantic-settings.

All environment variables should be accessed through the settings object
rather than using os.getenv() directly. Engine thresholds are exposed to the
rebalancing services as a frozen ``BalancerConfig`` built from the settings,
so every component receives the same immutable values for a run.
"""

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BalancerConfig(BaseModel):
    """Immutable thresholds, caps and windows for one rebalancing run."""

    model_config = ConfigDict(frozen=True)

    # Sales windows (days)
    velocity_days: int = Field(default=14, gt=0)
    trend_days: int = Field(default=56, gt=0)

    # Classification thresholds (days of stock)
    low_stock_days: float = Field(default=7, ge=0)
    overstock_days: float = Field(default=45, gt=0)
    target_days_min: float = Field(default=14, ge=0)
    source_keep_days: float = Field(default=21, ge=0)
    high_demand_multiplier: float = Field(default=1.5, gt=0)
    min_transfer_value: float = Field(default=25.0, ge=0)

    # Velocity substituted when a store has no recorded sales
    min_velocity_floor: float = Field(default=0.1, gt=0)

    # Plan caps per tier
    urgent_cap: int = Field(default=50, ge=0)
    high_cap: int = Field(default=100, ge=0)
    normal_cap: int = Field(default=200, ge=0)

    # Query bounds
    inventory_batch_limit: int = Field(default=500, gt=0)
    velocity_chunk_size: int = Field(default=400, gt=0)

    # Run behaviour
    dry_run_default: bool = True
    insights_enabled: bool = False
    insights_dir: str = "./storage/runs"
    isolate_store_failures: bool = False
    run_timeout_seconds: float = 900
    lock_ttl_seconds: int = Field(default=3600, gt=0)

    @model_validator(mode="after")
    def validate_thresholds(self) -> "BalancerConfig":
        if self.low_stock_days >= self.overstock_days:
            raise ValueError(
                f"low_stock_days ({self.low_stock_days}) must be below "
                f"overstock_days ({self.overstock_days})"
            )
        return self

    def cap_for(self, tier: str) -> int:
        """Return the configured cap for a plan tier name."""
        return getattr(self, f"{tier}_cap")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra env vars
    )

    # Database - relative path by default, override via DATABASE_URL
    database_url: str = "sqlite:///./data/rebalancer.db"

    # Server
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # API
    api_v1_prefix: str = "/api/v1"

    # ==========================================================================
    # Rebalancing engine (REBALANCE_* environment variables)
    # ==========================================================================
    rebalance_velocity_days: int = 14
    rebalance_trend_days: int = 56
    rebalance_low_stock_days: float = 7
    rebalance_overstock_days: float = 45
    rebalance_target_days_min: float = 14
    rebalance_source_keep_days: float = 21
    rebalance_high_demand_multiplier: float = 1.5
    rebalance_min_transfer_value: float = 25.0
    rebalance_min_velocity_floor: float = 0.1
    rebalance_urgent_cap: int = 50
    rebalance_high_cap: int = 100
    rebalance_normal_cap: int = 200
    rebalance_inventory_batch_limit: int = 500
    rebalance_velocity_chunk_size: int = 400
    rebalance_dry_run_default: bool = True
    rebalance_insights_enabled: bool = False
    rebalance_insights_dir: str = "./storage/runs"
    rebalance_isolate_store_failures: bool = False
    rebalance_run_timeout_seconds: float = 900
    rebalance_lock_ttl_seconds: int = 3600

    def balancer_config(self, **overrides) -> BalancerConfig:
        """Build the frozen engine config from the ``rebalance_*`` fields."""
        prefix = "rebalance_"
        values = {
            name[len(prefix):]: getattr(self, name)
            for name in type(self).model_fields
            if name.startswith(prefix)
        }
        values.update(overrides)
        return BalancerConfig(**values)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
