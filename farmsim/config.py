"""Simulation settings loaded from environment variables via pydantic-settings."""

from enum import StrEnum
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class LogFormat(StrEnum):
    json = "json"
    console = "console"


class Settings(BaseSettings):
    """Central configuration — all values sourced from env vars or .env file."""

    model_config = SettingsConfigDict(
        env_prefix="FARMSIM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # ── Grid & calendar ─────────────────────────────────────────────────────
    grid_size: int = 10
    days_per_season: int = 90
    days_per_year: int = 360

    # ── Starting state ──────────────────────────────────────────────────────
    initial_balance: float = 235000
    initial_water_reserve: float = 75
    initial_farm_health: int = 85
    initial_drought_probability: float = 0.05
    initial_heatwave_probability: float = 0.08

    # ── Economy ─────────────────────────────────────────────────────────────
    planting_cost_factor: float = 0.10
    irrigation_cost: float = 35
    fertilize_cost: float = 50
    daily_overhead: float = 3
    low_balance_warning: float = -5000
    annual_interest_rate: float = 0.01
    debt_interest_multiplier: float = 2.5

    # ── Sustainability subsidies ────────────────────────────────────────────
    sustainability_threshold_low: int = 35
    sustainability_threshold_med: int = 60
    sustainability_threshold_high: int = 75
    sustainability_subsidy_low: float = 3000
    sustainability_subsidy_med: float = 6000
    sustainability_subsidy_high: float = 12000

    # ── Climate drift ───────────────────────────────────────────────────────
    climate_drift_per_year: float = 0.005
    drought_probability_cap: float = 0.5
    heatwave_probability_cap: float = 0.6

    # ── Event scheduling ────────────────────────────────────────────────────
    random_event_interval_days: int = 4
    random_event_chance: float = 0.20
    duplicate_event_window_days: int = 5
    event_cooldown_days: int = 30
    early_game_days: int = 180

    # ── Event cost scaling (policy) ─────────────────────────────────────────
    regulation_base_cost: float = 3000
    policy_cost_reference_balance: float = 150000
    policy_cost_reference_spread: float = 300000
    policy_cost_scale_min: float = 0.7
    policy_cost_scale_max: float = 1.8
    policy_cost_min: float = 500
    policy_cost_max: float = 6000

    # ── Event cost scaling (technology setbacks) ────────────────────────────
    setback_cost_reference_balance: float = 180000
    setback_cost_reference_spread: float = 250000
    setback_cost_scale_min: float = 0.6
    setback_cost_scale_max: float = 1.6
    setback_cost_min: float = 800
    setback_cost_max: float = 6000

    # ── Notices ─────────────────────────────────────────────────────────────
    notice_log_size: int = 20

    # ── Reproducibility ─────────────────────────────────────────────────────
    random_seed: int | None = None

    # ── Observability ───────────────────────────────────────────────────────
    log_level: str = "info"
    log_format: LogFormat = LogFormat.console


@lru_cache
def get_settings() -> Settings:
    """Singleton settings instance (cached after first call)."""
    return Settings()
