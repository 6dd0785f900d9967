"""
Engine settings loaded from the environment with Pydantic BaseSettings.

Part of AMA-376: Introduce settings.py with Pydantic BaseSettings
Part of AMA-271: Workout Simulation Mode

Simulation mode, the progress store location, the completion target and the
remote-control tunables all live here. Tests build Settings(_env_file=None)
directly; everything else goes through get_settings().

Usage:
    from backend.settings import get_settings

    settings = get_settings()
    if settings.simulation_enabled:
        speed = max(settings.simulation_speed, 1.0)
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from domain.models.behavior_profile import BEHAVIOR_PROFILE_NAMES


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Core Environment
    # -------------------------------------------------------------------------
    environment: str = Field(
        default="development",
        description="Runtime environment: development, staging, production",
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level (DEBUG, INFO, WARNING, ERROR)",
    )

    # -------------------------------------------------------------------------
    # Engine
    # -------------------------------------------------------------------------
    state_broadcast_interval_seconds: int = Field(
        default=5,
        ge=1,
        description="Tick-only state changes are broadcast every N elapsed seconds",
    )
    countdown_cue_seconds: int = Field(
        default=3,
        ge=0,
        description="Countdown cues are spoken for the last N seconds of a timed step",
    )
    command_ack_cache_size: int = Field(
        default=256,
        ge=1,
        description="Number of remote command ids remembered for duplicate suppression",
    )
    progress_store_path: Optional[str] = Field(
        default=None,
        description="JSON file for saved workout progress (in-memory when unset)",
    )

    # -------------------------------------------------------------------------
    # Simulation Mode (AMA-271)
    # -------------------------------------------------------------------------
    simulation_enabled: bool = Field(
        default=False,
        description="Run sessions on an accelerated clock with simulated input",
    )
    simulation_speed: float = Field(
        default=10.0,
        gt=0,
        description="Clock speed multiplier for simulated sessions (values below 1 run at 1x)",
    )
    simulation_profile: str = Field(
        default="casual",
        description="Simulated user behavior: efficient, casual, distracted",
    )
    simulation_generate_health: bool = Field(
        default=True,
        description="Generate synthetic heart-rate and calorie data in simulation",
    )
    simulation_resting_hr: int = Field(
        default=70,
        gt=0,
        description="Resting heart rate for synthetic health data",
    )
    simulation_max_hr: int = Field(
        default=175,
        gt=0,
        description="Max heart rate for synthetic health data",
    )

    # -------------------------------------------------------------------------
    # External Services - Completions API
    # -------------------------------------------------------------------------
    completion_api_url: Optional[str] = Field(
        default=None,
        description="Base URL of the workout completions API (logged only when unset)",
    )
    completion_api_token: Optional[str] = Field(
        default=None,
        description="Bearer token for the completions API",
    )

    # -------------------------------------------------------------------------
    # Observability - Sentry
    # -------------------------------------------------------------------------
    sentry_dsn: Optional[str] = Field(
        default=None,
        description="Sentry DSN for error tracking",
    )

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------
    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is a valid value."""
        valid_environments = {"development", "staging", "production", "test"}
        if v.lower() not in valid_environments:
            raise ValueError(
                f"Invalid environment '{v}'. Must be one of: {valid_environments}"
            )
        return v.lower()

    @field_validator("simulation_profile")
    @classmethod
    def validate_simulation_profile(cls, v: str) -> str:
        """Ensure the behavior profile is a known preset."""
        if v.lower() not in BEHAVIOR_PROFILE_NAMES:
            raise ValueError(
                f"Invalid simulation profile '{v}'. Must be one of: {sorted(BEHAVIOR_PROFILE_NAMES)}"
            )
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level '{v}'. Must be one of: {valid_levels}")
        return v.upper()

    # -------------------------------------------------------------------------
    # Helper Properties
    # -------------------------------------------------------------------------
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_test(self) -> bool:
        """Check if running in test environment."""
        return self.environment == "test"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    For testing, you can clear the cache with get_settings.cache_clear().

    Returns:
        Settings: Application settings instance
    """
    return Settings()
