"""Health data adapters."""

from infrastructure.health.simulated_health import SimulatedHealthProvider, calories_for

__all__ = ["SimulatedHealthProvider", "calories_for"]
