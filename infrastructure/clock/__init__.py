"""Clock adapters."""

from infrastructure.clock.clocks import MIN_INTERVAL_SECONDS, AcceleratedClock, RealClock

__all__ = ["AcceleratedClock", "RealClock", "MIN_INTERVAL_SECONDS"]
