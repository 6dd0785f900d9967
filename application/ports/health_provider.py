"""
Health Data Provider Interface (Port).

Part of AMA-271: Workout Simulation Mode

Supplies heart-rate and calorie aggregates for the completion summary. The
engine only resets it at session start and reads ``summary()`` at the end.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from domain.models.behavior_profile import ExerciseIntensity
from domain.models.completion import HealthMetrics


@dataclass(frozen=True)
class HRSample:
    """A single heart rate measurement."""
    timestamp: datetime
    bpm: int


class HealthDataProvider(Protocol):

    @property
    def current_hr(self) -> int:
        ...

    def record_work(self, duration_seconds: float, intensity: ExerciseIntensity) -> None:
        """Account for a work period of the given intensity."""
        ...

    def record_rest(self, duration_seconds: float) -> None:
        """Account for a recovery period."""
        ...

    def summary(self) -> HealthMetrics:
        """Aggregates collected since the last reset()."""
        ...

    def reset(self) -> None:
        ...
