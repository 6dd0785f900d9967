"""
Domain layer for the workout execution engine.

This package contains pure domain models and functions that are independent
of infrastructure concerns (clocks, transports, storage).
"""

from domain.models import (
    FlattenedStep,
    Interval,
    StepType,
    Workout,
    WorkoutPhase,
    WorkoutState,
)
from domain.services import flatten_intervals

__all__ = [
    "FlattenedStep",
    "Interval",
    "StepType",
    "Workout",
    "WorkoutPhase",
    "WorkoutState",
    "flatten_intervals",
]
