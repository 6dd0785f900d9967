"""
Pure domain functions for workout execution.

- flatten_intervals: interval tree -> FlattenedStep list
- estimate_intervals_duration / estimate_steps_duration: planned durations
- format_seconds / format_distance: display strings
"""

from domain.services.duration import (
    estimate_intervals_duration,
    estimate_steps_duration,
    planned_step_seconds,
)
from domain.services.formatting import format_distance, format_seconds
from domain.services.interval_flattener import flatten_intervals

__all__ = [
    "flatten_intervals",
    "estimate_intervals_duration",
    "estimate_steps_duration",
    "planned_step_seconds",
    "format_distance",
    "format_seconds",
]
