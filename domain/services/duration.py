"""Planned-duration estimates for interval trees and flattened steps."""

from typing import Iterable, List, Optional

from domain.models.flattened_step import FlattenedStep, StepType
from domain.models.interval import (
    DistanceInterval,
    Interval,
    RepeatInterval,
    RepsInterval,
    RestInterval,
)

# Estimate ~3 seconds per rep for rep-based exercises
SECONDS_PER_REP = 3
# Estimate ~6 min/km for distance-based
SECONDS_PER_METER = 0.36


def estimate_intervals_duration(intervals: Iterable[Interval]) -> int:
    """
    Estimate total duration in seconds of an interval tree.

    Recursively processes nested repeat blocks. Manual rests count as zero.
    """
    total = 0
    for interval in intervals:
        if isinstance(interval, RepeatInterval):
            total += estimate_intervals_duration(interval.intervals) * interval.reps
        elif isinstance(interval, RepsInterval):
            sets = interval.total_sets
            total += interval.reps * SECONDS_PER_REP * sets
            total += (interval.restSec or 0) * (sets - 1)
        elif isinstance(interval, DistanceInterval):
            total += int(interval.meters * SECONDS_PER_METER)
        elif isinstance(interval, RestInterval):
            total += interval.seconds or 0
        else:
            total += interval.seconds
    return total


def planned_step_seconds(step: FlattenedStep) -> Optional[int]:
    """Planned duration of a single step, or None when user-paced."""
    if step.timer_seconds is not None:
        return step.timer_seconds
    if step.step_type == StepType.REPS and step.target_reps:
        return step.target_reps * SECONDS_PER_REP
    if step.step_type == StepType.DISTANCE and step.distance_meters:
        return int(step.distance_meters * SECONDS_PER_METER)
    return None


def estimate_steps_duration(steps: List[FlattenedStep]) -> int:
    total = 0
    for step in steps:
        total += planned_step_seconds(step) or 0
        if step.has_rest_after and step.rest_after_seconds:
            total += step.rest_after_seconds
    return total
