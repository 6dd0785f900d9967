"""
Interval flattening: nested interval tree -> ordered list of FlattenedStep.

Pure and side-effect free. Rules:

- repeat with exactly one reps child ("sets-style"): one step per round,
  labelled "Set i of N", each carrying the child's rest after it.
- any other repeat: children are flattened ``reps`` times with
  round context "Round i of N". Nested repeats override the context.
- reps: ``sets or 1`` steps; rest after every set except the last, unless
  restSec == 0.
- rest: one ``rest`` step whose timer is the node's seconds (None = manual).
- warmup/time/distance: one step with a manual rest boundary after it.
- cooldown: one step, never followed by rest.

A final pass clears the rest boundary on the last step and on any step that
is immediately followed by an explicit rest step.
"""

import logging
from typing import List, Optional

from domain.models.flattened_step import FlattenedStep, StepType
from domain.models.interval import (
    CooldownInterval,
    DistanceInterval,
    Interval,
    RepeatInterval,
    RepsInterval,
    RestInterval,
    TimeInterval,
    WarmupInterval,
)
from domain.services.formatting import format_distance, format_seconds, with_target

logger = logging.getLogger(__name__)


def flatten_intervals(intervals: List[Interval]) -> List[FlattenedStep]:
    """
    Flatten an interval tree into the linear sequence a user steps through.

    Args:
        intervals: Top-level intervals of a workout (may be empty)

    Returns:
        FlattenedStep list with 1-based, gap-free ``index`` values
    """
    flattener = _Flattener()
    flattener.walk(intervals, round_context=None)
    steps = _apply_rest_boundaries(flattener.steps)
    logger.debug("Flattened %d intervals into %d steps", len(intervals), len(steps))
    return steps


class _Flattener:
    """Accumulates steps and the running global index during a walk."""

    def __init__(self) -> None:
        self.steps: List[FlattenedStep] = []

    @property
    def next_index(self) -> int:
        return len(self.steps) + 1

    def walk(self, intervals: List[Interval], round_context: Optional[str]) -> None:
        for interval in intervals:
            if isinstance(interval, RepeatInterval):
                self._repeat(interval)
            elif isinstance(interval, RepsInterval):
                self._reps(interval, round_context)
            elif isinstance(interval, RestInterval):
                self._rest(interval, round_context)
            else:
                self._leaf(interval, round_context)

    def _repeat(self, node: RepeatInterval) -> None:
        children = node.intervals
        if len(children) == 1 and isinstance(children[0], RepsInterval):
            self._sets_style_repeat(children[0], node.reps)
            return
        for round_number in range(1, node.reps + 1):
            self.walk(children, round_context=f"Round {round_number} of {node.reps}")

    def _sets_style_repeat(self, reps: RepsInterval, total: int) -> None:
        has_rest = reps.restSec != 0
        for set_number in range(1, total + 1):
            self.steps.append(
                FlattenedStep(
                    index=self.next_index,
                    label=reps.name,
                    details=_set_details(reps, set_number, total),
                    kind=reps.kind,
                    round_info=f"Set {set_number} of {total}",
                    timer_seconds=None,
                    step_type=StepType.REPS,
                    follow_along_url=reps.followAlongUrl,
                    load=reps.load,
                    target_reps=reps.reps,
                    set_number=set_number,
                    total_sets=total,
                    has_rest_after=has_rest,
                    rest_after_seconds=reps.restSec if has_rest else None,
                )
            )

    def _reps(self, reps: RepsInterval, round_context: Optional[str]) -> None:
        total = reps.total_sets
        for set_number in range(1, total + 1):
            has_rest = set_number < total and reps.restSec != 0
            self.steps.append(
                FlattenedStep(
                    index=self.next_index,
                    label=reps.name,
                    details=_set_details(reps, set_number, total),
                    kind=reps.kind,
                    round_info=round_context,
                    timer_seconds=None,
                    step_type=StepType.REPS,
                    follow_along_url=reps.followAlongUrl,
                    load=reps.load,
                    target_reps=reps.reps,
                    set_number=set_number,
                    total_sets=total,
                    has_rest_after=has_rest,
                    rest_after_seconds=reps.restSec if has_rest else None,
                )
            )

    def _rest(self, rest: RestInterval, round_context: Optional[str]) -> None:
        details = "Tap when ready" if rest.is_manual else format_seconds(rest.seconds)
        self.steps.append(
            FlattenedStep(
                index=self.next_index,
                label="Rest",
                details=details,
                kind=rest.kind,
                round_info=round_context,
                timer_seconds=rest.seconds,
                step_type=StepType.REST,
                has_rest_after=False,
            )
        )

    def _leaf(self, interval: Interval, round_context: Optional[str]) -> None:
        meters = None
        if isinstance(interval, DistanceInterval):
            label = interval.target or format_distance(interval.meters)
            details = with_target(format_distance(interval.meters), interval.target)
            timer = None
            step_type = StepType.DISTANCE
            meters = interval.meters
        else:
            label = _timed_label(interval)
            details = with_target(format_seconds(interval.seconds), interval.target)
            timer = interval.seconds
            step_type = StepType.TIMED

        # Cooldown terminates the workout; everything else gets a manual boundary.
        is_cooldown = isinstance(interval, CooldownInterval)
        self.steps.append(
            FlattenedStep(
                index=self.next_index,
                label=label,
                details=details,
                kind=interval.kind,
                round_info=round_context,
                timer_seconds=timer,
                step_type=step_type,
                distance_meters=meters,
                has_rest_after=not is_cooldown,
                rest_after_seconds=None,
            )
        )


def _timed_label(interval: Interval) -> str:
    if isinstance(interval, WarmupInterval):
        return "Warm Up"
    if isinstance(interval, CooldownInterval):
        return "Cool Down"
    if isinstance(interval, TimeInterval):
        return interval.target or "Work"
    return interval.kind.title()


def _set_details(reps: RepsInterval, set_number: int, total: int) -> str:
    """e.g. '10 reps | 80% | Set 1/3'"""
    parts = [f"{reps.reps} reps"]
    if reps.load:
        parts.append(reps.load)
    if total > 1:
        parts.append(f"Set {set_number}/{total}")
    return " | ".join(parts)


def _apply_rest_boundaries(steps: List[FlattenedStep]) -> List[FlattenedStep]:
    result: List[FlattenedStep] = []
    for position, step in enumerate(steps):
        is_last = position == len(steps) - 1
        followed_by_rest = not is_last and steps[position + 1].step_type == StepType.REST
        if step.has_rest_after and (is_last or followed_by_rest):
            step = step.model_copy(update={"has_rest_after": False, "rest_after_seconds": None})
        result.append(step)
    return result
