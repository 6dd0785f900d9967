"""
ExecutionLogBuilder - tracks actual workout execution for the completion payload.

Part of AMA-291: execution log capture

Timestamps come from the engine clock, so simulated sessions produce
virtual-time logs.
"""
import logging
from datetime import datetime
from typing import Callable, List, Optional

from domain.models.execution_log import (
    ExecutionLog,
    ExecutionSummary,
    IntervalExecution,
    IntervalStatus,
    SetExecution,
    SetStatus,
    SkipReason,
)

logger = logging.getLogger(__name__)


class ExecutionLogBuilder:
    """Builds an ExecutionLog from engine step transitions."""

    def __init__(self, now: Callable[[], datetime]):
        self._now = now
        self._intervals: List[IntervalExecution] = []
        self._current: Optional[IntervalExecution] = None

    @property
    def interval_count(self) -> int:
        return len(self._intervals)

    @property
    def current(self) -> Optional[IntervalExecution]:
        return self._current

    # -------------------------------------------------------------------------
    # Interval tracking
    # -------------------------------------------------------------------------

    def start_interval(
        self,
        index: int,
        kind: Optional[str],
        name: Optional[str],
        planned_duration: Optional[int],
    ) -> None:
        """Start tracking a step, closing any step left open."""
        if self._current is not None:
            self.end_current_interval()

        entry = IntervalExecution(
            interval_index=index,
            kind=kind,
            name=name,
            planned_duration_sec=planned_duration,
            started_at=self._now(),
        )
        self._intervals.append(entry)
        self._current = entry

    def end_current_interval(self, actual_duration: Optional[int] = None) -> None:
        """
        Close the current step.

        Args:
            actual_duration: Seconds spent; computed from timestamps when None
        """
        entry = self._current
        if entry is None:
            return
        entry.ended_at = self._now()
        if actual_duration is not None:
            entry.actual_duration_sec = actual_duration
        elif entry.started_at is not None:
            entry.actual_duration_sec = max(0, int((entry.ended_at - entry.started_at).total_seconds()))
        self._current = None

    def skip_interval(
        self,
        index: int,
        kind: Optional[str],
        name: Optional[str],
        reason: SkipReason = SkipReason.OTHER,
    ) -> None:
        """Record a step as skipped without it ever becoming current."""
        if self._current is not None:
            self.end_current_interval()
        now = self._now()
        self._intervals.append(
            IntervalExecution(
                interval_index=index,
                kind=kind,
                name=name,
                status=IntervalStatus.SKIPPED,
                skip_reason=reason,
                started_at=now,
                ended_at=now,
            )
        )

    def mark_current_skipped(self, reason: SkipReason = SkipReason.OTHER) -> None:
        if self._current is not None:
            self._current.status = IntervalStatus.SKIPPED
            self._current.skip_reason = reason

    def mark_current_modified(self) -> None:
        """Mark the current step as modified (duration changed from plan)."""
        if self._current is not None and self._current.status == IntervalStatus.COMPLETED:
            self._current.status = IntervalStatus.MODIFIED

    # -------------------------------------------------------------------------
    # Set tracking
    # -------------------------------------------------------------------------

    def log_set(
        self,
        interval_index: int,
        set_number: int,
        reps: Optional[int] = None,
        weight: Optional[float] = None,
        unit: Optional[str] = None,
        skipped: bool = False,
    ) -> bool:
        """
        Log a set for a tracked step.

        Returns:
            False when no step with that index has been tracked
        """
        entry = next(
            (e for e in reversed(self._intervals) if e.interval_index == interval_index),
            None,
        )
        if entry is None:
            logger.debug("log_set for untracked interval %d ignored", interval_index)
            return False

        set_exec = SetExecution(
            set_number=set_number,
            status=SetStatus.SKIPPED if skipped else SetStatus.COMPLETED,
            reps_completed=reps,
            weight=weight,
            unit=unit,
        )
        if entry.sets is None:
            entry.sets = []
        entry.sets = [s for s in entry.sets if s.set_number != set_number] + [set_exec]
        return True

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------

    def build(self) -> ExecutionLog:
        """Close any open step and return the log with summary statistics."""
        if self._current is not None:
            self.end_current_interval()
        intervals = [entry.model_copy(deep=True) for entry in self._intervals]
        return ExecutionLog(intervals=intervals, summary=_summarize(intervals))

    def reset(self) -> None:
        self._intervals = []
        self._current = None


def _summarize(intervals: List[IntervalExecution]) -> ExecutionSummary:
    completed = sum(1 for e in intervals if e.status == IntervalStatus.COMPLETED)
    skipped = sum(1 for e in intervals if e.status == IntervalStatus.SKIPPED)
    modified = sum(1 for e in intervals if e.status == IntervalStatus.MODIFIED)
    total = len(intervals)
    percentage = (completed + modified) / total * 100.0 if total else 0.0
    return ExecutionSummary(
        total_intervals=total,
        completed=completed,
        skipped=skipped,
        modified=modified,
        completion_percentage=round(percentage, 1),
    )
