"""
WorkoutEngine - the workout execution state machine.

Part of AMA-271: Workout Simulation Mode

Phases: idle -> running <-> paused, running -> resting -> running,
running|paused|resting -> ended (terminal until reset()).

The engine is single-owner and synchronous. Timer callbacks, commands and
API calls must all run on the same event loop thread; the remote command
channel queues anything that arrives mid-transition.
"""

import logging
from collections import OrderedDict
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional, Tuple, Union

from application.engine.execution_log import ExecutionLogBuilder
from application.ports.clock import TimerHandle, WorkoutClock
from application.ports.completion_sink import CompletionSink
from application.ports.cue_provider import CueProvider
from application.ports.health_provider import HealthDataProvider
from application.ports.input_provider import UserInputProvider
from application.ports.progress_store import ProgressStore
from application.ports.remote import StateBroadcaster
from domain.models.completion import CompletionSummary, HealthMetrics, SimulationConfig
from domain.models.engine_state import (
    CommandAck,
    CommandStatus,
    EndReason,
    RemoteCommand,
    WorkoutPhase,
    WorkoutState,
)
from domain.models.execution_log import SkipReason
from domain.models.flattened_step import FlattenedStep, StepType
from domain.models.progress import SavedWorkoutProgress
from domain.models.workout import Workout
from domain.services.duration import planned_step_seconds
from domain.services.interval_flattener import flatten_intervals

logger = logging.getLogger(__name__)

StateListener = Callable[[WorkoutState], None]

TICK_SECONDS = 1.0

ERROR_INTERNAL = "internal_error"


class WorkoutEngine:
    """
    Drives a user through the flattened steps of one workout at a time.

    Every externally observable mutation bumps ``state_version`` exactly once
    per public call. Snapshots go to the broadcaster after the outermost
    transition completes; per-second timer ticks are throttled to one
    broadcast every ``broadcast_interval_seconds`` of elapsed time.

    Usage:
        >>> engine = WorkoutEngine(clock=RealClock())
        >>> engine.start(workout)
        >>> engine.handle_remote_command("PAUSE", "cmd-1")
    """

    def __init__(
        self,
        clock: WorkoutClock,
        *,
        user_input: Optional[UserInputProvider] = None,
        broadcaster: Optional[StateBroadcaster] = None,
        cue_provider: Optional[CueProvider] = None,
        completion_sink: Optional[CompletionSink] = None,
        progress_store: Optional[ProgressStore] = None,
        health_provider: Optional[HealthDataProvider] = None,
        simulation_config: Optional[SimulationConfig] = None,
        broadcast_interval_seconds: int = 5,
        countdown_cue_seconds: int = 3,
        ack_cache_size: int = 256,
    ) -> None:
        self._clock = clock
        self._input = user_input
        self._broadcaster = broadcaster
        self._cues = cue_provider
        self._sink = completion_sink
        self._progress_store = progress_store
        self._health = health_provider
        self._simulation_config = simulation_config
        self._broadcast_interval = max(1, broadcast_interval_seconds)
        self._countdown_seconds = max(0, countdown_cue_seconds)
        self._ack_cache_size = max(1, ack_cache_size)

        self._log = ExecutionLogBuilder(now=clock.now)
        self._listeners: List[StateListener] = []
        self._acks: "OrderedDict[str, CommandAck]" = OrderedDict()
        self._timer: Optional[TimerHandle] = None

        # Transition bookkeeping
        self._depth = 0
        self._dirty = False
        self._structural = False

        self.state_version = 0
        self.last_summary: Optional[CompletionSummary] = None
        self._clear_session()

    def _clear_session(self) -> None:
        self.phase = WorkoutPhase.IDLE
        self.workout: Optional[Workout] = None
        self.flattened_steps: Tuple[FlattenedStep, ...] = ()
        self.current_step_index = 0
        self.remaining_seconds = 0
        self.rest_remaining_seconds = 0
        self.is_manual_rest = False
        self.elapsed_seconds = 0
        self.started_at = None
        self.end_reason: Optional[EndReason] = None
        self.last_command_ack: Optional[CommandAck] = None
        self._completed_indices = set()

    # =========================================================================
    # Read-only views
    # =========================================================================

    @property
    def clock(self) -> WorkoutClock:
        return self._clock

    @property
    def current_step(self) -> Optional[FlattenedStep]:
        if 0 <= self.current_step_index < len(self.flattened_steps):
            return self.flattened_steps[self.current_step_index]
        return None

    @property
    def total_steps(self) -> int:
        return len(self.flattened_steps)

    @property
    def progress(self) -> float:
        """Fraction of steps reached, in [0, 1]. 0 for an empty workout."""
        if not self.flattened_steps:
            return 0.0
        return min(1.0, (self.current_step_index + 1) / len(self.flattened_steps))

    @property
    def step_progress(self) -> float:
        step = self.current_step
        if step is None or not step.timer_seconds:
            return 0.0
        return 1.0 - (self.remaining_seconds / step.timer_seconds)

    @property
    def is_active(self) -> bool:
        return self.phase.is_active

    @property
    def completed_step_count(self) -> int:
        return len(self._completed_indices)

    @property
    def formatted_remaining_time(self) -> str:
        return _mm_ss(self.remaining_seconds)

    @property
    def formatted_elapsed_time(self) -> str:
        return _mm_ss(self.elapsed_seconds)

    @property
    def formatted_step_progress(self) -> str:
        return f"{self.current_step_index + 1} of {self.total_steps}"

    def snapshot(self) -> WorkoutState:
        """Current state in remote wire shape."""
        step = self.current_step
        if self.phase == WorkoutPhase.RESTING:
            remaining_ms = None if self.is_manual_rest else self.rest_remaining_seconds * 1000
        elif step is not None and step.timer_seconds is not None:
            remaining_ms = self.remaining_seconds * 1000
        else:
            remaining_ms = None

        return WorkoutState(
            stateVersion=self.state_version,
            workoutId=self.workout.id if self.workout else "",
            workoutName=self.workout.name if self.workout else "",
            phase=self.phase,
            stepIndex=self.current_step_index,
            stepCount=len(self.flattened_steps),
            stepName=step.label if step else "",
            stepType=step.step_type if step else None,
            remainingMs=remaining_ms,
            roundInfo=step.round_info if step else None,
            targetReps=step.target_reps if step else None,
            setNumber=step.set_number if step else None,
            totalSets=step.total_sets if step else None,
            lastCommandAck=self.last_command_ack,
        )

    def saved_progress(self) -> Optional[SavedWorkoutProgress]:
        if self._progress_store is None:
            return None
        return self._progress_store.load()

    def add_listener(self, listener: StateListener) -> None:
        """Register a callback invoked with every new state version (unthrottled)."""
        self._listeners.append(listener)

    def remove_listener(self, listener: StateListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(self, workout: Workout, resume_from: Optional[SavedWorkoutProgress] = None) -> None:
        """
        Start a session, implicitly ending any active one as userEnded.

        Args:
            workout: Workout to execute
            resume_from: Saved progress; honoured only when it matches the
                workout id and its step index is in range
        """
        with self._transition():
            if self.is_active:
                self.end(EndReason.USER_ENDED)

            self._cancel_timer()
            self._clear_session()
            self._log.reset()
            if self._health is not None:
                self._health.reset()

            self.workout = workout
            self.flattened_steps = tuple(flatten_intervals(workout.intervals))
            self.started_at = self._clock.now()

            if resume_from is not None:
                self._apply_resume(resume_from)

            self.phase = WorkoutPhase.RUNNING
            self._changed()

            logger.info(
                "Starting workout %s (%s): %d steps, step %d",
                workout.name,
                workout.id,
                len(self.flattened_steps),
                self.current_step_index,
            )
            self._cue("workout_started", workout.name)
            self._setup_current_step()

    def _apply_resume(self, progress: SavedWorkoutProgress) -> None:
        if progress.workoutId != self.workout.id:
            logger.info("Saved progress is for workout %s; starting fresh", progress.workoutId)
            return
        if not 0 <= progress.stepIndex < len(self.flattened_steps):
            logger.warning("Saved step index %d out of range; starting fresh", progress.stepIndex)
            return
        self.current_step_index = progress.stepIndex
        self.elapsed_seconds = progress.elapsedSeconds
        logger.info("Resuming workout %s at step %d", self.workout.id, progress.stepIndex)

    def end(self, reason: EndReason = EndReason.USER_ENDED) -> None:
        """End the active session and emit its completion summary. No-op when inactive."""
        if not self.is_active:
            return

        with self._transition():
            self._cancel_timer()
            self._log.end_current_interval()
            self.phase = WorkoutPhase.ENDED
            self.end_reason = reason
            self.rest_remaining_seconds = 0
            self.is_manual_rest = False
            self._changed()

            logger.info(
                "Workout %s ended (%s) after %ds, %d/%d steps",
                self.workout.id if self.workout else "",
                reason.value,
                self.elapsed_seconds,
                len(self._completed_indices),
                len(self.flattened_steps),
            )
            if reason == EndReason.COMPLETED:
                self._cue("workout_completed")

            if self._input is not None:
                self._input.cancel_pending()
            if self._progress_store is not None:
                self._progress_store.clear()

            summary = self._build_summary(reason)
            self.last_summary = summary
            self._submit(summary)

    def reset(self) -> None:
        """Return to idle from any phase. state_version keeps increasing."""
        self._cancel_timer()
        if self.phase == WorkoutPhase.IDLE and self.workout is None:
            return

        with self._transition():
            self._clear_session()
            self._log.reset()
            if self._input is not None:
                self._input.cancel_pending()
            if self._progress_store is not None:
                self._progress_store.clear()
            self._changed()
            logger.info("Engine reset")

    # =========================================================================
    # Playback
    # =========================================================================

    def pause(self) -> None:
        if self.phase != WorkoutPhase.RUNNING:
            return
        with self._transition():
            self._cancel_timer()
            self.phase = WorkoutPhase.PAUSED
            self._changed()
            self._cue("paused")
            self._save_progress()

    def resume(self) -> None:
        if self.phase != WorkoutPhase.PAUSED:
            return
        with self._transition():
            self.phase = WorkoutPhase.RUNNING
            step = self.current_step
            if step is not None and step.is_timed:
                self._start_timer()
            self._changed()
            self._cue("resumed")

    def toggle_play_pause(self) -> None:
        if self.phase == WorkoutPhase.RUNNING:
            self.pause()
        elif self.phase == WorkoutPhase.PAUSED:
            self.resume()

    # =========================================================================
    # Navigation
    # =========================================================================

    def next_step(self) -> None:
        """
        Finish the current step.

        Enters rest when the step has a rest boundary; otherwise advances, or
        ends the workout as completed from the last step. While resting this
        completes the rest.
        """
        if not self._can_navigate():
            return

        with self._transition():
            if self.phase == WorkoutPhase.RESTING:
                self._complete_rest()
                return

            step = self.current_step
            self._finish_current_step()
            if step.has_rest_after:
                self._enter_rest(step)
            else:
                self._advance_index()

    def previous_step(self) -> None:
        """Go back one step without replaying rest. No-op at index 0."""
        if not self._can_navigate() or self.current_step_index == 0:
            return

        with self._transition():
            self._leave_rest()
            self._log.end_current_interval()
            self.current_step_index -= 1
            self._changed()
            self._setup_current_step()

    def skip_to_step(self, index: int) -> None:
        """Jump directly to ``index`` (0-based), bypassing rest insertion."""
        if not self._can_navigate() or not 0 <= index < len(self.flattened_steps):
            return

        with self._transition():
            self._leave_rest()
            origin = self.current_step_index
            if index > origin:
                self._log.mark_current_skipped(SkipReason.NAVIGATION)
                self._log.end_current_interval()
                for skipped in range(origin + 1, index):
                    step = self.flattened_steps[skipped]
                    self._log.skip_interval(skipped, step.kind, step.label, SkipReason.NAVIGATION)
            else:
                self._log.end_current_interval()
            self.current_step_index = index
            self._changed()
            self._setup_current_step()

    def skip_rest(self) -> None:
        if self.phase != WorkoutPhase.RESTING:
            return
        with self._transition():
            self._complete_rest()

    def log_reps(self, count: int) -> bool:
        """
        Record reps completed for the current reps step.

        Returns:
            True when recorded
        """
        step = self.current_step
        if not self.is_active or step is None or step.step_type != StepType.REPS or count < 0:
            return False
        recorded = self._log.log_set(
            interval_index=self.current_step_index,
            set_number=step.set_number or 1,
            reps=count,
        )
        if recorded and step.target_reps is not None and count != step.target_reps:
            self._log.mark_current_modified()
        return recorded

    # =========================================================================
    # Remote commands
    # =========================================================================

    def handle_remote_command(
        self, command: Union[str, RemoteCommand], command_id: str
    ) -> Optional[CommandAck]:
        """
        Apply a remote command at most once per ``command_id``.

        Returns:
            The ack sent for the command (the stored one for duplicates), or
            None for unknown command tokens
        """
        cached = self._acks.get(command_id)
        if cached is not None:
            logger.debug("Duplicate command %s ignored", command_id)
            self._broadcast_ack(cached)
            return cached

        parsed = command if isinstance(command, RemoteCommand) else RemoteCommand.parse(command)
        if parsed is None:
            logger.warning("Ignoring unknown remote command %r (id=%s)", command, command_id)
            return None

        ack = CommandAck(commandId=command_id, status=CommandStatus.SUCCESS)
        with self._transition():
            self.last_command_ack = ack
            try:
                self._dispatch(parsed)
            except Exception:
                # Whatever the command already changed stays applied and is
                # published with the error ack.
                logger.exception("Remote command %s (id=%s) failed", parsed.value, command_id)
                ack = CommandAck(
                    commandId=command_id, status=CommandStatus.ERROR, errorCode=ERROR_INTERNAL
                )
                self.last_command_ack = ack

        self._acks[command_id] = ack
        while len(self._acks) > self._ack_cache_size:
            self._acks.popitem(last=False)
        self._broadcast_ack(ack)
        return ack

    def has_handled(self, command_id: str) -> bool:
        return command_id in self._acks

    def _dispatch(self, command: RemoteCommand) -> None:
        if command == RemoteCommand.PAUSE:
            self.pause()
        elif command == RemoteCommand.RESUME:
            self.resume()
        elif command == RemoteCommand.NEXT_STEP:
            self.next_step()
        elif command == RemoteCommand.PREVIOUS_STEP:
            self.previous_step()
        elif command == RemoteCommand.SKIP_REST:
            self.skip_rest()
        elif command == RemoteCommand.END:
            self.end(EndReason.USER_ENDED)

    # =========================================================================
    # Step / rest internals
    # =========================================================================

    def _can_navigate(self) -> bool:
        return self.is_active and bool(self.flattened_steps)

    def _setup_current_step(self) -> None:
        self._cancel_timer()
        step = self.current_step
        if step is None:
            self.remaining_seconds = 0
            return

        self._log.start_interval(
            self.current_step_index, step.kind, step.label, planned_step_seconds(step)
        )
        self._cue("announce_step", step)

        if step.timer_seconds is not None:
            self.remaining_seconds = step.timer_seconds
            if self.phase == WorkoutPhase.RUNNING:
                self._start_timer()
        else:
            self.remaining_seconds = 0
        self._save_progress()

    def _finish_current_step(self) -> None:
        self._completed_indices.add(self.current_step_index)
        self._log.end_current_interval()

    def _advance_index(self) -> None:
        if self.current_step_index >= len(self.flattened_steps) - 1:
            self.end(EndReason.COMPLETED)
            return
        self.current_step_index += 1
        self._changed()
        self._setup_current_step()

    def _enter_rest(self, step: FlattenedStep) -> None:
        self._cancel_timer()
        self.phase = WorkoutPhase.RESTING
        rest = step.rest_after_seconds
        if rest:
            self.is_manual_rest = False
            self.rest_remaining_seconds = rest
            self._start_timer()
        else:
            self.is_manual_rest = True
            self.rest_remaining_seconds = 0
        self._changed()
        logger.info(
            "Rest after step %d: %s", self.current_step_index, f"{rest}s" if rest else "manual"
        )
        self._cue("rest_started", rest or None)

    def _leave_rest(self) -> None:
        """Cancel an in-progress rest without advancing."""
        if self.phase != WorkoutPhase.RESTING:
            return
        self._cancel_timer()
        self.phase = WorkoutPhase.RUNNING
        self.rest_remaining_seconds = 0
        self.is_manual_rest = False

    def _complete_rest(self) -> None:
        self._leave_rest()
        self._changed()
        self._advance_index()

    # =========================================================================
    # Timer
    # =========================================================================

    def _start_timer(self) -> None:
        self._timer = self._clock.schedule_repeating(TICK_SECONDS, self._on_tick)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._clock.cancel(self._timer)
            self._timer = None

    def _on_tick(self) -> None:
        if self.phase not in (WorkoutPhase.RUNNING, WorkoutPhase.RESTING):
            return

        with self._transition(tick=True):
            self.elapsed_seconds += 1
            self._dirty = True

            if self.phase == WorkoutPhase.RESTING:
                self._tick_rest()
                return

            step = self.current_step
            if step is None or step.timer_seconds is None:
                return
            if self.remaining_seconds <= 0:
                self.next_step()
                return

            self.remaining_seconds -= 1
            if 0 < self.remaining_seconds <= self._countdown_seconds:
                self._cue("countdown", self.remaining_seconds)
            if self.remaining_seconds == 0:
                logger.debug("Step %d timer finished", self.current_step_index)
                self.next_step()

    def _tick_rest(self) -> None:
        if self.is_manual_rest:
            return
        if self.rest_remaining_seconds > 0:
            self.rest_remaining_seconds -= 1
            if 0 < self.rest_remaining_seconds <= self._countdown_seconds:
                self._cue("countdown", self.rest_remaining_seconds)
        if self.rest_remaining_seconds <= 0:
            self._complete_rest()

    # =========================================================================
    # Versioning and broadcast
    # =========================================================================

    @contextmanager
    def _transition(self, tick: bool = False) -> Iterator[None]:
        """
        Group mutations into one version bump.

        Re-entrant: nested transitions fold into the outermost one, which
        bumps the version and publishes once on exit, including exit by
        exception when something was already mutated.
        """
        if self._depth == 0:
            self._dirty = False
            self._structural = False
        self._depth += 1
        try:
            yield
        finally:
            self._depth -= 1
            if self._depth == 0 and self._dirty:
                self._dirty = False
                self.state_version += 1
                self._publish(force=self._structural or not tick)

    def _changed(self) -> None:
        self._dirty = True
        self._structural = True

    def _publish(self, force: bool) -> None:
        state = self.snapshot()
        for listener in list(self._listeners):
            listener(state)
        if self._broadcaster is None:
            return
        if force or self.elapsed_seconds % self._broadcast_interval == 0:
            self._broadcaster.broadcast_state(state)

    def _broadcast_ack(self, ack: CommandAck) -> None:
        if self._broadcaster is not None:
            self._broadcaster.broadcast_ack(ack)

    # =========================================================================
    # Collaborators
    # =========================================================================

    def _cue(self, name: str, *args) -> None:
        if self._cues is None:
            return
        try:
            getattr(self._cues, name)(*args)
        except Exception:
            logger.exception("Cue %s failed", name)

    def _save_progress(self) -> None:
        if self._progress_store is None or self.workout is None:
            return
        self._progress_store.save(
            SavedWorkoutProgress(
                workoutId=self.workout.id,
                workoutName=self.workout.name,
                stepIndex=self.current_step_index,
                elapsedSeconds=self.elapsed_seconds,
                savedAt=self._clock.now(),
            )
        )

    def _build_summary(self, reason: EndReason) -> CompletionSummary:
        health = self._health.summary() if self._health is not None else HealthMetrics()
        workout = self.workout
        return CompletionSummary(
            workout_id=workout.id if workout else "",
            workout_name=workout.name if workout else "",
            started_at=self.started_at or self._clock.now(),
            ended_at=self._clock.now(),
            elapsed_seconds=self.elapsed_seconds,
            completed_steps=len(self._completed_indices),
            total_steps=len(self.flattened_steps),
            end_reason=reason,
            health=health,
            is_simulated=self._simulation_config is not None,
            simulation_config=self._simulation_config,
            execution_log=self._log.build(),
            workout_structure=workout.intervals_wire() if workout else [],
        )

    def _submit(self, summary: CompletionSummary) -> None:
        if self._sink is None:
            return
        try:
            self._sink.submit(summary)
        except Exception:
            # Ending a session never fails because a sink did
            logger.exception("Completion sink failed for workout %s", summary.workout_id)


def _mm_ss(seconds: int) -> str:
    minutes, secs = divmod(max(0, seconds), 60)
    return f"{minutes}:{secs:02d}"
