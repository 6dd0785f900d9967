"""
WorkoutSimulationRunner - drives an engine end-to-end through an input provider.

Part of AMA-271: Workout Simulation Mode

Timer-driven transitions (timed steps, timed rests) are left to the engine's
clock. The runner only supplies the gesture-driven ones: reps entry,
distance completion, manual rest, and injected pauses/skips.
"""

import asyncio
import logging
from typing import Optional, Set

from application.engine.workout_engine import WorkoutEngine
from application.ports.health_provider import HealthDataProvider
from application.ports.input_provider import UserInputProvider
from domain.models.behavior_profile import ExerciseIntensity
from domain.models.completion import CompletionSummary
from domain.models.engine_state import EndReason, WorkoutPhase, WorkoutState
from domain.models.flattened_step import FlattenedStep, StepType
from domain.models.progress import SavedWorkoutProgress
from domain.models.workout import Workout
from domain.services.duration import SECONDS_PER_REP, planned_step_seconds

logger = logging.getLogger(__name__)

_KIND_INTENSITY = {
    "warmup": ExerciseIntensity.LOW,
    "cooldown": ExerciseIntensity.LOW,
    "time": ExerciseIntensity.HIGH,
    "reps": ExerciseIntensity.MODERATE,
    "distance": ExerciseIntensity.MODERATE,
    "rest": ExerciseIntensity.REST,
}


class SimulationAborted(Exception):
    """Raised when a simulated session exceeds its decision budget."""


def intensity_for_step(step: FlattenedStep) -> ExerciseIntensity:
    return _KIND_INTENSITY.get(step.kind, ExerciseIntensity.MODERATE)


class WorkoutSimulationRunner:
    """
    Runs one workout to completion with simulated user decisions.

    Usage:
        >>> runner = WorkoutSimulationRunner(engine, SimulatedUserInput(clock, profile), health)
        >>> summary = await runner.run(workout)
    """

    def __init__(
        self,
        engine: WorkoutEngine,
        user_input: UserInputProvider,
        health_provider: Optional[HealthDataProvider] = None,
        max_decisions: int = 10_000,
    ):
        self._engine = engine
        self._input = user_input
        self._health = health_provider
        self._max_decisions = max_decisions
        self._changed = asyncio.Event()
        self._decided: Set[int] = set()

    async def run(
        self, workout: Workout, resume_from: Optional[SavedWorkoutProgress] = None
    ) -> Optional[CompletionSummary]:
        """
        Start ``workout`` and drive it until the engine ends.

        Returns:
            The engine's completion summary

        Raises:
            SimulationAborted: If the session did not finish within the
                decision budget (the engine is ended with reason error)
        """
        engine = self._engine
        self._decided = set()
        engine.add_listener(self._on_state)
        try:
            engine.start(workout, resume_from=resume_from)
            decisions = 0
            while engine.is_active:
                decisions += 1
                if decisions > self._max_decisions:
                    logger.error("Simulation of %s exceeded %d decisions", workout.id, self._max_decisions)
                    engine.end(EndReason.ERROR)
                    raise SimulationAborted(f"exceeded {self._max_decisions} decisions")
                await self._drive_once()
        finally:
            engine.remove_listener(self._on_state)

        summary = engine.last_summary
        if summary is not None:
            logger.info(
                "Simulation finished: %s in %ds (%d/%d steps)",
                summary.end_reason.value,
                summary.elapsed_seconds,
                summary.completed_steps,
                summary.total_steps,
            )
        return summary

    def _on_state(self, state: WorkoutState) -> None:
        self._changed.set()

    async def _drive_once(self) -> None:
        engine = self._engine
        step = engine.current_step
        if step is None:
            engine.end(EndReason.COMPLETED)
            return

        if engine.phase == WorkoutPhase.PAUSED:
            await self._timed_wait(self._input.wait_for_resume(), rest=True)
            engine.resume()
            return

        if engine.phase == WorkoutPhase.RESTING:
            await self._drive_rest()
            return

        index = engine.current_step_index
        if index not in self._decided:
            self._decided.add(index)
            if self._input.should_inject_pause():
                logger.debug("Injecting pause at step %d", index)
                engine.pause()
                return
            if self._input.should_inject_skip() and index < engine.total_steps - 1:
                logger.debug("Injecting skip at step %d", index)
                engine.skip_to_step(index + 1)
                return

        if step.is_timed:
            await self._wait_while(
                lambda: engine.phase == WorkoutPhase.RUNNING and engine.current_step_index == index
            )
            self._record(step, step.timer_seconds)
        elif step.step_type == StepType.REPS:
            target = step.target_reps or 0
            count = await self._input.wait_for_reps_entry(target)
            engine.log_reps(count)
            self._record(step, count * SECONDS_PER_REP)
            engine.next_step()
        else:
            await self._input.wait_for_advance()
            self._record(step, planned_step_seconds(step))
            engine.next_step()

    async def _drive_rest(self) -> None:
        engine = self._engine
        if engine.is_manual_rest:
            await self._timed_wait(self._input.wait_for_ready_after_rest(), rest=True)
            engine.skip_rest()
            return
        planned = engine.rest_remaining_seconds
        await self._wait_while(lambda: engine.phase == WorkoutPhase.RESTING)
        if self._health is not None:
            self._health.record_rest(planned)

    async def _timed_wait(self, awaitable, rest: bool) -> None:
        clock = self._engine.clock
        started = clock.now()
        await awaitable
        if self._health is not None and rest:
            self._health.record_rest((clock.now() - started).total_seconds())

    async def _wait_while(self, condition) -> None:
        while condition():
            self._changed.clear()
            await self._changed.wait()

    def _record(self, step: FlattenedStep, seconds: Optional[float]) -> None:
        if self._health is None or not seconds:
            return
        self._health.record_work(seconds, intensity_for_step(step))

