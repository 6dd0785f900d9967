"""
Engine wiring for the API and CLI.

Part of AMA-271: Workout Simulation Mode

Builds a WorkoutEngine and its collaborators from Settings. Simulation mode
swaps in the accelerated clock, simulated input and synthetic health data;
everything else (progress store, completion sink, remote channel) is shared
by both modes.

Usage:
    from backend.container import build_engine
    from backend.settings import get_settings

    session = build_engine(get_settings())
    session.engine.start(workout)
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Optional

from application.engine import WorkoutEngine
from application.ports import (
    CompletionSink,
    HealthDataProvider,
    ProgressStore,
    UserInputProvider,
    WorkoutClock,
)
from application.remote import RemoteCommandChannel
from application.simulation import WorkoutSimulationRunner
from backend.settings import Settings
from domain.models.behavior_profile import HRProfile, UserBehaviorProfile
from domain.models.completion import CompletionSummary, SimulationConfig
from domain.models.progress import SavedWorkoutProgress
from domain.models.workout import Workout
from infrastructure.clock import AcceleratedClock, RealClock
from infrastructure.completion import HttpCompletionSink, LoggingCompletionSink
from infrastructure.cues import LoggingCueProvider
from infrastructure.health import SimulatedHealthProvider
from infrastructure.input import RealUserInput, SimulatedUserInput
from infrastructure.storage import InMemoryProgressStore, JsonFileProgressStore

logger = logging.getLogger(__name__)


# =============================================================================
# Factories
# =============================================================================


def create_clock(settings: Settings) -> WorkoutClock:
    if settings.simulation_enabled:
        return AcceleratedClock(settings.simulation_speed)
    return RealClock()


def create_user_input(
    settings: Settings, clock: WorkoutClock, rng: Optional[random.Random] = None
) -> UserInputProvider:
    if settings.simulation_enabled:
        profile = UserBehaviorProfile.named(settings.simulation_profile)
        return SimulatedUserInput(clock, profile, rng=rng)
    return RealUserInput()


def create_hr_profile(settings: Settings) -> HRProfile:
    """Heart-rate profile from settings, keeping the behavior preset's recovery rate."""
    preset = UserBehaviorProfile.named(settings.simulation_profile).hr_profile
    return HRProfile(
        resting_hr=settings.simulation_resting_hr,
        max_hr=settings.simulation_max_hr,
        recovery_rate=preset.recovery_rate,
    )


def create_health_provider(
    settings: Settings, clock: WorkoutClock, rng: Optional[random.Random] = None
) -> Optional[HealthDataProvider]:
    """Synthetic health data in simulation mode; None otherwise."""
    if not (settings.simulation_enabled and settings.simulation_generate_health):
        return None
    return SimulatedHealthProvider(create_hr_profile(settings), rng=rng, now=clock.now)


def create_progress_store(settings: Settings) -> ProgressStore:
    if settings.progress_store_path:
        return JsonFileProgressStore(settings.progress_store_path)
    return InMemoryProgressStore()


def create_completion_sink(settings: Settings) -> CompletionSink:
    if settings.completion_api_url:
        return HttpCompletionSink(
            settings.completion_api_url,
            auth_token=settings.completion_api_token,
            device_info={"environment": settings.environment},
        )
    return LoggingCompletionSink()


def create_simulation_config(settings: Settings) -> Optional[SimulationConfig]:
    if not settings.simulation_enabled:
        return None
    return SimulationConfig(
        speed=max(1.0, settings.simulation_speed),
        behavior_profile=settings.simulation_profile,
        hr_profile=f"{settings.simulation_resting_hr}-{settings.simulation_max_hr}",
    )


# =============================================================================
# Session container
# =============================================================================


@dataclass
class EngineSession:
    """An engine plus the collaborators callers need to drive it."""

    settings: Settings
    clock: WorkoutClock
    user_input: UserInputProvider
    health_provider: Optional[HealthDataProvider]
    engine: WorkoutEngine
    channel: RemoteCommandChannel
    completion_sink: Optional[CompletionSink] = None
    simulation_task: Optional["asyncio.Task[Optional[CompletionSummary]]"] = None

    @property
    def is_simulated(self) -> bool:
        return self.settings.simulation_enabled

    def runner(self) -> WorkoutSimulationRunner:
        return WorkoutSimulationRunner(self.engine, self.user_input, self.health_provider)

    def start(self, workout: Workout, resume_from: Optional[SavedWorkoutProgress] = None) -> None:
        """
        Start a session on the running event loop.

        In simulation mode the run is handed to a background task that drives
        the engine to completion; otherwise the engine waits for commands.
        """
        self.cancel_simulation()
        if not self.is_simulated:
            self.engine.start(workout, resume_from=resume_from)
            return

        self.simulation_task = asyncio.get_running_loop().create_task(
            self.runner().run(workout, resume_from=resume_from)
        )
        self.simulation_task.add_done_callback(_log_simulation_result)

    async def flush_completions(self) -> None:
        """Wait for completion submissions still running in the background."""
        if isinstance(self.completion_sink, HttpCompletionSink):
            await self.completion_sink.wait_pending()

    def cancel_simulation(self) -> None:
        if self.simulation_task is not None and not self.simulation_task.done():
            self.simulation_task.cancel()
        self.simulation_task = None


def _log_simulation_result(task: "asyncio.Task[Optional[CompletionSummary]]") -> None:
    if task.cancelled():
        logger.info("Simulation task cancelled")
        return
    error = task.exception()
    if error is not None:
        logger.error(f"Simulation task failed: {error}")


def build_engine(
    settings: Settings,
    *,
    clock: Optional[WorkoutClock] = None,
    rng: Optional[random.Random] = None,
) -> EngineSession:
    """
    Wire an engine from settings.

    Args:
        settings: Application settings
        clock: Optional clock override (tests pass a manual clock)
        rng: Optional random source for simulated input and health data

    Returns:
        EngineSession with the engine attached to its remote channel
    """
    clock = clock or create_clock(settings)
    user_input = create_user_input(settings, clock, rng=rng)
    health_provider = create_health_provider(settings, clock, rng=rng)
    channel = RemoteCommandChannel()

    completion_sink = create_completion_sink(settings)

    engine = WorkoutEngine(
        clock,
        user_input=user_input,
        broadcaster=channel,
        cue_provider=LoggingCueProvider(),
        completion_sink=completion_sink,
        progress_store=create_progress_store(settings),
        health_provider=health_provider,
        simulation_config=create_simulation_config(settings),
        broadcast_interval_seconds=settings.state_broadcast_interval_seconds,
        countdown_cue_seconds=settings.countdown_cue_seconds,
        ack_cache_size=settings.command_ack_cache_size,
    )
    channel.attach(engine)

    logger.info(
        f"Engine built (simulation={'on' if settings.simulation_enabled else 'off'}, "
        f"clock={type(clock).__name__})"
    )
    return EngineSession(
        settings=settings,
        clock=clock,
        user_input=user_input,
        health_provider=health_provider,
        engine=engine,
        channel=channel,
        completion_sink=completion_sink,
    )
