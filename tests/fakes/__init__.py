"""
Fake collaborator implementations for testing.

Part of AMA-271: Workout Simulation Mode

This package provides in-memory implementations of the engine's ports for
fast, deterministic tests. No event loop, network or filesystem required.

Usage:
    from tests.fakes import ManualClock, FakeStateBroadcaster

    clock = ManualClock()
    engine = WorkoutEngine(clock, broadcaster=FakeStateBroadcaster())
    engine.start(workout)
    clock.tick(30)
"""
from tests.fakes.clock import ManualClock
from tests.fakes.workouts import SIMPLE_INTERVALS, create_simple_workout, make_workout
from tests.fakes.engine_collaborators import (
    FakeCompletionSink,
    FakeCueProvider,
    FakeHealthDataProvider,
    FakeRemoteLink,
    FakeStateBroadcaster,
    FakeUserInput,
)

__all__ = [
    "ManualClock",
    "FakeStateBroadcaster",
    "FakeCompletionSink",
    "FakeCueProvider",
    "FakeRemoteLink",
    "FakeHealthDataProvider",
    "FakeUserInput",
    "SIMPLE_INTERVALS",
    "make_workout",
    "create_simple_workout",
]
