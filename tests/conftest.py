"""
Shared fixtures for engine tests.

Part of AMA-271: Workout Simulation Mode
"""
import pytest

from application.engine import WorkoutEngine
from infrastructure.storage import InMemoryProgressStore
from tests.fakes import (
    FakeCompletionSink,
    FakeCueProvider,
    FakeHealthDataProvider,
    FakeStateBroadcaster,
    ManualClock,
    create_simple_workout,
)


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def broadcaster():
    return FakeStateBroadcaster()


@pytest.fixture
def sink():
    return FakeCompletionSink()


@pytest.fixture
def cues():
    return FakeCueProvider()


@pytest.fixture
def health():
    return FakeHealthDataProvider()


@pytest.fixture
def progress_store():
    return InMemoryProgressStore()


@pytest.fixture
def engine(clock, broadcaster, sink, cues, health, progress_store):
    return WorkoutEngine(
        clock,
        broadcaster=broadcaster,
        cue_provider=cues,
        completion_sink=sink,
        progress_store=progress_store,
        health_provider=health,
    )


@pytest.fixture
def simple_workout():
    """warmup(30s), reps(sets=2, reps=10, restSec=15), cooldown(30s)"""
    return create_simple_workout()
