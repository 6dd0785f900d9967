"""
Infrastructure Layer for the workout execution engine.

Part of AMA-271: Workout Simulation Mode

This package contains concrete implementations of the application ports:
- clock/: RealClock and AcceleratedClock (asyncio)
- input/: RealUserInput and SimulatedUserInput
- storage/: JSON-file and in-memory progress stores
- health/: SimulatedHealthProvider
- completion/: HTTP and logging completion sinks
- cues: LoggingCueProvider
"""

from infrastructure.clock import AcceleratedClock, RealClock
from infrastructure.completion import HttpCompletionSink, LoggingCompletionSink
from infrastructure.cues import LoggingCueProvider
from infrastructure.health import SimulatedHealthProvider
from infrastructure.input import RealUserInput, SimulatedUserInput
from infrastructure.storage import InMemoryProgressStore, JsonFileProgressStore

__all__ = [
    "RealClock",
    "AcceleratedClock",
    "RealUserInput",
    "SimulatedUserInput",
    "InMemoryProgressStore",
    "JsonFileProgressStore",
    "SimulatedHealthProvider",
    "HttpCompletionSink",
    "LoggingCompletionSink",
    "LoggingCueProvider",
]
