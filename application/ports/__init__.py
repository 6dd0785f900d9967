"""
Collaborator Interfaces (Ports) for the workout execution engine.

This package defines the abstract interfaces the engine depends on.
Implementations are provided in the infrastructure layer; tests use the
in-memory fakes in tests/fakes.

Architecture follows the Ports & Adapters (Hexagonal) pattern:
- Ports: Abstract interfaces defined here (what the engine needs)
- Adapters: Concrete implementations in infrastructure/ (how it's provided)

Usage:
    from application.ports import WorkoutClock, CompletionSink

    class SessionService:
        def __init__(self, clock: WorkoutClock, sink: CompletionSink):
            self.clock = clock
            self.sink = sink
"""

# Time
from application.ports.clock import TimerCallback, TimerHandle, WorkoutClock

# Human decision points
from application.ports.input_provider import UserInputProvider

# Session outputs
from application.ports.completion_sink import CompletionSink, CompletionSubmissionError
from application.ports.progress_store import ProgressStore

# Remote sync
from application.ports.remote import RemoteLink, RemoteLinkUnavailable, StateBroadcaster

# Cues and health
from application.ports.cue_provider import CueProvider
from application.ports.health_provider import HealthDataProvider, HRSample

__all__ = [
    "WorkoutClock",
    "TimerHandle",
    "TimerCallback",
    "UserInputProvider",
    "CompletionSink",
    "CompletionSubmissionError",
    "ProgressStore",
    "StateBroadcaster",
    "RemoteLink",
    "RemoteLinkUnavailable",
    "CueProvider",
    "HealthDataProvider",
    "HRSample",
]
