"""
Domain models for the workout execution engine.

These models are pure data, independent of clocks, transports and storage:
- Interval: tagged union describing a (possibly nested) workout step
- Workout: the envelope a session is started with
- FlattenedStep: one executable unit derived from the interval tree
- WorkoutState / CommandAck / RemoteCommand: remote-sync wire shapes
- CompletionSummary / ExecutionLog: what a finished session produces
- SavedWorkoutProgress: crash-recovery snapshot
- UserBehaviorProfile / HRProfile: simulation presets

Usage:
    >>> from domain.models import Workout
    >>> workout = Workout(name="Intervals", intervals=[{"kind": "time", "seconds": 60}])
    >>> workout.interval_count
    1
"""

from domain.models.behavior_profile import (
    BEHAVIOR_PROFILE_NAMES,
    ExerciseIntensity,
    HRProfile,
    UserBehaviorProfile,
)
from domain.models.completion import CompletionSummary, HealthMetrics, SimulationConfig
from domain.models.engine_state import (
    CommandAck,
    CommandStatus,
    EndReason,
    RemoteCommand,
    WorkoutPhase,
    WorkoutState,
)
from domain.models.execution_log import (
    ExecutionLog,
    ExecutionSummary,
    IntervalExecution,
    IntervalStatus,
    SetExecution,
    SetStatus,
    SkipReason,
)
from domain.models.flattened_step import FlattenedStep, StepType
from domain.models.interval import (
    INTERVAL_KINDS,
    CooldownInterval,
    DistanceInterval,
    Interval,
    RepeatInterval,
    RepsInterval,
    RestInterval,
    TimeInterval,
    WarmupInterval,
    intervals_to_wire,
    parse_intervals,
)
from domain.models.progress import SavedWorkoutProgress
from domain.models.workout import Workout, WorkoutSource, WorkoutSport

__all__ = [
    # Intervals
    "Interval",
    "INTERVAL_KINDS",
    "WarmupInterval",
    "CooldownInterval",
    "TimeInterval",
    "DistanceInterval",
    "RepsInterval",
    "RestInterval",
    "RepeatInterval",
    "parse_intervals",
    "intervals_to_wire",
    # Workout
    "Workout",
    "WorkoutSport",
    "WorkoutSource",
    # Steps
    "FlattenedStep",
    "StepType",
    # Engine state
    "WorkoutPhase",
    "EndReason",
    "RemoteCommand",
    "CommandStatus",
    "CommandAck",
    "WorkoutState",
    # Completion
    "CompletionSummary",
    "HealthMetrics",
    "SimulationConfig",
    "ExecutionLog",
    "ExecutionSummary",
    "IntervalExecution",
    "IntervalStatus",
    "SetExecution",
    "SetStatus",
    "SkipReason",
    # Progress
    "SavedWorkoutProgress",
    # Simulation
    "UserBehaviorProfile",
    "HRProfile",
    "ExerciseIntensity",
    "BEHAVIOR_PROFILE_NAMES",
]
