"""
Workout execution engine.

Part of AMA-271: Workout Simulation Mode
"""

from application.engine.execution_log import ExecutionLogBuilder
from application.engine.workout_engine import StateListener, WorkoutEngine

__all__ = [
    "ExecutionLogBuilder",
    "StateListener",
    "WorkoutEngine",
]
