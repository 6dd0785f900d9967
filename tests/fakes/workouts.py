"""
Workout factories for tests.

Part of AMA-271: Workout Simulation Mode
"""
from typing import Any, Dict, List

from domain.models.workout import Workout

# warmup(30s), reps(sets=2, reps=10, restSec=15), cooldown(30s)
SIMPLE_INTERVALS: List[Dict[str, Any]] = [
    {"kind": "warmup", "seconds": 30},
    {"kind": "reps", "sets": 2, "reps": 10, "name": "Squat", "restSec": 15},
    {"kind": "cooldown", "seconds": 30},
]


def make_workout(
    intervals: List[Dict[str, Any]],
    workout_id: str = "w-1",
    name: str = "Test Workout",
) -> Workout:
    """Build a Workout from wire-format interval dicts."""
    return Workout.model_validate({"id": workout_id, "name": name, "intervals": intervals})


def create_simple_workout(workout_id: str = "simple") -> Workout:
    return make_workout(SIMPLE_INTERVALS, workout_id=workout_id, name="Simple")
