"""
Workout envelope - the unit a session is started with.

Mirrors the companion app's workout payload:

    {
        "id": "w-123",
        "name": "Leg Day",
        "sport": "strength",
        "duration": 1800,
        "intervals": [...],
        "source": "coach"
    }
"""

import uuid
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

from domain.models.interval import Interval, RepeatInterval, intervals_to_wire


class WorkoutSport(str, Enum):
    """Sport type. Unknown values decode as OTHER."""

    RUNNING = "running"
    CYCLING = "cycling"
    STRENGTH = "strength"
    MOBILITY = "mobility"
    SWIMMING = "swimming"
    CARDIO = "cardio"
    OTHER = "other"


class WorkoutSource(str, Enum):
    """Where the workout came from. Unknown values decode as OTHER."""

    INSTAGRAM = "instagram"
    YOUTUBE = "youtube"
    IMAGE = "image"
    AI = "ai"
    COACH = "coach"
    AMAKA = "amaka"
    OTHER = "other"


# Alternative sport spellings sent by older backends
_SPORT_ALIASES = {
    "run": WorkoutSport.RUNNING,
    "bike": WorkoutSport.CYCLING,
    "biking": WorkoutSport.CYCLING,
    "strengthtraining": WorkoutSport.STRENGTH,
    "strength_training": WorkoutSport.STRENGTH,
    "weights": WorkoutSport.STRENGTH,
    "yoga": WorkoutSport.MOBILITY,
    "stretching": WorkoutSport.MOBILITY,
    "flexibility": WorkoutSport.MOBILITY,
    "swim": WorkoutSport.SWIMMING,
    "hiit": WorkoutSport.CARDIO,
}


class Workout(BaseModel):
    """
    A workout as delivered to the execution engine.

    Only ``intervals`` matters to the engine; the rest is carried through to
    state snapshots and the completion summary.

    Examples:
        >>> workout = Workout(
        ...     name="Quick Legs",
        ...     sport="strength",
        ...     intervals=[
        ...         {"kind": "warmup", "seconds": 300},
        ...         {"kind": "reps", "sets": 3, "reps": 10, "name": "Squat", "restSec": 60},
        ...         {"kind": "cooldown", "seconds": 180},
        ...     ],
        ... )
        >>> workout.interval_count
        3
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), description="Workout ID")
    name: str = Field(..., description="Workout display name")
    sport: WorkoutSport = Field(default=WorkoutSport.OTHER)
    duration: int = Field(default=0, ge=0, description="Estimated duration in seconds")
    intervals: List[Interval] = Field(default_factory=list)
    description: Optional[str] = None
    source: WorkoutSource = Field(default=WorkoutSource.OTHER)
    sourceUrl: Optional[str] = None

    @field_validator("sport", mode="before")
    @classmethod
    def normalize_sport(cls, v: Any) -> Any:
        """Accept alternative spellings; fall back to OTHER."""
        if isinstance(v, WorkoutSport) or v is None:
            return v or WorkoutSport.OTHER
        raw = str(v).lower()
        if raw in WorkoutSport._value2member_map_:
            return raw
        return _SPORT_ALIASES.get(raw, WorkoutSport.OTHER)

    @field_validator("source", mode="before")
    @classmethod
    def normalize_source(cls, v: Any) -> Any:
        if isinstance(v, WorkoutSource) or v is None:
            return v or WorkoutSource.OTHER
        raw = str(v).lower()
        return raw if raw in WorkoutSource._value2member_map_ else WorkoutSource.OTHER

    @field_validator("intervals", mode="before")
    @classmethod
    def default_intervals(cls, v: Any) -> Any:
        """Missing or null intervals decode as an empty list."""
        return [] if v is None else v

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def interval_count(self) -> int:
        """Number of leaf intervals with repeats expanded."""
        return count_intervals(self.intervals)

    @property
    def formatted_duration(self) -> str:
        return format_duration(self.duration)

    @property
    def is_empty(self) -> bool:
        return not self.intervals

    def intervals_wire(self) -> List[dict]:
        """Original interval structure in wire format (for completion payloads)."""
        return intervals_to_wire(self.intervals)


def count_intervals(intervals: List[Interval]) -> int:
    count = 0
    for interval in intervals:
        if isinstance(interval, RepeatInterval):
            count += interval.reps * count_intervals(interval.intervals)
        else:
            count += 1
    return count


def format_duration(seconds: int) -> str:
    """Format a duration as '1h 5m' or '45m'."""
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"
