"""
FlattenedStep - one executable unit of a running workout.

Produced once per session by flatten_intervals() and never mutated afterwards.

Part of AMA-271: Workout Simulation Mode (rest metadata)
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class StepType(str, Enum):
    """How a step is executed."""

    TIMED = "timed"        # Has countdown timer
    REPS = "reps"          # Manual completion
    DISTANCE = "distance"  # Distance-based, manual completion
    REST = "rest"          # Explicit rest step (timed or manual)


class FlattenedStep(BaseModel):
    """
    A single step in the linear sequence a user progresses through.

    Rest metadata:
    - has_rest_after: whether the engine inserts a rest phase after this step
    - rest_after_seconds: None = manual ("tap when ready"), > 0 = timed countdown
    """

    model_config = ConfigDict(frozen=True)

    index: int = Field(..., ge=1, description="1-based global position")
    label: str
    details: str = ""
    kind: str = Field(..., description="Source interval kind")
    round_info: Optional[str] = Field(default=None, description="'Round i of N' / 'Set i of N'")
    timer_seconds: Optional[int] = Field(default=None, description="None for non-timed steps")
    step_type: StepType
    follow_along_url: Optional[str] = None
    load: Optional[str] = None
    target_reps: Optional[int] = None
    distance_meters: Optional[int] = None
    set_number: Optional[int] = None
    total_sets: Optional[int] = None
    has_rest_after: bool = False
    rest_after_seconds: Optional[int] = None

    @property
    def is_timed(self) -> bool:
        return self.timer_seconds is not None

    @property
    def formatted_time(self) -> Optional[str]:
        if self.timer_seconds is None:
            return None
        return _format_clock(self.timer_seconds)

    @property
    def formatted_rest_time(self) -> Optional[str]:
        if not self.rest_after_seconds:
            return None
        return _format_clock(self.rest_after_seconds)

    @property
    def display_label(self) -> str:
        """Label including set info when the exercise has multiple sets."""
        if self.set_number and self.total_sets and self.total_sets > 1:
            return f"{self.label} - Set {self.set_number} of {self.total_sets}"
        return self.label


def _format_clock(seconds: int) -> str:
    minutes, secs = divmod(seconds, 60)
    if minutes > 0:
        return f"{minutes}:{secs:02d}"
    return f"{secs}s"
