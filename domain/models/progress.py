"""Crash-recovery snapshot of an in-flight workout session."""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


class SavedWorkoutProgress(BaseModel):
    """Enough to resume a session after the process dies."""

    model_config = ConfigDict(frozen=True)

    workoutId: str
    workoutName: str = ""
    stepIndex: int = Field(..., ge=0)
    elapsedSeconds: int = Field(default=0, ge=0)
    savedAt: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
