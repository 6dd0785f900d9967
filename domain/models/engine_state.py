"""
Engine phase and remote-sync wire models.

These are the shapes exchanged with a companion device:
- WorkoutState: snapshot broadcast primary -> remote
- RemoteCommand: command tokens remote -> primary
- CommandAck: acknowledgment primary -> remote, correlated by commandId

Field names are camelCase because they are serialized as-is onto the wire.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

from domain.models.flattened_step import StepType


class WorkoutPhase(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    RESTING = "resting"  # Rest period between steps (manual or timed)
    ENDED = "ended"

    @property
    def is_active(self) -> bool:
        return self in (WorkoutPhase.RUNNING, WorkoutPhase.PAUSED, WorkoutPhase.RESTING)


class EndReason(str, Enum):
    COMPLETED = "completed"
    USER_ENDED = "userEnded"
    ERROR = "error"


class RemoteCommand(str, Enum):
    PAUSE = "PAUSE"
    RESUME = "RESUME"
    NEXT_STEP = "NEXT_STEP"
    PREVIOUS_STEP = "PREV_STEP"
    SKIP_REST = "SKIP_REST"
    END = "END"

    @classmethod
    def parse(cls, token: str) -> Optional["RemoteCommand"]:
        """Return the command for a wire token, or None if unknown."""
        try:
            return cls(token)
        except ValueError:
            return None


class CommandStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


class CommandAck(BaseModel):
    model_config = ConfigDict(frozen=True)

    commandId: str
    status: CommandStatus
    errorCode: Optional[str] = None

    def to_wire(self) -> dict:
        return self.model_dump(mode="json")


class WorkoutState(BaseModel):
    """State snapshot broadcast to the remote display."""

    model_config = ConfigDict(frozen=True)

    stateVersion: int
    workoutId: str = ""
    workoutName: str = ""
    phase: WorkoutPhase = WorkoutPhase.IDLE
    stepIndex: int = 0
    stepCount: int = 0
    stepName: str = ""
    stepType: Optional[StepType] = None
    remainingMs: Optional[int] = None
    roundInfo: Optional[str] = None
    targetReps: Optional[int] = None
    setNumber: Optional[int] = None
    totalSets: Optional[int] = None
    lastCommandAck: Optional[CommandAck] = None

    def to_wire(self) -> dict:
        return self.model_dump(mode="json")
