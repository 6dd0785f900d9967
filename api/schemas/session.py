"""
Pydantic models for the workout session API.

Part of AMA-271: Workout Simulation Mode
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from domain.models.engine_state import CommandAck, WorkoutState
from domain.models.flattened_step import FlattenedStep
from domain.models.workout import Workout


class StartSessionRequest(BaseModel):
    """Start a session for a workout, optionally resuming saved progress"""
    workout: Workout
    resume: bool = False


class StartSessionResponse(BaseModel):
    state: WorkoutState
    resumed: bool = False
    simulated: bool = False


class CommandRequest(BaseModel):
    """Remote command in the companion wire shape"""
    command: str
    commandId: str = Field(..., min_length=1)


class CommandResponse(BaseModel):
    accepted: bool
    ack: Optional[CommandAck] = None
    state: WorkoutState


class LogRepsRequest(BaseModel):
    count: int = Field(..., ge=0)


class LogRepsResponse(BaseModel):
    recorded: bool
    state: WorkoutState


class FlattenedStepsResponse(BaseModel):
    workout_id: Optional[str] = None
    count: int
    steps: List[FlattenedStep]
