"""
Workout session router.

Part of AMA-271: Workout Simulation Mode

This router contains endpoints for:
- /session/start - Start (or resume) a workout session
- /session/state - Current state snapshot in the remote wire shape
- /session/commands - Apply a remote command (PAUSE, RESUME, NEXT_STEP, ...)
- /session/reps - Log reps for the current reps step
- /session/reset - Return the engine to idle
- /session/flattened - Flattened steps of the current workout

Endpoints are async so that engine timers are armed on the server's event
loop, which is the engine's only execution context.
"""

import asyncio
import logging

from fastapi import APIRouter, Depends

from api.deps import get_channel, get_engine, get_engine_session
from api.schemas.session import (
    CommandRequest,
    CommandResponse,
    FlattenedStepsResponse,
    LogRepsRequest,
    LogRepsResponse,
    StartSessionRequest,
    StartSessionResponse,
)
from application.engine import WorkoutEngine
from application.remote import RemoteCommandChannel
from backend.container import EngineSession
from domain.models.engine_state import WorkoutState

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/session",
    tags=["Session"],
)


@router.post("/start", response_model=StartSessionResponse)
async def start_session(
    request: StartSessionRequest,
    session: EngineSession = Depends(get_engine_session),
):
    """
    Start a workout session.

    Any active session is ended as userEnded first. With ``resume`` set,
    saved progress for the same workout picks up at the saved step.
    """
    engine = session.engine
    resume_from = None
    if request.resume:
        saved = engine.saved_progress()
        if saved is not None and saved.workoutId == request.workout.id:
            resume_from = saved
        else:
            logger.info(f"No saved progress for workout {request.workout.id}; starting fresh")

    session.start(request.workout, resume_from=resume_from)
    if session.simulation_task is not None:
        # Let the simulation task start the engine before the snapshot
        await asyncio.sleep(0)
    return StartSessionResponse(
        state=engine.snapshot(),
        resumed=resume_from is not None,
        simulated=session.is_simulated,
    )


@router.get("/state", response_model=WorkoutState)
async def get_state(engine: WorkoutEngine = Depends(get_engine)):
    """Get the current state snapshot (phase idle when no session is running)."""
    return engine.snapshot()


@router.post("/commands", response_model=CommandResponse)
async def send_command(
    request: CommandRequest,
    engine: WorkoutEngine = Depends(get_engine),
    channel: RemoteCommandChannel = Depends(get_channel),
):
    """
    Apply a remote command.

    Unknown command tokens are not accepted and leave the state untouched.
    Repeating a commandId returns the original ack without re-applying it.
    """
    ack = channel.submit_command(request.command, request.commandId)
    return CommandResponse(
        accepted=ack is not None,
        ack=ack,
        state=engine.snapshot(),
    )


@router.post("/reps", response_model=LogRepsResponse)
async def log_reps(
    request: LogRepsRequest,
    engine: WorkoutEngine = Depends(get_engine),
):
    """Log reps completed for the current reps step."""
    recorded = engine.log_reps(request.count)
    return LogRepsResponse(recorded=recorded, state=engine.snapshot())


@router.post("/reset", response_model=WorkoutState)
async def reset_session(session: EngineSession = Depends(get_engine_session)):
    """Reset the engine to idle, cancelling any running simulation."""
    session.cancel_simulation()
    session.engine.reset()
    return session.engine.snapshot()


@router.get("/flattened", response_model=FlattenedStepsResponse)
async def get_flattened_steps(engine: WorkoutEngine = Depends(get_engine)):
    """Get the flattened steps of the current workout."""
    steps = list(engine.flattened_steps)
    return FlattenedStepsResponse(
        workout_id=engine.workout.id if engine.workout else None,
        count=len(steps),
        steps=steps,
    )
