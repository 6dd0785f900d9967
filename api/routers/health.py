"""
Health check router.

Part of AMA-378: Create api/routers skeleton and wiring

This router provides health check endpoints for monitoring and load balancers.
"""

import logging

from fastapi import APIRouter, Depends

from api.deps import get_engine_session
from backend.container import EngineSession

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Health"],
)


# =============================================================================
# Health Check Endpoints
# =============================================================================


@router.get("/health")
def health(session: EngineSession = Depends(get_engine_session)):
    """
    Simple liveness endpoint for the workout engine.

    Returns:
        dict: Status indicator plus the engine mode and phase
    """
    return {
        "status": "ok",
        "simulation": session.is_simulated,
        "phase": session.engine.phase.value,
    }
