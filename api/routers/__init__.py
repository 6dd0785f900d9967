"""
Router package for the workout engine API.

Part of AMA-378: Create api/routers skeleton and wiring
Updated in AMA-271: Add session router

This package contains all API routers organized by domain:
- health: Health check endpoint
- session: Workout session control (start, state, commands, reps, reset)
"""

from api.routers.health import router as health_router
from api.routers.session import router as session_router

__all__ = [
    "health_router",
    "session_router",
]
