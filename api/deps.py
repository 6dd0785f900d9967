"""
FastAPI Dependency Providers for the workout engine API.

Part of AMA-386: Create api/deps.py dependency providers
Updated in AMA-271: Engine session providers

This module provides FastAPI dependency injection functions that return
the engine session and its collaborators. The session is built once by
create_app() and stored on app.state.

Usage in routers:
    from api.deps import get_engine

    @router.get("/session/state")
    async def get_state(engine: WorkoutEngine = Depends(get_engine)):
        return engine.snapshot()

Testing:
    # Override dependencies in tests
    app.dependency_overrides[get_engine_session] = lambda: build_engine(settings, clock=ManualClock())
"""

from fastapi import Depends, Request

from application.engine import WorkoutEngine
from application.remote import RemoteCommandChannel
from backend.container import EngineSession
from backend.settings import Settings, get_settings as _get_settings


# =============================================================================
# Settings Provider
# =============================================================================


def get_settings() -> Settings:
    """
    Get application settings.

    Returns cached Settings instance from backend.settings.
    Use this as a FastAPI dependency for settings access.

    Returns:
        Settings: Application settings
    """
    return _get_settings()


# =============================================================================
# Engine Providers
# =============================================================================


def get_engine_session(request: Request) -> EngineSession:
    """Get the engine session built by create_app()."""
    return request.app.state.engine_session


def get_engine(session: EngineSession = Depends(get_engine_session)) -> WorkoutEngine:
    return session.engine


def get_channel(session: EngineSession = Depends(get_engine_session)) -> RemoteCommandChannel:
    """
    Get the remote command channel.

    HTTP commands go through the channel so they share its ordering and
    duplicate handling with companion-device commands.
    """
    return session.channel
