"""
API package for the workout engine.

Part of AMA-378: Create api/routers skeleton and wiring
Updated in AMA-386: Add dependency providers

This package contains:
- deps.py: FastAPI dependency providers for DI
- routers/: API route handlers
- schemas/: Request and response models
"""

# Re-export dependency providers for convenient access
from api.deps import (
    get_settings,
    get_engine_session,
    get_engine,
    get_channel,
)

__all__ = [
    # Settings
    "get_settings",
    # Engine
    "get_engine_session",
    "get_engine",
    "get_channel",
]
