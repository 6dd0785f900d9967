"""
Pydantic schemas for API requests and responses.

Organized by feature/domain:
- session: Workout session control models
"""

from api.schemas.session import (
    CommandRequest,
    CommandResponse,
    FlattenedStepsResponse,
    LogRepsRequest,
    LogRepsResponse,
    StartSessionRequest,
    StartSessionResponse,
)

__all__ = [
    "CommandRequest",
    "CommandResponse",
    "FlattenedStepsResponse",
    "LogRepsRequest",
    "LogRepsResponse",
    "StartSessionRequest",
    "StartSessionResponse",
]
