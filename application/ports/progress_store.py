"""
Progress Store Interface (Port).

Persists a SavedWorkoutProgress snapshot so an interrupted session can be
resumed after a crash or restart.
"""
from typing import Optional, Protocol

from domain.models.progress import SavedWorkoutProgress


class ProgressStore(Protocol):
    """Abstract single-slot store for in-flight workout progress."""

    def save(self, progress: SavedWorkoutProgress) -> None:
        """Replace any stored progress with ``progress``."""
        ...

    def load(self) -> Optional[SavedWorkoutProgress]:
        """Return the stored progress, or None."""
        ...

    def clear(self) -> None:
        """Remove stored progress. No-op when empty."""
        ...
