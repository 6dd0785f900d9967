"""
Cue Provider Interface (Port).

Audio/haptic announcements during a workout. Cue content and playback are
owned by the implementation; the engine only says *when*.
"""
from typing import Optional, Protocol

from domain.models.flattened_step import FlattenedStep


class CueProvider(Protocol):

    def workout_started(self, workout_name: str) -> None:
        ...

    def announce_step(self, step: FlattenedStep) -> None:
        ...

    def countdown(self, seconds_remaining: int) -> None:
        """Called once per second during the final seconds of a timer."""
        ...

    def rest_started(self, rest_seconds: Optional[int]) -> None:
        """``rest_seconds`` None means manual rest."""
        ...

    def paused(self) -> None:
        ...

    def resumed(self) -> None:
        ...

    def workout_completed(self) -> None:
        ...
