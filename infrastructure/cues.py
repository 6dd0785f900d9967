"""
LoggingCueProvider - writes audio/haptic cues to the log.

Stands in for a speech/haptics backend on servers and in simulations.
"""
import logging
from typing import Optional

from domain.models.flattened_step import FlattenedStep

logger = logging.getLogger(__name__)


class LoggingCueProvider:

    def __init__(self, level: int = logging.INFO):
        self._level = level

    def workout_started(self, workout_name: str) -> None:
        logger.log(self._level, f"Cue: starting {workout_name}")

    def announce_step(self, step: FlattenedStep) -> None:
        if step.round_info:
            logger.log(self._level, f"Cue: {step.display_label}, {step.round_info}")
        else:
            logger.log(self._level, f"Cue: {step.display_label}")

    def countdown(self, seconds_remaining: int) -> None:
        logger.log(self._level, f"Cue: {seconds_remaining}")

    def rest_started(self, rest_seconds: Optional[int]) -> None:
        if rest_seconds:
            logger.log(self._level, f"Cue: rest {rest_seconds} seconds")
        else:
            logger.log(self._level, "Cue: rest, tap when ready")

    def paused(self) -> None:
        logger.log(self._level, "Cue: paused")

    def resumed(self) -> None:
        logger.log(self._level, "Cue: resumed")

    def workout_completed(self) -> None:
        logger.log(self._level, "Cue: workout complete")
