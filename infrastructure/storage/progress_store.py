"""
ProgressStore implementations.

- JsonFileProgressStore: single JSON file, written atomically
- InMemoryProgressStore: process-local, used when no path is configured

Progress is best-effort crash recovery: a failed write is logged and the
session carries on.
"""
import logging
import os
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from domain.models.progress import SavedWorkoutProgress

logger = logging.getLogger(__name__)


class JsonFileProgressStore:
    """Persists SavedWorkoutProgress to a JSON file."""

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def save(self, progress: SavedWorkoutProgress) -> None:
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(progress.model_dump_json(), encoding="utf-8")
            os.replace(tmp_path, self._path)
        except OSError as e:
            logger.error(f"Failed to save workout progress to {self._path}: {e}")

    def load(self) -> Optional[SavedWorkoutProgress]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.error(f"Failed to read workout progress from {self._path}: {e}")
            return None

        try:
            return SavedWorkoutProgress.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable workout progress at {self._path}: {e}")
            return None

    def clear(self) -> None:
        try:
            self._path.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Failed to clear workout progress at {self._path}: {e}")


class InMemoryProgressStore:
    """Process-local progress store."""

    def __init__(self, progress: Optional[SavedWorkoutProgress] = None):
        self._progress = progress

    def save(self, progress: SavedWorkoutProgress) -> None:
        self._progress = progress

    def load(self) -> Optional[SavedWorkoutProgress]:
        return self._progress

    def clear(self) -> None:
        self._progress = None
