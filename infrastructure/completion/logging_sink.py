"""LoggingCompletionSink - records completion summaries in the log and in memory."""

import logging
from typing import List, Optional

from backend.workout_completions import summarize_completion
from domain.models.completion import CompletionSummary

logger = logging.getLogger(__name__)


class LoggingCompletionSink:
    """Default sink when no completions API is configured."""

    def __init__(self, keep_last: int = 20):
        self._keep_last = max(1, keep_last)
        self._history: List[CompletionSummary] = []

    @property
    def last(self) -> Optional[CompletionSummary]:
        return self._history[-1] if self._history else None

    @property
    def history(self) -> List[CompletionSummary]:
        return list(self._history)

    def submit(self, summary: CompletionSummary) -> None:
        view = summarize_completion(summary)
        logger.info(
            f"Workout completed: {view.workout_name} ({view.end_reason}) "
            f"{view.duration_formatted}, steps {view.steps}"
        )
        self._history.append(summary)
        del self._history[:-self._keep_last]
