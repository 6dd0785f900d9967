"""
Completion Sink Interface (Port).

Receives the CompletionSummary produced when a session ends. Implementations
may log it, POST it to the completions API, or collect it in tests.
"""
from typing import Protocol

from domain.models.completion import CompletionSummary


class CompletionSubmissionError(Exception):
    """Raised when a sink could not deliver a completion."""


class CompletionSink(Protocol):
    """Abstract destination for completed-session summaries."""

    def submit(self, summary: CompletionSummary) -> None:
        """
        Deliver a completion summary.

        Raises:
            CompletionSubmissionError: If delivery failed
        """
        ...
