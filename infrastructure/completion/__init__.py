"""Completion sink adapters."""

from infrastructure.completion.http_sink import HttpCompletionSink
from infrastructure.completion.logging_sink import LoggingCompletionSink

__all__ = ["HttpCompletionSink", "LoggingCompletionSink"]
