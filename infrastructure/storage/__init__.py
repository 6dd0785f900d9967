"""Progress persistence adapters."""

from infrastructure.storage.progress_store import InMemoryProgressStore, JsonFileProgressStore

__all__ = ["InMemoryProgressStore", "JsonFileProgressStore"]
