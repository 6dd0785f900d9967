"""
Remote Sync Interfaces (Ports).

- StateBroadcaster: what the engine publishes to (snapshots and acks)
- RemoteLink: one transport to a companion device carrying JSON messages

The engine never depends on a link being reachable.
"""
from typing import Any, Dict, Protocol

from domain.models.engine_state import CommandAck, WorkoutState


class RemoteLinkUnavailable(Exception):
    """Raised by a RemoteLink when the companion cannot be reached."""


class StateBroadcaster(Protocol):
    """Receives every externally visible engine change."""

    def broadcast_state(self, state: WorkoutState) -> None:
        """Publish a state snapshot."""
        ...

    def broadcast_ack(self, ack: CommandAck) -> None:
        """Publish a command acknowledgment."""
        ...


class RemoteLink(Protocol):
    """A message transport to a companion device."""

    @property
    def name(self) -> str:
        ...

    def send(self, message: Dict[str, Any]) -> None:
        """
        Send one JSON-compatible message.

        Raises:
            RemoteLinkUnavailable: If the companion is not reachable
        """
        ...
