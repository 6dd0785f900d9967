"""
RemoteCommandChannel - the primary device's side of companion sync.

Inbound: decodes companion messages, drops malformed ones, and applies
commands to the engine strictly one at a time in arrival order. A command
submitted while another is being applied (e.g. from inside a broadcast
callback) is queued and applied after it.

Outbound: implements StateBroadcaster and fans snapshots/acks out to every
registered RemoteLink. An unreachable link is recorded and skipped; the
engine never sees link failures.
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, Dict, List, Optional

from pydantic import ValidationError

from application.engine.workout_engine import WorkoutEngine
from application.ports.remote import RemoteLink, RemoteLinkUnavailable
from application.remote.messages import (
    CommandAckMessage,
    RequestStateMessage,
    StateUpdateMessage,
    parse_primary_inbound,
)
from domain.models.engine_state import CommandAck, WorkoutState

logger = logging.getLogger(__name__)


@dataclass
class _PendingCommand:
    command: str
    command_id: str
    ack: Optional[CommandAck] = None


class RemoteCommandChannel:
    """Serialized command intake and state fan-out for one engine."""

    def __init__(self, links: Optional[List[RemoteLink]] = None) -> None:
        self._engine: Optional[WorkoutEngine] = None
        self._links: Dict[str, RemoteLink] = {}
        self._reachable: Dict[str, bool] = {}
        self._queue: Deque[_PendingCommand] = deque()
        self._draining = False
        for link in links or []:
            self.add_link(link)

    def attach(self, engine: WorkoutEngine) -> None:
        self._engine = engine

    # -------------------------------------------------------------------------
    # Links
    # -------------------------------------------------------------------------

    def add_link(self, link: RemoteLink) -> None:
        self._links[link.name] = link
        self._reachable[link.name] = True

    def remove_link(self, name: str) -> None:
        self._links.pop(name, None)
        self._reachable.pop(name, None)

    def is_reachable(self, name: str) -> bool:
        return self._reachable.get(name, False)

    @property
    def link_names(self) -> List[str]:
        return list(self._links)

    # -------------------------------------------------------------------------
    # StateBroadcaster
    # -------------------------------------------------------------------------

    def broadcast_state(self, state: WorkoutState) -> None:
        self._send_all(StateUpdateMessage(state=state).to_wire())

    def broadcast_ack(self, ack: CommandAck) -> None:
        self._send_all(CommandAckMessage.from_ack(ack).to_wire())

    def send_current_state(self) -> None:
        if self._engine is not None:
            self.broadcast_state(self._engine.snapshot())

    def _send_all(self, message: Dict[str, Any]) -> None:
        for name, link in list(self._links.items()):
            try:
                link.send(message)
            except RemoteLinkUnavailable as e:
                if self._reachable.get(name, True):
                    logger.warning("Remote link %s unreachable: %s", name, e)
                self._reachable[name] = False
                continue
            if not self._reachable.get(name, True):
                logger.info("Remote link %s reachable again", name)
            self._reachable[name] = True

    # -------------------------------------------------------------------------
    # Inbound
    # -------------------------------------------------------------------------

    def submit(self, message: Any) -> Optional[CommandAck]:
        """
        Handle one raw inbound message (dict or JSON text).

        Returns:
            The command ack when the message was a command applied
            immediately; None for state requests, queued commands, unknown
            tokens and malformed messages
        """
        try:
            parsed = parse_primary_inbound(message)
        except ValidationError as e:
            logger.warning("Dropping malformed remote message: %s", e.errors()[:1])
            return None

        if isinstance(parsed, RequestStateMessage):
            self.send_current_state()
            return None
        return self.submit_command(parsed.command, parsed.commandId)

    def submit_command(self, command: str, command_id: str) -> Optional[CommandAck]:
        """Queue a command and apply everything queued, in order."""
        if self._engine is None:
            logger.warning("No engine attached; dropping command %s", command_id)
            return None

        item = _PendingCommand(command=command, command_id=command_id)
        self._queue.append(item)
        if self._draining:
            logger.debug("Queued command %s behind in-flight transition", command_id)
            return None

        self._drain()
        return item.ack

    @property
    def pending_count(self) -> int:
        return len(self._queue)

    def _drain(self) -> None:
        self._draining = True
        try:
            while self._queue:
                item = self._queue.popleft()
                item.ack = self._engine.handle_remote_command(item.command, item.command_id)
        finally:
            self._draining = False
