"""
RemoteStateMirror - the companion device's view of a primary session.

- Applies only snapshots newer than the last applied one (out-of-order and
  duplicate deliveries are discarded).
- Tracks commands it sent until the matching ack arrives, either as a
  commandAck message or as a snapshot's lastCommandAck.
- Reports a disconnected state when its link to the primary fails; the
  primary engine is unaffected.
"""

import logging
import uuid
from collections import OrderedDict
from typing import Any, Optional

from pydantic import ValidationError

from application.ports.remote import RemoteLink, RemoteLinkUnavailable
from application.remote.messages import (
    CommandAckMessage,
    CommandMessage,
    RequestStateMessage,
    StateUpdateMessage,
    parse_companion_inbound,
)
from domain.models.engine_state import CommandAck, RemoteCommand, WorkoutPhase, WorkoutState

logger = logging.getLogger(__name__)


class RemoteStateMirror:

    def __init__(self, link: RemoteLink) -> None:
        self._link = link
        self.state: Optional[WorkoutState] = None
        self.last_ack: Optional[CommandAck] = None
        self.is_connected = True
        self._last_version = 0
        self._pending: "OrderedDict[str, RemoteCommand]" = OrderedDict()

    @property
    def last_applied_version(self) -> int:
        return self._last_version

    @property
    def pending_command_ids(self):
        return list(self._pending)

    @property
    def pending_command(self) -> Optional[RemoteCommand]:
        """Most recently sent command still awaiting its ack."""
        if not self._pending:
            return None
        return next(reversed(self._pending.values()))

    @property
    def display_status(self) -> str:
        """'disconnected' when the primary is unreachable, else the mirrored phase."""
        if not self.is_connected:
            return "disconnected"
        if self.state is None:
            return WorkoutPhase.IDLE.value
        return self.state.phase.value

    # -------------------------------------------------------------------------
    # Inbound
    # -------------------------------------------------------------------------

    def receive(self, message: Any) -> bool:
        """
        Handle one raw message from the primary.

        Returns:
            True if it changed the mirror
        """
        try:
            parsed = parse_companion_inbound(message)
        except ValidationError as e:
            logger.warning("Dropping malformed message from primary: %s", e.errors()[:1])
            return False

        self.is_connected = True
        if isinstance(parsed, StateUpdateMessage):
            return self.apply_state(parsed.state)
        return self.apply_ack(parsed.to_ack())

    def apply_state(self, state: WorkoutState) -> bool:
        if state.stateVersion <= self._last_version:
            logger.debug(
                "Discarding stale snapshot v%d (applied v%d)", state.stateVersion, self._last_version
            )
            return False
        self.state = state
        self._last_version = state.stateVersion
        if state.lastCommandAck is not None:
            self.apply_ack(state.lastCommandAck)
        return True

    def apply_ack(self, ack: CommandAck) -> bool:
        if self._pending.pop(ack.commandId, None) is None:
            return False
        self.last_ack = ack
        if ack.errorCode:
            logger.warning("Command %s failed: %s", ack.commandId, ack.errorCode)
        return True

    # -------------------------------------------------------------------------
    # Outbound
    # -------------------------------------------------------------------------

    def send_command(self, command: RemoteCommand, command_id: Optional[str] = None) -> Optional[str]:
        """
        Send a command to the primary.

        Returns:
            The command id, or None when the primary is unreachable
        """
        command_id = command_id or str(uuid.uuid4())
        self._pending[command_id] = command
        message = CommandMessage(command=command.value, commandId=command_id).to_wire()
        if not self._send(message):
            self._pending.pop(command_id, None)
            return None
        return command_id

    def request_state(self) -> bool:
        return self._send(RequestStateMessage().to_wire())

    def reset(self) -> None:
        """Forget everything, e.g. after the primary restarted its version counter."""
        self.state = None
        self.last_ack = None
        self._last_version = 0
        self._pending.clear()

    def _send(self, message: dict) -> bool:
        try:
            self._link.send(message)
        except RemoteLinkUnavailable as e:
            logger.warning("Primary unreachable via %s: %s", self._link.name, e)
            self.is_connected = False
            return False
        self.is_connected = True
        return True
