"""Companion-device sync: command intake, state fan-out and the remote mirror."""

from application.remote.command_channel import RemoteCommandChannel
from application.remote.messages import (
    CommandAckMessage,
    CommandMessage,
    RequestStateMessage,
    StateUpdateMessage,
    parse_companion_inbound,
    parse_primary_inbound,
)
from application.remote.remote_mirror import RemoteStateMirror

__all__ = [
    "RemoteCommandChannel",
    "RemoteStateMirror",
    "CommandMessage",
    "CommandAckMessage",
    "RequestStateMessage",
    "StateUpdateMessage",
    "parse_primary_inbound",
    "parse_companion_inbound",
]
