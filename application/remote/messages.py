"""
Remote message envelopes exchanged with a companion device.

Primary -> companion:
    {"action": "stateUpdate", "state": {...WorkoutState...}}
    {"action": "commandAck", "commandId": "...", "status": "success", "errorCode": null}

Companion -> primary:
    {"action": "command", "command": "PAUSE", "commandId": "..."}
    {"action": "requestState"}
"""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from domain.models.engine_state import CommandAck, CommandStatus, WorkoutState


class _Message(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    def to_wire(self) -> dict:
        return self.model_dump(mode="json")


class CommandMessage(_Message):
    action: Literal["command"] = "command"
    command: str = Field(..., min_length=1)
    commandId: str = Field(..., min_length=1)


class RequestStateMessage(_Message):
    action: Literal["requestState"] = "requestState"


class StateUpdateMessage(_Message):
    action: Literal["stateUpdate"] = "stateUpdate"
    state: WorkoutState


class CommandAckMessage(_Message):
    action: Literal["commandAck"] = "commandAck"
    commandId: str
    status: CommandStatus
    errorCode: Optional[str] = None

    @classmethod
    def from_ack(cls, ack: CommandAck) -> "CommandAckMessage":
        return cls(commandId=ack.commandId, status=ack.status, errorCode=ack.errorCode)

    def to_ack(self) -> CommandAck:
        return CommandAck(commandId=self.commandId, status=self.status, errorCode=self.errorCode)


PrimaryInbound = Annotated[
    Union[CommandMessage, RequestStateMessage], Field(discriminator="action")
]
CompanionInbound = Annotated[
    Union[StateUpdateMessage, CommandAckMessage], Field(discriminator="action")
]

_primary_adapter = TypeAdapter(PrimaryInbound)
_companion_adapter = TypeAdapter(CompanionInbound)


def parse_primary_inbound(message: Any) -> Union[CommandMessage, RequestStateMessage]:
    """
    Decode a message received by the primary device.

    Raises:
        pydantic.ValidationError: If the message is malformed
    """
    if isinstance(message, (str, bytes)):
        return _primary_adapter.validate_json(message)
    return _primary_adapter.validate_python(message)


def parse_companion_inbound(message: Any) -> Union[StateUpdateMessage, CommandAckMessage]:
    """
    Decode a message received by the companion device.

    Raises:
        pydantic.ValidationError: If the message is malformed
    """
    if isinstance(message, (str, bytes)):
        return _companion_adapter.validate_json(message)
    return _companion_adapter.validate_python(message)
