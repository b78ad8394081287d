from bridge.core.commands.encoding import OIF_FIELD_COUNT, OIF_LINE_TERMINATOR, encode_command
from bridge.core.commands.models import (
    Command,
    CommandAck,
    CommandKind,
    CommandValidationError,
    ack_from_wire,
    command_from_wire,
    new_request_id,
)
from bridge.core.commands.ports import CommandSink

__all__ = [
    "Command",
    "CommandAck",
    "CommandKind",
    "CommandSink",
    "CommandValidationError",
    "OIF_FIELD_COUNT",
    "OIF_LINE_TERMINATOR",
    "ack_from_wire",
    "command_from_wire",
    "encode_command",
    "new_request_id",
]
