from __future__ import annotations

from bridge.core.commands.models import Command, CommandKind

# Instruction lines always carry this many semicolon-separated fields.
OIF_FIELD_COUNT = 13
OIF_LINE_TERMINATOR = "\r\n"


def encode_command(command: Command) -> str:
    """Translate a command into one file-drop instruction line (no terminator)."""
    command.validate()
    if command.kind == CommandKind.FLATTEN_ALL:
        fields = ["FLATTENEVERYTHING"]
    elif command.kind == CommandKind.FLATTEN_ACCOUNT:
        fields = ["FLATTENEVERYTHING", f"ACCOUNT={command.account}"]
    elif command.kind == CommandKind.CLOSE_POSITION:
        fields = [
            "CLOSEPOSITION",
            f"ACCOUNT={command.account}",
            f"INSTRUMENT={command.instrument}",
        ]
    elif command.kind == CommandKind.CANCEL_ORDER:
        fields = [
            "CANCEL",
            f"ACCOUNT={command.account}",
            f"ORDERID={command.order_id}",
        ]
    else:
        raise ValueError(f"unsupported command kind: {command.kind}")
    fields.extend([""] * (OIF_FIELD_COUNT - len(fields)))
    return ";".join(fields)
