from __future__ import annotations

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

_FORBIDDEN_CHARS = (";", "\r", "\n")


class CommandValidationError(ValueError):
    """Raised when a command is missing a parameter or carries an unsafe value."""


class CommandKind(str, Enum):
    FLATTEN_ALL = "flatten_all"
    FLATTEN_ACCOUNT = "flatten_account"
    CLOSE_POSITION = "close_position"
    CANCEL_ORDER = "cancel_order"


_REQUIRED_PARAMS: dict[CommandKind, tuple[str, ...]] = {
    CommandKind.FLATTEN_ALL: (),
    CommandKind.FLATTEN_ACCOUNT: ("account",),
    CommandKind.CLOSE_POSITION: ("account", "instrument"),
    CommandKind.CANCEL_ORDER: ("account", "order_id"),
}

_WIRE_NAMES = {
    "account": "account",
    "instrument": "instrument",
    "order_id": "orderId",
}


@dataclass(frozen=True)
class Command:
    kind: CommandKind
    request_id: str
    account: Optional[str] = None
    instrument: Optional[str] = None
    order_id: Optional[str] = None

    @classmethod
    def create(
        cls,
        kind: CommandKind | str,
        *,
        account: Optional[str] = None,
        instrument: Optional[str] = None,
        order_id: Optional[str] = None,
        request_id: Optional[str] = None,
    ) -> "Command":
        command = cls(
            kind=_coerce_kind(kind),
            request_id=request_id or new_request_id(),
            account=account,
            instrument=instrument,
            order_id=order_id,
        )
        command.validate()
        return command

    def validate(self) -> None:
        for name in _REQUIRED_PARAMS[self.kind]:
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise CommandValidationError(f"{_WIRE_NAMES[name]} is required for {self.kind.value}")
            if any(char in value for char in _FORBIDDEN_CHARS):
                raise CommandValidationError(f"{_WIRE_NAMES[name]} contains a reserved character")

    def params(self) -> dict[str, str]:
        return {
            _WIRE_NAMES[name]: getattr(self, name)
            for name in _REQUIRED_PARAMS[self.kind]
        }

    def to_wire(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "payload": self.params()}


@dataclass(frozen=True)
class CommandAck:
    request_id: str
    success: bool
    error: Optional[str] = None

    @classmethod
    def ok(cls, request_id: str) -> "CommandAck":
        return cls(request_id=request_id, success=True)

    @classmethod
    def failed(cls, request_id: str, error: str) -> "CommandAck":
        return cls(request_id=request_id, success=False, error=error)

    def to_wire(self) -> dict[str, Any]:
        if self.success:
            return {"success": True}
        return {"success": False, "error": self.error or "unknown error"}


def new_request_id() -> str:
    return f"cmd_{uuid.uuid4().hex}"


def command_from_wire(data: object, request_id: Optional[str]) -> Command:
    if not request_id:
        raise CommandValidationError("command id is required")
    if not isinstance(data, Mapping):
        raise CommandValidationError("command data must be a JSON object")
    payload = data.get("payload")
    if payload is None:
        payload = {}
    if not isinstance(payload, Mapping):
        raise CommandValidationError("command payload must be a JSON object")
    return Command.create(
        data.get("kind", ""),
        account=payload.get("account"),
        instrument=payload.get("instrument"),
        order_id=payload.get("orderId"),
        request_id=request_id,
    )


def ack_from_wire(data: object, request_id: Optional[str]) -> CommandAck:
    if not request_id:
        raise CommandValidationError("acknowledgment id is required")
    if not isinstance(data, Mapping):
        raise CommandValidationError("acknowledgment data must be a JSON object")
    if data.get("success") is True:
        return CommandAck.ok(request_id)
    return CommandAck.failed(request_id, str(data.get("error") or "unknown error"))


def _coerce_kind(kind: CommandKind | str) -> CommandKind:
    if isinstance(kind, CommandKind):
        return kind
    try:
        return CommandKind(str(kind).strip().lower())
    except ValueError as exc:
        raise CommandValidationError(f"unknown command type: {kind}") from exc
