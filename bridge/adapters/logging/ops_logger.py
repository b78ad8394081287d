from __future__ import annotations

from dataclasses import fields, is_dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from loguru import logger

from bridge.core.ops.events import (
    AuthRejected,
    CommandAcknowledged,
    CommandDropped,
    CommandExecuted,
    HubLinkFailed,
    MessageDropped,
    SnapshotRejected,
)

_WARNING_EVENTS = (
    AuthRejected,
    CommandDropped,
    HubLinkFailed,
    MessageDropped,
    SnapshotRejected,
)
_OUTCOME_EVENTS = (CommandAcknowledged, CommandExecuted)


class OpsEventLogger:
    """Render ops events through loguru, keeping the structured payload bound to the record."""

    def handle(self, event: object) -> None:
        event_type = type(event).__name__
        payload = _serialize(event)
        level = _level_for(event)
        summary = " ".join(
            f"{key}={value}"
            for key, value in (payload.items() if isinstance(payload, dict) else ())
            if key != "timestamp" and value is not None
        )
        logger.bind(event_type=event_type, event=payload).log(level, "{} {}", event_type, summary)


def _level_for(event: object) -> str:
    if isinstance(event, _WARNING_EVENTS):
        return "WARNING"
    if isinstance(event, _OUTCOME_EVENTS) and not getattr(event, "success", True):
        return "WARNING"
    return "INFO"


def _serialize(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return {field.name: _serialize(getattr(value, field.name)) for field in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat(timespec="microseconds")
    if isinstance(value, (list, tuple)):
        return [_serialize(item) for item in value]
    if isinstance(value, dict):
        return {str(key): _serialize(val) for key, val in value.items()}
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return repr(value)
