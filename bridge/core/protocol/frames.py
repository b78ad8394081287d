from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class FrameError(ValueError):
    """Raised when a frame on the agent channel cannot be decoded."""


class FrameType(str, Enum):
    SNAPSHOT = "snapshot"
    COMMAND = "command"
    COMMAND_ACK = "command_ack"


@dataclass(frozen=True)
class Frame:
    type: FrameType
    data: Any = None
    id: Optional[str] = None


def load_json(raw: str | bytes) -> Any:
    """Strict JSON decoding: NaN and Infinity literals are rejected like any other syntax error."""
    return json.loads(raw, parse_constant=_reject_constant)


def dump_json(value: Any) -> str:
    return json.dumps(value, allow_nan=False)


def encode_frame(frame_type: FrameType, data: Any = None, *, frame_id: Optional[str] = None) -> str:
    payload: dict[str, Any] = {"type": frame_type.value, "data": data}
    if frame_id:
        payload["id"] = frame_id
    return dump_json(payload)


def decode_frame(text: str | bytes) -> Frame:
    if isinstance(text, bytes):
        try:
            text = text.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise FrameError("frame is not valid UTF-8") from exc
    try:
        payload = load_json(text)
    except (ValueError, RecursionError) as exc:
        raise FrameError(f"frame is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise FrameError("frame must be a JSON object")
    raw_type = payload.get("type")
    try:
        frame_type = FrameType(raw_type)
    except ValueError as exc:
        raise FrameError(f"unknown frame type: {raw_type}") from exc
    frame_id = payload.get("id")
    if frame_id is not None and not isinstance(frame_id, str):
        raise FrameError("frame id must be a string")
    return Frame(type=frame_type, data=payload.get("data"), id=frame_id or None)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name}")
