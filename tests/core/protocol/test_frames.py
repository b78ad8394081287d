from __future__ import annotations

import json

import pytest

from bridge.core.protocol.frames import FrameError, FrameType, decode_frame, dump_json, encode_frame, load_json


def test_encode_frame_includes_id_only_when_given() -> None:
    assert json.loads(encode_frame(FrameType.SNAPSHOT, {})) == {"type": "snapshot", "data": {}}
    assert json.loads(encode_frame(FrameType.COMMAND_ACK, {"success": True}, frame_id="cmd_1")) == {
        "type": "command_ack",
        "data": {"success": True},
        "id": "cmd_1",
    }


def test_decode_frame_accepts_text_and_bytes() -> None:
    text = encode_frame(FrameType.COMMAND, {"kind": "flatten_all", "payload": {}}, frame_id="cmd_9")

    for raw in (text, text.encode("utf-8")):
        frame = decode_frame(raw)
        assert frame.type == FrameType.COMMAND
        assert frame.id == "cmd_9"
        assert frame.data["kind"] == "flatten_all"


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        "[1, 2]",
        '{"type": "telemetry", "data": {}}',
        '{"data": {}}',
        '{"type": "command", "id": 7}',
        b"\xff\xfe",
    ],
)
def test_decode_frame_rejects_malformed_input(raw: str | bytes) -> None:
    with pytest.raises(FrameError):
        decode_frame(raw)


@pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
def test_decode_frame_rejects_non_standard_number_literals(literal: str) -> None:
    raw = '{"type": "snapshot", "data": {"Sim101": {"account": "Sim101", "balance": %s}}}' % literal

    with pytest.raises(FrameError):
        decode_frame(raw)


def test_decode_frame_rejects_pathologically_nested_input() -> None:
    with pytest.raises(FrameError):
        decode_frame("[" * 100000 + "]" * 100000)


def test_json_codec_is_strict_both_ways() -> None:
    assert load_json(b'{"balance": 1.5}') == {"balance": 1.5}
    with pytest.raises(ValueError):
        load_json('{"balance": NaN}')
    with pytest.raises(ValueError):
        dump_json({"balance": float("inf")})
    with pytest.raises(ValueError):
        encode_frame(FrameType.SNAPSHOT, {"Sim101": {"balance": float("nan")}})
