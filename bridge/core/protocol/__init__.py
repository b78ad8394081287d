from bridge.core.protocol.frames import (
    Frame,
    FrameError,
    FrameType,
    decode_frame,
    dump_json,
    encode_frame,
    load_json,
)

__all__ = [
    "Frame",
    "FrameError",
    "FrameType",
    "decode_frame",
    "dump_json",
    "encode_frame",
    "load_json",
]
