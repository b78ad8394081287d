from __future__ import annotations

import asyncio
import random
import re
from pathlib import Path

import pytest

from bridge.adapters.filedrop.oif_sink import FileDropSink


def test_write_line_drops_one_crlf_terminated_file(tmp_path: Path) -> None:
    sink = FileDropSink(str(tmp_path), clock_ns=lambda: 1736951400000000000, rng=random.Random(7))

    path = asyncio.run(sink.write_line("FLATTENEVERYTHING;;;;;;;;;;;;"))

    dropped = Path(path)
    assert dropped.parent == tmp_path
    assert re.fullmatch(r"oif_1736951400000000000_\d{1,4}\.txt", dropped.name)
    assert dropped.read_bytes() == b"FLATTENEVERYTHING;;;;;;;;;;;;\r\n"
    assert [item.name for item in tmp_path.iterdir()] == [dropped.name]


def test_each_write_gets_its_own_file(tmp_path: Path) -> None:
    sink = FileDropSink(str(tmp_path))

    async def run() -> list[str]:
        return [await sink.write_line(f"CANCEL;ACCOUNT=Sim101;ORDERID={i};;;;;;;;;;") for i in range(5)]

    paths = asyncio.run(run())

    assert len(set(paths)) == 5
    assert len(list(tmp_path.glob("oif_*.txt"))) == 5


def test_write_line_fails_when_folder_is_missing(tmp_path: Path) -> None:
    sink = FileDropSink(str(tmp_path / "missing"))

    assert sink.check_directory() is False
    with pytest.raises(OSError):
        asyncio.run(sink.write_line("FLATTENEVERYTHING;;;;;;;;;;;;"))


def test_check_directory_accepts_existing_folder(tmp_path: Path) -> None:
    assert FileDropSink(str(tmp_path)).check_directory() is True
