from __future__ import annotations

import asyncio
import os
import random
import time
from pathlib import Path
from typing import Callable, Optional

from loguru import logger

from bridge.core.commands.encoding import OIF_LINE_TERMINATOR


def default_incoming_dir() -> str:
    return str(Path.home() / "Documents" / "NinjaTrader 8" / "incoming")


class FileDropSink:
    """
    Drops one instruction file per command into the trading application's
    incoming folder.

    The file is written under a dot-prefixed temporary name and renamed into
    place, so the watcher only ever sees complete files.
    """

    def __init__(
        self,
        directory: str,
        *,
        clock_ns: Callable[[], int] = time.time_ns,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._directory = Path(os.path.expanduser(directory))
        self._clock_ns = clock_ns
        self._rng = rng or random.Random()

    @property
    def directory(self) -> Path:
        return self._directory

    def check_directory(self) -> bool:
        if self._directory.is_dir():
            return True
        logger.warning("Trading application incoming folder does not exist at {}", self._directory)
        return False

    def next_filename(self) -> str:
        return f"oif_{self._clock_ns()}_{self._rng.randrange(10000)}.txt"

    async def write_line(self, line: str) -> str:
        return await asyncio.to_thread(self._write, line)

    def _write(self, line: str) -> str:
        final_path = self._directory / self.next_filename()
        temp_path = final_path.with_name(f".{final_path.name}.part")
        with open(temp_path, "w", encoding="utf-8", newline="") as handle:
            handle.write(line + OIF_LINE_TERMINATOR)
        try:
            os.replace(temp_path, final_path)
        except OSError:
            temp_path.unlink(missing_ok=True)
            raise
        return str(final_path)
