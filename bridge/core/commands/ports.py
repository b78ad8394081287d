from __future__ import annotations

from typing import Protocol


class CommandSink(Protocol):
    async def write_line(self, line: str) -> str:
        """Hand one instruction line to the trading application; return where it landed."""
        raise NotImplementedError
