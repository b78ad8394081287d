from __future__ import annotations

import os
import sys
from typing import Optional

from loguru import logger


def configure_logging(level: Optional[str] = None, journal_path: Optional[str] = None) -> None:
    """Log to stdout and, when a journal path is given, to a serialized JSONL file."""
    logger.remove()
    logger.add(sys.stdout, level=(level or os.getenv("LOG_LEVEL", "INFO")).upper())
    if journal_path:
        directory = os.path.dirname(journal_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        logger.add(journal_path, level="INFO", serialize=True, enqueue=True)
