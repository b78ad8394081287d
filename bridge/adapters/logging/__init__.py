from bridge.adapters.logging.ops_logger import OpsEventLogger
from bridge.adapters.logging.setup import configure_logging

__all__ = [
    "OpsEventLogger",
    "configure_logging",
]
