"""Adapters binding the core to websockets, the filesystem and loguru."""
