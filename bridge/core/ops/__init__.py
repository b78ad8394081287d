"""Operational events emitted by the agent and the hub."""

from bridge.core.ops.events import (
    AgentConnected,
    AgentDisconnected,
    AuthRejected,
    CommandAcknowledged,
    CommandDropped,
    CommandExecuted,
    HubLinkAttempt,
    HubLinkClosed,
    HubLinkEstablished,
    HubLinkFailed,
    MessageDropped,
    SnapshotRejected,
)

__all__ = [
    "AgentConnected",
    "AgentDisconnected",
    "AuthRejected",
    "CommandAcknowledged",
    "CommandDropped",
    "CommandExecuted",
    "HubLinkAttempt",
    "HubLinkClosed",
    "HubLinkEstablished",
    "HubLinkFailed",
    "MessageDropped",
    "SnapshotRejected",
]
