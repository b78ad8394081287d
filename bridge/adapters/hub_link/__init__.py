"""Outbound persistent connection from the agent to the hub."""

from bridge.adapters.hub_link.ws_link import (
    Dialer,
    HubConnection,
    HubLink,
    HubLinkConfig,
    websocket_dialer,
)

__all__ = [
    "Dialer",
    "HubConnection",
    "HubLink",
    "HubLinkConfig",
    "websocket_dialer",
]
