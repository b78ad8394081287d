from bridge.core.link.reconnect import BackoffPolicy, LinkState, ReconnectStateMachine, Sleep

__all__ = [
    "BackoffPolicy",
    "LinkState",
    "ReconnectStateMachine",
    "Sleep",
]
