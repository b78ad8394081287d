"""Transport-agnostic building blocks shared by the agent and the hub."""
