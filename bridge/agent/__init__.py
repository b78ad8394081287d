"""Local agent: snapshot webhook, hub link and file-drop command execution."""
