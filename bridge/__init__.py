"""Bridge between a desktop trading application and a remote dashboard."""

__version__ = "0.1.0"
