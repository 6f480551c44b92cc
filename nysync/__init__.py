"""NYS legislative bill sync."""

__version__ = "0.1.0"
