"""Personal activity timer with idle-time reconciliation."""

__version__ = "0.1.0"
