"""Event types and dispatching."""
