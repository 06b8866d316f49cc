"""Core domain: entities, events and timing services."""
