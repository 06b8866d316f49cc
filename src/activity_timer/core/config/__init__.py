"""Configuration for the activity timer."""
