"""Inbound user-activity feed."""
