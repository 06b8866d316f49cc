"""Interfaces for external collaborators."""
