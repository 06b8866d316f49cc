"""Durable activity storage."""
