"""Timing, idle reconciliation and reporting services."""
