"""Qt helpers binding the timer service to the UI."""
