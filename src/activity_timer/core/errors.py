"""Error types raised by the timer core."""


class InvalidOperationError(RuntimeError):
    """Raised when an operation is not valid in the current timer state.

    The operation is rejected before any state is mutated.
    """
