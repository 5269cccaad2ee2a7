"""Exceptions raised by the simulation engine."""


class InvalidHandleError(LookupError):
    """A handle does not refer to an allocated body slot."""

    def __init__(self, handle, reason: str = "slot is not allocated"):
        self.handle = handle
        super().__init__(f"Invalid body handle {handle}: {reason}")
