"""Exception types raised when a generated dungeon breaks its own guarantees."""


class GenerationInvariantViolation(RuntimeError):
    """A structural guarantee of the generator did not hold.

    Seeing this error means an upstream stage is buggy; it is never part of
    ordinary graceful degradation such as placing fewer rooms than requested.
    """

    def __init__(self, message: str, violations: list[str] | None = None) -> None:
        super().__init__(message)
        self.violations: list[str] = list(violations or [])
