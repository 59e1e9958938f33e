from typing import List, Sequence

from protocol.connection import TransportError

from .attempt import PublishAttempt

__all__ = ["TransportError", "InsufficientAckError"]


class InsufficientAckError(Exception):
    """Not enough nodes acknowledged a publish to satisfy its strategy."""

    def __init__(self, required: int, success: int, details: Sequence[str], attempts: Sequence[PublishAttempt] = ()):
        self.required = required
        self.success = success
        self.details: List[str] = list(details)
        self.attempts: List[PublishAttempt] = list(attempts)
        super().__init__(
            f"Required at least {required} nodes to be successful, but only {success} were, details:\n\t"
            + "\n\t".join(self.details)
        )
