from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PublishAttempt:
    """Result of publishing to a single connection of the pool.

    Exactly one of ``code`` (the peer answered) or ``error`` (the transport
    failed before an answer arrived) is set.
    """

    connection: str
    succeeded: bool
    code: Optional[str] = None
    error: Optional[str] = None

    @property
    def transport_failed(self) -> bool:
        return self.error is not None

    def describe(self) -> str:
        if self.transport_failed:
            return f"{self.connection} -> has failed with socket exception: {self.error}."
        return f"{self.connection} -> {self.code}"
