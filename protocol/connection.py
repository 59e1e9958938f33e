"""Abstraction for a single node the pool publishes to.

The pool only depends on this interface, so the broker client can be replaced
without touching the fan-out logic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from .message import Message
from .response import Response


class TransportError(Exception):
    """Connection or socket level failure talking to a single node.

    Connections raise it instead of returning a response; the pool records it
    as a failed attempt and keeps going with the next connection.
    """


class Connection(ABC):
    """Publishing capabilities required from every node in a pool."""

    @abstractmethod
    def publish(self, topic: str, message: Message) -> Response:
        """Publish *message* to *topic*.

        Raises ``TransportError`` when the node could not be reached.
        """

    @abstractmethod
    def publish_defer(self, topic: str, message: Message, defer_ms: int) -> Response:
        """Publish *message* so consumers only see it after *defer_ms*."""

    @abstractmethod
    def mpublish(self, topic: str, messages: Sequence[Message]) -> Response:
        """Publish every message of *messages* to *topic* in one go."""

    @abstractmethod
    def __str__(self) -> str:
        """Stable identifier used in diagnostics."""

    def close(self) -> None:
        pass
