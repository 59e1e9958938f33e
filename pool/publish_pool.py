from __future__ import annotations

import logging
import threading
from typing import List, Optional, Sequence, Tuple

from protocol.connection import Connection, TransportError
from protocol.message import Message

from .attempt import PublishAttempt
from .errors import InsufficientAckError
from .strategy import Strategy, get_strategy

pool_logger = logging.getLogger("Pool")

NO_CONNECTIONS = "There are no connections in the pool."


class PublishPool:
    """Fans publishes out to every node of a pool and checks the acks.

    Nodes are contacted one at a time, in the order they were added. Whether a
    publish succeeds depends on how many of them acknowledged it, as required
    by the strategy in use:

    * ``QUORUM``: half of the nodes (rounded up) plus one.
    * ``ALL``: every node.
    * ``AT_LEAST_ONE``: one node.
    * ``ONLY_ONE``: the first node that acknowledges ends the publish, the
      remaining ones are never contacted.
    """

    def __init__(self, *connections: Connection, strategy=Strategy.AT_LEAST_ONE):
        self._connections: List[Connection] = list(connections)
        self._strategy = get_strategy(strategy)
        self._lock = threading.Lock()

    def add_connection(self, connection: Connection) -> "PublishPool":
        """Add a connection to a node; it is contacted after the existing ones."""
        with self._lock:
            self._connections.append(connection)
        return self

    def set_strategy(self, strategy) -> None:
        """Replace the strategy used by publishes that do not name one."""
        resolved = get_strategy(strategy)
        with self._lock:
            self._strategy = resolved

    @property
    def strategy(self) -> Strategy:
        return self._strategy

    @property
    def connections(self) -> Tuple[Connection, ...]:
        with self._lock:
            return tuple(self._connections)

    def __len__(self):
        return len(self.connections)

    def publish(self, topic: str, msg: Message, defer_ms: int = 0, strategy=None) -> None:
        """Publish a single message, deferred by *defer_ms* when it is positive.

        Raises ``InsufficientAckError`` if the strategy requirements are not met.
        """
        if defer_ms < 0:
            raise ValueError(f"Defer must not be negative, got {defer_ms}")
        self._do_publish(topic, [msg], strategy, defer_ms)

    def publish_defer(self, topic: str, msg: Message, defer_ms: int, strategy=None) -> None:
        self.publish(topic, msg, defer_ms=defer_ms, strategy=strategy)

    def multi_publish(self, topic: str, msgs: Sequence[Message], strategy=None) -> None:
        """Publish a batch of messages with a single call per node."""
        msgs = list(msgs)
        if not msgs:
            raise ValueError("Cannot publish an empty batch of messages")
        self._do_publish(topic, msgs, strategy)

    mpublish = multi_publish

    def _do_publish(self, topic: str, msgs: List[Message], strategy: Optional[Strategy], defer_ms: int = 0) -> None:
        with self._lock:
            connections = list(self._connections)
            active = self._strategy if strategy is None else get_strategy(strategy)

        success = 0
        errs: List[str] = []
        attempts: List[PublishAttempt] = []
        if not connections:
            errs.append(NO_CONNECTIONS)

        for connection in connections:
            try:
                response = self._dispatch(connection, topic, msgs, defer_ms)
            except TransportError as e:
                # does not increment the success count
                attempt = PublishAttempt(str(connection), False, error=str(e))
                pool_logger.warning(f"[Pool] {attempt.describe()}")
            else:
                attempt = PublishAttempt(str(connection), response.is_ok(), code=response.code)
                if attempt.succeeded:
                    success += 1
                    pool_logger.debug(f"[Pool] {attempt.describe()}")
                else:
                    pool_logger.warning(f"[Pool] {attempt.describe()} ({response.detail or 'no detail'})")
            attempts.append(attempt)
            errs.append(attempt.describe())

            if active is Strategy.ONLY_ONE and success == 1:
                pool_logger.debug(f"[Pool] Topic '{topic}' received by {connection}, skipping remaining nodes")
                return

        required = active.required(len(connections))
        if required > success:
            error = InsufficientAckError(required, success, errs, attempts)
            pool_logger.error(f"[Pool] Publish to '{topic}' with strategy {active.value} failed: {error}")
            raise error

        pool_logger.debug(
            f"[Pool] Published {len(msgs)} message(s) to '{topic}' | strategy: {active.value} | acks: {success}/{len(connections)}"
        )

    @staticmethod
    def _dispatch(connection: Connection, topic: str, msgs: List[Message], defer_ms: int):
        if len(msgs) > 1:
            return connection.mpublish(topic, msgs)
        if defer_ms == 0:
            return connection.publish(topic, msgs[0])
        return connection.publish_defer(topic, msgs[0], defer_ms)
