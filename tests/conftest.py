# tests/conftest.py
import pytest

from protocol import Connection, Response, TransportError


class FakeConnection(Connection):
    """Connection answering every call with a fixed outcome and recording calls."""

    def __init__(self, name, outcome="OK"):
        self.name = name
        self.outcome = outcome
        self.calls = []
        self.closed = False

    def _answer(self):
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return Response(self.outcome)

    def publish(self, topic, message):
        self.calls.append(("publish", topic, message))
        return self._answer()

    def publish_defer(self, topic, message, defer_ms):
        self.calls.append(("publish_defer", topic, message, defer_ms))
        return self._answer()

    def mpublish(self, topic, messages):
        self.calls.append(("mpublish", topic, list(messages)))
        return self._answer()

    def close(self):
        self.closed = True

    def __str__(self):
        return self.name


@pytest.fixture
def make_connections():
    """Build fake connections named node-0..node-N from a list of outcomes.

    An outcome is a response code, or an exception instance to raise.
    """

    def _make(*outcomes):
        return [FakeConnection(f"node-{i}", outcome) for i, outcome in enumerate(outcomes)]

    return _make


@pytest.fixture
def down():
    return TransportError("Connection refused")
