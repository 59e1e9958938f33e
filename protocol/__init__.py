"""Protocol package: what the pool needs from a node, plus the RabbitMQ client.

``RabbitConnection`` is loaded lazily so code that only deals with the
interfaces (the pool itself, its tests) is not forced to import ``pika``.
"""

import importlib
import sys
from typing import Any

from .connection import Connection, TransportError
from .message import Message
from .response import Response

_LAZY = {"RabbitConnection": "protocol.rabbit_connection"}


def __getattr__(name: str) -> Any:
    if name in _LAZY:
        module = importlib.import_module(_LAZY[name])
        value = getattr(module, name)
        setattr(sys.modules[__name__], name, value)
        return value
    raise AttributeError(name)


__all__ = ["Connection", "TransportError", "Message", "Response", "RabbitConnection"]
