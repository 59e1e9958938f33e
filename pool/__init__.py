"""Publishing to a pool of broker nodes with a configurable delivery guarantee."""

from .attempt import PublishAttempt
from .errors import InsufficientAckError, TransportError
from .publish_pool import PublishPool
from .strategy import Strategy, get_strategy

__all__ = [
    "PublishAttempt",
    "InsufficientAckError",
    "TransportError",
    "PublishPool",
    "Strategy",
    "get_strategy",
]
