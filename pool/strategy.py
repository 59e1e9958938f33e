import math
from enum import Enum


class Strategy(str, Enum):
    """Delivery guarantee applied to a publish across the pool."""

    # Half + 1 of pool connections must receive a message
    QUORUM = "quorum"
    # At least one connection must receive a message
    AT_LEAST_ONE = "at_least_one"
    # At most one connection can receive a message
    ONLY_ONE = "only_one"
    # All connections must receive a message
    ALL = "all"

    def required(self, total: int) -> int:
        """Amount of connections that must ack for the publish to succeed."""
        if self is Strategy.QUORUM:
            return math.ceil(total / 2) + 1
        if self is Strategy.ALL:
            # an empty pool still needs one ack
            return max(total, 1)
        return 1


def get_strategy(name) -> Strategy:
    """
    Resolve a strategy from its name (case insensitive) or return it as is.
    """
    if isinstance(name, Strategy):
        return name
    try:
        return Strategy(str(name).strip().lower())
    except ValueError:
        raise ValueError(f"Unknown publish strategy: {name}") from None
