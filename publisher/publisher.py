import logging

from pool import InsufficientAckError, PublishPool
from protocol import Message


class Publisher:
    """
    Reads messages from a line based source and publishes them to the pool,
    grouping them in batches of at most *batch_size* messages.
    """

    def __init__(self, pool: PublishPool, topic, batch_size=1, defer_ms=0):
        self.pool = pool
        self.topic = topic
        if batch_size < 1:
            raise ValueError(f"Batch size must be at least 1, got {batch_size}")
        self.batch_size = batch_size
        self.defer_ms = defer_ms
        self.published = 0
        self.failed = 0

    def run(self, source):
        """Publish every non empty line of *source*. Returns True if nothing failed."""
        batch = []
        for line in source:
            line = line.rstrip("\r\n")
            if not line:
                continue
            batch.append(Message(line))
            if len(batch) >= self.batch_size:
                self._flush(batch)
                batch = []
        if batch:
            self._flush(batch)

        logging.info(f"action: publish | result: done | topic: {self.topic} | published: {self.published} | failed: {self.failed}")
        return self.failed == 0

    def _flush(self, batch):
        try:
            if len(batch) == 1:
                self.pool.publish(self.topic, batch[0], defer_ms=self.defer_ms)
            else:
                self.pool.multi_publish(self.topic, batch)
            self.published += len(batch)
        except InsufficientAckError as e:
            self.failed += len(batch)
            logging.error(f"action: publish | result: fail | topic: {self.topic} | messages: {len(batch)} | error: {e}")

    def stop(self):
        for connection in self.pool.connections:
            connection.close()
        logging.info("Publisher connections closed")
