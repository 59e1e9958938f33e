import logging
import sys

import common.config_init as config_init
from common.logger import config_logger
from pool import PublishPool
from protocol import RabbitConnection
from publisher.publisher import Publisher


def main():
    config = config_init.config_publisher()
    config_logger(config["logging_level"])

    logging.debug(f"action: config | result: success | nodes: {config['nodes']} | topic: {config['topic']} | "
                  f"strategy: {config['strategy'].value} | batch_size: {config['batch_size']}")

    publisher = None
    ok = False
    try:
        publisher = Publisher(build_pool(config), config["topic"], config["batch_size"], config["defer_ms"])
        ok = publisher.run(sys.stdin)
    except KeyboardInterrupt:
        logging.info("Publisher stopped by user")
    except Exception as e:
        logging.error(f"Publisher error: {e}", exc_info=True)
    finally:
        if publisher:
            publisher.stop()
        logging.info("Publisher stopped")

    return 0 if ok else 1


def build_pool(config):
    pool = PublishPool(strategy=config["strategy"])
    for address in config["nodes"]:
        pool.add_connection(
            RabbitConnection.from_address(address, exchange=config["exchange"], heartbeat=config["heartbeat"])
        )
    return pool


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    logging.info("Starting publisher module")
    sys.exit(main())
