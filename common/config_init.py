from configparser import ConfigParser
import logging
import os

from pool.strategy import get_strategy

CONFIG_FILE = "config.ini"

def config_publisher(config_file=CONFIG_FILE):
    """ Parse env variables or config file to find program config params

    Function that search and parse program configuration parameters in the
    program environment variables first and the in a config file.
    If at least one of the config parameters is not found a KeyError exception
    is thrown. If a parameter could not be parsed, a ValueError is thrown.
    If parsing succeeded, the function returns a dict with config parameters
    """
    config = ConfigParser(os.environ, interpolation=None)
    # If config file does not exist the original config object is not modified
    config.read(config_file)

    config_params = {}

    try:
        # LOGGING
        config_params["logging_level"] = os.getenv('LOGGING_LEVEL', config["DEFAULT"]["LOGGING_LEVEL"])

        # PUBLISHING
        config_params["strategy"] = get_strategy(os.getenv('PUBLISH_STRATEGY', config["DEFAULT"]["PUBLISH_STRATEGY"]))
        config_params["topic"] = os.getenv('TOPIC', config["DEFAULT"]["TOPIC"])
        config_params["batch_size"] = int(os.getenv('BATCH_SIZE', config["DEFAULT"]["BATCH_SIZE"]))
        config_params["defer_ms"] = int(os.getenv('DEFER_MS', config["DEFAULT"].get("DEFER_MS", "0")))

        # RABBITMQ NODES
        nodes = os.getenv('RABBIT_NODES', config["RABBITMQ"]["RABBIT_NODES"])
        config_params["nodes"] = [node.strip() for node in nodes.split(",") if node.strip()]
        config_params["exchange"] = os.getenv('EXCHANGE', config["RABBITMQ"].get("EXCHANGE", ""))
        config_params["heartbeat"] = int(os.getenv('HEARTBEAT', config["RABBITMQ"].get("HEARTBEAT", "500")))

    except KeyError as e:
        raise KeyError(f"Required key was not found in {config_file} or Env Vars. Error: {e} .Aborting publisher")
    except ValueError as e:
        raise ValueError(f"Key could not be parsed in {config_file} or Env Vars. Error: {e}. Aborting publisher")

    if config_params["batch_size"] < 1:
        raise ValueError(f"BATCH_SIZE must be at least 1, got {config_params['batch_size']}. Aborting publisher")
    if config_params["defer_ms"] < 0:
        raise ValueError(f"DEFER_MS must not be negative, got {config_params['defer_ms']}. Aborting publisher")

    logging.debug(f"Publisher config initialized. Nodes: {config_params['nodes']}")
    return config_params
