import pytest

from common.config_init import config_publisher
from pool import Strategy

CONFIG = """
[DEFAULT]
LOGGING_LEVEL = DEBUG
PUBLISH_STRATEGY = quorum
TOPIC = orders
BATCH_SIZE = 10

[RABBITMQ]
RABBIT_NODES = rabbitmq-1:5672, rabbitmq-2:5673,
EXCHANGE = orders-exchange
"""

ENV_KEYS = ["LOGGING_LEVEL", "PUBLISH_STRATEGY", "TOPIC", "BATCH_SIZE", "DEFER_MS", "RABBIT_NODES", "EXCHANGE", "HEARTBEAT"]


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    path = tmp_path / "config.ini"
    path.write_text(CONFIG)
    return str(path)


def test_reads_config_file(config_file):
    config = config_publisher(config_file)

    assert config["logging_level"] == "DEBUG"
    assert config["strategy"] is Strategy.QUORUM
    assert config["topic"] == "orders"
    assert config["batch_size"] == 10
    assert config["defer_ms"] == 0
    assert config["nodes"] == ["rabbitmq-1:5672", "rabbitmq-2:5673"]
    assert config["exchange"] == "orders-exchange"
    assert config["heartbeat"] == 500


def test_env_vars_override_file(config_file, monkeypatch):
    monkeypatch.setenv("PUBLISH_STRATEGY", "ONLY_ONE")
    monkeypatch.setenv("RABBIT_NODES", "other:5672")
    monkeypatch.setenv("DEFER_MS", "250")

    config = config_publisher(config_file)

    assert config["strategy"] is Strategy.ONLY_ONE
    assert config["nodes"] == ["other:5672"]
    assert config["defer_ms"] == 250


def test_unknown_strategy_aborts(config_file, monkeypatch):
    monkeypatch.setenv("PUBLISH_STRATEGY", "most")
    with pytest.raises(ValueError, match="Aborting publisher"):
        config_publisher(config_file)


def test_bad_batch_size_aborts(config_file, monkeypatch):
    monkeypatch.setenv("BATCH_SIZE", "0")
    with pytest.raises(ValueError, match="BATCH_SIZE"):
        config_publisher(config_file)


def test_missing_nodes_aborts(tmp_path, monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    path = tmp_path / "config.ini"
    path.write_text("[DEFAULT]\nLOGGING_LEVEL = INFO\nPUBLISH_STRATEGY = all\nTOPIC = t\nBATCH_SIZE = 1\n")

    with pytest.raises(KeyError):
        config_publisher(str(path))
