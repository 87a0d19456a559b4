import logging
import pytest
from onewire.config import LoggingSettings, OneWireConfig
from onewire.logging_config import LOGGER_NAME, logging_settings, setup_logging

@pytest.fixture
def pkg_logger():
    log = logging.getLogger(LOGGER_NAME)
    saved = (list(log.handlers), log.level, log.propagate)
    log.handlers = []
    yield log
    for h in log.handlers:
        h.close()
    log.handlers, log.level, log.propagate = saved
    if hasattr(log, "_w1_configured"):
        del log._w1_configured

@pytest.fixture
def clean_env(monkeypatch):
    for k in ("W1_LOGGING", "W1_LOG_LEVEL", "W1_LOG_FILE"):
        monkeypatch.delenv(k, raising=False)
    return monkeypatch

def test_disabled_silences_package(pkg_logger):
    log = setup_logging(LoggingSettings(enabled=False))
    assert log is pkg_logger
    assert not log.propagate
    assert [type(h) for h in log.handlers] == [logging.NullHandler]

def test_file_handler_writes_short_names(pkg_logger, tmp_path):
    path = tmp_path / "logs" / "w1.log"
    log = setup_logging(LoggingSettings(level="debug", file=str(path)))
    assert log.level == logging.DEBUG
    logging.getLogger("onewire.session.AsyncReadSession").warning("28-000000000001: read failed (eof)")
    for h in log.handlers:
        h.flush()
    text = path.read_text()
    assert "WARNING [AsyncReadSession." in text
    assert "read failed (eof)" in text

def test_configures_once(pkg_logger, tmp_path):
    setup_logging(LoggingSettings(level="INFO"))
    handlers = list(pkg_logger.handlers)
    setup_logging(LoggingSettings(level="DEBUG", file=str(tmp_path / "w1.log")))
    assert pkg_logger.handlers == handlers
    assert pkg_logger.level == logging.INFO
    assert not (tmp_path / "w1.log").exists()

def test_settings_from_cfg(clean_env):
    cfg = OneWireConfig.model_validate({"logging": {"enabled": False, "level": "DEBUG", "file": "/tmp/w1.log"}})
    assert logging_settings(cfg) == LoggingSettings(enabled=False, level="DEBUG", file="/tmp/w1.log")

def test_env_overrides_cfg(clean_env):
    clean_env.setenv("W1_LOGGING", "1")
    clean_env.setenv("W1_LOG_LEVEL", "WARNING")
    clean_env.setenv("W1_LOG_FILE", "/var/log/w1.log")
    cfg = OneWireConfig.model_validate({"logging": {"enabled": False, "level": "DEBUG"}})
    assert logging_settings(cfg) == LoggingSettings(enabled=True, level="WARNING", file="/var/log/w1.log")

def test_env_disables(clean_env):
    clean_env.setenv("W1_LOGGING", "no")
    assert logging_settings(OneWireConfig()).enabled is False
