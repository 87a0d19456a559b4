from __future__ import annotations
import logging, os, sys
from logging.handlers import RotatingFileHandler

from onewire.config import LoggingSettings

LOGGER_NAME = "onewire"
FORMAT = "%(asctime)s %(levelname)s [%(shortname)s.%(funcName)s] %(message)s"

class ShortFormatter(logging.Formatter):
    """Exposes %(shortname)s, the class part of logger names such as onewire.session.AsyncReadSession."""
    def format(self, record: logging.LogRecord) -> str:
        record.shortname = record.name.rsplit('.', 1)[-1]
        return super().format(record)

def setup_logging(settings: LoggingSettings | None = None) -> logging.Logger:
    """
    Attach handlers to the 'onewire' logger, once. Later calls return the
    logger untouched so applications and libraries can both call it.
    Disabled logging silences the package without touching the root logger.
    """
    log = logging.getLogger(LOGGER_NAME)
    if getattr(log, "_w1_configured", False):
        return log
    settings = settings or LoggingSettings()

    if not settings.enabled:
        log.addHandler(logging.NullHandler())
        log.propagate = False
    else:
        log.setLevel(settings.level.upper())
        formatter = ShortFormatter(fmt=FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
        sh = logging.StreamHandler(stream=sys.stdout)
        sh.setFormatter(formatter)
        log.addHandler(sh)
        if settings.file:
            try:
                os.makedirs(os.path.dirname(settings.file) or ".", exist_ok=True)
                fh = RotatingFileHandler(settings.file, maxBytes=512_000, backupCount=3)
                fh.setFormatter(formatter)
                log.addHandler(fh)
            except OSError as e:
                log.warning("Cannot open log file %s: %s", settings.file, e)
        log.propagate = False

    log._w1_configured = True
    return log

def logging_settings(cfg) -> LoggingSettings:
    """
    cfg.logging with environment overrides applied:
      W1_LOGGING=1|0, W1_LOG_LEVEL=DEBUG|INFO|..., W1_LOG_FILE=/path/to/log
    """
    base = getattr(cfg, "logging", None) or LoggingSettings()
    update = {}
    enabled = os.getenv("W1_LOGGING")
    if enabled is not None:
        update["enabled"] = enabled.lower() not in ("0", "false", "no")
    if os.getenv("W1_LOG_LEVEL"):
        update["level"] = os.environ["W1_LOG_LEVEL"]
    if os.getenv("W1_LOG_FILE"):
        update["file"] = os.environ["W1_LOG_FILE"]
    return base.model_copy(update=update)
