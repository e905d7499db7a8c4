"""JSON logging configuration for vhost provisioning runs."""

import logging
import os

from pythonjsonlogger import jsonlogger

# "resource" is set through extra= by the catalog engine.
LOG_FIELDS = frozenset({"timestamp", "level", "message", "resource", "exc_info", "funcName", "lineno"})

DEBUG_ENV = "VHOST_SSL_DEBUG"


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter restricted to LOG_FIELDS, with levelname renamed to level."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record["level"] = log_record.pop("levelname", record.levelname)
        for key in list(log_record):
            if key not in LOG_FIELDS:
                del log_record[key]


def _debug_enabled() -> bool:
    return os.environ.get(DEBUG_ENV, "").lower() in ("1", "true", "yes", "on")


def _setup_logger() -> logging.Logger:
    """Initialize and configure the package logger.

    Returns:
        Logger writing JSON lines to stderr, DEBUG when VHOST_SSL_DEBUG is set
    """
    logger = logging.getLogger("vhost_ssl")
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(
        CustomJsonFormatter(
            fmt="%(timestamp)s %(levelname)s %(funcName)s %(lineno)d %(message)s",
            timestamp=True,
        )
    )
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if _debug_enabled() else logging.INFO)
    logger.propagate = False
    return logger


LOGGER = _setup_logger()
