"""
Logging configuration for SessionGrid.

Probe requests (/healthz, /health) are dropped from the uvicorn access log;
everything else logs to stdout.
"""

import logging
import logging.config
from typing import Any, Dict

HEALTH_PATHS = ("/healthz", "/health")

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
# Thread names tell apart concurrent passes over the same session
DEBUG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(threadName)s] %(message)s"

# uvicorn logger -> handler
UVICORN_LOGGERS = {
    "uvicorn": "default",
    "uvicorn.error": "default",
    "uvicorn.access": "access",
}


def _request_line(record: logging.LogRecord):
    """Method and path of a uvicorn access record, or (None, None)."""
    # uvicorn passes (client_addr, method, full_path, http_version, status_code)
    if isinstance(record.args, tuple) and len(record.args) == 5:
        method, full_path = record.args[1], str(record.args[2])
        return method, full_path.split("?", 1)[0]

    parts = record.getMessage().split('"')
    if len(parts) >= 2:
        request = parts[1].split()
        if len(request) >= 2:
            return request[0], request[1].split("?", 1)[0]
    return None, None


class HealthCheckFilter(logging.Filter):
    """Drops access log lines for health probe requests."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name != "uvicorn.access":
            return True
        method, path = _request_line(record)
        return not (method == "GET" and path in HEALTH_PATHS)


def get_logging_config(level: str = "INFO") -> Dict[str, Any]:
    """dictConfig for uvicorn and the sessiongrid loggers at the given level."""
    level = level.upper()

    loggers: Dict[str, Any] = {
        name: {"handlers": [handler], "level": "INFO", "propagate": False}
        for name, handler in UVICORN_LOGGERS.items()
    }
    loggers["sessiongrid"] = {"handlers": ["default"], "level": level, "propagate": False}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"health_check_filter": {"()": HealthCheckFilter}},
        "formatters": {
            "default": {"format": DEBUG_FORMAT if level == "DEBUG" else DEFAULT_FORMAT},
            "access": {"format": "%(message)s"},
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout",
            },
            "access": {
                "class": "logging.StreamHandler",
                "formatter": "access",
                "stream": "ext://sys.stdout",
                "filters": ["health_check_filter"],
            },
        },
        "loggers": loggers,
        "root": {"level": "INFO", "handlers": ["default"]},
    }
