"""Logging configuration with JSON formatting."""

import json
import logging
import sys
from typing import Any, Dict


class ColorCodes:
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    BOLD = "\033[1m"


LEVEL_COLORS = {
    "DEBUG": ColorCodes.BLUE,
    "INFO": ColorCodes.GREEN,
    "WARNING": ColorCodes.YELLOW,
    "ERROR": ColorCodes.RED + ColorCodes.BOLD,
    "CRITICAL": ColorCodes.MAGENTA + ColorCodes.BOLD,
}


class JsonFormatter(logging.Formatter):
    """Format log records as color-coded JSON."""

    def __init__(self, color: bool = True):
        super().__init__()
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        output = {
            "ts": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
        }

        # Pipeline code logs dict payloads keyed by "event"
        if isinstance(record.msg, dict):
            output.update(record.msg)
        else:
            output["msg"] = record.getMessage()

        if hasattr(record, "data"):
            output["data"] = record.data

        json_str = json.dumps(output, default=str)
        if not self.color:
            return json_str

        color = LEVEL_COLORS.get(record.levelname, "")
        return f"{color}{json_str}{ColorCodes.RESET}"


def configure_logging(level: str = "INFO") -> None:
    """Set up application logging with JSON formatting on stderr."""
    app_logger = logging.getLogger("just_kube_api")
    app_logger.setLevel(getattr(logging, level.upper()))

    if not app_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(JsonFormatter(color=sys.stderr.isatty()))
        app_logger.addHandler(handler)
        app_logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(f"just_kube_api.{name}")


def log_with_data(
    logger: logging.Logger, level: int, msg: str, data: Dict[str, Any] = None
):
    """Log a message with optional structured data."""
    if data:
        logger.log(level, msg, extra={"data": data})
    else:
        logger.log(level, msg)
