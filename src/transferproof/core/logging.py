"""
Logging setup for transferproof.

Lifecycle records carry the stage they were emitted in (``extra={"stage": ...}``,
usually through :func:`get_stage_logger`); both formatters render it.
"""

import json
import logging
import sys

# Default Logger Name
LOGGER_NAME = "transferproof"

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class StageFormatter(logging.Formatter):
    """Plain text lines, tagged with the lifecycle stage when present."""

    def __init__(self) -> None:
        super().__init__("[%(asctime)s] %(levelname)s [%(name)s] %(message)s", datefmt=DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        stage = getattr(record, "stage", None)
        if stage:
            prefix = f"[{record.name}] "
            line = line.replace(prefix, f"{prefix}({stage}) ", 1)
        return line


class JsonFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": self.formatTime(record, DATE_FORMAT),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        stage = getattr(record, "stage", None)
        if stage:
            payload["stage"] = stage
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def configure_logging(
    level: int | str = logging.INFO,
    json_format: bool = False,
    stream=None,
) -> logging.Logger:
    """
    Configure the transferproof logger.

    Args:
        level: Logging level (e.g., logging.INFO, "DEBUG")
        json_format: Emit JSON lines instead of text
        stream: Output stream, stdout by default

    Returns:
        The configured logger instance.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Re-configuring replaces the previous handler
    if logger.handlers:
        logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(JsonFormatter() if json_format else StageFormatter())
    logger.addHandler(handler)

    logger.propagate = False

    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """Get a child logger of transferproof."""
    if name:
        return logging.getLogger(f"{LOGGER_NAME}.{name}")
    return logging.getLogger(LOGGER_NAME)


def get_stage_logger(logger: logging.Logger, stage: str) -> logging.LoggerAdapter:
    """Adapter that stamps every record with ``stage``."""
    return logging.LoggerAdapter(logger, {"stage": stage})
