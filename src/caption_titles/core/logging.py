import json
import logging
import sys
from datetime import datetime
from typing import Any, TextIO

from .config import settings


class JSONFormatter(logging.Formatter):
    """
    Formatter that outputs JSON strings after parsing the LogRecord.
    """
    def format(self, record: logging.LogRecord) -> str:
        log_record: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        # Add extra fields passed via extra={"data": ...}
        if hasattr(record, "data"):
            log_record["data"] = record.data  # type: ignore

        return json.dumps(log_record, ensure_ascii=False, default=str)


def setup_logging(level: str | None = None, stream: TextIO | None = None) -> logging.Logger:
    """
    Configures the root logger to use JSON formatting.
    """
    level_name = (level or settings.log_level).upper()
    logger = logging.getLogger()
    logger.setLevel(getattr(logging, level_name, logging.INFO))

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JSONFormatter())

    # Remove existing handlers to avoid duplicates (e.g. from Uvicorn's default config)
    logger.handlers = []
    logger.addHandler(handler)

    logging.getLogger("uvicorn.access").disabled = True
    for noisy_logger in ["httpcore", "httpx", "multipart"]:
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)

    return logger
