"""Logging setup for the ``pagewise`` logger hierarchy.

Modules log through ``logging.getLogger(__name__)``; ``setup_logging`` is
called once by the API lifespan and by the CLI callback.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any

ROOT_LOGGER = "pagewise"

TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
TEXT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Client libraries that log every HTTP request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "urllib3", "qdrant_client", "google_genai")

# LogRecord attributes that are not user-supplied ``extra`` fields
_RECORD_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class JSONLogFormatter(logging.Formatter):
    """One JSON object per record, for log aggregation.

    Fields passed with ``extra=`` (``owner_id``, ``document_id`` ...) are
    copied into the object next to the standard ones.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, TEXT_DATE_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "where": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        entry.update(
            {key: value for key, value in vars(record).items() if key not in _RECORD_ATTRS}
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(
    level: str = "INFO",
    log_file: Path | None = None,
    json_format: bool = False,
) -> logging.Logger:
    """Attach handlers to the ``pagewise`` logger.

    Args:
        level: Level name for pagewise loggers.
        log_file: Also write records to this file.
        json_format: Use ``JSONLogFormatter`` instead of the text format.

    Returns:
        The ``pagewise`` logger.
    """
    formatter = (
        JSONLogFormatter() if json_format else logging.Formatter(TEXT_FORMAT, TEXT_DATE_FORMAT)
    )
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    root = logging.getLogger(ROOT_LOGGER)
    root.handlers.clear()
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.propagate = False

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root
