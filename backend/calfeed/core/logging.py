import json
import logging
from typing import Any

# Counters a refresh cycle attaches through `extra=`
FEED_FIELDS = ("source", "total", "kept", "removed", "corrupt", "phrase", "summary")


class JsonFormatter(logging.Formatter):
    """One JSON object per line, with the refresh counters when present."""

    def format(self, record: logging.LogRecord) -> str:
        log_record: dict[str, Any] = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in FEED_FIELDS:
            if hasattr(record, name):
                log_record[name] = getattr(record, name)
        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(log_record, ensure_ascii=False, default=str)


def configure_logging(level: str = "INFO") -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level.upper())
