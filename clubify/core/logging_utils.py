import json
import logging
import time
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

# Attributes every LogRecord carries; anything else came in through `extra`
_RECORD_ATTRIBUTES = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime", "taskName"}


def setup_logging(log_level: str = "INFO", log_format: str = "text"):
    """
    Configure the root logger once at startup

    Args:
        log_level: DEBUG, INFO, WARNING or ERROR
        log_format: "text" or "json"
    """
    if log_format.lower() == "json":
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    logger.info(f"Logging configured: level={log_level}, format={log_format}")


class JsonFormatter(logging.Formatter):
    """One JSON object per log line, `extra` fields included"""

    def format(self, record):
        log_entry = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRIBUTES:
                continue
            try:
                json.dumps(value)
                log_entry[key] = value
            except (TypeError, ValueError):
                log_entry[key] = str(value)

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False)


class ErrorTracker:
    """Counts errors by type and keeps a short history for diagnostics"""

    def __init__(self, max_history: int = 100):
        self.error_counts: Dict[str, int] = {}
        self.last_errors = []
        self.max_history = max_history

    def track_error(
        self, error_type: str, error_message: str, context: Dict[str, Any] = None
    ):
        self.error_counts[error_type] = self.error_counts.get(error_type, 0) + 1

        self.last_errors.append(
            {
                "timestamp": time.time(),
                "type": error_type,
                "message": error_message,
                "context": context or {},
            }
        )
        if len(self.last_errors) > self.max_history:
            self.last_errors = self.last_errors[-self.max_history :]

        logger.warning(
            f"Error tracked: {error_type}",
            extra={
                "error_type": error_type,
                "error_message": error_message,
                "total_count": self.error_counts[error_type],
                "context": context,
            },
        )

    def get_stats(self) -> Dict[str, Any]:
        return {
            "error_counts": self.error_counts.copy(),
            "total_errors": sum(self.error_counts.values()),
            "unique_error_types": len(self.error_counts),
            "last_errors": self.last_errors[-10:],
        }

    def reset_stats(self):
        self.error_counts.clear()
        self.last_errors.clear()
        logger.info("Error tracking stats reset")


error_tracker = ErrorTracker()


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_business_event(
    event: str,
    entity_type: str,
    entity_id: Optional[int],
    details: Dict[str, Any] = None,
):
    """
    Log a domain event (payments generated, pattern created, ...)

    Args:
        event: Event name
        entity_type: club, team, payment_record, training_session, ...
        entity_id: Entity id
        details: Extra context for reconciliation
    """
    logger.info(
        f"Business event: {event}",
        extra={
            "event": event,
            "entity_type": entity_type,
            "entity_id": entity_id,
            "details": details or {},
            "category": "business_event",
        },
    )
