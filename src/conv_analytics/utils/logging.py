"""
Structured logging utilities.

Provides JSON logging with request ID propagation and an audit logger for
analytics and conversation lifecycle events.
"""

from __future__ import annotations

import json
import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

from conv_analytics.config import SERVER

# Context variable for request ID propagation
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def generate_request_id() -> str:
    """Generate a unique request ID."""
    return str(uuid.uuid4())


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Add request ID if available
        request_id = request_id_var.get()
        if request_id:
            log_data["request_id"] = request_id

        # Add extra fields
        if hasattr(record, "extra_data"):
            log_data.update(record.extra_data)

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


def setup_logging(
    level: str | None = None,
    json_format: bool = True,
) -> None:
    """
    Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        json_format: Whether to use JSON formatting.
    """
    log_level = getattr(logging, (level or SERVER.LOG_LEVEL).upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)

    if json_format:
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            )
        )

    root_logger.addHandler(console_handler)

    # Set third-party loggers to WARNING
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


class AuditLogger:
    """
    Logger for analytics and conversation lifecycle events.

    Events carry structured fields under ``extra_data`` so the JSON
    formatter emits them as top-level keys.
    """

    def __init__(self) -> None:
        """Initialize audit logger."""
        self._logger = logging.getLogger("conv_analytics.audit")

    def log_analysis(
        self,
        conversation_id: str | None,
        message_count: int,
        sentiment_score: float,
        mood_label: str,
        duration_ms: float,
    ) -> None:
        """
        Log a computed analytics summary.

        Args:
            conversation_id: Stored conversation, or None for ad-hoc input.
            message_count: Number of messages analyzed.
            sentiment_score: Overall sentiment.
            mood_label: User mood bucket.
            duration_ms: Time spent computing.
        """
        self._logger.info(
            "Conversation analyzed",
            extra={
                "extra_data": {
                    "event": "analysis",
                    "conversation_id": conversation_id,
                    "message_count": message_count,
                    "sentiment_score": round(sentiment_score, 4),
                    "mood_label": mood_label,
                    "duration_ms": round(duration_ms, 2),
                }
            },
        )

    def log_conversation_event(
        self,
        event: str,
        conversation_id: str,
        role: str | None = None,
        text_length: int | None = None,
    ) -> None:
        """
        Log a conversation lifecycle event (created, message_added, deleted).

        Message text is never logged, only its length.
        """
        self._logger.info(
            "Conversation event",
            extra={
                "extra_data": {
                    "event": f"conversation_{event}",
                    "conversation_id": conversation_id,
                    "role": role,
                    "text_length": text_length,
                }
            },
        )


# Module-level audit logger instance
audit_logger = AuditLogger()
