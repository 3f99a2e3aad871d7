"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger
from nudgepal.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_health_snapshot(
    request_id: str,
    status: str,
    health_score: float,
    percentage_used: float,
    duration_ms: float,
) -> None:
    """Log structured budget health outcome"""
    logging.info(
        "Budget health computed",
        extra={
            "request_id": request_id,
            "step": "budget_health",
            "health_status": status,
            "health_score": health_score,
            "percentage_used": round(percentage_used, 2),
            "duration_ms": duration_ms,
        },
    )


def log_bill_event(request_id: str, event: str, bill_id: Optional[str] = None) -> None:
    """Log a bill lifecycle event (added, updated, paid, deleted, reminders_rescheduled)"""
    logging.info(
        f"Bill {event}",
        extra={
            "request_id": request_id,
            "step": "bill_event",
            "bill_event": event,
            "bill_id": bill_id,
        },
    )
