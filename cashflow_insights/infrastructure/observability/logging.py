"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from cashflow_insights.config import settings


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

    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_report(
    request_id: str,
    user_id: str,
    transaction_count: int,
    anomaly_count: int,
    projection_confidence: str,
    duration_ms: float,
) -> None:
    """Log structured report outcome for analysis"""
    logging.info(
        "Report generated",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "report_complete",
            "transaction_count": transaction_count,
            "anomaly_count": anomaly_count,
            "projection_confidence": projection_confidence,
            "duration_ms": duration_ms,
        },
    )
