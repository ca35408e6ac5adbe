"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from billboard_billing.config import settings


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

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_distribution(
    request_id: str,
    operation: str,
    mode: str,
    total: str,
    installment_count: int,
    duration_ms: float,
) -> None:
    """Log a completed distribution for analysis"""
    logging.info(
        "Distribution completed",
        extra={
            "request_id": request_id,
            "step": "distribution_complete",
            "operation": operation,
            "mode": mode,
            "total": total,
            "installment_count": installment_count,
            "duration_ms": duration_ms,
        },
    )


def log_plan_saved(request_id: str, contract_id: str, total: str, installment_count: int) -> None:
    """Log a persisted payment plan"""
    logging.info(
        "Payment plan saved",
        extra={
            "request_id": request_id,
            "step": "plan_saved",
            "contract_id": contract_id,
            "total": total,
            "installment_count": installment_count,
        },
    )
