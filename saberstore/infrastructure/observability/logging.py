"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger

from saberstore.config import settings


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


def log_order_created(
    request_id: str,
    user_id: str,
    order_number: str,
    payment_method: str,
    total_amount: Decimal,
    contract_number: Optional[str],
    duration_ms: float,
) -> None:
    """Log structured order outcome for analysis"""
    logging.info(
        "Order created",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "order_created",
            "order_number": order_number,
            "payment_method": payment_method,
            "total_amount": str(total_amount),
            "currency": settings.currency,
            "contract_number": contract_number,
            "duration_ms": duration_ms,
        },
    )


def log_order_rejected(request_id: str, user_id: str, reason: str, detail: str) -> None:
    """Log an order that was refused and fully rolled back"""
    logging.warning(
        "Order rejected",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "order_rejected",
            "reason": reason,
            "detail": detail,
        },
    )
