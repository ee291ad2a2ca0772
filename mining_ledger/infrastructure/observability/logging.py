"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from mining_ledger.config import settings


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


def log_score_outcome(
    request_id: str,
    org_id: str,
    score: int,
    grade: str,
    cached: bool,
) -> None:
    """Log how a financial-health request was served"""
    logging.info(
        "Financial health served",
        extra={
            "request_id": request_id,
            "org_id": org_id,
            "step": "financial_health",
            "score": score,
            "grade": grade,
            "source": "cache" if cached else "computed",
        },
    )


def log_loan_decision(
    request_id: str,
    org_id: str,
    loan_id: str,
    amount: float,
    status: str,
) -> None:
    """Log structured loan decision outcome for analysis"""
    logging.info(
        "Loan application recorded",
        extra={
            "request_id": request_id,
            "org_id": org_id,
            "loan_id": loan_id,
            "step": "loan_decision",
            "amount": amount,
            "loan_status": status,
        },
    )


def log_access_denied(request_id: str, user_id: str, org_id: str | None, reason: str) -> None:
    logging.warning(
        "Organization access denied",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "org_id": org_id,
            "reason": reason,
        },
    )
