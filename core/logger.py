# core/logger.py
import logging
from datetime import datetime

import structlog
from sqlalchemy.orm import Session

from models.audit_log import AuditLog

logger = structlog.get_logger(__name__)


def configure_logging(level: str = "INFO"):
    """Set up structlog key-value output once at startup."""
    logging.basicConfig(format="%(message)s", level=level.upper())
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level.upper())),
        cache_logger_on_first_use=True,
    )

    # Suppress noisy library loggers
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)


def log_action(db: Session, user_id: int, action: str, order_id: int = None):
    """Record a user action in the audit log as part of the caller's transaction."""
    db.add(AuditLog(user_id=user_id, order_id=order_id, action=action, timestamp=datetime.utcnow()))
    logger.info(action, user_id=user_id, order_id=order_id)
