"""
Logging entry points for commsgate.

Every module gets its logger through get_app_logger(__name__); request audit
records go through get_audit_logger().
"""
import atexit
import logging

from commsgate.logging.config import LoggingConfig
from commsgate.logging.filters import RequestContextFilter, DeliveryContextFilter
from commsgate.logging.handlers import get_app_handler, get_audit_handler, flush_handlers
from commsgate.logging.slack_handler import slack_handler

AUDIT_LOGGER_NAME = "commsgate.audit"

_context_filter = RequestContextFilter()
_delivery_filter = DeliveryContextFilter()


def _attach_filters(handler: logging.Handler, *filters: logging.Filter) -> logging.Handler:
    for log_filter in filters:
        if log_filter not in handler.filters:
            handler.addFilter(log_filter)
    return handler


def get_app_logger(name: str | None = None) -> logging.Logger:
    logger = logging.getLogger(name or "commsgate")
    if not logger.handlers:
        handler = _attach_filters(get_app_handler(), _context_filter, _delivery_filter)
        logger.addHandler(handler)
        logger.addHandler(slack_handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
    return logger


def get_audit_logger() -> logging.Logger:
    logger = logging.getLogger(AUDIT_LOGGER_NAME)
    if not logger.handlers:
        logger.addHandler(_attach_filters(get_audit_handler(), _context_filter))
        logger.setLevel(logging.INFO)
        logger.propagate = False
    return logger


def mask_phone(phone: str | None) -> str:
    """Keep only the last 4 digits of a phone number for log lines"""
    if not phone:
        return ""
    digits = "".join(ch for ch in phone if ch.isdigit())
    if len(digits) <= 4:
        return "***" + digits
    return "***" + digits[-4:]


def mask_email(email: str | None) -> str:
    if not email or "@" not in email:
        return "***"
    local, domain = email.split("@", 1)
    return f"{local[:2]}***@{domain}"


def initialize_logging():
    is_valid, message = LoggingConfig.is_valid_config()
    if not is_valid:
        print(f"Warning: {message}")
    atexit.register(flush_handlers)
    print("Logging system initialized (commsgate)")
