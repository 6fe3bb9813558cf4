"""
Logging utilities for the OTP service
"""
import atexit
import logging

from otp_service.logging.config import LoggingConfig
from otp_service.logging.handlers import get_app_handler, get_audit_handler, get_local_file_handler, flush_all_handlers
from otp_service.logging.filters import RequestContextFilter, OTPContextFilter
from otp_service.logging.slack_handler import slack_handler


def get_app_logger(name: str = 'otp_service'):
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = get_app_handler() if LoggingConfig.FIREHOSE_ENABLED else get_local_file_handler(name.replace('.', '_'))
        if not handler.filters:
            handler.addFilter(RequestContextFilter())
            handler.addFilter(OTPContextFilter())
        logger.addHandler(handler)
        logger.addHandler(slack_handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
    return logger


def init_audit_logger():
    logger = logging.getLogger('otp_service.audit')
    if not logger.handlers:
        handler = get_audit_handler()
        if not handler.filters:
            handler.addFilter(RequestContextFilter())
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
    return logger


def initialize_logging():
    is_valid, message = LoggingConfig.is_valid_config()
    if not is_valid:
        print(f"Warning: {message}")
    atexit.register(flush_all_handlers)
    print("Logging system initialized (OTP service)")
