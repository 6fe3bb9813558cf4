"""
Logging filters that copy request context onto log records
"""
import logging
from otp_service.middlewares.request_context import request_context


class RequestContextFilter(logging.Filter):
    def filter(self, record):
        record.request_id = getattr(request_context, 'request_id', '') or ''
        record.request_method = getattr(request_context, 'request_method', '') or ''
        record.request_path = getattr(request_context, 'request_path', '') or ''
        record.client_version = getattr(request_context, 'client_version', '') or ''
        return True


class OTPContextFilter(logging.Filter):
    def filter(self, record):
        record.otp_id = getattr(request_context, 'otp_id', '') or ''
        record.msisdn = getattr(request_context, 'msisdn', '') or ''
        return True
