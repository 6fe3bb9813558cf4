"""
Logging configuration for the OTP service.
Firehose-first with a local JSON file fallback.
"""
from otp_service.config.settings import OTPServiceConfigs
configs = OTPServiceConfigs()


class LoggingConfig:

    FIREHOSE_ENABLED = configs.FIREHOSE_ENABLED
    AUDIT_LOGGING_ENABLED = configs.AUDIT_LOGGING_ENABLED
    CAPTURE_RESPONSE_BODY = configs.CAPTURE_RESPONSE_BODY
    LOG_DEBUG_PRINTS = configs.LOG_DEBUG_PRINTS
    LOG_DIRECTORY = configs.LOG_DIRECTORY

    APP_LOGS_STREAM_NAME = configs.APP_LOGS_STREAM_NAME or f"{configs.APP_NAME}-app-logs"
    AUDIT_LOGS_STREAM_NAME = configs.AUDIT_LOGS_STREAM_NAME or f"{configs.APP_NAME}-audit-logs"
    LOG_BUFFER_TIMEOUT = configs.LOG_BUFFER_TIMEOUT

    APP_LOGS_CAPACITY = configs.APP_LOGS_CAPACITY
    AUDIT_LOGS_CAPACITY = configs.AUDIT_LOGS_CAPACITY

    FIREHOSE_REGION_NAME = configs.FIREHOSE_REGION_NAME
    FIREHOSE_ACCESS_KEY_ID = configs.FIREHOSE_ACCESS_KEY_ID
    FIREHOSE_SECRET_ACCESS_KEY = configs.FIREHOSE_SECRET_ACCESS_KEY
    FIREHOSE_RETRY_COUNT = configs.FIREHOSE_RETRY_COUNT
    FIREHOSE_RETRY_DELAY = configs.FIREHOSE_RETRY_DELAY

    @classmethod
    def is_valid_config(cls):
        """Only Firehose needs credentials; the file fallback always works."""
        if cls.FIREHOSE_ENABLED:
            if not cls.FIREHOSE_ACCESS_KEY_ID or not cls.FIREHOSE_SECRET_ACCESS_KEY:
                return False, "Firehose credentials not configured"
        return True, "Configuration is valid"
