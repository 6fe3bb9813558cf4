"""
Logging handlers for the OTP service.
Records are buffered and shipped to Kinesis Firehose in batches; without
Firehose every logger writes JSON lines to a local file.
"""
import logging
import os
import time
from logging.handlers import MemoryHandler

import boto3
from botocore.config import Config

from otp_service.logging.config import LoggingConfig
from otp_service.logging.formatters import AppLogsJSONFormatter, AuditLogsJSONFormatter


def dbg(msg: str) -> None:
    if LoggingConfig.LOG_DEBUG_PRINTS:
        print(msg)


class FireHoseHandler(logging.Handler):
    """Writes batches of formatted records with put_record_batch"""

    def __init__(self, stream_name: str):
        super().__init__()
        self.stream_name = stream_name
        self.retry_count = LoggingConfig.FIREHOSE_RETRY_COUNT
        self.retry_delay = LoggingConfig.FIREHOSE_RETRY_DELAY
        self.client = boto3.client(
            "firehose",
            region_name=LoggingConfig.FIREHOSE_REGION_NAME,
            aws_access_key_id=LoggingConfig.FIREHOSE_ACCESS_KEY_ID,
            aws_secret_access_key=LoggingConfig.FIREHOSE_SECRET_ACCESS_KEY,
            config=Config(connect_timeout=10, read_timeout=30, retries={"max_attempts": 2}),
        )

    def emit(self, record):
        self.bulk_insert([{"Data": self.format(record)}])

    def bulk_insert(self, records) -> bool:
        if not records:
            return True

        for attempt in range(self.retry_count):
            try:
                response = self.client.put_record_batch(DeliveryStreamName=self.stream_name, Records=records)
                failed = response.get("FailedPutCount", 0)
                dbg(f"[Firehose:{self.stream_name}] attempt={attempt + 1} total={len(records)} failed={failed}")
                if failed == 0:
                    return True
            except Exception as e:
                dbg(f"[Firehose:{self.stream_name}] attempt={attempt + 1} error={e}")
            if attempt < self.retry_count - 1:
                time.sleep(self.retry_delay * (2 ** attempt))
        return False


class BufferedFirehoseHandler(MemoryHandler):
    """Flushes on capacity or when the oldest buffered record is older than LOG_BUFFER_TIMEOUT"""

    def __init__(self, stream_name: str, capacity: int, formatter: logging.Formatter):
        target = FireHoseHandler(stream_name)
        super().__init__(capacity=capacity, target=target)
        self.stream_name = stream_name
        self.buffer_timeout = LoggingConfig.LOG_BUFFER_TIMEOUT
        self.last_flush = time.time()
        self.setFormatter(formatter)
        target.setFormatter(formatter)

    def shouldFlush(self, record):
        return (
            len(self.buffer) >= self.capacity
            or time.time() - self.last_flush >= self.buffer_timeout
        )

    def flush(self):
        self.acquire()
        try:
            if self.target and self.buffer:
                dbg(f"[Buffer:{self.stream_name}] flushing count={len(self.buffer)}")
                self.target.bulk_insert([{"Data": self.format(record)} for record in self.buffer])
                self.buffer.clear()
                self.last_flush = time.time()
        finally:
            self.release()


_handlers = {}


def get_local_file_handler(name: str = 'app'):
    os.makedirs(LoggingConfig.LOG_DIRECTORY, exist_ok=True)
    handler = logging.FileHandler(os.path.join(LoggingConfig.LOG_DIRECTORY, f'{name}.log'))
    handler.setFormatter(AuditLogsJSONFormatter() if name.startswith('audit') else AppLogsJSONFormatter())
    return handler


def get_app_handler():
    if 'app' not in _handlers:
        _handlers['app'] = BufferedFirehoseHandler(
            LoggingConfig.APP_LOGS_STREAM_NAME,
            LoggingConfig.APP_LOGS_CAPACITY,
            AppLogsJSONFormatter(),
        )
    return _handlers['app']


def get_audit_handler():
    if not LoggingConfig.FIREHOSE_ENABLED:
        return get_local_file_handler('audit_logs')
    if 'audit' not in _handlers:
        _handlers['audit'] = BufferedFirehoseHandler(
            LoggingConfig.AUDIT_LOGS_STREAM_NAME,
            LoggingConfig.AUDIT_LOGS_CAPACITY,
            AuditLogsJSONFormatter(),
        )
    return _handlers['audit']


def flush_all_handlers():
    for handler in _handlers.values():
        handler.flush()
