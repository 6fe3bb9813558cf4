"""
Pytest configuration and fixtures for OTP service tests.

The orchestrator is exercised against in-memory stores and AsyncMock
collaborators, so no database or network is needed.
"""
import os
import tempfile

os.environ.setdefault("LOG_DIRECTORY", os.path.join(tempfile.gettempdir(), "otp_service_test_logs"))
os.environ.setdefault("SENTRY_ENABLED", "false")
os.environ.setdefault("FIREHOSE_ENABLED", "false")
os.environ.setdefault("DEBUG", "true")

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from otp_service.core.constants import OTPStatus
from otp_service.core.exceptions import internal_error, not_found
from otp_service.dto.integrations import CustomerDTO, NotificationResultDTO
from otp_service.dto.otp import ApplicationSchema, OTPSchema
from otp_service.services.otp_service import OTPService

NOW = datetime(2026, 10, 16, 12, 0, 0, tzinfo=timezone.utc)
MSISDN = "306912345678"
PIN = 482913


class InMemoryOTPRepository:
    """Dict-backed stand-in for OTPRepository with the same async interface"""

    def __init__(self):
        self.records = {}
        self.writes = []
        self.fail_writes = False
        self._next_id = 1

    async def get_by_id(self, otp_id):
        otp = self.records.get(otp_id)
        return otp.model_copy() if otp else None

    async def find_by_msisdn(self, msisdn):
        return [otp.model_copy() for otp in self.records.values() if otp.msisdn == msisdn]

    async def create(self, otp):
        self._write("create", otp)
        otp = otp.model_copy(update={"id": self._next_id})
        self._next_id += 1
        self.records[otp.id] = otp
        return otp.model_copy()

    async def record_attempt(self, otp_id, status, attempt_delta):
        self._write("record_attempt", otp_id)
        stored = self.records.get(otp_id)
        if stored is None:
            raise not_found("OTP not found")
        stored = stored.model_copy(update={
            "attempt_count": stored.attempt_count + attempt_delta,
            "status": status if stored.status == OTPStatus.ACTIVE else stored.status,
        })
        self.records[otp_id] = stored
        return stored.model_copy()

    async def verify(self, otp_id, attempts_allowed):
        self._write("verify", otp_id)
        stored = self.records.get(otp_id)
        if stored is None or stored.status != OTPStatus.ACTIVE or stored.attempt_count > attempts_allowed:
            return None
        stored = stored.model_copy(update={
            "attempt_count": stored.attempt_count + 1,
            "status": OTPStatus.VERIFIED,
        })
        self.records[otp_id] = stored
        return stored.model_copy()

    def _write(self, operation, target):
        self.writes.append((operation, target))
        if self.fail_writes:
            raise internal_error("Error saving OTP")

    def add(self, **overrides):
        fields = dict(
            customer_id="ACC-1",
            msisdn=MSISDN,
            pin=PIN,
            created_on=NOW - timedelta(seconds=10),
            expires=NOW + timedelta(seconds=50),
            status=OTPStatus.ACTIVE,
            attempt_count=0,
            application_id="PPR",
        )
        fields.update(overrides)
        otp = OTPSchema(id=self._next_id, **fields)
        self._next_id += 1
        self.records[otp.id] = otp
        return otp


class InMemoryApplicationRepository:

    def __init__(self):
        self.records = {"PPR": ApplicationSchema(id="PPR", description="Default", attempts_allowed=3)}

    async def get_by_id(self, application_id):
        return self.records.get(application_id)


def _notification_result(channel, destination, message):
    return NotificationResultDTO(success=True, channel=channel, status="SENT")


@pytest.fixture
def otp_repository():
    return InMemoryOTPRepository()


@pytest.fixture
def application_repository():
    return InMemoryApplicationRepository()


@pytest.fixture
def customer_client():
    client = AsyncMock()
    client.get_customer.return_value = CustomerDTO(account_id="ACC-1")
    return client


@pytest.fixture
def number_client():
    client = AsyncMock()
    client.get_number_status.return_value = "VALID"
    return client


@pytest.fixture
def notification_client():
    client = AsyncMock()
    client.send_notification.side_effect = _notification_result
    return client


@pytest.fixture
def otp_service(otp_repository, application_repository, customer_client, number_client, notification_client):
    return OTPService(
        otp_repository=otp_repository,
        application_repository=application_repository,
        customer_client=customer_client,
        number_client=number_client,
        notification_client=notification_client,
        clock=lambda: NOW,
    )
