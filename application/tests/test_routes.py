"""
HTTP surface tests: FastAPI TestClient with the orchestrator swapped for
one backed by in-memory fakes.
"""
import pytest
from fastapi.testclient import TestClient

from otp_service.core.constants import FaultReason, OTPStatus
from otp_service.core.exceptions import OTPException
from otp_service.main import app
from otp_service.services.otp_service import get_otp_service

from conftest import MSISDN, PIN


@pytest.fixture
def client(otp_service):
    app.dependency_overrides[get_otp_service] = lambda: otp_service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


class TestOTPRoutes:

    def test_send_returns_created_otp_without_pin(self, client):
        response = client.post("/v1/otp", json={"msisdn": "+30 691 234 5678"})

        assert response.status_code == 201
        body = response.json()
        assert body["msisdn"] == MSISDN
        assert body["status"] == OTPStatus.ACTIVE
        assert body["attempt_count"] == 0
        assert "pin" not in body

    def test_send_customer_lookup_failure_is_424(self, client, customer_client, otp_repository):
        customer_client.get_customer.side_effect = OTPException("Error retrieving Customer", FaultReason.CUSTOMER_ERROR)

        response = client.post("/v1/otp", json={"msisdn": MSISDN})

        assert response.status_code == 424
        assert response.json()["fault_reason"] == "CUSTOMER_ERROR"
        assert otp_repository.records == {}

    def test_send_rejects_malformed_msisdn(self, client):
        response = client.post("/v1/otp", json={"msisdn": "12ab"})

        assert response.status_code == 422

    def test_validate_success(self, client, otp_repository):
        otp = otp_repository.add()

        response = client.post(f"/v1/otp/{otp.id}", params={"pin": PIN})

        assert response.status_code == 200
        assert response.json()["status"] == OTPStatus.VERIFIED

    def test_validate_wrong_pin_returns_fault_with_otp(self, client, otp_repository):
        otp = otp_repository.add()

        response = client.post(f"/v1/otp/{otp.id}", params={"pin": PIN + 1})

        assert response.status_code == 400
        body = response.json()
        assert body["fault_reason"] == "INVALID_PIN"
        assert body["otp"]["attempt_count"] == 1
        assert "pin" not in body["otp"]

    def test_validate_too_many_attempts(self, client, otp_repository):
        otp = otp_repository.add(attempt_count=4)

        response = client.post(f"/v1/otp/{otp.id}", params={"pin": PIN})

        assert response.status_code == 429
        assert response.json()["fault_reason"] == "TOO_MANY_ATTEMPTS"

    def test_get_unknown_otp_is_404_without_snapshot(self, client):
        response = client.get("/v1/otp/999")

        assert response.status_code == 404
        body = response.json()
        assert body["fault_reason"] == "NOT_FOUND"
        assert "otp" not in body

    def test_get_otp(self, client, otp_repository):
        otp = otp_repository.add()

        response = client.get(f"/v1/otp/{otp.id}")

        assert response.status_code == 200
        assert response.json()["id"] == otp.id

    def test_get_all_by_number(self, client, otp_repository):
        otp_repository.add()
        otp_repository.add()

        response = client.get("/v1/otp", params={"number": MSISDN})

        assert response.status_code == 200
        assert len(response.json()) == 2

    def test_get_all_unknown_number_is_404(self, client):
        response = client.get("/v1/otp", params={"number": "306900000000"})

        assert response.status_code == 404

    def test_resend(self, client, otp_repository, notification_client):
        otp = otp_repository.add()

        response = client.put(
            f"/v1/otp/{otp.id}",
            params=[("via", "SMS"), ("via", "EMAIL"), ("mail", "user@mail.com")],
        )

        assert response.status_code == 200
        assert notification_client.send_notification.await_count == 2

    def test_resend_rejects_unknown_channel(self, client, otp_repository):
        otp = otp_repository.add()

        response = client.put(f"/v1/otp/{otp.id}", params={"via": "FAX"})

        assert response.status_code == 422

    def test_resend_inactive_otp(self, client, otp_repository):
        otp = otp_repository.add(status=OTPStatus.VERIFIED)

        response = client.put(f"/v1/otp/{otp.id}", params={"via": "SMS"})

        assert response.status_code == 400
        assert response.json()["fault_reason"] == "INVALID_STATUS"


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
