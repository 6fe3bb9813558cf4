"""
Tests for the pure validation rules.
"""
from datetime import timedelta

from otp_service.core.constants import FaultReason, OTPStatus
from otp_service.core.otp_validation import apply_outcome, evaluate_validation
from otp_service.dto.otp import ApplicationSchema, OTPSchema

from conftest import NOW, MSISDN, PIN

APP = ApplicationSchema(id="PPR", attempts_allowed=3)


def make_otp(**overrides):
    fields = dict(
        id=7,
        customer_id="ACC-1",
        msisdn=MSISDN,
        pin=PIN,
        created_on=NOW - timedelta(seconds=5),
        expires=NOW + timedelta(seconds=55),
        status=OTPStatus.ACTIVE,
        attempt_count=0,
        application_id="PPR",
    )
    fields.update(overrides)
    return OTPSchema(**fields)


class TestEvaluateValidation:

    def test_correct_pin_verifies(self):
        outcome = evaluate_validation(make_otp(), APP, PIN, NOW)
        assert outcome.status == OTPStatus.VERIFIED
        assert outcome.fault_reason is None
        assert outcome.attempt_delta == 1
        assert outcome.verified

    def test_wrong_pin_keeps_status(self):
        outcome = evaluate_validation(make_otp(), APP, PIN + 1, NOW)
        assert outcome.status == OTPStatus.ACTIVE
        assert outcome.fault_reason == FaultReason.INVALID_PIN
        assert outcome.attempt_delta == 1
        assert not outcome.verified

    def test_attempt_ceiling_checked_before_pin(self):
        outcome = evaluate_validation(make_otp(attempt_count=4), APP, PIN, NOW)
        assert outcome.status == OTPStatus.TOO_MANY_ATTEMPTS
        assert outcome.fault_reason == FaultReason.TOO_MANY_ATTEMPTS
        assert outcome.attempt_delta == 0

    def test_attempt_count_equal_to_ceiling_is_still_allowed(self):
        outcome = evaluate_validation(make_otp(attempt_count=3), APP, PIN, NOW)
        assert outcome.status == OTPStatus.VERIFIED

    def test_pin_checked_before_status(self):
        outcome = evaluate_validation(make_otp(status=OTPStatus.VERIFIED), APP, PIN + 1, NOW)
        assert outcome.fault_reason == FaultReason.INVALID_PIN
        assert outcome.status == OTPStatus.VERIFIED

    def test_non_active_status_rejected(self):
        outcome = evaluate_validation(make_otp(status=OTPStatus.EXPIRED), APP, PIN, NOW)
        assert outcome.fault_reason == FaultReason.INVALID_STATUS
        assert outcome.status == OTPStatus.EXPIRED
        assert outcome.attempt_delta == 1

    def test_expired_even_with_correct_pin(self):
        otp = make_otp(expires=NOW - timedelta(seconds=1))
        outcome = evaluate_validation(otp, APP, PIN, NOW)
        assert outcome.status == OTPStatus.EXPIRED
        assert outcome.fault_reason == FaultReason.EXPIRED
        assert outcome.attempt_delta == 1

    def test_expiry_instant_itself_is_still_valid(self):
        outcome = evaluate_validation(make_otp(expires=NOW), APP, PIN, NOW)
        assert outcome.status == OTPStatus.VERIFIED

    def test_terminal_status_not_overwritten_by_attempt_ceiling(self):
        otp = make_otp(status=OTPStatus.VERIFIED, attempt_count=5)
        outcome = evaluate_validation(otp, APP, PIN, NOW)
        assert outcome.fault_reason == FaultReason.TOO_MANY_ATTEMPTS
        assert outcome.status == OTPStatus.VERIFIED


class TestApplyOutcome:

    def test_returns_mutated_copy(self):
        otp = make_otp(attempt_count=2)
        outcome = evaluate_validation(otp, APP, PIN + 1, NOW)
        updated = apply_outcome(otp, outcome)

        assert updated.attempt_count == 3
        assert otp.attempt_count == 2
        assert updated.pin == otp.pin
        assert updated.expires == otp.expires
