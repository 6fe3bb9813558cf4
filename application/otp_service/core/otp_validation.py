"""
OTP validation rules.

`evaluate_validation` decides the outcome of one validation attempt without
touching storage; `apply_outcome` produces the mutated OTP. Keeping the
decision pure lets the orchestrator persist the result in one place.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from otp_service.core.constants import FaultReason, OTPStatus
from otp_service.dto.otp import ApplicationSchema, OTPSchema


@dataclass(frozen=True)
class ValidationOutcome:
    status: str
    fault_reason: Optional[str]
    attempt_delta: int

    @property
    def verified(self) -> bool:
        return self.fault_reason is None and self.status == OTPStatus.VERIFIED


def evaluate_validation(otp: OTPSchema, application: ApplicationSchema, pin: int, now: datetime) -> ValidationOutcome:
    """
    Rules are checked in priority order, first match wins:

    1. attempt ceiling exceeded -> TOO_MANY_ATTEMPTS (attempt not counted)
    2. wrong pin                -> INVALID_PIN
    3. status not ACTIVE        -> INVALID_STATUS
    4. past expiry              -> EXPIRED
    5. otherwise                -> VERIFIED

    Terminal statuses are never left, so rule 1 only moves an ACTIVE OTP.
    """
    if otp.attempt_count > application.attempts_allowed:
        status = otp.status if OTPStatus.is_terminal(otp.status) else OTPStatus.TOO_MANY_ATTEMPTS
        return ValidationOutcome(status, FaultReason.TOO_MANY_ATTEMPTS, 0)

    if otp.pin != pin:
        return ValidationOutcome(otp.status, FaultReason.INVALID_PIN, 1)

    if otp.status != OTPStatus.ACTIVE:
        return ValidationOutcome(otp.status, FaultReason.INVALID_STATUS, 1)

    if otp.expires < now:
        return ValidationOutcome(OTPStatus.EXPIRED, FaultReason.EXPIRED, 1)

    return ValidationOutcome(OTPStatus.VERIFIED, None, 1)


def apply_outcome(otp: OTPSchema, outcome: ValidationOutcome) -> OTPSchema:
    return otp.model_copy(update={
        "status": outcome.status,
        "attempt_count": otp.attempt_count + outcome.attempt_delta,
    })
