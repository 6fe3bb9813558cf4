from otp_service.core.constants import FaultReason


class OTPException(Exception):
    """
    The only error type leaving the OTP orchestrator.

    Carries a classified fault reason and, for validation failures, the OTP
    snapshot after the attempted mutation.
    """

    def __init__(self, message: str, fault_reason: str, otp=None):
        super().__init__(message)
        self.message = message
        self.fault_reason = fault_reason
        self.otp = otp

    def __str__(self):
        return f"{self.message} ({self.fault_reason})"

    @property
    def carries_state(self) -> bool:
        return self.otp is not None and self.fault_reason != FaultReason.NOT_FOUND


def not_found(message: str) -> OTPException:
    return OTPException(message, FaultReason.NOT_FOUND)


def internal_error(message: str) -> OTPException:
    return OTPException(message, FaultReason.INTERNAL_ERROR)
