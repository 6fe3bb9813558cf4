"""
Core constants for the OTP service: lifecycle statuses, fault reasons and
notification channels.
"""


class OTPStatus:
    """OTP lifecycle statuses. ACTIVE is the only non-terminal one."""

    ACTIVE = "ACTIVE"
    VERIFIED = "VERIFIED"
    EXPIRED = "EXPIRED"
    TOO_MANY_ATTEMPTS = "TOO_MANY_ATTEMPTS"

    TERMINAL = frozenset({VERIFIED, EXPIRED, TOO_MANY_ATTEMPTS})

    @classmethod
    def is_terminal(cls, status: str) -> bool:
        return status in cls.TERMINAL


class FaultReason:
    """Classified causes of a failed OTP operation"""

    CUSTOMER_ERROR = "CUSTOMER_ERROR"
    NUMBER_INFORMATION_ERROR = "NUMBER_INFORMATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    TOO_MANY_ATTEMPTS = "TOO_MANY_ATTEMPTS"
    INVALID_PIN = "INVALID_PIN"
    INVALID_STATUS = "INVALID_STATUS"
    EXPIRED = "EXPIRED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class Channel:
    """Notification channels understood by the notification service"""

    AUTO = "AUTO"
    SMS = "SMS"
    EMAIL = "EMAIL"


PIN_MIN = 100000
PIN_MAX = 999999
