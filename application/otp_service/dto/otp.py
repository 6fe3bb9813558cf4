from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from otp_service.core.constants import Channel
from otp_service.dto.phone_validations import validate_phone_number


class OTPSchema(BaseModel):
    """In-memory OTP record exchanged between the store and the orchestrator"""
    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None
    customer_id: str
    msisdn: str
    pin: int
    created_on: datetime
    expires: datetime
    status: str
    attempt_count: int = 0
    application_id: str


class ApplicationSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    description: Optional[str] = None
    attempts_allowed: int


class SendOTPRequest(BaseModel):
    """Request model for issuing an OTP"""
    msisdn: str = Field(..., description="Phone number with country code (e.g., 306912345678)")

    @field_validator('msisdn')
    @classmethod
    def validate_msisdn(cls, v):
        return validate_phone_number(v)


class ResendOTPRequest(BaseModel):
    """Channels to resend over; EMAIL requires a mail address"""
    channels: List[Optional[str]] = Field(..., min_length=1)
    mail: Optional[EmailStr] = None

    @field_validator('channels')
    @classmethod
    def validate_channels(cls, v):
        allowed = {Channel.AUTO, Channel.SMS, Channel.EMAIL}
        normalized = []
        for channel in v:
            if channel is None:
                normalized.append(None)
                continue
            channel = channel.strip().upper()
            if channel not in allowed:
                raise ValueError(f"Invalid channel: {channel}")
            normalized.append(channel)
        return normalized


class OTPResponse(BaseModel):
    """Public view of an OTP. The PIN is never returned."""
    id: int
    customer_id: str
    msisdn: str
    created_on: datetime
    expires: datetime
    status: str
    attempt_count: int
    application_id: str

    @classmethod
    def from_schema(cls, otp: OTPSchema) -> "OTPResponse":
        return cls(**otp.model_dump(exclude={"pin"}))


class FaultResponse(BaseModel):
    message: str
    fault_reason: str
    otp: Optional[OTPResponse] = None
