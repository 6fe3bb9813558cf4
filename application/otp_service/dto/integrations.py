from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CustomerDTO(BaseModel):
    """Subset of the customer service response the OTP flow needs"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    account_id: str = Field(..., alias="accountId")

    @field_validator('account_id', mode='before')
    @classmethod
    def stringify_account_id(cls, v):
        return str(v) if v is not None else v


class NotificationRequestForm(BaseModel):
    channel: str
    destination: str
    message: str


class NotificationResultDTO(BaseModel):
    model_config = ConfigDict(extra="ignore")

    success: bool
    channel: Optional[str] = None
    status: Optional[str] = None
    message: Optional[str] = None
