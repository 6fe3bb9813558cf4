"""
OTP Model
One row per issued one-time passcode
"""

from sqlalchemy import Column, Integer, String, TIMESTAMP, Index
from otp_service.models.common import CommonModel


class OTP(CommonModel):
    __tablename__ = "otps"

    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_id = Column(String(64), nullable=False)
    msisdn = Column(String(20), nullable=False)
    pin = Column(Integer, nullable=False)
    created_on = Column(TIMESTAMP(timezone=True), nullable=False)
    expires = Column(TIMESTAMP(timezone=True), nullable=False)
    status = Column(String(32), nullable=False)
    attempt_count = Column(Integer, nullable=False, default=0)
    application_id = Column(String(32), nullable=False)

    __table_args__ = (
        Index("ix_otps_msisdn", "msisdn"),
    )
