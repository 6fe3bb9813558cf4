"""
Application Model
Per-application OTP policy (attempt ceiling)
"""

from sqlalchemy import Column, Integer, String
from otp_service.models.common import CommonModel


class Application(CommonModel):
    __tablename__ = "applications"

    id = Column(String(32), primary_key=True)
    description = Column(String(255), nullable=True)
    attempts_allowed = Column(Integer, nullable=False)
