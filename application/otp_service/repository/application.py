"""
Application Repository

Read-only access to per-application OTP policies.
"""

from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from otp_service.connections.database import get_db_session
from otp_service.core.exceptions import internal_error
from otp_service.dto.otp import ApplicationSchema
from otp_service.logging.utils import get_app_logger
from otp_service.models.application import Application

logger = get_app_logger("otp_service.application_repository")


class ApplicationRepository:

    async def get_by_id(self, application_id: str) -> Optional[ApplicationSchema]:
        try:
            async with get_db_session(read_only=True) as db:
                row = await db.get(Application, application_id)
                return ApplicationSchema.model_validate(row) if row else None
        except SQLAlchemyError as e:
            logger.error(f"get_application_error | application_id={application_id} error={e}", exc_info=True)
            raise internal_error("Error reading application policy") from e
