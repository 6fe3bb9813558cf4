"""
OTP Repository

Handles database operations for OTP records.
"""

from typing import List, Optional

from sqlalchemy import case, select, update
from sqlalchemy.exc import SQLAlchemyError

from otp_service.connections.database import get_db_session
from otp_service.core.constants import OTPStatus
from otp_service.core.exceptions import internal_error, not_found
from otp_service.dto.otp import OTPSchema
from otp_service.logging.utils import get_app_logger
from otp_service.models.otp import OTP
from otp_service.utils.datetime_helpers import ensure_aware

logger = get_app_logger("otp_service.otp_repository")


def _to_schema(row: OTP) -> OTPSchema:
    otp = OTPSchema.model_validate(row)
    return otp.model_copy(update={
        "created_on": ensure_aware(otp.created_on),
        "expires": ensure_aware(otp.expires),
    })


class OTPRepository:
    """Repository for OTP records"""

    async def get_by_id(self, otp_id: int) -> Optional[OTPSchema]:
        try:
            async with get_db_session(read_only=True) as db:
                row = await db.get(OTP, otp_id)
                return _to_schema(row) if row else None
        except SQLAlchemyError as e:
            logger.error(f"get_by_id_error | otp_id={otp_id} error={e}", exc_info=True)
            raise internal_error("Error reading OTP") from e

    async def find_by_msisdn(self, msisdn: str) -> List[OTPSchema]:
        try:
            async with get_db_session(read_only=True) as db:
                result = await db.execute(
                    select(OTP).where(OTP.msisdn == msisdn).order_by(OTP.created_on.desc())
                )
                rows = result.scalars().all()
                logger.info(f"find_by_msisdn | msisdn={msisdn} count={len(rows)}")
                return [_to_schema(row) for row in rows]
        except SQLAlchemyError as e:
            logger.error(f"find_by_msisdn_error | msisdn={msisdn} error={e}", exc_info=True)
            raise internal_error("Error reading OTPs") from e

    async def create(self, otp: OTPSchema) -> OTPSchema:
        """Insert a new OTP; pin and expiry are fixed from here on."""
        try:
            async with get_db_session() as db:
                row = OTP(**otp.model_dump(exclude={"id"}))
                db.add(row)
                await db.flush()
                logger.info(f"otp_created | otp_id={row.id} msisdn={row.msisdn}")
                return _to_schema(row)
        except SQLAlchemyError as e:
            logger.error(f"create_error | msisdn={otp.msisdn} error={e}", exc_info=True)
            raise internal_error("Error saving OTP") from e

    async def record_attempt(self, otp_id: int, status: str, attempt_delta: int) -> OTPSchema:
        """
        Add `attempt_delta` to the stored attempt count and move an ACTIVE OTP
        to `status`, in a single UPDATE.

        The increment is computed by the database, so concurrent attempts on
        the same OTP are all counted. A terminal status is kept as it is.
        """
        stmt = (
            update(OTP)
            .where(OTP.id == otp_id)
            .values(
                attempt_count=OTP.attempt_count + attempt_delta,
                status=case((OTP.status == OTPStatus.ACTIVE, status), else_=OTP.status),
            )
            .returning(OTP)
        )
        try:
            async with get_db_session() as db:
                row = (await db.execute(stmt)).scalar_one_or_none()
                if row is None:
                    raise not_found("OTP not found")
                logger.info(f"otp_attempt_recorded | otp_id={otp_id} status={row.status} attempt_count={row.attempt_count}")
                return _to_schema(row)
        except SQLAlchemyError as e:
            logger.error(f"record_attempt_error | otp_id={otp_id} error={e}", exc_info=True)
            raise internal_error("Error saving OTP") from e

    async def verify(self, otp_id: int, attempts_allowed: int) -> Optional[OTPSchema]:
        """
        Mark the OTP VERIFIED and count the attempt, but only while it is still
        ACTIVE and within `attempts_allowed`.

        Returns None when a concurrent attempt changed the row first.
        """
        stmt = (
            update(OTP)
            .where(
                OTP.id == otp_id,
                OTP.status == OTPStatus.ACTIVE,
                OTP.attempt_count <= attempts_allowed,
            )
            .values(status=OTPStatus.VERIFIED, attempt_count=OTP.attempt_count + 1)
            .returning(OTP)
        )
        try:
            async with get_db_session() as db:
                row = (await db.execute(stmt)).scalar_one_or_none()
                if row is None:
                    logger.warning(f"otp_verify_conflict | otp_id={otp_id}")
                    return None
                logger.info(f"otp_verified | otp_id={otp_id} attempt_count={row.attempt_count}")
                return _to_schema(row)
        except SQLAlchemyError as e:
            logger.error(f"verify_error | otp_id={otp_id} error={e}", exc_info=True)
            raise internal_error("Error saving OTP") from e
