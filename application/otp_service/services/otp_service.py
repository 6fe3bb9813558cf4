import asyncio
import random
from typing import Callable, List, Optional, Set

from otp_service.core.constants import Channel, FaultReason, OTPStatus, PIN_MAX, PIN_MIN
from otp_service.core.exceptions import OTPException, internal_error, not_found
from otp_service.core.otp_validation import apply_outcome, evaluate_validation
from otp_service.dto.otp import OTPSchema
from otp_service.integrations.customer_service import CustomerServiceClient
from otp_service.integrations.notification_service import NotificationClient
from otp_service.integrations.number_information import NumberInformationClient
from otp_service.logging.utils import get_app_logger
from otp_service.middlewares.request_context import request_context
from otp_service.repository.application import ApplicationRepository
from otp_service.repository.otp import OTPRepository
from otp_service.utils.datetime_helpers import expiry_from, get_utc_now
from otp_service.config.settings import OTPServiceConfigs

logger = get_app_logger(__name__)
configs = OTPServiceConfigs()


class OTPService:
    """
    OTP lifecycle orchestrator:
    - send: concurrent customer / number lookups, PIN generation, persistence
      and notification
    - validate: attempt-limited, expiring state machine
    - resend: re-delivery of the stored PIN over several channels
    - get / get_all: reads
    """

    def __init__(
        self,
        otp_repository: Optional[OTPRepository] = None,
        application_repository: Optional[ApplicationRepository] = None,
        customer_client: Optional[CustomerServiceClient] = None,
        number_client: Optional[NumberInformationClient] = None,
        notification_client: Optional[NotificationClient] = None,
        clock: Callable = get_utc_now,
    ):
        self.otp_repository = otp_repository or OTPRepository()
        self.application_repository = application_repository or ApplicationRepository()
        self.customer_client = customer_client or CustomerServiceClient()
        self.number_client = number_client or NumberInformationClient()
        self.notification_client = notification_client or NotificationClient()
        self.clock = clock
        self.validity_seconds = configs.OTP_VALIDITY_SECONDS
        self.application_id = configs.OTP_DEFAULT_APPLICATION_ID
        self._background_tasks: Set[asyncio.Task] = set()

    def generate_pin(self) -> int:
        """Uniform 6-digit PIN from a per-call generator seeded from OS entropy."""
        return random.Random().randint(PIN_MIN, PIN_MAX)

    async def send(self, msisdn: str) -> OTPSchema:
        """
        Generate an OTP for `msisdn`, store it and notify the number.

        Raises:
            OTPException: CUSTOMER_ERROR / NUMBER_INFORMATION_ERROR when a lookup
                fails (nothing is stored), INTERNAL_ERROR when storage fails
                (nothing is sent)
        """
        request_context.msisdn = msisdn
        logger.info(f"send | msisdn={msisdn}")

        # fail-fast join: the first lookup error is raised at once, the other call is not awaited
        customer, number_status = await asyncio.gather(
            self.customer_client.get_customer(msisdn),
            self.number_client.get_number_status(msisdn),
        )
        logger.info(f"send_lookups_ok | msisdn={msisdn} account_id={customer.account_id} number_status={number_status}")

        pin = self.generate_pin()
        now = self.clock()
        otp = OTPSchema(
            customer_id=customer.account_id,
            msisdn=msisdn,
            pin=pin,
            created_on=now,
            expires=expiry_from(now, self.validity_seconds),
            status=OTPStatus.ACTIVE,
            attempt_count=0,
            application_id=self.application_id,
        )

        # the PIN goes out only once the OTP it belongs to is stored
        saved = await self.otp_repository.create(otp)
        request_context.otp_id = saved.id
        notification = await self.notification_client.send_notification(Channel.AUTO, msisdn, str(pin))

        # the stored OTP stays valid even if this delivery failed; the caller can resend
        if not notification.success:
            logger.warning(f"send_notification_failed | otp_id={saved.id} channel={Channel.AUTO} message={notification.message}")

        logger.info(f"send_ok | otp_id={saved.id} msisdn={msisdn}")
        return saved

    async def validate(self, otp_id: int, pin: int) -> OTPSchema:
        """
        Check `pin` against the stored OTP and move it through its lifecycle.

        On any outcome other than VERIFIED the attempt is recorded in the
        background and an OTPException carrying the mutated OTP is raised.
        """
        request_context.otp_id = otp_id
        logger.info(f"validate | otp_id={otp_id}")

        otp = await self._get_for_validation(otp_id)
        application = await self.application_repository.get_by_id(otp.application_id)
        if application is None:
            logger.error(f"validate_application_missing | otp_id={otp_id} application_id={otp.application_id}")
            raise internal_error("Error validating OTP")

        outcome = evaluate_validation(otp, application, pin, self.clock())
        while outcome.verified:
            saved = await self.otp_repository.verify(otp_id, application.attempts_allowed)
            if saved is not None:
                logger.info(f"validate_ok | otp_id={otp_id} attempt_count={saved.attempt_count}")
                return saved
            # another attempt changed the row since it was read; judge the stored state again
            otp = await self._get_for_validation(otp_id)
            outcome = evaluate_validation(otp, application, pin, self.clock())

        updated = apply_outcome(otp, outcome)
        logger.warning(
            f"validate_failed | otp_id={otp_id} fault_reason={outcome.fault_reason} "
            f"status={updated.status} attempt_count={updated.attempt_count}"
        )
        self._record_attempt_in_background(otp_id, outcome.status, outcome.attempt_delta)
        raise OTPException("Error validating OTP", outcome.fault_reason, updated)

    async def _get_for_validation(self, otp_id: int) -> OTPSchema:
        otp = await self.otp_repository.get_by_id(otp_id)
        if otp is None:
            raise not_found("Error validating OTP")
        return otp

    async def resend(self, otp_id: int, channels: List[Optional[str]], mail: Optional[str] = None) -> OTPSchema:
        """
        Deliver the stored PIN again over every requested channel.

        Dispatches run concurrently and every result is collected; a failed
        channel is logged and does not affect the others. The OTP itself is
        returned unchanged.
        """
        request_context.otp_id = otp_id
        logger.info(f"resend | otp_id={otp_id} channels={channels}")

        otp = await self.otp_repository.get_by_id(otp_id)
        if otp is None:
            raise not_found("Error resending OTP")

        if otp.status != OTPStatus.ACTIVE:
            logger.warning(f"resend_invalid_status | otp_id={otp_id} status={otp.status}")
            raise OTPException("Error resending OTP", FaultReason.INVALID_STATUS)

        dispatches = [
            self.notification_client.send_notification(
                channel,
                mail if channel == Channel.EMAIL else otp.msisdn,
                str(otp.pin),
            )
            for channel in channels
            if channel is not None
        ]
        results = await asyncio.gather(*dispatches)

        failed = [result.channel for result in results if not result.success]
        if failed:
            logger.warning(f"resend_partial_failure | otp_id={otp_id} failed_channels={failed}")
        logger.info(f"resend_ok | otp_id={otp_id} dispatched={len(results) - len(failed)}/{len(results)}")
        return otp

    async def get_all(self, msisdn: str) -> List[OTPSchema]:
        request_context.msisdn = msisdn
        logger.info(f"get_all | msisdn={msisdn}")

        otps = await self.otp_repository.find_by_msisdn(msisdn)
        if not otps:
            raise not_found("OTPs not found")
        return otps

    async def get(self, otp_id: int) -> OTPSchema:
        request_context.otp_id = otp_id
        logger.info(f"get | otp_id={otp_id}")

        otp = await self.otp_repository.get_by_id(otp_id)
        if otp is None:
            raise not_found("OTP not found")
        return otp

    def _record_attempt_in_background(self, otp_id: int, status: str, attempt_delta: int) -> None:
        """Detached write; the caller's error is not held back by it."""
        task = asyncio.create_task(self.otp_repository.record_attempt(otp_id, status, attempt_delta))
        self._background_tasks.add(task)
        task.add_done_callback(lambda t: self._on_background_write_done(t, otp_id))

    def _on_background_write_done(self, task: asyncio.Task, otp_id: int) -> None:
        self._background_tasks.discard(task)
        if task.cancelled():
            logger.warning(f"background_write_cancelled | otp_id={otp_id}")
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"background_write_failed | otp_id={otp_id} error={exc}", exc_info=exc)

    @property
    def pending_writes(self) -> int:
        return len(self._background_tasks)

    async def drain(self) -> None:
        """Wait for detached writes still in flight."""
        if self._background_tasks:
            await asyncio.gather(*list(self._background_tasks), return_exceptions=True)

    async def close(self) -> None:
        await self.drain()
        await asyncio.gather(
            self.customer_client.close(),
            self.number_client.close(),
            self.notification_client.close(),
        )


_otp_service: Optional[OTPService] = None


def get_otp_service() -> OTPService:
    """FastAPI dependency returning the process-wide orchestrator."""
    global _otp_service
    if _otp_service is None:
        _otp_service = OTPService()
    return _otp_service


async def shutdown_otp_service() -> None:
    global _otp_service
    if _otp_service is not None:
        await _otp_service.close()
        _otp_service = None
