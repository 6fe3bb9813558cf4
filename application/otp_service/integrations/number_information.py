"""
Number information integration.

Asks the external number information service whether an MSISDN is valid.
"""

from typing import Optional

import httpx

from otp_service.core.constants import FaultReason
from otp_service.core.exceptions import OTPException
from otp_service.integrations.http_client import build_async_client

# Logger
from otp_service.logging.utils import get_app_logger
logger = get_app_logger("number_information")

# Settings
from otp_service.config.settings import OTPServiceConfigs
configs = OTPServiceConfigs()


class NumberInformationClient:

    def __init__(self, client: Optional[httpx.AsyncClient] = None, url: Optional[str] = None):
        self.url = url or configs.NUMBER_INFORMATION_URL
        self.client = client or build_async_client()

    async def close(self):
        await self.client.aclose()

    async def get_number_status(self, msisdn: str) -> str:
        """Return the status string for `msisdn`; every failure is NUMBER_INFORMATION_ERROR."""
        try:
            response = await self.client.get(self.url, params={"msisdn": msisdn})
        except httpx.HTTPError as e:
            logger.error(f"number_information_transport_error | msisdn={msisdn} error={e}")
            raise OTPException("Error retrieving msisdn status", FaultReason.NUMBER_INFORMATION_ERROR) from e

        if response.is_error:
            logger.warning(f"number_information_failed | msisdn={msisdn} status_code={response.status_code}")
            raise OTPException("Error retrieving msisdn status", FaultReason.NUMBER_INFORMATION_ERROR)

        status = response.text.strip()
        logger.info(f"number_information_ok | msisdn={msisdn} status={status}")
        return status
