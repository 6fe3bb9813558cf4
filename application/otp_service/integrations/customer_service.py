"""
Customer service integration.

Resolves a phone number to the customer's account identifier.
"""

from typing import Optional

import httpx
from pydantic import ValidationError

from otp_service.core.constants import FaultReason
from otp_service.core.exceptions import OTPException
from otp_service.dto.integrations import CustomerDTO
from otp_service.integrations.http_client import build_async_client

# Logger
from otp_service.logging.utils import get_app_logger
logger = get_app_logger("customer_service")

# Settings
from otp_service.config.settings import OTPServiceConfigs
configs = OTPServiceConfigs()


class CustomerServiceClient:
    """Client for the customer service lookup API"""

    def __init__(self, client: Optional[httpx.AsyncClient] = None, base_url: Optional[str] = None):
        self.base_url = (base_url or configs.CUSTOMER_SERVICE_URL).rstrip("/")
        self.client = client or build_async_client()

    async def close(self):
        await self.client.aclose()

    async def get_customer(self, msisdn: str) -> CustomerDTO:
        """
        Look up the customer owning `msisdn`.

        Raises:
            OTPException: CUSTOMER_ERROR on any HTTP error status, transport
                failure or unreadable body
        """
        url = f"{self.base_url}/customers"
        try:
            response = await self.client.get(url, params={"number": msisdn}, headers={"Accept": "application/json"})
        except httpx.HTTPError as e:
            logger.error(f"customer_lookup_transport_error | msisdn={msisdn} error={e}")
            raise OTPException("Error retrieving Customer", FaultReason.CUSTOMER_ERROR) from e

        if response.is_error:
            logger.error(f"customer_lookup_failed | msisdn={msisdn} status_code={response.status_code} body={response.text[:500]}")
            raise OTPException("Error retrieving Customer", FaultReason.CUSTOMER_ERROR)

        try:
            customer = CustomerDTO.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"customer_lookup_bad_body | msisdn={msisdn} error={e}")
            raise OTPException("Error retrieving Customer", FaultReason.CUSTOMER_ERROR) from e

        logger.info(f"customer_lookup_ok | msisdn={msisdn} account_id={customer.account_id}")
        return customer
