"""
Notification service integration.

Hands a (channel, destination, message) triple to the external notification
service. Delivery problems come back as an unsuccessful result instead of an
exception so that callers can fan out over several channels and collect
every outcome.
"""

from typing import Optional

import httpx

from otp_service.dto.integrations import NotificationRequestForm, NotificationResultDTO
from otp_service.integrations.http_client import build_async_client

# Logger
from otp_service.logging.utils import get_app_logger
logger = get_app_logger("notification_service")

# Settings
from otp_service.config.settings import OTPServiceConfigs
configs = OTPServiceConfigs()


class NotificationClient:

    def __init__(self, client: Optional[httpx.AsyncClient] = None, url: Optional[str] = None):
        self.url = url or configs.NOTIFICATION_SERVICE_URL
        self.client = client or build_async_client(retry=False)

    async def close(self):
        await self.client.aclose()

    def return_message(self, success: bool, channel: str, status: Optional[str] = None, message: Optional[str] = None) -> NotificationResultDTO:
        return NotificationResultDTO(success=success, channel=channel, status=status, message=message)

    async def send_notification(self, channel: str, destination: Optional[str], message: str) -> NotificationResultDTO:
        if not destination:
            logger.warning(f"notification_skipped | channel={channel} reason=missing_destination")
            return self.return_message(success=False, channel=channel, message="Missing destination")

        form = NotificationRequestForm(channel=channel, destination=destination, message=message)
        try:
            response = await self.client.post(self.url, json=form.model_dump(), headers={"Accept": "application/json"})
        except httpx.HTTPError as e:
            logger.error(f"notification_transport_error | channel={channel} error={e}")
            return self.return_message(success=False, channel=channel, message=f"notification_error: {e.__class__.__name__}")

        if response.is_error:
            logger.warning(f"notification_failed | channel={channel} status_code={response.status_code} body={response.text[:500]}")
            return self.return_message(success=False, channel=channel, message=f"notification_api_{response.status_code}")

        try:
            data = response.json() if response.content else {}
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}
        logger.info(f"notification_sent | channel={channel} status={data.get('status')}")
        return self.return_message(success=True, channel=channel, status=data.get("status"), message=data.get("message"))
