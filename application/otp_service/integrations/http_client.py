import httpx
from httpx_retry import AsyncRetryTransport, RetryPolicy

from otp_service.config.settings import OTPServiceConfigs
configs = OTPServiceConfigs()

RETRY_STATUS_CODES = [429, 502, 503, 504]


def build_async_client(retry: bool = True) -> httpx.AsyncClient:
    """
    Async client for collaborator calls.

    Lookups are idempotent GETs and go through the retry transport; the
    notification POST does not, so a PIN is never delivered twice by the
    transport itself.
    """
    if not retry:
        return httpx.AsyncClient(timeout=configs.INTEGRATION_TIMEOUT)

    retry_policy = RetryPolicy(
        max_retries=configs.INTEGRATION_MAX_RETRIES,
        initial_delay=0.2,
        multiplier=2.0,
        retry_on=RETRY_STATUS_CODES
    )
    return httpx.AsyncClient(transport=AsyncRetryTransport(policy=retry_policy), timeout=configs.INTEGRATION_TIMEOUT)
