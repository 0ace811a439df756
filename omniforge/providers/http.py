"""
HTTP response checks shared by the OpenAI-compatible service wrappers.
"""
import logging

import httpx

from .exceptions import ProviderError, ProviderQuotaExceeded

logger = logging.getLogger(__name__)


def raise_for_provider_error(provider: str, response: httpx.Response) -> None:
    """
    Raise a ProviderError subclass for any non-2xx response.

    Billing/quota failures become ProviderQuotaExceeded so callers can tell
    them apart from transient API errors.
    """
    if response.is_success:
        return

    error_text = response.text[:500]
    logger.error(f"[{provider.upper()}] API error {response.status_code}: {error_text[:200]}")

    if ProviderQuotaExceeded.matches(response.status_code, error_text):
        raise ProviderQuotaExceeded(provider, error_text[:200], status_code=response.status_code)

    raise ProviderError(
        provider,
        f"HTTP {response.status_code}: {error_text[:200]}",
        status_code=response.status_code,
    )


def auth_headers(api_key: str) -> dict:
    return {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }
