"""HTTP client utilities with retry and timeout handling.

Capability handlers open one client per call with ``async with
create_http_client(...)`` so connections are released on every exit path.
"""

import logging

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.config.loader import get_settings
from src.mcp.errors import HandlerError

logger = logging.getLogger(__name__)


def create_http_client(
    timeout: float | None = None,
    headers: dict[str, str] | None = None,
) -> httpx.AsyncClient:
    """
    Create an async HTTP client with sensible defaults.

    Args:
        timeout: Request timeout in seconds. Uses default from settings if None.
        headers: Extra headers sent with every request.

    Returns:
        Configured httpx.AsyncClient instance.
    """
    settings = get_settings()

    if timeout is None:
        timeout = float(settings.default_timeout)

    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout),
        follow_redirects=True,
        headers={"User-Agent": settings.user_agent, **(headers or {})},
    )


# =============================================================================
# Retry Policy
# =============================================================================


def http_retry() -> AsyncRetrying:
    """
    Retry policy for outbound requests.

    Retries connection errors and timeouts with exponential backoff, up to
    ``http_retry_attempts`` attempts, then re-raises the last error.

    Usage:
        response = await http_retry()(client.get, url)
    """
    settings = get_settings()
    return AsyncRetrying(
        stop=stop_after_attempt(settings.http_retry_attempts),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type((httpx.ConnectError, httpx.TimeoutException)),
        reraise=True,
    )


async def send_with_retry(
    client: httpx.AsyncClient, method: str, url: str, **kwargs
) -> httpx.Response:
    """Send a request through ``client`` under the retry policy."""
    return await http_retry()(client.request, method, url, **kwargs)


def raise_for_upstream(response: httpx.Response, service: str, reason: str | None = None) -> None:
    """
    Turn an HTTP error status from an upstream API into a HandlerError.

    Args:
        response: The upstream response.
        service: Name of the upstream service, used in the message.
        reason: Upstream-supplied explanation, if the body carried one.
    """
    if response.is_success:
        return
    detail = reason or response.reason_phrase or "request failed"
    logger.warning(f"{service} returned {response.status_code}: {detail}")
    raise HandlerError(f"{service} API error: {response.status_code} {detail}")
