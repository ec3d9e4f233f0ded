import structlog
from resilient_httpx import AsyncProxyHttpClient, RetryPolicy

from imagegen.config import settings

logger = structlog.get_logger()

_client: AsyncProxyHttpClient | None = None


def get_http_client() -> AsyncProxyHttpClient:
    """Return the process-wide outbound client, built once from module ``settings``."""
    global _client
    if _client is None:
        if settings.proxies:
            logger.info("http_client_proxies_configured", count=len(settings.proxies))
        _client = AsyncProxyHttpClient(
            proxies=settings.proxies or None,
            proxy_strategy=settings.proxy_strategy,
            # single attempt; non-2xx responses are handed back to the caller
            retry=RetryPolicy(max_attempts=1, retry_on=[]),
            timeout=settings.fetch_timeout,
            fallback_to_direct=True,
        )
    return _client


async def close_client() -> None:
    global _client
    if _client:
        await _client.aclose()
        _client = None
