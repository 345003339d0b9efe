"""Page fetching components."""

from .fetcher import HttpFetcher
from .protocols import (
    ContentFormat,
    FailureReason,
    Fetcher,
    FetchFailure,
    FetchResult,
    FetchSuccess,
)
from .proxy_fetcher import RenderingProxyFetcher

__all__ = [
    "ContentFormat",
    "FailureReason",
    "Fetcher",
    "FetchFailure",
    "FetchResult",
    "FetchSuccess",
    "HttpFetcher",
    "RenderingProxyFetcher",
    "create_fetcher",
]


def create_fetcher(settings, use_proxy: bool | None = None) -> Fetcher:
    """Build the fetcher selected by ``settings.fetch_strategy``.

    ``use_proxy`` overrides the configured strategy when given.
    """
    if use_proxy is None:
        use_proxy = settings.fetch_strategy == "proxy"

    if use_proxy:
        return RenderingProxyFetcher(
            proxy_url=settings.proxy_base_url,
            api_key=settings.proxy_api_key or None,
            timeout=settings.fetch_timeout,
            user_agent=settings.user_agent,
            min_content_length=settings.min_content_length,
            max_content_bytes=settings.max_content_bytes,
            allow_private_addresses=settings.allow_private_addresses,
        )
    return HttpFetcher(
        timeout=settings.fetch_timeout,
        user_agent=settings.user_agent,
        min_content_length=settings.min_content_length,
        max_content_bytes=settings.max_content_bytes,
        allow_private_addresses=settings.allow_private_addresses,
    )
