"""Fetcher that routes requests through a markdown rendering proxy."""

import httpx

from .fetcher import (
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
    MAX_CONTENT_BYTES,
    MIN_CONTENT_LENGTH,
    HttpFetcher,
    ensure_public_host,
)
from .protocols import ContentFormat, FetchResult

DEFAULT_PROXY_URL = "https://r.jina.ai/"


class RenderingProxyFetcher(HttpFetcher):
    """Fetch pages pre-rendered as markdown by a reader proxy.

    The proxy executes the page's scripts on its side, which helps with
    JavaScript-heavy sites and simple bot blocking. Errors from the proxy
    itself surface as HTTP or network failures, like any other fetch.
    The proxy address is operator configuration and may be internal; the
    page address is still required to be public.
    """

    content_format = ContentFormat.MARKDOWN

    def __init__(
        self,
        proxy_url: str = DEFAULT_PROXY_URL,
        api_key: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        min_content_length: int = MIN_CONTENT_LENGTH,
        max_content_bytes: int = MAX_CONTENT_BYTES,
        allow_private_addresses: bool = False,
    ):
        super().__init__(
            timeout=timeout,
            user_agent=user_agent,
            min_content_length=min_content_length,
            max_content_bytes=max_content_bytes,
            allow_private_addresses=allow_private_addresses,
        )
        self.proxy_url = proxy_url if proxy_url.endswith("/") else proxy_url + "/"
        self.api_key = api_key

    def _build_request(self, url: str) -> tuple[str, dict[str, str]]:
        headers = {
            "User-Agent": self.user_agent,
            "Accept": "text/plain",
            "X-Return-Format": "markdown",
            # Ask the proxy to give up slightly before our own deadline
            "X-Timeout": str(max(1, int(self.timeout) - 1)),
        }
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return f"{self.proxy_url}{url}", headers

    def _event_hooks(self) -> dict:
        return {}

    async def _fetch(self, url: str) -> FetchResult:
        if not self.allow_private_addresses:
            await ensure_public_host(httpx.URL(url).host)
        return await super()._fetch(url)
