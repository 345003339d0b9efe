"""HTTP fetcher implementation using httpx."""

import asyncio
import ipaddress
import logging
import socket
import ssl

import httpx

from .protocols import (
    ContentFormat,
    FailureReason,
    FetchFailure,
    FetchResult,
    FetchSuccess,
)

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
DEFAULT_TIMEOUT = 10.0
MIN_CONTENT_LENGTH = 100  # bytes
MAX_CONTENT_BYTES = 2_000_000
MAX_REDIRECTS = 5


class BlockedAddressError(ValueError):
    """The target resolves to a loopback, private or otherwise non-public address."""


async def resolve_host(host: str) -> list[str]:
    """Resolve ``host`` to its IP addresses without blocking the loop."""
    loop = asyncio.get_running_loop()
    infos = await loop.getaddrinfo(host, None, type=socket.SOCK_STREAM)
    return [info[4][0] for info in infos]


async def ensure_public_host(host: str) -> None:
    """Raise ``BlockedAddressError`` unless every address of ``host`` is public."""
    if not host:
        raise BlockedAddressError("URL has no host")
    try:
        ipaddress.ip_address(host)
        addresses = [host]
    except ValueError:
        addresses = await resolve_host(host)

    for raw in addresses:
        address = ipaddress.ip_address(raw.split("%")[0])
        if address.version == 6 and address.ipv4_mapped:
            address = address.ipv4_mapped
        if not address.is_global:
            raise BlockedAddressError(f"{host} resolves to non-public address {address}")


class HttpFetcher:
    """Async fetcher that downloads a page's raw HTML.

    Every call runs under a hard wall-clock timeout covering DNS, connect,
    redirects and the body download. The client lives only for the
    duration of one fetch, so a cancelled fetch closes its connection.
    Unless ``allow_private_addresses`` is set, every request, redirects
    included, must go to a public address.
    """

    content_format = ContentFormat.HTML

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        min_content_length: int = MIN_CONTENT_LENGTH,
        max_content_bytes: int = MAX_CONTENT_BYTES,
        allow_private_addresses: bool = False,
    ):
        self.timeout = timeout
        self.user_agent = user_agent
        self.min_content_length = min_content_length
        self.max_content_bytes = max_content_bytes
        self.allow_private_addresses = allow_private_addresses

    def _build_request(self, url: str) -> tuple[str, dict[str, str]]:
        """Return the address to request and the headers to send."""
        return url, {
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml;q=0.9,*/*;q=0.8",
        }

    def _event_hooks(self) -> dict:
        if self.allow_private_addresses:
            return {}
        return {"request": [self._check_request]}

    async def _check_request(self, request: httpx.Request) -> None:
        await ensure_public_host(request.url.host)

    async def fetch(self, url: str) -> FetchResult:
        """Fetch a URL, converting every failure into a ``FetchFailure``."""
        try:
            return await asyncio.wait_for(self._fetch(url), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("Fetch of %s exceeded %.1fs", url, self.timeout)
            return FetchFailure(
                url=url,
                reason=FailureReason.TIMEOUT,
                detail=f"no response within {self.timeout:g}s",
            )
        except httpx.TimeoutException as e:
            logger.warning("Fetch of %s timed out: %s", url, type(e).__name__)
            return FetchFailure(
                url=url,
                reason=FailureReason.TIMEOUT,
                detail=type(e).__name__,
            )
        except BlockedAddressError as e:
            logger.warning("Refusing to fetch %s: %s", url, e)
            return FetchFailure(
                url=url,
                reason=FailureReason.NETWORK_ERROR,
                detail=str(e)[:200],
            )
        except (httpx.HTTPError, httpx.InvalidURL, ssl.SSLError, OSError, ValueError) as e:
            logger.warning("Fetch of %s failed: %s: %s", url, type(e).__name__, e)
            return FetchFailure(
                url=url,
                reason=FailureReason.NETWORK_ERROR,
                detail=f"{type(e).__name__}: {e}"[:200],
            )

    async def _fetch(self, url: str) -> FetchResult:
        request_url, headers = self._build_request(url)
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            headers=headers,
            follow_redirects=True,
            max_redirects=MAX_REDIRECTS,
            event_hooks=self._event_hooks(),
        ) as client:
            async with client.stream("GET", request_url) as resp:
                if not resp.is_success:
                    logger.warning("Fetch of %s returned HTTP %d", url, resp.status_code)
                    return FetchFailure(
                        url=url,
                        reason=FailureReason.HTTP_ERROR,
                        status=resp.status_code,
                        detail=resp.reason_phrase,
                    )
                body = await self._read_capped(resp)
                text = _decode(body, resp.encoding)
                status = resp.status_code
                content_type = resp.headers.get("content-type", "")

        size = len(body.strip())
        if size < self.min_content_length:
            logger.warning("Fetch of %s returned only %d bytes", url, size)
            return FetchFailure(
                url=url,
                reason=FailureReason.TOO_SHORT,
                status=status,
                detail=f"{size} bytes",
            )

        logger.info("Fetched %s (%d bytes, %s)", url, len(body), self.content_format.value)
        return FetchSuccess(
            url=url,
            status=status,
            text=text,
            content_type=content_type,
            content_format=self.content_format,
        )

    async def _read_capped(self, resp: httpx.Response) -> bytes:
        """Read the body, stopping once ``max_content_bytes`` is reached."""
        chunks = []
        size = 0
        async for chunk in resp.aiter_bytes():
            chunks.append(chunk)
            size += len(chunk)
            if size >= self.max_content_bytes:
                logger.debug("Truncating body of %s at %d bytes", resp.url, self.max_content_bytes)
                break
        return b"".join(chunks)[: self.max_content_bytes]


def _decode(body: bytes, encoding: str | None) -> str:
    try:
        return body.decode(encoding or "utf-8", errors="replace")
    except LookupError:
        # Unknown charset label in the Content-Type header
        return body.decode("utf-8", errors="replace")
