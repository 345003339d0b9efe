"""Site analysis pipeline: chat text -> URL -> fetch -> signals -> context block."""

import asyncio
import logging
from collections.abc import Mapping, Sequence

from .context import format_result
from .core import FailureReason, Fetcher, FetchFailure, FetchResult, FetchSuccess
from .core.fetcher import MIN_CONTENT_LENGTH
from .urls import extract_url

logger = logging.getLogger(__name__)


def latest_user_text(messages: Sequence[Mapping[str, str]]) -> str | None:
    """Return the text of the most recent user turn."""
    for message in reversed(messages):
        if message.get("role") == "user":
            return message.get("content") or None
    return None


def build_context(result: FetchResult, min_content_length: int = MIN_CONTENT_LENGTH) -> str:
    """Turn a fetch result into a context block.

    A success whose content is implausibly small is reported as a failure
    rather than as a page with no signals.
    """
    if isinstance(result, FetchSuccess) and len(result.text.strip()) < min_content_length:
        result = FetchFailure(
            url=result.url,
            reason=FailureReason.TOO_SHORT,
            status=result.status,
            detail=f"{len(result.text.strip())} characters",
        )
    return format_result(result)


async def analyze_site(
    text: str | None,
    fetcher: Fetcher,
    min_content_length: int = MIN_CONTENT_LENGTH,
) -> str | None:
    """Analyze the website mentioned in ``text``, if there is one.

    Returns ``None`` when the text names no website; no fetch is made in
    that case. Otherwise exactly one fetch is made and a context block is
    returned whether or not it succeeded. Signal extraction runs in a worker
    thread so one heavy page does not stall other requests.
    """
    url = extract_url(text)
    if url is None:
        return None

    logger.info("Analyzing %s", url)
    result = await fetcher.fetch(url)
    if isinstance(result, FetchFailure):
        logger.warning("Site analysis of %s failed: %s %s", url, result.reason.value, result.detail)
    # Parsing a large page is CPU-bound; keep it off the event loop
    return await asyncio.to_thread(build_context, result, min_content_length)
