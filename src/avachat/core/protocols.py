"""Protocol and result types for page fetchers."""

from dataclasses import dataclass
from enum import Enum
from typing import Protocol, Union


class ContentFormat(str, Enum):
    """Shape of the fetched content."""

    HTML = "html"
    MARKDOWN = "markdown"


class FailureReason(str, Enum):
    """Why a fetch produced no usable page."""

    TIMEOUT = "timeout"
    HTTP_ERROR = "http_error"
    NETWORK_ERROR = "network_error"
    TOO_SHORT = "too_short"


@dataclass(frozen=True)
class FetchSuccess:
    """Page content returned by a fetcher."""

    url: str
    status: int
    text: str
    content_type: str = ""
    content_format: ContentFormat = ContentFormat.HTML


@dataclass(frozen=True)
class FetchFailure:
    """A fetch attempt that produced no usable page."""

    url: str
    reason: FailureReason
    status: int | None = None
    detail: str = ""


FetchResult = Union[FetchSuccess, FetchFailure]


class Fetcher(Protocol):
    """Protocol for page fetchers.

    Implementations never raise for site problems: every outcome is a
    ``FetchSuccess`` or a ``FetchFailure``.
    """

    async def fetch(self, url: str) -> FetchResult:
        """Fetch a URL and return the result."""
        ...
