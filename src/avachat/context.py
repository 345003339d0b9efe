"""Render site analysis results as a framed block of prompt text.

Every line is a closed claim about the fetched page, and absent signals
are spelled out with fixed sentinels so the model cannot fill the gaps
with guesses.
"""

from .core import ContentFormat, FailureReason, FetchFailure, FetchResult
from .signals import SignalRecord, extract_signals

MISSING = "MISSING"
EMPTY = "EMPTY"
NONE_FOUND = "NONE FOUND"
NO_TRACKING = "No — conversion tracking may be missing"

END_MARKER = (
    "=== END OF WEBSITE DATA. Use only the facts above when discussing this site. "
    "Do not invent or assume details that are not listed. ==="
)

FAILURE_REASONS = {
    FailureReason.TIMEOUT: "the site took too long to respond",
    FailureReason.HTTP_ERROR: "the site returned an error",
    FailureReason.NETWORK_ERROR: "the site could not be reached",
    FailureReason.TOO_SHORT: "the site returned almost no content",
}


def _text(value: str | None) -> str:
    if value is None:
        return MISSING
    return value or EMPTY


def _list(values: tuple[str, ...]) -> str:
    return " | ".join(values) if values else NONE_FOUND


def _yes_no(flag: bool, no: str = "No") -> str:
    return "Yes" if flag else no


def format_signals(record: SignalRecord) -> str:
    """Render a signal record as a context block."""
    lines = [
        f"=== WEBSITE ANALYSIS DATA: {record.url} ===",
        f"Page title: {_text(record.title)}",
        f"Meta description: {_text(record.meta_description)}",
        f"H1 headings: {_list(record.h1)}",
        f"H2 headings: {_list(record.h2)}",
        f"Analytics/tracking: {_yes_no(record.has_tracking, NO_TRACKING)}",
        f"Structured data (schema): {_yes_no(record.has_structured_data)}",
        f"Canonical tag: {_yes_no(record.has_canonical)}",
        f"Sitemap reference: {_yes_no(record.has_sitemap)}",
        f"Robots directive: {NONE_FOUND if record.robots is None else record.robots or EMPTY}",
        f"Content excerpt: {record.body_excerpt or NONE_FOUND}",
    ]
    if record.source_format == ContentFormat.MARKDOWN:
        lines.append(
            "Note: this data comes from a rendered text version of the page; "
            "head tags and tracking scripts may not be visible in it."
        )
    lines.append(END_MARKER)
    return "\n".join(lines)


def format_failure(failure: FetchFailure) -> str:
    """Render a fetch failure as a context block."""
    reason = FAILURE_REASONS[failure.reason]
    if failure.reason == FailureReason.HTTP_ERROR and failure.status:
        reason = f"{reason} (HTTP {failure.status})"

    return "\n".join([
        f"=== WEBSITE FETCH FAILED: {failure.url} ===",
        f"Problem: {reason}.",
        "No website data is available for this site.",
        "Tell the user you could not load their website, do not speculate about "
        "its content, and ask them to briefly describe their business, what they "
        "sell and who their customers are.",
        END_MARKER,
    ])


def format_result(result: FetchResult) -> str:
    """Render either kind of fetch result."""
    if isinstance(result, FetchFailure):
        return format_failure(result)
    record = extract_signals(result.text, result.url, result.content_format)
    return format_signals(record)
