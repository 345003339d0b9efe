"""Detect the website a user is talking about in free-form chat text."""

import re

SCHEME_URL = re.compile(r"https?://[^\s<>\"'(){}\[\]]+", re.IGNORECASE)

# Bare domains like "acme-plumbing.com" or "www.acme.co.uk/services".
# Must not start inside a word, an email address or an explicit URL.
BARE_DOMAIN = re.compile(
    r"(?<![\w@./:-])"
    r"(?:[a-z0-9](?:[a-z0-9-]*[a-z0-9])?\.)+"
    r"[a-z]{2,}(?![a-z0-9-])"
    r"(?:/[^\s<>\"'(){}\[\]]*)?",
    re.IGNORECASE,
)

TRAILING_PUNCTUATION = ".,;:!?)]'\""

ABBREVIATIONS = frozenset({
    "e.g", "i.e", "etc", "vs", "p.s", "a.m", "p.m", "u.s", "u.k", "n.b",
})

# Suffixes that look like a TLD but almost always name a file or a library
NON_DOMAIN_SUFFIXES = frozenset({
    "pdf", "png", "jpg", "jpeg", "gif", "svg", "webp", "mp3", "mp4", "mov",
    "txt", "csv", "json", "xml", "yml", "yaml", "md",
    "doc", "docx", "xls", "xlsx", "ppt", "pptx", "zip", "exe",
    "html", "htm", "php", "asp", "aspx", "css", "js", "ts", "py", "rb",
})


def _trim(token: str) -> str:
    return token.rstrip(TRAILING_PUNCTUATION)


def _raw_host(token: str) -> str:
    without_scheme = re.sub(r"^https?://", "", token, flags=re.IGNORECASE)
    host = re.split(r"[/?#]", without_scheme, maxsplit=1)[0]
    return host.split("@")[-1].split(":")[0].rstrip(".")


def _host(token: str) -> str:
    """Return the lowercased host part of a URL or bare domain."""
    return _raw_host(token).lower()


def is_abbreviation_artifact(token: str) -> bool:
    """Return True for tokens that match the domain shape but are not sites."""
    host = _host(token)
    if not host or host in ABBREVIATIONS:
        return True

    labels = host.split(".")
    if all(len(label) <= 1 for label in labels):
        return True
    if labels[-1] in NON_DOMAIN_SUFFIXES:
        return True

    # "it.Thanks": two sentences run together, not a TLD
    suffix = _raw_host(token).split(".")[-1]
    return suffix not in (suffix.lower(), suffix.upper())


def normalize_url(token: str) -> str:
    """Default the scheme to https when the token has none."""
    if re.match(r"^https?://", token, re.IGNORECASE):
        return token
    return f"https://{token}"


def find_urls(text: str | None) -> list[str]:
    """Return every candidate website in ``text``, explicit URLs first."""
    if not text:
        return []

    candidates = [_trim(m.group(0)) for m in SCHEME_URL.finditer(text)]
    candidates += [_trim(m.group(0)) for m in BARE_DOMAIN.finditer(text)]

    seen: set[str] = set()
    urls: list[str] = []
    for candidate in candidates:
        if candidate in seen:
            continue
        seen.add(candidate)
        if is_abbreviation_artifact(candidate):
            continue
        url = normalize_url(candidate)
        if url not in urls:
            urls.append(url)
    return urls


def extract_url(text: str | None) -> str | None:
    """Return the single website to analyze for this turn, if any.

    Only the first candidate is kept: one site per turn bounds both fetch
    latency and prompt size.
    """
    urls = find_urls(text)
    return urls[0] if urls else None
