"""Extract marketing-relevant signals from a fetched page.

Each field is computed by its own small function and falls back to an
explicit "absent" value (``None``, ``()`` or ``False``) when nothing
matches, so one malformed part of a page never hides the others.
Raw HTML goes through selectolax (lexbor backend); markdown from the
rendering proxy is handled with line-oriented patterns. Every pattern has
bounded repetition, so extraction stays linear in the size of the page.
"""

import re
from dataclasses import asdict, dataclass

from selectolax.lexbor import LexborHTMLParser

from .core import ContentFormat

H1_LIMIT = 3
H2_LIMIT = 5
HEADING_MIN_LENGTH = 4
HEADING_MAX_LENGTH = 150

HTML_EXCERPT_CHARS = 1500
MARKDOWN_EXCERPT_CHARS = 2500
MARKDOWN_MAX_LINES = 15
MARKDOWN_MIN_LINE_LENGTH = 60

# Snippet patterns only look at this much of the page
SCAN_CHARS = 1_000_000
# Longer markdown lines are cut before line patterns run
MARKDOWN_LINE_CHARS = 2000

NON_CONTENT_TAGS = ["script", "style", "noscript", "svg", "template"]

TRACKING_PATTERNS = [
    re.compile(r"\bGTM-[A-Z0-9]{4,}\b"),
    re.compile(r"googletagmanager\.com|google-analytics\.com", re.IGNORECASE),
    re.compile(r"\bgtag\(|\bga\(\s*['\"]create|\bG-[A-Z0-9]{8,12}\b|\bUA-\d{4,10}-\d{1,4}\b"),
    re.compile(r"\bfbq\(|connect\.facebook\.net", re.IGNORECASE),
    re.compile(r"_linkedin_partner_id|snap\.licdn\.com", re.IGNORECASE),
    re.compile(r"static\.hotjar\.com|clarity\.ms|\bttq\.(?:load|page)\(", re.IGNORECASE),
]

STRUCTURED_DATA_PATTERNS = [
    re.compile(r"application/ld\+json", re.IGNORECASE),
    re.compile(r"itemtype\s*=\s*[\"']?https?://schema\.org", re.IGNORECASE),
    re.compile(r"[\"']@context[\"']\s*:\s*[\"']https?://schema\.org", re.IGNORECASE),
]

SITEMAP_PATTERN = re.compile(r"sitemap[\w-]{0,64}\.xml|/sitemap(?![\w-])", re.IGNORECASE)

MD_HEADER = re.compile(r"^(Title|URL Source|Description|Published Time|Warning):\s*(.*)$")
MD_CONTENT_MARKER = re.compile(r"^Markdown Content:\s*$")
MD_ATX_HEADING = re.compile(r"^(#{1,6})\s+(.*)$")
MD_SETEXT_H1 = re.compile(r"^=+\s*$")
MD_SETEXT_H2 = re.compile(r"^-{2,}\s*$")
MD_IMAGE = re.compile(r"!\[[^\[\]\n]{0,500}\]\([^()\n]{0,2000}\)")
MD_LINK = re.compile(r"\[([^\[\]\n]{0,500})\]\([^()\n]{0,2000}\)")
MD_EMPHASIS = re.compile(r"[*_`~]+")
MD_LIST_MARKER = re.compile(r"^(?:[*+-]|\d+[.)])\s+")


@dataclass(frozen=True)
class SignalRecord:
    """Bounded summary of a fetched page.

    ``None`` means the signal was not found. An empty string means the
    element exists but is empty (e.g. ``<title></title>``).
    """

    url: str
    source_format: ContentFormat
    title: str | None = None
    meta_description: str | None = None
    h1: tuple[str, ...] = ()
    h2: tuple[str, ...] = ()
    has_tracking: bool = False
    has_structured_data: bool = False
    has_canonical: bool = False
    has_sitemap: bool = False
    robots: str | None = None
    body_excerpt: str | None = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["source_format"] = self.source_format.value
        data["h1"] = list(self.h1)
        data["h2"] = list(self.h2)
        return data


def collapse_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def clean_headings(candidates: list[str], limit: int) -> tuple[str, ...]:
    """Trim, deduplicate and length-filter headings, keeping document order."""
    headings: list[str] = []
    for candidate in candidates:
        text = collapse_whitespace(candidate)
        if not HEADING_MIN_LENGTH <= len(text) <= HEADING_MAX_LENGTH:
            continue
        if text in headings:
            continue
        headings.append(text)
        if len(headings) == limit:
            break
    return tuple(headings)


def has_tracking(content: str) -> bool:
    """Detect analytics, tag manager or ad pixel snippets."""
    content = content[:SCAN_CHARS]
    return any(pattern.search(content) for pattern in TRACKING_PATTERNS)


def has_structured_data(content: str) -> bool:
    content = content[:SCAN_CHARS]
    return any(pattern.search(content) for pattern in STRUCTURED_DATA_PATTERNS)


def has_sitemap_reference(content: str) -> bool:
    return bool(SITEMAP_PATTERN.search(content[:SCAN_CHARS]))


# ---------------------------------------------------------------------------
# HTML
# ---------------------------------------------------------------------------

def _html_title(tree: LexborHTMLParser) -> str | None:
    node = tree.css_first("title")
    if node is None:
        return None
    return collapse_whitespace(node.text())


def _html_meta(tree: LexborHTMLParser, name: str) -> str | None:
    for node in tree.css("meta"):
        attrs = node.attributes
        if (attrs.get("name") or "").strip().lower() == name:
            return collapse_whitespace(attrs.get("content") or "")
    return None


def _html_has_canonical(tree: LexborHTMLParser) -> bool:
    for node in tree.css("link"):
        rel = (node.attributes.get("rel") or "").lower().split()
        if "canonical" in rel:
            return True
    return False


def _html_headings(tree: LexborHTMLParser, tag: str, limit: int) -> tuple[str, ...]:
    return clean_headings([node.text(separator=" ") for node in tree.css(tag)], limit)


def _html_excerpt(tree: LexborHTMLParser) -> str | None:
    """Visible text without scripts and styles. Mutates ``tree``."""
    tree.strip_tags(NON_CONTENT_TAGS)
    root = tree.body or tree.root
    if root is None:
        return None
    text = collapse_whitespace(root.text(separator=" "))
    return text[:HTML_EXCERPT_CHARS].rstrip() or None


def extract_html_signals(html: str, url: str) -> SignalRecord:
    """Build a signal record from raw HTML."""
    tree = LexborHTMLParser(html)
    title = _html_title(tree)
    meta_description = _html_meta(tree, "description")
    robots = _html_meta(tree, "robots")
    h1 = _html_headings(tree, "h1", H1_LIMIT)
    h2 = _html_headings(tree, "h2", H2_LIMIT)
    has_canonical = _html_has_canonical(tree)
    # Last: stripping non-content tags modifies the tree
    body_excerpt = _html_excerpt(tree)

    return SignalRecord(
        url=url,
        source_format=ContentFormat.HTML,
        title=title,
        meta_description=meta_description,
        h1=h1,
        h2=h2,
        has_tracking=has_tracking(html),
        has_structured_data=has_structured_data(html),
        has_canonical=has_canonical,
        has_sitemap=has_sitemap_reference(html),
        robots=robots,
        body_excerpt=body_excerpt,
    )


# ---------------------------------------------------------------------------
# Markdown
# ---------------------------------------------------------------------------

def strip_markdown_inline(text: str) -> str:
    """Reduce a markdown line to its readable text."""
    text = MD_IMAGE.sub("", text)
    text = MD_LINK.sub(r"\1", text)
    text = MD_EMPHASIS.sub("", text)
    return collapse_whitespace(text)


def _split_markdown(markdown: str) -> tuple[dict[str, str], list[str]]:
    """Separate the proxy's ``Key: value`` header block from the content."""
    lines = [line[:MARKDOWN_LINE_CHARS] for line in markdown.splitlines()]
    for i, line in enumerate(lines):
        if MD_CONTENT_MARKER.match(line):
            header_lines, body = lines[:i], lines[i + 1:]
            break
    else:
        return {}, lines

    header: dict[str, str] = {}
    for line in header_lines:
        match = MD_HEADER.match(line.strip())
        if match and match.group(1) not in header:
            header[match.group(1)] = collapse_whitespace(match.group(2))
    return header, body


def _setext_level(lines: list[str], i: int) -> int | None:
    """Heading level when ``lines[i]`` is underlined with ``===`` or ``---``."""
    if i + 1 >= len(lines):
        return None
    text = lines[i].strip()
    if not text or text.startswith(("#", "-", "*", "+", ">", "|", "!", "=")):
        return None
    underline = lines[i + 1].strip()
    if MD_SETEXT_H1.match(underline):
        return 1
    if MD_SETEXT_H2.match(underline):
        return 2
    return None


def _markdown_headings(lines: list[str]) -> tuple[list[str], list[str]]:
    """Collect level 1 and level 2 headings, ATX and setext style."""
    h1: list[str] = []
    h2: list[str] = []
    for i, line in enumerate(lines):
        atx = MD_ATX_HEADING.match(line.strip())
        if atx:
            level = len(atx.group(1))
            # closing hashes: "## Services ##"
            text = atx.group(2).rstrip("#").rstrip()
            if level == 1:
                h1.append(strip_markdown_inline(text))
            elif level == 2:
                h2.append(strip_markdown_inline(text))
            continue

        level = _setext_level(lines, i)
        if level == 1:
            h1.append(strip_markdown_inline(line))
        elif level == 2:
            h2.append(strip_markdown_inline(line))
    return h1, h2


def _is_navigation_line(line: str) -> bool:
    """Lines that are mostly links: menus, breadcrumbs, footers."""
    if MD_LIST_MARKER.match(line) and MD_LINK.search(line):
        return True
    link_chars = sum(len(m.group(0)) for m in MD_LINK.finditer(line))
    return link_chars > len(line) / 2


def _markdown_excerpt(lines: list[str]) -> str | None:
    paragraphs: list[str] = []
    for i, line in enumerate(lines):
        text = line.strip()
        if not text or text.startswith(("#", "|")):
            continue
        if MD_SETEXT_H1.match(text) or MD_SETEXT_H2.match(text):
            continue
        if _setext_level(lines, i) is not None:
            continue
        if not MD_IMAGE.sub("", text).strip():
            continue
        if _is_navigation_line(text):
            continue
        plain = strip_markdown_inline(MD_LIST_MARKER.sub("", text))
        if len(plain) <= MARKDOWN_MIN_LINE_LENGTH:
            continue
        paragraphs.append(plain)
        if len(paragraphs) == MARKDOWN_MAX_LINES:
            break
    excerpt = " ".join(paragraphs)[:MARKDOWN_EXCERPT_CHARS].rstrip()
    return excerpt or None


def extract_markdown_signals(markdown: str, url: str) -> SignalRecord:
    """Build a signal record from proxy-rendered markdown."""
    header, body = _split_markdown(markdown)
    h1_candidates, h2_candidates = _markdown_headings(body)
    h1 = clean_headings(h1_candidates, H1_LIMIT)
    # Raw tags the proxy passed through
    embedded = LexborHTMLParser(markdown[:SCAN_CHARS])

    title = header.get("Title")
    if title is None and h1:
        title = h1[0]

    meta_description = header.get("Description")
    if meta_description is None:
        meta_description = _html_meta(embedded, "description")

    return SignalRecord(
        url=url,
        source_format=ContentFormat.MARKDOWN,
        title=title,
        meta_description=meta_description,
        h1=h1,
        h2=clean_headings(h2_candidates, H2_LIMIT),
        has_tracking=has_tracking(markdown),
        has_structured_data=has_structured_data(markdown),
        has_canonical=_html_has_canonical(embedded),
        has_sitemap=has_sitemap_reference(markdown),
        robots=_html_meta(embedded, "robots"),
        body_excerpt=_markdown_excerpt(body),
    )


def extract_signals(
    content: str,
    url: str,
    content_format: ContentFormat = ContentFormat.HTML,
) -> SignalRecord:
    """Extract a signal record from page content in either format."""
    if content_format == ContentFormat.MARKDOWN:
        return extract_markdown_signals(content, url)
    return extract_html_signals(content, url)
