"""Tests for the site analysis pipeline."""

import threading

from avachat.analysis import analyze_site, build_context, latest_user_text
from avachat.core import ContentFormat, FailureReason, FetchFailure, FetchSuccess

PAGE = (
    "<html><head><title>Acme Plumbing | Home</title></head><body>"
    "<h1>Chicago's Fastest Plumbers</h1>" + "<p>We fix leaks around the clock.</p>" * 5 + "</body></html>"
)


class FakeFetcher:
    """Records requested URLs and returns a canned result."""

    def __init__(self, result=None):
        self.result = result
        self.urls: list[str] = []

    async def fetch(self, url):
        self.urls.append(url)
        if self.result is None:
            return FetchSuccess(url=url, status=200, text=PAGE)
        return self.result


class TestLatestUserText:
    def test_returns_last_user_turn(self):
        """The most recent user turn is selected."""
        messages = [
            {"role": "user", "content": "first"},
            {"role": "assistant", "content": "reply"},
            {"role": "user", "content": "second"},
            {"role": "assistant", "content": "another reply"},
        ]
        assert latest_user_text(messages) == "second"

    def test_no_user_turn(self):
        """No user turn means nothing to scan."""
        assert latest_user_text([{"role": "assistant", "content": "hello"}]) is None
        assert latest_user_text([]) is None


class TestAnalyzeSite:
    async def test_no_url_no_fetch(self):
        """Text without a website triggers no fetch."""
        fetcher = FakeFetcher()

        block = await analyze_site("How do I get more customers?", fetcher)

        assert block is None
        assert fetcher.urls == []

    async def test_none_text(self):
        """Missing text triggers no fetch."""
        fetcher = FakeFetcher()
        assert await analyze_site(None, fetcher) is None
        assert fetcher.urls == []

    async def test_success_block(self):
        """A found website is fetched once and rendered."""
        fetcher = FakeFetcher()

        block = await analyze_site("my site is acmeplumbing.com, thoughts?", fetcher)

        assert fetcher.urls == ["https://acmeplumbing.com"]
        assert "Page title: Acme Plumbing | Home" in block
        assert "Meta description: MISSING" in block
        assert "H1 headings: Chicago's Fastest Plumbers" in block

    async def test_only_first_url_fetched(self):
        """Only one site is analyzed per turn."""
        fetcher = FakeFetcher()

        await analyze_site("compare acme.com and rival.com", fetcher)

        assert fetcher.urls == ["https://acme.com"]

    async def test_timeout_block(self):
        """A timeout produces a failure block, never fabricated signals."""
        fetcher = FakeFetcher(FetchFailure(url="https://acme.com", reason=FailureReason.TIMEOUT))

        block = await analyze_site("acme.com", fetcher)

        assert "WEBSITE FETCH FAILED" in block
        assert "describe their business" in block
        assert "Page title:" not in block

    async def test_extraction_runs_in_worker_thread(self, monkeypatch):
        """Parsing happens off the event loop thread."""
        threads = []

        def record_thread(result):
            threads.append(threading.current_thread())
            return "block"

        monkeypatch.setattr("avachat.analysis.format_result", record_thread)

        assert await analyze_site("acme.com", FakeFetcher()) == "block"
        assert threads[0] is not threading.current_thread()


class TestBuildContext:
    def test_short_success_is_failure(self):
        """A 50-byte body is treated exactly like a fetch failure."""
        short = FetchSuccess(url="https://acme.com", status=200, text="<html><title>Hi</title></html>" + "x" * 20)
        failure = FetchFailure(url="https://acme.com", reason=FailureReason.TOO_SHORT)

        assert build_context(short) == build_context(failure)

    def test_markdown_success(self):
        """Markdown content is extracted with the markdown strategy."""
        text = "Title: Acme\n\nMarkdown Content:\n" + "We fix leaks across Chicago every single day of the year, fast. " * 3
        result = FetchSuccess(url="https://acme.com", status=200, text=text, content_format=ContentFormat.MARKDOWN)

        block = build_context(result)

        assert "Page title: Acme" in block
        assert "rendered text version" in block

    def test_idempotent(self):
        """The same content always renders the same block."""
        result = FetchSuccess(url="https://acme.com", status=200, text=PAGE)
        assert build_context(result) == build_context(result)
