"""Tests for URL detection in chat text."""

from avachat.urls import extract_url, find_urls, is_abbreviation_artifact, normalize_url


class TestExtractUrl:
    def test_bare_domain_gets_https(self):
        """A bare domain should be returned with an https scheme."""
        assert extract_url("check out example.com") == "https://example.com"

    def test_explicit_scheme_is_kept(self):
        """An explicit http URL should keep its scheme."""
        assert extract_url("my site is http://acme.com/home") == "http://acme.com/home"

    def test_no_domain_returns_none(self):
        """Text without a domain should yield nothing."""
        assert extract_url("We sell plumbing services in Chicago. Any tips?") is None

    def test_empty_and_none(self):
        """Empty input should yield nothing."""
        assert extract_url("") is None
        assert extract_url(None) is None

    def test_abbreviations_are_not_urls(self):
        """Abbreviations must never be returned as URLs."""
        assert extract_url("We do lots, e.g. ads, i.e. paid stuff, etc. vs. organic p.s. thanks") is None

    def test_abbreviation_before_real_domain(self):
        """A real domain after an abbreviation should still be found."""
        assert extract_url("e.g. acme-plumbing.com") == "https://acme-plumbing.com"

    def test_first_url_wins(self):
        """Only the first candidate should be returned."""
        assert extract_url("see https://first.com and https://second.com") == "https://first.com"

    def test_explicit_url_preferred_over_bare(self):
        """Explicit-scheme matches come before bare domains."""
        text = "we moved from oldsite.com to https://newsite.com"
        assert extract_url(text) == "https://newsite.com"

    def test_trailing_punctuation_trimmed(self):
        """Sentence punctuation should not be part of the URL."""
        assert extract_url("Our site is acme.com.") == "https://acme.com"
        assert extract_url("Look at (https://acme.com/about).") == "https://acme.com/about"

    def test_keeps_path(self):
        """Bare domains may carry a path."""
        assert extract_url("see www.acme.co.uk/services please") == "https://www.acme.co.uk/services"

    def test_email_domain_is_ignored(self):
        """The domain part of an email address is not a website."""
        assert extract_url("email me at bob@acme.com") is None

    def test_numbers_are_not_domains(self):
        """Decimal numbers should not match the domain pattern."""
        assert extract_url("we grew 2.5x last year, version 3.14") is None

    def test_deterministic(self):
        """The same input should always give the same output."""
        text = "compare acme.com with rival.io"
        assert extract_url(text) == extract_url(text)


class TestFindUrls:
    def test_deduplicates(self):
        """Repeated mentions should be returned once."""
        assert find_urls("acme.com is great, acme.com!") == ["https://acme.com"]

    def test_bare_duplicate_of_explicit(self):
        """A bare domain inside an explicit URL should not be matched again."""
        assert find_urls("https://acme.com/page") == ["https://acme.com/page"]

    def test_order(self):
        """Explicit URLs come first, then bare domains, in text order."""
        urls = find_urls("b.com then https://a.com then c.org")
        assert urls == ["https://a.com", "https://b.com", "https://c.org"]

    def test_file_names_are_skipped(self):
        """File names and library names are not websites."""
        assert find_urls("attached report.pdf, built with next.js") == []

    def test_web_file_names_are_skipped(self):
        """Page and source file names are not websites."""
        assert find_urls("see index.html, edit main.py and config.json") == []

    def test_run_on_sentence_is_skipped(self):
        """A missing space after a full stop does not make a domain."""
        assert extract_url("I love it.Thanks for the help") is None
        assert extract_url("Visit ACME.COM today") == "https://ACME.COM"


class TestIsAbbreviationArtifact:
    def test_known_abbreviations(self):
        """Common abbreviations are artifacts."""
        for token in ["e.g.", "i.e.", "etc.", "vs.", "p.s."]:
            assert is_abbreviation_artifact(token)

    def test_single_letter_labels(self):
        """Tokens made only of single letters are artifacts."""
        assert is_abbreviation_artifact("u.s.a")

    def test_real_domain(self):
        """Real domains are not artifacts."""
        assert not is_abbreviation_artifact("example.com")
        assert not is_abbreviation_artifact("https://x.ai")


class TestNormalizeUrl:
    def test_adds_scheme(self):
        assert normalize_url("example.com") == "https://example.com"

    def test_keeps_scheme(self):
        assert normalize_url("HTTP://example.com") == "HTTP://example.com"
