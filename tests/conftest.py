"""Shared pytest fixtures."""

import pytest

# Hosts the tests treat specially; everything else resolves to a public address.
FAKE_DNS = {
    "localhost": ["127.0.0.1", "::1"],
    "intranet.acme.com": ["10.1.2.3"],
}
PUBLIC_ADDRESS = "93.184.216.34"


@pytest.fixture(autouse=True)
def fake_dns(monkeypatch):
    """Keep the fetcher's address check off the real resolver."""

    async def resolve(host):
        return FAKE_DNS.get(host, [PUBLIC_ADDRESS])

    monkeypatch.setattr("avachat.core.fetcher.resolve_host", resolve)
