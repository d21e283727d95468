"""Shared pytest fixtures for mparser tests."""

import sys
from pathlib import Path

import httpx
import pytest

# Add the package to the path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

_CONFIG_ENV = ("LISTEN_HOST", "LISTEN_PORT", "SSL_ON", "SSL_CERT_PATH", "SSL_KEY_PATH", "MPARSER_CONFIG")


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path) -> Path:
    """Point config lookups at an empty temp dir and clear config env vars."""
    config_home = tmp_path / "xdg-config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    for name in _CONFIG_ENV:
        monkeypatch.delenv(name, raising=False)
    return config_home / "mparser" / "config.json"


def page_key(url: httpx.URL) -> str:
    """Key a request URL as scheme://host[:port]/path?query, always with a path."""
    return f"{url.scheme}://{url.netloc.decode('ascii')}{url.raw_path.decode('ascii')}"


@pytest.fixture
def page_client():
    """Build an httpx client that serves canned page bodies by URL.

    Unknown URLs get an empty 404; URLs listed in ``refuse`` fail to connect.
    """
    clients: list[httpx.Client] = []

    def _make(pages: dict[str, str] | None = None, refuse: set[str] | None = None, seen: list[str] | None = None):
        pages = pages or {}
        refuse = refuse or set()

        def handler(request: httpx.Request) -> httpx.Response:
            url = page_key(request.url)
            if seen is not None:
                seen.append(url)
            if url in refuse:
                raise httpx.ConnectError("Connection refused", request=request)
            if url not in pages:
                return httpx.Response(404, text="")
            return httpx.Response(200, text=pages[url])

        client = httpx.Client(transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.close()
