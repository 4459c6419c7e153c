import pytest

from utils.config import Config


class FakeResponse:
    """Stands in for an aiohttp response used as an async context manager."""

    def __init__(self, payload=None, status=200):
        self.payload = payload
        self.status = status

    async def json(self, content_type=None):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """Replays queued responses (or raises queued exceptions) for get/post calls."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def _next(self, method, url, kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def post(self, url, **kwargs):
        return self._next("POST", url, kwargs)

    def get(self, url, **kwargs):
        return self._next("GET", url, kwargs)


@pytest.fixture
def config(monkeypatch):
    monkeypatch.setenv("CHAINBASE_API_KEY", "test-key")
    monkeypatch.setenv("NEYNAR_API_KEY", "neynar-key")
    monkeypatch.setenv("SIGNER_UUID", "signer-1")
    monkeypatch.setenv("APP_URL", "https://lookup.example")
    monkeypatch.delenv("RESOLVE_NAME_CONTRACTS", raising=False)
    monkeypatch.delenv("QUERY_POLL_INTERVAL", raising=False)
    monkeypatch.delenv("QUERY_TIMEOUT_SECONDS", raising=False)
    return Config()
