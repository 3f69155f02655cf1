"""
Pytest configuration and shared fixtures for Grounded Relay tests.
"""
from typing import Callable, Optional

import httpx
import pytest

from relay.backends import Backend
from relay.config import Settings
from relay.errors import BackendUnavailableError
from relay.models import GroundingDocument


@pytest.fixture
def settings() -> Settings:
    """Settings with every external service configured."""
    return Settings(
        search_api_key="search-key",
        search_cx="search-cx",
        tunnel_url="https://tunnel.example.com",
        gemini_api_key="gemini-key",
    )


@pytest.fixture
def make_transport() -> Callable[..., httpx.MockTransport]:
    """Build an httpx transport that answers every request with a handler.

    Captured requests are appended to ``transport.requests``.
    """
    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.MockTransport:
        requests = []

        def _record(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return handler(request)

        transport = httpx.MockTransport(_record)
        transport.requests = requests
        return transport

    return _make


@pytest.fixture
def two_docs() -> list[GroundingDocument]:
    return [
        GroundingDocument(title="Python functions", url="https://docs.python.org/3/", snippet="Defining functions"),
        GroundingDocument(title="Stack Overflow", url="https://stackoverflow.com/q/1", snippet=""),
    ]


class FakeRetriever:
    """Retriever double returning canned documents."""

    def __init__(self, documents: Optional[list] = None):
        self.documents = documents or []
        self.queries = []

    async def retrieve(self, query: str) -> list[GroundingDocument]:
        self.queries.append(query)
        return list(self.documents)


class FakeBackend(Backend):
    """Backend double that answers or fails without any HTTP."""

    def __init__(self, backend_id: str, answer: Optional[str] = None):
        self.backend_id = backend_id
        self.answer = answer
        self.calls = []

    async def invoke(self, task: str, context: str) -> str:
        self.calls.append((task, context))
        if self.answer is None:
            raise BackendUnavailableError(self.backend_id, "request timed out")
        return self.answer


@pytest.fixture
def fake_retriever() -> type[FakeRetriever]:
    return FakeRetriever


@pytest.fixture
def fake_backend() -> type[FakeBackend]:
    return FakeBackend
