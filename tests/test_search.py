"""
Unit tests for web grounding: query cleanup, context formatting and the
Google Custom Search client.
"""
from dataclasses import replace

import httpx
import pytest

from relay.models import GroundingDocument
from relay.search import GroundingRetriever, extract_search_query, format_context


def _items(count: int) -> list[dict]:
    return [
        {"title": f"Result {i}", "link": f"https://site{i}.example.com/page", "snippet": f"snippet {i}"}
        for i in range(count)
    ]


class TestExtractSearchQuery:
    """Tests for extract_search_query()."""

    def test_strips_filler_and_punctuation(self):
        assert extract_search_query("Please explain Python decorators?") == "Python decorators"

    def test_caps_length(self):
        assert len(extract_search_query("word " * 100)) == 100

    def test_falls_back_to_raw_text_when_only_filler(self):
        assert extract_search_query("please") == "please"


class TestFormatContext:
    """Tests for format_context()."""

    def test_empty_sequence_gives_empty_string(self):
        assert format_context([]) == ""

    def test_one_line_per_document(self):
        docs = [
            GroundingDocument(title="A", url="https://a.example.com", snippet="first"),
            GroundingDocument(title="B", url="https://b.example.com", snippet=""),
        ]
        assert format_context(docs) == "- A: first\n- B: "


class TestGroundingRetriever:
    """Tests for GroundingRetriever.retrieve()."""

    @pytest.mark.asyncio
    async def test_maps_items_in_provider_order(self, settings, make_transport):
        items = _items(2)
        items[1].pop("snippet")
        transport = make_transport(lambda request: httpx.Response(200, json={"items": items}))

        docs = await GroundingRetriever(settings, transport=transport).retrieve("fix this function")

        assert docs == [
            GroundingDocument(title="Result 0", url="https://site0.example.com/page", snippet="snippet 0"),
            GroundingDocument(title="Result 1", url="https://site1.example.com/page", snippet=""),
        ]

    @pytest.mark.asyncio
    async def test_request_carries_key_scope_and_count(self, settings, make_transport):
        transport = make_transport(lambda request: httpx.Response(200, json={}))

        await GroundingRetriever(settings, transport=transport).retrieve("Tell me about asyncio")

        (request,) = transport.requests
        assert request.url.host == "www.googleapis.com"
        assert request.url.params["key"] == "search-key"
        assert request.url.params["cx"] == "search-cx"
        assert request.url.params["num"] == "5"
        assert request.url.params["q"] == "about asyncio"

    @pytest.mark.asyncio
    async def test_never_returns_more_than_five(self, settings, make_transport):
        transport = make_transport(lambda request: httpx.Response(200, json={"items": _items(9)}))

        docs = await GroundingRetriever(settings, transport=transport).retrieve("news")

        assert len(docs) == 5

    @pytest.mark.asyncio
    async def test_no_items_key_means_no_documents(self, settings, make_transport):
        transport = make_transport(lambda request: httpx.Response(200, json={"kind": "customsearch#search"}))

        assert await GroundingRetriever(settings, transport=transport).retrieve("news") == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [403, 429, 500])
    async def test_bad_status_returns_empty(self, settings, make_transport, status):
        transport = make_transport(lambda request: httpx.Response(status, json={"error": "nope"}))

        assert await GroundingRetriever(settings, transport=transport).retrieve("news") == []

    @pytest.mark.asyncio
    async def test_timeout_returns_empty(self, settings, make_transport):
        def _timeout(request):
            raise httpx.ReadTimeout("timed out", request=request)

        transport = make_transport(_timeout)

        assert await GroundingRetriever(settings, transport=transport).retrieve("news") == []

    @pytest.mark.asyncio
    async def test_unreachable_provider_returns_empty(self, settings, make_transport):
        def _refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        transport = make_transport(_refuse)

        assert await GroundingRetriever(settings, transport=transport).retrieve("news") == []

    @pytest.mark.asyncio
    async def test_malformed_body_returns_empty(self, settings, make_transport):
        transport = make_transport(lambda request: httpx.Response(200, text="<html>oops</html>"))

        assert await GroundingRetriever(settings, transport=transport).retrieve("news") == []

    @pytest.mark.asyncio
    async def test_blocked_domains_are_dropped(self, settings, make_transport):
        items = [
            {"title": "Pin", "link": "https://www.pinterest.com/pin/1", "snippet": "x"},
            {"title": "Docs", "link": "https://docs.python.org/3/", "snippet": "y"},
        ]
        transport = make_transport(lambda request: httpx.Response(200, json={"items": items}))

        docs = await GroundingRetriever(settings, transport=transport).retrieve("news")

        assert [doc.title for doc in docs] == ["Docs"]

    @pytest.mark.asyncio
    async def test_missing_credentials_skip_the_call(self, settings, make_transport):
        transport = make_transport(lambda request: httpx.Response(200, json={"items": _items(1)}))
        retriever = GroundingRetriever(replace(settings, search_cx=""), transport=transport)

        assert await retriever.retrieve("news") == []
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_disabled_grounding_skips_the_call(self, settings, make_transport):
        transport = make_transport(lambda request: httpx.Response(200, json={"items": _items(1)}))
        retriever = GroundingRetriever(replace(settings, grounding_enabled=False), transport=transport)

        assert await retriever.retrieve("news") == []
        assert transport.requests == []
