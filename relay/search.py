"""Google Custom Search client used to ground prompts with web context."""

import re
from typing import Iterable, Optional
from urllib.parse import urlparse

import httpx

from .config import SEARCH_QUERY_MAX_LENGTH, SEARCH_URL, Settings
from .logger import get_logger
from .models import GroundingDocument

log = get_logger("search")

# Conversational filler that only adds noise to a search query
_FILLER = re.compile(r"please|can you|could you|tell me|explain", re.IGNORECASE)
_PUNCTUATION = re.compile(r"[?!.,]")


def extract_search_query(text: str) -> str:
    """Turn a user request into a short search query."""
    query = _PUNCTUATION.sub("", _FILLER.sub("", text))
    query = " ".join(query.split())
    if not query:
        query = " ".join(text.split())
    return query[:SEARCH_QUERY_MAX_LENGTH]


def format_context(documents: Iterable[GroundingDocument]) -> str:
    """Serialize documents to the context block handed to a backend."""
    return "\n".join(f"- {doc.title}: {doc.snippet}" for doc in documents)


def _is_blocked(url: str, blocked_domains: tuple[str, ...]) -> bool:
    host = (urlparse(url).hostname or "").lower()
    if not host:
        return True
    return any(domain in host for domain in blocked_domains)


class GroundingRetriever:
    """Best-effort web search. Never raises; an empty list means no grounding."""

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self._transport = transport

    def is_configured(self) -> bool:
        return bool(self.settings.search_api_key and self.settings.search_cx)

    async def retrieve(self, query: str) -> list[GroundingDocument]:
        if not self.settings.grounding_enabled:
            log.debug("Grounding disabled, skipping search")
            return []

        if not self.is_configured():
            log.info("Google Search not configured, skipping grounding")
            return []

        search_query = extract_search_query(query)
        if not search_query:
            return []

        params = {
            "key": self.settings.search_api_key,
            "cx": self.settings.search_cx,
            "q": search_query,
            "num": self.settings.max_sources,
        }

        log.debug(f"Searching for: {search_query}")

        async with httpx.AsyncClient(
            timeout=self.settings.search_timeout,
            transport=self._transport,
        ) as client:
            try:
                response = await client.get(SEARCH_URL, params=params)
                response.raise_for_status()
                data = response.json()
            except httpx.HTTPStatusError as e:
                log.warning(f"Search API returned HTTP {e.response.status_code}")
                return []
            except httpx.TimeoutException:
                log.error(f"Search request timed out for query: {search_query}")
                return []
            except httpx.RequestError as e:
                log.error(f"Search request failed: {e}")
                return []
            except ValueError as e:
                log.error(f"Failed to parse search response as JSON: {e}")
                return []

        documents = self._parse(data)
        log.info(f"Grounding found {len(documents)} sources")
        return documents

    def _parse(self, data) -> list[GroundingDocument]:
        if not isinstance(data, dict):
            log.error("Invalid search response: expected a JSON object")
            return []

        items = data.get("items") or []
        if not isinstance(items, list):
            log.error("Invalid search response: 'items' is not a list")
            return []

        documents = []
        for item in items:
            if not isinstance(item, dict):
                continue
            title = item.get("title")
            link = item.get("link")
            if not title or not link:
                continue
            if _is_blocked(link, self.settings.blocked_domains):
                log.debug(f"Dropping blocked source: {link}")
                continue
            documents.append(GroundingDocument(
                title=title,
                url=link,
                snippet=item.get("snippet") or "",
            ))

        return documents[:self.settings.max_sources]
