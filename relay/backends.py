"""Inference backends.

Each backend shapes its own request and response; the HTTP call and
error mapping are shared. Any failure to get a usable HTTP response is
raised as BackendUnavailableError so the dispatcher can fall back.
"""

from typing import Any, Optional

import httpx

from .config import (
    GEMINI_API_URL,
    GEMINI_MAX_OUTPUT_TOKENS,
    GEMINI_TEMPERATURE,
    Settings,
)
from .errors import BackendUnavailableError
from .logger import get_logger

log = get_logger("backends")

NO_RESPONSE_TEXT = "No response generated"


class Backend:
    """Base class: subclasses provide the endpoint and payload shaping."""

    backend_id = "backend"

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self._transport = transport

    @property
    def timeout(self) -> float:
        raise NotImplementedError

    def is_configured(self) -> bool:
        raise NotImplementedError

    def build_prompt(self, task: str, context: str) -> str:
        raise NotImplementedError

    def build_request(self, prompt: str) -> tuple[str, dict]:
        """Return (url, json payload)."""
        raise NotImplementedError

    def parse_response(self, data: dict) -> str:
        raise NotImplementedError

    def headers(self) -> dict:
        return {"Content-Type": "application/json"}

    async def invoke(self, task: str, context: str) -> str:
        """Generate text for a task, raising BackendError on failure."""
        if not self.is_configured():
            raise BackendUnavailableError(self.backend_id, "backend not configured")

        url, payload = self.build_request(self.build_prompt(task, context))

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(
                    url,
                    json=payload,
                    headers=self.headers(),
                )
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as e:
            log.error(f"HTTP error from {self.backend_id}: {e.response.status_code}")
            raise BackendUnavailableError(self.backend_id, f"HTTP {e.response.status_code}") from e
        except httpx.TimeoutException as e:
            log.error(f"{self.backend_id} timed out after {self.timeout}s")
            raise BackendUnavailableError(self.backend_id, "request timed out") from e
        except httpx.RequestError as e:
            log.error(f"Request error calling {self.backend_id}: {e}")
            raise BackendUnavailableError(self.backend_id, str(e)) from e
        except ValueError as e:
            log.error(f"Error parsing {self.backend_id} response: {e}")
            raise BackendUnavailableError(self.backend_id, "invalid JSON response") from e

        if not isinstance(data, dict):
            raise BackendUnavailableError(self.backend_id, "response is not a JSON object")

        text = self.parse_response(data)
        if not text:
            log.warning(f"{self.backend_id} returned empty content")
        return text


class CodeBackend(Backend):
    """Ollama coder model reached through a Cloudflare tunnel."""

    backend_id = "code-backend"

    @property
    def timeout(self) -> float:
        return self.settings.code_timeout

    def is_configured(self) -> bool:
        return bool(self.settings.tunnel_url)

    def build_prompt(self, task: str, context: str) -> str:
        return f"Context:\n{context}\n\nTask:\n{task}"

    def build_request(self, prompt: str) -> tuple[str, dict]:
        url = f"{self.settings.tunnel_url.rstrip('/')}/api/generate"
        return url, {
            "model": self.settings.code_model,
            "prompt": prompt,
            "stream": False,
        }

    def parse_response(self, data: dict) -> str:
        text = data.get("response", "")
        return text if isinstance(text, str) else ""


class GeneralBackend(Backend):
    """Hosted Gemini model."""

    backend_id = "general-backend"

    @property
    def timeout(self) -> float:
        return self.settings.general_timeout

    def is_configured(self) -> bool:
        return bool(self.settings.gemini_api_key)

    def build_prompt(self, task: str, context: str) -> str:
        return f"Context from web search:\n{context}\n\nUser request:\n{task}"

    def headers(self) -> dict:
        # Key travels in a header, never in the URL
        return {**super().headers(), "x-goog-api-key": self.settings.gemini_api_key}

    def build_request(self, prompt: str) -> tuple[str, dict]:
        url = f"{GEMINI_API_URL}/{self.settings.gemini_model}:generateContent"
        return url, {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": GEMINI_TEMPERATURE,
                "maxOutputTokens": GEMINI_MAX_OUTPUT_TOKENS,
            },
        }

    def parse_response(self, data: dict) -> str:
        # candidates[0].content.parts[0].text
        try:
            text: Any = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            log.warning("Unexpected Gemini response shape")
            return NO_RESPONSE_TEXT
        if not isinstance(text, str):
            return NO_RESPONSE_TEXT
        return text
