"""
Grounded Relay - web-grounded prompt routing between two LLM backends.

Exports:
    ask(text, preferred_model) - Run a request through the full pipeline
    classify(text) - Routing decision for a request
    Dispatcher - The pipeline itself, for callers that inject their own parts

Pipeline:
    - Google Custom Search → context block (best-effort)
    - Code requests → Ollama coder via tunnel, Gemini as fallback
    - Everything else → Gemini
"""

from typing import Optional

from .config import Settings
from .dispatcher import Dispatcher
from .errors import BackendError, BackendUnavailableError
from .models import Category, GroundingDocument, Outcome, Request, Response
from .router import classify

__all__ = [
    "ask",
    "classify",
    "BackendError",
    "BackendUnavailableError",
    "Category",
    "Dispatcher",
    "GroundingDocument",
    "Outcome",
    "Request",
    "Response",
    "Settings",
]


async def ask(
    text: str,
    preferred_model: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> Response:
    """Answer a request using settings from the environment unless given."""
    dispatcher = Dispatcher(settings or Settings.from_env())
    return await dispatcher.dispatch(Request(text=text, preferred_model=preferred_model))
