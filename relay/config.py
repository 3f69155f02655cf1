"""Centralized configuration from environment variables."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env file if it exists
_env_file = Path(__file__).parent.parent / ".env"
load_dotenv(_env_file)

# =============================================================================
# Internal constants (sensible defaults, rarely need changing)
# =============================================================================

# Server
SERVER_PORT = int(os.getenv("MCP_PORT", "8000"))

# Google Custom Search (grounding)
SEARCH_URL = "https://www.googleapis.com/customsearch/v1"
MAX_SOURCES = 5
SEARCH_QUERY_MAX_LENGTH = 100
DEFAULT_BLOCKED_DOMAINS = ("pinterest.com", "facebook.com")

# Gemini (general backend)
GEMINI_API_URL = "https://generativelanguage.googleapis.com/v1beta/models"
GEMINI_TEMPERATURE = 0.7
GEMINI_MAX_OUTPUT_TOKENS = 2048

# Timeouts (seconds)
SEARCH_TIMEOUT = 10.0
GENERAL_TIMEOUT = 60.0
CODE_TIMEOUT = 120.0  # local generation through the tunnel is slow


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("true", "1", "yes")


def _csv(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None:
        return default
    return tuple(part.strip().lower() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class Settings:
    """Everything the pipeline needs from the outside world.

    Built once (usually via ``from_env``) and handed to each component, so
    nothing below this module touches ``os.environ``.
    """

    # Grounding
    search_api_key: str = ""
    search_cx: str = ""
    grounding_enabled: bool = True
    blocked_domains: tuple[str, ...] = DEFAULT_BLOCKED_DOMAINS

    # Code backend (Ollama behind a Cloudflare tunnel)
    tunnel_url: str = ""
    code_model: str = "qwen2.5-coder:7b"

    # General backend (Gemini)
    gemini_api_key: str = ""
    gemini_model: str = "gemini-1.5-flash"

    # Report success=True even when every backend failed
    suppress_failures: bool = True

    search_timeout: float = SEARCH_TIMEOUT
    general_timeout: float = GENERAL_TIMEOUT
    code_timeout: float = CODE_TIMEOUT
    max_sources: int = MAX_SOURCES

    @classmethod
    def from_env(cls) -> "Settings":
        google_key = os.getenv("GOOGLE_API_KEY", "").strip()
        return cls(
            search_api_key=google_key,
            search_cx=os.getenv("GOOGLE_SEARCH_CX", "").strip(),
            grounding_enabled=_flag("GROUNDING_ENABLED", "true"),
            blocked_domains=_csv("GROUNDING_BLOCKED_DOMAINS", DEFAULT_BLOCKED_DOMAINS),
            tunnel_url=os.getenv("CLOUDFLARE_TUNNEL_URL", "").strip().rstrip("/"),
            code_model=os.getenv("CODE_MODEL", "qwen2.5-coder:7b").strip() or "qwen2.5-coder:7b",
            gemini_api_key=os.getenv("GEMINI_API_KEY", "").strip() or google_key,
            gemini_model=os.getenv("GEMINI_MODEL", "gemini-1.5-flash").strip() or "gemini-1.5-flash",
            suppress_failures=_flag("RELAY_SUPPRESS_FAILURES", "true"),
        )
