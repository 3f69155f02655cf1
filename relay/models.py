"""Data passed between the pipeline stages."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Category(str, Enum):
    """Which backend family a request is routed to."""
    CODE = "code"
    GENERAL = "general"


class Outcome(str, Enum):
    SUCCEEDED = "succeeded"
    DEGRADED_SUCCEEDED = "degraded_succeeded"  # answered by a fallback backend
    FAILED = "failed"


@dataclass(frozen=True)
class Request:
    text: str
    preferred_model: Optional[str] = None


@dataclass(frozen=True)
class GroundingDocument:
    """A single web search hit used to ground the prompt."""
    title: str
    url: str
    snippet: str = ""

    def to_dict(self) -> dict:
        return {"title": self.title, "link": self.url, "snippet": self.snippet}


@dataclass(frozen=True)
class BackendResult:
    text: str
    backend_id: str


@dataclass(frozen=True)
class Response:
    """Terminal result of one pipeline run."""
    success: bool
    text: str
    backend_used: str
    grounding_performed: bool
    outcome: Outcome
    sources: tuple[GroundingDocument, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        """Wire shape consumed by the gateway and its clients."""
        return {
            "success": self.success,
            "response": self.text,
            "sources": [doc.to_dict() for doc in self.sources],
            "model_used": self.backend_used,
            "grounding_performed": self.grounding_performed,
            "outcome": self.outcome.value,
        }
