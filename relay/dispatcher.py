"""Request pipeline: ground, classify, invoke, fall back.

Flow for one request:
1. Web search for context (best-effort, may be empty)
2. Classify the request text (code vs general)
3. Try backends in order until one answers:
   - Code → code-backend, then general-backend as fallback
   - General → general-backend only
4. Build a single immutable Response
"""

from dataclasses import dataclass
from typing import Callable, Optional

from .backends import Backend, CodeBackend, GeneralBackend
from .config import Settings
from .errors import BackendError
from .logger import get_logger
from .models import BackendResult, Category, Outcome, Request, Response
from .router import classify
from .search import GroundingRetriever, format_context

log = get_logger("dispatcher")

FALLBACK_SUFFIX = " (fallback)"

# Names accepted in Request.preferred_model
_PREFERRED_ALIASES = {
    "code": Category.CODE,
    "code-backend": Category.CODE,
    "general": Category.GENERAL,
    "general-backend": Category.GENERAL,
}


@dataclass(frozen=True)
class _Attempt:
    backend: Backend
    label: str


class Dispatcher:
    """Runs a Request through grounding, routing and backend fallback."""

    def __init__(
        self,
        settings: Settings,
        retriever: Optional[GroundingRetriever] = None,
        code_backend: Optional[Backend] = None,
        general_backend: Optional[Backend] = None,
        classifier: Callable[[str], Category] = classify,
    ):
        self.settings = settings
        self.retriever = retriever or GroundingRetriever(settings)
        self.code_backend = code_backend or CodeBackend(settings)
        self.general_backend = general_backend or GeneralBackend(settings)
        self.classifier = classifier

    def _route(self, request: Request) -> Category:
        """Pick the starting backend family; an explicit preference wins."""
        if request.preferred_model:
            preferred = _PREFERRED_ALIASES.get(request.preferred_model.strip().lower())
            if preferred is not None:
                return preferred
            log.warning(f"Unknown preferred model {request.preferred_model!r}, classifying instead")
        return self.classifier(request.text)

    def attempts_for(self, category: Category) -> list[_Attempt]:
        """Ordered backends to try for a category."""
        if category == Category.CODE:
            return [
                _Attempt(self.code_backend, self.code_backend.backend_id),
                _Attempt(
                    self.general_backend,
                    self.general_backend.backend_id + FALLBACK_SUFFIX,
                ),
            ]
        return [_Attempt(self.general_backend, self.general_backend.backend_id)]

    async def _invoke_chain(
        self, attempts: list[_Attempt], text: str, context: str
    ) -> tuple[BackendResult, Outcome]:
        for position, attempt in enumerate(attempts):
            try:
                answer = await attempt.backend.invoke(text, context)
            except BackendError as e:
                log.warning(f"Backend {attempt.label} failed: {e.message}")
                continue

            outcome = Outcome.SUCCEEDED if position == 0 else Outcome.DEGRADED_SUCCEEDED
            return BackendResult(text=answer, backend_id=attempt.label), outcome

        # Every attempt failed: the last one tried is the one on record
        log.error(f"All backends failed ({', '.join(a.label for a in attempts)})")
        return BackendResult(text="", backend_id=attempts[-1].label), Outcome.FAILED

    async def dispatch(self, request: Request) -> Response:
        sources = tuple(await self.retriever.retrieve(request.text))
        context = format_context(sources)

        category = self._route(request)
        log.info(f"Routing {category.value} request ({len(sources)} sources)")

        result, outcome = await self._invoke_chain(
            self.attempts_for(category), request.text, context
        )

        success = outcome != Outcome.FAILED or self.settings.suppress_failures

        return Response(
            success=success,
            text=result.text,
            backend_used=result.backend_id,
            grounding_performed=bool(context),
            outcome=outcome,
            sources=sources,
        )
