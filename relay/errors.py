"""Backend failure types.

Grounding failures never leave the search module, so only backend
invocation has an exception hierarchy.
"""


class BackendError(Exception):
    """An inference backend could not produce a response."""

    def __init__(self, backend_id: str, message: str):
        self.backend_id = backend_id
        self.message = message
        super().__init__(f"{backend_id}: {message}")


class BackendUnavailableError(BackendError):
    """Missing configuration, transport failure, bad status or unparseable body."""
