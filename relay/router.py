"""Request classification.

Two-way routing:
- Code tasks → self-hosted coder model (through the tunnel)
- Everything else → hosted general-purpose model

Plain substring matching, so "script" also matches "subscription".
Good enough for picking a backend; the dispatcher accepts any other
classifier with the same signature.
"""

from .models import Category

CODE_KEYWORDS = frozenset({
    'code', 'function', 'implement', 'script', 'program',
    'debug', 'fix', 'refactor',
    'rust', 'python', 'javascript', 'typescript', 'sql',  # languages
    'api', 'endpoint', 'algorithm',
})


def classify(text: str) -> Category:
    """
    Decide which backend family should answer a request.

    Returns: Category.CODE if any keyword occurs anywhere in the
    lower-cased text, Category.GENERAL otherwise.
    """
    lowered = text.lower()
    if any(keyword in lowered for keyword in CODE_KEYWORDS):
        return Category.CODE
    return Category.GENERAL
