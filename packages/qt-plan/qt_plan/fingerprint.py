"""Query fingerprinting: group structurally identical queries.

Literals are swapped for placeholders so that
``SELECT * FROM t WHERE id = 42`` and ``... WHERE id = 7`` share a key.
This is a regex heuristic for grouping history rows, not a SQL parser.
"""

from __future__ import annotations

import re

NUMBER_PLACEHOLDER = "N"
STRING_PLACEHOLDER = "S"
ARRAY_PLACEHOLDER = "A"
JSON_PLACEHOLDER = "J"

# Applied in order; each pass sees the output of the previous one.
_LITERAL_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\b\d+\b"), NUMBER_PLACEHOLDER),
    (re.compile(r"'[^']*'"), STRING_PLACEHOLDER),
    (re.compile(r"\[[^\]]*\]"), ARRAY_PLACEHOLDER),
    (re.compile(r"\{[^}]*\}"), JSON_PLACEHOLDER),
)

_WHITESPACE = re.compile(r"\s+")


def fingerprint_query(query: str) -> str:
    """Normalize query text into a stable grouping key.

    Args:
        query: Raw SQL text

    Returns:
        Query with number, string, array and JSON literals replaced by
        N, S, A and J, and whitespace collapsed.
    """
    normalized = query or ""
    for pattern, placeholder in _LITERAL_PATTERNS:
        normalized = pattern.sub(placeholder, normalized)
    return _WHITESPACE.sub(" ", normalized).strip()
