"""
keywords.py
Utilities for deriving significant search terms from a user query.

A significant term is a case-folded query word longer than three characters that
is not a stop word. Derivation is pure: the same query always yields the same
terms in the same (first-seen) order.
"""

import re
from typing import Tuple

MIN_TERM_LENGTH = 4

STOP_WORDS = frozenset({
    "about", "above", "after", "again", "against", "also", "among", "because",
    "been", "before", "being", "below", "between", "both", "cannot", "could",
    "describe", "does", "doing", "down", "during", "each", "explain", "find",
    "from", "further", "give", "have", "having", "here", "into", "just", "know",
    "like", "list", "more", "most", "much", "must", "only", "other", "ought",
    "over", "please", "same", "should", "show", "some", "such", "summarize",
    "tell", "than", "that", "their", "theirs", "them", "then", "there", "these",
    "they", "this", "those", "through", "under", "until", "upon", "very", "want",
    "were", "what", "when", "where", "which", "while", "whom", "whose", "will",
    "with", "within", "without", "would", "your", "yours", "yourself",
})

_WORD_RE = re.compile(r"[^\W_]+(?:['-][^\W_]+)*")


def derive_significant_terms(query: str) -> Tuple[str, ...]:
    """
    Extract the significant terms of a query.

    Args:
        query: The raw user query.

    Returns:
        Tuple[str, ...]: Unique case-folded terms in order of first appearance.

    Example:
        >>> derive_significant_terms("Explain photosynthesis in plants")
        ('photosynthesis', 'plants')
    """
    seen = {}
    for word in _WORD_RE.findall(query.casefold()):
        if len(word) < MIN_TERM_LENGTH or word in STOP_WORDS:
            continue
        seen.setdefault(word, None)
    return tuple(seen)
