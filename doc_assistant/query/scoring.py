"""
@file: scoring.py
Relevance scoring and ranking utilities for document sections.

This module provides functions to:
    - Score sections against a query by counting whole-word occurrences of its significant terms.
    - Apply a heading bonus to short, capitalised sections.
    - Score only a uniform-stride sample when a document has very many sections.
    - Rank scored sections stably (score descending, original index ascending).

Scoring is deterministic: identical inputs always produce identical scores and ranking.
"""

import re
from typing import Any, List, Optional, Sequence

from doc_assistant.models import Query, Section

TERM_HIT_POINTS = 2
HEADING_BONUS = 5
HEADING_MAX_LENGTH = 100
DEFAULT_SAMPLE_CAP = 1000


def _term_patterns(terms: Sequence[str]) -> List[re.Pattern]:
    return [re.compile(r"\b" + re.escape(term) + r"\b", re.IGNORECASE) for term in terms]


def looks_like_heading(text: str) -> bool:
    """Short (under 100 chars) text that begins with an uppercase letter."""
    stripped = text.strip()
    return bool(stripped) and len(stripped) < HEADING_MAX_LENGTH and stripped[0].isupper()


def score_text(text: str, patterns: Sequence[re.Pattern], heading_requires_hits: bool = False) -> int:
    score = sum(TERM_HIT_POINTS * len(pattern.findall(text)) for pattern in patterns)
    if looks_like_heading(text) and (score > 0 or not heading_requires_hits):
        score += HEADING_BONUS
    return score


def sample_indices(total: int, cap: int) -> List[int]:
    """
    Positions of a uniform-stride sample of at most cap items out of total.

    Args:
        total: Number of items.
        cap: Maximum sample size.

    Returns:
        List[int]: Strictly increasing positions, all of them when total <= cap.
    """
    if cap <= 0:
        return []
    if total <= cap:
        return list(range(total))
    stride = total / cap
    return [int(i * stride) for i in range(cap)]


def score_sections(
    query: Query,
    sections: Sequence[Section],
    sample_cap: int = DEFAULT_SAMPLE_CAP,
    logger: Optional[Any] = None,
    heading_requires_hits: bool = False
) -> List[Section]:
    """
    Assign a relevance score to every section.

    Each whole-word, case-insensitive occurrence of a significant term adds 2 points;
    a heading-like section gets a further 5. When there are more sections than
    sample_cap, only a uniform-stride sample is scored and the rest keep score 0.

    The heading bonus alone lifts a section above zero, so a document with many short
    headings ("Chapter 7") can fill the top-ranked slots with headings that never mention
    the query. heading_requires_hits restricts the bonus to sections with at least one
    term hit.

    Args:
        query (Query): Query with derived significant terms.
        sections (Sequence[Section]): Sections in document order.
        sample_cap (int): Maximum number of sections to score.
        logger (Optional[Any]): Optional logger for debug output.
        heading_requires_hits (bool): Only award the heading bonus alongside a term hit.

    Returns:
        List[Section]: New Section records, same order as the input, with scores set.
    """
    patterns = _term_patterns(query.terms)
    sampled = set(sample_indices(len(sections), sample_cap))
    scored = [
        Section(index=s.index, text=s.text, score=score_text(s.text, patterns, heading_requires_hits) if pos in sampled else 0)
        for pos, s in enumerate(sections)
    ]
    if logger:
        hits = sum(1 for s in scored if s.score > 0)
        logger.debug(f"Scored {len(sampled)}/{len(sections)} sections for terms {list(query.terms)}: {hits} above zero")
    return scored


def rank_sections(sections: Sequence[Section]) -> List[Section]:
    """Sort by score descending; equal scores keep ascending index order."""
    return sorted(sections, key=lambda s: (-s.score, s.index))
