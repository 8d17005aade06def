"""
context_builder.py
Builds the bounded context string sent to the LLM from a document and a query.

Three tiers, in priority order:
    1. Small documents are passed through unchanged.
    2. Otherwise an introduction block plus the highest-scoring sections (with their
       immediate neighbours) are assembled within the character budget.
    3. When no section scores above zero, the document is cut to a head and a tail
       joined by TRUNCATION_MARKER.
"""

import logging
from typing import List, Optional, Sequence, Tuple, Union

from doc_assistant.models import ContextBudget, Document, Query, Section
from .scoring import DEFAULT_SAMPLE_CAP, rank_sections, score_sections
from .segmenter import segment_sections

TRUNCATION_MARKER = "[...Document truncated due to size limitations...]"
SECTION_SEPARATOR = "\n\n"

DEFAULT_MAX_TOKENS = 8000
DEFAULT_SMALL_DOCUMENT_CHARS = 16000
DEFAULT_INTRO_FRACTION = 0.05
DEFAULT_INTRO_MIN_SECTIONS = 3
DEFAULT_TOP_N_SMALL = 20
DEFAULT_TOP_N_LARGE = 40
DEFAULT_LARGE_CORPUS_SECTIONS = 500
DEFAULT_HEAD_FRACTION = 0.7
DEFAULT_HEADING_BONUS_REQUIRES_HITS = False


def head_tail_truncate(text: str, max_chars: int, head_fraction: float = DEFAULT_HEAD_FRACTION) -> str:
    """
    Keep the start and end of text within max_chars, separated by TRUNCATION_MARKER.

    Args:
        text: Full document text.
        max_chars: Character budget for the kept text (the marker is extra).
        head_fraction: Share of the budget taken from the start of the document.

    Returns:
        str: text unchanged if it already fits, otherwise head + marker + tail.
    """
    if len(text) <= max_chars:
        return text
    head_chars = int(max_chars * head_fraction)
    tail_chars = max_chars - head_chars
    head = text[:head_chars]
    tail = text[len(text) - tail_chars:] if tail_chars > 0 else ""
    return f"{head}\n\n{TRUNCATION_MARKER}\n\n{tail}"


class ContextAssembler:
    """
    Assembles a bounded context from a document for a specific query.

    Args:
        config: Configuration object with get_nested (optional).

    Config keys (CONTEXT section):
        MAX_TOKENS, SMALL_DOCUMENT_CHARS, INTRO_FRACTION, INTRO_MIN_SECTIONS,
        TOP_N_SMALL, TOP_N_LARGE, LARGE_CORPUS_SECTIONS, SAMPLE_CAP, HEAD_FRACTION,
        HEADING_BONUS_REQUIRES_HITS
    """
    def __init__(self, config=None):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.config = config
        self.max_tokens = int(self._get_config('CONTEXT.MAX_TOKENS', DEFAULT_MAX_TOKENS))
        self.small_document_chars = int(self._get_config('CONTEXT.SMALL_DOCUMENT_CHARS', DEFAULT_SMALL_DOCUMENT_CHARS))
        self.intro_fraction = float(self._get_config('CONTEXT.INTRO_FRACTION', DEFAULT_INTRO_FRACTION))
        self.intro_min_sections = int(self._get_config('CONTEXT.INTRO_MIN_SECTIONS', DEFAULT_INTRO_MIN_SECTIONS))
        self.top_n_small = int(self._get_config('CONTEXT.TOP_N_SMALL', DEFAULT_TOP_N_SMALL))
        self.top_n_large = int(self._get_config('CONTEXT.TOP_N_LARGE', DEFAULT_TOP_N_LARGE))
        self.large_corpus_sections = int(self._get_config('CONTEXT.LARGE_CORPUS_SECTIONS', DEFAULT_LARGE_CORPUS_SECTIONS))
        self.sample_cap = int(self._get_config('CONTEXT.SAMPLE_CAP', DEFAULT_SAMPLE_CAP))
        self.head_fraction = float(self._get_config('CONTEXT.HEAD_FRACTION', DEFAULT_HEAD_FRACTION))
        self.heading_bonus_requires_hits = bool(self._get_config('CONTEXT.HEADING_BONUS_REQUIRES_HITS', DEFAULT_HEADING_BONUS_REQUIRES_HITS))

    def _get_config(self, key, default=None):
        if self.config is not None and hasattr(self.config, 'get_nested'):
            return self.config.get_nested(key, default)
        return default

    def default_budget(self) -> ContextBudget:
        return ContextBudget(max_tokens=self.max_tokens)

    def intro_count(self, total_sections: int) -> int:
        return min(total_sections, max(int(total_sections * self.intro_fraction), self.intro_min_sections))

    def top_n(self, total_sections: int) -> int:
        return self.top_n_small if total_sections <= self.large_corpus_sections else self.top_n_large

    def prepare(
        self,
        document: Union[Document, str],
        query: Union[Query, str],
        budget: Optional[ContextBudget] = None
    ) -> str:
        """
        Build the context string for a query.

        Args:
            document: The document (or its raw text).
            query: The query (or its raw text).
            budget: Token budget; defaults to CONTEXT.MAX_TOKENS.

        Returns:
            str: The full text for small documents, otherwise a context of at most
                 budget.max_chars characters (plus the truncation marker on the head/tail path).
        """
        text = document.text if isinstance(document, Document) else document
        if isinstance(query, str):
            query = Query.from_text(query)
        budget = budget or self.default_budget()

        if len(text) < self.small_document_chars:
            self.logger.info(f"Document has {len(text)} chars (< {self.small_document_chars}), using it completely")
            return text

        sections = segment_sections(text)
        if len(sections) <= 1:
            self.logger.info("Document has no paragraph structure, using head/tail truncation")
            return head_tail_truncate(text, budget.max_chars, self.head_fraction)

        scored = score_sections(
            query, sections,
            sample_cap=self.sample_cap,
            logger=self.logger,
            heading_requires_hits=self.heading_bonus_requires_hits
        )
        relevant = [s for s in rank_sections(scored) if s.score > 0][:self.top_n(len(sections))]
        if not relevant:
            self.logger.info("No section scored above zero, using head/tail truncation")
            return head_tail_truncate(text, budget.max_chars, self.head_fraction)

        context, included = self.assemble(sections, relevant, budget.max_chars)
        self.logger.info(
            f"Assembled context: {len(context)} chars from {len(included)}/{len(sections)} sections "
            f"({len(relevant)} relevant, budget {budget.max_chars} chars)"
        )
        return context

    def assemble(
        self,
        sections: Sequence[Section],
        relevant: Sequence[Section],
        max_chars: int
    ) -> Tuple[str, List[int]]:
        """
        Combine the introduction block with relevant sections and their neighbours.

        Args:
            sections: All sections in document order (position == index).
            relevant: Relevant sections in rank order.
            max_chars: Character cap for the result.

        Returns:
            Tuple[str, List[int]]: The context text and the indices it contains.
        """
        intro = list(sections[:self.intro_count(len(sections))])
        intro_text = SECTION_SEPARATOR.join(s.text for s in intro)
        if len(intro_text) > max_chars:
            self.logger.warning(f"Introduction block ({len(intro_text)} chars) exceeds budget, clipping")
            return intro_text[:max_chars], [s.index for s in intro]

        included = {s.index for s in intro}
        body: List[Section] = []
        used = len(intro_text)
        for section in relevant:
            group = [
                sections[i]
                for i in (section.index - 1, section.index, section.index + 1)
                if 0 <= i < len(sections) and i not in included
            ]
            if not group:
                continue
            cost = sum(len(SECTION_SEPARATOR) + len(s.text) for s in group)
            if used + cost > max_chars:
                self.logger.debug(f"Budget reached before section {section.index} (score {section.score})")
                break
            body.extend(group)
            included.update(s.index for s in group)
            used += cost

        body.sort(key=lambda s: s.index)
        parts = [intro_text] + [s.text for s in body]
        return SECTION_SEPARATOR.join(parts), [s.index for s in intro] + [s.index for s in body]


def prepare_context(
    document: Union[Document, str],
    query: Union[Query, str],
    budget: Optional[ContextBudget] = None,
    config=None
) -> str:
    """Convenience wrapper around ContextAssembler(config).prepare(...)."""
    return ContextAssembler(config).prepare(document, query, budget)
