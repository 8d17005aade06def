"""
@file: models.py
Core data records shared by the extraction, selection and completion stages.

Classes:
    Document: Immutable extracted text of a single source.
    Section: Paragraph-bounded span of a document, the unit of scoring and assembly.
    Query: A user question plus its derived significant terms.
    ContextBudget: Token budget and the character cap derived from it.
    ExtractionResult: Ordered per-page texts produced by the page extractor.
    Attempt: One request made by the retry controller.
    RetryOutcome: Result of a full retry chain.
    QueryResponse: End-to-end answer returned to callers.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from doc_assistant.exceptions import PageExtractionError, SourceUnreadableError

# Fixed character-per-token approximation used everywhere a token budget is converted.
CHARS_PER_TOKEN = 4

WORDS_PER_PAGE = 500


@dataclass(frozen=True)
class DocumentStats:
    word_count: int
    page_estimate: int


@dataclass(frozen=True)
class Document:
    """Immutable document text, produced once by extraction and read-only afterwards."""

    text: str
    name: Optional[str] = None

    @property
    def length(self) -> int:
        return len(self.text)

    def stats(self) -> DocumentStats:
        """Estimate word count and page count (roughly 500 words per page)."""
        words = len(self.text.split())
        return DocumentStats(word_count=words, page_estimate=max(1, math.ceil(words / WORDS_PER_PAGE)))


@dataclass(frozen=True)
class Section:
    """A paragraph of a document.

    Attributes:
        index (int): Ordinal position in the original document, stable for the section's lifetime.
        text (str): The paragraph text.
        score (int): Relevance score, 0 until assigned by the scorer.
    """

    index: int
    text: str
    score: int = 0


@dataclass(frozen=True)
class Query:
    text: str
    terms: Tuple[str, ...] = ()

    @classmethod
    def from_text(cls, text: str) -> "Query":
        from doc_assistant.query.keywords import derive_significant_terms
        return cls(text=text, terms=derive_significant_terms(text))


@dataclass(frozen=True)
class ContextBudget:
    max_tokens: int

    @property
    def max_chars(self) -> int:
        return self.max_tokens * CHARS_PER_TOKEN


@dataclass(frozen=True)
class ExtractionResult:
    """
    Ordered page texts of a paginated source.

    Attributes:
        pages (tuple): Page texts in page order; failed pages hold a placeholder string.
        page_errors (tuple): PageExtractionError for each page replaced by a placeholder, in page order.
        source_error (SourceUnreadableError): Set when the whole source was unreadable; pages then
            holds one placeholder.
    """

    pages: Tuple[str, ...]
    page_errors: Tuple[PageExtractionError, ...] = ()
    source_error: Optional[SourceUnreadableError] = None

    @property
    def failed_pages(self) -> Tuple[int, ...]:
        """1-based numbers of the pages that were replaced by placeholders."""
        return tuple(e.page_number for e in self.page_errors)

    @property
    def ok(self) -> bool:
        return self.source_error is None

    @property
    def text(self) -> str:
        return "\n\n".join(page for page in self.pages if page)


class AttemptState(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    SUCCEEDED = "succeeded"
    RETRYABLE_FAILED = "retryable_failed"
    FATAL_FAILED = "fatal_failed"


@dataclass(frozen=True)
class Attempt:
    """
    One request issued by the retry controller.

    Attempts are never mutated; a state change produces a new record via dataclasses.replace.

    Attributes:
        number (int): 1-based attempt number.
        prompt_text (str): System prompt sent with this attempt.
        response_token_cap (int): Maximum response tokens requested.
        content_chars (int): Length of the document content embedded in prompt_text.
        minimal (bool): True for the last-resort minimal-context attempt.
        state (AttemptState): Lifecycle state of the attempt.
        error (str): Failure message when the attempt failed.
    """

    number: int
    prompt_text: str
    response_token_cap: int
    content_chars: int
    minimal: bool = False
    state: AttemptState = AttemptState.PENDING
    error: Optional[str] = None


@dataclass(frozen=True)
class RetryOutcome:
    text: str
    attempts: Tuple[Attempt, ...] = ()
    succeeded: bool = False
    fallback_used: bool = False


@dataclass
class QueryResponse:
    """
    Represents the full response to a query.

    Attributes:
        text (str): The answer text, or the fixed apology when every attempt failed.
        attempts (tuple): Attempt records made while answering.
        context_chars (int): Length of the assembled context.
        success (bool): Whether a generated answer was obtained.
        error (str): Error message if the query failed (optional).
        processing_time (float): Time taken to process the query, in seconds.
    """

    text: str
    attempts: Tuple[Attempt, ...] = field(default_factory=tuple)
    context_chars: int = 0
    success: bool = True
    error: Optional[str] = None
    processing_time: float = 0.0
