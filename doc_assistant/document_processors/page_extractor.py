"""
@file: page_extractor.py
Batched, order-preserving text extraction for paginated sources.

A paginated source exposes its page count and, per page, positioned text fragments.
PageExtractor walks the pages in fixed-size batches: the pages of a batch are awaited
together, batches run one after another, and page texts are always returned in page
order. Pages only overlap when the source yields while reading them; PyMuPDFSource reads
synchronously, so its pages are extracted one at a time.

A failing page is replaced by a placeholder and its PageExtractionError is kept on the
result; an unreadable source yields a single placeholder page and a SourceUnreadableError
instead of raising.

Major Components:
- TextFragment: one positioned piece of text on a page
- PaginatedSource: protocol the extractor depends on
- reconstruct_lines: rebuilds line breaks and word spacing from fragment coordinates
- PageExtractor: batch scheduler with per-page fault isolation
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence, Union

from doc_assistant.cancellation import check_cancelled
from doc_assistant.exceptions import OperationCancelledError, PageExtractionError, SourceUnreadableError
from doc_assistant.models import ExtractionResult

DEFAULT_BATCH_SIZE = 10
DEFAULT_LARGE_DOCUMENT_PAGES = 100
DEFAULT_BATCH_PAUSE_SECONDS = 0.01
DEFAULT_LINE_EPSILON = 2.0
DEFAULT_WORD_GAP = 1.0

PAGE_PLACEHOLDER = "[Page {page_number}: text could not be extracted]"
SOURCE_PLACEHOLDER = "[Unable to extract text from {name}: {error}]"


@dataclass(frozen=True)
class TextFragment:
    """A piece of text with its horizontal start, vertical position and width, in page units."""

    text: str
    x: float
    y: float
    width: float = 0.0


class PaginatedSource(Protocol):
    name: str

    @property
    def page_count(self) -> int:
        ...

    async def page_fragments(self, page_number: int) -> Sequence[TextFragment]:
        """Fragments of 1-based page `page_number`, in content order."""
        ...


def reconstruct_lines(
    fragments: Sequence[TextFragment],
    line_epsilon: float = DEFAULT_LINE_EPSILON,
    word_gap: float = DEFAULT_WORD_GAP
) -> str:
    """
    Join fragments into text, starting a new line whenever the vertical position moves.

    Args:
        fragments: Fragments in content order.
        line_epsilon: Vertical movement that starts a new line.
        word_gap: Horizontal gap after the previous fragment that implies a space.

    Returns:
        str: Page text with one output line per detected text line.
    """
    lines: List[str] = []
    current: List[str] = []
    prev: Optional[TextFragment] = None
    for fragment in fragments:
        if not fragment.text:
            continue
        if prev is not None and abs(fragment.y - prev.y) > line_epsilon:
            lines.append("".join(current).rstrip())
            current = []
            prev = None
        if prev is not None and current:
            gap = fragment.x - (prev.x + prev.width)
            if gap > word_gap and not current[-1][-1:].isspace() and not fragment.text[:1].isspace():
                current.append(" ")
        current.append(fragment.text)
        prev = fragment
    if current:
        lines.append("".join(current).rstrip())
    return "\n".join(lines)


class PageExtractor:
    """
    Extracts page texts from a PaginatedSource in bounded concurrent batches.

    Args:
        config: Configuration object with get_nested (optional).

    Config keys (DOCUMENT_PROCESSING section):
        BATCH_SIZE, LARGE_DOCUMENT_PAGES, BATCH_PAUSE_SECONDS, LINE_EPSILON, WORD_GAP
    """
    def __init__(self, config=None):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.config = config
        self.batch_size = int(self._get_config('DOCUMENT_PROCESSING.BATCH_SIZE', DEFAULT_BATCH_SIZE))
        self.large_document_pages = int(self._get_config('DOCUMENT_PROCESSING.LARGE_DOCUMENT_PAGES', DEFAULT_LARGE_DOCUMENT_PAGES))
        self.batch_pause_seconds = float(self._get_config('DOCUMENT_PROCESSING.BATCH_PAUSE_SECONDS', DEFAULT_BATCH_PAUSE_SECONDS))
        self.line_epsilon = float(self._get_config('DOCUMENT_PROCESSING.LINE_EPSILON', DEFAULT_LINE_EPSILON))
        self.word_gap = float(self._get_config('DOCUMENT_PROCESSING.WORD_GAP', DEFAULT_WORD_GAP))

    def _get_config(self, key, default=None):
        if self.config is not None and hasattr(self.config, 'get_nested'):
            return self.config.get_nested(key, default)
        return default

    def batch_size_for(self, page_count: int) -> int:
        """Batch size for a source; halved above LARGE_DOCUMENT_PAGES to bound peak memory."""
        if page_count > self.large_document_pages:
            return max(1, self.batch_size // 2)
        return max(1, self.batch_size)

    async def _extract_page(self, source: PaginatedSource, page_number: int) -> Union[str, PageExtractionError]:
        """Text of one page, or the PageExtractionError describing why it could not be read."""
        try:
            fragments = await source.page_fragments(page_number)
            return reconstruct_lines(fragments, self.line_epsilon, self.word_gap)
        except (asyncio.CancelledError, OperationCancelledError):
            raise
        except Exception as e:
            fault = PageExtractionError(f"page {page_number}: {e}", page_number=page_number)
            self.logger.warning(f"Failed to extract {getattr(source, 'name', 'source')} {fault}")
            return fault

    async def extract(self, source: PaginatedSource, cancel_token=None) -> ExtractionResult:
        """
        Extract every page of a source in page order.

        Args:
            source (PaginatedSource): The paginated document.
            cancel_token (CancellationToken, optional): Checked before each batch.

        Returns:
            ExtractionResult: Page texts in order; unreadable sources give one placeholder page.

        Raises:
            OperationCancelledError: If the token is cancelled between batches.
        """
        name = getattr(source, 'name', 'document')
        try:
            page_count = source.page_count
        except Exception as e:
            fault = SourceUnreadableError(f"{name}: {e}")
            self.logger.error(f"Unable to read {fault}")
            return ExtractionResult(pages=(SOURCE_PLACEHOLDER.format(name=name, error=e),), source_error=fault)

        batch_size = self.batch_size_for(page_count)
        self.logger.info(f"Extracting {page_count} pages from {name} in batches of {batch_size}")
        pages: List[str] = []
        errors: List[PageExtractionError] = []
        for start in range(1, page_count + 1, batch_size):
            check_cancelled(cancel_token, f"before page {start} of {name}")
            numbers = range(start, min(start + batch_size, page_count + 1))
            texts = await asyncio.gather(*(self._extract_page(source, n) for n in numbers))
            for number, text in zip(numbers, texts):
                if isinstance(text, PageExtractionError):
                    errors.append(text)
                    text = PAGE_PLACEHOLDER.format(page_number=number)
                pages.append(text)
            self.logger.debug(f"Extracted pages {numbers.start}-{numbers.stop - 1} of {page_count}")
            if numbers.stop <= page_count:
                await asyncio.sleep(self.batch_pause_seconds)
        if errors:
            failed = [e.page_number for e in errors]
            self.logger.warning(f"{len(errors)} of {page_count} pages of {name} could not be extracted: {failed}")
        return ExtractionResult(pages=tuple(pages), page_errors=tuple(errors))
