"""
@file: topics.py
Heuristic topic extraction over a document's full text.

Candidate topics are heading-like lines. Detection sits behind the HeadingDetector
interface so a formatting-aware detector can replace the line-pattern rules without
changing TopicExtractor.extract.

Rules of PatternHeadingDetector, evaluated per line:
    (a) a short line that starts uppercase and holds only letters, digits, spaces and hyphens
    (b) a numbered or bulleted line whose body (marker stripped) matches rule (a)
    (c) a short line followed by a blank line that starts with a letter and does not end in a period
"""

import logging
import re
from typing import Iterable, List, Optional, Sequence, Union

from doc_assistant.models import Document

DEFAULT_MAX_TOPICS = 20
DEFAULT_MAX_LINE_LENGTH = 100

HEADING_RE = re.compile(r'^[A-Z][A-Za-z0-9 \-]*$')
LIST_MARKER_RE = re.compile(r'^(?:\d+(?:\.\d+)*[.)]?|[A-Za-z][.)]|[-*•▪●–])\s+')


class HeadingDetector:
    """Interface: yield candidate topic strings from the lines of a document, in order."""

    def candidates(self, lines: Sequence[str]) -> Iterable[str]:
        raise NotImplementedError


class PatternHeadingDetector(HeadingDetector):
    def __init__(self, max_line_length: int = DEFAULT_MAX_LINE_LENGTH):
        self.max_line_length = max_line_length

    def _matches_heading(self, text: str) -> bool:
        return len(text) <= self.max_line_length and bool(HEADING_RE.match(text)) and not text.endswith('.')

    def candidates(self, lines: Sequence[str]) -> Iterable[str]:
        for i, raw in enumerate(lines):
            line = raw.strip()
            if not line or len(line) > self.max_line_length:
                continue
            if self._matches_heading(line):
                yield line
                continue
            marker = LIST_MARKER_RE.match(line)
            if marker:
                body = line[marker.end():].strip()
                if body and self._matches_heading(body):
                    yield body
                    continue
            followed_by_blank = i + 1 < len(lines) and not lines[i + 1].strip()
            if followed_by_blank and line[0].isalpha() and not line.endswith('.'):
                yield line


class TopicExtractor:
    """
    Extracts an ordered, de-duplicated list of candidate topics from document text.

    Args:
        config: Configuration object with get_nested (optional); reads TOPICS.MAX_TOPICS
            and TOPICS.MAX_LINE_LENGTH.
        detector (HeadingDetector, optional): Detection strategy, PatternHeadingDetector by default.
    """
    def __init__(self, config=None, detector: Optional[HeadingDetector] = None):
        self.logger = logging.getLogger(self.__class__.__name__)
        get = config.get_nested if config is not None and hasattr(config, 'get_nested') else (lambda key, default=None: default)
        self.max_topics = int(get('TOPICS.MAX_TOPICS', DEFAULT_MAX_TOPICS))
        self.detector = detector or PatternHeadingDetector(int(get('TOPICS.MAX_LINE_LENGTH', DEFAULT_MAX_LINE_LENGTH)))

    def extract(self, document: Union[Document, str]) -> List[str]:
        """
        Candidate topics in first-seen order, at most max_topics of them.

        Args:
            document: Document or raw text.

        Returns:
            List[str]: Unique topic strings.
        """
        text = document.text if isinstance(document, Document) else document
        topics = {}
        for candidate in self.detector.candidates(text.splitlines()):
            topics.setdefault(candidate, None)
            if len(topics) >= self.max_topics:
                break
        self.logger.debug(f"Extracted {len(topics)} topics")
        return list(topics)


def extract_topics(document: Union[Document, str], config=None) -> List[str]:
    return TopicExtractor(config).extract(document)
