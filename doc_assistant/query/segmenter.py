"""
segmenter.py
Splits document text into paragraph sections on blank-line boundaries.
"""

import re
from typing import List

from doc_assistant.models import Section

# One or more blank lines (lines holding only whitespace count as blank).
BLANK_LINE_RE = re.compile(r"\n[ \t\r\f\v]*\n\s*")


def segment_sections(text: str) -> List[Section]:
    """
    Split text into ordered sections.

    Sections are never split further; empty sections are dropped and indices are
    assigned to the surviving sections in document order.

    Args:
        text: Full document text.

    Returns:
        List[Section]: Sections with index 0..n-1 and score 0.
    """
    parts = (part.strip() for part in BLANK_LINE_RE.split(text))
    return [Section(index=i, text=part) for i, part in enumerate(p for p in parts if p)]
