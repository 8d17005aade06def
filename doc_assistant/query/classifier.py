"""
classifier.py
Failure classification for completion calls.

The retry controller only needs to know whether a failure is worth retrying with a
smaller prompt. Classification is a plain callable (exception -> FailureKind) so a
stricter, structured-error classifier can replace the keyword heuristic without
touching the controller.
"""

import asyncio
from enum import Enum
from typing import Callable, Iterable

import httpx

from doc_assistant.exceptions import SizeLimitError, TransportError

from google.genai import errors as genai_errors


class FailureKind(str, Enum):
    SIZE_LIMIT = "size_limit"
    TRANSPORT = "transport"
    UNKNOWN = "unknown"


FailureClassifier = Callable[[BaseException], FailureKind]

SIZE_LIMIT_KEYWORDS = (
    "token",
    "exceed",
    "too long",
    "too large",
    "context length",
    "context window",
    "maximum length",
    "payload",
    "request size",
    "input size",
)


TRANSPORT_ERROR_TYPES = (
    TransportError,
    genai_errors.APIError,
    httpx.HTTPError,
    ConnectionError,
    TimeoutError,
    asyncio.TimeoutError,
)


class KeywordFailureClassifier:
    """
    Classifies failures by inspecting the failure message.

    A message containing size/token/"exceed"-type wording means SIZE_LIMIT; known
    network and service exception types mean TRANSPORT; anything else is UNKNOWN.
    """
    def __init__(self, keywords: Iterable[str] = SIZE_LIMIT_KEYWORDS):
        self.keywords = tuple(k.lower() for k in keywords)
        self.transport_types = TRANSPORT_ERROR_TYPES

    def __call__(self, exc: BaseException) -> FailureKind:
        if isinstance(exc, SizeLimitError):
            return FailureKind.SIZE_LIMIT
        message = str(exc).lower()
        if any(keyword in message for keyword in self.keywords):
            return FailureKind.SIZE_LIMIT
        if isinstance(exc, self.transport_types):
            return FailureKind.TRANSPORT
        return FailureKind.UNKNOWN


classify_failure = KeywordFailureClassifier()
