"""
@file: __init__.py
Query module public API for the document assistant.

This module exposes the main query-related classes and functions for external use, including:
    - QueryProcessor: prepare_context / ask_with_context / extract_topics surface
    - ContextAssembler, prepare_context: bounded context construction
    - RetryController: shrink-retry around the completion call
    - CompletionRequest, GeminiLLM: completion boundary
    - FailureKind, KeywordFailureClassifier: failure classification

All other internal utilities are kept private to the module.
"""
from .classifier import FailureKind, KeywordFailureClassifier, classify_failure
from .context_builder import TRUNCATION_MARKER, ContextAssembler, prepare_context
from .gemini_llm import CompletionRequest, GeminiLLM
from .print_utils import print_response
from .processor import QueryProcessor
from .retry import APOLOGY_MESSAGE, RetryController
from .scoring import rank_sections, score_sections
from .segmenter import segment_sections
