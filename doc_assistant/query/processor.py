import logging
import time
import uuid
from typing import List, Optional, Union

from doc_assistant.exceptions import ValidationError
from doc_assistant.models import ContextBudget, Document, Query, QueryResponse
from doc_assistant.topics import TopicExtractor
from .classifier import FailureClassifier
from .context_builder import ContextAssembler
from .retry import RetryController

"""
@file: processor.py
Document Query Processor for the document assistant

This module implements the QueryProcessor class, the surface the UI layer talks to:

- prepare_context: bounded, relevance-ranked excerpt of a document for a query
- ask_with_context: resilient completion call over a prepared context
- extract_topics: heading-like topic strings for the study-plan generator
- process_query: all of the above in one call, returning a QueryResponse

Usage:
    processor = QueryProcessor(config)
    response = await processor.process_query(document, "What is photosynthesis?")
    print(response.text)

Dependencies:
- ContextAssembler, RetryController, GeminiLLM and TopicExtractor.
- Configuration provides thresholds, retry factors and the LLM settings.
"""

class QueryProcessor:
    """
    Answers questions about a single document through a bounded context and a shrink-retry LLM call.

    Args:
        config (Any): Configuration object with get_nested.
        llm (Optional[Any]): Completion client (``async complete(request) -> str``); GeminiLLM by default.
        classifier (Optional[FailureClassifier]): Failure classifier for the retry controller.
        topic_extractor (Optional[TopicExtractor]): Custom topic extractor.

    Attributes:
        logger (logging.Logger): Logger for this processor.
        assembler (ContextAssembler): Builds bounded contexts.
        retry_controller (RetryController): Drives the completion calls.
        topic_extractor (TopicExtractor): Extracts topics.
    """
    def __init__(self, config, llm=None, classifier: Optional[FailureClassifier] = None, topic_extractor=None):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.config = config
        if llm is None:
            from .gemini_llm import GeminiLLM
            llm = GeminiLLM(config)
        self.llm = llm
        self.assembler = ContextAssembler(config)
        self.retry_controller = RetryController(llm, config, classifier=classifier)
        self.topic_extractor = topic_extractor or TopicExtractor(config)

    def prepare_context(
        self,
        document: Union[Document, str],
        query: Union[Query, str],
        budget: Optional[ContextBudget] = None
    ) -> str:
        """Bounded context for `query` over `document` (see ContextAssembler.prepare)."""
        return self.assembler.prepare(document, query, budget)

    async def ask_with_context(self, context: str, query: str, cancel_token=None) -> str:
        """
        Ask the LLM a question over an already prepared context.

        Returns:
            str: The generated answer, or the fixed apology when every attempt failed.
        """
        outcome = await self.retry_controller.run(context, query, cancel_token=cancel_token)
        return outcome.text

    def extract_topics(self, document: Union[Document, str]) -> List[str]:
        return self.topic_extractor.extract(document)

    async def process_query(
        self,
        document: Union[Document, str],
        query: str,
        budget: Optional[ContextBudget] = None,
        cancel_token=None
    ) -> QueryResponse:
        """
        Prepare a context for the query and answer it.

        Args:
            document (Document or str): The document to answer from.
            query (str): The user query string to process.
            budget (ContextBudget, optional): Context budget; CONTEXT.MAX_TOKENS by default.
            cancel_token (CancellationToken, optional): Checked between retry attempts.

        Returns:
            QueryResponse: Answer text, attempt records, context size and timing.

        Raises:
            ValidationError: If the query is empty or not a string.
            OperationCancelledError: If cancelled between attempts.
        """
        start_time = time.time()
        query_id = str(uuid.uuid4())
        if not query or not isinstance(query, str) or not query.strip():
            self.logger.info(f"process_query called with invalid query: {query!r} [query_id={query_id}]")
            raise ValidationError("Query must be a non-empty string.")
        self.logger.info(f"process_query called with query: {query!r} [query_id={query_id}]")

        context = self.prepare_context(document, query, budget)
        self.logger.info(f"Context prepared: {len(context)} chars [query_id={query_id}]")
        outcome = await self.retry_controller.run(context, query, cancel_token=cancel_token)
        processing_time = time.time() - start_time
        error = None
        if not outcome.succeeded and outcome.attempts:
            error = outcome.attempts[-1].error
        self.logger.info(
            f"Answered after {len(outcome.attempts)} attempt(s), success={outcome.succeeded}, "
            f"{processing_time:.2f}s [query_id={query_id}]"
        )
        return QueryResponse(
            text=outcome.text,
            attempts=outcome.attempts,
            context_chars=len(context),
            success=outcome.succeeded,
            error=error,
            processing_time=processing_time,
        )
