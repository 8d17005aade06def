"""
@file: retry.py
Progressive shrink-retry around the completion boundary.

Each call to RetryController.run starts a fresh chain of Attempt records:

    attempt 1..MAX_ATTEMPTS  full context, then prefixes of 0.7^(n-1) of it, response cap 0.8^(n-1)
    minimal attempt          first MINIMAL_CONTEXT_CHARS of the context with an explanatory preamble
    fallback                 APOLOGY_MESSAGE

Shrunk content is always a prefix of the ORIGINAL context, never of the previous attempt's
slice. Later attempts therefore never compound truncation, at the cost of re-sending text an
earlier attempt already carried.

Only failures classified as SIZE_LIMIT or TRANSPORT are retried. UNKNOWN failures are raised
to the caller unchanged, and a cancelled token raises OperationCancelledError before the next
attempt.
"""

import asyncio
import logging
from dataclasses import replace
from typing import List, Optional

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from doc_assistant.cancellation import check_cancelled
from doc_assistant.exceptions import RetriesExhaustedError, SizeLimitError, TransportError
from doc_assistant.models import Attempt, AttemptState, RetryOutcome
from .classifier import FailureClassifier, FailureKind, classify_failure
from .gemini_llm import DEFAULT_MAX_RESPONSE_TOKENS, DEFAULT_TEMPERATURE, CompletionRequest
from .prompts import build_system_prompt

APOLOGY_MESSAGE = "I'm sorry, I encountered an error processing your question. Please try again."
EMPTY_RESPONSE_MESSAGE = "I couldn't generate a response."

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BACKOFF_SECONDS = 1.0
DEFAULT_SHRINK_FACTOR = 0.7
DEFAULT_RESPONSE_SHRINK_FACTOR = 0.8
DEFAULT_MINIMAL_CONTEXT_CHARS = 4000

RETRYABLE_ERRORS = (SizeLimitError, TransportError)


class RetryController:
    """
    Drives a completion client through shrinking attempts until one succeeds.

    Args:
        llm: Completion client exposing ``async complete(CompletionRequest) -> str``.
        config: Configuration object with get_nested (optional).
        classifier (FailureClassifier): Maps an exception to a FailureKind.

    Config keys:
        RETRY.MAX_ATTEMPTS, RETRY.BACKOFF_SECONDS, RETRY.SHRINK_FACTOR,
        RETRY.RESPONSE_SHRINK_FACTOR, RETRY.MINIMAL_CONTEXT_CHARS,
        QUERY.MAX_TOKENS, QUERY.TEMPERATURE
    """
    def __init__(self, llm, config=None, classifier: Optional[FailureClassifier] = None):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.llm = llm
        self.config = config
        self.classifier = classifier or classify_failure
        self.max_attempts = int(self._get_config('RETRY.MAX_ATTEMPTS', DEFAULT_MAX_ATTEMPTS))
        self.backoff_seconds = float(self._get_config('RETRY.BACKOFF_SECONDS', DEFAULT_BACKOFF_SECONDS))
        self.shrink_factor = float(self._get_config('RETRY.SHRINK_FACTOR', DEFAULT_SHRINK_FACTOR))
        self.response_shrink_factor = float(self._get_config('RETRY.RESPONSE_SHRINK_FACTOR', DEFAULT_RESPONSE_SHRINK_FACTOR))
        self.minimal_context_chars = int(self._get_config('RETRY.MINIMAL_CONTEXT_CHARS', DEFAULT_MINIMAL_CONTEXT_CHARS))
        self.max_response_tokens = int(self._get_config('QUERY.MAX_TOKENS', DEFAULT_MAX_RESPONSE_TOKENS))
        self.temperature = float(self._get_config('QUERY.TEMPERATURE', DEFAULT_TEMPERATURE))

    def _get_config(self, key, default=None):
        if self.config is not None and hasattr(self.config, 'get_nested'):
            return self.config.get_nested(key, default)
        return default

    def content_chars_for(self, number: int, original_chars: int) -> int:
        return int(original_chars * self.shrink_factor ** (number - 1))

    def response_cap_for(self, number: int) -> int:
        return max(1, int(self.max_response_tokens * self.response_shrink_factor ** (number - 1)))

    def build_attempt(self, number: int, context: str, minimal: bool = False) -> Attempt:
        """
        Create the Attempt record for attempt `number` over the original context.

        Args:
            number: 1-based attempt number.
            context: The original, unshrunk context.
            minimal: Build the last-resort minimal-context attempt.

        Returns:
            Attempt: A new PENDING attempt.
        """
        if minimal:
            previous_chars = self.content_chars_for(self.max_attempts, len(context))
            content = context[:min(self.minimal_context_chars, previous_chars)]
        else:
            content = context[:self.content_chars_for(number, len(context))]
        return Attempt(
            number=number,
            prompt_text=build_system_prompt(content, minimal=minimal),
            response_token_cap=self.response_cap_for(number),
            content_chars=len(content),
            minimal=minimal,
        )

    async def _send(self, attempt: Attempt, query: str, history: List[Attempt]) -> str:
        sent = replace(attempt, state=AttemptState.SENT)
        self.logger.info(
            f"Attempt {attempt.number}{' (minimal context)' if attempt.minimal else ''}: "
            f"{attempt.content_chars} content chars, response cap {attempt.response_token_cap}"
        )
        request = CompletionRequest(
            system_prompt=attempt.prompt_text,
            user_query=query,
            max_response_tokens=attempt.response_token_cap,
            temperature=self.temperature,
        )
        try:
            text = await self.llm.complete(request)
        except Exception as exc:
            kind = self.classifier(exc)
            if kind == FailureKind.UNKNOWN:
                history.append(replace(sent, state=AttemptState.FATAL_FAILED, error=str(exc)))
                self.logger.error(f"Attempt {attempt.number} failed with an unclassified error: {exc!r}")
                raise
            history.append(replace(sent, state=AttemptState.RETRYABLE_FAILED, error=str(exc)))
            self.logger.warning(f"Attempt {attempt.number} failed ({kind.value}): {exc}")
            error_type = SizeLimitError if kind == FailureKind.SIZE_LIMIT else TransportError
            raise error_type(str(exc)) from exc
        history.append(replace(sent, state=AttemptState.SUCCEEDED))
        return text or EMPTY_RESPONSE_MESSAGE

    async def _run_chain(self, context: str, query: str, history: List[Attempt], cancel_token=None) -> str:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_fixed(self.backoff_seconds),
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            before_sleep=before_sleep_log(self.logger, logging.WARNING),
            reraise=True,
        )
        try:
            async for attempt_ctx in retrying:
                with attempt_ctx:
                    number = attempt_ctx.retry_state.attempt_number
                    check_cancelled(cancel_token, f"before attempt {number}")
                    return await self._send(self.build_attempt(number, context), query, history)
        except RETRYABLE_ERRORS as exc:
            self.logger.warning(f"Shrink attempts exhausted after {self.max_attempts} tries ({exc}), trying minimal context")

        await asyncio.sleep(self.backoff_seconds)
        check_cancelled(cancel_token, "before minimal-context attempt")
        minimal = self.build_attempt(self.max_attempts + 1, context, minimal=True)
        try:
            return await self._send(minimal, query, history)
        except RETRYABLE_ERRORS as exc:
            raise RetriesExhaustedError(f"All {len(history)} attempts failed: {exc}", attempts=history) from exc

    async def run(self, context: str, query: str, cancel_token=None) -> RetryOutcome:
        """
        Answer a query over a context, shrinking the context on size or transport failures.

        Args:
            context (str): Assembled document context (the shrink base for every attempt).
            query (str): The user's question.
            cancel_token (CancellationToken, optional): Checked before every attempt.

        Returns:
            RetryOutcome: The generated text, or APOLOGY_MESSAGE with fallback_used=True.

        Raises:
            OperationCancelledError: If the token is cancelled between attempts.
            Exception: Failures the classifier reports as UNKNOWN, unchanged.
        """
        history: List[Attempt] = []
        try:
            text = await self._run_chain(context, query, history, cancel_token)
        except RetriesExhaustedError as exc:
            self.logger.error(f"Returning fallback answer: {exc}")
            return RetryOutcome(text=APOLOGY_MESSAGE, attempts=tuple(exc.attempts), succeeded=False, fallback_used=True)
        return RetryOutcome(text=text, attempts=tuple(history), succeeded=True)
