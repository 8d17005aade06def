import dataclasses

import pytest

from doc_assistant.cancellation import CancellationToken, check_cancelled
from doc_assistant.exceptions import OperationCancelledError
from doc_assistant.models import Attempt, AttemptState, ContextBudget, Document, ExtractionResult


def test_context_budget_max_chars():
    assert ContextBudget(max_tokens=8000).max_chars == 32000
    assert ContextBudget(max_tokens=0).max_chars == 0


def test_document_stats():
    document = Document(text="word " * 1200, name="essay.txt")
    assert document.length == 6000
    stats = document.stats()
    assert stats.word_count == 1200
    assert stats.page_estimate == 3
    assert Document(text="").stats().page_estimate == 1


def test_document_is_immutable():
    document = Document(text="fixed")
    with pytest.raises(dataclasses.FrozenInstanceError):
        document.text = "changed"


def test_extraction_result_text_skips_empty_pages():
    result = ExtractionResult(pages=("one", "", "three"))
    assert result.text == "one\n\nthree"
    assert result.ok


def test_attempt_state_change_produces_new_record():
    attempt = Attempt(number=1, prompt_text="p", response_token_cap=1024, content_chars=1)
    sent = dataclasses.replace(attempt, state=AttemptState.SENT)
    assert attempt.state == AttemptState.PENDING
    assert sent.state == AttemptState.SENT


def test_cancellation_token():
    token = CancellationToken()
    assert not token.cancelled
    token.raise_if_cancelled("idle")
    token.cancel("shutting down")
    assert token.cancelled
    with pytest.raises(OperationCancelledError, match=r"\(batch 3\): shutting down"):
        token.raise_if_cancelled("batch 3")


def test_check_cancelled_accepts_none():
    check_cancelled(None, "anywhere")
