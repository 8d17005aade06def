import asyncio

import httpx
import pytest

from doc_assistant.cancellation import CancellationToken
from doc_assistant.exceptions import OperationCancelledError, SizeLimitError
from doc_assistant.models import AttemptState
from doc_assistant.query.classifier import FailureKind
from doc_assistant.query.prompts import MINIMAL_CONTEXT_PREAMBLE
from doc_assistant.query.retry import APOLOGY_MESSAGE, EMPTY_RESPONSE_MESSAGE, RetryController

CONTEXT = "".join(f"paragraph {i} of the source document. " for i in range(600))


def _size_error():
    return RuntimeError("Request payload exceeds the maximum number of tokens allowed")


def test_first_attempt_success_sends_full_context(test_config, scripted_llm):
    llm = scripted_llm(["the answer"])
    controller = RetryController(llm, test_config)
    outcome = asyncio.run(controller.run(CONTEXT, "What is discussed?"))
    assert outcome.text == "the answer"
    assert outcome.succeeded
    assert not outcome.fallback_used
    assert len(outcome.attempts) == 1
    assert outcome.attempts[0].state == AttemptState.SUCCEEDED
    request = llm.requests[0]
    assert request.user_query == "What is discussed?"
    assert request.system_prompt.endswith(CONTEXT)
    assert request.max_response_tokens == 1024
    assert request.temperature == 0.7


def test_third_attempt_success_after_size_failures(test_config, scripted_llm):
    llm = scripted_llm([_size_error(), _size_error(), "third time lucky"])
    controller = RetryController(llm, test_config)
    outcome = asyncio.run(controller.run(CONTEXT, "question"))
    assert outcome.text == "third time lucky"
    assert outcome.succeeded
    assert [a.state for a in outcome.attempts] == [
        AttemptState.RETRYABLE_FAILED,
        AttemptState.RETRYABLE_FAILED,
        AttemptState.SUCCEEDED,
    ]
    assert [a.content_chars for a in outcome.attempts] == [
        len(CONTEXT), int(len(CONTEXT) * 0.7), int(len(CONTEXT) * 0.7 ** 2)
    ]


def test_all_attempts_fail_returns_apology(test_config, scripted_llm):
    llm = scripted_llm([_size_error()] * 4)
    controller = RetryController(llm, test_config)
    outcome = asyncio.run(controller.run(CONTEXT, "question"))
    assert outcome.text == APOLOGY_MESSAGE
    assert outcome.fallback_used
    assert not outcome.succeeded
    assert len(llm.requests) == 4
    assert len(outcome.attempts) == 4
    assert outcome.attempts[-1].minimal
    assert all(a.state == AttemptState.RETRYABLE_FAILED for a in outcome.attempts)


def test_prompt_and_response_cap_shrink_monotonically(test_config, scripted_llm):
    llm = scripted_llm([_size_error()] * 4)
    controller = RetryController(llm, test_config)
    asyncio.run(controller.run(CONTEXT, "question"))
    prompt_lengths = [len(r.system_prompt) for r in llm.requests]
    caps = [r.max_response_tokens for r in llm.requests]
    assert prompt_lengths == sorted(prompt_lengths, reverse=True)
    assert len(set(prompt_lengths)) == 4
    assert caps == [1024, 819, 655, 524]


def test_shrunk_content_is_prefix_of_original_context(test_config, scripted_llm):
    llm = scripted_llm([_size_error(), _size_error(), "ok"])
    controller = RetryController(llm, test_config)
    outcome = asyncio.run(controller.run(CONTEXT, "question"))
    for attempt in outcome.attempts:
        content = attempt.prompt_text.split("Document content:\n", 1)[1]
        assert CONTEXT.startswith(content)
        assert len(content) == attempt.content_chars


def test_minimal_attempt_uses_preamble_and_small_prefix(test_config, scripted_llm):
    llm = scripted_llm([_size_error(), _size_error(), _size_error(), "minimal answer"])
    controller = RetryController(llm, test_config)
    outcome = asyncio.run(controller.run(CONTEXT, "question"))
    assert outcome.text == "minimal answer"
    minimal = outcome.attempts[-1]
    assert minimal.minimal
    assert minimal.number == 4
    assert minimal.content_chars == 4000
    assert MINIMAL_CONTEXT_PREAMBLE in llm.requests[-1].system_prompt
    assert MINIMAL_CONTEXT_PREAMBLE not in llm.requests[0].system_prompt


def test_transport_failures_are_retried(test_config, scripted_llm):
    llm = scripted_llm([httpx.ConnectError("connection refused"), ConnectionError("reset by peer"), "recovered"])
    controller = RetryController(llm, test_config)
    outcome = asyncio.run(controller.run(CONTEXT, "question"))
    assert outcome.text == "recovered"
    assert len(llm.requests) == 3


def test_unknown_failure_propagates(test_config, scripted_llm):
    llm = scripted_llm([ValueError("programming bug")])
    controller = RetryController(llm, test_config)
    with pytest.raises(ValueError, match="programming bug"):
        asyncio.run(controller.run(CONTEXT, "question"))
    assert len(llm.requests) == 1


def test_empty_response_maps_to_message(test_config, scripted_llm):
    llm = scripted_llm([""])
    controller = RetryController(llm, test_config)
    outcome = asyncio.run(controller.run(CONTEXT, "question"))
    assert outcome.text == EMPTY_RESPONSE_MESSAGE
    assert outcome.succeeded


def test_custom_classifier_is_used(test_config, scripted_llm):
    llm = scripted_llm([KeyError("structured size error"), "ok"])
    controller = RetryController(llm, test_config, classifier=lambda exc: FailureKind.SIZE_LIMIT)
    outcome = asyncio.run(controller.run(CONTEXT, "question"))
    assert outcome.text == "ok"
    assert len(llm.requests) == 2


def test_size_limit_error_instance_is_retryable(test_config, scripted_llm):
    llm = scripted_llm([SizeLimitError("rejected"), "ok"])
    controller = RetryController(llm, test_config)
    outcome = asyncio.run(controller.run(CONTEXT, "question"))
    assert outcome.text == "ok"


def test_max_attempts_configurable(scripted_llm):
    from doc_assistant.config import Config
    config = Config({'RETRY': {'MAX_ATTEMPTS': 2, 'BACKOFF_SECONDS': 0}})
    llm = scripted_llm([_size_error()] * 3)
    outcome = asyncio.run(RetryController(llm, config).run(CONTEXT, "question"))
    assert outcome.text == APOLOGY_MESSAGE
    assert len(llm.requests) == 3
    assert outcome.attempts[-1].number == 3


def test_cancelled_token_stops_before_first_attempt(test_config, scripted_llm):
    llm = scripted_llm(["never sent"])
    token = CancellationToken()
    token.cancel("user closed the tab")
    controller = RetryController(llm, test_config)
    with pytest.raises(OperationCancelledError, match="user closed the tab"):
        asyncio.run(controller.run(CONTEXT, "question", cancel_token=token))
    assert llm.requests == []


def test_cancellation_between_attempts(test_config):
    token = CancellationToken()

    class CancellingLLM:
        def __init__(self):
            self.calls = 0

        async def complete(self, request):
            self.calls += 1
            token.cancel()
            raise _size_error()

    llm = CancellingLLM()
    controller = RetryController(llm, test_config)
    with pytest.raises(OperationCancelledError):
        asyncio.run(controller.run(CONTEXT, "question", cancel_token=token))
    assert llm.calls == 1


def test_each_run_starts_a_fresh_chain(test_config, scripted_llm):
    llm = scripted_llm([_size_error(), "first", "second"])
    controller = RetryController(llm, test_config)
    first = asyncio.run(controller.run(CONTEXT, "question"))
    second = asyncio.run(controller.run(CONTEXT, "question"))
    assert len(first.attempts) == 2
    assert len(second.attempts) == 1
    assert second.attempts[0].content_chars == len(CONTEXT)
