import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from doc_assistant.config import Config
from doc_assistant.exceptions import ConfigurationError
from doc_assistant.query.gemini_llm import CompletionRequest, GeminiLLM
from doc_assistant.query.prompts import DOCUMENT_INSTRUCTIONS, MINIMAL_CONTEXT_PREAMBLE, build_system_prompt


def _client(text):
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock(return_value=MagicMock(text=text))
    return client


def test_complete_passes_request_fields():
    client = _client("generated")
    llm = GeminiLLM(Config({'QUERY': {'MODEL_NAME': 'gemini-test'}}), client=client)
    request = CompletionRequest(system_prompt="system", user_query="question", max_response_tokens=99, temperature=0.2)
    assert asyncio.run(llm.complete(request)) == "generated"
    kwargs = client.aio.models.generate_content.call_args.kwargs
    assert kwargs['model'] == 'gemini-test'
    assert kwargs['contents'] == "question"
    assert kwargs['config'].system_instruction == "system"
    assert kwargs['config'].max_output_tokens == 99
    assert kwargs['config'].temperature == 0.2


def test_complete_missing_text_returns_empty_string():
    llm = GeminiLLM(Config({}), client=_client(None))
    assert asyncio.run(llm.complete(CompletionRequest(system_prompt="s", user_query="q"))) == ""


def test_service_errors_propagate():
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock(side_effect=RuntimeError("token limit exceeded"))
    llm = GeminiLLM(Config({}), client=client)
    with pytest.raises(RuntimeError, match="token limit exceeded"):
        asyncio.run(llm.complete(CompletionRequest(system_prompt="s", user_query="q")))


def test_missing_api_key_raises(monkeypatch, mocker):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    mocker.patch("doc_assistant.query.gemini_llm.load_dotenv")
    with pytest.raises(ConfigurationError):
        GeminiLLM(Config({}))


def test_api_key_from_config(monkeypatch, mocker):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    mocker.patch("doc_assistant.query.gemini_llm.load_dotenv")
    client_cls = mocker.patch("doc_assistant.query.gemini_llm.genai.Client")
    GeminiLLM(Config({'SECURITY': {'GEMINI_API_KEY': 'from-config'}}))
    client_cls.assert_called_once_with(api_key='from-config')


def test_explicit_api_key_wins(monkeypatch, mocker):
    monkeypatch.setenv("GEMINI_API_KEY", "from-env")
    mocker.patch("doc_assistant.query.gemini_llm.load_dotenv")
    client_cls = mocker.patch("doc_assistant.query.gemini_llm.genai.Client")
    GeminiLLM(Config({}), api_key="explicit")
    client_cls.assert_called_once_with(api_key='explicit')


def test_build_system_prompt():
    prompt = build_system_prompt("Plants convert light.")
    assert prompt.startswith(DOCUMENT_INSTRUCTIONS)
    assert prompt.endswith("Document content:\nPlants convert light.")
    assert MINIMAL_CONTEXT_PREAMBLE not in prompt
    minimal = build_system_prompt("Plants.", minimal=True)
    assert MINIMAL_CONTEXT_PREAMBLE in minimal
    assert build_system_prompt("x", instructions="Custom.").startswith("Custom.\n\n")
