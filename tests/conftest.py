"""Test configuration and fixtures."""

import pytest

from doc_assistant.config import Config


class ScriptedLLM:
    """Completion client that replays a script of responses and exceptions, recording each request."""

    def __init__(self, script):
        self.script = list(script)
        self.requests = []

    async def complete(self, request):
        self.requests.append(request)
        step = self.script.pop(0) if self.script else ""
        if isinstance(step, BaseException):
            raise step
        return step


@pytest.fixture
def test_config():
    """Config with the waits removed so retry and extraction tests run instantly."""
    return Config({
        'LOGGING': {'LEVEL': 'DEBUG'},
        'RETRY': {'BACKOFF_SECONDS': 0},
        'DOCUMENT_PROCESSING': {'BATCH_PAUSE_SECONDS': 0},
    })


@pytest.fixture
def scripted_llm():
    """Factory for ScriptedLLM instances."""
    return ScriptedLLM


@pytest.fixture
def temp_log_file(tmp_path):
    """Create a temporary log file."""
    log_file = tmp_path / "test.log"
    yield str(log_file)
    if log_file.exists():
        log_file.unlink()
