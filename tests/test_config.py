import tempfile
import pytest
from doc_assistant.config import get_config, Config

CONFIG_YAML = """
LOGGING:
  LEVEL: "DEBUG"
  LOG_FILE: "test.log"
SECURITY:
  GEMINI_API_KEY: ${GEMINI_API_KEY}
DOCUMENT_PROCESSING:
  BATCH_SIZE: 4
  BATCH_PAUSE_SECONDS: 0
CONTEXT:
  MAX_TOKENS: 2000
  SMALL_DOCUMENT_CHARS: 1000
RETRY:
  MAX_ATTEMPTS: 2
  SHRINK_FACTOR: 0.5
"""

def test_get_config_and_nested_access(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")

    with tempfile.NamedTemporaryFile("w+", suffix=".yaml", delete=False) as tmp:
        tmp.write(CONFIG_YAML)
        tmp.flush()
        config = get_config(tmp.name)

    assert config.get_nested("LOGGING.LEVEL") == "DEBUG"
    assert config.get_nested("LOGGING.LOG_FILE") == "test.log"
    assert config.get_nested("DOCUMENT_PROCESSING.BATCH_SIZE") == 4
    assert config.get_nested("CONTEXT.MAX_TOKENS") == 2000
    assert config.get_nested("RETRY.SHRINK_FACTOR") == 0.5
    # Test default value
    assert config.get_nested("NONEXISTENT.PATH", default="default") == "default"
    # Test environment variable substitution
    assert config.get_nested("SECURITY.GEMINI_API_KEY") == "test-key"


def test_missing_env_var_substitutes_none(monkeypatch, tmp_path):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    file_path = tmp_path / "config.yaml"
    file_path.write_text("SECURITY:\n  GEMINI_API_KEY: ${GEMINI_API_KEY}\n")
    config = get_config(str(file_path))
    assert config.get_nested("SECURITY.GEMINI_API_KEY") is None


def test_config_file_not_found():
    with pytest.raises(FileNotFoundError):
        get_config("/nonexistent/path/config.yaml")


def test_default_path_missing_returns_empty_config(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    config = get_config()
    assert config.get_nested("CONTEXT.MAX_TOKENS", 8000) == 8000


def test_invalid_yaml(tmp_path):
    bad_yaml = "LOGGING: [unclosed_list"
    file_path = tmp_path / "bad.yaml"
    file_path.write_text(bad_yaml)
    with pytest.raises(Exception):
        get_config(str(file_path))


def test_empty_yaml_file(tmp_path):
    file_path = tmp_path / "empty.yaml"
    file_path.write_text("")
    config = get_config(str(file_path))
    assert config.get_nested("LOGGING.LEVEL", "INFO") == "INFO"


def test_get_nested_non_dict_intermediate():
    config = Config({"CONTEXT": 5})
    assert config.get_nested("CONTEXT.MAX_TOKENS", "fallback") == "fallback"
