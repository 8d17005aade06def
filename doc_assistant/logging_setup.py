"""
@file: logging_setup.py
Logging setup for the document assistant.

setup_logging() installs two root handlers: a line-buffered rotating file handler
(timestamped records) and a console handler (level and message only). The Gemini
client stack logs every HTTP request at INFO; those loggers are held at WARNING
unless the assistant itself runs at DEBUG.

Usage:
    from doc_assistant.logging_setup import setup_logging
    setup_logging(LEVEL="DEBUG")
"""

import logging
import logging.handlers
from pathlib import Path

DEFAULT_LOG_FILE = "logs/doc_assistant.log"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024
DEFAULT_BACKUP_COUNT = 5

FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
CONSOLE_FORMAT = '%(levelname)s - %(message)s'

CLIENT_LOGGERS = ("httpx", "httpcore", "google_genai", "google.genai")

class LineBufferedRotatingFileHandler(logging.handlers.RotatingFileHandler):
    """RotatingFileHandler whose stream is line buffered, so each record reaches disk as it is written."""
    def _open(self):
        return open(self.baseFilename, self.mode, encoding=self.encoding, buffering=1)

def _load_logging_config(config_path):
    from doc_assistant.config import get_config
    try:
        return get_config(config_path)
    except (OSError, ValueError) as e:
        logging.getLogger(__name__).warning(f"Could not read logging settings from config: {e}")
        return None

def setup_logging(LOG_FILE: str = DEFAULT_LOG_FILE, LEVEL: str = None, config_path: str = None) -> None:
    """
    Configure root logging for the document assistant.

    Args:
        LOG_FILE: Path to the log file; parent directories are created.
        LEVEL: DEBUG, INFO, WARNING, ERROR or CRITICAL. When None, LOGGING.LEVEL is read
            from the configuration at config_path (INFO if unavailable).
        config_path: Configuration file consulted when LEVEL is None. LOGGING.MAX_BYTES and
            LOGGING.BACKUP_COUNT are read from it as well.
    """
    config = _load_logging_config(config_path) if LEVEL is None else None
    get = config.get_nested if config is not None else (lambda key, default=None: default)
    LEVEL = LEVEL or get('LOGGING.LEVEL', 'INFO')
    numeric_level = getattr(logging, str(LEVEL).upper(), logging.INFO)

    log_path = Path(LOG_FILE)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = LineBufferedRotatingFileHandler(
        str(log_path),
        maxBytes=int(get('LOGGING.MAX_BYTES', DEFAULT_MAX_BYTES)),
        backupCount=int(get('LOGGING.BACKUP_COUNT', DEFAULT_BACKUP_COUNT)),
    )
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    for handler in (file_handler, console_handler):
        handler.setLevel(numeric_level)
        root.addHandler(handler)
    root.setLevel(numeric_level)

    client_level = numeric_level if numeric_level <= logging.DEBUG else max(numeric_level, logging.WARNING)
    for name in CLIENT_LOGGERS:
        logging.getLogger(name).setLevel(client_level)

    logging.getLogger(__name__).info(f"Logging to {log_path} at {logging.getLevelName(numeric_level)}")
