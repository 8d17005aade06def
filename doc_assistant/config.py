"""
Configuration module for the document assistant.

This module provides a Config class for loading and accessing configuration values
from a YAML file, with support for environment variable substitution in the SECURITY section.
Every tunable threshold (small-document size, sampling cap, batch sizes, retry factors)
is read through Config.get_nested with an in-code default, so an empty Config is valid.
"""

import os
from pathlib import Path
import yaml
import logging
from dotenv import load_dotenv

DEFAULT_CONFIG_PATH = "./config/config.yaml"

class Config:
    """
    Provides access to configuration values loaded from a dictionary.

    Supports nested access using dot notation (e.g., 'LOGGING.LEVEL').
    """
    def __init__(self, config_data: dict = None):
        """
        Initialize the Config object.

        Args:
            config_data: Dictionary containing configuration data.
        """
        self.logger = logging.getLogger(self.__class__.__name__)
        self._config = config_data or {}

    def get_nested(self, path: str, default=None):
        """
        Retrieve a nested configuration value using dot notation.

        Args:
            path: Configuration path using dot notation (e.g., 'LOGGING.LEVEL').
            default: Value to return if the path does not exist.

        Returns:
            The configuration value at the specified path, or the default if not found.
        """
        current = self._config
        for key in path.split('.'):
            if isinstance(current, dict) and key in current:
                current = current[key]
            else:
                self.logger.debug(f"Config.get_nested({path}) not found, returning default={default!r}")
                return default
        self.logger.debug(f"Config.get_nested({path}) -> {current!r}")
        return current

def get_config(config_path: str = None) -> Config:
    """
    Load configuration from a YAML file and return a Config object.

    When no path is given and the default file is absent, an empty Config is
    returned so every component falls back to its built-in defaults.

    Args:
        config_path: Path to the configuration YAML file.

    Returns:
        Config: An instance of the Config class with loaded configuration data.

    Raises:
        FileNotFoundError: If an explicitly requested configuration file does not exist.
        yaml.YAMLError: If the configuration file is invalid YAML.
    """
    logger = logging.getLogger(__name__)
    logger.info(f"Called get_config(config_path={config_path})")
    load_dotenv()
    explicit = config_path is not None
    config_path = Path(config_path) if config_path else Path(DEFAULT_CONFIG_PATH)

    if not config_path.exists():
        if explicit:
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        logger.warning(f"No configuration file at {config_path}, using defaults")
        return Config({})

    with open(config_path) as f:
        config_data = yaml.safe_load(f) or {}

    # Substitute environment variables in the SECURITY section
    if 'SECURITY' in config_data:
        for key, value in config_data['SECURITY'].items():
            if isinstance(value, str) and value.startswith('${') and value.endswith('}'):
                env_var = value[2:-1]
                config_data['SECURITY'][key] = os.getenv(env_var)

    return Config(config_data)
