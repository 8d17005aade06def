"""
@file: gemini_llm.py
Completion boundary: request record plus an async wrapper around the Gemini API (google-genai).

Any object with an ``async complete(request: CompletionRequest) -> str`` method can stand in
for GeminiLLM; the retry controller depends on nothing else.

Environment:
    - The API key comes from configuration (SECURITY.GEMINI_API_KEY, usually "${GEMINI_API_KEY}")
      and falls back to the GEMINI_API_KEY environment variable (a .env file is honoured).

Typical usage example:
    llm = GeminiLLM(config)
    text = await llm.complete(CompletionRequest(system_prompt="...", user_query="What is X?"))
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv
from google import genai
from google.genai import types

from doc_assistant.exceptions import ConfigurationError

DEFAULT_MODEL_NAME = "gemini-2.0-flash"
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_RESPONSE_TOKENS = 1024


@dataclass(frozen=True)
class CompletionRequest:
    """Parameters for one completion call."""

    system_prompt: str
    user_query: str
    max_response_tokens: int = DEFAULT_MAX_RESPONSE_TOKENS
    temperature: float = DEFAULT_TEMPERATURE


class GeminiLLM:
    """
    Async wrapper for Gemini completion calls.

    Attributes:
        logger (logging.Logger): Logger for the class.
        config: Configuration object with get_nested method.
        client: Gemini API client instance.
        model_name (str): Model name to use for generation.
    """
    def __init__(self, config, api_key: Optional[str] = None, client=None):
        """
        Initialize the GeminiLLM wrapper.

        Args:
            config: Configuration object with get_nested method for retrieving settings.
            api_key: Explicit API key, overriding configuration and environment.
            client: Pre-built genai.Client (mainly for tests).

        Raises:
            ConfigurationError: If no API key is configured.
        """
        self.logger = logging.getLogger(self.__class__.__name__)
        self.config = config
        self.model_name = self.config.get_nested('QUERY.MODEL_NAME', DEFAULT_MODEL_NAME)
        if client is not None:
            self.client = client
            return
        load_dotenv()
        api_key = api_key or self.config.get_nested('SECURITY.GEMINI_API_KEY') or os.getenv("GEMINI_API_KEY")
        if not api_key:
            raise ConfigurationError("GEMINI_API_KEY is not configured (SECURITY.GEMINI_API_KEY or environment).")
        self.client = genai.Client(api_key=api_key)

    async def complete(self, request: CompletionRequest) -> str:
        """
        Generate a response for a request.

        Args:
            request (CompletionRequest): System prompt, user query and generation limits.

        Returns:
            str: The generated text ('' when the model returned no text).

        Raises:
            google.genai.errors.APIError: For service-side failures (classified by the retry controller).
            httpx.HTTPError: For transport failures.
        """
        self.logger.info(
            f"Calling Gemini model '{self.model_name}' (system prompt: {len(request.system_prompt)} chars, "
            f"max_output_tokens: {request.max_response_tokens})"
        )
        response = await self.client.aio.models.generate_content(
            model=self.model_name,
            contents=request.user_query,
            config=types.GenerateContentConfig(
                system_instruction=request.system_prompt,
                temperature=request.temperature,
                max_output_tokens=request.max_response_tokens,
            ),
        )
        text = getattr(response, 'text', None) or ''
        self.logger.info(f"Gemini model '{self.model_name}' call complete ({len(text)} chars)")
        return text
