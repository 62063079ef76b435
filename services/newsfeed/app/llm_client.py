from typing import Dict, List, Optional

import openai
from openai import AsyncOpenAI

from shared.app_logging.logger import get_logger
from shared.config.settings import LLMSettings
from shared.utils.retry import RetryConfig, retry_async

logger = get_logger("newsfeed.llm")

# Transient failures worth another attempt; auth and request errors are not.
RETRYABLE_ERRORS = (
    openai.APIConnectionError,
    openai.RateLimitError,
    openai.InternalServerError,
)


class LLMUnavailableError(Exception):
    """No usable completion: missing credential or an empty answer."""


class LLMClient:
    """Chat-completion client for the Mistral API (OpenAI-compatible wire format)."""

    def __init__(self, settings: LLMSettings, client: Optional[AsyncOpenAI] = None, timeout: float = 30.0):
        self.settings = settings
        self._client = client
        if self._client is None and settings.configured:
            self._client = AsyncOpenAI(
                api_key=settings.api_key,
                base_url=settings.base_url,
                timeout=timeout,
                max_retries=0,
            )

    @property
    def configured(self) -> bool:
        return self._client is not None

    async def _create_completion(self, messages: List[Dict[str, str]], max_tokens: int, temperature: float):
        return await self._client.chat.completions.create(
            model=self.settings.model,
            messages=messages,
            max_tokens=max_tokens,
            temperature=temperature,
        )

    async def complete(self, messages: List[Dict[str, str]], max_tokens: int, temperature: float) -> str:
        """Return the first choice's text, raising on any failure."""
        if not self.configured:
            raise LLMUnavailableError("Language-model API key is not configured")

        config = RetryConfig.from_settings(
            max_retries=self.settings.max_retries,
            retryable_exceptions=RETRYABLE_ERRORS,
        )
        response = await retry_async(
            self._create_completion,
            messages,
            max_tokens,
            temperature,
            config=config,
        )

        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            raise LLMUnavailableError("Language model returned an empty completion")
        logger.debug(f"Received {len(content)} characters from {self.settings.model}")
        return content.strip()

    async def close(self) -> None:
        if self._client is not None and hasattr(self._client, "close"):
            await self._client.close()
