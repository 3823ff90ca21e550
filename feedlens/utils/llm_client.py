"""
Language model client utilities.

This module wraps an OpenAI-compatible chat completions endpoint behind a
single prompt-in, text-out call. Calls are made once; retries belong to the
workflow runtime, not to this client.
"""

from typing import Optional
import logging

from openai import AsyncOpenAI

from feedlens.config import Settings, settings as default_settings
from feedlens.utils.error_handling import AsyncErrorContext, LLMError, timer

logger = logging.getLogger(__name__)


class LLMClient:
    """
    Text completion client for the configured model.
    """

    def __init__(self, config: Optional[Settings] = None, client: Optional[AsyncOpenAI] = None):
        """
        Initialize the client.

        Args:
            config: Settings holding model name, endpoint and credentials
            client: Pre-built AsyncOpenAI client (mainly for tests)
        """
        self.config = config or default_settings
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        """Lazily build the underlying AsyncOpenAI client."""
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.config.openai_api_key or "not-set",
                base_url=self.config.openai_base_url,
                timeout=self.config.llm_timeout_seconds,
                max_retries=0,
            )
        return self._client

    @timer(component="llm_client")
    async def complete(self, prompt: str, max_tokens: int) -> str:
        """
        Get a completion for a single prompt.

        Args:
            prompt: The full instruction prompt
            max_tokens: Maximum number of tokens to generate

        Returns:
            The generated text, empty string if the model returned nothing
        """
        async with AsyncErrorContext("llm_client", "Error calling language model", LLMError):
            response = await self.client.chat.completions.create(
                model=self.config.llm_model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.config.llm_temperature,
                max_tokens=max_tokens,
            )

        content = response.choices[0].message.content if response.choices else None
        logger.debug(f"Model returned {len(content or '')} characters")
        return content or ""
