"""
Completion provider protocol.

The generation service only needs "messages in, JSON text out". Groq is the
production implementation; tests install a deterministic fake with
set_completion_provider().
"""
import asyncio
from typing import Dict, List, Optional, Protocol

import groq

from sitewright.core.config import settings

Message = Dict[str, str]


class ProviderError(Exception):
    """Network, auth, rate-limit, timeout or empty-response failure from the provider."""
    pass


class CompletionProvider(Protocol):
    """
    Protocol for chat-completion providers.

    Implementations must return the raw text of a single completion that the
    model was instructed to format as a JSON object.
    """

    async def complete_json(self, messages: List[Message]) -> str:
        """
        Run one chat completion in JSON mode.

        Raises:
            ProviderError: the call failed or produced no content
        """
        ...


class GroqCompletionProvider:
    """Groq implementation of CompletionProvider."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        temperature: Optional[float] = None,
    ):
        self.api_key = api_key or settings.GROQ_API_KEY
        if not self.api_key:
            raise ProviderError("GROQ_API_KEY not configured")

        self.model = model or settings.GROQ_MODEL
        self.timeout = timeout if timeout is not None else settings.GENERATION_TIMEOUT_SECONDS
        self.temperature = temperature if temperature is not None else settings.GENERATION_TEMPERATURE
        # Retries are the caller's decision
        self.client = groq.AsyncGroq(api_key=self.api_key, timeout=self.timeout, max_retries=0)

    async def complete_json(self, messages: List[Message]) -> str:
        try:
            response = await asyncio.wait_for(
                self.client.chat.completions.create(
                    model=self.model,
                    messages=messages,
                    response_format={"type": "json_object"},
                    temperature=self.temperature,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise ProviderError(f"Groq request timed out after {self.timeout}s") from e
        except groq.APIError as e:
            raise ProviderError(f"Groq request failed: {e}") from e

        if not response.choices:
            raise ProviderError("Groq returned no choices")
        content = response.choices[0].message.content
        if not content:
            raise ProviderError("Groq returned an empty completion")
        return content


_provider_override: Optional[CompletionProvider] = None
_default_provider: Optional[CompletionProvider] = None


def set_completion_provider(provider: Optional[CompletionProvider]) -> None:
    """Install (or clear, with None) the provider used by the generation service."""
    global _provider_override
    _provider_override = provider


def get_completion_provider() -> CompletionProvider:
    """
    Return the active provider.

    Raises:
        ProviderError: no override installed and Groq is not configured
    """
    global _default_provider
    if _provider_override is not None:
        return _provider_override
    if _default_provider is None:
        _default_provider = GroqCompletionProvider()
    return _default_provider
