"""
OpenAI provider for the AI endpoints.

Provides a cached client instance, a thin wrapper around the chat
completion call, and the ``LLMProvider`` interface the request pipeline
depends on. Failed calls surface as ``ProviderError``; there is no retry.
"""

import logging
import time
from typing import List, Dict, Optional, Protocol, Tuple

from openai import OpenAI, OpenAIError

from holiday_planner.shared.errors import ProviderError
from holiday_planner.shared.settings import get_settings


logger = logging.getLogger(__name__)

# Module-level cache for the OpenAI client
_client: Optional[OpenAI] = None


def get_cached_client() -> OpenAI:
    """
    Returns a cached instance of the OpenAI client.

    Uses the OPENAI_API_KEY setting for authentication. The client is
    created once and reused for all subsequent calls.

    Raises:
        ProviderError: If no API key is configured.
    """
    global _client
    if _client is None:
        api_key = get_settings().openai_api_key
        if not api_key:
            raise ProviderError(
                "OPENAI_API_KEY environment variable is not set. "
                "Please set it to your OpenAI API key."
            )
        _client = OpenAI(api_key=api_key)
    return _client


def call_llm_with_usage(
    messages: List[Dict[str, str]],
    model: str,
    max_tokens: int,
    client: Optional[OpenAI] = None,
) -> Tuple[str, Optional[Dict[str, int]]]:
    """
    Call the OpenAI Chat Completion API once and return content with token usage.

    Args:
        messages: List of message dicts with 'role' and 'content' keys
        model: Model identifier to use
        max_tokens: Upper bound on generated tokens
        client: Optional OpenAI client instance. If not provided, uses cached client.

    Returns:
        Tuple of (response content, usage dict with input/output/total tokens).
        Usage is None when the API does not report it.

    Raises:
        ProviderError: If the API call fails or returns no text.
    """
    if client is None:
        client = get_cached_client()

    try:
        response = client.chat.completions.create(
            model=model,
            messages=messages,
            max_tokens=max_tokens,
        )
    except OpenAIError as e:
        raise ProviderError(f"OpenAI request failed: {e}") from e

    content = response.choices[0].message.content if response.choices else None
    if not content:
        raise ProviderError("Unexpected empty response from the AI provider")

    usage = None
    if getattr(response, "usage", None) is not None:
        usage = {
            "input_tokens": response.usage.prompt_tokens,
            "output_tokens": response.usage.completion_tokens,
            "total_tokens": response.usage.total_tokens,
        }

    return content.strip(), usage


class LLMProvider(Protocol):
    """Text generation interface used by every AI operation."""

    model: str

    def complete(
        self,
        system_prompt: str,
        messages: List[Dict[str, str]],
        max_tokens: int,
    ) -> str:
        ...


class OpenAIProvider:
    """
    LLMProvider backed by OpenAI chat completions.

    The system prompt is sent as the first message, followed by the
    conversation messages in order. ``last_tokens_used`` holds the total
    token count of the most recent call, or None if it was not reported.
    """

    def __init__(self, model: Optional[str] = None, client: Optional[OpenAI] = None):
        self.model = model or get_settings().openai_model
        self.last_tokens_used: Optional[int] = None
        self._client = client

    def complete(
        self,
        system_prompt: str,
        messages: List[Dict[str, str]],
        max_tokens: int,
    ) -> str:
        full_messages = [{"role": "system", "content": system_prompt}, *messages]

        start_time = time.perf_counter()
        text, usage = call_llm_with_usage(
            full_messages,
            model=self.model,
            max_tokens=max_tokens,
            client=self._client,
        )
        duration_ms = (time.perf_counter() - start_time) * 1000
        self.last_tokens_used = usage["total_tokens"] if usage else None

        logger.info(
            f"LLM responded | model={self.model}, duration={duration_ms:.0f}ms, "
            f"messages={len(full_messages)}, chars={len(text)}, tokens={self.last_tokens_used}"
        )
        return text
