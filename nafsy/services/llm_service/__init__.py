"""LLM service: completion clients used by the crisis AI classifier."""

from .base_llm import (
    BaseLLM,
    HTTPCompletionLLM,
    LLMConfig,
    LLMError,
    LLMHTTPError,
    LLMProvider,
    LLMResponse,
    MAX_PROMPT_CHARS,
    OpenAILLM,
    create_llm,
)

__all__ = [
    "BaseLLM",
    "HTTPCompletionLLM",
    "LLMConfig",
    "LLMError",
    "LLMHTTPError",
    "LLMProvider",
    "LLMResponse",
    "MAX_PROMPT_CHARS",
    "OpenAILLM",
    "create_llm",
]
