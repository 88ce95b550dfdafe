"""Base LLM interface and completion clients.

Provides the abstract completion client used by the crisis classifier and
two concrete implementations: the OpenAI SDK and a generic
OpenAI-compatible chat-completions endpoint reached over aiohttp.
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

# Longest prompt any client will send
MAX_PROMPT_CHARS = 10000


class LLMProvider(Enum):
    """Supported LLM providers."""
    OPENAI = "openai"
    HTTP = "http"  # Any OpenAI-compatible chat-completions endpoint


class LLMError(Exception):
    """Base exception for completion failures."""
    pass


class LLMHTTPError(LLMError):
    """Endpoint answered with a non-2xx status."""

    def __init__(self, status: int, message: str = ""):
        super().__init__(f"Completion endpoint returned HTTP {status}: {message}".rstrip(": "))
        self.status = status


@dataclass
class LLMConfig:
    """Configuration for LLM inference."""
    provider: LLMProvider
    model_name: str = "gpt-4o-mini"
    endpoint: Optional[str] = None
    api_key: Optional[str] = None
    max_tokens: int = 500
    temperature: float = 0.3
    timeout_seconds: float = 10.0


@dataclass
class LLMResponse:
    """Response from LLM inference."""
    text: str
    model: str
    provider: str
    tokens_used: Optional[int] = None
    latency_ms: Optional[float] = None
    metadata: Optional[Dict] = None


class BaseLLM(ABC):
    """Abstract base class for completion clients."""

    def __init__(self, config: LLMConfig):
        """Initialize LLM with configuration.

        Args:
            config: LLM configuration
        """
        self.config = config
        logger.info(
            "LLM_INITIALIZED",
            extra={
                "provider": config.provider.value,
                "model": config.model_name,
            }
        )

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        json_mode: bool = False,
        **kwargs
    ) -> LLMResponse:
        """Generate a completion.

        Args:
            prompt: User message
            system_prompt: Optional system prompt
            json_mode: Ask the provider for a JSON object response
            **kwargs: Additional provider-specific parameters

        Returns:
            LLMResponse object

        Raises:
            LLMError: On provider or transport failure
            ValueError: If prompt is invalid
        """
        pass

    def validate_prompt(self, prompt: str) -> bool:
        """Validate prompt before sending to LLM.

        Args:
            prompt: The prompt to validate

        Returns:
            True if valid, False otherwise
        """
        if not prompt or not prompt.strip():
            logger.warning("LLM_PROMPT_EMPTY")
            return False

        if len(prompt) > MAX_PROMPT_CHARS:
            logger.warning(
                "LLM_PROMPT_TOO_LONG",
                extra={"length": len(prompt)}
            )
            return False

        return True

    @staticmethod
    def build_messages(prompt: str, system_prompt: Optional[str]) -> List[Dict[str, str]]:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})
        return messages


class OpenAILLM(BaseLLM):
    """OpenAI API implementation."""

    def __init__(self, config: LLMConfig):
        """Initialize OpenAI LLM.

        Args:
            config: LLM configuration with API key
        """
        super().__init__(config)

        if not config.api_key:
            raise ValueError("OpenAI API key required")

        try:
            import openai
        except ImportError:
            raise ImportError("openai package required: pip install openai")

        client_kwargs: Dict[str, Any] = {"api_key": config.api_key}
        if config.endpoint:
            client_kwargs["base_url"] = config.endpoint
        self.client = openai.AsyncOpenAI(**client_kwargs)
        self._openai = openai

    async def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        json_mode: bool = False,
        **kwargs
    ) -> LLMResponse:
        """Generate response using the OpenAI chat completions API."""
        if not self.validate_prompt(prompt):
            raise ValueError("Invalid prompt")

        request: Dict[str, Any] = {
            "model": self.config.model_name,
            "messages": self.build_messages(prompt, system_prompt),
            "max_tokens": self.config.max_tokens,
            "temperature": self.config.temperature,
            "timeout": self.config.timeout_seconds,
        }
        if json_mode:
            request["response_format"] = {"type": "json_object"}

        start_time = time.perf_counter()

        try:
            response = await self.client.chat.completions.create(**request)
        except self._openai.APIStatusError as e:
            raise LLMHTTPError(e.status_code, str(e)) from e
        except self._openai.OpenAIError as e:
            raise LLMError(str(e)) from e

        latency_ms = (time.perf_counter() - start_time) * 1000
        tokens_used = response.usage.total_tokens if response.usage else None

        logger.info(
            "LLM_GENERATION_COMPLETED",
            extra={
                "provider": self.config.provider.value,
                "model": self.config.model_name,
                "latency_ms": latency_ms,
                "tokens_used": tokens_used,
            }
        )

        return LLMResponse(
            text=response.choices[0].message.content or "",
            model=self.config.model_name,
            provider=self.config.provider.value,
            tokens_used=tokens_used,
            latency_ms=latency_ms,
        )


class HTTPCompletionLLM(BaseLLM):
    """OpenAI-compatible chat-completions endpoint over aiohttp."""

    def __init__(self, config: LLMConfig):
        """Initialize HTTP completion client.

        Args:
            config: LLM configuration with endpoint URL
        """
        super().__init__(config)

        if not config.endpoint:
            raise ValueError("Completion endpoint required")

        self.endpoint = config.endpoint
        self.headers = {"Content-Type": "application/json"}
        if config.api_key:
            self.headers["Authorization"] = f"Bearer {config.api_key}"

    async def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        json_mode: bool = False,
        **kwargs
    ) -> LLMResponse:
        """POST a chat-completions request and return the first choice."""
        import aiohttp

        if not self.validate_prompt(prompt):
            raise ValueError("Invalid prompt")

        payload: Dict[str, Any] = {
            "model": self.config.model_name,
            "messages": self.build_messages(prompt, system_prompt),
            "max_tokens": self.config.max_tokens,
            "temperature": self.config.temperature,
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}

        start_time = time.perf_counter()

        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    self.endpoint,
                    headers=self.headers,
                    json=payload,
                    timeout=aiohttp.ClientTimeout(total=self.config.timeout_seconds),
                ) as response:
                    if response.status >= 300:
                        raise LLMHTTPError(response.status, response.reason or "")
                    result = await response.json(content_type=None)
        except aiohttp.ClientError as e:
            raise LLMError(str(e)) from e

        latency_ms = (time.perf_counter() - start_time) * 1000
        text = self.extract_content(result)

        logger.info(
            "LLM_GENERATION_COMPLETED",
            extra={
                "provider": self.config.provider.value,
                "model": self.config.model_name,
                "latency_ms": latency_ms,
            }
        )

        return LLMResponse(
            text=text,
            model=self.config.model_name,
            provider=self.config.provider.value,
            latency_ms=latency_ms,
            metadata={"endpoint": self.endpoint},
        )

    @staticmethod
    def extract_content(result: Any) -> str:
        """Pull choices[0].message.content out of a completion payload.

        Raises:
            LLMError: If the payload does not have that shape
        """
        try:
            content = result["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise LLMError(f"Malformed completion payload: {e!r}") from e
        if not isinstance(content, str):
            raise LLMError("Completion content is not a string")
        return content


def create_llm(config: LLMConfig) -> BaseLLM:
    """Factory function to create LLM instance.

    Args:
        config: LLM configuration

    Returns:
        BaseLLM instance

    Raises:
        ValueError: If provider not supported
    """
    if config.provider == LLMProvider.OPENAI:
        return OpenAILLM(config)
    elif config.provider == LLMProvider.HTTP:
        return HTTPCompletionLLM(config)
    else:
        raise ValueError(f"Unsupported provider: {config.provider}")
