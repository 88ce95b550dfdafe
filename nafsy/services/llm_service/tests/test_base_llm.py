"""Tests for completion clients."""
import httpx
import openai
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from nafsy.services.llm_service import (
    HTTPCompletionLLM,
    LLMConfig,
    LLMError,
    LLMHTTPError,
    LLMProvider,
    OpenAILLM,
    create_llm,
)


COMPLETION = {"choices": [{"message": {"role": "assistant", "content": '{"isCrisis": false}'}}]}


def http_config(**overrides) -> LLMConfig:
    values = dict(provider=LLMProvider.HTTP, endpoint="http://llm.local/v1/chat/completions", api_key="k")
    values.update(overrides)
    return LLMConfig(**values)


def mock_session(status: int = 200, payload=None) -> MagicMock:
    response = MagicMock()
    response.status = status
    response.reason = "Service Unavailable" if status >= 300 else "OK"
    response.json = AsyncMock(return_value=payload if payload is not None else COMPLETION)
    session = MagicMock()
    session.post.return_value.__aenter__.return_value = response
    return session


class TestFactory:
    def test_http_provider(self):
        assert isinstance(create_llm(http_config()), HTTPCompletionLLM)

    def test_openai_provider(self):
        with patch("openai.AsyncOpenAI"):
            llm = create_llm(LLMConfig(provider=LLMProvider.OPENAI, api_key="sk-test"))
        assert isinstance(llm, OpenAILLM)

    def test_openai_requires_key(self):
        with pytest.raises(ValueError):
            OpenAILLM(LLMConfig(provider=LLMProvider.OPENAI))

    def test_http_requires_endpoint(self):
        with pytest.raises(ValueError):
            HTTPCompletionLLM(LLMConfig(provider=LLMProvider.HTTP))

    def test_unsupported_provider(self):
        config = http_config()
        config.provider = "carrier-pigeon"
        with pytest.raises(ValueError):
            create_llm(config)


class TestPromptHelpers:
    def test_validate_prompt(self):
        llm = HTTPCompletionLLM(http_config())

        assert llm.validate_prompt("hello") is True
        assert llm.validate_prompt("   ") is False
        assert llm.validate_prompt("x" * 10001) is False

    def test_build_messages(self):
        messages = HTTPCompletionLLM.build_messages("hi", "be brief")

        assert messages == [
            {"role": "system", "content": "be brief"},
            {"role": "user", "content": "hi"},
        ]

    def test_build_messages_without_system(self):
        assert HTTPCompletionLLM.build_messages("hi", None) == [{"role": "user", "content": "hi"}]


class TestExtractContent:
    def test_valid_payload(self):
        assert HTTPCompletionLLM.extract_content(COMPLETION) == '{"isCrisis": false}'

    @pytest.mark.parametrize("payload", [
        {},
        {"choices": []},
        {"choices": [{"message": {}}]},
        {"choices": [{"message": {"content": None}}]},
        "not a dict",
    ])
    def test_malformed_payload(self, payload):
        with pytest.raises(LLMError):
            HTTPCompletionLLM.extract_content(payload)


class TestHTTPCompletionLLM:
    """aiohttp client behavior with a mocked session."""

    @pytest.mark.asyncio
    async def test_generate(self):
        session = mock_session()
        llm = HTTPCompletionLLM(http_config())

        with patch("aiohttp.ClientSession") as session_cls:
            session_cls.return_value.__aenter__.return_value = session
            response = await llm.generate("hello", system_prompt="sys", json_mode=True)

        assert response.text == '{"isCrisis": false}'
        assert response.provider == "http"
        _, kwargs = session.post.call_args
        assert kwargs["json"]["response_format"] == {"type": "json_object"}
        assert kwargs["json"]["messages"][0] == {"role": "system", "content": "sys"}
        assert kwargs["headers"]["Authorization"] == "Bearer k"

    @pytest.mark.asyncio
    async def test_non_2xx_raises_http_error(self):
        llm = HTTPCompletionLLM(http_config())

        with patch("aiohttp.ClientSession") as session_cls:
            session_cls.return_value.__aenter__.return_value = mock_session(status=503)
            with pytest.raises(LLMHTTPError) as exc:
                await llm.generate("hello")

        assert exc.value.status == 503

    @pytest.mark.asyncio
    async def test_invalid_prompt(self):
        llm = HTTPCompletionLLM(http_config())

        with pytest.raises(ValueError):
            await llm.generate("")


class TestOpenAILLM:
    """OpenAI SDK client behavior with a mocked AsyncOpenAI."""

    @pytest.fixture
    def client(self):
        with patch("openai.AsyncOpenAI") as client_cls:
            yield client_cls

    @pytest.mark.asyncio
    async def test_generate(self, client):
        completion = MagicMock()
        completion.choices[0].message.content = '{"isCrisis": true}'
        completion.usage.total_tokens = 42
        client.return_value.chat.completions.create = AsyncMock(return_value=completion)
        llm = OpenAILLM(LLMConfig(provider=LLMProvider.OPENAI, api_key="sk-test"))

        response = await llm.generate("hello", json_mode=True)

        assert response.text == '{"isCrisis": true}'
        assert response.tokens_used == 42
        kwargs = client.return_value.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["model"] == "gpt-4o-mini"

    def test_custom_endpoint(self, client):
        OpenAILLM(LLMConfig(provider=LLMProvider.OPENAI, api_key="sk-test", endpoint="http://proxy/v1"))

        client.assert_called_once_with(api_key="sk-test", base_url="http://proxy/v1")

    @pytest.mark.asyncio
    async def test_status_error_mapped(self, client):
        request = httpx.Request("POST", "http://api.test/v1/chat/completions")
        error = openai.APIStatusError(
            "rate limited",
            response=httpx.Response(429, request=request),
            body=None,
        )
        client.return_value.chat.completions.create = AsyncMock(side_effect=error)
        llm = OpenAILLM(LLMConfig(provider=LLMProvider.OPENAI, api_key="sk-test"))

        with pytest.raises(LLMHTTPError) as exc:
            await llm.generate("hello")

        assert exc.value.status == 429

    @pytest.mark.asyncio
    async def test_connection_error_mapped(self, client):
        request = httpx.Request("POST", "http://api.test/v1/chat/completions")
        client.return_value.chat.completions.create = AsyncMock(
            side_effect=openai.APIConnectionError(request=request)
        )
        llm = OpenAILLM(LLMConfig(provider=LLMProvider.OPENAI, api_key="sk-test"))

        with pytest.raises(LLMError):
            await llm.generate("hello")
