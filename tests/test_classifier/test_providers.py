"""Tests for the generative-model providers."""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import anthropic
import httpx
import pytest

from inbox_triage.classifier.providers import ClaudeProvider, OpenAIProvider, ProviderResponse

REPLY = json.dumps({"needs_reply": True})


def _openai_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _chat_completion(content=REPLY, status_code=200):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            status_code,
            json={
                "model": "gpt-4o-mini-2024-07-18",
                "choices": [{"message": {"role": "assistant", "content": content}}],
                "usage": {"prompt_tokens": 120, "completion_tokens": 30},
            },
        )

    return handler


class TestOpenAIProvider:
    @pytest.mark.asyncio
    async def test_complete_success(self):
        provider = OpenAIProvider(api_key="sk-test", client=_openai_client(_chat_completion()))

        response = await provider.complete("system", "user")

        assert isinstance(response, ProviderResponse)
        assert response.text == REPLY
        assert response.model_name == "gpt-4o-mini-2024-07-18"
        assert (response.input_tokens, response.output_tokens) == (120, 30)
        assert response.total_tokens == 150

    @pytest.mark.asyncio
    async def test_request_body(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = str(request.url)
            captured["body"] = json.loads(request.content)
            return _chat_completion()(request)

        provider = OpenAIProvider(
            api_key="sk-test",
            base_url="https://llm.example.com/v1/",
            temperature=0.3,
            max_output_tokens=300,
            client=_openai_client(handler),
        )
        await provider.complete("system text", "user text")

        assert captured["url"] == "https://llm.example.com/v1/chat/completions"
        body = captured["body"]
        assert body["model"] == "gpt-4o-mini"
        assert body["response_format"] == {"type": "json_object"}
        assert body["temperature"] == 0.3
        assert body["max_tokens"] == 300
        assert body["messages"] == [
            {"role": "system", "content": "system text"},
            {"role": "user", "content": "user text"},
        ]

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        provider = OpenAIProvider(api_key="sk-test", client=_openai_client(handler))
        with pytest.raises(TimeoutError):
            await provider.complete("s", "u")

    @pytest.mark.asyncio
    async def test_http_error(self):
        provider = OpenAIProvider(
            api_key="sk-test", client=_openai_client(_chat_completion(status_code=500))
        )
        with pytest.raises(ConnectionError):
            await provider.complete("s", "u")

    @pytest.mark.asyncio
    async def test_malformed_body(self):
        def handler(request):
            return httpx.Response(200, json={"choices": []})

        provider = OpenAIProvider(api_key="sk-test", client=_openai_client(handler))
        with pytest.raises(ValueError, match="Invalid OpenAI response"):
            await provider.complete("s", "u")

    @pytest.mark.asyncio
    async def test_missing_key(self):
        handler = Mock(side_effect=AssertionError("no request expected"))
        provider = OpenAIProvider(api_key=None, client=_openai_client(handler))

        assert not provider.is_available()
        with pytest.raises(ConnectionError, match="not configured"):
            await provider.complete("s", "u")

    def test_name(self):
        assert OpenAIProvider(api_key="sk-test").name == "openai"

    def test_authorization_header_only_with_key(self):
        assert OpenAIProvider(api_key="sk-test")._client.headers["Authorization"] == "Bearer sk-test"
        assert "Authorization" not in OpenAIProvider(api_key=None)._client.headers


def _claude_message(text=REPLY):
    return SimpleNamespace(
        content=[SimpleNamespace(type="text", text=text)],
        usage=SimpleNamespace(input_tokens=90, output_tokens=25),
        model="claude-3-5-haiku-20241022",
    )


def _claude_client(**create_kwargs) -> Mock:
    client = Mock()
    client.messages.create = AsyncMock(**create_kwargs)
    client.close = AsyncMock()
    return client


_ANTHROPIC_REQUEST = httpx.Request("POST", "https://api.anthropic.com/v1/messages")


class TestClaudeProvider:
    @pytest.mark.asyncio
    async def test_complete_success(self):
        client = _claude_client(return_value=_claude_message())
        provider = ClaudeProvider(client=client, temperature=0.3, max_output_tokens=300)

        response = await provider.complete("system text", "user text")

        assert response.text == REPLY
        assert response.model_name == "claude-3-5-haiku-20241022"
        assert (response.input_tokens, response.output_tokens) == (90, 25)
        kwargs = client.messages.create.await_args.kwargs
        assert kwargs["system"] == "system text"
        assert kwargs["messages"] == [{"role": "user", "content": "user text"}]
        assert kwargs["max_tokens"] == 300
        assert kwargs["temperature"] == 0.3

    @pytest.mark.asyncio
    async def test_timeout(self):
        client = _claude_client(side_effect=anthropic.APITimeoutError(request=_ANTHROPIC_REQUEST))
        provider = ClaudeProvider(client=client)

        with pytest.raises(TimeoutError):
            await provider.complete("s", "u")

    @pytest.mark.asyncio
    async def test_connection_error(self):
        client = _claude_client(side_effect=anthropic.APIConnectionError(request=_ANTHROPIC_REQUEST))
        provider = ClaudeProvider(client=client)

        with pytest.raises(ConnectionError):
            await provider.complete("s", "u")

    @pytest.mark.asyncio
    async def test_status_error(self):
        error = anthropic.AuthenticationError(
            "invalid x-api-key",
            response=httpx.Response(401, request=_ANTHROPIC_REQUEST),
            body=None,
        )
        provider = ClaudeProvider(client=_claude_client(side_effect=error))

        with pytest.raises(ConnectionError):
            await provider.complete("s", "u")

    @pytest.mark.asyncio
    async def test_no_text_blocks(self):
        message = _claude_message()
        message.content = []
        provider = ClaudeProvider(client=_claude_client(return_value=message))

        with pytest.raises(ValueError, match="no text"):
            await provider.complete("s", "u")

    @pytest.mark.asyncio
    async def test_missing_key(self):
        provider = ClaudeProvider(api_key=None)

        assert not provider.is_available()
        with pytest.raises(ConnectionError, match="missing API key"):
            await provider.complete("s", "u")

    @pytest.mark.asyncio
    async def test_aclose(self):
        client = _claude_client(return_value=_claude_message())
        provider = ClaudeProvider(client=client)

        async with provider:
            pass

        client.close.assert_awaited_once()
