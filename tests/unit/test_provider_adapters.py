"""Unit tests for provider adapters, using RESPX for the HTTP layer."""

import json

import httpx
import pytest
import pytest_asyncio

from model_relay.core.error_types import ErrorType
from model_relay.core.exceptions import ProviderError
from model_relay.core.provider import NO_CREDENTIAL, build_default_registry
from model_relay.core.provider.adapters import to_anthropic_payload
from tests.fixtures.mock_http import (
    ANTHROPIC_URL,
    COHERE_URL,
    GEMINI_URL_PREFIX,
    GROQ_URL,
    OLLAMA_URL,
    OPENAI_URL,
    create_openai_error,
    openai_completion,
)

CONVERSATION = [
    {"role": "system", "content": "Be brief."},
    {"role": "user", "content": "hi"},
    {"role": "assistant", "content": "hello"},
    {"role": "user", "content": "how are you?"},
]

WEATHER_TOOL = {
    "type": "function",
    "function": {
        "name": "get_weather",
        "description": "Look up the weather",
        "parameters": {"type": "object", "properties": {"city": {"type": "string"}}},
    },
}


@pytest.fixture
def registry():
    return build_default_registry(claude_max_tokens=1024)


@pytest_asyncio.fixture
async def client():
    async with httpx.AsyncClient() as c:
        yield c


def sent_json(route):
    return json.loads(route.calls.last.request.content)


@pytest.mark.unit
@pytest.mark.asyncio
class TestOpenAICompatibleAdapters:
    async def test_groq_bearer_auth_and_payload(self, registry, client, mock_providers):
        route = mock_providers.post(GROQ_URL).mock(
            return_value=httpx.Response(200, json=openai_completion("hi there"))
        )

        result = await registry.invoke(
            "Groq", "llama-3.3-70b-versatile", "gsk-1", CONVERSATION, client=client
        )

        assert result == "hi there"
        request = route.calls.last.request
        assert request.headers["Authorization"] == "Bearer gsk-1"
        payload = sent_json(route)
        assert payload["model"] == "llama-3.3-70b-versatile"
        assert payload["messages"] == CONVERSATION
        assert payload["temperature"] == 0.7
        assert "tools" not in payload

    async def test_tools_forwarded_verbatim(self, registry, client, mock_providers):
        route = mock_providers.post(OPENAI_URL).mock(
            return_value=httpx.Response(200, json=openai_completion("ok"))
        )

        await registry.invoke(
            "OpenAI", "gpt-4o", "sk-1", CONVERSATION, [WEATHER_TOOL], client=client
        )

        assert sent_json(route)["tools"] == [WEATHER_TOOL]

    async def test_perplexity_drops_tools(self, registry, client, mock_providers):
        route = mock_providers.post("https://api.perplexity.ai/chat/completions").mock(
            return_value=httpx.Response(200, json=openai_completion("ok"))
        )

        await registry.invoke(
            "Perplexity", "sonar", "pplx-1", CONVERSATION, [WEATHER_TOOL], client=client
        )

        payload = sent_json(route)
        assert "tools" not in payload
        assert "temperature" not in payload

    async def test_non_2xx_raises_provider_error(self, registry, client, mock_providers):
        mock_providers.post(GROQ_URL).mock(
            return_value=create_openai_error(429, "rate_limit_exceeded", "slow down")
        )

        with pytest.raises(ProviderError) as exc_info:
            await registry.invoke("Groq", "llama", "gsk-1", CONVERSATION, client=client)

        error = exc_info.value
        assert error.status == 429
        assert error.provider == "Groq"
        assert "slow down" in error.body
        assert error.message.startswith("Groq Error 429:")
        assert error.error_type == ErrorType.UPSTREAM_HTTP_ERROR

    async def test_transport_error_raises_provider_error(self, registry, client, mock_providers):
        mock_providers.post(GROQ_URL).mock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(ProviderError) as exc_info:
            await registry.invoke("Groq", "llama", "gsk-1", CONVERSATION, client=client)

        assert exc_info.value.status is None
        assert exc_info.value.error_type == ErrorType.UPSTREAM_ERROR

    async def test_timeout_is_classified(self, registry, client, mock_providers):
        mock_providers.post(GROQ_URL).mock(side_effect=httpx.ReadTimeout("too slow"))

        with pytest.raises(ProviderError) as exc_info:
            await registry.invoke("Groq", "llama", "gsk-1", CONVERSATION, client=client)

        assert exc_info.value.error_type == ErrorType.UPSTREAM_TIMEOUT

    async def test_unrecognized_envelope_returns_raw_body(self, registry, client, mock_providers):
        mock_providers.post(GROQ_URL).mock(
            return_value=httpx.Response(200, json={"unexpected": True})
        )

        result = await registry.invoke("Groq", "llama", "gsk-1", CONVERSATION, client=client)

        assert json.loads(result) == {"unexpected": True}

    async def test_non_json_success_returns_text(self, registry, client, mock_providers):
        mock_providers.post(GROQ_URL).mock(return_value=httpx.Response(200, text="plain"))

        result = await registry.invoke("Groq", "llama", "gsk-1", CONVERSATION, client=client)

        assert result == "plain"


@pytest.mark.unit
@pytest.mark.asyncio
class TestGenericAdapter:
    async def test_unknown_provider_without_base_url_is_not_called(
        self, registry, client, mock_providers
    ):
        result = await registry.invoke("Acme", "acme-1", "k", CONVERSATION, client=client)

        assert result == "Provider Acme not fully implemented yet."
        assert not mock_providers.calls

    async def test_base_url_routes_to_chat_completions(self, registry, client, mock_providers):
        route = mock_providers.post("http://gpu-box:8000/v1/chat/completions").mock(
            return_value=httpx.Response(200, json=openai_completion("local reply"))
        )

        result = await registry.invoke(
            "Local",
            "qwen2.5",
            NO_CREDENTIAL,
            CONVERSATION,
            client=client,
            base_url="http://gpu-box:8000/v1/",
        )

        assert result == "local reply"
        assert "Authorization" not in route.calls.last.request.headers

    async def test_provider_error_names_the_tag(self, registry, client, mock_providers):
        mock_providers.post("https://llm.example.com/v1/chat/completions").mock(
            return_value=httpx.Response(500, text="oops")
        )

        with pytest.raises(ProviderError, match="^Acme Error 500: oops$"):
            await registry.invoke(
                "Acme",
                "m",
                "k",
                CONVERSATION,
                client=client,
                base_url="https://llm.example.com/v1",
            )


@pytest.mark.unit
@pytest.mark.asyncio
class TestAnthropicAdapter:
    async def test_headers_and_system_hoisting(
        self, registry, client, mock_providers, anthropic_message_response
    ):
        route = mock_providers.post(ANTHROPIC_URL).mock(
            return_value=httpx.Response(200, json=anthropic_message_response)
        )

        result = await registry.invoke(
            "Claude", "claude-3-5-sonnet-20241022", "sk-ant-1", CONVERSATION, client=client
        )

        assert result == "Hello from Claude"
        request = route.calls.last.request
        assert request.headers["x-api-key"] == "sk-ant-1"
        assert request.headers["anthropic-version"] == "2023-06-01"
        assert "Authorization" not in request.headers
        payload = sent_json(route)
        assert payload["system"] == "Be brief."
        assert payload["max_tokens"] == 1024
        assert [m["role"] for m in payload["messages"]] == ["user", "assistant", "user"]

    async def test_tools_are_converted(
        self, registry, client, mock_providers, anthropic_message_response
    ):
        route = mock_providers.post(ANTHROPIC_URL).mock(
            return_value=httpx.Response(200, json=anthropic_message_response)
        )

        await registry.invoke(
            "Claude", "claude", "sk-ant-1", CONVERSATION, [WEATHER_TOOL], client=client
        )

        assert sent_json(route)["tools"] == [
            {
                "name": "get_weather",
                "description": "Look up the weather",
                "input_schema": WEATHER_TOOL["function"]["parameters"],
            }
        ]


@pytest.mark.unit
class TestToAnthropicPayload:
    def test_all_system_messages_are_joined(self):
        payload = to_anthropic_payload(
            messages=[
                {"role": "system", "content": "one"},
                {"role": "user", "content": "hi"},
                {"role": "system", "content": "two"},
            ],
            model_name="claude",
            max_tokens=10,
        )

        assert payload["system"] == "one\n\ntwo"
        assert payload["messages"] == [{"role": "user", "content": "hi"}]

    def test_tool_calls_and_results_become_blocks(self):
        payload = to_anthropic_payload(
            messages=[
                {"role": "user", "content": "weather?"},
                {
                    "role": "assistant",
                    "content": None,
                    "tool_calls": [
                        {
                            "id": "call_1",
                            "type": "function",
                            "function": {"name": "get_weather", "arguments": '{"city": "Oslo"}'},
                        }
                    ],
                },
                {"role": "tool", "tool_call_id": "call_1", "content": "rainy"},
            ],
            model_name="claude",
            max_tokens=10,
        )

        assistant, tool_result = payload["messages"][1:]
        assert assistant["content"] == [
            {"type": "tool_use", "id": "call_1", "name": "get_weather", "input": {"city": "Oslo"}}
        ]
        assert tool_result == {
            "role": "user",
            "content": [{"type": "tool_result", "tool_use_id": "call_1", "content": "rainy"}],
        }


@pytest.mark.unit
@pytest.mark.asyncio
class TestGeminiAdapter:
    async def test_key_in_query_and_role_mapping(
        self, registry, client, mock_providers, gemini_generate_response
    ):
        route = mock_providers.post(
            f"{GEMINI_URL_PREFIX}gemini-1.5-flash:generateContent"
        ).mock(return_value=httpx.Response(200, json=gemini_generate_response))

        result = await registry.invoke(
            "Gemini", "gemini-1.5-flash", "AIza-1", CONVERSATION, [WEATHER_TOOL], client=client
        )

        assert result == "Hello from Gemini"
        request = route.calls.last.request
        assert request.url.params["key"] == "AIza-1"
        payload = sent_json(route)
        assert payload["systemInstruction"] == {"parts": [{"text": "Be brief."}]}
        assert [c["role"] for c in payload["contents"]] == ["user", "model", "user"]
        assert payload["contents"][1]["parts"] == [{"text": "hello"}]
        assert "tools" not in payload


@pytest.mark.unit
@pytest.mark.asyncio
class TestCohereAdapter:
    async def test_preamble_history_and_message(
        self, registry, client, mock_providers, cohere_chat_response
    ):
        route = mock_providers.post(COHERE_URL).mock(
            return_value=httpx.Response(200, json=cohere_chat_response)
        )

        result = await registry.invoke(
            "Cohere", "command-r", "co-1", CONVERSATION, client=client
        )

        assert result == "Hello from Cohere"
        assert route.calls.last.request.headers["Authorization"] == "Bearer co-1"
        payload = sent_json(route)
        assert payload == {
            "model": "command-r",
            "message": "how are you?",
            "preamble": "Be brief.",
            "chat_history": [
                {"role": "USER", "message": "hi"},
                {"role": "CHATBOT", "message": "hello"},
            ],
        }


@pytest.mark.unit
@pytest.mark.asyncio
class TestOllamaAdapter:
    async def test_local_call_without_credentials(
        self, registry, client, mock_providers, ollama_chat_response
    ):
        route = mock_providers.post(OLLAMA_URL).mock(
            return_value=httpx.Response(200, json=ollama_chat_response)
        )

        result = await registry.invoke(
            "Ollama", "llama3", NO_CREDENTIAL, CONVERSATION, client=client
        )

        assert result == "Hello from Ollama"
        assert "Authorization" not in route.calls.last.request.headers
        payload = sent_json(route)
        assert payload["stream"] is False
        assert payload["messages"] == CONVERSATION

    async def test_unreachable_daemon(self, registry, client, mock_providers):
        mock_providers.post(OLLAMA_URL).mock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(ProviderError, match="Local Ollama unreachable"):
            await registry.invoke("Ollama", "llama3", NO_CREDENTIAL, CONVERSATION, client=client)
