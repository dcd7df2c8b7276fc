"""
Tests for HTTP oracle backends using httpx.MockTransport.
"""

import json

import httpx
import pytest

from council.config import ProviderConfig, ProviderKind
from council.core.errors import AuthenticationError, ConfigurationError, ProviderError, RateLimitError
from council.core.messages import Message, ToolCall, ToolSchema
from council.core.oracle import MockOracle
from council.providers import ClaudeOracle, DeepSeekOracle, GeminiOracle, OpenAIOracle, create_oracle


def transport_for(status=200, payload=None, headers=None, seen=None):
    """MockTransport answering every request with one canned response."""

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status, json=payload or {}, headers=headers or {})

    return httpx.MockTransport(handler)


OPENAI_REPLY = {
    "model": "gpt-4o-mini",
    "choices": [{
        "message": {
            "content": "Hello there",
            "tool_calls": [{
                "id": "call_1",
                "type": "function",
                "function": {"name": "calculator", "arguments": '{"expression": "2 + 2"}'},
            }],
        },
        "finish_reason": "tool_calls",
    }],
    "usage": {"prompt_tokens": 12, "completion_tokens": 7},
}

CLAUDE_REPLY = {
    "model": "claude-3-5-haiku-latest",
    "content": [
        {"type": "text", "text": "Let me check. "},
        {"type": "tool_use", "id": "tu_1", "name": "weather", "input": {"location": "Paris"}},
    ],
    "stop_reason": "tool_use",
    "usage": {"input_tokens": 30, "output_tokens": 10},
}

GEMINI_REPLY = {
    "candidates": [{
        "content": {
            "role": "model",
            "parts": [
                {"text": "Checking."},
                {"functionCall": {"name": "calculator", "args": {"expression": "15 + 27"}}},
            ],
        },
        "finishReason": "STOP",
    }],
    "usageMetadata": {"promptTokenCount": 20, "candidatesTokenCount": 5},
}


class TestOpenAI:

    @pytest.mark.asyncio
    async def test_chat_request_and_reply(self):
        seen = []
        oracle = OpenAIOracle("sk-test", transport=transport_for(payload=OPENAI_REPLY, seen=seen))

        reply = await oracle.chat(
            "hi",
            history=[Message.user("earlier")],
            tools=[ToolSchema("calculator", "math", {"type": "object"})],
            system_prompt="Be brief.",
            max_tokens=50,
        )
        await oracle.aclose()

        request = seen[0]
        assert request.url.path == "/v1/chat/completions"
        assert request.headers["authorization"] == "Bearer sk-test"

        body = json.loads(request.content)
        assert body["model"] == "gpt-4o-mini"
        assert [m["role"] for m in body["messages"]] == ["system", "user", "user"]
        assert body["tool_choice"] == "auto"
        assert body["max_tokens"] == 50

        assert reply.content == "Hello there"
        assert reply.tool_calls == [ToolCall("call_1", "calculator", '{"expression": "2 + 2"}')]
        assert reply.input_tokens == 12
        assert reply.output_tokens == 7
        assert reply.metadata["finish_reason"] == "tool_calls"

    @pytest.mark.asyncio
    async def test_no_choices(self):
        oracle = OpenAIOracle("sk-test", transport=transport_for(payload={"choices": []}))
        with pytest.raises(ProviderError):
            await oracle.chat("hi")

    @pytest.mark.asyncio
    async def test_authentication_error(self):
        oracle = OpenAIOracle(
            "sk-bad", transport=transport_for(401, {"error": {"message": "Invalid API key"}}),
        )
        with pytest.raises(AuthenticationError) as exc_info:
            await oracle.chat("hi")

        assert exc_info.value.status_code == 401
        assert not exc_info.value.recoverable
        assert "Invalid API key" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_rate_limit(self):
        oracle = OpenAIOracle(
            "sk-test", transport=transport_for(429, {"error": "slow down"}, headers={"retry-after": "2"}),
        )
        with pytest.raises(RateLimitError) as exc_info:
            await oracle.chat("hi")

        assert exc_info.value.retry_after == 2.0
        assert exc_info.value.recoverable

    @pytest.mark.asyncio
    async def test_server_error_is_recoverable(self):
        oracle = OpenAIOracle("sk-test", transport=transport_for(503))
        with pytest.raises(ProviderError) as exc_info:
            await oracle.chat("hi")
        assert exc_info.value.recoverable
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_transport_error_is_recoverable(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        oracle = OpenAIOracle("sk-test", transport=httpx.MockTransport(handler))
        with pytest.raises(ProviderError) as exc_info:
            await oracle.chat("hi")
        assert exc_info.value.recoverable

    def test_pricing_prefers_longest_prefix(self):
        oracle = OpenAIOracle("sk-test", model="gpt-4o-mini-2024-07-18")
        assert oracle.calculate_cost(1_000_000, 1_000_000) == pytest.approx(0.75)

    def test_pricing_overrides(self):
        oracle = OpenAIOracle("sk-test", input_cost_per_million=1.0, output_cost_per_million=2.0)
        assert oracle.calculate_cost(500_000, 500_000) == pytest.approx(1.5)

    def test_empty_key_rejected(self):
        with pytest.raises(ConfigurationError):
            OpenAIOracle("")


class TestDeepSeek:

    @pytest.mark.asyncio
    async def test_endpoint(self):
        seen = []
        oracle = DeepSeekOracle("ds-test", transport=transport_for(payload=OPENAI_REPLY, seen=seen))

        await oracle.chat("hi")

        assert seen[0].url.host == "api.deepseek.com"
        assert seen[0].url.path == "/chat/completions"
        assert json.loads(seen[0].content)["model"] == "deepseek-chat"


class TestClaude:

    @pytest.mark.asyncio
    async def test_chat_request_and_reply(self):
        seen = []
        oracle = ClaudeOracle("ak-test", transport=transport_for(payload=CLAUDE_REPLY, seen=seen))

        history = [
            Message.system("Extra rules."),
            Message.assistant("", [ToolCall("tu_0", "weather", '{"location": "Oslo"}')]),
            Message.tool("cold", "tu_0", "weather"),
        ]
        reply = await oracle.chat(
            "hi",
            history=history,
            tools=[ToolSchema("weather", "weather lookup", {"type": "object"})],
            system_prompt="Be brief.",
        )

        request = seen[0]
        assert request.url.path == "/v1/messages"
        assert request.headers["x-api-key"] == "ak-test"
        assert request.headers["anthropic-version"] == "2023-06-01"

        body = json.loads(request.content)
        assert body["system"] == "Be brief.\n\nExtra rules."
        assert body["max_tokens"] == 1024
        assert body["tools"][0]["input_schema"] == {"type": "object"}
        assert body["messages"][0]["content"][0]["type"] == "tool_use"
        assert body["messages"][1]["content"][0] == {
            "type": "tool_result", "tool_use_id": "tu_0", "content": "cold",
        }
        assert body["messages"][-1] == {"role": "user", "content": "hi"}

        assert reply.content == "Let me check. "
        assert reply.tool_calls[0].name == "weather"
        assert reply.tool_calls[0].parsed_arguments() == {"location": "Paris"}
        assert reply.input_tokens == 30
        assert reply.metadata["stop_reason"] == "tool_use"

    @pytest.mark.asyncio
    async def test_missing_content(self):
        oracle = ClaudeOracle("ak-test", transport=transport_for(payload={"id": "x"}))
        with pytest.raises(ProviderError):
            await oracle.chat("hi")

    def test_usage_is_priced(self):
        oracle = ClaudeOracle("ak-test", model="claude-3-5-sonnet-latest")
        assert oracle.calculate_cost(1_000_000, 0) == pytest.approx(3.0)


class TestGemini:

    @pytest.mark.asyncio
    async def test_chat_request_and_reply(self):
        seen = []
        oracle = GeminiOracle("gk-test", transport=transport_for(payload=GEMINI_REPLY, seen=seen))

        history = [
            Message.user("earlier"),
            Message.assistant("", [ToolCall("call_0", "weather", '{"location": "Oslo"}')]),
            Message.tool("cold", "call_0", "weather"),
        ]
        reply = await oracle.chat(
            "hi",
            history=history,
            tools=[ToolSchema("calculator", "math", {"type": "object"})],
            system_prompt="Be brief.",
            max_tokens=64,
        )
        await oracle.aclose()

        request = seen[0]
        assert request.url.path == "/v1beta/models/gemini-1.5-flash:generateContent"
        assert request.headers["x-goog-api-key"] == "gk-test"

        body = json.loads(request.content)
        assert [c["role"] for c in body["contents"]] == ["user", "model", "user", "user"]
        assert body["contents"][1]["parts"][0]["functionCall"] == {"name": "weather", "args": {"location": "Oslo"}}
        assert body["contents"][2]["parts"][0]["functionResponse"]["name"] == "weather"
        assert body["systemInstruction"] == {"parts": [{"text": "Be brief."}]}
        assert body["generationConfig"]["maxOutputTokens"] == 64
        assert body["tools"][0]["functionDeclarations"][0]["name"] == "calculator"

        assert reply.content == "Checking."
        assert reply.tool_calls[0].name == "calculator"
        assert reply.tool_calls[0].parsed_arguments() == {"expression": "15 + 27"}
        assert reply.input_tokens == 20
        assert reply.output_tokens == 5
        assert reply.metadata["finish_reason"] == "STOP"

    @pytest.mark.asyncio
    async def test_no_candidates(self):
        oracle = GeminiOracle("gk-test", transport=transport_for(payload={"candidates": []}))
        with pytest.raises(ProviderError):
            await oracle.chat("hi")

    @pytest.mark.asyncio
    async def test_permission_denied(self):
        oracle = GeminiOracle(
            "gk-bad", transport=transport_for(403, {"error": {"message": "API key not valid", "status": "PERMISSION_DENIED"}}),
        )
        with pytest.raises(AuthenticationError):
            await oracle.chat("hi")


class TestCreateOracle:

    def test_mock(self):
        oracle = create_oracle(ProviderConfig(name="offline", kind=ProviderKind.MOCK, responses=["hey"]))
        assert isinstance(oracle, MockOracle)
        assert oracle.name == "offline"

    def test_key_from_environment(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "from-env")
        oracle = create_oracle(ProviderConfig(name="c", kind=ProviderKind.CLAUDE))
        assert isinstance(oracle, ClaudeOracle)
        assert oracle.api_key == "from-env"

    def test_custom_key_env(self, monkeypatch):
        monkeypatch.setenv("MY_KEY", "custom")
        oracle = create_oracle(ProviderConfig(name="o", kind=ProviderKind.OPENAI, api_key_env="MY_KEY", model="gpt-4o"))
        assert oracle.api_key == "custom"
        assert oracle.model == "gpt-4o"

    def test_gemini_key_from_environment(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "from-env")
        oracle = create_oracle(ProviderConfig(name="g", kind=ProviderKind.GEMINI))
        assert isinstance(oracle, GeminiOracle)
        assert oracle.api_key == "from-env"

    def test_missing_key(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        with pytest.raises(ConfigurationError):
            create_oracle(ProviderConfig(name="o", kind=ProviderKind.OPENAI))
