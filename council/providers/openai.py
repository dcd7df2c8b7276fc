"""
OpenAI-compatible chat completions backend.

Also serves DeepSeek, whose API speaks the same wire format.
"""

from typing import Optional, List, Dict, Any, Sequence

from council.core.errors import ProviderError
from council.core.messages import Message, OracleReply, ToolCall, ToolSchema
from council.providers.base import HttpOracle


class OpenAIOracle(HttpOracle):
    """Oracle backed by ``POST /v1/chat/completions``."""

    provider_name = "openai"
    default_base_url = "https://api.openai.com"
    default_model_name = "gpt-4o-mini"
    completions_path = "/v1/chat/completions"
    pricing = {
        "gpt-4o-mini": (0.15, 0.60),
        "gpt-4o": (2.50, 10.00),
        "gpt-4-turbo": (10.00, 30.00),
        "gpt-3.5-turbo": (0.50, 1.50),
    }

    def __init__(self, api_key: str, organization: Optional[str] = None, **kwargs):
        self.organization = organization
        super().__init__(api_key, **kwargs)

    def headers(self) -> Dict[str, str]:
        headers = super().headers()
        if self.organization:
            headers["OpenAI-Organization"] = self.organization
        return headers

    def build_body(
        self,
        message: str,
        history: Optional[Sequence[Message]],
        tools: Optional[Sequence[ToolSchema]],
        temperature: float,
        max_tokens: Optional[int],
        system_prompt: Optional[str],
    ) -> Dict[str, Any]:
        messages: List[Dict[str, Any]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.extend(m.to_dict() for m in history or [])
        messages.append({"role": "user", "content": message})

        body: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
        }
        if max_tokens is not None:
            body["max_tokens"] = max_tokens
        if tools:
            body["tools"] = [t.to_dict() for t in tools]
            body["tool_choice"] = "auto"
        return body

    async def chat(
        self,
        message: str,
        history: Optional[Sequence[Message]] = None,
        tools: Optional[Sequence[ToolSchema]] = None,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        system_prompt: Optional[str] = None,
    ) -> OracleReply:
        body = self.build_body(message, history, tools, temperature, max_tokens, system_prompt)
        payload = await self._post(self.completions_path, body)
        return self.parse_reply(payload)

    def parse_reply(self, payload: Dict[str, Any]) -> OracleReply:
        try:
            choice = payload["choices"][0]
            message = choice["message"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError("Response has no choices", provider=self.name, details=payload) from e

        usage = payload.get("usage") or {}
        return OracleReply(
            content=message.get("content") or "",
            tool_calls=[ToolCall.from_dict(c) for c in message.get("tool_calls") or []],
            input_tokens=usage.get("prompt_tokens", 0),
            output_tokens=usage.get("completion_tokens", 0),
            model=payload.get("model"),
            metadata={"finish_reason": choice.get("finish_reason")},
        )


class DeepSeekOracle(OpenAIOracle):
    """DeepSeek chat API (OpenAI wire format)."""

    provider_name = "deepseek"
    default_base_url = "https://api.deepseek.com"
    default_model_name = "deepseek-chat"
    completions_path = "/chat/completions"
    pricing = {
        "deepseek-chat": (0.27, 1.10),
        "deepseek-reasoner": (0.55, 2.19),
    }
