"""
Anthropic messages API backend.
"""

from typing import Optional, List, Dict, Any, Sequence
import json

from council.core.errors import ProviderError
from council.core.messages import Message, OracleReply, Role, ToolCall, ToolSchema
from council.providers.base import HttpOracle

ANTHROPIC_VERSION = "2023-06-01"
DEFAULT_MAX_TOKENS = 1024


class ClaudeOracle(HttpOracle):
    """Oracle backed by ``POST /v1/messages``."""

    provider_name = "claude"
    default_base_url = "https://api.anthropic.com"
    default_model_name = "claude-3-5-haiku-latest"
    pricing = {
        "claude-3-5-haiku": (0.80, 4.00),
        "claude-3-5-sonnet": (3.00, 15.00),
        "claude-3-7-sonnet": (3.00, 15.00),
        "claude-3-opus": (15.00, 75.00),
    }

    def headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-api-key": self.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
        }

    def build_body(
        self,
        message: str,
        history: Optional[Sequence[Message]],
        tools: Optional[Sequence[ToolSchema]],
        temperature: float,
        max_tokens: Optional[int],
        system_prompt: Optional[str],
    ) -> Dict[str, Any]:
        system_parts = [system_prompt] if system_prompt else []
        messages: List[Dict[str, Any]] = []

        for turn in history or []:
            if turn.role == Role.SYSTEM:
                system_parts.append(turn.content)
            elif turn.role == Role.TOOL:
                messages.append({
                    "role": "user",
                    "content": [{
                        "type": "tool_result",
                        "tool_use_id": turn.tool_call_id,
                        "content": turn.content,
                    }],
                })
            elif turn.role == Role.ASSISTANT and turn.tool_calls:
                blocks: List[Dict[str, Any]] = []
                if turn.content:
                    blocks.append({"type": "text", "text": turn.content})
                for call in turn.tool_calls:
                    blocks.append({
                        "type": "tool_use",
                        "id": call.id,
                        "name": call.name,
                        "input": call.parsed_arguments(),
                    })
                messages.append({"role": "assistant", "content": blocks})
            else:
                messages.append({"role": turn.role.value, "content": turn.content})

        messages.append({"role": "user", "content": message})

        body: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "max_tokens": max_tokens or DEFAULT_MAX_TOKENS,
            "temperature": temperature,
        }
        if system_parts:
            body["system"] = "\n\n".join(system_parts)
        if tools:
            body["tools"] = [
                {"name": t.name, "description": t.description, "input_schema": t.parameters}
                for t in tools
            ]
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
        payload = await self._post("/v1/messages", body)
        return self.parse_reply(payload)

    def parse_reply(self, payload: Dict[str, Any]) -> OracleReply:
        blocks = payload.get("content")
        if not isinstance(blocks, list):
            raise ProviderError("Response has no content blocks", provider=self.name, details=payload)

        texts = []
        tool_calls = []
        for block in blocks:
            if block.get("type") == "text":
                texts.append(block.get("text", ""))
            elif block.get("type") == "tool_use":
                tool_calls.append(ToolCall(
                    id=block.get("id", ""),
                    name=block.get("name", ""),
                    arguments=json.dumps(block.get("input") or {}),
                ))

        usage = payload.get("usage") or {}
        return OracleReply(
            content="".join(texts),
            tool_calls=tool_calls,
            input_tokens=usage.get("input_tokens", 0),
            output_tokens=usage.get("output_tokens", 0),
            model=payload.get("model"),
            metadata={"stop_reason": payload.get("stop_reason")},
        )
