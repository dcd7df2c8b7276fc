"""
Google Gemini generateContent backend.
"""

from typing import Optional, List, Dict, Any, Sequence
import json

from council.core.errors import ProviderError
from council.core.messages import Message, OracleReply, Role, ToolCall, ToolSchema
from council.providers.base import HttpOracle


class GeminiOracle(HttpOracle):
    """Oracle backed by ``POST /v1beta/models/{model}:generateContent``."""

    provider_name = "gemini"
    default_base_url = "https://generativelanguage.googleapis.com"
    default_model_name = "gemini-1.5-flash"
    pricing = {
        "gemini-1.5-flash": (0.075, 0.30),
        "gemini-1.5-pro": (1.25, 5.00),
        "gemini-pro": (0.50, 1.50),
    }

    def headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-goog-api-key": self.api_key,
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
        contents: List[Dict[str, Any]] = []

        for turn in history or []:
            if turn.role == Role.SYSTEM:
                system_parts.append(turn.content)
            elif turn.role == Role.TOOL:
                contents.append({
                    "role": "user",
                    "parts": [{
                        "functionResponse": {
                            "name": turn.name or "",
                            "response": {"content": turn.content},
                        },
                    }],
                })
            elif turn.role == Role.ASSISTANT:
                parts: List[Dict[str, Any]] = []
                if turn.content:
                    parts.append({"text": turn.content})
                for call in turn.tool_calls:
                    parts.append({"functionCall": {"name": call.name, "args": call.parsed_arguments()}})
                contents.append({"role": "model", "parts": parts})
            else:
                contents.append({"role": "user", "parts": [{"text": turn.content}]})

        contents.append({"role": "user", "parts": [{"text": message}]})

        generation: Dict[str, Any] = {"temperature": temperature}
        if max_tokens:
            generation["maxOutputTokens"] = max_tokens

        body: Dict[str, Any] = {"contents": contents, "generationConfig": generation}
        if system_parts:
            body["systemInstruction"] = {"parts": [{"text": "\n\n".join(system_parts)}]}
        if tools:
            body["tools"] = [{
                "functionDeclarations": [
                    {"name": t.name, "description": t.description, "parameters": t.parameters}
                    for t in tools
                ],
            }]
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
        payload = await self._post(f"/v1beta/models/{self.model}:generateContent", body)
        return self.parse_reply(payload)

    def parse_reply(self, payload: Dict[str, Any]) -> OracleReply:
        candidates = payload.get("candidates")
        if not candidates:
            raise ProviderError("No candidates in response", provider=self.name, details=payload)

        candidate = candidates[0]
        parts = (candidate.get("content") or {}).get("parts") or []

        texts = []
        tool_calls = []
        for index, part in enumerate(parts):
            if "text" in part:
                texts.append(part["text"])
            elif "functionCall" in part:
                # Gemini does not id its calls; position keeps them unique per reply
                call = part["functionCall"]
                tool_calls.append(ToolCall(
                    id=f"call_{index}",
                    name=call.get("name", ""),
                    arguments=json.dumps(call.get("args") or {}),
                ))

        usage = payload.get("usageMetadata") or {}
        return OracleReply(
            content="".join(texts),
            tool_calls=tool_calls,
            input_tokens=usage.get("promptTokenCount", 0),
            output_tokens=usage.get("candidatesTokenCount", 0),
            model=payload.get("modelVersion") or self.model,
            metadata={"finish_reason": candidate.get("finishReason")},
        )
