"""
Conversation and oracle wire types.

These are the values exchanged across the oracle boundary: chat messages,
tool-call requests, tool schemas, the oracle's reply and token accounting.
"""

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any, Iterable
from enum import Enum
import json


class Role(str, Enum):
    """Sender of a conversation message."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


@dataclass(frozen=True)
class ToolCall:
    """A tool invocation requested by an oracle."""

    id: str
    name: str
    arguments: str = "{}"  # JSON-encoded parameters

    def parsed_arguments(self) -> Dict[str, Any]:
        """Decode the JSON arguments. Raises ValueError on malformed input."""
        if not self.arguments:
            return {}
        value = json.loads(self.arguments)
        if not isinstance(value, dict):
            raise ValueError(f"Tool arguments must be a JSON object, got {type(value).__name__}")
        return value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": self.arguments},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ToolCall":
        function = data.get("function", {})
        arguments = function.get("arguments", "{}")
        if not isinstance(arguments, str):
            arguments = json.dumps(arguments)
        return cls(id=data.get("id", ""), name=function.get("name", ""), arguments=arguments)


@dataclass(frozen=True)
class Message:
    """A single turn in a conversation."""

    role: Role
    content: str
    tool_calls: tuple = ()
    tool_call_id: Optional[str] = None
    name: Optional[str] = None

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(role=Role.USER, content=content)

    @classmethod
    def assistant(cls, content: str, tool_calls: Iterable[ToolCall] = ()) -> "Message":
        return cls(role=Role.ASSISTANT, content=content, tool_calls=tuple(tool_calls))

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(role=Role.SYSTEM, content=content)

    @classmethod
    def tool(cls, content: str, tool_call_id: str, name: Optional[str] = None) -> "Message":
        return cls(role=Role.TOOL, content=content, tool_call_id=tool_call_id, name=name)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"role": self.role.value, "content": self.content}
        if self.tool_calls:
            data["tool_calls"] = [call.to_dict() for call in self.tool_calls]
        if self.tool_call_id is not None:
            data["tool_call_id"] = self.tool_call_id
        if self.name is not None:
            data["name"] = self.name
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Message":
        return cls(
            role=Role(data.get("role", "user")),
            content=data.get("content") or "",
            tool_calls=tuple(ToolCall.from_dict(c) for c in data.get("tool_calls", [])),
            tool_call_id=data.get("tool_call_id"),
            name=data.get("name"),
        )


@dataclass(frozen=True)
class ToolSchema:
    """Function-calling schema advertised to an oracle."""

    name: str
    description: str
    parameters: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


@dataclass(frozen=True)
class TokenUsage:
    """Token accounting for one or more oracle calls."""

    input_tokens: int = 0
    output_tokens: int = 0
    cost: Optional[float] = None  # USD, None when unknown

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    def __add__(self, other: "TokenUsage") -> "TokenUsage":
        return TokenUsage.combine([self, other])

    @staticmethod
    def combine(usages: Iterable[Optional["TokenUsage"]]) -> "TokenUsage":
        """
        Sum several usages.

        Missing entries are skipped. The cost is summed only when every
        remaining usage carries one.
        """
        present = [u for u in usages if u is not None]
        if not present:
            return TokenUsage()

        cost = None
        if all(u.cost is not None for u in present):
            cost = sum(u.cost for u in present)

        return TokenUsage(
            input_tokens=sum(u.input_tokens for u in present),
            output_tokens=sum(u.output_tokens for u in present),
            cost=cost,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "input_tokens": self.input_tokens,
            "output_tokens": self.output_tokens,
            "total_tokens": self.total_tokens,
            "cost": self.cost,
        }


@dataclass
class OracleReply:
    """What an oracle returns for one chat call."""

    content: str
    tool_calls: List[ToolCall] = field(default_factory=list)
    input_tokens: int = 0
    output_tokens: int = 0
    model: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens
