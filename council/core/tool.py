"""
Tool - callable capabilities private to an expert.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List, Dict, Any, Iterable

from council.core.errors import ToolError
from council.core.messages import ToolCall, ToolSchema


@dataclass(frozen=True)
class ToolResult:
    """Outcome of one tool execution."""

    tool_name: str
    success: bool
    data: Any = None
    error: Optional[str] = None
    tool_call_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    @classmethod
    def ok(cls, tool_name: str, data: Any, **metadata: Any) -> "ToolResult":
        return cls(tool_name=tool_name, success=True, data=data, metadata=metadata)

    @classmethod
    def failure(cls, tool_name: str, error: str, tool_call_id: Optional[str] = None) -> "ToolResult":
        return cls(tool_name=tool_name, success=False, error=error, tool_call_id=tool_call_id)

    def as_message_content(self) -> str:
        """Text fed back to the oracle."""
        if self.success:
            return str(self.data)
        return f"Error: {self.error}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tool_name": self.tool_name,
            "success": self.success,
            "data": self.data,
            "error": self.error,
            "tool_call_id": self.tool_call_id,
            "metadata": self.metadata,
            "timestamp": self.timestamp.isoformat(),
        }


class Tool(ABC):
    """
    Base class for tools.

    Subclasses declare ``name``, ``description`` and a JSON-schema
    ``parameters`` object, and implement ``execute``.
    """

    name: str = ""
    description: str = ""
    parameters: Dict[str, Any] = {"type": "object", "properties": {}}

    @abstractmethod
    async def execute(self, params: Dict[str, Any]) -> ToolResult:
        """Run the tool with already-validated parameters."""

    def to_schema(self) -> ToolSchema:
        return ToolSchema(name=self.name, description=self.description, parameters=self.parameters)

    def validate(self, params: Dict[str, Any]) -> None:
        for required in self.parameters.get("required", []):
            if required not in params:
                raise ToolError(f"Missing required parameter: {required}", tool_name=self.name)

    async def run_call(self, call: ToolCall) -> ToolResult:
        """Parse, validate and execute a tool call. Never raises."""
        try:
            params = call.parsed_arguments()
            self.validate(params)
            result = await self.execute(params)
        except Exception as e:
            return ToolResult.failure(self.name, str(e), tool_call_id=call.id)

        return ToolResult(
            tool_name=self.name,
            success=result.success,
            data=result.data,
            error=result.error,
            tool_call_id=call.id,
            metadata=result.metadata,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name='{self.name}')"


class ToolRegistry:
    """Name-indexed collection of tools."""

    def __init__(self, tools: Iterable[Tool] = ()):
        self._tools: Dict[str, Tool] = {}
        for tool in tools:
            self.register(tool)

    def register(self, tool: Tool) -> None:
        self._tools[tool.name] = tool

    def get(self, name: str) -> Optional[Tool]:
        return self._tools.get(name)

    def resolve(self, names: Iterable[str]) -> List[Tool]:
        """Look up several tools by name, failing on unknown names."""
        resolved = []
        for name in names:
            tool = self._tools.get(name)
            if tool is None:
                raise ToolError(f"Unknown tool: {name}", tool_name=name)
            resolved.append(tool)
        return resolved

    @property
    def names(self) -> List[str]:
        return list(self._tools.keys())

    @property
    def schemas(self) -> List[ToolSchema]:
        return [tool.to_schema() for tool in self._tools.values()]

    async def run_call(self, call: ToolCall) -> ToolResult:
        tool = self._tools.get(call.name)
        if tool is None:
            return ToolResult.failure(call.name, f"Tool not found: {call.name}", tool_call_id=call.id)
        return await tool.run_call(call)

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)
