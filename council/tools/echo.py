"""
Echo tool - returns its input unchanged.
"""

from typing import Dict, Any

from council.core.tool import Tool, ToolResult


class EchoTool(Tool):
    """Echoes back the provided message."""

    name = "echo"
    description = "Echoes back the provided message. Useful for testing and verification."
    parameters = {
        "type": "object",
        "properties": {
            "message": {"type": "string", "description": "The message to echo back"},
        },
        "required": ["message"],
    }

    async def execute(self, params: Dict[str, Any]) -> ToolResult:
        message = params.get("message")
        if not message:
            return ToolResult.failure(self.name, "Message parameter is required and cannot be empty")
        return ToolResult.ok(self.name, message, message_length=len(message))
