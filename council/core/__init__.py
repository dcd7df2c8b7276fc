"""
Core boundary types shared by the orchestration engine.

Components:
    - errors: exception taxonomy
    - messages: conversation, tool-call and token accounting types
    - oracle: the reasoning backend interface
    - tool: tool base class and registry
"""

from council.core.errors import (
    CouncilError,
    ConfigurationError,
    RoutingError,
    InvocationError,
    SynthesisError,
    ToolError,
    ProviderError,
    AuthenticationError,
    RateLimitError,
)
from council.core.messages import Role, Message, ToolCall, ToolSchema, TokenUsage, OracleReply
from council.core.oracle import Oracle, MockOracle
from council.core.tool import Tool, ToolResult, ToolRegistry

__all__ = [
    "CouncilError",
    "ConfigurationError",
    "RoutingError",
    "InvocationError",
    "SynthesisError",
    "ToolError",
    "ProviderError",
    "AuthenticationError",
    "RateLimitError",
    "Role",
    "Message",
    "ToolCall",
    "ToolSchema",
    "TokenUsage",
    "OracleReply",
    "Oracle",
    "MockOracle",
    "Tool",
    "ToolResult",
    "ToolRegistry",
]
