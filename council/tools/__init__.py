"""
Built-in tools that experts can be configured with.
"""

from council.core.tool import ToolRegistry
from council.tools.calculator import CalculatorTool
from council.tools.echo import EchoTool
from council.tools.weather import WeatherTool


def default_tools() -> ToolRegistry:
    """Registry holding every built-in tool."""
    return ToolRegistry([CalculatorTool(), WeatherTool(), EchoTool()])


__all__ = [
    "CalculatorTool",
    "EchoTool",
    "WeatherTool",
    "default_tools",
]
