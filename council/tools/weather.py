"""
Weather tool - mock weather lookup for demos and tests.
"""

from typing import Dict, Any
import hashlib

from council.core.tool import Tool, ToolResult


_CONDITIONS = ["sunny", "cloudy", "rainy", "windy", "snowy", "foggy"]


class WeatherTool(Tool):
    """
    Returns deterministic fake weather for a location.

    The same location always yields the same report, which keeps demo
    output stable.
    """

    name = "weather"
    description = "Gets the current weather for a location."
    parameters = {
        "type": "object",
        "properties": {
            "location": {"type": "string", "description": "City name, e.g. Paris"},
            "units": {
                "type": "string",
                "enum": ["celsius", "fahrenheit"],
                "description": "Temperature units (default celsius)",
            },
        },
        "required": ["location"],
    }

    async def execute(self, params: Dict[str, Any]) -> ToolResult:
        location = str(params.get("location", "")).strip()
        if not location:
            return ToolResult.failure(self.name, "Location parameter is required and cannot be empty")

        units = params.get("units", "celsius")
        if units not in ("celsius", "fahrenheit"):
            return ToolResult.failure(self.name, f"Unknown units: {units}")

        seed = int(hashlib.sha256(location.lower().encode()).hexdigest()[:8], 16)
        celsius = (seed % 40) - 5
        temperature = celsius if units == "celsius" else round(celsius * 9 / 5 + 32, 1)

        return ToolResult.ok(self.name, {
            "location": location,
            "temperature": temperature,
            "units": units,
            "condition": _CONDITIONS[seed % len(_CONDITIONS)],
            "humidity": seed % 100,
        }, source="mock")
