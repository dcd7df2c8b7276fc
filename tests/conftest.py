"""
Shared test fixtures for council tests.

This module provides:
- Expert factories bound to scripted mock oracles
- The weather/math pool used by the routing scenarios
- Expert answer factories for synthesizer tests
"""

from typing import List, Optional, Sequence

import pytest

from council.core.messages import TokenUsage
from council.core.oracle import MockOracle
from council.core.tool import Tool
from council.swarm.expert import Expert, ExpertAnswer, ExpertConfig


class ClosingMockOracle(MockOracle):
    """MockOracle that counts ``aclose`` calls."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.close_count = 0

    async def aclose(self) -> None:
        self.close_count += 1


def make_expert(
    name: str,
    domain: str,
    keywords: Sequence[str],
    confidence: float = 0.8,
    responses: Optional[list] = None,
    tools: Sequence[Tool] = (),
    oracle: Optional[MockOracle] = None,
    **config_kwargs,
) -> Expert:
    """Create an expert whose oracle replies from ``responses``."""
    config = ExpertConfig(
        name=name,
        domain=domain,
        description=f"{domain} specialist",
        keywords=list(keywords),
        confidence=confidence,
        tools=[tool.name for tool in tools],
        **config_kwargs,
    )
    oracle = oracle or MockOracle(responses or [f"{name} says hi"], name=f"mock-{domain}")
    return Expert(config, oracle, tools)


def make_answer(
    name: str = "Weather Expert",
    domain: str = "weather",
    content: str = "Sunny and warm",
    confidence: float = 0.9,
    usage: Optional[TokenUsage] = None,
) -> ExpertAnswer:
    return ExpertAnswer(
        expert_id=name.lower().replace(" ", "-"),
        expert_name=name,
        domain=domain,
        content=content,
        confidence=confidence,
        token_usage=usage or TokenUsage(input_tokens=10, output_tokens=5),
    )


@pytest.fixture
def weather_expert() -> Expert:
    return make_expert(
        "Weather Expert",
        "weather",
        ["weather", "forecast"],
        confidence=0.9,
        responses=["It will be sunny."],
    )


@pytest.fixture
def math_expert() -> Expert:
    return make_expert(
        "Math Expert",
        "mathematics",
        ["calculate", "number"],
        confidence=0.95,
        responses=["The result is 42."],
    )


@pytest.fixture
def scenario_pool(weather_expert, math_expert) -> List[Expert]:
    """Weather and math experts, in that order."""
    return [weather_expert, math_expert]


@pytest.fixture
def failing_oracle() -> MockOracle:
    return MockOracle([RuntimeError("oracle unavailable")], name="broken")
