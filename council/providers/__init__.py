"""
Concrete oracle backends.

    - OpenAIOracle: OpenAI chat completions
    - DeepSeekOracle: DeepSeek (OpenAI wire format)
    - ClaudeOracle: Anthropic messages API
    - GeminiOracle: Google Gemini generateContent
"""

from council.config.provider import ProviderConfig, ProviderKind
from council.core.errors import ConfigurationError
from council.core.oracle import MockOracle, Oracle
from council.providers.base import HttpOracle
from council.providers.claude import ClaudeOracle
from council.providers.gemini import GeminiOracle
from council.providers.openai import DeepSeekOracle, OpenAIOracle

_HTTP_ORACLES = {
    ProviderKind.OPENAI: OpenAIOracle,
    ProviderKind.DEEPSEEK: DeepSeekOracle,
    ProviderKind.CLAUDE: ClaudeOracle,
    ProviderKind.GEMINI: GeminiOracle,
}


def create_oracle(config: ProviderConfig) -> Oracle:
    """Build the oracle described by a provider profile."""
    if config.kind == ProviderKind.MOCK:
        return MockOracle(
            responses=list(config.responses) or None,
            name=config.name,
            model=config.model or "mock-model",
        )

    api_key = config.resolve_api_key()
    if not api_key:
        raise ConfigurationError(f"No API key for provider '{config.name}'")

    oracle_cls = _HTTP_ORACLES[config.kind]
    return oracle_cls(
        api_key=api_key,
        model=config.model,
        base_url=config.base_url,
        timeout_seconds=config.timeout_seconds,
        input_cost_per_million=config.input_cost_per_million,
        output_cost_per_million=config.output_cost_per_million,
    )


__all__ = [
    "HttpOracle",
    "OpenAIOracle",
    "DeepSeekOracle",
    "ClaudeOracle",
    "GeminiOracle",
    "create_oracle",
]
