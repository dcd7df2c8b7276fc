"""
Oracle provider profiles.

A profile names a backend kind plus its model, credentials and pricing.
Experts and the lead refer to profiles by name.
"""

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any
from enum import Enum
import os

from council.core.errors import ConfigurationError


class ProviderKind(str, Enum):
    """Supported oracle backends."""

    OPENAI = "openai"
    DEEPSEEK = "deepseek"
    CLAUDE = "claude"
    GEMINI = "gemini"
    MOCK = "mock"  # Scripted replies, no network


DEFAULT_KEY_ENV = {
    ProviderKind.OPENAI: "OPENAI_API_KEY",
    ProviderKind.DEEPSEEK: "DEEPSEEK_API_KEY",
    ProviderKind.CLAUDE: "ANTHROPIC_API_KEY",
    ProviderKind.GEMINI: "GEMINI_API_KEY",
}


@dataclass
class ProviderConfig:
    """Configuration of one oracle profile."""

    name: str
    kind: ProviderKind = ProviderKind.OPENAI

    # Backend
    model: Optional[str] = None
    base_url: Optional[str] = None
    timeout_seconds: float = 60.0

    # Credentials; api_key wins over api_key_env
    api_key: Optional[str] = None
    api_key_env: Optional[str] = None

    # Pricing overrides, USD per million tokens
    input_cost_per_million: Optional[float] = None
    output_cost_per_million: Optional[float] = None

    # Mock replies
    responses: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, name: str, data: Dict[str, Any]) -> "ProviderConfig":
        """Create ProviderConfig from a dictionary."""
        kind = data.get("kind", "openai")
        try:
            kind = ProviderKind(kind)
        except ValueError as e:
            valid = ", ".join(k.value for k in ProviderKind)
            raise ConfigurationError(
                f"Provider '{name}': unknown kind (expected one of: {valid})", details=kind,
            ) from e

        return cls(
            name=name,
            kind=kind,
            model=data.get("model"),
            base_url=data.get("base_url"),
            timeout_seconds=data.get("timeout_seconds", 60.0),
            api_key=data.get("api_key"),
            api_key_env=data.get("api_key_env"),
            input_cost_per_million=data.get("input_cost_per_million"),
            output_cost_per_million=data.get("output_cost_per_million"),
            responses=list(data.get("responses", [])),
        )

    def resolve_api_key(self) -> Optional[str]:
        """Inline key, else the configured or conventional environment variable."""
        if self.api_key:
            return self.api_key
        env_var = self.api_key_env or DEFAULT_KEY_ENV.get(self.kind)
        return os.environ.get(env_var) if env_var else None

    def validate(self) -> List[str]:
        """Validate the profile and return a list of errors."""
        errors = []

        if self.kind != ProviderKind.MOCK and not self.resolve_api_key():
            env_var = self.api_key_env or DEFAULT_KEY_ENV.get(self.kind)
            errors.append(f"Provider '{self.name}': no API key (set {env_var} or api_key)")

        if self.timeout_seconds <= 0:
            errors.append(f"Provider '{self.name}': timeout_seconds must be positive")

        return errors
