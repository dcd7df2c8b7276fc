"""
Top-level council configuration.

One YAML file describes the lead (strategy, caps, timeouts, router and
synthesizer settings), the oracle provider profiles and where the expert
definitions live. Expert definitions are one YAML file each.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, List, Dict, Any
import yaml

from council.config.provider import ProviderConfig
from council.core.errors import ConfigurationError
from council.swarm.expert import ExpertConfig
from council.swarm.lead import LeadConfig


@dataclass
class CouncilConfig:
    """Complete council configuration."""

    name: str = "council"
    lead: LeadConfig = field(default_factory=LeadConfig)

    # Oracles
    providers: Dict[str, ProviderConfig] = field(default_factory=dict)
    lead_provider: Optional[str] = None  # Profile used for routing and synthesis
    default_expert_provider: Optional[str] = None  # Falls back to lead_provider

    # Experts
    experts_dir: Optional[Path] = None
    experts: List[ExpertConfig] = field(default_factory=list)  # Inline definitions

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base_dir: Optional[Path] = None) -> "CouncilConfig":
        """Create CouncilConfig from a dictionary."""
        providers = {
            name: ProviderConfig.from_dict(name, provider_data or {})
            for name, provider_data in (data.get("providers") or {}).items()
        }

        experts_dir = data.get("experts_dir")
        if experts_dir is not None:
            experts_dir = Path(experts_dir)
            if base_dir is not None and not experts_dir.is_absolute():
                experts_dir = base_dir / experts_dir

        return cls(
            name=data.get("name", "council"),
            lead=LeadConfig.from_dict(data),
            providers=providers,
            lead_provider=data.get("lead_provider"),
            default_expert_provider=data.get("default_expert_provider"),
            experts_dir=experts_dir,
            experts=[ExpertConfig.from_dict(e) for e in data.get("experts") or []],
        )

    @classmethod
    def from_yaml(cls, path: Path) -> "CouncilConfig":
        """
        Load configuration from a YAML file.

        Relative ``experts_dir`` paths resolve against the file's directory.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration not found: {path}")

        with open(path) as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid configuration file {path.name}", details=e) from e

        return cls.from_dict(data, base_dir=path.parent)

    def load_experts(self) -> List[ExpertConfig]:
        """Inline experts followed by every ``*.yaml`` in ``experts_dir``."""
        configs = list(self.experts)

        if self.experts_dir is not None:
            if not self.experts_dir.exists():
                raise ConfigurationError(f"Experts directory not found: {self.experts_dir}")
            for config_file in sorted(self.experts_dir.glob("*.yaml")):
                if config_file.name.startswith("_"):
                    continue
                try:
                    configs.append(ExpertConfig.from_yaml(str(config_file)))
                except (yaml.YAMLError, TypeError) as e:
                    raise ConfigurationError(f"Invalid expert file {config_file.name}", details=e) from e

        return configs

    def provider_for(self, expert: ExpertConfig) -> Optional[str]:
        return expert.provider or self.default_expert_provider or self.lead_provider

    def validate(self) -> List[str]:
        """Validate the configuration and return a list of errors."""
        errors = []

        for provider in self.providers.values():
            errors.extend(provider.validate())

        if self.lead_provider and self.lead_provider not in self.providers:
            errors.append(f"Unknown lead_provider: {self.lead_provider}")

        if self.lead.max_participants < 1:
            errors.append("max_participants must be at least 1")

        try:
            experts = self.load_experts()
        except ConfigurationError as e:
            errors.append(str(e))
            return errors

        if not experts:
            errors.append("No experts configured")

        ids = [e.id for e in experts]
        if len(ids) != len(set(ids)):
            errors.append("Duplicate expert ids in configuration")

        for expert in experts:
            if not expert.keywords:
                errors.append(f"Expert '{expert.name}' has no keywords")
            if not 0.0 <= expert.confidence <= 1.0:
                errors.append(f"Expert '{expert.name}' confidence outside [0, 1]")
            provider = self.provider_for(expert)
            if provider is None:
                errors.append(f"Expert '{expert.name}' has no provider")
            elif provider not in self.providers:
                errors.append(f"Expert '{expert.name}' uses unknown provider '{provider}'")

        return errors
