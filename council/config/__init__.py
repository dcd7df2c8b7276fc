"""
Council configuration.

Handles the lead settings, oracle provider profiles and expert definitions.
"""

from council.config.base import CouncilConfig
from council.config.provider import ProviderConfig, ProviderKind

__all__ = [
    "CouncilConfig",
    "ProviderConfig",
    "ProviderKind",
]
