"""
Council - Multi-expert orchestration for LLM-backed specialists.

A lead routes each query to the experts whose domains fit it, runs them
singly, in parallel or in sequence, and synthesizes one final answer.
"""

__version__ = "0.1.0"
__author__ = "Council Contributors"

from council.core import CouncilError, Message, MockOracle, Oracle
from council.swarm import DelegationStrategy, Expert, ExpertConfig, FinalAnswer, Lead, LeadConfig
from council.config import CouncilConfig

__all__ = [
    "CouncilConfig",
    "CouncilError",
    "DelegationStrategy",
    "Expert",
    "ExpertConfig",
    "FinalAnswer",
    "Lead",
    "LeadConfig",
    "Message",
    "MockOracle",
    "Oracle",
    "__version__",
]
