"""
Council Swarm - Multi-expert orchestration.

A lead coordinates a pool of specialized experts: it routes each query to
one or more of them, runs them under a delegation strategy, and merges
their answers into one attributable response.

Architecture:
    ┌──────────────────────────────────────────────────────────────┐
    │                           LEAD                               │
    │                                                              │
    │   Query → Router → Dispatcher → [Expert₁, ...] → Synthesizer │
    │                                                              │
    └──────────────────────────────────────────────────────────────┘

Components:
    - Expert: Domain specialist with keywords, tools and an oracle
    - Router: Decides which experts to activate for a query
    - Dispatcher: Runs the selected experts under a strategy
    - Synthesizer: Combines expert answers into a final answer
    - Lead: Orchestrates the entire collaboration
"""

from council.swarm.strategy import DelegationStrategy
from council.swarm.expert import Expert, ExpertAnswer, ExpertConfig, ExpertRequest
from council.swarm.router import Router, RouterConfig
from council.swarm.dispatcher import DispatchOutcome, Dispatcher
from council.swarm.synthesizer import FinalAnswer, SynthesisPath, Synthesizer, SynthesizerConfig
from council.swarm.lead import Lead, LeadConfig, LeadStats, create_demo_lead

__all__ = [
    "DelegationStrategy",
    "Expert",
    "ExpertAnswer",
    "ExpertConfig",
    "ExpertRequest",
    "Router",
    "RouterConfig",
    "DispatchOutcome",
    "Dispatcher",
    "FinalAnswer",
    "SynthesisPath",
    "Synthesizer",
    "SynthesizerConfig",
    "Lead",
    "LeadConfig",
    "LeadStats",
    "create_demo_lead",
]
