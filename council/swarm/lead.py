"""
Lead - Composition root of the council.

The Lead owns the expert pool, the router, the dispatcher and the
synthesizer, and exposes a single entry point:

    query -> Router.select -> Dispatcher.run -> Synthesizer.merge -> FinalAnswer
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional, Any, Sequence, TYPE_CHECKING
import asyncio
import logging
import time

from council.core.errors import ConfigurationError, CouncilError, ToolError
from council.core.messages import Message
from council.core.oracle import MockOracle, Oracle
from council.swarm.dispatcher import Dispatcher
from council.swarm.expert import Expert, ExpertConfig, ExpertRequest
from council.swarm.router import Router, RouterConfig
from council.swarm.strategy import DelegationStrategy
from council.swarm.synthesizer import FinalAnswer, SynthesisPath, Synthesizer, SynthesizerConfig

if TYPE_CHECKING:
    from council.config import CouncilConfig
    from council.core.tool import ToolRegistry

logger = logging.getLogger(__name__)


@dataclass
class LeadConfig:
    """Configuration for the lead."""

    strategy: DelegationStrategy = DelegationStrategy.INTELLIGENT
    max_participants: int = 3
    expert_timeout_seconds: Optional[float] = 60.0  # None disables the bound

    # Component configs
    router: RouterConfig = field(default_factory=RouterConfig)
    synthesizer: SynthesizerConfig = field(default_factory=SynthesizerConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LeadConfig":
        """Create from dictionary."""
        config_data = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}

        strategy = config_data.get("strategy")
        if isinstance(strategy, str):
            try:
                config_data["strategy"] = DelegationStrategy(strategy)
            except ValueError as e:
                valid = ", ".join(s.value for s in DelegationStrategy)
                raise ConfigurationError(f"Unknown strategy (expected one of: {valid})", details=strategy) from e
        if "router" in data:
            config_data["router"] = RouterConfig.from_dict(data["router"] or {})
        if "synthesizer" in data:
            config_data["synthesizer"] = SynthesizerConfig.from_dict(data["synthesizer"] or {})

        return cls(**config_data)


@dataclass
class LeadStats:
    """Statistics about lead operation."""

    total_queries: int = 0
    no_data_answers: int = 0
    total_tokens: int = 0
    total_latency_ms: float = 0.0
    expert_usage: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_queries": self.total_queries,
            "no_data_answers": self.no_data_answers,
            "total_tokens": self.total_tokens,
            "avg_latency_ms": self.total_latency_ms / max(1, self.total_queries),
            "expert_usage": self.expert_usage,
        }


class Lead:
    """
    Coordinates a pool of experts to answer one query at a time.

    Callers observe two distinct outcomes when things go wrong:
        - RoutingError: nobody could be selected for the query
        - a zero-confidence FinalAnswer: experts were selected but all failed
    Under the single strategy the chosen expert's own error propagates as
    an InvocationError.
    """

    def __init__(
        self,
        experts: Sequence[Expert],
        oracle: Optional[Oracle] = None,
        config: Optional[LeadConfig] = None,
        router: Optional[Router] = None,
        dispatcher: Optional[Dispatcher] = None,
        synthesizer: Optional[Synthesizer] = None,
    ):
        if not experts:
            raise ConfigurationError("Lead requires at least one expert")

        self.config = config or LeadConfig()
        if self.config.max_participants < 1:
            raise ConfigurationError("max_participants must be >= 1", details=self.config.max_participants)

        self.oracle = oracle
        self.router = router or Router(self.config.router)
        self.dispatcher = dispatcher or Dispatcher(self.config.expert_timeout_seconds)
        self.synthesizer = synthesizer or Synthesizer(self.config.synthesizer)
        self._experts: List[Expert] = []
        self._stats = LeadStats()

        for expert in experts:
            self.add_expert(expert)

    @property
    def experts(self) -> List[Expert]:
        """Expert pool in insertion order."""
        return list(self._experts)

    @property
    def strategy(self) -> DelegationStrategy:
        return self.config.strategy

    @property
    def stats(self) -> LeadStats:
        return self._stats

    async def answer(
        self,
        query: str,
        history: Optional[Sequence[Message]] = None,
        strategy: Optional[DelegationStrategy] = None,
    ) -> FinalAnswer:
        """
        Answer a query with the expert pool.

        Args:
            query: User's question or task
            history: Prior conversation turns
            strategy: Overrides the configured strategy for this call

        Returns:
            FinalAnswer with the merged content and attribution

        Raises:
            RoutingError: when no expert can be selected
            InvocationError: when the single-strategy expert fails
        """
        strategy = strategy or self.config.strategy
        start = time.time()

        logger.info("Lead processing query with %s strategy", strategy.value)
        logger.debug("Available experts: %s", ", ".join(e.name for e in self._experts))

        try:
            selected = await self.router.select(
                query,
                self._experts,
                strategy,
                max_participants=self.config.max_participants,
                oracle=self.oracle,
            )

            request = ExpertRequest(query=query, history=tuple(history or ()))
            answers = await self.dispatcher.run(selected, request, strategy)

            result = await self.synthesizer.merge(query, answers, oracle=self.oracle)
        except CouncilError:
            raise
        except Exception as e:
            raise CouncilError(f"Lead failed to process query: {e}", details=query) from e

        result.metadata.setdefault("strategy", strategy.value)
        result.metadata.setdefault("selected", [e.name for e in selected])
        self._update_stats(result, time.time() - start)
        return result

    def answer_sync(
        self,
        query: str,
        history: Optional[Sequence[Message]] = None,
        strategy: Optional[DelegationStrategy] = None,
    ) -> FinalAnswer:
        """Blocking wrapper around ``answer`` for callers without an event loop."""
        return asyncio.run(self.answer(query, history, strategy))

    def _update_stats(self, result: FinalAnswer, elapsed: float) -> None:
        self._stats.total_queries += 1
        self._stats.total_latency_ms += elapsed * 1000
        if result.path == SynthesisPath.EMPTY:
            self._stats.no_data_answers += 1
        if result.token_usage:
            self._stats.total_tokens += result.token_usage.total_tokens

        for answer in result.expert_answers:
            self._stats.expert_usage[answer.expert_name] = (
                self._stats.expert_usage.get(answer.expert_name, 0) + 1
            )

    def can_handle(self, query: str) -> bool:
        """True when any expert's keywords match the query."""
        return any(expert.can_handle(query) for expert in self._experts)

    def add_expert(self, expert: Expert) -> None:
        """Add an expert; an expert with an existing id is ignored."""
        if self.get_expert(expert.id) is None:
            self._experts.append(expert)

    def remove_expert(self, expert_id: str) -> None:
        self._experts = [e for e in self._experts if e.id != expert_id]

    def get_expert(self, expert_id: str) -> Optional[Expert]:
        for expert in self._experts:
            if expert.id == expert_id:
                return expert
        return None

    def experts_by_domain(self, domain: str) -> List[Expert]:
        return [e for e in self._experts if e.domain == domain]

    async def aclose(self) -> None:
        """Close every distinct oracle held by the lead and its experts."""
        oracles = {id(e.oracle): e.oracle for e in self._experts}
        if self.oracle is not None:
            oracles[id(self.oracle)] = self.oracle
        for oracle in oracles.values():
            await oracle.aclose()

    @classmethod
    def from_config(cls, config: "CouncilConfig", tools: Optional["ToolRegistry"] = None) -> "Lead":
        """
        Build a lead, its oracles and its experts from configuration.

        Raises:
            ConfigurationError: on unknown providers or tools, or no experts
        """
        from council.providers import create_oracle
        from council.tools import default_tools

        registry = tools or default_tools()
        oracles = {name: create_oracle(provider) for name, provider in config.providers.items()}

        lead_oracle = None
        if config.lead_provider:
            if config.lead_provider not in oracles:
                raise ConfigurationError(f"Unknown lead_provider: {config.lead_provider}")
            lead_oracle = oracles[config.lead_provider]

        experts = []
        for expert_config in config.load_experts():
            provider = config.provider_for(expert_config)
            if provider not in oracles:
                raise ConfigurationError(
                    f"Expert '{expert_config.name}' uses unknown provider", details=provider
                )
            try:
                expert_tools = registry.resolve(expert_config.tools)
            except ToolError as e:
                raise ConfigurationError(f"Expert '{expert_config.name}': {e}") from e
            experts.append(Expert(expert_config, oracles[provider], expert_tools))

        logger.info("Council '%s' ready with %d expert(s)", config.name, len(experts))
        return cls(experts, oracle=lead_oracle, config=config.lead)

    def __repr__(self) -> str:
        return f"Lead(experts={len(self._experts)}, strategy={self.config.strategy.value})"


# =============================================================================
# Factory functions for creating pre-configured councils
# =============================================================================

def create_demo_lead(strategy: DelegationStrategy = DelegationStrategy.PARALLEL) -> Lead:
    """
    Create an offline council with weather, math and general experts.

    Every expert runs on a scripted mock oracle and the lead has no oracle,
    so routing is keyword-based and multi-expert answers are concatenated.
    """
    from council.tools import CalculatorTool, EchoTool, WeatherTool

    weather = Expert(
        ExpertConfig(
            id="weather",
            name="Weather Expert",
            domain="weather",
            description="Current conditions and forecasts for any city.",
            keywords=["weather", "forecast", "temperature", "rain"],
            confidence=0.9,
            tools=["weather"],
        ),
        MockOracle(["Expect mild temperatures with a light breeze today."], name="mock-weather"),
        [WeatherTool()],
    )
    math = Expert(
        ExpertConfig(
            id="math",
            name="Math Expert",
            domain="mathematics",
            description="Arithmetic and numeric reasoning.",
            keywords=["calculate", "number", "math", "sum", "+", "*"],
            confidence=0.95,
            tools=["calculator"],
        ),
        MockOracle(["I evaluated the expression with my calculator."], name="mock-math"),
        [CalculatorTool()],
    )
    general = Expert(
        ExpertConfig(
            id="general",
            name="General Assistant",
            domain="general",
            description="Everyday questions that fit no other expert.",
            keywords=["hello", "help", "explain", "what"],
            confidence=0.6,
            tools=["echo"],
        ),
        MockOracle(["Happy to help with that."], name="mock-general"),
        [EchoTool()],
    )

    return Lead([weather, math, general], config=LeadConfig(strategy=strategy))
