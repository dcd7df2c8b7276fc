"""
Router - Selects which experts answer a query.

Selection is pure keyword scoring for every strategy except ``intelligent``,
which asks an oracle to name the experts and falls back to keyword scoring
whenever the oracle is missing, fails, or names nobody in the pool.
"""

from dataclasses import dataclass
from typing import List, Dict, Optional, Any, Sequence, Tuple
import logging
import re

from council.core.errors import ConfigurationError, RoutingError
from council.core.oracle import Oracle
from council.swarm.expert import Expert
from council.swarm.strategy import DelegationStrategy

logger = logging.getLogger(__name__)

_LIST_MARKER = re.compile(r"^\s*(?:[-*•]|\d+[.)])\s*")


@dataclass
class RouterConfig:
    """Configuration for the router's oracle call."""

    temperature: float = 0.3  # Low temperature for consistent routing
    max_tokens: int = 200

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RouterConfig":
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})


class Router:
    """
    Routes queries to appropriate experts.

    The router is responsible for:
    1. Scoring every expert against the query
    2. Selecting an ordered subset according to the delegation strategy
    3. Delegating the choice to an oracle for the intelligent strategy
    """

    def __init__(self, config: Optional[RouterConfig] = None):
        self.config = config or RouterConfig()

    async def select(
        self,
        query: str,
        experts: Sequence[Expert],
        strategy: DelegationStrategy,
        max_participants: int = 3,
        oracle: Optional[Oracle] = None,
    ) -> List[Expert]:
        """
        Select experts to handle a query.

        Args:
            query: The user's query
            experts: The expert pool, in insertion order
            strategy: Delegation strategy in force
            max_participants: Cap on selected experts
            oracle: Backend for intelligent selection

        Returns:
            Non-empty ordered list of experts

        Raises:
            RoutingError: when the pool is empty or nobody qualifies
        """
        if not experts:
            raise RoutingError("no experts available")
        if max_participants < 1:
            raise ConfigurationError("max_participants must be >= 1", details=max_participants)

        logger.debug("Routing query with %s strategy", strategy.value)

        if strategy == DelegationStrategy.SINGLE:
            selected = [self._best_expert(query, experts)]
        elif strategy == DelegationStrategy.INTELLIGENT:
            selected = await self._intelligent_selection(query, experts, max_participants, oracle)
        else:  # PARALLEL, SEQUENTIAL
            selected = self._keyword_selection(query, experts, max_participants)

        if not selected:
            raise RoutingError("no suitable experts found", details=query)

        logger.info("Selected %d expert(s): %s", len(selected), ", ".join(e.name for e in selected))
        return selected

    def _best_expert(self, query: str, experts: Sequence[Expert]) -> Expert:
        """Highest score wins; only a strictly greater score displaces the leader."""
        best = experts[0]
        best_score = best.relevance_score(query)
        for expert in experts[1:]:
            score = expert.relevance_score(query)
            if score > best_score:
                best, best_score = expert, score
        return best

    def _keyword_selection(
        self, query: str, experts: Sequence[Expert], max_participants: int
    ) -> List[Expert]:
        """Top experts by score, zero scores dropped, pool order kept on ties."""
        scored = self.rank(query, experts)
        return [expert for expert, score in scored if score > 0.0][:max_participants]

    async def _intelligent_selection(
        self,
        query: str,
        experts: Sequence[Expert],
        max_participants: int,
        oracle: Optional[Oracle],
    ) -> List[Expert]:
        if oracle is None:
            logger.warning("No oracle for intelligent routing, falling back to parallel selection")
            return self._keyword_selection(query, experts, max_participants)

        selected = await self._try_oracle_selection(query, experts, max_participants, oracle)
        return selected or self._keyword_selection(query, experts, max_participants)

    async def _try_oracle_selection(
        self,
        query: str,
        experts: Sequence[Expert],
        max_participants: int,
        oracle: Oracle,
    ) -> Optional[List[Expert]]:
        """Ask the oracle for expert names. Returns None on failure or no match."""
        prompt = self._selection_prompt(query, experts, max_participants)

        try:
            reply = await oracle.chat(
                message=prompt,
                temperature=self.config.temperature,
                max_tokens=self.config.max_tokens,
            )
        except Exception as e:
            logger.warning("Oracle routing error: %s, falling back to keyword matching", e)
            return None

        selected = self._match_names(reply.content, experts)[:max_participants]
        if not selected:
            logger.warning("Oracle named no known expert, falling back to keyword matching")
            return None
        return selected

    def _selection_prompt(self, query: str, experts: Sequence[Expert], max_participants: int) -> str:
        listing = "\n".join(f"- {e.name} ({e.domain}): {e.description}" for e in experts)
        return f"""Given the following query and available experts, select which expert(s)
should handle this query. You can select 1-{max_participants} experts.

Query: "{query}"

Available Experts:
{listing}

Respond with ONLY the names of the expert(s) that should handle it, one per line.
Consider domain relevance, required expertise, and whether multiple experts are needed.

Response format (just the names):
Expert Name 1
Expert Name 2"""

    @staticmethod
    def _match_names(text: str, experts: Sequence[Expert]) -> List[Expert]:
        """Match oracle lines against expert names, case-insensitively, in oracle order."""
        by_name = {}
        for expert in experts:
            by_name.setdefault(expert.name.lower(), expert)

        matched: List[Expert] = []
        for line in text.splitlines():
            name = _LIST_MARKER.sub("", line).strip().strip("\"'`*").strip().lower()
            expert = by_name.get(name)
            if expert is not None and expert not in matched:
                matched.append(expert)
        return matched

    @staticmethod
    def rank(query: str, experts: Sequence[Expert]) -> List[Tuple[Expert, float]]:
        """All experts with their scores, best first. The sort is stable."""
        scored = [(expert, expert.relevance_score(query)) for expert in experts]
        return sorted(scored, key=lambda pair: pair[1], reverse=True)

    def explain(self, query: str, experts: Sequence[Expert]) -> str:
        """Generate human-readable ranking of experts for a query."""
        lines = [f"Query: {query[:100]}"]
        for expert, score in self.rank(query, experts):
            lines.append(f"  - {expert.name} ({expert.domain}): {score:.2f}")
        return "\n".join(lines)
