"""
Expert - Specialized worker in the council.

Each expert binds a domain, a keyword set used for routing, a static
confidence prior, a private tool set and an oracle. Experts are built once
at configuration time and never mutated afterwards.
"""

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any, Sequence, Tuple
import logging
import re
import time

from council.core.errors import ConfigurationError
from council.core.messages import Message, OracleReply, TokenUsage, ToolCall
from council.core.oracle import Oracle
from council.core.tool import Tool, ToolResult

logger = logging.getLogger(__name__)

KEYWORD_WEIGHT = 0.7
CONFIDENCE_WEIGHT = 0.3


def _slugify(value: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")


@dataclass
class ExpertConfig:
    """Configuration for an expert."""

    # Identity
    name: str
    domain: str  # e.g., "weather", "math", "travel"
    description: str = ""
    id: str = ""  # Derived from name when empty

    # Routing
    keywords: List[str] = field(default_factory=list)
    confidence: float = 0.8  # Static prior reliability, 0.0 - 1.0

    # Capabilities
    tools: List[str] = field(default_factory=list)  # Tool names
    provider: Optional[str] = None  # Oracle profile name

    # Generation parameters
    system_prompt: Optional[str] = None
    temperature: float = 0.7
    max_tokens: Optional[int] = None
    max_tool_rounds: int = 5

    def __post_init__(self):
        if not self.id:
            self.id = _slugify(self.name)
        # YAML may hand over numbers (e.g. "- 42")
        keywords = (str(kw).strip().lower() for kw in self.keywords or [] if kw is not None)
        self.keywords = [kw for kw in keywords if kw]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExpertConfig":
        """Create from dictionary."""
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})

    @classmethod
    def from_yaml(cls, path: str) -> "ExpertConfig":
        """Load from YAML file."""
        import yaml
        with open(path) as f:
            return cls.from_dict(yaml.safe_load(f) or {})

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "domain": self.domain,
            "description": self.description,
            "keywords": list(self.keywords),
            "confidence": self.confidence,
            "tools": list(self.tools),
            "provider": self.provider,
            "system_prompt": self.system_prompt,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "max_tool_rounds": self.max_tool_rounds,
        }


@dataclass(frozen=True)
class ExpertRequest:
    """Immutable request handed to an expert."""

    query: str
    history: Tuple[Message, ...] = ()
    context: Dict[str, Any] = field(default_factory=dict)
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None

    def with_history(self, history: Sequence[Message]) -> "ExpertRequest":
        return ExpertRequest(
            query=self.query,
            history=tuple(history),
            context=self.context,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )


@dataclass(frozen=True)
class ExpertAnswer:
    """Answer produced by one expert invocation, successful or not."""

    expert_id: str
    expert_name: str
    domain: str
    content: str
    confidence: float  # Copied from the expert, never recomputed
    tool_results: Tuple[ToolResult, ...] = ()
    token_usage: Optional[TokenUsage] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "expert_id": self.expert_id,
            "expert_name": self.expert_name,
            "domain": self.domain,
            "content": self.content,
            "confidence": self.confidence,
            "tool_results": [r.to_dict() for r in self.tool_results],
            "token_usage": self.token_usage.to_dict() if self.token_usage else None,
            "metadata": dict(self.metadata),
        }


class Expert:
    """
    Specialized expert in the council.

    Each expert:
    1. Scores how relevant it is to a query (keyword overlap + confidence)
    2. Answers routed queries through its oracle
    3. Runs its own tool-calling loop when the oracle requests tools
    """

    def __init__(self, config: ExpertConfig, oracle: Oracle, tools: Sequence[Tool] = ()):
        if not config.keywords:
            raise ConfigurationError(f"Expert '{config.name}' needs at least one keyword")
        if not 0.0 <= config.confidence <= 1.0:
            raise ConfigurationError(
                f"Expert '{config.name}' confidence must be within [0, 1]",
                details=config.confidence,
            )
        if config.max_tool_rounds < 0:
            raise ConfigurationError(f"Expert '{config.name}' max_tool_rounds must be >= 0")

        self.config = config
        self.oracle = oracle
        self._keywords: Tuple[str, ...] = tuple(config.keywords)
        self._tools: Dict[str, Tool] = {tool.name: tool for tool in tools}

    @property
    def id(self) -> str:
        return self.config.id

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def domain(self) -> str:
        return self.config.domain

    @property
    def description(self) -> str:
        return self.config.description

    @property
    def keywords(self) -> Tuple[str, ...]:
        return self._keywords

    @property
    def confidence(self) -> float:
        return self.config.confidence

    @property
    def tools(self) -> List[Tool]:
        return list(self._tools.values())

    def _matched_keywords(self, query: str) -> int:
        query_lower = query.lower()
        return sum(1 for kw in self._keywords if kw in query_lower)

    def can_handle(self, query: str) -> bool:
        """True when any keyword occurs in the query."""
        return self._matched_keywords(query) > 0

    def relevance_score(self, query: str) -> float:
        """
        Score how well this expert matches a query.

        Zero when no keyword matches; otherwise the matched keyword fraction
        weighted 0.7 plus the confidence prior weighted 0.3.
        """
        matched = self._matched_keywords(query)
        if matched == 0:
            return 0.0
        return (matched / len(self._keywords)) * KEYWORD_WEIGHT + self.confidence * CONFIDENCE_WEIGHT

    @property
    def system_prompt(self) -> str:
        return self.config.system_prompt or self._default_system_prompt()

    def _default_system_prompt(self) -> str:
        """Generate default system prompt based on config."""
        tool_names = ", ".join(self._tools) if self._tools else "none"
        return f"""You are a specialized {self.domain} expert. {self.description}

Available tools: {tool_names}

Focus on providing specific, actionable answers within your domain of expertise.
If a question is outside your domain, acknowledge this and provide what help you can."""

    async def respond(self, request: ExpertRequest) -> ExpertAnswer:
        """
        Answer a request, running the tool loop as needed.

        Oracle failures propagate; the dispatcher decides whether they are
        contained.
        """
        start = time.time()
        temperature = request.temperature if request.temperature is not None else self.config.temperature
        max_tokens = request.max_tokens or self.config.max_tokens
        schemas = [tool.to_schema() for tool in self._tools.values()] or None

        reply = await self.oracle.chat(
            message=request.query,
            history=request.history,
            tools=schemas,
            temperature=temperature,
            max_tokens=max_tokens,
            system_prompt=self.system_prompt,
        )
        usages = [self.oracle.usage_for(reply)]

        messages: List[Message] = [*request.history, Message.user(request.query)]
        tool_results: List[ToolResult] = []
        rounds = 0

        while reply.tool_calls and rounds < self.config.max_tool_rounds:
            rounds += 1
            logger.debug("[%s] tool round %d: %d call(s)", self.name, rounds, len(reply.tool_calls))

            round_results = [await self._run_tool(call) for call in reply.tool_calls]
            tool_results.extend(round_results)

            messages.append(Message.assistant(reply.content, reply.tool_calls))
            for call, result in zip(reply.tool_calls, round_results):
                messages.append(Message.tool(result.as_message_content(), call.id, call.name))

            reply = await self.oracle.chat(
                message="Continue based on tool results",
                history=messages,
                tools=schemas,
                temperature=temperature,
                max_tokens=max_tokens,
                system_prompt=self.system_prompt,
            )
            usages.append(self.oracle.usage_for(reply))

        return self._to_answer(reply, tool_results, TokenUsage.combine(usages), rounds, start)

    async def _run_tool(self, call: ToolCall) -> ToolResult:
        tool = self._tools.get(call.name)
        if tool is None:
            return ToolResult.failure(call.name, f"Tool not found: {call.name}", tool_call_id=call.id)
        return await tool.run_call(call)

    def _to_answer(
        self,
        reply: OracleReply,
        tool_results: List[ToolResult],
        usage: TokenUsage,
        rounds: int,
        start: float,
    ) -> ExpertAnswer:
        return ExpertAnswer(
            expert_id=self.id,
            expert_name=self.name,
            domain=self.domain,
            content=reply.content,
            confidence=self.confidence,
            tool_results=tuple(tool_results),
            token_usage=usage,
            metadata={
                "domain": self.domain,
                "rounds": rounds,
                "model": reply.model,
                "provider": self.oracle.name,
                "latency_ms": (time.time() - start) * 1000,
            },
        )

    def failed_answer(self, error: BaseException) -> ExpertAnswer:
        """Zero-confidence answer standing in for a failed invocation."""
        return ExpertAnswer(
            expert_id=self.id,
            expert_name=self.name,
            domain=self.domain,
            content=f"Expert encountered an error: {error}",
            confidence=0.0,
            metadata={"error": str(error) or type(error).__name__},
        )

    def __repr__(self) -> str:
        return f"Expert(id='{self.id}', domain='{self.domain}', confidence={self.confidence})"
