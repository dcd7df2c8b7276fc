"""
Synthesizer - Combines expert answers into one final answer.

Path selection:
    no answers                -> EMPTY         (zero-confidence "no data")
    one answer                -> PASSTHROUGH   (no oracle call)
    many answers + oracle     -> COMPOSED      (CONCATENATED if the oracle fails)
    many answers, no oracle   -> CONCATENATED
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional, Any, Sequence
from enum import Enum
import logging

from council.core.errors import SynthesisError
from council.core.messages import OracleReply, TokenUsage
from council.core.oracle import Oracle
from council.core.tool import ToolResult
from council.swarm.expert import ExpertAnswer

logger = logging.getLogger(__name__)

NO_DATA_MESSAGE = "No expert responses available."


class SynthesisPath(str, Enum):
    """How the final answer was produced."""
    EMPTY = "empty"
    PASSTHROUGH = "passthrough"
    COMPOSED = "composed"  # Oracle-assisted composition
    CONCATENATED = "concatenated"  # Deterministic labeled concatenation


@dataclass
class SynthesizerConfig:
    """Configuration for the synthesizer."""

    use_oracle: bool = True  # Compose with the lead oracle when available
    temperature: float = 0.7
    max_tokens: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SynthesizerConfig":
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})


@dataclass
class FinalAnswer:
    """Final answer returned to the caller."""

    content: str
    confidence: float
    synthesized: bool  # False iff at most one expert contributed
    path: SynthesisPath
    tool_results: List[ToolResult] = field(default_factory=list)
    token_usage: Optional[TokenUsage] = None

    # Contributing answers, for attribution and auditing
    expert_answers: List[ExpertAnswer] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def experts(self) -> List[str]:
        return [a.expert_name for a in self.expert_answers]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "content": self.content,
            "confidence": self.confidence,
            "synthesized": self.synthesized,
            "path": self.path.value,
            "tool_results": [r.to_dict() for r in self.tool_results],
            "token_usage": self.token_usage.to_dict() if self.token_usage else None,
            "experts": self.experts,
            "expert_answers": [a.to_dict() for a in self.expert_answers],
            "metadata": self.metadata,
        }


class Synthesizer:
    """
    Merges expert answers into a single, attributable final answer.

    Oracle composition is attempted at most once per call; any failure
    degrades to deterministic concatenation and is never surfaced.
    """

    def __init__(self, config: Optional[SynthesizerConfig] = None):
        self.config = config or SynthesizerConfig()

    async def merge(
        self,
        query: str,
        answers: Sequence[ExpertAnswer],
        oracle: Optional[Oracle] = None,
    ) -> FinalAnswer:
        """
        Synthesize expert answers into a final answer.

        Args:
            query: Original user query
            answers: Contributing answers, in selection order
            oracle: Backend for composition; None forces concatenation
        """
        if not answers:
            return FinalAnswer(
                content=NO_DATA_MESSAGE,
                confidence=0.0,
                synthesized=False,
                path=SynthesisPath.EMPTY,
            )

        if len(answers) == 1:
            return self._passthrough(answers[0])

        logger.info("Synthesizing %d expert answers", len(answers))

        composed = None
        if oracle is not None and self.config.use_oracle:
            composed = await self._try_compose(query, answers, oracle)
        return composed or self._concatenate(answers)

    def _passthrough(self, answer: ExpertAnswer) -> FinalAnswer:
        return FinalAnswer(
            content=answer.content,
            confidence=answer.confidence,
            synthesized=False,
            path=SynthesisPath.PASSTHROUGH,
            tool_results=list(answer.tool_results),
            token_usage=answer.token_usage,
            expert_answers=[answer],
            metadata={"single_expert": answer.expert_name},
        )

    async def _try_compose(
        self, query: str, answers: Sequence[ExpertAnswer], oracle: Oracle
    ) -> Optional[FinalAnswer]:
        """Oracle-assisted composition. Returns None when the oracle fails."""
        try:
            reply = await self._compose_reply(query, answers, oracle)
        except SynthesisError as e:
            logger.warning("%s, falling back to concatenation", e)
            return None

        usage = TokenUsage.combine([a.token_usage for a in answers] + [oracle.usage_for(reply)])

        return FinalAnswer(
            content=reply.content,
            confidence=_mean_confidence(answers),
            synthesized=True,
            path=SynthesisPath.COMPOSED,
            tool_results=_flatten_tool_results(answers),
            token_usage=usage,
            expert_answers=list(answers),
            metadata={
                "num_experts": len(answers),
                "synthesis_model": reply.model,
                "expert_domains": [a.domain for a in answers],
            },
        )

    async def _compose_reply(
        self, query: str, answers: Sequence[ExpertAnswer], oracle: Oracle
    ) -> OracleReply:
        try:
            return await oracle.chat(
                message=self._composition_prompt(query, answers),
                temperature=self.config.temperature,
                max_tokens=self.config.max_tokens,
            )
        except Exception as e:
            raise SynthesisError("Oracle synthesis failed", details=e) from e

    def _composition_prompt(self, query: str, answers: Sequence[ExpertAnswer]) -> str:
        summaries = []
        for index, answer in enumerate(answers, start=1):
            block = (
                f"Expert {index}: {answer.expert_name} ({answer.domain})\n"
                f"Confidence: {answer.confidence * 100:.0f}%\n"
                f"Response: {answer.content}"
            )
            if answer.tool_results:
                block += "\nTools used: " + ", ".join(r.tool_name for r in answer.tool_results)
            summaries.append(block)

        expert_text = "\n---\n".join(summaries)

        return f"""You are synthesizing responses from multiple expert agents into a single, coherent answer.

Original Query: "{query}"

Expert Responses:
{expert_text}

---

Your task: Create a unified, comprehensive response that:
1. Combines insights from all experts
2. Resolves any conflicts or contradictions in favor of higher-confidence experts
3. Provides a complete answer to the original query
4. Credits experts where attribution is useful

Synthesized Response:"""

    def _concatenate(self, answers: Sequence[ExpertAnswer]) -> FinalAnswer:
        """Labeled blocks in selection order."""
        blocks = [f"{a.expert_name} ({a.domain}): {a.content}" for a in answers]
        content = "\n\n".join(blocks)
        if len(answers) > 1:
            content = f"I consulted {len(answers)} experts to answer your query:\n\n{content}"

        return FinalAnswer(
            content=content,
            confidence=_mean_confidence(answers),
            synthesized=True,
            path=SynthesisPath.CONCATENATED,
            tool_results=_flatten_tool_results(answers),
            token_usage=TokenUsage.combine(a.token_usage for a in answers),
            expert_answers=list(answers),
            metadata={
                "num_experts": len(answers),
                "expert_domains": [a.domain for a in answers],
            },
        )


def _mean_confidence(answers: Sequence[ExpertAnswer]) -> float:
    return sum(a.confidence for a in answers) / len(answers)


def _flatten_tool_results(answers: Sequence[ExpertAnswer]) -> List[ToolResult]:
    return [result for answer in answers for result in answer.tool_results]
