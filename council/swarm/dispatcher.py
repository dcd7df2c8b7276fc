"""
Dispatcher - Executes selected experts according to the delegation strategy.

Per-expert failures are contained and converted into zero-confidence
answers, except under the single strategy where there is nothing to fall
back to and the error propagates.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence
import asyncio
import logging

from council.core.errors import InvocationError
from council.core.messages import Message
from council.swarm.expert import Expert, ExpertAnswer, ExpertRequest
from council.swarm.strategy import DelegationStrategy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DispatchOutcome:
    """Result of one expert invocation: an answer or an error, never both."""

    expert: Expert
    answer: Optional[ExpertAnswer] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.answer is not None

    def to_answer(self) -> ExpertAnswer:
        """The answer, or a zero-confidence stand-in carrying the error text."""
        if self.ok:
            return self.answer
        return self.expert.failed_answer(self.error)


class Dispatcher:
    """
    Runs experts for a query.

    Strategies:
        single      - one expert, errors propagate
        parallel    - fan-out / fan-in, failures contained
        sequential  - strict order, each expert sees earlier answers
        intelligent - same execution as parallel
    """

    def __init__(self, timeout_seconds: Optional[float] = 60.0):
        self.timeout_seconds = timeout_seconds

    async def run(
        self,
        experts: Sequence[Expert],
        request: ExpertRequest,
        strategy: DelegationStrategy,
    ) -> List[ExpertAnswer]:
        if strategy == DelegationStrategy.SINGLE:
            return await self._run_single(experts, request)
        if strategy == DelegationStrategy.SEQUENTIAL:
            return await self._run_sequential(experts, request)
        # PARALLEL and INTELLIGENT: the intelligence is in the selection only
        return await self._run_parallel(experts, request)

    async def invoke(self, expert: Expert, request: ExpertRequest) -> DispatchOutcome:
        """Invoke one expert within the timeout, capturing any failure."""
        try:
            answer = await self._respond(expert, request)
        except Exception as e:
            logger.warning("Expert %s failed: %s", expert.name, e)
            return DispatchOutcome(expert=expert, error=e)
        return DispatchOutcome(expert=expert, answer=answer)

    async def _respond(self, expert: Expert, request: ExpertRequest) -> ExpertAnswer:
        try:
            if self.timeout_seconds is None:
                return await expert.respond(request)
            return await asyncio.wait_for(expert.respond(request), timeout=self.timeout_seconds)
        except asyncio.TimeoutError as e:
            raise InvocationError(
                f"Expert timed out after {self.timeout_seconds}s",
                expert_id=expert.id,
                query=request.query,
            ) from e

    async def _run_single(self, experts: Sequence[Expert], request: ExpertRequest) -> List[ExpertAnswer]:
        expert = experts[0]
        logger.info("Executing single expert: %s", expert.name)

        outcome = await self.invoke(expert, request)
        if not outcome.ok:
            if isinstance(outcome.error, InvocationError):
                raise outcome.error
            raise InvocationError(
                f"Expert {expert.name} failed: {outcome.error}",
                expert_id=expert.id,
                query=request.query,
                details=outcome.error,
            ) from outcome.error
        return [outcome.answer]

    async def _run_parallel(self, experts: Sequence[Expert], request: ExpertRequest) -> List[ExpertAnswer]:
        logger.info("Executing %d expert(s) in parallel", len(experts))

        outcomes = await asyncio.gather(*(self.invoke(expert, request) for expert in experts))
        return self.merge(outcomes)

    async def _run_sequential(self, experts: Sequence[Expert], request: ExpertRequest) -> List[ExpertAnswer]:
        logger.info("Executing %d expert(s) sequentially", len(experts))

        context: List[Message] = list(request.history)
        outcomes: List[DispatchOutcome] = []

        for expert in experts:
            logger.debug("Querying %s", expert.name)
            outcome = await self.invoke(expert, request.with_history(context))
            outcomes.append(outcome)

            if outcome.ok:
                context.append(Message.assistant(outcome.answer.content))

        # Every answer a later expert saw stays attributed, whatever its confidence
        return [outcome.answer for outcome in outcomes if outcome.ok]

    @staticmethod
    def merge(outcomes: Sequence[DispatchOutcome]) -> List[ExpertAnswer]:
        """Keep successful answers with positive confidence, in selection order."""
        answers = [outcome.to_answer() for outcome in outcomes]
        return [answer for answer in answers if answer.confidence > 0.0]
