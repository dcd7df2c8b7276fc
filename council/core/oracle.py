"""
Oracle - the remote reasoning backend boundary.

Experts, the router's intelligent path and the synthesizer all talk to an
oracle through this interface. Concrete HTTP backends live in
``council.providers``.
"""

from abc import ABC, abstractmethod
from typing import Optional, List, Dict, Any, Sequence, Union
import asyncio

from council.core.messages import Message, OracleReply, ToolSchema, TokenUsage


class Oracle(ABC):
    """Abstract reasoning backend."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name, e.g. ``openai`` or ``claude``."""

    @property
    def default_model(self) -> Optional[str]:
        return None

    @property
    def supports_tools(self) -> bool:
        return False

    @abstractmethod
    async def chat(
        self,
        message: str,
        history: Optional[Sequence[Message]] = None,
        tools: Optional[Sequence[ToolSchema]] = None,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        system_prompt: Optional[str] = None,
    ) -> OracleReply:
        """
        Send one message and return the oracle's reply.

        Raises:
            ProviderError: on any backend failure
        """

    def calculate_cost(self, input_tokens: int, output_tokens: int) -> float:
        """Cost in USD for a call. Backends without pricing return 0.0."""
        return 0.0

    def usage_for(self, reply: OracleReply) -> TokenUsage:
        """Token usage of a reply, priced by this oracle."""
        return TokenUsage(
            input_tokens=reply.input_tokens,
            output_tokens=reply.output_tokens,
            cost=self.calculate_cost(reply.input_tokens, reply.output_tokens),
        )

    async def aclose(self) -> None:
        """Release any held connections."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name='{self.name}')"


ScriptedReply = Union[str, OracleReply, BaseException]


class MockOracle(Oracle):
    """
    Scripted oracle for tests, demos and offline use.

    Replies are served from ``responses`` in order, cycling when exhausted.
    An entry may be a string, a full ``OracleReply``, or an exception
    instance which is raised instead of replying.
    """

    def __init__(
        self,
        responses: Optional[List[ScriptedReply]] = None,
        name: str = "mock",
        model: str = "mock-model",
        delay: float = 0.0,
    ):
        self._name = name
        self._model = model
        self._responses: List[ScriptedReply] = list(responses or ["Mock response"])
        self._index = 0
        self.delay = delay
        self.calls: List[Dict[str, Any]] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def default_model(self) -> Optional[str]:
        return self._model

    @property
    def supports_tools(self) -> bool:
        return True

    async def chat(
        self,
        message: str,
        history: Optional[Sequence[Message]] = None,
        tools: Optional[Sequence[ToolSchema]] = None,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        system_prompt: Optional[str] = None,
    ) -> OracleReply:
        self.calls.append({
            "message": message,
            "history": list(history or []),
            "tools": list(tools or []),
            "temperature": temperature,
            "max_tokens": max_tokens,
            "system_prompt": system_prompt,
        })

        if self.delay:
            await asyncio.sleep(self.delay)

        scripted = self._responses[self._index % len(self._responses)]
        self._index += 1

        if isinstance(scripted, BaseException):
            raise scripted
        if isinstance(scripted, OracleReply):
            return scripted

        return OracleReply(
            content=scripted,
            input_tokens=len(message) // 4,
            output_tokens=len(scripted) // 4,
            model=self._model,
        )
