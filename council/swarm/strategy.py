"""
Delegation strategies - how the lead hands a query to its experts.
"""

from dataclasses import dataclass
from typing import Dict
from enum import Enum


class DelegationStrategy(str, Enum):
    """Policy for how many experts are selected and how they are invoked."""
    SINGLE = "single"  # Best-matching expert only
    PARALLEL = "parallel"  # Top experts, invoked concurrently
    SEQUENTIAL = "sequential"  # Top experts, each sees the previous answers
    INTELLIGENT = "intelligent"  # Oracle picks the experts, invoked concurrently

    @property
    def description(self) -> str:
        return _TRAITS[self].description

    @property
    def uses_multiple_experts(self) -> bool:
        return _TRAITS[self].uses_multiple_experts

    @property
    def requires_oracle(self) -> bool:
        return _TRAITS[self].requires_oracle


@dataclass(frozen=True)
class StrategyTraits:
    description: str
    uses_multiple_experts: bool
    requires_oracle: bool


_TRAITS: Dict[DelegationStrategy, StrategyTraits] = {
    DelegationStrategy.SINGLE: StrategyTraits("Delegate to the single best expert", False, False),
    DelegationStrategy.PARALLEL: StrategyTraits("Query multiple experts in parallel", True, False),
    DelegationStrategy.SEQUENTIAL: StrategyTraits("Query experts one after another", True, False),
    DelegationStrategy.INTELLIGENT: StrategyTraits("Let the oracle decide which experts respond", True, True),
}
