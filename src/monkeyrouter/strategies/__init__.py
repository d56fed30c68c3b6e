"""
Response strategy selection.

A response strategy is a generation-shape hint (chain_of_thought,
code_generation, ...) attached to every routing decision. It drives the
expected response length used by the token estimator.
"""

from monkeyrouter.strategies.response import (
    STRATEGY_MAP,
    TOKEN_MULTIPLIERS,
    ResponseStrategySelector,
)

__all__ = [
    "ResponseStrategySelector",
    "STRATEGY_MAP",
    "TOKEN_MULTIPLIERS",
]
