"""
Combining strategies for policy-finder.

When several top-level policies apply to the same context, the finder
wraps them in a synthetic policy set governed by a combining strategy.
The strategy decides how the children's decisions are reduced at
evaluation time; the finder only builds the set.

Strategies are looked up by name so configuration can refer to them:

    >>> strategy = get_combining_strategy("deny-overrides")
    >>> combined = strategy.combine([policy_a, policy_b])
    >>> combined.combining_algorithm
    'urn:oasis:names:tc:xacml:3.0:policy-combining-algorithm:deny-overrides'
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from policy_finder.exceptions import ConfigurationError
from policy_finder.policies.base import PolicyObject, PolicySet

logger = logging.getLogger(__name__)

DENY_OVERRIDES_ID = "urn:oasis:names:tc:xacml:3.0:policy-combining-algorithm:deny-overrides"

# Identifier given to policy sets synthesized from several matches.
SYNTHETIC_POLICY_SET_ID = "urn:policy-finder:synthetic-policy-set"


@runtime_checkable
class CombiningStrategy(Protocol):
    """
    Protocol for strategies that reduce several matched policies to one.

    Example:
        >>> class FirstApplicableStrategy:
        ...     algorithm_id = "urn:example:first-applicable"
        ...
        ...     def combine(self, children):
        ...         return PolicySet(SYNTHETIC_POLICY_SET_ID, self.algorithm_id, children)
    """

    algorithm_id: str

    def combine(self, children: Sequence[PolicyObject]) -> PolicyObject:
        """Wrap the children in a single evaluable unit, preserving their order."""
        ...


class DenyOverridesStrategy:
    """
    Default strategy: a deny from any child overrides every permit.

    The children keep the order they are given in, which the finder
    makes deterministic by sorting on identifier.
    """

    algorithm_id = DENY_OVERRIDES_ID

    def combine(self, children: Sequence[PolicyObject]) -> PolicySet:
        return PolicySet(
            SYNTHETIC_POLICY_SET_ID,
            combining_algorithm=self.algorithm_id,
            children=children,
        )

    def __eq__(self, other: object) -> bool:
        return isinstance(other, DenyOverridesStrategy)

    def __hash__(self) -> int:
        return hash(self.algorithm_id)

    def __repr__(self) -> str:
        return "DenyOverridesStrategy()"


_strategies: dict[str, type] = {
    "deny-overrides": DenyOverridesStrategy,
    DENY_OVERRIDES_ID: DenyOverridesStrategy,
}
_strategies_lock = threading.Lock()


def register_combining_strategy(name: str, strategy_class: type) -> None:
    """
    Register a strategy class under a configuration name.

    Args:
        name: Short name or algorithm URN used in configuration.
        strategy_class: Zero-argument callable producing a CombiningStrategy.
    """
    with _strategies_lock:
        if name in _strategies:
            logger.warning(
                f"Overwriting combining strategy '{name}': "
                f"{_strategies[name].__name__} -> {strategy_class.__name__}"
            )
        _strategies[name] = strategy_class
        logger.debug(f"Registered combining strategy '{name}'")


def get_combining_strategy(name: str) -> CombiningStrategy:
    """
    Create the strategy registered under ``name``.

    Raises:
        ConfigurationError: If no strategy is registered under that name.
    """
    with _strategies_lock:
        strategy_class = _strategies.get(name)
        available = sorted(_strategies)

    if strategy_class is None:
        raise ConfigurationError(
            config_key="combining_algorithm",
            expected=f"one of: {', '.join(available)}",
            received=name,
        )
    return strategy_class()


def available_combining_strategies() -> list[str]:
    """List registered strategy names."""
    with _strategies_lock:
        return sorted(_strategies)
