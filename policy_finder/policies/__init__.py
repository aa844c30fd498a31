"""
Policy objects, combining strategies and the mutable policy store.
"""

from policy_finder.policies.base import (
    AbstractPolicy,
    AttributeTarget,
    PolicyObject,
    PolicySet,
    TargetPolicy,
)
from policy_finder.policies.combining import (
    DENY_OVERRIDES_ID,
    SYNTHETIC_POLICY_SET_ID,
    CombiningStrategy,
    DenyOverridesStrategy,
    available_combining_strategies,
    get_combining_strategy,
    register_combining_strategy,
)
from policy_finder.policies.store import PolicyStore, StoreSnapshot

__all__ = [
    "AbstractPolicy",
    "AttributeTarget",
    "CombiningStrategy",
    "DENY_OVERRIDES_ID",
    "DenyOverridesStrategy",
    "PolicyObject",
    "PolicySet",
    "PolicyStore",
    "StoreSnapshot",
    "SYNTHETIC_POLICY_SET_ID",
    "TargetPolicy",
    "available_combining_strategies",
    "get_combining_strategy",
    "register_combining_strategy",
]
