"""
Finder modules for policy-finder.

- UpdatablePolicyFinderModule: runtime-updatable in-memory store
- PolicyFinder: routes lookups across modules by capability
"""

from policy_finder.finder.base import FinderCapabilities, PolicyFinderModule
from policy_finder.finder.router import PolicyFinder
from policy_finder.finder.updatable import UpdatablePolicyFinderModule

__all__ = [
    "FinderCapabilities",
    "PolicyFinder",
    "PolicyFinderModule",
    "UpdatablePolicyFinderModule",
]
