"""
Finder module base classes for policy-finder.

A finder module answers two kinds of question for an evaluation engine:
"which policy applies to this context?" and "which policy does this
reference name?". Modules advertise which of the two they support, and
a PolicyFinder routes requests accordingly.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from policy_finder.types import ResolutionResult

if TYPE_CHECKING:
    from policy_finder.finder.router import PolicyFinder
    from policy_finder.types import (
        EvaluationContext,
        PolicyIdentifier,
        PolicyKind,
        PolicyMetadata,
        VersionConstraints,
    )


@dataclass(frozen=True)
class FinderCapabilities:
    """
    Describes what a finder module can do.

    Attributes:
        supports_context_resolution: Whether find_policy(context) is served.
        supports_reference_resolution: Whether reference lookups are served.
        supports_hot_reload: Whether stored policies can change at runtime.
    """

    supports_context_resolution: bool = False
    supports_reference_resolution: bool = False
    supports_hot_reload: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "supports_context_resolution": self.supports_context_resolution,
            "supports_reference_resolution": self.supports_reference_resolution,
            "supports_hot_reload": self.supports_hot_reload,
        }


class PolicyFinderModule(ABC):
    """
    Abstract base class for finder modules.

    Subclasses implement the lookups they advertise in ``capabilities``.
    The default lookups return NO_MATCH, so a module only has to
    override what it supports.

    Attributes:
        name: Human-readable name for the module.
    """

    name: str = "base"

    def __init__(self) -> None:
        self._finder: PolicyFinder | None = None

    def init(self, finder: PolicyFinder) -> None:
        """
        Called once by the owning PolicyFinder before any lookup.

        Args:
            finder: The router this module is registered with.
        """
        self._finder = finder

    @property
    def finder(self) -> PolicyFinder | None:
        """The owning router, if the module has been initialized."""
        return self._finder

    @property
    @abstractmethod
    def capabilities(self) -> FinderCapabilities:
        """What this module supports."""

    def supports_context_resolution(self) -> bool:
        return self.capabilities.supports_context_resolution

    def supports_reference_resolution(self) -> bool:
        return self.capabilities.supports_reference_resolution

    def find_policy(self, context: EvaluationContext) -> ResolutionResult:
        """
        Find the policy applicable to a request context.

        Args:
            context: The request attributes.

        Returns:
            ResolutionResult with NO_MATCH, a policy, or an error.
        """
        return ResolutionResult.no_match()

    def find_policy_by_reference(
        self,
        policy_id: PolicyIdentifier,
        kind: PolicyKind,
        constraints: VersionConstraints | None = None,
        parent_metadata: PolicyMetadata | None = None,
    ) -> ResolutionResult:
        """
        Resolve a policy or policy-set reference.

        Args:
            policy_id: The referenced identifier.
            kind: Whether a policy or a policy set is expected.
            constraints: Version constraints carried by the reference.
            parent_metadata: Metadata of the referencing policy set.

        Returns:
            ResolutionResult with the policy or an error.
        """
        return ResolutionResult.no_match()
