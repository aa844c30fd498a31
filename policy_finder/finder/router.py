"""
Policy finder router.

A PolicyFinder owns a list of finder modules and routes each request to
the modules that advertise support for it. Capabilities are read once,
when the modules are registered.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable

from policy_finder.finder.base import PolicyFinderModule
from policy_finder.types import (
    EvaluationContext,
    PolicyIdentifier,
    PolicyKind,
    PolicyMetadata,
    ResolutionErrorKind,
    ResolutionResult,
    Status,
    VersionConstraints,
)

logger = logging.getLogger(__name__)


class PolicyFinder:
    """
    Routes lookups across several finder modules.

    Context lookups go to every module that supports them. The first
    module error is returned as is; a policy found by more than one
    module is an AMBIGUOUS_SELECTION error. Reference lookups go to the
    reference-capable modules in registration order, and the first one
    that resolves the reference wins.

    Example:
        >>> updatable = UpdatablePolicyFinderModule()
        >>> finder = PolicyFinder([updatable])
        >>> updatable.finder is finder
        True
        >>> finder.find_policy({"action": "read"}).is_no_match
        True
    """

    def __init__(self, modules: Iterable[PolicyFinderModule] = ()) -> None:
        self._lock = threading.RLock()
        self._context_modules: list[PolicyFinderModule] = []
        self._reference_modules: list[PolicyFinderModule] = []
        self._modules: list[PolicyFinderModule] = []
        for module in modules:
            self.add_module(module)

    def add_module(self, module: PolicyFinderModule) -> None:
        """
        Register a module, initialize it and record its capabilities.

        Args:
            module: The finder module to add.
        """
        module.init(self)
        with self._lock:
            self._modules.append(module)
            if module.supports_context_resolution():
                self._context_modules.append(module)
            if module.supports_reference_resolution():
                self._reference_modules.append(module)
        logger.debug(
            f"Registered finder module '{module.name}': {module.capabilities.to_dict()}"
        )

    @property
    def modules(self) -> list[PolicyFinderModule]:
        with self._lock:
            return list(self._modules)

    def find_policy(self, context: EvaluationContext) -> ResolutionResult:
        """
        Find the single policy applicable to a context across all modules.

        Returns:
            The applicable policy, NO_MATCH, or an error.
        """
        with self._lock:
            modules = list(self._context_modules)

        found: ResolutionResult | None = None
        for module in modules:
            result = module.find_policy(context)
            if result.is_error:
                return result
            if not result.has_policy:
                continue
            if found is not None:
                logger.debug(f"More than one finder module returned a policy for {context!r}")
                return ResolutionResult.error(
                    ResolutionErrorKind.AMBIGUOUS_SELECTION,
                    Status.processing_error("too many applicable top-level policies"),
                )
            found = result

        return found or ResolutionResult.no_match()

    def find_policy_by_reference(
        self,
        policy_id: PolicyIdentifier,
        kind: PolicyKind,
        constraints: VersionConstraints | None = None,
        parent_metadata: PolicyMetadata | None = None,
    ) -> ResolutionResult:
        """
        Resolve a reference using the first module that can.

        Returns:
            The referenced policy, or UNRESOLVABLE_REFERENCE if no module
            resolved it.
        """
        with self._lock:
            modules = list(self._reference_modules)

        for module in modules:
            result = module.find_policy_by_reference(policy_id, kind, constraints, parent_metadata)
            if result.has_policy:
                return result

        return ResolutionResult.error(
            ResolutionErrorKind.UNRESOLVABLE_REFERENCE,
            Status.processing_error(f"couldn't load referenced policy '{policy_id}'"),
        )
