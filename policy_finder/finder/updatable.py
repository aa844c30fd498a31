"""
Runtime-updatable policy finder module.

UpdatablePolicyFinderModule keeps its policies in an in-memory PolicyStore
that administrators can change while evaluations are running: documents
are parsed and added in batches, and policies are deleted or replaced by
identifier without restarting the process.

Context-based lookups work on a snapshot of the store taken when the
call starts, so a concurrent load or delete never changes what a lookup
in progress sees.

Example:
    >>> finder = UpdatablePolicyFinderModule()
    >>> finder.load_batch([
    ...     {"type": "Policy", "id": "urn:example:read", "target": {"action": ["read"]}},
    ...     {"type": "Policy", "id": "urn:example:any"},
    ... ])
    ['urn:example:read', 'urn:example:any']
    >>> result = finder.find_policy({"action": "read"})
    >>> result.outcome
    <ResolutionOutcome.COMBINED_POLICY: 'combined_policy'>
    >>> result.policy.child_ids
    ['urn:example:any', 'urn:example:read']
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from typing import Any

from policy_finder.config import ErrorOnAmbiguity, FinderConfig
from policy_finder.exceptions import PolicyParseError
from policy_finder.finder.base import FinderCapabilities, PolicyFinderModule
from policy_finder.observability.hooks import (
    METRIC_FIND_COMBINED,
    METRIC_FIND_ERRORS,
    METRIC_FIND_LATENCY,
    METRIC_FIND_NO_MATCH,
    METRIC_FIND_REQUESTS,
    METRIC_FIND_SINGLE,
    METRIC_LOAD_FAILED,
    METRIC_LOAD_PARSED,
    METRIC_REFERENCE_REQUESTS,
    METRIC_REFERENCE_UNRESOLVED,
    METRIC_STORE_DELETES,
    METRIC_STORE_SIZE,
    ObservabilityHooks,
)
from policy_finder.parsing import DocumentPolicyParser, PolicyParser
from policy_finder.policies.base import PolicyObject
from policy_finder.policies.store import PolicyStore
from policy_finder.types import (
    EvaluationContext,
    MatchResult,
    PolicyIdentifier,
    PolicyKind,
    PolicyMetadata,
    ResolutionErrorKind,
    ResolutionOutcome,
    ResolutionResult,
    Status,
    VersionConstraints,
)

logger = logging.getLogger(__name__)

TOO_MANY_POLICIES_MESSAGE = "too many applicable top-level policies"
UNRESOLVED_REFERENCE_MESSAGE = "couldn't load referenced policy"


class UpdatablePolicyFinderModule(PolicyFinderModule):
    """
    Finder module over a mutable, in-memory policy store.

    Configuration:
        - selection_mode: "combine" (default) wraps several applicable
            policies in a synthetic policy set; "error_on_ambiguity"
            reports them as an error instead.
        - combining_algorithm: Registered strategy name used with
            "combine". Defaults to deny-overrides.
        - emit_metrics: Whether to emit metrics to the hooks.

    Version constraints on references are accepted but not applied: the
    store holds one version per identifier and that version is returned.
    """

    name = "updatable"

    def __init__(
        self,
        config: FinderConfig | dict[str, Any] | None = None,
        store: PolicyStore | None = None,
        parser: PolicyParser | None = None,
        hooks: ObservabilityHooks | None = None,
    ) -> None:
        """
        Initialize the module.

        Args:
            config: A FinderConfig, a dict accepted by FinderConfig.from_dict,
                or None for defaults.
            store: Store to operate on. A new empty store if not provided.
            parser: Parser used by load operations. Defaults to
                DocumentPolicyParser.
            hooks: Metric hooks registry. Defaults to the process-wide one.

        Raises:
            ConfigurationError: If the configuration is invalid.
        """
        super().__init__()
        if isinstance(config, dict):
            config = FinderConfig.from_dict(config)
        self.config = config or FinderConfig()
        self.store = store if store is not None else PolicyStore()
        self.parser = parser or DocumentPolicyParser()
        self._hooks = hooks

        logger.debug(f"UpdatablePolicyFinderModule initialized: {self.config.to_dict()}")

    @property
    def capabilities(self) -> FinderCapabilities:
        return FinderCapabilities(
            supports_context_resolution=True,
            supports_reference_resolution=True,
            supports_hot_reload=True,
        )

    @property
    def hooks(self) -> ObservabilityHooks:
        return self._hooks or ObservabilityHooks.get_instance()

    # Lookups

    def find_policy(self, context: EvaluationContext) -> ResolutionResult:
        """
        Find the policy applicable to a request context.

        Every stored policy is matched against the context, in identifier
        order. The first INDETERMINATE target ends the lookup with that
        policy's status. Otherwise zero matches give NO_MATCH, one gives
        that policy, and several are combined or reported as ambiguous
        depending on the selection mode.

        Args:
            context: The request attributes.

        Returns:
            ResolutionResult for the context.
        """
        started = time.monotonic()
        snapshot = self.store.snapshot()
        selected: list[PolicyObject] = []

        for policy in snapshot.ordered:
            outcome = policy.match(context)

            if outcome.result is MatchResult.INDETERMINATE:
                logger.debug(
                    f"Target of policy '{policy.policy_id}' was indeterminate: "
                    f"{outcome.status.message if outcome.status else None}"
                )
                return self._finish(
                    ResolutionResult.error(ResolutionErrorKind.INDETERMINATE_MATCH, outcome.status),
                    started,
                )

            if outcome.result is MatchResult.MATCH:
                selected.append(policy)

        return self._finish(self._select(selected), started)

    def _select(self, selected: list[PolicyObject]) -> ResolutionResult:
        if not selected:
            logger.debug("No matching policy found")
            return ResolutionResult.no_match()

        if len(selected) == 1:
            return ResolutionResult.single(selected[0])

        selection = self.config.selection
        if isinstance(selection, ErrorOnAmbiguity):
            logger.debug(
                f"{len(selected)} applicable policies with no combining strategy: "
                f"{[policy.policy_id for policy in selected]}"
            )
            return ResolutionResult.error(
                ResolutionErrorKind.AMBIGUOUS_SELECTION,
                Status.processing_error(TOO_MANY_POLICIES_MESSAGE),
            )

        return ResolutionResult.combined(selection.strategy.combine(selected))

    def _finish(self, result: ResolutionResult, started: float) -> ResolutionResult:
        if self.config.emit_metrics:
            hooks = self.hooks
            hooks.emit_counter(METRIC_FIND_REQUESTS)
            if result.outcome is ResolutionOutcome.NO_MATCH:
                hooks.emit_counter(METRIC_FIND_NO_MATCH)
            elif result.outcome is ResolutionOutcome.SINGLE_POLICY:
                hooks.emit_counter(METRIC_FIND_SINGLE)
            elif result.outcome is ResolutionOutcome.COMBINED_POLICY:
                hooks.emit_counter(METRIC_FIND_COMBINED)
            else:
                hooks.emit_counter(METRIC_FIND_ERRORS, tags={"kind": result.error_kind.value})
            hooks.emit_timing(METRIC_FIND_LATENCY, (time.monotonic() - started) * 1000)
        return result

    def find_policy_by_reference(
        self,
        policy_id: PolicyIdentifier,
        kind: PolicyKind,
        constraints: VersionConstraints | None = None,
        parent_metadata: PolicyMetadata | None = None,
    ) -> ResolutionResult:
        """
        Resolve a policy or policy-set reference by identifier.

        A missing identifier and a stored object of the other kind give
        the same UNRESOLVABLE_REFERENCE error.

        Args:
            policy_id: The referenced identifier.
            kind: Whether a policy or a policy set is expected.
            constraints: Accepted, not applied.
            parent_metadata: Accepted, not applied.

        Returns:
            ResolutionResult with the stored policy or an error.
        """
        if constraints is not None and not constraints.is_empty:
            logger.debug(
                f"Version constraints for '{policy_id}' are not applied; "
                f"returning the stored version"
            )

        if self.config.emit_metrics:
            self.hooks.emit_counter(METRIC_REFERENCE_REQUESTS)

        policy = self.store.get(policy_id)
        if policy is not None and policy.kind is kind:
            return ResolutionResult.single(policy)

        if policy is not None:
            logger.debug(
                f"Reference '{policy_id}' expected {kind.value}, found {policy.kind.value}"
            )
        if self.config.emit_metrics:
            self.hooks.emit_counter(METRIC_REFERENCE_UNRESOLVED)
        return ResolutionResult.error(
            ResolutionErrorKind.UNRESOLVABLE_REFERENCE,
            Status.processing_error(UNRESOLVED_REFERENCE_MESSAGE),
        )

    # Administration

    def load_document(self, document: Any) -> PolicyObject | None:
        """
        Parse one document without storing it.

        Returns:
            The parsed policy, or None if the document failed to parse.
            Failures are logged, never raised.
        """
        try:
            return self.parser.parse(document)
        except PolicyParseError as e:
            logger.error(f"Failed to load policy document: {e}")
            if self.config.emit_metrics:
                self.hooks.emit_counter(METRIC_LOAD_FAILED)
            return None

    def load_batch(self, documents: Iterable[Any]) -> list[PolicyIdentifier]:
        """
        Parse documents and store every one that parses.

        Documents that fail to parse are logged and skipped; the rest of
        the batch is still applied. Parsing happens before the store is
        locked.

        Args:
            documents: Serialized policy documents.

        Returns:
            Identifiers stored, in document order.
        """
        parsed = [
            policy
            for policy in (self.load_document(document) for document in documents)
            if policy is not None
        ]
        written = self.store.put_many(parsed)

        for policy_id in written:
            logger.debug(f"Added policy, id: {policy_id}")
        if self.config.emit_metrics:
            self.hooks.emit_counter(METRIC_LOAD_PARSED, float(len(written)))
            self.hooks.emit_gauge(METRIC_STORE_SIZE, float(len(self.store)))
        return written

    def add_policy(self, policy: PolicyObject) -> None:
        """Store an already-parsed policy under its own identifier."""
        self.store.put(policy.policy_id, policy)
        if self.config.emit_metrics:
            self.hooks.emit_gauge(METRIC_STORE_SIZE, float(len(self.store)))

    def delete_policy(self, policy_id: PolicyIdentifier) -> bool:
        """
        Delete the policy stored under ``policy_id``.

        Returns:
            True if a policy was removed, False if none was stored.
        """
        removed = self.store.delete(policy_id)
        if removed and self.config.emit_metrics:
            self.hooks.emit_counter(METRIC_STORE_DELETES)
            self.hooks.emit_gauge(METRIC_STORE_SIZE, float(len(self.store)))
        return removed

    def list_policies(self) -> frozenset[PolicyIdentifier]:
        """Identifiers currently stored."""
        return self.store.keys()
