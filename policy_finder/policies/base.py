"""
Policy objects for policy-finder.

The finder only needs three things from a stored policy: its identifier,
whether it is a single policy or a policy set, and an answer to "does
your target match this context?". That contract is the PolicyObject
protocol; any parser may hand the store objects that satisfy it.

The concrete classes here (TargetPolicy, PolicySet) are what the built-in
document parser produces and what the combining strategies wrap matched
policies in.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from policy_finder.types import (
    EvaluationContext,
    MatchOutcome,
    PolicyIdentifier,
    PolicyKind,
    Status,
)


@runtime_checkable
class PolicyObject(Protocol):
    """
    Protocol for anything the policy store can hold.

    Example:
        >>> class AlwaysApplicable:
        ...     policy_id = "urn:example:always"
        ...     kind = PolicyKind.POLICY
        ...     version = "1.0"
        ...
        ...     def match(self, context):
        ...         return MatchOutcome.match()
    """

    policy_id: PolicyIdentifier
    kind: PolicyKind
    version: str

    def match(self, context: EvaluationContext) -> MatchOutcome:
        """Evaluate this policy's target against the context."""
        ...


class AttributeTarget:
    """
    Applicability predicate over request attributes.

    Each entry maps an attribute name to the values it may take. The
    target matches when every listed attribute is present with an
    allowed value. A list-valued attribute matches if any of its
    elements is allowed.

    A missing attribute is a plain NO_MATCH unless the attribute is
    required, in which case the outcome is INDETERMINATE with a
    missing-attribute status.

    Example:
        >>> target = AttributeTarget({"action": ["read", "list"]}, required=["action"])
        >>> target.match({"action": "read"}).result
        <MatchResult.MATCH: 'match'>
        >>> target.match({}).result
        <MatchResult.INDETERMINATE: 'indeterminate'>
    """

    def __init__(
        self,
        attributes: Mapping[str, Iterable[Any]] | None = None,
        required: Iterable[str] | None = None,
    ) -> None:
        self.attributes: dict[str, tuple[Any, ...]] = {
            name: tuple(values) for name, values in (attributes or {}).items()
        }
        self.required = frozenset(required or ())

    @property
    def is_empty(self) -> bool:
        return not self.attributes

    def match(self, context: EvaluationContext) -> MatchOutcome:
        for name, allowed in self.attributes.items():
            if name not in context:
                if name in self.required:
                    return MatchOutcome.indeterminate(
                        Status.missing_attribute(f"required attribute '{name}' is missing")
                    )
                return MatchOutcome.no_match()

            value = context[name]
            candidates = value if isinstance(value, (list, tuple, set, frozenset)) else (value,)
            if not any(candidate in allowed for candidate in candidates):
                return MatchOutcome.no_match()

        return MatchOutcome.match()

    def to_dict(self) -> dict[str, Any]:
        return {name: list(values) for name, values in self.attributes.items()}

    def __repr__(self) -> str:
        return f"AttributeTarget({self.to_dict()!r})"


class AbstractPolicy(ABC):
    """
    Base class for the built-in policy objects.

    Attributes:
        policy_id: Globally unique identifier. Fixed at construction.
        version: Version string of the policy document.
        description: Optional free-text description.
        target: Applicability predicate. An empty target matches everything.
    """

    kind: PolicyKind

    def __init__(
        self,
        policy_id: PolicyIdentifier,
        version: str = "1.0",
        description: str | None = None,
        target: AttributeTarget | None = None,
    ) -> None:
        self._policy_id = policy_id
        self.version = version
        self.description = description
        self.target = target or AttributeTarget()

    @property
    def policy_id(self) -> PolicyIdentifier:
        return self._policy_id

    def match(self, context: EvaluationContext) -> MatchOutcome:
        return self.target.match(context)

    @abstractmethod
    def to_dict(self) -> dict[str, Any]:
        """Convert to a document-shaped dictionary."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(policy_id={self.policy_id!r}, version={self.version!r})"


class TargetPolicy(AbstractPolicy):
    """A single policy whose applicability is an attribute target."""

    kind = PolicyKind.POLICY

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind.value,
            "id": self.policy_id,
            "version": self.version,
            "description": self.description,
            "target": self.target.to_dict(),
            "required_attributes": sorted(self.target.required),
        }


class PolicySet(AbstractPolicy):
    """
    A named aggregate of policies governed by a combining algorithm.

    The finder never evaluates a policy set's children; it only matches
    the set's own target and, when several top-level policies apply,
    builds a synthetic set around them.

    Example:
        >>> combined = PolicySet(
        ...     "urn:example:set",
        ...     combining_algorithm=DENY_OVERRIDES_ID,
        ...     children=[policy_a, policy_b],
        ... )
        >>> [child.policy_id for child in combined.children]
        ['urn:example:a', 'urn:example:b']
    """

    kind = PolicyKind.POLICY_SET

    def __init__(
        self,
        policy_id: PolicyIdentifier,
        combining_algorithm: str,
        children: Sequence[PolicyObject] = (),
        version: str = "1.0",
        description: str | None = None,
        target: AttributeTarget | None = None,
    ) -> None:
        super().__init__(policy_id, version, description, target)
        self.combining_algorithm = combining_algorithm
        self.children: tuple[PolicyObject, ...] = tuple(children)

    @property
    def child_ids(self) -> list[PolicyIdentifier]:
        return [child.policy_id for child in self.children]

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind.value,
            "id": self.policy_id,
            "version": self.version,
            "description": self.description,
            "target": self.target.to_dict(),
            "required_attributes": sorted(self.target.required),
            "combining_algorithm": self.combining_algorithm,
            "policies": self.child_ids,
        }

