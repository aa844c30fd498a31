"""
Core type definitions for policy-finder.

This module defines the values that flow between the policy store, the
finder modules and their callers: match outcomes, statuses, reference
constraints and resolution results.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


# Policy identifiers are opaque strings, URIs in practice.
PolicyIdentifier = str

# Request attributes. Opaque to the finder; the built-in policies read
# them as a mapping of attribute name to value.
EvaluationContext = Mapping[str, Any]


STATUS_OK = "urn:oasis:names:tc:xacml:1.0:status:ok"
STATUS_MISSING_ATTRIBUTE = "urn:oasis:names:tc:xacml:1.0:status:missing-attribute"
STATUS_SYNTAX_ERROR = "urn:oasis:names:tc:xacml:1.0:status:syntax-error"
STATUS_PROCESSING_ERROR = "urn:oasis:names:tc:xacml:1.0:status:processing-error"


class PolicyKind(Enum):
    """Distinguishes a single policy from a policy set."""

    POLICY = "Policy"
    POLICY_SET = "PolicySet"


class MatchResult(Enum):
    """Result of evaluating a policy target against a context."""

    MATCH = "match"
    NO_MATCH = "no_match"
    INDETERMINATE = "indeterminate"


class ResolutionOutcome(Enum):
    """What a finder lookup produced."""

    NO_MATCH = "no_match"
    SINGLE_POLICY = "single_policy"
    COMBINED_POLICY = "combined_policy"
    ERROR = "error"


class ResolutionErrorKind(Enum):
    """Why a finder lookup ended in an error."""

    INDETERMINATE_MATCH = "indeterminate_match"
    AMBIGUOUS_SELECTION = "ambiguous_selection"
    UNRESOLVABLE_REFERENCE = "unresolvable_reference"


@dataclass(frozen=True)
class Status:
    """
    Status attached to indeterminate matches and resolution errors.

    Attributes:
        codes: Status code URNs, most general first.
        message: Optional human-readable diagnostic.

    Example:
        >>> status = Status.processing_error("too many applicable top-level policies")
        >>> status.code
        'urn:oasis:names:tc:xacml:1.0:status:processing-error'
    """

    codes: tuple[str, ...] = (STATUS_OK,)
    message: str | None = None

    @classmethod
    def processing_error(cls, message: str) -> Status:
        return cls(codes=(STATUS_PROCESSING_ERROR,), message=message)

    @classmethod
    def missing_attribute(cls, message: str) -> Status:
        return cls(codes=(STATUS_MISSING_ATTRIBUTE,), message=message)

    @property
    def code(self) -> str:
        """The primary status code."""
        return self.codes[0]

    @property
    def is_ok(self) -> bool:
        return self.code == STATUS_OK

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"codes": list(self.codes), "message": self.message}


@dataclass(frozen=True)
class MatchOutcome:
    """
    The answer a policy gives to "does your target match this context?".

    Attributes:
        result: MATCH, NO_MATCH or INDETERMINATE.
        status: Diagnostic status; only meaningful for INDETERMINATE.
    """

    result: MatchResult
    status: Status | None = None

    def __post_init__(self) -> None:
        if self.result is MatchResult.INDETERMINATE and self.status is None:
            raise ValueError("an indeterminate match outcome requires a status")

    @classmethod
    def match(cls) -> MatchOutcome:
        return cls(MatchResult.MATCH)

    @classmethod
    def no_match(cls) -> MatchOutcome:
        return cls(MatchResult.NO_MATCH)

    @classmethod
    def indeterminate(cls, status: Status) -> MatchOutcome:
        return cls(MatchResult.INDETERMINATE, status)


@dataclass(frozen=True)
class VersionConstraints:
    """
    Version patterns carried by a policy reference.

    Accepted by reference resolution for protocol compatibility; the
    updatable finder keeps a single version per identifier and does not
    filter on these.
    """

    version: str | None = None
    earliest: str | None = None
    latest: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.version is None and self.earliest is None and self.latest is None


@dataclass(frozen=True)
class PolicyMetadata:
    """Metadata of the policy set that issued a reference."""

    policy_id: PolicyIdentifier | None = None
    version: str | None = None
    attributes: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ResolutionResult:
    """
    Result of a context-based or identifier-based lookup.

    Exactly one of the following holds:
        - outcome NO_MATCH: no policy and no status.
        - outcome SINGLE_POLICY or COMBINED_POLICY: ``policy`` is set.
        - outcome ERROR: ``status`` and ``error_kind`` are set.

    Example:
        >>> result = finder.find_policy({"role": "admin"})
        >>> if result.is_error:
        ...     logger.warning(result.status.message)
        >>> elif result.policy is not None:
        ...     decision = engine.evaluate(result.policy, request)
    """

    outcome: ResolutionOutcome
    policy: Any = None
    status: Status | None = None
    error_kind: ResolutionErrorKind | None = None

    @classmethod
    def no_match(cls) -> ResolutionResult:
        return cls(ResolutionOutcome.NO_MATCH)

    @classmethod
    def single(cls, policy: Any) -> ResolutionResult:
        return cls(ResolutionOutcome.SINGLE_POLICY, policy=policy)

    @classmethod
    def combined(cls, policy_set: Any) -> ResolutionResult:
        return cls(ResolutionOutcome.COMBINED_POLICY, policy=policy_set)

    @classmethod
    def error(cls, kind: ResolutionErrorKind, status: Status) -> ResolutionResult:
        return cls(ResolutionOutcome.ERROR, status=status, error_kind=kind)

    @property
    def is_error(self) -> bool:
        return self.outcome is ResolutionOutcome.ERROR

    @property
    def is_no_match(self) -> bool:
        return self.outcome is ResolutionOutcome.NO_MATCH

    @property
    def has_policy(self) -> bool:
        return self.policy is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "outcome": self.outcome.value,
            "policy_id": getattr(self.policy, "policy_id", None),
            "status": self.status.to_dict() if self.status else None,
            "error_kind": self.error_kind.value if self.error_kind else None,
        }
