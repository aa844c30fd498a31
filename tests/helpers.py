"""Stub policy objects shared by the test modules."""

from __future__ import annotations

from typing import Any

from policy_finder.types import MatchOutcome, PolicyKind, Status


class StubPolicy:
    """Policy object with a fixed match outcome that counts its evaluations."""

    def __init__(
        self,
        policy_id: str,
        outcome: MatchOutcome | None = None,
        kind: PolicyKind = PolicyKind.POLICY,
        version: str = "1.0",
        tag: Any = None,
    ) -> None:
        self.policy_id = policy_id
        self.outcome = outcome or MatchOutcome.match()
        self.kind = kind
        self.version = version
        self.tag = tag
        self.calls = 0

    def match(self, context: Any) -> MatchOutcome:
        self.calls += 1
        return self.outcome

    def __repr__(self) -> str:
        return f"StubPolicy({self.policy_id!r}, {self.outcome.result.value})"


def matching(policy_id: str, **kwargs: Any) -> StubPolicy:
    return StubPolicy(policy_id, MatchOutcome.match(), **kwargs)


def not_matching(policy_id: str, **kwargs: Any) -> StubPolicy:
    return StubPolicy(policy_id, MatchOutcome.no_match(), **kwargs)


def indeterminate(policy_id: str, message: str = "attribute lookup failed", **kwargs: Any) -> StubPolicy:
    return StubPolicy(
        policy_id,
        MatchOutcome.indeterminate(Status.processing_error(message)),
        **kwargs,
    )
