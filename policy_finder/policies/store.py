"""
Mutable policy store for policy-finder.

The store maps policy identifiers to policy objects and can be changed at
runtime while other threads query it. Readers that need to look at many
policies at once (the context-based finder) take a StoreSnapshot: an
immutable point-in-time view that later writes never touch.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from policy_finder.policies.base import PolicyObject
from policy_finder.types import PolicyIdentifier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoreSnapshot:
    """
    Immutable view of the store at one generation.

    Attributes:
        generation: Write counter of the store when the view was taken.
        policies: Identifier to policy mapping (read-only).
        ordered: The same policies sorted by identifier.
    """

    generation: int
    policies: Mapping[PolicyIdentifier, PolicyObject]
    ordered: tuple[PolicyObject, ...]

    def __len__(self) -> int:
        return len(self.ordered)

    def __iter__(self) -> Iterator[PolicyObject]:
        return iter(self.ordered)

    def __contains__(self, policy_id: object) -> bool:
        return policy_id in self.policies

    def ids(self) -> frozenset[PolicyIdentifier]:
        return frozenset(self.policies)


class PolicyStore:
    """
    Thread-safe identifier -> policy mapping with replace-on-insert.

    Identifiers are unique: putting a policy under an existing identifier
    replaces the previous entry (last write wins). Single-entry writes
    are O(1); the sorted snapshot is rebuilt lazily on the first read
    after a write and shared by every reader until the next write.

    Example:
        >>> store = PolicyStore()
        >>> store.put("urn:example:a", policy_a)
        >>> store.get("urn:example:a") is policy_a
        True
        >>> store.delete("urn:example:a")
        True
        >>> store.keys()
        frozenset()

    Thread Safety:
        All operations are thread-safe via internal locking. A snapshot
        taken before a write keeps showing the pre-write contents.
    """

    def __init__(self) -> None:
        self._policies: dict[PolicyIdentifier, PolicyObject] = {}
        self._lock = threading.RLock()
        self._generation = 0
        self._snapshot: StoreSnapshot | None = None

    def put(self, policy_id: PolicyIdentifier, policy: PolicyObject) -> None:
        """
        Insert or replace the policy stored under ``policy_id``.

        Args:
            policy_id: The identifier to store under.
            policy: The policy object.
        """
        with self._lock:
            self._put_locked(policy_id, policy)

    def put_many(self, policies: Iterable[PolicyObject]) -> list[PolicyIdentifier]:
        """
        Insert or replace several policies keyed by their own identifiers.

        The whole group is written under one lock acquisition.

        Returns:
            The identifiers written, in input order.
        """
        written: list[PolicyIdentifier] = []
        with self._lock:
            for policy in policies:
                self._put_locked(policy.policy_id, policy)
                written.append(policy.policy_id)
        return written

    def _put_locked(self, policy_id: PolicyIdentifier, policy: PolicyObject) -> None:
        if policy_id in self._policies:
            logger.warning(f"Replacing stored policy '{policy_id}'")
        self._policies[policy_id] = policy
        self._invalidate()
        logger.debug(f"Stored policy '{policy_id}'")

    def delete(self, policy_id: PolicyIdentifier) -> bool:
        """
        Remove the policy stored under ``policy_id``.

        Returns:
            True if a policy was removed, False if none was stored.
        """
        with self._lock:
            if policy_id not in self._policies:
                return False
            del self._policies[policy_id]
            self._invalidate()
            logger.debug(f"Deleted policy '{policy_id}'")
            return True

    def get(self, policy_id: PolicyIdentifier) -> PolicyObject | None:
        """Point lookup; None if nothing is stored under ``policy_id``."""
        with self._lock:
            return self._policies.get(policy_id)

    def keys(self) -> frozenset[PolicyIdentifier]:
        """Identifiers currently stored."""
        with self._lock:
            return frozenset(self._policies)

    def snapshot(self) -> StoreSnapshot:
        """
        Take an immutable view of the current contents.

        Returns:
            A StoreSnapshot whose policies are sorted by identifier.
        """
        with self._lock:
            if self._snapshot is None:
                frozen = dict(self._policies)
                self._snapshot = StoreSnapshot(
                    generation=self._generation,
                    policies=MappingProxyType(frozen),
                    ordered=tuple(frozen[policy_id] for policy_id in sorted(frozen)),
                )
            return self._snapshot

    def clear(self) -> None:
        """Remove every stored policy."""
        with self._lock:
            self._policies.clear()
            self._invalidate()
            logger.debug("Cleared policy store")

    @property
    def generation(self) -> int:
        """Number of writes applied since construction."""
        with self._lock:
            return self._generation

    def _invalidate(self) -> None:
        self._generation += 1
        self._snapshot = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._policies)

    def __contains__(self, policy_id: object) -> bool:
        with self._lock:
            return policy_id in self._policies
