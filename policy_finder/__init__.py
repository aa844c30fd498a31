"""
policy-finder: runtime-updatable policy resolution for attribute-based
access control.

An evaluation engine asks a finder module which stored policy applies to
a request, or which policy a reference names. The updatable module keeps
its policies in memory and lets administrators load, replace and delete
them while lookups are running.

Basic Usage:
    >>> from policy_finder import UpdatablePolicyFinderModule, PolicyKind
    >>>
    >>> finder = UpdatablePolicyFinderModule()
    >>> finder.load_batch([
    ...     b'{"type": "Policy", "id": "urn:example:read", "target": {"action": "read"}}',
    ... ])
    ['urn:example:read']
    >>>
    >>> finder.find_policy({"action": "read"}).policy.policy_id
    'urn:example:read'
    >>> finder.find_policy_by_reference("urn:example:read", PolicyKind.POLICY_SET).is_error
    True
"""

__version__ = "0.1.0"

from policy_finder.config import (
    AlwaysCombine,
    ErrorOnAmbiguity,
    FinderConfig,
    SelectionMode,
)
from policy_finder.exceptions import (
    ConfigurationError,
    PolicyFinderError,
    PolicyParseError,
)
from policy_finder.finder import (
    FinderCapabilities,
    PolicyFinder,
    PolicyFinderModule,
    UpdatablePolicyFinderModule,
)
from policy_finder.parsing import DocumentPolicyParser, PolicyParser
from policy_finder.policies import (
    AttributeTarget,
    CombiningStrategy,
    DenyOverridesStrategy,
    PolicyObject,
    PolicySet,
    PolicyStore,
    StoreSnapshot,
    TargetPolicy,
)
from policy_finder.types import (
    MatchOutcome,
    MatchResult,
    PolicyKind,
    PolicyMetadata,
    ResolutionErrorKind,
    ResolutionOutcome,
    ResolutionResult,
    Status,
    VersionConstraints,
)

__all__ = [
    "__version__",
    # Configuration
    "AlwaysCombine",
    "ErrorOnAmbiguity",
    "FinderConfig",
    "SelectionMode",
    # Exceptions
    "ConfigurationError",
    "PolicyFinderError",
    "PolicyParseError",
    # Finders
    "FinderCapabilities",
    "PolicyFinder",
    "PolicyFinderModule",
    "UpdatablePolicyFinderModule",
    # Parsing
    "DocumentPolicyParser",
    "PolicyParser",
    # Policies
    "AttributeTarget",
    "CombiningStrategy",
    "DenyOverridesStrategy",
    "PolicyObject",
    "PolicySet",
    "PolicyStore",
    "StoreSnapshot",
    "TargetPolicy",
    # Types
    "MatchOutcome",
    "MatchResult",
    "PolicyKind",
    "PolicyMetadata",
    "ResolutionErrorKind",
    "ResolutionOutcome",
    "ResolutionResult",
    "Status",
    "VersionConstraints",
]
