"""
Finder configuration for policy-finder.

The one real decision a finder is configured with is what to do when
more than one top-level policy applies to a context. That choice is a
two-variant value rather than an optional strategy:

    AlwaysCombine(strategy)  wrap all matches in a synthetic policy set
    ErrorOnAmbiguity()       report "too many applicable top-level policies"
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from policy_finder.exceptions import ConfigurationError
from policy_finder.policies.combining import (
    CombiningStrategy,
    DenyOverridesStrategy,
    get_combining_strategy,
)

SELECTION_COMBINE = "combine"
SELECTION_ERROR_ON_AMBIGUITY = "error_on_ambiguity"


@dataclass(frozen=True)
class AlwaysCombine:
    """Combine every applicable policy under ``strategy``."""

    strategy: CombiningStrategy = field(default_factory=DenyOverridesStrategy)

    @property
    def name(self) -> str:
        return SELECTION_COMBINE


@dataclass(frozen=True)
class ErrorOnAmbiguity:
    """Treat a second applicable policy as a processing error."""

    @property
    def name(self) -> str:
        return SELECTION_ERROR_ON_AMBIGUITY


SelectionMode = Union[AlwaysCombine, ErrorOnAmbiguity]


@dataclass
class FinderConfig:
    """
    Configuration for an updatable policy finder.

    Attributes:
        selection: How several applicable policies are handled.
        emit_metrics: Whether lookups and loads emit metrics to the hooks.

    Example:
        >>> config = FinderConfig.from_dict({
        ...     "selection_mode": "combine",
        ...     "combining_algorithm": "deny-overrides",
        ... })
        >>> isinstance(config.selection, AlwaysCombine)
        True
    """

    selection: SelectionMode = field(default_factory=AlwaysCombine)
    emit_metrics: bool = True

    def __post_init__(self) -> None:
        if not isinstance(self.selection, (AlwaysCombine, ErrorOnAmbiguity)):
            raise ConfigurationError(
                config_key="selection",
                expected="AlwaysCombine(...) or ErrorOnAmbiguity()",
                received=self.selection,
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FinderConfig:
        """
        Build a config from plain values.

        Recognised keys: ``selection_mode`` ("combine" or
        "error_on_ambiguity"), ``combining_algorithm`` (a registered
        strategy name, only valid with "combine") and ``emit_metrics``.

        Raises:
            ConfigurationError: On unknown keys or values.
        """
        unknown = set(data) - {"selection_mode", "combining_algorithm", "emit_metrics"}
        if unknown:
            raise ConfigurationError(
                config_key=", ".join(sorted(unknown)),
                expected="one of: selection_mode, combining_algorithm, emit_metrics",
            )

        mode = data.get("selection_mode", SELECTION_COMBINE)
        algorithm = data.get("combining_algorithm")

        selection: SelectionMode
        if mode == SELECTION_COMBINE:
            strategy = get_combining_strategy(algorithm) if algorithm else DenyOverridesStrategy()
            selection = AlwaysCombine(strategy)
        elif mode == SELECTION_ERROR_ON_AMBIGUITY:
            if algorithm is not None:
                raise ConfigurationError(
                    config_key="combining_algorithm",
                    expected=f"no combining algorithm with selection_mode '{mode}'",
                    received=algorithm,
                )
            selection = ErrorOnAmbiguity()
        else:
            raise ConfigurationError(
                config_key="selection_mode",
                expected=f"one of: '{SELECTION_COMBINE}', '{SELECTION_ERROR_ON_AMBIGUITY}'",
                received=mode,
            )

        return cls(selection=selection, emit_metrics=bool(data.get("emit_metrics", True)))

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary."""
        result: dict[str, Any] = {
            "selection_mode": self.selection.name,
            "emit_metrics": self.emit_metrics,
        }
        if isinstance(self.selection, AlwaysCombine):
            result["combining_algorithm"] = self.selection.strategy.algorithm_id
        return result
