"""
Custom exceptions for policy-finder.

Only configuration mistakes and parse failures are exceptions. Resolution
failures (indeterminate targets, ambiguous selection, unresolvable
references) are returned as data in a ResolutionResult.
"""

from __future__ import annotations

from typing import Any


class PolicyFinderError(Exception):
    """
    Base exception for all policy-finder errors.

    Attributes:
        message: Human-readable error description.
        details: Additional context about the error.

    Example:
        >>> try:
        ...     finder = UpdatablePolicyFinderModule({"selection_mode": "bogus"})
        ... except PolicyFinderError as e:
        ...     logger.error(f"policy-finder error: {e}")
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(PolicyFinderError):
    """
    Raised when a finder is constructed with an invalid configuration.

    Attributes:
        config_key: The configuration key that has an issue.
        expected: What was expected for this configuration.
        received: What was actually provided.

    Example:
        >>> raise ConfigurationError(
        ...     config_key="selection_mode",
        ...     expected="one of: 'combine', 'error_on_ambiguity'",
        ...     received="first_match",
        ... )
    """

    def __init__(
        self,
        config_key: str,
        expected: str | None = None,
        received: Any = None,
    ) -> None:
        self.config_key = config_key
        self.expected = expected
        self.received = received

        message = f"Configuration error for '{config_key}'"
        if expected:
            message += f": expected {expected}"
        if received is not None:
            message += f", received {received!r}"

        details = {
            "config_key": config_key,
            "expected": expected,
            "received": repr(received),
        }
        super().__init__(message, details)


class PolicyParseError(PolicyFinderError):
    """
    Raised by a parser when a document cannot be turned into a policy.

    The updatable finder catches this inside load_batch, logs the
    diagnostic and skips the document.

    Attributes:
        document_hint: Short description of the offending document
            (its declared id or type when known).
    """

    def __init__(self, message: str, document_hint: str | None = None) -> None:
        self.document_hint = document_hint
        details = {"document": document_hint} if document_hint else None
        super().__init__(message, details)
