"""
Policy document parsing for policy-finder.

The updatable finder hands every document in a load batch to a parser
and stores whatever comes back. Any object with a ``parse(document)``
method that returns a PolicyObject, or raises PolicyParseError, can be
plugged in.

DocumentPolicyParser is the built-in parser. It reads JSON text, bytes
or an already-decoded mapping and validates it with Pydantic:

    >>> parser = DocumentPolicyParser()
    >>> policy = parser.parse(b'''{
    ...     "type": "Policy",
    ...     "id": "urn:example:read-docs",
    ...     "target": {"action": ["read"], "resource": ["document"]},
    ...     "required_attributes": ["action"]
    ... }''')
    >>> policy.kind
    <PolicyKind.POLICY: 'Policy'>
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Literal, Protocol, Union, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from policy_finder.exceptions import ConfigurationError, PolicyParseError
from policy_finder.policies.base import AbstractPolicy, AttributeTarget, PolicyObject, PolicySet, TargetPolicy
from policy_finder.policies.combining import get_combining_strategy

logger = logging.getLogger(__name__)

PolicyDocumentInput = Union[str, bytes, bytearray, Mapping[str, Any]]


@runtime_checkable
class PolicyParser(Protocol):
    """Protocol for parser collaborators used by load_batch."""

    def parse(self, document: Any) -> PolicyObject:
        """
        Turn one serialized document into a policy object.

        Raises:
            PolicyParseError: With a human-readable diagnostic.
        """
        ...


class PolicyDocument(BaseModel):
    """Schema of a built-in policy or policy-set document."""

    model_config = ConfigDict(extra="forbid")

    type: Literal["Policy", "PolicySet"]
    id: str = Field(min_length=1)
    version: str = "1.0"
    description: str | None = None
    target: dict[str, list[Any]] = Field(default_factory=dict)
    required_attributes: list[str] = Field(default_factory=list)
    combining_algorithm: str | None = None
    policies: list[PolicyDocument] = Field(default_factory=list)

    @field_validator("target", mode="before")
    @classmethod
    def _wrap_scalar_values(cls, value: Any) -> Any:
        if isinstance(value, Mapping):
            return {
                name: allowed if isinstance(allowed, (list, tuple)) else [allowed]
                for name, allowed in value.items()
            }
        return value

    @model_validator(mode="after")
    def _check_consistency(self) -> PolicyDocument:
        if self.type == "Policy" and (self.policies or self.combining_algorithm):
            raise ValueError("only a PolicySet may declare 'policies' or 'combining_algorithm'")
        untargeted = sorted(set(self.required_attributes) - set(self.target))
        if untargeted:
            raise ValueError(f"required attributes not in target: {', '.join(untargeted)}")
        return self


class DocumentPolicyParser:
    """
    Parser for JSON / mapping policy documents.

    The document's ``type`` picks the policy class, the way an XML
    document's root element name would: "Policy" builds a TargetPolicy,
    "PolicySet" builds a PolicySet whose inline ``policies`` are parsed
    recursively.
    """

    def parse(self, document: PolicyDocumentInput) -> AbstractPolicy:
        """
        Parse one document.

        Args:
            document: JSON text or bytes, or a decoded mapping.

        Returns:
            A TargetPolicy or PolicySet.

        Raises:
            PolicyParseError: If the document is malformed.
        """
        hint = _document_hint(document)
        try:
            if isinstance(document, (str, bytes, bytearray)):
                model = PolicyDocument.model_validate_json(document)
            elif isinstance(document, Mapping):
                model = PolicyDocument.model_validate(dict(document))
            else:
                raise PolicyParseError(
                    f"unsupported document type {type(document).__name__}", hint
                )
        except ValidationError as e:
            raise PolicyParseError(_summarize(e), hint) from e

        return self._build(model)

    def _build(self, model: PolicyDocument) -> AbstractPolicy:
        target = AttributeTarget(model.target, required=model.required_attributes)

        if model.type == "Policy":
            return TargetPolicy(
                model.id,
                version=model.version,
                description=model.description,
                target=target,
            )

        algorithm = model.combining_algorithm or "deny-overrides"
        try:
            algorithm_id = get_combining_strategy(algorithm).algorithm_id
        except ConfigurationError as e:
            raise PolicyParseError(
                f"unknown combining algorithm '{algorithm}'", model.id
            ) from e

        return PolicySet(
            model.id,
            combining_algorithm=algorithm_id,
            children=[self._build(child) for child in model.policies],
            version=model.version,
            description=model.description,
            target=target,
        )


def _document_hint(document: Any) -> str | None:
    if isinstance(document, Mapping):
        doc_id = document.get("id")
        return str(doc_id) if doc_id is not None else None
    if isinstance(document, (bytes, bytearray)):
        return f"<{len(document)} bytes>"
    if isinstance(document, str):
        return f"<{len(document)} chars>"
    return None


def _summarize(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "<root>"
        parts.append(f"{location}: {item['msg']}")
    return "invalid policy document: " + "; ".join(parts)
