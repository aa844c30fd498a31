"""Tests for policy_finder.parsing."""

from __future__ import annotations

import json

import pytest

from policy_finder.exceptions import PolicyParseError
from policy_finder.parsing import DocumentPolicyParser, PolicyParser
from policy_finder.policies.base import PolicyObject, PolicySet, TargetPolicy
from policy_finder.policies.combining import DENY_OVERRIDES_ID
from policy_finder.types import MatchResult, PolicyKind


class TestDocumentPolicyParser:
    """Tests for the built-in JSON / mapping parser."""

    def test_satisfies_parser_protocol(self, parser: DocumentPolicyParser):
        assert isinstance(parser, PolicyParser)

    def test_parse_policy_mapping(self, parser: DocumentPolicyParser, read_policy_document):
        policy = parser.parse(read_policy_document)

        assert isinstance(policy, TargetPolicy)
        assert isinstance(policy, PolicyObject)
        assert policy.kind is PolicyKind.POLICY
        assert policy.policy_id == "urn:example:policy:read"
        assert policy.version == "1.2"
        assert policy.description == "Anyone may read documents"
        assert policy.target.required == frozenset({"action"})

    def test_parse_json_text_and_bytes(self, parser: DocumentPolicyParser, read_policy_document):
        text = json.dumps(read_policy_document)

        from_text = parser.parse(text)
        from_bytes = parser.parse(text.encode("utf-8"))

        assert from_text.to_dict() == from_bytes.to_dict()

    def test_defaults(self, parser: DocumentPolicyParser):
        policy = parser.parse({"type": "Policy", "id": "urn:p"})

        assert policy.version == "1.0"
        assert policy.description is None
        assert policy.target.is_empty
        assert policy.match({}).result is MatchResult.MATCH

    def test_scalar_target_values_are_wrapped(self, parser: DocumentPolicyParser):
        policy = parser.parse({"type": "Policy", "id": "urn:p", "target": {"action": "read"}})
        assert policy.target.to_dict() == {"action": ["read"]}

    def test_parse_policy_set(self, parser: DocumentPolicyParser, admin_policy_set_document):
        policy_set = parser.parse(admin_policy_set_document)

        assert isinstance(policy_set, PolicySet)
        assert policy_set.kind is PolicyKind.POLICY_SET
        assert policy_set.combining_algorithm == DENY_OVERRIDES_ID
        assert policy_set.child_ids == [
            "urn:example:policy:admin-write",
            "urn:example:policy:admin-delete",
        ]
        assert all(child.kind is PolicyKind.POLICY for child in policy_set.children)

    def test_policy_set_defaults_to_deny_overrides(self, parser: DocumentPolicyParser):
        policy_set = parser.parse({"type": "PolicySet", "id": "urn:s"})
        assert policy_set.combining_algorithm == DENY_OVERRIDES_ID
        assert policy_set.children == ()

    def test_nested_policy_sets(self, parser: DocumentPolicyParser):
        policy_set = parser.parse({
            "type": "PolicySet",
            "id": "urn:outer",
            "policies": [{"type": "PolicySet", "id": "urn:inner", "policies": [{"type": "Policy", "id": "urn:leaf"}]}],
        })

        inner = policy_set.children[0]
        assert inner.kind is PolicyKind.POLICY_SET
        assert inner.child_ids == ["urn:leaf"]


class TestDocumentPolicyParserErrors:
    """Malformed documents raise PolicyParseError with a diagnostic."""

    @pytest.mark.parametrize(
        "document",
        [
            {"type": "Rule", "id": "urn:x"},
            {"type": "Policy"},
            {"type": "Policy", "id": ""},
            {"type": "Policy", "id": "urn:x", "unexpected": True},
            {"type": "Policy", "id": "urn:x", "target": ["action"]},
            b"{ not json",
            "[]",
        ],
    )
    def test_malformed_documents(self, parser: DocumentPolicyParser, document):
        with pytest.raises(PolicyParseError) as exc_info:
            parser.parse(document)
        assert exc_info.value.message.startswith("invalid policy document")

    def test_policy_cannot_have_children(self, parser: DocumentPolicyParser):
        with pytest.raises(PolicyParseError, match="only a PolicySet"):
            parser.parse({
                "type": "Policy",
                "id": "urn:x",
                "policies": [{"type": "Policy", "id": "urn:y"}],
            })

    def test_required_attribute_must_be_targeted(self, parser: DocumentPolicyParser):
        with pytest.raises(PolicyParseError, match="required attributes not in target: role"):
            parser.parse({"type": "Policy", "id": "urn:x", "required_attributes": ["role"]})

    def test_unknown_combining_algorithm(self, parser: DocumentPolicyParser):
        with pytest.raises(PolicyParseError, match="unknown combining algorithm 'majority'") as exc_info:
            parser.parse({"type": "PolicySet", "id": "urn:s", "combining_algorithm": "majority"})
        assert exc_info.value.document_hint == "urn:s"

    def test_unsupported_input_type(self, parser: DocumentPolicyParser):
        with pytest.raises(PolicyParseError, match="unsupported document type int"):
            parser.parse(42)  # type: ignore[arg-type]

    def test_hint_uses_declared_id(self, parser: DocumentPolicyParser):
        with pytest.raises(PolicyParseError) as exc_info:
            parser.parse({"type": "Nope", "id": "urn:bad"})
        assert exc_info.value.document_hint == "urn:bad"
        assert exc_info.value.to_dict()["details"] == {"document": "urn:bad"}
