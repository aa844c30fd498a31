"""Tests for the PolicyFinder router."""

from __future__ import annotations

from policy_finder.finder.base import FinderCapabilities, PolicyFinderModule
from policy_finder.finder.router import PolicyFinder
from policy_finder.finder.updatable import UpdatablePolicyFinderModule
from policy_finder.types import (
    PolicyKind,
    ResolutionErrorKind,
    ResolutionOutcome,
    ResolutionResult,
    Status,
)
from tests.helpers import indeterminate, matching


class ReferenceOnlyModule(PolicyFinderModule):
    """Module that serves references but refuses context lookups."""

    name = "reference-only"

    def __init__(self, policies):
        super().__init__()
        self.policies = {policy.policy_id: policy for policy in policies}
        self.context_calls = 0

    @property
    def capabilities(self) -> FinderCapabilities:
        return FinderCapabilities(supports_reference_resolution=True)

    def find_policy(self, context):
        self.context_calls += 1
        return ResolutionResult.error(
            ResolutionErrorKind.INDETERMINATE_MATCH, Status.processing_error("should not be called")
        )

    def find_policy_by_reference(self, policy_id, kind, constraints=None, parent_metadata=None):
        policy = self.policies.get(policy_id)
        if policy is not None and policy.kind is kind:
            return ResolutionResult.single(policy)
        return ResolutionResult.error(
            ResolutionErrorKind.UNRESOLVABLE_REFERENCE, Status.processing_error("not here")
        )


class TestPolicyFinderRegistration:
    """Tests for module registration."""

    def test_init_called_with_router(self):
        module = UpdatablePolicyFinderModule()
        router = PolicyFinder([module])
        assert module.finder is router
        assert router.modules == [module]

    def test_base_module_defaults(self):
        class EmptyModule(PolicyFinderModule):
            @property
            def capabilities(self):
                return FinderCapabilities()

        module = EmptyModule()
        assert module.supports_context_resolution() is False
        assert module.supports_reference_resolution() is False
        assert module.find_policy({}).is_no_match
        assert module.find_policy_by_reference("urn:x", PolicyKind.POLICY).is_no_match

    def test_context_requests_skip_unsupported_modules(self):
        reference_only = ReferenceOnlyModule([])
        updatable = UpdatablePolicyFinderModule()
        updatable.add_policy(matching("urn:a"))
        router = PolicyFinder([reference_only, updatable])

        result = router.find_policy({})

        assert result.policy.policy_id == "urn:a"
        assert reference_only.context_calls == 0


class TestPolicyFinderRouting:
    """Tests for routing context and reference lookups."""

    def test_no_modules(self):
        router = PolicyFinder()
        assert router.find_policy({}).is_no_match
        assert router.find_policy_by_reference("urn:x", PolicyKind.POLICY).error_kind is (
            ResolutionErrorKind.UNRESOLVABLE_REFERENCE
        )

    def test_policies_from_two_modules_are_ambiguous(self):
        first, second = UpdatablePolicyFinderModule(), UpdatablePolicyFinderModule()
        first.add_policy(matching("urn:a"))
        second.add_policy(matching("urn:b"))
        router = PolicyFinder([first, second])

        result = router.find_policy({})

        assert result.error_kind is ResolutionErrorKind.AMBIGUOUS_SELECTION

    def test_module_error_is_returned(self):
        first, second = UpdatablePolicyFinderModule(), UpdatablePolicyFinderModule()
        first.add_policy(matching("urn:a"))
        second.add_policy(indeterminate("urn:b", "bad target"))
        router = PolicyFinder([first, second])

        result = router.find_policy({})

        assert result.error_kind is ResolutionErrorKind.INDETERMINATE_MATCH
        assert result.status.message == "bad target"

    def test_combined_result_passes_through(self):
        module = UpdatablePolicyFinderModule()
        module.add_policy(matching("urn:a"))
        module.add_policy(matching("urn:b"))

        result = PolicyFinder([module]).find_policy({})

        assert result.outcome is ResolutionOutcome.COMBINED_POLICY

    def test_first_module_resolving_reference_wins(self):
        shadowed = matching("urn:p")
        winner = matching("urn:p")
        updatable = UpdatablePolicyFinderModule()
        updatable.add_policy(winner)
        router = PolicyFinder([updatable, ReferenceOnlyModule([shadowed])])

        result = router.find_policy_by_reference("urn:p", PolicyKind.POLICY)

        assert result.policy is winner

    def test_reference_falls_through_to_next_module(self):
        policy_set = matching("urn:s", kind=PolicyKind.POLICY_SET)
        router = PolicyFinder([UpdatablePolicyFinderModule(), ReferenceOnlyModule([policy_set])])

        result = router.find_policy_by_reference("urn:s", PolicyKind.POLICY_SET)

        assert result.policy is policy_set

    def test_unresolved_reference_names_identifier(self):
        router = PolicyFinder([UpdatablePolicyFinderModule()])
        result = router.find_policy_by_reference("urn:gone", PolicyKind.POLICY)
        assert result.error_kind is ResolutionErrorKind.UNRESOLVABLE_REFERENCE
        assert "urn:gone" in result.status.message
