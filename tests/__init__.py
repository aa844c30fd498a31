"""policy-finder test suite."""
