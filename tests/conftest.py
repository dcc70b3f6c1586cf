"""Pytest configuration for all tests."""

from hypothesis import settings

# Each async test case starts its own event loop, so timing varies per case
settings.register_profile("triage", deadline=None, max_examples=100)
settings.load_profile("triage")
