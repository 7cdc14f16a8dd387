"""Shared pytest fixtures for mockwire tests."""

import pytest

from mockwire._internal.candidates import CandidatePool
from mockwire.engine import MockInjectionEngine


@pytest.fixture()
def engine() -> MockInjectionEngine:
    """Engine with default settings."""
    return MockInjectionEngine()


@pytest.fixture()
def pool() -> CandidatePool:
    """Empty candidate pool."""
    return CandidatePool()
