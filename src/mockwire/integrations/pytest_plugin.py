from __future__ import annotations

from typing import Any, cast

import pytest

from mockwire._internal.scanners import has_marked_fields
from mockwire.engine import MockInjectionEngine


@pytest.fixture()
def mockwire_engine() -> MockInjectionEngine:
    """Create the engine used to prepare class-based tests.

    Override this fixture to customize test double creation or injection, for
    example with a custom ``proxy_unwrapper``.

    Returns:
        A new ``MockInjectionEngine`` instance.

    """
    return MockInjectionEngine()


@pytest.fixture(autouse=True)
def _mockwire_init_mocks(
    request: pytest.FixtureRequest,
    mockwire_engine: MockInjectionEngine,
) -> None:
    """Run ``init_mocks`` on the test instance of class-based tests.

    Test classes without mockwire markers are left untouched. The fixture runs
    before ``setup_method`` so test doubles can be stubbed there.
    """
    instance = cast("Any", request).instance
    if instance is None or not has_marked_fields(type(instance)):
        return
    mockwire_engine.process(instance)
