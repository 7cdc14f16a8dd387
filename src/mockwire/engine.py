from __future__ import annotations

import logging
from enum import Flag, auto

from mockwire._internal.candidates import Candidate
from mockwire._internal.fields import FieldRef, class_levels
from mockwire._internal.injection import OngoingMockInjection
from mockwire._internal.scanners import (
    CandidateScanner,
    IndependentMarkerProcessor,
    InjectMocksScanner,
)
from mockwire.doubles import DoubleFactory, UnittestDoubleFactory
from mockwire.exceptions import MockwireInvalidArgumentError
from mockwire.proxies import ProxyUnwrapper, WrappedAttributeUnwrapper

logger = logging.getLogger(__name__)


class InjectionMode(Flag):
    """Select the strategies used for ``InjectMocks`` fields."""

    CONSTRUCTOR = auto()
    """Build unset fields through a constructor taking test doubles."""

    FIELD = auto()
    """Assign test doubles to the annotated fields of the field's value."""

    ALL = CONSTRUCTOR | FIELD
    """Try constructor injection first and fall back to field injection."""


class MockInjectionEngine:
    """Create test doubles on a fixture and inject them into ``InjectMocks`` fields.

    The fixture's class hierarchy is walked from its concrete class up to, but
    excluding, ``object``. Each level's ``Mock``, ``Spy`` and ``Captor`` fields
    are (re)created first. Then the ``InjectMocks`` fields of all levels are
    resolved against the test doubles of all levels in one injection run.
    """

    def __init__(
        self,
        *,
        double_factory: DoubleFactory | None = None,
        proxy_unwrapper: ProxyUnwrapper | None = None,
        injection_modes: InjectionMode = InjectionMode.ALL,
        spy_injected_fields: bool = True,
    ) -> None:
        """Initialize an engine and configure how test doubles are built and injected.

        Args:
            double_factory: Factory creating mocks, spies and captors for marked
                fields. Defaults to ``UnittestDoubleFactory()``.
            proxy_unwrapper: Unwrapper consulted before injecting into a field's
                value. Defaults to ``WrappedAttributeUnwrapper()``.
            injection_modes: Strategies tried for each ``InjectMocks`` field.
            spy_injected_fields: Wrap ``InjectMocks`` fields that also carry
                ``Spy`` in a spy after injection.

        """
        self._double_factory = double_factory or UnittestDoubleFactory()
        self._proxy_unwrapper = proxy_unwrapper or WrappedAttributeUnwrapper()
        self._injection_modes = injection_modes
        self._spy_injected_fields = spy_injected_fields
        self._marker_processor = IndependentMarkerProcessor(self._double_factory)

    def process(self, fixture: object) -> None:
        """Create the fixture's test doubles and inject them.

        Args:
            fixture: Test instance, usually ``self``.

        Raises:
            MockwireInvalidArgumentError: If ``fixture`` is ``None``.
            MockwireInvalidMarkerError: If a field combines unsupported markers.
            MockwireFieldInitializationError: If an ``InjectMocks`` field cannot
                be given an instance.
            MockwireAmbiguousInjectionError: If several test doubles fit one field.

        """
        self._check_fixture(fixture)
        for level in class_levels(type(fixture)):
            self._marker_processor.process(level, fixture)
        self.inject_mocks(fixture)

    def inject_mocks(self, fixture: object) -> None:
        """Inject the test doubles already held by the fixture into its ``InjectMocks`` fields.

        Args:
            fixture: Test instance, usually ``self``.

        """
        self._check_fixture(fixture)
        fields: list[FieldRef] = []
        candidates: list[Candidate] = []
        for level in class_levels(type(fixture)):
            fields.extend(InjectMocksScanner(level).scan())
            candidates.extend(CandidateScanner(fixture, level).scan())
        if not fields:
            return

        logger.debug(
            "Injecting %d test doubles into %d fields of %s",
            len(candidates),
            len(fields),
            type(fixture).__qualname__,
        )
        injection = OngoingMockInjection(fields, fixture).with_mocks(candidates)
        if InjectionMode.CONSTRUCTOR in self._injection_modes:
            injection.try_constructor_injection()
        if InjectionMode.FIELD in self._injection_modes:
            injection.try_property_or_field_injection(proxy_unwrapper=self._proxy_unwrapper)
        if self._spy_injected_fields:
            injection.handle_spy_annotation(double_factory=self._double_factory)
        injection.apply()

    def _check_fixture(self, fixture: object) -> None:
        if fixture is None:
            msg = (
                "The test fixture cannot be None. Pass the test instance, "
                "for example init_mocks(self)."
            )
            raise MockwireInvalidArgumentError(msg)


_DEFAULT_ENGINE = MockInjectionEngine()


def init_mocks(fixture: object) -> None:
    """Create the fixture's mocks, spies and captors and inject them.

    Uses an engine with default settings. Build a ``MockInjectionEngine`` to
    customize test double creation, proxy unwrapping or injection strategies.

    Examples:
        .. code-block:: python

            class TestOrderService:
                repository: Mock[OrderRepository]
                service: InjectMocks[OrderService]

                def setup_method(self) -> None:
                    init_mocks(self)

    Args:
        fixture: Test instance, usually ``self``.

    """
    _DEFAULT_ENGINE.process(fixture)


__all__ = ["InjectionMode", "MockInjectionEngine", "init_mocks"]
