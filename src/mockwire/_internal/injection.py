from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from mockwire._internal.candidates import Candidate, CandidatePool
from mockwire._internal.fields import FieldRef
from mockwire._internal.strategies import (
    ConstructorInjection,
    InjectionStrategy,
    PostInjectionHandler,
    PropertyAndFieldInjection,
    SpyOnInjectedFieldsHandler,
)
from mockwire.doubles import DoubleFactory
from mockwire.proxies import ProxyUnwrapper

if TYPE_CHECKING:
    from typing_extensions import Self


class OngoingMockInjection:
    """Configure and run the injection strategies for a set of ``InjectMocks`` fields.

    Strategies run in the order they were added and the first one that handles
    a field stops the chain for that field. Post-injection handlers always run
    afterwards, told whether the field was handled. All fields share one
    candidate pool, so a test double is injected at most once per run.

    Examples:
        .. code-block:: python

            (
                OngoingMockInjection(fields, fixture)
                .with_mocks(candidates)
                .try_constructor_injection()
                .try_property_or_field_injection(proxy_unwrapper=unwrapper)
                .handle_spy_annotation(double_factory=factory)
                .apply()
            )

    """

    def __init__(self, fields: Iterable[FieldRef], field_owner: object) -> None:
        self._fields = tuple(fields)
        self._field_owner = field_owner
        self._pool = CandidatePool()
        self._strategies: list[InjectionStrategy] = []
        self._post_injection_handlers: list[PostInjectionHandler] = []

    def with_mocks(self, candidates: Iterable[Candidate]) -> Self:
        self._pool.add_all(candidates)
        return self

    def try_constructor_injection(self) -> Self:
        return self.then_try(ConstructorInjection())

    def try_property_or_field_injection(self, *, proxy_unwrapper: ProxyUnwrapper) -> Self:
        return self.then_try(PropertyAndFieldInjection(proxy_unwrapper=proxy_unwrapper))

    def then_try(self, strategy: InjectionStrategy) -> Self:
        """Append a strategy tried after the ones already configured."""
        self._strategies.append(strategy)
        return self

    def handle_spy_annotation(self, *, double_factory: DoubleFactory) -> Self:
        self._post_injection_handlers.append(SpyOnInjectedFieldsHandler(double_factory))
        return self

    def apply(self) -> None:
        for field in self._fields:
            injected = any(
                strategy.process_injection(field, self._field_owner, self._pool)
                for strategy in self._strategies
            )
            for handler in self._post_injection_handlers:
                handler.handle(field, self._field_owner, self._pool, injected=injected)


__all__ = ["OngoingMockInjection"]
