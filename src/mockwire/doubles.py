from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol
from unittest.mock import MagicMock, NonCallableMock, create_autospec

from mockwire._internal.type_checks import is_runtime_class
from mockwire.captors import ArgumentCaptor


class DoubleFactory(Protocol):
    """Create the test doubles assigned to marked fixture fields."""

    def mock(self, spec_type: Any, *, name: str) -> Any: ...

    def spy(self, instance: object, *, name: str) -> Any: ...

    def captor(self, captured_type: Any) -> ArgumentCaptor[Any]: ...


@dataclass(frozen=True, slots=True)
class UnittestDoubleFactory:
    """Build test doubles with ``unittest.mock``.

    Mocks are autospecced instances of the declared type, so they pass
    ``isinstance`` checks against it. Spies are ``MagicMock`` objects spec'd on
    the real instance and wrapping it, so calls reach the real object and are
    still recorded.
    """

    spec_set: bool = False

    def mock(self, spec_type: Any, *, name: str) -> Any:
        if not is_runtime_class(spec_type):
            return MagicMock(name=name)
        return create_autospec(spec_type, spec_set=self.spec_set, instance=True, name=name)

    def spy(self, instance: object, *, name: str) -> Any:
        return MagicMock(spec=instance, wraps=instance, name=name)

    def captor(self, captured_type: Any) -> ArgumentCaptor[Any]:
        return ArgumentCaptor(captured_type)


def is_test_double(value: object) -> bool:
    """Return true for any ``unittest.mock`` double (mocks, autospecs, spies)."""
    return isinstance(value, NonCallableMock)


def wrapped_instance_of(value: object) -> object | None:
    """Return the real object a spy delegates to, ``None`` for other values."""
    if not is_test_double(value):
        return None
    return vars(value).get("_mock_wraps")


def mock_name_of(value: object) -> str | None:
    """Return the name a ``unittest.mock`` double was created with, if any."""
    if not is_test_double(value):
        return None
    name = vars(value).get("_mock_name")
    return name if isinstance(name, str) else None


__all__ = [
    "DoubleFactory",
    "UnittestDoubleFactory",
    "is_test_double",
    "mock_name_of",
    "wrapped_instance_of",
]
