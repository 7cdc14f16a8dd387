from __future__ import annotations

from typing import Any, Generic, TypeVar

from mockwire._internal.type_checks import is_runtime_class

T = TypeVar("T")


class ArgumentCaptor(Generic[T]):
    """Capture arguments passed to a test double for later assertions.

    ``capture()`` returns a matcher that compares equal to any value of the
    captured type and records every value it is compared against.

    Examples:
        .. code-block:: python

            captor = ArgumentCaptor(User)
            repository.save.assert_called_once_with(captor.capture())
            assert captor.value.name == "alice"

    """

    def __init__(self, captured_type: Any = object) -> None:
        self.captured_type = captured_type
        self._values: list[T] = []

    def capture(self) -> Any:
        """Return a matcher recording every value it is compared with."""
        return _CapturingMatcher(self)

    @property
    def value(self) -> T:
        """Return the most recently captured value."""
        if not self._values:
            msg = f"No argument value was captured by {self!r}."
            raise AssertionError(msg)
        return self._values[-1]

    @property
    def all_values(self) -> list[T]:
        return list(self._values)

    def accepts(self, value: object) -> bool:
        if not is_runtime_class(self.captured_type):
            return True
        return isinstance(value, self.captured_type)

    def record(self, value: T) -> None:
        self._values.append(value)

    def __repr__(self) -> str:
        type_name = getattr(self.captured_type, "__qualname__", repr(self.captured_type))
        return f"ArgumentCaptor({type_name})"


class _CapturingMatcher:
    __slots__ = ("_captor",)

    def __init__(self, captor: ArgumentCaptor[Any]) -> None:
        self._captor = captor

    def __eq__(self, other: object) -> bool:
        if not self._captor.accepts(other):
            return False
        self._captor.record(other)
        return True

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"<capture {self._captor!r}>"


__all__ = ["ArgumentCaptor"]
