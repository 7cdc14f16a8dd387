from __future__ import annotations

from typing import Any


class MockwireError(Exception):
    """Represent a base class for all mockwire-specific failures.

    Catch this type when you want to handle any mockwire error path without
    matching each concrete exception class individually.
    """


class MockwireInvalidArgumentError(MockwireError):
    """Signal an invalid argument passed to a public entry point.

    Raised by ``init_mocks`` and ``MockInjectionEngine.process`` when the test
    fixture is ``None``.

    Typical fix is passing the test instance itself (usually ``self``).
    """


class MockwireInvalidMarkerError(MockwireError):
    """Signal an unsupported combination of markers on one field.

    Raised while scanning a class level when a field combines ``InjectMocks``
    with ``Mock`` or ``Captor``, or declares more than one of ``Mock``, ``Spy``
    and ``Captor``.

    Typical fix is keeping a single test double marker per field. ``InjectMocks``
    may only be combined with ``Spy``.
    """


class MockwireFieldInitializationError(MockwireError):
    """Signal that an ``InjectMocks`` field could not be given an instance.

    Raised when the field holds no value and its declared type cannot be
    default-constructed (abstract class, required constructor parameters), or
    when the constructor itself raised. In the latter case ``cause`` is the
    exact exception raised by the constructor.

    Typical fixes include assigning the field an instance before injection,
    giving the type a constructor without required parameters, or fixing the
    constructor failure reported as the cause.
    """

    def __init__(
        self,
        msg: str,
        *,
        field_name: str,
        owner: type[Any],
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(msg)
        self.field_name = field_name
        self.owner = owner
        self.cause = cause


class MockwireAmbiguousInjectionError(MockwireError):
    """Signal that more than one test double fits a field.

    Raised by the field injection strategy when several candidates remain
    after type and name filtering. mockwire never picks one silently.

    Typical fixes include naming the mock after the target field
    (``Mock[Repository]`` on a fixture attribute with the same name, or
    ``MagicMock(spec=Repository, name="repository")``), or narrowing the type
    of one of the competing doubles.
    """

    def __init__(
        self,
        msg: str,
        *,
        field_name: str,
        owner: type[Any],
        candidate_types: tuple[type[Any], ...],
    ) -> None:
        super().__init__(msg)
        self.field_name = field_name
        self.owner = owner
        self.candidate_types = candidate_types
