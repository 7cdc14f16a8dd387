from typing import TYPE_CHECKING, Annotated, Any, NamedTuple, TypeVar, Union, get_args, get_origin

from mockwire.captors import ArgumentCaptor

T = TypeVar("T")
_ANNOTATED_MARKER_MIN_ARGS = 2


class MockMarker(NamedTuple):
    """Marker for fields that receive a fresh mock before injection.

    ``name`` overrides the mock name used for name-based candidate matching.
    When omitted the mock is named after the field.
    """

    name: str | None = None


class SpyMarker:
    """Marker for fields whose value is wrapped in a spy before injection."""

    def __repr__(self) -> str:
        return "SpyMarker()"


class CaptorMarker(NamedTuple):
    """Marker for fields that receive a fresh ``ArgumentCaptor``."""

    captured_type: Any


class InjectMocksMarker:
    """Marker for fields that receive test doubles into their own fields."""

    def __repr__(self) -> str:
        return "InjectMocksMarker()"


MARKER_TYPES: tuple[type[Any], ...] = (MockMarker, SpyMarker, CaptorMarker, InjectMocksMarker)

if TYPE_CHECKING:
    Mock = Union[T, T]  # noqa: UP007,PYI016
    """Mark a fixture field that receives a fresh mock of ``T``.

    At runtime ``Mock[T]`` becomes ``Annotated[T, MockMarker()]``.

    Examples:
        .. code-block:: python

            class TestService:
                repository: Mock[Repository]
                service: InjectMocks[Service]
    """

    Spy = Union[T, T]  # noqa: UP007,PYI016
    """Mark a fixture field whose instance is wrapped in a spy.

    At runtime ``Spy[T]`` becomes ``Annotated[T, SpyMarker()]``.
    """

    Captor = ArgumentCaptor[T]
    """Mark a fixture field that receives a fresh ``ArgumentCaptor`` for ``T``."""

    InjectMocks = Union[T, T]  # noqa: UP007,PYI016
    """Mark a fixture field whose instance receives the fixture's test doubles.

    At runtime ``InjectMocks[T]`` becomes ``Annotated[T, InjectMocksMarker()]``.
    """

else:

    class Mock:
        """Mark a fixture field that receives a fresh mock of ``T``.

        At runtime ``Mock[T]`` resolves to ``Annotated[T, MockMarker()]``.

        Examples:
            .. code-block:: python

                class TestService:
                    repository: Mock[Repository]
                    service: InjectMocks[Service]

        """

        def __class_getitem__(cls, item: T) -> Annotated[T, MockMarker]:
            return _append_marker(item, MockMarker())

    class Spy:
        """Mark a fixture field whose instance is wrapped in a spy.

        At runtime ``Spy[T]`` resolves to ``Annotated[T, SpyMarker()]``. Combine
        with ``InjectMocks`` to spy on an instance after its fields are injected.
        """

        def __class_getitem__(cls, item: T) -> Annotated[T, SpyMarker]:
            return _append_marker(item, SpyMarker())

    class Captor:
        """Mark a fixture field that receives a fresh ``ArgumentCaptor``.

        At runtime ``Captor[T]`` resolves to
        ``Annotated[ArgumentCaptor, CaptorMarker(captured_type=T)]``.
        """

        def __class_getitem__(cls, item: Any) -> Any:
            return build_annotated_key((ArgumentCaptor, CaptorMarker(captured_type=item)))

    class InjectMocks:
        """Mark a fixture field whose instance receives the fixture's test doubles.

        At runtime ``InjectMocks[T]`` resolves to ``Annotated[T, InjectMocksMarker()]``.
        """

        def __class_getitem__(cls, item: T) -> Annotated[T, InjectMocksMarker]:
            return _append_marker(item, InjectMocksMarker())


def annotation_markers(annotation: Any) -> tuple[object, ...]:
    """Return mockwire markers attached to an ``Annotated[...]`` annotation."""
    if get_origin(annotation) is not Annotated:
        return ()
    annotation_args = get_args(annotation)
    if len(annotation_args) < _ANNOTATED_MARKER_MIN_ARGS:
        return ()
    return tuple(item for item in annotation_args[1:] if isinstance(item, MARKER_TYPES))


def build_annotated_key(params: tuple[object, ...]) -> Any:
    """Return Annotated[...] with a pre-built params tuple (Py 3.10+ compatible)."""
    try:
        return Annotated.__class_getitem__(params)  # type: ignore[attr-defined]
    except AttributeError:
        return Annotated.__getitem__(params)  # type: ignore[attr-defined]


def _append_marker(item: Any, marker: object) -> Any:
    if get_origin(item) is Annotated:
        args = get_args(item)
        return build_annotated_key((args[0], *args[1:], marker))
    return build_annotated_key((item, marker))


__all__ = [
    "Captor",
    "CaptorMarker",
    "InjectMocks",
    "InjectMocksMarker",
    "Mock",
    "MockMarker",
    "Spy",
    "SpyMarker",
    "annotation_markers",
    "build_annotated_key",
]
