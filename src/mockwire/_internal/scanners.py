from __future__ import annotations

import logging
from typing import Any

from mockwire._internal.candidates import Candidate
from mockwire._internal.fields import FieldInitializer, FieldRef, class_levels, declared_fields
from mockwire.doubles import DoubleFactory, is_test_double, mock_name_of
from mockwire.exceptions import MockwireInvalidMarkerError
from mockwire.markers import CaptorMarker, InjectMocksMarker, MockMarker, SpyMarker

logger = logging.getLogger(__name__)

_DOUBLE_MARKERS: tuple[type[Any], ...] = (MockMarker, SpyMarker, CaptorMarker)


def validate_markers(field: FieldRef) -> None:
    """Reject marker combinations that have no meaning on one field."""
    double_markers = [
        type(marker).__name__ for marker in field.markers if isinstance(marker, _DOUBLE_MARKERS)
    ]
    if len(double_markers) > 1:
        msg = (
            f"Field '{field.qualified_name}' combines {', '.join(double_markers)}. "
            "Use a single test double marker per field."
        )
        raise MockwireInvalidMarkerError(msg)
    if field.has_marker(InjectMocksMarker) and (
        field.has_marker(MockMarker) or field.has_marker(CaptorMarker)
    ):
        msg = (
            f"Field '{field.qualified_name}' combines InjectMocks with a mock or captor marker. "
            "InjectMocks can only be combined with Spy."
        )
        raise MockwireInvalidMarkerError(msg)


class InjectMocksScanner:
    """Find the ``InjectMocks`` fields declared on one class level."""

    def __init__(self, level: type[Any]) -> None:
        self._level = level

    def scan(self) -> tuple[FieldRef, ...]:
        fields: list[FieldRef] = []
        for field in declared_fields(self._level):
            if not field.has_marker(InjectMocksMarker):
                continue
            validate_markers(field)
            fields.append(field)
        return tuple(fields)


class CandidateScanner:
    """Collect the test doubles held by fixture fields of one class level.

    A field contributes a candidate when it is marked ``Mock``/``Spy`` or when
    its current value already is a ``unittest.mock`` double. ``InjectMocks``
    fields never contribute.
    """

    def __init__(self, fixture: object, level: type[Any]) -> None:
        self._fixture = fixture
        self._level = level

    def scan(self) -> tuple[Candidate, ...]:
        candidates: list[Candidate] = []
        for field in declared_fields(self._level):
            if field.has_marker(InjectMocksMarker):
                continue
            value = field.read(self._fixture)
            if value is None:
                continue
            if field.has_marker(MockMarker) or field.has_marker(SpyMarker) or is_test_double(value):
                candidates.append(Candidate(instance=value, name=mock_name_of(value) or field.name))
        return tuple(candidates)


class IndependentMarkerProcessor:
    """Create the mocks, spies and captors declared on one fixture class level.

    Fields are (re)assigned on every call. ``Spy`` fields spy on their current
    value, or on a default-constructed instance when unset; a value that already
    is a test double is reset instead. ``Spy`` fields that also carry
    ``InjectMocks`` are left to the post-injection spy handler.
    """

    def __init__(self, double_factory: DoubleFactory) -> None:
        self._double_factory = double_factory

    def process(self, level: type[Any], fixture: object) -> None:
        for field in declared_fields(level):
            if not field.markers:
                continue
            validate_markers(field)
            mock_marker = field.get_marker(MockMarker)
            captor_marker = field.get_marker(CaptorMarker)
            if mock_marker is not None:
                mock_name = mock_marker.name or field.name
                field.write(fixture, self._double_factory.mock(field.declared_type, name=mock_name))
                logger.debug("Created mock for %s", field.qualified_name)
            elif captor_marker is not None:
                field.write(fixture, self._double_factory.captor(captor_marker.captured_type))
                logger.debug("Created captor for %s", field.qualified_name)
            elif field.has_marker(SpyMarker) and not field.has_marker(InjectMocksMarker):
                self._process_spy(field, fixture)

    def _process_spy(self, field: FieldRef, fixture: object) -> None:
        instance = FieldInitializer(fixture, field).initialize().instance
        if is_test_double(instance):
            instance.reset_mock()  # type: ignore[attr-defined]
            return
        field.write(fixture, self._double_factory.spy(instance, name=field.name))
        logger.debug("Created spy for %s", field.qualified_name)


def has_marked_fields(cls: type[Any]) -> bool:
    """Return true when any class level of cls declares a field with mockwire markers."""
    return any(
        field.markers for level in class_levels(cls) for field in declared_fields(level)
    )


__all__ = [
    "CandidateScanner",
    "IndependentMarkerProcessor",
    "InjectMocksScanner",
    "has_marked_fields",
    "validate_markers",
]
