from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar, Final

import pytest

from mockwire._internal.fields import (
    FieldInitializer,
    FieldRef,
    _is_final_or_static,
    class_levels,
    declared_fields,
    sort_supertypes_last,
)
from mockwire.exceptions import MockwireFieldInitializationError
from mockwire.markers import InjectMocks, InjectMocksMarker, Mock, MockMarker


class _Animal:
    pass


class _Dog(_Animal):
    pass


class _Puppy(_Dog):
    pass


class _Parent:
    parent_field: _Animal
    LIMIT: ClassVar[int] = 3


class _Child(_Parent):
    child_field: _Dog
    VERSION: Final[str] = "1"
    optional_field: _Puppy | None = None


class _Marked:
    repository: Mock[_Animal]
    service: InjectMocks[_Dog]


class _Unresolvable:
    missing: UndefinedName  # type: ignore[name-defined]  # noqa: F821


class _NoArgs:
    pass


class _RequiresArgs:
    def __init__(self, value: int) -> None:
        self.value = value


class _Raising:
    error = RuntimeError("constructor failed")

    def __init__(self) -> None:
        raise self.error


class _Abstract(ABC):
    @abstractmethod
    def run(self) -> None: ...


class _Owner:
    plain: _NoArgs
    needs_args: _RequiresArgs
    raising: _Raising
    abstract: _Abstract


def _field(owner: type, name: str) -> FieldRef:
    return next(field for field in declared_fields(owner) if field.name == name)


def test_class_levels_exclude_object_and_start_with_concrete_class() -> None:
    assert class_levels(_Child) == (_Child, _Parent)
    assert class_levels(object) == ()


def test_declared_fields_only_include_own_annotations() -> None:
    child_fields = declared_fields(_Child)

    assert [field.name for field in child_fields] == ["child_field", "optional_field"]
    assert all(field.owner is _Child for field in child_fields)


def test_declared_fields_skip_final_and_class_vars() -> None:
    assert [field.name for field in declared_fields(_Parent)] == ["parent_field"]


def test_declared_fields_normalize_declared_type() -> None:
    assert _field(_Child, "optional_field").declared_type is _Puppy


def test_declared_fields_collect_markers() -> None:
    repository = _field(_Marked, "repository")
    service = _field(_Marked, "service")

    assert repository.declared_type is _Animal
    assert repository.has_marker(MockMarker)
    assert not repository.has_marker(InjectMocksMarker)
    assert isinstance(service.get_marker(InjectMocksMarker), InjectMocksMarker)
    assert service.get_marker(MockMarker) is None


def test_declared_fields_fall_back_to_raw_annotations() -> None:
    (field,) = declared_fields(_Unresolvable)

    assert field.annotation == "UndefinedName"
    assert field.declared_type == "UndefinedName"
    assert field.markers == ()


@pytest.mark.parametrize(
    ("annotation", "expected"),
    [
        ("Final[int]", True),
        ("typing.ClassVar[int]", True),
        ("ClassVar", True),
        ("FinalReport", False),
        ("Repository", False),
    ],
)
def test_string_final_or_static_detection(annotation: str, expected: bool) -> None:
    assert _is_final_or_static(annotation) is expected


def test_field_refs_compare_by_identity() -> None:
    first = declared_fields(_Child)
    second = declared_fields(_Child)

    assert first[0] is not second[0]
    assert first[0] != second[0]
    assert first[0] == first[0]


def test_sort_supertypes_last_moves_broad_types_after_narrow_ones() -> None:
    class _Holder:
        animal: _Animal
        dog: _Dog
        other: _NoArgs
        puppy: _Puppy

    # Annotations of a local class resolve in the module namespace.
    fields = declared_fields(_Holder)
    ordered = sort_supertypes_last(fields)

    assert [field.name for field in ordered] == ["other", "puppy", "dog", "animal"]


def test_sort_supertypes_last_keeps_declaration_order_of_unrelated_types() -> None:
    fields = declared_fields(_Owner)

    assert sort_supertypes_last(fields) == list(fields)


def test_field_initializer_reports_existing_value() -> None:
    owner = _Owner()
    existing = _NoArgs()
    owner.plain = existing

    report = FieldInitializer(owner, _field(_Owner, "plain")).initialize()

    assert report.instance is existing
    assert report.field_class is _NoArgs
    assert report.was_initialized is False


def test_field_initializer_constructs_and_assigns_missing_value() -> None:
    owner = _Owner()

    report = FieldInitializer(owner, _field(_Owner, "plain")).initialize()

    assert isinstance(report.instance, _NoArgs)
    assert owner.plain is report.instance
    assert report.was_initialized is True


def test_field_initializer_reports_constructor_requiring_arguments() -> None:
    owner = _Owner()

    with pytest.raises(MockwireFieldInitializationError) as exc_info:
        FieldInitializer(owner, _field(_Owner, "needs_args")).initialize()

    assert exc_info.value.field_name == "needs_args"
    assert exc_info.value.owner is _Owner
    assert exc_info.value.cause is None
    assert "cannot be called without arguments" in str(exc_info.value)
    assert not hasattr(owner, "needs_args")


def test_field_initializer_reports_original_constructor_exception() -> None:
    owner = _Owner()

    with pytest.raises(MockwireFieldInitializationError) as exc_info:
        FieldInitializer(owner, _field(_Owner, "raising")).initialize()

    assert exc_info.value.cause is _Raising.error
    assert exc_info.value.__cause__ is _Raising.error
    assert "constructor failed" in str(exc_info.value)


def test_field_initializer_rejects_abstract_types() -> None:
    with pytest.raises(MockwireFieldInitializationError, match="is abstract"):
        FieldInitializer(_Owner(), _field(_Owner, "abstract")).initialize()
