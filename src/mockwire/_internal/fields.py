from __future__ import annotations

import inspect
import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, NoReturn

from mockwire._internal.type_checks import (
    is_class_var_annotation,
    is_final_annotation,
    is_runtime_class,
    is_strict_supertype,
    normalize_declared_type,
)
from mockwire.exceptions import MockwireFieldInitializationError
from mockwire.markers import annotation_markers

logger = logging.getLogger(__name__)

_STRING_FINAL_OR_STATIC_PATTERN = re.compile(r"^(?:typing\.|t\.)?(?:Final|ClassVar)(?:\[|$)")


@dataclass(frozen=True, slots=True, eq=False)
class FieldRef:
    """Annotated attribute declared in one class body.

    Instances compare by identity so a field can be removed from a pending list
    without touching equal-looking fields from other class levels.
    """

    owner: type[Any]
    name: str
    annotation: Any
    declared_type: Any
    markers: tuple[object, ...]

    def has_marker(self, marker_type: type[Any]) -> bool:
        return any(isinstance(marker, marker_type) for marker in self.markers)

    def get_marker(self, marker_type: type[Any]) -> Any | None:
        return next((marker for marker in self.markers if isinstance(marker, marker_type)), None)

    def read(self, instance: object) -> Any | None:
        """Return the current value, ``None`` when the attribute is unset."""
        return getattr(instance, self.name, None)

    def write(self, instance: object, value: object) -> None:
        """Assign through ``setattr`` so property setters and slots are honored."""
        setattr(instance, self.name, value)

    @property
    def qualified_name(self) -> str:
        return f"{self.owner.__qualname__}.{self.name}"

    def __repr__(self) -> str:
        return f"FieldRef({self.qualified_name}: {self.declared_type!r})"


@dataclass(frozen=True, slots=True)
class FieldValueReport:
    """Outcome of ensuring an injectable field holds an instance."""

    instance: object
    field_class: type[Any]
    was_initialized: bool


def class_levels(cls: type[Any]) -> tuple[type[Any], ...]:
    """Return the ordered class levels of cls, most derived first, without ``object``."""
    return tuple(level for level in cls.__mro__ if level is not object)


def declared_fields(cls: type[Any]) -> tuple[FieldRef, ...]:
    """Return injectable fields annotated in the body of cls itself.

    Inherited annotations are not included; every class level contributes its
    own fields. ``Final`` and ``ClassVar`` annotations are skipped without
    reading the attribute.

    Args:
        cls: Class level whose own annotations are inspected.

    """
    raw_annotations = inspect.get_annotations(cls)
    if not raw_annotations:
        return ()
    try:
        annotations = inspect.get_annotations(cls, eval_str=True)
    except (AttributeError, NameError, SyntaxError, TypeError) as error:
        logger.debug(
            "Could not evaluate annotations of %s, using raw annotations: %s",
            cls.__qualname__,
            error,
        )
        annotations = raw_annotations

    fields: list[FieldRef] = []
    for name, annotation in annotations.items():
        if _is_final_or_static(annotation):
            continue
        fields.append(
            FieldRef(
                owner=cls,
                name=name,
                annotation=annotation,
                declared_type=normalize_declared_type(annotation),
                markers=annotation_markers(annotation),
            ),
        )
    return tuple(fields)


def sort_supertypes_last(fields: Iterable[FieldRef]) -> list[FieldRef]:
    """Order fields so that a field comes after every field of a narrower type.

    Declaration order is kept between unrelated types.
    """
    ordered = list(fields)
    index = 0
    while index < len(ordered) - 1:
        field = ordered[index]
        new_position = index
        for position in range(index + 1, len(ordered)):
            if is_strict_supertype(field.declared_type, ordered[position].declared_type):
                new_position = position
        if new_position == index:
            index += 1
            continue
        del ordered[index]
        ordered.insert(new_position, field)
    return ordered


class FieldInitializer:
    """Make sure an injectable field holds an instance.

    A pre-existing value is reported as is. An unset field is given a fresh
    instance of its declared type built with the no-argument constructor.
    """

    def __init__(self, owner: object, field: FieldRef) -> None:
        self._owner = owner
        self._field = field

    def initialize(self) -> FieldValueReport:
        current = self._field.read(self._owner)
        if current is not None:
            return FieldValueReport(
                instance=current,
                field_class=type(current),
                was_initialized=False,
            )

        instance = self._instantiate()
        self._field.write(self._owner, instance)
        return FieldValueReport(
            instance=instance,
            field_class=type(instance),
            was_initialized=True,
        )

    def _instantiate(self) -> object:
        declared_type = self._field.declared_type
        if not is_runtime_class(declared_type):
            self._raise(f"its declared type {declared_type!r} is not a class")
        if inspect.isabstract(declared_type):
            self._raise(f"'{declared_type.__qualname__}' is abstract")

        try:
            signature = inspect.signature(declared_type)
        except (TypeError, ValueError):
            signature = None
        if signature is not None:
            try:
                signature.bind()
            except TypeError:
                self._raise(
                    f"'{declared_type.__qualname__}{signature}' cannot be called without arguments",
                )

        try:
            return declared_type()
        except Exception as error:
            msg = (
                f"Cannot instantiate field '{self._field.name}' of type "
                f"'{declared_type.__qualname__}': the constructor raised "
                f"{type(error).__name__}: {error}"
            )
            raise MockwireFieldInitializationError(
                msg,
                field_name=self._field.name,
                owner=self._field.owner,
                cause=error,
            ) from error

    def _raise(self, reason: str) -> NoReturn:
        msg = (
            f"Cannot instantiate field '{self._field.name}' declared on "
            f"'{self._field.owner.__qualname__}': {reason}. Assign an instance before "
            "injection or provide a constructor without required parameters."
        )
        raise MockwireFieldInitializationError(
            msg,
            field_name=self._field.name,
            owner=self._field.owner,
        )


def _is_final_or_static(annotation: Any) -> bool:
    if isinstance(annotation, str):
        return _STRING_FINAL_OR_STATIC_PATTERN.match(annotation) is not None
    return is_final_annotation(annotation) or is_class_var_annotation(annotation)


__all__ = [
    "FieldInitializer",
    "FieldRef",
    "FieldValueReport",
    "class_levels",
    "declared_fields",
    "sort_supertypes_last",
]
