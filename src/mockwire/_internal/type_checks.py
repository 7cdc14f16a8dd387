from __future__ import annotations

import types
from typing import (
    Annotated,
    Any,
    ClassVar,
    Final,
    TypeGuard,
    Union,
    get_args,
    get_origin,
)

_NONE_TYPE = type(None)


def is_runtime_class(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when candidate is a runtime class safe for class-only operations.

    Args:
        candidate: Value being checked for eligibility or runtime type constraints.

    """
    return isinstance(candidate, type) and not isinstance(candidate, types.GenericAlias)


def is_final_annotation(annotation: Any) -> bool:
    """Return true for ``Final`` and ``Final[...]``, also inside ``Annotated``."""
    annotation = _strip_annotated(annotation)
    return annotation is Final or get_origin(annotation) is Final


def is_class_var_annotation(annotation: Any) -> bool:
    """Return true for ``ClassVar`` and ``ClassVar[...]``, also inside ``Annotated``."""
    annotation = _strip_annotated(annotation)
    return annotation is ClassVar or get_origin(annotation) is ClassVar


def normalize_declared_type(annotation: Any) -> Any:
    """Reduce a field annotation to the runtime class candidates are checked against.

    ``Annotated`` metadata is dropped, ``Optional[T]``/``T | None`` becomes ``T``
    and generic aliases such as ``list[int]`` become their origin class. Values
    that cannot be reduced to a single class are returned unchanged.

    Args:
        annotation: Resolved field annotation.

    """
    annotation = _strip_annotated(annotation)
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        members = [arg for arg in get_args(annotation) if arg is not _NONE_TYPE]
        if len(members) == 1:
            return normalize_declared_type(members[0])
        return annotation
    if origin is not None and is_runtime_class(origin):
        return origin
    return annotation


def is_instance_of(candidate: object, declared_type: Any) -> bool:
    """Return true when candidate is assignable to declared_type.

    Declared types that are not runtime classes, or that reject ``isinstance``
    checks (non runtime-checkable protocols), match nothing.
    """
    if not is_runtime_class(declared_type):
        return False
    try:
        return isinstance(candidate, declared_type)
    except TypeError:
        return False


def is_strict_supertype(broad: Any, narrow: Any) -> bool:
    """Return true when broad is a proper supertype of narrow."""
    if not is_runtime_class(broad) or not is_runtime_class(narrow) or broad is narrow:
        return False
    try:
        return issubclass(narrow, broad)
    except TypeError:
        return False


def _strip_annotated(annotation: Any) -> Any:
    while get_origin(annotation) is Annotated:
        annotation = get_args(annotation)[0]
    return annotation


__all__ = [
    "is_class_var_annotation",
    "is_final_annotation",
    "is_instance_of",
    "is_runtime_class",
    "is_strict_supertype",
    "normalize_declared_type",
]
