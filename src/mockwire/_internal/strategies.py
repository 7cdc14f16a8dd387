from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from inspect import Parameter
from typing import Any, Protocol, get_type_hints

from mockwire._internal.candidates import Candidate, CandidatePool
from mockwire._internal.fields import (
    FieldInitializer,
    FieldRef,
    class_levels,
    declared_fields,
    sort_supertypes_last,
)
from mockwire._internal.filters import CandidateResolver, ResolutionContext
from mockwire._internal.type_checks import (
    is_instance_of,
    is_runtime_class,
    normalize_declared_type,
)
from mockwire.doubles import DoubleFactory, is_test_double
from mockwire.exceptions import MockwireFieldInitializationError
from mockwire.markers import SpyMarker
from mockwire.proxies import ProxyUnwrapper

logger = logging.getLogger(__name__)


class InjectionStrategy(Protocol):
    """Try to satisfy one ``InjectMocks`` field from the candidate pool."""

    def process_injection(self, field: FieldRef, owner: object, pool: CandidatePool) -> bool:
        """Return true when the field was handled and later strategies must not run."""
        ...


class PostInjectionHandler(Protocol):
    """Run after the injection strategies for one ``InjectMocks`` field."""

    def handle(
        self,
        field: FieldRef,
        owner: object,
        pool: CandidatePool,
        *,
        injected: bool,
    ) -> None: ...


class ConstructorInjection:
    """Build an unset field through its constructor, passing test doubles.

    Applies only when the declared type's constructor takes parameters and
    every parameter type is a distinct class matched by exactly one candidate.
    Parameters with defaults may stay unmatched.
    """

    def process_injection(self, field: FieldRef, owner: object, pool: CandidatePool) -> bool:
        if field.read(owner) is not None:
            return False
        declared_type = field.declared_type
        if not is_runtime_class(declared_type) or inspect.isabstract(declared_type):
            return False

        arguments = self._resolve_arguments(declared_type, pool)
        if arguments is None:
            return False

        args = [
            candidate.instance
            for parameter, candidate in arguments
            if _is_positional(parameter)
        ]
        kwargs = {
            parameter.name: candidate.instance
            for parameter, candidate in arguments
            if not _is_positional(parameter)
        }
        try:
            instance = declared_type(*args, **kwargs)
        except Exception as error:
            msg = (
                f"Cannot instantiate field '{field.name}' of type "
                f"'{declared_type.__qualname__}' through its constructor: "
                f"{type(error).__name__}: {error}"
            )
            raise MockwireFieldInitializationError(
                msg,
                field_name=field.name,
                owner=field.owner,
                cause=error,
            ) from error

        field.write(owner, instance)
        for _, candidate in arguments:
            pool.remove(candidate)
        logger.debug(
            "Constructed %s with %s",
            field.qualified_name,
            ", ".join(repr(candidate) for _, candidate in arguments),
        )
        return True

    def _resolve_arguments(
        self,
        declared_type: type[Any],
        pool: CandidatePool,
    ) -> list[tuple[Parameter, Candidate]] | None:
        try:
            parameters = [
                parameter
                for parameter in inspect.signature(declared_type).parameters.values()
                if parameter.kind not in (Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD)
            ]
        except (TypeError, ValueError):
            return None
        if not parameters:
            return None

        annotations = _constructor_type_hints(declared_type)
        arguments: list[tuple[Parameter, Candidate]] = []
        seen_types: list[Any] = []
        for parameter in parameters:
            required = (
                parameter.default is Parameter.empty or parameter.kind is Parameter.POSITIONAL_ONLY
            )
            annotation = annotations.get(parameter.name, parameter.annotation)
            parameter_type = normalize_declared_type(annotation)
            if (
                annotation is Parameter.empty
                or not is_runtime_class(parameter_type)
                or parameter_type in seen_types
            ):
                if required:
                    return None
                continue
            seen_types.append(parameter_type)

            matches = [
                candidate for candidate in pool if is_instance_of(candidate.instance, parameter_type)
            ]
            if len(matches) != 1 or any(matches[0] is used for _, used in arguments):
                if required:
                    return None
                continue
            arguments.append((parameter, matches[0]))

        return arguments or None


class PropertyAndFieldInjection:
    """Inject test doubles into the fields of an ``InjectMocks`` field's value.

    The value is created with its no-argument constructor when unset and
    unwrapped when it is a proxy. Every class level of the real value is then
    resolved in two passes: type only, then type and name.
    """

    def __init__(
        self,
        *,
        proxy_unwrapper: ProxyUnwrapper,
        resolver: CandidateResolver | None = None,
    ) -> None:
        self._proxy_unwrapper = proxy_unwrapper
        self._resolver = resolver or CandidateResolver()

    def process_injection(self, field: FieldRef, owner: object, pool: CandidatePool) -> bool:
        report = FieldInitializer(owner, field).initialize()
        injectee = self._unwrap(report.instance, field)

        injection_occurred = False
        for level in class_levels(type(injectee)):
            injection_occurred |= self._inject_level(level, injectee, pool)
        return injection_occurred

    def _unwrap(self, instance: object, field: FieldRef) -> object:
        try:
            return self._proxy_unwrapper.unwrap(instance)
        except Exception:  # noqa: BLE001
            logger.warning(
                "Could not unwrap the value of %s, injecting into %r instead",
                field.qualified_name,
                instance,
                exc_info=True,
            )
            return instance

    def _inject_level(self, level: type[Any], injectee: object, pool: CandidatePool) -> bool:
        pending = sort_supertypes_last(declared_fields(level))
        injection_occurred = self._inject_fields(pending, injectee, pool, name_matching=False)
        injection_occurred |= self._inject_fields(pending, injectee, pool, name_matching=True)
        return injection_occurred

    def _inject_fields(
        self,
        pending: list[FieldRef],
        injectee: object,
        pool: CandidatePool,
        *,
        name_matching: bool,
    ) -> bool:
        injection_occurred = False
        for field in list(pending):
            if not pool:
                break
            context = ResolutionContext(
                field=field,
                remaining_fields=tuple(pending),
                name_matching=name_matching,
            )
            candidate = self._resolver.resolve(pool, context)
            if candidate is None:
                continue
            field.write(injectee, candidate.instance)
            pool.remove(candidate)
            pending.remove(field)
            injection_occurred = True
            logger.debug("Injected %r into %s", candidate, field.qualified_name)
        return injection_occurred


class SpyOnInjectedFieldsHandler:
    """Turn ``InjectMocks`` + ``Spy`` fields into spies once they are injected.

    A value that already is a test double is reset instead of wrapped again.
    """

    def __init__(self, double_factory: DoubleFactory) -> None:
        self._double_factory = double_factory

    def handle(
        self,
        field: FieldRef,
        owner: object,
        pool: CandidatePool,
        *,
        injected: bool,
    ) -> None:
        if not injected or not field.has_marker(SpyMarker):
            return
        instance = field.read(owner)
        if instance is None:
            return
        if is_test_double(instance):
            instance.reset_mock()  # type: ignore[attr-defined]
            return
        field.write(owner, self._double_factory.spy(instance, name=field.name))
        logger.debug("Wrapped %s in a spy", field.qualified_name)


def _constructor_type_hints(declared_type: type[Any]) -> dict[str, Any]:
    init: Callable[..., Any] = declared_type.__init__  # type: ignore[misc]
    try:
        return get_type_hints(init)
    except (AttributeError, NameError, TypeError):
        return {
            name: annotation
            for name, annotation in getattr(init, "__annotations__", {}).items()
            if not isinstance(annotation, str)
        }


def _is_positional(parameter: Parameter) -> bool:
    return parameter.kind is Parameter.POSITIONAL_ONLY


__all__ = [
    "ConstructorInjection",
    "InjectionStrategy",
    "PostInjectionHandler",
    "PropertyAndFieldInjection",
    "SpyOnInjectedFieldsHandler",
]
