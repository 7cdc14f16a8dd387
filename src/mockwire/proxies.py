from __future__ import annotations

from typing import Protocol, runtime_checkable

from mockwire.doubles import is_test_double, wrapped_instance_of

_MISSING = object()
UNWRAP_HOOK = "__mockwire_unwrap__"


@runtime_checkable
class ProxyUnwrapper(Protocol):
    """Recover the real object behind a proxy or decorator.

    Implementations may raise; the field injection strategy logs the failure
    and keeps injecting into the original object.
    """

    def unwrap(self, instance: object) -> object: ...


class IdentityUnwrapper:
    """Unwrapper that treats every object as the real one."""

    def unwrap(self, instance: object) -> object:
        return instance


class WrappedAttributeUnwrapper:
    """Follow spies, ``__mockwire_unwrap__()`` hooks and ``__wrapped__`` attributes.

    A ``unittest.mock`` spy is replaced by the object it wraps, so a field that
    already holds a spy is injected through it. An object defining
    ``__mockwire_unwrap__`` on its class is asked for its target first.
    Otherwise ``__wrapped__`` is followed, the convention used by
    ``functools.wraps`` and ``wrapt.ObjectProxy``. Objects exposing neither are
    returned unchanged.
    """

    def unwrap(self, instance: object) -> object:
        seen = {id(instance)}
        current = instance
        while True:
            target = self._target_of(current)
            if target is _MISSING or target is None:
                return current
            if id(target) in seen:
                msg = f"Cycle detected while unwrapping {instance!r}."
                raise ValueError(msg)
            seen.add(id(target))
            current = target

    def _target_of(self, instance: object) -> object:
        if is_test_double(instance):
            return wrapped_instance_of(instance)
        unwrap_hook = getattr(type(instance), UNWRAP_HOOK, None)
        if unwrap_hook is not None:
            return unwrap_hook(instance)
        return getattr(instance, "__wrapped__", _MISSING)


__all__ = ["IdentityUnwrapper", "ProxyUnwrapper", "WrappedAttributeUnwrapper"]
