from __future__ import annotations

from unittest.mock import MagicMock, create_autospec

import pytest

from mockwire.proxies import IdentityUnwrapper, ProxyUnwrapper, WrappedAttributeUnwrapper


class _Target:
    pass


class _WrappingProxy:
    def __init__(self, wrapped: object) -> None:
        self.__wrapped__ = wrapped


class _HookProxy:
    def __init__(self, target: object) -> None:
        self._target = target
        self.__wrapped__ = "ignored"

    def __mockwire_unwrap__(self) -> object:
        return self._target


def test_identity_unwrapper_returns_instance() -> None:
    target = _Target()

    assert IdentityUnwrapper().unwrap(target) is target


def test_unwrappers_satisfy_protocol() -> None:
    assert isinstance(IdentityUnwrapper(), ProxyUnwrapper)
    assert isinstance(WrappedAttributeUnwrapper(), ProxyUnwrapper)


def test_follows_wrapped_chain_to_innermost_object() -> None:
    target = _Target()
    proxy = _WrappingProxy(_WrappingProxy(target))

    assert WrappedAttributeUnwrapper().unwrap(proxy) is target


def test_unwrap_hook_takes_precedence_over_wrapped_attribute() -> None:
    target = _Target()

    assert WrappedAttributeUnwrapper().unwrap(_HookProxy(target)) is target


def test_plain_objects_are_returned_unchanged() -> None:
    target = _Target()

    assert WrappedAttributeUnwrapper().unwrap(target) is target


def test_none_wrapped_target_stops_unwrapping() -> None:
    proxy = _WrappingProxy(None)

    assert WrappedAttributeUnwrapper().unwrap(proxy) is proxy


def test_wrapped_cycle_raises_value_error() -> None:
    first = _WrappingProxy(None)
    second = _WrappingProxy(first)
    first.__wrapped__ = second

    with pytest.raises(ValueError, match="Cycle detected"):
        WrappedAttributeUnwrapper().unwrap(first)


def test_spy_is_unwrapped_to_the_object_it_wraps() -> None:
    target = _Target()
    spy = MagicMock(spec=target, wraps=target)

    assert WrappedAttributeUnwrapper().unwrap(spy) is target


def test_mock_without_wrapped_object_is_returned_unchanged() -> None:
    mock = create_autospec(_Target, instance=True)

    assert WrappedAttributeUnwrapper().unwrap(mock) is mock
