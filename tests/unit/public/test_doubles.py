from __future__ import annotations

from typing import Protocol
from unittest.mock import MagicMock, NonCallableMagicMock

import pytest

from mockwire.captors import ArgumentCaptor
from mockwire.doubles import (
    UnittestDoubleFactory,
    is_test_double,
    mock_name_of,
    wrapped_instance_of,
)


class _Repository:
    def find(self, key: str) -> str:
        return f"real:{key}"


class _Reader(Protocol):
    def read(self) -> str: ...


@pytest.fixture()
def factory() -> UnittestDoubleFactory:
    return UnittestDoubleFactory()


class TestUnittestDoubleFactory:
    def test_mock_is_named_autospec_instance(self, factory: UnittestDoubleFactory) -> None:
        mock = factory.mock(_Repository, name="repository")

        assert isinstance(mock, _Repository)
        assert isinstance(mock, NonCallableMagicMock)
        assert mock_name_of(mock) == "repository"
        mock.find.return_value = "stubbed"
        assert mock.find("key") == "stubbed"

    def test_mock_enforces_method_signatures(self, factory: UnittestDoubleFactory) -> None:
        mock = factory.mock(_Repository, name="repository")

        with pytest.raises(TypeError):
            mock.find()

    def test_mock_of_non_class_annotation_is_plain_magic_mock(
        self,
        factory: UnittestDoubleFactory,
    ) -> None:
        mock = factory.mock("NotAType", name="reader")

        assert isinstance(mock, MagicMock)
        assert mock_name_of(mock) == "reader"

    def test_spec_set_rejects_unknown_attributes(self) -> None:
        mock = UnittestDoubleFactory(spec_set=True).mock(_Repository, name="repository")

        with pytest.raises(AttributeError):
            mock.unknown = 1

    def test_spy_delegates_to_real_instance(self, factory: UnittestDoubleFactory) -> None:
        real = _Repository()

        spy = factory.spy(real, name="repository")

        assert isinstance(spy, _Repository)
        assert spy.find("key") == "real:key"
        spy.find.assert_called_once_with("key")
        assert mock_name_of(spy) == "repository"

    def test_spy_of_protocol_implementation_keeps_runtime_type(
        self,
        factory: UnittestDoubleFactory,
    ) -> None:
        class _FileReader:
            def read(self) -> str:
                return "content"

        reader: _Reader = _FileReader()

        spy = factory.spy(reader, name="reader")

        assert spy.__class__ is _FileReader
        assert spy.read() == "content"

    def test_captor_uses_captured_type(self, factory: UnittestDoubleFactory) -> None:
        captor = factory.captor(str)

        assert isinstance(captor, ArgumentCaptor)
        assert captor.captured_type is str


def test_is_test_double() -> None:
    assert is_test_double(MagicMock())
    assert is_test_double(NonCallableMagicMock(spec=_Repository))
    assert not is_test_double(_Repository())
    assert not is_test_double(None)


def test_mock_name_of_unnamed_or_real_objects() -> None:
    assert mock_name_of(MagicMock()) is None
    assert mock_name_of(_Repository()) is None


def test_wrapped_instance_of_spy_and_other_values(factory: UnittestDoubleFactory) -> None:
    real = _Repository()

    assert wrapped_instance_of(factory.spy(real, name="repository")) is real
    assert wrapped_instance_of(factory.mock(_Repository, name="repository")) is None
    assert wrapped_instance_of(real) is None
