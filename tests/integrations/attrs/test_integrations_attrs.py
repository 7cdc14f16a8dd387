"""Tests for attrs classes as injection targets (runtime annotations, no __future__)."""

from typing import Optional

import attrs

from mockwire import InjectMocks, Mock, init_mocks


class Repository:
    pass


class Clock:
    pass


@attrs.define
class Service:
    repository: Repository
    clock: Clock


@attrs.define
class SlottedHolder:
    repository: Optional[Repository] = None


@attrs.frozen
class FrozenService:
    repository: Repository


class ServiceFixture:
    repository: Mock[Repository]
    clock: Mock[Clock]
    service: InjectMocks[Service]


class HolderFixture:
    repository: Mock[Repository]
    holder: InjectMocks[SlottedHolder]


class FrozenFixture:
    repository: Mock[Repository]
    service: InjectMocks[FrozenService]


def test_attrs_class_is_built_through_its_constructor() -> None:
    fixture = ServiceFixture()

    init_mocks(fixture)

    assert fixture.service.repository is fixture.repository
    assert fixture.service.clock is fixture.clock


def test_existing_slotted_instance_receives_fields() -> None:
    fixture = HolderFixture()
    existing = SlottedHolder()
    fixture.holder = existing

    init_mocks(fixture)

    assert fixture.holder is existing
    assert existing.repository is fixture.repository


def test_frozen_attrs_class_is_built_through_its_constructor() -> None:
    fixture = FrozenFixture()

    init_mocks(fixture)

    assert fixture.service.repository is fixture.repository
