from mockwire.captors import ArgumentCaptor
from mockwire.doubles import DoubleFactory, UnittestDoubleFactory
from mockwire.engine import InjectionMode, MockInjectionEngine, init_mocks
from mockwire.exceptions import (
    MockwireAmbiguousInjectionError,
    MockwireError,
    MockwireFieldInitializationError,
    MockwireInvalidArgumentError,
    MockwireInvalidMarkerError,
)
from mockwire.markers import Captor, InjectMocks, Mock, Spy
from mockwire.proxies import IdentityUnwrapper, ProxyUnwrapper, WrappedAttributeUnwrapper

__all__ = [
    "ArgumentCaptor",
    "Captor",
    "DoubleFactory",
    "IdentityUnwrapper",
    "InjectMocks",
    "InjectionMode",
    "Mock",
    "MockInjectionEngine",
    "MockwireAmbiguousInjectionError",
    "MockwireError",
    "MockwireFieldInitializationError",
    "MockwireInvalidArgumentError",
    "MockwireInvalidMarkerError",
    "ProxyUnwrapper",
    "Spy",
    "UnittestDoubleFactory",
    "WrappedAttributeUnwrapper",
    "init_mocks",
]
