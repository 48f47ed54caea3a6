"""Object test doubles built around an expect-exercise-verify lifecycle.

Create a :class:`Mock` for a class or protocol, configure expectations with
argument matchers, hand ``mock.object`` to the code under test and verify the
interactions afterwards.
"""

from __future__ import annotations

from .calls import ExpectedCall, Invocation, Slot
from .comparators import (
    Any,
    Equals,
    Matcher,
    Out,
    Predicate,
    Range,
    RangeKind,
    Regex,
    create_matcher,
    register_matcher,
    unregister_matcher,
)
from .controller import Mock, MockFactory, MockVerification
from .dispatcher import Dispatcher, LockingDispatcher, MockBehavior
from .errors import (
    CardinalityError,
    ConfigurationError,
    ExpectedNeverError,
    MockError,
    MockVerificationError,
    MoreThanNCallsError,
    MoreThanOneCallError,
    ObjMoxError,
    ReturnValueRequiredError,
    UnexpectedCallError,
    VerificationError,
)
from .events import MockedEvent
from .expectations import Cardinality, Expectation
from .registry import ExpectationRegistry
from .verifiers import Selector, VerificationEngine

__all__ = [
    "Any",
    "Cardinality",
    "CardinalityError",
    "ConfigurationError",
    "Dispatcher",
    "Equals",
    "Expectation",
    "ExpectationRegistry",
    "ExpectedCall",
    "ExpectedNeverError",
    "Invocation",
    "LockingDispatcher",
    "Matcher",
    "Mock",
    "MockBehavior",
    "MockError",
    "MockFactory",
    "MockVerification",
    "MockVerificationError",
    "MockedEvent",
    "MoreThanNCallsError",
    "MoreThanOneCallError",
    "ObjMoxError",
    "Out",
    "Predicate",
    "Range",
    "RangeKind",
    "Regex",
    "ReturnValueRequiredError",
    "Selector",
    "Slot",
    "UnexpectedCallError",
    "VerificationEngine",
    "VerificationError",
    "create_matcher",
    "register_matcher",
    "unregister_matcher",
]
