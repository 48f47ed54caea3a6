"""Mock controller and factory implementing the expect-exercise-verify lifecycle."""

from __future__ import annotations

import enum
import functools
import logging
import types  # noqa: TC003
import typing as t
from collections import deque

from .calls import ExpectedCall, Invocation
from .comparators import Any
from .dispatcher import CallTarget, Dispatcher, LockingDispatcher, MockBehavior
from .errors import (
    ArgumentMismatchError,
    MockVerificationError,
    NotPropertyError,
    UnsupportedIntermediateTypeError,
)
from .events import MockedEvent
from .expectations import Expectation
from .members import (
    MEMBERS,
    MemberKind,
    MemberTable,
    is_builtin_type,
    is_interface,
    normalize_arguments,
)
from .proxy import create_proxy, owner_of
from .recorder import Access, MemberChain, record
from .registry import ExpectationRegistry
from .verifiers import CallVerifier, Selector, VerificationEngine, aggregate_failures

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from collections.abc import Callable

    from .members import Member

logger = logging.getLogger(__name__)

_UNSET: t.Final = object()

Expression = t.Callable[[t.Any], object]


class MockVerification(enum.StrEnum):
    """Which expectations a :class:`MockFactory` verifies on exit."""

    NONE = "none"
    VERIFIABLE = "verifiable"
    ALL = "all"


class Mock:
    """Programmable stand-in for ``mocked_type``.

    Configure expectations with :meth:`expect`, :meth:`expect_get` and
    :meth:`expect_set`, hand :attr:`object` to the code under test, then call
    :meth:`verify` or :meth:`verify_all`.
    """

    def __init__(
        self,
        mocked_type: type,
        behavior: MockBehavior = MockBehavior.DEFAULT,
        *,
        args: t.Sequence[t.Any] = (),
        kwargs: t.Mapping[str, t.Any] | None = None,
        thread_safe: bool = False,
        max_journal_entries: int | None = None,
        members: MemberTable | None = None,
    ) -> None:
        """Create a new mock.

        Parameters
        ----------
        mocked_type:
            Class or :class:`typing.Protocol` to stand in for.
        behavior:
            Policy applied to calls without a matching expectation.
        args, kwargs:
            Constructor arguments for class mocks. When omitted the mocked
            type's initialiser is not run.
        thread_safe:
            Serialise dispatch with a lock for stand-ins shared across threads.
        max_journal_entries:
            Maximum number of invocations kept for :meth:`verify_call`. When
            ``None`` the journal is unbounded.
        members:
            Member table used to resolve identities; defaults to the shared
            module table.
        """
        if max_journal_entries is not None and max_journal_entries <= 0:
            msg = "max_journal_entries must be positive"
            raise ValueError(msg)
        self.mocked_type = mocked_type
        self.registry = ExpectationRegistry()
        dispatcher_cls = LockingDispatcher if thread_safe else Dispatcher
        self._dispatcher = dispatcher_cls(self.registry, MockBehavior(behavior))
        self._members = members if members is not None else MEMBERS
        self._engine = VerificationEngine()
        self._inner_mocks: dict[Member, Mock] = {}
        self._thread_safe = thread_safe
        self.journal: deque[Invocation] = deque(maxlen=max_journal_entries)
        self._object = create_proxy(mocked_type, self, args, kwargs)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def object(self) -> t.Any:
        """Return the stand-in handed to code under test."""
        return self._object

    @property
    def behavior(self) -> MockBehavior:
        """Return the behaviour mode applied to unmatched calls."""
        return self._dispatcher.behavior

    @behavior.setter
    def behavior(self, value: MockBehavior) -> None:
        self._dispatcher.behavior = MockBehavior(value)

    @property
    def inner_mocks(self) -> dict[Member, Mock]:
        """Return sub-mocks created for chained property access."""
        return dict(self._inner_mocks)

    @staticmethod
    def get(obj: object) -> Mock:
        """Return the :class:`Mock` that owns the stand-in *obj*."""
        owner = owner_of(obj)
        if not isinstance(owner, Mock):
            msg = "Object instance was not created by obj_mox."
            raise ValueError(msg)
        return owner

    def __repr__(self) -> str:
        """Return a debug representation."""
        return (
            f"Mock({self.mocked_type.__name__}, behavior={self.behavior}, "
            f"expectations={len(self.registry)})"
        )

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------
    def expect(self, expression: Expression) -> Expectation:
        """Configure the method call or property get in *expression*.

        ``mock.expect(lambda m: m.save(Any(Order)))`` configures a method;
        ``mock.expect(lambda m: m.engine.start())`` also creates a sub-mock
        for ``engine``.
        """
        chain = record(expression)
        target = self._materialize(chain)
        last = chain.last
        kind = MemberKind.METHOD if last.called else MemberKind.GETTER
        return target._register(kind, last.name, last.args, dict(last.kwargs))

    def expect_get(self, expression: Expression) -> Expectation:
        """Configure the property read in *expression*."""
        chain = record(expression)
        self._require_property_access(chain)
        target = self._materialize(chain)
        return target._register(MemberKind.GETTER, chain.last.name, (), {})

    def expect_set(
        self, expression: Expression, value: t.Any = _UNSET
    ) -> Expectation:
        """Configure assignments to the property in *expression*.

        Without ``value`` any assigned value matches; otherwise ``value`` (a
        literal or matcher) must match.
        """
        chain = record(expression)
        self._require_property_access(chain)
        target = self._materialize(chain)
        matcher = Any() if value is _UNSET else value
        return target._register(MemberKind.SETTER, chain.last.name, (matcher,), {})

    def stub(self, expression: Expression, initial: t.Any = None) -> None:
        """Make the property in *expression* remember the last assigned value."""
        state = {"value": initial}

        def remember(value: t.Any) -> None:
            state["value"] = value

        self.expect_get(expression).runs(lambda: state["value"])
        self.expect_set(expression).callback(remember)

    def create_event_handler(self, name: str | None = None) -> MockedEvent:
        """Return a new event target that expectations can raise."""
        return MockedEvent(name)

    def _require_property_access(self, chain: MemberChain) -> None:
        if chain.last.called:
            msg = f"Expression is not a property access: {chain.render()}"
            raise NotPropertyError(msg)

    def _register(
        self,
        kind: MemberKind,
        name: str,
        args: t.Sequence[t.Any],
        kwargs: t.Mapping[str, t.Any],
    ) -> Expectation:
        call = self._expected_call(kind, name, args, kwargs)
        return self.registry.register(Expectation(call))

    def _expected_call(
        self,
        kind: MemberKind,
        name: str,
        args: t.Sequence[t.Any],
        kwargs: t.Mapping[str, t.Any],
    ) -> ExpectedCall:
        info = self._members.lookup(self.mocked_type, name, kind)
        try:
            normalized = normalize_arguments(info, args, kwargs)
        except TypeError as exc:
            msg = f"Arguments do not fit {info.member}: {exc}"
            raise ArgumentMismatchError(msg) from exc
        return ExpectedCall.build(info.member, normalized)

    def _materialize(self, chain: MemberChain) -> Mock:
        target = self
        for access in chain.intermediates:
            target = target._inner_mock(access)
        return target

    def _inner_mock(self, access: Access) -> Mock:
        info = self._members.lookup(self.mocked_type, access.name, MemberKind.GETTER)
        existing = self._inner_mocks.get(info.member)
        if existing is not None:
            return existing
        annotation = info.return_annotation
        if (
            not isinstance(annotation, type)
            or is_builtin_type(annotation)
            or getattr(annotation, "__final__", False)
        ):
            msg = (
                f"Unsupported intermediate type {annotation!r} for property "
                f"{self.mocked_type.__name__}.{access.name}; annotate it with a "
                "mockable class"
            )
            raise UnsupportedIntermediateTypeError(msg)
        inner = Mock(
            annotation,
            self.behavior,
            thread_safe=self._thread_safe,
            members=self._members,
        )
        self._inner_mocks[info.member] = inner
        self._register(MemberKind.GETTER, access.name, (), {}).returns(inner.object)
        logger.debug("Created sub-mock for %s", info.member)
        return inner

    # ------------------------------------------------------------------
    # Exercise
    # ------------------------------------------------------------------
    def intercept(
        self,
        instance: object,
        name: str,
        kind: MemberKind,
        args: tuple[t.Any, ...],
        kwargs: dict[str, t.Any],
    ) -> t.Any:
        """Dispatch one access on the stand-in."""
        info = self._members.lookup(self.mocked_type, name, kind)
        normalized = normalize_arguments(info, args, kwargs)
        invocation = Invocation.build(info.member, normalized)
        self.journal.append(invocation)
        proceed: Callable[[], t.Any] | None = None
        wraps_class = not is_interface(self.mocked_type)
        if wraps_class and not info.is_abstract:
            proceed = functools.partial(info.implementation, instance, *args, **kwargs)
        target = CallTarget(info, wraps_class=wraps_class, proceed=proceed)
        return self._dispatcher.dispatch(invocation, target)

    # ------------------------------------------------------------------
    # Verification
    # ------------------------------------------------------------------
    def verify(self) -> None:
        """Check that every verifiable expectation was invoked."""
        self._verify(Selector.VERIFIABLE)

    def verify_all(self) -> None:
        """Check that every expectation was invoked."""
        self._verify(Selector.ALL)

    def _verify(self, selector: Selector) -> None:
        self._engine.check(
            self.registry,
            selector,
            self.mocked_type,
            inner=self._collect_inner(selector),
        )

    def _collect(self, selector: Selector) -> list[str]:
        return [
            *self._engine.collect(self.registry, selector),
            *self._collect_inner(selector),
        ]

    def _collect_inner(self, selector: Selector) -> list[str]:
        return [
            line
            for inner in self._inner_mocks.values()
            for line in inner._collect(selector)
        ]

    def verify_call(self, expression: Expression) -> None:
        """Check that the method call in *expression* was performed."""
        chain = record(expression)
        last = chain.last
        kind = MemberKind.METHOD if last.called else MemberKind.GETTER
        self._verify_journal(chain, kind, last.args, dict(last.kwargs))

    def verify_get(self, expression: Expression) -> None:
        """Check that the property in *expression* was read."""
        chain = record(expression)
        self._require_property_access(chain)
        self._verify_journal(chain, MemberKind.GETTER, (), {})

    def verify_set(self, expression: Expression, value: t.Any = _UNSET) -> None:
        """Check that the property in *expression* was assigned (``value``)."""
        chain = record(expression)
        self._require_property_access(chain)
        matcher = Any() if value is _UNSET else value
        self._verify_journal(chain, MemberKind.SETTER, (matcher,), {})

    def _verify_journal(
        self,
        chain: MemberChain,
        kind: MemberKind,
        args: t.Sequence[t.Any],
        kwargs: t.Mapping[str, t.Any],
    ) -> None:
        target: Mock = self
        for access in chain.intermediates:
            info = self._members.lookup(
                target.mocked_type, access.name, MemberKind.GETTER
            )
            inner = target._inner_mocks.get(info.member)
            if inner is None:
                msg = (
                    f"Expected invocation on Mock<{self.mocked_type.__name__}> "
                    f"was not performed: {chain.render()}"
                )
                raise MockVerificationError(self.mocked_type, [chain.render()], msg)
            target = inner
        expected = target._expected_call(kind, chain.last.name, args, kwargs)
        CallVerifier().verify(target.journal, expected, target.mocked_type)


class MockFactory:
    """Create mocks sharing one behaviour and verify them together.

    Used as a context manager, the factory verifies its mocks on exit
    according to ``verification`` and reports every unmet expectation of every
    mock in a single :class:`~obj_mox.errors.VerificationError`.
    """

    def __init__(
        self,
        behavior: MockBehavior = MockBehavior.DEFAULT,
        verification: MockVerification = MockVerification.VERIFIABLE,
    ) -> None:
        self.behavior = MockBehavior(behavior)
        self.verification = MockVerification(verification)
        self._mocks: list[Mock] = []

    @property
    def mocks(self) -> list[Mock]:
        """Return the mocks created so far, in creation order."""
        return list(self._mocks)

    def create(self, mocked_type: type, *args: t.Any, **kwargs: t.Any) -> Mock:
        """Create a mock of ``mocked_type`` with the factory behaviour."""
        mock = Mock(mocked_type, self.behavior, args=args, kwargs=kwargs)
        self._mocks.append(mock)
        return mock

    def verify(self, verification: MockVerification | None = None) -> None:
        """Verify every created mock, aggregating failures."""
        mode = self.verification if verification is None else verification
        if mode is MockVerification.NONE:
            return
        errors: list[MockVerificationError] = []
        for mock in self._mocks:
            try:
                if mode is MockVerification.ALL:
                    mock.verify_all()
                else:
                    mock.verify()
            except MockVerificationError as err:
                errors.append(err)
        aggregate_failures(errors)

    def __enter__(self) -> MockFactory:
        """Enter the factory context."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: types.TracebackType | None,
    ) -> None:
        """Verify on exit unless the block already failed."""
        if exc_type is not None:
            logger.debug("Skipping factory verification after %s", exc_type.__name__)
            return
        self.verify()


__all__ = ["Mock", "MockFactory", "MockVerification"]
