"""Expectation records and their execution semantics."""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as t

from .errors import ExpectedNeverError, MoreThanNCallsError, MoreThanOneCallError
from .events import MockedEvent, call_with_accepted_args

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from collections.abc import Callable

    from .calls import ExpectedCall, Invocation


class Cardinality(enum.StrEnum):
    """How many times an expectation may be invoked."""

    UNBOUNDED = "unbounded"
    ONCE = "once"
    EXACTLY = "exactly"
    NEVER = "never"


_UNSET: t.Final = object()


@dc.dataclass(slots=True, eq=False)
class Expectation:
    """Expectation details for a call on a stand-in.

    Configuration methods return ``self`` so calls can be chained::

        mock.expect(lambda m: m.get(Any(int))).runs(lambda i: i * 2).verifiable()
    """

    call: ExpectedCall
    cardinality: Cardinality = Cardinality.UNBOUNDED
    expected_count: int | None = None
    exception: BaseException | None = None
    callback_func: Callable[..., object] | None = None
    return_value: t.Any = _UNSET
    return_factory: Callable[..., t.Any] | None = None
    event: MockedEvent | None = None
    event_args_factory: Callable[..., t.Any] | None = None
    verifiable_flag: bool = False
    call_count: int = 0
    invoked: bool = False

    # ------------------------------------------------------------------
    # Behaviour configuration
    # ------------------------------------------------------------------
    def returns(self, value: t.Any) -> Expectation:
        """Return ``value`` from every matching call."""
        self.return_value = value
        self.return_factory = None
        return self

    def runs(self, func: Callable[..., t.Any]) -> Expectation:
        """Return ``func(...)`` evaluated afresh on every matching call.

        ``func`` receives as many of the actual arguments as it accepts, so a
        zero-argument factory works as well as ``lambda x: x * 2``.
        """
        if not callable(func):
            msg = f"runs() expects a callable, got {type(func).__name__}"
            raise TypeError(msg)
        self.return_factory = func
        self.return_value = _UNSET
        return self

    def raises(self, exception: BaseException | type[BaseException]) -> Expectation:
        """Raise ``exception`` from every matching call."""
        if isinstance(exception, type):
            exception = exception()
        self.exception = exception
        return self

    def callback(self, func: Callable[..., object]) -> Expectation:
        """Invoke ``func`` with the actual arguments before any other behaviour."""
        if not callable(func):
            msg = f"callback() expects a callable, got {type(func).__name__}"
            raise TypeError(msg)
        self.callback_func = func
        return self

    def raises_event(self, event: MockedEvent, args: t.Any = None) -> Expectation:
        """Raise ``event`` after a matching call.

        ``args`` is either the event argument itself or a function computing it
        from zero or more of the actual call arguments.
        """
        if not isinstance(event, MockedEvent):
            msg = f"raises_event() expects a MockedEvent, got {type(event).__name__}"
            raise TypeError(msg)
        self.event = event
        if callable(args):
            self.event_args_factory = args
        else:
            self.event_args_factory = lambda: args
        return self

    # ------------------------------------------------------------------
    # Cardinality
    # ------------------------------------------------------------------
    def once(self) -> Expectation:
        """Fail on any call after the first."""
        self.cardinality = Cardinality.ONCE
        self.expected_count = 1
        return self

    def times(self, count: int) -> Expectation:
        """Fail once the call count exceeds ``count``."""
        if count < 0:
            msg = f"times() requires a non-negative count, got {count}"
            raise ValueError(msg)
        self.cardinality = Cardinality.EXACTLY
        self.expected_count = count
        return self

    def never(self) -> Expectation:
        """Fail on any call at all."""
        self.cardinality = Cardinality.NEVER
        self.expected_count = 0
        return self

    def verifiable(self) -> Expectation:
        """Include this expectation in :meth:`Mock.verify`."""
        self.verifiable_flag = True
        return self

    @property
    def is_verifiable(self) -> bool:
        """Return ``True`` when flagged with :meth:`verifiable`."""
        return self.verifiable_flag

    @property
    def has_return(self) -> bool:
        """Return ``True`` when a return behaviour is configured."""
        return self.return_factory is not None or self.return_value is not _UNSET

    # ------------------------------------------------------------------
    # Matching and execution
    # ------------------------------------------------------------------
    def matches(self, invocation: Invocation) -> bool:
        """Return ``True`` if *invocation* satisfies this expectation."""
        return self.call.matches(invocation)

    def execute(self, invocation: Invocation) -> t.Any:
        """Apply the configured behaviour to *invocation* and return its result."""
        invocation.write_outputs(self.call.out_values)
        self.invoked = True
        args = invocation.all_args

        if self.callback_func is not None:
            call_with_accepted_args(self.callback_func, args)

        if self.exception is not None:
            raise self.exception

        self.call_count += 1
        self._check_cardinality(invocation)

        if self.event is not None and self.event_args_factory is not None:
            self.event.raise_(call_with_accepted_args(self.event_args_factory, args))

        if self.return_factory is not None:
            return call_with_accepted_args(self.return_factory, args)
        if self.return_value is not _UNSET:
            return self.return_value
        return None

    def _check_cardinality(self, invocation: Invocation) -> None:
        if self.cardinality is Cardinality.ONCE and self.call_count > 1:
            msg = f"Expected only one call to {invocation.render()}."
            raise MoreThanOneCallError(msg)
        if self.cardinality is Cardinality.NEVER:
            msg = f"Expected no calls to {invocation.render()}."
            raise ExpectedNeverError(msg)
        if (
            self.cardinality is Cardinality.EXACTLY
            and self.expected_count is not None
            and self.call_count > self.expected_count
        ):
            msg = (
                f"Expected only {self.expected_count} calls to "
                f"{invocation.render()}."
            )
            raise MoreThanNCallsError(msg)

    def describe(self) -> str:
        """Return the configured call shape for diagnostics."""
        return self.call.render()


__all__ = ["Cardinality", "Expectation"]
