"""Event targets that expectations can raise when they execute."""

from __future__ import annotations

import inspect
import logging
import typing as t

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from collections.abc import Callable

logger = logging.getLogger(__name__)

EventHandler = t.Callable[[t.Any], object]


class MockedEvent:
    """A list of handlers notified when an expectation raises the event.

    Handlers are plain callables receiving the event argument. ``+=`` and
    ``-=`` are accepted as aliases for :meth:`subscribe` and
    :meth:`unsubscribe`.
    """

    def __init__(self, name: str | None = None) -> None:
        self.name = name
        self._handlers: list[EventHandler] = []

    @property
    def handlers(self) -> tuple[EventHandler, ...]:
        """Return the currently subscribed handlers."""
        return tuple(self._handlers)

    def subscribe(self, handler: EventHandler) -> None:
        """Add *handler* to the invocation list."""
        if not callable(handler):
            msg = f"event handler must be callable, got {type(handler).__name__}"
            raise TypeError(msg)
        self._handlers.append(handler)

    def unsubscribe(self, handler: EventHandler) -> None:
        """Remove *handler*; unknown handlers are ignored."""
        if handler in self._handlers:
            self._handlers.remove(handler)

    def __iadd__(self, handler: EventHandler) -> MockedEvent:
        self.subscribe(handler)
        return self

    def __isub__(self, handler: EventHandler) -> MockedEvent:
        self.unsubscribe(handler)
        return self

    def raise_(self, args: object = None) -> None:
        """Deliver *args* to every handler in subscription order."""
        logger.debug(
            "Raising event %s to %d handler(s)",
            self.name or "<anonymous>",
            len(self._handlers),
        )
        for handler in list(self._handlers):
            handler(args)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        """Return a debug representation."""
        return f"MockedEvent({self.name!r}, handlers={len(self._handlers)})"


def call_with_accepted_args(
    func: Callable[..., t.Any], args: t.Sequence[t.Any]
) -> t.Any:
    """Call *func* with as many leading *args* as it accepts.

    Functions taking no parameters are called without arguments, variadic
    functions receive every argument.
    """
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        return func(*args)
    positional = 0
    for param in sig.parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return func(*args)
        if param.kind in {
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        }:
            positional += 1
    return func(*args[:positional])


__all__ = ["EventHandler", "MockedEvent", "call_with_accepted_args"]
