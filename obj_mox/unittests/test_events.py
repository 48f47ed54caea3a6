"""Unit tests for :class:`MockedEvent` and argument trimming."""

from __future__ import annotations

import typing as t

import pytest

from obj_mox.events import MockedEvent, call_with_accepted_args


def test_handlers_receive_arguments_in_subscription_order() -> None:
    """Every subscribed handler is called once per raise."""
    seen: list[str] = []
    event = MockedEvent("changed")
    event.subscribe(lambda args: seen.append(f"first:{args}"))
    event += lambda args: seen.append(f"second:{args}")
    event.raise_("x")
    assert seen == ["first:x", "second:x"]
    assert len(event.handlers) == 2


def test_unsubscribe_removes_handler() -> None:
    """Removed handlers are no longer notified; unknown ones are ignored."""
    seen: list[object] = []
    event = MockedEvent()
    event += seen.append
    event -= seen.append
    event.unsubscribe(print)
    event.raise_(1)
    assert seen == []


def test_subscribe_rejects_non_callables() -> None:
    """Handlers must be callable."""
    with pytest.raises(TypeError, match="callable"):
        MockedEvent().subscribe(42)  # type: ignore[arg-type]


@pytest.mark.parametrize(
    ("func", "expected"),
    [
        (lambda: "none", "none"),
        (lambda a: a, 1),
        (lambda a, b: a + b, 3),
        (lambda *args: args, (1, 2, 3)),
    ],
    ids=["zero", "one", "two", "variadic"],
)
def test_call_with_accepted_args(
    func: t.Callable[..., object], expected: object
) -> None:
    """Functions receive as many leading arguments as they declare."""
    assert call_with_accepted_args(func, [1, 2, 3]) == expected
