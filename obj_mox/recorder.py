"""Turn ``lambda m: m.member(args)`` expressions into member chains."""

from __future__ import annotations

import dataclasses as dc
import typing as t

from .errors import UnsupportedExpressionError

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from collections.abc import Callable


@dc.dataclass(frozen=True, slots=True)
class Access:
    """One member access in a chain, with call arguments if it was called."""

    name: str
    called: bool = False
    args: tuple[t.Any, ...] = ()
    kwargs: tuple[tuple[str, t.Any], ...] = ()

    def render(self) -> str:
        """Return the access as source-like text."""
        if not self.called:
            return self.name
        parts = [repr(arg) for arg in self.args]
        parts.extend(f"{key}={value!r}" for key, value in self.kwargs)
        return f"{self.name}({', '.join(parts)})"


@dc.dataclass(frozen=True, slots=True)
class MemberChain:
    """The accesses recorded from an expression, outermost first."""

    accesses: tuple[Access, ...]

    @property
    def intermediates(self) -> tuple[Access, ...]:
        """Return every access before the configured member."""
        return self.accesses[:-1]

    @property
    def last(self) -> Access:
        """Return the configured member access."""
        return self.accesses[-1]

    def render(self) -> str:
        """Return the chain as source-like text rooted at ``m``."""
        return "m." + ".".join(access.render() for access in self.accesses)


class _Recorder:
    """Stand-in passed to configuration lambdas; remembers what was touched."""

    __slots__ = ("_obj_mox_steps",)

    def __init__(self, steps: tuple[Access, ...] = ()) -> None:
        object.__setattr__(self, "_obj_mox_steps", steps)

    def __getattr__(self, name: str) -> _Recorder:
        steps: tuple[Access, ...] = object.__getattribute__(self, "_obj_mox_steps")
        return _Recorder((*steps, Access(name)))

    def __call__(self, *args: t.Any, **kwargs: t.Any) -> _Recorder:
        steps: tuple[Access, ...] = object.__getattribute__(self, "_obj_mox_steps")
        if not steps:
            msg = "Expression calls the mock itself; call one of its members instead"
            raise UnsupportedExpressionError(msg)
        last = steps[-1]
        if last.called:
            msg = f"Expression calls the result of {last.render()}; not supported"
            raise UnsupportedExpressionError(msg)
        called = Access(last.name, True, args, tuple(sorted(kwargs.items())))
        return _Recorder((*steps[:-1], called))

    def __setattr__(self, name: str, value: object) -> None:
        msg = "Assignments are not supported in expressions; use expect_set()"
        raise UnsupportedExpressionError(msg)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        steps = object.__getattribute__(self, "_obj_mox_steps")
        return f"<recorder {MemberChain(steps).render()}>"


def record(expression: Callable[[t.Any], object]) -> MemberChain:
    """Run *expression* against a recorder and return the member chain.

    Raises
    ------
    UnsupportedExpressionError
        When the expression does not end in a member access or call, or when a
        method call appears before the last access.
    """
    result = expression(_Recorder())
    if not isinstance(result, _Recorder):
        msg = (
            "Expression is not a method invocation or a property get: "
            f"{expression!r} returned {type(result).__name__}"
        )
        raise UnsupportedExpressionError(msg)
    steps: tuple[Access, ...] = object.__getattribute__(result, "_obj_mox_steps")
    if not steps:
        msg = "Expression does not access any member of the mock"
        raise UnsupportedExpressionError(msg)
    chain = MemberChain(steps)
    for access in chain.intermediates:
        if access.called:
            msg = (
                f"Expression {chain.render()} is not supported: only properties "
                "may appear before the configured member"
            )
            raise UnsupportedExpressionError(msg)
    return chain


__all__ = ["Access", "MemberChain", "record"]
