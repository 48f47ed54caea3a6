"""Call descriptors for configured expectations and actual invocations."""

from __future__ import annotations

import dataclasses as dc
import typing as t

from .comparators import Matcher, Out, as_matcher
from .members import MemberKind

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from collections.abc import Hashable, Sequence

    from .members import Member


class Slot:
    """Mutable box passed for an output-style parameter.

    Code under test passes a ``Slot`` where it expects the stand-in to write a
    result back; expectations bind the value with :class:`~obj_mox.Out`.
    """

    __slots__ = ("value",)

    def __init__(self, value: t.Any = None) -> None:
        self.value = value

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"Slot({self.value!r})"


def _format_call(member: Member, rendered: Sequence[str]) -> str:
    if member.kind is MemberKind.GETTER:
        return str(member)
    if member.kind is MemberKind.SETTER:
        value = rendered[0] if rendered else "?"
        return f"{member} = {value}"
    return f"{member}({', '.join(rendered)})"


@dc.dataclass(frozen=True, slots=True)
class ExpectedCall:
    """Configured call shape: a member plus one matcher per input position."""

    member: Member
    matchers: tuple[Matcher, ...]
    out_values: tuple[tuple[int, t.Any], ...] = ()

    @classmethod
    def build(cls, member: Member, arguments: Sequence[t.Any]) -> ExpectedCall:
        """Split normalized ``arguments`` into matchers and output bindings."""
        matchers: list[Matcher] = []
        out_values: list[tuple[int, t.Any]] = []
        for index, argument in enumerate(arguments):
            if isinstance(argument, Out):
                out_values.append((index, argument.value))
            else:
                matchers.append(as_matcher(argument))
        return cls(member, tuple(matchers), tuple(out_values))

    def signature(self) -> Hashable:
        """Return the structural key used for registry collisions."""
        return (
            self.member,
            tuple(matcher.signature() for matcher in self.matchers),
            tuple(index for index, _ in self.out_values),
        )

    def matches(self, invocation: Invocation) -> bool:
        """Return ``True`` if *invocation* satisfies this call shape."""
        if invocation.member != self.member:
            return False
        if set(invocation.out_slots) != self._out_positions():
            return False
        if len(self.matchers) != len(invocation.args):
            return False
        return all(
            matcher.matches(arg)
            for matcher, arg in zip(self.matchers, invocation.args, strict=True)
        )

    def _out_positions(self) -> set[int]:
        return {index for index, _ in self.out_values}

    def explain_mismatch(self, invocation: Invocation) -> str:
        """Return a short reason why *invocation* does not match."""
        if invocation.member != self.member:
            return f"member {invocation.member} != {self.member}"
        if set(invocation.out_slots) != self._out_positions():
            return (
                f"output slots at {sorted(invocation.out_slots)} but expected "
                f"{sorted(self._out_positions())}"
            )
        if len(self.matchers) != len(invocation.args):
            return (
                f"expected {len(self.matchers)} args but got {len(invocation.args)}"
            )
        for index, (matcher, arg) in enumerate(
            zip(self.matchers, invocation.args, strict=True)
        ):
            if not matcher.matches(arg):
                return f"arg[{index}]={arg!r} failed {matcher!r}"
        return "matched"

    def render(self) -> str:
        """Return the call as it was configured."""
        rendered = [repr(matcher) for matcher in self.matchers]
        for index, value in self.out_values:
            rendered.insert(index, f"Out({value!r})")
        return _format_call(self.member, rendered)

    def __str__(self) -> str:
        return self.render()


@dc.dataclass(slots=True)
class Invocation:
    """An actual call delivered by a stand-in."""

    member: Member
    args: list[t.Any]
    out_slots: dict[int, Slot] = dc.field(default_factory=dict)

    @classmethod
    def build(cls, member: Member, arguments: Sequence[t.Any]) -> Invocation:
        """Separate output slots from the compared arguments."""
        args: list[t.Any] = []
        out_slots: dict[int, Slot] = {}
        for index, argument in enumerate(arguments):
            if isinstance(argument, Slot):
                out_slots[index] = argument
            else:
                args.append(argument)
        return cls(member, args, out_slots)

    @property
    def all_args(self) -> list[t.Any]:
        """Return the arguments in call order, output slots included."""
        merged = list(self.args)
        for index in sorted(self.out_slots):
            merged.insert(index, self.out_slots[index])
        return merged

    def write_outputs(self, out_values: Sequence[tuple[int, t.Any]]) -> None:
        """Copy bound output values into the matching slots."""
        for index, value in out_values:
            slot = self.out_slots.get(index)
            if slot is not None:
                slot.value = value

    def render(self) -> str:
        """Return the call as the stand-in received it."""
        return _format_call(self.member, [repr(arg) for arg in self.all_args])

    def __str__(self) -> str:
        return self.render()


__all__ = ["ExpectedCall", "Invocation", "Slot"]
