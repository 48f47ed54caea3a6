"""Unit tests for expected calls, invocations and output slots."""

from __future__ import annotations

from obj_mox.calls import ExpectedCall, Invocation, Slot
from obj_mox.comparators import Any, Out
from obj_mox.members import Member, MemberKind
from obj_mox.unittests._sample_types import OrderStore

LOOKUP = Member(OrderStore, "lookup", MemberKind.METHOD)
GET = Member(OrderStore, "get", MemberKind.METHOD)
NAME_SET = Member(OrderStore, "name", MemberKind.SETTER)


def test_build_separates_output_bindings() -> None:
    """``Out`` arguments become output values, not matchers."""
    call = ExpectedCall.build(LOOKUP, ["key", Out(42)])
    assert len(call.matchers) == 1
    assert call.out_values == ((1, 42),)
    assert call.render() == "OrderStore.lookup('key', Out(42))"


def test_invocation_tracks_slots_by_position() -> None:
    """Slots are removed from the compared arguments."""
    slot = Slot()
    invocation = Invocation.build(LOOKUP, ["key", slot])
    assert invocation.args == ["key"]
    assert invocation.all_args == ["key", slot]
    invocation.write_outputs([(1, "found")])
    assert slot.value == "found"
    assert invocation.render() == "OrderStore.lookup('key', Slot('found'))"


def test_output_binding_matches_regardless_of_value() -> None:
    """Calls match whatever the slot contains; only inputs are compared."""
    call = ExpectedCall.build(LOOKUP, [Any(str), Out(1)])
    assert call.matches(Invocation.build(LOOKUP, ["a", Slot("stale")]))
    assert not call.matches(Invocation.build(LOOKUP, [3, Slot()]))


def test_output_slots_must_sit_at_bound_positions() -> None:
    """A slot passed at another position does not satisfy an output binding."""
    call = ExpectedCall.build(LOOKUP, ["k", Out(5)])
    swapped = Invocation.build(LOOKUP, [Slot(), "k"])
    assert not call.matches(swapped)
    assert call.explain_mismatch(swapped) == "output slots at [0] but expected [1]"


def test_signature_ignores_output_values() -> None:
    """Two output bindings with different values share a shape."""
    first = ExpectedCall.build(LOOKUP, ["key", Out(1)])
    second = ExpectedCall.build(LOOKUP, ["key", Out(2)])
    assert first.signature() == second.signature()


def test_signature_distinguishes_literals_and_matchers() -> None:
    """Literal and wildcard shapes for the same member differ."""
    literal = ExpectedCall.build(GET, [5])
    wildcard = ExpectedCall.build(GET, [Any(int)])
    assert literal.signature() != wildcard.signature()


def test_explain_mismatch_reports_first_failing_argument() -> None:
    """Diagnostics name the argument that failed its matcher."""
    call = ExpectedCall.build(GET, [5])
    invocation = Invocation.build(GET, [6])
    assert call.explain_mismatch(invocation) == "arg[0]=6 failed 5"
    other = Invocation.build(LOOKUP, ["a"])
    assert call.explain_mismatch(other).startswith("member OrderStore.lookup")


def test_setter_rendering() -> None:
    """Setter calls render as assignments."""
    call = ExpectedCall.build(NAME_SET, [Any()])
    assert call.render() == "OrderStore.name = Any()"
    assert str(Invocation.build(NAME_SET, ["x"])) == "OrderStore.name = 'x'"
