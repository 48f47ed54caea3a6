"""Step definitions for mock behavioural tests."""
# pyright: reportMissingImports=false, reportUnknownMemberType=false

from __future__ import annotations

import typing as t

from behave import given, then, when  # type: ignore[attr-defined]

from obj_mox import Any, Mock, MockBehavior, MockVerificationError, Predicate
from obj_mox.errors import UnexpectedCallError

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from obj_mox.expectations import Expectation


class Order:
    """Order handed to the mocked store."""

    def __init__(self, amount: int) -> None:
        self.amount = amount


class InvalidOperationError(Exception):
    """Raised when the store rejects an order."""


class OrderStore(t.Protocol):
    """Collaborator replaced by the mock in these scenarios."""

    def save(self, order: Order) -> None: ...

    def get(self, order_id: int) -> int: ...

    def do_something(self, value: int) -> None: ...


_ERROR_TYPES: dict[str, type[Exception]] = {
    "InvalidOperationError": InvalidOperationError,
    "UnexpectedCallError": UnexpectedCallError,
}


class BehaveContext(t.Protocol):
    """Behave step context with attributes used in tests."""

    mock: Mock
    expectations: list[Expectation]
    value: object
    error: Exception | None


def _call(context: BehaveContext, func: t.Callable[[], object]) -> None:
    context.value = None
    context.error = None
    try:
        context.value = func()
    except Exception as err:  # noqa: BLE001 - the scenario asserts on it
        context.error = err


@given("a {behavior} mock of the order store")
def step_create_mock(context: BehaveContext, behavior: str) -> None:
    """Create a mock of :class:`OrderStore` with *behavior*."""
    context.mock = Mock(OrderStore, MockBehavior(behavior))


@given("get with any integer returns double the id and is verifiable")
def step_expect_doubled_get(context: BehaveContext) -> None:
    """Configure ``get`` to compute its result from the argument."""
    context.mock.expect(lambda m: m.get(Any(int))).runs(
        lambda i: i * 2
    ).verifiable()


@given("get with any integer returns {value:d} and is verifiable")
def step_expect_get(context: BehaveContext, value: int) -> None:
    """Configure ``get`` to return *value*."""
    context.mock.expect(lambda m: m.get(Any(int))).returns(value).verifiable()


@given("saving an order of at least 1000 raises an error")
def step_expect_large_order_rejected(context: BehaveContext) -> None:
    """Reject large orders with :class:`InvalidOperationError`."""
    context.mock.expect(
        lambda m: m.save(Predicate(lambda order: order.amount >= 1000))
    ).raises(InvalidOperationError)


@given("do_something is expected for each value from {low:d} to {high:d}")
def step_expect_each_value(context: BehaveContext, low: int, high: int) -> None:
    """Configure one literal expectation per value."""
    context.expectations = [
        context.mock.expect(lambda m, value=value: m.do_something(value))
        for value in range(low, high + 1)
    ]


@when("the code under test calls get with {value:d}")
def step_call_get(context: BehaveContext, value: int) -> None:
    """Call ``get`` on the stand-in."""
    _call(context, lambda: context.mock.object.get(value))


@when("the code under test saves an order of {amount:d}")
def step_call_save(context: BehaveContext, amount: int) -> None:
    """Call ``save`` on the stand-in."""
    _call(context, lambda: context.mock.object.save(Order(amount)))


@when("the code under test calls do_something for each value from {low:d} to {high:d}")  # noqa: E501
def step_call_each_value(context: BehaveContext, low: int, high: int) -> None:
    """Call ``do_something`` once per value."""
    for value in range(low, high + 1):
        context.mock.object.do_something(value)


@then("the call returns {value:d}")
def step_check_return(context: BehaveContext, value: int) -> None:
    """Assert the call returned *value*."""
    assert context.error is None  # noqa: S101
    assert context.value == value  # noqa: S101


@then("the call returns nothing")
def step_check_none(context: BehaveContext) -> None:
    """Assert the call returned ``None``."""
    assert context.error is None  # noqa: S101
    assert context.value is None  # noqa: S101


@then("the call raises {error_name}")
def step_check_error(context: BehaveContext, error_name: str) -> None:
    """Assert the call raised the named error."""
    assert isinstance(context.error, _ERROR_TYPES[error_name])  # noqa: S101


@then("verifying the mock succeeds")
def step_check_verify(context: BehaveContext) -> None:
    """Verify the mock without errors."""
    context.mock.verify()


@then('verifying the mock fails naming "{line}"')
def step_check_verify_fails(context: BehaveContext, line: str) -> None:
    """Verification fails naming exactly *line*."""
    try:
        context.mock.verify()
    except MockVerificationError as err:
        assert err.failures == [line]  # noqa: S101
    else:
        msg = "verification unexpectedly succeeded"
        raise AssertionError(msg)


@then("each do_something expectation was called once")
def step_check_each_called_once(context: BehaveContext) -> None:
    """Every literal expectation ran exactly once."""
    counts = [exp.call_count for exp in context.expectations]
    assert counts == [1] * len(counts)  # noqa: S101
