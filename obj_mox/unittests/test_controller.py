"""Unit tests for the :class:`Mock` controller."""

from __future__ import annotations

import pytest

from obj_mox import (
    Any,
    Mock,
    MockBehavior,
    MockVerificationError,
    Out,
    Predicate,
    Slot,
)
from obj_mox.errors import (
    ArgumentMismatchError,
    ConfigurationError,
    NonOverridableMemberError,
    NotPropertyError,
    PropertyNotReadableError,
    PropertyNotWritableError,
    UnexpectedCallError,
    UnknownMemberError,
    UnsupportedExpressionError,
    UnsupportedIntermediateTypeError,
)
from obj_mox.unittests._sample_types import (
    AtLeast,
    Basket,
    CachedRepository,
    Car,
    Counter,
    Engine,
    InvalidOperationError,
    Order,
    OrderStore,
    Repository,
    Sealed,
    Tools,
)


# ----------------------------------------------------------------------
# Lifecycle scenarios
# ----------------------------------------------------------------------
def test_large_orders_are_rejected_and_small_ones_ignored() -> None:
    """A predicate expectation raises; unmatched calls fall back loosely."""
    mock = Mock(OrderStore, MockBehavior.LOOSE)
    mock.expect(
        lambda m: m.save(Predicate(lambda order: order.amount >= 1000))
    ).raises(InvalidOperationError)

    with pytest.raises(InvalidOperationError):
        mock.object.save(Order(1000))
    assert mock.object.save(Order(1)) is None


def test_computed_return_and_verifiable_expectation() -> None:
    """Return values are computed from the actual arguments."""
    mock = Mock(OrderStore)
    expectation = (
        mock.expect(lambda m: m.get(Any(int))).runs(lambda i: i * 2).verifiable()
    )
    assert mock.object.get(3) == 6
    assert expectation.invoked
    mock.verify()


def test_unmet_verifiable_expectation_is_reported() -> None:
    """Verification names exactly the expectation that was never called."""
    mock = Mock(OrderStore)
    mock.expect(lambda m: m.get(Any(int))).returns(6).verifiable()
    mock.expect(lambda m: m.save(Any(Order)))
    with pytest.raises(MockVerificationError) as excinfo:
        mock.verify()
    assert excinfo.value.failures == ["OrderStore.get(Any(int))"]
    assert str(excinfo.value) == (
        "The following expectations were not met:\n"
        "Mock<OrderStore>:\n"
        "  OrderStore.get(Any(int))"
    )


def test_distinct_literal_expectations_under_strict_mode() -> None:
    """Ten literal shapes stay independent and each is called once."""
    mock = Mock(OrderStore, MockBehavior.STRICT)
    expectations = [
        mock.expect(lambda m, value=value: m.do_something(value))
        for value in range(1, 11)
    ]
    for value in range(1, 11):
        mock.object.do_something(value)
    assert len(mock.registry) == 10
    assert [exp.call_count for exp in expectations] == [1] * 10
    mock.verify_all()


# ----------------------------------------------------------------------
# Configuration
# ----------------------------------------------------------------------
def test_reconfiguring_same_shape_replaces_expectation() -> None:
    """The latest configuration of one shape is used."""
    mock = Mock(OrderStore)
    mock.expect(lambda m: m.get(1)).returns(1)
    mock.expect(lambda m: m.get(1)).returns(2)
    assert len(mock.registry) == 1
    assert mock.object.get(1) == 2


def test_slotted_custom_matchers_keep_distinct_shapes() -> None:
    """Custom matchers differing only in slot state coexist."""
    mock = Mock(OrderStore)
    mock.expect(lambda m: m.get(AtLeast(10))).returns(2)
    mock.expect(lambda m: m.get(AtLeast(0))).returns(1)
    assert len(mock.registry) == 2
    assert mock.object.get(15) == 2
    assert mock.object.get(5) == 1


def test_keyword_and_positional_configuration_share_shape() -> None:
    """Arguments are normalised before the shape is computed."""
    mock = Mock(OrderStore)
    mock.expect(lambda m: m.get(1)).returns(1)
    mock.expect(lambda m: m.get(order_id=1)).returns(2)
    assert len(mock.registry) == 1
    assert mock.object.get(order_id=1) == 2


def test_override_resolves_to_base_declaration() -> None:
    """Expectations on a subclass mock use the declaring member identity."""
    mock = Mock(CachedRepository)
    mock.expect(lambda m: m.load("k")).returns("mocked")
    assert mock.object.load("k") == "mocked"
    assert mock.object.load("other") == "cached:other"
    [expectation] = mock.registry.all()
    assert expectation.call.member.declaring_type is Repository


def test_output_binding_writes_slot() -> None:
    """``Out`` values are written to the slot passed by the caller."""
    mock = Mock(OrderStore)
    mock.expect(lambda m: m.lookup(Any(str), Out(42))).returns(True)
    slot = Slot()
    assert mock.object.lookup("key", slot) is True
    assert slot.value == 42


def test_output_binding_ignores_misplaced_slot() -> None:
    """Calls passing the slot elsewhere fall through to the behaviour."""
    mock = Mock(OrderStore, MockBehavior.LOOSE)
    mock.expect(lambda m: m.lookup("k", Out(5))).returns(True)
    slot = Slot()
    assert mock.object.lookup(slot, "k") is False
    assert slot.value is None


def test_property_get_and_set_expectations() -> None:
    """Getter and setter expectations are configured separately."""
    mock = Mock(OrderStore)
    mock.expect_get(lambda m: m.name).returns("shop")
    setter = mock.expect_set(lambda m: m.name, "new").verifiable()
    assert mock.object.name == "shop"
    mock.object.name = "new"
    assert setter.invoked
    with pytest.raises(UnexpectedCallError):
        mock.object.name = "other"


def test_expect_on_property_configures_getter() -> None:
    """``expect`` without a call configures a property read."""
    mock = Mock(OrderStore)
    mock.expect(lambda m: m.name).returns("shop")
    assert mock.object.name == "shop"


def test_stub_remembers_assigned_values() -> None:
    """Stubbed properties return the last value assigned."""
    mock = Mock(OrderStore)
    mock.stub(lambda m: m.name, "initial")
    assert mock.object.name == "initial"
    mock.object.name = "changed"
    assert mock.object.name == "changed"


@pytest.mark.parametrize(
    ("configure", "error"),
    [
        (lambda mock: mock.expect(lambda m: m.missing()), UnknownMemberError),
        (lambda mock: mock.expect(lambda m: m.get(1, 2)), ArgumentMismatchError),
        (lambda mock: mock.expect_get(lambda m: m.get), NotPropertyError),
        (lambda mock: mock.expect_get(lambda m: m.get(1)), NotPropertyError),
        (lambda mock: mock.expect_set(lambda m: m.tags()), NotPropertyError),
        (lambda mock: mock.expect(lambda m: m.name("x")), NotPropertyError),
        (
            lambda mock: mock.expect(lambda m: m.get(1).bit_length()),
            UnsupportedExpressionError,
        ),
        (
            lambda mock: mock.expect(lambda m: m.name.upper()),
            UnsupportedIntermediateTypeError,
        ),
    ],
    ids=[
        "unknown-member",
        "argument-count",
        "method-as-getter",
        "call-as-getter",
        "call-as-setter",
        "property-called",
        "call-before-last",
        "builtin-intermediate",
    ],
)
def test_malformed_configuration(
    configure: object, error: type[ConfigurationError]
) -> None:
    """Malformed expectations fail at configuration time."""
    mock = Mock(OrderStore)
    with pytest.raises(error):
        configure(mock)  # type: ignore[operator]


def test_configuration_errors_are_value_errors() -> None:
    """Configuration errors can be caught as ``ValueError``."""
    with pytest.raises(ValueError, match="no member named"):
        Mock(OrderStore).expect(lambda m: m.missing())


def test_non_overridable_members_cannot_be_configured() -> None:
    """Static, class and final members are rejected."""
    mock = Mock(Tools)
    for name in ("helper", "build", "locked"):
        with pytest.raises(NonOverridableMemberError):
            mock.expect(lambda m, name=name: getattr(m, name)())


def test_property_access_direction_is_checked() -> None:
    """Write-only and read-only properties reject the wrong accessor."""
    with pytest.raises(PropertyNotReadableError):
        Mock(Tools).expect_get(lambda m: m.secret)
    with pytest.raises(PropertyNotWritableError):
        Mock(Car).expect_set(lambda m: m.model)


def test_unmockable_types_are_rejected() -> None:
    """Final classes cannot be mocked."""
    with pytest.raises(ConfigurationError):
        Mock(Sealed)


def test_abstract_dunder_can_be_configured() -> None:
    """Abstract dunders such as ``__len__`` behave like other members."""
    mock = Mock(Basket)
    mock.expect(lambda m: m.__len__()).returns(3)
    assert len(mock.object) == 3
    loose = Mock(Basket, MockBehavior.LOOSE)
    assert len(loose.object) == 0
    with pytest.raises(UnexpectedCallError):
        len(Mock(Basket).object)


def test_invalid_behaviour_is_rejected() -> None:
    """Unknown behaviour names raise ``ValueError``."""
    with pytest.raises(ValueError, match="bogus"):
        Mock(OrderStore, "bogus")  # type: ignore[arg-type]


# ----------------------------------------------------------------------
# Construction
# ----------------------------------------------------------------------
def test_class_mock_with_constructor_arguments() -> None:
    """Constructor arguments initialise the stand-in."""
    mock = Mock(Counter, args=(5,))
    assert mock.object.start == 5
    assert mock.object.next() == 6
    mock.expect(lambda m: m.next()).returns(100)
    assert mock.object.next() == 100
    assert mock.object.next(2) == 7


def test_interface_mock_rejects_constructor_arguments() -> None:
    """Protocols have no constructor to call."""
    with pytest.raises(ConfigurationError, match="interface mocks"):
        Mock(OrderStore, kwargs={"x": 1})


def test_get_returns_owning_mock() -> None:
    """Stand-ins lead back to their mock."""
    mock = Mock(OrderStore)
    assert Mock.get(mock.object) is mock
    with pytest.raises(ValueError, match="not created by obj_mox"):
        Mock.get(object())


# ----------------------------------------------------------------------
# Sub-mocks
# ----------------------------------------------------------------------
def test_chained_expression_creates_sub_mock() -> None:
    """Intermediate properties return sub-mocks of the annotated type."""
    mock = Mock(Car)
    mock.expect(lambda m: m.engine.start()).returns(True)
    mock.expect_get(lambda m: m.engine.rpm).returns(3000)
    engine = mock.object.engine
    assert isinstance(engine, Engine)
    assert engine.start() is True
    assert engine.rpm == 3000
    assert len(mock.inner_mocks) == 1
    [inner] = mock.inner_mocks.values()
    assert Mock.get(engine) is inner
    assert inner.behavior is mock.behavior


def test_verification_includes_sub_mocks() -> None:
    """Unmet expectations on sub-mocks fail the owner's verification."""
    mock = Mock(Car)
    mock.expect(lambda m: m.engine.start()).returns(True).verifiable()
    with pytest.raises(MockVerificationError) as excinfo:
        mock.verify()
    assert excinfo.value.failures == ["Engine.start()"]
    mock.object.engine.start()
    mock.verify()
    mock.verify_all()


def test_verify_all_includes_unflagged_sub_mock_expectations() -> None:
    """``verify_all`` reports every unmet expectation transitively."""
    mock = Mock(Car)
    mock.expect(lambda m: m.engine.start()).returns(True)
    mock.verify()
    with pytest.raises(MockVerificationError) as excinfo:
        mock.verify_all()
    assert excinfo.value.failures == ["Car.engine", "Engine.start()"]


# ----------------------------------------------------------------------
# Events
# ----------------------------------------------------------------------
def test_expectation_raises_event() -> None:
    """Handlers receive arguments computed from the call."""
    mock = Mock(OrderStore)
    saved = mock.create_event_handler("saved")
    received: list[int] = []
    saved.subscribe(received.append)
    mock.expect(lambda m: m.save(Any(Order))).raises_event(
        saved, lambda order: order.amount
    )
    mock.object.save(Order(7))
    saved.unsubscribe(received.append)
    mock.object.save(Order(8))
    assert received == [7]


# ----------------------------------------------------------------------
# Call verification
# ----------------------------------------------------------------------
def test_verify_call_against_journal() -> None:
    """Recorded calls can be verified after the fact."""
    mock = Mock(OrderStore, MockBehavior.LOOSE)
    mock.object.get(3)
    mock.object.name = "x"
    _ = mock.object.name
    mock.verify_call(lambda m: m.get(Any(int)))
    mock.verify_get(lambda m: m.name)
    mock.verify_set(lambda m: m.name, "x")
    mock.verify_set(lambda m: m.name)
    with pytest.raises(MockVerificationError, match=r"arg\[0\]=3 failed 4"):
        mock.verify_call(lambda m: m.get(4))
    with pytest.raises(MockVerificationError):
        mock.verify_set(lambda m: m.name, "y")


def test_verify_call_through_sub_mock() -> None:
    """Chained call verification follows created sub-mocks."""
    mock = Mock(Car, MockBehavior.LOOSE)
    with pytest.raises(MockVerificationError, match="was not performed"):
        mock.verify_call(lambda m: m.engine.start())
    mock.expect(lambda m: m.engine.start()).returns(True)
    mock.object.engine.start()
    mock.verify_call(lambda m: m.engine.start())


def test_journal_is_bounded() -> None:
    """The journal keeps only the most recent invocations."""
    mock = Mock(OrderStore, MockBehavior.LOOSE, max_journal_entries=2)
    for value in range(3):
        mock.object.get(value)
    assert [inv.args for inv in mock.journal] == [[1], [2]]
    with pytest.raises(ValueError, match="max_journal_entries must be positive"):
        Mock(OrderStore, max_journal_entries=0)
