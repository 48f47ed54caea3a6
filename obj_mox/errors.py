"""Exception hierarchy for obj_mox."""

from __future__ import annotations

import enum
import typing as t

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from collections.abc import Sequence


class FailureReason(enum.StrEnum):
    """Classify the condition that produced a :class:`MockError`."""

    NO_EXPECTATION = "no-expectation"
    RETURN_VALUE_REQUIRED = "return-value-required"
    MORE_THAN_ONE_CALL = "more-than-one-call"
    MORE_THAN_N_CALLS = "more-than-n-calls"
    EXPECTED_NEVER = "expected-never"
    VERIFICATION_FAILED = "verification-failed"


class ObjMoxError(Exception):
    """Base class for all obj_mox errors."""


class MockError(ObjMoxError):
    """Raised synchronously when a stand-in is used in a disallowed way."""

    reason: FailureReason = FailureReason.NO_EXPECTATION

    def __init__(self, message: str, reason: FailureReason | None = None) -> None:
        super().__init__(message)
        if reason is not None:
            self.reason = reason


class UnexpectedCallError(MockError):
    """No expectation matched a call and the behaviour mode forbids fallback."""

    reason = FailureReason.NO_EXPECTATION


class ReturnValueRequiredError(MockError):
    """An unmatched call must return a value but none can be synthesised."""

    reason = FailureReason.RETURN_VALUE_REQUIRED


class CardinalityError(MockError):
    """A call exceeded the cardinality configured on its expectation."""


class MoreThanOneCallError(CardinalityError):
    """An expectation configured with ``once()`` was invoked again."""

    reason = FailureReason.MORE_THAN_ONE_CALL


class MoreThanNCallsError(CardinalityError):
    """An expectation configured with ``times(n)`` was invoked too often."""

    reason = FailureReason.MORE_THAN_N_CALLS


class ExpectedNeverError(CardinalityError):
    """An expectation configured with ``never()`` was invoked."""

    reason = FailureReason.EXPECTED_NEVER


class VerificationError(MockError):
    """Explicit verification found unmet expectations."""

    reason = FailureReason.VERIFICATION_FAILED


class MockVerificationError(VerificationError):
    """Verification of a single stand-in failed.

    ``failures`` holds one diagnostic line per unmet expectation so that
    callers aggregating several mocks can reuse the raw lines.
    """

    def __init__(
        self, subject: type, failures: Sequence[str], message: str | None = None
    ) -> None:
        self.subject = subject
        self.failures = list(failures)
        if message is None:
            message = (
                f"The following expectations were not met:\n{self.raw_expectations()}"
            )
        super().__init__(message)

    def raw_expectations(self) -> str:
        """Return the subject and its failure lines without the heading."""
        lines = [f"Mock<{self.subject.__name__}>:"]
        lines.extend(f"  {line}" for line in self.failures)
        return "\n".join(lines)


class ConfigurationError(ObjMoxError, ValueError):
    """Raised at configuration time for malformed expectations."""


class UnknownMemberError(ConfigurationError):
    """The configured member does not exist on the mocked type."""


class NonOverridableMemberError(ConfigurationError):
    """The configured member cannot be intercepted."""


class NotPropertyError(ConfigurationError):
    """A property expectation targeted something other than a property."""


class PropertyNotReadableError(ConfigurationError):
    """A getter expectation targeted a write-only property."""


class PropertyNotWritableError(ConfigurationError):
    """A setter expectation targeted a read-only property."""


class ArgumentMismatchError(ConfigurationError):
    """Configured arguments cannot be bound to the member signature."""


class UnsupportedExpressionError(ConfigurationError):
    """The configuration expression is not a member access or call."""


class UnsupportedIntermediateTypeError(ConfigurationError):
    """A chained member access crosses a type that cannot be mocked."""


class UnknownMatcherError(ConfigurationError):
    """A custom matcher kind was requested but never registered."""

    def __init__(self, kind: str, available: Sequence[str]) -> None:
        self.kind = kind
        self.available = sorted(available)
        if self.available:
            registered = ", ".join(self.available)
            msg = f"unknown matcher kind: {kind!r} (registered: {registered})"
        else:
            msg = f"unknown matcher kind: {kind!r} (no matcher kinds are registered)"
        super().__init__(msg)


__all__ = [
    "ArgumentMismatchError",
    "CardinalityError",
    "ConfigurationError",
    "ExpectedNeverError",
    "FailureReason",
    "MockError",
    "MockVerificationError",
    "MoreThanNCallsError",
    "MoreThanOneCallError",
    "NonOverridableMemberError",
    "NotPropertyError",
    "ObjMoxError",
    "PropertyNotReadableError",
    "PropertyNotWritableError",
    "ReturnValueRequiredError",
    "UnexpectedCallError",
    "UnknownMatcherError",
    "UnknownMemberError",
    "UnsupportedExpressionError",
    "UnsupportedIntermediateTypeError",
    "VerificationError",
]
