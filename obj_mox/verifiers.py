"""Verification helpers for :class:`~obj_mox.controller.Mock`."""

from __future__ import annotations

import enum
import logging
import typing as t

from ._formatting import format_sections, numbered
from .errors import MockVerificationError, VerificationError

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from collections.abc import Iterable

    from .calls import ExpectedCall, Invocation
    from .expectations import Expectation
    from .registry import ExpectationRegistry

logger = logging.getLogger(__name__)


class Selector(enum.StrEnum):
    """Which expectations a verification sweep considers."""

    VERIFIABLE = "verifiable"
    ALL = "all"

    def selects(self, expectation: Expectation) -> bool:
        """Return ``True`` if *expectation* takes part in this sweep."""
        return self is Selector.ALL or expectation.is_verifiable


def describe_unmet(expectation: Expectation) -> str:
    """Return the diagnostic line for an expectation that was never invoked."""
    line = expectation.describe()
    if expectation.expected_count:
        line += f" (expected calls={expectation.expected_count})"
    return line


class VerificationEngine:
    """Check that the selected expectations were exercised."""

    def collect(
        self, registry: ExpectationRegistry, selector: Selector
    ) -> list[str]:
        """Return one diagnostic line per selected, never-invoked expectation."""
        return [
            describe_unmet(exp)
            for exp in registry.all()
            if selector.selects(exp) and not exp.invoked
        ]

    def check(
        self,
        registry: ExpectationRegistry,
        selector: Selector,
        subject: type,
        *,
        inner: Iterable[str] = (),
    ) -> None:
        """Raise :class:`MockVerificationError` naming every unmet expectation.

        ``inner`` carries diagnostic lines already collected from sub-mocks;
        they are reported after the lines for ``registry``.
        """
        failures = [*self.collect(registry, selector), *inner]
        if failures:
            logger.debug(
                "Verification of %s failed with %d unmet expectation(s)",
                subject.__name__,
                len(failures),
            )
            raise MockVerificationError(subject, failures)


def aggregate_failures(errors: Iterable[MockVerificationError]) -> None:
    """Raise one :class:`VerificationError` listing every failed mock."""
    collected = list(errors)
    if not collected:
        return
    body = "\n".join(err.raw_expectations() for err in collected)
    msg = f"The following expectations were not met:\n{body}"
    raise VerificationError(msg)


class CallVerifier:
    """Check that a journal contains a call matching an expected shape."""

    def verify(
        self,
        journal: Iterable[Invocation],
        expected: ExpectedCall,
        subject: type,
    ) -> None:
        """Raise if no invocation in *journal* satisfies *expected*."""
        calls = list(journal)
        if any(expected.matches(inv) for inv in calls):
            return
        relevant = [inv for inv in calls if inv.member == expected.member]
        reasons = [expected.explain_mismatch(inv) for inv in relevant]
        msg = format_sections(
            f"Expected invocation on Mock<{subject.__name__}> was not performed.",
            [
                ("Expected", expected.render()),
                ("Recorded invocations", numbered([inv.render() for inv in calls])),
                ("Mismatches", "\n".join(reasons)),
            ],
        )
        raise MockVerificationError(subject, [expected.render()], msg)


__all__ = [
    "CallVerifier",
    "Selector",
    "VerificationEngine",
    "aggregate_failures",
    "describe_unmet",
]
