"""Ordered storage and resolution of expectations."""

from __future__ import annotations

import logging
import typing as t

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from collections.abc import Hashable, Iterator

    from .calls import Invocation
    from .expectations import Expectation

logger = logging.getLogger(__name__)


class ExpectationRegistry:
    """Expectations keyed by structural call signature.

    Registering a call shape that is already present replaces the earlier
    expectation; any other shape is appended. Resolution walks expectations in
    registration order and returns the first that matches, so overlapping
    shapes are resolved by which was configured first.

    The registry is plain mutable state and is only safe under sequential use.
    """

    def __init__(self) -> None:
        self._entries: dict[Hashable, Expectation] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Expectation]:
        return iter(list(self._entries.values()))

    def register(self, expectation: Expectation) -> Expectation:
        """Add *expectation*, replacing any expectation with the same shape."""
        key = expectation.call.signature()
        if key in self._entries:
            logger.debug("Replacing expectation %s", expectation.describe())
        else:
            logger.debug("Adding expectation %s", expectation.describe())
        self._entries[key] = expectation
        return expectation

    def resolve(self, invocation: Invocation) -> Expectation | None:
        """Return the first expectation matching *invocation*, if any."""
        for expectation in self._entries.values():
            if expectation.matches(invocation):
                return expectation
        return None

    def all(self) -> list[Expectation]:
        """Return every registered expectation in resolution order."""
        return list(self._entries.values())


__all__ = ["ExpectationRegistry"]
