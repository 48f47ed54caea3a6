"""Route intercepted calls to expectations or to the behaviour-mode fallback."""

from __future__ import annotations

import dataclasses as dc
import enum
import logging
import threading
import typing as t

from ._formatting import format_sections, numbered
from .errors import ReturnValueRequiredError, UnexpectedCallError
from .members import NO_DEFAULT, default_value

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from collections.abc import Callable

    from .calls import Invocation
    from .members import MemberInfo
    from .registry import ExpectationRegistry

logger = logging.getLogger(__name__)


class MockBehavior(enum.StrEnum):
    """Policy applied when no expectation matches a call.

    Listed from strictest to most permissive.
    """

    STRICT = "strict"
    NORMAL = "normal"
    RELAXED = "relaxed"
    LOOSE = "loose"

    DEFAULT = NORMAL


@dc.dataclass(frozen=True, slots=True)
class CallTarget:
    """What the stand-in knows about the member being called.

    ``proceed`` runs the real implementation when the stand-in wraps a
    concrete class; interface stand-ins pass ``None``.
    """

    info: MemberInfo
    wraps_class: bool
    proceed: Callable[[], t.Any] | None = None

    @property
    def has_base(self) -> bool:
        """Return ``True`` when a concrete implementation can be called."""
        return (
            self.wraps_class and not self.info.is_abstract and self.proceed is not None
        )


class Dispatcher:
    """Resolve one intercepted call at a time against a registry."""

    def __init__(
        self,
        registry: ExpectationRegistry,
        behavior: MockBehavior = MockBehavior.DEFAULT,
    ) -> None:
        self.registry = registry
        self.behavior = MockBehavior(behavior)

    def dispatch(self, invocation: Invocation, target: CallTarget) -> t.Any:
        """Return the outcome of *invocation* or raise its failure."""
        expectation = self.registry.resolve(invocation)
        if expectation is not None:
            return expectation.execute(invocation)
        return self._fallback(invocation, target)

    def _fallback(self, invocation: Invocation, target: CallTarget) -> t.Any:
        behavior = self.behavior
        if behavior is MockBehavior.STRICT:
            raise self._unexpected(
                invocation,
                "All invocations on the mock must have a corresponding expectation.",
            )
        if target.has_base and target.proceed is not None:
            logger.debug("No expectation for %s; calling base", invocation.render())
            return target.proceed()
        if behavior is MockBehavior.NORMAL:
            kind = "interface" if not target.wraps_class else "abstract"
            raise self._unexpected(
                invocation,
                f"Calls to {kind} members must have a corresponding expectation.",
            )
        if target.info.is_void:
            logger.debug("No expectation for %s; returning None", invocation.render())
            return None
        value = default_value(target.info.return_annotation)
        if value is not NO_DEFAULT:
            logger.debug(
                "No expectation for %s; returning default %r",
                invocation.render(),
                value,
            )
            return value
        if behavior is MockBehavior.LOOSE:
            return None
        msg = format_sections(
            f"{invocation.render()} invocation failed with mock behavior {behavior}.",
            [
                (
                    "Reason",
                    "Invocation needs to return a value and therefore must have "
                    "a corresponding expectation that provides it.",
                ),
                ("Registered expectations", self._registered()),
            ],
        )
        raise ReturnValueRequiredError(msg)

    def _unexpected(self, invocation: Invocation, reason: str) -> UnexpectedCallError:
        msg = format_sections(
            f"{invocation.render()} invocation failed with mock behavior "
            f"{self.behavior}.",
            [
                ("Reason", reason),
                ("Registered expectations", self._registered()),
            ],
        )
        return UnexpectedCallError(msg)

    def _registered(self) -> str:
        return numbered([exp.describe() for exp in self.registry.all()])


class LockingDispatcher(Dispatcher):
    """Dispatcher that serialises calls for stand-ins shared across threads."""

    def __init__(
        self,
        registry: ExpectationRegistry,
        behavior: MockBehavior = MockBehavior.DEFAULT,
    ) -> None:
        super().__init__(registry, behavior)
        self._lock = threading.RLock()

    def dispatch(self, invocation: Invocation, target: CallTarget) -> t.Any:
        """Dispatch *invocation* while holding the dispatcher lock."""
        with self._lock:
            return super().dispatch(invocation, target)


__all__ = ["CallTarget", "Dispatcher", "LockingDispatcher", "MockBehavior"]
