"""Argument matchers used to select expectations for a call."""

from __future__ import annotations

import abc
import enum
import re
import typing as t

from .errors import ConfigurationError, UnknownMatcherError

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from collections.abc import Callable, Hashable


def structural_key(value: object) -> Hashable:
    """Return a hashable key describing the structure of *value*.

    Containers are walked recursively so that equal lists or mappings share a
    key. Values that are neither hashable nor a known container fall back to
    their identity.
    """
    if isinstance(value, list | tuple):
        return (type(value).__name__, tuple(structural_key(item) for item in value))
    if isinstance(value, dict):
        return (
            "dict",
            frozenset(
                (structural_key(key), structural_key(item))
                for key, item in value.items()
            ),
        )
    if isinstance(value, set | frozenset):
        return ("set", frozenset(structural_key(item) for item in value))
    try:
        hash(value)
    except TypeError:
        return ("id", id(value))
    return (type(value), value)


def _instance_state(obj: object) -> dict[str, object]:
    """Return the attributes of *obj* from its ``__dict__`` and ``__slots__``."""
    state = dict(getattr(obj, "__dict__", {}))
    for cls in type(obj).__mro__:
        slots = cls.__dict__.get("__slots__", ())
        for name in (slots,) if isinstance(slots, str) else slots:
            if name not in {"__dict__", "__weakref__"} and hasattr(obj, name):
                state[name] = getattr(obj, name)
    return state


class Matcher(abc.ABC):
    """Predicate evaluated against a single actual argument.

    Subclasses implement :meth:`matches`. The default :meth:`signature` is
    built from instance attributes and ``__slots__`` values; override it when
    the constructor state lives elsewhere.
    """

    @abc.abstractmethod
    def matches(self, value: object) -> bool:
        """Return ``True`` if *value* satisfies this matcher."""
        raise NotImplementedError

    def __call__(self, value: object) -> bool:
        """Alias for :meth:`matches`."""
        return self.matches(value)

    def signature(self) -> Hashable:
        """Return a structural key identifying this matcher's shape."""
        state = tuple(sorted(_instance_state(self).items()))
        return (type(self), structural_key(state))

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        """Return a debug representation."""
        return f"{type(self).__name__}()"


class Equals(Matcher):
    """Match values equal to ``expected``."""

    def __init__(self, expected: object) -> None:
        self.expected = expected

    def matches(self, value: object) -> bool:
        """Return ``True`` when *value* equals ``expected``."""
        return bool(value == self.expected)

    def signature(self) -> Hashable:
        """Return the structural key of the expected literal."""
        return (Equals, structural_key(self.expected))

    def __repr__(self) -> str:
        """Return the literal as it would be written in the call."""
        return repr(self.expected)


class Any(Matcher):
    """Match any value, optionally restricted to instances of ``typ``."""

    def __init__(self, typ: type | None = None) -> None:
        self.typ = typ

    def matches(self, value: object) -> bool:
        """Return ``True`` for ``None`` or any instance of ``typ``."""
        if self.typ is None or value is None:
            return True
        return isinstance(value, self.typ)

    def signature(self) -> Hashable:
        """Return a key that depends only on ``typ``."""
        return (Any, self.typ)

    def __repr__(self) -> str:
        """Return a debug representation."""
        if self.typ is None:
            return "Any()"
        return f"Any({self.typ.__name__})"


class Predicate(Matcher):
    """Use a custom ``func`` to determine a match."""

    def __init__(self, func: Callable[[t.Any], object]) -> None:
        self.func = func

    def matches(self, value: object) -> bool:
        """Return ``True`` if ``func(value)`` is truthy."""
        return bool(self.func(value))

    def signature(self) -> Hashable:
        """Describe the predicate by code and captured state.

        Two lambdas written at the same place share a code object; they only
        collide when the values they close over are equal as well.
        """
        code = getattr(self.func, "__code__", None)
        if code is None:
            return (Predicate, structural_key(self.func))
        closure = getattr(self.func, "__closure__", None) or ()
        cells = []
        for cell in closure:
            try:
                cells.append(structural_key(cell.cell_contents))
            except ValueError:  # empty cell
                cells.append(None)
        defaults = getattr(self.func, "__defaults__", None) or ()
        return (Predicate, code, tuple(cells), structural_key(defaults))

    def __repr__(self) -> str:
        """Return a debug representation."""
        name = getattr(self.func, "__qualname__", repr(self.func))
        return f"Predicate({name})"


class RangeKind(enum.Enum):
    """Whether both bounds of a :class:`Range` are included."""

    INCLUSIVE = "inclusive"
    EXCLUSIVE = "exclusive"


class Range(Matcher):
    """Match values between ``low`` and ``high``.

    ``kind`` sets both bounds at once; ``low_inclusive`` and
    ``high_inclusive`` override it per bound.
    """

    def __init__(
        self,
        low: t.Any,
        high: t.Any,
        kind: RangeKind = RangeKind.INCLUSIVE,
        *,
        low_inclusive: bool | None = None,
        high_inclusive: bool | None = None,
    ) -> None:
        default = kind is RangeKind.INCLUSIVE
        self.low = low
        self.high = high
        self.low_inclusive = default if low_inclusive is None else low_inclusive
        self.high_inclusive = default if high_inclusive is None else high_inclusive

    def matches(self, value: object) -> bool:
        """Return ``True`` when *value* lies within the configured bounds."""
        candidate = t.cast("t.Any", value)
        try:
            above = (
                candidate >= self.low if self.low_inclusive else candidate > self.low
            )
            below = (
                candidate <= self.high
                if self.high_inclusive
                else candidate < self.high
            )
        except TypeError:
            return False
        return bool(above and below)

    def __repr__(self) -> str:
        """Return interval notation for the range."""
        left = "[" if self.low_inclusive else "("
        right = "]" if self.high_inclusive else ")"
        return f"Range{left}{self.low!r}, {self.high!r}{right}"


class Regex(Matcher):
    """Match text that contains a match for ``pattern``."""

    def __init__(self, pattern: str, flags: int = 0) -> None:
        self._pattern = re.compile(pattern, flags)

    @property
    def pattern(self) -> str:
        """Return the original pattern string."""
        return self._pattern.pattern

    def matches(self, value: object) -> bool:
        """Return ``True`` if the regex matches *value*; ``False`` for non-text."""
        if not isinstance(value, str):
            return False
        return bool(self._pattern.search(value))

    def signature(self) -> Hashable:
        """Return a key made of the pattern and its flags."""
        return (Regex, self._pattern.pattern, self._pattern.flags)

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"Regex({self._pattern.pattern!r})"


class Out(Matcher):
    """Bind ``value`` to an output slot instead of comparing an argument."""

    def __init__(self, value: object) -> None:
        self.value = value

    def matches(self, value: object) -> bool:
        """Output bindings never filter calls."""
        return True

    def signature(self) -> Hashable:
        """Output bindings share a shape regardless of their value."""
        return (Out,)

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"Out({self.value!r})"


# ----------------------------------------------------------------------
# Custom matcher registration
# ----------------------------------------------------------------------
MatcherFactory = t.Callable[..., Matcher]

_CUSTOM_MATCHERS: dict[str, MatcherFactory] = {}


def register_matcher(
    kind: str, factory: MatcherFactory, *, replace: bool = False
) -> None:
    """Make ``factory`` available under the tag ``kind``."""
    if not kind:
        msg = "matcher kind must be a non-empty string"
        raise ConfigurationError(msg)
    if kind in _CUSTOM_MATCHERS and not replace:
        msg = f"matcher kind {kind!r} is already registered"
        raise ConfigurationError(msg)
    _CUSTOM_MATCHERS[kind] = factory


def unregister_matcher(kind: str) -> None:
    """Remove the factory registered under ``kind`` if present."""
    _CUSTOM_MATCHERS.pop(kind, None)


def registered_matchers() -> list[str]:
    """Return the registered custom matcher kinds."""
    return sorted(_CUSTOM_MATCHERS)


def create_matcher(kind: str, *args: t.Any, **kwargs: t.Any) -> Matcher:
    """Instantiate the custom matcher registered under ``kind``."""
    try:
        factory = _CUSTOM_MATCHERS[kind]
    except KeyError:
        raise UnknownMatcherError(kind, list(_CUSTOM_MATCHERS)) from None
    matcher = factory(*args, **kwargs)
    if not isinstance(matcher, Matcher):
        msg = (
            f"factory for matcher kind {kind!r} returned "
            f"{type(matcher).__name__}, expected a Matcher"
        )
        raise ConfigurationError(msg)
    return matcher


def as_matcher(value: object) -> Matcher:
    """Return *value* unchanged when it is a matcher, else wrap it in ``Equals``."""
    if isinstance(value, Matcher):
        return value
    return Equals(value)


__all__ = [
    "Any",
    "Equals",
    "Matcher",
    "MatcherFactory",
    "Out",
    "Predicate",
    "Range",
    "RangeKind",
    "Regex",
    "as_matcher",
    "create_matcher",
    "register_matcher",
    "registered_matchers",
    "structural_key",
    "unregister_matcher",
]
