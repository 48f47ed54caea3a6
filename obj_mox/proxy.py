"""Generate stand-in classes that route member access into a mock."""

from __future__ import annotations

import inspect
import logging
import types
import typing as t

from .errors import ConfigurationError
from .members import MemberKind, is_builtin_type, is_interface

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from collections.abc import Iterator

logger = logging.getLogger(__name__)

PROXY_ATTR: t.Final = "_obj_mox_mock"

# Dunder methods are left to the mocked type, except these and abstract ones.
_INTERCEPTED_DUNDERS: frozenset[str] = frozenset({"__call__"})


class Interceptor(t.Protocol):
    """Receives every intercepted access on a stand-in."""

    def intercept(
        self,
        instance: object,
        name: str,
        kind: MemberKind,
        args: tuple[t.Any, ...],
        kwargs: dict[str, t.Any],
    ) -> t.Any:
        """Handle one access and return its outcome."""
        ...


def _is_dunder(name: str) -> bool:
    return name.startswith("__") and name.endswith("__")


def interceptable_members(target: type) -> Iterator[tuple[str, object]]:
    """Yield ``(name, raw attribute)`` for members a stand-in overrides."""
    seen: set[str] = set()
    abstract = frozenset(getattr(target, "__abstractmethods__", ()))
    for base in target.__mro__:
        if base is object:
            continue
        for name in vars(base):
            if name in seen:
                continue
            seen.add(name)
            if (
                _is_dunder(name)
                and name not in _INTERCEPTED_DUNDERS
                and name not in abstract
            ):
                continue
            raw = inspect.getattr_static(target, name)
            if isinstance(raw, property):
                yield name, raw
            elif isinstance(raw, types.FunctionType) and not getattr(
                raw, "__final__", False
            ):
                yield name, raw


def _make_method(interceptor: Interceptor, name: str, raw: t.Any) -> t.Any:
    def method(self: object, *args: t.Any, **kwargs: t.Any) -> t.Any:
        return interceptor.intercept(self, name, MemberKind.METHOD, args, kwargs)

    method.__name__ = name
    method.__qualname__ = getattr(raw, "__qualname__", name)
    method.__doc__ = getattr(raw, "__doc__", None)
    return method


def _make_property(interceptor: Interceptor, name: str, raw: property) -> property:
    fget = None
    fset = None
    if raw.fget is not None:

        def fget(self: object) -> t.Any:
            return interceptor.intercept(self, name, MemberKind.GETTER, (), {})

    if raw.fset is not None:

        def fset(self: object, value: t.Any) -> None:
            interceptor.intercept(self, name, MemberKind.SETTER, (value,), {})

    return property(fget, fset, doc=raw.__doc__)


def _check_mockable(target: type) -> None:
    if not isinstance(target, type):
        msg = f"Type to mock must be a class, got {target!r}"
        raise ConfigurationError(msg)
    if getattr(target, "__final__", False) or is_builtin_type(target):
        msg = (
            "Type to mock must be an interface or an abstract or non-sealed "
            f"class: {target.__name__}"
        )
        raise ConfigurationError(msg)


def create_proxy_class(target: type, interceptor: Interceptor) -> type:
    """Return a subclass of *target* whose members call *interceptor*."""
    _check_mockable(target)
    namespace: dict[str, t.Any] = {}
    for name, raw in interceptable_members(target):
        if isinstance(raw, property):
            namespace[name] = _make_property(interceptor, name, raw)
        else:
            namespace[name] = _make_method(interceptor, name, raw)
    intercepted = len(namespace)
    namespace[PROXY_ATTR] = interceptor
    namespace["__repr__"] = lambda self: f"<{target.__name__} stand-in>"
    namespace["__module__"] = target.__module__

    def exec_body(ns: dict[str, t.Any]) -> None:
        ns.update(namespace)

    try:
        proxy_cls = types.new_class(
            f"{target.__name__}StandIn", (target,), {}, exec_body
        )
    except TypeError as exc:
        msg = f"Cannot create a stand-in for {target.__name__}: {exc}"
        raise ConfigurationError(msg) from exc
    remaining = sorted(getattr(proxy_cls, "__abstractmethods__", ()))
    if remaining:
        msg = (
            f"Cannot create a stand-in for {target.__name__}: abstract "
            f"member(s) {', '.join(remaining)} cannot be intercepted"
        )
        raise ConfigurationError(msg)
    logger.debug(
        "Created stand-in class for %s intercepting %d member(s)",
        target.__name__,
        intercepted,
    )
    return proxy_cls


def create_proxy(
    target: type,
    interceptor: Interceptor,
    args: t.Sequence[t.Any] = (),
    kwargs: t.Mapping[str, t.Any] | None = None,
) -> object:
    """Instantiate a stand-in for *target*.

    Constructor arguments are only accepted for class mocks; the mocked
    type's initialiser runs when they are given and is skipped otherwise.
    """
    has_ctor_args = bool(args) or bool(kwargs)
    if has_ctor_args and is_interface(target):
        msg = "Constructor arguments cannot be passed for interface mocks."
        raise ConfigurationError(msg)
    proxy_cls = create_proxy_class(target, interceptor)
    if has_ctor_args:
        try:
            return proxy_cls(*args, **(kwargs or {}))
        except TypeError as exc:
            msg = (
                "A matching constructor for the given arguments was not found "
                f"on {target.__name__}: {exc}"
            )
            raise ConfigurationError(msg) from exc
    return proxy_cls.__new__(proxy_cls)


def owner_of(obj: object) -> Interceptor | None:
    """Return the interceptor behind a stand-in, or ``None`` for other objects."""
    return t.cast("Interceptor | None", getattr(type(obj), PROXY_ATTR, None))


__all__ = [
    "PROXY_ATTR",
    "Interceptor",
    "create_proxy",
    "create_proxy_class",
    "interceptable_members",
    "owner_of",
]
