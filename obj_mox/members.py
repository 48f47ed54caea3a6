"""Member identity tokens and signature helpers for mocked types."""

from __future__ import annotations

import builtins
import collections.abc as cabc
import dataclasses as dc
import enum
import inspect
import logging
import types
import typing as t

from .errors import (
    NonOverridableMemberError,
    NotPropertyError,
    PropertyNotReadableError,
    PropertyNotWritableError,
    UnknownMemberError,
)

logger = logging.getLogger(__name__)


class MemberKind(enum.StrEnum):
    """The kind of access intercepted on a stand-in."""

    METHOD = "method"
    GETTER = "getter"
    SETTER = "setter"


@dc.dataclass(frozen=True, slots=True)
class Member:
    """Canonical identity of an intercepted operation.

    ``declaring_type`` is the most-base class declaring ``name``, so an
    override and the declaration it overrides compare equal.
    """

    declaring_type: type
    name: str
    kind: MemberKind

    def __str__(self) -> str:
        """Return ``Type.name`` for display."""
        return f"{self.declaring_type.__name__}.{self.name}"


class _NoDefault:
    """Sentinel for annotations without a synthesizable default value."""

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return "NO_DEFAULT"


NO_DEFAULT: t.Final = _NoDefault()

_SETTER_SIGNATURE = inspect.Signature(
    [inspect.Parameter("value", inspect.Parameter.POSITIONAL_OR_KEYWORD)]
)
_GETTER_SIGNATURE = inspect.Signature([])


@dc.dataclass(frozen=True, slots=True)
class MemberInfo:
    """Facts about a member as seen on one concrete type."""

    member: Member
    concrete_type: type
    implementation: t.Any
    signature: inspect.Signature | None
    return_annotation: t.Any
    is_abstract: bool
    is_final: bool

    @property
    def is_void(self) -> bool:
        """Return ``True`` when the member is declared to return ``None``."""
        if self.member.kind is MemberKind.SETTER:
            return True
        return self.return_annotation is None or self.return_annotation is type(None)


def is_interface(cls: type) -> bool:
    """Return ``True`` for :class:`typing.Protocol` classes."""
    return bool(getattr(cls, "_is_protocol", False))


def is_builtin_type(cls: type) -> bool:
    """Return ``True`` for types provided by the :mod:`builtins` module."""
    return getattr(builtins, cls.__name__, None) is cls


def _declaring_type(cls: type, name: str) -> type | None:
    for base in reversed(cls.__mro__):
        if base is object:
            continue
        if name in vars(base):
            return base
    return None


def _return_annotation(func: t.Any) -> t.Any:
    try:
        hints = t.get_type_hints(func)
    except (NameError, TypeError):
        annotations = getattr(func, "__annotations__", {})
        return annotations.get("return", inspect.Signature.empty)
    return hints.get("return", inspect.Signature.empty)


def _method_signature(func: t.Any) -> inspect.Signature | None:
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        return None
    params = list(sig.parameters.values())
    return sig.replace(parameters=params[1:])


class MemberTable:
    """Resolve and cache member identities per concrete type.

    The table maps ``(concrete type, name, kind)`` to :class:`MemberInfo`.
    The canonical :class:`Member` token is shared by every override of the
    same declaration.
    """

    def __init__(self) -> None:
        self._entries: dict[tuple[type, str, MemberKind], MemberInfo] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        """Forget every cached entry."""
        self._entries.clear()

    def lookup(self, cls: type, name: str, kind: MemberKind) -> MemberInfo:
        """Return the :class:`MemberInfo` for ``cls.name`` accessed as ``kind``."""
        key = (cls, name, kind)
        info = self._entries.get(key)
        if info is None:
            info = self._build(cls, name, kind)
            self._entries[key] = info
        return info

    def _build(self, cls: type, name: str, kind: MemberKind) -> MemberInfo:
        declaring = _declaring_type(cls, name)
        if declaring is None:
            msg = f"{cls.__name__} has no member named {name!r}"
            raise UnknownMemberError(msg)
        raw = inspect.getattr_static(cls, name)
        member = Member(declaring, name, kind)
        if isinstance(raw, property):
            return self._build_property(cls, member, raw)
        if kind is not MemberKind.METHOD:
            msg = f"Expression is not a property access: {cls.__name__}.{name}"
            raise NotPropertyError(msg)
        if isinstance(raw, staticmethod | classmethod):
            msg = (
                "Invalid expectation on a non-overridable member: "
                f"{cls.__name__}.{name} is a {type(raw).__name__}"
            )
            raise NonOverridableMemberError(msg)
        if not isinstance(raw, types.FunctionType):
            msg = (
                f"{cls.__name__}.{name} is not a method. Field calls are not "
                "supported; use methods and properties instead."
            )
            raise NonOverridableMemberError(msg)
        is_final = bool(getattr(raw, "__final__", False))
        if is_final:
            msg = (
                "Invalid expectation on a non-overridable member: "
                f"{cls.__name__}.{name} is final"
            )
            raise NonOverridableMemberError(msg)
        logger.debug("Resolved %s on %s to %s", name, cls.__name__, member)
        return MemberInfo(
            member=member,
            concrete_type=cls,
            implementation=raw,
            signature=_method_signature(raw),
            return_annotation=_return_annotation(raw),
            is_abstract=bool(getattr(raw, "__isabstractmethod__", False)),
            is_final=is_final,
        )

    def _build_property(
        self, cls: type, member: Member, prop: property
    ) -> MemberInfo:
        if member.kind is MemberKind.METHOD:
            msg = (
                f"{cls.__name__}.{member.name} is a property; configure it with "
                "expect_get() or expect_set()"
            )
            raise NotPropertyError(msg)
        if member.kind is MemberKind.GETTER:
            if prop.fget is None:
                msg = f"Property {cls.__name__}.{member.name} is write-only."
                raise PropertyNotReadableError(msg)
            accessor = prop.fget
            signature = _GETTER_SIGNATURE
            annotation = _return_annotation(prop.fget)
        else:
            if prop.fset is None:
                msg = f"Property {cls.__name__}.{member.name} is read-only."
                raise PropertyNotWritableError(msg)
            accessor = prop.fset
            signature = _SETTER_SIGNATURE
            annotation = None
        is_final = bool(getattr(accessor, "__final__", False))
        if is_final:
            msg = (
                "Invalid expectation on a non-overridable member: "
                f"{cls.__name__}.{member.name} is final"
            )
            raise NonOverridableMemberError(msg)
        return MemberInfo(
            member=member,
            concrete_type=cls,
            implementation=accessor,
            signature=signature,
            return_annotation=annotation,
            is_abstract=bool(getattr(accessor, "__isabstractmethod__", False)),
            is_final=is_final,
        )


MEMBERS = MemberTable()


def normalize_arguments(
    info: MemberInfo, args: t.Sequence[t.Any], kwargs: t.Mapping[str, t.Any]
) -> list[t.Any]:
    """Flatten ``args``/``kwargs`` into positional order for ``info``.

    Defaults are applied so a configuration that omits an optional argument
    matches a call that omits it too. Variadic positionals are spliced in
    place; variadic keywords become a single trailing mapping.

    Raises
    ------
    TypeError
        When the arguments cannot be bound to the member signature.
    """
    sig = info.signature
    if sig is None:
        flat = list(args)
        if kwargs:
            flat.append(dict(kwargs))
        return flat
    bound = sig.bind(*args, **kwargs)
    bound.apply_defaults()
    flat = []
    for name, param in sig.parameters.items():
        value = bound.arguments[name]
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            flat.extend(value)
        else:
            flat.append(value)
    return flat


_SIMPLE_DEFAULTS: tuple[type, ...] = (
    bool,
    int,
    float,
    complex,
    str,
    bytes,
    bytearray,
    list,
    dict,
    set,
    frozenset,
    tuple,
)

_ABSTRACT_DEFAULTS: dict[t.Any, t.Callable[[], t.Any]] = {
    cabc.Iterable: tuple,
    cabc.Collection: tuple,
    cabc.Sequence: tuple,
    cabc.MutableSequence: list,
    cabc.Mapping: dict,
    cabc.MutableMapping: dict,
    cabc.Set: frozenset,
    cabc.MutableSet: set,
}


def default_value(annotation: t.Any) -> t.Any:
    """Return a default value for ``annotation`` or :data:`NO_DEFAULT`.

    ``None`` covers ``None`` and optional annotations; builtin scalar and
    collection types produce their empty value.
    """
    if annotation is None or annotation is type(None):
        return None
    if annotation is inspect.Signature.empty or isinstance(annotation, str):
        return NO_DEFAULT
    origin = t.get_origin(annotation)
    if origin is t.Union or origin is types.UnionType:
        if type(None) in t.get_args(annotation):
            return None
        return NO_DEFAULT
    target = origin if origin is not None else annotation
    if target in _SIMPLE_DEFAULTS:
        return target()
    factory = _ABSTRACT_DEFAULTS.get(target)
    if factory is not None:
        return factory()
    return NO_DEFAULT


__all__ = [
    "MEMBERS",
    "NO_DEFAULT",
    "Member",
    "MemberInfo",
    "MemberKind",
    "MemberTable",
    "default_value",
    "is_builtin_type",
    "is_interface",
    "normalize_arguments",
]
