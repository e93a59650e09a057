"""Assignability, ancestry and naming helpers over Python type annotations."""

from __future__ import annotations

import types
import typing
from functools import lru_cache
from typing import Any

NoneType = type(None)

_UNION_ORIGINS = (typing.Union, types.UnionType)
_NUMERIC_PROMOTIONS = {
    (int, float),
    (int, complex),
    (float, complex),
}


def normalize(tp: object) -> object:
    """Map annotation spellings onto the objects the rest of the engine compares."""
    if tp is None:
        return NoneType
    if isinstance(tp, str):
        # Unresolved forward reference; nothing can be proven about it.
        return Any
    if isinstance(tp, typing.TypeVar):
        if tp.__bound__ is not None:
            return normalize(tp.__bound__)
        if tp.__constraints__:
            return typing.Union[tp.__constraints__]
        return Any
    if typing.get_origin(tp) is typing.Annotated:
        return normalize(typing.get_args(tp)[0])
    if typing.get_origin(tp) is typing.ClassVar:
        args = typing.get_args(tp)
        return normalize(args[0]) if args else Any
    return tp


def is_any(tp: object) -> bool:
    return tp is Any or tp is object


def is_union(tp: object) -> bool:
    return typing.get_origin(tp) in _UNION_ORIGINS


def runtime_class(tp: object) -> type | None:
    """Best class usable with isinstance for `tp`, or None when there is none."""
    tp = normalize(tp)
    if tp is Any:
        return None
    origin = typing.get_origin(tp)
    if origin is not None:
        return origin if isinstance(origin, type) else None
    if isinstance(tp, type):
        return tp
    return None


def is_assignable(source: object, target: object) -> bool:
    """True when a value of type `source` may flow into a slot of type `target`."""
    source = normalize(source)
    target = normalize(target)
    if source is target or is_any(target) or source is Any:
        return True
    if is_union(target):
        return any(is_assignable(source, arg) for arg in typing.get_args(target))
    if is_union(source):
        return all(is_assignable(arg, target) for arg in typing.get_args(source))
    if source is object:
        return False
    if (source, target) in _NUMERIC_PROMOTIONS:
        return True
    try:
        return is_derivative_of(source, target)
    except TypeError:
        # Unhashable annotation objects skip the memo table.
        return _is_derivative_of_impl(source, target)


@lru_cache(maxsize=4096)
def is_derivative_of(tp: object, parent: object) -> bool:
    """True when `parent` appears somewhere in the hierarchy of `tp`.

    `parent` may be a plain class, a closed generic alias (``list[int]``) or an
    open generic class (``Box`` for ``class Box(Generic[T])``).
    """
    return _is_derivative_of_impl(tp, parent)


def _is_derivative_of_impl(tp: object, parent: object) -> bool:
    if tp == parent or parent is object:
        return True

    parent_origin = typing.get_origin(parent)
    parent_args = typing.get_args(parent)
    if parent_origin is not None and parent_args:
        tp_origin = typing.get_origin(tp)
        if tp_origin is not None:
            if not _issubclass(tp_origin, parent_origin):
                return False
            tp_args = typing.get_args(tp)
            if len(tp_args) != len(parent_args):
                return False
            return all(a == b or is_any(normalize(b)) for a, b in zip(tp_args, parent_args))
        if isinstance(tp, type):
            return any(parent in _orig_bases(klass) for klass in tp.__mro__)
        return False

    tp_class = runtime_class(tp)
    parent_class = runtime_class(parent)
    if tp_class is None or parent_class is None:
        return False
    return _issubclass(tp_class, parent_class)


def _orig_bases(klass: type) -> tuple[object, ...]:
    return tuple(klass.__dict__.get("__orig_bases__", ()))


def _issubclass(tp: type, parent: type) -> bool:
    try:
        return issubclass(tp, parent)
    except TypeError:
        return False


def type_name(tp: object) -> str:
    """Readable type name including generic parameters, for diagnostics."""
    if tp is None or tp is NoneType:
        return "None"
    if tp is Any:
        return "Any"
    if isinstance(tp, str):
        return tp
    if is_union(tp):
        return " | ".join(type_name(arg) for arg in typing.get_args(tp))
    origin = typing.get_origin(tp)
    if origin is not None:
        args = typing.get_args(tp)
        base = getattr(origin, "__qualname__", None) or repr(origin)
        if not args:
            return base
        return f"{base}[{', '.join(type_name(arg) for arg in args)}]"
    if isinstance(tp, type):
        return tp.__qualname__
    return repr(tp)


def value_type_name(value: object) -> str:
    return type_name(type(value))
