"""Explicit conversion stage from opaque values to declared parameter types.

Converters are built once per target type at compile time and called as
``converter(value, where)``; they either return the (possibly converted)
value or raise ArgumentTypeMismatch. A target that accepts anything gets no
converter at all (None), so the generated accessor passes the value through.
"""

from __future__ import annotations

import numbers
import operator
import typing
from collections.abc import Callable

from .errors import ArgumentTypeMismatch
from .typing_utils import NoneType, is_any, is_union, normalize, runtime_class, type_name, value_type_name

Converter = Callable[[object, str], object]
ConverterFactory = Callable[[object], Converter]

_REGISTRY: list[tuple[Callable[[object], bool], ConverterFactory]] = []


def register_converter(matches: Callable[[object], bool], factory: ConverterFactory) -> None:
    """Register a converter factory; later registrations take precedence."""
    _REGISTRY.append((matches, factory))


def converter_for(target: object) -> Converter | None:
    target = normalize(target)
    if is_any(target):
        return None
    for matches, factory in reversed(_REGISTRY):
        if matches(target):
            return factory(target)
    if is_union(target):
        return _union_converter(target)
    if target is NoneType:
        return _none_converter
    if target is float:
        return _float_converter
    if target is complex:
        return _complex_converter
    if target is int:
        return _int_converter
    klass = runtime_class(target)
    if klass is None or klass is object:
        return None
    if getattr(klass, "_is_protocol", False) and not getattr(klass, "_is_runtime_protocol", False):
        return None
    return _instance_converter(klass, type_name(target))


def coerce(value: object, target: object, *, where: str = "value") -> object:
    """One-off conversion; compiled accessors call prebuilt converters instead."""
    convert = converter_for(target)
    if convert is None:
        return value
    return convert(value, where)


def _mismatch(where: str, expected: str, value: object) -> ArgumentTypeMismatch:
    return ArgumentTypeMismatch(where, expected, value_type_name(value))


def _none_converter(value: object, where: str) -> object:
    if value is not None:
        raise _mismatch(where, "None", value)
    return value


def _float_converter(value: object, where: str) -> object:
    if isinstance(value, float):
        return value
    if isinstance(value, numbers.Real):
        return float(value)
    raise _mismatch(where, "float", value)


def _complex_converter(value: object, where: str) -> object:
    if isinstance(value, complex):
        return value
    if isinstance(value, numbers.Number):
        try:
            return complex(value)
        except TypeError as err:
            raise _mismatch(where, "complex", value) from err
    raise _mismatch(where, "complex", value)


def _int_converter(value: object, where: str) -> object:
    if isinstance(value, int):
        return value
    if hasattr(type(value), "__index__"):
        return operator.index(value)
    raise _mismatch(where, "int", value)


def _instance_converter(klass: type, expected: str) -> Converter:
    def convert(value: object, where: str) -> object:
        if isinstance(value, klass):
            return value
        raise _mismatch(where, expected, value)

    return convert


def _union_converter(target: object) -> Converter | None:
    members = [converter_for(arg) for arg in typing.get_args(target)]
    if any(member is None for member in members):
        return None
    expected = type_name(target)
    classes = tuple(klass for klass in (runtime_class(arg) for arg in typing.get_args(target)) if klass is not None)

    def convert(value: object, where: str) -> object:
        # Exact members win over promotions (an int stays an int in `int | float`).
        if classes and isinstance(value, classes):
            return value
        for member in members:
            try:
                return member(value, where)
            except ArgumentTypeMismatch:
                continue
        raise _mismatch(where, expected, value)

    return convert
