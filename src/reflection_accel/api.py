"""Public compile entry points bound to the accessor cache."""

from __future__ import annotations

import os
from collections.abc import Callable
from typing import NamedTuple

from .cache import AccessorCache, default_cache
from .compiler import build_accessor
from .descriptors import MemberDescriptor, MemberKind
from .errors import AccessorMissing, InvalidArgument
from .shapes import CallShape
from .typing_utils import type_name

_CACHE_DISABLED = os.environ.get("REFLECTION_ACCEL_DISABLE_CACHE", "0") == "1"


class AccessorPair(NamedTuple):
    getter: Callable | None
    setter: Callable | None


def get_or_compile(
    descriptor: MemberDescriptor,
    shape: CallShape,
    *,
    cache: AccessorCache | None = None,
    use_cache: bool = True,
) -> Callable:
    """Return the accessor for (descriptor, shape), compiling it at most once per cache."""
    if not use_cache or (cache is None and _CACHE_DISABLED):
        return build_accessor(descriptor, shape)
    return (cache if cache is not None else default_cache()).get_or_compile(descriptor, shape)


def compile_constructor(
    descriptor: MemberDescriptor,
    shape: CallShape | None = None,
    *,
    cache: AccessorCache | None = None,
    use_cache: bool = True,
) -> Callable:
    """Accessor creating instances through a constructor.

    The default shape takes the constructor's parameters as separate opaque
    arguments; pass ``CallShape.constructor_array()`` for a single sequence
    argument whose length is checked on every call.
    """
    if shape is None:
        shape = CallShape.constructor(_require_descriptor(descriptor).arity)
    return get_or_compile(descriptor, shape, cache=cache, use_cache=use_cache)


def compile_method(
    descriptor: MemberDescriptor,
    shape: CallShape | None = None,
    *,
    cache: AccessorCache | None = None,
    use_cache: bool = True,
) -> Callable:
    """Accessor for a value-producing method (opaque receiver and result by default)."""
    if shape is None:
        descriptor = _require_descriptor(descriptor)
        if descriptor.is_static:
            shape = CallShape.static_func(descriptor.arity)
        else:
            shape = CallShape.func(descriptor.arity)
    return get_or_compile(descriptor, shape, cache=cache, use_cache=use_cache)


def compile_action(
    descriptor: MemberDescriptor,
    shape: CallShape | None = None,
    *,
    cache: AccessorCache | None = None,
    use_cache: bool = True,
) -> Callable:
    """Accessor for an effect-only method; the accessor always returns None."""
    if shape is None:
        descriptor = _require_descriptor(descriptor)
        if descriptor.is_static:
            shape = CallShape.static_action(descriptor.arity)
        else:
            shape = CallShape.action(descriptor.arity)
    return get_or_compile(descriptor, shape, cache=cache, use_cache=use_cache)


def compile_getter(
    descriptor: MemberDescriptor,
    shape: CallShape | None = None,
    *,
    cache: AccessorCache | None = None,
    use_cache: bool = True,
) -> Callable:
    return get_or_compile(descriptor, shape or CallShape.getter(), cache=cache, use_cache=use_cache)


def compile_setter(
    descriptor: MemberDescriptor,
    shape: CallShape | None = None,
    *,
    cache: AccessorCache | None = None,
    use_cache: bool = True,
) -> Callable:
    return get_or_compile(descriptor, shape or CallShape.setter(), cache=cache, use_cache=use_cache)


def compile_field_accessor(
    descriptor: MemberDescriptor,
    *,
    base: type | None = None,
    non_public: bool = True,
    cache: AccessorCache | None = None,
    use_cache: bool = True,
) -> AccessorPair:
    """Getter/setter pair for a field; a read-only field gets ``setter=None``."""
    descriptor = _require_descriptor(descriptor, MemberKind.FIELD)
    return _accessor_pair(descriptor, base, None, non_public, cache, use_cache)


def compile_property_accessor(
    descriptor: MemberDescriptor,
    *,
    base: type | None = None,
    value: object | None = None,
    non_public: bool = True,
    cache: AccessorCache | None = None,
    use_cache: bool = True,
) -> AccessorPair:
    """Getter/setter pair for a property; a missing accessor side is None.

    `base` pins the receiver type and `value` pins the property type for both
    directions.
    """
    descriptor = _require_descriptor(descriptor, MemberKind.PROPERTY)
    return _accessor_pair(descriptor, base, value, non_public, cache, use_cache)


def _accessor_pair(descriptor, base, value, non_public, cache, use_cache) -> AccessorPair:
    if not descriptor.readable and not descriptor.writable:
        raise AccessorMissing(
            f"The '{descriptor.name}' {descriptor.kind.value} on "
            f"'{type_name(descriptor.declaring_type)}' has neither a get nor a set accessor."
        )
    getter = setter = None
    if descriptor.readable:
        shape = CallShape.getter(base=base, value=value, non_public=non_public)
        getter = get_or_compile(descriptor, shape, cache=cache, use_cache=use_cache)
    if descriptor.writable:
        shape = CallShape.setter(base=base, value=value, non_public=non_public)
        setter = get_or_compile(descriptor, shape, cache=cache, use_cache=use_cache)
    return AccessorPair(getter, setter)


def _require_descriptor(descriptor: object, kind: MemberKind | None = None) -> MemberDescriptor:
    if descriptor is None or not isinstance(descriptor, MemberDescriptor):
        raise InvalidArgument("descriptor")
    if kind is not None and descriptor.kind is not kind:
        raise InvalidArgument("descriptor", f"expected a {kind.value} descriptor, got the {descriptor}")
    return descriptor
