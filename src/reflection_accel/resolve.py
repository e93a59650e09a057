"""Build member descriptors from classes, functions and attribute names."""

from __future__ import annotations

import dataclasses
import inspect
import sys
import typing
from typing import Any

from .descriptors import MemberDescriptor, MemberKind
from .errors import InvalidArgument, MemberNotFound
from .typing_utils import normalize, type_name

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


def constructor_of(cls: type) -> MemberDescriptor:
    """Descriptor for calling `cls` itself with its positional parameters."""
    _require_class(cls)
    try:
        signature = inspect.signature(cls)
    except (TypeError, ValueError) as err:
        raise MemberNotFound(f"'{type_name(cls)}' has no introspectable constructor") from err
    init = cls.__init__ if cls.__init__ is not object.__init__ else cls.__new__
    hints = _hints(init)
    params = [p for p in signature.parameters.values() if p.kind in _POSITIONAL]
    return MemberDescriptor(
        kind=MemberKind.CONSTRUCTOR,
        declaring_type=cls,
        name="__init__",
        parameter_types=tuple(_param_type(p, hints) for p in params),
        value_type=cls,
        target=cls,
    )


def method_of(cls: type, name: str) -> MemberDescriptor:
    _require_class(cls)
    owner, attr, raw = _lookup(cls, name)

    if isinstance(raw, staticmethod):
        func, is_static, skip_first, target = raw.__func__, True, False, raw.__func__
    elif isinstance(raw, classmethod):
        func, is_static, skip_first, target = raw.__func__, True, True, getattr(owner, attr)
    elif inspect.isfunction(raw) or inspect.ismethoddescriptor(raw) or inspect.isbuiltin(raw):
        func, is_static, skip_first, target = raw, False, True, raw
    else:
        raise MemberNotFound(f"'{name}' on '{type_name(cls)}' is not a method")

    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError) as err:
        raise MemberNotFound(f"'{type_name(cls)}.{name}' has no introspectable signature") from err
    hints = _hints(func)
    params = [p for p in signature.parameters.values() if p.kind in _POSITIONAL]
    if skip_first:
        params = params[1:]

    if "return" in hints:
        value_type = normalize(hints["return"])
    else:
        value_type = _annotation(signature.return_annotation)

    return MemberDescriptor(
        kind=MemberKind.METHOD,
        declaring_type=owner,
        name=attr,
        parameter_types=tuple(_param_type(p, hints) for p in params),
        value_type=value_type,
        is_static=is_static,
        target=target,
    )


def property_of(cls: type, name: str) -> MemberDescriptor:
    _require_class(cls)
    owner, attr, raw = _lookup(cls, name)
    if not isinstance(raw, property):
        raise MemberNotFound(f"'{name}' on '{type_name(cls)}' is not a property")

    value_type: object = Any
    if raw.fget is not None:
        value_type = normalize(_hints(raw.fget).get("return", Any))
    if value_type is Any and raw.fset is not None:
        setter_hints = _hints(raw.fset)
        setter_params = [n for n in setter_hints if n != "return"]
        if setter_params:
            value_type = normalize(setter_hints[setter_params[-1]])

    public = not attr.startswith("_")
    return MemberDescriptor(
        kind=MemberKind.PROPERTY,
        declaring_type=owner,
        name=attr,
        value_type=value_type,
        target=raw,
        readable=raw.fget is not None,
        writable=raw.fset is not None,
        getter_public=public and _accessor_public(raw.fget),
        setter_public=public and _accessor_public(raw.fset),
    )


def field_of(cls: type, name: str) -> MemberDescriptor:
    """Descriptor for an annotated, slotted or dataclass field."""
    _require_class(cls)
    for klass in cls.__mro__:
        if klass is object:
            continue
        annotations = inspect.get_annotations(klass)
        slots = klass.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        if name not in annotations and name not in slots:
            continue
        if isinstance(klass.__dict__.get(name), property):
            break
        hint = _hints(klass).get(name, annotations.get(name, Any))
        is_static = typing.get_origin(hint) is typing.ClassVar or (
            isinstance(hint, str) and hint.startswith(("ClassVar", "typing.ClassVar"))
        )
        writable = True
        if dataclasses.is_dataclass(cls) and cls.__dataclass_params__.frozen:
            writable = False
        public = not name.startswith("_")
        return MemberDescriptor(
            kind=MemberKind.FIELD,
            declaring_type=klass,
            name=name,
            value_type=normalize(hint),
            is_static=is_static,
            readable=True,
            writable=writable,
            getter_public=public,
            setter_public=public,
        )
    raise MemberNotFound(f"'{type_name(cls)}' has no field named '{name}'")


def member_of(cls: type, name: str) -> MemberDescriptor:
    """Property descriptor when `name` is a property, else a field descriptor."""
    _require_class(cls)
    try:
        _, _, raw = _lookup(cls, name)
    except MemberNotFound:
        raw = None
    if isinstance(raw, property):
        return property_of(cls, name)
    return field_of(cls, name)


def describe(obj: object, *, owner: type | None = None) -> MemberDescriptor:
    """Descriptor for a class (its constructor), a method or a property object."""
    if obj is None:
        raise InvalidArgument("obj")
    if isinstance(obj, type):
        return constructor_of(obj)
    if isinstance(obj, property):
        if owner is None:
            raise InvalidArgument("owner", "describing a property object requires its owner class")
        for klass in owner.__mro__:
            for attr, value in klass.__dict__.items():
                if value is obj:
                    return property_of(owner, attr)
        raise MemberNotFound(f"the property is not defined on '{type_name(owner)}'")
    if inspect.ismethod(obj):
        bound_to = obj.__self__
        cls = bound_to if isinstance(bound_to, type) else type(bound_to)
        return method_of(cls, obj.__func__.__name__)
    if inspect.isfunction(obj):
        cls = owner if owner is not None else _owner_from_qualname(obj)
        return method_of(cls, obj.__name__)
    raise InvalidArgument("obj", f"cannot describe a {type(obj).__name__} object")


def _require_class(cls: object) -> None:
    if cls is None or not isinstance(cls, type):
        raise InvalidArgument("cls")


def _lookup(cls: type, name: str) -> tuple[type, str, object]:
    for klass in cls.__mro__:
        for attr in _candidate_names(klass, name):
            if attr in klass.__dict__:
                return klass, attr, klass.__dict__[attr]
    raise MemberNotFound(f"'{type_name(cls)}' has no member named '{name}'")


def _candidate_names(klass: type, name: str) -> tuple[str, ...]:
    if name.startswith("__") and not name.endswith("__"):
        return (name, f"_{klass.__name__.lstrip('_')}{name}")
    return (name,)


def _owner_from_qualname(func) -> type:
    parts = func.__qualname__.split(".")
    if len(parts) < 2 or "<locals>" in parts:
        raise InvalidArgument("owner", f"cannot infer the class defining '{func.__qualname__}'")
    target: object = sys.modules.get(func.__module__)
    for part in parts[:-1]:
        target = getattr(target, part, None)
    if not isinstance(target, type):
        raise InvalidArgument("owner", f"cannot infer the class defining '{func.__qualname__}'")
    return target


def _hints(obj: object) -> dict[str, object]:
    try:
        return typing.get_type_hints(obj)
    except (NameError, TypeError, AttributeError, SyntaxError):
        return dict(getattr(obj, "__annotations__", None) or {})


def _annotation(annotation: object) -> object:
    if annotation is inspect.Signature.empty:
        return Any
    return normalize(annotation)


def _param_type(param: inspect.Parameter, hints: dict[str, object]) -> object:
    if param.name in hints:
        return normalize(hints[param.name])
    return _annotation(param.annotation)


def _accessor_public(func: object) -> bool:
    if func is None:
        return False
    return not getattr(func, "__name__", "").startswith("_")
