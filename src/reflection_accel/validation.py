"""Fail-fast checks of a member descriptor against a requested call shape."""

from __future__ import annotations

from typing import Any

from .descriptors import MemberDescriptor, MemberKind
from .errors import (
    AccessorMissing,
    AccessorNotPublic,
    ArityMismatch,
    InstanceMemberRejected,
    InvalidArgument,
    NotEffectOnly,
    NotValueProducing,
    ReceiverTypeMismatch,
    ResultTypeMismatch,
    StaticMemberRejected,
)
from .shapes import CallShape, ReceiverMode, ShapeFamily
from .typing_utils import is_assignable, normalize, type_name

_KINDS_BY_FAMILY = {
    ShapeFamily.CONSTRUCT: frozenset({MemberKind.CONSTRUCTOR}),
    ShapeFamily.CONSTRUCT_ARRAY: frozenset({MemberKind.CONSTRUCTOR}),
    ShapeFamily.FUNC: frozenset({MemberKind.METHOD}),
    ShapeFamily.ACTION: frozenset({MemberKind.METHOD}),
    ShapeFamily.GET: frozenset({MemberKind.FIELD, MemberKind.PROPERTY}),
    ShapeFamily.SET: frozenset({MemberKind.FIELD, MemberKind.PROPERTY}),
}


def validate(descriptor: MemberDescriptor | None, shape: CallShape | None) -> None:
    """Raise a ContractError unless `shape` can be compiled for `descriptor`."""
    _check_present(descriptor, shape)
    _check_arity(descriptor, shape)
    _check_value_kind(descriptor, shape)
    _check_static(descriptor, shape)
    _check_receiver_type(descriptor, shape)
    _check_result_type(descriptor, shape)
    _check_accessor(descriptor, shape)


def _check_present(descriptor, shape) -> None:
    if descriptor is None or not isinstance(descriptor, MemberDescriptor):
        raise InvalidArgument("descriptor")
    if shape is None or not isinstance(shape, CallShape):
        raise InvalidArgument("shape")
    if descriptor.kind not in _KINDS_BY_FAMILY[shape.family]:
        raise InvalidArgument(
            "descriptor",
            f"A {shape.family.value} accessor cannot be compiled for the {descriptor}.",
        )


def _check_arity(descriptor: MemberDescriptor, shape: CallShape) -> None:
    # Array-based constructors learn their argument count per call.
    if shape.family is ShapeFamily.CONSTRUCT_ARRAY:
        return
    if descriptor.arity != shape.arity:
        raise ArityMismatch(shape.arity, descriptor.arity, where=f"{descriptor}")


def _check_value_kind(descriptor: MemberDescriptor, shape: CallShape) -> None:
    if shape.is_value_producing and not descriptor.is_value_producing:
        raise NotValueProducing(
            f"You cannot create a value-producing accessor for the {descriptor}, which returns None."
        )
    if shape.is_effect and descriptor.is_value_producing and normalize(descriptor.value_type) is not Any:
        raise NotEffectOnly(
            f"You cannot create an effect accessor for the {descriptor}, "
            f"which returns {type_name(descriptor.value_type)}."
        )


def _check_static(descriptor: MemberDescriptor, shape: CallShape) -> None:
    if descriptor.kind is MemberKind.CONSTRUCTOR:
        return
    if shape.has_receiver and descriptor.is_static:
        raise StaticMemberRejected(f"The '{descriptor.name}' member is static.")
    if not shape.has_receiver and not descriptor.is_static:
        raise InstanceMemberRejected(f"The '{descriptor.name}' member needs an instance receiver.")


def _check_receiver_type(descriptor: MemberDescriptor, shape: CallShape) -> None:
    if shape.receiver is not ReceiverMode.TYPED:
        return
    if not is_assignable(shape.receiver_type, descriptor.declaring_type):
        raise ReceiverTypeMismatch(
            f"Receiver type was '{type_name(shape.receiver_type)}', which is not assignable "
            f"to the declaring type of '{type_name(descriptor.declaring_type)}'."
        )


def _check_result_type(descriptor: MemberDescriptor, shape: CallShape) -> None:
    if shape.result_type is None:
        return
    if shape.family is ShapeFamily.SET:
        ok = is_assignable(shape.result_type, descriptor.value_type)
    else:
        ok = is_assignable(descriptor.value_type, shape.result_type)
    if not ok:
        raise ResultTypeMismatch(
            f"Value type was '{type_name(shape.result_type)}', which is not compatible "
            f"with the {descriptor.kind.value} value type of '{type_name(descriptor.value_type)}'."
        )


def _check_accessor(descriptor: MemberDescriptor, shape: CallShape) -> None:
    if shape.family is ShapeFamily.GET:
        present, public, label = descriptor.readable, descriptor.getter_public, "get"
    elif shape.family is ShapeFamily.SET:
        present, public, label = descriptor.writable, descriptor.setter_public, "set"
    else:
        return
    if not present:
        raise AccessorMissing(
            f"The '{descriptor.name}' {descriptor.kind.value} on "
            f"'{type_name(descriptor.declaring_type)}' does not have a {label} accessor."
        )
    if not shape.non_public and not public:
        raise AccessorNotPublic(
            f"The {label} accessor of the '{descriptor.name}' {descriptor.kind.value} on "
            f"'{type_name(descriptor.declaring_type)}' is not public."
        )
