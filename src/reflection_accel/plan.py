"""Invocation plans: the ordered coercions an accessor performs around one member access."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .coercion import Converter, converter_for
from .descriptors import MemberDescriptor, MemberKind
from .shapes import CallShape, ReceiverMode, ShapeFamily
from .typing_utils import is_any, normalize, runtime_class


class PlanOp(str, Enum):
    CONSTRUCT = "construct"
    CALL = "call"
    GET = "get"
    SET = "set"


@dataclass(frozen=True)
class ArgumentCoercion:
    """Take opaque slot `slot` (spelled `name` in the accessor) and convert it to `parameter_type`."""

    slot: int
    name: str
    parameter_type: object
    converter: Converter | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class ReceiverCoercion:
    """Null check on the receiver, plus an instance check when the receiver is opaque."""

    declaring_type: type
    check_type: type | None


@dataclass(frozen=True)
class ResultCoercion:
    result_type: object
    converter: Converter | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class InvocationPlan:
    descriptor: MemberDescriptor
    shape: CallShape
    operation: PlanOp
    receiver: ReceiverCoercion | None
    arguments: tuple[ArgumentCoercion, ...]
    result: ResultCoercion | None
    array_arity: int | None = None

    @property
    def parameter_names(self) -> tuple[str, ...]:
        if self.array_arity is not None:
            return ("args",)
        names = ("instance",) if self.receiver is not None else ()
        return names + tuple(arg.name for arg in self.arguments)


_OPS = {
    ShapeFamily.CONSTRUCT: PlanOp.CONSTRUCT,
    ShapeFamily.CONSTRUCT_ARRAY: PlanOp.CONSTRUCT,
    ShapeFamily.FUNC: PlanOp.CALL,
    ShapeFamily.ACTION: PlanOp.CALL,
    ShapeFamily.GET: PlanOp.GET,
    ShapeFamily.SET: PlanOp.SET,
}

_PROMOTING = frozenset({int, float, complex})


def synthesize(descriptor: MemberDescriptor, shape: CallShape) -> InvocationPlan:
    """Build the plan for a (descriptor, shape) pair that already passed validation."""
    op = _OPS[shape.family]
    receiver = _receiver_coercion(descriptor, shape)

    array_arity = None
    if shape.family is ShapeFamily.CONSTRUCT_ARRAY:
        array_arity = descriptor.arity
        arguments = tuple(
            ArgumentCoercion(i, f"args[{i}]", tp, converter_for(tp))
            for i, tp in enumerate(descriptor.parameter_types)
        )
    elif op is PlanOp.SET:
        arguments = (_value_coercion(descriptor, shape),)
    else:
        arguments = tuple(
            ArgumentCoercion(i, f"arg{i}", tp, converter_for(tp))
            for i, tp in enumerate(descriptor.parameter_types)
        )

    result = None
    if shape.is_value_producing:
        result = _result_coercion(descriptor.value_type, shape.result_type)

    return InvocationPlan(
        descriptor=descriptor,
        shape=shape,
        operation=op,
        receiver=receiver,
        arguments=arguments,
        result=result,
        array_arity=array_arity,
    )


def _receiver_coercion(descriptor: MemberDescriptor, shape: CallShape) -> ReceiverCoercion | None:
    if descriptor.kind is MemberKind.CONSTRUCTOR or descriptor.is_static or not shape.has_receiver:
        return None
    check_type = None
    if shape.receiver is ReceiverMode.OPAQUE:
        klass = runtime_class(descriptor.declaring_type)
        if klass is not None and klass is not object:
            check_type = klass
    return ReceiverCoercion(descriptor.declaring_type, check_type)


def _value_coercion(descriptor: MemberDescriptor, shape: CallShape) -> ArgumentCoercion:
    # A pinned value type was proven assignable to the member type by the validator.
    pinned = normalize(shape.result_type) if shape.result_type is not None else Any
    if not is_any(pinned):
        member = normalize(descriptor.value_type)
        if pinned is not member and pinned in _PROMOTING and member in _PROMOTING:
            return ArgumentCoercion(0, "value", descriptor.value_type, converter_for(member))
        return ArgumentCoercion(0, "value", descriptor.value_type, None)
    return ArgumentCoercion(0, "value", descriptor.value_type, converter_for(descriptor.value_type))


def _result_coercion(value_type: object, result_type: object | None) -> ResultCoercion:
    if result_type is None:
        return ResultCoercion(Any, None)
    target = normalize(result_type)
    if is_any(target):
        return ResultCoercion(result_type, None)
    source = normalize(value_type)
    if source is Any:
        return ResultCoercion(result_type, converter_for(target))
    if source is not target and source in _PROMOTING and target in _PROMOTING:
        return ResultCoercion(result_type, converter_for(target))
    return ResultCoercion(result_type, None)
