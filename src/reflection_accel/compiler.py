"""Lower invocation plans into generated Python functions."""

from __future__ import annotations

import itertools
import keyword
import linecache
import logging
import os
import re
from collections.abc import Callable

from .coercion import Converter
from .descriptors import MemberDescriptor, MemberKind
from .errors import ArgumentTypeMismatch, ArityMismatch, InvalidArgument, NullReceiver, ResultTypeMismatch
from .plan import InvocationPlan, PlanOp, synthesize
from .shapes import CallShape
from .typing_utils import type_name, value_type_name
from .validation import validate

logger = logging.getLogger(__name__)

_LOG_SOURCE = os.environ.get("REFLECTION_ACCEL_LOG_SOURCE", "0") == "1"
_USE_LINECACHE = os.environ.get("REFLECTION_ACCEL_LINECACHE", "1") != "0"
_FILENAME_COUNTER = itertools.count()
_NON_IDENTIFIER = re.compile(r"\W")


def build_accessor(descriptor: MemberDescriptor, shape: CallShape) -> Callable:
    """Validate, plan and compile one accessor. Never consults a cache."""
    validate(descriptor, shape)
    plan = synthesize(descriptor, shape)
    return compile_plan(plan)


def compile_plan(plan: InvocationPlan) -> Callable:
    descriptor = plan.descriptor
    namespace: dict[str, object] = {
        "_ArgumentTypeMismatch": ArgumentTypeMismatch,
        "_ArityMismatch": ArityMismatch,
        "_InvalidArgument": InvalidArgument,
        "_NullReceiver": NullReceiver,
        "_value_type_name": value_type_name,
    }
    body: list[str] = []

    if plan.array_arity is not None:
        n = plan.array_arity
        body += [
            "if args is None:",
            "    raise _InvalidArgument('args')",
            f"if len(args) != {n}:",
            f"    raise _ArityMismatch({n}, len(args), where=\"'args' argument\", noun='items')",
        ]

    if plan.receiver is not None:
        body += [
            "if instance is None:",
            f"    raise _NullReceiver({f'The receiver for the {descriptor} must not be None.'!r})",
        ]
        if plan.receiver.check_type is not None:
            namespace["_Base"] = plan.receiver.check_type
            expected = type_name(plan.receiver.declaring_type)
            body += [
                "if not isinstance(instance, _Base):",
                f"    raise _ArgumentTypeMismatch('instance', {expected!r}, _value_type_name(instance))",
            ]

    operands = []
    for coercion in plan.arguments:
        source = f"args[{coercion.slot}]" if plan.array_arity is not None else coercion.name
        if coercion.converter is None:
            operands.append(source)
            continue
        slot_name = f"_c{coercion.slot}"
        namespace[slot_name] = coercion.converter
        operands.append(f"{slot_name}({source}, {coercion.name!r})")

    access = _access_expression(plan, operands, namespace)

    if plan.operation is PlanOp.SET:
        body.append(access)
    elif plan.result is None:
        body.append(access)
    elif plan.result.converter is None:
        body.append(f"return {access}")
    else:
        namespace["_result"] = _result_check(plan.result.converter, descriptor)
        body.append(f"return _result({access})")

    func_name = _function_name(plan)
    source = "\n".join([f"def {func_name}({', '.join(plan.parameter_names)}):"] + [f"    {line}" for line in body]) + "\n"
    filename = f"<reflection-accel:{descriptor.qualified_name}:{plan.shape.family.value}:{next(_FILENAME_COUNTER)}>"

    code = compile(source, filename, "exec")
    exec(code, namespace)
    accessor = namespace[func_name]

    if _USE_LINECACHE:
        linecache.cache[filename] = (len(source), None, source.splitlines(True), filename)
    logger.debug("compiled %s accessor for the %s", plan.shape.describe(), descriptor)
    if _LOG_SOURCE:
        logger.debug("generated accessor source for %s:\n%s", descriptor, source)

    accessor.__qualname__ = f"{descriptor.qualified_name}.<{plan.shape.family.value}{plan.shape.arity}>"
    accessor.__doc__ = f"Compiled {plan.shape.describe()} accessor for the {descriptor}."
    accessor.__accessor_source__ = source
    accessor.__accessor_key__ = (descriptor, plan.shape)
    return accessor


def _access_expression(plan: InvocationPlan, operands: list[str], namespace: dict[str, object]) -> str:
    descriptor = plan.descriptor
    call_args = ", ".join(operands)

    if plan.operation is PlanOp.CONSTRUCT:
        namespace["_target"] = descriptor.target if callable(descriptor.target) else descriptor.declaring_type
        return f"_target({call_args})"

    if plan.receiver is None:
        # Static members: the first operand is the first declared parameter.
        if descriptor.kind is MemberKind.METHOD:
            namespace["_target"] = descriptor.target
            return f"_target({call_args})"
        namespace["_owner"] = descriptor.declaring_type
        receiver = "_owner"
    else:
        receiver = "instance"

    name = descriptor.name
    if _plain_attribute(name):
        attribute = f"{receiver}.{name}"
    else:
        namespace["_name"] = name
        attribute = None

    if plan.operation is PlanOp.CALL:
        if attribute is None:
            return f"getattr({receiver}, _name)({call_args})"
        return f"{attribute}({call_args})"
    if plan.operation is PlanOp.GET:
        return attribute if attribute is not None else f"getattr({receiver}, _name)"
    if attribute is None:
        return f"setattr({receiver}, _name, {operands[0]})"
    return f"{attribute} = {operands[0]}"


def _result_check(converter: Converter, descriptor: MemberDescriptor) -> Callable[[object], object]:
    where = f"result of the {descriptor}"

    def check(value: object) -> object:
        try:
            return converter(value, where)
        except ArgumentTypeMismatch as err:
            raise ResultTypeMismatch(
                f"The {where} was {value_type_name(value)}, expected {err.expected}."
            ) from err

    return check


def _plain_attribute(name: str) -> bool:
    return name.isidentifier() and not keyword.iskeyword(name)


def _function_name(plan: InvocationPlan) -> str:
    owner = getattr(plan.descriptor.declaring_type, "__name__", "member")
    raw = f"{owner}_{plan.descriptor.name}_{plan.shape.family.value}{plan.shape.arity}"
    name = _NON_IDENTIFIER.sub("_", raw)
    if not name.isidentifier():
        name = f"_{name}"
    return name
