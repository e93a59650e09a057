"""reflection-accel public API."""

from .api import (
    AccessorPair,
    compile_action,
    compile_constructor,
    compile_field_accessor,
    compile_getter,
    compile_method,
    compile_property_accessor,
    compile_setter,
    get_or_compile,
)
from .cache import AccessorCache, default_cache
from .coercion import coerce, register_converter
from .descriptors import MemberDescriptor, MemberKind
from .errors import (
    AccessorError,
    AccessorMissing,
    AccessorNotPublic,
    ArgumentTypeMismatch,
    ArityMismatch,
    ContractError,
    InstanceMemberRejected,
    InvalidArgument,
    InvocationError,
    MemberNotFound,
    NotEffectOnly,
    NotValueProducing,
    NullReceiver,
    ReceiverTypeMismatch,
    ResultTypeMismatch,
    StaticMemberRejected,
)
from .resolve import constructor_of, describe, field_of, member_of, method_of, property_of
from .shapes import MAX_ARITY, CallShape, ReceiverMode, ShapeFamily
from .typing_utils import is_assignable, is_derivative_of, type_name

try:
    from . import arrays as _arrays  # noqa: F401  registers jax.Array coercion
except ModuleNotFoundError as exc:
    if not (exc.name and exc.name.startswith("jax")):
        raise

__all__ = [
    "compile_constructor",
    "compile_method",
    "compile_action",
    "compile_getter",
    "compile_setter",
    "compile_field_accessor",
    "compile_property_accessor",
    "get_or_compile",
    "AccessorPair",
    "AccessorCache",
    "default_cache",
    "coerce",
    "register_converter",
    "MemberDescriptor",
    "MemberKind",
    "CallShape",
    "ShapeFamily",
    "ReceiverMode",
    "MAX_ARITY",
    "constructor_of",
    "method_of",
    "field_of",
    "property_of",
    "member_of",
    "describe",
    "is_assignable",
    "is_derivative_of",
    "type_name",
    "AccessorError",
    "ContractError",
    "InvocationError",
    "InvalidArgument",
    "ArityMismatch",
    "NotValueProducing",
    "NotEffectOnly",
    "StaticMemberRejected",
    "InstanceMemberRejected",
    "ReceiverTypeMismatch",
    "ResultTypeMismatch",
    "AccessorMissing",
    "AccessorNotPublic",
    "ArgumentTypeMismatch",
    "NullReceiver",
    "MemberNotFound",
]
