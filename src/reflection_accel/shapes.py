"""Call shapes: how a caller wants to invoke a compiled accessor."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .errors import InvalidArgument
from .typing_utils import type_name

MAX_ARITY = 9


class ShapeFamily(str, Enum):
    CONSTRUCT = "construct"
    CONSTRUCT_ARRAY = "construct_array"
    FUNC = "func"
    ACTION = "action"
    GET = "get"
    SET = "set"


class ReceiverMode(str, Enum):
    NONE = "none"
    OPAQUE = "opaque"
    TYPED = "typed"


_VALUE_FAMILIES = frozenset({ShapeFamily.CONSTRUCT, ShapeFamily.CONSTRUCT_ARRAY, ShapeFamily.FUNC, ShapeFamily.GET})


@dataclass(frozen=True)
class CallShape:
    """Requested accessor signature; the value itself is the cache identity.

    - `receiver`: `none` for constructors and static members, `opaque` when the
      receiver is checked against the declaring type on every call, `typed`
      when `receiver_type` was validated once at compile time.
    - `result_type`: pinned result type (value type for setters), or None for
      an opaque result.
    """

    family: ShapeFamily
    arity: int = 0
    receiver: ReceiverMode = ReceiverMode.OPAQUE
    receiver_type: type | None = None
    result_type: object | None = None
    non_public: bool = True

    def __post_init__(self) -> None:
        if not isinstance(self.arity, int) or isinstance(self.arity, bool) or not 0 <= self.arity <= MAX_ARITY:
            raise InvalidArgument("arity", f"arity must be an integer in [0, {MAX_ARITY}], got {self.arity!r}")
        if self.receiver is ReceiverMode.TYPED and self.receiver_type is None:
            raise InvalidArgument("receiver_type", "a typed receiver shape needs a receiver_type")
        if self.receiver is not ReceiverMode.TYPED and self.receiver_type is not None:
            raise InvalidArgument("receiver_type", "receiver_type is only valid for typed receiver shapes")

    @property
    def is_value_producing(self) -> bool:
        return self.family in _VALUE_FAMILIES

    @property
    def is_effect(self) -> bool:
        return self.family is ShapeFamily.ACTION

    @property
    def has_receiver(self) -> bool:
        return self.receiver is not ReceiverMode.NONE

    @classmethod
    def constructor(cls, arity: int, *, result: object | None = None) -> "CallShape":
        return cls(ShapeFamily.CONSTRUCT, arity, ReceiverMode.NONE, result_type=result)

    @classmethod
    def constructor_array(cls, *, result: object | None = None) -> "CallShape":
        return cls(ShapeFamily.CONSTRUCT_ARRAY, 0, ReceiverMode.NONE, result_type=result)

    @classmethod
    def func(cls, arity: int, *, base: type | None = None, result: object | None = None) -> "CallShape":
        return cls(ShapeFamily.FUNC, arity, _receiver_mode(base), base, result)

    @classmethod
    def action(cls, arity: int, *, base: type | None = None) -> "CallShape":
        return cls(ShapeFamily.ACTION, arity, _receiver_mode(base), base)

    @classmethod
    def static_func(cls, arity: int, *, result: object | None = None) -> "CallShape":
        return cls(ShapeFamily.FUNC, arity, ReceiverMode.NONE, result_type=result)

    @classmethod
    def static_action(cls, arity: int) -> "CallShape":
        return cls(ShapeFamily.ACTION, arity, ReceiverMode.NONE)

    @classmethod
    def getter(cls, *, base: type | None = None, value: object | None = None, non_public: bool = True) -> "CallShape":
        return cls(ShapeFamily.GET, 0, _receiver_mode(base), base, value, non_public)

    @classmethod
    def setter(cls, *, base: type | None = None, value: object | None = None, non_public: bool = True) -> "CallShape":
        return cls(ShapeFamily.SET, 0, _receiver_mode(base), base, value, non_public)

    def describe(self) -> str:
        parts = [self.family.value, f"arity={self.arity}", f"receiver={self.receiver.value}"]
        if self.receiver_type is not None:
            parts.append(f"base={type_name(self.receiver_type)}")
        if self.result_type is not None:
            parts.append(f"result={type_name(self.result_type)}")
        if not self.non_public:
            parts.append("public-only")
        return " ".join(parts)


def _receiver_mode(base: type | None) -> ReceiverMode:
    return ReceiverMode.OPAQUE if base is None else ReceiverMode.TYPED
