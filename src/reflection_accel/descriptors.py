"""Member descriptors: immutable handles to constructors, methods, fields and properties."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .typing_utils import NoneType, type_name


class MemberKind(str, Enum):
    CONSTRUCTOR = "constructor"
    METHOD = "method"
    FIELD = "field"
    PROPERTY = "property"


@dataclass(frozen=True)
class MemberDescriptor:
    """Identifies one member of `declaring_type`.

    Only (`kind`, `declaring_type`, `name`) take part in equality and hashing,
    so two descriptors built independently for the same member are equal and
    share cache entries.

    `value_type` is the return type for methods, the field/property type for
    fields and properties, and the declaring type for constructors. `NoneType`
    marks effect-only members.
    """

    kind: MemberKind
    declaring_type: type
    name: str
    parameter_types: tuple[object, ...] = field(default=(), compare=False)
    value_type: object = field(default=Any, compare=False)
    is_static: bool = field(default=False, compare=False)
    target: object = field(default=None, compare=False, repr=False)
    readable: bool = field(default=True, compare=False)
    writable: bool = field(default=False, compare=False)
    getter_public: bool = field(default=True, compare=False)
    setter_public: bool = field(default=True, compare=False)

    @property
    def arity(self) -> int:
        return len(self.parameter_types)

    @property
    def is_value_producing(self) -> bool:
        return self.value_type is not NoneType

    @property
    def qualified_name(self) -> str:
        owner = type_name(self.declaring_type)
        if self.kind is MemberKind.CONSTRUCTOR:
            return owner
        return f"{owner}.{self.name}"

    def __str__(self) -> str:
        return f"{self.kind.value} {self.qualified_name}"
