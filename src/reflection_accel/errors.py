"""Structured error types for compile-time contracts and call-time failures."""

from __future__ import annotations


class AccessorError(Exception):
    """Base class for structured reflection-accel errors."""


class ContractError(AccessorError):
    """A (descriptor, shape) pair that can never produce a valid accessor."""


class InvalidArgument(ContractError, ValueError):
    """A required argument is absent or of the wrong kind."""

    def __init__(self, argument: str, message: str | None = None) -> None:
        self.argument = argument
        super().__init__(message or f"The '{argument}' argument is missing or invalid.")


class ArityMismatch(ContractError, ValueError):
    """Parameter count differs from the requested shape (or supplied array)."""

    def __init__(self, expected: int, actual: int, *, where: str = "member", noun: str = "parameters") -> None:
        self.expected = expected
        self.actual = actual
        self.where = where
        super().__init__(f"The {where} must have {expected:,} {noun}, but has {actual:,}.")


class NotValueProducing(ContractError, TypeError):
    """A value-producing shape was requested for an effect-only member."""


class NotEffectOnly(ContractError, TypeError):
    """An effect shape was requested for a member that produces a value."""


class StaticMemberRejected(ContractError, TypeError):
    """A static member was requested through an instance-receiver shape."""


class InstanceMemberRejected(ContractError, TypeError):
    """An instance member was requested through a receiver-less shape."""


class ReceiverTypeMismatch(ContractError, TypeError):
    """The pinned receiver type is not a subtype of the declaring type."""


class ResultTypeMismatch(ContractError, TypeError):
    """The pinned result/value type is incompatible with the member's value type.

    Also raised per call when the member's declared type is unknown and the
    produced value does not fit the pinned result type.
    """


class AccessorMissing(ContractError, AttributeError):
    """The field/property has no readable (or writable) accessor."""


class AccessorNotPublic(ContractError, AttributeError):
    """The accessor exists but is not public and the shape forbids non-public access."""


class InvocationError(AccessorError):
    """Failure raised by a compiled accessor while it is being called."""


class ArgumentTypeMismatch(InvocationError, TypeError):
    """An opaque argument could not be converted to the declared parameter type."""

    def __init__(self, where: str, expected: str, actual: str) -> None:
        self.where = where
        self.expected = expected
        self.actual = actual
        super().__init__(f"{where} expected {expected}, got {actual}")


class NullReceiver(InvocationError, TypeError):
    """An instance member was invoked with a None receiver."""


class MemberNotFound(AccessorError, LookupError):
    """Descriptor resolution could not find the named member."""
