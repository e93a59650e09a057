from __future__ import annotations

import unittest
from typing import Any, Optional, Protocol, Union

from _members import Animal, Dog

from reflection_accel import ArgumentTypeMismatch, coerce, register_converter
from reflection_accel.coercion import converter_for


class Celsius:
    def __init__(self, degrees: float) -> None:
        self.degrees = degrees


class Sized(Protocol):
    def size(self) -> int: ...


class Index:
    def __init__(self, value: int) -> None:
        self.value = value

    def __index__(self) -> int:
        return self.value


class ScalarCoercionTests(unittest.TestCase):
    def test_int_promotes_to_float_and_complex(self) -> None:
        value = coerce(3, float)
        self.assertIsInstance(value, float)
        self.assertEqual(value, 3.0)
        self.assertEqual(coerce(3, complex), 3 + 0j)
        self.assertEqual(coerce(1.5, complex), 1.5 + 0j)

    def test_int_accepts_index_protocol(self) -> None:
        self.assertIs(coerce(True, int), True)
        self.assertEqual(coerce(Index(4), int), 4)

    def test_mismatch_reports_slot(self) -> None:
        with self.assertRaises(ArgumentTypeMismatch) as ctx:
            coerce("3", int, where="arg2")
        self.assertEqual(ctx.exception.where, "arg2")
        self.assertEqual(ctx.exception.expected, "int")
        self.assertEqual(ctx.exception.actual, "str")
        self.assertEqual(str(ctx.exception), "arg2 expected int, got str")
        with self.assertRaises(ArgumentTypeMismatch):
            coerce(2.5, int)
        with self.assertRaises(ArgumentTypeMismatch):
            coerce("x", complex)

    def test_none_target(self) -> None:
        self.assertIsNone(coerce(None, None))
        with self.assertRaises(ArgumentTypeMismatch):
            coerce(0, None)


class ObjectCoercionTests(unittest.TestCase):
    def test_targets_accepting_anything_have_no_converter(self) -> None:
        self.assertIsNone(converter_for(Any))
        self.assertIsNone(converter_for(object))
        self.assertIsNone(converter_for(Sized))
        sentinel = object()
        self.assertIs(coerce(sentinel, Any), sentinel)

    def test_instances_are_checked(self) -> None:
        dog = Dog()
        self.assertIs(coerce(dog, Animal), dog)
        with self.assertRaises(ArgumentTypeMismatch) as ctx:
            coerce(Animal(), Dog)
        self.assertEqual(ctx.exception.expected, "Dog")

    def test_generic_alias_checks_origin(self) -> None:
        self.assertEqual(coerce([1], list[int]), [1])
        with self.assertRaises(ArgumentTypeMismatch) as ctx:
            coerce((1,), list[int])
        self.assertEqual(ctx.exception.expected, "list[int]")


class UnionCoercionTests(unittest.TestCase):
    def test_optional(self) -> None:
        self.assertEqual(coerce(1, Optional[int]), 1)
        self.assertIsNone(coerce(None, int | None))
        with self.assertRaises(ArgumentTypeMismatch):
            coerce("1", int | None)

    def test_exact_member_wins_over_promotion(self) -> None:
        value = coerce(1, int | float)
        self.assertIsInstance(value, int)
        promoted = coerce(1, float | str)
        self.assertIsInstance(promoted, float)

    def test_union_with_any_member_passes_through(self) -> None:
        self.assertIsNone(converter_for(Union[int, Any]))


class RegisteredConverterTests(unittest.TestCase):
    def test_registered_factory_is_used(self) -> None:
        def factory(target):
            def convert(value, where):
                if isinstance(value, Celsius):
                    return value
                if isinstance(value, (int, float)):
                    return Celsius(float(value))
                raise ArgumentTypeMismatch(where, "Celsius", type(value).__name__)

            return convert

        register_converter(lambda target: target is Celsius, factory)
        converted = coerce(21, Celsius)
        self.assertIsInstance(converted, Celsius)
        self.assertEqual(converted.degrees, 21.0)
        with self.assertRaises(ArgumentTypeMismatch):
            coerce("warm", Celsius)


if __name__ == "__main__":
    unittest.main()
