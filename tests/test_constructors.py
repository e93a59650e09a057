from __future__ import annotations

import unittest

from _members import Animal, Broken, Dog, Empty, Nine, Pair, Point

from reflection_accel import (
    AccessorCache,
    ArgumentTypeMismatch,
    ArityMismatch,
    CallShape,
    InvalidArgument,
    compile_constructor,
    constructor_of,
)


class ConstructorAccessorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.cache = AccessorCache()

    def test_zero_argument_constructor_matches_direct_construction(self) -> None:
        create = compile_constructor(constructor_of(Empty), cache=self.cache)
        made = create()
        self.assertIsInstance(made, Empty)
        self.assertEqual(made, Empty())
        self.assertIsNot(create(), made)

    def test_two_argument_constructor(self) -> None:
        create = compile_constructor(constructor_of(Pair), CallShape.constructor(2), cache=self.cache)
        self.assertEqual(create(5, "x"), Pair(5, "x"))

    def test_nine_argument_constructor(self) -> None:
        create = compile_constructor(constructor_of(Nine), cache=self.cache)
        self.assertEqual(create(1, 2, 3, 4, 5, 6, 7, 8, 9).values, (1, 2, 3, 4, 5, 6, 7, 8, 9))

    def test_dataclass_constructor_counts_defaulted_parameters(self) -> None:
        descriptor = constructor_of(Point)
        self.assertEqual(descriptor.arity, 2)
        create = compile_constructor(descriptor, cache=self.cache)
        self.assertEqual(create(1, 2), Point(1, 2))

    def test_array_constructor(self) -> None:
        create = compile_constructor(constructor_of(Pair), CallShape.constructor_array(), cache=self.cache)
        self.assertEqual(create([5, "x"]), Pair(5, "x"))
        self.assertEqual(create((6, "y")), Pair(6, "y"))

    def test_array_constructor_checks_length_per_call(self) -> None:
        create = compile_constructor(constructor_of(Pair), CallShape.constructor_array(), cache=self.cache)
        with self.assertRaises(ArityMismatch) as ctx:
            create([5])
        self.assertEqual((ctx.exception.expected, ctx.exception.actual), (2, 1))
        with self.assertRaises(ArityMismatch):
            create([5, "x", "extra"])
        with self.assertRaises(InvalidArgument):
            create(None)

    def test_array_constructor_for_zero_parameters(self) -> None:
        create = compile_constructor(constructor_of(Empty), CallShape.constructor_array(), cache=self.cache)
        self.assertEqual(create([]), Empty())
        with self.assertRaises(ArityMismatch):
            create([1])

    def test_argument_conversion_failure(self) -> None:
        create = compile_constructor(constructor_of(Pair), cache=self.cache)
        with self.assertRaises(ArgumentTypeMismatch) as ctx:
            create("five", "x")
        self.assertEqual(ctx.exception.where, "arg0")
        array_create = compile_constructor(constructor_of(Pair), CallShape.constructor_array(), cache=self.cache)
        with self.assertRaises(ArgumentTypeMismatch) as ctx:
            array_create([5, 6])
        self.assertEqual(ctx.exception.where, "args[1]")

    def test_constructor_errors_pass_through(self) -> None:
        create = compile_constructor(constructor_of(Broken), cache=self.cache)
        with self.assertRaisesRegex(ValueError, "rejected 3"):
            create(3)

    def test_typed_result_constructor(self) -> None:
        create = compile_constructor(constructor_of(Dog), CallShape.constructor(0, result=Animal), cache=self.cache)
        self.assertEqual(create().speak(), "woof")

    def test_arity_checked_at_compile_time(self) -> None:
        with self.assertRaises(ArityMismatch):
            compile_constructor(constructor_of(Pair), CallShape.constructor(1), cache=self.cache)
        self.assertEqual(len(self.cache), 0)

    def test_missing_descriptor(self) -> None:
        with self.assertRaises(InvalidArgument):
            compile_constructor(None, cache=self.cache)


if __name__ == "__main__":
    unittest.main()
