from __future__ import annotations

import unittest

from _members import Account, FrozenPoint, Gauge, Holder, Point, Point3, SavingsAccount, Slotted

from reflection_accel import (
    AccessorCache,
    AccessorMissing,
    AccessorNotPublic,
    ArgumentTypeMismatch,
    CallShape,
    InvalidArgument,
    NullReceiver,
    ResultTypeMismatch,
    compile_field_accessor,
    compile_getter,
    compile_property_accessor,
    compile_setter,
    field_of,
    member_of,
    property_of,
)
from reflection_accel.shapes import ReceiverMode, ShapeFamily


class FieldAccessorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.cache = AccessorCache()

    def test_get_matches_direct_read(self) -> None:
        get_x = compile_getter(field_of(Point, "x"), cache=self.cache)
        self.assertEqual(get_x(Point(7)), 7)

    def test_set_then_get(self) -> None:
        pair = compile_field_accessor(field_of(Point, "x"), cache=self.cache)
        point = Point(1)
        self.assertIsNone(pair.setter(point, 7))
        self.assertEqual(point.x, 7)
        self.assertEqual(pair.getter(point), 7)

    def test_setter_converts_value(self) -> None:
        set_x = compile_setter(field_of(Point, "x"), cache=self.cache)
        with self.assertRaises(ArgumentTypeMismatch) as ctx:
            set_x(Point(1), "seven")
        self.assertEqual(ctx.exception.where, "value")

    def test_inherited_field_on_subclass_instance(self) -> None:
        descriptor = field_of(Point3, "x")
        self.assertIs(descriptor.declaring_type, Point)
        get_x = compile_getter(descriptor, cache=self.cache)
        self.assertEqual(get_x(Point3(4, 5, 6)), 4)

    def test_typed_receiver_pair(self) -> None:
        pair = compile_field_accessor(field_of(Holder, "count"), base=Holder, cache=self.cache)
        holder = Holder()
        pair.setter(holder, 3)
        self.assertEqual(pair.getter(holder), 3)
        with self.assertRaises(NullReceiver):
            pair.getter(None)

    def test_opaque_receiver_rejects_wrong_type(self) -> None:
        get_count = compile_getter(field_of(Holder, "count"), cache=self.cache)
        with self.assertRaises(ArgumentTypeMismatch):
            get_count(Point(1))

    def test_frozen_dataclass_field_has_no_setter(self) -> None:
        pair = compile_field_accessor(field_of(FrozenPoint, "x"), cache=self.cache)
        self.assertIsNone(pair.setter)
        self.assertEqual(pair.getter(FrozenPoint(2)), 2)

    def test_slotted_field(self) -> None:
        pair = compile_field_accessor(field_of(Slotted, "value"), cache=self.cache)
        slotted = Slotted(1)
        pair.setter(slotted, 9)
        self.assertEqual(pair.getter(slotted), 9)

    def test_non_public_field(self) -> None:
        pair = compile_field_accessor(field_of(Holder, "_hidden"), cache=self.cache)
        self.assertEqual(pair.getter(Holder()), 1)
        with self.assertRaises(AccessorNotPublic):
            compile_field_accessor(field_of(Holder, "_hidden"), non_public=False, cache=self.cache)

    def test_static_field_without_receiver(self) -> None:
        shape = CallShape(ShapeFamily.GET, receiver=ReceiverMode.NONE)
        get_label = compile_getter(field_of(Point, "label"), shape, cache=self.cache)
        self.assertEqual(get_label(), "point")

    def test_pair_requires_field_descriptor(self) -> None:
        with self.assertRaises(InvalidArgument):
            compile_field_accessor(property_of(Account, "balance"), cache=self.cache)


class PropertyAccessorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.cache = AccessorCache()

    def test_get_and_set_round_trip(self) -> None:
        pair = compile_property_accessor(property_of(Account, "balance"), cache=self.cache)
        account = Account()
        pair.setter(account, 42)
        self.assertEqual(account.balance, 42)
        self.assertEqual(pair.getter(account), 42)

    def test_pinned_value_type(self) -> None:
        pair = compile_property_accessor(property_of(Account, "balance"), value=int, cache=self.cache)
        account = Account()
        pair.setter(account, 5)
        self.assertEqual(pair.getter(account), 5)
        with self.assertRaises(ResultTypeMismatch):
            compile_property_accessor(property_of(Account, "balance"), value=str, cache=self.cache)

    def test_pinned_int_value_is_widened_for_float_member(self) -> None:
        set_level = compile_setter(property_of(Gauge, "level"), CallShape.setter(value=int), cache=self.cache)
        gauge = Gauge()
        set_level(gauge, 3)
        self.assertIsInstance(gauge.level, float)
        self.assertEqual(gauge.level, 3.0)

    def test_typed_receiver_on_subclass(self) -> None:
        descriptor = property_of(SavingsAccount, "balance")
        self.assertEqual(descriptor, property_of(Account, "balance"))
        pair = compile_property_accessor(descriptor, base=SavingsAccount, cache=self.cache)
        savings = SavingsAccount()
        pair.setter(savings, 11)
        self.assertEqual(pair.getter(savings), 11)

    def test_read_only_property(self) -> None:
        pair = compile_property_accessor(property_of(Account, "created"), cache=self.cache)
        self.assertEqual(pair.getter(Account()), "today")
        self.assertIsNone(pair.setter)
        with self.assertRaises(AccessorMissing):
            compile_setter(property_of(Account, "created"), cache=self.cache)

    def test_write_only_property(self) -> None:
        pair = compile_property_accessor(property_of(Account, "pin"), cache=self.cache)
        self.assertIsNone(pair.getter)
        account = Account()
        pair.setter(account, 1234)
        self.assertEqual(account._pin, 1234)

    def test_non_public_accessors(self) -> None:
        pair = compile_property_accessor(property_of(Account, "owner"), cache=self.cache)
        account = Account()
        pair.setter(account, "ada")
        self.assertEqual(pair.getter(account), "ada")
        with self.assertRaises(AccessorNotPublic):
            compile_property_accessor(property_of(Account, "owner"), non_public=False, cache=self.cache)

    def test_untyped_property_checked_per_call(self) -> None:
        get_untyped = compile_getter(property_of(Account, "untyped"), CallShape.getter(value=int), cache=self.cache)
        account = Account()
        self.assertEqual(get_untyped(account), 0)
        account._balance = "zero"
        with self.assertRaises(ResultTypeMismatch):
            get_untyped(account)

    def test_member_of_picks_kind(self) -> None:
        self.assertEqual(member_of(Account, "balance").kind.value, "property")
        self.assertEqual(member_of(Point, "x").kind.value, "field")


if __name__ == "__main__":
    unittest.main()
