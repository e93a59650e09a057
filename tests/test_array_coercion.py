from __future__ import annotations

import importlib.util
import unittest

JAX_AVAILABLE = importlib.util.find_spec("jax") is not None


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for array coercion tests")
class ArrayCoercionTests(unittest.TestCase):
    def _to_python(self, value):
        if isinstance(value, list):
            return [self._to_python(v) for v in value]
        if hasattr(value, "tolist"):
            return self._to_python(value.tolist())
        return value

    def test_constructor_accepts_sequences(self) -> None:
        import jax
        from _array_members import Signal

        from reflection_accel import AccessorCache, compile_constructor, constructor_of

        create = compile_constructor(constructor_of(Signal), cache=AccessorCache())
        signal = create([1.0, 2.0, 3.0])
        self.assertIsInstance(signal.samples, jax.Array)
        self.assertEqual(self._to_python(signal.samples), [1.0, 2.0, 3.0])

    def test_arrays_pass_through_unchanged(self) -> None:
        import jax.numpy as jnp
        from _array_members import Signal

        from reflection_accel import AccessorCache, compile_constructor, constructor_of

        samples = jnp.asarray([0.5, 1.5])
        create = compile_constructor(constructor_of(Signal), cache=AccessorCache())
        self.assertIs(create(samples).samples, samples)

    def test_method_argument_and_result(self) -> None:
        import jax.numpy as jnp
        from _array_members import Signal

        from reflection_accel import AccessorCache, CallShape, compile_method, method_of

        cache = AccessorCache()
        scaled = compile_method(method_of(Signal, "scaled"), CallShape.func(1, base=Signal), cache=cache)
        energy = compile_method(method_of(Signal, "energy"), cache=cache)
        signal = Signal(jnp.asarray([1.0, 2.0]))
        self.assertEqual(self._to_python(scaled(signal, 2)), [2.0, 4.0])
        self.assertEqual(energy(signal), 5.0)

    def test_unconvertible_values(self) -> None:
        from _array_members import Signal

        from reflection_accel import AccessorCache, ArgumentTypeMismatch, compile_constructor, constructor_of

        create = compile_constructor(constructor_of(Signal), cache=AccessorCache())
        for value in (None, "1 2 3", b"raw"):
            with self.subTest(value=value):
                with self.assertRaises(ArgumentTypeMismatch) as ctx:
                    create(value)
                self.assertEqual(ctx.exception.where, "arg0")
                self.assertEqual(ctx.exception.expected, "Array")

    def test_coerce_helper(self) -> None:
        import jax

        from reflection_accel import coerce

        value = coerce(3, jax.Array)
        self.assertIsInstance(value, jax.Array)
        self.assertEqual(self._to_python(value), 3)


if __name__ == "__main__":
    unittest.main()
