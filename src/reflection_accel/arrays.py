"""jax.Array parameter coercion.

Importing this module registers a converter so members annotated with
``jax.Array`` accept Python scalars, nested sequences and numpy arrays.
"""

from __future__ import annotations

import typing

import jax
import jax.numpy as jnp

from .coercion import Converter, register_converter
from .errors import ArgumentTypeMismatch
from .typing_utils import value_type_name


def is_array_type(target: object) -> bool:
    if target is jax.Array:
        return True
    return isinstance(target, type) and typing.get_origin(target) is None and issubclass(target, jax.Array)


def array_converter(target: object) -> Converter:
    def convert(value: object, where: str) -> object:
        if isinstance(value, jax.Array):
            return value
        if value is None or isinstance(value, (str, bytes)):
            raise ArgumentTypeMismatch(where, "Array", value_type_name(value))
        try:
            return jnp.asarray(value)
        except (TypeError, ValueError) as err:
            raise ArgumentTypeMismatch(where, "Array", value_type_name(value)) from err

    return convert


register_converter(is_array_type, array_converter)
