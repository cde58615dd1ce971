"""
Sort handles.

A sort is the engine-side type of an expression. The Python class of a sort
names its family (Boolean, bit-vector, floating-point, rounding mode); the
parameters (bit width, exponent/significand widths) are read back from the
engine on demand.
"""
from typing import Any, Dict, Type

import z3.z3core as z3core
from z3.z3consts import (
    Z3_BOOL_SORT,
    Z3_BV_SORT,
    Z3_FLOATING_POINT_SORT,
    Z3_ROUNDING_MODE_SORT,
)

from .._native import NativeHandle


class Sort(NativeHandle):
    """Reference-counted handle to an engine sort."""

    def _inc_ref(self) -> None:
        z3core.Z3_inc_ref(self.ctx.ref(), self.as_ast())

    def _dec_ref(self) -> None:
        z3core.Z3_dec_ref(self.ctx.ref(), self.as_ast())

    def as_ast(self) -> Any:
        return z3core.Z3_sort_to_ast(self.ctx.ref(), self._handle)

    @property
    def kind(self) -> int:
        """Engine sort kind (one of the ``Z3_*_SORT`` constants)."""
        return z3core.Z3_get_sort_kind(self.ctx.ref(), self.handle)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Sort):
            return NotImplemented
        if other.ctx is not self.ctx:
            return False
        return bool(z3core.Z3_is_eq_sort(self.ctx.ref(), self.handle, other.handle))

    def __ne__(self, other: object) -> bool:
        eq = self.__eq__(other)
        if eq is NotImplemented:
            return eq
        return not eq

    def __hash__(self) -> int:
        return z3core.Z3_get_ast_hash(self.ctx.ref(), self.as_ast())

    def __str__(self) -> str:
        return z3core.Z3_sort_to_string(self.ctx.ref(), self.handle)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self})"


class BoolSort(Sort):
    """The Boolean sort."""


class BitVecSort(Sort):
    """Bit-vector sort of a fixed width."""

    @property
    def width(self) -> int:
        return int(z3core.Z3_get_bv_sort_size(self.ctx.ref(), self.handle))


class FPSort(Sort):
    """IEEE-754 floating-point sort.

    ``sbits`` counts the hidden bit, so single precision is ``FPSort(8, 24)``.
    """

    @property
    def ebits(self) -> int:
        return int(z3core.Z3_fpa_get_ebits(self.ctx.ref(), self.handle))

    @property
    def sbits(self) -> int:
        return int(z3core.Z3_fpa_get_sbits(self.ctx.ref(), self.handle))


class RoundingModeSort(Sort):
    """Sort of floating-point rounding-mode terms."""


_SORT_CLASSES: Dict[int, Type[Sort]] = {
    Z3_BOOL_SORT: BoolSort,
    Z3_BV_SORT: BitVecSort,
    Z3_FLOATING_POINT_SORT: FPSort,
    Z3_ROUNDING_MODE_SORT: RoundingModeSort,
}


def wrap_sort(ctx: Any, handle: Any) -> Sort:
    """Wrap a raw sort handle in the class matching its kind."""
    kind = z3core.Z3_get_sort_kind(ctx.ref(), handle)
    return _SORT_CLASSES.get(kind, Sort)(ctx, handle)
