"""
Bit-vector expressions.

Arithmetic wraps modulo 2**width. The Python comparison operators and ``/``,
``%``, ``>>`` are the signed variants; the unsigned ones are methods.
"""
from typing import Any, Callable

import z3.z3core as z3core
from z3.z3consts import Z3_BV_SORT

from .base import BoolExpr, Expr, register_expr_class
from .sorts import BitVecSort


@register_expr_class(Z3_BV_SORT)
class BitVecExpr(Expr[BitVecSort]):
    """Bit-vector node of fixed width."""

    @property
    def width(self) -> int:
        ref = self.ctx.ref()
        return int(z3core.Z3_get_bv_sort_size(ref, z3core.Z3_get_sort(ref, self.handle)))

    def _promote(self, value: Any) -> "BitVecExpr":
        if isinstance(value, int) and not isinstance(value, bool):
            return self.ctx.bitvec_val(value, self.width)
        return super()._promote(value)

    def _binary(self, builder: Callable[..., Any], lhs: "BitVecExpr", rhs: "BitVecExpr") -> "BitVecExpr":
        return BitVecExpr(self.ctx, builder(self.ctx.ref(), lhs.handle, rhs.handle))

    def _compare(self, builder: Callable[..., Any], other: Any) -> BoolExpr:
        rhs = self._coerce(other)
        return BoolExpr(self.ctx, builder(self.ctx.ref(), self.handle, rhs.handle))

    def __add__(self, other: Any) -> "BitVecExpr":
        return self._binary(z3core.Z3_mk_bvadd, self, self._coerce(other))

    def __radd__(self, other: Any) -> "BitVecExpr":
        return self._binary(z3core.Z3_mk_bvadd, self._coerce(other), self)

    def __sub__(self, other: Any) -> "BitVecExpr":
        return self._binary(z3core.Z3_mk_bvsub, self, self._coerce(other))

    def __rsub__(self, other: Any) -> "BitVecExpr":
        return self._binary(z3core.Z3_mk_bvsub, self._coerce(other), self)

    def __mul__(self, other: Any) -> "BitVecExpr":
        return self._binary(z3core.Z3_mk_bvmul, self, self._coerce(other))

    def __rmul__(self, other: Any) -> "BitVecExpr":
        return self._binary(z3core.Z3_mk_bvmul, self._coerce(other), self)

    def __truediv__(self, other: Any) -> "BitVecExpr":
        return self._binary(z3core.Z3_mk_bvsdiv, self, self._coerce(other))

    def __rtruediv__(self, other: Any) -> "BitVecExpr":
        return self._binary(z3core.Z3_mk_bvsdiv, self._coerce(other), self)

    def __mod__(self, other: Any) -> "BitVecExpr":
        return self._binary(z3core.Z3_mk_bvsmod, self, self._coerce(other))

    def __rmod__(self, other: Any) -> "BitVecExpr":
        return self._binary(z3core.Z3_mk_bvsmod, self._coerce(other), self)

    def __and__(self, other: Any) -> "BitVecExpr":
        return self._binary(z3core.Z3_mk_bvand, self, self._coerce(other))

    def __rand__(self, other: Any) -> "BitVecExpr":
        return self._binary(z3core.Z3_mk_bvand, self._coerce(other), self)

    def __or__(self, other: Any) -> "BitVecExpr":
        return self._binary(z3core.Z3_mk_bvor, self, self._coerce(other))

    def __ror__(self, other: Any) -> "BitVecExpr":
        return self._binary(z3core.Z3_mk_bvor, self._coerce(other), self)

    def __xor__(self, other: Any) -> "BitVecExpr":
        return self._binary(z3core.Z3_mk_bvxor, self, self._coerce(other))

    def __rxor__(self, other: Any) -> "BitVecExpr":
        return self._binary(z3core.Z3_mk_bvxor, self._coerce(other), self)

    def __lshift__(self, other: Any) -> "BitVecExpr":
        return self._binary(z3core.Z3_mk_bvshl, self, self._coerce(other))

    def __rshift__(self, other: Any) -> "BitVecExpr":
        return self._binary(z3core.Z3_mk_bvashr, self, self._coerce(other))

    def __neg__(self) -> "BitVecExpr":
        return BitVecExpr(self.ctx, z3core.Z3_mk_bvneg(self.ctx.ref(), self.handle))

    def __invert__(self) -> "BitVecExpr":
        return BitVecExpr(self.ctx, z3core.Z3_mk_bvnot(self.ctx.ref(), self.handle))

    def lshr(self, other: Any) -> "BitVecExpr":
        """Logical (zero-filling) shift right."""
        return self._binary(z3core.Z3_mk_bvlshr, self, self._coerce(other))

    def udiv(self, other: Any) -> "BitVecExpr":
        return self._binary(z3core.Z3_mk_bvudiv, self, self._coerce(other))

    def urem(self, other: Any) -> "BitVecExpr":
        return self._binary(z3core.Z3_mk_bvurem, self, self._coerce(other))

    def srem(self, other: Any) -> "BitVecExpr":
        return self._binary(z3core.Z3_mk_bvsrem, self, self._coerce(other))

    def __lt__(self, other: Any) -> BoolExpr:
        return self._compare(z3core.Z3_mk_bvslt, other)

    def __le__(self, other: Any) -> BoolExpr:
        return self._compare(z3core.Z3_mk_bvsle, other)

    def __gt__(self, other: Any) -> BoolExpr:
        return self._compare(z3core.Z3_mk_bvsgt, other)

    def __ge__(self, other: Any) -> BoolExpr:
        return self._compare(z3core.Z3_mk_bvsge, other)

    def ult(self, other: Any) -> BoolExpr:
        return self._compare(z3core.Z3_mk_bvult, other)

    def ule(self, other: Any) -> BoolExpr:
        return self._compare(z3core.Z3_mk_bvule, other)

    def ugt(self, other: Any) -> BoolExpr:
        return self._compare(z3core.Z3_mk_bvugt, other)

    def uge(self, other: Any) -> BoolExpr:
        return self._compare(z3core.Z3_mk_bvuge, other)

    def as_python(self) -> Any:
        if self.is_numeral():
            return int(z3core.Z3_get_numeral_string(self.ctx.ref(), self.handle))
        return str(self)
