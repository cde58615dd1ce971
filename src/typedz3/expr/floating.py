"""
Floating-point expressions.

Every rounding operation is built by a module-level function that takes the
rounding mode explicitly (``fpa_add(rm, a, b)``). The Python operators on
``FPExpr`` call those builders with the owning context's current rounding
mode, read at the moment the operator is applied.

Python number literals may appear on either side of an operator. A ``float``
is converted through the engine's double-precision path; ``int``,
``Decimal`` and ``Fraction`` are passed as numeral strings. Either way the
literal takes the exact sort of the other operand.
"""
from decimal import Decimal
from enum import Enum
from fractions import Fraction
import math
from typing import Any, Callable, Optional, Union

import z3.z3core as z3core
from z3.z3consts import Z3_FLOATING_POINT_SORT, Z3_ROUNDING_MODE_SORT

from .._native import engine_errors
from ..errors import ContextMismatchError, PreconditionError, SortMismatchError
from .base import BoolExpr, Expr, register_expr_class
from .sorts import FPSort, RoundingModeSort

FPLiteral = Union[float, int, Decimal, Fraction]

_DOUBLE_FORMAT = (11, 53)


class RoundingMode(Enum):
    """IEEE-754 rounding modes."""
    RNE = "RNE"    # nearest, ties to even
    RNA = "RNA"    # nearest, ties away from zero
    RTP = "RTP"    # toward positive
    RTN = "RTN"    # toward negative
    RTZ = "RTZ"    # toward zero

    @classmethod
    def parse(cls, value: Union[str, "RoundingMode"]) -> "RoundingMode":
        """Accept a member, its name, or its long SMT-LIB name."""
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        if text.upper() in cls.__members__:
            return cls[text.upper()]
        for mode, long_name in _LONG_NAMES.items():
            if text.lower() == long_name.lower():
                return mode
        raise PreconditionError(f"unknown rounding mode: {value!r}")

    def to_expr(self, ctx: Any) -> "RoundingModeExpr":
        """Build the engine term for this rounding mode."""
        return RoundingModeExpr(ctx, _RM_BUILDERS[self](ctx.ref()))


_LONG_NAMES = {
    RoundingMode.RNE: "roundNearestTiesToEven",
    RoundingMode.RNA: "roundNearestTiesToAway",
    RoundingMode.RTP: "roundTowardPositive",
    RoundingMode.RTN: "roundTowardNegative",
    RoundingMode.RTZ: "roundTowardZero",
}

_RM_BUILDERS = {
    RoundingMode.RNE: z3core.Z3_mk_fpa_round_nearest_ties_to_even,
    RoundingMode.RNA: z3core.Z3_mk_fpa_round_nearest_ties_to_away,
    RoundingMode.RTP: z3core.Z3_mk_fpa_round_toward_positive,
    RoundingMode.RTN: z3core.Z3_mk_fpa_round_toward_negative,
    RoundingMode.RTZ: z3core.Z3_mk_fpa_round_toward_zero,
}


@register_expr_class(Z3_ROUNDING_MODE_SORT)
class RoundingModeExpr(Expr[RoundingModeSort]):
    """Rounding-mode term."""


def _numeral_text(value: Union[int, Decimal, Fraction]) -> str:
    if isinstance(value, Fraction):
        return f"{value.numerator}/{value.denominator}"
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


def _double_numeral(ctx: Any, value: float, sort: FPSort) -> "FPExpr":
    ref = ctx.ref()
    if (sort.ebits, sort.sbits) == _DOUBLE_FORMAT:
        return FPExpr(ctx, z3core.Z3_mk_fpa_numeral_double(ref, value, sort.handle))
    double_sort = ctx.float64()
    double = FPExpr(ctx, z3core.Z3_mk_fpa_numeral_double(ref, value, double_sort.handle))
    mode = ctx.rounding_mode.to_expr(ctx)
    converted = FPExpr(ctx, z3core.Z3_mk_fpa_to_fp_float(ref, mode.handle, double.handle, sort.handle))
    return FPExpr(ctx, z3core.Z3_simplify(ref, converted.handle))


@engine_errors
def fp_numeral(ctx: Any, value: FPLiteral, sort: FPSort) -> "FPExpr":
    """Build a floating-point numeral of exactly ``sort`` from a Python number.

    A ``float`` is taken exactly as a double and, when ``sort`` is narrower
    or wider, converted with the context's current rounding mode, so it
    rounds, overflows to infinity and underflows to subnormals or zero the
    way IEEE-754 conversion does.

    Raises:
        SortMismatchError: If ``value`` is not a number or ``sort`` is not a
            floating-point sort
        ContextMismatchError: If ``sort`` belongs to another context
    """
    if not isinstance(sort, FPSort):
        raise SortMismatchError(f"expected a floating-point sort, got {sort!r}")
    if sort.ctx is not ctx:
        raise ContextMismatchError("sort belongs to a different context")
    if isinstance(value, bool) or not isinstance(value, (float, int, Decimal, Fraction)):
        raise SortMismatchError(
            f"cannot use {type(value).__name__} value {value!r} as a floating-point literal")

    ref = ctx.ref()
    if isinstance(value, Decimal) and (not value.is_finite() or value.is_zero()):
        value = float(value)
    if isinstance(value, float):
        if math.isnan(value):
            return FPExpr(ctx, z3core.Z3_mk_fpa_nan(ref, sort.handle))
        if math.isinf(value):
            return FPExpr(ctx, z3core.Z3_mk_fpa_inf(ref, sort.handle, value < 0))
        if value == 0.0:
            return FPExpr(ctx, z3core.Z3_mk_fpa_zero(ref, sort.handle, math.copysign(1.0, value) < 0))
        return _double_numeral(ctx, value, sort)
    return FPExpr(ctx, z3core.Z3_mk_numeral(ref, _numeral_text(value), sort.handle))


def _check_fp(*args: "FPExpr") -> None:
    for a in args:
        if not isinstance(a, FPExpr):
            raise SortMismatchError(f"expected a floating-point expression, got {a!r}")
    for a in args[1:]:
        args[0]._check_operand(a)


def _rm(ctx: Any, rm: RoundingMode) -> "RoundingModeExpr":
    return RoundingMode.parse(rm).to_expr(ctx)


def _rm_binary(builder: Callable[..., Any], rm: RoundingMode, a: "FPExpr", b: "FPExpr") -> "FPExpr":
    _check_fp(a, b)
    mode = _rm(a.ctx, rm)
    return FPExpr(a.ctx, builder(a.ctx.ref(), mode.handle, a.handle, b.handle))


def fpa_add(rm: RoundingMode, a: "FPExpr", b: "FPExpr") -> "FPExpr":
    return _rm_binary(z3core.Z3_mk_fpa_add, rm, a, b)


def fpa_sub(rm: RoundingMode, a: "FPExpr", b: "FPExpr") -> "FPExpr":
    return _rm_binary(z3core.Z3_mk_fpa_sub, rm, a, b)


def fpa_mul(rm: RoundingMode, a: "FPExpr", b: "FPExpr") -> "FPExpr":
    return _rm_binary(z3core.Z3_mk_fpa_mul, rm, a, b)


def fpa_div(rm: RoundingMode, a: "FPExpr", b: "FPExpr") -> "FPExpr":
    return _rm_binary(z3core.Z3_mk_fpa_div, rm, a, b)


def fpa_sqrt(rm: RoundingMode, a: "FPExpr") -> "FPExpr":
    _check_fp(a)
    mode = _rm(a.ctx, rm)
    return FPExpr(a.ctx, z3core.Z3_mk_fpa_sqrt(a.ctx.ref(), mode.handle, a.handle))


def fpa_fma(rm: RoundingMode, a: "FPExpr", b: "FPExpr", c: "FPExpr") -> "FPExpr":
    """Fused multiply-add ``a * b + c`` with a single rounding."""
    _check_fp(a, b, c)
    mode = _rm(a.ctx, rm)
    return FPExpr(a.ctx, z3core.Z3_mk_fpa_fma(a.ctx.ref(), mode.handle, a.handle, b.handle, c.handle))


def fpa_round_to_integral(rm: RoundingMode, a: "FPExpr") -> "FPExpr":
    _check_fp(a)
    mode = _rm(a.ctx, rm)
    return FPExpr(a.ctx, z3core.Z3_mk_fpa_round_to_integral(a.ctx.ref(), mode.handle, a.handle))


@register_expr_class(Z3_FLOATING_POINT_SORT)
class FPExpr(Expr[FPSort]):
    """Floating-point node.

    ``==`` is structural equality of terms (NaN equals NaN, +0 differs from
    -0); ``ieee_eq`` is the IEEE-754 equality predicate. The ordering
    operators are IEEE comparisons.
    """

    @property
    def ebits(self) -> int:
        return self.sort.ebits

    @property
    def sbits(self) -> int:
        return self.sort.sbits

    def _promote(self, value: Any) -> "FPExpr":
        return fp_numeral(self.ctx, value, self.sort)

    def _mode(self, rm: Optional[RoundingMode]) -> RoundingMode:
        return self.ctx.rounding_mode if rm is None else RoundingMode.parse(rm)

    def _classify(self, builder: Callable[..., Any]) -> BoolExpr:
        return BoolExpr(self.ctx, builder(self.ctx.ref(), self.handle))

    def _compare(self, builder: Callable[..., Any], other: Any) -> BoolExpr:
        rhs = self._coerce(other)
        return BoolExpr(self.ctx, builder(self.ctx.ref(), self.handle, rhs.handle))

    def __add__(self, other: Any) -> "FPExpr":
        return fpa_add(self.ctx.rounding_mode, self, self._coerce(other))

    def __radd__(self, other: Any) -> "FPExpr":
        return fpa_add(self.ctx.rounding_mode, self._coerce(other), self)

    def __sub__(self, other: Any) -> "FPExpr":
        return fpa_sub(self.ctx.rounding_mode, self, self._coerce(other))

    def __rsub__(self, other: Any) -> "FPExpr":
        return fpa_sub(self.ctx.rounding_mode, self._coerce(other), self)

    def __mul__(self, other: Any) -> "FPExpr":
        return fpa_mul(self.ctx.rounding_mode, self, self._coerce(other))

    def __rmul__(self, other: Any) -> "FPExpr":
        return fpa_mul(self.ctx.rounding_mode, self._coerce(other), self)

    def __truediv__(self, other: Any) -> "FPExpr":
        return fpa_div(self.ctx.rounding_mode, self, self._coerce(other))

    def __rtruediv__(self, other: Any) -> "FPExpr":
        return fpa_div(self.ctx.rounding_mode, self._coerce(other), self)

    def __neg__(self) -> "FPExpr":
        return FPExpr(self.ctx, z3core.Z3_mk_fpa_neg(self.ctx.ref(), self.handle))

    def __abs__(self) -> "FPExpr":
        return FPExpr(self.ctx, z3core.Z3_mk_fpa_abs(self.ctx.ref(), self.handle))

    def sqrt(self, rm: Optional[RoundingMode] = None) -> "FPExpr":
        """Square root, rounded with ``rm`` or the context's current mode."""
        return fpa_sqrt(self._mode(rm), self)

    def fma(self, mul: Any, add: Any, rm: Optional[RoundingMode] = None) -> "FPExpr":
        return fpa_fma(self._mode(rm), self, self._coerce(mul), self._coerce(add))

    def round_to_integral(self, rm: Optional[RoundingMode] = None) -> "FPExpr":
        return fpa_round_to_integral(self._mode(rm), self)

    def rem(self, other: Any) -> "FPExpr":
        rhs = self._coerce(other)
        return FPExpr(self.ctx, z3core.Z3_mk_fpa_rem(self.ctx.ref(), self.handle, rhs.handle))

    def min(self, other: Any) -> "FPExpr":
        rhs = self._coerce(other)
        return FPExpr(self.ctx, z3core.Z3_mk_fpa_min(self.ctx.ref(), self.handle, rhs.handle))

    def max(self, other: Any) -> "FPExpr":
        rhs = self._coerce(other)
        return FPExpr(self.ctx, z3core.Z3_mk_fpa_max(self.ctx.ref(), self.handle, rhs.handle))

    def ieee_eq(self, other: Any) -> BoolExpr:
        return self._compare(z3core.Z3_mk_fpa_eq, other)

    def __ge__(self, other: Any) -> BoolExpr:
        return self._compare(z3core.Z3_mk_fpa_geq, other)

    def __gt__(self, other: Any) -> BoolExpr:
        return self._compare(z3core.Z3_mk_fpa_gt, other)

    def __le__(self, other: Any) -> BoolExpr:
        return self._compare(z3core.Z3_mk_fpa_leq, other)

    def __lt__(self, other: Any) -> BoolExpr:
        return self._compare(z3core.Z3_mk_fpa_lt, other)

    @property
    def is_normal(self) -> BoolExpr:
        return self._classify(z3core.Z3_mk_fpa_is_normal)

    @property
    def is_subnormal(self) -> BoolExpr:
        return self._classify(z3core.Z3_mk_fpa_is_subnormal)

    @property
    def is_nan(self) -> BoolExpr:
        return self._classify(z3core.Z3_mk_fpa_is_nan)

    @property
    def is_zero(self) -> BoolExpr:
        return self._classify(z3core.Z3_mk_fpa_is_zero)

    @property
    def is_infinite(self) -> BoolExpr:
        return self._classify(z3core.Z3_mk_fpa_is_infinite)

    @property
    def is_positive(self) -> BoolExpr:
        return self._classify(z3core.Z3_mk_fpa_is_positive)

    @property
    def is_negative(self) -> BoolExpr:
        return self._classify(z3core.Z3_mk_fpa_is_negative)
