"""
Engine session.

A ``Context`` owns one engine context. Every sort, expression, solver and
parameter set is created through it and keeps a reference back to it.
Objects from different contexts cannot be combined.

Thread safety: a context and everything derived from it must be used from
one thread at a time. The exception is ``interrupt()`` (and
``Solver.interrupt()``), which exists to be called from another thread.
"""
from contextlib import contextmanager
import logging
from typing import Any, Iterator, List, Optional, Sequence

import z3.z3core as z3core
from z3.z3consts import Z3_PRINT_SMTLIB2_COMPLIANT

from . import pseudo_boolean
from ._native import check_cuint, engine_errors, to_ast_array
from .config import ContextConfig
from .errors import ContextMismatchError, PreconditionError, SortMismatchError
from .expr.base import BoolExpr, Expr
from .expr.bitvec import BitVecExpr
from .expr.floating import (
    FPExpr, FPLiteral, RoundingMode, fp_numeral,
    fpa_add, fpa_div, fpa_fma, fpa_mul, fpa_round_to_integral, fpa_sqrt, fpa_sub,
)
from .expr.sorts import BitVecSort, BoolSort, FPSort, Sort
from .solver.params import Params
from .solver.solver import Solver

logger = logging.getLogger(__name__)


def _ignore_engine_error(ctx, code):
    # Errors are raised by the z3core wrappers after each call.
    return


class Context:
    """Owner of one engine session.

    Args:
        config: Engine settings (defaults to ``ContextConfig()``)
        **params: Overrides for ``config`` fields; unknown names are passed
            to the engine as extra configuration parameters

    Example:
        >>> with Context() as ctx:
        ...     x = ctx.fp_const("x", ctx.float32())
        ...     s = ctx.solver()
        ...     s.add(x + 1.5 == 3.0)
        ...     s.check()
        <SolverResult.SAT: 'sat'>
    """

    def __init__(self, config: Optional[ContextConfig] = None, **params: Any):
        config = config or ContextConfig()
        if params:
            config = config.with_overrides(**params)
        self.config = config

        conf = z3core.Z3_mk_config()
        try:
            for name, value in config.to_engine_params():
                z3core.Z3_set_param_value(conf, name, value)
            self._ref = z3core.Z3_mk_context_rc(conf)
        finally:
            z3core.Z3_del_config(conf)

        self._error_handler = z3core.Z3_set_error_handler(self._ref, _ignore_engine_error)
        z3core.Z3_set_ast_print_mode(self._ref, Z3_PRINT_SMTLIB2_COMPLIANT)
        self._rounding_mode = config.rounding_mode
        logger.debug("Created context (%s)", ", ".join(f"{k}={v}" for k, v in config.to_engine_params()))

    # Lifetime

    def ref(self) -> Any:
        """Raw engine context handle."""
        if self._ref is None:
            raise PreconditionError("context has been closed")
        return self._ref

    @property
    def closed(self) -> bool:
        return getattr(self, "_ref", None) is None

    def close(self) -> None:
        """Destroy the engine context.

        Objects created through this context must not be used afterwards;
        their own release becomes a no-op.
        """
        if self.closed:
            return
        z3core.Z3_del_context(self._ref)
        self._ref = None
        self._error_handler = None
        logger.debug("Closed context")

    def __enter__(self) -> "Context":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __del__(self):
        self.close()

    def interrupt(self) -> None:
        """Interrupt whatever check is running in this context.

        May be called from a thread other than the one running the check.
        """
        z3core.Z3_interrupt(self.ref())

    # Rounding mode

    @property
    def rounding_mode(self) -> RoundingMode:
        """Rounding mode used by the floating-point operators."""
        return self._rounding_mode

    @rounding_mode.setter
    def rounding_mode(self, mode: RoundingMode) -> None:
        self._rounding_mode = RoundingMode.parse(mode)

    @contextmanager
    def rounding(self, mode: RoundingMode) -> Iterator[RoundingMode]:
        """Temporarily switch the rounding mode used by the operators."""
        previous = self._rounding_mode
        self.rounding_mode = mode
        try:
            yield self._rounding_mode
        finally:
            self._rounding_mode = previous

    # Sorts

    def bool_sort(self) -> BoolSort:
        return BoolSort(self, z3core.Z3_mk_bool_sort(self.ref()))

    @engine_errors
    def bitvec_sort(self, width: int) -> BitVecSort:
        check_cuint(width, "width")
        if width == 0:
            raise PreconditionError("bit-vector width must be positive")
        return BitVecSort(self, z3core.Z3_mk_bv_sort(self.ref(), width))

    @engine_errors
    def fp_sort(self, ebits: int, sbits: int) -> FPSort:
        """Floating-point sort with ``ebits`` exponent bits and ``sbits``
        significand bits (hidden bit included)."""
        check_cuint(ebits, "ebits")
        check_cuint(sbits, "sbits")
        if ebits < 2 or sbits < 3:
            raise PreconditionError(f"invalid floating-point format ({ebits}, {sbits})")
        return FPSort(self, z3core.Z3_mk_fpa_sort(self.ref(), ebits, sbits))

    def float16(self) -> FPSort:
        return self.fp_sort(5, 11)

    def float32(self) -> FPSort:
        return self.fp_sort(8, 24)

    def float64(self) -> FPSort:
        return self.fp_sort(11, 53)

    def float128(self) -> FPSort:
        return self.fp_sort(15, 113)

    def rounding_mode_expr(self, mode: Optional[RoundingMode] = None) -> Expr:
        """Engine term for ``mode`` (the current mode if omitted)."""
        return RoundingMode.parse(mode or self._rounding_mode).to_expr(self)

    # Constants and values

    def _const(self, name: str, sort: Sort, cls: Any) -> Any:
        ref = self.ref()
        if sort.ctx is not self:
            raise ContextMismatchError("sort belongs to a different context")
        return cls(self, z3core.Z3_mk_const(ref, z3core.Z3_mk_string_symbol(ref, name), sort.handle))

    def bool_const(self, name: str) -> BoolExpr:
        return self._const(name, self.bool_sort(), BoolExpr)

    def bool_consts(self, names: str) -> List[BoolExpr]:
        """Boolean constants for a space-separated list of names."""
        return [self.bool_const(n) for n in names.split()]

    def bool_val(self, value: bool) -> BoolExpr:
        return self.true() if value else self.false()

    def true(self) -> BoolExpr:
        return BoolExpr(self, z3core.Z3_mk_true(self.ref()))

    def false(self) -> BoolExpr:
        return BoolExpr(self, z3core.Z3_mk_false(self.ref()))

    def bitvec_const(self, name: str, width: int) -> BitVecExpr:
        return self._const(name, self.bitvec_sort(width), BitVecExpr)

    @engine_errors
    def bitvec_val(self, value: int, width: int) -> BitVecExpr:
        """Bit-vector numeral; ``value`` is taken modulo ``2**width``."""
        if isinstance(value, bool) or not isinstance(value, int):
            raise SortMismatchError(f"bit-vector value must be an int, got {value!r}")
        sort = self.bitvec_sort(width)
        return BitVecExpr(self, z3core.Z3_mk_numeral(self.ref(), str(value), sort.handle))

    def fp_const(self, name: str, sort: FPSort) -> FPExpr:
        return self._const(name, self._fp_sort(sort), FPExpr)

    def fp_val(self, value: FPLiteral, sort: FPSort) -> FPExpr:
        """Floating-point numeral of exactly ``sort``."""
        return fp_numeral(self, value, sort)

    def _fp_sort(self, sort: FPSort) -> FPSort:
        if not isinstance(sort, FPSort):
            raise SortMismatchError(f"expected a floating-point sort, got {sort!r}")
        if sort.ctx is not self:
            raise ContextMismatchError("sort belongs to a different context")
        return sort

    def fp_nan(self, sort: FPSort) -> FPExpr:
        return FPExpr(self, z3core.Z3_mk_fpa_nan(self.ref(), self._fp_sort(sort).handle))

    def fp_inf(self, sort: FPSort, negative: bool = False) -> FPExpr:
        return FPExpr(self, z3core.Z3_mk_fpa_inf(self.ref(), self._fp_sort(sort).handle, negative))

    def fp_zero(self, sort: FPSort, negative: bool = False) -> FPExpr:
        return FPExpr(self, z3core.Z3_mk_fpa_zero(self.ref(), self._fp_sort(sort).handle, negative))

    # Floating-point arithmetic with an explicit rounding mode

    def _fp_args(self, first: Any, *rest: Any) -> List[FPExpr]:
        if not isinstance(first, FPExpr):
            raise SortMismatchError(f"expected a floating-point expression, got {first!r}")
        if first.ctx is not self:
            raise ContextMismatchError("argument belongs to a different context")
        return [first] + [first._coerce(r) for r in rest]

    def fpa_add(self, rm: RoundingMode, a: FPExpr, b: Any) -> FPExpr:
        """``a + b`` rounded with ``rm`` regardless of the current mode."""
        return fpa_add(rm, *self._fp_args(a, b))

    def fpa_sub(self, rm: RoundingMode, a: FPExpr, b: Any) -> FPExpr:
        return fpa_sub(rm, *self._fp_args(a, b))

    def fpa_mul(self, rm: RoundingMode, a: FPExpr, b: Any) -> FPExpr:
        return fpa_mul(rm, *self._fp_args(a, b))

    def fpa_div(self, rm: RoundingMode, a: FPExpr, b: Any) -> FPExpr:
        return fpa_div(rm, *self._fp_args(a, b))

    def fpa_sqrt(self, rm: RoundingMode, a: FPExpr) -> FPExpr:
        return fpa_sqrt(rm, *self._fp_args(a))

    def fpa_fma(self, rm: RoundingMode, a: FPExpr, b: Any, c: Any) -> FPExpr:
        """Fused ``a * b + c`` with a single rounding."""
        return fpa_fma(rm, *self._fp_args(a, b, c))

    def fpa_round_to_integral(self, rm: RoundingMode, a: FPExpr) -> FPExpr:
        return fpa_round_to_integral(rm, *self._fp_args(a))

    # Boolean connectives

    def _bool_list(self, args: Sequence[Any]) -> List[BoolExpr]:
        out = []
        for a in args:
            if isinstance(a, bool):
                a = self.bool_val(a)
            if not isinstance(a, BoolExpr):
                raise SortMismatchError(f"expected a Boolean expression, got {a!r}")
            if a.ctx is not self:
                raise ContextMismatchError("argument belongs to a different context")
            out.append(a)
        return out

    def and_(self, *args: BoolExpr) -> BoolExpr:
        buf, sz = to_ast_array(self._bool_list(args))
        return BoolExpr(self, z3core.Z3_mk_and(self.ref(), sz, buf))

    def or_(self, *args: BoolExpr) -> BoolExpr:
        buf, sz = to_ast_array(self._bool_list(args))
        return BoolExpr(self, z3core.Z3_mk_or(self.ref(), sz, buf))

    def ite(self, cond: Any, then: Any, otherwise: Any) -> Expr:
        """``if cond then then else otherwise``; both branches share a sort.

        One branch may be a Python literal; it takes the sort of the other.
        """
        (cond,) = self._bool_list([cond])
        if not isinstance(then, Expr) and not isinstance(otherwise, Expr):
            raise SortMismatchError("at least one ite branch must be an expression")
        if not isinstance(then, Expr):
            then = otherwise._coerce(then)
        if then.ctx is not self:
            raise ContextMismatchError("branch belongs to a different context")
        other = then._coerce(otherwise)
        return type(then)(self, z3core.Z3_mk_ite(self.ref(), cond.handle, then.handle, other.handle))

    # Pseudo-Boolean constraints

    def at_most(self, variables: Sequence[BoolExpr], k: int) -> BoolExpr:
        return pseudo_boolean.at_most(self, variables, k)

    def at_least(self, variables: Sequence[BoolExpr], k: int) -> BoolExpr:
        return pseudo_boolean.at_least(self, variables, k)

    def pb_le(self, variables: Sequence[BoolExpr], coefficients: Sequence[int], k: int) -> BoolExpr:
        return pseudo_boolean.pb_le(self, variables, coefficients, k)

    def pb_ge(self, variables: Sequence[BoolExpr], coefficients: Sequence[int], k: int) -> BoolExpr:
        return pseudo_boolean.pb_ge(self, variables, coefficients, k)

    def pb_eq(self, variables: Sequence[BoolExpr], coefficients: Sequence[int], k: int) -> BoolExpr:
        return pseudo_boolean.pb_eq(self, variables, coefficients, k)

    # Solvers and parameters

    @engine_errors
    def solver(self, logic: Optional[str] = None) -> Solver:
        """New solver, optionally specialized for an SMT-LIB logic."""
        ref = self.ref()
        if logic is None:
            handle = z3core.Z3_mk_solver(ref)
        else:
            handle = z3core.Z3_mk_solver_for_logic(ref, z3core.Z3_mk_string_symbol(ref, logic))
        logger.debug("Created solver (logic=%s)", logic)
        return Solver(self, handle)

    def simple_solver(self) -> Solver:
        """New solver without the incremental/non-incremental strategy switch."""
        return Solver(self, z3core.Z3_mk_simple_solver(self.ref()))

    @engine_errors
    def params(self, **values: Any) -> Params:
        p = Params(self, z3core.Z3_mk_params(self.ref()))
        for name, value in values.items():
            p.set(name, value)
        return p
