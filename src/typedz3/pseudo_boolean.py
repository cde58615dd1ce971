"""
Cardinality and pseudo-Boolean constraint builders.

Each builder copies the Boolean variables into one contiguous handle buffer
(and the coefficients into one C ``int`` buffer) and makes a single engine
call. All argument checks happen before the engine is reached.
"""
from typing import Any, List, Sequence

import z3.z3core as z3core

from ._native import check_cint, check_cuint, engine_errors, to_ast_array, to_int_array
from .errors import ContextMismatchError, PreconditionError, SortMismatchError
from .expr.base import BoolExpr


def _bool_args(ctx: Any, variables: Sequence[BoolExpr]) -> List[BoolExpr]:
    args = list(variables)
    for i, v in enumerate(args):
        if not isinstance(v, BoolExpr):
            raise SortMismatchError(f"argument {i} is not a Boolean expression: {v!r}")
        if v.ctx is not ctx:
            raise ContextMismatchError(f"argument {i} belongs to a different context")
    return args


def _check_arity(args: Sequence[BoolExpr], coefficients: Sequence[int]) -> None:
    if len(args) != len(coefficients):
        raise PreconditionError(
            f"got {len(args)} variables but {len(coefficients)} coefficients")


@engine_errors
def at_most(ctx: Any, variables: Sequence[BoolExpr], k: int) -> BoolExpr:
    """``variables[0] + ... + variables[n-1] <= k``"""
    args = _bool_args(ctx, variables)
    check_cuint(k, "k")
    buf, sz = to_ast_array(args)
    return BoolExpr(ctx, z3core.Z3_mk_atmost(ctx.ref(), sz, buf, k))


@engine_errors
def at_least(ctx: Any, variables: Sequence[BoolExpr], k: int) -> BoolExpr:
    """``variables[0] + ... + variables[n-1] >= k``"""
    args = _bool_args(ctx, variables)
    check_cuint(k, "k")
    buf, sz = to_ast_array(args)
    return BoolExpr(ctx, z3core.Z3_mk_atleast(ctx.ref(), sz, buf, k))


def _weighted(builder: Any, ctx: Any, variables: Sequence[BoolExpr],
              coefficients: Sequence[int], k: int) -> BoolExpr:
    args = _bool_args(ctx, variables)
    coeffs = list(coefficients)
    _check_arity(args, coeffs)
    check_cint(k, "k")
    buf, sz = to_ast_array(args)
    cbuf, _ = to_int_array(coeffs)
    return BoolExpr(ctx, builder(ctx.ref(), sz, buf, cbuf, k))


@engine_errors
def pb_le(ctx: Any, variables: Sequence[BoolExpr], coefficients: Sequence[int], k: int) -> BoolExpr:
    """``coefficients[0]*variables[0] + ... <= k``

    Raises:
        PreconditionError: If the variable and coefficient counts differ
    """
    return _weighted(z3core.Z3_mk_pble, ctx, variables, coefficients, k)


@engine_errors
def pb_ge(ctx: Any, variables: Sequence[BoolExpr], coefficients: Sequence[int], k: int) -> BoolExpr:
    """``coefficients[0]*variables[0] + ... >= k``

    Raises:
        PreconditionError: If the variable and coefficient counts differ
    """
    return _weighted(z3core.Z3_mk_pbge, ctx, variables, coefficients, k)


@engine_errors
def pb_eq(ctx: Any, variables: Sequence[BoolExpr], coefficients: Sequence[int], k: int) -> BoolExpr:
    """``coefficients[0]*variables[0] + ... == k``

    Raises:
        PreconditionError: If the variable and coefficient counts differ
    """
    return _weighted(z3core.Z3_mk_pbeq, ctx, variables, coefficients, k)
