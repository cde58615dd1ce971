"""
Typed bindings for the Z3 SMT engine.

Expressions carry their sort in their Python type, operators are only
defined where they make sense for that sort, and every engine object is
reference counted and released deterministically.
"""

__version__ = "0.1.0"

import logging

from .errors import (
    TypedZ3Error,
    PreconditionError,
    SortMismatchError,
    ContextMismatchError,
    EngineError,
)
from .config import ContextConfig
from .expr import (
    Sort,
    BoolSort,
    BitVecSort,
    FPSort,
    RoundingModeSort,
    Expr,
    BoolExpr,
    BitVecExpr,
    FPExpr,
    RoundingMode,
    fpa_add,
    fpa_sub,
    fpa_mul,
    fpa_div,
    fpa_sqrt,
    fpa_fma,
    fpa_round_to_integral,
)
from .pseudo_boolean import at_most, at_least, pb_le, pb_ge, pb_eq
from .solver import (
    SolverResult,
    SolverState,
    ParamKind,
    Params,
    ParamDescrs,
    Model,
    Solver,
)
from .context import Context

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "TypedZ3Error",
    "PreconditionError",
    "SortMismatchError",
    "ContextMismatchError",
    "EngineError",
    "ContextConfig",
    "Sort",
    "BoolSort",
    "BitVecSort",
    "FPSort",
    "RoundingModeSort",
    "Expr",
    "BoolExpr",
    "BitVecExpr",
    "FPExpr",
    "RoundingMode",
    "fpa_add",
    "fpa_sub",
    "fpa_mul",
    "fpa_div",
    "fpa_sqrt",
    "fpa_fma",
    "fpa_round_to_integral",
    "at_most",
    "at_least",
    "pb_le",
    "pb_ge",
    "pb_eq",
    "SolverResult",
    "SolverState",
    "ParamKind",
    "Params",
    "ParamDescrs",
    "Model",
    "Solver",
    "Context",
]
