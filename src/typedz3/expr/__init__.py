"""
Sort-tagged expression nodes.
"""

from .sorts import Sort, BoolSort, BitVecSort, FPSort, RoundingModeSort
from .base import Expr, BoolExpr, wrap_expr
from .bitvec import BitVecExpr
from .floating import (
    RoundingMode,
    RoundingModeExpr,
    FPExpr,
    fp_numeral,
    fpa_add,
    fpa_sub,
    fpa_mul,
    fpa_div,
    fpa_sqrt,
    fpa_fma,
    fpa_round_to_integral,
)

__all__ = [
    "Sort",
    "BoolSort",
    "BitVecSort",
    "FPSort",
    "RoundingModeSort",
    "Expr",
    "BoolExpr",
    "wrap_expr",
    "BitVecExpr",
    "RoundingMode",
    "RoundingModeExpr",
    "FPExpr",
    "fp_numeral",
    "fpa_add",
    "fpa_sub",
    "fpa_mul",
    "fpa_div",
    "fpa_sqrt",
    "fpa_fma",
    "fpa_round_to_integral",
]
