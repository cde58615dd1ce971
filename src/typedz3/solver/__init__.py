"""Solver handles and the artifacts they produce."""

from .result import SolverResult, SolverState
from .params import ParamKind, Params, ParamDescrs
from .model import Model
from .solver import Solver

__all__ = [
    "SolverResult",
    "SolverState",
    "ParamKind",
    "Params",
    "ParamDescrs",
    "Model",
    "Solver",
]
