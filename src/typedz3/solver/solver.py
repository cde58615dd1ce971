"""
Solver handle.

Wraps one engine solver object: an assertion stack with backtracking
points, satisfiability checks, and retrieval of the artifacts a check
produces (model, unsat core, proof).
"""
import logging
import os
import time
from typing import Any, Iterable, List, Optional, Union

import z3.z3core as z3core
from z3.z3types import Z3Exception

from .._native import NativeHandle, check_cuint, engine_errors, engine_message, to_ast_array
from ..errors import ContextMismatchError, PreconditionError, SortMismatchError
from ..expr.base import BoolExpr, Expr, exprs_from_vector, wrap_expr
from .model import Model
from .params import ParamDescrs, Params
from .result import SolverResult, SolverState

logger = logging.getLogger(__name__)


class Solver(NativeHandle):
    """Reference-counted handle to an engine solver.

    Solvers are created through ``Context.solver()``. Only ``check`` and
    ``check_assumptions`` may run for a long time; they can be cancelled
    from another thread with ``interrupt()`` or ``Context.interrupt()``.

    Attributes:
        last_check_time_ms: Wall-clock duration of the most recent check
    """

    def __init__(self, ctx: Any, handle: Any):
        super().__init__(ctx, handle)
        self._last_result: Optional[SolverResult] = None
        self.last_check_time_ms = 0.0

    def _inc_ref(self) -> None:
        z3core.Z3_solver_inc_ref(self.ctx.ref(), self._handle)

    def _dec_ref(self) -> None:
        logger.debug("Releasing solver")
        z3core.Z3_solver_dec_ref(self.ctx.ref(), self._handle)

    def _bool_arg(self, expr: Any, what: str = "assertion") -> BoolExpr:
        if isinstance(expr, bool):
            return self.ctx.bool_val(expr)
        if not isinstance(expr, BoolExpr):
            raise SortMismatchError(f"{what} must be a Boolean expression, got {expr!r}")
        if expr.ctx is not self.ctx:
            raise ContextMismatchError(f"{what} belongs to a different context")
        return expr

    @property
    def state(self) -> SolverState:
        if self._last_result is not None:
            return SolverState.after_check(self._last_result)
        if self.num_assertions() > 0:
            return SolverState.ASSERTED
        return SolverState.IDLE

    @property
    def last_result(self) -> Optional[SolverResult]:
        """Result of the most recent check, or None if the solver changed since."""
        return self._last_result

    # Configuration

    def get_help(self) -> str:
        """Describe every parameter this solver accepts.

        See also ``get_param_descrs`` and ``set_params``.
        """
        return z3core.Z3_solver_get_help(self.ctx.ref(), self.handle)

    def get_param_descrs(self) -> ParamDescrs:
        return ParamDescrs(self.ctx, z3core.Z3_solver_get_param_descrs(self.ctx.ref(), self.handle))

    @engine_errors
    def set_params(self, params: Optional[Params] = None, **kwargs: Any) -> None:
        """Configure the solver.

        Args:
            params: Prepared parameter set
            **kwargs: Individual parameters, e.g. ``timeout=100``

        Raises:
            ContextMismatchError: If ``params`` belongs to another context
            EngineError: If a parameter is unknown or has the wrong type
        """
        if params is None:
            params = self.ctx.params(**kwargs)
        else:
            if params.ctx is not self.ctx:
                raise ContextMismatchError("parameters belong to a different context")
            for name, value in kwargs.items():
                params.set(name, value)
        params.validate(self.get_param_descrs())
        z3core.Z3_solver_set_params(self.ctx.ref(), self.handle, params.handle)

    def interrupt(self) -> None:
        """Ask an in-flight check on this solver to stop.

        Normally ``Context.interrupt()`` is the way to cancel a check, since
        only one solver runs per context at a time; this variant leaves the
        other solvers of the context alone. May be called from any thread.
        """
        z3core.Z3_solver_interrupt(self.ctx.ref(), self.handle)

    # Assertion stack

    def push(self) -> None:
        """Create a backtracking point."""
        z3core.Z3_solver_push(self.ctx.ref(), self.handle)
        logger.debug("push -> %d scopes", self.num_scopes())

    @engine_errors
    def pop(self, n: int = 1) -> None:
        """Backtrack ``n`` backtracking points.

        Raises:
            PreconditionError: If ``n`` exceeds ``num_scopes()``
        """
        check_cuint(n, "n")
        depth = self.num_scopes()
        if n > depth:
            raise PreconditionError(f"cannot pop {n} scopes, only {depth} pushed")
        z3core.Z3_solver_pop(self.ctx.ref(), self.handle, n)
        self._last_result = None
        logger.debug("pop(%d) -> %d scopes", n, depth - n)

    def reset(self) -> None:
        """Remove all assertions and backtracking points."""
        z3core.Z3_solver_reset(self.ctx.ref(), self.handle)
        self._last_result = None

    def num_scopes(self) -> int:
        return int(z3core.Z3_solver_get_num_scopes(self.ctx.ref(), self.handle))

    def num_assertions(self) -> int:
        return len(self.get_assertions())

    @engine_errors
    def assert_(self, expr: BoolExpr) -> None:
        """Assert one Boolean constraint."""
        expr = self._bool_arg(expr)
        z3core.Z3_solver_assert(self.ctx.ref(), self.handle, expr.handle)
        self._last_result = None

    def assert_all(self, exprs: Iterable[BoolExpr]) -> None:
        """Assert constraints one by one, in order."""
        for expr in exprs:
            self.assert_(expr)

    def add(self, *exprs: BoolExpr) -> None:
        """Assert any number of constraints, in order."""
        self.assert_all(exprs)

    @engine_errors
    def assert_and_track(self, expr: BoolExpr, tracker: Union[BoolExpr, str]) -> BoolExpr:
        """Assert ``expr`` and track it in unsat cores through ``tracker``.

        The unsat core of a later failed check contains a mix of the trackers
        given here and the literals given to ``check_assumptions``.

        Args:
            expr: Boolean constraint
            tracker: Boolean constant, or a name for a new one

        Returns:
            The tracker constant

        Raises:
            PreconditionError: If ``tracker`` is not a Boolean constant
        """
        expr = self._bool_arg(expr)
        if isinstance(tracker, str):
            tracker = self.ctx.bool_const(tracker)
        tracker = self._bool_arg(tracker, "tracker")
        if not tracker.is_const():
            raise PreconditionError(f"tracker must be a Boolean constant, got {tracker}")
        z3core.Z3_solver_assert_and_track(self.ctx.ref(), self.handle, expr.handle, tracker.handle)
        self._last_result = None
        return tracker

    def get_assertions(self) -> List[BoolExpr]:
        return exprs_from_vector(self.ctx, z3core.Z3_solver_get_assertions(self.ctx.ref(), self.handle))  # type: ignore

    # Checking

    def _finish_check(self, lbool: int, started: float) -> SolverResult:
        self.last_check_time_ms = (time.time() - started) * 1000
        result = SolverResult.from_lbool(lbool)
        self._last_result = result
        logger.debug("check -> %s (%.2fms)", result, self.last_check_time_ms)
        return result

    @engine_errors
    def check(self) -> SolverResult:
        """Check whether the assertions are consistent.

        After ``SAT`` a model is available through ``get_model()``. After
        ``UNKNOWN`` a model may exist but is not guaranteed to satisfy the
        assertions. After ``UNSAT`` a proof is available if the context was
        created with ``proof=True``.
        """
        started = time.time()
        return self._finish_check(z3core.Z3_solver_check(self.ctx.ref(), self.handle), started)

    @engine_errors
    def check_assumptions(self, assumptions: Iterable[BoolExpr]) -> SolverResult:
        """Check the assertions together with temporary assumptions.

        The assumptions are not kept after the call. If the result is
        ``UNSAT``, ``get_unsat_core()`` returns the subset of assumptions
        (and tracked assertions) used to derive the conflict.
        """
        literals = [self._bool_arg(a, "assumption") for a in assumptions]
        buf, sz = to_ast_array(literals)
        started = time.time()
        return self._finish_check(
            z3core.Z3_solver_check_assumptions(self.ctx.ref(), self.handle, sz, buf), started)

    def reason_unknown(self) -> str:
        return z3core.Z3_solver_get_reason_unknown(self.ctx.ref(), self.handle)

    # Artifacts

    def get_model(self) -> Optional[Model]:
        """Model for the last check, or None if the engine has none.

        There is no model before the first check or after an unsatisfiable
        one; after ``UNKNOWN`` the engine may or may not offer one.
        """
        try:
            handle = z3core.Z3_solver_get_model(self.ctx.ref(), self.handle)
        except Z3Exception as ex:
            logger.debug("No model available: %s", engine_message(ex))
            return None
        if not handle:
            return None
        return Model(self.ctx, handle)

    def get_proof(self) -> Optional[Expr]:
        """Proof for the last unsatisfiable check, or None if there is none."""
        try:
            proof = z3core.Z3_solver_get_proof(self.ctx.ref(), self.handle)
        except Z3Exception as ex:
            logger.debug("No proof available: %s", engine_message(ex))
            return None
        if not proof:
            return None
        return wrap_expr(self.ctx, proof)

    @engine_errors
    def get_unsat_core(self) -> List[BoolExpr]:
        """Assumptions and trackers used in the last unsatisfiability proof."""
        return exprs_from_vector(self.ctx, z3core.Z3_solver_get_unsat_core(self.ctx.ref(), self.handle))  # type: ignore

    # Serialization

    def to_string(self) -> str:
        """The current assertions in the engine's SMT-LIB2 format."""
        return z3core.Z3_solver_to_string(self.ctx.ref(), self.handle)

    @engine_errors
    def to_dimacs_string(self, include_names: bool = True) -> str:
        """The current assertions in DIMACS format.

        The assertions must be reducible to propositional CNF.
        """
        return z3core.Z3_solver_to_dimacs_string(self.ctx.ref(), self.handle, include_names)

    @engine_errors
    def from_string(self, text: str) -> None:
        """Add the assertions of an SMT-LIB2 string."""
        z3core.Z3_solver_from_string(self.ctx.ref(), self.handle, text)
        self._last_result = None

    @engine_errors
    def from_file(self, path: Union[str, "os.PathLike[str]"]) -> None:
        """Add the assertions of an SMT-LIB2 (or DIMACS) file."""
        z3core.Z3_solver_from_file(self.ctx.ref(), self.handle, os.fspath(path))
        self._last_result = None

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"Solver(state={self.state.value}, scopes={self.num_scopes()})"
