"""
Check results and solver states.
"""
from enum import Enum

from z3.z3consts import Z3_L_FALSE, Z3_L_TRUE


class SolverResult(Enum):
    """Result from a satisfiability check."""
    SAT = "sat"
    UNSAT = "unsat"
    UNKNOWN = "unknown"

    @classmethod
    def from_lbool(cls, value: int) -> "SolverResult":
        """Map the engine's three-valued ``Z3_lbool`` to a result."""
        if value == Z3_L_TRUE:
            return cls.SAT
        if value == Z3_L_FALSE:
            return cls.UNSAT
        return cls.UNKNOWN

    def __str__(self) -> str:
        return self.value


class SolverState(Enum):
    """Where a solver is in its assert/check cycle.

    ``IDLE`` has no assertions; ``ASSERTED`` has assertions that have not
    been checked since the last change; the ``CHECKED_*`` states hold the
    outcome of the most recent check.
    """
    IDLE = "idle"
    ASSERTED = "asserted"
    CHECKED_SAT = "checked-sat"
    CHECKED_UNSAT = "checked-unsat"
    CHECKED_UNKNOWN = "checked-unknown"

    @classmethod
    def after_check(cls, result: SolverResult) -> "SolverState":
        return {
            SolverResult.SAT: cls.CHECKED_SAT,
            SolverResult.UNSAT: cls.CHECKED_UNSAT,
            SolverResult.UNKNOWN: cls.CHECKED_UNKNOWN,
        }[result]
