"""
Tests for the solver handle.
"""
import threading

import pytest

from typedz3 import (
    Context, ContextMismatchError, EngineError, PreconditionError, SortMismatchError,
    SolverResult, SolverState,
)


def test_solver_unsat(ctx, solver):
    """Test that contradictory bit-vector bounds are unsatisfiable."""
    x = ctx.bitvec_const("x", 8)
    solver.add(x.ugt(10))
    solver.add(x.ult(5))

    assert solver.check() == SolverResult.UNSAT
    assert solver.state == SolverState.CHECKED_UNSAT
    assert solver.get_model() is None


def test_solver_sat(ctx, solver):
    """Test that a satisfying assignment is found and readable."""
    x = ctx.bitvec_const("x", 8)
    solver.add(x.ugt(10), x.ult(20))

    assert solver.check() == SolverResult.SAT
    model = solver.get_model()
    assert model is not None
    assert 10 < model.value(x) < 20
    assert 10 < model.as_dict()["x"] < 20


def test_solver_boolean_constraints(ctx, solver):
    """Test Z3 with boolean constraints."""
    a, b = ctx.bool_consts("a b")
    solver.add(a | b)
    solver.add(~a)

    assert solver.check() == SolverResult.SAT
    model = solver.get_model()
    assert model.value(a) is False
    assert model.value(b) is True


def test_solver_accepts_python_bools(solver):
    """Test that Python bool literals are valid assertions."""
    solver.add(True)
    assert solver.check() == SolverResult.SAT
    solver.add(False)
    assert solver.check() == SolverResult.UNSAT


def test_solver_rejects_non_boolean(ctx, solver):
    """Test that asserting a bit-vector term is a sort error."""
    with pytest.raises(SortMismatchError):
        solver.add(ctx.bitvec_const("x", 4))


def test_solver_state_transitions(ctx, solver):
    """Test the idle/asserted/checked life cycle."""
    a = ctx.bool_const("a")
    assert solver.state == SolverState.IDLE

    solver.add(a)
    assert solver.state == SolverState.ASSERTED

    solver.check()
    assert solver.state == SolverState.CHECKED_SAT
    assert solver.last_result == SolverResult.SAT

    solver.add(~a)
    assert solver.state == SolverState.ASSERTED
    assert solver.last_result is None

    solver.check()
    assert solver.state == SolverState.CHECKED_UNSAT

    solver.reset()
    assert solver.state == SolverState.IDLE
    assert solver.num_assertions() == 0


def test_solver_push_pop(ctx, solver):
    """Test that pop restores the assertion set from before push."""
    x = ctx.bitvec_const("x", 8)
    solver.add(x.ugt(10))
    assert solver.check() == SolverResult.SAT

    solver.push()
    assert solver.num_scopes() == 1
    solver.add(ctx.false())
    assert solver.check() == SolverResult.UNSAT

    solver.pop()
    assert solver.num_scopes() == 0
    assert solver.num_assertions() == 1
    assert solver.check() == SolverResult.SAT


def test_solver_pop_multiple(solver):
    """Test popping several scopes at once."""
    for _ in range(3):
        solver.push()
    solver.pop(2)
    assert solver.num_scopes() == 1


def test_solver_pop_too_far(solver):
    """Test that popping beyond the scope depth is rejected."""
    solver.push()
    with pytest.raises(PreconditionError):
        solver.pop(2)
    assert solver.num_scopes() == 1

    solver.pop()
    with pytest.raises(PreconditionError):
        solver.pop()


def test_solver_pop_negative(solver):
    """Test that a negative pop count is rejected."""
    with pytest.raises(PreconditionError):
        solver.pop(-1)


def test_get_model_before_check(ctx, solver):
    """Test that no model exists before the first check."""
    solver.add(ctx.bool_const("a"))
    assert solver.get_model() is None


def test_get_assertions(ctx, solver):
    """Test that assertions are returned in order."""
    a, b = ctx.bool_consts("a b")
    solver.assert_all([a, b])
    assertions = solver.get_assertions()
    assert len(assertions) == 2
    assert assertions[0].eq(a)
    assert assertions[1].eq(b)


def test_unsat_core_with_trackers(ctx, solver):
    """Test that tracked assertions show up in the unsat core."""
    x = ctx.bool_const("x")
    y = ctx.bool_const("y")
    p = solver.assert_and_track(x, "p")
    q = solver.assert_and_track(~x, "q")
    solver.assert_and_track(y, "r")

    assert p.is_const() and q.is_const()
    assert solver.check() == SolverResult.UNSAT
    core = {str(c) for c in solver.get_unsat_core()}
    assert {"p", "q"} <= core


def test_tracker_must_be_constant(ctx, solver):
    """Test that a compound tracker is rejected."""
    a, b = ctx.bool_consts("a b")
    with pytest.raises(PreconditionError):
        solver.assert_and_track(a, a & b)


def test_check_assumptions(ctx, solver):
    """Test checking under temporary assumptions."""
    a, b = ctx.bool_consts("a b")
    solver.add(a.implies(b))

    assert solver.check_assumptions([a, ~b]) == SolverResult.UNSAT
    core = solver.get_unsat_core()
    assert 0 < len(core) <= 2
    assert all(c.eq(a) or c.eq(~b) for c in core)

    # Assumptions are not kept
    assert solver.check() == SolverResult.SAT
    assert solver.check_assumptions([a]) == SolverResult.SAT
    assert solver.get_model().value(b) is True


def test_proof_available_when_enabled():
    """Test proof retrieval after an unsatisfiable check."""
    with Context(proof=True) as ctx:
        s = ctx.solver()
        a = ctx.bool_const("a")
        s.add(a, ~a)
        assert s.check() == SolverResult.UNSAT
        assert s.get_proof() is not None


def test_proof_missing_when_disabled(ctx, solver):
    """Test that get_proof returns None without proof generation."""
    a = ctx.bool_const("a")
    solver.add(a, ~a)
    solver.check()
    assert solver.get_proof() is None


def test_string_round_trip(ctx, solver):
    """Test that serialized assertions parse back to an equisatisfiable set."""
    x = ctx.bitvec_const("x", 8)
    a = ctx.bool_const("a")
    solver.add(a.implies(x.ugt(200)), a, x.ult(100))
    text = solver.to_string()
    assert "declare-fun" in text

    other = ctx.solver()
    other.from_string(text)
    assert other.num_assertions() == solver.num_assertions()
    assert other.check() == solver.check() == SolverResult.UNSAT


def test_from_string_syntax_error(solver):
    """Test that malformed input surfaces as an engine error."""
    with pytest.raises(EngineError):
        solver.from_string("(assert (and")


def test_from_file(ctx, solver, tmp_path):
    """Test loading assertions from an SMT-LIB2 file."""
    path = tmp_path / "problem.smt2"
    path.write_text("(declare-const x Bool)\n(assert x)\n(assert (not x))\n")

    solver.from_file(path)
    assert solver.num_assertions() == 2
    assert solver.check() == SolverResult.UNSAT


def test_to_dimacs_string(ctx, solver):
    """Test DIMACS export of a propositional problem."""
    a, b, c = ctx.bool_consts("a b c")
    solver.add(a | b, ~a | c, ~c)
    text = solver.to_dimacs_string()
    assert "p cnf" in text


def test_get_help_and_param_descrs(solver):
    """Test solver parameter introspection."""
    assert solver.get_help()
    descrs = solver.get_param_descrs()
    assert len(descrs) > 0
    assert "timeout" in descrs
    assert "timeout" in descrs.names()
    assert descrs.documentation("timeout")


def test_set_params(ctx, solver):
    """Test configuring a solver with keyword and prepared parameters."""
    solver.set_params(timeout=1000)
    solver.set_params(ctx.params(random_seed=3))
    solver.add(ctx.bool_const("a"))
    assert solver.check() == SolverResult.SAT


def test_set_params_unknown(ctx, solver):
    """Test that unknown parameter names are rejected before they reach the solver."""
    with pytest.raises(EngineError) as excinfo:
        solver.set_params(no_such_parameter=1)
    assert "no_such_parameter" in excinfo.value.message
    with pytest.raises(EngineError):
        solver.set_params(ctx.params(no_such_parameter=1))

    solver.add(ctx.bool_const("a"))
    assert solver.check() == SolverResult.SAT


def test_set_params_other_context(solver):
    """Test that parameter sets of another context are rejected."""
    with Context() as other:
        with pytest.raises(ContextMismatchError):
            solver.set_params(other.params(timeout=10))


def test_solver_for_logic(ctx):
    """Test creating a logic-specific solver."""
    s = ctx.solver("QF_BV")
    x = ctx.bitvec_const("x", 4)
    s.add(x * 2 == 6)
    assert s.check() == SolverResult.SAT


def test_simple_solver(ctx):
    """Test the plain incremental solver."""
    s = ctx.simple_solver()
    a = ctx.bool_const("a")
    s.add(a, ~a)
    assert s.check() == SolverResult.UNSAT


def test_check_time_recorded(ctx, solver):
    """Test that the duration of the last check is recorded."""
    solver.add(ctx.bool_const("a"))
    solver.check()
    assert solver.last_check_time_ms >= 0.0


def test_reason_unknown_is_string(ctx, solver):
    """Test that reason_unknown can be queried at any time."""
    solver.check()
    assert isinstance(solver.reason_unknown(), str)


def test_solver_context_mismatch(solver):
    """Test that expressions from another context are rejected."""
    with Context() as other:
        with pytest.raises(PreconditionError):
            solver.add(other.bool_const("a"))


def test_solver_close(ctx):
    """Test explicit release of a solver handle."""
    s = ctx.solver()
    s.close()
    assert s.released
    s.close()
    with pytest.raises(PreconditionError):
        s.check()


def _add_factoring(ctx, solver):
    # Splitting a product of two 64-bit primes keeps the engine busy for far
    # longer than the interrupt delay.
    x = ctx.bitvec_const("x", 128)
    y = ctx.bitvec_const("y", 128)
    solver.add(x.ugt(1), y.ugt(1), x.ult(2 ** 64), y.ult(2 ** 64))
    solver.add(x * y == (2 ** 61 - 1) * (2 ** 64 - 59))
    solver.set_params(timeout=60000)


def _check_interrupted(solver, interrupt):
    timer = threading.Timer(0.5, interrupt)
    timer.start()
    try:
        result = solver.check()
    finally:
        timer.cancel()
    assert result == SolverResult.UNKNOWN
    assert solver.state == SolverState.CHECKED_UNKNOWN
    reason = solver.reason_unknown()
    assert "cancel" in reason or "interrupt" in reason


def test_solver_interrupt_from_thread(ctx, solver):
    """Test that a running check stops when the solver is interrupted."""
    _add_factoring(ctx, solver)
    _check_interrupted(solver, solver.interrupt)


def test_context_interrupt_from_thread(ctx, solver):
    """Test that a running check stops when its context is interrupted."""
    _add_factoring(ctx, solver)
    _check_interrupted(solver, ctx.interrupt)

    solver.reset()
    solver.add(ctx.bool_const("a"))
    assert solver.check() == SolverResult.SAT
