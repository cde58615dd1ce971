"""
Tests for cardinality and pseudo-Boolean constraints.
"""
import pytest
import z3.z3core as z3core

from typedz3 import (
    Context, ContextMismatchError, PreconditionError, SolverResult, SortMismatchError,
    at_most, pb_le,
)


def test_at_most_trivial_bound(ctx, valid):
    """Test that at_most over n variables with k = n always holds."""
    xs = ctx.bool_consts("a b c")
    assert valid(ctx.at_most(xs, 3))


def test_at_least_zero(ctx, valid):
    """Test that at_least with k = 0 always holds."""
    xs = ctx.bool_consts("a b c")
    assert valid(ctx.at_least(xs, 0))


def test_cardinality_counts(ctx, solver):
    """Test that cardinality constraints count true variables."""
    a, b, c = ctx.bool_consts("a b c")
    solver.add(ctx.at_most([a, b, c], 1))
    solver.push()
    solver.add(a, b)
    assert solver.check() == SolverResult.UNSAT
    solver.pop()

    solver.add(ctx.at_least([a, b, c], 1), ~a, ~b)
    assert solver.check() == SolverResult.SAT
    assert solver.get_model().value(c) is True


def test_module_level_builders(ctx, valid):
    """Test the builders called with an explicit context."""
    xs = ctx.bool_consts("a b")
    assert valid(at_most(ctx, xs, 2))
    assert valid(pb_le(ctx, xs, [1, 1], 2))


def test_pb_le_and_ge_is_eq(ctx, valid):
    """Test that pb_le and pb_ge together are equivalent to pb_eq."""
    xs = ctx.bool_consts("a b c")
    coeffs = [1, 2, 3]
    both = ctx.pb_le(xs, coeffs, 3) & ctx.pb_ge(xs, coeffs, 3)
    assert valid(both == ctx.pb_eq(xs, coeffs, 3))


def test_pb_eq_weights(ctx, solver):
    """Test that coefficients weight each variable."""
    a, b, c = ctx.bool_consts("a b c")
    solver.add(ctx.pb_eq([a, b, c], [1, 2, 3], 3), a, b)
    assert solver.check() == SolverResult.SAT
    assert solver.get_model().value(c) is False

    solver.add(c)
    assert solver.check() == SolverResult.UNSAT


def test_negative_coefficients(ctx, valid):
    """Test that signed coefficients and bounds are accepted."""
    a, b = ctx.bool_consts("a b")
    assert valid(ctx.pb_ge([a, b], [-1, -1], -2))


def test_arity_mismatch_checked_before_engine(ctx, monkeypatch):
    """Test that a variable/coefficient count mismatch never reaches the engine."""
    def fail(*args):
        raise AssertionError("engine should not be called")

    monkeypatch.setattr(z3core, "Z3_mk_pble", fail)
    monkeypatch.setattr(z3core, "Z3_mk_pbge", fail)
    monkeypatch.setattr(z3core, "Z3_mk_pbeq", fail)
    xs = ctx.bool_consts("a b c")
    with pytest.raises(PreconditionError, match="3 variables but 2 coefficients"):
        ctx.pb_le(xs, [1, 2], 1)
    with pytest.raises(PreconditionError):
        ctx.pb_ge(xs, [1, 2, 3, 4], 1)
    with pytest.raises(PreconditionError):
        ctx.pb_eq(xs, [], 0)


def test_negative_cardinality_bound(ctx):
    """Test that cardinality bounds must be non-negative."""
    xs = ctx.bool_consts("a b")
    with pytest.raises(PreconditionError):
        ctx.at_most(xs, -1)
    with pytest.raises(PreconditionError):
        ctx.at_least(xs, -1)


def test_coefficient_range(ctx):
    """Test that coefficients must fit a C int."""
    xs = ctx.bool_consts("a b")
    with pytest.raises(PreconditionError):
        ctx.pb_le(xs, [1, 2 ** 31], 1)
    with pytest.raises(PreconditionError):
        ctx.pb_le(xs, [1, 1], 2 ** 31)


def test_non_boolean_argument(ctx):
    """Test that non-Boolean variables are rejected."""
    a = ctx.bool_const("a")
    x = ctx.bitvec_const("x", 1)
    with pytest.raises(SortMismatchError):
        ctx.at_most([a, x], 1)
    with pytest.raises(SortMismatchError):
        ctx.pb_eq([a, True], [1, 1], 1)


def test_other_context_argument(ctx):
    """Test that variables from another context are rejected."""
    a = ctx.bool_const("a")
    with Context() as other:
        with pytest.raises(ContextMismatchError):
            ctx.at_least([a, other.bool_const("b")], 1)
