"""
Pytest configuration and fixtures for typed-z3 tests.
"""
import sys
from pathlib import Path

import pytest

# Add src to path for imports
src_path = Path(__file__).parent.parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from typedz3 import Context, SolverResult  # noqa: E402


@pytest.fixture
def ctx():
    context = Context()
    yield context
    context.close()


@pytest.fixture
def solver(ctx):
    s = ctx.solver()
    yield s
    s.close()


@pytest.fixture
def valid(ctx):
    """Return a checker telling whether a formula holds for every assignment."""
    def check(formula):
        s = ctx.solver()
        s.add(~formula)
        return s.check() == SolverResult.UNSAT
    return check
