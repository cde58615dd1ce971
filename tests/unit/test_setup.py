"""
Basic test to verify package setup is correct.
"""

def test_package_imports():
    """Test that the package can be imported."""
    import typedz3
    assert typedz3.__version__ == "0.1.0"
    assert hasattr(typedz3, '__version__')


def test_package_structure():
    """Test that the public API is reachable from the top-level package."""
    from typedz3 import Context, Solver, SolverResult, BoolExpr, FPExpr, RoundingMode
    assert SolverResult.SAT.value == "sat"
    assert RoundingMode.RNE.value == "RNE"
    assert Context is not None and Solver is not None
    assert BoolExpr is not None and FPExpr is not None
