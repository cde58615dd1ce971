"""
Tests for the exception hierarchy.
"""
import pytest

from typedz3 import (
    ContextMismatchError, EngineError, PreconditionError, SortMismatchError, TypedZ3Error,
)


def test_hierarchy():
    """Test that every error derives from the package base class."""
    for cls in (PreconditionError, SortMismatchError, ContextMismatchError, EngineError):
        assert issubclass(cls, TypedZ3Error)
    assert issubclass(PreconditionError, ValueError)
    assert issubclass(SortMismatchError, TypeError)
    assert issubclass(SortMismatchError, PreconditionError)
    assert issubclass(ContextMismatchError, PreconditionError)
    assert not issubclass(EngineError, PreconditionError)


def test_engine_error_carries_message(solver):
    """Test that engine failures keep the engine's message."""
    with pytest.raises(EngineError) as excinfo:
        solver.from_string("(assert undeclared_symbol)")
    assert excinfo.value.message
    assert str(excinfo.value) == excinfo.value.message
    assert excinfo.value.__cause__ is not None
    assert isinstance(excinfo.value.message, str)
    assert not excinfo.value.message.startswith(("b'", "b\""))
    assert "undeclared_symbol" in excinfo.value.message
