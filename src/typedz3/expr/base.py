"""
Typed expression nodes.

``Expr`` is generic over its sort class so static checkers can tell a
``BoolExpr`` from an ``FPExpr``. At runtime every binary operator checks
that both operands come from the same context and have the same engine
sort, so sorts are never mixed silently.
"""
from typing import Any, Callable, Dict, Generic, List, Type, TypeVar

import z3.z3core as z3core
from z3.z3consts import (
    Z3_BOOL_SORT, Z3_L_FALSE, Z3_L_TRUE, Z3_OP_EQ, Z3_OP_FALSE, Z3_OP_TRUE, Z3_OP_UNINTERPRETED,
)

from .._native import NativeHandle, to_ast_array
from ..errors import ContextMismatchError, SortMismatchError
from .sorts import BoolSort, Sort, wrap_sort

S = TypeVar("S", bound=Sort)
E = TypeVar("E", bound="Expr")

_EXPR_CLASSES: Dict[int, Type["Expr"]] = {}


def register_expr_class(sort_kind: int) -> Callable[[Type[E]], Type[E]]:
    """Class decorator mapping an engine sort kind to an ``Expr`` subclass."""

    def decorator(cls: Type[E]) -> Type[E]:
        _EXPR_CLASSES[sort_kind] = cls
        return cls

    return decorator


def wrap_expr(ctx: Any, ast: Any) -> "Expr":
    """Wrap a raw AST handle in the ``Expr`` subclass matching its sort."""
    sort = z3core.Z3_get_sort(ctx.ref(), ast)
    kind = z3core.Z3_get_sort_kind(ctx.ref(), sort)
    return _EXPR_CLASSES.get(kind, Expr)(ctx, ast)


def exprs_from_vector(ctx: Any, vector: Any) -> List["Expr"]:
    """Copy the contents of an engine AST vector into a list of nodes."""
    ref = ctx.ref()
    z3core.Z3_ast_vector_inc_ref(ref, vector)
    try:
        size = z3core.Z3_ast_vector_size(ref, vector)
        return [wrap_expr(ctx, z3core.Z3_ast_vector_get(ref, vector, i)) for i in range(size)]
    finally:
        z3core.Z3_ast_vector_dec_ref(ref, vector)


class Expr(NativeHandle, Generic[S]):
    """Reference-counted handle to an engine expression node.

    Nodes are immutable. ``==`` and ``!=`` build Boolean constraints rather
    than comparing handles; use ``eq()`` for structural identity.
    """

    def _inc_ref(self) -> None:
        z3core.Z3_inc_ref(self.ctx.ref(), self._handle)

    def _dec_ref(self) -> None:
        z3core.Z3_dec_ref(self.ctx.ref(), self._handle)

    def as_ast(self) -> Any:
        return self.handle

    @property
    def sort(self) -> S:
        return wrap_sort(self.ctx, z3core.Z3_get_sort(self.ctx.ref(), self.handle))  # type: ignore

    @property
    def sort_kind(self) -> int:
        ref = self.ctx.ref()
        return z3core.Z3_get_sort_kind(ref, z3core.Z3_get_sort(ref, self.handle))

    def eq(self, other: "Expr") -> bool:
        """Return True if ``other`` is the very same engine node."""
        if not isinstance(other, Expr) or other.ctx is not self.ctx:
            return False
        return bool(z3core.Z3_is_eq_ast(self.ctx.ref(), self.handle, other.handle))

    def is_const(self) -> bool:
        """Return True for uninterpreted constants (declared variables)."""
        ref = self.ctx.ref()
        if not z3core.Z3_is_app(ref, self.handle):
            return False
        app = z3core.Z3_to_app(ref, self.handle)
        if z3core.Z3_get_app_num_args(ref, app) != 0:
            return False
        decl = z3core.Z3_get_app_decl(ref, app)
        return z3core.Z3_get_decl_kind(ref, decl) == Z3_OP_UNINTERPRETED

    def is_numeral(self) -> bool:
        return bool(z3core.Z3_is_numeral_ast(self.ctx.ref(), self.handle))

    def as_python(self) -> Any:
        """Best-effort conversion of a value node to a Python object."""
        return str(self)

    def sexpr(self) -> str:
        return z3core.Z3_ast_to_string(self.ctx.ref(), self.handle)

    def _check_operand(self, other: "Expr") -> None:
        if other.ctx is not self.ctx:
            raise ContextMismatchError("operands belong to different contexts")
        ref = self.ctx.ref()
        if not z3core.Z3_is_eq_sort(ref, z3core.Z3_get_sort(ref, self.handle),
                                    z3core.Z3_get_sort(ref, other.handle)):
            raise SortMismatchError(f"sort mismatch: {self.sort} vs {other.sort}")

    def _promote(self: E, value: Any) -> E:
        """Turn a Python literal into a node of this node's sort."""
        raise SortMismatchError(
            f"cannot use {type(value).__name__} value {value!r} with {type(self).__name__} of sort {self.sort}")

    def _coerce(self: E, other: Any) -> E:
        if isinstance(other, Expr):
            self._check_operand(other)
            return other  # type: ignore
        return self._promote(other)

    def __eq__(self, other: Any) -> "BoolExpr":  # type: ignore[override]
        rhs = self._coerce(other)
        return BoolExpr(self.ctx, z3core.Z3_mk_eq(self.ctx.ref(), self.handle, rhs.handle))

    def __ne__(self, other: Any) -> "BoolExpr":  # type: ignore[override]
        return ~(self == other)

    def __hash__(self) -> int:
        return z3core.Z3_get_ast_hash(self.ctx.ref(), self.handle)

    def __bool__(self) -> bool:
        # Only literals and the equality node built by == have a truth value;
        # the latter compares structurally so nodes work as dict keys.
        ref = self.ctx.ref()
        if z3core.Z3_is_app(ref, self.handle):
            app = z3core.Z3_to_app(ref, self.handle)
            kind = z3core.Z3_get_decl_kind(ref, z3core.Z3_get_app_decl(ref, app))
            if kind == Z3_OP_TRUE:
                return True
            if kind == Z3_OP_FALSE:
                return False
            if kind == Z3_OP_EQ and z3core.Z3_get_app_num_args(ref, app) == 2:
                return bool(z3core.Z3_is_eq_ast(
                    ref, z3core.Z3_get_app_arg(ref, app, 0), z3core.Z3_get_app_arg(ref, app, 1)))
        raise TypeError("symbolic expressions have no truth value; assert them into a Solver")

    def __str__(self) -> str:
        return self.sexpr()

    def __repr__(self) -> str:
        return self.sexpr()


@register_expr_class(Z3_BOOL_SORT)
class BoolExpr(Expr[BoolSort]):
    """Boolean-sorted node.

    Python's ``not``/``and``/``or`` cannot be overloaded, so the Boolean
    algebra uses ``~``, ``&``, ``|`` and ``^``.
    """

    def _promote(self, value: Any) -> "BoolExpr":
        if isinstance(value, bool):
            return self.ctx.bool_val(value)
        return super()._promote(value)

    def _nary(self, builder: Callable[..., Any], lhs: "BoolExpr", rhs: "BoolExpr") -> "BoolExpr":
        args, sz = to_ast_array([lhs, rhs])
        return BoolExpr(self.ctx, builder(self.ctx.ref(), sz, args))

    def __invert__(self) -> "BoolExpr":
        return BoolExpr(self.ctx, z3core.Z3_mk_not(self.ctx.ref(), self.handle))

    def __and__(self, other: Any) -> "BoolExpr":
        return self._nary(z3core.Z3_mk_and, self, self._coerce(other))

    def __rand__(self, other: Any) -> "BoolExpr":
        return self._nary(z3core.Z3_mk_and, self._coerce(other), self)

    def __or__(self, other: Any) -> "BoolExpr":
        return self._nary(z3core.Z3_mk_or, self, self._coerce(other))

    def __ror__(self, other: Any) -> "BoolExpr":
        return self._nary(z3core.Z3_mk_or, self._coerce(other), self)

    def __xor__(self, other: Any) -> "BoolExpr":
        rhs = self._coerce(other)
        return BoolExpr(self.ctx, z3core.Z3_mk_xor(self.ctx.ref(), self.handle, rhs.handle))

    def __rxor__(self, other: Any) -> "BoolExpr":
        lhs = self._coerce(other)
        return BoolExpr(self.ctx, z3core.Z3_mk_xor(self.ctx.ref(), lhs.handle, self.handle))

    def implies(self, other: Any) -> "BoolExpr":
        rhs = self._coerce(other)
        return BoolExpr(self.ctx, z3core.Z3_mk_implies(self.ctx.ref(), self.handle, rhs.handle))

    def as_python(self) -> Any:
        value = z3core.Z3_get_bool_value(self.ctx.ref(), self.handle)
        if value == Z3_L_TRUE:
            return True
        if value == Z3_L_FALSE:
            return False
        return str(self)
