"""
Models returned by a satisfiable check.
"""
import logging
from typing import Any, Dict

import z3.z3core as z3core
from z3.z3types import Ast

from .._native import NativeHandle, engine_errors
from ..errors import ContextMismatchError, EngineError, SortMismatchError
from ..expr.base import Expr, wrap_expr

logger = logging.getLogger(__name__)


class Model(NativeHandle):
    """Reference-counted handle to an engine model.

    A model describes the solver's assertions as they were at the check that
    produced it. Later changes to the solver do not update it.
    """

    def _inc_ref(self) -> None:
        z3core.Z3_model_inc_ref(self.ctx.ref(), self._handle)

    def _dec_ref(self) -> None:
        z3core.Z3_model_dec_ref(self.ctx.ref(), self._handle)

    @engine_errors
    def eval(self, expr: Expr, completion: bool = False) -> Expr:
        """Evaluate ``expr`` in this model.

        Args:
            expr: Expression to evaluate
            completion: Assign default values to constants the model leaves
                unconstrained

        Returns:
            Node of the same sort as ``expr``

        Raises:
            ContextMismatchError: If ``expr`` belongs to another context
            EngineError: If the engine cannot evaluate the expression
        """
        if not isinstance(expr, Expr):
            raise SortMismatchError(f"expected an expression, got {expr!r}")
        if expr.ctx is not self.ctx:
            raise ContextMismatchError("expression belongs to a different context")
        result = (Ast * 1)()
        if not z3core.Z3_model_eval(self.ctx.ref(), self.handle, expr.as_ast(), completion, result):
            raise EngineError(f"failed to evaluate {expr}")
        return wrap_expr(self.ctx, result[0])

    def value(self, expr: Expr) -> Any:
        """Evaluate ``expr`` with completion and convert it to a Python value.

        Booleans become ``bool``, bit-vectors ``int``; anything else is
        returned as its SMT-LIB text.
        """
        return self.eval(expr, completion=True).as_python()

    def num_consts(self) -> int:
        return int(z3core.Z3_model_get_num_consts(self.ctx.ref(), self.handle))

    def __len__(self) -> int:
        return self.num_consts()

    def as_dict(self) -> Dict[str, Any]:
        """Map each constant the model assigns to its Python value."""
        ref = self.ctx.ref()
        result = {}
        for i in range(self.num_consts()):
            decl = z3core.Z3_model_get_const_decl(ref, self.handle, i)
            name = z3core.Z3_get_symbol_string(ref, z3core.Z3_get_decl_name(ref, decl))
            interp = z3core.Z3_model_get_const_interp(ref, self.handle, decl)
            if not interp:
                logger.debug("Constant %s has no interpretation", name)
                continue
            result[name] = wrap_expr(self.ctx, interp).as_python()
        return result

    def __str__(self) -> str:
        return z3core.Z3_model_to_string(self.ctx.ref(), self.handle)

    def __repr__(self) -> str:
        return f"Model({self.as_dict()})"
