"""
Parameter sets and parameter descriptions.
"""
from enum import Enum
from typing import Any, Iterator, List

import z3.z3core as z3core
from z3.z3consts import (
    Z3_PK_BOOL,
    Z3_PK_DOUBLE,
    Z3_PK_STRING,
    Z3_PK_SYMBOL,
    Z3_PK_UINT,
)

from .._native import NativeHandle, check_cuint, engine_errors
from ..errors import ContextMismatchError, PreconditionError


class ParamKind(Enum):
    UINT = "uint"
    BOOL = "bool"
    DOUBLE = "double"
    SYMBOL = "symbol"
    STRING = "string"
    OTHER = "other"


_KINDS = {
    Z3_PK_UINT: ParamKind.UINT,
    Z3_PK_BOOL: ParamKind.BOOL,
    Z3_PK_DOUBLE: ParamKind.DOUBLE,
    Z3_PK_SYMBOL: ParamKind.SYMBOL,
    Z3_PK_STRING: ParamKind.STRING,
}


class Params(NativeHandle):
    """Mutable set of named parameters for a solver.

    Values are dispatched on their Python type: ``bool``, non-negative
    ``int``, ``float`` and ``str`` (sent as a symbol).
    """

    def _inc_ref(self) -> None:
        z3core.Z3_params_inc_ref(self.ctx.ref(), self._handle)

    def _dec_ref(self) -> None:
        z3core.Z3_params_dec_ref(self.ctx.ref(), self._handle)

    @engine_errors
    def set(self, name: str, value: Any) -> "Params":
        ref = self.ctx.ref()
        sym = z3core.Z3_mk_string_symbol(ref, name)
        if isinstance(value, bool):
            z3core.Z3_params_set_bool(ref, self.handle, sym, value)
        elif isinstance(value, int):
            z3core.Z3_params_set_uint(ref, self.handle, sym, check_cuint(value, name))
        elif isinstance(value, float):
            z3core.Z3_params_set_double(ref, self.handle, sym, value)
        elif isinstance(value, str):
            z3core.Z3_params_set_symbol(ref, self.handle, sym, z3core.Z3_mk_string_symbol(ref, value))
        else:
            raise PreconditionError(f"unsupported value for parameter {name!r}: {value!r}")
        return self

    @engine_errors
    def validate(self, descrs: "ParamDescrs") -> None:
        """Raise ``EngineError`` if a parameter is unknown to ``descrs``."""
        if descrs.ctx is not self.ctx:
            raise ContextMismatchError("descriptions belong to a different context")
        z3core.Z3_params_validate(self.ctx.ref(), self.handle, descrs.handle)

    def __str__(self) -> str:
        return z3core.Z3_params_to_string(self.ctx.ref(), self.handle)


class ParamDescrs(NativeHandle):
    """Read-only description of the parameters an object accepts."""

    def _inc_ref(self) -> None:
        z3core.Z3_param_descrs_inc_ref(self.ctx.ref(), self._handle)

    def _dec_ref(self) -> None:
        z3core.Z3_param_descrs_dec_ref(self.ctx.ref(), self._handle)

    def __len__(self) -> int:
        return int(z3core.Z3_param_descrs_size(self.ctx.ref(), self.handle))

    def names(self) -> List[str]:
        ref = self.ctx.ref()
        return [
            z3core.Z3_get_symbol_string(ref, z3core.Z3_param_descrs_get_name(ref, self.handle, i))
            for i in range(len(self))
        ]

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __contains__(self, name: object) -> bool:
        return name in self.names()

    def kind(self, name: str) -> ParamKind:
        ref = self.ctx.ref()
        k = z3core.Z3_param_descrs_get_kind(ref, self.handle, z3core.Z3_mk_string_symbol(ref, name))
        return _KINDS.get(k, ParamKind.OTHER)

    def documentation(self, name: str) -> str:
        ref = self.ctx.ref()
        return z3core.Z3_param_descrs_get_documentation(
            ref, self.handle, z3core.Z3_mk_string_symbol(ref, name))

    def __str__(self) -> str:
        return z3core.Z3_param_descrs_to_string(self.ctx.ref(), self.handle)
