"""
Shared plumbing for engine handles.

Every engine object that the binding owns is wrapped in a ``NativeHandle``
subclass: construction takes one engine reference, ``close()`` (or garbage
collection) gives it back exactly once. Arguments are passed to the engine as
contiguous ctypes buffers built by the ``to_*_array`` helpers.
"""
import ctypes
import functools
from typing import Any, Callable, Iterable, Sequence, Tuple, TypeVar

from z3.z3types import Ast, Z3Exception

from .errors import EngineError, PreconditionError

INT_MIN = -(2 ** 31)
INT_MAX = 2 ** 31 - 1
UINT_MAX = 2 ** 32 - 1

F = TypeVar("F", bound=Callable[..., Any])


def engine_message(ex: Z3Exception) -> str:
    """Text of an engine error; the engine reports it as bytes."""
    value = ex.value
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def engine_errors(func: F) -> F:
    """Re-raise engine errors from ``func`` as ``EngineError``."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except Z3Exception as ex:
            raise EngineError(engine_message(ex)) from ex

    return wrapper  # type: ignore


def check_cint(value: int, name: str) -> int:
    """Check that ``value`` fits a C ``int``."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise PreconditionError(f"{name} must be an integer, got {value!r}")
    if value < INT_MIN or value > INT_MAX:
        raise PreconditionError(f"{name} does not fit a 32-bit signed integer: {value}")
    return value


def check_cuint(value: int, name: str) -> int:
    """Check that ``value`` fits a C ``unsigned``."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise PreconditionError(f"{name} must be an integer, got {value!r}")
    if value < 0 or value > UINT_MAX:
        raise PreconditionError(f"{name} must be in [0, {UINT_MAX}], got {value}")
    return value


def to_ast_array(nodes: Sequence[Any]) -> Tuple[Any, int]:
    """Copy node handles into a contiguous ``Ast`` buffer."""
    sz = len(nodes)
    buf = (Ast * sz)()
    for i, node in enumerate(nodes):
        buf[i] = node.as_ast()
    return buf, sz


def to_int_array(values: Iterable[int], name: str = "coefficient") -> Tuple[Any, int]:
    """Copy Python ints into a contiguous C ``int`` buffer."""
    checked = [check_cint(v, name) for v in values]
    buf = (ctypes.c_int * len(checked))(*checked)
    return buf, len(checked)


class NativeHandle:
    """Owns one reference to an engine object.

    Subclasses implement ``_inc_ref`` and ``_dec_ref``. The reference is
    released by ``close()``, by leaving a ``with`` block, or when the wrapper
    is garbage collected. If the owning context has already been closed the
    engine object is gone with it and no release call is made.
    """

    def __init__(self, ctx: Any, handle: Any):
        if not handle:
            raise EngineError(f"engine returned a null {type(self).__name__} handle")
        self.ctx = ctx
        self._handle = handle
        self._inc_ref()

    def _inc_ref(self) -> None:
        raise NotImplementedError

    def _dec_ref(self) -> None:
        raise NotImplementedError

    @property
    def handle(self) -> Any:
        """Raw engine handle."""
        if self._handle is None:
            raise PreconditionError(f"{type(self).__name__} has been released")
        return self._handle

    @property
    def released(self) -> bool:
        return self._handle is None

    def close(self) -> None:
        """Release the engine reference. Safe to call more than once."""
        if self._handle is None:
            return
        if not self.ctx.closed:
            self._dec_ref()
        self._handle = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __del__(self):
        if getattr(self, "_handle", None) is not None and getattr(self, "ctx", None) is not None:
            self.close()
