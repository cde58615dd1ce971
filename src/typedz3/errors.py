"""
Exception types raised by the binding layer.
"""


class TypedZ3Error(Exception):
    """Base class for all errors raised by typedz3."""


class PreconditionError(TypedZ3Error, ValueError):
    """A caller broke a documented precondition.

    Raised before the engine is reached, e.g. for mismatched argument and
    coefficient counts, popping more scopes than were pushed, or tracking an
    assertion with something other than a Boolean constant.
    """


class SortMismatchError(PreconditionError, TypeError):
    """Operands of an operator do not share the required sort."""


class ContextMismatchError(PreconditionError):
    """Operands were created by different contexts."""


class EngineError(TypedZ3Error):
    """An error reported by the engine's own error channel.

    Attributes:
        message: Message text produced by the engine
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
