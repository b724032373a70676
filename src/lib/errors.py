"""
Exception hierarchy for pseudoscss

Every failure aborts the whole compilation; there is no recoverable category.
All exceptions derive from CompileError so callers can catch them together.
"""

from typing import Any, Optional

from ..models.tokens import Token


class CompileError(Exception):
    """Base class for every fatal compilation error"""
    pass


class LexError(CompileError):
    """No grammar rule matches at the current input position"""
    pass


class StructureError(CompileError):
    """
    Token is not legal for the current context frame

    Raised for illegal token/frame combinations, unbalanced braces,
    malformed string literals and statements cut off by end of input.

    Attributes:
        token: Offending token, if any
        frame: Context frame on top of the stack when the error occurred
    """

    def __init__(self, message: str, token: Optional[Token] = None, frame: Any = None) -> None:
        self.token = token
        self.frame = frame
        detail = message
        if token is not None:
            detail = f"Line {token.line}: {message} (got {token.kind.value} {token.text!r})"
        if frame is not None:
            detail += f"\nContext: {frame!r}"
        super().__init__(detail)


class UndefinedReferenceError(CompileError, LookupError):
    """Variable not bound, or key missing from a keyed value"""
    pass


class ValueTypeError(CompileError, TypeError):
    """Value has the wrong shape for the operation applied to it"""
    pass


class DestructureError(ValueTypeError):
    """@each entry cannot be destructured into the declared variables"""
    pass


class ImportCycleError(CompileError):
    """A document imports itself, directly or through other documents"""
    pass


class ResourceError(CompileError, OSError):
    """A source or data resource could not be read or parsed"""
    pass
