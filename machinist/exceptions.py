"""
Compile-time exceptions.

Raised only while a rule table is being built, never by ``transit``.
Catch ``CompileError`` to handle every build failure.
"""

import textwrap
from typing import Optional


def _indent(text: str) -> str:
    return textwrap.indent(text, "    ")


class CompileError(Exception):
    """Base exception for all rule table build failures."""

    pass


class InvalidDeclarationError(CompileError):
    """
    Raised when a declaration is malformed (missing event, ANY as a
    destination, non-callable guard, unknown declaration object, ...).

    Args:
        reason: What is wrong with the declaration.
        declaration: Rendered form of the offending declaration.
    """

    def __init__(self, reason: str, declaration: Optional[str] = None) -> None:
        message = reason
        if declaration:
            message = f"{reason}\n\n{_indent(declaration)}\n"
        super().__init__(message)
        self.reason = reason
        self.declaration = declaration


class UnsupportedSyntaxError(CompileError):
    """
    Raised when a declaration uses a shape that is no longer supported.

    The message quotes the offending declaration and the rewrite to use
    instead.

    Args:
        reason: Which shape is no longer supported.
        declaration: Rendered form of the offending declaration.
        suggestion: Rendered replacement declaration(s).
    """

    def __init__(self, reason: str, declaration: str, suggestion: str) -> None:
        super().__init__(
            f"{reason}\n\n"
            f"Instead of this:\n\n{_indent(declaration)}\n\n"
            f"Do this:\n\n{_indent(suggestion)}\n"
        )
        self.reason = reason
        self.declaration = declaration
        self.suggestion = suggestion


NoLongerSupportedSyntaxError = UnsupportedSyntaxError
