"""Diagnostic codes and data structures.

Defines error codes, categories, and the structured diagnostic message.
Python 3.13+. Zero external dependencies.
"""

from dataclasses import dataclass
from enum import Enum, StrEnum
from typing import Literal

__all__ = [
    "Diagnostic",
    "DiagnosticCode",
    "ErrorCategory",
]


class ErrorCategory(StrEnum):
    """Error categorization derived from diagnostic codes.

    Inherits from ``StrEnum`` so that ``str(category)`` and direct string
    comparisons work without accessing ``.value``.

    Categories:
        STRUCTURAL: Misuse of the context API (stack depth, balance, bad
            registration). Always propagates, never recorded.
        EVALUATION: Failure while evaluating a template expression. Routed
            through Context.handle_error.
        SYNTAX: Template syntax error reported by the host parser. Classified
            with a distinct inline message prefix.
    """

    STRUCTURAL = "structural"
    EVALUATION = "evaluation"
    SYNTAX = "syntax"


class DiagnosticCode(Enum):
    """Error codes with unique identifiers.

    Organized by category:
        1000-1999: Structural errors (API misuse)
        2000-2999: Evaluation errors (runtime failures)
        3000-3999: Syntax errors (raised by host parsers)
    """

    # Structural errors (1000-1999)
    SCOPE_DEPTH_EXCEEDED = 1001
    SCOPE_UNBALANCED = 1002
    INVALID_FILTER_MODULE = 1003
    UNKNOWN_RESOURCE_COUNTER = 1004

    # Evaluation errors (2000-2999)
    FILTER_NOT_FOUND = 2001
    FILTER_FAILED = 2002

    # Syntax errors (3000-3999)
    TEMPLATE_SYNTAX = 3001

    @property
    def category(self) -> ErrorCategory:
        """Category implied by the code's numeric range."""
        if self.value < 2000:
            return ErrorCategory.STRUCTURAL
        if self.value < 3000:
            return ErrorCategory.EVALUATION
        return ErrorCategory.SYNTAX


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """Structured diagnostic message.

    Inspired by Rust compiler diagnostics. Provides rich error information
    for both humans and tools.

    Attributes:
        code: Unique error code
        message: Short human-readable error description
        hint: Suggestion for fixing the error
        help_url: Documentation URL for this error
        filter_name: Filter involved in the error (filter errors only)
        scope_depth: Scope stack depth at the time of the error
        severity: Error severity level
    """

    code: DiagnosticCode
    message: str
    hint: str | None = None
    help_url: str | None = None
    filter_name: str | None = None
    scope_depth: int | None = None
    severity: Literal["error", "warning"] = "error"

    def __str__(self) -> str:
        """Return human-readable error description."""
        return self.message

    @property
    def category(self) -> ErrorCategory:
        """Error category derived from the code."""
        return self.code.category

    def format_error(self) -> str:
        """Format diagnostic like Rust compiler.

        Example output:
            error[SCOPE_DEPTH_EXCEEDED]: Nesting too deep
              = depth: 100
              = help: Check for recursive includes or unbounded loops

        Returns:
            Formatted error message
        """
        from .formatter import DiagnosticFormatter  # noqa: PLC0415 - circular

        return DiagnosticFormatter().format(self)
