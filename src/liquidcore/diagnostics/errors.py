"""Liquid exception hierarchy with structured diagnostics.

All exceptions optionally store Diagnostic objects for rich error
information.

Error policy:
    Structural errors (StackDepthExceededError, ScopeBalanceError,
    LiquidArgumentError) always propagate to the caller. Evaluation errors
    are routed through Context.handle_error, which either records them or
    re-raises them unchanged.

Python 3.13+. Zero external dependencies.
"""

from .codes import Diagnostic, ErrorCategory


class LiquidError(Exception):
    """Base exception for all Liquid errors.

    Attributes:
        diagnostic: Structured diagnostic information (optional)
    """

    def __init__(self, message: str | Diagnostic) -> None:
        """Initialize LiquidError.

        Args:
            message: Error message string OR Diagnostic object
        """
        if isinstance(message, Diagnostic):
            self.diagnostic: Diagnostic | None = message
            super().__init__(message.format_error())
        else:
            self.diagnostic = None
            super().__init__(message)

    @property
    def category(self) -> ErrorCategory | None:
        """Error category from the diagnostic, if any."""
        return self.diagnostic.category if self.diagnostic else None

    @property
    def short_message(self) -> str:
        """One-line message suitable for inline substitution."""
        if self.diagnostic is not None:
            return self.diagnostic.message
        return str(self)


class LiquidSyntaxError(LiquidError):
    """Template syntax error.

    Raised by host parsers and tags; handle_error prefixes its message with
    "Liquid syntax error:" instead of "Liquid error:".
    """


class LiquidArgumentError(LiquidError):
    """Invalid argument passed to the context API.

    Examples:
    - Registering a value that is not a filter module
    - Incrementing an unknown resource counter
    """


class StackDepthExceededError(LiquidError):
    """Scope stack exceeded its maximum depth.

    Indicates recursive includes or runaway looping. Never truncated
    silently.
    """


class ScopeBalanceError(LiquidError):
    """Pop attempted while only the outer scope remains.

    Indicates push/pop calls that are not strictly nested.
    """


class UndefinedFilterError(LiquidError):
    """Filter invoked by name but never registered."""


class LiquidEvaluationError(LiquidError):
    """Runtime error while evaluating template expressions.

    Examples:
    - A filter rejected its arguments
    """
