"""Evaluation error recording.

Evaluation-time errors are either collected and converted into a short
message for inline output, or re-raised unchanged when the render was
configured to rethrow. Structural errors never pass through here.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from liquidcore.constants import ERROR_PREFIX, SYNTAX_ERROR_PREFIX
from liquidcore.diagnostics import LiquidError, LiquidSyntaxError

__all__ = ["ErrorRecorder"]

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ErrorRecorder:
    """Collects evaluation errors for one render.

    Attributes:
        rethrow: Re-raise handled errors instead of recording them
        errors: Errors recorded so far, in order
    """

    rethrow: bool = False
    errors: list[Exception] = field(default_factory=list)

    def handle_error(self, error: Exception) -> str:
        """Record error and return its inline message.

        Args:
            error: The evaluation error raised by a tag or filter

        Returns:
            "Liquid syntax error: ..." for syntax errors, otherwise
            "Liquid error: ..."

        Raises:
            Exception: error itself, unchanged, when rethrow is enabled
        """
        if self.rethrow:
            raise error

        self.errors.append(error)
        logger.debug("Recorded %s: %s", type(error).__name__, error)

        message = error.short_message if isinstance(error, LiquidError) else str(error)
        if isinstance(error, LiquidSyntaxError):
            return f"{SYNTAX_ERROR_PREFIX}{message}"
        return f"{ERROR_PREFIX}{message}"

    def clear(self) -> None:
        """Forget all recorded errors."""
        self.errors.clear()
