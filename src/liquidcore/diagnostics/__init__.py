"""Diagnostic system for Liquid errors.

Provides structured error diagnostics with codes, hints, and help URLs.
Inspired by Rust compiler diagnostics and Elm error messages.

Python 3.13+. Zero external dependencies.
"""

from .codes import Diagnostic, DiagnosticCode, ErrorCategory
from .errors import (
    LiquidArgumentError,
    LiquidError,
    LiquidEvaluationError,
    LiquidSyntaxError,
    ScopeBalanceError,
    StackDepthExceededError,
    UndefinedFilterError,
)
from .formatter import DiagnosticFormatter, OutputFormat
from .templates import ErrorTemplate

__all__ = [
    "Diagnostic",
    "DiagnosticCode",
    "DiagnosticFormatter",
    "ErrorCategory",
    "ErrorTemplate",
    "LiquidArgumentError",
    "LiquidError",
    "LiquidEvaluationError",
    "LiquidSyntaxError",
    "OutputFormat",
    "ScopeBalanceError",
    "StackDepthExceededError",
    "UndefinedFilterError",
]
