"""liquidcore - render-time variable context for Liquid templates.

The Context holds everything a template render needs while evaluating tags
and blocks: literal recognition, scoped variable lookup with lazy values,
dotted and bracketed path traversal, filter dispatch, resource accounting,
control-flow interrupts, and error recording. Parsing and rendering of
template text belong to the host.

Public API:
    Context - Render state for one template render
    Deferred - Lazily computed value, memoized on first fetch
    Drop - Base class for host objects exposed to templates
    ResourceLimits - Immutable render resource ceilings
    liquid_filter - Decorator for filters (context injection support)
    LiteralMarker - The blank and empty literal markers

Exceptions:
    LiquidError - Base exception class
    LiquidSyntaxError - Template syntax errors
    LiquidArgumentError - Invalid arguments to the context API
    StackDepthExceededError - Scope nesting too deep
    ScopeBalanceError - Unbalanced push/pop
    UndefinedFilterError - Unknown filter name
    LiquidEvaluationError - Runtime evaluation errors

Submodules:
    liquidcore.runtime - Context components
    liquidcore.diagnostics - Error types, codes, and formatting
"""

from .diagnostics import (
    LiquidArgumentError,
    LiquidError,
    LiquidEvaluationError,
    LiquidSyntaxError,
    ScopeBalanceError,
    StackDepthExceededError,
    UndefinedFilterError,
)
from .runtime import (
    BreakInterrupt,
    Context,
    ContinueInterrupt,
    Deferred,
    Drop,
    FilterRegistry,
    Interrupt,
    LiquidValue,
    LiteralMarker,
    ResourceLimits,
    get_shared_registry,
    liquid_filter,
    reset_shared_registry,
)

# Version information - Auto-populated from package metadata
# SINGLE SOURCE OF TRUTH: pyproject.toml [project] version
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _get_version

try:
    __version__ = _get_version("liquidcore")
except PackageNotFoundError:
    # Development mode: package not installed yet
    __version__ = "0.0.0+dev"

__all__ = [
    "BreakInterrupt",
    "Context",
    "ContinueInterrupt",
    "Deferred",
    "Drop",
    "FilterRegistry",
    "Interrupt",
    "LiquidArgumentError",
    "LiquidError",
    "LiquidEvaluationError",
    "LiquidSyntaxError",
    "LiquidValue",
    "LiteralMarker",
    "ResourceLimits",
    "ScopeBalanceError",
    "StackDepthExceededError",
    "UndefinedFilterError",
    "__version__",
    "get_shared_registry",
    "liquid_filter",
    "reset_shared_registry",
]
