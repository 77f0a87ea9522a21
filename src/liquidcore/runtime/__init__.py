"""Liquid runtime package.

Provides the render Context and the components it composes: literal
grammar, scope stack, environment chain, lazy evaluation, variable path
resolution, filter dispatch, resource accounting, interrupts, and error
recording.

Python 3.13+.
"""

from .context import Context
from .drops import Drop
from .evaluation import LazyValueEvaluator
from .filters import (
    FilterInvoker,
    FilterRegistry,
    get_shared_registry,
    liquid_filter,
    reset_shared_registry,
)
from .interrupts import BreakInterrupt, ContinueInterrupt, Interrupt, InterruptStack
from .limits import ResourceLimiter, ResourceLimits
from .literals import NOT_A_LITERAL, resolve_literal
from .recorder import ErrorRecorder
from .resolver import VariablePathResolver, split_path
from .scopes import EnvironmentChain, Scope, ScopeStack
from .value_types import Deferred, LiquidValue, LiteralMarker

__all__ = [
    "NOT_A_LITERAL",
    "BreakInterrupt",
    "Context",
    "ContinueInterrupt",
    "Deferred",
    "Drop",
    "EnvironmentChain",
    "ErrorRecorder",
    "FilterInvoker",
    "FilterRegistry",
    "Interrupt",
    "InterruptStack",
    "LazyValueEvaluator",
    "LiquidValue",
    "LiteralMarker",
    "ResourceLimiter",
    "ResourceLimits",
    "Scope",
    "ScopeStack",
    "VariablePathResolver",
    "get_shared_registry",
    "liquid_filter",
    "reset_shared_registry",
    "resolve_literal",
    "split_path",
]
