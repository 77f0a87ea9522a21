"""Context - render state for one template render.

The Context keeps the variable stack and resolves identifiers:

    >>> context = Context()
    >>> context["variable"] = "testing"
    >>> context["variable"]
    'testing'
    >>> context["true"]
    True
    >>> context["10.2232"]
    10.2232
    >>> with context.scoped():
    ...     context["bob"] = "bobsen"
    >>> context["bob"] is None
    True

It composes the literal grammar, scope stack, environment chain, lazy
evaluator, path resolver, filter invoker, resource limiter, interrupt stack,
and error recorder behind the interface used by tag and block evaluators.

Thread Safety:
    NOT thread-safe. Scope and environment mutation happens in place; create
    one Context per render and never share it between concurrent renders.

Python 3.13+.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from contextlib import AbstractContextManager
from types import ModuleType
from typing import Any

from liquidcore.constants import MAX_SCOPE_DEPTH

from .evaluation import LazyValueEvaluator
from .filters import FilterInvoker, FilterRegistry, get_shared_registry, validate_filter_module
from .interrupts import Interrupt, InterruptStack
from .limits import ResourceLimiter, ResourceLimits
from .literals import NOT_A_LITERAL, resolve_literal
from .recorder import ErrorRecorder
from .resolver import VariablePathResolver
from .scopes import EnvironmentChain, Scope, ScopeStack

__all__ = ["Context"]

logger = logging.getLogger(__name__)


class Context:
    """Variable resolution and render state for a single render.

    Identifiers resolve as literals first, then as variable paths searched
    in the scope stack (innermost first) and then the environments.

    Missing variables resolve to None. Only structural misuse raises:
    StackDepthExceededError, ScopeBalanceError, and LiquidArgumentError
    always propagate. Evaluation errors reported by tags go through
    handle_error.

    Examples:
        >>> context = Context({"shop": {"name": "Snowdevil"}})
        >>> context["shop.name"]
        'Snowdevil'
        >>> context['shop["name"]']
        'Snowdevil'
        >>> context["(1..3)"]
        range(1, 4)
    """

    __slots__ = (
        "_environments",
        "_evaluator",
        "_filter_registry",
        "_filters",
        "_interrupts",
        "_invoker",
        "_limiter",
        "_recorder",
        "_registers",
        "_resolver",
        "_scopes",
    )

    def __init__(
        self,
        environments: Mapping[str, Any] | Iterable[Mapping[str, Any] | None] | None = None,
        outer_scope: Scope | None = None,
        registers: dict[str, Any] | None = None,
        rethrow_errors: bool = False,
        resource_limits: ResourceLimits | Mapping[str, int | None] | None = None,
        *,
        filter_registry: FilterRegistry | None = None,
        max_depth: int = MAX_SCOPE_DEPTH,
    ) -> None:
        """Initialize Context for one render.

        Args:
            environments: Read-only data source, or sequence of them, consulted
                after the scopes. Supplied by the host and never restructured.
            outer_scope: Outermost mutable scope. Used as-is, not copied.
            registers: Opaque host storage for tag implementations
            rethrow_errors: Re-raise errors passed to handle_error instead of
                recording them
            resource_limits: ResourceLimits, or a mapping with keys
                render_length_limit, render_score_limit, assign_score_limit
            filter_registry: Registry supplying global filter modules
                (default: the shared process-wide registry)
            max_depth: Maximum scope nesting (default: 100)
        """
        self._environments = EnvironmentChain(environments)
        self._scopes = ScopeStack(outer_scope, max_depth=max_depth)
        self._registers: dict[str, Any] = registers if registers is not None else {}
        self._recorder = ErrorRecorder(rethrow=rethrow_errors)
        self._interrupts = InterruptStack()

        if not isinstance(resource_limits, ResourceLimits):
            resource_limits = ResourceLimits.from_mapping(resource_limits)
        self._limiter = ResourceLimiter(limits=resource_limits)

        self._filter_registry = (
            filter_registry if filter_registry is not None else get_shared_registry()
        )
        self._filters: list[object] = []
        self._invoker: FilterInvoker | None = None

        self._evaluator = LazyValueEvaluator(self)
        self._resolver = VariablePathResolver(
            self._scopes, self._environments, self._evaluator, self.resolve
        )

        self._squash_instance_assigns_with_environments()

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def scopes(self) -> ScopeStack:
        """Scope stack, innermost scope at index 0."""
        return self._scopes

    @property
    def environments(self) -> EnvironmentChain:
        return self._environments

    @property
    def registers(self) -> dict[str, Any]:
        """Host storage, passed through untouched."""
        return self._registers

    @property
    def errors(self) -> list[Exception]:
        """Errors recorded by handle_error, in order."""
        return self._recorder.errors

    @property
    def resource_limits(self) -> dict[str, int | None]:
        """Snapshot of configured limits and current usage counters."""
        return self._limiter.as_dict()

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(self, key: str) -> Any:
        """Resolve a literal token or variable path.

        Literals (nil, booleans, blank/empty, quoted strings, integers,
        ranges, floats) are recognized first; anything else is looked up as
        a variable path. Never raises for missing data.
        """
        value = resolve_literal(key, self.resolve)
        if value is not NOT_A_LITERAL:
            return value
        return self._resolver.resolve(key)

    def __getitem__(self, key: str) -> Any:
        return self.resolve(key)

    def __setitem__(self, key: str, value: Any) -> None:
        """Assign into the innermost scope."""
        self._scopes.innermost[key] = value

    def __contains__(self, key: object) -> bool:
        """True when key resolves to a non-nil value."""
        return isinstance(key, str) and self.resolve(key) is not None

    def has_key(self, key: str) -> bool:
        """True when key resolves to a non-nil value."""
        return self.resolve(key) is not None

    # ------------------------------------------------------------------
    # Scopes
    # ------------------------------------------------------------------

    def push(self, new_scope: Scope | None = None) -> None:
        """Push a new local scope. Prefer scoped().

        Raises:
            StackDepthExceededError: If nesting exceeds the maximum depth
        """
        self._scopes.push(new_scope)

    def pop(self) -> Scope:
        """Pop the innermost scope. Prefer scoped().

        Raises:
            ScopeBalanceError: If only the outer scope remains
        """
        return self._scopes.pop()

    def merge(self, new_scopes: Mapping[str, Any]) -> None:
        """Merge variables into the innermost scope."""
        self._scopes.merge(new_scopes)

    def scoped(self, new_scope: Scope | None = None) -> AbstractContextManager[Scope]:
        """Push a scope for the duration of a with-block.

        Example:
            >>> with context.scoped():
            ...     context["var"] = "hi"
            >>> context["var"] is None
            True
        """
        return self._scopes.scoped(new_scope)

    stack = scoped

    def clear_instance_assigns(self) -> None:
        """Reset the innermost scope to an empty mapping."""
        self._scopes.clear_innermost()

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    @property
    def filters(self) -> FilterInvoker:
        """Filter invoker, built on first use."""
        if self._invoker is None:
            modules = [*self._filter_registry.global_modules, *self._filters]
            self._invoker = FilterInvoker(self, modules)
            logger.debug("Built filter invoker with %d filter(s)", len(self._invoker))
        return self._invoker

    def register_filters(self, filters: object | Iterable[object]) -> None:
        """Add filter modules to this context.

        Does not register them globally; use FilterRegistry.register_global
        for that. Before the invoker is built, modules are queued and merged
        in at construction. Afterwards each module extends the live invoker.

        Args:
            filters: A filter module, or an iterable of them. None entries
                are ignored.

        Raises:
            LiquidArgumentError: If any entry is not a filter module. Nothing
                is registered in that case.
        """
        modules = _flatten_filter_modules(filters)
        for module in modules:
            validate_filter_module(module)
        for module in modules:
            self._filter_registry.add_known_filter(module)

        if self._invoker is not None:
            for module in modules:
                self._invoker.extend(module)
        else:
            self._filters.extend(modules)

    def invoke(self, method: str, *args: Any) -> Any:
        """Call a filter by name.

        Raises:
            UndefinedFilterError: If no filter is registered under method
        """
        return self.filters.invoke(method, *args)

    # ------------------------------------------------------------------
    # Interrupts and errors
    # ------------------------------------------------------------------

    def has_interrupt(self) -> bool:
        """Are there any unhandled interrupts?"""
        return self._interrupts.has_interrupt()

    def push_interrupt(self, interrupt: Interrupt) -> None:
        """Push an interrupt; it is considered unhandled until popped."""
        self._interrupts.push(interrupt)

    def pop_interrupt(self) -> Interrupt:
        """Pop the most recent interrupt."""
        return self._interrupts.pop()

    def handle_error(self, error: Exception) -> str:
        """Record an evaluation error and return its inline message.

        Raises:
            Exception: error itself, unchanged, when rethrow_errors is set
        """
        return self._recorder.handle_error(error)

    # ------------------------------------------------------------------
    # Resource limits
    # ------------------------------------------------------------------

    def increment_used(self, key: str, value: object) -> None:
        """Charge value to a resource counter (length, or 1 for scalars)."""
        self._limiter.increment_used(key, value)

    def limits_reached(self) -> bool:
        """Check whether any configured resource limit is exceeded."""
        return self._limiter.limits_reached()

    # ------------------------------------------------------------------

    def _squash_instance_assigns_with_environments(self) -> None:
        """Let environments override outer-scope keys they also define."""
        outer = self._scopes.outermost
        for key in list(outer):
            for environment in self._environments:
                if key in environment:
                    outer[key] = self._evaluator.fetch(environment, key)
                    break

    def __repr__(self) -> str:
        return (
            f"Context(depth={self._scopes.depth}, "
            f"environments={len(self._environments)}, "
            f"errors={len(self._recorder.errors)})"
        )


def _flatten_filter_modules(filters: object) -> list[object]:
    """Normalize one module or an iterable of modules, dropping None."""
    if filters is None:
        return []
    if isinstance(filters, (ModuleType, type, str, bytes)) or not isinstance(filters, Iterable):
        return [filters]
    return [f for f in filters if f is not None]
