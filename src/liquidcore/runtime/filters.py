"""Filter registration and dispatch.

Filters are plain Python callables grouped into filter modules: either a
Python module object or a class used as a namespace. Every public callable
in a filter module becomes a filter of the same name.

Architecture:
    - FilterRegistry: Process-wide registry with explicit reset(). Holds
      global filter modules (included in every invoker) and the set of
      filter names known to the process.
    - FilterInvoker: Per-Context dispatch table, built lazily on the first
      filter call. Modules registered after construction extend it in
      place; entries already resolved stay valid.
    - liquid_filter: Decorator marking filters that receive the Context.

Example:
    >>> class TextFilters:
    ...     def upcase(value):
    ...         return str(value).upper()
    ...     @liquid_filter(takes_context=True)
    ...     def greet(context, value):
    ...         return f"{context['greeting']}, {value}"
    >>> context.register_filters(TextFilters)
    >>> context.invoke("upcase", "hi")
    'HI'

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Iterable, Iterator
from types import ModuleType
from typing import TYPE_CHECKING, Any, overload

from liquidcore.diagnostics import (
    ErrorTemplate,
    LiquidArgumentError,
    LiquidEvaluationError,
    UndefinedFilterError,
)

if TYPE_CHECKING:
    from .context import Context

__all__ = [
    "FilterInvoker",
    "FilterRegistry",
    "get_shared_registry",
    "liquid_filter",
    "reset_shared_registry",
]

logger = logging.getLogger(__name__)

type FilterModule = ModuleType | type

# Attribute name marking filters that take the owning Context first.
_LIQUID_TAKES_CONTEXT_ATTR: str = "_liquid_takes_context"


@overload
def liquid_filter[F: Callable[..., Any]](func: F, /) -> F: ...


@overload
def liquid_filter[F: Callable[..., Any]](
    *, takes_context: bool = False
) -> Callable[[F], F]: ...


def liquid_filter(
    func: Callable[..., Any] | None = None,
    /,
    *,
    takes_context: bool = False,
) -> Any:
    """Mark a callable as a filter.

    Usable bare (``@liquid_filter``) or with options
    (``@liquid_filter(takes_context=True)``). With takes_context the invoker
    passes the owning Context as the first argument.
    """

    def mark(f: Callable[..., Any]) -> Callable[..., Any]:
        setattr(f, _LIQUID_TAKES_CONTEXT_ATTR, takes_context)
        return f

    if func is not None:
        return mark(func)
    return mark


def takes_context(func: object) -> bool:
    """Check whether a filter asked for the Context to be injected."""
    return getattr(func, _LIQUID_TAKES_CONTEXT_ATTR, False) is True


def validate_filter_module(module: object) -> FilterModule:
    """Ensure module is a filter module.

    Raises:
        LiquidArgumentError: If module is neither a module nor a class
    """
    if not isinstance(module, (ModuleType, type)):
        raise LiquidArgumentError(ErrorTemplate.invalid_filter_module(type(module).__name__))
    return module


def filter_functions(module: FilterModule) -> dict[str, Callable[..., Any]]:
    """Collect the filters defined by a filter module.

    For module objects: names in ``__all__`` when present, otherwise public
    functions defined in that module (imports are skipped). For classes:
    public callables defined on the class or its bases, with subclasses
    overriding bases.
    """
    found: dict[str, Callable[..., Any]] = {}
    if isinstance(module, ModuleType):
        exported = getattr(module, "__all__", None)
        for name, value in vars(module).items():
            if name.startswith("_") or not callable(value):
                continue
            if exported is not None:
                if name in exported:
                    found[name] = value
            elif inspect.isfunction(value) and value.__module__ == module.__name__:
                found[name] = value
        return found

    for klass in reversed(module.__mro__):
        if klass is object:
            continue
        for name in vars(klass):
            if name.startswith("_"):
                continue
            value = getattr(module, name)
            if callable(value) and not isinstance(value, type):
                found[name] = value
    return found


class FilterRegistry:
    """Process-wide filter registry.

    Injected into each Context rather than read as ambient state. Tests and
    hosts tear it down with ``reset()``.

    Attributes:
        global_modules: Modules included in every FilterInvoker, in order
        known_filters: Every filter name registered through this registry
    """

    __slots__ = ("_global_modules", "_known_filters")

    def __init__(self) -> None:
        """Initialize empty registry."""
        self._global_modules: list[FilterModule] = []
        self._known_filters: set[str] = set()

    @property
    def global_modules(self) -> tuple[FilterModule, ...]:
        return tuple(self._global_modules)

    @property
    def known_filters(self) -> frozenset[str]:
        return frozenset(self._known_filters)

    def register_global(self, module: object) -> None:
        """Include a filter module in every invoker built from now on.

        Raises:
            LiquidArgumentError: If module is not a filter module
        """
        checked = validate_filter_module(module)
        if checked not in self._global_modules:
            self._global_modules.append(checked)
        self.add_known_filter(checked)

    def add_known_filter(self, module: object) -> None:
        """Record the filter names a module defines.

        Raises:
            LiquidArgumentError: If module is not a filter module
        """
        self._known_filters.update(filter_functions(validate_filter_module(module)))

    def is_known(self, name: str) -> bool:
        """Check whether any registered module defines name."""
        return name in self._known_filters

    def reset(self) -> None:
        """Forget every global module and known name."""
        self._global_modules.clear()
        self._known_filters.clear()

    def __repr__(self) -> str:
        return (
            f"FilterRegistry(global_modules={len(self._global_modules)}, "
            f"known_filters={len(self._known_filters)})"
        )


class FilterInvoker:
    """Dispatches filter calls by name for one Context.

    Supports dict-like introspection:
        - list_filters(): List all available filter names
        - __iter__, __len__, __contains__
    """

    __slots__ = ("_context", "_filters")

    def __init__(self, context: Context, modules: Iterable[object] = ()) -> None:
        """Build the dispatch table from modules; later modules win.

        Raises:
            LiquidArgumentError: If any module is not a filter module
        """
        self._context = context
        self._filters: dict[str, Callable[..., Any]] = {}
        for module in modules:
            self._filters.update(filter_functions(validate_filter_module(module)))

    def extend(self, module: object) -> None:
        """Add a filter module to an already-built invoker.

        Raises:
            LiquidArgumentError: If module is not a filter module
        """
        added = filter_functions(validate_filter_module(module))
        self._filters.update(added)
        logger.debug("Extended filter invoker with %d filter(s)", len(added))

    def invoke(self, name: str, *args: Any) -> Any:
        """Call the filter registered under name.

        Args:
            name: Filter name
            *args: Filter input followed by filter arguments

        Returns:
            The filter's result

        Raises:
            UndefinedFilterError: If no filter is registered under name
            LiquidEvaluationError: If the filter rejects its arguments
                (TypeError or ValueError)
        """
        func = self._filters.get(name)
        if func is None:
            raise UndefinedFilterError(ErrorTemplate.filter_not_found(name))

        if takes_context(func):
            args = (self._context, *args)

        # Only TypeError/ValueError signal bad arguments. Anything else is a
        # bug in the filter and propagates as-is.
        try:
            return func(*args)
        except (TypeError, ValueError) as e:
            raise LiquidEvaluationError(ErrorTemplate.filter_failed(name, str(e))) from e

    def get_filter(self, name: str) -> Callable[..., Any] | None:
        """Return the callable registered under name, or None."""
        return self._filters.get(name)

    def list_filters(self) -> list[str]:
        """List all available filter names."""
        return list(self._filters)

    def __iter__(self) -> Iterator[str]:
        return iter(self._filters)

    def __len__(self) -> int:
        return len(self._filters)

    def __contains__(self, name: object) -> bool:
        return name in self._filters

    def __repr__(self) -> str:
        return f"FilterInvoker(filters={len(self._filters)})"


# Module-level shared registry.
# Initialized lazily on first access to avoid import-time side effects.
_SHARED_REGISTRY: FilterRegistry | None = None


def get_shared_registry() -> FilterRegistry:
    """Get the process-wide FilterRegistry, creating it on first use."""
    global _SHARED_REGISTRY  # noqa: PLW0603
    if _SHARED_REGISTRY is None:
        _SHARED_REGISTRY = FilterRegistry()
    return _SHARED_REGISTRY


def reset_shared_registry() -> None:
    """Tear down the process-wide registry.

    The current registry is cleared and the next get_shared_registry() call
    creates a new one. Contexts created earlier still hold the cleared one.
    """
    global _SHARED_REGISTRY  # noqa: PLW0603
    if _SHARED_REGISTRY is not None:
        _SHARED_REGISTRY.reset()
    _SHARED_REGISTRY = None
