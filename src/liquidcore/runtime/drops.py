"""Base class for external objects exposed to templates.

A drop is an opaque host object that templates may traverse like a mapping.
It declares the KeyedLookup, ToRenderable, and ContextBindable capabilities,
so the resolver can coerce it, bind the active Context onto it, and fetch
attributes from it by name without probing arbitrary methods.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from functools import cache
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .context import Context

__all__ = ["Drop"]


class Drop:
    """Expose selected methods and properties of a host object to templates.

    Public methods and properties defined on subclasses are reachable by
    name. Everything else goes through ``before_method``, which subclasses
    override to serve dynamic keys.

    Example:
        >>> class ProductDrop(Drop):
        ...     def __init__(self, product):
        ...         self._product = product
        ...     def title(self):
        ...         return self._product.title.upper()
        >>> context["product"] = ProductDrop(product)
        >>> context["product.title"]
        'SHOES'
    """

    context: Context | None = None

    def bind_context(self, context: Context) -> None:
        """Receive the active Context before any attribute is fetched."""
        self.context = context

    def to_liquid(self) -> Drop:
        """Drops render as themselves."""
        return self

    def before_method(self, name: Any) -> Any:
        """Fallback for names without a matching public member."""
        return None

    def invoke_drop(self, name: Any) -> Any:
        """Fetch a public member by name, or fall back to before_method."""
        if isinstance(name, str) and name in _invokable_names(type(self)):
            member = getattr(self, name)
            return member() if callable(member) else member
        return self.before_method(name)

    def __contains__(self, key: object) -> bool:
        """Every key is reachable; unknown ones resolve via before_method."""
        return True

    def __getitem__(self, key: Any) -> Any:
        return self.invoke_drop(key)


@cache
def _invokable_names(cls: type[Drop]) -> frozenset[str]:
    """Public member names defined on Drop subclasses.

    The Drop API itself (before_method, invoke_drop, ...) is never exposed,
    even when a subclass overrides it.
    """
    names: set[str] = set()
    for klass in cls.__mro__:
        if klass is Drop or klass is object:
            continue
        names.update(name for name in vars(klass) if not name.startswith("_"))
    return frozenset(names.difference(vars(Drop)))
