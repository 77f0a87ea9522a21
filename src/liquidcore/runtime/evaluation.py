"""Lazy value evaluation with memoization.

Containers (scopes, environments, nested mappings and sequences) may hold
Deferred values. The first fetch runs the computation and, when the
container supports item assignment, writes the result back in place, so a
given entry changes from Deferred to a concrete value exactly once.

Python 3.13+.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from .value_types import (
    ContextBindable,
    Deferred,
    ToRenderable,
    is_indexed,
    is_keyed,
)

if TYPE_CHECKING:
    from .context import Context

__all__ = ["LazyValueEvaluator"]


class LazyValueEvaluator:
    """Fetches values from containers, evaluating Deferred entries once.

    Every value leaving the evaluator has been coerced with ``to_liquid()``
    and, if it accepts one, bound to the active Context.
    """

    __slots__ = ("_context",)

    def __init__(self, context: Context) -> None:
        """Initialize evaluator for one Context."""
        self._context = context

    def fetch(self, container: object, key: Any) -> Any:
        """Read container[key], evaluating and memoizing a Deferred entry.

        Missing keys and out-of-range indexes read as None.

        Args:
            container: Mapping, sequence, or keyed object (drop)
            key: Key or integer index

        Returns:
            The coerced value
        """
        value = _read(container, key)
        if isinstance(value, Deferred):
            value = value.evaluate(self._context)
            if hasattr(type(container), "__setitem__"):
                container[key] = value  # type: ignore[index]
        return self.coerce(value)

    def coerce(self, value: Any) -> Any:
        """Apply to-renderable coercion, then bind the active Context."""
        if isinstance(value, ToRenderable):
            value = value.to_liquid()
        if isinstance(value, ContextBindable):
            value.bind_context(self._context)
        return value


def _read(container: object, key: Any) -> Any:
    """Read the raw stored value without evaluating it."""
    if isinstance(container, Mapping):
        try:
            return container.get(key)
        except TypeError:  # unhashable key
            return None
    if is_indexed(container) and isinstance(key, int) and not isinstance(key, bool):
        try:
            return container[key]  # type: ignore[index]
        except IndexError:
            return None
    if is_keyed(container):
        return container[key]  # type: ignore[index]
    return None
