"""Core value types for the Liquid runtime.

Defines the fundamental types used throughout the resolution system:
    - LiquidValue: Union of all values a resolution may produce
    - Deferred: Not-yet-computed value, evaluated once on first fetch
    - LiteralMarker: Reserved capability markers (blank, empty)
    - Capability protocols: KeyedLookup, IndexedLookup, Sizeable,
      ToRenderable, ContextBindable

Resolution dispatches on which capabilities a value declares rather than
probing for arbitrary methods. Built-in containers are classified through
collections.abc; external objects (drops) declare capabilities by
implementing the protocol members.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from enum import StrEnum
from inspect import Parameter, signature
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .context import Context

__all__ = [
    "ContextBindable",
    "Deferred",
    "IndexedLookup",
    "KeyedLookup",
    "LiquidValue",
    "LiteralMarker",
    "Sizeable",
    "ToRenderable",
    "is_indexed",
    "is_keyed",
]

# Text types are sequences to collections.abc but never containers to Liquid.
_TEXT_TYPES: tuple[type, ...] = (str, bytes, bytearray)


class LiteralMarker(StrEnum):
    """Reserved literal tokens handed to comparison logic unevaluated.

    ``products == empty`` compares against EMPTY; the comparison code decides
    what emptiness means for the left-hand value.
    """

    BLANK = "blank"
    EMPTY = "empty"


@runtime_checkable
class KeyedLookup(Protocol):
    """Capability: key-membership testing plus keyed fetch."""

    def __contains__(self, key: object, /) -> bool: ...  # pragma: no cover

    def __getitem__(self, key: Any, /) -> Any: ...  # pragma: no cover


@runtime_checkable
class IndexedLookup(Protocol):
    """Capability: positional fetch over a finite length."""

    def __getitem__(self, index: Any, /) -> Any: ...  # pragma: no cover

    def __len__(self) -> int: ...  # pragma: no cover


@runtime_checkable
class Sizeable(Protocol):
    """Capability: reports a size (the ``size`` pseudo-method)."""

    def __len__(self) -> int: ...  # pragma: no cover


@runtime_checkable
class ToRenderable(Protocol):
    """Capability: converts an external object into a Liquid value."""

    def to_liquid(self) -> Any: ...  # pragma: no cover


@runtime_checkable
class ContextBindable(Protocol):
    """Capability: accepts the active Context for nested resolution."""

    def bind_context(self, context: Context) -> None: ...  # pragma: no cover


def is_keyed(obj: object) -> bool:
    """Check whether obj supports key-membership testing.

    Mappings always qualify. Other objects qualify through KeyedLookup unless
    they are sequences or text, whose ``in`` tests elements rather than keys.
    """
    if isinstance(obj, Mapping):
        return True
    if isinstance(obj, (*_TEXT_TYPES, Sequence)):
        return False
    return isinstance(obj, KeyedLookup)


def is_indexed(obj: object) -> bool:
    """Check whether obj supports fetching by integer position."""
    if isinstance(obj, _TEXT_TYPES):
        return False
    return isinstance(obj, IndexedLookup)


def _accepts_context(func: Callable[..., object]) -> bool:
    """Infer whether a computation expects the active Context.

    Any positional parameter (or *args) means the one-argument form.
    Callables without an inspectable signature are treated as zero-argument.
    """
    try:
        params = signature(func).parameters.values()
    except (TypeError, ValueError):
        return False
    positional = (
        Parameter.POSITIONAL_ONLY,
        Parameter.POSITIONAL_OR_KEYWORD,
        Parameter.VAR_POSITIONAL,
    )
    return any(p.kind in positional for p in params)


@dataclass(frozen=True, slots=True)
class Deferred:
    """A value whose computation has not run yet.

    Stored in a scope or environment in place of a concrete value. The first
    fetch evaluates it and, when the owning container supports assignment,
    replaces the entry with the result so later fetches never re-run it.

    Attributes:
        func: The computation
        takes_context: True for the one-argument form, which is called with
            the active Context. Inferred from func's signature when omitted.

    Example:
        >>> scope = {"now": Deferred(lambda: expensive_clock())}
        >>> scope["greeting"] = Deferred(lambda ctx: f"hi {ctx['name']}")
    """

    func: Callable[..., object]
    takes_context: bool | None = None

    def __post_init__(self) -> None:
        """Resolve the calling form from the signature when not given."""
        if self.takes_context is None:
            object.__setattr__(self, "takes_context", _accepts_context(self.func))

    def evaluate(self, context: Context) -> object:
        """Run the computation in its declared form."""
        if self.takes_context:
            return self.func(context)
        return self.func()


# Type alias for values produced by resolution.
# Drops appear through ToRenderable; Deferred only before first fetch.
type LiquidValue = (
    str
    | int
    | float
    | bool
    | range
    | None
    | LiteralMarker
    | Sequence["LiquidValue"]
    | Mapping[Any, "LiquidValue"]
    | ToRenderable
    | Deferred
)
