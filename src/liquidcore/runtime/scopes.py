"""Scope stack and environment chain.

Variables are looked up first in the stack of local scopes, innermost first,
then in the chain of read-only environments supplied by the host.

Architecture:
    - ScopeStack: Mutable, bounded stack of local variable maps. Index 0 is
      the innermost scope; the stack never holds fewer than one scope.
    - EnvironmentChain: Ordered read-only data providers. Only memoized
      Deferred results are ever written back into them.

Thread Safety:
    Neither class is thread-safe. A Context and its stack belong to a single
    render.

Python 3.13+.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, MutableMapping
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from liquidcore.constants import MAX_SCOPE_DEPTH
from liquidcore.core.depth_guard import depth_clamp
from liquidcore.diagnostics import (
    ErrorTemplate,
    ScopeBalanceError,
    StackDepthExceededError,
)

if TYPE_CHECKING:
    from .evaluation import LazyValueEvaluator

__all__ = ["EnvironmentChain", "Scope", "ScopeStack"]

type Scope = MutableMapping[str, Any]


class ScopeStack:
    """Bounded stack of local variable scopes.

    Push and pop must be strictly nested within one render. Prefer
    ``scoped()``, which guarantees the pop on every exit path.

    Example:
        >>> stack = ScopeStack({"title": "Home"})
        >>> with stack.scoped({"item": 1}):
        ...     stack.depth
        2
        >>> stack.depth
        1
    """

    __slots__ = ("_max_depth", "_scopes")

    def __init__(
        self,
        outer_scope: Scope | None = None,
        *,
        max_depth: int = MAX_SCOPE_DEPTH,
    ) -> None:
        """Initialize with the outer scope.

        Args:
            outer_scope: Outermost variables. Used as-is, not copied.
            max_depth: Maximum number of scopes pushed above the outer scope,
                clamped to the recursion limit
        """
        self._scopes: list[Scope] = [outer_scope if outer_scope is not None else {}]
        self._max_depth = depth_clamp(max_depth)

    @property
    def max_depth(self) -> int:
        """Maximum number of scopes that may be pushed above the outer scope."""
        return self._max_depth

    @property
    def depth(self) -> int:
        """Current number of scopes."""
        return len(self._scopes)

    @property
    def innermost(self) -> Scope:
        """Scope that receives assignments."""
        return self._scopes[0]

    @property
    def outermost(self) -> Scope:
        """Scope the stack was created with."""
        return self._scopes[-1]

    def push(self, scope: Scope | None = None) -> None:
        """Push a new innermost scope.

        The depth is checked before the stack changes, so a failed push
        leaves every existing scope in place.

        Raises:
            StackDepthExceededError: If max_depth scopes are already pushed
        """
        if len(self._scopes) > self._max_depth:
            raise StackDepthExceededError(ErrorTemplate.scope_depth_exceeded(self._max_depth))
        self._scopes.insert(0, scope if scope is not None else {})

    def pop(self) -> Scope:
        """Remove and return the innermost scope.

        Raises:
            ScopeBalanceError: If only the outer scope remains
        """
        if len(self._scopes) == 1:
            raise ScopeBalanceError(ErrorTemplate.scope_unbalanced())
        return self._scopes.pop(0)

    def merge(self, values: Mapping[str, Any]) -> None:
        """Merge values into the innermost scope only."""
        self._scopes[0].update(values)

    @contextmanager
    def scoped(self, scope: Scope | None = None) -> Iterator[Scope]:
        """Push a scope for the duration of a with-block.

        The scope is popped on normal exit, early return, and exceptions.
        A push that fails leaves nothing to pop.
        """
        self.push(scope)
        try:
            yield self._scopes[0]
        finally:
            self.pop()

    def find(self, key: str) -> Scope | None:
        """Return the innermost scope that binds key, or None."""
        for scope in self._scopes:
            if key in scope:
                return scope
        return None

    def clear_innermost(self) -> None:
        """Replace the innermost scope with an empty one."""
        self._scopes[0] = {}

    def __len__(self) -> int:
        return len(self._scopes)

    def __iter__(self) -> Iterator[Scope]:
        """Iterate scopes innermost first."""
        return iter(self._scopes)

    def __getitem__(self, index: int) -> Scope:
        return self._scopes[index]

    def __repr__(self) -> str:
        return f"ScopeStack(depth={len(self._scopes)}, max_depth={self._max_depth})"


class EnvironmentChain:
    """Ordered, structurally read-only chain of external data providers.

    Consulted only after no scope binds a name. The last environment also
    serves as the fallback lookup target when nothing matches anywhere.
    """

    __slots__ = ("_environments",)

    def __init__(
        self,
        environments: Mapping[str, Any] | Iterable[Mapping[str, Any] | None] | None = None,
    ) -> None:
        """Initialize from one mapping or a sequence of mappings.

        None entries are dropped.
        """
        if environments is None:
            self._environments: tuple[Mapping[str, Any], ...] = ()
        elif isinstance(environments, Mapping):
            self._environments = (environments,)
        else:
            self._environments = tuple(e for e in environments if e is not None)

    @property
    def fallback(self) -> Mapping[str, Any] | None:
        """Last environment, or None when the chain is empty."""
        return self._environments[-1] if self._environments else None

    def lookup(
        self, key: Any, evaluator: LazyValueEvaluator
    ) -> tuple[Mapping[str, Any] | None, Any]:
        """Find the first environment yielding a non-nil value for key.

        Each candidate is read through the evaluator, so Deferred entries are
        evaluated (and memoized) as the chain is walked.

        Returns:
            (environment, value), or (None, None) when no environment matches
        """
        for environment in self._environments:
            value = evaluator.fetch(environment, key)
            if value is not None:
                return environment, value
        return None, None

    def __len__(self) -> int:
        return len(self._environments)

    def __iter__(self) -> Iterator[Mapping[str, Any]]:
        return iter(self._environments)

    def __getitem__(self, index: int) -> Mapping[str, Any]:
        return self._environments[index]

    def __repr__(self) -> str:
        return f"EnvironmentChain(environments={len(self._environments)})"
