"""Variable path resolution.

Resolves dotted and bracketed paths such as ``product.title``,
``hash["name"]``, ``items[0].price`` and ``items.first`` against the scope
stack and environment chain.

Resolution never raises for missing data: an unknown root or a missing path
segment yields None, so templates degrade gracefully on absent values.

Algorithm:
    1. Split the path into parts; ``[...]`` segments stay atomic.
    2. A bracketed first part is resolved to obtain the real root key.
    3. The root is looked up in scopes (innermost first), then environments,
       then once more in the fallback target (last environment, or the
       outermost scope when there are no environments).
    4. Each remaining part selects a key/index, or one of the pseudo-methods
       size/first/last when the part is a bare name with no matching key.

Python 3.13+.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from liquidcore.constants import PSEUDO_METHODS

from .value_types import Sizeable, is_indexed, is_keyed

if TYPE_CHECKING:
    from .evaluation import LazyValueEvaluator
    from .scopes import EnvironmentChain, ScopeStack

__all__ = ["VariablePathResolver", "split_path"]


def split_path(markup: str) -> list[str]:
    """Split a variable path into its parts.

    A ``[`` followed by at least one non-``]`` character and a ``]`` forms
    one bracket part, brackets included. Runs of word characters and ``-``,
    plus at most one trailing ``?``, form name parts. Every other character
    (``.``, a stray ``?``, whitespace) separates parts and is dropped.

    Example:
        >>> split_path('hash["name"].first')
        ['hash', '["name"]', 'first']
    """
    parts: list[str] = []
    pos = 0
    end = len(markup)
    while pos < end:
        char = markup[pos]
        if char == "[":
            close = markup.find("]", pos + 1)
            if close > pos + 1:
                parts.append(markup[pos : close + 1])
                pos = close + 1
                continue
        elif _is_name_char(char):
            start = pos
            while pos < end and _is_name_char(markup[pos]):
                pos += 1
            if pos < end and markup[pos] == "?":
                pos += 1
            parts.append(markup[start:pos])
            continue
        pos += 1
    return parts


def _is_name_char(char: str) -> bool:
    return char.isalnum() or char in "_-"


def _is_bracketed(part: str) -> bool:
    return len(part) >= 2 and part[0] == "[" and part[-1] == "]"


def _contains(obj: Any, key: Any) -> bool:
    try:
        return key in obj
    except TypeError:  # unhashable key
        return False


def _is_positional(obj: object) -> bool:
    return is_indexed(obj) and not isinstance(obj, Mapping)


def _size(obj: Any) -> int:
    if isinstance(obj, range):
        # len() raises OverflowError past sys.maxsize
        rounding = 1 if obj.step > 0 else -1
        return max(0, (obj.stop - obj.start + obj.step - rounding) // obj.step)
    return len(obj)


def _first(obj: Any) -> Any:
    if isinstance(obj, Mapping):
        return next(([k, v] for k, v in obj.items()), None)
    return obj[0] if _size(obj) else None


def _last(obj: Any) -> Any:
    return obj[-1] if _size(obj) else None


# Pseudo-method whitelist: name -> (supported?, operation).
# Mappings support size and first only.
_PSEUDO_METHOD_TABLE: dict[str, tuple[Callable[[object], bool], Callable[[Any], Any]]] = {
    "size": (lambda obj: isinstance(obj, Sizeable), _size),
    "first": (lambda obj: _is_positional(obj) or isinstance(obj, Mapping), _first),
    "last": (_is_positional, _last),
}


class VariablePathResolver:
    """Resolves variable paths against scopes and environments.

    Bracketed parts are resolved through ``resolve_key``, which is the full
    literal-or-variable pipeline of the owning Context, so ``hash[key]``
    uses the value of ``key`` and ``hash["key"]`` uses the string.
    """

    __slots__ = ("_environments", "_evaluator", "_resolve_key", "_scopes")

    def __init__(
        self,
        scopes: ScopeStack,
        environments: EnvironmentChain,
        evaluator: LazyValueEvaluator,
        resolve_key: Callable[[str], Any],
    ) -> None:
        """Initialize resolver.

        Args:
            scopes: Local scopes, searched innermost first
            environments: Read-only providers, searched after scopes
            evaluator: Fetches and memoizes values, applying coercion
            resolve_key: Resolves bracket contents to a key
        """
        self._scopes = scopes
        self._environments = environments
        self._evaluator = evaluator
        self._resolve_key = resolve_key

    def resolve(self, markup: str) -> Any:
        """Resolve a variable path to a value, or None when absent."""
        parts = split_path(markup)
        if not parts:
            return None

        first, *rest = parts
        key = self._resolve_key(first[1:-1]) if _is_bracketed(first) else first

        current = self.find_variable(key)
        if current is None or current is False:
            return current

        for part in rest:
            bracketed = _is_bracketed(part)
            key = self._resolve_key(part[1:-1]) if bracketed else part

            if (is_keyed(current) and _contains(current, key)) or (
                is_indexed(current) and isinstance(key, int) and not isinstance(key, bool)
            ):
                current = self._evaluator.fetch(current, key)
            elif not bracketed and key in PSEUDO_METHODS:
                supported, operation = _PSEUDO_METHOD_TABLE[key]
                if not supported(current):
                    return None
                current = self._evaluator.coerce(operation(current))
            else:
                return None

        return current

    def find_variable(self, key: Any) -> Any:
        """Locate the root value for key.

        Order: innermost scope binding the key, then the first environment
        with a non-nil value, then the fallback target. The fallback lookup
        may legitimately produce None.
        """
        try:
            scope = self._scopes.find(key)
        except TypeError:  # unhashable key cannot be bound
            scope = None
        if scope is not None:
            return self._evaluator.fetch(scope, key)

        environment, value = self._environments.lookup(key, self._evaluator)
        if environment is not None:
            return value

        fallback = self._environments.fallback
        target = fallback if fallback is not None else self._scopes.outermost
        return self._evaluator.fetch(target, key)
