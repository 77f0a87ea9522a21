"""Tests for ScopeStack and EnvironmentChain.

Validates push/pop balance, the nesting ceiling, and environment ordering.
"""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from liquidcore import Context, ScopeBalanceError, StackDepthExceededError
from liquidcore.constants import MAX_SCOPE_DEPTH
from liquidcore.diagnostics import DiagnosticCode
from liquidcore.runtime.evaluation import LazyValueEvaluator
from liquidcore.runtime.scopes import EnvironmentChain, ScopeStack

# ============================================================================
# SCOPE STACK
# ============================================================================


class TestScopeStackBalance:
    """Test push/pop pairing."""

    def test_pop_outer_scope_fails(self) -> None:
        """The outer scope can never be popped."""
        stack = ScopeStack()
        with pytest.raises(ScopeBalanceError):
            stack.pop()
        assert len(stack) == 1

    def test_pop_after_push_restores_depth(self) -> None:
        """pop() undoes exactly one push()."""
        stack = ScopeStack()
        stack.push()
        assert stack.depth == 2
        stack.pop()
        assert stack.depth == 1

    def test_pop_returns_innermost_scope(self) -> None:
        """The pushed mapping is the one returned."""
        stack = ScopeStack()
        scope = {"x": 1}
        stack.push(scope)
        assert stack.pop() is scope

    def test_balance_error_carries_diagnostic(self) -> None:
        """ScopeBalanceError reports SCOPE_UNBALANCED."""
        with pytest.raises(ScopeBalanceError) as excinfo:
            ScopeStack().pop()
        assert excinfo.value.diagnostic is not None
        assert excinfo.value.diagnostic.code is DiagnosticCode.SCOPE_UNBALANCED

    @given(st.integers(min_value=0, max_value=60))
    def test_push_pop_balance(self, n: int) -> None:
        """n pushes followed by n pops leave only the outer scope."""
        outer = {"outer": True}
        stack = ScopeStack(outer)
        for _ in range(n):
            stack.push()
        assert stack.depth == n + 1
        for _ in range(n):
            stack.pop()
        assert stack.depth == 1
        assert stack.innermost is outer
        with pytest.raises(ScopeBalanceError):
            stack.pop()


class TestScopeStackCeiling:
    """Test the nesting ceiling."""

    def test_default_ceiling(self) -> None:
        """The default ceiling is MAX_SCOPE_DEPTH."""
        assert ScopeStack().max_depth == MAX_SCOPE_DEPTH == 100

    def test_hundred_pushes_succeed(self) -> None:
        """100 pushes from a fresh stack succeed; the 101st fails."""
        stack = ScopeStack()
        for _ in range(100):
            stack.push()
        assert stack.depth == 101

        innermost = stack.innermost
        with pytest.raises(StackDepthExceededError):
            stack.push({"never": "inserted"})

        assert stack.depth == 101
        assert stack.innermost is innermost

    def test_depth_error_carries_diagnostic(self) -> None:
        """StackDepthExceededError reports SCOPE_DEPTH_EXCEEDED."""
        stack = ScopeStack(max_depth=1)
        stack.push()
        with pytest.raises(StackDepthExceededError) as excinfo:
            stack.push()
        diagnostic = excinfo.value.diagnostic
        assert diagnostic is not None
        assert diagnostic.code is DiagnosticCode.SCOPE_DEPTH_EXCEEDED
        assert diagnostic.message == "Nesting too deep"
        assert excinfo.value.short_message == "Nesting too deep"

    def test_failed_scoped_push_pops_nothing(self) -> None:
        """A scoped() block whose push fails does not pop an existing scope."""
        stack = ScopeStack(max_depth=1)
        stack.push()
        with pytest.raises(StackDepthExceededError), stack.scoped():
            pass  # pragma: no cover
        assert stack.depth == 2


class TestScopeStackOperations:
    """Test merge, find, scoped, and clear_innermost."""

    def test_outer_scope_is_not_copied(self) -> None:
        """The outer scope mapping is used as-is."""
        outer: dict[str, object] = {}
        stack = ScopeStack(outer)
        stack.innermost["x"] = 1
        assert outer == {"x": 1}

    def test_merge_updates_innermost_only(self) -> None:
        """merge() never touches outer scopes."""
        stack = ScopeStack({"a": 1})
        stack.push()
        stack.merge({"a": 2, "b": 3})
        assert stack.innermost == {"a": 2, "b": 3}
        assert stack.outermost == {"a": 1}

    def test_find_returns_innermost_binding(self) -> None:
        """find() returns the first scope binding the key."""
        outer = {"x": 1}
        inner = {"x": 2}
        stack = ScopeStack(outer)
        stack.push(inner)
        assert stack.find("x") is inner
        assert stack.find("missing") is None

    def test_find_sees_keys_bound_to_none(self) -> None:
        """A key bound to None still counts as bound."""
        stack = ScopeStack({"x": None})
        assert stack.find("x") is not None

    def test_scoped_pops_on_exception(self) -> None:
        """scoped() pops even when the body raises."""
        stack = ScopeStack()
        with pytest.raises(RuntimeError), stack.scoped({"tmp": 1}):
            assert stack.depth == 2
            raise RuntimeError
        assert stack.depth == 1

    def test_scoped_yields_pushed_scope(self) -> None:
        """scoped() yields the innermost scope."""
        stack = ScopeStack()
        with stack.scoped() as scope:
            scope["y"] = 1
            assert stack.innermost is scope

    def test_clear_innermost(self) -> None:
        """clear_innermost() replaces the innermost scope with a new mapping."""
        stack = ScopeStack()
        stack.push({"x": 1})
        stack.clear_innermost()
        assert stack.innermost == {}
        assert stack.depth == 2

    def test_iteration_is_innermost_first(self) -> None:
        """Iterating yields scopes from innermost to outermost."""
        outer = {"level": 0}
        inner = {"level": 1}
        stack = ScopeStack(outer)
        stack.push(inner)
        assert list(stack) == [inner, outer]
        assert stack[0] is inner


# ============================================================================
# ENVIRONMENT CHAIN
# ============================================================================


class TestEnvironmentChain:
    """Test environment normalization and lookup."""

    def test_single_mapping(self) -> None:
        """A single mapping becomes a one-element chain."""
        env = {"a": 1}
        chain = EnvironmentChain(env)
        assert len(chain) == 1
        assert chain[0] is env
        assert chain.fallback is env

    def test_none_entries_dropped(self) -> None:
        """None entries are dropped from a sequence."""
        first = {"a": 1}
        last = {"b": 2}
        chain = EnvironmentChain([first, None, last])
        assert list(chain) == [first, last]
        assert chain.fallback is last

    def test_empty_chain(self) -> None:
        """No environments means no fallback."""
        chain = EnvironmentChain()
        assert len(chain) == 0
        assert chain.fallback is None

    def test_lookup_skips_nil_values(self) -> None:
        """The first environment with a non-nil value wins."""
        first = {"x": None}
        second = {"x": 1}
        chain = EnvironmentChain([first, second])
        evaluator = LazyValueEvaluator(Context())
        assert chain.lookup("x", evaluator) == (second, 1)

    def test_lookup_miss(self) -> None:
        """A miss returns (None, None)."""
        chain = EnvironmentChain([{"a": 1}])
        evaluator = LazyValueEvaluator(Context())
        assert chain.lookup("b", evaluator) == (None, None)

    def test_false_counts_as_present(self) -> None:
        """False is a value, not an absence."""
        env = {"flag": False}
        chain = EnvironmentChain([env, {"flag": True}])
        evaluator = LazyValueEvaluator(Context())
        assert chain.lookup("flag", evaluator) == (env, False)
