"""Shared constants for liquidcore.

Centralized configuration constants used across the diagnostics and runtime
packages. Placing constants here avoids circular imports and provides a
single source of truth.

Constants are grouped by domain:
- Depth limits: scope nesting protection
- Resource accounting: counter and limit key names
- Literal grammar: reserved tokens
- Error messages: inline message prefixes

Python 3.13+. Zero external dependencies.
"""

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Depth limits
    "MAX_SCOPE_DEPTH",
    # Resource accounting
    "RENDER_LENGTH_CURRENT",
    "RENDER_SCORE_CURRENT",
    "ASSIGN_SCORE_CURRENT",
    "RENDER_LENGTH_LIMIT",
    "RENDER_SCORE_LIMIT",
    "ASSIGN_SCORE_LIMIT",
    "RESOURCE_COUNTERS",
    "RESOURCE_LIMIT_KEYS",
    # Literal grammar
    "LITERAL_NIL_TOKENS",
    "PSEUDO_METHODS",
    # Error messages
    "SYNTAX_ERROR_PREFIX",
    "ERROR_PREFIX",
]

# ============================================================================
# DEPTH LIMITS
# ============================================================================

# Maximum number of scopes pushed above the outer scope of a ScopeStack.
# Exists to stop unbounded recursive includes or loops from exhausting the
# interpreter stack. Exceeding it raises StackDepthExceededError immediately.
MAX_SCOPE_DEPTH: int = 100

# ============================================================================
# RESOURCE ACCOUNTING
# ============================================================================

RENDER_LENGTH_CURRENT: str = "render_length_current"
RENDER_SCORE_CURRENT: str = "render_score_current"
ASSIGN_SCORE_CURRENT: str = "assign_score_current"

RENDER_LENGTH_LIMIT: str = "render_length_limit"
RENDER_SCORE_LIMIT: str = "render_score_limit"
ASSIGN_SCORE_LIMIT: str = "assign_score_limit"

# Counter name -> limit name. Order matters for limits_reached() reporting.
RESOURCE_COUNTERS: dict[str, str] = {
    RENDER_LENGTH_CURRENT: RENDER_LENGTH_LIMIT,
    RENDER_SCORE_CURRENT: RENDER_SCORE_LIMIT,
    ASSIGN_SCORE_CURRENT: ASSIGN_SCORE_LIMIT,
}

RESOURCE_LIMIT_KEYS: frozenset[str] = frozenset(RESOURCE_COUNTERS.values())

# ============================================================================
# LITERAL GRAMMAR
# ============================================================================

# Tokens that resolve to nil. None covers a missing token.
LITERAL_NIL_TOKENS: frozenset[str | None] = frozenset({None, "nil", "null", ""})

# Names that may be applied to a value as pseudo-methods in a variable path
# (e.g. products.size) when no key of that name exists.
PSEUDO_METHODS: frozenset[str] = frozenset({"size", "first", "last"})

# ============================================================================
# ERROR MESSAGES
# ============================================================================

# Prefixes for messages substituted inline into rendered output.
SYNTAX_ERROR_PREFIX: str = "Liquid syntax error: "
ERROR_PREFIX: str = "Liquid error: "
