"""Literal token grammar.

Recognizes the literal forms that may appear wherever a variable may:

    nil, null, ""           -> None
    true, false             -> bool
    blank, empty            -> LiteralMarker (left for comparison logic)
    'text', "text"          -> str (quotes stripped, no escapes)
    -?digits                -> int
    (a..b)                  -> range, inclusive of b
    -?digit[digits.]+       -> float (must contain a '.')

Forms are tried in exactly that order, so integers win over floats and quoted
strings win over ranges. Ranges require explicit parentheses.

Matching uses explicit character tests rather than regular expressions.
Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from math import isfinite

from liquidcore.constants import LITERAL_NIL_TOKENS

from .value_types import LiteralMarker

__all__ = ["NOT_A_LITERAL", "LiteralMarker", "NotALiteral", "resolve_literal", "to_integer"]

_DIGITS = frozenset("0123456789")
_FLOAT_CHARS = frozenset("0123456789.")

# Digits per int() call; stays under the interpreter's int/str conversion limit.
_INT_CHUNK_DIGITS = 1000

_KEYWORDS: dict[str, object] = {
    "true": True,
    "false": False,
    "blank": LiteralMarker.BLANK,
    "empty": LiteralMarker.EMPTY,
}


class NotALiteral(Enum):
    """Sentinel type for tokens that are not literals."""

    NOT_A_LITERAL = "NOT_A_LITERAL"

    def __repr__(self) -> str:
        return "NOT_A_LITERAL"


NOT_A_LITERAL = NotALiteral.NOT_A_LITERAL


def resolve_literal(
    token: str | None,
    resolve: Callable[[str], object] | None = None,
) -> object:
    """Resolve a raw token to a literal value.

    Args:
        token: Raw identifier text from template markup
        resolve: Resolver for range bounds. Bounds go through the full
            literal-or-variable pipeline, so Context passes its own resolve.
            Defaults to literal-only resolution, treating variables as nil.

    Returns:
        The literal value, or NOT_A_LITERAL when the token should be
        resolved as a variable path.

    Example:
        >>> resolve_literal("42")
        42
        >>> resolve_literal("(1..3)")
        range(1, 4)
        >>> resolve_literal("product.title")
        NOT_A_LITERAL
    """
    if token is None or token in LITERAL_NIL_TOKENS:
        return None

    if token in _KEYWORDS:
        return _KEYWORDS[token]

    if _is_quoted(token):
        return token[1:-1]

    if _is_integer(token):
        return _parse_int(token)

    bounds = _range_bounds(token)
    if bounds is not None:
        resolver = resolve if resolve is not None else _resolve_literal_only
        start, stop = bounds
        return range(to_integer(resolver(start)), to_integer(resolver(stop)) + 1)

    if _is_float(token):
        return _leading_float(token)

    return NOT_A_LITERAL


def to_integer(value: object) -> int:
    """Coerce a resolved range bound to an integer.

    Integers pass through, floats truncate, and strings contribute their
    leading integer prefix. Anything else, including nil, booleans, and
    non-finite floats, counts as 0.
    """
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if isfinite(value) else 0
    if isinstance(value, str):
        return _leading_int(value)
    return 0


def _resolve_literal_only(token: str) -> object:
    value = resolve_literal(token)
    return None if value is NOT_A_LITERAL else value


def _is_quoted(token: str) -> bool:
    return len(token) >= 2 and token[0] in "'\"" and token[-1] == token[0]


def _is_integer(token: str) -> bool:
    body = token.removeprefix("-")
    return bool(body) and all(c in _DIGITS for c in body)


def _is_float(token: str) -> bool:
    body = token.removeprefix("-")
    return (
        len(body) >= 2
        and body[0] in _DIGITS
        and "." in body
        and all(c in _FLOAT_CHARS for c in body)
    )


def _range_bounds(token: str) -> tuple[str, str] | None:
    """Split ``(a..b)`` into its bound tokens.

    The split is taken at the last ``..`` that leaves both sides non-empty,
    and neither side may contain whitespace.
    """
    if len(token) < 6 or token[0] != "(" or token[-1] != ")":
        return None
    inner = token[1:-1]
    if any(c.isspace() for c in inner):
        return None
    idx = inner.rfind("..")
    while idx != -1:
        start, stop = inner[:idx], inner[idx + 2 :]
        if start and stop:
            return start, stop
        idx = inner.rfind("..", 0, idx + 1)
    return None


def _leading_float(token: str) -> float:
    """Parse the leading ``-?digits[.digits]`` prefix (``1.2.3`` -> 1.2)."""
    sign = "-" if token.startswith("-") else ""
    body = token.removeprefix("-")
    integral, _, rest = body.partition(".")
    fraction = ""
    for c in rest:
        if c not in _DIGITS:
            break
        fraction += c
    return float(f"{sign}{integral}.{fraction or '0'}")


def _leading_int(text: str) -> int:
    """Parse the leading integer prefix of text, 0 when there is none."""
    text = text.lstrip()
    sign = ""
    if text[:1] in ("-", "+"):
        sign, text = text[0], text[1:]
    digits = ""
    for c in text:
        if c not in _DIGITS:
            break
        digits += c
    return _parse_int(f"{sign}{digits}") if digits else 0


def _parse_int(text: str) -> int:
    """Convert an optionally signed run of ASCII digits, of any length, to int."""
    sign = text[:1] if text[:1] in ("-", "+") else ""
    digits = text[len(sign) :]
    value = 0
    for start in range(0, len(digits), _INT_CHUNK_DIGITS):
        chunk = digits[start : start + _INT_CHUNK_DIGITS]
        value = value * 10 ** len(chunk) + int(chunk)
    return -value if sign == "-" else value
