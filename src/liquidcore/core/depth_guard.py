"""Depth limit clamping for recursion protection.

Scope nesting maps onto Python call depth when tags render nested blocks,
so a configured scope ceiling must stay below the interpreter recursion
limit.

Thread-safe: pure function, no shared state.
Python 3.13+.
"""

from __future__ import annotations

import logging
import sys

__all__ = ["depth_clamp"]

logger = logging.getLogger(__name__)


def depth_clamp(requested_depth: int, reserve_frames: int = 50) -> int:
    """Clamp a scope depth ceiling against the Python recursion limit.

    Args:
        requested_depth: Desired maximum number of scopes
        reserve_frames: Stack frames kept free for the render loop (default: 50)

    Returns:
        requested_depth, or the largest safe depth when it is too high

    Example:
        >>> sys.setrecursionlimit(200)
        >>> depth_clamp(100)
        100
        >>> depth_clamp(500)
        150
    """
    recursion_limit = sys.getrecursionlimit()
    safe_depth = recursion_limit - reserve_frames
    if requested_depth <= safe_depth:
        return requested_depth
    logger.warning(
        "Scope depth %d exceeds what recursion limit %d allows; using %d",
        requested_depth,
        recursion_limit,
        safe_depth,
    )
    return safe_depth
