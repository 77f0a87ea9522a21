"""Core utilities shared across the runtime layer.

Exports:
    depth_clamp: Clamp a depth ceiling against the interpreter recursion limit

Python 3.13+.
"""

from .depth_guard import depth_clamp

__all__ = ["depth_clamp"]
