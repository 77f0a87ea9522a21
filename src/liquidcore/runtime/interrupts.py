"""Control-flow interrupts for nested block evaluation.

Block tags such as break and continue push an interrupt instead of raising,
and enclosing loops pop it once handled. The stack lets a signal cross any
number of nested blocks without a non-local exit.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass, field

__all__ = ["BreakInterrupt", "ContinueInterrupt", "Interrupt", "InterruptStack"]


@dataclass(frozen=True, slots=True)
class Interrupt:
    """Signal pushed by a block tag and consumed by an enclosing block."""

    message: str = "interrupt"


@dataclass(frozen=True, slots=True)
class BreakInterrupt(Interrupt):
    """Stop the innermost enclosing loop."""


@dataclass(frozen=True, slots=True)
class ContinueInterrupt(Interrupt):
    """Skip to the next iteration of the innermost enclosing loop."""


@dataclass(slots=True)
class InterruptStack:
    """Last-in-first-out store of unhandled interrupts."""

    _interrupts: list[Interrupt] = field(default_factory=list)

    def push(self, interrupt: Interrupt) -> None:
        """Push an interrupt; it is considered unhandled until popped."""
        self._interrupts.append(interrupt)

    def pop(self) -> Interrupt:
        """Pop the most recent interrupt.

        Raises:
            IndexError: If no interrupt is pending
        """
        return self._interrupts.pop()

    def has_interrupt(self) -> bool:
        """Are there any unhandled interrupts?"""
        return bool(self._interrupts)

    def __len__(self) -> int:
        return len(self._interrupts)

    def __bool__(self) -> bool:
        return self.has_interrupt()
