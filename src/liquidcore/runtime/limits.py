"""Resource accounting for a single render.

Tracks three usage counters against optional ceilings:

    render_length_current  vs  render_length_limit
    render_score_current   vs  render_score_limit
    assign_score_current   vs  assign_score_limit

The limiter is advisory. It never interrupts evaluation; the render loop
polls limits_reached() after each unit of work and aborts on its own.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, fields

from liquidcore.constants import RESOURCE_COUNTERS, RESOURCE_LIMIT_KEYS
from liquidcore.diagnostics import ErrorTemplate, LiquidArgumentError

from .value_types import LiteralMarker

__all__ = ["ResourceLimiter", "ResourceLimits"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ResourceLimits:
    """Immutable ceilings for render resource usage.

    Every field defaults to None, meaning unlimited. ``ResourceLimits()``
    therefore never reports a limit as reached.

    Attributes:
        render_length_limit: Maximum rendered output length
        render_score_limit: Maximum render work score
        assign_score_limit: Maximum size of assigned values

    Example:
        >>> limits = ResourceLimits(render_score_limit=10_000)
        >>> context = Context(resource_limits=limits)
    """

    render_length_limit: int | None = None
    render_score_limit: int | None = None
    assign_score_limit: int | None = None

    def __post_init__(self) -> None:
        """Validate configured ceilings.

        Raises:
            ValueError: If any configured limit is negative.
        """
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not None and value < 0:
                msg = f"{f.name} must be non-negative"
                raise ValueError(msg)

    @classmethod
    def from_mapping(cls, config: Mapping[str, int | None] | None) -> ResourceLimits:
        """Build limits from a plain mapping of limit names.

        Unrecognized keys are ignored with a warning.
        """
        if not config:
            return cls()
        known: dict[str, int | None] = {}
        for key, value in config.items():
            if key in RESOURCE_LIMIT_KEYS:
                known[key] = value
            else:
                logger.warning("Ignoring unrecognized resource limit '%s'", key)
        return cls(**known)

    def limit_for(self, limit_key: str) -> int | None:
        """Return the ceiling for a limit name."""
        return getattr(self, limit_key)


@dataclass(slots=True)
class ResourceLimiter:
    """Usage counters checked against ResourceLimits.

    Counters start at zero and only grow during one render.

    Attributes:
        limits: Configured ceilings
        counters: Current usage by counter name (internal)
    """

    limits: ResourceLimits = field(default_factory=ResourceLimits)
    counters: dict[str, int] = field(
        default_factory=lambda: dict.fromkeys(RESOURCE_COUNTERS, 0)
    )
    _reported: set[str] = field(default_factory=set)

    def increment_used(self, key: str, value: object) -> None:
        """Charge the cost of value to the named counter.

        Strings, sequences, and mappings cost their length. Ranges and the
        blank/empty markers are scalars and, like every other value, cost 1.

        Raises:
            LiquidArgumentError: If key is not a known counter name
        """
        if key not in self.counters:
            raise LiquidArgumentError(
                ErrorTemplate.unknown_resource_counter(key, list(RESOURCE_COUNTERS))
            )
        if isinstance(value, (range, LiteralMarker)):
            self.counters[key] += 1
        elif isinstance(value, (str, Sequence, Mapping)):
            self.counters[key] += len(value)
        else:
            self.counters[key] += 1

    def used(self, key: str) -> int:
        """Current value of a counter."""
        return self.counters[key]

    def limits_reached(self) -> bool:
        """Check whether any configured ceiling has been strictly exceeded."""
        reached = False
        for counter, limit_key in RESOURCE_COUNTERS.items():
            limit = self.limits.limit_for(limit_key)
            if limit is not None and self.counters[counter] > limit:
                if counter not in self._reported:
                    self._reported.add(counter)
                    logger.info(
                        "Resource limit exceeded: %s=%d > %s=%d",
                        counter,
                        self.counters[counter],
                        limit_key,
                        limit,
                    )
                reached = True
        return reached

    def as_dict(self) -> dict[str, int | None]:
        """Snapshot of configured limits and current counters."""
        snapshot: dict[str, int | None] = {
            limit_key: self.limits.limit_for(limit_key)
            for limit_key in RESOURCE_COUNTERS.values()
        }
        snapshot.update(self.counters)
        return snapshot
