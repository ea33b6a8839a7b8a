"""Routing policies and the flood-aware edge cost function."""

from __future__ import annotations

from enum import Enum

from floodroute.server.flood.levels import FloodLevel

# Length multipliers applied by the safe policy; severe roads never get this far.
SAFE_MULTIPLIERS: dict[FloodLevel, float] = {
    FloodLevel.NORMAL: 1.0,
    FloodLevel.LOW: 1.5,
    FloodLevel.MEDIUM: 10.0,
}


class RoutingPolicy(str, Enum):
    """How flood severity influences the cost of a road."""

    OPTIMAL = "optimal"
    SAFE = "safe"

    @classmethod
    def from_value(cls, value: RoutingPolicy | str | None) -> RoutingPolicy:
        """Normalize arbitrary user input into a `RoutingPolicy`."""
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.OPTIMAL
        try:
            return cls(value.lower())
        except ValueError as exc:
            valid = ", ".join(policy.value for policy in cls)
            msg = f"Invalid routing mode: {value!r}. Expected one of {{{valid}}}."
            raise ValueError(msg) from exc


def is_passable(severity: int | None) -> bool:
    """Severe flooding closes a road under every policy."""
    return FloodLevel.coerce(severity) < FloodLevel.SEVERE


def edge_weight(
    length: float,
    severity: int | None,
    policy: RoutingPolicy = RoutingPolicy.OPTIMAL,
) -> float | None:
    """Return the traversal cost of a road, or `None` when it is impassable.

    `optimal` charges the physical length of any passable road. `safe`
    scales it by the severity multiplier so the search detours around
    flooded roads whenever the detour is cheaper than the penalty.
    """
    level = FloodLevel.coerce(severity)
    if level >= FloodLevel.SEVERE:
        return None
    if policy is RoutingPolicy.SAFE:
        return length * SAFE_MULTIPLIERS[level]
    return length
