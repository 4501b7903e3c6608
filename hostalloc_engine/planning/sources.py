"""
Budget source selection.

The database and cache planners both draw from one ``available_mb`` value
whose derivation depends on the policy's ``budget_mode``:

- ``remaining``: ``max(remaining_floor_mb, ram_mb - worker_total_mb - os_headroom_mb)``
- ``reserve_slice``: ``max(reserve_floor_mb, os_headroom_mb - os_overhead_mb)``

There is no implicit default between the two; the policy always names
the mode.
"""

from __future__ import annotations

from typing import Tuple

from ..config.policy import BudgetMode, TuningPolicy
from ..resources.data_models import HardwareFacts

# Planner order per mode. Both planners read the same source value.
PLANNER_ORDER = {
    BudgetMode.REMAINING: ("database", "cache"),
    BudgetMode.RESERVE_SLICE: ("cache", "database"),
}


def budget_source_mb(facts: HardwareFacts, policy: TuningPolicy, worker_total_mb: int) -> int:
    """RAM available to the database and cache planners."""
    if policy.budget_mode == BudgetMode.RESERVE_SLICE:
        return max(policy.reserve_floor_mb, policy.os_headroom_mb - policy.os_overhead_mb)
    return max(policy.remaining_floor_mb, facts.ram_mb - worker_total_mb - policy.os_headroom_mb)


def planner_order(policy: TuningPolicy) -> Tuple[str, ...]:
    return PLANNER_ORDER[policy.budget_mode]


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))
