"""Tuning policy and tier rule models.

One immutable ``TuningPolicy`` value is built per deployment and passed
explicitly to the orchestrator.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from ..exceptions import ConfigError


class BudgetMode(str, Enum):
    """Where the database and cache budgets are drawn from.

    ``remaining``: share of RAM left after OS headroom and the worker pool.
    ``reserve_slice``: share of the OS headroom minus a fixed OS overhead,
    independent of worker pool sizing.
    """

    REMAINING = "remaining"
    RESERVE_SLICE = "reserve_slice"


class TierAction(str, Enum):
    CAP = "cap"
    SCALE = "scale"


# =============================================================================
# Tier Rules
# =============================================================================

class TierRule(BaseModel):
    """One step of the per-tenant worker staircase.

    A rule matches when every condition it sets holds (``ram_ceiling_mb``
    as ``ram_mb <= ceiling``, ``min_cores`` as ``cores >= min``). Rules are
    evaluated top-down and only the first match is applied.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(description="Rule name reported in the plan")
    action: TierAction = Field(description="cap: limit per-tenant workers; scale: multiply them")
    ram_ceiling_mb: Optional[int] = Field(default=None, description="Match when ram_mb <= this value")
    min_cores: Optional[int] = Field(default=None, description="Match when cores >= this value")
    limit: Optional[int] = Field(default=None, description="Per-tenant cap for cap rules")
    factor: int = Field(default=2, description="Multiplier for scale rules")

    def matches(self, ram_mb: int, cores: int) -> bool:
        if self.ram_ceiling_mb is not None and ram_mb > self.ram_ceiling_mb:
            return False
        if self.min_cores is not None and cores < self.min_cores:
            return False
        return True

    def apply(self, per_tenant: int, total_workers: int, effective_tenants: int) -> int:
        """Return the adjusted per-tenant worker count."""
        if self.action == TierAction.CAP:
            return min(self.limit, per_tenant)
        ceiling = math.floor(total_workers / effective_tenants)
        return min(per_tenant * self.factor, ceiling)

    def problems(self) -> List[str]:
        issues = []
        if self.action == TierAction.CAP and (self.limit is None or self.limit < 1):
            issues.append(f"tier rule '{self.name}': cap rules need a positive limit")
        if self.action == TierAction.SCALE and self.factor < 1:
            issues.append(f"tier rule '{self.name}': factor must be at least 1")
        if self.ram_ceiling_mb is not None and self.ram_ceiling_mb < 0:
            issues.append(f"tier rule '{self.name}': ram_ceiling_mb must be non-negative")
        if self.min_cores is not None and self.min_cores < 0:
            issues.append(f"tier rule '{self.name}': min_cores must be non-negative")
        return issues


DEFAULT_TIER_RULES: Tuple[TierRule, ...] = (
    TierRule(name="small-host", action=TierAction.CAP, ram_ceiling_mb=4096, limit=5),
    TierRule(name="medium-host", action=TierAction.CAP, ram_ceiling_mb=8192, limit=10),
    TierRule(name="many-cores", action=TierAction.SCALE, min_cores=8, factor=2),
)


# =============================================================================
# Tuning Policy
# =============================================================================

_RATIO_FIELDS = (
    "db_ratio",
    "cache_ratio",
    "buffer_pool_ratio",
    "log_file_ratio",
    "query_cache_ratio",
)

_CLAMP_PAIRS = (
    ("min_db_mb", "max_db_mb"),
    ("min_cache_mb", "max_cache_mb"),
)

_NON_NEGATIVE_FIELDS = (
    "os_headroom_mb",
    "remaining_floor_mb",
    "os_overhead_mb",
    "reserve_floor_mb",
    "buffer_pool_ceiling_mb",
    "log_file_ceiling_mb",
    "query_cache_ceiling_mb",
    "per_connection_buffer_mb",
    "base_connections",
    "per_tenant_connections",
    "per_core_connections",
    "table_open_cache_base",
    "table_open_cache_increment",
    "hard_client_cap",
    "tcp_backlog_per_core",
    "tcp_backlog_ceiling",
    "static_db_mb",
    "static_cache_mb",
)


class TuningPolicy(BaseModel):
    """Immutable allocation policy for one deployment."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Headroom and worker sizing
    os_headroom_mb: int = Field(default=2048, description="RAM reserved for the OS and infrastructure processes")
    avg_process_mb: int = Field(default=70, description="Average resident memory of one application worker")
    tier_rules: Tuple[TierRule, ...] = Field(default=DEFAULT_TIER_RULES, description="Ordered worker staircase, first match wins")

    # Budget source
    budget_mode: BudgetMode = Field(default=BudgetMode.REMAINING, description="Where database/cache budgets are drawn from")
    remaining_floor_mb: int = Field(default=256, description="Floor of the remaining-capacity source")
    os_overhead_mb: int = Field(default=1024, description="Part of the headroom the OS keeps for itself (reserve_slice)")
    reserve_floor_mb: int = Field(default=512, description="Floor of the reserve-slice source")

    # Static sizes used when automatic tuning is switched off
    auto_tune: bool = Field(default=True, description="Derive sizes from the hardware; false pins the static_* values")
    static_max_children: int = Field(default=10, description="Per-tenant worker limit when auto_tune is off")
    static_db_mb: int = Field(default=128, description="Database budget when auto_tune is off")
    static_cache_mb: int = Field(default=256, description="Cache ceiling when auto_tune is off")

    # Database
    db_ratio: float = Field(default=0.30, description="Share of the budget source given to the database")
    min_db_mb: int = Field(default=256, description="Lower clamp of the database budget")
    max_db_mb: int = Field(default=32768, description="Upper clamp of the database budget")
    buffer_pool_ratio: float = Field(default=0.70, description="Share of the database budget for the buffer pool")
    buffer_pool_ceiling_mb: int = Field(default=16384, description="Buffer pool ceiling")
    log_file_ratio: float = Field(default=0.25, description="Redo log size as a share of the buffer pool")
    log_file_ceiling_mb: int = Field(default=2048, description="Redo log ceiling")
    max_buffer_pool_instances: int = Field(default=64, description="Upper bound of buffer pool instances")
    query_cache_ratio: float = Field(default=0.05, description="Share of the database budget for the query cache")
    query_cache_ceiling_mb: int = Field(default=128, description="Query cache ceiling")
    per_connection_buffer_mb: int = Field(default=5, description="Sort, read and join buffers of one connection")
    base_connections: int = Field(default=50, description="Connections reserved regardless of tenants")
    per_tenant_connections: int = Field(default=30, description="Connections added per tenant")
    per_core_connections: int = Field(default=10, description="Connections added per CPU core")
    table_open_cache_base: int = Field(default=2000, description="Table open cache before tenant increments")
    table_open_cache_increment: int = Field(default=200, description="Table open cache added per tenant")

    # Cache
    cache_ratio: float = Field(default=0.20, description="Share of the budget source given to the cache")
    min_cache_mb: int = Field(default=64, description="Lower clamp of the cache ceiling")
    max_cache_mb: int = Field(default=2048, description="Upper clamp of the cache ceiling")
    hard_client_cap: int = Field(default=10000, description="Absolute cache client limit")
    tcp_backlog_per_core: int = Field(default=512, description="Cache TCP backlog per core")
    tcp_backlog_ceiling: int = Field(default=2048, description="Cache TCP backlog ceiling")

    # Warning thresholds
    low_memory_threshold_mb: int = Field(default=4096, description="Hosts at or below this RAM are low-memory")
    crowded_tenant_threshold: int = Field(default=3, description="More tenants than this on a low-memory host is a warning")
    cache_critical_mb: int = Field(default=64, description="Cache ceilings below this are flagged")

    def problems(self) -> List[str]:
        """Collect every violation instead of stopping at the first one."""
        issues: List[str] = []

        if self.avg_process_mb <= 0:
            issues.append(f"avg_process_mb must be positive (got {self.avg_process_mb})")

        for name in _RATIO_FIELDS:
            value = getattr(self, name)
            if not 0.0 < value < 1.0:
                issues.append(f"{name} must be strictly between 0 and 1 (got {value})")

        for low_name, high_name in _CLAMP_PAIRS:
            low, high = getattr(self, low_name), getattr(self, high_name)
            if low < 0:
                issues.append(f"{low_name} must be non-negative (got {low})")
            if high < 0:
                issues.append(f"{high_name} must be non-negative (got {high})")
            if low > high:
                issues.append(f"{low_name} ({low}) exceeds {high_name} ({high})")

        for name in _NON_NEGATIVE_FIELDS:
            value = getattr(self, name)
            if value < 0:
                issues.append(f"{name} must be non-negative (got {value})")

        if self.max_buffer_pool_instances < 1:
            issues.append("max_buffer_pool_instances must be at least 1")

        if self.static_max_children < 1:
            issues.append(f"static_max_children must be at least 1 (got {self.static_max_children})")

        for rule in self.tier_rules:
            issues.extend(rule.problems())

        return issues

    def check(self) -> None:
        """Raise ``ConfigError`` when the policy cannot be used."""
        issues = self.problems()
        if issues:
            raise ConfigError("Invalid tuning policy", problems=issues)
