"""
Data models for allocation planning.

This module contains the dataclasses passed between the planners, the
validator and the orchestrator. It has no internal dependencies to serve
as a stable foundation layer. Every value is frozen: a plan is rebuilt
from scratch on each computation and never patched.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class Severity(str, Enum):
    """Diagnostic severity."""

    INFO = "info"
    WARNING = "warning"
    FATAL = "fatal"


@dataclass(frozen=True)
class HardwareFacts:
    """Total RAM and CPU cores of the host, probed or supplied statically."""

    ram_mb: int
    cores: int


@dataclass(frozen=True)
class Diagnostic:
    """A single finding attached to a plan (or carried by an aborted run)."""

    severity: Severity
    code: str
    message: str
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_fatal(self) -> bool:
        return self.severity == Severity.FATAL

    @property
    def is_warning(self) -> bool:
        return self.severity == Severity.WARNING


@dataclass(frozen=True)
class WorkerPoolSpec:
    """Per-tenant worker pool sizing; the same spec is applied to every tenant."""

    max_children: int
    start_servers: int
    min_spare: int
    max_spare: int
    available_mb: int
    total_workers: int
    tier_rule: Optional[str] = None  # name of the tier rule that matched

    def total_mb(self, avg_process_mb: int, effective_tenants: int) -> int:
        """Projected worker memory across all tenants."""
        return self.max_children * avg_process_mb * effective_tenants


@dataclass(frozen=True)
class DatabaseBudget:
    """Database engine memory and connection settings."""

    budget_mb: int
    buffer_pool_mb: int
    log_file_mb: int
    buffer_pool_instances: int
    max_connections: int
    thread_cache_size: int
    table_open_cache: int
    query_cache_mb: int
    tmp_table_size_mb: int
    max_heap_table_size_mb: int
    per_connection_buffer_mb: int
    clamped_at_floor: bool = False

    @property
    def footprint_mb(self) -> int:
        """Global budget plus per-connection buffers at full connection count."""
        return self.budget_mb + self.max_connections * self.per_connection_buffer_mb


@dataclass(frozen=True)
class CacheBudget:
    """In-memory cache ceiling and client limits."""

    max_memory_mb: int
    max_clients: int
    tcp_backlog: int
    clamped_at_floor: bool = False


@dataclass(frozen=True)
class FootprintBreakdown:
    """Projected memory of every co-resident service against total RAM."""

    worker_total_mb: int
    database_mb: int
    cache_mb: int
    headroom_mb: int
    ram_mb: int

    @property
    def total_mb(self) -> int:
        return self.worker_total_mb + self.database_mb + self.cache_mb + self.headroom_mb

    @property
    def overshoot_mb(self) -> int:
        return max(0, self.total_mb - self.ram_mb)


@dataclass(frozen=True)
class AllocationPlan:
    """Complete result of one allocation computation."""

    facts: HardwareFacts
    tenant_count: int
    effective_tenant_count: int
    budget_mode: str
    available_mb: int
    worker_pool: WorkerPoolSpec
    database: DatabaseBudget
    cache: CacheBudget
    footprint: FootprintBreakdown
    diagnostics: Tuple[Diagnostic, ...] = ()
    auto_tune: bool = True

    @property
    def warnings(self) -> Tuple[Diagnostic, ...]:
        return tuple(d for d in self.diagnostics if d.is_warning)

    @property
    def has_warnings(self) -> bool:
        return any(d.is_warning for d in self.diagnostics)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for JSON output and external configuration writers."""
        data = asdict(self)
        data["database"]["footprint_mb"] = self.database.footprint_mb
        data["footprint"]["total_mb"] = self.footprint.total_mb
        data["footprint"]["overshoot_mb"] = self.footprint.overshoot_mb
        data["diagnostics"] = [
            {
                "severity": d.severity.value,
                "code": d.code,
                "message": d.message,
                "data": dict(d.data),
            }
            for d in self.diagnostics
        ]
        return data


def effective_tenant_count(tenant_count: int) -> int:
    """Tenant count used in every division; never below one."""
    return max(1, tenant_count)
