"""
AllocationValidator - cross-checks the combined footprint against RAM.

Sums the projected memory of the worker pool, the database (including
per-connection buffers at full connection count), the cache and the OS
headroom, and emits diagnostics. FATAL diagnostics make the orchestrator
abort; WARNING diagnostics are attached to an otherwise valid plan.

Example:
    validator = AllocationValidator(policy)
    footprint, diagnostics = validator.validate(facts, 10, 10, pool, db, cache)
"""

from __future__ import annotations

import logging
from typing import List, Tuple

from ..config.policy import TuningPolicy
from ..resources.data_models import (
    CacheBudget,
    DatabaseBudget,
    Diagnostic,
    FootprintBreakdown,
    HardwareFacts,
    Severity,
    WorkerPoolSpec,
)

logger = logging.getLogger(__name__)


class AllocationValidator:
    """Validates a computed allocation against the host's physical memory.

    Attributes:
        policy: Policy supplying headroom, worker size and warning thresholds.
    """

    def __init__(self, policy: TuningPolicy) -> None:
        self.policy = policy

    def check_hardware(self, facts: HardwareFacts) -> List[Diagnostic]:
        """Return FATAL diagnostics for hardware facts the planners cannot use."""
        diagnostics: List[Diagnostic] = []
        if facts.ram_mb <= 0:
            diagnostics.append(Diagnostic(
                severity=Severity.FATAL,
                code="RAM_UNKNOWN",
                message=f"System RAM detection failed (ram_mb={facts.ram_mb})",
                data={"ram_mb": facts.ram_mb},
            ))
        if facts.cores < 1:
            diagnostics.append(Diagnostic(
                severity=Severity.FATAL,
                code="CORES_UNKNOWN",
                message=f"CPU core detection failed (cores={facts.cores})",
                data={"cores": facts.cores},
            ))
        return diagnostics

    def footprint(
        self,
        facts: HardwareFacts,
        effective_tenants: int,
        worker_pool: WorkerPoolSpec,
        database: DatabaseBudget,
        cache: CacheBudget,
    ) -> FootprintBreakdown:
        """Project the memory of every co-resident service."""
        return FootprintBreakdown(
            worker_total_mb=worker_pool.total_mb(self.policy.avg_process_mb, effective_tenants),
            database_mb=database.footprint_mb,
            cache_mb=cache.max_memory_mb,
            headroom_mb=self.policy.os_headroom_mb,
            ram_mb=facts.ram_mb,
        )

    def validate(
        self,
        facts: HardwareFacts,
        tenant_count: int,
        effective_tenants: int,
        worker_pool: WorkerPoolSpec,
        database: DatabaseBudget,
        cache: CacheBudget,
    ) -> Tuple[FootprintBreakdown, List[Diagnostic]]:
        """Cross-check the allocation.

        Args:
            facts: Hardware facts of the host.
            tenant_count: Raw tenant count (may be zero).
            effective_tenants: ``max(1, tenant_count)``.
            worker_pool: Per-tenant worker pool spec.
            database: Database budget.
            cache: Cache budget.

        Returns:
            The footprint breakdown and the diagnostics found, FATAL ones first.
        """
        diagnostics = self.check_hardware(facts)
        footprint = self.footprint(facts, effective_tenants, worker_pool, database, cache)

        if diagnostics:
            # Without usable RAM the remaining checks are meaningless
            return footprint, diagnostics

        if footprint.total_mb > facts.ram_mb:
            diagnostics.append(Diagnostic(
                severity=Severity.WARNING,
                code="OVERCOMMIT",
                message=(
                    f"Projected footprint {footprint.total_mb}MB exceeds system RAM "
                    f"{facts.ram_mb}MB by {footprint.overshoot_mb}MB"
                ),
                data={
                    "footprint_mb": footprint.total_mb,
                    "ram_mb": facts.ram_mb,
                    "overshoot_mb": footprint.overshoot_mb,
                },
            ))

        if (
            facts.ram_mb <= self.policy.low_memory_threshold_mb
            and tenant_count > self.policy.crowded_tenant_threshold
        ):
            diagnostics.append(Diagnostic(
                severity=Severity.WARNING,
                code="LOW_RAM_MANY_TENANTS",
                message=f"Running {tenant_count} tenants on {facts.ram_mb}MB of RAM may cause issues",
                data={"tenant_count": tenant_count, "ram_mb": facts.ram_mb},
            ))

        if cache.max_memory_mb < self.policy.cache_critical_mb:
            diagnostics.append(Diagnostic(
                severity=Severity.WARNING,
                code="CACHE_CRITICALLY_LOW",
                message=f"Cache memory allocation is critically low ({cache.max_memory_mb}MB)",
                data={"cache_mb": cache.max_memory_mb},
            ))

        logger.debug(
            f"Footprint {footprint.total_mb}MB of {facts.ram_mb}MB "
            f"({len(diagnostics)} diagnostics)"
        )
        return footprint, diagnostics
