"""
Allocation orchestration.

Composes the worker pool sizer, the database and cache planners and the
validator into one deterministic computation:

    (HardwareFacts, TuningPolicy, tenant_count) -> AllocationPlan

Every call rebuilds the plan from its inputs; nothing is cached or shared
between calls, so identical inputs always yield equal plans.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from ..config.policy import TuningPolicy
from ..exceptions import AllocationAbortedError, ConfigError, PlanningContext
from ..resources.data_models import (
    AllocationPlan,
    CacheBudget,
    DatabaseBudget,
    Diagnostic,
    HardwareFacts,
    Severity,
    effective_tenant_count,
)
from .cache import CacheBudgetPlanner
from .database import DatabaseBudgetPlanner
from .sources import budget_source_mb, planner_order
from .validator import AllocationValidator
from .worker_pool import ProcessPoolSizer

logger = logging.getLogger(__name__)


class AllocationOrchestrator:
    """Runs the planning pipeline for one immutable policy."""

    def __init__(self, policy: TuningPolicy):
        self.policy = policy
        self.pool_sizer = ProcessPoolSizer(policy)
        self.database_planner = DatabaseBudgetPlanner(policy)
        self.cache_planner = CacheBudgetPlanner(policy)
        self.validator = AllocationValidator(policy)

    def plan(self, facts: HardwareFacts, tenant_count: int) -> AllocationPlan:
        """Compute an allocation plan.

        Raises:
            ConfigError: invalid policy or negative tenant count.
            AllocationAbortedError: a FATAL diagnostic was raised.
        """
        context = self._context(facts, tenant_count)

        if tenant_count < 0:
            raise ConfigError(
                "Invalid tenant count",
                problems=[f"tenant_count must be non-negative (got {tenant_count})"],
                context=context,
            )
        try:
            self.policy.check()
        except ConfigError as e:
            e.context = context
            raise

        diagnostics: List[Diagnostic] = []
        effective_tenants = effective_tenant_count(tenant_count)
        if tenant_count == 0:
            diagnostics.append(Diagnostic(
                severity=Severity.INFO,
                code="NO_ACTIVE_TENANTS",
                message="No active tenants; sizing for a single tenant",
            ))
        if not self.policy.auto_tune:
            diagnostics.append(Diagnostic(
                severity=Severity.INFO,
                code="AUTO_TUNE_DISABLED",
                message="Automatic tuning is off; using static sizes",
                data={
                    "max_children": self.policy.static_max_children,
                    "db_mb": self.policy.static_db_mb,
                    "cache_mb": self.policy.static_cache_mb,
                },
            ))

        try:
            worker_pool = self.pool_sizer.size(facts, effective_tenants)
        except ConfigError as e:
            e.context = context
            raise
        worker_total_mb = worker_pool.total_mb(self.policy.avg_process_mb, effective_tenants)
        available_mb = budget_source_mb(facts, self.policy, worker_total_mb)

        database: Optional[DatabaseBudget] = None
        cache: Optional[CacheBudget] = None
        for step in planner_order(self.policy):
            if step == "database":
                database, found = self.database_planner.plan(facts, tenant_count, available_mb)
            else:
                cache, found = self.cache_planner.plan(facts, available_mb)
            diagnostics.extend(found)

        footprint, found = self.validator.validate(
            facts, tenant_count, effective_tenants, worker_pool, database, cache
        )
        diagnostics.extend(found)

        fatal = [d for d in diagnostics if d.is_fatal]
        if fatal:
            logger.error(
                f"Allocation aborted: {', '.join(d.code for d in fatal)}",
                extra={"extra_data": {"context": context.to_dict()}},
            )
            raise AllocationAbortedError(fatal, context=context)

        for diagnostic in diagnostics:
            if diagnostic.is_warning:
                logger.warning(
                    f"[{diagnostic.code}] {diagnostic.message}",
                    extra={"extra_data": {"code": diagnostic.code, **diagnostic.data}},
                )

        plan = AllocationPlan(
            facts=facts,
            tenant_count=tenant_count,
            effective_tenant_count=effective_tenants,
            budget_mode=self.policy.budget_mode.value,
            available_mb=available_mb,
            auto_tune=self.policy.auto_tune,
            worker_pool=worker_pool,
            database=database,
            cache=cache,
            footprint=footprint,
            diagnostics=tuple(diagnostics),
        )
        logger.info(
            f"Planned {effective_tenants} tenant(s) on {facts.ram_mb}MB/{facts.cores} cores: "
            f"workers={worker_pool.max_children}/tenant db={database.budget_mb}MB "
            f"cache={cache.max_memory_mb}MB footprint={footprint.total_mb}MB",
            extra={"extra_data": {"correlation_id": context.correlation_id}},
        )
        return plan

    def _context(self, facts: HardwareFacts, tenant_count: int) -> PlanningContext:
        return PlanningContext(
            ram_mb=facts.ram_mb,
            cores=facts.cores,
            tenant_count=tenant_count,
            budget_mode=self.policy.budget_mode.value,
        )


def compute_allocation(
    facts: HardwareFacts,
    policy: TuningPolicy,
    tenant_count: int,
) -> AllocationPlan:
    """Pure entry point: compute a fresh plan for the given inputs."""
    return AllocationOrchestrator(policy).plan(facts, tenant_count)
