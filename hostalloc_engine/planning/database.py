"""
Database engine budget planning.

Derives buffer pool, redo log, connection and cache-table settings from a
ratio of the shared budget source, clamped to the policy's bounds.
"""

from __future__ import annotations

import logging
import math
from typing import List, Tuple

from ..config.policy import TuningPolicy
from ..resources.data_models import DatabaseBudget, Diagnostic, HardwareFacts, Severity
from .sources import clamp

logger = logging.getLogger(__name__)

LARGE_BUDGET_MB = 2048
TMP_TABLE_LARGE_MB = 128
TMP_TABLE_SMALL_MB = 64


class DatabaseBudgetPlanner:
    """Derives database memory and connection settings."""

    def __init__(self, policy: TuningPolicy):
        self.policy = policy

    def plan(
        self,
        facts: HardwareFacts,
        tenant_count: int,
        available_mb: int,
    ) -> Tuple[DatabaseBudget, List[Diagnostic]]:
        p = self.policy
        diagnostics: List[Diagnostic] = []

        if p.auto_tune:
            raw_budget_mb = math.floor(available_mb * p.db_ratio)
            budget_mb = clamp(raw_budget_mb, p.min_db_mb, p.max_db_mb)
        else:
            raw_budget_mb = budget_mb = p.static_db_mb
        clamped_at_floor = p.auto_tune and raw_budget_mb < p.min_db_mb

        if clamped_at_floor:
            diagnostics.append(Diagnostic(
                severity=Severity.WARNING,
                code="DB_BUDGET_AT_FLOOR",
                message=(
                    f"Database budget raised from {raw_budget_mb}MB to its floor of "
                    f"{p.min_db_mb}MB; the host is under-provisioned"
                ),
                data={"raw_budget_mb": raw_budget_mb, "floor_mb": p.min_db_mb},
            ))

        buffer_pool_mb = min(p.buffer_pool_ceiling_mb, math.floor(budget_mb * p.buffer_pool_ratio))
        log_file_mb = min(p.log_file_ceiling_mb, math.floor(buffer_pool_mb * p.log_file_ratio))
        buffer_pool_instances = clamp(math.floor(buffer_pool_mb / 1024), 1, p.max_buffer_pool_instances)

        max_connections = (
            p.base_connections
            + tenant_count * p.per_tenant_connections
            + facts.cores * p.per_core_connections
        )
        tmp_table_size_mb = TMP_TABLE_LARGE_MB if budget_mb > LARGE_BUDGET_MB else TMP_TABLE_SMALL_MB

        budget = DatabaseBudget(
            budget_mb=budget_mb,
            buffer_pool_mb=buffer_pool_mb,
            log_file_mb=log_file_mb,
            buffer_pool_instances=buffer_pool_instances,
            max_connections=max_connections,
            thread_cache_size=math.floor(max_connections * 0.10),
            table_open_cache=p.table_open_cache_base + tenant_count * p.table_open_cache_increment,
            query_cache_mb=min(p.query_cache_ceiling_mb, math.floor(budget_mb * p.query_cache_ratio)),
            tmp_table_size_mb=tmp_table_size_mb,
            max_heap_table_size_mb=tmp_table_size_mb,
            per_connection_buffer_mb=p.per_connection_buffer_mb,
            clamped_at_floor=clamped_at_floor,
        )
        logger.debug(
            f"Database budget: source={available_mb}MB budget={budget_mb}MB "
            f"buffer_pool={buffer_pool_mb}MB max_connections={max_connections}"
        )
        return budget, diagnostics
