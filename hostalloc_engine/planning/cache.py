"""In-memory cache budget planning."""

from __future__ import annotations

import logging
import math
from typing import List, Tuple

from ..config.policy import TuningPolicy
from ..resources.data_models import CacheBudget, Diagnostic, HardwareFacts, Severity
from .sources import clamp

logger = logging.getLogger(__name__)

# Assumed per-client accounting overhead, in bytes
CLIENT_OVERHEAD_BYTES = 20


class CacheBudgetPlanner:
    """Derives the cache memory ceiling and client limits."""

    def __init__(self, policy: TuningPolicy):
        self.policy = policy

    def plan(self, facts: HardwareFacts, available_mb: int) -> Tuple[CacheBudget, List[Diagnostic]]:
        p = self.policy
        diagnostics: List[Diagnostic] = []

        if p.auto_tune:
            raw_cache_mb = math.floor(available_mb * p.cache_ratio)
            cache_mb = clamp(raw_cache_mb, p.min_cache_mb, p.max_cache_mb)
        else:
            raw_cache_mb = cache_mb = p.static_cache_mb
        clamped_at_floor = p.auto_tune and raw_cache_mb < p.min_cache_mb

        if clamped_at_floor:
            diagnostics.append(Diagnostic(
                severity=Severity.WARNING,
                code="CACHE_BUDGET_AT_FLOOR",
                message=f"Cache ceiling raised from {raw_cache_mb}MB to its floor of {p.min_cache_mb}MB",
                data={"raw_cache_mb": raw_cache_mb, "floor_mb": p.min_cache_mb},
            ))

        budget = CacheBudget(
            max_memory_mb=cache_mb,
            max_clients=min(p.hard_client_cap, math.floor(cache_mb * 1024 * 0.8 / CLIENT_OVERHEAD_BYTES)),
            tcp_backlog=min(p.tcp_backlog_ceiling, p.tcp_backlog_per_core * facts.cores),
            clamped_at_floor=clamped_at_floor,
        )
        logger.debug(f"Cache budget: source={available_mb}MB ceiling={cache_mb}MB clients={budget.max_clients}")
        return budget, diagnostics
