"""
Per-tenant application worker pool sizing.

The worker pool has the first claim on RAM left after OS headroom. The
raw per-tenant share is then passed through the policy's tier staircase,
or replaced by ``static_max_children`` when automatic tuning is off.
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Tuple

from ..config.policy import TierRule, TuningPolicy
from ..exceptions import ConfigError
from ..resources.data_models import HardwareFacts, WorkerPoolSpec

logger = logging.getLogger(__name__)

MIN_AVAILABLE_MB = 512
MIN_WORKERS = 2


class ProcessPoolSizer:
    """Derives the per-tenant worker pool from RAM after OS headroom."""

    def __init__(self, policy: TuningPolicy):
        self.policy = policy

    def size(self, facts: HardwareFacts, effective_tenants: int) -> WorkerPoolSpec:
        """Compute the worker pool spec applied to every tenant.

        Raises:
            ConfigError: if ``avg_process_mb`` is not positive.
        """
        avg_process_mb = self.policy.avg_process_mb
        if avg_process_mb <= 0:
            raise ConfigError(
                "Cannot size worker pool",
                problems=[f"avg_process_mb must be positive (got {avg_process_mb})"],
            )

        available_mb = max(MIN_AVAILABLE_MB, facts.ram_mb - self.policy.os_headroom_mb)
        total_workers = max(MIN_WORKERS, math.floor(available_mb / avg_process_mb))
        per_tenant = max(MIN_WORKERS, math.floor(total_workers / effective_tenants))

        if self.policy.auto_tune:
            rule, adjusted = self._apply_tiers(facts, per_tenant, total_workers, effective_tenants)
            max_children = max(MIN_WORKERS, adjusted)
        else:
            rule, max_children = None, self.policy.static_max_children

        start_servers = max(1, math.floor(max_children * 0.25))
        spec = WorkerPoolSpec(
            max_children=max_children,
            start_servers=start_servers,
            min_spare=start_servers,
            max_spare=max(2, math.floor(max_children * 0.5)),
            available_mb=available_mb,
            total_workers=total_workers,
            tier_rule=rule.name if rule else None,
        )
        logger.debug(
            f"Worker pool: available={available_mb}MB total_workers={total_workers} "
            f"per_tenant={per_tenant} -> {max_children} (rule={spec.tier_rule})"
        )
        return spec

    def _apply_tiers(
        self,
        facts: HardwareFacts,
        per_tenant: int,
        total_workers: int,
        effective_tenants: int,
    ) -> Tuple[Optional[TierRule], int]:
        for rule in self.policy.tier_rules:
            if rule.matches(facts.ram_mb, facts.cores):
                return rule, rule.apply(per_tenant, total_workers, effective_tenants)
        return None, per_tenant
