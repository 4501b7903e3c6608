"""
Planning package for HostAlloc Engine.

Pipeline: ProcessPoolSizer -> DatabaseBudgetPlanner / CacheBudgetPlanner
(order per budget mode) -> AllocationValidator, composed by
AllocationOrchestrator.
"""

from .cache import CacheBudgetPlanner
from .database import DatabaseBudgetPlanner
from .orchestrator import AllocationOrchestrator, compute_allocation
from .sources import budget_source_mb, clamp, planner_order
from .validator import AllocationValidator
from .worker_pool import ProcessPoolSizer

__all__ = [
    "AllocationOrchestrator",
    "AllocationValidator",
    "CacheBudgetPlanner",
    "DatabaseBudgetPlanner",
    "ProcessPoolSizer",
    "budget_source_mb",
    "clamp",
    "compute_allocation",
    "planner_order",
]
