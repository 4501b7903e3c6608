"""
Resources package for HostAlloc Engine.

Provides the plan data models and the thin adapters that supply hardware
facts and tenant counts to the planners.
"""

from .data_models import (
    AllocationPlan,
    CacheBudget,
    DatabaseBudget,
    Diagnostic,
    FootprintBreakdown,
    HardwareFacts,
    Severity,
    WorkerPoolSpec,
    effective_tenant_count,
)
from .hardware import detect_hardware, probe_hardware
from .tenants import active_sites, count_active_tenants, load_sites

__all__ = [
    # Data models
    "AllocationPlan",
    "CacheBudget",
    "DatabaseBudget",
    "Diagnostic",
    "FootprintBreakdown",
    "HardwareFacts",
    "Severity",
    "WorkerPoolSpec",
    "effective_tenant_count",
    # Hardware
    "detect_hardware",
    "probe_hardware",
    # Tenants
    "active_sites",
    "count_active_tenants",
    "load_sites",
]
