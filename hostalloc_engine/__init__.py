"""
HostAlloc Engine core package.

Partitions a single host's RAM and CPU between an application worker
pool, a database engine and an in-memory cache for a variable number of
tenants.
"""

from _version import __version__, get_full_version, get_version_dict

from .config import (BudgetMode, TierAction, TierRule, TunerConfig,
                     TuningPolicy, build_policy, load_policy,
                     load_tuner_config, merge_layers)
from .error_catalog import (DiagnosticCatalog, DiagnosticPattern,
                            get_diagnostic_catalog)
from .exceptions import (AllocationAbortedError, ConfigError,
                         HardwareProbeError, HostAllocError,
                         PlanningContext, ProfileNotFoundError,
                         ResolutionHint, TenantRegistryError)
from .logger import JSONFormatter, configure_logging
from .planning import (AllocationOrchestrator, AllocationValidator,
                       CacheBudgetPlanner, DatabaseBudgetPlanner,
                       ProcessPoolSizer, compute_allocation)
from .reports import PlanReporter
from .resources import (AllocationPlan, CacheBudget, DatabaseBudget,
                        Diagnostic, FootprintBreakdown, HardwareFacts,
                        Severity, WorkerPoolSpec, count_active_tenants,
                        detect_hardware, load_sites)

__all__ = [
    # Version
    "__version__",
    "get_full_version",
    "get_version_dict",
    # Config
    "BudgetMode",
    "TierAction",
    "TierRule",
    "TunerConfig",
    "TuningPolicy",
    "build_policy",
    "load_policy",
    "load_tuner_config",
    "merge_layers",
    # Diagnostics and errors
    "DiagnosticCatalog",
    "DiagnosticPattern",
    "get_diagnostic_catalog",
    "AllocationAbortedError",
    "ConfigError",
    "HardwareProbeError",
    "HostAllocError",
    "PlanningContext",
    "ProfileNotFoundError",
    "ResolutionHint",
    "TenantRegistryError",
    # Logging
    "JSONFormatter",
    "configure_logging",
    # Planning
    "AllocationOrchestrator",
    "AllocationValidator",
    "CacheBudgetPlanner",
    "DatabaseBudgetPlanner",
    "ProcessPoolSizer",
    "compute_allocation",
    # Reports
    "PlanReporter",
    # Resources
    "AllocationPlan",
    "CacheBudget",
    "DatabaseBudget",
    "Diagnostic",
    "FootprintBreakdown",
    "HardwareFacts",
    "Severity",
    "WorkerPoolSpec",
    "count_active_tenants",
    "detect_hardware",
    "load_sites",
]
