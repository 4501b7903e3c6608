"""
Diagnostic catalog with resolution patterns for allocation findings.

Provides:
- Lookup of known diagnostic codes
- Resolution suggestions for the operator summary
- Lookup frequency tracking
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional

from .exceptions import ErrorCategory, ResolutionHint
from .resources.data_models import Diagnostic


@dataclass
class DiagnosticPattern:
    """Known diagnostic code and how to resolve it"""

    code: str
    category: ErrorCategory
    title: str
    description: str
    resolution_hints: List[ResolutionHint]
    frequency: int = 0  # Track how often this pattern was looked up

    def matches(self, diagnostic: Diagnostic) -> bool:
        return diagnostic.code == self.code


class DiagnosticCatalog:
    """
    Repository of known diagnostic codes and their resolutions.

    Usage:
        catalog = DiagnosticCatalog()
        hints = catalog.find_resolution_hints(plan.diagnostics[0])
    """

    def __init__(self):
        self.patterns: List[DiagnosticPattern] = []
        self._initialize_patterns()

    def _initialize_patterns(self) -> None:
        """Initialize catalog with known diagnostic codes"""

        self.patterns.append(DiagnosticPattern(
            code="OVERCOMMIT",
            category=ErrorCategory.RESOURCE,
            title="Memory Overcommit",
            description="Projected footprint of all services exceeds physical RAM",
            resolution_hints=[
                ResolutionHint(
                    title="Reduce Projected Footprint",
                    description="Shrink the worker pool or the number of tenants",
                    steps=[
                        "Move tenants to another host",
                        "Lower avg_process_mb if workers are smaller than assumed",
                        "Lower per_tenant_connections to shrink per-connection buffers",
                        "Switch to budget_mode: reserve_slice to draw budgets from the headroom",
                    ],
                ),
                ResolutionHint(
                    title="Add Capacity",
                    description="Give the host more memory",
                    steps=[
                        "Upgrade host RAM",
                        "Re-run the plan with the new hardware facts",
                    ],
                ),
            ]
        ))

        self.patterns.append(DiagnosticPattern(
            code="DB_BUDGET_AT_FLOOR",
            category=ErrorCategory.RESOURCE,
            title="Database Budget At Floor",
            description="The computed database budget was below min_db_mb",
            resolution_hints=[
                ResolutionHint(
                    title="Free Capacity For The Database",
                    description="Too little RAM is left after workers and headroom",
                    steps=[
                        "Reduce tenant count or avg_process_mb",
                        "Raise db_ratio",
                        "Lower min_db_mb only if the workload is tiny",
                    ],
                )
            ]
        ))

        self.patterns.append(DiagnosticPattern(
            code="CACHE_BUDGET_AT_FLOOR",
            category=ErrorCategory.RESOURCE,
            title="Cache Ceiling At Floor",
            description="The computed cache ceiling was below min_cache_mb",
            resolution_hints=[
                ResolutionHint(
                    title="Free Capacity For The Cache",
                    description="The budget source is too small for the cache ratio",
                    steps=[
                        "Raise cache_ratio",
                        "Raise os_headroom_mb when using budget_mode: reserve_slice",
                    ],
                )
            ]
        ))

        self.patterns.append(DiagnosticPattern(
            code="LOW_RAM_MANY_TENANTS",
            category=ErrorCategory.RESOURCE,
            title="Crowded Low-Memory Host",
            description="Many tenants share a host at or below the low-memory threshold",
            resolution_hints=[
                ResolutionHint(
                    title="Spread Tenants",
                    description="Low-memory hosts handle few tenants well",
                    steps=[
                        "Keep low-memory hosts at or below crowded_tenant_threshold tenants",
                        "Use the small-vps profile",
                    ],
                )
            ]
        ))

        self.patterns.append(DiagnosticPattern(
            code="CACHE_CRITICALLY_LOW",
            category=ErrorCategory.RESOURCE,
            title="Cache Critically Low",
            description="The cache ceiling is below cache_critical_mb",
            resolution_hints=[
                ResolutionHint(
                    title="Raise Cache Ceiling",
                    description="A very small cache evicts constantly",
                    steps=[
                        "Raise min_cache_mb",
                        "Or disable the cache for this host",
                    ],
                )
            ]
        ))

        self.patterns.append(DiagnosticPattern(
            code="RAM_UNKNOWN",
            category=ErrorCategory.INPUT,
            title="Hardware Detection Failed",
            description="Total RAM was not positive",
            resolution_hints=[
                ResolutionHint(
                    title="Supply Hardware Facts",
                    description="Provide RAM explicitly or configure a fallback",
                    steps=[
                        "Pass --ram-mb on the command line",
                        "Set hardware.fallback_ram_mb in the config",
                    ],
                )
            ]
        ))

        self.patterns.append(DiagnosticPattern(
            code="CORES_UNKNOWN",
            category=ErrorCategory.INPUT,
            title="Core Detection Failed",
            description="CPU core count was below one",
            resolution_hints=[
                ResolutionHint(
                    title="Supply Core Count",
                    description="Provide cores explicitly or configure a fallback",
                    steps=[
                        "Pass --cores on the command line",
                        "Set hardware.fallback_cores in the config",
                    ],
                )
            ]
        ))

    def get_pattern(self, code: str) -> Optional[DiagnosticPattern]:
        for pattern in self.patterns:
            if pattern.code == code:
                return pattern
        return None

    def find_resolution_hints(self, diagnostic: Diagnostic) -> List[ResolutionHint]:
        """
        Find resolution hints for a diagnostic.

        Updates frequency counter for matched patterns.
        """
        hints = []
        for pattern in self.patterns:
            if pattern.matches(diagnostic):
                pattern.frequency += 1
                hints.extend(pattern.resolution_hints)
        return hints

    def get_pattern_statistics(self) -> Dict[str, int]:
        """Get lookup frequency statistics"""
        return {
            pattern.code: pattern.frequency
            for pattern in sorted(self.patterns, key=lambda p: p.frequency, reverse=True)
        }


# Global catalog instance
_global_catalog: Optional[DiagnosticCatalog] = None


def get_diagnostic_catalog() -> DiagnosticCatalog:
    """Get global diagnostic catalog instance (singleton)"""
    global _global_catalog
    if _global_catalog is None:
        _global_catalog = DiagnosticCatalog()
    return _global_catalog
