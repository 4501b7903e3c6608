"""
Structured exception hierarchy with planning context for HostAlloc Engine.

All exceptions include:
- correlation_id: Trace a failed computation back to its log lines
- planning_context: Hardware facts, tenant count, budget mode, policy source
- resolution_hints: Actionable suggestions for common issues
- severity: CRITICAL, ERROR, WARNING
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence
import uuid

if TYPE_CHECKING:
    from .resources.data_models import Diagnostic


class ErrorSeverity(str, Enum):
    """Error severity levels for triage"""
    CRITICAL = "critical"      # Computation aborted, no plan produced
    ERROR = "error"            # Invalid input or policy, caller must fix it
    WARNING = "warning"        # Non-blocking issue, plan may be degraded


class ErrorCategory(str, Enum):
    """Error categories for diagnostics and resolution routing"""
    CONFIGURATION = "configuration"    # Invalid policy, unknown profile, bad YAML
    RESOURCE = "resource"              # Hardware facts unusable, overcommit
    INPUT = "input"                    # Bad tenant registry or probe input


@dataclass
class PlanningContext:
    """Context of the allocation request that failed"""

    # Request context
    ram_mb: Optional[int] = None
    cores: Optional[int] = None
    tenant_count: Optional[int] = None
    budget_mode: Optional[str] = None

    # Configuration context
    policy_source: Optional[str] = None
    profile: Optional[str] = None

    # Correlation context
    correlation_id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    # Additional metadata
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize context for logging"""
        return {
            k: v for k, v in self.__dict__.items()
            if v is not None and not k.startswith('_')
        }

    def format_summary(self) -> str:
        """Human-readable one-line summary"""
        parts = []
        if self.ram_mb is not None:
            parts.append(f"ram_mb={self.ram_mb}")
        if self.cores is not None:
            parts.append(f"cores={self.cores}")
        if self.tenant_count is not None:
            parts.append(f"tenants={self.tenant_count}")
        if self.budget_mode:
            parts.append(f"mode={self.budget_mode}")
        if self.profile:
            parts.append(f"profile={self.profile}")
        if self.policy_source:
            parts.append(f"policy={self.policy_source}")
        if self.correlation_id:
            parts.append(f"correlation_id={self.correlation_id}")
        return " | ".join(parts)


@dataclass
class ResolutionHint:
    """Actionable resolution guidance for common problems"""

    title: str
    description: str
    steps: List[str]
    documentation_url: Optional[str] = None


class HostAllocError(Exception):
    """
    Base exception for HostAlloc Engine with structured context.

    All engine exceptions inherit from this class so callers can catch one
    type and still get a consistent diagnostic payload.
    """

    def __init__(
        self,
        message: str,
        *,
        context: Optional[PlanningContext] = None,
        category: ErrorCategory = ErrorCategory.CONFIGURATION,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        resolution_hints: Optional[List[ResolutionHint]] = None,
        original_exception: Optional[Exception] = None,
        **kwargs
    ):
        super().__init__(message)
        self.message = message
        self.context = context or PlanningContext()
        self.category = category
        self.severity = severity
        self.resolution_hints = resolution_hints or []
        self.original_exception = original_exception
        self.additional_data = kwargs

    def format_diagnostic_message(self) -> str:
        """
        Format a multi-line diagnostic message for logs and operator display.

        Includes the message and severity, the planning context, resolution
        hints and the wrapped exception (if any).
        """
        lines = [
            f"{'='*80}",
            f"ERROR: {self.message}",
            f"Severity: {self.severity.value.upper()} | Category: {self.category.value}",
            f"{'='*80}",
            "",
            "PLANNING CONTEXT:",
        ]

        context_dict = self.context.to_dict()
        for key, value in context_dict.items():
            if key == 'metadata' and isinstance(value, dict):
                for meta_key, meta_value in value.items():
                    lines.append(f"  {meta_key}: {meta_value}")
            else:
                lines.append(f"  {key}: {value}")

        if self.resolution_hints:
            lines.append("")
            lines.append("RESOLUTION HINTS:")
            for i, hint in enumerate(self.resolution_hints, 1):
                lines.append(f"\n{i}. {hint.title}")
                lines.append(f"   {hint.description}")
                if hint.steps:
                    lines.append("   Steps:")
                    for step in hint.steps:
                        lines.append(f"     - {step}")
                if hint.documentation_url:
                    lines.append(f"   Docs: {hint.documentation_url}")

        if self.original_exception:
            lines.append("")
            lines.append("ORIGINAL EXCEPTION:")
            lines.append(f"  {type(self.original_exception).__name__}: {str(self.original_exception)}")

        lines.append("")
        lines.append(f"{'='*80}")

        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for structured logging"""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "context": self.context.to_dict(),
            "resolution_hints": [
                {
                    "title": hint.title,
                    "description": hint.description,
                    "steps": hint.steps,
                    "documentation_url": hint.documentation_url,
                }
                for hint in self.resolution_hints
            ],
            "original_exception": str(self.original_exception) if self.original_exception else None,
            **self.additional_data
        }


# Configuration Errors
class ConfigError(HostAllocError):
    """Invalid tuning policy or configuration input.

    Fatal: the computation is aborted and no partial plan is returned.
    ``problems`` lists every individual violation found.
    """
    def __init__(
        self,
        message: str,
        problems: Optional[Sequence[str]] = None,
        **kwargs
    ):
        self.problems = list(problems or [])
        if self.problems:
            message = f"{message}: " + "; ".join(self.problems)
        if "resolution_hints" not in kwargs:
            kwargs["resolution_hints"] = [
                ResolutionHint(
                    title="Fix Tuning Policy",
                    description="The tuning policy contains values the planners cannot use",
                    steps=[
                        "Check ratios are strictly between 0 and 1",
                        "Check avg_process_mb is positive",
                        "Check every min_*/max_* pair is non-negative and ordered",
                        "Validate the policy: hostalloc validate --config <file>",
                    ],
                    documentation_url="docs/tuning_policy.md",
                )
            ]
        super().__init__(
            message,
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.ERROR,
            **kwargs
        )


class ProfileNotFoundError(ConfigError):
    """Requested policy profile is not defined"""
    def __init__(self, profile: str, available: Sequence[str], **kwargs):
        self.profile = profile
        self.available = list(available)
        super().__init__(
            f"Unknown policy profile '{profile}' (available: {', '.join(self.available)})",
            **kwargs
        )


# Resource Errors
class AllocationAbortedError(HostAllocError):
    """A FATAL diagnostic stopped the computation; no plan was produced"""
    def __init__(self, diagnostics: Sequence["Diagnostic"], **kwargs):
        self.diagnostics = list(diagnostics)
        message = "Allocation aborted: " + "; ".join(
            f"[{d.code}] {d.message}" for d in self.diagnostics
        )
        if "resolution_hints" not in kwargs:
            kwargs["resolution_hints"] = [
                ResolutionHint(
                    title="Supply Valid Hardware Facts",
                    description="Total RAM and core count must both be positive",
                    steps=[
                        "Pass --ram-mb and --cores explicitly",
                        "Or set hardware.fallback_ram_mb / hardware.fallback_cores in the config",
                        "Re-run the plan",
                    ],
                )
            ]
        super().__init__(
            message,
            category=ErrorCategory.RESOURCE,
            severity=ErrorSeverity.CRITICAL,
            **kwargs
        )


class HardwareProbeError(HostAllocError):
    """Hardware probing failed and no static fallback was supplied"""
    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            category=ErrorCategory.INPUT,
            severity=ErrorSeverity.ERROR,
            **kwargs
        )


class TenantRegistryError(HostAllocError):
    """Tenant registry file is missing or malformed"""
    def __init__(self, message: str, registry_path: Optional[str] = None, **kwargs):
        if registry_path:
            message = f"{message} (registry: {registry_path})"
        super().__init__(
            message,
            category=ErrorCategory.INPUT,
            severity=ErrorSeverity.ERROR,
            **kwargs
        )
