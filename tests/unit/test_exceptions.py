"""
Unit tests for the structured exception hierarchy.

Tests planning context, resolution hints and serialization.
"""

from __future__ import annotations

from hostalloc_engine.exceptions import (
    AllocationAbortedError,
    ConfigError,
    ErrorCategory,
    ErrorSeverity,
    HardwareProbeError,
    HostAllocError,
    PlanningContext,
    ProfileNotFoundError,
    ResolutionHint,
    TenantRegistryError,
)
from hostalloc_engine.resources import Diagnostic, Severity


class TestPlanningContext:
    """Test PlanningContext dataclass"""

    def test_correlation_id_generated(self):
        context = PlanningContext()

        assert len(context.correlation_id) == 8

    def test_to_dict_skips_unset(self):
        context = PlanningContext(ram_mb=8192, cores=4)
        data = context.to_dict()

        assert data["ram_mb"] == 8192
        assert "tenant_count" not in data
        assert "budget_mode" not in data

    def test_format_summary(self):
        context = PlanningContext(ram_mb=8192, cores=4, tenant_count=2, budget_mode="remaining")
        summary = context.format_summary()

        assert "ram_mb=8192" in summary
        assert "tenants=2" in summary
        assert "mode=remaining" in summary
        assert f"correlation_id={context.correlation_id}" in summary


class TestConfigError:
    def test_problems_in_message(self):
        error = ConfigError("Invalid tuning policy", problems=["a is bad", "b is bad"])

        assert error.problems == ["a is bad", "b is bad"]
        assert str(error) == "Invalid tuning policy: a is bad; b is bad"

    def test_defaults(self):
        error = ConfigError("Broken")

        assert isinstance(error, HostAllocError)
        assert error.problems == []
        assert error.category == ErrorCategory.CONFIGURATION
        assert error.severity == ErrorSeverity.ERROR
        assert error.resolution_hints[0].title == "Fix Tuning Policy"

    def test_custom_hints(self):
        hint = ResolutionHint(title="Custom", description="d", steps=[])
        error = ConfigError("Broken", resolution_hints=[hint])

        assert error.resolution_hints == [hint]

    def test_profile_not_found(self):
        error = ProfileNotFoundError("huge", ["dense", "standard"])

        assert "huge" in str(error)
        assert "dense, standard" in str(error)
        assert isinstance(error, ConfigError)


class TestAllocationAbortedError:
    def test_carries_fatal_diagnostics(self):
        diagnostics = [
            Diagnostic(Severity.FATAL, "RAM_UNKNOWN", "System RAM detection failed"),
            Diagnostic(Severity.FATAL, "CORES_UNKNOWN", "CPU core detection failed"),
        ]
        error = AllocationAbortedError(diagnostics, context=PlanningContext(ram_mb=0))

        assert error.diagnostics == diagnostics
        assert error.severity == ErrorSeverity.CRITICAL
        assert error.category == ErrorCategory.RESOURCE
        assert "[RAM_UNKNOWN]" in str(error)
        assert "[CORES_UNKNOWN]" in str(error)


class TestSerialization:
    def test_to_dict(self):
        error = ConfigError(
            "Invalid tuning policy",
            problems=["db_ratio must be strictly between 0 and 1 (got 1.5)"],
            context=PlanningContext(ram_mb=8192, cores=4, tenant_count=2),
            policy_file="tuning_policy.yaml",
        )
        data = error.to_dict()

        assert data["error_type"] == "ConfigError"
        assert data["category"] == "configuration"
        assert data["context"]["ram_mb"] == 8192
        assert data["resolution_hints"][0]["title"] == "Fix Tuning Policy"
        assert data["policy_file"] == "tuning_policy.yaml"
        assert data["original_exception"] is None

    def test_format_diagnostic_message(self):
        original = ValueError("bad number")
        error = HardwareProbeError(
            "Hardware probe failed",
            context=PlanningContext(ram_mb=0, metadata={"probe": "psutil"}),
            original_exception=original,
        )
        message = error.format_diagnostic_message()

        assert "ERROR: Hardware probe failed" in message
        assert "PLANNING CONTEXT:" in message
        assert "probe: psutil" in message
        assert "ORIGINAL EXCEPTION:" in message
        assert "ValueError: bad number" in message

    def test_format_includes_hints(self):
        message = ConfigError("Broken").format_diagnostic_message()

        assert "RESOLUTION HINTS:" in message
        assert "Fix Tuning Policy" in message
        assert "Docs: docs/tuning_policy.md" in message


def test_tenant_registry_error_mentions_path():
    error = TenantRegistryError("Tenant registry not found", registry_path="/etc/sites.json")

    assert str(error) == "Tenant registry not found (registry: /etc/sites.json)"
    assert error.category == ErrorCategory.INPUT
