"""
Report formatting utilities.

Renders an allocation plan as a plain-text operator summary.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from ..error_catalog import DiagnosticCatalog
    from ..resources.data_models import AllocationPlan

_RULE = "━" * 44

_SEVERITY_MARKS = {
    "info": "ℹ️ ",
    "warning": "⚠️ ",
    "fatal": "❌",
}


class PlanReporter:
    """Formats allocation plans for console output."""

    @staticmethod
    def format_plan(plan: "AllocationPlan", catalog: Optional["DiagnosticCatalog"] = None) -> str:
        """Format an allocation plan as an operator summary."""
        lines: List[str] = []
        lines.append(_RULE)
        lines.append("   HostAlloc Allocation Plan")
        lines.append(_RULE)
        lines.append(f"   System RAM:        {plan.facts.ram_mb}MB")
        lines.append(f"   CPU Cores:         {plan.facts.cores}")
        lines.append(f"   Tenants:           {plan.tenant_count} (sized for {plan.effective_tenant_count})")
        lines.append(f"   Budget Mode:       {plan.budget_mode} ({plan.available_mb}MB source)")
        lines.append(f"   Auto-Tuning:       {'✓ ENABLED' if plan.auto_tune else '✗ DISABLED (static sizes)'}")

        wp = plan.worker_pool
        lines.append("\n🧵 Worker Pool (per tenant):")
        lines.append(f"   {'max_children':22}: {wp.max_children:6}")
        lines.append(f"   {'start_servers':22}: {wp.start_servers:6}")
        lines.append(f"   {'min_spare':22}: {wp.min_spare:6}")
        lines.append(f"   {'max_spare':22}: {wp.max_spare:6}")
        lines.append(f"   {'tier rule':22}: {wp.tier_rule or '-':>6}")

        db = plan.database
        lines.append("\n🗄️  Database:")
        lines.append(f"   {'budget':22}: {db.budget_mb:6}MB")
        lines.append(f"   {'buffer pool':22}: {db.buffer_pool_mb:6}MB x {db.buffer_pool_instances}")
        lines.append(f"   {'log file':22}: {db.log_file_mb:6}MB")
        lines.append(f"   {'query cache':22}: {db.query_cache_mb:6}MB")
        lines.append(f"   {'tmp table size':22}: {db.tmp_table_size_mb:6}MB")
        lines.append(f"   {'max connections':22}: {db.max_connections:6}")
        lines.append(f"   {'thread cache':22}: {db.thread_cache_size:6}")
        lines.append(f"   {'table open cache':22}: {db.table_open_cache:6}")

        cache = plan.cache
        lines.append("\n⚡ Cache:")
        lines.append(f"   {'max memory':22}: {cache.max_memory_mb:6}MB")
        lines.append(f"   {'max clients':22}: {cache.max_clients:6}")
        lines.append(f"   {'tcp backlog':22}: {cache.tcp_backlog:6}")

        fp = plan.footprint
        lines.append("\n📊 Projected Footprint:")
        lines.append(f"   {'workers':22}: {fp.worker_total_mb:6}MB")
        lines.append(f"   {'database':22}: {fp.database_mb:6}MB")
        lines.append(f"   {'cache':22}: {fp.cache_mb:6}MB")
        lines.append(f"   {'os headroom':22}: {fp.headroom_mb:6}MB")
        lines.append(f"   {'TOTAL':22}: {fp.total_mb:6}MB of {fp.ram_mb}MB")

        lines.append("\n🔍 Diagnostics:")
        if not plan.diagnostics:
            lines.append("   ✅ none")
        for diagnostic in plan.diagnostics:
            mark = _SEVERITY_MARKS.get(diagnostic.severity.value, "-")
            lines.append(f"   {mark} [{diagnostic.code}] {diagnostic.message}")
            if catalog is not None:
                for hint in catalog.find_resolution_hints(diagnostic):
                    lines.append(f"      💡 {hint.title}: {hint.description}")
                    for step in hint.steps:
                        lines.append(f"         - {step}")

        lines.append(_RULE)
        return "\n".join(lines)
