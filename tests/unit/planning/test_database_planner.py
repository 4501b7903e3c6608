"""Tests for database budget planning."""

import pytest

from hostalloc_engine.config import TuningPolicy
from hostalloc_engine.planning import DatabaseBudgetPlanner, compute_allocation
from hostalloc_engine.resources import HardwareFacts, Severity


@pytest.fixture
def planner(default_policy) -> DatabaseBudgetPlanner:
    return DatabaseBudgetPlanner(default_policy)


class TestDatabaseBudget:
    """Budget ratio and clamps."""

    def test_budget_from_remaining_capacity(self, planner, medium_host):
        budget, diagnostics = planner.plan(medium_host, tenant_count=2, available_mb=4744)

        assert budget.budget_mb == 1423
        assert budget.buffer_pool_mb == 996
        assert budget.log_file_mb == 249
        assert budget.buffer_pool_instances == 1
        assert budget.query_cache_mb == 71
        assert budget.tmp_table_size_mb == 64
        assert budget.max_heap_table_size_mb == 64
        assert not budget.clamped_at_floor
        assert diagnostics == []

    def test_floor_clamp_emits_warning(self, planner, small_host):
        budget, diagnostics = planner.plan(small_host, tenant_count=10, available_mb=648)

        assert budget.budget_mb == 256
        assert budget.clamped_at_floor
        assert [d.code for d in diagnostics] == ["DB_BUDGET_AT_FLOOR"]
        assert diagnostics[0].severity == Severity.WARNING
        assert diagnostics[0].data == {"raw_budget_mb": 194, "floor_mb": 256}

    def test_ceiling_clamp(self, planner, large_host):
        budget, diagnostics = planner.plan(large_host, tenant_count=1, available_mb=200001)

        assert budget.budget_mb == 32768
        assert diagnostics == []

    def test_large_budget_ceilings(self, planner, large_host):
        budget, _ = planner.plan(large_host, tenant_count=1, available_mb=100001)

        assert budget.budget_mb == 30000
        assert budget.buffer_pool_mb == 16384
        assert budget.log_file_mb == 2048
        assert budget.buffer_pool_instances == 16
        assert budget.query_cache_mb == 128
        assert budget.tmp_table_size_mb == 128

    def test_buffer_pool_instances_per_gigabyte(self, planner, medium_host):
        budget, _ = planner.plan(medium_host, tenant_count=1, available_mb=10005)

        assert budget.budget_mb == 3001
        assert budget.buffer_pool_mb == 2100
        assert budget.buffer_pool_instances == 2
        assert budget.log_file_mb == 525

    def test_buffer_pool_instances_upper_bound(self, large_host):
        policy = TuningPolicy(max_buffer_pool_instances=4)
        budget, _ = DatabaseBudgetPlanner(policy).plan(large_host, tenant_count=1, available_mb=100001)

        assert budget.buffer_pool_instances == 4

    @pytest.mark.parametrize(
        "available_mb,budget_mb,tmp_mb",
        [
            (6827, 2048, 64),
            (6834, 2050, 128),
        ],
    )
    def test_tmp_table_threshold(self, planner, medium_host, available_mb, budget_mb, tmp_mb):
        budget, _ = planner.plan(medium_host, tenant_count=1, available_mb=available_mb)

        assert budget.budget_mb == budget_mb
        assert budget.tmp_table_size_mb == tmp_mb
        assert budget.max_heap_table_size_mb == tmp_mb


class TestConnections:
    """Connection and table cache sizing."""

    def test_connection_formula(self, planner, medium_host):
        budget, _ = planner.plan(medium_host, tenant_count=2, available_mb=4744)

        assert budget.max_connections == 50 + 2 * 30 + 4 * 10
        assert budget.thread_cache_size == 15
        assert budget.table_open_cache == 2400

    def test_zero_tenants_use_raw_count(self, planner, medium_host):
        budget, _ = planner.plan(medium_host, tenant_count=0, available_mb=4744)

        assert budget.max_connections == 90
        assert budget.table_open_cache == 2000

    def test_footprint_includes_connection_buffers(self, planner, small_host):
        budget, _ = planner.plan(small_host, tenant_count=10, available_mb=648)

        assert budget.max_connections == 370
        assert budget.per_connection_buffer_mb == 5
        assert budget.footprint_mb == 256 + 370 * 5

    def test_budget_non_decreasing_within_tier(self, default_policy):
        """Within one worker tier more RAM never shrinks the database budget."""
        budgets = [
            compute_allocation(HardwareFacts(ram_mb=ram, cores=4), default_policy, 2).database.budget_mb
            for ram in range(4352, 8193, 256)
        ]

        assert budgets == sorted(budgets)
        assert budgets[0] < budgets[-1]
