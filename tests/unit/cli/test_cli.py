"""Tests for the hostalloc command line."""

import json
import os
from pathlib import Path

import pytest
from typer.testing import CliRunner

from hostalloc_cli.main import app
from hostalloc_engine.resources import hardware

runner = CliRunner()

SHIPPED_CONFIG = str(Path(__file__).resolve().parents[3] / "config" / "tuning_policy.yaml")

MEDIUM_HOST = ["--ram-mb", "8192", "--cores", "4", "--tenants", "2"]
CROWDED_SMALL_HOST = ["--ram-mb", "4096", "--cores", "2", "--tenants", "10"]


@pytest.fixture(autouse=True)
def cli_workdir(tmp_path, monkeypatch, isolated_logging):
    """Run every command from an empty directory so no default config is found."""
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("HOSTALLOC_"):
            monkeypatch.delenv(key)
    return tmp_path


def _json_plan(args):
    result = runner.invoke(app, ["plan", *args, "--format", "json", "--log-level", "ERROR"])
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)


class TestPlanCommand:
    def test_json_output(self):
        plan = _json_plan(MEDIUM_HOST)

        assert plan["worker_pool"]["max_children"] == 10
        assert plan["database"]["budget_mb"] == 1423
        assert plan["cache"]["max_memory_mb"] == 948
        assert plan["budget_mode"] == "remaining"
        assert plan["diagnostics"] == []

    def test_table_output(self):
        result = runner.invoke(app, ["plan", *MEDIUM_HOST])

        assert result.exit_code == 0
        assert "max_children" in result.output
        assert "No diagnostics" in result.output

    def test_text_output(self):
        result = runner.invoke(app, ["plan", *CROWDED_SMALL_HOST, "--format", "text", "--log-level", "ERROR"])

        assert result.exit_code == 0
        assert "HostAlloc Allocation Plan" in result.output
        assert "[OVERCOMMIT]" in result.output

    def test_mode_flag(self):
        plan = _json_plan([*MEDIUM_HOST, "--mode", "reserve_slice"])

        assert plan["budget_mode"] == "reserve_slice"
        assert plan["available_mb"] == 1024

    def test_profile_flag(self):
        plan = _json_plan([*MEDIUM_HOST, "--profile", "reserve-slice"])

        assert plan["available_mb"] == 3072

    def test_sites_file(self, sites_file):
        plan = _json_plan(["--ram-mb", "8192", "--cores", "4", "--sites-file", str(sites_file)])

        assert plan["tenant_count"] == 3

    def test_no_tenants_given(self):
        plan = _json_plan(["--ram-mb", "8192", "--cores", "4"])

        assert plan["tenant_count"] == 0
        assert plan["diagnostics"][0]["code"] == "NO_ACTIVE_TENANTS"

    def test_config_file(self, write_config):
        path = write_config("policy:\n  avg_process_mb: 140\n")
        plan = _json_plan([*MEDIUM_HOST, "--config", str(path)])

        # 6144 / 140 = 43 workers, 21 per tenant, capped at 10
        assert plan["worker_pool"]["total_workers"] == 43

    def test_detect_uses_fallback_when_detection_fails(self, write_config, monkeypatch):
        monkeypatch.setattr(hardware.psutil, "cpu_count", lambda logical=True: None)
        path = write_config("hardware:\n  fallback_ram_mb: 8192\n  fallback_cores: 4\n")
        plan = _json_plan(["--detect", "--tenants", "2", "--config", str(path)])

        assert plan["facts"] == {"ram_mb": 8192, "cores": 4}

    def test_auto_tune_disabled(self, write_config):
        path = write_config("policy:\n  auto_tune: false\n  static_cache_mb: 512\n")
        plan = _json_plan([*MEDIUM_HOST, "--config", str(path)])

        assert plan["auto_tune"] is False
        assert plan["worker_pool"]["max_children"] == 10
        assert plan["database"]["budget_mb"] == 128
        assert plan["cache"]["max_memory_mb"] == 512
        assert plan["diagnostics"][0]["code"] == "AUTO_TUNE_DISABLED"


class TestShippedConfig:
    def test_profile_flag_applies(self):
        plan = _json_plan([*MEDIUM_HOST, "--config", SHIPPED_CONFIG, "--profile", "reserve-slice"])

        assert plan["budget_mode"] == "reserve_slice"
        assert plan["available_mb"] == 3072
        assert plan["database"]["budget_mb"] == 1536

    def test_profile_from_environment(self, monkeypatch):
        monkeypatch.setenv("HOSTALLOC_PROFILE", "cache-heavy")
        plan = _json_plan([*MEDIUM_HOST, "--config", SHIPPED_CONFIG])

        # cache_ratio 0.35 of the 4744MB source
        assert plan["cache"]["max_memory_mb"] == 1660

    def test_stray_environment_variable_ignored(self, monkeypatch):
        monkeypatch.setenv("HOSTALLOC_CONFIG", "/etc/hostalloc.yaml")
        plan = _json_plan([*MEDIUM_HOST, "--config", SHIPPED_CONFIG])

        assert plan["database"]["budget_mb"] == 1423


class TestExitCodes:
    def test_warnings_pass_by_default(self):
        result = runner.invoke(app, ["plan", *CROWDED_SMALL_HOST, "--log-level", "ERROR"])

        assert result.exit_code == 0

    def test_fail_on_warning(self):
        result = runner.invoke(app, ["plan", *CROWDED_SMALL_HOST, "--fail-on-warning", "--log-level", "ERROR"])

        assert result.exit_code == 1

    def test_fail_on_warning_clean_plan(self):
        result = runner.invoke(app, ["plan", *MEDIUM_HOST, "--fail-on-warning"])

        assert result.exit_code == 0

    def test_invalid_policy(self, write_config):
        path = write_config("policy:\n  db_ratio: 1.5\n")
        result = runner.invoke(app, ["plan", *MEDIUM_HOST, "--config", str(path)])

        assert result.exit_code == 2
        assert "db_ratio" in result.output

    def test_unknown_profile(self):
        result = runner.invoke(app, ["plan", *MEDIUM_HOST, "--profile", "huge"])

        assert result.exit_code == 2

    def test_unknown_mode(self):
        result = runner.invoke(app, ["plan", *MEDIUM_HOST, "--mode", "sideways"])

        assert result.exit_code == 2

    def test_unknown_format(self):
        result = runner.invoke(app, ["plan", *MEDIUM_HOST, "--format", "xml"])

        assert result.exit_code == 2

    def test_missing_config_file(self, tmp_path):
        result = runner.invoke(app, ["plan", *MEDIUM_HOST, "--config", str(tmp_path / "absent.yaml")])

        assert result.exit_code == 2

    def test_missing_sites_file(self, tmp_path):
        result = runner.invoke(app, ["plan", "--ram-mb", "8192", "--cores", "4", "--sites-file", str(tmp_path / "absent.json")])

        assert result.exit_code == 2

    def test_unknown_ram_aborts(self):
        result = runner.invoke(app, ["plan", "--ram-mb", "0", "--cores", "4", "--tenants", "2", "--log-level", "CRITICAL"])

        assert result.exit_code == 3
        assert "RAM_UNKNOWN" in result.output
        assert "Supply Hardware Facts" in result.output
        assert "correlation_id=" in result.output

    def test_error_report_at_debug_level(self, write_config):
        path = write_config("policy:\n  db_ratio: 1.5\n")
        result = runner.invoke(app, ["plan", *MEDIUM_HOST, "--config", str(path), "--log-level", "DEBUG"])

        assert result.exit_code == 2
        assert "PLANNING CONTEXT:" in result.stdout
        assert "RESOLUTION HINTS:" in result.stdout
        assert "Fix Tuning Policy" in result.stdout

    def test_aborted_report_at_debug_level(self):
        result = runner.invoke(app, ["plan", "--ram-mb", "0", "--cores", "4", "--tenants", "2", "--log-level", "DEBUG"])

        assert result.exit_code == 3
        assert "Severity: CRITICAL" in result.stdout
        assert "profile: standard" in result.stdout


class TestOtherCommands:
    def test_validate_defaults(self):
        result = runner.invoke(app, ["validate"])

        assert result.exit_code == 0
        assert "Policy is valid" in result.output

    def test_validate_invalid(self, write_config):
        path = write_config("policy:\n  cache_ratio: 0\n  min_db_mb: -1\n")
        result = runner.invoke(app, ["validate", "--config", str(path)])

        assert result.exit_code == 2
        assert "cache_ratio" in result.output
        assert "min_db_mb" in result.output

    def test_validate_profile(self):
        result = runner.invoke(app, ["validate", "--profile", "small-vps"])

        assert result.exit_code == 0
        assert "small-vps" in result.output

    def test_profiles(self):
        result = runner.invoke(app, ["profiles"])

        assert result.exit_code == 0
        for name in ("standard", "small-vps", "dense", "cache-heavy", "reserve-slice"):
            assert name in result.output

    def test_version(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert "HostAlloc Engine v1.2.0" in result.output
        assert "Released" in result.output

    def test_default_config_discovered(self, cli_workdir: Path):
        config_dir = cli_workdir / "config"
        config_dir.mkdir()
        (config_dir / "tuning_policy.yaml").write_text("profile: reserve-slice\n")

        plan = _json_plan(MEDIUM_HOST)

        assert plan["budget_mode"] == "reserve_slice"
