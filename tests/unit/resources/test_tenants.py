"""Tests for the sites.json tenant registry reader."""

import pytest

from hostalloc_engine.exceptions import TenantRegistryError
from hostalloc_engine.resources import active_sites, count_active_tenants, load_sites


def test_counts_enabled_sites(sites_file):
    sites = load_sites(sites_file)

    assert len(sites) == 4
    assert count_active_tenants(sites) == 3


def test_missing_flag_means_enabled(sites_file):
    active = active_sites(load_sites(sites_file))

    assert "gamma.example.com" in active
    assert "delta.example.com" not in active


def test_null_site_options(tmp_path):
    path = tmp_path / "sites.json"
    path.write_text('{"one.example.com": null}')

    sites = load_sites(path)

    assert sites == {"one.example.com": {}}
    assert count_active_tenants(sites) == 1


def test_empty_registry(tmp_path):
    path = tmp_path / "sites.json"
    path.write_text("{}")

    assert count_active_tenants(load_sites(path)) == 0


def test_missing_registry(tmp_path):
    with pytest.raises(TenantRegistryError) as exc_info:
        load_sites(tmp_path / "absent.json")

    assert "absent.json" in str(exc_info.value)


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        '["a.example.com", "b.example.com"]',
        '{"a.example.com": "yes"}',
    ],
)
def test_malformed_registry(tmp_path, content):
    path = tmp_path / "sites.json"
    path.write_text(content)

    with pytest.raises(TenantRegistryError):
        load_sites(path)
