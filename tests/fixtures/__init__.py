"""
Shared Test Fixtures for HostAlloc Engine

This package contains reusable test fixtures organized by category:
- policies.py: Tuning policies and hardware facts for planner tests
- config_files.py: Temporary YAML configs and tenant registries
"""

from .policies import (
    default_policy,
    reserve_slice_policy,
    small_host,
    medium_host,
    large_host,
)
from .config_files import (
    write_config,
    sites_file,
    isolated_logging,
)

__all__ = [
    # Policies and facts
    "default_policy",
    "reserve_slice_policy",
    "small_host",
    "medium_host",
    "large_host",
    # Files
    "write_config",
    "sites_file",
    "isolated_logging",
]
