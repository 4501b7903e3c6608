"""
Pytest Configuration for HostAlloc Engine Testing
=================================================

Root conftest.py - registers shared fixtures from tests/fixtures/.
"""

import pytest

# Import shared fixtures
from tests.fixtures import *


def pytest_collection_modifyitems(config, items):
    """Automatically add markers based on test location."""
    for item in items:
        # Add markers based on test file paths
        if "/unit/" in item.nodeid:
            item.add_marker(pytest.mark.unit)
            item.add_marker(pytest.mark.fast)  # Unit tests are fast by default
        elif "/integration/" in item.nodeid:
            item.add_marker(pytest.mark.integration)
            item.add_marker(pytest.mark.slow)

        # Add feature area markers
        if "/cli/" in item.nodeid:
            item.add_marker(pytest.mark.cli)
        if "/planning/" in item.nodeid:
            item.add_marker(pytest.mark.planning)
        if "/resources/" in item.nodeid:
            item.add_marker(pytest.mark.resources)
        if "config" in item.nodeid.lower():
            item.add_marker(pytest.mark.config)
