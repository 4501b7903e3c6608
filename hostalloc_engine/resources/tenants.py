"""
Tenant registry reader.

The registry is a ``sites.json`` mapping of site name to site options.
Only sites with ``"enabled": true`` count as tenants; a missing flag
means enabled.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping

from ..exceptions import TenantRegistryError

logger = logging.getLogger(__name__)


def load_sites(path: Path | str) -> Dict[str, Dict[str, Any]]:
    """Load the site registry file."""
    p = Path(path)
    if not p.exists():
        raise TenantRegistryError("Tenant registry not found", registry_path=str(p))

    try:
        with open(p, "r") as fh:
            raw = json.load(fh)
    except json.JSONDecodeError as e:
        raise TenantRegistryError(
            f"Tenant registry is not valid JSON: {e.msg}",
            registry_path=str(p),
            original_exception=e,
        ) from e

    if not isinstance(raw, dict):
        raise TenantRegistryError("Tenant registry must be a JSON object of sites", registry_path=str(p))

    sites: Dict[str, Dict[str, Any]] = {}
    for name, options in raw.items():
        if options is None:
            options = {}
        if not isinstance(options, dict):
            raise TenantRegistryError(f"Site '{name}' must map to an object", registry_path=str(p))
        sites[name] = options
    return sites


def active_sites(sites: Mapping[str, Mapping[str, Any]]) -> Dict[str, Mapping[str, Any]]:
    """Return only the enabled sites."""
    return {name: opts for name, opts in sites.items() if opts.get("enabled", True)}


def count_active_tenants(sites: Mapping[str, Mapping[str, Any]]) -> int:
    """Number of enabled sites."""
    count = len(active_sites(sites))
    logger.debug(f"Tenant registry: {count} active of {len(sites)} sites")
    return count
