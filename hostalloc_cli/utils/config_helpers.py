"""
Configuration helper utilities for HostAlloc CLI

Functions to find and load the deployment configuration and to resolve
hardware facts and tenant counts from command-line options.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from hostalloc_engine.config import TunerConfig, load_tuner_config
from hostalloc_engine.resources import (
    HardwareFacts,
    count_active_tenants,
    detect_hardware,
    load_sites,
)

logger = logging.getLogger("hostalloc_engine.cli")


def find_default_config() -> Path:
    """Find the default tuning policy configuration file."""
    default_paths = [
        Path("config/tuning_policy.yaml"),
        Path("tuning_policy.yaml"),
        Path("hostalloc.yaml"),
    ]

    for config_path in default_paths:
        if config_path.exists():
            return config_path

    # Return the most likely path even if it doesn't exist
    return Path("config/tuning_policy.yaml")


def load_config(config: Optional[str]) -> TunerConfig:
    """Load an explicit config file, the default one, or built-in defaults.

    An explicitly named file must exist; a missing default file means
    "use built-in defaults".
    """
    if config:
        return load_tuner_config(Path(config))

    config_path = find_default_config()
    if config_path.exists():
        return load_tuner_config(config_path)

    logger.debug(f"No config file at {config_path}; using built-in defaults")
    return TunerConfig()


def resolve_hardware(
    cfg: TunerConfig,
    ram_mb: Optional[int],
    cores: Optional[int],
    detect: bool,
) -> HardwareFacts:
    """Static facts when both are given, otherwise probe (with fallback).

    A single static value overrides the matching probed value.
    """
    if ram_mb is not None and cores is not None and not detect:
        return HardwareFacts(ram_mb=ram_mb, cores=cores)

    facts = detect_hardware(fallback=cfg.hardware.fallback())
    return HardwareFacts(
        ram_mb=ram_mb if ram_mb is not None else facts.ram_mb,
        cores=cores if cores is not None else facts.cores,
    )


def resolve_tenant_count(
    cfg: TunerConfig,
    tenants: Optional[int],
    sites_file: Optional[str],
) -> int:
    """Explicit count, else the enabled sites in the registry, else zero."""
    if tenants is not None:
        return tenants

    registry = sites_file or cfg.sites_file
    if registry is None:
        logger.debug("No tenant count or registry given; planning for zero tenants")
        return 0
    return count_active_tenants(load_sites(registry))
