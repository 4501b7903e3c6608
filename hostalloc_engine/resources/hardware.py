"""
Host hardware detection with static fallback.

The planners treat probed and static facts identically; this module only
turns ``psutil`` readings into a ``HardwareFacts`` record.
"""

from __future__ import annotations

import logging
from typing import Optional

import psutil

from ..exceptions import HardwareProbeError
from .data_models import HardwareFacts

logger = logging.getLogger(__name__)

_BYTES_PER_MB = 1024 * 1024


def probe_hardware() -> HardwareFacts:
    """Read total RAM and logical core count from the running host."""
    try:
        total_bytes = psutil.virtual_memory().total
        cores = psutil.cpu_count(logical=True)
    except (OSError, RuntimeError) as e:
        raise HardwareProbeError("Hardware probe failed", original_exception=e) from e

    if not total_bytes or not cores:
        raise HardwareProbeError(
            f"Hardware probe returned no data (ram_bytes={total_bytes}, cores={cores})"
        )
    return HardwareFacts(ram_mb=int(total_bytes // _BYTES_PER_MB), cores=int(cores))


def detect_hardware(fallback: Optional[HardwareFacts] = None) -> HardwareFacts:
    """Probe the host, returning ``fallback`` when probing fails.

    Raises ``HardwareProbeError`` only when probing fails and no fallback
    was given.
    """
    try:
        facts = probe_hardware()
    except HardwareProbeError as e:
        if fallback is None:
            raise
        logger.warning(f"{e.message}; using static fallback ram_mb={fallback.ram_mb} cores={fallback.cores}")
        return fallback

    logger.debug(f"Detected hardware: ram_mb={facts.ram_mb} cores={facts.cores}")
    return facts
