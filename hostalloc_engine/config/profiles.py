"""Named policy profiles and layered policy composition.

A policy is composed left to right from partial-update records: the
defaults, then a profile, then the deployment file, then command-line
flags. For every field the last layer that sets it wins; ``None`` means
the layer leaves the field alone.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError

from ..exceptions import ConfigError, ProfileNotFoundError
from .policy import TuningPolicy

logger = logging.getLogger(__name__)


POLICY_PROFILES: Dict[str, Dict[str, Any]] = {
    "standard": {},
    "small-vps": {
        "os_headroom_mb": 1024,
        "avg_process_mb": 60,
        "min_db_mb": 128,
        "min_cache_mb": 32,
        "max_cache_mb": 256,
        "cache_critical_mb": 32,
    },
    "dense": {
        "avg_process_mb": 50,
        "db_ratio": 0.25,
        "per_tenant_connections": 20,
        "table_open_cache_increment": 150,
    },
    "cache-heavy": {
        "db_ratio": 0.25,
        "cache_ratio": 0.35,
        "max_cache_mb": 8192,
    },
    "reserve-slice": {
        "budget_mode": "reserve_slice",
        "os_headroom_mb": 4096,
        "db_ratio": 0.50,
        "cache_ratio": 0.20,
    },
}

DEFAULT_PROFILE = "standard"


def resolve_profile(name: Optional[str]) -> Dict[str, Any]:
    """Return the override layer for a profile name."""
    if name is None:
        return {}
    if name not in POLICY_PROFILES:
        raise ProfileNotFoundError(name, sorted(POLICY_PROFILES))
    return dict(POLICY_PROFILES[name])


def merge_layers(base: TuningPolicy, *layers: Optional[Mapping[str, Any]]) -> TuningPolicy:
    """Apply partial-update layers to ``base`` and return a new policy.

    Unknown field names are rejected so that typos in a config file do not
    silently fall back to defaults.
    """
    known = set(TuningPolicy.model_fields)
    merged: Dict[str, Any] = {}

    for index, layer in enumerate(layers):
        if not layer:
            continue
        unknown = sorted(set(layer) - known)
        if unknown:
            raise ConfigError(
                "Unknown tuning policy fields",
                problems=[f"layer {index}: {name}" for name in unknown],
            )
        for key, value in layer.items():
            if value is None:
                continue
            merged[key] = value

    if not merged:
        return base

    logger.debug(f"Merging policy overrides: {sorted(merged)}")
    data = base.model_dump()
    data.update(merged)
    try:
        return TuningPolicy.model_validate(data)
    except ValidationError as e:
        raise ConfigError(
            "Invalid tuning policy override",
            problems=[f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()],
            original_exception=e,
        ) from e


def build_policy(
    profile: Optional[str] = DEFAULT_PROFILE,
    *layers: Optional[Mapping[str, Any]],
) -> TuningPolicy:
    """Compose defaults, a named profile and any further override layers."""
    return merge_layers(TuningPolicy(), resolve_profile(profile), *layers)
