"""Configuration loading and TunerConfig model."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..exceptions import ConfigError
from ..resources.data_models import HardwareFacts
from .policy import TuningPolicy
from .profiles import DEFAULT_PROFILE, merge_layers, resolve_profile

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/tuning_policy.yaml")


class HardwareSettings(BaseModel):
    """Static hardware facts used when probing is unavailable."""
    fallback_ram_mb: int = Field(default=4096, ge=0, description="RAM assumed when detection fails")
    fallback_cores: int = Field(default=2, ge=0, description="Cores assumed when detection fails")

    def fallback(self) -> HardwareFacts:
        return HardwareFacts(ram_mb=self.fallback_ram_mb, cores=self.fallback_cores)


class TunerConfig(BaseModel):
    """Top-level deployment configuration."""

    model_config = ConfigDict(extra="forbid")

    profile: Optional[str] = Field(default=DEFAULT_PROFILE, description="Named policy profile applied before overrides")
    policy: Dict[str, Any] = Field(default_factory=dict, description="Per-deployment policy overrides")
    hardware: HardwareSettings = Field(default_factory=HardwareSettings)
    sites_file: Optional[str] = Field(default=None, description="Tenant registry (sites.json)")

    def build_policy(self, *extra_layers: Optional[Mapping[str, Any]]) -> TuningPolicy:
        """Compose defaults -> profile -> file overrides -> extra layers."""
        return merge_layers(
            TuningPolicy(),
            resolve_profile(self.profile),
            self.policy,
            *extra_layers,
        )


def _lower_keys(d: Dict[str, Any]) -> Dict[str, Any]:
    """Normalize dictionary keys to lowercase."""
    return {k.lower(): v for k, v in d.items()}


def _coerce_env_value(value: str) -> Any:
    """Interpret an environment string as a bool, int or float when it looks like one."""
    if value.lower() in {"true", "false"}:
        return value.lower() == "true"
    try:
        return float(value) if "." in value else int(value)
    except ValueError:
        return value


def _apply_env_overrides(
    cfg: Dict[str, Any],
    env: Mapping[str, str],
    prefix: str,
    sections: Iterable[str],
) -> None:
    """Apply environment overrides using DOUBLE-UNDERSCORE path syntax.

    Example: HOSTALLOC_POLICY__DB_RATIO=0.4 overrides policy.db_ratio

    Only variables whose first path segment names a config section are
    applied; other ``HOSTALLOC_*`` variables (``HOSTALLOC_CONFIG`` and the
    like) are left alone.
    """
    known = set(sections)
    for key, value in env.items():
        if not key.startswith(prefix):
            continue
        path = key[len(prefix):].lower().split("__")
        if path[0] not in known:
            logger.debug(f"Ignoring environment variable {key}: not a config section")
            continue
        cur: Any = cfg
        for part in path[:-1]:
            if not isinstance(cur.get(part), dict):
                cur[part] = {}
            cur = cur[part]
        cur[path[-1]] = _coerce_env_value(value)


def load_tuner_config(
    path: Path | str = DEFAULT_CONFIG_PATH,
    *,
    env_overrides: bool = True,
    env: Optional[Mapping[str, str]] = None,
    env_prefix: str = "HOSTALLOC_",
) -> TunerConfig:
    """Load YAML config and return a typed `TunerConfig`.

    - Optionally applies environment variable overrides
    - YAML and schema errors are raised as ``ConfigError``
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Config file not found: {p}")

    try:
        with open(p, "r") as fh:
            raw = yaml.safe_load(fh) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Config file is not valid YAML: {p}", original_exception=e) from e

    if not isinstance(raw, dict):
        raise ConfigError(f"Config file must contain a mapping at the top level: {p}")

    # Normalize to lowercase keys at top level for resilience
    data = _lower_keys(raw)

    if env_overrides:
        _apply_env_overrides(
            data,
            env if env is not None else dict(os.environ),
            env_prefix,
            TunerConfig.model_fields,
        )

    try:
        return TunerConfig(**data)
    except ValidationError as e:
        raise ConfigError(
            f"Invalid tuner configuration in {p}",
            problems=[f"{'.'.join(str(x) for x in err['loc'])}: {err['msg']}" for err in e.errors()],
            original_exception=e,
        ) from e


def load_policy(
    path: Path | str = DEFAULT_CONFIG_PATH,
    **kwargs: Any,
) -> TuningPolicy:
    """Load a config file and compose its tuning policy."""
    return load_tuner_config(path, **kwargs).build_policy()
