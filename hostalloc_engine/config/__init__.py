"""Configuration module for HostAlloc Engine.

Submodules:
    - policy: TuningPolicy, TierRule and BudgetMode models
    - profiles: named profiles and layered policy composition
    - loader: TunerConfig and YAML/env config loading
"""

# Policy models
from .policy import (
    BudgetMode,
    TierAction,
    TierRule,
    TuningPolicy,
    DEFAULT_TIER_RULES,
)

# Layered composition
from .profiles import (
    POLICY_PROFILES,
    DEFAULT_PROFILE,
    build_policy,
    merge_layers,
    resolve_profile,
)

# Loader functions
from .loader import (
    DEFAULT_CONFIG_PATH,
    HardwareSettings,
    TunerConfig,
    load_policy,
    load_tuner_config,
)

__all__ = [
    # Policy
    "BudgetMode",
    "TierAction",
    "TierRule",
    "TuningPolicy",
    "DEFAULT_TIER_RULES",
    # Profiles
    "POLICY_PROFILES",
    "DEFAULT_PROFILE",
    "build_policy",
    "merge_layers",
    "resolve_profile",
    # Loader
    "DEFAULT_CONFIG_PATH",
    "HardwareSettings",
    "TunerConfig",
    "load_policy",
    "load_tuner_config",
]
