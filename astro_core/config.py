"""
YAML configuration for the fee split and the staking pool.

Layout (both sections optional; omitted fields take the dataclass defaults):

    distribution:
      treasury_bps: 5000
      staking_bps: 3000
      burn_bps: 2000
      min_distribution: 10000000
    staking:
      min_stake_amount: 10000000
      max_stake_per_user: 0

Validation happens when the config objects are built, never at use time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping

import yaml

from .core.fees import DistributionConfig
from .state.staking import StakingConfig

log = logging.getLogger(__name__)

_SECTIONS = ("distribution", "staking")


@dataclass(frozen=True)
class AstroConfig:
    distribution: DistributionConfig = field(default_factory=DistributionConfig)
    staking: StakingConfig = field(default_factory=StakingConfig)


def default_config_path() -> Path:
    # astro_core/config.py -> astro_core/defaults.yaml
    return Path(__file__).resolve().parent / "defaults.yaml"


def _build(cls, section: str, obj: Any):
    if obj is None:
        return cls()
    if not isinstance(obj, Mapping):
        raise TypeError(f"config section {section!r} must be a mapping")
    allowed = {f.name for f in fields(cls)}
    unknown = sorted(set(obj) - allowed)
    if unknown:
        raise ValueError(f"unknown keys in config section {section!r}: {unknown}")
    for key, value in obj.items():
        if not isinstance(value, int) or isinstance(value, bool):
            raise TypeError(f"{section}.{key} must be an int, got {value!r}")
    return cls(**obj)


def config_from_mapping(obj: Mapping[str, Any] | None) -> AstroConfig:
    if obj is None:
        return AstroConfig()
    if not isinstance(obj, Mapping):
        raise TypeError("config YAML must be a mapping")
    unknown = sorted(set(obj) - set(_SECTIONS))
    if unknown:
        raise ValueError(f"unknown config sections: {unknown}")
    return AstroConfig(
        distribution=_build(DistributionConfig, "distribution", obj.get("distribution")),
        staking=_build(StakingConfig, "staking", obj.get("staking")),
    )


def load_config(path: Path | str | None = None) -> AstroConfig:
    """Load and validate a YAML config file (the packaged defaults when ``path`` is None)."""
    path = Path(path) if path is not None else default_config_path()
    obj = yaml.safe_load(path.read_text(encoding="utf-8"))
    config = config_from_mapping(obj)
    log.info(
        "loaded config from %s: split=%d/%d/%d min_stake=%d",
        path,
        config.distribution.treasury_bps,
        config.distribution.staking_bps,
        config.distribution.burn_bps,
        config.staking.min_stake_amount,
    )
    return config
