"""
Configuration for resonance kinematics selection.

Defaults can be overridden from a YAML file (merged through OmegaConf) or
from a registry-style mapping that uses the historical option names
("W-min", "max-xsec-safety-factor", "Wcut", ...).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Union

from omegaconf import OmegaConf

logger = logging.getLogger(__name__)

_config_name = Path("reskine_config.yml")

# Registry option name -> dataclass field
REGISTRY_KEYS = {
    "W-min": "w_min",
    "W-max": "w_max",
    "Q2-min": "q2_min",
    "Q2-max": "q2_max",
    "max-xsec-safety-factor": "max_xsec_safety_factor",
    "min-energy-cached": "min_energy_cached",
    "Wcut": "wcut",
    "max-xsec-diff-tolerance": "max_xsec_diff_tolerance",
    "uniform-over-phase-space": "uniform_over_phase_space",
    "max-iterations": "max_iterations",
    "energy-buckets-per-decade": "energy_buckets_per_decade",
}


@dataclass
class KinematicsConfig:
    # User cuts; they can narrow the physical range, never extend it
    w_min: float = -999999.0
    w_max: float = 999999.0
    q2_min: float = -999999.0
    q2_max: float = 999999.0

    max_xsec_safety_factor: float = 1.25
    # Below this energy the max xsec is always recomputed
    min_energy_cached: float = 1.0
    # RES/DIS boundary
    wcut: float = 1.7
    # Allowed fractional overshoot of the envelope
    max_xsec_diff_tolerance: float = 0.0
    uniform_over_phase_space: bool = False
    max_iterations: int = 50000
    energy_buckets_per_decade: int = 50

    def __post_init__(self):
        if self.max_xsec_diff_tolerance < 0:
            raise ValueError(
                f"max-xsec-diff-tolerance must be >= 0, got {self.max_xsec_diff_tolerance}"
            )
        if self.max_xsec_safety_factor < 1.0:
            raise ValueError(
                f"max-xsec-safety-factor must be >= 1, got {self.max_xsec_safety_factor}"
            )
        if self.max_iterations <= 0:
            raise ValueError(f"max-iterations must be positive, got {self.max_iterations}")
        if self.energy_buckets_per_decade <= 0:
            raise ValueError("energy-buckets-per-decade must be positive")

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "KinematicsConfig":
        """
        Load config from path, on top of the defaults.
        """
        config = OmegaConf.structured(cls)
        local_config = OmegaConf.load(path)
        config = OmegaConf.merge(config, local_config)
        logger.info(f"Loaded kinematics config from {path}")
        return OmegaConf.to_object(config)

    @classmethod
    def from_registry(cls, registry: Mapping[str, Any]) -> "KinematicsConfig":
        """
        Build a config from registry-style options. Unknown keys raise.

        >>> KinematicsConfig.from_registry({"Wcut": 1.6}).wcut
        1.6
        """
        kwargs = {}
        for key, value in registry.items():
            if key not in REGISTRY_KEYS:
                raise ValueError(f"Unknown kinematics option '{key}'")
            kwargs[REGISTRY_KEYS[key]] = value
        return cls(**kwargs)

    @classmethod
    def save_default(cls, path: Union[str, Path] = _config_name):
        """
        Save default config to path.
        If the parent directory does not exist, it is created
        """
        path = Path(path)
        config = OmegaConf.structured(cls)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w") as f:
            OmegaConf.save(config=config, f=f)

    def as_registry(self) -> dict:
        names = {v: k for k, v in REGISTRY_KEYS.items()}
        return {names[f.name]: getattr(self, f.name) for f in fields(self)}
