"""Configuration handling.

Configurations are plain nested dictionaries, usually loaded from YAML.
`load_config` merges a user file over `DEFAULT_CONFIG`; `merge_config`
applies dot separated overrides such as `{"dsp.range.window": "hann"}`.

Example YAML::

    dataset:
      path: frames.npy
    dsp:
      range: {window: blackmanharris, mean_removal: true}
      doppler: {window: hann, mean_removal: false}
      mti_alpha: 0.2
    peaks: {max_peaks: 4, distance: 3, width: 2}
    angle: {method: monopulse, wavelength: 0.0049, antenna_spacing: 0.0025}
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any, Dict

import yaml

DEFAULT_CONFIG: Dict[str, Any] = {
    "name": "run",
    "dataset": {"path": None, "frame_indices": None},
    "dsp": {
        "range": {"window": "blackmanharris", "mean_removal": True},
        "doppler": {"window": "hann", "mean_removal": False},
        "mti_alpha": None,
        "shift": True,
        "magnitude": "db",
        "aggregate": "max",
    },
    "peaks": {
        "max_peaks": 5,
        "height": None,
        "threshold": None,
        "distance": 1,
        "width": 1,
    },
    "angle": {
        "method": "none",
        "wavelength": 0.0049,
        "antenna_spacing": 0.0025,
        "ang_est_range": 1.0471975511965976,
        "num_angles": 61,
    },
}


def _deep_update(base: Dict[str, Any], update: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in update.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _deep_update(base[key], value)
        else:
            base[key] = value
    return base


def merge_config(cfg: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively override keys in a configuration dictionary.

    Keys in `overrides` can be dot separated to access nested
    dictionaries.  A new dictionary is returned; the input is not
    modified.
    """
    result = copy.deepcopy(cfg)
    for key, value in overrides.items():
        parts = key.split(".")
        d = result
        for p in parts[:-1]:
            if p not in d or not isinstance(d[p], dict):
                d[p] = {}
            d = d[p]
        d[parts[-1]] = value
    return result


def with_defaults(cfg: Dict[str, Any] | None) -> Dict[str, Any]:
    """Return `DEFAULT_CONFIG` deep-merged with `cfg`."""
    return _deep_update(copy.deepcopy(DEFAULT_CONFIG), copy.deepcopy(cfg or {}))


def load_config(path: str | Path) -> Dict[str, Any]:
    """Load a YAML configuration file and fill in defaults."""
    with open(path, "r") as f:
        cfg = yaml.safe_load(f) or {}
    if not isinstance(cfg, dict):
        raise ValueError(f"Configuration in {path} must be a mapping")
    return with_defaults(cfg)
