"""Game configuration: built-in defaults overlaid with an optional YAML file."""

from __future__ import annotations

import copy
from typing import Optional

import yaml

DEFAULT_CONFIG: dict = {
    "dungeon": {
        "width": 15,
        "height": 15,
        # None retries forever
        "max_attempts": None,
    },
    "search": {
        "depth": 5,
        "chase_player_king": False,
    },
    "campaign": {
        "starting_material": 20,
        "last_floor": 12,
        "seed": None,
    },
}


def _merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base. Keys unknown to base are ignored."""
    for key, value in override.items():
        if key not in base:
            continue
        if isinstance(base[key], dict) and isinstance(value, dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


def load_config(path: Optional[str] = None, overrides: Optional[dict] = None) -> dict:
    """Return the defaults, updated from a YAML file and then from overrides."""
    config = copy.deepcopy(DEFAULT_CONFIG)
    if path is not None:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config {path} must be a mapping, got {type(data).__name__}")
        _merge(config, data)
    if overrides:
        _merge(config, overrides)
    return config
