"""Configuration for map clustering and marker rendering.

Provides default clustering tiers, map defaults and marker geometry, and a
loader that merges a user JSON file over them.
"""
from __future__ import annotations

import copy
import json
import pathlib

_DEFAULT = {
    "clustering": {
        # [min_zoom, radius_deg, min_points], highest zoom first
        "zoom_tiers": [
            [16, 0.0001, 2],
            [14, 0.0005, 2],
            [12, 0.002, 2],
            [10, 0.008, 2],
            [8, 0.03, 2],
            [6, 0.12, 3],
            [None, 0.5, 3],
        ],
        "max_detail_zoom": 18,
        "representative_rule": "last",
    },
    "map": {
        "default_zoom": 12,
        "default_center": [40.7128, -74.0060],
        "tile_size": 256,
    },
    "markers": {
        "image": {"width": 56, "height": 56, "badge_offset": [18, -68]},
        "pin": {"width": 40, "height": 40, "badge_offset": [12, -45]},
        "badge": {"min_width": 20, "height": 20, "z_index": 1001},
        "z_index": {"single": 1, "multi": 10},
    },
}


def default_config() -> dict:
    """Return a fresh copy of the default configuration."""
    return copy.deepcopy(_DEFAULT)


def load_config(path: str | None = "memory_map_config.json") -> dict:
    """Load configuration from JSON file.

    Loads user configuration file and merges with default configuration.
    User values override defaults for matching keys; nested sections are
    merged one level deep.

    Args:
        path: Path to configuration JSON file. If None or file doesn't exist,
            returns default configuration.

    Returns:
        dict: Merged configuration dictionary.
    """
    merged = default_config()
    p = pathlib.Path(path) if path else None
    if p and p.exists():
        with p.open("r", encoding="utf-8") as f:
            user = json.load(f)
        for k, v in user.items():
            if isinstance(v, dict) and isinstance(merged.get(k), dict):
                merged[k].update(v)
            else:
                merged[k] = v
    return merged
