"""
Configuration loading for schematic decoding and meshing.

Handles loading loader/meshing/export parameters from config.yaml files.
"""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_CONFIG: Dict[str, Dict[str, Any]] = {
    "loading": {
        "decoder_order": ["litematica", "sponge_v3_wrapped", "sponge", "legacy"],
        "max_volume": 512 * 512 * 512,
    },
    "meshing": {
        "chunk_height": 0,
        "show_progress": False,
        "epsilon": 0.001,
    },
    "export": {
        "material_prefix_strip": True,
        "include_colors": True,
    },
}


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load full configuration from config.yaml.

    Args:
        config_path: Path to config.yaml file

    Returns:
        Dictionary with full configuration

    Raises:
        FileNotFoundError: If config file doesn't exist
    """
    if config_path is None:
        config_path = Path("config.yaml")

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        config = yaml.safe_load(f)

    return config or {}


def load_section(section: str, config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load one top-level section merged over its defaults.

    A missing config file is not an error here: components fall back to
    DEFAULT_CONFIG so they work without a config.yaml in the working directory.

    Args:
        section: Top-level key, e.g. "meshing"
        config_path: Path to config.yaml file (defaults to "config.yaml")

    Returns:
        Dictionary with the section's settings
    """
    merged = dict(DEFAULT_CONFIG.get(section, {}))

    try:
        config = load_config(config_path)
    except FileNotFoundError:
        return merged

    merged.update(config.get(section) or {})
    return merged
