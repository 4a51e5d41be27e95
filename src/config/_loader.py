"""
Cached YAML configuration loader.

Usage:
    from src.config._loader import load_yaml_section, config_section

    # Whole file
    config = load_yaml_section("config.yaml")

    # One top-level key of a feature file
    topics = load_yaml_section("features/topic_modeling.yaml", "topic_modeling")

    # Shortcut for a section of configs/config.yaml
    ratios = config_section("financial_ratios")
"""

from functools import lru_cache
from pathlib import Path
from typing import Any
import yaml


def _get_configs_dir() -> Path:
    """Get the configs directory path."""
    return Path(__file__).parent.parent.parent / "configs"


@lru_cache(maxsize=16)
def load_yaml_section(config_file: str, section: str | None = None) -> dict[str, Any]:
    """
    Load and cache YAML configuration.

    Args:
        config_file: Path relative to configs/ directory
            (e.g., "config.yaml" or "features/topic_modeling.yaml")
        section: Optional top-level key to extract

    Returns:
        Configuration dictionary (empty dict if file or section not found)
    """
    config_path = _get_configs_dir() / config_file

    if not config_path.exists():
        return {}

    with open(config_path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}

    if section is None:
        return data
    return data.get(section) or {}


def config_section(section: str) -> dict[str, Any]:
    """Return one top-level section of configs/config.yaml."""
    return load_yaml_section("config.yaml", section)


def clear_config_cache() -> None:
    """Clear all cached configurations. Useful for testing."""
    load_yaml_section.cache_clear()
