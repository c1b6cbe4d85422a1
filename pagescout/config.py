"""Configuration loading and management."""

from pathlib import Path
from typing import Any

import yaml

DEFAULTS_PATH = Path(__file__).parent / "data" / "default.yaml"

DEFAULT_CONFIG_PATHS = [
    Path("pagescout.yaml"),
    Path("configs/pagescout.yaml"),
    Path.home() / ".pagescout" / "config.yaml",
]


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """Load configuration from file.

    The file found is merged over the bundled defaults, so a user config
    only needs the keys it changes.

    Args:
        config_path: Optional path to config file. If not provided,
                    searches default locations.

    Returns:
        Configuration dictionary.

    Raises:
        FileNotFoundError: If an explicit config_path does not exist.
    """
    defaults = get_default_config()

    if config_path is not None and not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    paths_to_try = [config_path] if config_path else DEFAULT_CONFIG_PATHS

    for path in paths_to_try:
        if path.exists():
            with open(path, encoding="utf-8") as f:
                override = yaml.safe_load(f) or {}
            return merge_configs(defaults, override)

    return defaults


def get_default_config() -> dict[str, Any]:
    """Return the bundled default configuration."""
    with open(DEFAULTS_PATH, encoding="utf-8") as f:
        return yaml.safe_load(f)


def get_section(config: dict[str, Any] | None, name: str) -> dict[str, Any]:
    """Get one configuration section, falling back to the bundled defaults.

    A missing or null section gives the default section.

    Args:
        config: Full configuration dictionary (may be None).
        name: Section name (sitemap, crawl, probe, ...).

    Returns:
        Section dictionary.
    """
    section = config.get(name) if config else None
    if section is None:
        return get_default_config().get(name) or {}
    return section


def merge_configs(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge two configuration dictionaries.

    Args:
        base: Base configuration.
        override: Override configuration (takes precedence).

    Returns:
        Merged configuration.
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value

    return result
