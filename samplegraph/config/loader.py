"""YAML configuration loader for non-secret service tuning.

Configuration is layered (later layers override earlier):

  1. ``DEFAULT_CONFIG`` below  -- built-in defaults
  2. ``config/config.yaml``    -- checked-in overrides

Secrets and deployment-specific values (credential, cache URL, TTL) are
NOT read from YAML; they come from the environment via ``Settings``.

``_deep_merge`` does recursive dict merging:
    base = {"graph": {"default_degree": 2}}
    overrides = {"graph": {"max_degree": 4}}
    result = {"graph": {"default_degree": 2, "max_degree": 4}}
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any

import yaml

from samplegraph.utils.errors import ConfigurationError

DEFAULT_CONFIG: dict[str, Any] = {
    "graph": {
        "default_degree": 2,
        "max_degree": 3,
        "concurrency": 5,
    },
    "relationships": {
        "include_interpolations": True,
    },
    "search": {
        "max_results": 10,
        "min_confidence": 0.5,
    },
    "api": {
        "cors_origins": ["*"],
        "rate_limit": "20/minute",
    },
}


def load_config(path: str = "config/config.yaml") -> dict[str, Any]:
    """Load the YAML config and merge it over the built-in defaults.

    Args:
        path: Path to the YAML configuration file.  A missing file is not
            an error; the defaults are returned.

    Returns:
        Fully resolved configuration dictionary.

    Raises:
        ConfigurationError: If the file exists but is not a YAML mapping.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)
    config_path = Path(path)
    if not config_path.exists():
        return config

    try:
        with open(config_path, encoding="utf-8") as f:
            yaml_config = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(message=f"Could not parse {path}: {exc}") from exc

    if not isinstance(yaml_config, dict):
        raise ConfigurationError(message=f"{path} must contain a mapping at the top level")

    _deep_merge(config, yaml_config)
    return config


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
