"""Configuration module: exports Settings, load_settings and load_config."""

from samplegraph.config.loader import DEFAULT_CONFIG, load_config
from samplegraph.config.settings import Settings, load_settings

__all__ = ["DEFAULT_CONFIG", "Settings", "load_config", "load_settings"]
