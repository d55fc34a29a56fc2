"""Configuration loading for DIAGRAMSTORE."""

from .loader import load_config, get_config, find_config_file

__all__ = ["load_config", "get_config", "find_config_file"]
