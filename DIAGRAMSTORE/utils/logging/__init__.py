"""Logging utilities for DIAGRAMSTORE."""

from .setup import setup_logging, setup_logging_from_config, get_logger

__all__ = ["setup_logging", "setup_logging_from_config", "get_logger"]
