"""Utility functions for configuration and logging."""

from gravsim.utils.config import load_config, save_config, Config
from gravsim.utils.logging_config import setup_logging

__all__ = ["load_config", "save_config", "Config", "setup_logging"]
