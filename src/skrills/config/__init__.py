"""
Configuration module for Skrills.

Uses pydantic-settings for environment variable and YAML config loading.
"""

from skrills.config.settings import Settings
from skrills.config.sources import ConfigFileError

__all__ = ["ConfigFileError", "Settings"]
