"""Configuration loading"""

from catalog_core.config.config_loader import format_config, load_config

__all__ = ["load_config", "format_config"]
