"""Configuration loader for the catalog engine"""

import os
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv

from catalog_core.models.configs import CatalogConfig

# Load environment variables
load_dotenv()

DEFAULT_CONFIG_PATH = Path("config/catalog_config.yaml")


def load_config(config_path: Optional[Path] = None) -> CatalogConfig:
    """
    Load catalog configuration from YAML file.

    The path defaults to CATALOG_CONFIG or config/catalog_config.yaml. When the
    default file is absent the built-in defaults are used; an explicitly given
    path must exist. PRODUCTS_VISIBILITY in the environment overrides the file.

    Args:
        config_path: Path to configuration file. If None, uses default.

    Returns:
        CatalogConfig object

    Raises:
        FileNotFoundError: If an explicit config file doesn't exist
        pydantic.ValidationError: If config is invalid
    """
    explicit = config_path is not None or "CATALOG_CONFIG" in os.environ

    if config_path is None:
        config_path = Path(os.getenv("CATALOG_CONFIG", str(DEFAULT_CONFIG_PATH)))

    config_data = {}

    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f) or {}
    elif explicit:
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    if visibility := os.getenv("PRODUCTS_VISIBILITY"):
        config_data["products_visibility"] = visibility.upper()

    return CatalogConfig(**config_data)


def format_config(config: CatalogConfig) -> str:
    """
    Format CatalogConfig as a YAML string.

    Args:
        config: CatalogConfig object

    Returns:
        YAML string representation
    """
    return yaml.safe_dump(config.model_dump(), sort_keys=False, allow_unicode=True)


if __name__ == "__main__":
    print(format_config(load_config()))
